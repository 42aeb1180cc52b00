"""Scoring profile: the tunable vocabulary and magnitudes used by the scorer.

Entity and intent keyword lists are business-domain specific, so they are
configuration rather than code. ``default_profile()`` ships a CRM-flavoured
profile; operators can replace it with a JSON document of the same shape.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from capability_broker.core.logging_config import get_logger

logger = get_logger(__name__)


class EntityRule(BaseModel):
    """
    A business object the query can name.

    When any of ``keywords`` appears in the query, methods whose path contains
    ``path_segment`` gain ``boost``; methods whose path contains a ``rivals``
    segment lose ``rival_penalty``; methods whose path lacks ``path_segment``
    lose ``mismatch_penalty``. When ``mismatch_keywords`` is set, only those
    keywords trigger the mismatch penalty.
    """

    model_config = ConfigDict(extra="forbid")

    name: str
    keywords: List[str]
    path_segment: str
    boost: float = Field(default=0.0, ge=0.0)
    rivals: List[str] = Field(default_factory=list)
    rival_penalty: float = Field(default=0.0, ge=0.0)
    mismatch_penalty: float = Field(default=0.0, ge=0.0)
    mismatch_keywords: Optional[List[str]] = None


class IntentRule(BaseModel):
    """An operation intent (create, update, ...) and the verbs that fulfil it."""

    model_config = ConfigDict(extra="forbid")

    name: str
    keywords: List[str]
    verb_bonuses: Dict[str, float] = Field(default_factory=dict)
    mutating: bool = False


DEFAULT_STOPWORDS = [
    "a", "an", "and", "are", "as", "at", "be", "but", "by", "can", "could", "did", "do", "does",
    "for", "from", "get", "give", "have", "how", "i", "in", "is", "it", "just", "list", "me", "my",
    "of", "on", "or", "please", "show", "tell", "that", "the", "there", "this", "to", "up", "what",
    "when", "where", "who", "with", "would", "you", "your",
]  # fmt: skip


class ScoringProfile(BaseModel):
    """All knobs of the relevance scorer."""

    model_config = ConfigDict(extra="forbid")

    stopwords: List[str] = Field(default_factory=lambda: list(DEFAULT_STOPWORDS))
    min_term_length: int = Field(default=3, ge=1)
    term_weight: float = Field(default=3.0, ge=0.0)
    exact_match_bonus: float = Field(default=30.0, gt=0.0)
    entities: List[EntityRule] = Field(default_factory=list)
    intents: List[IntentRule] = Field(default_factory=list)
    read_only_mutation_penalty: float = Field(default=2.0, ge=0.0)
    control_plane_prefix: str = "/api/ai/"
    control_plane_penalty: float = Field(default=3.0, ge=0.0)


def default_entities() -> List[EntityRule]:
    return [
        EntityRule(
            name="contacts",
            keywords=["contact", "contacts"],
            path_segment="/contacts",
            boost=12,
            rivals=["/companies"],
            rival_penalty=6,
            mismatch_penalty=15,
        ),
        EntityRule(
            name="companies",
            keywords=["company", "companies", "customer", "customers"],
            path_segment="/companies",
            boost=12,
            rivals=["/contacts"],
            rival_penalty=6,
            mismatch_penalty=15,
        ),
        EntityRule(
            name="deals",
            keywords=["deal", "deals", "opportunity", "opportunities"],
            path_segment="/deals",
            boost=12,
            rivals=["/companies"],
            rival_penalty=6,
            mismatch_penalty=15,
        ),
        EntityRule(
            name="activities",
            keywords=["activity", "activities", "call", "meeting"],
            path_segment="/activities",
            boost=8,
            mismatch_penalty=8,
            mismatch_keywords=["activity", "activities"],
        ),
        EntityRule(name="tasks", keywords=["task", "tasks"], path_segment="/tasks", boost=8),
        EntityRule(name="locations", keywords=["location", "locations"], path_segment="/locations", boost=8),
        EntityRule(name="metrics", keywords=["metric", "metrics", "catalog"], path_segment="/metrics", boost=8),
        EntityRule(
            name="metric_queries",
            keywords=["query", "aggregate", "sum", "total", "average"],
            path_segment="/metrics/query",
            boost=10,
        ),
        EntityRule(
            name="metric_comparisons",
            keywords=["compare", "comparison", "trend", "change"],
            path_segment="/metrics/query",
            boost=8,
        ),
        EntityRule(
            name="catalog",
            keywords=["catalog"],
            path_segment="/catalog",
            boost=12,
            rivals=["/definitions"],
            rival_penalty=6,
            mismatch_penalty=10,
        ),
        EntityRule(name="pipeline", keywords=["pipeline"], path_segment="/pipeline", mismatch_penalty=6),
    ]


def default_intents() -> List[IntentRule]:
    return [
        IntentRule(
            name="create",
            keywords=["add", "create", "new", "make", "log", "record"],
            verb_bonuses={"POST": 8, "PUT": 6, "PATCH": 6},
            mutating=True,
        ),
        IntentRule(
            name="update",
            keywords=["update", "edit", "change", "correct", "fix"],
            verb_bonuses={"PUT": 6, "PATCH": 6},
            mutating=True,
        ),
        IntentRule(name="delete", keywords=["delete", "remove"], verb_bonuses={"DELETE": 10}, mutating=True),
        IntentRule(
            name="list",
            keywords=["list", "show", "view", "current view", "on this page", "on this screen"],
            verb_bonuses={"GET": 3},
        ),
    ]


def default_profile() -> ScoringProfile:
    """The built-in CRM profile."""
    return ScoringProfile(entities=default_entities(), intents=default_intents())


def load_scoring_profile(path: Optional[Path | str]) -> ScoringProfile:
    """
    Load a scoring profile from a JSON document, or the default when ``path`` is unset.

    Raises:
        OSError: If the file cannot be read.
        pydantic.ValidationError: If the document does not match ``ScoringProfile``.
    """
    if not path:
        return default_profile()
    profile = ScoringProfile.model_validate_json(Path(path).read_text(encoding="utf-8"))
    logger.info(f"Loaded scoring profile from {path}: {len(profile.entities)} entities, {len(profile.intents)} intents")
    return profile
