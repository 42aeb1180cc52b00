from __future__ import annotations

"""Relevance scorer.

``RelevanceScorer`` ranks catalog methods against a free-text query by summing
the independent rules in ``rules.py``. It is a keyword heuristic; ties are
expected and are resolved by catalog order (name ascending).
"""

import math
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Sequence

from capability_broker.catalog.models import DiscoveredEndpoint, MethodSpec
from capability_broker.core.logging_config import get_logger

from .profile import ScoringProfile, default_profile
from .rules import ExactMatchRule, QueryContext, ScoringRule, default_rules, normalize, searchable_text

logger = get_logger(__name__)

MIN_LIMIT = 1
MAX_LIMIT = 50
DEFAULT_METHOD_LIMIT = 12
DEFAULT_ENDPOINT_LIMIT = 10


def clamp_limit(raw: Any, default: int) -> int:
    """Coerce a caller-supplied limit into ``[MIN_LIMIT, MAX_LIMIT]``; unusable values give ``default``."""
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(value):
        return default
    return max(MIN_LIMIT, min(MAX_LIMIT, math.trunc(value)))


@dataclass(frozen=True)
class ScoredCandidate:
    """A catalog method paired with its (positive) score for one query."""

    method: MethodSpec
    score: float


class RelevanceScorer:
    """
    Rank catalog methods against a query.

    Attributes:
        profile: The scoring vocabulary and magnitudes.
        rules: Additive rules, evaluated in order when the query is not an
            exact match.
    """

    def __init__(self, profile: Optional[ScoringProfile] = None, rules: Optional[Sequence[ScoringRule]] = None) -> None:
        self.profile = profile or default_profile()
        self.exact = ExactMatchRule(self.profile)
        self.rules = tuple(rules) if rules is not None else default_rules(self.profile)

    def context(self, query: str) -> QueryContext:
        return QueryContext.build(query, self.profile)

    def score(self, query: str | QueryContext, method: MethodSpec) -> float:
        """Score one method; an exact match short-circuits every other rule."""
        ctx = query if isinstance(query, QueryContext) else self.context(query)
        haystack = searchable_text(method)
        if not haystack:
            return 0.0
        if self.exact.matches(ctx, haystack):
            return self.exact.score_for(sum(rule.ceiling(ctx) for rule in self.rules))
        return sum(rule.score(ctx, method, haystack) for rule in self.rules)

    def rank(self, query: str, methods: Iterable[MethodSpec], limit: int = DEFAULT_METHOD_LIMIT) -> List[ScoredCandidate]:
        """
        Return the best-scoring methods for ``query``.

        Args:
            query: Free text.
            methods: Catalog entries.
            limit: Maximum number of candidates, clamped to ``[1, 50]``.

        Returns:
            Candidates with a score above zero, highest first, ties by name.
        """
        ctx = self.context(query)
        scored = [ScoredCandidate(method=m, score=self.score(ctx, m)) for m in methods]
        ranked = sorted((c for c in scored if c.score > 0), key=lambda c: (-c.score, c.method.name))
        logger.debug(f"Query '{ctx.normalized}' matched {len(ranked)} of {len(scored)} methods")
        return ranked[: clamp_limit(limit, DEFAULT_METHOD_LIMIT)]


class EndpointScorer:
    """
    Coarser search over discovered endpoints (before the per-verb catalog).

    Exact matches score ``exact_bonus``; otherwise each query term found in the
    endpoint's path, verbs and docs adds ``term_weight``.
    """

    def __init__(self, exact_bonus: float = 10.0, term_weight: float = 2.0) -> None:
        self.exact_bonus = exact_bonus
        self.term_weight = term_weight

    def score(self, query: str, endpoint: DiscoveredEndpoint) -> float:
        q = normalize(query)
        haystack = normalize(
            " ".join(
                [
                    endpoint.path_template,
                    " ".join(endpoint.methods),
                    endpoint.summary or "",
                    " ".join((endpoint.method_docs or {}).values()),
                ]
            )
        )
        if not haystack or not q:
            return 0.0
        if q in haystack:
            return self.exact_bonus
        return self.term_weight * sum(1 for term in q.split(" ") if term in haystack)

    def rank(self, query: str, endpoints: Iterable[DiscoveredEndpoint], limit: int = DEFAULT_ENDPOINT_LIMIT) -> List[DiscoveredEndpoint]:
        scored = [(ep, self.score(query, ep)) for ep in endpoints]
        ranked = sorted((x for x in scored if x[1] > 0), key=lambda x: (-x[1], x[0].path_template))
        return [ep for ep, _ in ranked[: clamp_limit(limit, DEFAULT_ENDPOINT_LIMIT)]]
