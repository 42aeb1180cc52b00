from __future__ import annotations

"""Scoring rules.

Each rule contributes an independent number for one (query, method) pair; the
scorer sums them. Every rule also reports a ``ceiling``: the largest value it
could add for the given query over any method. The exact-match rule uses the
sum of ceilings to stay above every partial combination.
"""

import re
from dataclasses import dataclass
from typing import Protocol, Tuple

from capability_broker.catalog.models import MethodSpec

from .profile import EntityRule, IntentRule, ScoringProfile


def normalize(text: str) -> str:
    """Lowercase and collapse every run of non-alphanumerics into one space."""
    return re.sub(r"[^a-z0-9]+", " ", text.lower()).strip()


def searchable_text(method: MethodSpec) -> str:
    """The normalized haystack a query is matched against."""
    return normalize(
        " ".join([method.name, method.method, method.path_template, method.description, " ".join(method.path_params)])
    )


def _mentions(padded_query: str, phrase: str) -> bool:
    phrase = normalize(phrase)
    return bool(phrase) and f" {phrase} " in padded_query


@dataclass(frozen=True)
class QueryContext:
    """Everything the rules need to know about a query, computed once per query."""

    normalized: str
    terms: Tuple[str, ...]
    entities: Tuple[EntityRule, ...]
    intents: Tuple[IntentRule, ...]
    named_entities: Tuple[EntityRule, ...] = ()

    @classmethod
    def build(cls, query: str, profile: ScoringProfile) -> "QueryContext":
        normalized = normalize(query)
        padded = f" {normalized} "
        stopwords = set(profile.stopwords)
        terms = tuple(
            term
            for term in normalized.split(" ")
            if term and len(term) >= profile.min_term_length and term not in stopwords
        )
        entities = tuple(e for e in profile.entities if any(_mentions(padded, k) for k in e.keywords))
        intents = tuple(i for i in profile.intents if any(_mentions(padded, k) for k in i.keywords))
        named = tuple(
            e for e in entities if any(_mentions(padded, k) for k in (e.mismatch_keywords or e.keywords))
        )
        return cls(normalized=normalized, terms=terms, entities=entities, intents=intents, named_entities=named)

    @property
    def mutating_intent(self) -> bool:
        return any(i.mutating for i in self.intents)


class ScoringRule(Protocol):
    """Protocol for additive scoring rules."""

    name: str

    def score(self, query: QueryContext, method: MethodSpec, haystack: str) -> float: ...

    def ceiling(self, query: QueryContext) -> float: ...


class ExactMatchRule:
    """The whole normalized query appears verbatim in the method's searchable text."""

    name = "exact_match"

    def __init__(self, profile: ScoringProfile) -> None:
        self.bonus = profile.exact_match_bonus

    def matches(self, query: QueryContext, haystack: str) -> bool:
        return bool(query.normalized) and query.normalized in haystack

    def score_for(self, partial_ceiling: float) -> float:
        """The exact-match score, kept strictly above any partial score for the same query."""
        return max(self.bonus, partial_ceiling + 1.0)


class TermOverlapRule:
    """A fixed weight per significant query term found in the haystack."""

    name = "term_overlap"

    def __init__(self, profile: ScoringProfile) -> None:
        self.weight = profile.term_weight

    def score(self, query: QueryContext, method: MethodSpec, haystack: str) -> float:
        return self.weight * sum(1 for term in query.terms if term in haystack)

    def ceiling(self, query: QueryContext) -> float:
        return self.weight * len(query.terms)


class EntityBoostRule:
    """Reward the named entity's own paths, penalise its rivals' paths."""

    name = "entity_boost"

    def score(self, query: QueryContext, method: MethodSpec, haystack: str) -> float:
        path = method.path_template.lower()
        total = 0.0
        for entity in query.entities:
            if entity.path_segment in path:
                total += entity.boost
            if any(rival in path for rival in entity.rivals):
                total -= entity.rival_penalty
        return total

    def ceiling(self, query: QueryContext) -> float:
        return sum(entity.boost for entity in query.entities)


class EntityMismatchRule:
    """Penalise methods outside the entity the query clearly names."""

    name = "entity_mismatch"

    def score(self, query: QueryContext, method: MethodSpec, haystack: str) -> float:
        path = method.path_template.lower()
        return -sum(e.mismatch_penalty for e in query.named_entities if e.path_segment not in path)

    def ceiling(self, query: QueryContext) -> float:
        return 0.0


class IntentAlignmentRule:
    """Match detected create/update/delete/list intents against the method's verb."""

    name = "intent_alignment"

    def __init__(self, profile: ScoringProfile) -> None:
        self.read_only_penalty = profile.read_only_mutation_penalty

    def score(self, query: QueryContext, method: MethodSpec, haystack: str) -> float:
        verb = method.method.upper()
        bonuses = [intent.verb_bonuses.get(verb, 0.0) for intent in query.intents]
        total = max(bonuses, default=0.0)
        if query.mutating_intent and method.read_only:
            total -= self.read_only_penalty
        return total

    def ceiling(self, query: QueryContext) -> float:
        return max((b for intent in query.intents for b in intent.verb_bonuses.values()), default=0.0)


class NamespaceDepriorityRule:
    """Push the broker's own control-plane endpoints below domain results."""

    name = "namespace_depriority"

    def __init__(self, profile: ScoringProfile) -> None:
        self.prefix = profile.control_plane_prefix
        self.penalty = profile.control_plane_penalty

    def score(self, query: QueryContext, method: MethodSpec, haystack: str) -> float:
        return -self.penalty if method.path_template.startswith(self.prefix) else 0.0

    def ceiling(self, query: QueryContext) -> float:
        return 0.0


def default_rules(profile: ScoringProfile) -> Tuple[ScoringRule, ...]:
    """The additive rules, in evaluation order."""
    return (
        TermOverlapRule(profile),
        EntityBoostRule(),
        EntityMismatchRule(),
        IntentAlignmentRule(profile),
        NamespaceDepriorityRule(profile),
    )
