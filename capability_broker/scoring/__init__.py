"""Relevance scoring of catalog methods against free-text queries.

The scorer is an ordered list of independent rules combined by summation:

- ``ExactMatchRule``: the whole query appears verbatim (short-circuits).
- ``TermOverlapRule``: significant query terms found in the method text.
- ``EntityBoostRule``/``EntityMismatchRule``: business-entity alignment.
- ``IntentAlignmentRule``: create/update/delete/list intent vs. HTTP verb.
- ``NamespaceDepriorityRule``: keeps control-plane endpoints out of the way.

Vocabulary and magnitudes live in ``ScoringProfile``.
"""

from .profile import EntityRule, IntentRule, ScoringProfile, default_profile, load_scoring_profile
from .rules import (
    EntityBoostRule,
    EntityMismatchRule,
    ExactMatchRule,
    IntentAlignmentRule,
    NamespaceDepriorityRule,
    QueryContext,
    ScoringRule,
    TermOverlapRule,
    normalize,
    searchable_text,
)
from .scorer import EndpointScorer, RelevanceScorer, ScoredCandidate, clamp_limit

__all__ = [
    "EndpointScorer",
    "EntityBoostRule",
    "EntityMismatchRule",
    "EntityRule",
    "ExactMatchRule",
    "IntentAlignmentRule",
    "IntentRule",
    "NamespaceDepriorityRule",
    "QueryContext",
    "RelevanceScorer",
    "ScoredCandidate",
    "ScoringProfile",
    "ScoringRule",
    "TermOverlapRule",
    "clamp_limit",
    "default_profile",
    "load_scoring_profile",
    "normalize",
    "searchable_text",
]
