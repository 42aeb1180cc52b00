"""Unit tests for individual scoring rules, each evaluated in isolation."""

import pytest

from capability_broker.catalog.builder import method_name_for
from capability_broker.catalog.models import MethodSpec
from capability_broker.scoring.profile import default_profile
from capability_broker.scoring.rules import (
    EntityBoostRule,
    EntityMismatchRule,
    ExactMatchRule,
    IntentAlignmentRule,
    NamespaceDepriorityRule,
    QueryContext,
    TermOverlapRule,
    normalize,
    searchable_text,
)


def _method(verb: str, path: str, description: str = "") -> MethodSpec:
    return MethodSpec(
        name=method_name_for(path, verb),
        method=verb,
        path_template=path,
        description=description or f"{verb} {path}",
        read_only=verb == "GET",
    )


@pytest.fixture
def profile():
    return default_profile()


def _score(rule, profile, query, method):
    ctx = QueryContext.build(query, profile)
    return rule.score(ctx, method, searchable_text(method))


class TestNormalize:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("Create a Company!", "create a company"),
            ("  /api/crm/companies/{id} ", "api crm companies id"),
            ("route_api_x__GET", "route api x get"),
            ("", ""),
        ],
    )
    def test_normalize(self, raw, expected):
        assert normalize(raw) == expected


class TestQueryContext:
    def test_terms_skip_stopwords_and_short_tokens(self, profile):
        ctx = QueryContext.build("Show me the list of my open deals in EU", profile)
        assert ctx.terms == ("open", "deals")

    def test_detects_entities_and_intents(self, profile):
        ctx = QueryContext.build("create a new company", profile)
        assert [e.name for e in ctx.entities] == ["companies"]
        assert [i.name for i in ctx.intents] == ["create"]
        assert ctx.mutating_intent

    def test_keywords_match_whole_words_only(self, profile):
        ctx = QueryContext.build("address book", profile)
        assert ctx.intents == ()


class TestTermOverlapRule:
    def test_counts_matching_terms(self, profile):
        method = _method("GET", "/api/crm/deals", "GET /api/crm/deals — List open deals")
        assert _score(TermOverlapRule(profile), profile, "open deals", method) == 2 * profile.term_weight

    def test_stopword_only_query_scores_zero(self, profile):
        method = _method("GET", "/api/crm/contacts", "GET /api/crm/contacts — show the list for me")
        assert _score(TermOverlapRule(profile), profile, "show me the list", method) == 0


class TestEntityRules:
    def test_boost_and_rival_penalty(self, profile):
        rule = EntityBoostRule()
        assert _score(rule, profile, "company", _method("GET", "/api/crm/companies")) == 12
        assert _score(rule, profile, "company", _method("GET", "/api/crm/contacts")) == -6

    def test_mismatch_penalty(self, profile):
        rule = EntityMismatchRule()
        assert _score(rule, profile, "company", _method("GET", "/api/crm/companies")) == 0
        assert _score(rule, profile, "company", _method("GET", "/api/crm/deals")) == -15

    def test_no_entity_no_effect(self, profile):
        method = _method("GET", "/api/crm/deals")
        assert _score(EntityBoostRule(), profile, "something else", method) == 0
        assert _score(EntityMismatchRule(), profile, "something else", method) == 0

    def test_activity_synonyms_boost_once(self, profile):
        method = _method("POST", "/api/crm/activities")
        assert _score(EntityBoostRule(), profile, "log a call activity", method) == 8
        assert _score(EntityBoostRule(), profile, "schedule a meeting", method) == 8

    def test_activity_synonyms_do_not_trigger_mismatch(self, profile):
        method = _method("GET", "/api/crm/tasks")
        assert _score(EntityMismatchRule(), profile, "log a call", method) == 0
        assert _score(EntityMismatchRule(), profile, "log a call activity", method) == -8


class TestIntentAlignmentRule:
    @pytest.mark.parametrize(
        "query,verb,expected",
        [
            ("create thing", "POST", 8),
            ("create thing", "PATCH", 6),
            ("create thing", "GET", -2),
            ("update thing", "PUT", 6),
            ("delete thing", "DELETE", 10),
            ("delete thing", "POST", 0),
            ("list things", "GET", 3),
            ("list things", "POST", 0),
            ("things", "GET", 0),
        ],
    )
    def test_verb_alignment(self, profile, query, verb, expected):
        method = _method(verb, "/api/things")
        assert _score(IntentAlignmentRule(profile), profile, query, method) == expected


class TestNamespaceDepriorityRule:
    def test_control_plane_is_penalised(self, profile):
        rule = NamespaceDepriorityRule(profile)
        assert _score(rule, profile, "methods", _method("GET", "/api/ai/methods")) == -profile.control_plane_penalty
        assert _score(rule, profile, "methods", _method("GET", "/api/crm/methods")) == 0


class TestExactMatchRule:
    def test_matches_full_normalized_query(self, profile):
        rule = ExactMatchRule(profile)
        method = _method("POST", "/api/crm/companies", "POST /api/crm/companies — Create a company.")
        assert rule.matches(QueryContext.build("Create a Company", profile), searchable_text(method))
        assert not rule.matches(QueryContext.build("create company", profile), searchable_text(method))

    def test_empty_query_never_matches(self, profile):
        rule = ExactMatchRule(profile)
        assert not rule.matches(QueryContext.build("  ", profile), "anything at all")

    def test_score_stays_above_partial_ceiling(self, profile):
        rule = ExactMatchRule(profile)
        assert rule.score_for(10) == profile.exact_match_bonus
        assert rule.score_for(100) == 101
