"""Unit tests for the method catalog builder."""

import pytest

from capability_broker.catalog.builder import build_method_catalog, extract_path_params, method_name_for
from capability_broker.catalog.discovery import FileSystemRouteSource
from capability_broker.catalog.models import CapabilityEndpoint, DiscoveredEndpoint


@pytest.mark.parametrize(
    "path,verb,expected",
    [
        ("/api/crm/companies/{id}", "patch", "route_api_crm_companies_id__PATCH"),
        ("/api/crm/companies/{id}", "GET", "route_api_crm_companies_id__GET"),
        ("/api/crm/contacts", "POST", "route_api_crm_contacts__POST"),
        ("/api/files/[...slug]", "GET", "route_api_files_slug__GET"),
        ("/api/metrics/query-compare", "POST", "route_api_metrics_query_compare__POST"),
    ],
)
def test_method_name_for(path, verb, expected):
    assert method_name_for(path, verb) == expected


def test_method_names_differ_only_in_verb_suffix():
    get_name = method_name_for("/api/crm/deals/{dealId}", "GET")
    delete_name = method_name_for("/api/crm/deals/{dealId}", "DELETE")
    assert get_name.split("__")[0] == delete_name.split("__")[0]
    assert get_name != delete_name


def test_extract_path_params_in_order():
    assert extract_path_params("/api/orgs/{orgId}/users/{userId}") == ["orgId", "userId"]
    assert extract_path_params("/api/crm/contacts") == []


class TestBuildMethodCatalog:
    def test_one_entry_per_path_and_verb(self, api_root):
        methods = build_method_catalog(FileSystemRouteSource(api_root).scan())

        assert len(methods) == 1 + 2 + 3 + 2 + 3 + 2
        assert len({(m.path_template, m.method) for m in methods}) == len(methods)
        assert [m.name for m in methods] == sorted(m.name for m in methods)

    def test_read_only_iff_get(self, api_root):
        for method in build_method_catalog(FileSystemRouteSource(api_root).scan()):
            assert method.read_only == (method.method == "GET")

    def test_description_uses_verb_doc_then_summary(self):
        endpoint = DiscoveredEndpoint(
            path_template="/api/crm/companies",
            methods=["GET", "POST"],
            summary="CRM companies",
            method_docs={"POST": "Create a company."},
        )
        by_verb = {m.method: m for m in build_method_catalog([endpoint])}
        assert by_verb["POST"].description == "POST /api/crm/companies — Create a company."
        assert by_verb["GET"].description == "GET /api/crm/companies — CRM companies"

    def test_description_without_docs(self):
        (method,) = build_method_catalog([DiscoveredEndpoint(path_template="/api/ping", methods=["GET"])])
        assert method.description == "GET /api/ping"

    def test_path_params_and_capability_fields(self):
        endpoint = CapabilityEndpoint(
            path_template="/api/crm/companies/{id}",
            methods=["PATCH", "GET"],
            required_body_fields={"PATCH": []},
            body_fields={"PATCH": ["name", "domain"]},
            query_params={"GET": ["include"]},
            feature_pack="crm",
        )
        by_verb = {m.method: m for m in build_method_catalog([endpoint])}

        assert by_verb["PATCH"].path_params == ["id"]
        assert by_verb["PATCH"].body_fields == ["name", "domain"]
        assert by_verb["PATCH"].required_body_fields == []
        assert by_verb["PATCH"].query_params is None
        assert by_verb["GET"].query_params == ["include"]
        assert by_verb["GET"].body_fields is None
        assert by_verb["GET"].feature_pack == "crm"

    def test_rebuild_is_deterministic(self, api_root):
        endpoints = FileSystemRouteSource(api_root).scan()
        assert build_method_catalog(endpoints) == build_method_catalog(list(reversed(endpoints)))

    def test_wire_form_is_camel_case(self):
        (method,) = build_method_catalog([DiscoveredEndpoint(path_template="/api/x/{id}", methods=["GET"])])
        wire = method.to_wire()
        assert wire["pathTemplate"] == "/api/x/{id}"
        assert wire["pathParams"] == ["id"]
        assert wire["readOnly"] is True
