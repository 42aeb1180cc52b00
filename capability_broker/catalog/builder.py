from __future__ import annotations

"""Capability catalog builder.

``build_method_catalog`` is a pure function from endpoints to ``MethodSpec``
entries: one per (path, verb), named deterministically from the path template
and verb alone, sorted by name.
"""

import re
from typing import Iterable, List, Optional

from .models import READ_VERB, CapabilityEndpoint, DiscoveredEndpoint, MethodSpec, order_verbs

_NAMED_SEGMENT = re.compile(r"\{([^}]+)\}|\[([^\]]+)\]")


def _bare(param: str) -> str:
    return param.lstrip(".")


def extract_path_params(path_template: str) -> List[str]:
    """Return the named segments of a path template, in order of appearance."""
    return [_bare(m.group(1) or m.group(2)) for m in _NAMED_SEGMENT.finditer(path_template)]


def method_name_for(path_template: str, method: str) -> str:
    """
    Derive the stable catalog name of a (path template, verb) pair.

    ``/api/crm/companies/{id}`` + ``patch`` gives
    ``route_api_crm_companies_id__PATCH``. Two verbs on the same path only
    differ in the suffix after the double underscore.
    """
    cleaned = re.sub(r"^/", "", path_template)
    cleaned = _NAMED_SEGMENT.sub(lambda m: _bare(m.group(1) or m.group(2)), cleaned)
    cleaned = re.sub(r"[^a-zA-Z0-9]+", "_", cleaned)
    cleaned = cleaned.strip("_").lower()
    return f"route_{cleaned}__{method.upper()}"


def _verb_fields(mapping: Optional[dict], verb: str) -> Optional[List[str]]:
    if not mapping:
        return None
    fields = mapping.get(verb)
    return list(fields) if isinstance(fields, list) else None


def _description(endpoint: DiscoveredEndpoint, verb: str) -> str:
    doc = (endpoint.method_docs or {}).get(verb) or endpoint.summary or ""
    desc = f"{verb} {endpoint.path_template}"
    if doc:
        desc = f"{desc} — {doc}"
    return desc.strip()


def build_method_catalog(endpoints: Iterable[DiscoveredEndpoint]) -> List[MethodSpec]:
    """
    Build the catalog from discovered or capability-enriched endpoints.

    Args:
        endpoints: Endpoints in any order. ``CapabilityEndpoint`` entries also
            contribute their per-verb body and query field lists.

    Returns:
        ``MethodSpec`` entries sorted by name; repeated builds over the same
        input are equal.
    """
    out: List[MethodSpec] = []
    for endpoint in endpoints:
        is_capability = isinstance(endpoint, CapabilityEndpoint)
        params = extract_path_params(endpoint.path_template)
        for verb in order_verbs(endpoint.methods):
            out.append(
                MethodSpec(
                    name=method_name_for(endpoint.path_template, verb),
                    method=verb,
                    path_template=endpoint.path_template,
                    description=_description(endpoint, verb),
                    path_params=params,
                    required_body_fields=_verb_fields(endpoint.required_body_fields, verb) if is_capability else None,
                    body_fields=_verb_fields(endpoint.body_fields, verb) if is_capability else None,
                    query_params=_verb_fields(endpoint.query_params, verb) if is_capability else None,
                    feature_pack=endpoint.feature_pack if is_capability else None,
                    read_only=verb == READ_VERB,
                )
            )

    out.sort(key=lambda spec: spec.name)
    return out
