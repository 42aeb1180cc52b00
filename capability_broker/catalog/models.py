"""Catalog data models.

``DiscoveredEndpoint`` is what a route source sees, ``CapabilityEndpoint`` is
the same endpoint enriched by the optional capabilities description file, and
``MethodSpec`` is the catalog's unit of record: exactly one per (path, verb).
"""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import Field

from capability_broker.core.schemas import BaseSchema, FrozenSchema

READ_VERB = "GET"
DELETE_VERB = "DELETE"
HTTP_VERBS = ("GET", "POST", "PUT", "PATCH", "DELETE")


def order_verbs(verbs) -> List[str]:
    """Upper-case, de-duplicate and order verbs the way ``HTTP_VERBS`` lists them."""
    seen = {str(v or "").strip().upper() for v in verbs}
    seen.discard("")
    known = [v for v in HTTP_VERBS if v in seen]
    return known + sorted(seen - set(HTTP_VERBS))


class DiscoveredEndpoint(FrozenSchema):
    """One route path and the verbs its handler file exports."""

    path_template: str = Field(..., description="Route path, named segments written as {name}.")
    methods: List[str] = Field(default_factory=list, description="HTTP verbs exported at this path.")
    summary: Optional[str] = Field(default=None, description="Path-level summary taken from doc comments.")
    method_docs: Optional[Dict[str, str]] = Field(default=None, description="Verb to doc text.")


class CapabilityEndpoint(DiscoveredEndpoint):
    """A discovered endpoint plus declared request fields per verb."""

    required_body_fields: Optional[Dict[str, List[str]]] = None
    body_fields: Optional[Dict[str, List[str]]] = None
    query_params: Optional[Dict[str, List[str]]] = None
    feature_pack: Optional[str] = None


class CapabilitiesFile(BaseSchema):
    """The optional, usually generated, capabilities description document."""

    generated: bool = False
    kind: Optional[str] = None
    endpoints: List[CapabilityEndpoint] = Field(default_factory=list)


class MethodSpec(FrozenSchema):
    """A single addressable action: one HTTP verb on one path template."""

    name: str
    method: str
    path_template: str
    description: str
    path_params: List[str] = Field(default_factory=list)
    required_body_fields: Optional[List[str]] = None
    body_fields: Optional[List[str]] = None
    query_params: Optional[List[str]] = None
    feature_pack: Optional[str] = None
    read_only: bool
