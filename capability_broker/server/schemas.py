"""
API Schemas.

This module contains Pydantic models used for API response validation.
These schemas define the interface contract between the client and the server;
field names are camelCase on the wire.
"""

from typing import List, Optional

from pydantic import Field

from capability_broker.catalog.models import CapabilityEndpoint, MethodSpec
from capability_broker.core.schemas import BaseSchema
from capability_broker.server.core import constant


class EndpointsResponse(BaseSchema):
    """The host application's discovered HTTP surface."""

    generated: bool = Field(default=False, description="Whether a generated capabilities document was found.")
    endpoints: List[CapabilityEndpoint] = Field(default_factory=list)


class EndpointSearchResponse(BaseSchema):
    """Endpoints ranked against a query."""

    query: str
    candidates: List[CapabilityEndpoint] = Field(default_factory=list)


class MethodsResponse(BaseSchema):
    """The full method catalog, sorted by name."""

    generated: bool = False
    kind: str = constant.METHOD_CATALOG_KIND
    methods: List[MethodSpec] = Field(default_factory=list)


class MethodSearchResponse(BaseSchema):
    """Catalog methods ranked against a query, best first."""

    query: str = Field(..., description="The query as received.", examples=["create a company"])
    pack: Optional[str] = Field(default=None, description="Feature pack filter, if any.")
    candidates: List[MethodSpec] = Field(default_factory=list)


class CallerSummary(BaseSchema):
    user_id: str
    email: str
    roles: List[str] = Field(default_factory=list)


class ToolSummary(BaseSchema):
    name: str
    description: str
    read_only: bool
    tags: List[str] = Field(default_factory=lambda: ["method"])


class ToolsResponse(BaseSchema):
    """Legacy listing of the catalog under ``tools``."""

    deprecated: bool = True
    user: CallerSummary
    tools: List[ToolSummary] = Field(default_factory=list)


class ErrorResponse(BaseSchema):
    error: str
