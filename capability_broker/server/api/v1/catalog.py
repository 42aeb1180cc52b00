"""
Catalog API Endpoints.

This module exposes the discovered endpoints, the method catalog and the two
search endpoints that rank them against free text.
"""

from typing import Optional

from fastapi import APIRouter, Query

from capability_broker.core.logging_config import get_logger
from capability_broker.scoring.scorer import DEFAULT_ENDPOINT_LIMIT, DEFAULT_METHOD_LIMIT
from capability_broker.server.schemas import (
    CallerSummary,
    EndpointSearchResponse,
    EndpointsResponse,
    ErrorResponse,
    MethodSearchResponse,
    MethodsResponse,
    ToolsResponse,
    ToolSummary,
)
from capability_broker.server.services.deps import IdentityDep, ServicesDep

logger = get_logger(__name__)

router = APIRouter()

_UNAUTHORIZED = {401: {"model": ErrorResponse, "description": "No caller identity"}}


@router.get(
    "/endpoints",
    response_model=EndpointsResponse,
    summary="List Endpoints",
    description="Return the host application's discovered endpoints, enriched by the capabilities document.",
    responses=_UNAUTHORIZED,
)
def list_endpoints(identity: IdentityDep, services: ServicesDep) -> EndpointsResponse:
    generated, endpoints = services.catalog.endpoints()
    return EndpointsResponse(generated=generated, endpoints=endpoints)


@router.get(
    "/endpoints/search",
    response_model=EndpointSearchResponse,
    summary="Search Endpoints",
    description="Rank discovered endpoints against a free-text query.",
    responses=_UNAUTHORIZED,
)
def search_endpoints(
    identity: IdentityDep,
    services: ServicesDep,
    q: str = Query(default="", description="Free-text query"),
    limit: Optional[str] = Query(default=None, description="Maximum number of candidates (1-50)"),
) -> EndpointSearchResponse:
    query = q.strip()
    _, endpoints = services.catalog.endpoints()
    candidates = services.endpoint_scorer.rank(query, endpoints, limit if limit is not None else DEFAULT_ENDPOINT_LIMIT)
    return EndpointSearchResponse(query=query, candidates=candidates)


@router.get(
    "/methods",
    response_model=MethodsResponse,
    summary="List Methods",
    description="Return the method catalog: one entry per (path, HTTP verb), sorted by name.",
    responses=_UNAUTHORIZED,
)
def list_methods(identity: IdentityDep, services: ServicesDep) -> MethodsResponse:
    generated, methods = services.catalog.catalog()
    return MethodsResponse(generated=generated, methods=methods)


@router.get(
    "/methods/search",
    response_model=MethodSearchResponse,
    summary="Search Methods",
    description="Rank catalog methods against a free-text query, best first.",
    responses=_UNAUTHORIZED,
)
def search_methods(
    identity: IdentityDep,
    services: ServicesDep,
    q: str = Query(default="", description="Free-text query"),
    limit: Optional[str] = Query(default=None, description="Maximum number of candidates (1-50)"),
    pack: str = Query(default="", description="Restrict to one feature pack; 'all' disables the filter"),
) -> MethodSearchResponse:
    """
    Search the catalog.

    Only methods with a positive score are returned, capped to ``limit``.
    """
    query = q.strip()
    pack = pack.strip()
    _, methods = services.catalog.catalog()
    if pack and pack.lower() != "all":
        methods = [m for m in methods if (m.feature_pack or "").lower() == pack.lower()]

    ranked = services.scorer.rank(query, methods, limit if limit is not None else DEFAULT_METHOD_LIMIT)
    logger.debug(f"methods/search q='{query}' pack='{pack}' -> {[c.method.name for c in ranked]}")
    return MethodSearchResponse(query=query, pack=pack or None, candidates=[c.method for c in ranked])


@router.get(
    "/tools",
    response_model=ToolsResponse,
    summary="List Tools (deprecated)",
    description="Legacy view of the method catalog under `tools`. Use /methods instead.",
    deprecated=True,
    responses=_UNAUTHORIZED,
)
def list_tools(identity: IdentityDep, services: ServicesDep) -> ToolsResponse:
    _, methods = services.catalog.catalog()
    return ToolsResponse(
        user=CallerSummary(user_id=identity.user_id, email=identity.email, roles=identity.roles),
        tools=[ToolSummary(name=m.name, description=m.description, read_only=m.read_only) for m in methods],
    )
