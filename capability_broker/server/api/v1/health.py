"""
Health Check Endpoints.

This module provides basic system status endpoints (health, version)
used for monitoring and deployment verification.
"""

from fastapi import APIRouter

from capability_broker.server.core import constant

router = APIRouter()


@router.get(
    "/health",
    summary="Health Check",
    description="Check the operational status of the broker.",
    response_description="Status object.",
)
async def health_check():
    """
    Health check endpoint.

    Does not require a caller identity.
    """
    return {"status": "ok"}


@router.get(
    "/version",
    summary="Get Version",
    description="Retrieve version information for the broker.",
    response_description="Version object.",
)
async def version():
    return {"version": constant.API_VERSION, "schema_version": constant.SCHEMA_VERSION}
