"""
Execute API Endpoint.

This module provides the single entry point through which a chosen method is
executed against the host application, subject to the approval policy.
"""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from capability_broker.broker import BrokerValidationError, ExecuteRequest, ForwardedCredentials, parse_input
from capability_broker.core.logging_config import get_logger
from capability_broker.server.schemas import ErrorResponse
from capability_broker.server.services.deps import IdentityDep, ServicesDep

logger = get_logger(__name__)

router = APIRouter()


@router.post(
    "/execute",
    summary="Execute Method",
    description=(
        "Execute a single call (`http.request`) or a batch (`http.bulk`). Mutating calls that are not "
        "approved come back as a draft with `requiresApproval: true`; resubmit the draft's input with "
        "`approved: true` to run it."
    ),
    response_description="A draft, a single execution result, or a batch result.",
    responses={
        400: {"model": ErrorResponse, "description": "Malformed input, disallowed path or batch size"},
        401: {"model": ErrorResponse, "description": "No caller identity"},
        404: {"model": ErrorResponse, "description": "Unknown tool"},
    },
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {"application/json": {"schema": ExecuteRequest.model_json_schema(by_alias=True)}},
        }
    },
)
async def execute(request: Request, identity: IdentityDep, services: ServicesDep) -> JSONResponse:
    """
    Execute a method.

    The caller's identity is resolved before the body is read; the caller's
    credentials are forwarded unchanged to the host application.
    """
    try:
        raw = await request.json()
    except ValueError as e:
        raise BrokerValidationError("Invalid JSON body") from e

    payload = parse_input(ExecuteRequest, raw)
    logger.info(f"execute tool={payload.tool_name} user={identity.user_id}")
    result = await services.broker.execute(
        payload.tool_name,
        payload.input,
        credentials=ForwardedCredentials.from_headers(request.headers),
        origin=str(request.base_url).rstrip("/"),
    )
    return JSONResponse(content=result.to_wire())
