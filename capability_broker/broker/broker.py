from __future__ import annotations

"""Approval-gated action broker.

Per invocation the broker moves through
``received -> {approval-required | executing} -> {success | partial-success | failure}``:

- Paths are checked first: they must sit under the public API prefix and must
  not target the broker's own control-plane namespace.
- ``ApprovalPolicy`` decides whether the call is held as a draft.
- Approved calls are forwarded through ``HostTransport`` with the caller's
  credentials. Upstream failures become structured results, never exceptions.

Batches get one approval decision for all entries, then run sequentially and
independently; each entry's outcome is recorded in request order.
"""

from typing import Any, Dict, Optional, Type, TypeVar, Union
from urllib.parse import unquote

import httpx
from pydantic import BaseModel, ValidationError

from capability_broker.core.logging_config import get_logger
from capability_broker.core.monitoring import log_broker_call

from .errors import BrokerValidationError, UnknownToolError
from .models import (
    BATCH_TOOL,
    SINGLE_TOOL,
    TOOL_ALIASES,
    ApprovalRequired,
    BatchEntry,
    BatchResult,
    Draft,
    ExecutionResult,
    HttpBulkInput,
    HttpRequestInput,
)
from .policy import ApprovalPolicy
from .transport import ForwardedCredentials, HostTransport

logger = get_logger(__name__)

MAX_BATCH_SIZE = 50
SUCCESS_STATUS = 200
MULTI_STATUS = 207
UPSTREAM_FAILURE_STATUS = 502

M = TypeVar("M", bound=BaseModel)


def _format_validation_error(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts) or "invalid input"


def parse_input(model: Type[M], data: Any) -> M:
    """Validate ``data`` against ``model``, raising ``BrokerValidationError`` on failure."""
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data if data is not None else {})
    except ValidationError as e:
        raise BrokerValidationError(_format_validation_error(e)) from e


class ActionBroker:
    """
    Mediates execution of catalog methods against the host application.

    Attributes:
        transport: Forwarding client for the host application.
        policy: Approval policy.
        public_prefix: Every target path must start with this prefix.
        control_plane_prefix: Target paths under this prefix are refused.
        max_batch_size: Largest accepted batch.
    """

    def __init__(
        self,
        transport: HostTransport,
        *,
        policy: Optional[ApprovalPolicy] = None,
        public_prefix: str = "/api/",
        control_plane_prefix: str = "/api/ai/",
        max_batch_size: int = MAX_BATCH_SIZE,
    ) -> None:
        self.transport = transport
        self.policy = policy or ApprovalPolicy()
        self.public_prefix = public_prefix
        self.control_plane_prefix = control_plane_prefix
        self.max_batch_size = max_batch_size

    def validate_path(self, path: str) -> None:
        """
        Refuse paths outside the public API or inside the control plane.

        Raises:
            BrokerValidationError: If the path is not executable.
        """
        segments = unquote(path.split("?", 1)[0].split("#", 1)[0]).split("/")
        if any(segment in (".", "..") for segment in segments):
            raise BrokerValidationError("path must not contain '.' or '..' segments")
        if not path.startswith(self.public_prefix):
            raise BrokerValidationError(f"path must start with '{self.public_prefix}'")
        if path.startswith(self.control_plane_prefix):
            raise BrokerValidationError(f"Refusing to call {self.control_plane_prefix}* endpoints")

    async def request(
        self,
        data: Union[HttpRequestInput, Dict[str, Any]],
        *,
        credentials: ForwardedCredentials = ForwardedCredentials(),
        origin: Optional[str] = None,
    ) -> Union[ApprovalRequired, ExecutionResult]:
        """
        Run a single call, or hold it as a draft.

        Raises:
            BrokerValidationError: For malformed input or a disallowed path.
        """
        call = parse_input(HttpRequestInput, data)
        self.validate_path(call.path)

        decision = self.policy.decide([call.method], approved=call.approved)
        if decision.require_approval:
            logger.info(f"Holding {call.method} {call.path} for approval: {decision.reason}")
            log_broker_call(SINGLE_TOOL, call.method, call.path, "draft")
            return ApprovalRequired(draft=Draft(tool_name=SINGLE_TOOL, input=call.draft_input()))

        result = await self._forward(call, credentials=credentials, origin=origin)
        log_broker_call(SINGLE_TOOL, call.method, call.path, "executed", result.status)
        return result

    async def bulk(
        self,
        data: Union[HttpBulkInput, Dict[str, Any]],
        *,
        credentials: ForwardedCredentials = ForwardedCredentials(),
        origin: Optional[str] = None,
    ) -> Union[ApprovalRequired, BatchResult]:
        """
        Run a batch of independent calls under one approval decision.

        Raises:
            BrokerValidationError: For malformed input or a batch size outside
                ``[1, max_batch_size]``.
        """
        batch = parse_input(HttpBulkInput, data)
        if not batch.requests:
            raise BrokerValidationError("requests[] is required")
        if len(batch.requests) > self.max_batch_size:
            raise BrokerValidationError(f"Too many requests (max {self.max_batch_size})")

        decision = self.policy.decide([entry.verb for entry in batch.requests], approved=batch.approved)
        if decision.require_approval:
            logger.info(f"Holding batch of {len(batch.requests)} requests for approval: {decision.reason}")
            log_broker_call(BATCH_TOOL, "BATCH", None, "draft")
            return ApprovalRequired(draft=Draft(tool_name=BATCH_TOOL, input=batch.draft_input()))

        results = []
        for index, entry in enumerate(batch.requests):
            results.append(await self._run_entry(index, entry, credentials=credentials, origin=origin))

        ok = sum(1 for r in results if r.ok)
        failed = len(results) - ok
        status = SUCCESS_STATUS if failed == 0 else MULTI_STATUS
        logger.info(f"Batch finished: ok={ok} failed={failed}")
        log_broker_call(BATCH_TOOL, "BATCH", None, "executed", status)
        return BatchResult(status=status, ok=ok, failed=failed, results=results)

    async def execute(
        self,
        tool_name: str,
        data: Dict[str, Any],
        *,
        credentials: ForwardedCredentials = ForwardedCredentials(),
        origin: Optional[str] = None,
    ) -> Union[ApprovalRequired, ExecutionResult, BatchResult]:
        """
        Dispatch an execute call by tool name.

        Raises:
            UnknownToolError: If ``tool_name`` is neither a single nor a batch tool.
            BrokerValidationError: As raised by ``request`` and ``bulk``.
        """
        tool = TOOL_ALIASES.get(tool_name)
        if tool == SINGLE_TOOL:
            return await self.request(data, credentials=credentials, origin=origin)
        if tool == BATCH_TOOL:
            return await self.bulk(data, credentials=credentials, origin=origin)
        raise UnknownToolError(tool_name)

    async def _run_entry(
        self,
        index: int,
        entry: BatchEntry,
        *,
        credentials: ForwardedCredentials,
        origin: Optional[str],
    ) -> ExecutionResult:
        try:
            call = parse_input(HttpRequestInput, {**entry.model_dump(), "approved": True})
            self.validate_path(call.path)
            return await self._forward(call, credentials=credentials, origin=origin)
        except BrokerValidationError as e:
            logger.warning(f"Batch entry {index} rejected: {e.message}")
            return ExecutionResult(status=e.status_code, url=entry.path, method=entry.verb, error=e.message)

    async def _forward(
        self,
        call: HttpRequestInput,
        *,
        credentials: ForwardedCredentials,
        origin: Optional[str],
    ) -> ExecutionResult:
        try:
            url = self.transport.target_url(call.path, call.query, origin)
        except (ValueError, httpx.InvalidURL) as e:
            raise BrokerValidationError(str(e)) from e

        try:
            upstream = await self.transport.send(call.method, url, body=call.body, credentials=credentials)
        except httpx.HTTPError as e:
            logger.warning(f"Upstream call {call.method} {url} failed: {e!r}")
            return ExecutionResult(
                status=UPSTREAM_FAILURE_STATUS,
                url=str(url),
                method=call.method,
                error=f"Upstream request failed: {e}",
            )

        logger.info(f"Executed {call.method} {upstream.url} -> {upstream.status}")
        return ExecutionResult(status=upstream.status, url=upstream.url, method=call.method, response=upstream.payload)
