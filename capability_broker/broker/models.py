"""Broker request and result models.

Inputs are validated with pydantic; any validation failure surfaces to the
caller as ``BrokerValidationError``. Outputs serialize with camelCase keys.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import Field, field_validator

from capability_broker.catalog.models import HTTP_VERBS
from capability_broker.core.schemas import BaseSchema

SINGLE_TOOL = "http.request"
BATCH_TOOL = "http.bulk"

TOOL_ALIASES = {
    SINGLE_TOOL: SINGLE_TOOL,
    "single": SINGLE_TOOL,
    BATCH_TOOL: BATCH_TOOL,
    "batch": BATCH_TOOL,
}


class HttpRequestInput(BaseSchema):
    """A single call: ``{method, path, query?, body?, approved?}``."""

    method: str = Field(default="GET", description="HTTP verb; defaults to GET.")
    path: str = Field(..., min_length=1, description="Target path, must live under the public API prefix.")
    query: Optional[Dict[str, Any]] = Field(default=None, description="Query parameters appended to the target URL.")
    body: Optional[Any] = Field(default=None, description="JSON payload for non-read verbs.")
    approved: bool = Field(default=False, description="Explicit approval for mutating verbs.")

    @field_validator("method", mode="before")
    @classmethod
    def _upper_verb(cls, value: Any) -> Any:
        if value is None:
            return "GET"
        if isinstance(value, str):
            value = value.strip().upper()
            if value not in HTTP_VERBS:
                raise ValueError(f"method must be one of {', '.join(HTTP_VERBS)}")
        return value

    def draft_input(self) -> Dict[str, Any]:
        """The normalized input placed in a draft; always ``approved: False``."""
        return {"method": self.method, "path": self.path, "query": self.query, "body": self.body, "approved": False}


class BatchEntry(BaseSchema):
    """One entry of a batch; verbs are checked when the entry runs."""

    method: str = Field(..., min_length=1)
    path: str = Field(..., min_length=1)
    query: Optional[Dict[str, Any]] = None
    body: Optional[Any] = None

    @property
    def verb(self) -> str:
        return self.method.strip().upper()


class HttpBulkInput(BaseSchema):
    """A batch: ``{requests: [...], approved?}``."""

    requests: List[BatchEntry] = Field(default_factory=list)
    approved: bool = False

    def draft_input(self) -> Dict[str, Any]:
        return {"requests": [entry.model_dump(mode="json") for entry in self.requests], "approved": False}


class ExecuteRequest(BaseSchema):
    """Body of ``POST /api/ai/execute``."""

    tool_name: str = Field(..., description="http.request (alias single) or http.bulk (alias batch).")
    input: Dict[str, Any] = Field(default_factory=dict)


class Draft(BaseSchema):
    """A proposed action the caller must resubmit with ``approved: true``."""

    tool_name: str
    input: Dict[str, Any]


class ApprovalRequired(BaseSchema):
    """Terminal state of a call held by policy: nothing was executed."""

    requires_approval: Literal[True] = True
    draft: Draft


class ExecutionResult(BaseSchema):
    """Outcome of one forwarded call."""

    status: int
    url: str
    method: str
    response: Any = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, mode="json", exclude={"error"} if self.error is None else None)


class BatchResult(BaseSchema):
    """Aggregate outcome of a batch, ``results`` in request order."""

    status: int
    ok: int
    failed: int
    results: List[ExecutionResult]

    def to_wire(self) -> dict:
        return {
            "status": self.status,
            "ok": self.ok,
            "failed": self.failed,
            "results": [result.to_wire() for result in self.results],
        }
