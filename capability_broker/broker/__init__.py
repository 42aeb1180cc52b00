"""Approval-gated action broker.

 The broker is the only component with side effects:

 - ``ActionBroker.request`` runs a single call or returns a draft.
 - ``ActionBroker.bulk`` runs a batch under one approval decision and reports
   partial success.
 - ``ApprovalPolicy`` reads the operator's auto-approval switches at call time.
 - ``HostTransport`` forwards calls with the caller's own credentials.

 This package exports the broker, its policy and transport, the request and
 result models, and the error hierarchy.
 """

from .broker import ActionBroker, parse_input
from .errors import BrokerError, BrokerValidationError, UnauthenticatedError, UnknownToolError
from .models import (
    BATCH_TOOL,
    SINGLE_TOOL,
    ApprovalRequired,
    BatchEntry,
    BatchResult,
    Draft,
    ExecuteRequest,
    ExecutionResult,
    HttpBulkInput,
    HttpRequestInput,
)
from .policy import ApprovalDecision, ApprovalPolicy, ApprovalSwitches
from .transport import ForwardedCredentials, HostTransport

__all__ = [
    "ActionBroker",
    "ApprovalDecision",
    "ApprovalPolicy",
    "ApprovalRequired",
    "ApprovalSwitches",
    "BATCH_TOOL",
    "BatchEntry",
    "BatchResult",
    "BrokerError",
    "BrokerValidationError",
    "Draft",
    "ExecuteRequest",
    "ExecutionResult",
    "ForwardedCredentials",
    "HostTransport",
    "HttpBulkInput",
    "HttpRequestInput",
    "SINGLE_TOOL",
    "UnauthenticatedError",
    "UnknownToolError",
    "parse_input",
]
