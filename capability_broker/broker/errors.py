"""Error types for the action broker.

Defines a small hierarchy of exceptions the broker raises before any side
effect happens. Upstream failures are not exceptions: they are reported as
structured results.
"""

from __future__ import annotations


class BrokerError(Exception):
    """Base error for all broker exceptions."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class UnauthenticatedError(BrokerError):
    """Raised when the identity collaborator reports no caller."""

    status_code = 401

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message)


class BrokerValidationError(BrokerError):
    """Raised for malformed input, disallowed paths and out-of-range batches."""

    status_code = 400


class UnknownToolError(BrokerError):
    """Raised when the execute call names a tool the broker does not provide."""

    status_code = 404

    def __init__(self, tool_name: object) -> None:
        super().__init__(f"Unknown or not executable tool: {tool_name}")
        self.tool_name = tool_name
