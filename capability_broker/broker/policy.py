from __future__ import annotations

"""Approval policy for broker calls.

Read verbs always run. Mutating verbs run only when the caller approved the
call, or when the operator enabled auto-approval of writes; DELETE needs its
own, separate auto-approval switch.

The switches are read from the process environment on every decision, so an
operator can tighten or relax the policy without restarting the service.
"""

from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from capability_broker.catalog.models import DELETE_VERB, READ_VERB

_TRUTHY = ("1", "true", "yes", "on")


def _as_flag(value: Any) -> Any:
    if isinstance(value, str):
        stripped = value.strip().lower()
        if not stripped:
            return None
        return stripped in _TRUTHY
    return value


class ApprovalSwitches(BaseSettings):
    """
    Operator switches for auto-approval.

    ``BROKER_AUTO_APPROVE_WRITES`` defaults to on only when ``BROKER_ENV`` is
    ``development``; ``BROKER_AUTO_APPROVE_DELETE`` always defaults to off.
    """

    model_config = SettingsConfigDict(extra="ignore", populate_by_name=True)

    environment: str = Field(default="production", validation_alias="BROKER_ENV")
    auto_approve_writes: Optional[bool] = Field(
        default=None, validation_alias="BROKER_AUTO_APPROVE_WRITES"
    )
    auto_approve_delete: Optional[bool] = Field(
        default=None, validation_alias="BROKER_AUTO_APPROVE_DELETE"
    )

    @field_validator("auto_approve_writes", "auto_approve_delete", mode="before")
    @classmethod
    def _parse_flag(cls, value: Any) -> Any:
        return _as_flag(value)

    @property
    def writes_enabled(self) -> bool:
        if self.auto_approve_writes is None:
            return self.environment.strip().lower() == "development"
        return self.auto_approve_writes

    @property
    def delete_enabled(self) -> bool:
        return bool(self.auto_approve_delete)


@dataclass(frozen=True)
class ApprovalDecision:
    """
    Result of an approval evaluation.

    Attributes:
        require_approval: Whether the call must be held as a draft.
        reason: Short human-readable explanation, used in logs.
    """

    require_approval: bool
    reason: str


class ApprovalPolicy:
    """Decide whether a call (or a whole batch) needs explicit approval."""

    def __init__(self, switches: Callable[[], ApprovalSwitches] = ApprovalSwitches) -> None:
        self._switches = switches

    def decide(self, verbs: Iterable[str], *, approved: bool) -> ApprovalDecision:
        """
        Evaluate the verbs of a single call or of every batch entry at once.

        Args:
            verbs: HTTP verbs of the call(s).
            approved: Whether the caller explicitly approved.

        Returns:
            An ``ApprovalDecision``; one decision covers the whole batch.
        """
        normalized = [str(v or "").strip().upper() for v in verbs]
        if all(v == READ_VERB for v in normalized):
            return ApprovalDecision(require_approval=False, reason="read-only")
        if approved:
            return ApprovalDecision(require_approval=False, reason="approved by caller")

        switches = self._switches()
        if not switches.writes_enabled:
            return ApprovalDecision(require_approval=True, reason="writes require approval")
        if DELETE_VERB in normalized and not switches.delete_enabled:
            return ApprovalDecision(require_approval=True, reason="delete requires approval")
        return ApprovalDecision(require_approval=False, reason="auto-approved by operator policy")
