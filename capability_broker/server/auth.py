"""
Caller Identity Boundary.

Verifying credentials belongs to the host application's identity service; the
broker only needs to know *who* is calling and to forward the caller's
credentials untouched. ``BearerTokenIdentityExtractor`` reads the token from
the ``Authorization: Bearer`` header or the session cookie and decodes its
claims.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Callable, List, Mapping, Optional, Protocol

from fastapi import Request
from jose import JWTError, jwt

from capability_broker.core.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class CallerIdentity:
    """An already-validated caller."""

    user_id: str
    email: str
    roles: List[str] = field(default_factory=list)


class IdentityExtractor(Protocol):
    """Protocol for the credential-extraction collaborator."""

    def extract(self, request: Request) -> Optional[CallerIdentity]: ...


def decode_claims(token: str) -> Optional[dict[str, Any]]:
    """Read the claims of a JWT without verifying its signature, or ``None`` if it is not one."""
    try:
        claims = jwt.get_unverified_claims(token)
    except JWTError as e:
        logger.debug(f"Unreadable session token: {e}")
        return None
    return dict(claims) if isinstance(claims, Mapping) else None


def identity_from_claims(claims: Mapping[str, Any], *, now: float) -> Optional[CallerIdentity]:
    """Build a ``CallerIdentity`` from token claims; expired or incomplete claims yield ``None``."""
    exp = claims.get("exp")
    if isinstance(exp, (int, float)) and not isinstance(exp, bool) and exp < now:
        return None

    role = claims.get("role")
    raw_roles = claims.get("roles")
    roles = [str(r) for r in raw_roles if r] if isinstance(raw_roles, list) else []
    if role and str(role) not in roles:
        roles.insert(0, str(role))

    user_id = claims.get("sub") or claims.get("user_id") or claims.get("email")
    email = claims.get("email") or claims.get("sub")
    if not user_id or not email:
        return None
    return CallerIdentity(user_id=str(user_id), email=str(email), roles=roles)


class BearerTokenIdentityExtractor:
    """
    Default identity collaborator.

    Attributes:
        cookie_name: Session cookie consulted when no bearer header is present.
        clock: Returns the current UNIX time; used for ``exp`` checks.
    """

    def __init__(self, cookie_name: str = "session_token", clock: Callable[[], float] = time.time) -> None:
        self.cookie_name = cookie_name
        self.clock = clock

    def token_from(self, request: Request) -> Optional[str]:
        auth = request.headers.get("authorization")
        if auth and auth.startswith("Bearer "):
            return auth[len("Bearer ") :].strip() or None
        return request.cookies.get(self.cookie_name) or None

    def extract(self, request: Request) -> Optional[CallerIdentity]:
        token = self.token_from(request)
        if not token:
            return None
        claims = decode_claims(token)
        if claims is None:
            logger.debug("Rejecting malformed session token")
            return None
        return identity_from_claims(claims, now=self.clock())
