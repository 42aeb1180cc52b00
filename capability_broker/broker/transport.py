from __future__ import annotations

"""Forwarding transport to the host application.

The broker never authenticates on its own: the caller's ``Authorization`` and
``Cookie`` headers are forwarded byte-for-byte.
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

import httpx

from capability_broker.catalog.models import READ_VERB
from capability_broker.core.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ForwardedCredentials:
    """Caller credentials copied from the inbound request."""

    authorization: Optional[str] = None
    cookie: Optional[str] = None

    @classmethod
    def from_headers(cls, headers: Mapping[str, str]) -> "ForwardedCredentials":
        return cls(authorization=headers.get("authorization"), cookie=headers.get("cookie"))

    def headers(self) -> Dict[str, str]:
        out: Dict[str, str] = {}
        if self.authorization:
            out["authorization"] = self.authorization
        if self.cookie:
            out["cookie"] = self.cookie
        return out


@dataclass(frozen=True)
class UpstreamResponse:
    status: int
    url: str
    payload: Any


def _query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(_query_value(v) for v in value)
    if isinstance(value, dict):
        return json.dumps(value)
    return str(value)


def build_target_url(base_url: str, path: str, query: Optional[Mapping[str, Any]] = None) -> httpx.URL:
    """Join ``path`` onto ``base_url`` and set every non-null query parameter."""
    url = httpx.URL(base_url).join(path)
    params = {k: _query_value(v) for k, v in (query or {}).items() if v is not None}
    return url.copy_merge_params(params) if params else url


def parse_payload(text: str) -> Any:
    """Parsed JSON when the body is JSON, the raw text otherwise."""
    try:
        return json.loads(text)
    except ValueError:
        return text


class HostTransport:
    """
    Thin async HTTP client for the host application.

    Notes:
        - ``base_url`` may be left unset; callers then pass the origin of the
          inbound request to ``send``.
        - No retries are performed; the timeout is the only bound on a call.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/") if base_url else None
        self.timeout = timeout
        self._client = client

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    def target_url(self, path: str, query: Optional[Mapping[str, Any]], origin: Optional[str]) -> httpx.URL:
        base = self.base_url or origin
        if not base:
            raise ValueError("No host application base URL configured and no request origin available")
        return build_target_url(base, path, query)

    async def send(
        self,
        method: str,
        url: httpx.URL,
        *,
        body: Any = None,
        credentials: ForwardedCredentials = ForwardedCredentials(),
    ) -> UpstreamResponse:
        """
        Forward one call.

        Raises:
            httpx.HTTPError: When the host application is unreachable or the call times out.
        """
        headers = {**credentials.headers(), "content-type": "application/json"}
        content = None if method == READ_VERB else json.dumps(body if body is not None else {})
        logger.debug(f"HostTransport.send: {method} {url}")
        response = await self.client.request(method, url, headers=headers, content=content)
        return UpstreamResponse(status=response.status_code, url=str(url), payload=parse_payload(response.text))

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
