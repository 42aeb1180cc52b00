"""Unit tests for the forwarding transport."""

import json

import httpx
import pytest

from capability_broker.broker.transport import (
    ForwardedCredentials,
    HostTransport,
    build_target_url,
    parse_payload,
)


class TestBuildTargetUrl:
    def test_query_values(self):
        url = build_target_url("http://mock.host", "/api/crm/contacts", {"q": "acme", "limit": 5, "archived": False, "skip": None})
        assert url.path == "/api/crm/contacts"
        assert dict(url.params) == {"q": "acme", "limit": "5", "archived": "false"}

    def test_without_query(self):
        assert str(build_target_url("http://mock.host/", "/api/x", None)) == "http://mock.host/api/x"


class TestParsePayload:
    def test_json_and_text(self):
        assert parse_payload('{"id": 1}') == {"id": 1}
        assert parse_payload("plain text") == "plain text"
        assert parse_payload("") == ""


class TestForwardedCredentials:
    def test_from_headers(self):
        creds = ForwardedCredentials.from_headers(httpx.Headers({"Authorization": "Bearer t", "Cookie": "a=b"}))
        assert creds.headers() == {"authorization": "Bearer t", "cookie": "a=b"}

    def test_empty(self):
        assert ForwardedCredentials().headers() == {}


class TestHostTransport:
    @pytest.mark.asyncio
    async def test_send_forwards_credentials_and_body(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["auth"] = request.headers.get("authorization")
            seen["cookie"] = request.headers.get("cookie")
            seen["body"] = json.loads(request.content)
            return httpx.Response(201, json={"id": "c1"})

        transport = HostTransport("http://mock.host", client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))
        url = transport.target_url("/api/crm/companies", None, origin=None)
        response = await transport.send(
            "POST", url, body={"name": "Acme"}, credentials=ForwardedCredentials("Bearer abc", "sid=1")
        )
        await transport.aclose()

        assert response.status == 201
        assert response.payload == {"id": "c1"}
        assert seen == {"method": "POST", "auth": "Bearer abc", "cookie": "sid=1", "body": {"name": "Acme"}}

    @pytest.mark.asyncio
    async def test_get_sends_no_body_and_missing_body_is_empty_object(self):
        bodies = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(request.content)
            return httpx.Response(200, text="ok")

        transport = HostTransport("http://mock.host", client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))
        await transport.send("GET", transport.target_url("/api/a", None, None), body={"ignored": True})
        await transport.send("DELETE", transport.target_url("/api/a", None, None))
        await transport.aclose()

        assert bodies == [b"", b"{}"]

    def test_origin_used_when_no_base_url(self):
        transport = HostTransport()
        assert str(transport.target_url("/api/a", None, "http://localhost:3000")) == "http://localhost:3000/api/a"

    def test_no_base_and_no_origin(self):
        with pytest.raises(ValueError):
            HostTransport().target_url("/api/a", None, None)
