"""Unit tests for caller identity extraction."""

import base64
import json

import pytest
from jose import jwt
from starlette.requests import Request

from capability_broker.server.auth import (
    BearerTokenIdentityExtractor,
    CallerIdentity,
    decode_claims,
    identity_from_claims,
)


def _request(headers: dict) -> Request:
    raw = [(k.lower().encode(), v.encode()) for k, v in headers.items()]
    return Request({"type": "http", "method": "GET", "path": "/", "headers": raw, "query_string": b""})


class TestDecodeClaims:
    def test_decodes_payload_segment(self, make_token):
        assert decode_claims(make_token({"sub": "u-1"})) == {"sub": "u-1"}

    @pytest.mark.parametrize("token", ["", "abc", "a.b", "a.%%%.c", "a.b.c.d"])
    def test_not_a_token(self, token):
        assert decode_claims(token) is None

    def test_non_object_payload(self):
        def _seg(data) -> str:
            return base64.urlsafe_b64encode(json.dumps(data).encode()).decode().rstrip("=")

        assert decode_claims(f"{_seg({'alg': 'HS256'})}.{_seg([1, 2])}.{_seg({})}") is None

    def test_signature_is_not_verified(self):
        token = jwt.encode({"sub": "u-1", "email": "ann@example.com"}, "key-held-by-the-host", algorithm="HS256")
        assert decode_claims(token) == {"sub": "u-1", "email": "ann@example.com"}


class TestIdentityFromClaims:
    def test_full_claims(self):
        identity = identity_from_claims({"sub": "u-1", "email": "a@b.c", "roles": ["viewer"], "role": "admin"}, now=0)
        assert identity == CallerIdentity(user_id="u-1", email="a@b.c", roles=["admin", "viewer"])

    def test_expired(self):
        assert identity_from_claims({"sub": "u-1", "email": "a@b.c", "exp": 99}, now=100) is None

    def test_email_only(self):
        identity = identity_from_claims({"email": "a@b.c"}, now=0)
        assert identity.user_id == "a@b.c"
        assert identity.roles == []

    def test_incomplete(self):
        assert identity_from_claims({"role": "admin"}, now=0) is None

    def test_non_list_roles_ignored(self):
        assert identity_from_claims({"sub": "u", "roles": "admin"}, now=0).roles == []


class TestBearerTokenIdentityExtractor:
    def test_bearer_header(self, make_token):
        extractor = BearerTokenIdentityExtractor(clock=lambda: 0)
        request = _request({"Authorization": f"Bearer {make_token({'sub': 'u-1', 'email': 'a@b.c'})}"})
        assert extractor.extract(request).user_id == "u-1"

    def test_cookie_fallback(self, make_token):
        extractor = BearerTokenIdentityExtractor(cookie_name="sid", clock=lambda: 0)
        request = _request({"Cookie": f"theme=dark; sid={make_token({'sub': 'u-2', 'email': 'b@c.d'})}"})
        assert extractor.extract(request).email == "b@c.d"

    @pytest.mark.parametrize("headers", [{}, {"Authorization": "Basic abc"}, {"Authorization": "Bearer junk"}])
    def test_no_identity(self, headers):
        assert BearerTokenIdentityExtractor().extract(_request(headers)) is None
