import base64
import json
import time
from typing import AsyncGenerator

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from capability_broker.broker import ActionBroker, ApprovalPolicy, HostTransport
from capability_broker.catalog import CatalogService, EndpointDiscovery, FileSystemRouteSource
from capability_broker.scoring import EndpointScorer, RelevanceScorer
from capability_broker.server.auth import BearerTokenIdentityExtractor
from capability_broker.server.core.config import Settings
from capability_broker.server.main import create_app
from capability_broker.server.services.container import BrokerServices, get_services


def _make_token(claims: dict) -> str:
    def _seg(data: dict) -> str:
        return base64.urlsafe_b64encode(json.dumps(data).encode()).decode().rstrip("=")

    return f"{_seg({'alg': 'HS256', 'typ': 'JWT'})}.{_seg(claims)}.{_seg({'sig': 'unverified'})}"


class RecordingUpstream:
    """Fake host application; answers every call with what it received."""

    def __init__(self):
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path.endswith("/missing"):
            return httpx.Response(404, json={"error": "Not found"})
        body = json.loads(request.content) if request.content else None
        return httpx.Response(200, json={"method": request.method, "path": request.url.path, "body": body})


@pytest.fixture
def make_token():
    """Build an unsigned JWT-shaped session token carrying ``claims``."""
    return _make_token


@pytest.fixture
def token(make_token) -> str:
    return make_token({"sub": "u-1", "email": "ann@example.com", "role": "admin", "exp": time.time() + 3600})


@pytest.fixture
def auth_headers(token) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def upstream() -> RecordingUpstream:
    return RecordingUpstream()


@pytest.fixture
def services(api_root, tmp_path, upstream) -> BrokerServices:
    client = httpx.AsyncClient(transport=httpx.MockTransport(upstream))
    return BrokerServices(
        catalog=CatalogService(EndpointDiscovery(FileSystemRouteSource(api_root)), tmp_path / "capabilities.json"),
        scorer=RelevanceScorer(),
        endpoint_scorer=EndpointScorer(),
        broker=ActionBroker(HostTransport("http://mock.host", client=client), policy=ApprovalPolicy()),
        identity=BearerTokenIdentityExtractor(),
    )


@pytest.fixture
def app(services):
    application = create_app(Settings())
    application.dependency_overrides[get_services] = lambda: services
    yield application
    application.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
