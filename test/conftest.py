from __future__ import annotations

from typing import Iterable

import httpx
import pytest


@pytest.fixture(autouse=True)
def _global_offline_http_guard(monkeypatch: pytest.MonkeyPatch):
    allowed_prefixes: Iterable[str] = (
        "http://mock",
        "https://mock",
        "http://localhost",
        "http://127.0.0.1",
        "http://0.0.0.0",
        "http://test",
        "/",  # Allow relative paths (used by ASGI transport)
    )

    orig_sync = httpx._client.Client.request
    orig_async = httpx._client.AsyncClient.request

    def _is_allowed(url_str: str) -> bool:
        return any(url_str.startswith(p) for p in allowed_prefixes)

    def offline_sync(self, method, url, *args, **kwargs):
        url_str = str(url)
        if _is_allowed(url_str):
            return orig_sync(self, method, url, *args, **kwargs)
        raise RuntimeError(f"External HTTP blocked by global offline guard: {url_str}")

    async def offline_async(self, method, url, *args, **kwargs):
        url_str = str(url)
        if _is_allowed(url_str):
            return await orig_async(self, method, url, *args, **kwargs)
        raise RuntimeError(f"External HTTP blocked by global offline guard (async): {url_str}")

    monkeypatch.setattr(httpx._client.Client, "request", offline_sync, raising=True)
    monkeypatch.setattr(httpx._client.AsyncClient, "request", offline_async, raising=True)


@pytest.fixture(autouse=True)
def _clear_approval_switches(monkeypatch: pytest.MonkeyPatch):
    """Every test starts from the production approval defaults."""
    for name in ("BROKER_ENV", "BROKER_AUTO_APPROVE_WRITES", "BROKER_AUTO_APPROVE_DELETE"):
        monkeypatch.delenv(name, raising=False)


CRM_ROUTES = {
    "crm/contacts/route.ts": """
/**
 * CRM contacts
 * GET /api/crm/contacts
 * List contacts, optionally filtered by company.
 * POST /api/crm/contacts
 * Create a contact.
 */
export async function GET(req: Request) {}
export async function POST(req: Request) {}
""",
    "crm/contacts/[id]/route.ts": """
export async function GET() {}
export async function PATCH() {}
export async function DELETE() {}
""",
    "crm/companies/route.ts": """
/**
 * CRM companies
 * GET /api/crm/companies
 * List companies.
 * POST /api/crm/companies
 * Create a company.
 */
export async function GET() {}
export const POST = async () => {};
""",
    "crm/companies/[id]/route.ts": """
export function GET() {}
export function PATCH() {}
export function DELETE() {}
""",
    "crm/deals/route.ts": """
export async function GET() {}
export async function POST() {}
""",
    "ai/methods/route.ts": """
/**
 * GET /api/ai/methods
 * List the method catalog.
 */
export async function GET() {}
""",
}


def _write_routes(root, routes):
    for rel, text in routes.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    return root


@pytest.fixture
def route_tree(tmp_path):
    """Factory materializing ``{relative path: file text}`` as a route tree; defaults to a small CRM."""

    def _make(routes=None, root=None):
        return _write_routes(root or tmp_path / "app" / "api", CRM_ROUTES if routes is None else routes)

    return _make


@pytest.fixture
def api_root(route_tree):
    return route_tree()
