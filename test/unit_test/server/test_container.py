"""Unit tests for service wiring."""

import json

import pytest

from capability_broker.catalog import FileSystemRouteSource, ManifestRouteSource
from capability_broker.server.core.config import Settings
from capability_broker.server.services import container
from capability_broker.server.services.container import build_route_source, build_services, shutdown_services


def test_file_system_source_by_default(tmp_path):
    source = build_route_source(Settings(BROKER_PROJECT_ROOT=tmp_path))
    assert isinstance(source, FileSystemRouteSource)
    assert source.api_root == tmp_path / "app/api"


def test_manifest_source_when_configured(tmp_path):
    source = build_route_source(Settings(BROKER_PROJECT_ROOT=tmp_path, BROKER_ROUTE_MANIFEST_PATH="routes.json"))
    assert isinstance(source, ManifestRouteSource)


def test_build_services_from_settings(tmp_path):
    (tmp_path / "routes.json").write_text(json.dumps([{"pathTemplate": "/api/crm/deals", "methods": ["GET"]}]))
    cfg = Settings(
        BROKER_PROJECT_ROOT=tmp_path,
        BROKER_ROUTE_MANIFEST_PATH="routes.json",
        BROKER_CONTROL_PLANE_PREFIX="/api/agent/",
        BROKER_MAX_BATCH_SIZE=5,
    )
    services = build_services(cfg)

    assert services.scorer.profile.control_plane_prefix == "/api/agent/"
    assert services.broker.control_plane_prefix == "/api/agent/"
    assert services.broker.max_batch_size == 5
    assert [m.name for m in services.catalog.catalog()[1]] == ["route_api_crm_deals__GET"]


@pytest.mark.asyncio
async def test_get_services_is_a_singleton(monkeypatch, tmp_path):
    monkeypatch.setattr(container, "settings", Settings(BROKER_PROJECT_ROOT=tmp_path))
    monkeypatch.setattr(container, "_services", None)
    calls = []
    real_build = container.build_services
    monkeypatch.setattr(container, "build_services", lambda: calls.append(1) or real_build(container.settings))

    first = container.get_services()
    assert container.get_services() is first
    assert calls == [1]

    await shutdown_services()
    assert container._services is None
