from __future__ import annotations

"""Service container.

Builds the long-lived collaborators of the API (catalog service, scorers,
broker, identity extractor) from ``Settings`` once per process.
"""

from dataclasses import dataclass
from typing import Optional

from capability_broker.broker import ActionBroker, ApprovalPolicy, HostTransport
from capability_broker.catalog import CatalogService, EndpointDiscovery, FileSystemRouteSource, ManifestRouteSource
from capability_broker.catalog.discovery import RouteSource
from capability_broker.core.logging_config import get_logger
from capability_broker.scoring import EndpointScorer, RelevanceScorer, load_scoring_profile
from capability_broker.server.auth import BearerTokenIdentityExtractor, IdentityExtractor
from capability_broker.server.core.config import Settings, settings

logger = get_logger(__name__)


@dataclass
class BrokerServices:
    """Everything a request handler needs."""

    catalog: CatalogService
    scorer: RelevanceScorer
    endpoint_scorer: EndpointScorer
    broker: ActionBroker
    identity: IdentityExtractor

    async def aclose(self) -> None:
        await self.broker.transport.aclose()


def build_route_source(cfg: Settings) -> RouteSource:
    discovery = cfg.discovery
    if discovery.route_manifest_file is not None:
        logger.info(f"Discovering routes from manifest {discovery.route_manifest_file}")
        return ManifestRouteSource(discovery.route_manifest_file)
    logger.info(f"Discovering routes under {discovery.api_root}")
    return FileSystemRouteSource(discovery.api_root, url_prefix=cfg.public_api_prefix)


def build_services(cfg: Settings = settings) -> BrokerServices:
    """Wire the broker components from configuration."""
    discovery = EndpointDiscovery(build_route_source(cfg), ttl_seconds=cfg.discovery_ttl_seconds)
    profile = load_scoring_profile(cfg.scoring_profile_path)
    profile = profile.model_copy(update={"control_plane_prefix": cfg.control_plane_prefix})
    transport = HostTransport(cfg.host_base_url, timeout=cfg.upstream_timeout_seconds)
    return BrokerServices(
        catalog=CatalogService(discovery, cfg.discovery.capabilities_file),
        scorer=RelevanceScorer(profile),
        endpoint_scorer=EndpointScorer(),
        broker=ActionBroker(
            transport,
            policy=ApprovalPolicy(),
            public_prefix=cfg.public_api_prefix,
            control_plane_prefix=cfg.control_plane_prefix,
            max_batch_size=cfg.max_batch_size,
        ),
        identity=BearerTokenIdentityExtractor(cookie_name=cfg.auth_cookie_name),
    )


_services: Optional[BrokerServices] = None


def get_services() -> BrokerServices:
    global _services
    if _services is None:
        _services = build_services()
    return _services


async def shutdown_services() -> None:
    global _services
    if _services is not None:
        await _services.aclose()
        _services = None
