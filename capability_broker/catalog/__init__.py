"""Endpoint discovery and the capability catalog.

 - ``EndpointDiscovery`` caches what a ``RouteSource`` (file-system scan or
   build-time manifest) reports as the host application's HTTP surface.
 - ``merge_capabilities`` enriches that surface with the optional
   capabilities document.
 - ``build_method_catalog`` flattens it into one ``MethodSpec`` per
   (path, verb) pair.

 This package exports:

 - ``DiscoveredEndpoint``/``CapabilityEndpoint``/``MethodSpec``: data models.
 - ``FileSystemRouteSource``/``ManifestRouteSource``/``EndpointDiscovery``.
 - ``CatalogService``: discovery + capabilities + builder in one call.
 """

from .builder import build_method_catalog, extract_path_params, method_name_for
from .capabilities import CatalogService, load_capabilities_file, merge_capabilities
from .discovery import (
    DiscoverySnapshot,
    EndpointDiscovery,
    FileSystemRouteSource,
    ManifestRouteSource,
    RouteSource,
)
from .models import (
    DELETE_VERB,
    HTTP_VERBS,
    READ_VERB,
    CapabilitiesFile,
    CapabilityEndpoint,
    DiscoveredEndpoint,
    MethodSpec,
)

__all__ = [
    "DELETE_VERB",
    "HTTP_VERBS",
    "READ_VERB",
    "CapabilitiesFile",
    "CapabilityEndpoint",
    "CatalogService",
    "DiscoveredEndpoint",
    "DiscoverySnapshot",
    "EndpointDiscovery",
    "FileSystemRouteSource",
    "ManifestRouteSource",
    "MethodSpec",
    "RouteSource",
    "build_method_catalog",
    "extract_path_params",
    "load_capabilities_file",
    "merge_capabilities",
    "method_name_for",
]
