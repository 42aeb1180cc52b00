from __future__ import annotations

"""Capabilities description file and the catalog service.

The host application may ship a generated capabilities document declaring,
per route and verb, the required body fields, optional body fields and query
parameters. It is optional: when it is missing or unreadable the catalog is
built from discovery alone.
"""

from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from pydantic import ValidationError

from capability_broker.core.logging_config import get_logger

from .builder import build_method_catalog
from .discovery import EndpointDiscovery, canonical_path_template
from .models import CapabilitiesFile, CapabilityEndpoint, DiscoveredEndpoint, MethodSpec, order_verbs

logger = get_logger(__name__)


def load_capabilities_file(path: Path | str | None) -> Optional[CapabilitiesFile]:
    """
    Load the capabilities description document.

    Returns:
        The parsed document, or ``None`` when the path is unset, the file does
        not exist, or it cannot be parsed.
    """
    if path is None:
        return None
    caps_path = Path(path)
    if not caps_path.is_file():
        logger.debug(f"No capabilities file at {caps_path}")
        return None
    try:
        return CapabilitiesFile.model_validate_json(caps_path.read_text(encoding="utf-8"))
    except (OSError, ValueError, ValidationError) as e:
        logger.warning(f"Ignoring unreadable capabilities file {caps_path}: {e}")
        return None


def _merge_fields(*maps: Optional[Dict[str, List[str]]]) -> Optional[Dict[str, List[str]]]:
    merged: Dict[str, List[str]] = {}
    for mapping in maps:
        for verb, fields in (mapping or {}).items():
            merged[verb.upper()] = list(fields)
    return merged or None


def merge_capabilities(
    discovered: Sequence[DiscoveredEndpoint],
    capabilities: Optional[CapabilitiesFile],
) -> List[CapabilityEndpoint]:
    """
    Combine discovered endpoints with the capabilities document.

    Endpoints are joined on their path template, with the document's
    ``[id]`` segments read as ``{id}``. Verbs are unioned, docs found
    by discovery win over those in the document, and field declarations and
    the feature pack come from the document.
    """
    declared: Dict[str, CapabilityEndpoint] = {}
    for ep in capabilities.endpoints if capabilities else []:
        template = canonical_path_template(ep.path_template)
        declared[template] = ep.model_copy(update={"path_template": template})
    merged: Dict[str, CapabilityEndpoint] = {}

    for ep in discovered:
        cap = declared.get(ep.path_template)
        if cap is None:
            merged[ep.path_template] = CapabilityEndpoint.model_validate(ep.model_dump())
            continue
        merged[ep.path_template] = CapabilityEndpoint(
            path_template=ep.path_template,
            methods=order_verbs([*ep.methods, *cap.methods]),
            summary=ep.summary or cap.summary,
            method_docs={**(cap.method_docs or {}), **(ep.method_docs or {})} or None,
            required_body_fields=_merge_fields(cap.required_body_fields),
            body_fields=_merge_fields(cap.body_fields),
            query_params=_merge_fields(cap.query_params),
            feature_pack=cap.feature_pack,
        )

    for path_template, cap in declared.items():
        if path_template not in merged:
            merged[path_template] = cap.model_copy(update={"methods": order_verbs(cap.methods)})

    return [merged[p] for p in sorted(merged)]


class CatalogService:
    """
    Glue between discovery, the capabilities document and the builder.

    The HTTP layer only talks to this class. The capabilities file is re-read
    on every call, as the document is small and regenerated out of process.
    """

    def __init__(self, discovery: EndpointDiscovery, capabilities_path: Path | str | None = None) -> None:
        self.discovery = discovery
        self.capabilities_path = capabilities_path

    def endpoints(self) -> Tuple[bool, List[CapabilityEndpoint]]:
        """Return ``(generated, endpoints)`` for the current discovery snapshot."""
        caps = load_capabilities_file(self.capabilities_path)
        endpoints = merge_capabilities(self.discovery.discover(), caps)
        return bool(caps and caps.generated), endpoints

    def catalog(self) -> Tuple[bool, List[MethodSpec]]:
        """Return ``(generated, methods)``: the full method catalog, sorted by name."""
        generated, endpoints = self.endpoints()
        return generated, build_method_catalog(endpoints)
