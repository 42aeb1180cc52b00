from __future__ import annotations

"""Endpoint discovery.

Discovery answers one question: which HTTP paths does the host application
expose, and with which verbs? The answer comes from a ``RouteSource``:

- ``FileSystemRouteSource`` walks an app-router style tree (one ``route.ts``
  per directory) and reads exported verb handlers and ``/** ... */`` doc
  blocks from each file.
- ``ManifestRouteSource`` reads a build-time JSON manifest instead.

``EndpointDiscovery`` caches the result of a source as an immutable
``DiscoverySnapshot``. A refresh builds a complete new snapshot and swaps it in
with a single assignment, so readers see either the old or the new set.
"""

import json
import os
import re
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Protocol, Sequence, Tuple

from pydantic import TypeAdapter, ValidationError

from capability_broker.core.logging_config import get_logger

from .models import HTTP_VERBS, DiscoveredEndpoint, order_verbs

logger = get_logger(__name__)

DEFAULT_ROUTE_FILE_NAMES = ("route.ts", "route.tsx", "route.js")
DEFAULT_TTL_SECONDS = 30.0

_VERB_ALT = "|".join(HTTP_VERBS)
_DOC_BLOCK = re.compile(r"/\*\*[\s\S]*?\*/")
_VERB_LINE = re.compile(rf"^({_VERB_ALT})\s+(/\S*)", re.IGNORECASE)
_DOC_PHRASE = re.compile(r"^(List|Create|Update|Delete|Query|Import) ", re.IGNORECASE)
_MAX_DOC_LINES = 3


class RouteSource(Protocol):
    """Anything that can produce the current set of discovered endpoints."""

    def scan(self) -> List[DiscoveredEndpoint]: ...


def extract_methods(file_text: str) -> List[str]:
    """Return the verbs a route module exports as handlers, in canonical order."""
    found = []
    for verb in HTTP_VERBS:
        pattern = rf"export\s+(?:async\s+function|function|const|let)\s+{verb}\b"
        if re.search(pattern, file_text, re.MULTILINE):
            found.append(verb)
    return found


def _clean_doc_lines(block: str) -> List[str]:
    lines = []
    for raw in block.split("\n"):
        line = re.sub(r"^\s*/\*\*?", "", raw)
        line = re.sub(r"^\s*\*\s?", "", line)
        line = re.sub(r"\*/\s*$", "", line).strip()
        if line:
            lines.append(line)
    return lines


def extract_docs(file_text: str) -> Tuple[Optional[str], Optional[Dict[str, str]]]:
    """
    Best-effort documentation extraction from ``/** ... */`` blocks.

    A line such as ``GET /api/crm/contacts`` opens the doc for that verb; up to
    the next three lines (stopping at another verb line) become its
    description. The first non-verb line of the first block that has one
    becomes the path summary.

    Returns:
        ``(summary, method_docs)``; either may be ``None``.
    """
    summary: Optional[str] = None
    method_docs: Dict[str, str] = {}

    for block in _DOC_BLOCK.findall(file_text):
        lines = _clean_doc_lines(block)
        if not lines:
            continue

        for i, line in enumerate(lines):
            match = _VERB_LINE.match(line)
            if not match:
                continue
            verb = match.group(1).upper()
            desc_lines = []
            for candidate in lines[i + 1 : i + 1 + _MAX_DOC_LINES]:
                if _VERB_LINE.match(candidate):
                    break
                if _DOC_PHRASE.match(candidate) or len(candidate) > 3:
                    desc_lines.append(candidate)
            desc = " ".join(desc_lines).strip()
            if desc:
                method_docs[verb] = desc

        if summary is None:
            summary = next((line for line in lines if not _VERB_LINE.match(line)), None)

    return summary, (method_docs or None)


def _url_segment(dir_name: str) -> Optional[str]:
    """Map one directory name to its URL segment; ``None`` means the directory adds no segment."""
    if dir_name.startswith("(") and dir_name.endswith(")"):
        return None
    match = re.fullmatch(r"\[\[?(?:\.\.\.)?([^\]]+)\]\]?", dir_name)
    if match:
        return "{" + match.group(1) + "}"
    return dir_name


def canonical_path_template(template: str) -> str:
    """Rewrite a path template so ``[id]``-style segments read ``{id}`` and route groups are dropped."""
    segments = [seg for seg in (_url_segment(part) for part in template.split("/") if part) if seg]
    return "/" + "/".join(segments)


class FileSystemRouteSource:
    """
    Scan an app-router style directory tree for route handler files.

    Every directory containing one of ``file_names`` is a route; its path
    relative to ``api_root`` becomes the URL under ``url_prefix``. Dynamic
    segments (``[id]``, ``[...slug]``) become ``{id}`` / ``{slug}``, route
    groups ``(name)`` are dropped and private directories (``_name``) are
    skipped.
    """

    def __init__(
        self,
        api_root: Path | str,
        *,
        url_prefix: str = "/api",
        file_names: Sequence[str] = DEFAULT_ROUTE_FILE_NAMES,
    ) -> None:
        self.api_root = Path(api_root)
        self.url_prefix = "/" + url_prefix.strip("/")
        self.file_names = tuple(file_names)

    def _route_files(self) -> Iterable[Path]:
        for dirpath, dirnames, filenames in os.walk(self.api_root):
            dirnames[:] = sorted(d for d in dirnames if not d.startswith("_"))
            for name in self.file_names:
                if name in filenames:
                    yield Path(dirpath) / name
                    break

    def _route_path(self, route_file: Path) -> str:
        rel = route_file.parent.relative_to(self.api_root)
        segments = [seg for seg in (_url_segment(part) for part in rel.parts) if seg]
        return "/".join([self.url_prefix, *segments]) if segments else self.url_prefix

    def scan(self) -> List[DiscoveredEndpoint]:
        if not self.api_root.is_dir():
            logger.info(f"Route root {self.api_root} does not exist; no endpoints discovered")
            return []

        by_path: Dict[str, DiscoveredEndpoint] = {}
        for route_file in self._route_files():
            try:
                text = route_file.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                logger.warning(f"Skipping unreadable route file {route_file}: {e}")
                continue

            methods = extract_methods(text)
            if not methods:
                logger.debug(f"No exported handlers in {route_file}")
                continue

            summary, method_docs = extract_docs(text)
            path_template = self._route_path(route_file)
            by_path[path_template] = DiscoveredEndpoint(
                path_template=path_template,
                methods=methods,
                summary=summary,
                method_docs=method_docs,
            )

        return [by_path[p] for p in sorted(by_path)]


_ENDPOINT_LIST = TypeAdapter(List[DiscoveredEndpoint])


class ManifestRouteSource:
    """Read endpoints from a build-time JSON manifest (a list, or ``{"endpoints": [...]}``)."""

    def __init__(self, manifest_path: Path | str) -> None:
        self.manifest_path = Path(manifest_path)

    def scan(self) -> List[DiscoveredEndpoint]:
        if not self.manifest_path.is_file():
            logger.warning(f"Route manifest {self.manifest_path} not found; no endpoints discovered")
            return []
        try:
            raw = json.loads(self.manifest_path.read_text(encoding="utf-8"))
            items = raw.get("endpoints", []) if isinstance(raw, dict) else raw
            endpoints = _ENDPOINT_LIST.validate_python(items)
        except (OSError, ValueError, ValidationError) as e:
            logger.warning(f"Ignoring malformed route manifest {self.manifest_path}: {e}")
            return []

        normalized = [ep.model_copy(update={"methods": order_verbs(ep.methods)}) for ep in endpoints]
        return sorted((ep for ep in normalized if ep.methods), key=lambda ep: ep.path_template)


@dataclass(frozen=True)
class DiscoverySnapshot:
    """An immutable discovery result and the clock reading it was built at."""

    built_at: float
    endpoints: Tuple[DiscoveredEndpoint, ...]


class EndpointDiscovery:
    """
    Time-bounded cache in front of a ``RouteSource``.

    Notes:
        - ``discover`` returns the cached endpoints while the snapshot is
          younger than ``ttl_seconds``; otherwise it re-scans fully.
        - The snapshot is replaced, never mutated.
    """

    def __init__(
        self,
        source: RouteSource,
        *,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.source = source
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._snapshot: Optional[DiscoverySnapshot] = None
        self._scan_count = 0

    @property
    def snapshot(self) -> Optional[DiscoverySnapshot]:
        return self._snapshot

    @property
    def scan_count(self) -> int:
        """Number of full scans performed so far."""
        return self._scan_count

    def is_fresh(self, now: Optional[float] = None) -> bool:
        snapshot = self._snapshot
        if snapshot is None:
            return False
        now = self._clock() if now is None else now
        return now - snapshot.built_at < self.ttl_seconds

    def discover(self) -> Tuple[DiscoveredEndpoint, ...]:
        """Return the current endpoint set, re-scanning only when the snapshot is stale."""
        now = self._clock()
        snapshot = self._snapshot
        if snapshot is not None and self.is_fresh(now):
            return snapshot.endpoints

        endpoints = tuple(self.source.scan())
        self._scan_count += 1
        self._snapshot = DiscoverySnapshot(built_at=now, endpoints=endpoints)
        logger.info(f"Discovered {len(endpoints)} endpoints (scan #{self._scan_count})")
        return endpoints

    def invalidate(self) -> None:
        """Drop the snapshot so the next ``discover`` call re-scans."""
        self._snapshot = None
