"""Capability Broker.

This package lets a caller describe an intent in free text, resolves it to an
HTTP action exposed by a host application, and executes that action under an
approval policy that separates read-only from mutating operations.

High-level architecture
-----------------------

The codebase is organized around four components, leaves first:

- ``capability_broker.catalog``:

  - Endpoint discovery over pluggable route sources, cached as an immutable
    snapshot with a short freshness window.
  - The catalog builder that turns discovered endpoints into one
    ``MethodSpec`` per (path, verb) pair.

- ``capability_broker.scoring``:

  - A rule-based relevance scorer ranking catalog entries against a query.

- ``capability_broker.broker``:

  - The approval gate and forwarding executor for single and batched calls.

- ``capability_broker.server``:

  - The FastAPI application exposing the control-plane API.

Typical workflow
----------------

1. ``GET /api/ai/methods/search?q=...`` to rank candidate methods.
2. ``POST /api/ai/execute`` with the chosen method's request.
3. If the response is a draft, resubmit it with ``approved: true``.
"""

__version__ = "0.1.0"
