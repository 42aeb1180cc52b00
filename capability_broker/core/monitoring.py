"""
Monitoring and Tracing Configuration Module.

This module provides integration with Pydantic Logfire for monitoring and
tracing of broker operations:
- API endpoint tracing
- Outbound HTTPX calls to the host application
- Execution and approval-hold events

Logfire is only touched when ``LOGFIRE_ENABLED`` is set; every helper is a
no-op otherwise.
"""

import logging
import os
from typing import Optional

from fastapi import FastAPI

logger = logging.getLogger(__name__)

# Logfire configuration from environment
LOGFIRE_ENABLED = os.getenv("LOGFIRE_ENABLED", "false").lower() in ("true", "1", "yes")
LOGFIRE_TOKEN = os.getenv("LOGFIRE_TOKEN", "")
LOGFIRE_ENVIRONMENT = os.getenv("LOGFIRE_ENVIRONMENT", "development")
LOGFIRE_SERVICE_NAME = os.getenv("LOGFIRE_SERVICE_NAME", "capability-broker")
LOGFIRE_SERVICE_VERSION = os.getenv("LOGFIRE_SERVICE_VERSION", "0.1.0")

# Feature flags
LOGFIRE_TRACE_HTTPX = os.getenv("LOGFIRE_TRACE_HTTPX", "true").lower() in ("true", "1", "yes")
LOGFIRE_TRACE_FASTAPI = os.getenv("LOGFIRE_TRACE_FASTAPI", "true").lower() in ("true", "1", "yes")


def initialize_logfire(app: FastAPI | None = None) -> None:
    """
    Initialize Logfire for monitoring and tracing.

    Sets up automatic instrumentation for HTTPX (calls forwarded to the host
    application) and FastAPI endpoints.

    Args:
        app: FastAPI application instance for FastAPI instrumentation (optional).
    """
    if not LOGFIRE_ENABLED:
        logger.info("Logfire monitoring is disabled. Set LOGFIRE_ENABLED=true to enable.")
        return

    if not LOGFIRE_TOKEN:
        logger.warning(
            "Logfire is enabled but LOGFIRE_TOKEN is not set. "
            "Monitoring will not work. Set LOGFIRE_TOKEN to enable Logfire."
        )
        return

    try:
        import logfire

        logfire.configure(
            token=LOGFIRE_TOKEN,
            service_name=LOGFIRE_SERVICE_NAME,
            service_version=LOGFIRE_SERVICE_VERSION,
            environment=LOGFIRE_ENVIRONMENT,
        )

        if LOGFIRE_TRACE_HTTPX:
            try:
                logfire.instrument_httpx()
                logger.info("Logfire: HTTPX instrumentation enabled")
            except Exception as e:
                logger.warning(f"Failed to instrument HTTPX: {e}")

        if LOGFIRE_TRACE_FASTAPI:
            if app is not None:
                try:
                    logfire.instrument_fastapi(app=app)
                    logger.info("Logfire: FastAPI instrumentation enabled")
                except Exception as e:
                    logger.warning(f"Failed to instrument FastAPI: {e}")
            else:
                logger.debug("FastAPI app instance not provided, skipping FastAPI instrumentation")

        logger.info(
            f"Logfire monitoring initialized: environment={LOGFIRE_ENVIRONMENT}, service={LOGFIRE_SERVICE_NAME}"
        )

    except ImportError:
        logger.warning("Logfire is enabled but 'logfire' package is not installed. Install it with: pip install logfire")
    except Exception as e:
        logger.error(f"Failed to initialize Logfire: {e}", exc_info=True)


def log_api_request(method: str, path: str, status_code: int, duration_ms: float) -> None:
    """
    Log an API request with performance metrics.

    Args:
        method: HTTP method
        path: Request path
        status_code: HTTP status code
        duration_ms: Request duration in milliseconds
    """
    if not LOGFIRE_ENABLED:
        return
    try:
        import logfire

        logfire.info(
            "API request completed",
            method=method,
            path=path,
            status_code=status_code,
            duration_ms=duration_ms,
        )
    except Exception:
        logger.debug(f"Could not log API request to Logfire: {method} {path}")


def log_broker_call(tool_name: str, method: str, path: Optional[str], outcome: str, status: Optional[int] = None) -> None:
    """
    Log a broker decision or execution.

    Args:
        tool_name: ``http.request`` or ``http.bulk``
        method: HTTP verb of the call (``BATCH`` for bulk calls)
        path: Target path for single calls
        outcome: ``draft``, ``executed`` or ``rejected``
        status: Resulting status code, when executed
    """
    if not LOGFIRE_ENABLED:
        return
    try:
        import logfire

        logfire.info(
            "Broker call {outcome}",
            outcome=outcome,
            tool_name=tool_name,
            method=method,
            path=path,
            status=status,
        )
    except Exception:
        logger.debug(f"Could not log broker call to Logfire: {tool_name} {method} {path}")
