"""
Main Application Entry Point.

This module initializes the FastAPI application, configures middleware (CORS,
request tracing), registers the exception handlers and mounts the broker's
routers under the control-plane prefix.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from capability_broker.core.logging_config import get_logger, setup_logging
from capability_broker.core.monitoring import initialize_logfire

from .api.v1 import catalog, execute, health
from .core import constant
from .core.config import Settings, settings
from .exception_handlers import setup_exception_handlers
from .middleware import LogfireMiddleware
from .services.container import shutdown_services

# Initialize logging
setup_logging(settings.log_level, settings.log_format, enable_file=settings.enable_file_logging)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan events.

    The service container is built lazily on the first request; on shutdown
    its outbound HTTP client is closed.
    """
    logger.info(f"Starting up {constant.PROJECT_NAME} {constant.API_VERSION}...")
    yield
    logger.info(f"Shutting down {constant.PROJECT_NAME}...")
    await shutdown_services()


def create_app(cfg: Settings = settings) -> FastAPI:
    mount = cfg.control_plane_mount
    app = FastAPI(
        title=constant.PROJECT_NAME,
        description="""
    Capability Broker API

    Discovers the host application's HTTP endpoints, exposes them as a searchable
    method catalog, and executes chosen methods on the caller's behalf. Mutating
    calls are held as drafts until the caller approves them.
    """,
        version=constant.API_VERSION,
        openapi_url=f"{mount}/openapi.json",
        docs_url=f"{mount}/docs",
        redoc_url=f"{mount}/redoc",
        lifespan=lifespan,
    )

    cors = cfg.cors
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors.origins,
        allow_credentials=cors.allow_credentials,
        allow_methods=cors.allow_methods,
        allow_headers=cors.allow_headers,
    )
    app.add_middleware(LogfireMiddleware)

    setup_exception_handlers(app)
    initialize_logfire(app)

    app.include_router(health.router, tags=["health"])
    app.include_router(catalog.router, prefix=mount, tags=["catalog"])
    app.include_router(execute.router, prefix=mount, tags=["execute"])
    return app


app = create_app()
