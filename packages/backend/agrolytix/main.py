"""FastAPI application entry point with lifespan management.

Startup: configure logging, report database reachability.
Shutdown: dispose the database probe's connection pool.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware

from agrolytix import __version__
from agrolytix.config.settings import AppSettings, DatabaseSettings
from agrolytix.logging_config import configure_logging
from agrolytix.middleware.error_handler import register_error_handlers
from agrolytix.middleware.request_id import RequestIdMiddleware
from agrolytix.ops.db_probe import DatabaseProbe, DatabaseUnavailableError
from agrolytix.routers.health import create_health_router

logger = logging.getLogger(__name__)


def create_app(
    settings: AppSettings | None = None,
    probe: DatabaseProbe | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    ``probe`` defaults to one built from ``DB_*`` settings; pass a stub in tests.
    """
    settings = settings or AppSettings()
    probe = probe or DatabaseProbe(DatabaseSettings())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan: startup and shutdown logic."""
        configure_logging(settings.log_level)
        logger.info("Starting Agrolytix API on port %d (%s)", settings.port, settings.environment)

        try:
            result = await run_in_threadpool(probe.ping)
            logger.info("Database reachable: %s (%s)", result.database, result.short_version)
        except DatabaseUnavailableError as exc:
            # /api/health reports the outage; the API itself still starts.
            logger.warning("Database unreachable at startup: %s", exc.reason)

        yield

        logger.info("Shutting down Agrolytix API")
        probe.close()

    app = FastAPI(
        title="Agrolytix API",
        version=__version__,
        lifespan=lifespan,
    )

    # Read by the page_params dependency of listing routes
    app.state.page_limits = (settings.default_page_size, settings.max_page_size)

    register_error_handlers(app, include_debug_details=settings.is_development)

    # Starlette applies middleware in reverse order of add_middleware calls
    if settings.is_development:
        app.add_middleware(
            CORSMiddleware,
            allow_origin_regex=".*",
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    else:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials=True,
            allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
            allow_headers=["Content-Type", "Authorization", "X-Requested-With", "Accept", "Origin"],
        )
    app.add_middleware(RequestIdMiddleware, access_log=settings.is_development)

    app.include_router(create_health_router(probe=probe))

    return app


app = create_app()
