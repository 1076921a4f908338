"""Service status endpoints.

- GET /           API banner with the list of public endpoints
- GET /api/health API and database status
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any

from fastapi import APIRouter
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from agrolytix import __version__, envelope
from agrolytix.middleware.error_handler import ServiceUnavailableError
from agrolytix.ops.db_probe import DatabaseUnavailableError

if TYPE_CHECKING:
    from agrolytix.ops.db_probe import DatabaseProbe

ENDPOINTS = [
    "GET  / - API status",
    "GET  /api/health - API and database health",
]


def create_health_router(*, probe: DatabaseProbe | Any = None) -> APIRouter:
    """Factory that creates the status router with an injected database probe."""

    health_router = APIRouter(tags=["health"])
    started_at = time.monotonic()

    @health_router.get("/")
    async def root() -> JSONResponse:
        """API banner."""
        return envelope.success(
            {"name": "Agrolytix API", "version": __version__, "endpoints": ENDPOINTS},
            "Agrolytix API is running",
        )

    @health_router.get("/api/health")
    async def health() -> JSONResponse:
        """API and database status; raises a 503 when the database cannot be reached."""
        uptime = round(time.monotonic() - started_at, 3)
        if probe is None:
            database = "not_configured"
        else:
            try:
                await run_in_threadpool(probe.ping)
            except DatabaseUnavailableError as exc:
                raise ServiceUnavailableError(
                    "Health check failed",
                    details={
                        "services": {"api": "up", "database": "down"},
                        "reason": exc.reason,
                        "uptime_seconds": uptime,
                    },
                ) from exc
            database = "up"

        return envelope.success(
            {
                "status": "healthy",
                "services": {"api": "up", "database": database},
                "uptime_seconds": uptime,
            },
            "Service is healthy",
        )

    return health_router
