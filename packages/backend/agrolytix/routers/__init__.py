"""HTTP routers."""

from agrolytix.routers.health import create_health_router

__all__ = ["create_health_router"]
