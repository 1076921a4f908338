"""Middleware package: error hierarchy and request context."""

from agrolytix.middleware.error_handler import (
    ApiError,
    AuthenticationError,
    ConflictError,
    ForbiddenError,
    InvalidTokenError,
    NotFoundError,
    ServiceUnavailableError,
    TokenExpiredError,
    ValidationError,
    map_sqlstate,
    register_error_handlers,
    sqlstate_of,
)
from agrolytix.middleware.request_id import RequestIdMiddleware

__all__ = [
    "ApiError",
    "AuthenticationError",
    "ConflictError",
    "ForbiddenError",
    "InvalidTokenError",
    "NotFoundError",
    "RequestIdMiddleware",
    "ServiceUnavailableError",
    "TokenExpiredError",
    "ValidationError",
    "map_sqlstate",
    "register_error_handlers",
    "sqlstate_of",
]
