"""Global error hierarchy and FastAPI exception handlers.

All application errors extend ApiError. The handlers registered here catch
these errors (plus request validation errors, Starlette HTTP exceptions,
database errors and unhandled exceptions) and render them through
``envelope.error`` so every failure reaches the client as
{ ok: false, message, details?, timestamp }.
"""

from __future__ import annotations

import logging
import traceback
from typing import Any

import psycopg
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import DBAPIError
from starlette.exceptions import HTTPException as StarletteHTTPException

from agrolytix import envelope

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Error hierarchy
# ---------------------------------------------------------------------------


class ApiError(Exception):
    """Base error for all application errors."""

    status_code: int = 500
    message: str = "Internal server error"

    def __init__(self, message: str | None = None, details: Any = None) -> None:
        self.message = message or self.__class__.message
        self.details = details
        super().__init__(self.message)


class ValidationError(ApiError):
    """Payload or parameter validation failure."""

    status_code = 400
    message = "Validation error"


class AuthenticationError(ApiError):
    """Missing or invalid credentials."""

    status_code = 401
    message = "Invalid credentials"


class InvalidTokenError(ApiError):
    """Bearer token could not be decoded or verified."""

    status_code = 401
    message = "Invalid token."


class TokenExpiredError(ApiError):
    """Bearer token is past its expiry."""

    status_code = 401
    message = "Token expired."


class ForbiddenError(ApiError):
    """Authenticated but not allowed."""

    status_code = 403
    message = "Access denied"


class NotFoundError(ApiError):
    """Requested resource does not exist."""

    status_code = 404
    message = "Resource not found"


class ConflictError(ApiError):
    """Resource already exists or conflicts with current state."""

    status_code = 409
    message = "Record already exists. Check unique fields."


class ServiceUnavailableError(ApiError):
    """A dependency (usually the database) is unreachable."""

    status_code = 503
    message = "Service temporarily unavailable."


# ---------------------------------------------------------------------------
# Database error mapping
# ---------------------------------------------------------------------------

_SQLSTATE_ERRORS: dict[str, tuple[int, str]] = {
    "23505": (409, "Record already exists. Check unique fields."),
    "23503": (400, "Invalid reference. Check related data."),
    "23502": (400, "Required field not provided."),
    "42P01": (500, "Database configuration error."),
    "42703": (500, "Database configuration error."),
    "08006": (503, "Service temporarily unavailable."),
}


def sqlstate_of(exc: BaseException) -> str | None:
    """Extract the SQLSTATE code from a driver error or a SQLAlchemy wrapper."""
    if isinstance(exc, DBAPIError) and exc.orig is not None:
        exc = exc.orig
    code = getattr(exc, "sqlstate", None) or getattr(exc, "pgcode", None)
    return code if isinstance(code, str) else None


def map_sqlstate(code: str | None) -> tuple[int, str]:
    """Map a SQLSTATE code to an HTTP status and a client-safe message."""
    if code is None:
        return 500, ApiError.message
    if code in _SQLSTATE_ERRORS:
        return _SQLSTATE_ERRORS[code]
    if code.startswith("23"):
        return 400, "Data integrity violation."
    if code.startswith("42"):
        return 500, "System configuration error."
    return 500, ApiError.message


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------


def _debug_details(exc: BaseException, code: str | None = None) -> dict[str, Any]:
    return {
        "error_code": code,
        "error_name": type(exc).__name__,
        "stack": "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
    }


def _request_context(request: Request) -> dict[str, Any]:
    return {
        "request_id": getattr(request.state, "request_id", None),
        "method": request.method,
        "path": request.url.path,
    }


async def _api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    """Handle ApiError subclasses."""
    if exc.status_code >= 500:
        logger.error("%s: %s", type(exc).__name__, exc.message, extra=_request_context(request))
    else:
        logger.warning("%s: %s", type(exc).__name__, exc.message, extra=_request_context(request))
    return envelope.error(exc.message, exc.status_code, exc.details)


async def _validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle FastAPI / Pydantic RequestValidationError (400)."""
    field_errors = [
        {
            "field": " -> ".join(str(loc) for loc in err["loc"]),
            "message": err["msg"],
            "type": err["type"],
        }
        for err in exc.errors()
    ]
    logger.warning("Request validation failed", extra=_request_context(request))
    return envelope.error(ValidationError.message, ValidationError.status_code, field_errors)


async def _http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Handle Starlette HTTP exceptions, including unmatched routes."""
    if exc.status_code == 404 and exc.detail == "Not Found":
        message = f"Route {request.method} {request.url.path} not found"
        details = None
    elif isinstance(exc.detail, str):
        message, details = exc.detail, None
    else:
        message, details = "Request failed", exc.detail

    response = envelope.error(message, exc.status_code, details)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


def _make_database_error_handler(include_debug_details: bool):
    async def _database_error_handler(request: Request, exc: Exception) -> JSONResponse:
        """Map database errors to client-safe envelopes by SQLSTATE."""
        code = sqlstate_of(exc)
        status_code, message = map_sqlstate(code)
        logger.error(
            "Database error: %s",
            exc,
            extra={**_request_context(request), "sqlstate": code},
        )
        details = _debug_details(exc, code) if include_debug_details else None
        return envelope.error(message, status_code, details)

    return _database_error_handler


def _make_unhandled_error_handler(include_debug_details: bool):
    async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all for unhandled exceptions: log traceback, return generic 500."""
        logger.error(
            "Unhandled exception: %s\n%s",
            exc,
            traceback.format_exc(),
            extra=_request_context(request),
        )
        details = _debug_details(exc) if include_debug_details else None
        return envelope.error(ApiError.message, 500, details)

    return _unhandled_error_handler


# ---------------------------------------------------------------------------
# Registration helper
# ---------------------------------------------------------------------------


def register_error_handlers(app: FastAPI, *, include_debug_details: bool = False) -> None:
    """Wire up all exception handlers on the FastAPI application.

    ``include_debug_details`` attaches error name, SQLSTATE and stack trace to
    database and unhandled-error envelopes; enable it only in development.
    """
    database_handler = _make_database_error_handler(include_debug_details)
    app.add_exception_handler(ApiError, _api_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(DBAPIError, database_handler)
    app.add_exception_handler(psycopg.Error, database_handler)
    app.add_exception_handler(Exception, _make_unhandled_error_handler(include_debug_details))
