"""Standard JSON responses for every endpoint.

Each helper builds one envelope, stamps it with the current UTC time and
returns a ``JSONResponse`` with the HTTP status set. Return the result from
the endpoint (or exception handler) exactly once.
"""

from __future__ import annotations

from typing import Any

from fastapi.responses import JSONResponse

from agrolytix.models.responses import (
    ErrorEnvelope,
    PaginatedEnvelope,
    SuccessEnvelope,
    build_pagination,
    utc_timestamp,
)

DEFAULT_SUCCESS_MESSAGE = "Operation completed successfully"
DEFAULT_LIST_MESSAGE = "Data listed successfully"


def success(
    payload: Any,
    message: str = DEFAULT_SUCCESS_MESSAGE,
    status: int = 200,
) -> JSONResponse:
    """Success envelope; ``payload`` is passed through as ``data`` (``None`` included)."""
    envelope = SuccessEnvelope[Any](message=message, data=payload, timestamp=utc_timestamp())
    return JSONResponse(status_code=status, content=envelope.to_body())


def paginated_success(
    payload: Any,
    total: int,
    page: int,
    page_size: int,
    message: str = DEFAULT_LIST_MESSAGE,
) -> JSONResponse:
    """Success envelope for one page of a listing. Always 200.

    ``total`` counts matching items across all pages. ``page_size`` must be
    >= 1; use ``PageRequest`` to guard query input before calling this.
    """
    envelope = PaginatedEnvelope[Any](
        message=message,
        data=payload,
        pagination=build_pagination(total, page, page_size),
        timestamp=utc_timestamp(),
    )
    return JSONResponse(status_code=200, content=envelope.to_body())


def error(
    message: str,
    status: int = 400,
    details: Any = None,
) -> JSONResponse:
    """Error envelope; ``details`` is left out of the body when it is ``None``."""
    envelope = ErrorEnvelope(message=message, details=details, timestamp=utc_timestamp())
    return JSONResponse(status_code=status, content=envelope.to_body())
