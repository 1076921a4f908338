"""Response envelope models shared by every endpoint.

Three wire shapes exist:

- success:           { ok: true,  message, data, timestamp }
- paginated success: { ok: true,  message, data, pagination, timestamp }
- error:             { ok: false, message, details?, timestamp }

Consumers branch on ``ok`` first, then on the presence of ``pagination``.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Generic, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError

T = TypeVar("T")


class EnvelopeFormatError(ValueError):
    """Raised when a JSON body matches none of the envelope shapes."""


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a ``Z`` suffix."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class PaginationMeta(BaseModel):
    """Page position, size, and navigation flags of a paginated envelope."""

    model_config = ConfigDict(frozen=True)

    total: int
    current_page: int
    page_size: int
    total_pages: int
    has_next: bool
    has_previous: bool


def build_pagination(total: int, page: int, page_size: int) -> PaginationMeta:
    """Derive the pagination block for one page of a listing.

    ``total_pages`` is ``ceil(total / page_size)`` (0 when there are no items).
    ``page`` is not clamped: a page past the end simply has no next page.
    """
    if page_size < 1:
        raise ValueError(f"page_size must be >= 1, got {page_size}")

    total_pages = -(-total // page_size)
    return PaginationMeta(
        total=total,
        current_page=page,
        page_size=page_size,
        total_pages=total_pages,
        has_next=page < total_pages,
        has_previous=page > 1,
    )


class SuccessEnvelope(BaseModel, Generic[T]):
    """JSON envelope for a successful response."""

    model_config = ConfigDict(frozen=True)

    ok: Literal[True] = True
    message: str
    data: T | None
    timestamp: str

    def to_body(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class PaginatedEnvelope(SuccessEnvelope[T], Generic[T]):
    """Success envelope carrying one page of a listing."""

    pagination: PaginationMeta

    def to_body(self) -> dict[str, Any]:
        dumped = self.model_dump(mode="json")
        return {
            "ok": True,
            "message": dumped["message"],
            "data": dumped["data"],
            "pagination": dumped["pagination"],
            "timestamp": dumped["timestamp"],
        }


class ErrorEnvelope(BaseModel):
    """JSON envelope for a failed response.

    ``details`` is only serialized when it was provided.
    """

    model_config = ConfigDict(frozen=True)

    ok: Literal[False] = False
    message: str
    details: Any = None
    timestamp: str

    def to_body(self) -> dict[str, Any]:
        dumped = self.model_dump(mode="json")
        body: dict[str, Any] = {"ok": False, "message": dumped["message"]}
        if self.details is not None:
            body["details"] = dumped["details"]
        body["timestamp"] = dumped["timestamp"]
        return body


Envelope = SuccessEnvelope[Any] | PaginatedEnvelope[Any] | ErrorEnvelope


def parse_envelope(body: Any) -> Envelope:
    """Read a decoded JSON body into the matching envelope model.

    Raises
    ------
    EnvelopeFormatError
        If ``body`` is not an object, lacks a boolean ``ok`` flag, or does not
        validate against the shape that flag selects.
    """
    if not isinstance(body, dict):
        raise EnvelopeFormatError(f"Envelope must be a JSON object, got {type(body).__name__}")

    ok = body.get("ok")
    if not isinstance(ok, bool):
        raise EnvelopeFormatError("Envelope is missing the boolean 'ok' flag")

    try:
        if not ok:
            return ErrorEnvelope.model_validate(body)
        if "data" not in body:
            raise EnvelopeFormatError("Success envelope is missing 'data'")
        if "pagination" in body:
            return PaginatedEnvelope[Any].model_validate(body)
        return SuccessEnvelope[Any].model_validate(body)
    except ValidationError as exc:
        raise EnvelopeFormatError(str(exc)) from exc
