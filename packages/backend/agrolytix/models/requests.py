"""Request-side models: page selection for listing endpoints.

``PageRequest`` is the guard that runs before ``paginated_success``: it turns
loose query-string values into a page number >= 1 and a bounded page size,
so the pagination math never sees a zero or negative page size.
"""

from __future__ import annotations

import re
from typing import Callable

from fastapi import Query, Request
from pydantic import BaseModel, ConfigDict, Field

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

# Leading integer, as browsers' parseInt reads it: "2.5" -> 2, "3abc" -> 3
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _to_int(raw: str | int | None) -> int | None:
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    match = _LEADING_INT.match(raw)
    return int(match.group(1)) if match else None


class PageRequest(BaseModel):
    """A validated page selection."""

    model_config = ConfigDict(frozen=True)

    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=DEFAULT_PAGE_SIZE, ge=1)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    @classmethod
    def from_query(
        cls,
        page: str | int | None,
        page_size: str | int | None,
        *,
        default_page_size: int = DEFAULT_PAGE_SIZE,
        max_page_size: int = MAX_PAGE_SIZE,
    ) -> PageRequest:
        """Build a page selection from raw query values.

        Missing, non-numeric and zero values fall back to the defaults;
        ``page`` is clamped to >= 1 and ``page_size`` to ``1..max_page_size``.
        """
        parsed_page = _to_int(page) or 1
        parsed_size = _to_int(page_size) or default_page_size
        return cls(
            page=max(1, parsed_page),
            page_size=min(max_page_size, max(1, parsed_size)),
        )


def create_page_params(
    default_page_size: int = DEFAULT_PAGE_SIZE,
    max_page_size: int = MAX_PAGE_SIZE,
) -> Callable[..., PageRequest]:
    """Factory for a FastAPI dependency with fixed page-size limits."""

    def page_params(
        page: str | None = Query(default=None),
        page_size: str | None = Query(default=None),
    ) -> PageRequest:
        return PageRequest.from_query(
            page,
            page_size,
            default_page_size=default_page_size,
            max_page_size=max_page_size,
        )

    return page_params


def page_params(
    request: Request,
    page: str | None = Query(default=None),
    page_size: str | None = Query(default=None),
) -> PageRequest:
    """FastAPI dependency using the limits ``create_app`` stores on ``app.state``.

    Apps built without ``create_app`` fall back to 20 per page, 100 at most.
    """
    default_page_size, max_page_size = getattr(
        request.app.state, "page_limits", (DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE)
    )
    return PageRequest.from_query(
        page,
        page_size,
        default_page_size=default_page_size,
        max_page_size=max_page_size,
    )
