"""Public models for the API envelope and page selection."""

from agrolytix.models.requests import PageRequest, create_page_params, page_params
from agrolytix.models.responses import (
    Envelope,
    EnvelopeFormatError,
    ErrorEnvelope,
    PaginatedEnvelope,
    PaginationMeta,
    SuccessEnvelope,
    build_pagination,
    parse_envelope,
    utc_timestamp,
)

__all__ = [
    "Envelope",
    "EnvelopeFormatError",
    "ErrorEnvelope",
    "PageRequest",
    "PaginatedEnvelope",
    "PaginationMeta",
    "SuccessEnvelope",
    "build_pagination",
    "create_page_params",
    "page_params",
    "parse_envelope",
    "utc_timestamp",
]
