r"""Utility functions for HTTP request handling.

This package provides helpers for parsing the ``Retry-After`` header,
detecting the MIME type of uploaded files, and emitting structured log
records with correlation ids.
"""

from __future__ import annotations

__all__ = [
    "DEFAULT_MIME_TYPE",
    "StructuredFormatter",
    "clear_correlation_id",
    "get_correlation_id",
    "guess_mime_type",
    "log_structured",
    "parse_retry_after",
    "set_correlation_id",
    "sniff_mime_type",
]

from aresclient.utils.mime import DEFAULT_MIME_TYPE, guess_mime_type, sniff_mime_type
from aresclient.utils.retry_after import parse_retry_after
from aresclient.utils.structured_logging import (
    StructuredFormatter,
    clear_correlation_id,
    get_correlation_id,
    log_structured,
    set_correlation_id,
)
