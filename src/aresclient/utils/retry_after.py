r"""Retry-After header parsing utilities.

This module provides functions for parsing the Retry-After header value
from HTTP responses. Only the delay-seconds form is accepted by default;
the HTTP-date form of RFC 7231 is opt-in.
"""

from __future__ import annotations

__all__ = ["parse_retry_after"]

import logging
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime

logger: logging.Logger = logging.getLogger(__name__)


def parse_retry_after(
    retry_after_header: str | None, allow_http_date: bool = False
) -> float | None:
    """Parse the Retry-After header value from an HTTP response.

    The value is parsed strictly as a non-negative integer number of
    seconds (e.g. ``"120"``). Fractional and negative values are treated
    as absent. When ``allow_http_date`` is enabled, an HTTP-date in RFC
    5322 format (e.g. ``"Wed, 21 Oct 2015 07:28:00 GMT"``) is also
    accepted and converted to the number of seconds from now.

    Args:
        retry_after_header: The value of the Retry-After header as a string,
            or None if the header is not present in the response.
        allow_http_date: If ``True``, also accept the HTTP-date form.

    Returns:
        The number of seconds to wait before retrying, or None if the
        header is absent or cannot be parsed. For the HTTP-date form,
        dates in the past are clamped to 0.0.

    Example:
        ```pycon
        >>> from aresclient.utils import parse_retry_after
        >>> parse_retry_after("120")
        120.0
        >>> parse_retry_after(" 5 ")
        5.0
        >>> parse_retry_after(None) is None
        True
        >>> parse_retry_after("1.5") is None
        True
        >>> parse_retry_after("-3") is None
        True

        ```
    """
    if retry_after_header is None:
        return None

    value = retry_after_header.strip()
    if value.isdigit() and value.isascii():
        return float(int(value))

    if allow_http_date:
        try:
            retry_date: datetime = parsedate_to_datetime(value)
            now = datetime.now(timezone.utc)
            return max(0.0, (retry_date - now).total_seconds())
        except (ValueError, TypeError, OverflowError):
            pass

    logger.debug(f"Ignoring unparsable Retry-After header: {retry_after_header!r}")
    return None
