r"""Parsing of raw status and header lines into a logical response.

When an engine follows redirects, it reports the header block of every
hop. Only the block introduced by the last status line describes the
response that is returned to the caller: every earlier block, including
its headers, belongs to the redirect chain and is discarded.
"""

from __future__ import annotations

__all__ = ["ParsedResponse", "parse_raw_response", "parse_status_line"]

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

import httpx

from aresclient.exceptions import MalformedResponseError

if TYPE_CHECKING:
    from collections.abc import Sequence

logger: logging.Logger = logging.getLogger(__name__)

STATUS_LINE_PATTERN = re.compile(r"^HTTP/(\S+) (\d{3})(?: (.*))?$", re.IGNORECASE)


@dataclass(frozen=True)
class ParsedResponse:
    r"""The logical status line and headers of a raw reply.

    Attributes:
        status_code: The HTTP status code.
        http_version: The protocol version, e.g. ``"1.1"``.
        reason_phrase: The reason phrase, possibly empty.
        headers: The headers with lowercase names. Repeated names keep
            all their values.
    """

    status_code: int
    http_version: str
    reason_phrase: str
    headers: httpx.Headers


def parse_status_line(line: str) -> tuple[str, int, str] | None:
    r"""Parse an ``HTTP/<version> <code> <reason>`` status line.

    Args:
        line: The line to parse. Surrounding whitespace is ignored.

    Returns:
        The ``(http_version, status_code, reason_phrase)`` tuple, or
        None if the line is not a status line.

    Example:
        ```pycon
        >>> from aresclient.parser import parse_status_line
        >>> parse_status_line("HTTP/1.1 404 Not Found\r\n")
        ('1.1', 404, 'Not Found')
        >>> parse_status_line("Content-Type: text/plain") is None
        True

        ```
    """
    match = STATUS_LINE_PATTERN.match(line.strip())
    if match is None:
        return None
    version, code, reason = match.groups()
    return version, int(code), (reason or "").strip()


def parse_raw_response(lines: Sequence[str], body: bytes = b"") -> ParsedResponse:
    r"""Parse raw status and header lines into a ``ParsedResponse``.

    Args:
        lines: The status and header lines reported by the engine, for
            every hop of a redirect chain. Line terminators are allowed.
        body: The body of the reply. It is not inspected, and is only
            accepted so the parser sees the whole raw reply.

    Returns:
        The status line and headers of the last block.

    Raises:
        MalformedResponseError: If no line is a status line.

    Example:
        ```pycon
        >>> from aresclient.parser import parse_raw_response
        >>> parsed = parse_raw_response(
        ...     [
        ...         "HTTP/1.1 302 Found",
        ...         "Location: /x",
        ...         "",
        ...         "HTTP/1.1 200 OK",
        ...         "Content-Type: text/plain",
        ...     ]
        ... )
        >>> parsed.status_code
        200
        >>> parsed.headers.multi_items()
        [('content-type', 'text/plain')]

        ```
    """
    last_status_index: int | None = None
    for index, line in enumerate(lines):
        if STATUS_LINE_PATTERN.match(line.strip()):
            last_status_index = index

    if last_status_index is None:
        msg = f"No HTTP status line found in {len(lines)} header lines"
        raise MalformedResponseError(method="", url="", message=msg)

    if last_status_index > 0:
        logger.debug(f"Discarding {last_status_index} header lines of the redirect chain")

    version, status_code, reason_phrase = parse_status_line(lines[last_status_index])
    pairs: list[tuple[str, str]] = []
    for line in lines[last_status_index + 1 :]:
        name, sep, value = line.partition(":")
        name = name.strip().lower()
        if not sep or not name:
            continue
        pairs.append((name, value.strip()))
    return ParsedResponse(
        status_code=status_code,
        http_version=version,
        reason_phrase=reason_phrase,
        headers=httpx.Headers(pairs),
    )
