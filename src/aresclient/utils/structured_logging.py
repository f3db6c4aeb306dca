r"""Structured logging utilities for machine-readable log output.

The attempt events of aresclient can be routed to Python's ``logging``
system through ``LogSink.from_logger``. Each event is logged with its
fields attached as ``extra`` attributes, so the ``StructuredFormatter``
below renders them as JSON objects.

Example:
    Enable JSON output for the attempt events:

    ```python
    import logging
    from aresclient import ClientConfig, HttpClient, LogSink
    from aresclient.utils.structured_logging import StructuredFormatter, set_correlation_id

    handler = logging.StreamHandler()
    handler.setFormatter(StructuredFormatter())
    logger = logging.getLogger("myapp.http")
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)

    config = ClientConfig().with_logging(LogSink.from_logger(logger))
    set_correlation_id("request-123")
    with HttpClient(config) as client:
        client.get("https://api.example.com/data")
    ```
"""

from __future__ import annotations

__all__ = [
    "StructuredFormatter",
    "clear_correlation_id",
    "get_correlation_id",
    "log_structured",
    "set_correlation_id",
]

import contextvars
import json
import logging
import time
from typing import Any

_correlation_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "aresclient_correlation_id", default=None
)

# Attributes every LogRecord carries; anything else came from ``extra``
_RESERVED_ATTRS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", (), None).__dict__
) | {"message", "asctime", "taskName"}


def get_correlation_id() -> str | None:
    """Get the correlation ID of the current context.

    Returns:
        The current correlation ID, or None if not set.

    Example:
        ```pycon
        >>> from aresclient.utils.structured_logging import (
        ...     clear_correlation_id,
        ...     get_correlation_id,
        ...     set_correlation_id,
        ... )
        >>> set_correlation_id("req-123")
        >>> get_correlation_id()
        'req-123'
        >>> clear_correlation_id()

        ```
    """
    return _correlation_id.get()


def set_correlation_id(correlation_id: str) -> None:
    """Set the correlation ID for the current context.

    The ID is stored in a context variable, so concurrent threads and
    asyncio tasks each see their own value.

    Args:
        correlation_id: The correlation ID to set (e.g., request ID, trace ID).
    """
    _correlation_id.set(correlation_id)


def clear_correlation_id() -> None:
    """Clear the correlation ID for the current context."""
    _correlation_id.set(None)


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging.

    Standard fields in the JSON output:
        - timestamp: ISO 8601 UTC timestamp with milliseconds
        - level: Log level name
        - logger: Logger name
        - message: Log message
        - correlation_id: Correlation ID, when one is set
        - exception: Formatted traceback, when present

    Fields passed through ``extra`` (such as the ``method``, ``url``,
    ``attempt`` and ``elapsed_ms`` of an attempt event) are copied as
    is. Values that are not JSON serializable are converted with
    ``str``.

    Example:
        ```pycon
        >>> import json
        >>> import logging
        >>> from io import StringIO
        >>> from aresclient.utils.structured_logging import StructuredFormatter
        >>> stream = StringIO()
        >>> handler = logging.StreamHandler(stream)
        >>> handler.setFormatter(StructuredFormatter())
        >>> logger = logging.getLogger("doctest_structured_formatter")
        >>> logger.addHandler(handler)
        >>> logger.setLevel(logging.INFO)
        >>> logger.info("attempt finished", extra={"attempt": 1})
        >>> record = json.loads(stream.getvalue())
        >>> record["message"], record["attempt"]
        ('attempt finished', 1)

        ```
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        correlation_id = get_correlation_id()
        if correlation_id is not None:
            log_data["correlation_id"] = correlation_id
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_data[key] = value
        return json.dumps(log_data, default=str)

    def formatTime(  # noqa: N802
        self, record: logging.LogRecord, datefmt: str | None = None  # noqa: ARG002
    ) -> str:
        return (
            time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(record.created))
            + f".{int(record.msecs):03d}Z"
        )


def log_structured(
    logger: logging.Logger,
    level: int,
    message: str,
    **extra: Any,
) -> None:
    """Log a message with structured data.

    Args:
        logger: Logger to use.
        level: Log level (e.g., logging.INFO).
        message: Log message.
        **extra: Additional structured fields to include in the log.
            Names clashing with ``LogRecord`` attributes are prefixed
            with ``field_``.
    """
    safe_extra = {
        (f"field_{key}" if key in _RESERVED_ATTRS else key): value for key, value in extra.items()
    }
    logger.log(level, message, extra=safe_extra)
