r"""Log sinks receiving one structured event per physical attempt.

A ``LogSink`` has a single ``log(event)`` method. Adapters for the
common cases are available as named constructors on ``LogSink``:

- ``LogSink.noop()``: drop every event (the default)
- ``LogSink.to_stream(stream)``: print one line per event
- ``LogSink.from_logger(logger)``: forward to a ``logging.Logger``
- ``LogSink.from_callable(func)``: call a function with each event

Example:
    ```pycon
    >>> from io import StringIO
    >>> from aresclient.sinks import LogEvent, LogSink
    >>> stream = StringIO()
    >>> sink = LogSink.to_stream(stream)
    >>> sink.log(
    ...     LogEvent(
    ...         method="GET",
    ...         url="https://example.com",
    ...         attempt=1,
    ...         outcome_kind="success",
    ...         elapsed_ms=12.5,
    ...         message="GET https://example.com -> 200",
    ...         status_code=200,
    ...     )
    ... )
    >>> print(stream.getvalue().strip())
    [aresclient] GET https://example.com attempt=1 outcome=success status=200 elapsed=12.50ms

    ```
"""

from __future__ import annotations

__all__ = [
    "CallableSink",
    "LogEvent",
    "LogSink",
    "LoggerSink",
    "NoopSink",
    "StreamSink",
]

import logging
import sys
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING, TextIO

from aresclient.utils.structured_logging import log_structured

if TYPE_CHECKING:
    from collections.abc import Callable


@dataclass(frozen=True)
class LogEvent:
    """Structured description of one physical attempt.

    Attributes:
        method: The HTTP method (e.g., "GET").
        url: The URL of the request.
        attempt: The attempt number (1-indexed). The initial attempt is 1.
        outcome_kind: ``"success"`` when a response was received,
            ``"transport_error"`` when the engine failed, ``"malformed"``
            when the reply could not be parsed.
        elapsed_ms: Duration of the attempt in milliseconds.
        message: Human readable summary of the attempt.
        status_code: The status code of the response, if any.
    """

    method: str
    url: str
    attempt: int
    outcome_kind: str
    elapsed_ms: float
    message: str
    status_code: int | None = None


class LogSink(ABC):
    """Receiver of attempt events."""

    @abstractmethod
    def log(self, event: LogEvent) -> None:
        """Record one attempt event.

        Args:
            event: The event to record.
        """

    @staticmethod
    def noop() -> LogSink:
        """Return a sink that drops every event."""
        return NoopSink()

    @staticmethod
    def to_stream(stream: TextIO | None = None) -> LogSink:
        """Return a sink printing one line per event.

        Args:
            stream: The text stream to write to. Defaults to ``sys.stderr``.
        """
        return StreamSink(stream)

    @staticmethod
    def from_logger(logger: logging.Logger, level: int = logging.INFO) -> LogSink:
        """Return a sink forwarding events to a ``logging.Logger``.

        Args:
            logger: The logger to forward to.
            level: The level of the emitted records.
        """
        return LoggerSink(logger, level)

    @staticmethod
    def from_callable(func: Callable[[LogEvent], None]) -> LogSink:
        """Return a sink calling ``func`` with each event.

        Args:
            func: The function to call.
        """
        return CallableSink(func)


class NoopSink(LogSink):
    """Sink that drops every event."""

    def log(self, event: LogEvent) -> None:
        pass


class StreamSink(LogSink):
    """Sink writing a single line per event to a text stream."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream

    def log(self, event: LogEvent) -> None:
        stream = self._stream if self._stream is not None else sys.stderr
        status = "" if event.status_code is None else f" status={event.status_code}"
        stream.write(
            f"[aresclient] {event.method} {event.url} attempt={event.attempt} "
            f"outcome={event.outcome_kind}{status} elapsed={event.elapsed_ms:.2f}ms\n"
        )


class LoggerSink(LogSink):
    """Sink forwarding events to a ``logging.Logger`` as structured records."""

    def __init__(self, logger: logging.Logger, level: int = logging.INFO) -> None:
        self.logger = logger
        self.level = level

    def log(self, event: LogEvent) -> None:
        fields = asdict(event)
        message = fields.pop("message")
        log_structured(self.logger, self.level, message, **fields)


class CallableSink(LogSink):
    """Sink calling a function with each event."""

    def __init__(self, func: Callable[[LogEvent], None]) -> None:
        self.func = func

    def log(self, event: LogEvent) -> None:
        self.func(event)
