r"""Shared attempt logic for the sync and async transports.

This module contains the steps of a physical attempt that do not depend
on how the request is sent: turning a raw reply into an outcome and a
response, emitting the attempt event, and building the final error of
a logical call.
"""

from __future__ import annotations

__all__ = [
    "attempt_event",
    "emit_event",
    "exhausted_error",
    "read_reply",
]

import logging
from typing import TYPE_CHECKING

from aresclient.exceptions import MalformedResponseError, RequestFailedError
from aresclient.parser import parse_raw_response
from aresclient.response import HttpResponse
from aresclient.retry.outcome import Failure, Success
from aresclient.sinks import LogEvent

if TYPE_CHECKING:
    from aresclient.engine import RawReply
    from aresclient.request_spec import WireRequest
    from aresclient.retry.outcome import AttemptOutcome
    from aresclient.sinks import LogSink

logger: logging.Logger = logging.getLogger(__name__)


def read_reply(request: WireRequest, reply: RawReply) -> tuple[Success, HttpResponse]:
    r"""Parse the raw reply of an engine.

    Args:
        request: The request that produced the reply.
        reply: The raw reply.

    Returns:
        The outcome fed to the retry policy and the response returned
        to the caller. Both share the headers and body of the last hop.

    Raises:
        MalformedResponseError: If the reply has no status line.
    """
    try:
        parsed = parse_raw_response(reply.header_lines, reply.body)
    except MalformedResponseError as exc:
        msg = f"{request.method} request to {request.url} returned a malformed response: {exc}"
        raise MalformedResponseError(
            method=request.method, url=request.url, message=msg, cause=exc
        ) from exc
    outcome = Success(status_code=parsed.status_code, headers=parsed.headers, body=reply.body)
    response = HttpResponse(
        status_code=parsed.status_code,
        headers=parsed.headers,
        content=reply.body,
        reason_phrase=parsed.reason_phrase,
        http_version=parsed.http_version,
        url=request.url,
    )
    return outcome, response


def attempt_event(
    request: WireRequest,
    attempt: int,
    outcome: AttemptOutcome | None,
    elapsed: float,
) -> LogEvent:
    r"""Build the event describing one physical attempt.

    Args:
        request: The request that was sent.
        attempt: The zero-indexed attempt.
        outcome: The outcome of the attempt, or ``None`` when the reply
            was malformed.
        elapsed: The duration of the attempt in seconds.
    """
    if isinstance(outcome, Success):
        kind, status_code = outcome.kind, outcome.status_code
        message = f"{request.method} {request.url} -> {status_code}"
    elif isinstance(outcome, Failure):
        kind, status_code = outcome.kind, None
        error_name = type(outcome.error.cause or outcome.error).__name__
        message = f"{request.method} {request.url} -> {error_name}"
    else:
        kind, status_code = "malformed", None
        message = f"{request.method} {request.url} -> malformed response"
    return LogEvent(
        method=request.method,
        url=request.url,
        attempt=attempt + 1,
        outcome_kind=kind,
        elapsed_ms=elapsed * 1000.0,
        message=message,
        status_code=status_code,
    )


def emit_event(sink: LogSink | None, event: LogEvent) -> None:
    r"""Send an event to a sink.

    A failing sink never affects the request: its exception is logged
    and dropped.
    """
    if sink is None:
        return
    try:
        sink.log(event)
    except Exception:  # noqa: BLE001
        logger.debug(f"Log sink {sink!r} failed on attempt {event.attempt}", exc_info=True)


def exhausted_error(
    request: WireRequest,
    attempt: int,
    outcome: AttemptOutcome,
    response: HttpResponse | None,
) -> RequestFailedError:
    r"""Build the error raised once a retryable outcome has no retry left.

    Args:
        request: The request that was sent.
        attempt: The zero-indexed last attempt.
        outcome: The outcome of the last attempt.
        response: The response of the last attempt, if one was received.
    """
    attempts = attempt + 1
    if isinstance(outcome, Failure):
        error = outcome.error
        msg = (
            f"{request.method} request to {request.url} failed after {attempts} attempts: "
            f"{error.message}"
        )
        return RequestFailedError(
            method=request.method,
            url=request.url,
            message=msg,
            attempts=attempts,
            cause=error,
        )
    msg = (
        f"{request.method} request to {request.url} failed with status "
        f"{outcome.status_code} after {attempts} attempts"
    )
    return RequestFailedError(
        method=request.method,
        url=request.url,
        message=msg,
        attempts=attempts,
        response=response,
    )
