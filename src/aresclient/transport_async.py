r"""Asynchronous transport executing a logical call with retries.

This is the ``asyncio`` counterpart of ``Transport``. Backoff waits use
``asyncio.sleep`` so other tasks run while a call is waiting, and a
``CancelToken`` aborts the in-flight send as well as the wait.
"""

from __future__ import annotations

__all__ = ["AsyncTransport"]

import asyncio
import logging
import time
from typing import TYPE_CHECKING

from aresclient.core.attempt import attempt_event, emit_event, exhausted_error, read_reply
from aresclient.core.config import DEFAULT_TIMEOUT
from aresclient.core.validation import validate_timeout
from aresclient.encoder import RequestEncoder
from aresclient.exceptions import MalformedResponseError, TransportError
from aresclient.retry.outcome import Failure

if TYPE_CHECKING:
    from aresclient.cancel import CancelToken
    from aresclient.engine import BaseAsyncEngine, RawReply
    from aresclient.request_spec import RequestSpec, WireRequest
    from aresclient.response import HttpResponse
    from aresclient.retry.outcome import AttemptOutcome
    from aresclient.retry.policy import RetryPolicy
    from aresclient.sinks import LogSink

logger: logging.Logger = logging.getLogger(__name__)


class AsyncTransport:
    r"""Send requests through an async engine, retrying per a ``RetryPolicy``.

    Args:
        engine: The async engine performing the network I/O.
        encoder: The encoder turning request specs into wire requests.
        log_sink: Optional sink receiving one event per attempt.
        timeout: Timeout in seconds of each physical attempt.

    Example:
        ```pycon
        >>> import asyncio
        >>> from aresclient.engine import AsyncHttpxEngine
        >>> from aresclient.request_spec import RequestSpec
        >>> from aresclient.retry import RetryPolicy
        >>> from aresclient.transport_async import AsyncTransport
        >>> async def main():
        ...     async with AsyncHttpxEngine() as engine:
        ...         transport = AsyncTransport(engine)
        ...         return await transport.send(
        ...             RequestSpec.build("GET", "https://api.example.com/data"),
        ...             RetryPolicy(max_retries=2),
        ...         )
        ...
        >>> asyncio.run(main())  # doctest: +SKIP

        ```
    """

    def __init__(
        self,
        engine: BaseAsyncEngine,
        encoder: RequestEncoder | None = None,
        log_sink: LogSink | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        validate_timeout(timeout)
        self.engine = engine
        self.encoder = encoder or RequestEncoder()
        self.log_sink = log_sink
        self.timeout = timeout

    async def send(
        self,
        spec: RequestSpec,
        policy: RetryPolicy,
        cancel: CancelToken | None = None,
        timeout: float | None = None,
    ) -> HttpResponse:
        r"""Execute a logical call.

        Args:
            spec: The request to send.
            policy: The retry policy of the call.
            cancel: Optional token cancelling the call. It is checked
                before each attempt, aborts the in-flight send and
                interrupts the backoff wait.
            timeout: Optional per-attempt timeout overriding the
                transport timeout.

        Returns:
            The response of the last attempt.

        Raises:
            EncodeError: If the request cannot be encoded. Nothing is sent.
            MalformedResponseError: If a reply cannot be parsed.
            RequestFailedError: If the last attempt failed with a
                transport error or a retryable status code.
            CancelledRequestError: If the token fired.
        """
        if timeout is not None:
            validate_timeout(timeout)
        request = self.encoder.encode(spec, timeout=self.timeout if timeout is None else timeout)

        for attempt in range(policy.max_retries + 1):
            if cancel is not None:
                cancel.raise_if_cancelled(request.method, request.url)
            outcome, response = await self._attempt(request, attempt, cancel)

            decision = policy.decide(attempt, outcome)
            if not decision.retryable:
                return response
            if decision.exhausted:
                logger.debug(f"{request.method} to {request.url}: giving up ({decision.reason})")
                error = exhausted_error(request, attempt, outcome, response)
                if isinstance(outcome, Failure):
                    raise error from outcome.error
                raise error

            logger.debug(
                f"{request.method} to {request.url}: will retry in {decision.delay:.2f}s "
                f"({decision.reason}, attempt {attempt + 1}/{policy.max_retries + 1})"
            )
            await self._wait(request, decision.delay, cancel)

        # The policy always stops the loop on its last attempt
        msg = f"Retry loop of {request.method} {request.url} ended without a decision"
        raise RuntimeError(msg)

    async def _attempt(
        self, request: WireRequest, attempt: int, cancel: CancelToken | None
    ) -> tuple[AttemptOutcome, HttpResponse | None]:
        start_time = time.perf_counter()
        try:
            reply = await self._send(request, cancel)
        except TransportError as exc:
            outcome = Failure(exc)
            emit_event(
                self.log_sink,
                attempt_event(request, attempt, outcome, time.perf_counter() - start_time),
            )
            return outcome, None

        try:
            outcome, response = read_reply(request, reply)
        except MalformedResponseError:
            emit_event(
                self.log_sink,
                attempt_event(request, attempt, None, time.perf_counter() - start_time),
            )
            raise
        emit_event(
            self.log_sink,
            attempt_event(request, attempt, outcome, time.perf_counter() - start_time),
        )
        return outcome, response

    async def _send(self, request: WireRequest, cancel: CancelToken | None) -> RawReply:
        if cancel is None:
            return await self.engine.send(request)

        send_task = asyncio.ensure_future(self.engine.send(request))
        cancelled = cancel.as_future()
        try:
            await asyncio.wait({send_task, cancelled}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            cancelled.cancel()
            if not send_task.done():
                send_task.cancel()
                logger.debug(f"{request.method} to {request.url}: aborting in-flight send")
                # Let the engine release the connection
                await asyncio.gather(send_task, return_exceptions=True)
        if send_task.cancelled():
            cancel.raise_if_cancelled(request.method, request.url)
        return send_task.result()

    async def _wait(self, request: WireRequest, delay: float, cancel: CancelToken | None) -> None:
        if cancel is None:
            await asyncio.sleep(delay)
            return
        if await cancel.wait_async(delay):
            logger.debug(f"{request.method} to {request.url}: cancelled during backoff")
            cancel.raise_if_cancelled(request.method, request.url)
