r"""Synchronous transport executing a logical call with retries.

The transport encodes the request once, then sends the same wire
request through the engine until the retry policy stops the loop. It is
the only component that sleeps between attempts.
"""

from __future__ import annotations

__all__ = ["Transport"]

import logging
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import TYPE_CHECKING

from aresclient.core.attempt import attempt_event, emit_event, exhausted_error, read_reply
from aresclient.core.config import DEFAULT_TIMEOUT
from aresclient.core.validation import validate_timeout
from aresclient.encoder import RequestEncoder
from aresclient.exceptions import MalformedResponseError, TransportError
from aresclient.retry.outcome import Failure

if TYPE_CHECKING:
    from aresclient.cancel import CancelToken
    from aresclient.engine import BaseEngine, RawReply
    from aresclient.request_spec import RequestSpec, WireRequest
    from aresclient.response import HttpResponse
    from aresclient.retry.outcome import AttemptOutcome
    from aresclient.retry.policy import RetryPolicy
    from aresclient.sinks import LogSink

logger: logging.Logger = logging.getLogger(__name__)


class Transport:
    r"""Send requests through an engine, retrying per a ``RetryPolicy``.

    A transport holds no per-call state and can be shared by several
    threads, as long as its engine can.

    Args:
        engine: The engine performing the network I/O.
        encoder: The encoder turning request specs into wire requests.
        log_sink: Optional sink receiving one event per attempt.
        timeout: Timeout in seconds of each physical attempt.

    Example:
        ```pycon
        >>> from aresclient.engine import HttpxEngine
        >>> from aresclient.request_spec import RequestSpec
        >>> from aresclient.retry import RetryPolicy
        >>> from aresclient.transport import Transport
        >>> transport = Transport(HttpxEngine())
        >>> response = transport.send(
        ...     RequestSpec.build("GET", "https://api.example.com/data"),
        ...     RetryPolicy(max_retries=2),
        ... )  # doctest: +SKIP

        ```
    """

    def __init__(
        self,
        engine: BaseEngine,
        encoder: RequestEncoder | None = None,
        log_sink: LogSink | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        validate_timeout(timeout)
        self.engine = engine
        self.encoder = encoder or RequestEncoder()
        self.log_sink = log_sink
        self.timeout = timeout

    def send(
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
                before each attempt, abandons the in-flight send and
                interrupts the backoff wait.
            timeout: Optional per-attempt timeout overriding the
                transport timeout.

        Returns:
            The response of the last attempt. Status codes that are not
            retried (e.g. 404) are returned as ordinary responses.

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
            outcome, response = self._attempt(request, attempt, cancel)
            if cancel is not None:
                cancel.raise_if_cancelled(request.method, request.url)

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
            self._wait(request, decision.delay, cancel)

        # The policy always stops the loop on its last attempt
        msg = f"Retry loop of {request.method} {request.url} ended without a decision"
        raise RuntimeError(msg)

    def _attempt(
        self, request: WireRequest, attempt: int, cancel: CancelToken | None
    ) -> tuple[AttemptOutcome, HttpResponse | None]:
        start_time = time.perf_counter()
        try:
            reply = self._send(request, cancel)
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

    def _send(self, request: WireRequest, cancel: CancelToken | None) -> RawReply:
        r"""Send the request, giving up on it as soon as ``cancel`` fires.

        With a token, the engine runs on a worker thread raced against
        the token. A send that is given up keeps running on its worker
        until the per-attempt timeout, and its reply is dropped.
        """
        if cancel is None:
            return self.engine.send(request)

        fired: Future[None] = Future()
        remove = cancel.add_callback(lambda: fired.set_result(None))
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="aresclient-send")
        try:
            sending = executor.submit(self.engine.send, request)
            wait([sending, fired], return_when=FIRST_COMPLETED)
            if not sending.done():
                logger.debug(f"{request.method} to {request.url}: cancelled while sending")
                cancel.raise_if_cancelled(request.method, request.url)
            return sending.result()
        finally:
            remove()
            executor.shutdown(wait=False)

    def _wait(self, request: WireRequest, delay: float, cancel: CancelToken | None) -> None:
        if cancel is None:
            time.sleep(delay)
            return
        if cancel.wait(delay):
            logger.debug(f"{request.method} to {request.url}: cancelled during backoff")
            cancel.raise_if_cancelled(request.method, request.url)
