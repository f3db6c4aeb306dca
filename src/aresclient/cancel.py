r"""Caller-controlled cancellation of logical calls.

A ``CancelToken`` can be cancelled from any thread. The transports
check it before every attempt, cut the backoff wait short when it
fires, and stop waiting on the in-flight send.
"""

from __future__ import annotations

__all__ = ["CancelToken"]

import asyncio
import threading
from contextlib import suppress
from typing import TYPE_CHECKING

from aresclient.exceptions import CancelledRequestError

if TYPE_CHECKING:
    from collections.abc import Callable


class CancelToken:
    r"""Thread-safe cancellation signal.

    Example:
        ```pycon
        >>> from aresclient.cancel import CancelToken
        >>> token = CancelToken()
        >>> token.cancelled
        False
        >>> token.cancel()
        >>> token.cancelled
        True
        >>> token.wait(10.0)  # returns immediately once cancelled
        True

        ```
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: list[Callable[[], None]] = []

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}(cancelled={self.cancelled})"

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        r"""Fire the token. Calling it more than once has no effect."""
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            callbacks = list(self._callbacks)
            self._callbacks.clear()
        for callback in callbacks:
            callback()

    def add_callback(self, callback: Callable[[], None]) -> Callable[[], None]:
        r"""Register a function called once when the token fires.

        The callback runs immediately if the token already fired.

        Args:
            callback: The function to call.

        Returns:
            A function that unregisters the callback.
        """
        with self._lock:
            fired = self._event.is_set()
            if not fired:
                self._callbacks.append(callback)
        if fired:
            callback()

        def remove() -> None:
            with self._lock:
                if callback in self._callbacks:
                    self._callbacks.remove(callback)

        return remove

    def wait(self, timeout: float) -> bool:
        r"""Block until the token fires or ``timeout`` seconds elapse.

        Returns:
            ``True`` if the token fired.
        """
        return self._event.wait(timeout)

    async def wait_async(self, timeout: float) -> bool:
        r"""Suspend until the token fires or ``timeout`` seconds elapse.

        Returns:
            ``True`` if the token fired.
        """
        waiter = self.as_future()
        try:
            with suppress(asyncio.TimeoutError):
                await asyncio.wait_for(waiter, timeout)
        finally:
            if not waiter.done():
                waiter.cancel()
        return self.cancelled

    def as_future(self) -> asyncio.Future[None]:
        r"""Return a future of the running loop resolved when the token fires."""
        loop = asyncio.get_running_loop()
        future: asyncio.Future[None] = loop.create_future()

        def _resolve() -> None:
            if not future.done():
                future.set_result(None)

        def _wake() -> None:
            if loop.is_closed():
                return
            loop.call_soon_threadsafe(_resolve)

        remove = self.add_callback(_wake)
        future.add_done_callback(lambda _: remove())
        return future

    def raise_if_cancelled(self, method: str, url: str) -> None:
        r"""Raise ``CancelledRequestError`` if the token fired."""
        if self.cancelled:
            msg = f"{method} request to {url} was cancelled"
            raise CancelledRequestError(method=method, url=url, message=msg)
