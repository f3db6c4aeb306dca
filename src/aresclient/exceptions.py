r"""Exception hierarchy for HTTP requests issued through aresclient.

Every fatal condition surfaces as a subclass of ``HttpRequestError``
carrying the method, the URL and the original cause. HTTP status codes
(4xx/5xx) are never errors on their own: they are returned as ordinary
responses, except when a retryable status is still being returned after
all retries are exhausted.
"""

from __future__ import annotations

__all__ = [
    "CancelledRequestError",
    "EncodeError",
    "HttpRequestError",
    "MalformedResponseError",
    "MissingFileError",
    "RequestFailedError",
    "TransportError",
    "UnsupportedMethodError",
]

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from aresclient.response import HttpResponse


class HttpRequestError(RuntimeError):
    r"""Base class of all errors raised while issuing a request.

    Args:
        method: The HTTP method of the request (e.g. ``"GET"``).
        url: The URL of the request.
        message: A human readable description of the failure.
        cause: The original exception, if any.

    Example:
        ```pycon
        >>> from aresclient.exceptions import HttpRequestError
        >>> exc = HttpRequestError(method="GET", url="https://example.com", message="boom")
        >>> exc.method, exc.url
        ('GET', 'https://example.com')
        >>> str(exc)
        'boom'

        ```
    """

    def __init__(
        self,
        method: str,
        url: str,
        message: str,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.method = method
        self.url = url
        self.message = message
        self.cause = cause

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}(method={self.method!r}, url={self.url!r})"


class EncodeError(HttpRequestError):
    r"""Raised when a request cannot be turned into a wire request.

    Encoding errors are never retried.
    """


class UnsupportedMethodError(EncodeError):
    r"""Raised when the HTTP method is not one of the supported verbs."""


class MissingFileError(EncodeError):
    r"""Raised when a file to upload does not exist at encode time.

    Args:
        path: The path that could not be found.
    """

    def __init__(
        self,
        method: str,
        url: str,
        message: str,
        path: str,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(method=method, url=url, message=message, cause=cause)
        self.path = path


class TransportError(HttpRequestError):
    r"""Raised by an engine when no response was received.

    This covers connection failures, timeouts, TLS and DNS errors. These
    errors are retried according to the retry policy.
    """


class MalformedResponseError(HttpRequestError):
    r"""Raised when the raw reply of the engine cannot be parsed.

    Malformed responses are never retried.
    """


class RequestFailedError(HttpRequestError):
    r"""Raised when a logical call fails after its last attempt.

    Args:
        attempts: The number of physical attempts that were made.
        response: The last response if the final attempt received one.
            It is set when a retryable status code (429 or 5xx) is still
            returned after all retries are exhausted.
    """

    def __init__(
        self,
        method: str,
        url: str,
        message: str,
        attempts: int,
        cause: Exception | None = None,
        response: HttpResponse | None = None,
    ) -> None:
        super().__init__(method=method, url=url, message=message, cause=cause)
        self.attempts = attempts
        self.response = response

    @property
    def status_code(self) -> int | None:
        r"""The status code of the last response, if any."""
        return None if self.response is None else self.response.status_code


class CancelledRequestError(HttpRequestError):
    r"""Raised when the caller cancels a logical call.

    No further attempts are made after a cancellation.
    """
