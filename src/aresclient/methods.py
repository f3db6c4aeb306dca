r"""Closed set of HTTP methods supported by the client."""

from __future__ import annotations

__all__ = ["HttpMethod"]

from enum import Enum

from aresclient.exceptions import UnsupportedMethodError


class HttpMethod(str, Enum):
    r"""HTTP methods accepted by the request encoder and the clients.

    Example:
        ```pycon
        >>> from aresclient.methods import HttpMethod
        >>> HttpMethod.parse("post")
        <HttpMethod.POST: 'POST'>
        >>> HttpMethod.GET.value
        'GET'

        ```
    """

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"

    @classmethod
    def parse(cls, method: str | HttpMethod, url: str = "") -> HttpMethod:
        r"""Convert a method name into a ``HttpMethod``.

        Args:
            method: The method name. The lookup is case-insensitive.
            url: The URL of the request, only used in the error message.

        Returns:
            The matching ``HttpMethod``.

        Raises:
            UnsupportedMethodError: If the method is not supported.
        """
        if isinstance(method, HttpMethod):
            return method
        try:
            return cls(str(method).upper())
        except ValueError as exc:
            msg = f"Unsupported HTTP method: {method!r}"
            raise UnsupportedMethodError(
                method=str(method), url=url, message=msg, cause=exc
            ) from exc
