r"""Engines sending wire requests over the network.

An engine is the only component performing network I/O. It receives a
``WireRequest`` and returns a ``RawReply``: the status and header lines
of every hop of the exchange (one block per followed redirect) and the
body of the final response, read exactly once. Any failure to obtain a
response is raised as ``TransportError``.

The engines provided here are built on ``httpx``, which owns the
connection pool, TLS and protocol framing.
"""

from __future__ import annotations

__all__ = [
    "AsyncHttpxEngine",
    "BaseAsyncEngine",
    "BaseEngine",
    "HttpxEngine",
    "RawReply",
    "raw_header_lines",
]

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

import httpx

from aresclient.exceptions import TransportError

if TYPE_CHECKING:
    from types import TracebackType
    from typing import Self

    from aresclient.request_spec import WireRequest

logger: logging.Logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RawReply:
    r"""Raw reply of an engine.

    Attributes:
        header_lines: Status and header lines of every hop, each block
            followed by an empty line.
        body: The body of the final response.
    """

    header_lines: tuple[str, ...]
    body: bytes = b""


def raw_header_lines(response: httpx.Response) -> tuple[str, ...]:
    r"""Return the status and header lines of a response and its redirects.

    Args:
        response: The final response. Its ``history`` holds the
            responses of the followed redirects.

    Returns:
        One block per hop, oldest first: the status line, the header
        lines, then an empty line.

    Example:
        ```pycon
        >>> import httpx
        >>> from aresclient.engine import raw_header_lines
        >>> response = httpx.Response(200, headers={"Content-Type": "text/plain"})
        >>> raw_header_lines(response)
        ('HTTP/1.1 200 OK', 'content-type: text/plain', '')

        ```
    """
    lines: list[str] = []
    for hop in [*response.history, response]:
        lines.append(f"{hop.http_version} {hop.status_code} {hop.reason_phrase}".rstrip())
        lines.extend(f"{name}: {value}" for name, value in hop.headers.multi_items())
        lines.append("")
    return tuple(lines)


def _transport_error(request: WireRequest, exc: httpx.RequestError) -> TransportError:
    msg = f"{request.method} request to {request.url} failed: {type(exc).__name__}: {exc}"
    return TransportError(method=request.method, url=request.url, message=msg, cause=exc)


class BaseEngine(ABC):
    r"""Synchronous engine."""

    @abstractmethod
    def send(self, request: WireRequest) -> RawReply:
        r"""Send a request and return its raw reply.

        Raises:
            TransportError: If no response was received.
        """

    def close(self) -> None:  # noqa: B027
        r"""Release the resources of the engine."""


class BaseAsyncEngine(ABC):
    r"""Asynchronous engine."""

    @abstractmethod
    async def send(self, request: WireRequest) -> RawReply:
        r"""Send a request and return its raw reply.

        Raises:
            TransportError: If no response was received.
        """

    async def aclose(self) -> None:  # noqa: B027
        r"""Release the resources of the engine."""


class HttpxEngine(BaseEngine):
    r"""Engine sending requests with an ``httpx.Client``.

    Redirects are followed and reported hop by hop in the raw reply.

    Args:
        client: Optional ``httpx.Client``. It is closed by ``close()``
            only when the engine created it.
        verify: Whether TLS certificates are verified. Only used when
            the engine creates the client.
    """

    def __init__(self, client: httpx.Client | None = None, *, verify: bool = True) -> None:
        self._owns_client = client is None
        self._client = client if client is not None else httpx.Client(verify=verify)

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    @property
    def client(self) -> httpx.Client:
        return self._client

    def send(self, request: WireRequest) -> RawReply:
        httpx_request = self._client.build_request(
            request.method,
            request.url,
            headers=list(request.headers),
            content=request.content or None,
            timeout=request.timeout,
        )
        try:
            response = self._client.send(httpx_request, follow_redirects=True)
        except httpx.RequestError as exc:
            raise _transport_error(request, exc) from exc
        return RawReply(header_lines=raw_header_lines(response), body=response.content)

    def close(self) -> None:
        if self._owns_client and not self._client.is_closed:
            self._client.close()


class AsyncHttpxEngine(BaseAsyncEngine):
    r"""Engine sending requests with an ``httpx.AsyncClient``.

    Args:
        client: Optional ``httpx.AsyncClient``. It is closed by
            ``aclose()`` only when the engine created it.
        verify: Whether TLS certificates are verified. Only used when
            the engine creates the client.
    """

    def __init__(self, client: httpx.AsyncClient | None = None, *, verify: bool = True) -> None:
        self._owns_client = client is None
        self._client = client if client is not None else httpx.AsyncClient(verify=verify)

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    @property
    def client(self) -> httpx.AsyncClient:
        return self._client

    async def send(self, request: WireRequest) -> RawReply:
        httpx_request = self._client.build_request(
            request.method,
            request.url,
            headers=list(request.headers),
            content=request.content or None,
            timeout=request.timeout,
        )
        try:
            response = await self._client.send(httpx_request, follow_redirects=True)
        except httpx.RequestError as exc:
            raise _transport_error(request, exc) from exc
        return RawReply(header_lines=raw_header_lines(response), body=response.content)

    async def aclose(self) -> None:
        if self._owns_client and not self._client.is_closed:
            await self._client.aclose()
