r"""Asynchronous HTTP client with automatic retry logic.

``AsyncHttpClient`` is the ``asyncio`` counterpart of ``HttpClient``.
Backoff waits are non-blocking, so concurrent calls sharing a client do
not delay each other.
"""

from __future__ import annotations

__all__ = ["AsyncHttpClient"]

import logging
from typing import TYPE_CHECKING, Any

from aresclient.core.client_logic import build_request_spec
from aresclient.core.config import ClientConfig
from aresclient.engine import AsyncHttpxEngine
from aresclient.transport_async import AsyncTransport

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence
    from types import TracebackType
    from typing import Self

    from aresclient.cancel import CancelToken
    from aresclient.engine import BaseAsyncEngine
    from aresclient.methods import HttpMethod
    from aresclient.request_spec import Body, FilePart, Part
    from aresclient.response import HttpResponse

logger: logging.Logger = logging.getLogger(__name__)


class AsyncHttpClient:
    r"""Asynchronous HTTP client with automatic retry logic.

    Args:
        config: Optional configuration. If ``None``, a default
            ``ClientConfig`` is used.
        engine: Optional async engine. If ``None``, an
            ``AsyncHttpxEngine`` is created with the TLS verification of
            ``config``. Only a created engine is closed by the client.

    Example:
        ```pycon
        >>> import asyncio
        >>> from aresclient import AsyncHttpClient, ClientConfig
        >>> async def main():
        ...     config = ClientConfig(base_url="https://api.example.com", max_retries=5)
        ...     async with AsyncHttpClient(config) as client:
        ...         responses = await asyncio.gather(client.get("data1"), client.get("data2"))
        ...     return responses
        ...
        >>> asyncio.run(main())  # doctest: +SKIP

        ```
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        engine: BaseAsyncEngine | None = None,
    ) -> None:
        self._config: ClientConfig = config or ClientConfig()
        self._owns_engine = engine is None
        self._engine: BaseAsyncEngine = engine or AsyncHttpxEngine(verify=self._config.verify)
        self._transport = AsyncTransport(
            self._engine, log_sink=self._config.log_sink, timeout=self._config.timeout
        )
        self._policy = self._config.retry_policy()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}(config={self._config!r})"

    @classmethod
    def create(cls, base_url: str = "", **kwargs: Any) -> AsyncHttpClient:
        r"""Create a client from configuration keyword arguments.

        Args:
            base_url: The base URL of the client.
            **kwargs: Other ``ClientConfig`` fields.
        """
        return cls(ClientConfig(base_url=base_url, **kwargs))

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def transport(self) -> AsyncTransport:
        return self._transport

    async def aclose(self) -> None:
        r"""Close the engine owned by the client."""
        if self._owns_engine:
            await self._engine.aclose()

    async def request(
        self,
        method: str | HttpMethod,
        url: str,
        *,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | Iterable[tuple[str, str]] | None = None,
        json: Any = None,
        form: Mapping[str, str | FilePart] | None = None,
        multipart: Sequence[Part] | None = None,
        body: Body | None = None,
        timeout: float | None = None,
        cancel: CancelToken | None = None,
    ) -> HttpResponse:
        r"""Send an HTTP request with automatic retry logic.

        Args:
            method: HTTP method (GET, POST, PUT, PATCH, DELETE, HEAD, OPTIONS).
                The name is case-insensitive.
            url: The URL, absolute or relative to the base URL.
            params: Optional query parameters.
            headers: Optional headers. They override the default headers
                of the same name.
            json: Optional value sent as a JSON body.
            form: Optional fields sent as a ``multipart/form-data`` body.
            multipart: Optional verbatim multipart parts.
            body: Optional pre-built body.
            timeout: Optional per-attempt timeout overriding the config.
            cancel: Optional token cancelling the call, including the
                in-flight send.

        Returns:
            The response.

        Raises:
            UnsupportedMethodError: If the method is not supported.
            EncodeError: If the body cannot be encoded.
            RequestFailedError: If the request fails after all retries.
            CancelledRequestError: If the token fired.
        """
        spec = build_request_spec(
            self._config,
            method,
            url,
            params=params,
            headers=headers,
            json=json,
            form=form,
            multipart=multipart,
            body=body,
        )
        logger.debug(f"Sending {spec.method.value} request to {spec.url}")
        return await self._transport.send(spec, self._policy, cancel=cancel, timeout=timeout)

    async def get(self, url: str, **kwargs: Any) -> HttpResponse:
        r"""Send an HTTP GET request with automatic retry logic."""
        return await self.request("GET", url, **kwargs)

    async def post(self, url: str, **kwargs: Any) -> HttpResponse:
        r"""Send an HTTP POST request with automatic retry logic."""
        return await self.request("POST", url, **kwargs)

    async def put(self, url: str, **kwargs: Any) -> HttpResponse:
        r"""Send an HTTP PUT request with automatic retry logic."""
        return await self.request("PUT", url, **kwargs)

    async def patch(self, url: str, **kwargs: Any) -> HttpResponse:
        r"""Send an HTTP PATCH request with automatic retry logic."""
        return await self.request("PATCH", url, **kwargs)

    async def delete(self, url: str, **kwargs: Any) -> HttpResponse:
        r"""Send an HTTP DELETE request with automatic retry logic."""
        return await self.request("DELETE", url, **kwargs)

    async def head(self, url: str, **kwargs: Any) -> HttpResponse:
        r"""Send an HTTP HEAD request with automatic retry logic."""
        return await self.request("HEAD", url, **kwargs)

    async def options(self, url: str, **kwargs: Any) -> HttpResponse:
        r"""Send an HTTP OPTIONS request with automatic retry logic."""
        return await self.request("OPTIONS", url, **kwargs)
