r"""Synchronous HTTP client with automatic retry logic.

``HttpClient`` composes an immutable ``ClientConfig``, an engine and a
``Transport``. The transport and the retry policy are built once when
the client is created, so every call shares them.
"""

from __future__ import annotations

__all__ = ["HttpClient"]

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING, Any

from aresclient.core.client_logic import build_request_spec
from aresclient.core.config import ClientConfig
from aresclient.engine import HttpxEngine
from aresclient.transport import Transport

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence
    from concurrent.futures import Future
    from types import TracebackType
    from typing import Self

    from aresclient.cancel import CancelToken
    from aresclient.engine import BaseEngine
    from aresclient.methods import HttpMethod
    from aresclient.request_spec import Body, FilePart, Part
    from aresclient.response import HttpResponse

logger: logging.Logger = logging.getLogger(__name__)


class HttpClient:
    r"""Synchronous HTTP client with automatic retry logic.

    Every call is retried on transport errors and on 429 and 5xx
    responses, with exponential backoff and jitter, honoring the
    ``Retry-After`` header. Other status codes, including 4xx, are
    returned as ordinary responses.

    The client owns its engine when it creates it, and closes it when
    the client is closed or its ``with`` block exits. An engine passed
    in by the caller is left open.

    Args:
        config: Optional configuration. If ``None``, a default
            ``ClientConfig`` is used.
        engine: Optional engine. If ``None``, an ``HttpxEngine`` is
            created with the TLS verification of ``config``.
        max_workers: Number of worker threads used by ``submit()``.

    Example:
        ```pycon
        >>> from aresclient import ClientConfig, HttpClient
        >>> config = ClientConfig(base_url="https://api.example.com").with_token("abc")
        >>> with HttpClient(config) as client:  # doctest: +SKIP
        ...     response = client.get("users", params={"page": 2})
        ...     created = client.post("users", json={"name": "Ada"})
        ...

        ```
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        engine: BaseEngine | None = None,
        max_workers: int | None = None,
    ) -> None:
        self._config: ClientConfig = config or ClientConfig()
        self._owns_engine = engine is None
        self._engine: BaseEngine = engine or HttpxEngine(verify=self._config.verify)
        self._transport = Transport(
            self._engine, log_sink=self._config.log_sink, timeout=self._config.timeout
        )
        self._policy = self._config.retry_policy()
        self._max_workers = max_workers
        self._executor: ThreadPoolExecutor | None = None

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}(config={self._config!r})"

    @classmethod
    def create(cls, base_url: str = "", **kwargs: Any) -> HttpClient:
        r"""Create a client from configuration keyword arguments.

        Args:
            base_url: The base URL of the client.
            **kwargs: Other ``ClientConfig`` fields.

        Example:
            ```pycon
            >>> from aresclient import HttpClient
            >>> client = HttpClient.create("https://api.example.com", max_retries=5)
            >>> client.config.max_retries
            5
            >>> client.close()

            ```
        """
        return cls(ClientConfig(base_url=base_url, **kwargs))

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def transport(self) -> Transport:
        return self._transport

    def close(self) -> None:
        r"""Close the worker threads and the engine owned by the client."""
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
        if self._owns_engine:
            self._engine.close()

    def request(
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
                ``FilePart`` values upload files.
            multipart: Optional verbatim multipart parts.
            body: Optional pre-built body.
            timeout: Optional per-attempt timeout overriding the config.
            cancel: Optional token cancelling the call.

        Returns:
            The response.

        Raises:
            UnsupportedMethodError: If the method is not supported.
            EncodeError: If the body cannot be encoded.
            RequestFailedError: If the request fails after all retries.
            CancelledRequestError: If the token fired.

        Example:
            ```pycon
            >>> from aresclient import HttpClient
            >>> with HttpClient() as client:  # doctest: +SKIP
            ...     response = client.request("GET", "https://api.example.com/data")
            ...

            ```
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
        return self._transport.send(spec, self._policy, cancel=cancel, timeout=timeout)

    def submit(self, method: str | HttpMethod, url: str, **kwargs: Any) -> Future[HttpResponse]:
        r"""Send an HTTP request on a worker thread.

        Args:
            method: The HTTP method.
            url: The URL, absolute or relative to the base URL.
            **kwargs: Additional keyword arguments (see request() method).

        Returns:
            A future completed with the response, or with the error of
            the call.

        Example:
            ```pycon
            >>> from aresclient import HttpClient
            >>> with HttpClient() as client:  # doctest: +SKIP
            ...     future = client.submit("GET", "https://api.example.com/data")
            ...     response = future.result()
            ...

            ```
        """
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self._max_workers, thread_name_prefix="aresclient"
            )
        return self._executor.submit(self.request, method, url, **kwargs)

    def get(self, url: str, **kwargs: Any) -> HttpResponse:
        r"""Send an HTTP GET request with automatic retry logic.

        Args:
            url: The URL to send the GET request to.
            **kwargs: Additional keyword arguments (see request() method).
        """
        return self.request("GET", url, **kwargs)

    def post(self, url: str, **kwargs: Any) -> HttpResponse:
        r"""Send an HTTP POST request with automatic retry logic.

        Args:
            url: The URL to send the POST request to.
            **kwargs: Additional keyword arguments (see request() method).
        """
        return self.request("POST", url, **kwargs)

    def put(self, url: str, **kwargs: Any) -> HttpResponse:
        r"""Send an HTTP PUT request with automatic retry logic.

        Args:
            url: The URL to send the PUT request to.
            **kwargs: Additional keyword arguments (see request() method).
        """
        return self.request("PUT", url, **kwargs)

    def patch(self, url: str, **kwargs: Any) -> HttpResponse:
        r"""Send an HTTP PATCH request with automatic retry logic.

        Args:
            url: The URL to send the PATCH request to.
            **kwargs: Additional keyword arguments (see request() method).
        """
        return self.request("PATCH", url, **kwargs)

    def delete(self, url: str, **kwargs: Any) -> HttpResponse:
        r"""Send an HTTP DELETE request with automatic retry logic.

        Args:
            url: The URL to send the DELETE request to.
            **kwargs: Additional keyword arguments (see request() method).
        """
        return self.request("DELETE", url, **kwargs)

    def head(self, url: str, **kwargs: Any) -> HttpResponse:
        r"""Send an HTTP HEAD request with automatic retry logic.

        Args:
            url: The URL to send the HEAD request to.
            **kwargs: Additional keyword arguments (see request() method).
        """
        return self.request("HEAD", url, **kwargs)

    def options(self, url: str, **kwargs: Any) -> HttpResponse:
        r"""Send an HTTP OPTIONS request with automatic retry logic.

        Args:
            url: The URL to send the OPTIONS request to.
            **kwargs: Additional keyword arguments (see request() method).
        """
        return self.request("OPTIONS", url, **kwargs)
