r"""aresclient - HTTP client core with retries and a normalized response.

This package issues HTTP requests through ``httpx``, retries failed
attempts under a configurable policy, and returns a read-once response
wrapper with lazy JSON decoding.

Key Features:
    - Automatic retry of transport errors and 429/5xx responses
    - Exponential backoff with configurable jitter and ``Retry-After`` support
    - JSON, form and multipart-with-files request bodies
    - Redirect-aware parsing that keeps only the final response headers
    - Dot-path JSON access (``response.json("a.b")``)
    - Immutable configuration with a fluent builder
    - Sync, thread-pool and ``asyncio`` call shapes with cancellation
    - One structured log event per attempt through a pluggable sink

Example:
    ```pycon
    >>> from aresclient import ClientConfig, HttpClient, LogSink
    >>> config = (
    ...     ClientConfig(base_url="https://api.example.com")
    ...     .with_token("secret")
    ...     .with_retry(max_retries=5, base_delay=0.5)
    ...     .with_logging(LogSink.to_stream())
    ... )
    >>> with HttpClient(config) as client:  # doctest: +SKIP
    ...     response = client.get("users/42")
    ...     name = response.json("data.name")
    ...

    ```
"""

from __future__ import annotations

__all__ = [
    "ABSENT",
    "AsyncHttpClient",
    "CancelToken",
    "CancelledRequestError",
    "ClientConfig",
    "EncodeError",
    "FilePart",
    "HttpClient",
    "HttpMethod",
    "HttpRequestError",
    "HttpResponse",
    "LogEvent",
    "LogSink",
    "MalformedResponseError",
    "MissingFileError",
    "Part",
    "RequestFailedError",
    "RequestSpec",
    "RetryPolicy",
    "TransportError",
    "UnsupportedMethodError",
    "__version__",
]

from importlib.metadata import PackageNotFoundError, version

from aresclient.cancel import CancelToken
from aresclient.client import HttpClient
from aresclient.client_async import AsyncHttpClient
from aresclient.core.config import ClientConfig
from aresclient.exceptions import (
    CancelledRequestError,
    EncodeError,
    HttpRequestError,
    MalformedResponseError,
    MissingFileError,
    RequestFailedError,
    TransportError,
    UnsupportedMethodError,
)
from aresclient.methods import HttpMethod
from aresclient.request_spec import FilePart, Part, RequestSpec
from aresclient.response import ABSENT, HttpResponse
from aresclient.retry import RetryPolicy
from aresclient.sinks import LogEvent, LogSink

try:
    __version__ = version(__name__)
except PackageNotFoundError:  # pragma: no cover
    # Package is not installed, fallback if needed
    __version__ = "0.0.0"
