r"""Read-once response wrapper with lazy JSON decoding."""

from __future__ import annotations

__all__ = ["ABSENT", "HttpResponse"]

import json
import logging
import threading
from typing import TYPE_CHECKING, Any

import httpx

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

logger: logging.Logger = logging.getLogger(__name__)


class _Absent:
    r"""Marker returned by ``HttpResponse.json(path)`` for missing values."""

    _instance: _Absent | None = None

    def __new__(cls) -> _Absent:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "ABSENT"


ABSENT = _Absent()

_NOT_DECODED = object()
_NOT_JSON = object()


class HttpResponse:
    r"""Immutable view of a completed HTTP response.

    The body is held in memory: it was read from the wire exactly once
    by the engine, and every accessor works on that buffer. The only
    mutable state is the JSON cache, which is filled at most once.

    Args:
        status_code: The HTTP status code.
        headers: The response headers. Names are case-insensitive and
            repeated names keep all their values.
        content: The raw body.
        reason_phrase: The reason phrase of the status line.
        http_version: The protocol version of the status line.
        url: The URL of the request.

    Example:
        ```pycon
        >>> from aresclient.response import ABSENT, HttpResponse
        >>> response = HttpResponse(
        ...     200, {"Content-Type": "application/json"}, b'{"a": {"b": 2}}'
        ... )
        >>> response.ok(), response.successful(), response.client_error()
        (True, True, False)
        >>> response.json("a.b")
        2
        >>> response.json("a.c") is ABSENT
        True
        >>> response.header("content-type")
        'application/json'

        ```
    """

    def __init__(
        self,
        status_code: int,
        headers: httpx.Headers | Mapping[str, str] | Iterable[tuple[str, str]] | None = None,
        content: bytes = b"",
        reason_phrase: str = "",
        http_version: str = "1.1",
        url: str = "",
    ) -> None:
        self._status_code = status_code
        self._headers = httpx.Headers(headers)
        self._content = bytes(content)
        self.reason_phrase = reason_phrase
        self.http_version = http_version
        self.url = url
        self._json: Any = _NOT_DECODED
        self._json_lock = threading.Lock()

    def __repr__(self) -> str:
        return f"<{self.__class__.__qualname__} [{self._status_code} {self.reason_phrase}]>"

    def __str__(self) -> str:
        return self.body()

    @property
    def status_code(self) -> int:
        return self._status_code

    @property
    def content(self) -> bytes:
        return self._content

    def status(self) -> int:
        return self._status_code

    def successful(self) -> bool:
        r"""Return ``True`` for a 2xx status code."""
        return 200 <= self._status_code < 300

    def ok(self) -> bool:
        r"""Return ``True`` for a 200 status code."""
        return self._status_code == 200

    def client_error(self) -> bool:
        r"""Return ``True`` for a 4xx status code."""
        return 400 <= self._status_code < 500

    def server_error(self) -> bool:
        r"""Return ``True`` for a status code of 500 or more."""
        return self._status_code >= 500

    @property
    def encoding(self) -> str:
        r"""The charset of the ``Content-Type`` header, or ``utf-8``."""
        content_type = self._headers.get("content-type", "")
        for param in content_type.split(";")[1:]:
            key, _, value = param.partition("=")
            if key.strip().lower() == "charset" and value.strip():
                return value.strip().strip("\"'")
        return "utf-8"

    def body(self) -> str:
        r"""Return the body decoded as text.

        Undecodable bytes are replaced rather than raising.
        """
        try:
            return self._content.decode(self.encoding, errors="replace")
        except LookupError:
            return self._content.decode("utf-8", errors="replace")

    def header(self, name: str) -> str | None:
        r"""Return the first value of a header, or None if it is absent.

        Args:
            name: The header name. The lookup is case-insensitive.
        """
        values = self._headers.get_list(name)
        return values[0] if values else None

    def header_line(self, name: str) -> str | None:
        r"""Return all the values of a header joined with ``", "``."""
        return self._headers.get(name)

    def headers(self) -> dict[str, list[str]]:
        r"""Return every header with all its values.

        Names are lowercase and appear in the order of their first
        occurrence.
        """
        result: dict[str, list[str]] = {}
        for name, value in self._headers.multi_items():
            result.setdefault(name.lower(), []).append(value)
        return result

    def is_json(self) -> bool:
        r"""Return ``True`` if the body decodes as JSON."""
        return self._decoded_json() is not _NOT_JSON

    def json(self, path: str | None = None) -> Any:
        r"""Return the decoded JSON body, or a value inside it.

        The body is decoded on the first call and the result is cached,
        whether decoding succeeded or not.

        If the body is not valid JSON, the response itself is returned
        in place of the data. Callers must check the type of the result
        (or call ``is_json()``) to detect this case.

        Args:
            path: Optional dot-separated path of keys and list
                indices, e.g. ``"a.b"`` or ``"items.0.name"``.

        Returns:
            The decoded body, the value at ``path``, ``ABSENT`` if a key
            of ``path`` is missing or out of range, or the response
            itself if the body is not JSON.
        """
        data = self._decoded_json()
        if data is _NOT_JSON:
            return self
        if path is None:
            return data
        return self._lookup(data, path)

    def _decoded_json(self) -> Any:
        if self._json is not _NOT_DECODED:
            return self._json
        with self._json_lock:
            if self._json is _NOT_DECODED:
                try:
                    self._json = json.loads(self.body())
                except ValueError:
                    logger.debug(f"Response body of {self.url or 'request'} is not JSON")
                    self._json = _NOT_JSON
        return self._json

    @staticmethod
    def _lookup(data: Any, path: str) -> Any:
        value = data
        for segment in path.split("."):
            if isinstance(value, dict) and segment in value:
                value = value[segment]
            elif isinstance(value, list) and segment.isdecimal() and int(segment) < len(value):
                value = value[int(segment)]
            else:
                return ABSENT
        return value
