r"""Encoding of ``RequestSpec`` objects into ``WireRequest`` objects.

JSON bodies are serialized here. Multipart bodies are assembled with
``httpx``'s own request encoder, so the boundary generation and the
part layout are exactly the ones ``httpx`` would send.
"""

from __future__ import annotations

__all__ = ["RequestEncoder"]

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

import httpx

from aresclient.core.config import DEFAULT_TIMEOUT
from aresclient.exceptions import EncodeError, MissingFileError
from aresclient.methods import HttpMethod
from aresclient.request_spec import (
    EmptyBody,
    FilePart,
    FormBody,
    JsonBody,
    MultipartBody,
    RequestSpec,
    WireRequest,
)
from aresclient.utils.mime import guess_mime_type

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from aresclient.request_spec import Part

logger: logging.Logger = logging.getLogger(__name__)

# (field name, (filename, content, content type, part headers))
MultipartField = tuple[str, tuple[Any, ...]]


class RequestEncoder:
    r"""Turn a logical request into headers and body bytes.

    The encoder performs no network I/O. Form bodies with ``FilePart``
    values read the files from disk and may probe their first bytes to
    detect the MIME type.

    Example:
        ```pycon
        >>> from aresclient.encoder import RequestEncoder
        >>> from aresclient.request_spec import JsonBody, RequestSpec
        >>> spec = RequestSpec.build("POST", "https://example.com", body=JsonBody({"a": 1}))
        >>> wire = RequestEncoder().encode(spec, timeout=5.0)
        >>> wire.content
        b'{"a": 1}'
        >>> dict(wire.headers)["content-type"]
        'application/json'

        ```
    """

    def encode(self, spec: RequestSpec, timeout: float = DEFAULT_TIMEOUT) -> WireRequest:
        r"""Encode a request.

        Args:
            spec: The request to encode.
            timeout: The per-attempt timeout to attach to the wire request.

        Returns:
            The encoded request.

        Raises:
            UnsupportedMethodError: If the method is not supported.
            MissingFileError: If a file to upload does not exist.
            EncodeError: If the body cannot be encoded.
        """
        method = HttpMethod.parse(spec.method, url=spec.url)
        headers = spec.header_map()
        body = spec.body

        if isinstance(body, EmptyBody):
            content = b""
        elif isinstance(body, JsonBody):
            content = self._encode_json(method.value, spec.url, body)
            headers.setdefault("Content-Type", "application/json")
        elif isinstance(body, FormBody):
            fields = self._form_fields(method.value, spec.url, body.fields)
            content = self._encode_multipart(method.value, spec.url, headers, fields)
        elif isinstance(body, MultipartBody):
            fields = self._raw_fields(body.parts)
            content = self._encode_multipart(method.value, spec.url, headers, fields)
        else:
            msg = f"Unsupported body type: {type(body).__qualname__}"
            raise EncodeError(method=method.value, url=spec.url, message=msg)

        return WireRequest(
            method=method.value,
            url=spec.url,
            headers=tuple(headers.multi_items()),
            content=content,
            timeout=timeout,
            protocol_version=spec.protocol_version,
        )

    def _encode_json(self, method: str, url: str, body: JsonBody) -> bytes:
        try:
            return json.dumps(body.value, ensure_ascii=False).encode("utf-8")
        except (TypeError, ValueError) as exc:
            msg = f"Cannot serialize the {method} body to JSON: {exc}"
            raise EncodeError(
                method=method, url=url, message=msg, cause=exc
            ) from exc

    def _form_fields(
        self, method: str, url: str, fields: Mapping[str, str | FilePart]
    ) -> list[MultipartField]:
        encoded: list[MultipartField] = []
        for name, value in fields.items():
            if isinstance(value, FilePart):
                encoded.append((name, self._read_file_part(method, url, value)))
            else:
                encoded.append((name, (None, str(value).encode("utf-8"))))
        return encoded

    def _read_file_part(self, method: str, url: str, part: FilePart) -> tuple[Any, ...]:
        path = Path(part.path)
        try:
            contents = path.read_bytes()
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError) as exc:
            msg = f"File {path} does not exist"
            raise MissingFileError(
                method=method, url=url, message=msg, path=str(path), cause=exc
            ) from exc
        except OSError as exc:
            msg = f"Cannot read file {path}: {exc}"
            raise EncodeError(
                method=method, url=url, message=msg, cause=exc
            ) from exc

        mime_type = part.mime_type or guess_mime_type(path, contents)
        return (part.filename or path.name, contents, mime_type)

    def _raw_fields(self, parts: Sequence[Part]) -> list[MultipartField]:
        encoded: list[MultipartField] = []
        for part in parts:
            contents = part.contents
            if isinstance(contents, str):
                contents = contents.encode("utf-8")
            if part.headers:
                encoded.append((part.name, (part.filename, contents, None, dict(part.headers))))
            else:
                encoded.append((part.name, (part.filename, contents)))
        return encoded

    def _encode_multipart(
        self, method: str, url: str, headers: httpx.Headers, fields: list[MultipartField]
    ) -> bytes:
        if not fields:
            return b""

        content_type = headers.get("Content-Type")
        if content_type is not None and not (
            content_type.lower().startswith("multipart/form-data") and "boundary=" in content_type
        ):
            logger.debug(f"Replacing Content-Type {content_type!r} of a multipart body")
            content_type = None

        # A caller supplied multipart Content-Type keeps its boundary
        request = httpx.Request(
            method,
            url,
            headers=None if content_type is None else {"Content-Type": content_type},
            files=fields,
        )
        content = request.read()
        headers["Content-Type"] = request.headers["Content-Type"]
        return content
