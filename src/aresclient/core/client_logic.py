r"""Shared client logic for both sync and async HTTP clients.

This module turns the arguments of a client call into a ``RequestSpec``
so that ``HttpClient`` and ``AsyncHttpClient`` build requests exactly
the same way.
"""

from __future__ import annotations

__all__ = ["build_request_spec", "resolve_url"]

from typing import TYPE_CHECKING, Any

import httpx

from aresclient.request_spec import (
    FormBody,
    JsonBody,
    MultipartBody,
    RequestSpec,
    merge_headers,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from aresclient.core.config import ClientConfig
    from aresclient.methods import HttpMethod
    from aresclient.request_spec import Body, FilePart, Part


def resolve_url(base_url: str, url: str, params: Mapping[str, Any] | None = None) -> str:
    r"""Resolve a request URL against a base URL.

    Args:
        base_url: The base URL. Ignored when empty.
        url: The request URL, absolute or relative to ``base_url``.
        params: Optional query parameters merged into the URL.

    Returns:
        The absolute URL.

    Example:
        ```pycon
        >>> from aresclient.core.client_logic import resolve_url
        >>> resolve_url("https://api.example.com/v1/", "users", {"page": 2})
        'https://api.example.com/v1/users?page=2'
        >>> resolve_url("https://api.example.com/v1/", "https://other.example.com/x")
        'https://other.example.com/x'

        ```
    """
    resolved = httpx.URL(base_url).join(url) if base_url else httpx.URL(url)
    if params:
        resolved = resolved.copy_merge_params(params)
    return str(resolved)


def _select_body(
    json: Any,
    form: Mapping[str, str | FilePart] | None,
    multipart: Sequence[Part] | None,
    body: Body | None,
) -> Body | None:
    candidates = (("json", json), ("form", form), ("multipart", multipart), ("body", body))
    given = [name for name, value in candidates if value is not None]
    if len(given) > 1:
        msg = f"Only one request body can be given, got: {', '.join(given)}"
        raise ValueError(msg)
    if json is not None:
        return JsonBody(json)
    if form is not None:
        return FormBody(dict(form))
    if multipart is not None:
        return MultipartBody(tuple(multipart))
    return body


def build_request_spec(
    config: ClientConfig,
    method: str | HttpMethod,
    url: str,
    *,
    params: Mapping[str, Any] | None = None,
    headers: Mapping[str, str] | Iterable[tuple[str, str]] | None = None,
    json: Any = None,
    form: Mapping[str, str | FilePart] | None = None,
    multipart: Sequence[Part] | None = None,
    body: Body | None = None,
) -> RequestSpec:
    r"""Build the ``RequestSpec`` of a client call.

    The default headers of ``config`` come first; the call headers
    override them by case-insensitive name.

    Args:
        config: The client configuration.
        method: The HTTP method.
        url: The request URL, resolved against ``config.base_url``.
        params: Optional query parameters.
        headers: Optional headers of the call.
        json: Optional value sent as a JSON body.
        form: Optional fields sent as a ``multipart/form-data`` body.
        multipart: Optional verbatim multipart parts.
        body: Optional pre-built body.

    Returns:
        The request spec.

    Raises:
        UnsupportedMethodError: If the method is not supported.
        ValueError: If more than one body is given.
    """
    return RequestSpec.build(
        method=method,
        url=resolve_url(config.base_url, url, params),
        headers=merge_headers(config.headers, headers),
        body=_select_body(json, form, multipart, body),
    )
