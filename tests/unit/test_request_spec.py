from __future__ import annotations

import dataclasses

import httpx
import pytest

from aresclient.exceptions import UnsupportedMethodError
from aresclient.methods import HttpMethod
from aresclient.request_spec import (
    EmptyBody,
    JsonBody,
    RequestSpec,
    WireRequest,
    merge_headers,
)

###################################
#     Tests for merge_headers     #
###################################


def test_merge_headers_empty() -> None:
    assert merge_headers() == ()
    assert merge_headers(None, {}) == ()


def test_merge_headers_last_write_wins() -> None:
    assert merge_headers({"Accept": "text/plain"}, {"ACCEPT": "application/json"}) == (
        ("ACCEPT", "application/json"),
    )


def test_merge_headers_keeps_first_position() -> None:
    assert merge_headers(
        [("A", "1"), ("B", "2")],
        {"C": "3", "a": "4"},
    ) == (("a", "4"), ("B", "2"), ("C", "3"))


def test_merge_headers_converts_values_to_str() -> None:
    assert merge_headers({"X-Count": 3}) == (("X-Count", "3"),)  # type: ignore[dict-item]


def test_merge_headers_from_httpx_headers() -> None:
    assert merge_headers(httpx.Headers({"X-A": "1"})) == (("x-a", "1"),)


#################################
#     Tests for RequestSpec     #
#################################


def test_request_spec_build_defaults() -> None:
    spec = RequestSpec.build("get", "https://x.test/data")
    assert spec == RequestSpec(method=HttpMethod.GET, url="https://x.test/data")
    assert spec.body == EmptyBody()
    assert spec.headers == ()
    assert spec.protocol_version == "1.1"


def test_request_spec_build_url_object() -> None:
    assert RequestSpec.build("GET", httpx.URL("https://x.test/a")).url == "https://x.test/a"


def test_request_spec_build_headers_and_body() -> None:
    spec = RequestSpec.build(
        "POST",
        "https://x.test",
        headers={"Content-Type": "application/vnd.api+json"},
        body=JsonBody({"a": 1}),
        protocol_version="2",
    )
    assert spec.headers == (("Content-Type", "application/vnd.api+json"),)
    assert spec.body == JsonBody({"a": 1})
    assert spec.protocol_version == "2"


def test_request_spec_build_unsupported_method() -> None:
    with pytest.raises(UnsupportedMethodError, match=r"'BREW'"):
        RequestSpec.build("BREW", "https://x.test")


def test_request_spec_is_frozen() -> None:
    spec = RequestSpec.build("GET", "https://x.test")
    with pytest.raises(dataclasses.FrozenInstanceError):
        spec.url = "https://other.test"  # type: ignore[misc]


def test_request_spec_header_map_is_a_copy() -> None:
    spec = RequestSpec.build("GET", "https://x.test", headers={"Accept": "text/plain"})
    headers = spec.header_map()
    headers["Accept"] = "application/json"

    assert spec.header_map()["accept"] == "text/plain"
    assert spec.headers == (("Accept", "text/plain"),)


#################################
#     Tests for WireRequest     #
#################################


def test_wire_request() -> None:
    request = WireRequest(
        method="PUT", url="https://x.test", headers=(("a", "1"),), content=b"x", timeout=1.0
    )
    assert request.protocol_version == "1.1"
    with pytest.raises(dataclasses.FrozenInstanceError):
        request.content = b"y"  # type: ignore[misc]
