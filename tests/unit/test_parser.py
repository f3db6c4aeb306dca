from __future__ import annotations

import pytest

from aresclient.exceptions import MalformedResponseError
from aresclient.parser import ParsedResponse, parse_raw_response, parse_status_line

#######################################
#     Tests for parse_status_line     #
#######################################


@pytest.mark.parametrize(
    ("line", "expected"),
    [
        ("HTTP/1.1 200 OK", ("1.1", 200, "OK")),
        ("HTTP/1.0 404 Not Found\r\n", ("1.0", 404, "Not Found")),
        ("HTTP/2 204", ("2", 204, "")),
        ("  http/1.1 503 Service Unavailable  ", ("1.1", 503, "Service Unavailable")),
    ],
)
def test_parse_status_line(line: str, expected: tuple[str, int, str]) -> None:
    assert parse_status_line(line) == expected


@pytest.mark.parametrize(
    "line", ["", "Content-Type: text/plain", "HTTP/1.1 20 OK", "HTTP/1.1", "HTTPS/1.1 200 OK"]
)
def test_parse_status_line_invalid(line: str) -> None:
    assert parse_status_line(line) is None


########################################
#     Tests for parse_raw_response     #
########################################


def test_parse_raw_response_single_block() -> None:
    parsed = parse_raw_response(
        ["HTTP/1.1 201 Created", "Content-Type: application/json", "Location: /items/1", ""]
    )
    assert isinstance(parsed, ParsedResponse)
    assert parsed.status_code == 201
    assert parsed.http_version == "1.1"
    assert parsed.reason_phrase == "Created"
    assert parsed.headers.multi_items() == [
        ("content-type", "application/json"),
        ("location", "/items/1"),
    ]


def test_parse_raw_response_discards_redirect_chain() -> None:
    parsed = parse_raw_response(
        [
            "HTTP/1.1 301 Moved Permanently",
            "Location: https://b.test/",
            "Set-Cookie: a=1",
            "",
            "HTTP/1.1 302 Found",
            "Location: https://c.test/",
            "",
            "HTTP/1.1 200 OK",
            "Content-Type: text/plain",
            "",
        ]
    )
    assert parsed.status_code == 200
    assert parsed.reason_phrase == "OK"
    assert "location" not in parsed.headers
    assert "set-cookie" not in parsed.headers
    assert parsed.headers.multi_items() == [("content-type", "text/plain")]


def test_parse_raw_response_keeps_repeated_headers() -> None:
    parsed = parse_raw_response(
        ["HTTP/1.1 200 OK", "Set-Cookie: a=1", "set-cookie: b=2", "X-Other: x"]
    )
    assert parsed.headers.get_list("set-cookie") == ["a=1", "b=2"]
    assert parsed.headers["x-other"] == "x"


def test_parse_raw_response_lowercases_names_and_strips_values() -> None:
    parsed = parse_raw_response(["HTTP/1.1 200 OK\r\n", "X-Request-ID:   abc  \r\n"])
    assert parsed.headers.multi_items() == [("x-request-id", "abc")]


def test_parse_raw_response_value_with_colon() -> None:
    parsed = parse_raw_response(["HTTP/1.1 302 Found", "Location: https://x.test:8443/a"])
    assert parsed.headers["location"] == "https://x.test:8443/a"


def test_parse_raw_response_skips_invalid_lines() -> None:
    parsed = parse_raw_response(["HTTP/1.1 200 OK", "garbage", ": no-name", "", "X-A: 1"])
    assert parsed.headers.multi_items() == [("x-a", "1")]


def test_parse_raw_response_ignores_lines_before_status() -> None:
    parsed = parse_raw_response(["X-Stray: 1", "HTTP/1.1 204 No Content"])
    assert parsed.status_code == 204
    assert parsed.headers.multi_items() == []


def test_parse_raw_response_body_is_not_inspected() -> None:
    parsed = parse_raw_response(["HTTP/1.1 200 OK"], body=b"HTTP/1.1 500 Oops")
    assert parsed.status_code == 200


@pytest.mark.parametrize("lines", [[], [""], ["Content-Type: text/plain", "X-A: 1"]])
def test_parse_raw_response_no_status_line(lines: list[str]) -> None:
    with pytest.raises(MalformedResponseError, match=r"No HTTP status line found"):
        parse_raw_response(lines)
