from __future__ import annotations

import httpx
import pytest

from aresclient.engine import (
    AsyncHttpxEngine,
    HttpxEngine,
    RawReply,
    raw_header_lines,
)
from aresclient.exceptions import TransportError
from aresclient.request_spec import WireRequest

TEST_URL = "https://api.example.com/start"


def make_request(method: str = "GET", url: str = TEST_URL, content: bytes = b"") -> WireRequest:
    return WireRequest(
        method=method,
        url=url,
        headers=(("accept", "application/json"), ("x-trace", "abc")),
        content=content,
        timeout=2.5,
    )


def redirect_handler(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/start":
        return httpx.Response(
            302, headers={"Location": "/end", "Set-Cookie": "hop=1"}, content=b"moved"
        )
    return httpx.Response(200, headers={"Content-Type": "text/plain"}, content=b"done")


def echo_handler(request: httpx.Request) -> httpx.Response:
    return httpx.Response(
        201,
        json={
            "method": request.method,
            "body": request.content.decode(),
            "accept": request.headers.get("accept"),
            "trace": request.headers.get("x-trace"),
            "timeout": request.extensions["timeout"]["read"],
        },
    )


def failing_handler(request: httpx.Request) -> httpx.Response:
    msg = "connection refused"
    raise httpx.ConnectError(msg, request=request)


######################################
#     Tests for raw_header_lines     #
######################################


def test_raw_header_lines_single_hop() -> None:
    response = httpx.Response(404, headers=[("X-A", "1"), ("X-A", "2")])
    assert raw_header_lines(response) == ("HTTP/1.1 404 Not Found", "x-a: 1", "x-a: 2", "")


def test_raw_header_lines_unknown_reason() -> None:
    assert raw_header_lines(httpx.Response(599)) == ("HTTP/1.1 599", "")


def test_raw_header_lines_history() -> None:
    first = httpx.Response(301, headers={"Location": "/b"})
    response = httpx.Response(200, headers={"X-Final": "yes"})
    response.history = [first]
    assert raw_header_lines(response) == (
        "HTTP/1.1 301 Moved Permanently",
        "location: /b",
        "",
        "HTTP/1.1 200 OK",
        "x-final: yes",
        "",
    )


#################################
#     Tests for HttpxEngine     #
#################################


def test_httpx_engine_send() -> None:
    with HttpxEngine(httpx.Client(transport=httpx.MockTransport(echo_handler))) as engine:
        reply = engine.send(make_request("POST", content=b'{"a": 1}'))

    assert isinstance(reply, RawReply)
    assert reply.header_lines[0] == "HTTP/1.1 201 Created"
    assert httpx.Response(201, content=reply.body).json() == {
        "method": "POST",
        "body": '{"a": 1}',
        "accept": "application/json",
        "trace": "abc",
        "timeout": 2.5,
    }


def test_httpx_engine_send_follows_redirects() -> None:
    engine = HttpxEngine(httpx.Client(transport=httpx.MockTransport(redirect_handler)))
    reply = engine.send(make_request())

    assert reply.header_lines[0] == "HTTP/1.1 302 Found"
    assert "set-cookie: hop=1" in reply.header_lines
    assert reply.header_lines.count("") == 2
    last_block = reply.header_lines[reply.header_lines.index("") + 1 :]
    assert last_block[0] == "HTTP/1.1 200 OK"
    assert "content-type: text/plain" in last_block
    assert reply.body == b"done"


def test_httpx_engine_send_transport_error() -> None:
    engine = HttpxEngine(httpx.Client(transport=httpx.MockTransport(failing_handler)))
    with pytest.raises(TransportError, match=r"ConnectError: connection refused") as exc_info:
        engine.send(make_request())

    assert exc_info.value.method == "GET"
    assert exc_info.value.url == TEST_URL
    assert isinstance(exc_info.value.cause, httpx.ConnectError)
    assert exc_info.value.__cause__ is exc_info.value.cause


def test_httpx_engine_close_owned_client() -> None:
    engine = HttpxEngine()
    engine.close()
    assert engine.client.is_closed
    engine.close()


def test_httpx_engine_close_external_client() -> None:
    client = httpx.Client(transport=httpx.MockTransport(echo_handler))
    with HttpxEngine(client) as engine:
        assert engine.client is client
    assert not client.is_closed
    client.close()


######################################
#     Tests for AsyncHttpxEngine     #
######################################


@pytest.mark.asyncio
async def test_async_httpx_engine_send() -> None:
    client = httpx.AsyncClient(transport=httpx.MockTransport(echo_handler))
    async with AsyncHttpxEngine(client) as engine:
        reply = await engine.send(make_request("PUT", content=b"payload"))
    await client.aclose()

    assert reply.header_lines[0] == "HTTP/1.1 201 Created"
    assert httpx.Response(201, content=reply.body).json()["body"] == "payload"


@pytest.mark.asyncio
async def test_async_httpx_engine_send_follows_redirects() -> None:
    engine = AsyncHttpxEngine(httpx.AsyncClient(transport=httpx.MockTransport(redirect_handler)))
    reply = await engine.send(make_request())
    await engine.client.aclose()

    assert reply.header_lines[0] == "HTTP/1.1 302 Found"
    assert "HTTP/1.1 200 OK" in reply.header_lines
    assert reply.header_lines[-1] == ""
    assert reply.body == b"done"


@pytest.mark.asyncio
async def test_async_httpx_engine_send_transport_error() -> None:
    engine = AsyncHttpxEngine(httpx.AsyncClient(transport=httpx.MockTransport(failing_handler)))
    with pytest.raises(TransportError) as exc_info:
        await engine.send(make_request())
    await engine.client.aclose()

    assert isinstance(exc_info.value.cause, httpx.ConnectError)


@pytest.mark.asyncio
async def test_async_httpx_engine_close_owned_client() -> None:
    engine = AsyncHttpxEngine()
    await engine.aclose()
    assert engine.client.is_closed


@pytest.mark.asyncio
async def test_async_httpx_engine_close_external_client() -> None:
    client = httpx.AsyncClient(transport=httpx.MockTransport(echo_handler))
    await AsyncHttpxEngine(client).aclose()
    assert not client.is_closed
    await client.aclose()
