r"""Unit tests for the asynchronous AsyncHttpClient."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING
from unittest.mock import AsyncMock, Mock, patch

import httpx
import pytest

from aresclient import (
    AsyncHttpClient,
    CancelToken,
    CancelledRequestError,
    ClientConfig,
    RequestFailedError,
    UnsupportedMethodError,
)
from aresclient.engine import AsyncHttpxEngine, RawReply
from aresclient.transport_async import AsyncTransport

if TYPE_CHECKING:
    from collections.abc import Callable

TEST_URL = "https://api.example.com/data"


@pytest.fixture
def config() -> ClientConfig:
    return ClientConfig(max_retries=2, base_delay=0.1, jitter_factor=0.0)


#####################################
#     Tests for AsyncHttpClient     #
#####################################


def test_async_http_client_default_config(mock_async_engine: Mock) -> None:
    client = AsyncHttpClient(engine=mock_async_engine)
    assert client.config == ClientConfig()
    assert isinstance(client.transport, AsyncTransport)


def test_async_http_client_create(mock_async_engine: Mock) -> None:
    with patch("aresclient.client_async.AsyncHttpxEngine", return_value=mock_async_engine):
        client = AsyncHttpClient.create("https://api.example.com", max_retries=1)
    assert client.config.base_url == "https://api.example.com"
    assert client.config.max_retries == 1


@pytest.mark.asyncio
async def test_async_http_client_closes_owned_engine() -> None:
    engine = Mock(aclose=AsyncMock())
    with patch("aresclient.client_async.AsyncHttpxEngine", return_value=engine) as engine_class:
        async with AsyncHttpClient(ClientConfig(verify=False)):
            pass
    engine_class.assert_called_once_with(verify=False)
    engine.aclose.assert_awaited_once_with()


@pytest.mark.asyncio
async def test_async_http_client_keeps_external_engine_open(mock_async_engine: Mock) -> None:
    async with AsyncHttpClient(engine=mock_async_engine):
        pass
    mock_async_engine.aclose.assert_not_called()


@pytest.mark.asyncio
async def test_async_http_client_get(
    mock_async_engine: Mock, make_reply: Callable[..., RawReply], config: ClientConfig
) -> None:
    mock_async_engine.send.return_value = make_reply(200, body=b'{"a": {"b": 1}}')
    client = AsyncHttpClient(
        config.with_base_url("https://api.example.com/"), engine=mock_async_engine
    )
    async with client:
        response = await client.get("data", params={"x": 1})

    assert response.json("a.b") == 1
    assert mock_async_engine.send.call_args.args[0].url == f"{TEST_URL}?x=1"


@pytest.mark.asyncio
@pytest.mark.parametrize("method", ["get", "post", "put", "patch", "delete", "head", "options"])
async def test_async_http_client_verb_methods(
    mock_async_engine: Mock,
    make_reply: Callable[..., RawReply],
    config: ClientConfig,
    method: str,
) -> None:
    mock_async_engine.send.return_value = make_reply(200)
    client = AsyncHttpClient(config, engine=mock_async_engine)
    assert (await getattr(client, method)(TEST_URL)).ok()
    assert mock_async_engine.send.call_args.args[0].method == method.upper()


@pytest.mark.asyncio
async def test_async_http_client_post_json_with_headers(
    mock_async_engine: Mock, make_reply: Callable[..., RawReply], config: ClientConfig
) -> None:
    mock_async_engine.send.return_value = make_reply(201)
    client = AsyncHttpClient(config.with_token("t0k"), engine=mock_async_engine)
    await client.post(TEST_URL, json={"a": 1}, headers={"X-Request-ID": "42"})

    request = mock_async_engine.send.call_args.args[0]
    assert request.content == b'{"a": 1}'
    assert dict(request.headers) == {
        "authorization": "Bearer t0k",
        "x-request-id": "42",
        "content-type": "application/json",
    }


@pytest.mark.asyncio
async def test_async_http_client_unsupported_method(
    mock_async_engine: Mock, config: ClientConfig
) -> None:
    with pytest.raises(UnsupportedMethodError):
        await AsyncHttpClient(config, engine=mock_async_engine).request("CONNECT", TEST_URL)
    mock_async_engine.send.assert_not_called()


@pytest.mark.asyncio
async def test_async_http_client_retries_exhausted(
    mock_async_engine: Mock,
    make_reply: Callable[..., RawReply],
    config: ClientConfig,
    mock_asleep: Mock,
) -> None:
    mock_async_engine.send.return_value = make_reply(503)
    with pytest.raises(RequestFailedError) as exc_info:
        await AsyncHttpClient(config, engine=mock_async_engine).get(TEST_URL)

    assert exc_info.value.attempts == 3
    assert [call.args[0] for call in mock_asleep.call_args_list] == [0.1, 0.2]


@pytest.mark.asyncio
async def test_async_http_client_cancelled(mock_async_engine: Mock, config: ClientConfig) -> None:
    token = CancelToken()
    token.cancel()
    with pytest.raises(CancelledRequestError):
        await AsyncHttpClient(config, engine=mock_async_engine).get(TEST_URL, cancel=token)


@pytest.mark.asyncio
async def test_async_http_client_concurrent_calls(
    mock_async_engine: Mock, config: ClientConfig
) -> None:
    async def send(request: object) -> RawReply:
        await asyncio.sleep(0)
        return RawReply(("HTTP/1.1 200 OK", "X-Url: " + request.url, ""))

    mock_async_engine.send.side_effect = send
    client = AsyncHttpClient(config, engine=mock_async_engine)
    responses = await asyncio.gather(*(client.get(f"{TEST_URL}/{i}") for i in range(5)))
    assert [response.header("x-url") for response in responses] == [
        f"{TEST_URL}/{i}" for i in range(5)
    ]


@pytest.mark.asyncio
async def test_async_http_client_httpx_engine(config: ClientConfig, mock_asleep: Mock) -> None:
    statuses = iter([500, 200])

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(next(statuses), json={"method": request.method})

    engine = AsyncHttpxEngine(httpx.AsyncClient(transport=httpx.MockTransport(handler)))
    async with AsyncHttpClient(config, engine=engine) as client:
        response = await client.patch(TEST_URL, json={})
    await engine.client.aclose()

    assert response.json("method") == "PATCH"
    mock_asleep.assert_called_once_with(0.1)
