from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import AsyncMock, Mock, patch

import pytest

from aresclient.engine import BaseAsyncEngine, BaseEngine, RawReply
from aresclient.exceptions import TransportError

if TYPE_CHECKING:
    from collections.abc import Callable, Generator, Mapping


@pytest.fixture
def mock_sleep() -> Generator[Mock, None, None]:
    """Patch time.sleep to make tests run faster."""
    with patch("time.sleep", return_value=None) as mock:
        yield mock


@pytest.fixture
def mock_asleep() -> Generator[Mock, None, None]:
    """Patch asyncio.sleep to make tests run faster."""
    with patch("asyncio.sleep", return_value=None) as mock:
        yield mock


@pytest.fixture
def make_reply() -> Callable[..., RawReply]:
    """Return a factory of single-hop raw replies."""

    def _make_reply(
        status_code: int = 200,
        headers: Mapping[str, str] | None = None,
        body: bytes = b"",
        reason: str = "",
    ) -> RawReply:
        lines = [f"HTTP/1.1 {status_code} {reason}".rstrip()]
        lines.extend(f"{name}: {value}" for name, value in (headers or {}).items())
        lines.append("")
        return RawReply(header_lines=tuple(lines), body=body)

    return _make_reply


@pytest.fixture
def transport_error() -> TransportError:
    """Create a transport error as raised by an engine."""
    return TransportError(
        method="GET",
        url="https://api.example.com/data",
        message="GET request to https://api.example.com/data failed: ConnectError",
        cause=ConnectionError("connection refused"),
    )


@pytest.fixture
def mock_engine() -> Mock:
    """Create a mock synchronous engine."""
    return Mock(spec=BaseEngine)


@pytest.fixture
def mock_async_engine() -> Mock:
    """Create a mock asynchronous engine."""
    return Mock(spec=BaseAsyncEngine, send=AsyncMock(), aclose=AsyncMock())
