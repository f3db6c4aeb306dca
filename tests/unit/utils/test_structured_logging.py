from __future__ import annotations

import json
import logging
from io import StringIO
from typing import TYPE_CHECKING

import pytest

from aresclient.utils.structured_logging import (
    StructuredFormatter,
    clear_correlation_id,
    get_correlation_id,
    log_structured,
    set_correlation_id,
)

if TYPE_CHECKING:
    from collections.abc import Generator


@pytest.fixture
def structured_logger(
    request: pytest.FixtureRequest,
) -> Generator[tuple[logging.Logger, StringIO], None, None]:
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    logger = logging.getLogger(f"tests.structured.{request.node.name}")
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    try:
        yield logger, stream
    finally:
        logger.removeHandler(handler)
        clear_correlation_id()


##############################################
#     Tests for correlation ID management    #
##############################################


def test_get_correlation_id_initially_none() -> None:
    """Test that correlation ID is initially None."""
    clear_correlation_id()
    assert get_correlation_id() is None


def test_set_and_get_correlation_id() -> None:
    """Test setting and getting correlation ID."""
    set_correlation_id("test-123")
    assert get_correlation_id() == "test-123"
    clear_correlation_id()


def test_clear_correlation_id() -> None:
    """Test clearing correlation ID."""
    set_correlation_id("test-456")
    clear_correlation_id()
    assert get_correlation_id() is None


##############################################
#     Tests for StructuredFormatter          #
##############################################


def test_structured_formatter_basic_log(
    structured_logger: tuple[logging.Logger, StringIO],
) -> None:
    """Test that StructuredFormatter produces valid JSON."""
    logger, stream = structured_logger
    logger.info("Test message")

    log_data = json.loads(stream.getvalue().strip())
    assert log_data["message"] == "Test message"
    assert log_data["level"] == "INFO"
    assert log_data["logger"] == logger.name
    assert log_data["timestamp"].endswith("Z")
    assert "correlation_id" not in log_data


def test_structured_formatter_with_correlation_id(
    structured_logger: tuple[logging.Logger, StringIO],
) -> None:
    """Test that StructuredFormatter includes correlation ID."""
    logger, stream = structured_logger
    set_correlation_id("request-789")
    logger.info("Request started")

    log_data = json.loads(stream.getvalue().strip())
    assert log_data["correlation_id"] == "request-789"


def test_structured_formatter_with_exception(
    structured_logger: tuple[logging.Logger, StringIO],
) -> None:
    logger, stream = structured_logger
    try:
        msg = "boom"
        raise ValueError(msg)
    except ValueError:
        logger.exception("Request crashed")

    log_data = json.loads(stream.getvalue().strip())
    assert "ValueError: boom" in log_data["exception"]


def test_structured_formatter_non_serializable_extra(
    structured_logger: tuple[logging.Logger, StringIO],
) -> None:
    """Test that values which are not JSON serializable are converted
    with str."""
    logger, stream = structured_logger
    logger.info("with object", extra={"payload": {1, 2}})

    log_data = json.loads(stream.getvalue().strip())
    assert log_data["payload"] == "{1, 2}"


#####################################
#     Tests for log_structured      #
#####################################


def test_log_structured_extra_fields(
    structured_logger: tuple[logging.Logger, StringIO],
) -> None:
    logger, stream = structured_logger
    log_structured(logger, logging.INFO, "attempt", method="GET", attempt=2, elapsed_ms=1.5)

    log_data = json.loads(stream.getvalue().strip())
    assert log_data["message"] == "attempt"
    assert log_data["method"] == "GET"
    assert log_data["attempt"] == 2
    assert log_data["elapsed_ms"] == 1.5


def test_log_structured_reserved_names_are_prefixed(
    structured_logger: tuple[logging.Logger, StringIO],
) -> None:
    """Test that fields clashing with LogRecord attributes do not raise."""
    logger, stream = structured_logger
    log_structured(logger, logging.WARNING, "clash", name="custom", module="inner")

    log_data = json.loads(stream.getvalue().strip())
    assert log_data["message"] == "clash"
    assert log_data["logger"] == logger.name
    assert log_data["field_name"] == "custom"
    assert log_data["field_module"] == "inner"


def test_log_structured_respects_level(
    structured_logger: tuple[logging.Logger, StringIO],
) -> None:
    logger, stream = structured_logger
    logger.setLevel(logging.WARNING)
    log_structured(logger, logging.INFO, "hidden", attempt=1)
    assert stream.getvalue() == ""
