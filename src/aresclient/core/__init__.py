r"""Core configuration and logic shared by the sync and async code paths."""

from __future__ import annotations

__all__ = [
    "DEFAULT_BASE_DELAY",
    "DEFAULT_JITTER_FACTOR",
    "DEFAULT_MAX_RETRIES",
    "DEFAULT_TIMEOUT",
    "ClientConfig",
    "validate_retry_params",
    "validate_timeout",
]

from aresclient.core.config import (
    DEFAULT_BASE_DELAY,
    DEFAULT_JITTER_FACTOR,
    DEFAULT_MAX_RETRIES,
    DEFAULT_TIMEOUT,
    ClientConfig,
)
from aresclient.core.validation import validate_retry_params, validate_timeout
