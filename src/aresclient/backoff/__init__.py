r"""Backoff strategies for retry delays."""

from __future__ import annotations

__all__ = ["BaseBackoffStrategy", "ExponentialBackoff"]

from aresclient.backoff.base import BaseBackoffStrategy
from aresclient.backoff.exponential import ExponentialBackoff
