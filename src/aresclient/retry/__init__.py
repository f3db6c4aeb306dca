r"""Retry decision logic.

Public API:
    - RetryPolicy: decides whether to retry an attempt and how long to wait
    - RetryDecision: result of a decision
    - Success, Failure: outcomes of a physical attempt
"""

from __future__ import annotations

__all__ = ["AttemptOutcome", "Failure", "RetryDecision", "RetryPolicy", "Success"]

from aresclient.retry.outcome import AttemptOutcome, Failure, Success
from aresclient.retry.policy import RetryDecision, RetryPolicy
