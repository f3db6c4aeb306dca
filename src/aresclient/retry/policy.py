r"""Retry policy deciding whether and when to retry an attempt.

The policy is pure decision logic: it performs no I/O and keeps no
state between calls. The only source of non-determinism is the jitter,
which is drawn from an injectable ``random.Random`` instance.
"""

from __future__ import annotations

__all__ = ["RetryDecision", "RetryPolicy"]

import logging
import random
from dataclasses import dataclass

from aresclient.backoff import ExponentialBackoff
from aresclient.core.config import DEFAULT_BASE_DELAY, DEFAULT_JITTER_FACTOR, DEFAULT_MAX_RETRIES
from aresclient.core.validation import validate_retry_params
from aresclient.retry.outcome import AttemptOutcome, Failure, Success
from aresclient.utils.retry_after import parse_retry_after

logger: logging.Logger = logging.getLogger(__name__)

# 429 Too Many Requests, and every status code >= 500
TOO_MANY_REQUESTS = 429
SERVER_ERROR_MIN = 500


@dataclass(frozen=True)
class RetryDecision:
    r"""Result of ``RetryPolicy.decide``.

    Attributes:
        should_retry: Whether another attempt must be made.
        delay: Seconds to wait before the next attempt. Always 0.0 when
            ``should_retry`` is ``False``.
        retryable: Whether the outcome belongs to a retryable class
            (transport error, 429 or 5xx). A decision with
            ``retryable=True`` and ``should_retry=False`` means the
            retries are exhausted.
        reason: Short explanation, used in log messages.
    """

    should_retry: bool
    delay: float = 0.0
    retryable: bool = False
    reason: str = ""

    @property
    def exhausted(self) -> bool:
        return self.retryable and not self.should_retry


class RetryPolicy:
    r"""Decide whether a failed attempt is retried, and after how long.

    An attempt is retried when the engine raised a transport error, or
    when the response status code is 429 or at least 500, as long as
    fewer than ``max_retries`` retries were made. Every other status
    code stops the loop immediately.

    The delay before the next attempt is the ``Retry-After`` value of
    the response when it carries a valid one. Otherwise it is
    ``base_delay * 2 ** attempt`` (capped at ``max_delay`` if set)
    plus a random jitter drawn uniformly from
    ``[0, jitter_factor * delay]``.

    Args:
        max_retries: Maximum number of retries. Total attempts are
            ``max_retries + 1``.
        base_delay: Base delay in seconds of the exponential backoff.
        jitter_factor: Upper bound of the jitter, as a fraction of the
            computed delay.
        max_delay: Optional cap in seconds of the computed backoff.
        allow_http_date_retry_after: If ``True``, also accept
            ``Retry-After`` values in HTTP-date form.
        rng: The random number generator used for the jitter.

    Example:
        ```pycon
        >>> from aresclient.retry import RetryPolicy, Success
        >>> policy = RetryPolicy(max_retries=2, base_delay=0.1, jitter_factor=0.0)
        >>> policy.decide(0, Success(503))
        RetryDecision(should_retry=True, delay=0.1, retryable=True, reason='status 503')
        >>> policy.decide(1, Success(404)).should_retry
        False
        >>> policy.decide(2, Success(503)).exhausted
        True

        ```
    """

    def __init__(
        self,
        max_retries: int = DEFAULT_MAX_RETRIES,
        base_delay: float = DEFAULT_BASE_DELAY,
        jitter_factor: float = DEFAULT_JITTER_FACTOR,
        max_delay: float | None = None,
        allow_http_date_retry_after: bool = False,
        rng: random.Random | None = None,
    ) -> None:
        validate_retry_params(
            max_retries=max_retries,
            base_delay=base_delay,
            jitter_factor=jitter_factor,
            max_delay=max_delay,
        )
        self.max_retries = max_retries
        self.jitter_factor = jitter_factor
        self.backoff = ExponentialBackoff(base_delay=base_delay, max_delay=max_delay)
        self.allow_http_date_retry_after = allow_http_date_retry_after
        self.rng = rng if rng is not None else random.Random()  # noqa: S311

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__qualname__}(max_retries={self.max_retries}, "
            f"backoff={self.backoff!r}, jitter_factor={self.jitter_factor})"
        )

    @property
    def base_delay(self) -> float:
        return self.backoff.base_delay

    def is_retryable(self, outcome: AttemptOutcome) -> bool:
        r"""Return ``True`` if the outcome belongs to a retryable class."""
        if isinstance(outcome, Failure):
            return True
        return outcome.status_code == TOO_MANY_REQUESTS or outcome.status_code >= SERVER_ERROR_MIN

    def should_retry(self, attempt: int, outcome: AttemptOutcome) -> bool:
        r"""Return ``True`` if another attempt must follow.

        Args:
            attempt: The zero-indexed attempt that produced ``outcome``.
            outcome: The outcome of that attempt.
        """
        return attempt < self.max_retries and self.is_retryable(outcome)

    def delay_for(self, attempt: int, outcome: AttemptOutcome | None = None) -> float:
        r"""Return the delay in seconds before the attempt after ``attempt``.

        Args:
            attempt: The zero-indexed attempt that produced ``outcome``.
            outcome: The outcome of that attempt. Only a ``Success``
                can carry a ``Retry-After`` header.
        """
        if isinstance(outcome, Success):
            retry_after = parse_retry_after(
                outcome.headers.get("Retry-After"),
                allow_http_date=self.allow_http_date_retry_after,
            )
            if retry_after is not None:
                logger.debug(f"Using Retry-After header value: {retry_after:.2f}s")
                return retry_after

        delay = self.backoff.calculate(attempt)
        if self.jitter_factor > 0:
            jitter = self.rng.uniform(0, self.jitter_factor * delay)
            logger.debug(f"Backoff {delay:.3f}s plus jitter {jitter:.3f}s")
            return delay + jitter
        return delay

    def decide(self, attempt: int, outcome: AttemptOutcome) -> RetryDecision:
        r"""Decide what follows an attempt.

        Args:
            attempt: The zero-indexed attempt that produced ``outcome``.
            outcome: The outcome of that attempt.

        Returns:
            The decision, with the delay to wait when retrying.
        """
        retryable = self.is_retryable(outcome)
        reason = (
            f"status {outcome.status_code}"
            if isinstance(outcome, Success)
            else type(outcome.error.cause or outcome.error).__name__
        )
        if not retryable:
            return RetryDecision(should_retry=False, retryable=False, reason=reason)
        if attempt >= self.max_retries:
            return RetryDecision(
                should_retry=False, retryable=True, reason=f"{reason}, max retries exhausted"
            )
        return RetryDecision(
            should_retry=True,
            delay=self.delay_for(attempt, outcome),
            retryable=True,
            reason=reason,
        )
