r"""Configuration dataclass and defaults for the HTTP clients.

``ClientConfig`` is an immutable snapshot. Every ``with_*`` method
returns a new snapshot, so a configuration can be shared by several
clients and refined without affecting them.
"""

from __future__ import annotations

__all__ = [
    "DEFAULT_BASE_DELAY",
    "DEFAULT_JITTER_FACTOR",
    "DEFAULT_MAX_RETRIES",
    "DEFAULT_TIMEOUT",
    "ClientConfig",
]

import base64
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

from aresclient.core.validation import validate_retry_params, validate_timeout
from aresclient.request_spec import merge_headers

if TYPE_CHECKING:
    import random
    from collections.abc import Iterable, Mapping

    from aresclient.retry.policy import RetryPolicy
    from aresclient.sinks import LogSink


# Default timeout in seconds of each physical attempt
DEFAULT_TIMEOUT = 30.0

# Default maximum number of retry attempts
# Total attempts = max_retries + 1 (initial attempt)
DEFAULT_MAX_RETRIES = 3

# Default base delay in seconds of the exponential backoff
# Wait time = base_delay * (2 ** attempt)
# With 1.0: 1st retry waits 1s, 2nd waits 2s, 3rd waits 4s
DEFAULT_BASE_DELAY = 1.0

# Default jitter, as a fraction of the computed backoff delay
DEFAULT_JITTER_FACTOR = 0.1

# Marks a `with_retry` argument that keeps its current value
_KEEP: Any = object()


@dataclass(frozen=True)
class ClientConfig:
    """Immutable configuration of ``HttpClient`` and ``AsyncHttpClient``.

    Args:
        base_url: URL that relative request URLs are resolved against
            (RFC 3986 resolution).
        timeout: Timeout in seconds of each physical attempt. Must be > 0.
        headers: Default headers sent with every request, as ordered
            pairs. Use ``with_headers`` to merge new ones.
        max_retries: Maximum number of retries. Must be >= 0.
        base_delay: Base delay in seconds of the exponential backoff.
            Must be >= 0.
        jitter_factor: Upper bound of the random jitter as a fraction of
            the backoff delay. Must be >= 0.
        max_delay: Optional cap in seconds of the backoff delay.
        allow_http_date_retry_after: If ``True``, ``Retry-After`` values
            in HTTP-date form are honored as well as delays in seconds.
        verify: Whether TLS certificates are verified.
        log_sink: Optional sink receiving one event per attempt.
        rng: Optional random number generator used for the jitter.

    Example:
        ```pycon
        >>> from aresclient.core.config import ClientConfig
        >>> config = ClientConfig(base_url="https://api.example.com")
        >>> config.max_retries
        3
        >>> config = config.with_token("abc").with_retry(max_retries=5, base_delay=0.2)
        >>> config.max_retries, config.base_delay
        (5, 0.2)
        >>> config.header_map()["Authorization"]
        'Bearer abc'

        ```
    """

    base_url: str = ""
    timeout: float = DEFAULT_TIMEOUT
    headers: tuple[tuple[str, str], ...] = ()
    max_retries: int = DEFAULT_MAX_RETRIES
    base_delay: float = DEFAULT_BASE_DELAY
    jitter_factor: float = DEFAULT_JITTER_FACTOR
    max_delay: float | None = None
    allow_http_date_retry_after: bool = False
    verify: bool = True
    log_sink: LogSink | None = None
    rng: random.Random | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        """Validate configuration parameters after initialization.

        Raises:
            ValueError: If any parameter fails validation.
        """
        # Accept any header mapping, store ordered pairs
        object.__setattr__(self, "headers", merge_headers(self.headers))
        validate_timeout(self.timeout)
        validate_retry_params(
            max_retries=self.max_retries,
            base_delay=self.base_delay,
            jitter_factor=self.jitter_factor,
            max_delay=self.max_delay,
        )

    def merge(self, **overrides: Any) -> ClientConfig:
        """Create a new config with specified parameters overridden.

        Only non-None override values are applied.

        Args:
            **overrides: Keyword arguments for parameters to override.

        Returns:
            A new ClientConfig instance with overrides applied.

        Example:
            ```pycon
            >>> from aresclient.core.config import ClientConfig
            >>> config = ClientConfig(max_retries=3)
            >>> config.merge(max_retries=5, timeout=None).max_retries
            5
            >>> config.max_retries
            3

            ```
        """
        filtered_overrides = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **filtered_overrides)

    def with_base_url(self, base_url: str) -> ClientConfig:
        return replace(self, base_url=base_url)

    def with_timeout(self, timeout: float) -> ClientConfig:
        return replace(self, timeout=timeout)

    def with_headers(
        self, headers: Mapping[str, str] | Iterable[tuple[str, str]]
    ) -> ClientConfig:
        """Return a config with ``headers`` merged into the defaults.

        Header names are case-insensitive; a new value replaces an
        existing header of the same name.
        """
        return replace(self, headers=merge_headers(self.headers, headers))

    def with_token(self, token: str, token_type: str = "Bearer") -> ClientConfig:
        """Return a config sending ``Authorization: <token_type> <token>``."""
        return self.with_headers({"Authorization": f"{token_type} {token}"})

    def with_basic_auth(self, username: str, password: str) -> ClientConfig:
        """Return a config sending HTTP basic credentials."""
        credentials = base64.b64encode(f"{username}:{password}".encode()).decode("ascii")
        return self.with_headers({"Authorization": f"Basic {credentials}"})

    def with_retry(
        self,
        max_retries: int = DEFAULT_MAX_RETRIES,
        base_delay: float = DEFAULT_BASE_DELAY,
        jitter_factor: float | None = None,
        max_delay: float | None = _KEEP,
        allow_http_date_retry_after: bool | None = None,
    ) -> ClientConfig:
        """Return a config with new retry parameters.

        ``jitter_factor``, ``max_delay`` and ``allow_http_date_retry_after``
        keep their current values when omitted. Passing ``max_delay=None``
        removes the delay cap.
        """
        return replace(
            self,
            max_retries=max_retries,
            base_delay=base_delay,
            jitter_factor=self.jitter_factor if jitter_factor is None else jitter_factor,
            max_delay=self.max_delay if max_delay is _KEEP else max_delay,
            allow_http_date_retry_after=(
                self.allow_http_date_retry_after
                if allow_http_date_retry_after is None
                else allow_http_date_retry_after
            ),
        )

    def with_logging(self, log_sink: LogSink | None) -> ClientConfig:
        """Return a config emitting attempt events to ``log_sink``.

        Passing ``None`` disables the events.
        """
        return replace(self, log_sink=log_sink)

    def with_verify(self, verify: bool) -> ClientConfig:
        return replace(self, verify=verify)

    def header_map(self) -> dict[str, str]:
        return dict(self.headers)

    def retry_policy(self) -> RetryPolicy:
        """Build the ``RetryPolicy`` described by this config."""
        from aresclient.retry.policy import RetryPolicy

        return RetryPolicy(
            max_retries=self.max_retries,
            base_delay=self.base_delay,
            jitter_factor=self.jitter_factor,
            max_delay=self.max_delay,
            allow_http_date_retry_after=self.allow_http_date_retry_after,
            rng=self.rng,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary format.

        Example:
            ```pycon
            >>> from aresclient.core.config import ClientConfig
            >>> ClientConfig(max_retries=5).to_dict()["max_retries"]
            5

            ```
        """
        return {
            "base_url": self.base_url,
            "timeout": self.timeout,
            "headers": self.header_map(),
            "max_retries": self.max_retries,
            "base_delay": self.base_delay,
            "jitter_factor": self.jitter_factor,
            "max_delay": self.max_delay,
            "allow_http_date_retry_after": self.allow_http_date_retry_after,
            "verify": self.verify,
            "log_sink": self.log_sink,
        }
