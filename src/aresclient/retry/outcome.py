r"""Outcomes of a single physical attempt."""

from __future__ import annotations

__all__ = ["AttemptOutcome", "Failure", "Success"]

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Union

import httpx

if TYPE_CHECKING:
    from aresclient.exceptions import TransportError


@dataclass(frozen=True)
class Success:
    r"""A response was received, whatever its status code.

    Attributes:
        status_code: The HTTP status code.
        headers: The response headers.
        body: The raw body.
    """

    status_code: int
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    body: bytes = b""

    @property
    def kind(self) -> str:
        return "success"


@dataclass(frozen=True)
class Failure:
    r"""No response was received.

    Attributes:
        error: The transport error raised by the engine.
    """

    error: TransportError

    @property
    def kind(self) -> str:
        return "transport_error"


AttemptOutcome = Union[Success, Failure]
