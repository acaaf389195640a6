"""Rate limiter interfaces.

The service layer depends on this abstraction (not the concrete
implementation) so the in-memory store can later be swapped for a shared one
with minimal changes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitResult:
    """Outcome of a check-and-record operation.

    Attributes:
        allowed: Whether the call may proceed (Allowed vs Denied).
        limit: Max calls per window.
        remaining: Calls left in the current window (0 when denied).
        reset_at: UNIX epoch seconds when the current window expires.
        retry_after_seconds: Suggested wait in seconds when denied, else None.
    """

    allowed: bool
    limit: int
    remaining: int
    reset_at: int
    retry_after_seconds: int | None


class AbstractRateLimiter(ABC):
    """Interface for per-client call limiters."""

    @property
    @abstractmethod
    def limit(self) -> int:
        """Maximum allowed calls per window."""

    @property
    @abstractmethod
    def window_seconds(self) -> int:
        """Window length in seconds."""

    @abstractmethod
    def check_and_record(self, client_id: str, now: float | None = None) -> RateLimitResult:
        """Atomically evaluate the policy for ``client_id`` and record the call.

        Args:
            client_id: Best-effort client identifier.
            now: UNIX time in seconds; defaults to the limiter's clock.

        Returns:
            RateLimitResult describing whether the call was allowed.
        """
        raise NotImplementedError
