"""Rate limiter interfaces.

The HTTP layer depends on this abstraction (not the concrete implementation)
so the in-process store can be replaced by a shared one (e.g. Redis) later.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitResult:
    """Result of a rate limit consume operation.

    Attributes:
        allowed: Whether the request is allowed to proceed.
        limit: Max admissions per window.
        remaining: Admissions left in the trailing window (0 when blocked).
        reset_at: UNIX epoch seconds when the oldest admission leaves the window.
        retry_after_seconds: Suggested wait time in seconds when blocked.
    """

    allowed: bool
    limit: int
    remaining: int
    reset_at: int
    retry_after_seconds: int | None


class AbstractRateLimiter(ABC):
    """Interface for rate limiters."""

    @abstractmethod
    def consume(self, key: str) -> RateLimitResult:
        """Check the budget for ``key`` and record an admission if allowed.

        Args:
            key: Unique client identifier (e.g. IP address).

        Returns:
            RateLimitResult describing whether it was allowed.
        """
        raise NotImplementedError

    def check_and_record(self, key: str) -> bool:
        """Return True and record the admission when ``key`` is within budget."""
        return self.consume(key).allowed
