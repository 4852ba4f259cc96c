"""In-memory sliding-window rate limiter.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: uses a lock around shared state.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from typing import Callable

from ideas_api.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult

logger = logging.getLogger(__name__)


class InMemorySlidingWindowRateLimiter(AbstractRateLimiter):
    """Rate limiter admitting at most ``limit`` events per trailing window.

    Each key maps to the epoch-millisecond timestamps of its recent
    admissions. Timestamps older than the window are pruned lazily when the
    key is next checked; a rejected attempt is never recorded, so repeated
    rejections do not extend the lockout.

    Keys whose history has fully expired are dropped by a sweep that runs at
    most once per ``sweep_interval_seconds``, piggybacking on ``consume``.

    Important:
        This limiter is per-process only. If the API runs with multiple
        workers, each worker enforces its own independent limits.
    """

    def __init__(
        self,
        *,
        limit: int,
        window_seconds: int,
        sweep_interval_seconds: int | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the limiter.

        Args:
            limit: Maximum admissions per key within the window.
            window_seconds: Length of the trailing window in seconds.
            sweep_interval_seconds: Minimum time between idle-key sweeps;
                defaults to the window length.
            clock: Time source returning UNIX time in seconds.

        Raises:
            ValueError: If any argument is out of range.
        """
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if window_seconds < 1:
            raise ValueError("window_seconds must be >= 1")
        if sweep_interval_seconds is not None and sweep_interval_seconds < 1:
            raise ValueError("sweep_interval_seconds must be >= 1")

        self._limit = limit
        self._window_ms = window_seconds * 1000
        self._sweep_interval_ms = (sweep_interval_seconds or window_seconds) * 1000
        self._clock = clock
        self._lock = threading.RLock()
        self._timestamps_by_key: dict[str, list[int]] = {}
        self._last_sweep_ms: int | None = None

    @property
    def limit(self) -> int:
        return self._limit

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def _prune(self, timestamps: list[int], now_ms: int) -> list[int]:
        return [t for t in timestamps if now_ms - t < self._window_ms]

    def _reset_at_ms(self, recent: list[int], now_ms: int) -> int:
        if not recent:
            return now_ms
        return recent[0] + self._window_ms

    def consume(self, key: str) -> RateLimitResult:
        """Check the trailing window for ``key`` and record ``now`` if allowed.

        Raises:
            ValueError: If key is empty.
        """
        if not key:
            raise ValueError("key must be a non-empty string")

        with self._lock:
            now_ms = self._now_ms()
            self._maybe_sweep_locked(now_ms)

            recent = self._prune(self._timestamps_by_key.get(key, []), now_ms)

            if len(recent) >= self._limit:
                self._timestamps_by_key[key] = recent
                reset_at_ms = self._reset_at_ms(recent, now_ms)
                retry_after = max(0, math.ceil((reset_at_ms - now_ms) / 1000))
                return RateLimitResult(
                    allowed=False,
                    limit=self._limit,
                    remaining=0,
                    reset_at=math.ceil(reset_at_ms / 1000),
                    retry_after_seconds=retry_after,
                )

            recent.append(now_ms)
            self._timestamps_by_key[key] = recent
            return RateLimitResult(
                allowed=True,
                limit=self._limit,
                remaining=self._limit - len(recent),
                reset_at=math.ceil(self._reset_at_ms(recent, now_ms) / 1000),
                retry_after_seconds=None,
            )

    def recorded(self, key: str) -> list[int]:
        """Return a copy of the stored admission timestamps for ``key``."""
        with self._lock:
            return list(self._timestamps_by_key.get(key, []))

    def __len__(self) -> int:
        with self._lock:
            return len(self._timestamps_by_key)

    def sweep(self) -> int:
        """Drop keys with no admissions inside the window.

        Returns:
            Number of keys evicted.
        """
        with self._lock:
            return self._sweep_locked(self._now_ms())

    def _maybe_sweep_locked(self, now_ms: int) -> None:
        if self._last_sweep_ms is None:
            self._last_sweep_ms = now_ms
            return
        if now_ms - self._last_sweep_ms >= self._sweep_interval_ms:
            self._sweep_locked(now_ms)

    def _sweep_locked(self, now_ms: int) -> int:
        idle_keys = [
            key
            for key, timestamps in self._timestamps_by_key.items()
            if not self._prune(timestamps, now_ms)
        ]
        for key in idle_keys:
            del self._timestamps_by_key[key]
        self._last_sweep_ms = now_ms

        if idle_keys:
            logger.debug(
                "rate_limit.swept",
                extra={"evicted": len(idle_keys), "tracked": len(self._timestamps_by_key)},
            )
        return len(idle_keys)
