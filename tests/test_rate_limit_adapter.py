"""Unit tests for the in-memory sliding-window rate limiter."""

from unittest.mock import Mock

import pytest

from ideas_api.adapters.rate_limit.in_memory import InMemorySlidingWindowRateLimiter

HOUR = 3600


def test_allows_up_to_limit_in_window() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemorySlidingWindowRateLimiter(limit=5, window_seconds=HOUR, clock=clock)

    for _ in range(4):
        assert limiter.consume("k").allowed is True
    result = limiter.consume("k")
    assert result.allowed is True
    assert result.remaining == 0


def test_sixth_attempt_within_hour_is_rejected() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemorySlidingWindowRateLimiter(limit=5, window_seconds=HOUR, clock=clock)

    for i in range(5):
        clock.return_value = 1000.0 + i * 60
        assert limiter.check_and_record("k") is True

    clock.return_value = 1000.0 + 59 * 60
    blocked = limiter.consume("k")
    assert blocked.allowed is False
    assert blocked.remaining == 0
    assert blocked.retry_after_seconds == 60


def test_admits_again_once_earliest_timestamp_leaves_window() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemorySlidingWindowRateLimiter(limit=5, window_seconds=HOUR, clock=clock)

    for i in range(5):
        clock.return_value = 1000.0 + i
        assert limiter.check_and_record("k") is True

    clock.return_value = 1000.0 + HOUR - 0.5
    assert limiter.check_and_record("k") is False

    # exactly one hour after the earliest admission it no longer counts
    clock.return_value = 1000.0 + HOUR
    assert limiter.check_and_record("k") is True
    # the other four are still inside the window
    assert limiter.check_and_record("k") is False


def test_window_is_sliding_not_fixed() -> None:
    clock = Mock(return_value=0.0)
    limiter = InMemorySlidingWindowRateLimiter(limit=2, window_seconds=10, clock=clock)

    clock.return_value = 8.0
    assert limiter.check_and_record("k") is True
    clock.return_value = 9.0
    assert limiter.check_and_record("k") is True

    # a fixed window would reset at t=10
    clock.return_value = 11.0
    assert limiter.check_and_record("k") is False

    clock.return_value = 18.0
    assert limiter.check_and_record("k") is True


def test_rejected_attempts_do_not_consume_slots() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemorySlidingWindowRateLimiter(limit=2, window_seconds=HOUR, clock=clock)

    limiter.consume("k")
    limiter.consume("k")
    stored = limiter.recorded("k")

    for i in range(10):
        clock.return_value = 1000.0 + i
        assert limiter.check_and_record("k") is False
        assert limiter.recorded("k") == stored

    assert stored == [1_000_000, 1_000_000]


def test_rejection_prunes_expired_timestamps() -> None:
    clock = Mock(return_value=0.0)
    limiter = InMemorySlidingWindowRateLimiter(limit=2, window_seconds=10, clock=clock)

    limiter.consume("k")
    clock.return_value = 5.0
    limiter.consume("k")

    clock.return_value = 9.0
    assert limiter.consume("k").allowed is False

    clock.return_value = 12.0
    assert limiter.recorded("k") == [0, 5000]
    assert limiter.consume("k").allowed is True
    assert limiter.recorded("k") == [5000, 12000]


def test_isolated_by_key() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemorySlidingWindowRateLimiter(limit=1, window_seconds=60, clock=clock)

    assert limiter.consume("k1").allowed is True
    assert limiter.consume("k1").allowed is False

    assert limiter.consume("k2").allowed is True


def test_sweep_evicts_idle_keys() -> None:
    clock = Mock(return_value=0.0)
    limiter = InMemorySlidingWindowRateLimiter(limit=3, window_seconds=10, clock=clock)

    limiter.consume("idle")
    clock.return_value = 8.0
    limiter.consume("active")
    assert len(limiter) == 2

    clock.return_value = 12.0
    assert limiter.sweep() == 1
    assert len(limiter) == 1
    assert limiter.recorded("idle") == []
    assert limiter.recorded("active") == [8000]


def test_consume_sweeps_periodically() -> None:
    clock = Mock(return_value=0.0)
    limiter = InMemorySlidingWindowRateLimiter(
        limit=3, window_seconds=10, sweep_interval_seconds=30, clock=clock
    )

    for i in range(5):
        limiter.consume(f"client-{i}")
    assert len(limiter) == 5

    clock.return_value = 25.0
    limiter.consume("late")
    assert len(limiter) == 6

    clock.return_value = 30.0
    limiter.consume("later")
    assert len(limiter) == 2


@pytest.mark.parametrize(
    "kwargs",
    [
        {"limit": 0, "window_seconds": 60},
        {"limit": 1, "window_seconds": 0},
        {"limit": 1, "window_seconds": 60, "sweep_interval_seconds": 0},
    ],
)
def test_invalid_constructor_args(kwargs: dict) -> None:
    with pytest.raises(ValueError):
        InMemorySlidingWindowRateLimiter(**kwargs)


def test_invalid_consume_args() -> None:
    limiter = InMemorySlidingWindowRateLimiter(limit=1, window_seconds=60)

    with pytest.raises(ValueError):
        limiter.consume("")
