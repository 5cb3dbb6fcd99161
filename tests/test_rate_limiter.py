"""Unit tests for the fixed-window rate limiter."""

import pytest

from services.rate_limiter import RateLimiter


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_allows_up_to_max_then_blocks():
    clock = FakeClock()
    limiter = RateLimiter(5, 60, clock=clock)

    assert all(limiter.is_allowed("1.2.3.4") for _ in range(5))
    assert not limiter.is_allowed("1.2.3.4")
    assert limiter.remaining("1.2.3.4") == 0


def test_keys_are_independent():
    limiter = RateLimiter(1, 60, clock=FakeClock())
    assert limiter.is_allowed("a")
    assert limiter.is_allowed("b")
    assert not limiter.is_allowed("a")


def test_window_resets():
    clock = FakeClock()
    limiter = RateLimiter(2, 60, clock=clock)
    limiter.is_allowed("k")
    limiter.is_allowed("k")
    assert not limiter.is_allowed("k")

    clock.now += 61
    assert limiter.remaining("k") == 2
    assert limiter.is_allowed("k")


def test_reset_clears_all_buckets():
    limiter = RateLimiter(1, 60, clock=FakeClock())
    limiter.is_allowed("k")
    limiter.reset()
    assert limiter.is_allowed("k")


def test_rejects_non_positive_limits():
    with pytest.raises(ValueError):
        RateLimiter(0, 60)
    with pytest.raises(ValueError):
        RateLimiter(5, 0)
