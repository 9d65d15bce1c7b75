"""
Unit tests for IntervalLimiter.

Timing tests use short windows; clock-driven tests inject a fake clock so
window arithmetic can be checked without sleeping.
"""

from __future__ import annotations

import asyncio
import time

import pytest

from boundedrun.errors import InvalidArgumentError
from boundedrun.parallel.interval_limiter import (
    IntervalLimiter,
    IntervalLimiterConfig,
    interval_limiter,
)


class FakeClock:
    def __init__(self, now: float = 100.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestIntervalLimiterTiming:
    """Tests that the limiter actually suspends callers."""

    @pytest.mark.asyncio
    async def test_below_limit_is_instant(self) -> None:
        limiter = interval_limiter(limit=3, interval_ms=500)

        start = time.time()
        await limiter(1)
        await limiter(1)
        elapsed = time.time() - start

        assert elapsed < 0.1
        assert limiter.count == 2

    @pytest.mark.asyncio
    async def test_third_call_waits_for_window(self) -> None:
        limiter = interval_limiter(limit=3, interval_ms=200)

        start = time.time()
        await limiter(1)
        await limiter(1)
        await limiter(1)
        elapsed = time.time() - start

        assert elapsed >= 0.19
        assert elapsed < 1.0
        assert limiter.count == 0

    @pytest.mark.asyncio
    async def test_next_window_behaves_the_same(self) -> None:
        limiter = interval_limiter(limit=3, interval_ms=150)
        for _ in range(3):
            await limiter(1)

        start = time.time()
        await limiter(1)
        await limiter(1)
        assert time.time() - start < 0.1

        await limiter(1)
        assert time.time() - start >= 0.14
        assert limiter.stats.windows_completed == 2

    @pytest.mark.asyncio
    async def test_single_large_report_hits_limit(self) -> None:
        limiter = IntervalLimiter(limit=10, interval_ms=100)
        start = time.time()
        await limiter.add(25)
        assert time.time() - start >= 0.09
        assert limiter.count == 0

    @pytest.mark.asyncio
    async def test_concurrent_callers_are_serialised(self) -> None:
        limiter = IntervalLimiter(limit=2, interval_ms=100)

        start = time.time()
        await asyncio.gather(*(limiter(1) for _ in range(4)))
        elapsed = time.time() - start

        # two full windows
        assert elapsed >= 0.19
        assert limiter.stats.throttled_count == 2


class TestIntervalLimiterClock:
    """Window arithmetic with an injected clock."""

    @pytest.mark.asyncio
    async def test_no_wait_when_window_already_elapsed(self) -> None:
        clock = FakeClock()
        limiter = IntervalLimiter(limit=2, interval_ms=1000, clock=clock)

        await limiter(1)
        clock.now += 5.0
        start = time.time()
        await limiter(1)

        assert time.time() - start < 0.05
        assert limiter.count == 0
        assert limiter.window_start == clock.now
        assert limiter.stats.total_wait_seconds == 0

    def test_remaining_ms(self) -> None:
        clock = FakeClock()
        limiter = IntervalLimiter(limit=5, interval_ms=1000, clock=clock)

        assert limiter.remaining_ms() == 1000
        clock.now += 0.25
        assert limiter.remaining_ms() == pytest.approx(750)
        clock.now += 10
        assert limiter.remaining_ms() == 0

    @pytest.mark.asyncio
    async def test_instances_do_not_share_state(self) -> None:
        first = IntervalLimiter(limit=10, interval_ms=1000)
        second = IntervalLimiter(limit=10, interval_ms=1000)

        await first(4)
        assert first.count == 4
        assert second.count == 0


class TestIntervalLimiterConfig:
    """Tests for configuration and stats."""

    def test_defaults(self) -> None:
        limiter = interval_limiter(limit=5)
        assert limiter.config == IntervalLimiterConfig(limit=5, interval_ms=60_000.0)

    @pytest.mark.parametrize("limit", [0, -1, True, "3"])
    def test_invalid_limit(self, limit) -> None:
        with pytest.raises(InvalidArgumentError):
            IntervalLimiter(limit=limit)

    def test_invalid_interval(self) -> None:
        with pytest.raises(InvalidArgumentError):
            IntervalLimiter(limit=1, interval_ms=-5)

    @pytest.mark.asyncio
    async def test_stats_tracking(self) -> None:
        limiter = IntervalLimiter(limit=100, interval_ms=10)
        await limiter(3)
        await limiter(4)

        assert limiter.stats.total_added == 7
        assert limiter.stats.throttled_count == 0

        limiter.reset_stats()
        assert limiter.stats.total_added == 0
        # window state survives a stats reset
        assert limiter.count == 7
