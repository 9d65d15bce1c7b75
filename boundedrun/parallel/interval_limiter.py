"""
Interval Limiter for chunked execution.

Implements a fixed-window throttle keyed on caller-reported work: every call
reports how many items were just added, and once the running count reaches
the limit the caller is suspended until the current window has lasted
``interval_ms``. The window then restarts with a zero count.

Typical use is as the ``limiter`` hook of the chunked runner, which reports
each chunk's size after the chunk settles:

    >>> limiter = IntervalLimiter(limit=100, interval_ms=60_000)
    >>> result = await run_all_settled(urls, fetch, chunk_size=10, limiter=limiter)

Concurrency:
    - Callers of one instance are serialised with an asyncio.Lock
    - Instances never share state
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable

from ..errors import InvalidArgumentError

logger = logging.getLogger(__name__)


@dataclass
class IntervalLimiterConfig:
    """Configuration for the interval limiter.

    Attributes:
        limit: Item count that closes the current window
        interval_ms: Minimum window length in milliseconds
    """

    limit: float
    interval_ms: float = 60_000.0


@dataclass
class LimiterStats:
    """Statistics for limiter monitoring.

    Attributes:
        total_added: Sum of all counts reported
        throttled_count: Number of calls that reached the limit
        total_wait_seconds: Time spent suspended
        windows_completed: Number of window resets
    """

    total_added: float = 0
    throttled_count: int = 0
    total_wait_seconds: float = 0.0
    windows_completed: int = 0


class IntervalLimiter:
    """
    Fixed-window throttle for batches of work.

    Example:
        >>> limiter = IntervalLimiter(limit=3, interval_ms=1000)
        >>> await limiter(1)  # returns at once
        >>> await limiter(1)  # returns at once
        >>> await limiter(1)  # waits out the rest of the 1s window
    """

    def __init__(
        self,
        limit: float,
        interval_ms: float = 60_000.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize the limiter.

        Args:
            limit: Count at which callers start being suspended (> 0)
            interval_ms: Window length in milliseconds (>= 0)
            clock: Seconds-valued time source, monotonic by default
        """
        if isinstance(limit, bool) or not isinstance(limit, (int, float)) or limit <= 0:
            raise InvalidArgumentError("limit must be a positive number")
        if interval_ms < 0:
            raise InvalidArgumentError("interval_ms must be non-negative")

        self._config = IntervalLimiterConfig(limit=limit, interval_ms=interval_ms)
        self._clock = clock

        # Window state
        self._count: float = 0
        self._window_start = clock()

        self._lock = asyncio.Lock()
        self._stats = LimiterStats()

        logger.info(
            "IntervalLimiter initialized: limit=%s per %.0f ms",
            limit,
            interval_ms,
        )

    @property
    def config(self) -> IntervalLimiterConfig:
        """Get current configuration."""
        return self._config

    @property
    def stats(self) -> LimiterStats:
        """Get current limiter statistics."""
        return self._stats

    @property
    def count(self) -> float:
        """Items reported in the current window."""
        return self._count

    @property
    def window_start(self) -> float:
        """Clock reading at which the current window began."""
        return self._window_start

    def remaining_ms(self) -> float:
        """Milliseconds left in the current window, never negative."""
        elapsed_ms = (self._clock() - self._window_start) * 1000
        return max(0.0, self._config.interval_ms - elapsed_ms)

    async def add(self, added: float = 1) -> None:
        """
        Report ``added`` items and wait if the window is full.

        Args:
            added: Number of items processed since the last call

        Raises:
            asyncio.CancelledError: If the wait is cancelled
        """
        async with self._lock:
            self._count += added
            self._stats.total_added += added

            if self._count < self._config.limit:
                return

            wait_seconds = self.remaining_ms() / 1000
            self._stats.throttled_count += 1
            logger.debug(
                "Interval limit reached: waiting %.3fs (count=%s, limit=%s)",
                wait_seconds,
                self._count,
                self._config.limit,
            )

            if wait_seconds > 0:
                await asyncio.sleep(wait_seconds)
                self._stats.total_wait_seconds += wait_seconds

            self._count = 0
            self._window_start = self._clock()
            self._stats.windows_completed += 1

    async def __call__(self, added: float = 1) -> None:
        await self.add(added)

    def reset_stats(self) -> None:
        """Reset statistics counters."""
        self._stats = LimiterStats()


def interval_limiter(limit: float, interval_ms: float = 60_000.0) -> IntervalLimiter:
    """
    Create a limiter to pass as the runner's ``limiter`` hook.

    Args:
        limit: Items allowed per window
        interval_ms: Window length in milliseconds (default one minute)

    Returns:
        A new IntervalLimiter; awaiting ``limiter(n)`` reports n items
    """
    return IntervalLimiter(limit=limit, interval_ms=interval_ms)
