"""
Bounded parallel execution primitives.

Key Components:
    - ChunkedRunner: Runs a task per item, one chunk of items at a time
    - IntervalLimiter: Fixed-window throttle awaited between chunks
    - Poller / poll: Repeats a task until it returns a usable result

Example:
    >>> from boundedrun.parallel import interval_limiter, run_all_settled
    >>> limiter = interval_limiter(limit=50, interval_ms=60_000)
    >>> result = await run_all_settled(ids, fetch_one, chunk_size=10, limiter=limiter)
    >>> raise_if_errored(result)
"""

from .interval_limiter import IntervalLimiter, LimiterStats, interval_limiter
from .poll import PollConfig, PollContinue, Poller, poll, sleep
from .runner import (
    ChunkedRunner,
    RunnerConfig,
    raise_if_errored,
    run_all_settled,
    run_throw_first_reject,
)

__all__ = [
    "ChunkedRunner",
    "RunnerConfig",
    "run_all_settled",
    "run_throw_first_reject",
    "raise_if_errored",
    "IntervalLimiter",
    "LimiterStats",
    "interval_limiter",
    "PollConfig",
    "PollContinue",
    "Poller",
    "poll",
    "sleep",
]
