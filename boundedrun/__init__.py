"""
boundedrun: helpers for running many small async tasks politely.

Chunked parallel execution with an optional between-chunk throttle, polling
with an attempt ceiling, and the sequence helpers they build on.
"""

from .array import ascending, chunk, descending, sort_by
from .errors import AggregateTaskError, BoundedRunError, InvalidArgumentError, PollError
from .parallel import (
    ChunkedRunner,
    IntervalLimiter,
    PollContinue,
    Poller,
    interval_limiter,
    poll,
    raise_if_errored,
    run_all_settled,
    run_throw_first_reject,
    sleep,
)
from .types import FailFastResult, Settlement, SettledResult, SettlementStatus

__version__ = "0.1.0"

__all__ = [
    "chunk",
    "ascending",
    "descending",
    "sort_by",
    "ChunkedRunner",
    "IntervalLimiter",
    "Poller",
    "PollContinue",
    "interval_limiter",
    "poll",
    "sleep",
    "run_all_settled",
    "run_throw_first_reject",
    "raise_if_errored",
    "Settlement",
    "SettlementStatus",
    "SettledResult",
    "FailFastResult",
    "BoundedRunError",
    "InvalidArgumentError",
    "PollError",
    "AggregateTaskError",
]
