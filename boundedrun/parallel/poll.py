"""
Polling helpers.

``poll`` calls a task repeatedly, with a fixed gap after each attempt, until
the task hands back something other than a keep-polling sentinel (``None``,
``False`` or ``PollContinue``). Falsy results such as ``0`` or ``""`` end the
poll like any other value.

Example:
    >>> async def check(attempt):
    ...     return await fetch_status() or None
    >>> status = await poll(check, interval_ms=500, max_attempts=20)
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from ..errors import InvalidArgumentError, PollError

logger = logging.getLogger(__name__)

PollTask = Callable[[int], Any | Awaitable[Any]]


class _PollContinue:
    def __repr__(self) -> str:
        return "PollContinue"


# Explicit "not done yet" marker for tasks whose real results may be None/False
PollContinue = _PollContinue()


async def sleep(milliseconds: float) -> None:
    """Suspend the current coroutine for ``milliseconds``."""
    await asyncio.sleep(max(0.0, milliseconds) / 1000)


def is_pending(result: Any) -> bool:
    """True when ``result`` means "keep polling"."""
    return result is None or result is False or result is PollContinue


@dataclass
class PollConfig:
    """Configuration for polling.

    Attributes:
        interval_ms: Gap between the end of one attempt and the next
        wait: Delay before the first attempt. True waits interval_ms,
            a number waits that many milliseconds, False/None starts at once
        max_attempts: Give up with PollError after this many attempts
    """

    interval_ms: float = 1000.0
    wait: bool | float | None = False
    max_attempts: int | None = None

    def __post_init__(self) -> None:
        if self.interval_ms < 0:
            raise InvalidArgumentError("interval_ms must be non-negative")
        if self.max_attempts is not None and (
            isinstance(self.max_attempts, bool)
            or not isinstance(self.max_attempts, int)
            or self.max_attempts <= 0
        ):
            raise InvalidArgumentError("max_attempts must be a positive integer")
        if self.wait is not None and not isinstance(self.wait, bool) and (
            not isinstance(self.wait, (int, float)) or self.wait < 0
        ):
            raise InvalidArgumentError("wait must be a boolean or non-negative number")

    @property
    def initial_delay_ms(self) -> float:
        if self.wait is True:
            return self.interval_ms
        if self.wait is False or self.wait is None:
            return 0.0
        return float(self.wait)


class Poller:
    """
    Reusable poll configuration.

    Each call to ``run`` is an independent poll with its own attempt counter.

    Example:
        >>> poller = Poller(interval_ms=250, wait=True, max_attempts=10)
        >>> job = await poller.run(lambda attempt: lookup_job(job_id))
    """

    def __init__(
        self,
        interval_ms: float = 1000.0,
        wait: bool | float | None = False,
        max_attempts: int | None = None,
    ) -> None:
        self._config = PollConfig(
            interval_ms=interval_ms,
            wait=wait,
            max_attempts=max_attempts,
        )

    @classmethod
    def from_config(cls, config: PollConfig) -> "Poller":
        return cls(
            interval_ms=config.interval_ms,
            wait=config.wait,
            max_attempts=config.max_attempts,
        )

    @property
    def config(self) -> PollConfig:
        """Get current configuration."""
        return self._config

    async def run(self, task: PollTask) -> Any:
        """
        Poll ``task`` until it returns a terminal result.

        Args:
            task: Called with the attempt index (0, 1, 2, ...); may be sync
                or return an awaitable

        Returns:
            The first result that is not a keep-polling sentinel

        Raises:
            PollError: If max_attempts is set and every attempt was pending
            Exception: Whatever the task raised, unchanged, on first failure
        """
        config = self._config
        if config.initial_delay_ms:
            await sleep(config.initial_delay_ms)

        attempt = 0
        while True:
            result = task(attempt)
            if inspect.isawaitable(result):
                result = await result

            if not is_pending(result):
                logger.debug("Poll resolved on attempt %d", attempt)
                return result

            attempt += 1
            if config.max_attempts is not None and attempt >= config.max_attempts:
                logger.debug("Poll gave up after %d attempts", attempt)
                raise PollError(attempts=attempt)

            await sleep(config.interval_ms)


async def poll(
    task: PollTask,
    interval_ms: float = 1000.0,
    *,
    wait: bool | float | None = False,
    max_attempts: int | None = None,
) -> Any:
    """Poll ``task`` every ``interval_ms``; see ``Poller.run``."""
    return await Poller(
        interval_ms=interval_ms,
        wait=wait,
        max_attempts=max_attempts,
    ).run(task)
