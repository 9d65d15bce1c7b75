"""
Chunked Runner for bounded parallel execution.

Runs one task per input item, at most one chunk of items at a time:

Architecture:
    - Items are partitioned with ``chunk`` (unbounded when no chunk size)
    - Every task in a chunk runs concurrently via asyncio.gather
    - The next chunk starts only after the current one has fully settled
    - An optional limiter hook is awaited after each chunk with its size

Failure policies:
    - ``run_all_settled``: task failures are collected, never raised
    - ``run_throw_first_reject``: the first failure aborts the run

Tasks may be plain functions or coroutine functions. Nothing is retried;
combine with ``poll`` inside the task when retries are wanted.
"""

from __future__ import annotations

import asyncio
import inspect
import json
import logging
import time
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable, TypeVar

from ..array import chunk, flatten_once, validate_chunk_size
from ..errors import AggregateTaskError
from ..types import FailFastResult, Settlement, SettledResult

logger = logging.getLogger(__name__)

T = TypeVar("T")

Task = Callable[[Any], Any | Awaitable[Any]]
Limiter = Callable[[int], Awaitable[None] | None]


@dataclass
class RunnerConfig:
    """Configuration for the chunked runner.

    Attributes:
        chunk_size: Maximum tasks in flight at once (None for all at once)
        flatten: Flatten one level of values/returned (tasks returning lists)
    """

    chunk_size: int | None = None
    flatten: bool = False


async def _invoke(task: Task, item: Any) -> Any:
    # Sync raises surface as the coroutine's exception
    result = task(item)
    if inspect.isawaitable(result):
        result = await result
    return result


class ChunkedRunner:
    """
    Bounded-concurrency executor.

    Example:
        >>> runner = ChunkedRunner(chunk_size=5, limiter=interval_limiter(100))
        >>> result = await runner.run_all_settled(urls, fetch)
        >>> print(f"{len(result.returned)} ok, {len(result.errors)} failed")
    """

    def __init__(
        self,
        chunk_size: int | None = None,
        limiter: Limiter | None = None,
        flatten: bool = False,
    ) -> None:
        """
        Initialize the runner.

        Args:
            chunk_size: Tasks per chunk, positive integer or None/inf
            limiter: Awaited with each chunk's size after it settles.
                Only ``run_all_settled`` uses it; fail-fast runs never
                await the limiter
            flatten: Flatten one level of values/returned

        Raises:
            InvalidArgumentError: If chunk_size is malformed
        """
        validate_chunk_size(chunk_size)
        self._config = RunnerConfig(chunk_size=chunk_size, flatten=flatten)
        self._limiter = limiter

    @property
    def config(self) -> RunnerConfig:
        """Get current configuration."""
        return self._config

    @property
    def limiter(self) -> Limiter | None:
        return self._limiter

    async def run_all_settled(self, items: Iterable[T], task: Task) -> SettledResult:
        """
        Run ``task`` over ``items`` chunk by chunk, collecting every outcome.

        Args:
            items: Inputs, one task call each
            task: ``(item) -> value`` or ``(item) -> awaitable``

        Returns:
            SettledResult with results/values in input order and
            returned/errors as compacted views
        """
        chunks = chunk(items, self._config.chunk_size)
        result = SettledResult()
        start_time = time.time()

        for chunk_idx, elements in enumerate(chunks):
            logger.debug(
                "Running chunk %d/%d (%d tasks)",
                chunk_idx + 1,
                len(chunks),
                len(elements),
            )
            outcomes = await asyncio.gather(
                *(_invoke(task, item) for item in elements),
                return_exceptions=True,
            )

            for outcome in outcomes:
                if isinstance(outcome, BaseException) and not isinstance(outcome, Exception):
                    raise outcome
                if isinstance(outcome, Exception):
                    logger.warning("Task failed: %s", str(outcome)[:200])
                    result.results.append(Settlement.rejected(outcome))
                    result.values.append(None)
                    result.errors.append(outcome)
                else:
                    result.results.append(Settlement.fulfilled(outcome))
                    result.values.append(outcome)
                    result.returned.append(outcome)

            if self._limiter is not None:
                pending = self._limiter(len(elements))
                if inspect.isawaitable(pending):
                    await pending

        if self._config.flatten:
            result.values = flatten_once(result.values)
            result.returned = flatten_once(result.returned)

        if chunks:
            logger.info(
                "Run complete: %d/%d fulfilled in %d chunks, %.2fs",
                result.success_count,
                len(result.results),
                len(chunks),
                time.time() - start_time,
            )
        return result

    async def run_throw_first_reject(self, items: Iterable[T], task: Task) -> FailFastResult:
        """
        Run ``task`` over ``items`` chunk by chunk, stopping at the first failure.

        Args:
            items: Inputs, one task call each
            task: ``(item) -> value`` or ``(item) -> awaitable``

        Returns:
            FailFastResult whose values and returned are the same list

        Raises:
            Exception: The first exception raised by a task, unchanged.
                Unfinished tasks of that chunk are cancelled and no later
                chunk is started.
        """
        chunks = chunk(items, self._config.chunk_size)
        values: list = []

        if self._limiter is not None:
            logger.debug("Fail-fast run ignores the configured limiter")

        for chunk_idx, elements in enumerate(chunks):
            logger.debug(
                "Running chunk %d/%d (%d tasks, fail fast)",
                chunk_idx + 1,
                len(chunks),
                len(elements),
            )
            futures = [asyncio.ensure_future(_invoke(task, item)) for item in elements]
            try:
                values.extend(await asyncio.gather(*futures))
            except BaseException:
                for future in futures:
                    if not future.done():
                        future.cancel()
                logger.debug("Chunk %d failed; aborting run", chunk_idx + 1)
                raise

        if self._config.flatten:
            values = flatten_once(values)
        return FailFastResult(values=values, returned=values)


async def run_all_settled(
    items: Iterable[T],
    task: Task,
    *,
    chunk_size: int | None = None,
    limiter: Limiter | None = None,
    flatten: bool = False,
) -> SettledResult:
    """Run ``task`` over ``items`` containing failures; see ``ChunkedRunner``."""
    runner = ChunkedRunner(chunk_size=chunk_size, limiter=limiter, flatten=flatten)
    return await runner.run_all_settled(items, task)


async def run_throw_first_reject(
    items: Iterable[T],
    task: Task,
    *,
    chunk_size: int | None = None,
    flatten: bool = False,
) -> FailFastResult:
    """Run ``task`` over ``items`` failing on the first error; see ``ChunkedRunner``."""
    runner = ChunkedRunner(chunk_size=chunk_size, flatten=flatten)
    return await runner.run_throw_first_reject(items, task)


def raise_if_errored(result: Any = None) -> Any:
    """
    Turn a settled result with errors into a raised AggregateTaskError.

    Accepts anything with an ``errors`` attribute or an ``"errors"`` key.
    Returns ``result`` unchanged (including None) when there is nothing to raise.
    """
    if result is None:
        return result
    if isinstance(result, Mapping):
        errors = result.get("errors")
    else:
        errors = getattr(result, "errors", None)

    if errors:
        strings = [str(error) for error in errors]
        raise AggregateTaskError(json.dumps(strings, indent=2), errors)
    return result
