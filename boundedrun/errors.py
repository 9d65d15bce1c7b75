from __future__ import annotations

from typing import Any


class BoundedRunError(Exception):
    """Base class for errors raised by boundedrun itself."""


class InvalidArgumentError(BoundedRunError, ValueError):
    """Raised when a helper is configured with a value it cannot work with."""


class PollError(BoundedRunError):
    """Raised when a poll runs out of attempts without a usable result."""

    def __init__(self, attempts: int, message: str = "max attempts reached") -> None:
        super().__init__(message)
        self.attempts = attempts


class AggregateTaskError(BoundedRunError):
    """
    Raised by ``raise_if_errored`` when a settled run collected errors.

    The message is the two-space indented JSON array of each error's string
    form; the original objects stay available on ``errors``.
    """

    def __init__(self, message: str, errors: list[Any]) -> None:
        super().__init__(message)
        self.errors = list(errors)
