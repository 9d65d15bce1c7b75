from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class SettlementStatus(Enum):
    """Terminal state of one task run by the chunked runner."""

    FULFILLED = "fulfilled"
    REJECTED = "rejected"


@dataclass
class Settlement:
    """
    Outcome of a single task.

    Exactly one of ``value`` / ``reason`` is meaningful, depending on ``status``.
    """

    status: SettlementStatus
    value: Any = None
    reason: BaseException | None = None

    @classmethod
    def fulfilled(cls, value: Any) -> "Settlement":
        return cls(status=SettlementStatus.FULFILLED, value=value)

    @classmethod
    def rejected(cls, reason: BaseException) -> "Settlement":
        return cls(status=SettlementStatus.REJECTED, reason=reason)

    @property
    def ok(self) -> bool:
        return self.status is SettlementStatus.FULFILLED


@dataclass
class SettledResult:
    """Aggregate returned by ``run_all_settled``.

    Attributes:
        results: One Settlement per input item, in input order
        values: Fulfilled value per input item, None where the task failed
        returned: Fulfilled values only, relative order kept
        errors: Failure reasons only, relative order kept
    """

    results: list[Settlement] = field(default_factory=list)
    values: list[Any] = field(default_factory=list)
    returned: list[Any] = field(default_factory=list)
    errors: list[BaseException] = field(default_factory=list)

    @property
    def success_count(self) -> int:
        return sum(1 for r in self.results if r.ok)

    @property
    def failure_count(self) -> int:
        return len(self.errors)


@dataclass
class FailFastResult:
    """Aggregate returned by ``run_throw_first_reject``; both fields are the same list."""

    values: list[Any] = field(default_factory=list)
    returned: list[Any] = field(default_factory=list)
