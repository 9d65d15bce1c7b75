"""
Sequence helpers used by the chunked runner.

``chunk`` partitions work for the runner; the comparator builders are small
sorting utilities that treat ``None`` as "sorts last" in either direction.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from functools import cmp_to_key
from typing import Any, Callable, Iterable, TypeVar

from .errors import InvalidArgumentError

T = TypeVar("T")

Key = str | int | Callable[[Any], Any] | None
Comparator = Callable[[Any, Any], int]


def validate_chunk_size(size: float | None) -> int | None:
    """Return ``size`` as an int, or None for "no limit"; raise if malformed."""
    if size is None or size == math.inf:
        return None
    if (
        isinstance(size, bool)
        or not isinstance(size, (int, float))
        or size <= 0
        or size % 1 != 0
    ):
        raise InvalidArgumentError("chunk size must be a positive integer")
    return int(size)


def chunk(items: Iterable[T], size: float | None = None) -> list[list[T]]:
    """
    Split ``items`` into contiguous chunks of at most ``size`` elements.

    Args:
        items: Any iterable; it is materialised into a list first
        size: Positive integer chunk width, or None / math.inf for one chunk

    Returns:
        List of chunks. The last chunk may be shorter; no chunk is empty.

    Raises:
        InvalidArgumentError: If ``size`` is not a positive integer or infinity
            (only checked when there is something to chunk)

    Example:
        >>> chunk([1, 2, 3, 4, 5], 2)
        [[1, 2], [3, 4], [5]]
    """
    items = list(items)
    if not items:
        return []
    step = validate_chunk_size(size)
    if step is None:
        return [items]
    return [items[i : i + step] for i in range(0, len(items), step)]


def flatten_once(values: Iterable[Any]) -> list[Any]:
    """Flatten one level; lists and tuples are spread, anything else is kept."""
    flat: list[Any] = []
    for value in values:
        if isinstance(value, (list, tuple)):
            flat.extend(value)
        else:
            flat.append(value)
    return flat


def extractor(key: Key) -> Callable[[Any], Any]:
    """
    Turn a key spec into a ``(element) -> value`` function.

    A string reads a mapping key (missing -> None) or, for other objects, an
    attribute. An int indexes into a sequence. Callables are returned as-is.
    """
    if key is None:
        return lambda element: element
    if callable(key):
        return key
    if isinstance(key, str):
        def _get(element: Any) -> Any:
            if isinstance(element, Mapping):
                return element.get(key)
            return getattr(element, key, None)

        return _get
    if isinstance(key, int) and not isinstance(key, bool):
        return lambda element: element[key]
    raise InvalidArgumentError(f"Unsupported key: {key!r}")


def _compare_none(a: Any, b: Any) -> int | None:
    # None always sorts to the end
    if b is None:
        return 0 if a is None else -1
    if a is None:
        return 1
    return None


def ascending(key: Key = None) -> Comparator:
    """Build an ascending ``(a, b) -> int`` comparator; None values go last."""
    get = extractor(key)

    def compare(a: Any, b: Any) -> int:
        va, vb = get(a), get(b)
        result = _compare_none(va, vb)
        if result is not None:
            return result
        return -1 if va < vb else 1 if vb < va else 0

    return compare


def descending(key: Key = None) -> Comparator:
    """Build a descending ``(a, b) -> int`` comparator; None values go last."""
    get = extractor(key)

    def compare(a: Any, b: Any) -> int:
        va, vb = get(a), get(b)
        result = _compare_none(va, vb)
        if result is not None:
            return result
        return -1 if va > vb else 1 if vb > va else 0

    return compare


def sort_by(items: Iterable[T], key: Key = None, reverse: bool = False) -> list[T]:
    comparator = descending(key) if reverse else ascending(key)
    return sorted(items, key=cmp_to_key(comparator))
