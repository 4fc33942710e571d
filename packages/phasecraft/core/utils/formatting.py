"""String helpers shared by naming and matching code."""

from __future__ import annotations

import re
from collections.abc import Callable, Hashable, Iterable
from typing import TypeVar

T = TypeVar("T")


def slugify(value: object) -> str:
    """Lowercase ``value`` and collapse every non-alphanumeric run into '-'.

    Example:
        >>> slugify("DJPhases P1-Entry-Canopy")
        'djphases-p1-entry-canopy'
    """
    return re.sub(r"[^a-z0-9]+", "-", str(value).lower()).strip("-")


def normalize_text(value: object) -> str:
    """Trim and lowercase for case-insensitive comparisons (None -> '')."""
    return str(value if value is not None else "").strip().lower()


def unique_by(items: Iterable[T], key: Callable[[T], Hashable] = lambda item: item) -> list[T]:
    """Drop later duplicates while keeping first-occurrence order."""
    seen: set[Hashable] = set()
    result: list[T] = []
    for item in items:
        k = key(item)
        if k not in seen:
            seen.add(k)
            result.append(item)
    return result
