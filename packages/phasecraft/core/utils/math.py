"""Numeric helpers used by parameter synthesis and palette stops."""

from __future__ import annotations

import math


def clamp(value: float, min_val: float, max_val: float) -> float:
    """Limit ``value`` to the closed range [min_val, max_val]."""
    return max(min_val, min(max_val, value))


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (not banker's rounding).

    Example:
        >>> round_half_up(2.5), round(2.5)
        (3, 2)
    """
    return math.floor(value + 0.5)
