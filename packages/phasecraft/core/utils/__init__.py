"""Shared utilities for phasecraft."""

from phasecraft.core.utils.formatting import normalize_text, slugify, unique_by
from phasecraft.core.utils.math import clamp, round_half_up

__all__ = [
    "clamp",
    "normalize_text",
    "round_half_up",
    "slugify",
    "unique_by",
]
