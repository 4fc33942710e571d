"""Palette generation: per-(phase, mode) colour order and gradient strings."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from phasecraft.core.show.models import Palette, PhaseDefinition, ShowMode
from phasecraft.core.utils.math import round_half_up

_GRADIENT_ANGLE = "90deg"


def palette_id(profile_slug: str, phase_key: str, mode: ShowMode) -> str:
    """Controller gradient id for one palette.

    Example:
        >>> palette_id("djphases", "p1", ShowMode.CRAZY)
        'palette:djphases-p1-crazy'
    """
    return f"palette:{profile_slug}-{phase_key}-{mode.value}"


def gradient_from(colors: Sequence[str]) -> str:
    """Build a CSS linear-gradient with evenly spaced stops.

    A single colour becomes a flat two-stop gradient. Stop percentages round
    half up, so three stops of four land on 33% and 67%.

    Args:
        colors: Ordered colour strings (at least one).

    Returns:
        ``linear-gradient(90deg, ...)`` string.

    Raises:
        ValueError: If ``colors`` is empty.
    """
    if not colors:
        raise ValueError("gradient needs at least one color")
    if len(colors) == 1:
        return f"linear-gradient({_GRADIENT_ANGLE}, {colors[0]} 0%, {colors[0]} 100%)"

    last = len(colors) - 1
    stops = [f"{color} {round_half_up(index / last * 100)}%" for index, color in enumerate(colors)]
    return f"linear-gradient({_GRADIENT_ANGLE}, {', '.join(stops)})"


def build_palette(phase: PhaseDefinition, mode: ShowMode, profile_slug: str) -> Palette:
    """Palette for ``phase`` in ``mode``; crazy is the normal order reversed."""
    colors = tuple(reversed(phase.colors)) if mode is ShowMode.CRAZY else tuple(phase.colors)
    return Palette(
        phase=phase.key,
        mode=mode,
        palette_id=palette_id(profile_slug, phase.key, mode),
        colors=colors,
        gradient=gradient_from(colors),
    )


def build_palettes(phases: Iterable[PhaseDefinition], profile_slug: str) -> list[Palette]:
    """One normal and one crazy palette per phase, in phase order."""
    return [
        build_palette(phase, mode, profile_slug)
        for phase in phases
        for mode in (ShowMode.NORMAL, ShowMode.CRAZY)
    ]


__all__ = ["build_palette", "build_palettes", "gradient_from", "palette_id"]
