"""Tests for palette generation."""

from __future__ import annotations

import pytest

from phasecraft.core.show.catalog import PHASE_ORDER, PHASES
from phasecraft.core.show.models import PhaseDefinition, ShowMode
from phasecraft.core.show.palette import build_palette, build_palettes, gradient_from, palette_id


def _phase(*colors: str) -> PhaseDefinition:
    return PhaseDefinition(
        key="px", label="Phase X", background="#000000", colors=colors, speed=2, brightness=0.5
    )


def test_single_color_gradient_is_flat() -> None:
    """Test single colour gives a flat gradient."""
    assert gradient_from(["#FF0000"]) == "linear-gradient(90deg, #FF0000 0%, #FF0000 100%)"


def test_three_color_gradient_stops() -> None:
    """Test stops for a three-colour gradient."""
    assert (
        gradient_from(["#A", "#B", "#C"]) == "linear-gradient(90deg, #A 0%, #B 50%, #C 100%)"
    )


def test_four_color_gradient_rounds_half_up() -> None:
    """Test four-colour stops round half up."""
    colors = ["#228B22", "#00AA00", "#FFFF00", "#0096C8"]
    assert gradient_from(colors) == (
        "linear-gradient(90deg, #228B22 0%, #00AA00 33%, #FFFF00 67%, #0096C8 100%)"
    )


def test_eight_stops_round_half_up_not_to_even() -> None:
    """Test stops round half up rather than to even."""
    # 1/8 = 12.5% and 5/8 = 62.5% both round up
    gradient = gradient_from([f"#{i}" for i in range(9)])
    assert "#1 13%" in gradient
    assert "#5 63%" in gradient


def test_empty_gradient_rejected() -> None:
    """Test empty colour list is rejected."""
    with pytest.raises(ValueError):
        gradient_from([])


@pytest.mark.parametrize("phase_key", PHASE_ORDER)
def test_crazy_palette_is_reversed_normal(phase_key: str) -> None:
    """Test crazy palette reverses the normal colours."""
    phase = PHASES[phase_key]
    normal = build_palette(phase, ShowMode.NORMAL, "djphases")
    crazy = build_palette(phase, ShowMode.CRAZY, "djphases")
    assert crazy.colors == tuple(reversed(normal.colors))
    assert normal.colors == phase.colors


def test_phase_one_end_to_end_stops_and_gradient() -> None:
    """Test phase one palette stops and gradient string."""
    palette = build_palette(PHASES["p1"], ShowMode.NORMAL, "djphases")

    stops = palette.stops
    assert stops.low == "#228B22"
    assert stops.mid == "#FFFF00"
    assert stops.high == "#0096C8"
    assert palette.gradient == (
        "linear-gradient(90deg, #228B22 0%, #00AA00 33%, #FFFF00 67%, #0096C8 100%)"
    )
    assert palette.palette_id == "palette:djphases-p1-normal"


def test_single_color_stops_collapse() -> None:
    """Test single colour gives equal low, mid and high stops."""
    stops = build_palette(_phase("#123456"), ShowMode.CRAZY, "x").stops
    assert stops.low == stops.mid == stops.high == "#123456"


def test_palette_id_format() -> None:
    """Test palette id format."""
    assert palette_id("my-show", "p3", ShowMode.CRAZY) == "palette:my-show-p3-crazy"


def test_build_palettes_one_normal_one_crazy_per_phase() -> None:
    """Test one normal and one crazy palette per phase."""
    palettes = build_palettes([PHASES[key] for key in PHASE_ORDER], "djphases")

    assert [(p.phase, p.mode) for p in palettes] == [
        (key, mode) for key in PHASE_ORDER for mode in (ShowMode.NORMAL, ShowMode.CRAZY)
    ]
    assert len({p.palette_id for p in palettes}) == 8
