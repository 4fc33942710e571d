"""Effect config synthesis.

Turns a phase's base values and a motion profile into a parameter map for
one effect type. Only keys the effect's schema recognises are written, so a
config built for one effect never carries parameters of another.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from phasecraft.core.show.catalog import DEFAULT_PROFILE_BY_MODE, MOTION_PROFILES
from phasecraft.core.show.errors import ConfigurationError
from phasecraft.core.show.models import MotionProfile, Palette, PhaseDefinition, ShowMode
from phasecraft.core.show.schema import supports
from phasecraft.core.utils.math import clamp

MIN_SPEED = 0.25
MAX_SPEED = 9.0
MIN_BRIGHTNESS = 0.05
MAX_BRIGHTNESS = 1.0


def resolve_motion_profile(name: str | None, mode: ShowMode) -> MotionProfile:
    """Look up a motion profile, defaulting per mode when ``name`` is empty.

    Raises:
        ConfigurationError: If ``name`` is not a known profile.
    """
    if not name:
        return MOTION_PROFILES[DEFAULT_PROFILE_BY_MODE[mode]]
    try:
        return MOTION_PROFILES[name]
    except KeyError:
        known = ", ".join(sorted(MOTION_PROFILES))
        raise ConfigurationError(f"Unknown motion profile '{name}' (known: {known})") from None


def base_speed(phase: PhaseDefinition, mode: ShowMode) -> float:
    return phase.speed + 1 if mode is ShowMode.CRAZY else phase.speed


def synth_speed(phase: PhaseDefinition, mode: ShowMode, profile: MotionProfile) -> float:
    return clamp(base_speed(phase, mode) * profile.speed_multiplier, MIN_SPEED, MAX_SPEED)


def synth_brightness(phase: PhaseDefinition, profile: MotionProfile) -> float:
    return clamp(phase.brightness + profile.brightness_delta, MIN_BRIGHTNESS, MAX_BRIGHTNESS)


def _apply_supported(
    config: dict[str, Any], props: frozenset[str], values: Mapping[str, Any] | None
) -> None:
    for key, value in (values or {}).items():
        if value is not None and supports(props, key):
            config[key] = value


def build_effect_config(
    props: frozenset[str],
    phase: PhaseDefinition,
    palette: Palette,
    profile: MotionProfile,
    *,
    role_defaults: Mapping[str, Any] | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Synthesize the parameter map for one effect on one device.

    Args:
        props: Property names the effect's schema recognises.
        phase: Phase supplying base colour, speed and brightness.
        palette: Palette of the (phase, mode) pair; its id is written as the
            gradient pointer and its stops fill the colour slots.
        profile: Motion profile scaling speed/brightness.
        role_defaults: Layer-role defaults, applied after the computed values.
        overrides: Explicit values, applied last and winning over everything.

    Returns:
        Parameter map containing only keys in ``props``.
    """
    stops = palette.stops
    computed: dict[str, Any] = {
        "background_color": phase.background,
        "gradient": palette.palette_id,
        "color": stops.mid,
        "color_lows": stops.low,
        "color_mids": stops.mid,
        "color_high": stops.high,
        "strobe_color": stops.high,
        "mirror": profile.mirror,
        "speed": synth_speed(phase, palette.mode, profile),
        "brightness": synth_brightness(phase, profile),
        "frequency_range": profile.frequency_range,
        "sensitivity": profile.sensitivity,
    }

    config: dict[str, Any] = {}
    _apply_supported(config, props, computed)
    _apply_supported(config, props, role_defaults)
    _apply_supported(config, props, overrides)
    return config


__all__ = [
    "MAX_BRIGHTNESS",
    "MAX_SPEED",
    "MIN_BRIGHTNESS",
    "MIN_SPEED",
    "base_speed",
    "build_effect_config",
    "resolve_motion_profile",
    "synth_brightness",
    "synth_speed",
]
