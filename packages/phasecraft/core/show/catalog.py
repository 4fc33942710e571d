"""Built-in show tables: phases, motion profiles, fallbacks, and scene specs.

Everything here is built once at import and exposed read-only
(MappingProxyType / tuples of frozen models).
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from phasecraft.core.show.models import (
    BlenderSceneSpec,
    DirectSceneSpec,
    LayerSpec,
    MotionProfile,
    PhaseDefinition,
    ShowMode,
)

NORMAL = ShowMode.NORMAL
CRAZY = ShowMode.CRAZY

SHOW_TAG = "djphases"
COMPANION_SUFFIXES: tuple[str, ...] = ("-background", "-foreground", "-mask")

DEFAULT_SCENE_DURATION_MS = 15000
STROBE_SCENE_DURATION_MS = 8000
RAPID_FLOW_SCENE_DURATION_MS = 10000
PLAYLIST_MODE = "sequence"

# Scenes without an order or a known role sort after everything else
UNRANKED = 999

RAPID_MOTION_EFFECTS = frozenset({"scroll", "scan"})
RAPID_MOTION_PROFILE = "bullet"
RAPID_TAG = "rapid"
SOLID_COLOR_EFFECTS = frozenset({"singleColor"})
MASK_FINAL_FALLBACK = "singleColor"
MASK_DEFAULT_PROFILE = "strobe"


def _freeze(table: Mapping) -> Mapping:
    return MappingProxyType(dict(table))


EFFECT_FALLBACKS: Mapping[str, tuple[str, ...]] = _freeze(
    {
        "energy2": ("energy", "wavelength"),
        "real_strobe": ("strobe",),
        "blade_power_plus": ("energy", "wavelength"),
        "power": ("energy", "wavelength"),
        "scan": ("scroll", "wavelength"),
        "bands": ("energy", "wavelength"),
        "pitchSpectrum": ("wavelength", "energy"),
        "bar": ("wavelength", "energy"),
        "plasma2d": ("gradient", "wavelength"),
    }
)

_LOWS = "Lows (beat+bass)"

MOTION_PROFILES: Mapping[str, MotionProfile] = _freeze(
    {
        profile.name: profile
        for profile in (
            MotionProfile(
                name="chill",
                speed_multiplier=0.55,
                brightness_delta=-0.15,
                sensitivity=0.6,
                frequency_range="Mids",
                mirror=True,
            ),
            MotionProfile(
                name="flow",
                speed_multiplier=0.8,
                brightness_delta=-0.05,
                sensitivity=0.72,
                frequency_range="Mids",
                mirror=True,
            ),
            MotionProfile(
                name="wobble",
                speed_multiplier=1.1,
                brightness_delta=0.0,
                sensitivity=0.82,
                frequency_range="Mids",
                mirror=True,
            ),
            MotionProfile(
                name="drive",
                speed_multiplier=1.3,
                brightness_delta=0.06,
                sensitivity=0.9,
                frequency_range=_LOWS,
                mirror=False,
            ),
            MotionProfile(
                name="hard",
                speed_multiplier=1.55,
                brightness_delta=0.1,
                sensitivity=0.95,
                frequency_range=_LOWS,
                mirror=False,
            ),
            MotionProfile(
                name="chaos",
                speed_multiplier=1.85,
                brightness_delta=0.13,
                sensitivity=0.98,
                frequency_range=_LOWS,
                mirror=False,
            ),
            MotionProfile(
                name="bullet",
                speed_multiplier=2.3,
                brightness_delta=0.08,
                sensitivity=0.96,
                frequency_range=_LOWS,
                mirror=False,
            ),
            MotionProfile(
                name="strobe",
                speed_multiplier=1.75,
                brightness_delta=0.12,
                sensitivity=0.95,
                frequency_range=_LOWS,
                mirror=False,
            ),
        )
    }
)

# Profile used when a spec names none
DEFAULT_PROFILE_BY_MODE: Mapping[ShowMode, str] = _freeze({NORMAL: "flow", CRAZY: "hard"})

ROLE_WEIGHTS: Mapping[str, int] = _freeze(
    {
        "entry": 10,
        "wobble": 20,
        "build": 30,
        "flow": 40,
        "statement": 50,
        "bullet": 60,
        "peak": 70,
        "hard": 80,
        "accent": 90,
        "exit": 100,
    }
)

PHASE_ORDER: tuple[str, ...] = ("p1", "p2", "p3", "p4")

PHASES: Mapping[str, PhaseDefinition] = _freeze(
    {
        "p1": PhaseDefinition(
            key="p1",
            label="Phase 1",
            tags=("phase1", "jungle", "starter", "warmup"),
            background="#001a00",
            colors=("#228B22", "#00AA00", "#FFFF00", "#0096C8"),
            speed=2,
            brightness=0.7,
        ),
        "p2": PhaseDefinition(
            key="p2",
            label="Phase 2",
            tags=("phase2", "buildup", "anticipation"),
            background="#0A000A",
            colors=("#0044AA", "#00FFFF", "#9900FF"),
            speed=3,
            brightness=0.85,
        ),
        "p3": PhaseDefinition(
            key="p3",
            label="Phase 3",
            tags=("phase3", "peak", "drop", "climax"),
            background="#000000",
            colors=("#9900FF", "#FF00AA", "#FF0000"),
            speed=5,
            brightness=1.0,
        ),
        "p4": PhaseDefinition(
            key="p4",
            label="Phase 4",
            tags=("phase4", "release", "cooldown"),
            background="#000022",
            colors=("#3366CC", "#CC99FF", "#00CCFF"),
            speed=2,
            brightness=0.8,
        ),
    }
)


def _direct(**kwargs) -> DirectSceneSpec:
    return DirectSceneSpec.model_validate(kwargs)


def _layer(effect: str, profile: str, **kwargs) -> LayerSpec:
    return LayerSpec(effect=effect, profile=profile, **kwargs)


_MASK_OFF = {"color": "#000000", "brightness": 0}

DIRECT_SCENE_SPECS: tuple[DirectSceneSpec, ...] = (
    # Phase 1
    _direct(phase="p1", order=10, role="entry", label="P1-Entry-Canopy", mode=NORMAL,
            effect="wavelength", profile="flow", tags=("entry", "flow")),
    _direct(phase="p1", order=30, role="build", label="P1-Groove-Wobble", mode=NORMAL,
            effect="energy", profile="wobble", tags=("groove", "wobble")),
    _direct(phase="p1", order=50, role="bullet", label="P1-Lightning-Vines", mode=CRAZY,
            effect="scroll", profile="bullet", tags=("rapid", "bullet", "flow"),
            duration_ms=RAPID_FLOW_SCENE_DURATION_MS, fallback_effects=("scan", "wavelength")),
    _direct(phase="p1", order=70, role="statement", label="P1-Disco-Bloom", mode=NORMAL,
            effect="blade_power_plus", profile="drive", tags=("statement", "groove")),
    _direct(phase="p1", order=90, role="accent", label="P1-Snap-Accent", mode=CRAZY,
            effect="strobe", profile="strobe", tags=("strobe", "accent"),
            duration_ms=STROBE_SCENE_DURATION_MS),
    _direct(phase="p1", order=110, role="exit", label="P1-Exit-Bridge", mode=NORMAL,
            effect="gradient", profile="chill", tags=("exit", "bridge")),
    # Phase 2
    _direct(phase="p2", order=10, role="entry", label="P2-Entry-Tension-Mist", mode=NORMAL,
            effect="gradient", profile="chill", tags=("entry", "tension")),
    _direct(phase="p2", order=30, role="build", label="P2-Build-Cyan-Blades", mode=NORMAL,
            effect="blade_power_plus", profile="drive", tags=("build", "blades")),
    _direct(phase="p2", order=50, role="flow", label="P2-Riser-Helix", mode=NORMAL,
            effect="bands", profile="wobble", tags=("riser", "helix"),
            fallback_effects=("energy", "wavelength")),
    _direct(phase="p2", order=60, role="bullet", label="P2-Bullet-Tunnel", mode=CRAZY,
            effect="scan", profile="bullet", tags=("rapid", "bullet", "tunnel"),
            duration_ms=RAPID_FLOW_SCENE_DURATION_MS),
    _direct(phase="p2", order=80, role="hard", label="P2-Hard-Punch", mode=CRAZY,
            effect="power", profile="hard", tags=("impact", "hard")),
    _direct(phase="p2", order=110, role="exit", label="P2-Exit-Uplift", mode=NORMAL,
            effect="wavelength", profile="flow", tags=("exit", "uplift")),
    # Phase 3
    _direct(phase="p3", order=10, role="entry", label="P3-Entry-Dark-Pressure", mode=NORMAL,
            effect="energy", profile="drive", tags=("entry", "dark")),
    _direct(phase="p3", order=30, role="build", label="P3-Redline-Blades", mode=CRAZY,
            effect="blade_power_plus", profile="hard", tags=("redline", "blades")),
    _direct(phase="p3", order=50, role="bullet", label="P3-Laser-Bullet-Rush", mode=CRAZY,
            effect="scroll", profile="bullet", tags=("rapid", "bullet", "laser"),
            duration_ms=RAPID_FLOW_SCENE_DURATION_MS, fallback_effects=("scan", "wavelength")),
    _direct(phase="p3", order=70, role="hard", label="P3-Chaos-Riptide", mode=CRAZY,
            effect="power", profile="chaos", tags=("chaos", "impact")),
    _direct(phase="p3", order=90, role="accent", label="P3-Blackout-Hits", mode=CRAZY,
            effect="real_strobe", profile="strobe", tags=("strobe", "blackout", "accent"),
            duration_ms=STROBE_SCENE_DURATION_MS),
    _direct(phase="p3", order=110, role="exit", label="P3-Exit-Afterglow", mode=NORMAL,
            effect="wavelength", profile="flow", tags=("exit", "afterglow")),
    # Phase 4
    _direct(phase="p4", order=10, role="entry", label="P4-Entry-Cool-Mist", mode=NORMAL,
            effect="gradient", profile="chill", tags=("entry", "cool")),
    _direct(phase="p4", order=30, role="wobble", label="P4-Aqua-Wobble", mode=NORMAL,
            effect="energy2", profile="wobble", tags=("wobble", "aqua")),
    _direct(phase="p4", order=60, role="bullet", label="P4-Comet-Bullets", mode=CRAZY,
            effect="scan", profile="bullet", tags=("rapid", "comet", "bullet"),
            duration_ms=RAPID_FLOW_SCENE_DURATION_MS, fallback_effects=("scroll", "wavelength")),
    _direct(phase="p4", order=70, role="flow", label="P4-Aurora-Flow", mode=NORMAL,
            effect="wavelength", profile="flow", tags=("aurora", "flow")),
    _direct(phase="p4", order=90, role="accent", label="P4-Soft-Spark", mode=CRAZY,
            effect="strobe", profile="strobe", tags=("strobe", "accent"),
            duration_ms=STROBE_SCENE_DURATION_MS),
    _direct(phase="p4", order=110, role="exit", label="P4-Exit-Reset", mode=NORMAL,
            effect="energy", profile="chill", tags=("exit", "reset")),
)  # fmt: skip

BLENDER_SCENE_SPECS: tuple[BlenderSceneSpec, ...] = (
    # Phase 1
    BlenderSceneSpec(
        phase="p1", order=20, role="wobble", label="P1-Blender-Wobble-Roots", mode=NORMAL,
        tags=("blender", "wobble"),
        background=_layer("gradient", "chill"),
        foreground=_layer("wavelength", "wobble"),
        mask=_layer("singleColor", "chill", overrides=_MASK_OFF),
    ),
    BlenderSceneSpec(
        phase="p1", order=40, role="flow", label="P1-Blender-Flow-Mist", mode=NORMAL,
        tags=("blender", "flow", "chill"),
        background=_layer("singleColor", "chill", overrides={"brightness": 0.25}),
        foreground=_layer("energy", "flow"),
        mask=_layer("gradient", "chill"),
    ),
    BlenderSceneSpec(
        phase="p1", order=60, role="bullet", label="P1-Blender-Bullet-Rain", mode=CRAZY,
        tags=("blender", "rapid", "bullet"),
        background=_layer("gradient", "drive"),
        foreground=_layer("scroll", "bullet", fallback_effects=("scan", "wavelength")),
        mask=_layer("energy", "hard", mode=CRAZY),
        duration_ms=RAPID_FLOW_SCENE_DURATION_MS,
    ),
    BlenderSceneSpec(
        phase="p1", order=100, role="hard", label="P1-Blender-Crazy-Cut", mode=CRAZY,
        tags=("blender", "hard", "chaotic"),
        background=_layer("singleColor", "drive", overrides={"brightness": 0.35}),
        foreground=_layer("blade_power_plus", "hard"),
        mask=_layer("strobe", "strobe", mode=CRAZY),
        duration_ms=STROBE_SCENE_DURATION_MS,
    ),
    # Phase 2
    BlenderSceneSpec(
        phase="p2", order=20, role="wobble", label="P2-Blender-Tension-Wobble", mode=NORMAL,
        tags=("blender", "wobble", "tension"),
        background=_layer("gradient", "chill"),
        foreground=_layer("energy", "wobble"),
        mask=_layer("singleColor", "chill", overrides=_MASK_OFF),
    ),
    BlenderSceneSpec(
        phase="p2", order=40, role="flow", label="P2-Blender-Lift-Helix", mode=NORMAL,
        tags=("blender", "lift", "flow"),
        background=_layer("singleColor", "drive", overrides={"brightness": 0.3}),
        foreground=_layer("bands", "drive", fallback_effects=("energy", "wavelength")),
        mask=_layer("energy", "hard", mode=CRAZY),
    ),
    BlenderSceneSpec(
        phase="p2", order=60, role="bullet", label="P2-Blender-Bullet-Tunnel", mode=CRAZY,
        tags=("blender", "rapid", "bullet"),
        background=_layer("gradient", "drive"),
        foreground=_layer("scan", "bullet", fallback_effects=("scroll", "wavelength")),
        mask=_layer("strobe", "strobe", mode=CRAZY),
        duration_ms=RAPID_FLOW_SCENE_DURATION_MS,
    ),
    BlenderSceneSpec(
        phase="p2", order=100, role="hard", label="P2-Blender-Hard-Gate", mode=CRAZY,
        tags=("blender", "hard", "gate"),
        background=_layer("singleColor", "hard", overrides={"brightness": 0.4}),
        foreground=_layer("power", "hard"),
        mask=_layer("real_strobe", "strobe", mode=CRAZY, fallback_effects=("strobe",)),
        duration_ms=STROBE_SCENE_DURATION_MS,
    ),
    # Phase 3
    BlenderSceneSpec(
        phase="p3", order=20, role="wobble", label="P3-Blender-Wobble-Core", mode=NORMAL,
        tags=("blender", "wobble", "core"),
        background=_layer("singleColor", "chill", overrides={"brightness": 0.2}),
        foreground=_layer("energy", "hard"),
        mask=_layer("gradient", "flow"),
    ),
    BlenderSceneSpec(
        phase="p3", order=40, role="hard", label="P3-Blender-Impact-Splitter", mode=CRAZY,
        tags=("blender", "impact", "hard"),
        background=_layer("gradient", "drive"),
        foreground=_layer("blade_power_plus", "hard"),
        mask=_layer("energy", "hard", mode=CRAZY),
    ),
    BlenderSceneSpec(
        phase="p3", order=60, role="bullet", label="P3-Blender-Bullet-Storm", mode=CRAZY,
        tags=("blender", "rapid", "bullet", "storm"),
        background=_layer("gradient", "chaos"),
        foreground=_layer("scan", "bullet", fallback_effects=("scroll", "wavelength")),
        mask=_layer("strobe", "strobe", mode=CRAZY),
        duration_ms=RAPID_FLOW_SCENE_DURATION_MS,
    ),
    BlenderSceneSpec(
        phase="p3", order=100, role="hard", label="P3-Blender-Chaos-Maskdown", mode=CRAZY,
        tags=("blender", "chaos", "hard"),
        background=_layer("singleColor", "hard", overrides={"brightness": 0.38}),
        foreground=_layer("power", "chaos"),
        mask=_layer("real_strobe", "strobe", mode=CRAZY, fallback_effects=("strobe",)),
        duration_ms=STROBE_SCENE_DURATION_MS,
    ),
    # Phase 4
    BlenderSceneSpec(
        phase="p4", order=20, role="flow", label="P4-Blender-Chill-Drift", mode=NORMAL,
        tags=("blender", "chill", "flow"),
        background=_layer("gradient", "chill"),
        foreground=_layer("energy2", "flow"),
        mask=_layer("singleColor", "chill", overrides=_MASK_OFF),
    ),
    BlenderSceneSpec(
        phase="p4", order=40, role="wobble", label="P4-Blender-Lavender-Wobble", mode=NORMAL,
        tags=("blender", "wobble", "lavender"),
        background=_layer("singleColor", "chill", overrides={"brightness": 0.24}),
        foreground=_layer("wavelength", "wobble"),
        mask=_layer("energy", "flow"),
    ),
    BlenderSceneSpec(
        phase="p4", order=60, role="bullet", label="P4-Blender-Comet-Trails", mode=CRAZY,
        tags=("blender", "rapid", "comet", "bullet"),
        background=_layer("gradient", "flow"),
        foreground=_layer("scroll", "bullet", fallback_effects=("scan", "wavelength")),
        mask=_layer("energy", "drive", mode=CRAZY),
        duration_ms=RAPID_FLOW_SCENE_DURATION_MS,
    ),
    BlenderSceneSpec(
        phase="p4", order=100, role="exit", label="P4-Blender-Night-Flow", mode=CRAZY,
        tags=("blender", "night", "exit"),
        background=_layer("singleColor", "chill", overrides={"brightness": 0.22}),
        foreground=_layer("wavelength", "flow"),
        mask=_layer("singleColor", "chill", overrides=_MASK_OFF),
    ),
)  # fmt: skip
