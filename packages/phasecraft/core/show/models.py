"""Show composition models - phases, motion profiles, scene specs, run records.

Static definitions (phases, profiles, scene specs) are frozen so the
module-level tables built from them cannot drift during a run.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from phasecraft.core.controller.models import DeviceInfo
from phasecraft.core.utils.formatting import slugify

_HEX_COLOR = r"^#[0-9A-Fa-f]{6}$"


class ShowMode(str, Enum):
    """Energy mode of a palette or scene.

    Attributes:
        NORMAL: Phase colors in declared order, base speed.
        CRAZY: Reversed colors, base speed + 1.
    """

    NORMAL = "normal"
    CRAZY = "crazy"


class SceneKind(str, Enum):
    """How a scene drives its target devices."""

    DIRECT = "direct"
    BLENDER = "blender"


class LayerRole(str, Enum):
    """Source layer of a blend."""

    BACKGROUND = "background"
    FOREGROUND = "foreground"
    MASK = "mask"


class PhaseDefinition(BaseModel):
    """Named show stage with a fixed base palette, speed, and brightness.

    Attributes:
        key: Stable phase key (e.g. 'p1').
        label: Human-readable label used in playlist names.
        tags: Tags attached to every scene of the phase.
        background: Background color for effects that take one.
        colors: Ordered color stops (normal-mode order).
        speed: Base effect speed.
        brightness: Base brightness (0-1).
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    key: str = Field(..., min_length=1)
    label: str
    tags: tuple[str, ...] = ()
    background: str = Field(..., pattern=_HEX_COLOR)
    colors: tuple[str, ...] = Field(..., min_length=1)
    speed: float = Field(..., gt=0)
    brightness: float = Field(..., ge=0.0, le=1.0)


class MotionProfile(BaseModel):
    """Multipliers/offsets that turn phase base values into effect parameters."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str
    speed_multiplier: float = Field(..., gt=0)
    brightness_delta: float
    sensitivity: float = Field(..., ge=0.0, le=1.0)
    frequency_range: str
    mirror: bool


class LayerSpec(BaseModel):
    """One layer of a blender scene.

    ``mode`` falls back to the scene mode (or ``crazy`` for the mask) when
    left unset; ``profile`` falls back per role.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    effect: str
    fallback_effects: tuple[str, ...] = ()
    profile: str | None = None
    mode: ShowMode | None = None
    overrides: dict[str, Any] = Field(default_factory=dict)


class DirectSceneSpec(BaseModel):
    """Single-effect scene applied to every main target device."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    phase: str
    order: int | None = None
    role: str = "statement"
    label: str
    mode: ShowMode = ShowMode.NORMAL
    effect: str
    fallback_effects: tuple[str, ...] = ()
    profile: str | None = None
    overrides: dict[str, Any] = Field(default_factory=dict)
    duration_ms: int | None = Field(default=None, gt=0)
    tags: tuple[str, ...] = ()


class BlenderSceneSpec(BaseModel):
    """Three-layer (background/foreground/mask) scene per blender-ready target."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    phase: str
    order: int | None = None
    role: str = "statement"
    label: str
    mode: ShowMode = ShowMode.NORMAL
    background: LayerSpec
    foreground: LayerSpec
    mask: LayerSpec
    blender_config: dict[str, Any] = Field(default_factory=dict)
    duration_ms: int | None = Field(default=None, gt=0)
    tags: tuple[str, ...] = ()

    def layer(self, role: LayerRole) -> LayerSpec:
        return {
            LayerRole.BACKGROUND: self.background,
            LayerRole.FOREGROUND: self.foreground,
            LayerRole.MASK: self.mask,
        }[role]


@dataclass(frozen=True)
class PaletteStops:
    """Colors picked from a palette for low/mid/high parameter slots."""

    low: str
    mid: str
    high: str


class Palette(BaseModel):
    """Colors and gradient for one (phase, mode) pair.

    Attributes:
        phase: Phase key.
        mode: Palette mode.
        palette_id: Controller gradient id (``palette:<profile>-<phase>-<mode>``).
        colors: Ordered colors (reversed for crazy).
        gradient: CSS linear-gradient string built from ``colors``.
    """

    model_config = ConfigDict(frozen=True)

    phase: str
    mode: ShowMode
    palette_id: str
    colors: tuple[str, ...] = Field(..., min_length=1)
    gradient: str

    @property
    def stops(self) -> PaletteStops:
        return PaletteStops(
            low=self.colors[0],
            mid=self.colors[len(self.colors) // 2],
            high=self.colors[-1],
        )


class TargetVirtualSet(BaseModel):
    """Main device plus the blend companions found by naming convention."""

    model_config = ConfigDict(frozen=True)

    main: DeviceInfo
    background: DeviceInfo | None = None
    foreground: DeviceInfo | None = None
    mask: DeviceInfo | None = None
    missing: tuple[str, ...] = ()

    @property
    def blender_ready(self) -> bool:
        return not self.missing

    def companion(self, role: LayerRole) -> DeviceInfo:
        device = getattr(self, role.value)
        if device is None:
            raise ValueError(f"'{self.main.id}' has no {role.value} companion")
        return device


class EffectSelection(BaseModel):
    """Outcome of a fallback search: the effect that was accepted."""

    model_config = ConfigDict(frozen=True)

    requested: str
    effect_type: str
    config: dict[str, Any]

    @property
    def fallback_used(self) -> bool:
        return self.effect_type != self.requested


class CreatedScene(BaseModel):
    """Scene written during this run, as seen by the playlist assembler."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    phase: str
    kind: SceneKind
    mode: ShowMode
    role: str
    order: int
    strobe: bool = False
    duration_ms: int


class FallbackRecord(BaseModel):
    """One substitution made by the fallback resolver."""

    model_config = ConfigDict(frozen=True)

    scene_name: str
    device_id: str
    layer: LayerRole | None = None
    requested: str
    resolved: str


class PlaylistPlan(BaseModel):
    """Ordered playlist contents with per-item durations."""

    model_config = ConfigDict(frozen=True)

    playlist_id: str
    name: str
    scene_ids: tuple[str, ...]
    durations_ms: tuple[int, ...]
    tags: tuple[str, ...]


class ShowOptions(BaseModel):
    """Fully resolved run options handed to the runner by the command surface."""

    model_config = ConfigDict(frozen=True)

    profile: str = Field(default="DJPhases", min_length=1)
    device_queries: tuple[str, ...] = ()
    default_query: str = Field(default="3lineMatrix", min_length=1)
    include_blender: bool = True
    strict_blender: bool = False
    create_playlists: bool = True
    dry_run: bool = False

    @property
    def profile_slug(self) -> str:
        return slugify(self.profile)

    @property
    def queries(self) -> tuple[str, ...]:
        return self.device_queries or (self.default_query,)


class RunSummary(BaseModel):
    """Structured result of a show setup run."""

    profile: str
    dry_run: bool
    main_targets: list[str] = Field(default_factory=list)
    blender_targets: list[str] = Field(default_factory=list)
    skipped_blender: dict[str, list[str]] = Field(default_factory=dict)
    palettes: list[str] = Field(default_factory=list)
    scenes: list[CreatedScene] = Field(default_factory=list)
    playlists: list[PlaylistPlan] = Field(default_factory=list)
    fallbacks: list[FallbackRecord] = Field(default_factory=list)

    @property
    def scene_count(self) -> int:
        return len(self.scenes)

    @property
    def playlist_count(self) -> int:
        return len(self.playlists)


__all__ = [
    "BlenderSceneSpec",
    "CreatedScene",
    "DirectSceneSpec",
    "EffectSelection",
    "FallbackRecord",
    "LayerRole",
    "LayerSpec",
    "MotionProfile",
    "Palette",
    "PaletteStops",
    "PhaseDefinition",
    "PlaylistPlan",
    "RunSummary",
    "SceneKind",
    "ShowMode",
    "ShowOptions",
    "TargetVirtualSet",
]
