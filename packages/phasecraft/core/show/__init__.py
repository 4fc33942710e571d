"""Declarative DJ-phase show composition for LedFx."""

from phasecraft.core.show.errors import (
    ConfigurationError,
    EffectApplicationError,
    ResolutionError,
    SceneIntegrityError,
    SchemaError,
    ShowError,
)
from phasecraft.core.show.models import (
    CreatedScene,
    FallbackRecord,
    PlaylistPlan,
    RunSummary,
    ShowMode,
    ShowOptions,
)
from phasecraft.core.show.runner import run_show

__all__ = [
    "ConfigurationError",
    "CreatedScene",
    "EffectApplicationError",
    "FallbackRecord",
    "PlaylistPlan",
    "ResolutionError",
    "RunSummary",
    "SceneIntegrityError",
    "SchemaError",
    "ShowError",
    "ShowMode",
    "ShowOptions",
    "run_show",
]
