"""Run-scoped state threaded through composition and playlist assembly."""

from __future__ import annotations

from dataclasses import dataclass, field

from phasecraft.core.controller.protocol import LightingController
from phasecraft.core.show.models import CreatedScene, FallbackRecord, Palette, ShowMode, ShowOptions
from phasecraft.core.show.schema import EffectSchemaSet


@dataclass
class ShowContext:
    """Mutable accumulator for one run.

    Nothing here outlives the run, so two runs never share state.
    """

    controller: LightingController
    options: ShowOptions
    schemas: EffectSchemaSet
    palettes: dict[tuple[str, ShowMode], Palette] = field(default_factory=dict)
    created_scenes: list[CreatedScene] = field(default_factory=list)
    fallbacks: list[FallbackRecord] = field(default_factory=list)

    @property
    def dry_run(self) -> bool:
        return self.options.dry_run

    def palette(self, phase_key: str, mode: ShowMode) -> Palette:
        return self.palettes[(phase_key, mode)]
