"""End-to-end show setup run."""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable, Sequence

from phasecraft.core.controller.protocol import LightingController
from phasecraft.core.show.catalog import (
    BLENDER_SCENE_SPECS,
    DIRECT_SCENE_SPECS,
    PHASE_ORDER,
    PHASES,
)
from phasecraft.core.show.composer import (
    compose_blender_scenes,
    compose_direct_scenes,
    scene_name,
)
from phasecraft.core.show.context import ShowContext
from phasecraft.core.show.errors import ConfigurationError
from phasecraft.core.show.models import (
    BlenderSceneSpec,
    DirectSceneSpec,
    RunSummary,
    ShowOptions,
    TargetVirtualSet,
)
from phasecraft.core.show.palette import build_palettes
from phasecraft.core.show.playlists import apply_playlists, plan_playlists
from phasecraft.core.show.schema import parse_effect_schemas
from phasecraft.core.show.targets import resolve_main_targets, resolve_target_set

logger = logging.getLogger(__name__)


def resolve_targets(
    controller: LightingController, options: ShowOptions
) -> tuple[list[TargetVirtualSet], list[TargetVirtualSet]]:
    """Resolve main targets and the subset usable for blends.

    Returns:
        (all target sets, blender-ready target sets). The second list is
        empty when blends are disabled.

    Raises:
        ResolutionError: If a query matches nothing or is ambiguous.
        ConfigurationError: In strict mode, if any target lacks companions.
    """
    devices = controller.list_devices()
    mains = resolve_main_targets(options.queries, devices)
    targets = [resolve_target_set(main, devices) for main in mains]
    if not options.include_blender:
        return targets, []

    not_ready = [target for target in targets if not target.blender_ready]
    for target in not_ready:
        logger.warning(
            f"Blender skipped for '{target.main.id}' (missing: {', '.join(target.missing)})"
        )
    if options.strict_blender and not_ready:
        raise ConfigurationError(
            "Missing blender companions for: " + ", ".join(target.main.id for target in not_ready)
        )
    return targets, [target for target in targets if target.blender_ready]


def check_unique_scene_names(
    profile: str, specs: Iterable[DirectSceneSpec | BlenderSceneSpec]
) -> None:
    """Reject spec sets in which two scenes would get the same name.

    Raises:
        ConfigurationError: Listing every duplicated scene name.
    """
    counts = Counter(scene_name(profile, spec.label) for spec in specs)
    duplicates = sorted(name for name, count in counts.items() if count > 1)
    if duplicates:
        raise ConfigurationError("Duplicate scene names: " + ", ".join(duplicates))


def run_show(
    controller: LightingController,
    options: ShowOptions,
    *,
    direct_specs: Sequence[DirectSceneSpec] = DIRECT_SCENE_SPECS,
    blender_specs: Sequence[BlenderSceneSpec] = BLENDER_SCENE_SPECS,
) -> RunSummary:
    """Resolve targets, publish palettes, compose scenes and build playlists.

    Every step runs sequentially and the first error aborts the run. In
    dry-run nothing is written to the controller, but every resolution,
    synthesis and fallback decision is made exactly as in a live run.

    Args:
        controller: Lighting controller to drive.
        options: Resolved run options.
        direct_specs: Direct scene specs to compose.
        blender_specs: Blender scene specs to compose.

    Returns:
        Summary of targets, scenes, playlists and fallbacks.

    Raises:
        ConfigurationError: If two specs would produce the same scene name,
            or strict blender mode finds a target without companions.
    """
    composed = [*direct_specs, *(blender_specs if options.include_blender else ())]
    check_unique_scene_names(options.profile, composed)

    targets, blender_targets = resolve_targets(controller, options)
    logger.info(
        f"Profile: {options.profile}; main targets ({len(targets)}): "
        + ", ".join(target.main.id for target in targets)
    )

    palettes = build_palettes([PHASES[key] for key in PHASE_ORDER], options.profile_slug)
    if not options.dry_run:
        for palette in palettes:
            controller.upsert_gradient_or_color(palette.palette_id, palette.gradient)
    logger.info(f"Palettes prepared: {len(palettes)}{' (dry-run)' if options.dry_run else ''}")

    ctx = ShowContext(
        controller=controller,
        options=options,
        schemas=parse_effect_schemas(controller.get_effect_schemas()),
        palettes={(palette.phase, palette.mode): palette for palette in palettes},
    )

    compose_direct_scenes(ctx, direct_specs, targets)
    if blender_targets:
        compose_blender_scenes(ctx, blender_specs, blender_targets)

    plans = []
    if options.create_playlists:
        plans = plan_playlists(ctx.created_scenes, options.profile, options.profile_slug)
        apply_playlists(controller, plans, dry_run=options.dry_run)

    summary = RunSummary(
        profile=options.profile,
        dry_run=options.dry_run,
        main_targets=[target.main.id for target in targets],
        blender_targets=[target.main.id for target in blender_targets],
        skipped_blender={
            target.main.id: list(target.missing)
            for target in targets
            if options.include_blender and not target.blender_ready
        },
        palettes=[palette.palette_id for palette in palettes],
        scenes=list(ctx.created_scenes),
        playlists=plans,
        fallbacks=list(ctx.fallbacks),
    )
    logger.info(
        f"Show setup complete{' (dry-run)' if options.dry_run else ''}. "
        f"Scenes: {summary.scene_count}, playlists: {summary.playlist_count}"
    )
    return summary


__all__ = ["check_unique_scene_names", "resolve_targets", "run_show"]
