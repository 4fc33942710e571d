"""Playlist assembly: deterministic scene ordering and duration patching."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from phasecraft.core.controller.protocol import LightingController
from phasecraft.core.show.catalog import (
    DEFAULT_SCENE_DURATION_MS,
    PHASE_ORDER,
    PHASES,
    PLAYLIST_MODE,
    ROLE_WEIGHTS,
    SHOW_TAG,
    UNRANKED,
)
from phasecraft.core.show.models import CreatedScene, PlaylistPlan, SceneKind
from phasecraft.core.utils.formatting import slugify

logger = logging.getLogger(__name__)


def playlist_sort_key(scene: CreatedScene) -> tuple[int, int, int, str]:
    """Order, role weight, direct before blender, then name."""
    return (
        scene.order if scene.order is not None else UNRANKED,
        ROLE_WEIGHTS.get(scene.role, UNRANKED),
        0 if scene.kind is SceneKind.DIRECT else 1,
        scene.name,
    )


def sort_scenes_for_playlist(scenes: Iterable[CreatedScene]) -> list[CreatedScene]:
    return sorted(scenes, key=playlist_sort_key)


def group_by_phase(scenes: Iterable[CreatedScene]) -> dict[str, list[CreatedScene]]:
    """Scenes with an id, grouped per phase in show phase order."""
    groups: dict[str, list[CreatedScene]] = {phase: [] for phase in PHASE_ORDER}
    for scene in scenes:
        if not scene.id:
            continue
        groups.setdefault(scene.phase, []).append(scene)
    return groups


def _plan(
    playlist_id: str, name: str, scenes: Sequence[CreatedScene], tags: list[str]
) -> PlaylistPlan:
    return PlaylistPlan(
        playlist_id=playlist_id,
        name=name,
        scene_ids=tuple(scene.id for scene in scenes),
        durations_ms=tuple(scene.duration_ms for scene in scenes),
        tags=tuple(tags),
    )


def plan_playlists(
    scenes: Iterable[CreatedScene], profile: str, profile_slug: str
) -> list[PlaylistPlan]:
    """Build one playlist per non-empty phase plus a full-show playlist.

    Args:
        scenes: Scenes created during the run.
        profile: Naming profile used in playlist names.
        profile_slug: Slug of ``profile`` used in ids and tags.

    Returns:
        Phase playlists in phase order, then the full-show playlist.
    """
    groups = {
        phase: sort_scenes_for_playlist(group) for phase, group in group_by_phase(scenes).items()
    }

    plans: list[PlaylistPlan] = []
    for phase in PHASE_ORDER:
        ordered = groups.get(phase, [])
        if not ordered:
            continue
        plans.append(
            _plan(
                slugify(f"{profile_slug}-{phase}"),
                f"{profile} {PHASES[phase].label}",
                ordered,
                [SHOW_TAG, profile_slug, phase],
            )
        )

    full_show = [scene for phase in PHASE_ORDER for scene in groups.get(phase, [])]
    plans.append(
        _plan(
            slugify(f"{profile_slug}-full-show"),
            f"{profile} Full Show",
            full_show,
            [SHOW_TAG, profile_slug, "full"],
        )
    )
    return plans


def apply_playlist(controller: LightingController, plan: PlaylistPlan) -> None:
    """Upsert one playlist, then patch every non-default duration by index."""
    controller.upsert_playlist(
        plan.playlist_id,
        plan.name,
        list(plan.scene_ids),
        PLAYLIST_MODE,
        DEFAULT_SCENE_DURATION_MS,
        list(plan.tags),
    )
    for index, duration_ms in enumerate(plan.durations_ms):
        if duration_ms and duration_ms != DEFAULT_SCENE_DURATION_MS:
            controller.patch_playlist_item_duration(plan.playlist_id, index, duration_ms)
    logger.info(f"Upserted playlist: {plan.playlist_id}")


def apply_playlists(
    controller: LightingController, plans: Iterable[PlaylistPlan], *, dry_run: bool = False
) -> None:
    for plan in plans:
        if dry_run:
            logger.info(f"Playlist (dry-run) {plan.name}: {len(plan.scene_ids)} scenes")
            continue
        apply_playlist(controller, plan)


__all__ = [
    "apply_playlist",
    "apply_playlists",
    "group_by_phase",
    "plan_playlists",
    "playlist_sort_key",
    "sort_scenes_for_playlist",
]
