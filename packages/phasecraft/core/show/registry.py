"""Scene registry: upsert scenes by name and snapshot live device state."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from phasecraft.core.controller.protocol import LightingController
from phasecraft.core.show.errors import SceneIntegrityError
from phasecraft.core.utils.formatting import slugify, unique_by

logger = logging.getLogger(__name__)

SCENE_ACTION = "activate"


def dry_run_scene_id(name: str) -> str:
    return f"dryrun-{slugify(name)}"


def _scene_ids_named(controller: LightingController, name: str) -> list[str]:
    return [scene.id for scene in controller.list_scenes() if scene.name == name]


def snapshot_devices(
    controller: LightingController, device_ids: Sequence[str]
) -> dict[str, dict[str, Any]]:
    """Read back each device's active effect as a scene payload entry.

    Raises:
        SceneIntegrityError: If a device has no active effect.
    """
    payload: dict[str, dict[str, Any]] = {}
    for device_id in unique_by(device_ids):
        effect = controller.get_device(device_id).active_effect
        if effect is None or not effect.type:
            raise SceneIntegrityError(
                f"Virtual '{device_id}' has no active effect. Cannot write scene payload."
            )
        payload[device_id] = {
            "type": effect.type,
            "config": dict(effect.config),
            "action": SCENE_ACTION,
        }
    return payload


def upsert_scene(
    controller: LightingController,
    name: str,
    tags: Sequence[str],
    device_ids: Sequence[str],
    *,
    dry_run: bool = False,
) -> str:
    """Replace the scene called ``name`` with a snapshot of ``device_ids``.

    Every existing scene with the exact name is deleted first, so re-running
    a show leaves one scene per name, holding the latest device state.

    Args:
        controller: Lighting controller.
        name: Scene name (unique key).
        tags: Scene tags.
        device_ids: Devices whose active effects make up the scene.
        dry_run: Skip every controller call and return a placeholder id.

    Returns:
        Id of the created scene.

    Raises:
        SceneIntegrityError: If exactly one scene with the name cannot be
            found after creation, or a device has no active effect.
    """
    if dry_run:
        return dry_run_scene_id(name)

    for existing_id in _scene_ids_named(controller, name):
        logger.debug(f"Replacing scene '{name}' ({existing_id})")
        controller.delete_scene(existing_id)

    controller.create_scene(name, list(tags))
    matches = _scene_ids_named(controller, name)
    if not matches:
        raise SceneIntegrityError(f"Scene '{name}' was not found after creation")
    if len(matches) > 1:
        raise SceneIntegrityError(
            f"Scene '{name}' is not unique after creation: {', '.join(matches)}"
        )
    scene_id = matches[0]

    controller.write_scene_devices(scene_id, snapshot_devices(controller, device_ids))
    return scene_id


__all__ = ["dry_run_scene_id", "snapshot_devices", "upsert_scene"]
