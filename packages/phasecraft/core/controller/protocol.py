"""Operations the show engine needs from a lighting controller.

The engine only depends on this narrow interface. Every operation is a
blocking round trip; any failure is raised as ControllerError and is never
swallowed by the implementation.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Protocol

from phasecraft.core.controller.models import BlendLayers, DeviceInfo, DeviceState, SceneRef


class ControllerError(RuntimeError):
    """A controller call failed or was rejected."""


class LightingController(Protocol):
    """Protocol for the external lighting controller."""

    def list_devices(self) -> list[DeviceInfo]: ...

    def get_device(self, device_id: str) -> DeviceState: ...

    def apply_effect(self, device_id: str, effect_type: str, config: Mapping[str, Any]) -> None: ...

    def apply_blend(
        self,
        main_device_id: str,
        layers: BlendLayers,
        blender_config: Mapping[str, Any] | None = None,
    ) -> None: ...

    def get_effect_schemas(self) -> Mapping[str, Any]: ...

    def upsert_gradient_or_color(self, color_id: str, value: str) -> None: ...

    def list_scenes(self) -> list[SceneRef]: ...

    def create_scene(self, name: str, tags: Sequence[str]) -> None: ...

    def delete_scene(self, scene_id: str) -> None: ...

    def write_scene_devices(
        self, scene_id: str, devices: Mapping[str, Mapping[str, Any]]
    ) -> None: ...

    def upsert_playlist(
        self,
        playlist_id: str,
        name: str,
        scene_ids: Sequence[str],
        mode: str,
        default_duration_ms: int,
        tags: Sequence[str],
    ) -> None: ...

    def patch_playlist_item_duration(
        self, playlist_id: str, index: int, duration_ms: int
    ) -> None: ...

    def save_preset(self, device_id: str, preset_name: str) -> None: ...
