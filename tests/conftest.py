"""Shared pytest fixtures for phasecraft tests."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

import pytest

from phasecraft.core.controller.models import (
    ActiveEffect,
    BlendLayers,
    DeviceInfo,
    DeviceState,
    SceneRef,
)
from phasecraft.core.controller.protocol import ControllerError
from phasecraft.core.show.models import ShowOptions

# ============================================================================
# Fake controller
# ============================================================================


def schema_entry(*properties: str) -> dict[str, Any]:
    """Raw effect-schema entry as returned by the controller."""
    return {"schema": {"properties": {name: {"type": "any"} for name in properties}}}


COLOR_PROPS = ("color", "color_lows", "color_mids", "color_high", "background_color")
MOTION_PROPS = ("speed", "brightness", "mirror", "sensitivity", "frequency_range")

# Effect types most LedFx installs expose (no energy2/bands/plasma2d etc.)
DEFAULT_RAW_SCHEMAS: dict[str, Any] = {
    "wavelength": schema_entry("gradient", *MOTION_PROPS),
    "energy": schema_entry("gradient", "color_lows", "color_mids", "color_high", *MOTION_PROPS),
    "gradient": schema_entry("gradient", "speed", "brightness"),
    "scroll": schema_entry("color_lows", "color_mids", "color_high", *MOTION_PROPS),
    "scan": schema_entry("gradient", "color", *MOTION_PROPS),
    "strobe": schema_entry("color", "strobe_color", "background_color", "brightness"),
    "real_strobe": schema_entry("gradient", "strobe_color", "brightness"),
    "blade_power_plus": schema_entry("gradient", *MOTION_PROPS),
    "power": schema_entry("gradient", "background_color", *MOTION_PROPS),
    "singleColor": schema_entry("color", "brightness"),
    "blender": schema_entry("background", "foreground", "mask"),
}


class FakeController:
    """In-memory LightingController.

    Effects listed in ``reject`` or missing from the schemas fail on
    apply; ``calls`` records every
    operation in order as ``(name, args...)`` tuples.
    """

    def __init__(
        self,
        devices: Sequence[DeviceInfo],
        *,
        schemas: Mapping[str, Any] | None = None,
        reject: Sequence[str] = (),
    ) -> None:
        self.devices = list(devices)
        self.raw_schemas = dict(schemas if schemas is not None else DEFAULT_RAW_SCHEMAS)
        self.reject = set(reject)
        self.effects: dict[str, ActiveEffect] = {}
        self.gradients: dict[str, str] = {}
        self.scenes: dict[str, dict[str, Any]] = {}
        self.playlists: dict[str, dict[str, Any]] = {}
        self.presets: list[tuple[str, str]] = []
        self.blends: list[tuple[str, BlendLayers, dict[str, Any]]] = []
        self.calls: list[tuple[Any, ...]] = []
        self.closed = False
        self._next_scene = 0

    def __enter__(self) -> FakeController:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.closed = True

    @property
    def mutating_calls(self) -> list[tuple[Any, ...]]:
        reads = {"list_devices", "get_device", "get_effect_schemas", "list_scenes"}
        return [call for call in self.calls if call[0] not in reads]

    def list_devices(self) -> list[DeviceInfo]:
        self.calls.append(("list_devices",))
        return list(self.devices)

    def get_device(self, device_id: str) -> DeviceState:
        self.calls.append(("get_device", device_id))
        return DeviceState(id=device_id, active_effect=self.effects.get(device_id))

    def apply_effect(self, device_id: str, effect_type: str, config: Mapping[str, Any]) -> None:
        self.calls.append(("apply_effect", device_id, effect_type))
        if effect_type in self.reject or effect_type not in self.raw_schemas:
            raise ControllerError(f"effect '{effect_type}' rejected")
        self.effects[device_id] = ActiveEffect(type=effect_type, config=dict(config))

    def apply_blend(
        self,
        main_device_id: str,
        layers: BlendLayers,
        blender_config: Mapping[str, Any] | None = None,
    ) -> None:
        self.calls.append(("apply_blend", main_device_id))
        config = {
            "background": layers.background.device_id,
            "foreground": layers.foreground.device_id,
            "mask": layers.mask.device_id,
            **dict(blender_config or {}),
        }
        self.blends.append((main_device_id, layers, dict(blender_config or {})))
        self.effects[main_device_id] = ActiveEffect(type="blender", config=config)

    def get_effect_schemas(self) -> Mapping[str, Any]:
        self.calls.append(("get_effect_schemas",))
        return self.raw_schemas

    def upsert_gradient_or_color(self, color_id: str, value: str) -> None:
        self.calls.append(("upsert_gradient_or_color", color_id))
        self.gradients[color_id] = value

    def list_scenes(self) -> list[SceneRef]:
        self.calls.append(("list_scenes",))
        return [SceneRef(id=scene_id, name=scene["name"]) for scene_id, scene in self.scenes.items()]

    def create_scene(self, name: str, tags: Sequence[str]) -> None:
        self.calls.append(("create_scene", name))
        self._next_scene += 1
        self.scenes[f"scene-{self._next_scene}"] = {"name": name, "tags": list(tags), "devices": {}}

    def delete_scene(self, scene_id: str) -> None:
        self.calls.append(("delete_scene", scene_id))
        del self.scenes[scene_id]

    def write_scene_devices(self, scene_id: str, devices: Mapping[str, Mapping[str, Any]]) -> None:
        self.calls.append(("write_scene_devices", scene_id))
        self.scenes[scene_id]["devices"] = {key: dict(value) for key, value in devices.items()}

    def upsert_playlist(
        self,
        playlist_id: str,
        name: str,
        scene_ids: Sequence[str],
        mode: str,
        default_duration_ms: int,
        tags: Sequence[str],
    ) -> None:
        self.calls.append(("upsert_playlist", playlist_id))
        self.playlists[playlist_id] = {
            "name": name,
            "mode": mode,
            "tags": list(tags),
            "items": [
                {"scene_id": scene_id, "duration_ms": default_duration_ms} for scene_id in scene_ids
            ],
        }

    def patch_playlist_item_duration(self, playlist_id: str, index: int, duration_ms: int) -> None:
        self.calls.append(("patch_playlist_item_duration", playlist_id, index, duration_ms))
        self.playlists[playlist_id]["items"][index]["duration_ms"] = duration_ms

    def save_preset(self, device_id: str, preset_name: str) -> None:
        self.calls.append(("save_preset", device_id, preset_name))
        self.presets.append((device_id, preset_name))


# ============================================================================
# Device fixtures
# ============================================================================


def blend_ready_devices(
    main_id: str = "3linematrix", name: str = "3 Line Matrix"
) -> list[DeviceInfo]:
    return [
        DeviceInfo(id=main_id, name=name, active=True),
        DeviceInfo(id=f"{main_id}-background", name=f"{name} Background"),
        DeviceInfo(id=f"{main_id}-foreground", name=f"{name} Foreground"),
        DeviceInfo(id=f"{main_id}-mask", name=f"{name} Mask"),
    ]


@pytest.fixture
def devices() -> list[DeviceInfo]:
    """Main matrix with all blend companions plus a plain strip."""
    return [*blend_ready_devices(), DeviceInfo(id="wled-strip", name="Bar Strip")]


@pytest.fixture
def controller(devices: list[DeviceInfo]) -> FakeController:
    return FakeController(devices)


@pytest.fixture
def options() -> ShowOptions:
    return ShowOptions(profile="DJPhases", default_query="3lineMatrix")
