"""LedFx REST client implementing the LightingController protocol.

Wraps the framework ApiClient; every transport failure (ApiError) is
re-raised as ControllerError so the show engine sees one failure type.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping, Sequence
from typing import Any

import httpx

from phasecraft.core.api.http import ApiClient, ApiError, HttpClientConfig, RetryPolicy
from phasecraft.core.config.models import LedFxConfig
from phasecraft.core.controller.models import (
    ActiveEffect,
    BlendLayers,
    DeviceInfo,
    DeviceState,
    SceneRef,
)
from phasecraft.core.controller.protocol import ControllerError

logger = logging.getLogger(__name__)

PALETTE_PREFIX = "palette:"
BLENDER_EFFECT = "blender"


def _as_mapping(value: Any) -> dict[str, Any]:
    return dict(value) if isinstance(value, Mapping) else {}


def _parse_effect(raw: Any) -> ActiveEffect | None:
    effect = _as_mapping(raw)
    effect_type = effect.get("type")
    if not effect_type:
        return None
    return ActiveEffect(type=str(effect_type), config=_as_mapping(effect.get("config")))


class LedFxClient:
    """Client for a running LedFx instance.

    Args:
        http: Framework ApiClient whose base_url points at ``/api``
        verify_attempts: Reads used to confirm an effect took hold after a write
        verify_delay_s: Pause between verification reads

    Example:
        >>> client = create_ledfx_client(LedFxConfig(host="ledfx.local"))
        >>> [d.id for d in client.list_devices()]
        ['3linematrix', '3linematrix-background', ...]
    """

    def __init__(
        self,
        http: ApiClient,
        *,
        verify_attempts: int = 3,
        verify_delay_s: float = 0.15,
    ) -> None:
        self.http = http
        self.verify_attempts = max(1, verify_attempts)
        self.verify_delay_s = verify_delay_s

    def close(self) -> None:
        self.http.close()

    def __enter__(self) -> LedFxClient:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _call(self, method: str, path: str, body: Any = None) -> dict[str, Any]:
        try:
            data = self.http.request_json(method, path, body)
        except ApiError as e:
            raise ControllerError(f"LedFx request failed: {e}") from e
        return _as_mapping(data)

    # ------------------------------------------------------------------
    # Devices
    # ------------------------------------------------------------------

    def list_devices(self) -> list[DeviceInfo]:
        """List every virtual known to LedFx (id taken from the map key)."""
        data = self._call("GET", "/virtuals")
        devices = []
        for virtual_id, raw in _as_mapping(data.get("virtuals")).items():
            virtual = _as_mapping(raw)
            name = _as_mapping(virtual.get("config")).get("name") or virtual_id
            devices.append(
                DeviceInfo(id=virtual_id, name=str(name), active=bool(virtual.get("active")))
            )
        return devices

    def get_device(self, device_id: str) -> DeviceState:
        """Read one virtual's live state, including its running effect."""
        data = self._call("GET", f"/virtuals/{device_id}")
        virtual = _as_mapping(data.get(device_id)) if device_id in data else data
        return DeviceState(id=device_id, active_effect=_parse_effect(virtual.get("effect")))

    def set_device_active(self, device_id: str, active: bool) -> None:
        self._call("PUT", f"/virtuals/{device_id}", {"active": active})

    # ------------------------------------------------------------------
    # Effects
    # ------------------------------------------------------------------

    def _user_gradients(self) -> dict[str, str]:
        data = self._call("GET", "/colors")
        gradients = _as_mapping(data.get("gradients"))
        return {**_as_mapping(gradients.get("builtin")), **_as_mapping(gradients.get("user"))}

    def _resolve_palette_refs(
        self, config: Mapping[str, Any], gradients: Mapping[str, str] | None
    ) -> dict[str, Any]:
        resolved = dict(config)
        ref = resolved.get("gradient")
        if isinstance(ref, str) and ref.startswith(PALETTE_PREFIX):
            known = gradients if gradients is not None else self._user_gradients()
            if ref not in known:
                raise ControllerError(f"Unknown gradient palette '{ref}'")
            resolved["gradient"] = known[ref]
        return resolved

    def _verify_effect(self, device_id: str, effect_type: str) -> None:
        expected = effect_type.lower()
        for attempt in range(self.verify_attempts):
            effect = self.get_device(device_id).active_effect
            if effect is not None and effect.type.lower() == expected:
                return
            if attempt < self.verify_attempts - 1 and self.verify_delay_s > 0:
                time.sleep(self.verify_delay_s)
        raise ControllerError(f"LedFx did not apply '{effect_type}' to '{device_id}'")

    def _set_effect(
        self,
        device_id: str,
        effect_type: str,
        config: Mapping[str, Any],
        gradients: Mapping[str, str] | None = None,
    ) -> None:
        body = {"type": effect_type, "config": self._resolve_palette_refs(config, gradients)}
        self._call("POST", f"/virtuals/{device_id}/effects", body)
        self._verify_effect(device_id, effect_type)

    def apply_effect(self, device_id: str, effect_type: str, config: Mapping[str, Any]) -> None:
        """Set an effect on a virtual and confirm LedFx is running it.

        ``palette:`` gradient pointers are resolved against ``/colors``
        before the write.

        Raises:
            ControllerError: If the effect is a blender, the palette is
                unknown, the request fails, or LedFx does not apply it
        """
        if effect_type == BLENDER_EFFECT:
            raise ControllerError("Blender must be set with apply_blend")
        self._set_effect(device_id, effect_type, config)

    def apply_blend(
        self,
        main_device_id: str,
        layers: BlendLayers,
        blender_config: Mapping[str, Any] | None = None,
    ) -> None:
        """Configure and activate the three sources, then set the blender.

        Raises:
            ControllerError: If any source or the blender itself fails to apply
        """
        gradients = self._user_gradients()
        for layer in layers.as_tuple():
            if layer.effect_type == BLENDER_EFFECT:
                raise ControllerError("Blender sources cannot use the blender effect")
            self._set_effect(layer.device_id, layer.effect_type, layer.config, gradients)
            self.set_device_active(layer.device_id, True)

        config = {
            "background": layers.background.device_id,
            "foreground": layers.foreground.device_id,
            "mask": layers.mask.device_id,
            **dict(blender_config or {}),
        }
        body = {"type": BLENDER_EFFECT, "config": config}
        self._call("POST", f"/virtuals/{main_device_id}/effects", body)
        self._verify_effect(main_device_id, BLENDER_EFFECT)

    def get_effect_schemas(self) -> Mapping[str, Any]:
        data = self._call("GET", "/schema/effects")
        effects = data.get("effects")
        return _as_mapping(effects) if isinstance(effects, Mapping) else data

    def save_preset(self, device_id: str, preset_name: str) -> None:
        self._call("POST", f"/virtuals/{device_id}/presets", {"name": preset_name})

    # ------------------------------------------------------------------
    # Colors
    # ------------------------------------------------------------------

    def upsert_gradient_or_color(self, color_id: str, value: str) -> None:
        self._call("POST", "/colors", {color_id: value})

    # ------------------------------------------------------------------
    # Scenes
    # ------------------------------------------------------------------

    def _scene_map(self) -> dict[str, Any]:
        return _as_mapping(self._call("GET", "/scenes").get("scenes"))

    def list_scenes(self) -> list[SceneRef]:
        """List scenes; the map key is the authoritative scene id."""
        return [
            SceneRef(id=scene_id, name=str(_as_mapping(raw).get("name", "")))
            for scene_id, raw in self._scene_map().items()
        ]

    def create_scene(self, name: str, tags: Sequence[str]) -> None:
        self._call("POST", "/scenes", {"name": name, "scene_tags": ",".join(tags)})

    def delete_scene(self, scene_id: str) -> None:
        self._call("DELETE", "/scenes", {"id": scene_id})

    def write_scene_devices(
        self, scene_id: str, devices: Mapping[str, Mapping[str, Any]]
    ) -> None:
        """Replace a scene's virtual payload, keeping its name and tags."""
        scene = _as_mapping(self._scene_map().get(scene_id))
        if not scene:
            raise ControllerError(f"Scene '{scene_id}' does not exist")
        body = {
            "id": scene_id,
            "name": scene.get("name", scene_id),
            "scene_tags": scene.get("scene_tags", ""),
            "virtuals": {device: dict(payload) for device, payload in devices.items()},
        }
        self._call("POST", "/scenes", body)

    # ------------------------------------------------------------------
    # Playlists
    # ------------------------------------------------------------------

    def _playlist(self, playlist_id: str) -> dict[str, Any] | None:
        playlists = _as_mapping(self._call("GET", "/playlists").get("playlists"))
        raw = playlists.get(playlist_id)
        return _as_mapping(raw) if raw is not None else None

    def upsert_playlist(
        self,
        playlist_id: str,
        name: str,
        scene_ids: Sequence[str],
        mode: str,
        default_duration_ms: int,
        tags: Sequence[str],
    ) -> None:
        """Create or update a playlist, preserving unrelated stored metadata."""
        body = self._playlist(playlist_id) or {}
        body.update(
            {
                "id": playlist_id,
                "name": name,
                "items": [
                    {"scene_id": scene_id, "duration_ms": default_duration_ms}
                    for scene_id in scene_ids
                ],
                "mode": mode,
                "default_duration_ms": default_duration_ms,
                "tags": list(tags),
            }
        )
        self._call("POST", "/playlists", body)

    def patch_playlist_item_duration(self, playlist_id: str, index: int, duration_ms: int) -> None:
        playlist = self._playlist(playlist_id)
        if playlist is None:
            raise ControllerError(f"Playlist '{playlist_id}' does not exist")
        items = [_as_mapping(item) for item in playlist.get("items") or []]
        if not 0 <= index < len(items):
            raise ControllerError(
                f"Playlist '{playlist_id}' has no item {index} ({len(items)} items)"
            )
        items[index]["duration_ms"] = duration_ms
        playlist["items"] = items
        self._call("POST", "/playlists", playlist)


def create_ledfx_client(
    config: LedFxConfig | None = None,
    *,
    transport: httpx.BaseTransport | None = None,
) -> LedFxClient:
    """Build a LedFxClient from configuration.

    Args:
        config: Connection settings (defaults to localhost:8888)
        transport: Optional custom transport (useful for testing)

    Returns:
        Ready-to-use LedFxClient
    """
    config = config or LedFxConfig()
    http = ApiClient(
        HttpClientConfig(
            base_url=config.base_url,
            timeout=httpx.Timeout(config.timeout_s, connect=min(5.0, config.timeout_s)),
        ),
        retry_policy=RetryPolicy(max_attempts=config.max_attempts),
        transport=transport,
    )
    logger.debug(f"LedFx client targeting {config.base_url}")
    return LedFxClient(
        http,
        verify_attempts=config.verify_attempts,
        verify_delay_s=config.verify_delay_s,
    )
