"""Boundary models exchanged with the lighting controller."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class DeviceInfo(BaseModel):
    """Addressable output target ("virtual") as listed by the controller.

    Attributes:
        id: Controller-assigned virtual id.
        name: Display name (falls back to the id).
        active: Whether the virtual is currently outputting.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    active: bool = False


class ActiveEffect(BaseModel):
    """Effect currently running on a device."""

    model_config = ConfigDict(frozen=True)

    type: str
    config: dict[str, Any] = Field(default_factory=dict)


class DeviceState(BaseModel):
    """Live state of one device."""

    model_config = ConfigDict(frozen=True)

    id: str
    active_effect: ActiveEffect | None = None


class SceneRef(BaseModel):
    """Scene id/name pair from the controller's scene list."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str


class BlendLayer(BaseModel):
    """One source of a blend: the companion device and the effect it runs."""

    model_config = ConfigDict(frozen=True)

    device_id: str
    effect_type: str
    config: dict[str, Any] = Field(default_factory=dict)


class BlendLayers(BaseModel):
    """Background, foreground, and mask sources for a single blend call."""

    model_config = ConfigDict(frozen=True)

    background: BlendLayer
    foreground: BlendLayer
    mask: BlendLayer

    def as_tuple(self) -> tuple[BlendLayer, BlendLayer, BlendLayer]:
        return (self.background, self.foreground, self.mask)


__all__ = [
    "ActiveEffect",
    "BlendLayer",
    "BlendLayers",
    "DeviceInfo",
    "DeviceState",
    "SceneRef",
]
