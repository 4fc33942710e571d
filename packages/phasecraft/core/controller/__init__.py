"""Lighting controller boundary: protocol, models, and the LedFx client."""

from phasecraft.core.controller.ledfx import LedFxClient, create_ledfx_client
from phasecraft.core.controller.models import (
    ActiveEffect,
    BlendLayer,
    BlendLayers,
    DeviceInfo,
    DeviceState,
    SceneRef,
)
from phasecraft.core.controller.protocol import ControllerError, LightingController

__all__ = [
    "ActiveEffect",
    "BlendLayer",
    "BlendLayers",
    "ControllerError",
    "DeviceInfo",
    "DeviceState",
    "LedFxClient",
    "LightingController",
    "SceneRef",
    "create_ledfx_client",
]
