"""Scene composition: direct single-effect scenes and three-layer blends.

Each scene spec is applied to its targets through the fallback resolver,
classified for playlist duration (strobe / rapid motion / default), saved
as per-device presets and registered as a named scene.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from phasecraft.core.controller.models import BlendLayer, BlendLayers
from phasecraft.core.controller.protocol import ControllerError
from phasecraft.core.show.catalog import (
    DEFAULT_SCENE_DURATION_MS,
    MASK_DEFAULT_PROFILE,
    MASK_FINAL_FALLBACK,
    PHASES,
    RAPID_FLOW_SCENE_DURATION_MS,
    RAPID_MOTION_EFFECTS,
    RAPID_MOTION_PROFILE,
    RAPID_TAG,
    ROLE_WEIGHTS,
    SHOW_TAG,
    SOLID_COLOR_EFFECTS,
    STROBE_SCENE_DURATION_MS,
    UNRANKED,
)
from phasecraft.core.show.context import ShowContext
from phasecraft.core.show.errors import ConfigurationError
from phasecraft.core.show.fallback import AttemptFn, EffectRequest, resolve_with_fallback
from phasecraft.core.show.models import (
    BlenderSceneSpec,
    CreatedScene,
    DirectSceneSpec,
    EffectSelection,
    FallbackRecord,
    LayerRole,
    LayerSpec,
    PhaseDefinition,
    SceneKind,
    ShowMode,
    TargetVirtualSet,
)
from phasecraft.core.show.registry import upsert_scene
from phasecraft.core.show.synth import resolve_motion_profile
from phasecraft.core.utils.formatting import slugify, unique_by

logger = logging.getLogger(__name__)

_MASK_SOLID_DEFAULTS: Mapping[str, Any] = {"color": "#000000", "brightness": 0}
_BACKGROUND_SOLID_BRIGHTNESS = 0.3


def scene_name(profile: str, label: str) -> str:
    return f"{profile} {label}"


def preset_name(profile_slug: str, device_id: str, label: str) -> str:
    return slugify(f"{profile_slug}-{device_id}-{label}")


def scene_tags(
    profile_slug: str, phase: PhaseDefinition, mode: ShowMode, extra: Iterable[str] = ()
) -> list[str]:
    """Scene tag set: show tag, profile, phase, mode, phase tags, then ``extra``."""
    return unique_by([SHOW_TAG, profile_slug, phase.key, mode.value, *phase.tags, *extra])


def is_strobe_effect(effect_type: str) -> bool:
    return "strobe" in (effect_type or "").lower()


def is_rapid_motion_effect(effect_type: str) -> bool:
    return effect_type in RAPID_MOTION_EFFECTS


def scene_order(order: int | None, role: str) -> int:
    """Explicit order, else the role's weight, else last."""
    if order is not None:
        return order
    return ROLE_WEIGHTS.get(role, UNRANKED)


def scene_duration(duration_ms: int | None, strobe: bool, rapid: bool) -> int:
    """Explicit duration wins; strobe beats rapid motion beats the default."""
    if duration_ms:
        return duration_ms
    if strobe:
        return STROBE_SCENE_DURATION_MS
    if rapid:
        return RAPID_FLOW_SCENE_DURATION_MS
    return DEFAULT_SCENE_DURATION_MS


class _SceneClassifier:
    """Aggregates strobe / rapid-motion flags across every applied effect."""

    def __init__(self, rapid: bool = False) -> None:
        self.strobe = False
        self.rapid = rapid

    def observe(self, effect_type: str) -> None:
        if is_strobe_effect(effect_type):
            self.strobe = True
        if is_rapid_motion_effect(effect_type):
            self.rapid = True


def _phase(key: str) -> PhaseDefinition:
    try:
        return PHASES[key]
    except KeyError:
        raise ConfigurationError(f"Scene spec references unknown phase '{key}'") from None


def _make_attempt(ctx: ShowContext, device_id: str) -> AttemptFn:
    """Apply candidates on the controller, or check them against the schemas in dry-run."""
    if ctx.dry_run:

        def dry_attempt(effect_type: str, config: dict[str, Any]) -> None:
            if effect_type not in ctx.schemas:
                raise ControllerError(
                    f"Effect type '{effect_type}' is not offered by the controller"
                )

        return dry_attempt

    def live_attempt(effect_type: str, config: dict[str, Any]) -> None:
        ctx.controller.apply_effect(device_id, effect_type, config)

    return live_attempt


def _record_fallback(
    ctx: ShowContext,
    name: str,
    device_id: str,
    selection: EffectSelection,
    layer: LayerRole | None = None,
) -> None:
    if not selection.fallback_used:
        return
    where = f"blender {layer.value}" if layer else "effect"
    logger.info(
        f"Fallback {where} on {device_id}: {selection.requested} -> {selection.effect_type} ({name})"
    )
    ctx.fallbacks.append(
        FallbackRecord(
            scene_name=name,
            device_id=device_id,
            layer=layer,
            requested=selection.requested,
            resolved=selection.effect_type,
        )
    )


def _append_scene(
    ctx: ShowContext,
    *,
    scene_id: str,
    name: str,
    spec: DirectSceneSpec | BlenderSceneSpec,
    kind: SceneKind,
    classifier: _SceneClassifier,
) -> CreatedScene:
    scene = CreatedScene(
        id=scene_id,
        name=name,
        phase=spec.phase,
        kind=kind,
        mode=spec.mode,
        role=spec.role,
        order=scene_order(spec.order, spec.role),
        strobe=classifier.strobe,
        duration_ms=scene_duration(spec.duration_ms, classifier.strobe, classifier.rapid),
    )
    ctx.created_scenes.append(scene)
    return scene


def compose_direct_scene(
    ctx: ShowContext, spec: DirectSceneSpec, targets: Sequence[TargetVirtualSet]
) -> CreatedScene:
    """Apply one direct scene to every main target and register it.

    Args:
        ctx: Run context.
        spec: Scene spec.
        targets: Resolved target sets; only their main devices are used.

    Returns:
        The recorded scene.

    Raises:
        EffectApplicationError: If no candidate effect applies on a target.
        SceneIntegrityError: If scene registration fails its consistency checks.
    """
    options = ctx.options
    phase = _phase(spec.phase)
    name = scene_name(options.profile, spec.label)
    tags = scene_tags(options.profile_slug, phase, spec.mode, ["direct", spec.effect, *spec.tags])
    request = EffectRequest(
        requested=spec.effect,
        fallback_effects=spec.fallback_effects,
        phase=phase,
        palette=ctx.palette(spec.phase, spec.mode),
        profile=resolve_motion_profile(spec.profile, spec.mode),
        overrides=spec.overrides,
    )
    classifier = _SceneClassifier(
        rapid=spec.profile == RAPID_MOTION_PROFILE or RAPID_TAG in spec.tags
    )

    for target in targets:
        device_id = target.main.id
        selection = resolve_with_fallback(
            request,
            device_id=device_id,
            schemas=ctx.schemas,
            attempt=_make_attempt(ctx, device_id),
        )
        classifier.observe(selection.effect_type)
        _record_fallback(ctx, name, device_id, selection)
        if not ctx.dry_run:
            ctx.controller.save_preset(
                device_id, preset_name(options.profile_slug, device_id, spec.label)
            )

    scene_id = upsert_scene(
        ctx.controller,
        name,
        tags,
        [target.main.id for target in targets],
        dry_run=ctx.dry_run,
    )
    logger.info(f"Created scene: {name}{' (dry-run)' if ctx.dry_run else ''}")
    return _append_scene(
        ctx, scene_id=scene_id, name=name, spec=spec, kind=SceneKind.DIRECT, classifier=classifier
    )


def _layer_mode(role: LayerRole, layer: LayerSpec, spec: BlenderSceneSpec) -> ShowMode:
    if layer.mode is not None:
        return layer.mode
    return ShowMode.CRAZY if role is LayerRole.MASK else spec.mode


def _layer_profile_name(role: LayerRole, layer: LayerSpec) -> str | None:
    if layer.profile:
        return layer.profile
    return MASK_DEFAULT_PROFILE if role is LayerRole.MASK else None


def _layer_fallbacks(role: LayerRole, layer: LayerSpec) -> tuple[str, ...]:
    if role is LayerRole.MASK:
        return (*layer.fallback_effects, MASK_FINAL_FALLBACK)
    return layer.fallback_effects


def _solid_color_defaults(role: LayerRole, phase: PhaseDefinition, layer: LayerSpec):
    """Role defaults for solid-colour layers, minus keys the layer overrides."""
    if role is LayerRole.BACKGROUND:
        base = {"color": phase.background, "brightness": _BACKGROUND_SOLID_BRIGHTNESS}
    elif role is LayerRole.MASK:
        base = dict(_MASK_SOLID_DEFAULTS)
    else:
        return None
    defaults = {key: value for key, value in base.items() if key not in layer.overrides}

    def role_defaults(effect_type: str) -> Mapping[str, Any]:
        return defaults if effect_type in SOLID_COLOR_EFFECTS else {}

    return role_defaults


def _layer_request(role: LayerRole, spec: BlenderSceneSpec, ctx: ShowContext) -> EffectRequest:
    layer = spec.layer(role)
    phase = _phase(spec.phase)
    mode = _layer_mode(role, layer, spec)
    return EffectRequest(
        requested=layer.effect,
        fallback_effects=_layer_fallbacks(role, layer),
        phase=phase,
        palette=ctx.palette(spec.phase, mode),
        profile=resolve_motion_profile(_layer_profile_name(role, layer), mode),
        overrides=layer.overrides,
        role_defaults=_solid_color_defaults(role, phase, layer),
    )


def compose_blender_scene(
    ctx: ShowContext, spec: BlenderSceneSpec, targets: Sequence[TargetVirtualSet]
) -> CreatedScene:
    """Apply one three-layer blend to every blender-ready target and register it.

    Each layer is resolved on its companion device; the three results are
    then submitted as one blend on the main device. The scene snapshots the
    main devices only.

    Raises:
        ConfigurationError: If a target is missing a companion.
        EffectApplicationError: If no candidate effect applies on a layer.
        SceneIntegrityError: If scene registration fails its consistency checks.
    """
    options = ctx.options
    phase = _phase(spec.phase)
    name = scene_name(options.profile, spec.label)
    tags = scene_tags(options.profile_slug, phase, spec.mode, ["blender", *spec.tags])
    requests = {role: _layer_request(role, spec, ctx) for role in LayerRole}
    classifier = _SceneClassifier(rapid=RAPID_TAG in spec.tags)

    for target in targets:
        if not target.blender_ready:
            raise ConfigurationError(
                f"'{target.main.id}' is not blender-ready (missing: {', '.join(target.missing)})"
            )

        layers: dict[str, BlendLayer] = {}
        for role in LayerRole:
            device_id = target.companion(role).id
            selection = resolve_with_fallback(
                requests[role],
                device_id=device_id,
                schemas=ctx.schemas,
                attempt=_make_attempt(ctx, device_id),
            )
            classifier.observe(selection.effect_type)
            _record_fallback(ctx, name, device_id, selection, layer=role)
            layers[role.value] = BlendLayer(
                device_id=device_id, effect_type=selection.effect_type, config=selection.config
            )

        if not ctx.dry_run:
            main_id = target.main.id
            ctx.controller.apply_blend(main_id, BlendLayers(**layers), spec.blender_config)
            preset = preset_name(options.profile_slug, main_id, spec.label)
            ctx.controller.save_preset(main_id, preset)

    scene_id = upsert_scene(
        ctx.controller,
        name,
        tags,
        [target.main.id for target in targets],
        dry_run=ctx.dry_run,
    )
    logger.info(f"Created blender scene: {name}{' (dry-run)' if ctx.dry_run else ''}")
    return _append_scene(
        ctx, scene_id=scene_id, name=name, spec=spec, kind=SceneKind.BLENDER, classifier=classifier
    )


def compose_direct_scenes(
    ctx: ShowContext, specs: Iterable[DirectSceneSpec], targets: Sequence[TargetVirtualSet]
) -> list[CreatedScene]:
    return [compose_direct_scene(ctx, spec, targets) for spec in specs]


def compose_blender_scenes(
    ctx: ShowContext, specs: Iterable[BlenderSceneSpec], targets: Sequence[TargetVirtualSet]
) -> list[CreatedScene]:
    return [compose_blender_scene(ctx, spec, targets) for spec in specs]


__all__ = [
    "compose_blender_scene",
    "compose_blender_scenes",
    "compose_direct_scene",
    "compose_direct_scenes",
    "is_rapid_motion_effect",
    "is_strobe_effect",
    "preset_name",
    "scene_duration",
    "scene_name",
    "scene_order",
    "scene_tags",
]
