"""Ordered effect fallback search.

Candidates are tried strictly in order; each one gets a freshly synthesized
config for its own schema, and the first the controller accepts wins.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from phasecraft.core.controller.protocol import ControllerError
from phasecraft.core.show.catalog import EFFECT_FALLBACKS
from phasecraft.core.show.errors import EffectApplicationError
from phasecraft.core.show.models import EffectSelection, MotionProfile, Palette, PhaseDefinition
from phasecraft.core.show.schema import EffectSchemaSet, properties_for
from phasecraft.core.show.synth import build_effect_config
from phasecraft.core.utils.formatting import unique_by

logger = logging.getLogger(__name__)

# Applies one candidate to the device; raises ControllerError on rejection
AttemptFn = Callable[[str, dict[str, Any]], None]
RoleDefaultsFn = Callable[[str], Mapping[str, Any]]


@dataclass(frozen=True)
class EffectRequest:
    """Everything needed to synthesize a config for any candidate effect.

    Attributes:
        requested: Effect type asked for by the scene spec.
        fallback_effects: Explicit fallbacks, tried before the static table.
        phase: Phase the scene belongs to.
        palette: Palette for the layer's (phase, mode).
        profile: Resolved motion profile.
        overrides: Explicit parameter overrides.
        role_defaults: Per-candidate role defaults (e.g. for solid colours).
    """

    requested: str
    fallback_effects: tuple[str, ...]
    phase: PhaseDefinition
    palette: Palette
    profile: MotionProfile
    overrides: Mapping[str, Any] = field(default_factory=dict)
    role_defaults: RoleDefaultsFn | None = None


def effect_candidates(requested: str, fallback_effects: Sequence[str] = ()) -> list[str]:
    """Requested type, explicit fallbacks, then table fallbacks, de-duplicated.

    Example:
        >>> effect_candidates("scan", ["wavelength"])
        ['scan', 'wavelength', 'scroll']
    """
    return unique_by([requested, *fallback_effects, *EFFECT_FALLBACKS.get(requested, ())])


def resolve_with_fallback(
    request: EffectRequest,
    *,
    device_id: str,
    schemas: EffectSchemaSet,
    attempt: AttemptFn,
) -> EffectSelection:
    """Apply the first candidate effect the controller accepts.

    Args:
        request: Requested effect and synthesis inputs.
        device_id: Target device, used for error reporting.
        schemas: Recognised properties per effect type.
        attempt: Callable applying ``(effect_type, config)``; a raised
            ControllerError moves the search to the next candidate.

    Returns:
        The accepted effect type and the config it was applied with.

    Raises:
        EffectApplicationError: If every candidate was rejected.
    """
    candidates = effect_candidates(request.requested, request.fallback_effects)
    last_error: ControllerError | None = None

    for candidate in candidates:
        defaults = request.role_defaults(candidate) if request.role_defaults else None
        config = build_effect_config(
            properties_for(schemas, candidate),
            request.phase,
            request.palette,
            request.profile,
            role_defaults=defaults,
            overrides=request.overrides,
        )
        try:
            attempt(candidate, config)
        except ControllerError as e:
            logger.debug(f"Effect '{candidate}' rejected on '{device_id}': {e}")
            last_error = e
            continue
        return EffectSelection(requested=request.requested, effect_type=candidate, config=config)

    raise EffectApplicationError(
        f"Unable to set effect '{request.requested}' on '{device_id}'. "
        f"Tried: {', '.join(candidates)}. Last error: {last_error}",
        device_id=device_id,
        requested=request.requested,
        attempted=tuple(candidates),
    ) from last_error


__all__ = [
    "AttemptFn",
    "EffectRequest",
    "effect_candidates",
    "resolve_with_fallback",
]
