"""Target resolution: fuzzy device queries and blend companion discovery."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from phasecraft.core.controller.models import DeviceInfo
from phasecraft.core.show.catalog import COMPANION_SUFFIXES
from phasecraft.core.show.errors import ResolutionError
from phasecraft.core.show.models import LayerRole, TargetVirtualSet
from phasecraft.core.utils.formatting import normalize_text, unique_by

logger = logging.getLogger(__name__)

EXACT_MATCH_SCORE = 100
PREFIX_MATCH_SCORE = 80
SUBSTRING_MATCH_SCORE = 60
MAIN_DEVICE_BONUS = 10
ACTIVE_DEVICE_BONUS = 2

# Tied candidates listed in an ambiguity error
MAX_TIED_DISPLAY = 6


def is_companion_id(device_id: str) -> bool:
    normalized = normalize_text(device_id)
    return any(normalized.endswith(suffix) for suffix in COMPANION_SUFFIXES)


def score_device(device: DeviceInfo, query: str) -> int:
    """Score how well ``device`` matches ``query``.

    Exact id/name match scores 100, prefix 80, substring 60. Non-companion
    devices get +10 and active devices +2.

    Returns:
        The score, or -1 when the device does not match at all.
    """
    needle = normalize_text(query)
    if not needle:
        return -1

    device_id = normalize_text(device.id)
    name = normalize_text(device.name)
    if needle in (device_id, name):
        score = EXACT_MATCH_SCORE
    elif device_id.startswith(needle) or name.startswith(needle):
        score = PREFIX_MATCH_SCORE
    elif needle in device_id or needle in name:
        score = SUBSTRING_MATCH_SCORE
    else:
        return -1

    if not is_companion_id(device_id):
        score += MAIN_DEVICE_BONUS
    if device.active:
        score += ACTIVE_DEVICE_BONUS
    return score


def _describe(device: DeviceInfo) -> str:
    return f"{device.id} ({device.name or device.id})"


def resolve_device_query(query: str, devices: Sequence[DeviceInfo]) -> DeviceInfo:
    """Pick the single best device for ``query``.

    Args:
        query: Free-text id or display-name query.
        devices: Candidate devices.

    Returns:
        The highest-scoring device.

    Raises:
        ResolutionError: If nothing matches, or the top two candidates tie.
    """
    ranked = sorted(
        ((score_device(device, query), device) for device in devices),
        key=lambda pair: (-pair[0], pair[1].id),
    )
    ranked = [(score, device) for score, device in ranked if score >= 0]

    if not ranked:
        available = ", ".join(_describe(device) for device in devices)
        raise ResolutionError(f"No virtual matched '{query}'. Available: {available}")

    top_score, best = ranked[0]
    if len(ranked) > 1 and ranked[1][0] == top_score:
        tied = [device for score, device in ranked if score == top_score][:MAX_TIED_DISPLAY]
        raise ResolutionError(
            f"Ambiguous virtual query '{query}'. Top matches: "
            + ", ".join(_describe(device) for device in tied)
        )

    logger.debug(f"Query '{query}' resolved to '{best.id}' (score {top_score})")
    return best


def resolve_main_targets(queries: Sequence[str], devices: Sequence[DeviceInfo]) -> list[DeviceInfo]:
    """Resolve every query against non-companion devices, de-duplicated by id."""
    candidates = [device for device in devices if not is_companion_id(device.id)]
    resolved = [resolve_device_query(query, candidates) for query in queries]
    targets = unique_by(resolved, key=lambda device: device.id)
    if not targets:
        raise ResolutionError("No target virtuals resolved")
    return targets


def _find_by_id(devices: Sequence[DeviceInfo], device_id: str) -> DeviceInfo | None:
    wanted = normalize_text(device_id)
    return next((device for device in devices if normalize_text(device.id) == wanted), None)


def resolve_target_set(main: DeviceInfo, devices: Sequence[DeviceInfo]) -> TargetVirtualSet:
    """Locate ``{id}-background``, ``{id}-foreground`` and ``{id}-mask`` for ``main``.

    Missing companions are reported on the returned set, never raised.
    """
    found: dict[str, DeviceInfo | None] = {}
    missing: list[str] = []
    for role in LayerRole:
        companion_id = f"{main.id}-{role.value}"
        found[role.value] = _find_by_id(devices, companion_id)
        if found[role.value] is None:
            missing.append(companion_id)

    return TargetVirtualSet(main=main, missing=tuple(missing), **found)


__all__ = [
    "is_companion_id",
    "resolve_device_query",
    "resolve_main_targets",
    "resolve_target_set",
    "score_device",
]
