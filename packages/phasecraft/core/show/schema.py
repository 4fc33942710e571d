"""Effect schema capability lookup.

The controller describes each effect type as
``{type: {"schema": {"properties": {name: ...}}}}``; the engine only needs
the set of recognised property names per type.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from phasecraft.core.show.errors import SchemaError

EffectSchemaSet = Mapping[str, frozenset[str]]


def parse_effect_schemas(raw: Any) -> dict[str, frozenset[str]]:
    """Reduce a raw effect-schema response to property-name sets.

    Args:
        raw: Response of ``LightingController.get_effect_schemas``.

    Returns:
        Effect type -> frozenset of recognised property names.

    Raises:
        SchemaError: If the response is not a mapping, is empty, or an entry
            lacks a ``schema.properties`` mapping.
    """
    if not isinstance(raw, Mapping):
        raise SchemaError(f"Effect schema response must be a mapping, got {type(raw).__name__}")
    if not raw:
        raise SchemaError("Effect schema response is empty")

    schemas: dict[str, frozenset[str]] = {}
    for effect_type, entry in raw.items():
        schema = entry.get("schema") if isinstance(entry, Mapping) else None
        properties = schema.get("properties") if isinstance(schema, Mapping) else None
        if not isinstance(properties, Mapping):
            raise SchemaError(f"Effect '{effect_type}' has no schema.properties mapping")
        schemas[str(effect_type)] = frozenset(str(name) for name in properties)
    return schemas


def properties_for(schemas: EffectSchemaSet, effect_type: str) -> frozenset[str]:
    """Recognised properties of ``effect_type`` (empty for unknown types)."""
    return schemas.get(effect_type, frozenset())


def supports(props: frozenset[str], key: str) -> bool:
    return key in props


__all__ = [
    "EffectSchemaSet",
    "parse_effect_schemas",
    "properties_for",
    "supports",
]
