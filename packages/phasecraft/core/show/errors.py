"""Error taxonomy for show composition.

Every error here is fail-fast: raised to the top of the run and never
recovered locally. The only multi-attempt mechanism is the fallback
candidate search, which ends in EffectApplicationError when exhausted.
"""

from __future__ import annotations


class ShowError(Exception):
    """Base class for show composition errors."""


class ResolutionError(ShowError):
    """A device query matched nothing, or matched several devices equally."""


class SchemaError(ShowError):
    """The controller's effect-schema response is missing or malformed."""


class EffectApplicationError(ShowError):
    """Every effect candidate in a fallback chain was rejected.

    Attributes:
        device_id: Device the chain was tried against
        requested: Effect type originally requested
        attempted: Full candidate chain, in attempt order
    """

    def __init__(
        self,
        message: str,
        *,
        device_id: str,
        requested: str,
        attempted: tuple[str, ...],
    ) -> None:
        super().__init__(message)
        self.device_id = device_id
        self.requested = requested
        self.attempted = attempted


class SceneIntegrityError(ShowError):
    """Scene state on the controller is not what the registry just wrote."""


class ConfigurationError(ShowError):
    """Run options or static show tables are inconsistent."""


__all__ = [
    "ConfigurationError",
    "EffectApplicationError",
    "ResolutionError",
    "SceneIntegrityError",
    "SchemaError",
    "ShowError",
]
