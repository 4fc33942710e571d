"""Load phasecraft configuration from JSON or YAML, plus environment."""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Callable
from pathlib import Path
from typing import Any, TextIO

import yaml

from phasecraft.core.config.models import AppConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("phasecraft.yaml")

_FORMATS: dict[str, str] = {".json": "json", ".yaml": "yaml", ".yml": "yaml"}

# env var -> (config section, key)
ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "LEDFX_HOST": ("ledfx", "host"),
    "LEDFX_PORT": ("ledfx", "port"),
    "LEDFX_LOG_LEVEL": ("logging", "level"),
}


def detect_format(file_path: Path | str) -> str:
    """Map a config file extension to "json" or "yaml".

    Raises:
        ValueError: For any other extension

    Example:
        >>> detect_format("phasecraft.yml")
        'yaml'
    """
    suffix = Path(file_path).suffix.lower()
    try:
        return _FORMATS[suffix]
    except KeyError:
        raise ValueError(f"Unsupported config format: {suffix or '(none)'}") from None


def _parse_json(f: TextIO) -> Any:
    try:
        return json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON: {e}") from e


def _parse_yaml(f: TextIO) -> Any:
    try:
        return yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML: {e}") from e


_PARSERS: dict[str, Callable[[TextIO], Any]] = {"json": _parse_json, "yaml": _parse_yaml}


def load_config(path: str | Path) -> dict[str, Any]:
    """Read a config file into a plain dict.

    An empty file gives ``{}``.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: On an unsupported extension, unparsable content, or a
            root that is not a mapping
    """
    path = Path(path)
    parse = _PARSERS[detect_format(path)]
    if not path.exists():
        raise FileNotFoundError(f"Config file does not exist: {path}")

    with path.open("r", encoding="utf-8") as f:
        try:
            content = parse(f)
        except ValueError as e:
            raise ValueError(f"{e} ({path})") from e

    if content is None:
        return {}
    if not isinstance(content, dict):
        raise ValueError(f"Config root in {path} must be a mapping")
    return content


def apply_env_overrides(raw: dict[str, Any], environ: dict[str, str] | None = None) -> None:
    """Write ``ENV_OVERRIDES`` values that are set into ``raw`` in place.

    Null sections (``ledfx:`` with no body in YAML) become empty dicts.
    """
    environ = dict(os.environ) if environ is None else environ
    for var, (section, key) in ENV_OVERRIDES.items():
        value = environ.get(var)
        if not value:
            continue
        block = dict(raw.get(section) or {})
        block[key] = value.upper() if section == "logging" else value
        raw[section] = block
        logger.debug(f"{section}.{key} overridden by {var}")


def load_app_config(path: str | Path | None = None) -> AppConfig:
    """Build the validated AppConfig.

    Args:
        path: Config file (.json/.yaml/.yml); ``phasecraft.yaml`` in the
            working directory when None. Only that implicit default may be
            absent, in which case defaults are used.

    Raises:
        FileNotFoundError: If an explicitly given path does not exist
        ValueError: If the file exists but cannot be read as config
        ValidationError: If values fail validation
    """
    if path is not None:
        path = Path(path)
        raw = load_config(path)
        logger.debug(f"Loaded config from {path}")
    elif DEFAULT_CONFIG_PATH.exists():
        raw = load_config(DEFAULT_CONFIG_PATH)
        logger.debug(f"Loaded config from {DEFAULT_CONFIG_PATH}")
    else:
        logger.debug(f"No config file at {DEFAULT_CONFIG_PATH}, using defaults")
        raw = {}

    raw = {key: value for key, value in raw.items() if value is not None}
    apply_env_overrides(raw)
    return AppConfig.model_validate(raw)
