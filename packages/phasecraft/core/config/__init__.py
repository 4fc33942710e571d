"""Configuration management for phasecraft."""

from phasecraft.core.config.loader import detect_format, load_app_config, load_config
from phasecraft.core.config.models import AppConfig, LedFxConfig, LoggingConfig, ShowConfig

__all__ = [
    # Loaders
    "detect_format",
    "load_config",
    "load_app_config",
    # Models
    "AppConfig",
    "LedFxConfig",
    "LoggingConfig",
    "ShowConfig",
]
