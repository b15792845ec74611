"""Configuration domain exports."""

from .config_scaffold_builder import (
    DEFAULT_CONFIG_FILENAME,
    build_placeholder_settings,
    write_placeholder_settings,
)
from .loader import ConfigurationError, load_settings
from .runtime_settings import DetectionSettings, IdentitySettings, LoggingSettings, Settings

__all__ = [
    "DetectionSettings",
    "IdentitySettings",
    "LoggingSettings",
    "Settings",
    "ConfigurationError",
    "load_settings",
    "DEFAULT_CONFIG_FILENAME",
    "build_placeholder_settings",
    "write_placeholder_settings",
]
