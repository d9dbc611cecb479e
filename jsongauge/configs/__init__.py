"""Configuration loading and process settings."""

from jsongauge.configs.loader import (
    ConfigError,
    format_validation_error,
    load_config,
    load_config_with_files,
)
from jsongauge.configs.settings import Settings, get_settings

__all__ = [
    "ConfigError",
    "Settings",
    "format_validation_error",
    "get_settings",
    "load_config",
    "load_config_with_files",
]
