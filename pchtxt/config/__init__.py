"""Parser and logging settings."""

from .models import (
    LoggingSettings,
    ParserSettings,
    SettingsModel,
    validate_settings,
)
from .io import get_config_path, load_settings, save_settings

__all__ = [
    "LoggingSettings",
    "ParserSettings",
    "SettingsModel",
    "validate_settings",
    "get_config_path",
    "load_settings",
    "save_settings",
]
