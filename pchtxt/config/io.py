"""Settings I/O utilities."""

from __future__ import annotations

import json
import os
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from ..exceptions import ConfigurationError
from .models import SettingsModel, validate_settings

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "PCHTXT_CONFIG"
DEFAULT_CONFIG_NAME = "pchtxt.json"
YAML_SUFFIXES = (".yaml", ".yml")

PathLike = Union[str, Path]


def get_config_path() -> Path:
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override)
    return Path.cwd() / DEFAULT_CONFIG_NAME


def _read_payload(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Cannot read settings: {exc}", file_path=str(path)) from exc

    try:
        if path.suffix.lower() in YAML_SUFFIXES:
            data = yaml.safe_load(text)
        else:
            data = json.loads(text) if text.strip() else {}
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigurationError(
            f"Malformed settings file: {exc}", error_code="CONFIG_PARSE_ERROR", file_path=str(path)
        ) from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            "Settings file must contain a mapping", error_code="CONFIG_PARSE_ERROR", file_path=str(path)
        )
    return data


def load_settings(config_path: Optional[PathLike] = None) -> SettingsModel:
    """Load and validate settings; a missing file yields the defaults."""
    path = Path(config_path) if config_path is not None else get_config_path()
    if not path.exists():
        logger.debug("No settings file at %s, using defaults", path)
        return SettingsModel()

    settings = validate_settings(_read_payload(path), file_path=str(path))
    logger.debug("Loaded settings from %s", path)
    return settings


def save_settings(settings: SettingsModel, config_path: Optional[PathLike] = None) -> Path:
    path = Path(config_path) if config_path is not None else get_config_path()
    payload = settings.model_dump()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        if path.suffix.lower() in YAML_SUFFIXES:
            path.write_text(yaml.safe_dump(payload, sort_keys=False), encoding="utf-8")
        else:
            path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Cannot write settings: {exc}", file_path=str(path)) from exc
    return path
