from __future__ import annotations

import codecs
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from ..exceptions import ValidationError

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class _BaseSettingsModel(BaseModel):
    model_config = ConfigDict(extra="allow")


class ParserSettings(_BaseSettingsModel):
    debug_info: bool = False
    forward_to_logging: bool = False
    default_big_endian: bool = False
    encoding: str = "utf-8"

    @field_validator("encoding")
    @classmethod
    def _known_encoding(cls, value: str) -> str:
        try:
            codecs.lookup(value)
        except LookupError as exc:
            raise ValueError(f"unknown encoding: {value}") from exc
        return value


class LoggingSettings(_BaseSettingsModel):
    level: str = "INFO"
    structured_json: Optional[bool] = None
    console: bool = True
    log_dir: Optional[str] = None
    max_log_size: str = "10MB"
    backup_count: int = Field(default=3, ge=0)

    @field_validator("level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"unknown log level: {value}")
        return level


class SettingsModel(_BaseSettingsModel):
    parser: ParserSettings = Field(default_factory=ParserSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


def validate_settings(payload: Dict[str, Any], file_path: Optional[str] = None) -> SettingsModel:
    """Validate a raw settings mapping.

    Raises:
        ValidationError: with the first offending field in ``details``.
    """
    try:
        return SettingsModel.model_validate(payload or {})
    except PydanticValidationError as exc:
        errors = exc.errors()
        field_name = ".".join(str(part) for part in errors[0]["loc"]) if errors else None
        raise ValidationError(
            f"Invalid settings: {exc.error_count()} error(s)",
            field_name=field_name,
            file_path=file_path,
            details={"errors": [error["msg"] for error in errors]},
        ) from exc
