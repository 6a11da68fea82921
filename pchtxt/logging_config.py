#!/usr/bin/env python3
# -*-coding: utf-8-*-
"""
Logging setup for the Patch Text parser.

- Level-specific console format with optional colors
- Structured JSON output (PCHTXT_LOG_JSON=1 or settings)
- Optional rotating log file
- ``pchtxt.*`` logger namespace; the parse transcript is mirrored to
  ``pchtxt.transcript`` when forwarding is enabled
"""

import json
import logging
import logging.handlers
import os
import sys
from datetime import datetime, timezone
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

from .config.models import LoggingSettings

ROOT_LOGGER_NAME = "pchtxt"
JSON_ENV_VAR = "PCHTXT_LOG_JSON"

# =====================================================================================================
# Formatters
# =====================================================================================================


class FastFormatter(logging.Formatter):
    """Formatter with one pre-built format string per level."""

    def __init__(self, enable_colors: bool = False):
        super().__init__()
        self.enable_colors = enable_colors

        self._formatters = {
            level: logging.Formatter(fmt, style='{', datefmt='%H:%M:%S')
            for level, fmt in {
                logging.ERROR: "[{asctime}] ERROR   [{name}] {message}",
                logging.WARNING: "[{asctime}] WARNING [{name}] {message}",
                logging.INFO: "[{asctime}] INFO    {message}",
                logging.DEBUG: "[{asctime}] DEBUG   {name}:{lineno} - {message}",
            }.items()
        }

        self.colors = {
            logging.ERROR: '\033[91m',     # Red
            logging.WARNING: '\033[93m',   # Yellow
            logging.INFO: '\033[92m',      # Green
            logging.DEBUG: '\033[94m',     # Blue
        } if enable_colors else {}

    def format(self, record):
        formatter = self._formatters.get(record.levelno, self._formatters[logging.INFO])
        text = formatter.format(record)
        color = self.colors.get(record.levelno)
        if color:
            return f"{color}{text}\033[0m"
        return text


class JsonFormatter(logging.Formatter):
    """Structured JSON formatter."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "pathname": record.pathname,
            "lineno": record.lineno,
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


# =====================================================================================================
# Setup
# =====================================================================================================

def _env_bool(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _parse_size_string(size_str: str) -> int:
    """Parse size string into bytes."""
    size_str = size_str.upper().strip()

    multipliers = {
        'KB': 1024,
        'MB': 1024 ** 2,
        'GB': 1024 ** 3,
        'B': 1,
    }

    for suffix, multiplier in multipliers.items():
        if size_str.endswith(suffix):
            try:
                return int(float(size_str[:-len(suffix)].strip()) * multiplier)
            except ValueError:
                continue

    try:
        return int(float(size_str))
    except ValueError:
        pass

    return 10 * 1024 * 1024  # Default 10MB


def setup_logging(settings: Optional[LoggingSettings] = None) -> Dict[str, Any]:
    """Attach handlers to the ``pchtxt`` logger.

    Existing handlers on that logger are replaced, so calling this twice
    does not duplicate output.
    """
    settings = settings or LoggingSettings()
    numeric_level = getattr(logging, settings.level.upper(), logging.INFO)
    use_json = settings.structured_json if settings.structured_json is not None else _env_bool(JSON_ENV_VAR)

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(numeric_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    handlers: Dict[str, logging.Handler] = {}

    if settings.console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(numeric_level)
        enable_colors = (hasattr(sys.stderr, 'isatty') and
                         sys.stderr.isatty() and
                         os.environ.get('TERM') != 'dumb')
        console_handler.setFormatter(JsonFormatter() if use_json else FastFormatter(enable_colors=enable_colors))
        root_logger.addHandler(console_handler)
        handlers['console'] = console_handler

    log_dir_path = None
    if settings.log_dir:
        log_dir_path = Path(settings.log_dir)
        log_dir_path.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            str(log_dir_path / "pchtxt.log"),
            maxBytes=_parse_size_string(settings.max_log_size),
            backupCount=settings.backup_count,
            encoding='utf-8',
        )
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(JsonFormatter() if use_json else FastFormatter())
        root_logger.addHandler(file_handler)
        handlers['file'] = file_handler

    root_logger.debug("Logging initialized: level=%s json=%s", settings.level, use_json)
    return {
        'logger': root_logger,
        'handlers': handlers,
        'log_dir': log_dir_path,
    }


@lru_cache(maxsize=32)
def get_logger(name: str) -> logging.Logger:
    """Get cached logger instance."""
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def cleanup_logging():
    """Detach and close the handlers added by setup_logging."""
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in root_logger.handlers[:]:
        handler.close()
        root_logger.removeHandler(handler)
    get_logger.cache_clear()
