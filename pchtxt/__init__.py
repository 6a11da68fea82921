"""Patch Text (pchtxt) parser."""

from .version import load_version
from .exceptions import (
    BaseError,
    ConfigurationError,
    ContentDecodeError,
    DataError,
    ParseError,
    PchtxtReadError,
    ValidationError,
)
from .config import ParserSettings, SettingsModel, load_settings
from .logging_config import setup_logging
from .patching import (
    ParseLog,
    Patch,
    PatchCollection,
    PatchContent,
    PatchTextMeta,
    PatchTextOutput,
    PatchType,
    TargetType,
    get_pchtxt_meta,
    parse_pchtxt,
    parse_pchtxt_with_log,
    read_lines,
)

__version__ = load_version()

__all__ = [
    "__version__",
    "BaseError",
    "ConfigurationError",
    "ContentDecodeError",
    "DataError",
    "ParseError",
    "PchtxtReadError",
    "ValidationError",
    "ParserSettings",
    "SettingsModel",
    "load_settings",
    "setup_logging",
    "ParseLog",
    "Patch",
    "PatchCollection",
    "PatchContent",
    "PatchTextMeta",
    "PatchTextOutput",
    "PatchType",
    "TargetType",
    "get_pchtxt_meta",
    "parse_pchtxt",
    "parse_pchtxt_with_log",
    "read_lines",
]
