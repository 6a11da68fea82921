#!/usr/bin/env python3
# -*-coding: utf-8-*-
"""
Patch Text Parser - Consolidated Exception Classes

All exception classes used in the project live here. Problems inside a
Patch Text document never surface as exceptions to the caller; they are
reported through the parse transcript instead. The classes below cover the
remaining failures: unreadable input and invalid settings.
"""

from datetime import datetime
from typing import Dict, Any, Optional


class BaseError(Exception):
    """Base class for all project-specific errors."""

    def __init__(self, message: str, error_code: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.error_code = error_code or "ERROR"
        self.details = details or {}
        self.timestamp = datetime.now()

    def to_dict(self) -> Dict[str, Any]:
        """Converts the exception to a dictionary for structured logging."""
        return {
            'error_code': self.error_code,
            'message': str(self),
            'details': self.details,
            'timestamp': self.timestamp.isoformat()
        }


# =====================================================================================================
# Configuration-related errors
# =====================================================================================================

class ConfigurationError(BaseError):
    """Base class for configuration errors."""

    def __init__(self, message: str, error_code: Optional[str] = None,
                 file_path: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        config_details = details or {}
        if file_path:
            config_details['file_path'] = str(file_path)
        super().__init__(message, error_code or "CONFIG_ERROR", config_details)


class ValidationError(ConfigurationError):
    """Raised when settings validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 file_path: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        validation_details = details or {}
        if field_name:
            validation_details['field_name'] = field_name
        super().__init__(message, "VALIDATION_ERROR", file_path, validation_details)


# =====================================================================================================
# Input-related errors
# =====================================================================================================

class DataError(BaseError):
    """Base class for data-related errors."""

    def __init__(self, message: str, error_code: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code or "DATA_ERROR", details)


class PchtxtReadError(DataError):
    """Raised when the Patch Text input cannot be read or decoded."""

    def __init__(self, message: str, source: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        read_details = details or {}
        if source:
            read_details['source'] = source
        super().__init__(message, "READ_ERROR", read_details)


# =====================================================================================================
# Parsing errors
# =====================================================================================================

class ParseError(BaseError):
    """Base class for errors raised while interpreting a single line."""

    def __init__(self, message: str, error_code: Optional[str] = None,
                 line_no: Optional[int] = None,
                 details: Optional[Dict[str, Any]] = None):
        parse_details = details or {}
        if line_no is not None:
            parse_details['line_no'] = line_no
        self.line_no = line_no
        super().__init__(message, error_code or "PARSE_ERROR", parse_details)


class ContentDecodeError(ParseError):
    """Raised when a patch content line cannot be decoded.

    The content pass catches it and records a warning in the transcript.
    """

    def __init__(self, message: str, line_no: Optional[int] = None,
                 line: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        decode_details = details or {}
        if line is not None:
            decode_details['line'] = line
        super().__init__(message, "CONTENT_DECODE_ERROR", line_no, decode_details)
