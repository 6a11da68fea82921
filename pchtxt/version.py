"""Version utilities for the Patch Text parser."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

DISTRIBUTION_NAME = "pchtxt"
FALLBACK_VERSION = "1.0.0"


def load_version() -> str:
    try:
        return version(DISTRIBUTION_NAME).strip() or FALLBACK_VERSION
    except PackageNotFoundError:
        return FALLBACK_VERSION
