"""Patch Text data model.

The parser produces one PatchTextOutput per document:

- PatchTextMeta: descriptive fields of the document
- PatchCollection: patches for one target binary, keyed by build ID
- Patch: one named patch with its offset/value contents
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, List, Optional


class PatchType(Enum):
    """Kind of patch."""

    BINARY = auto()  # static image patch
    HEAP = auto()  # dynamically allocated memory patch
    AMS_CHEAT = auto()  # opaque cheat-engine text block


class TargetType(Enum):
    """Kind of target binary a collection applies to."""

    NSO = auto()
    NRO = auto()


@dataclass
class PatchContent:
    """One write: ``value`` bytes at ``offset``."""

    offset: int
    value: bytes

    def to_dict(self) -> Dict[str, Any]:
        return {"offset": self.offset, "value": self.value.hex().upper()}

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "PatchContent":
        return PatchContent(
            offset=int(data["offset"]),
            value=bytes.fromhex(data.get("value", "")),
        )


@dataclass
class Patch:
    """A single patch inside a collection."""

    name: str = ""
    author: str = ""
    enabled: bool = False
    type: PatchType = PatchType.BINARY
    origin_line: int = 0
    contents: List[PatchContent] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.contents

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "author": self.author,
            "enabled": self.enabled,
            "type": self.type.name,
            "origin_line": self.origin_line,
            "contents": [content.to_dict() for content in self.contents],
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "Patch":
        """Create from dictionary."""
        return Patch(
            name=data.get("name", ""),
            author=data.get("author", ""),
            enabled=data.get("enabled", False),
            type=PatchType[data.get("type", PatchType.BINARY.name)],
            origin_line=data.get("origin_line", 0),
            contents=[PatchContent.from_dict(item) for item in data.get("contents", [])],
        )


@dataclass
class PatchCollection:
    """Patches for one binary, identified by its build ID."""

    build_id: str = ""
    target_type: TargetType = TargetType.NSO
    patches: List[Patch] = field(default_factory=list)

    def enabled_patches(self) -> List[Patch]:
        """Patches the consumer should apply by default."""
        return [patch for patch in self.patches if patch.enabled]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "build_id": self.build_id,
            "target_type": self.target_type.name,
            "patches": [patch.to_dict() for patch in self.patches],
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "PatchCollection":
        return PatchCollection(
            build_id=data.get("build_id", ""),
            target_type=TargetType[data.get("target_type", TargetType.NSO.name)],
            patches=[Patch.from_dict(item) for item in data.get("patches", [])],
        )


@dataclass
class PatchTextMeta:
    """Document-level metadata."""

    title: str = ""
    program_id: str = ""  # also known as title ID
    url: str = ""  # where an updated document can be fetched

    def to_dict(self) -> Dict[str, Any]:
        return {"title": self.title, "program_id": self.program_id, "url": self.url}

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "PatchTextMeta":
        return PatchTextMeta(
            title=data.get("title", ""),
            program_id=data.get("program_id", ""),
            url=data.get("url", ""),
        )


@dataclass
class PatchTextOutput:
    """Compiled output for one Patch Text document.

    Can hold collections for several binaries, in the order they were
    completed in the document.
    """

    meta: PatchTextMeta = field(default_factory=PatchTextMeta)
    collections: List[PatchCollection] = field(default_factory=list)

    def find_collection(self, build_id: str) -> Optional[PatchCollection]:
        """Return the first collection whose build ID matches, ignoring case."""
        wanted = build_id.strip().lower()
        for collection in self.collections:
            if collection.build_id.lower() == wanted:
                return collection
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "meta": self.meta.to_dict(),
            "collections": [collection.to_dict() for collection in self.collections],
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "PatchTextOutput":
        return PatchTextOutput(
            meta=PatchTextMeta.from_dict(data.get("meta", {})),
            collections=[PatchCollection.from_dict(item) for item in data.get("collections", [])],
        )
