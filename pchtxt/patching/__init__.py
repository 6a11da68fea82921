"""Patch Text parsing.

- Line classifier and tokenizer
- Meta pass: title, program ID, URL
- Content pass: build ID collections, patches, AMS cheat blocks
- Parse transcript consumed by callers and tooling
"""

from .models import (
    Patch,
    PatchCollection,
    PatchContent,
    PatchTextMeta,
    PatchTextOutput,
    PatchType,
    TargetType,
)
from .transcript import (
    ParseLog,
    TranscriptEntry,
)
from .meta_parser import parse_meta
from .content_parser import (
    ContentParser,
    ParserState,
    decode_content_line,
    decode_hex_value,
)
from .parser import (
    get_pchtxt_meta,
    parse_pchtxt,
    parse_pchtxt_with_log,
    read_lines,
)

__all__ = [
    # data model
    "Patch",
    "PatchCollection",
    "PatchContent",
    "PatchTextMeta",
    "PatchTextOutput",
    "PatchType",
    "TargetType",
    # transcript
    "ParseLog",
    "TranscriptEntry",
    # passes
    "parse_meta",
    "ContentParser",
    "ParserState",
    "decode_content_line",
    "decode_hex_value",
    # entry points
    "get_pchtxt_meta",
    "parse_pchtxt",
    "parse_pchtxt_with_log",
    "read_lines",
]
