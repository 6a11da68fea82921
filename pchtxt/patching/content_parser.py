"""Content pass - the Patch Text line state machine.

Walks the whole document once, line by line, and turns it into patch
collections. Each line is dispatched on its leading character:

- ``@``  tag directive (``@enabled``, ``@flag``, ...)
- ``#``  echo line, copied to the transcript
- ``[``  start of an AMS cheat block
- ``/``  comment; supplies name and author of the next patch
- other  patch content, while a patch is accepting content

Problems in the document never raise. Recoverable ones are logged as
warnings and the line is skipped; fatal ones (a patch without a build ID)
are logged as errors and end the pass. Work finalized before the failing
line is kept.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence

from ..exceptions import ContentDecodeError
from . import lexer
from .meta_parser import META_TAG_FIELDS, STOP_TAG
from .models import Patch, PatchCollection, PatchContent, PatchType, TargetType
from .transcript import ParseLog

logger = logging.getLogger(__name__)

# parsing tags
ENABLED_TAG = "@enabled"
DISABLED_TAG = "@disabled"
HEAP_TAG = "@heap"  # legacy
FLAG_TAG = "@flag"
NSOBID_TAG = "@nsobid"  # legacy

# flags
BIG_ENDIAN_FLAG = "be"
LITTLE_ENDIAN_FLAG = "le"
NSOBID_FLAG = "nsobid"
NROBID_FLAG = "nrobid"
OFFSET_SHIFT_FLAG = "offset_shift"
DEBUG_INFO_FLAG = "debug_info"
ALT_DEBUG_INFO_FLAG = "print_values"  # legacy

# type keywords after @enabled / @disabled
PATCH_TYPE_KEYWORDS: Dict[str, PatchType] = {
    "heap": PatchType.HEAP,
    "ams": PatchType.AMS_CHEAT,
}

MAX_OFFSET = 0xFFFFFFFF

_HEX_RE = re.compile(r"^[0-9a-fA-F]+$")
_OFFSET_RE = re.compile(r"^(?:0[xX])?([0-9a-fA-F]+)$")
_SIGNED_INT_RE = re.compile(r"^([+-]?)(?:0[xX]([0-9a-fA-F]+)|([0-9]+))$")


@dataclass
class ParserState:
    """Mutable state of one content pass."""

    line_no: int = 0
    last_comment: str = ""
    patch: Optional[Patch] = None
    collection: Optional[PatchCollection] = None
    offset_shift: int = 0
    big_endian: bool = False
    accepting_content: bool = False
    debug_info: bool = False
    stopped: bool = False
    fatal: bool = False
    collections: List[PatchCollection] = field(default_factory=list)

    @property
    def build_id(self) -> str:
        return self.collection.build_id if self.collection is not None else ""

    @property
    def in_cheat_block(self) -> bool:
        return (
            self.accepting_content
            and self.patch is not None
            and self.patch.type is PatchType.AMS_CHEAT
        )


def parse_signed_int(value: str) -> int:
    """Parse a decimal or ``0x`` hexadecimal integer with optional sign."""
    match = _SIGNED_INT_RE.match(value.strip())
    if match is None:
        raise ValueError(f"not an integer: {value!r}")
    sign, hex_digits, dec_digits = match.groups()
    number = int(hex_digits, 16) if hex_digits is not None else int(dec_digits, 10)
    return -number if sign == "-" else number


def decode_hex_value(text: str, big_endian: bool = False) -> bytes:
    """Decode one contiguous run of hex digits, two digits per byte.

    Whitespace inside the run is ignored. Bytes are reversed for big-endian
    documents.
    """
    digits = "".join(text.split())
    if not digits:
        raise ValueError("missing value")
    if not _HEX_RE.match(digits):
        raise ValueError(f"invalid hex value: {text}")
    if len(digits) % 2:
        raise ValueError(f"odd number of hex digits: {text}")
    value = bytes.fromhex(digits)
    return value[::-1] if big_endian else value


def decode_content_line(
    text: str,
    line_no: int,
    *,
    offset_shift: int = 0,
    big_endian: bool = False,
) -> Optional[PatchContent]:
    """Decode a comment-free ``<offset> <value>`` line.

    Returns None when the line has no offset token. Raises
    ContentDecodeError for anything malformed.
    """
    offset_token, value_text = lexer.split_first(text)
    if not offset_token:
        return None

    match = _OFFSET_RE.match(offset_token)
    if match is None:
        raise ContentDecodeError(f"invalid offset: {offset_token}", line_no, text)
    offset = int(match.group(1), 16) + offset_shift
    if not 0 <= offset <= MAX_OFFSET:
        raise ContentDecodeError(f"offset out of range: {offset_token} (shift {offset_shift})", line_no, text)

    quoted = lexer.unquote(value_text)
    if quoted != value_text:
        value = quoted.encode("utf-8")
        if not value:
            raise ContentDecodeError("missing value", line_no, text)
    else:
        try:
            value = decode_hex_value(value_text, big_endian)
        except ValueError as exc:
            raise ContentDecodeError(str(exc), line_no, text) from exc

    return PatchContent(offset=offset, value=value)


class ContentParser:
    """Runs the content pass over a buffered document.

    Args:
        log: Transcript sink.
        debug_info: Start with verbose transcript output enabled.
        big_endian: Initial endianness, before any ``@flag be``/``le``.
    """

    def __init__(self, log: Optional[ParseLog] = None, debug_info: bool = False, big_endian: bool = False):
        self.log = log if log is not None else ParseLog()
        self._initial_debug_info = debug_info
        self._initial_big_endian = big_endian

        self._line_handlers: Dict[lexer.LineKind, Callable[[ParserState, str], None]] = {
            lexer.LineKind.BLANK: self._on_blank,
            lexer.LineKind.TAG: self._on_tag,
            lexer.LineKind.ECHO: self._on_echo,
            lexer.LineKind.CHEAT_OPEN: self._on_cheat_open,
            lexer.LineKind.COMMENT: self._on_comment,
            lexer.LineKind.CONTENT: self._on_content,
        }
        self._tag_handlers: Dict[str, Callable[[ParserState, str, str], None]] = {
            STOP_TAG: self._tag_stop,
            ENABLED_TAG: self._tag_patch,
            DISABLED_TAG: self._tag_patch,
            HEAP_TAG: self._tag_heap,
            FLAG_TAG: self._tag_flag,
            NSOBID_TAG: self._tag_legacy_nsobid,
        }
        self._flag_handlers: Dict[str, Callable[[ParserState, str, str], None]] = {
            BIG_ENDIAN_FLAG: self._flag_endian,
            LITTLE_ENDIAN_FLAG: self._flag_endian,
            NSOBID_FLAG: self._flag_build_id,
            NROBID_FLAG: self._flag_build_id,
            OFFSET_SHIFT_FLAG: self._flag_offset_shift,
            DEBUG_INFO_FLAG: self._flag_debug_info,
            ALT_DEBUG_INFO_FLAG: self._flag_debug_info,
        }

    def run(self, lines: Sequence[str]) -> List[PatchCollection]:
        """Parse every line and return the finalized collections."""
        state = ParserState(debug_info=self._initial_debug_info, big_endian=self._initial_big_endian)

        for line_no, raw in enumerate(lines, start=1):
            state.line_no = line_no
            self.step(state, raw)
            if state.stopped:
                state.line_no += 1
                break
        else:
            state.line_no = len(lines) + 1
            self.log.info("done parsing patches")

        self._finalize(state)
        logger.debug(
            "content pass finished at line %d: %d collection(s), fatal=%s",
            state.line_no, len(state.collections), state.fatal,
        )
        return state.collections

    def step(self, state: ParserState, raw: str) -> None:
        """Interpret one document line."""
        kind = lexer.classify(raw)
        if kind is lexer.LineKind.TAG and state.in_cheat_block:
            self.log.warning(
                f"WARNING: AMS cheat [{state.patch.name}] ended because parsing reached a tag",
                state.line_no,
            )
            self._finalize_patch(state)
        self._line_handlers[kind](state, raw)

    # =================================================================================================
    # Finalization
    # =================================================================================================

    def _finalize_patch(self, state: ParserState) -> None:
        patch = state.patch
        state.patch = None
        state.accepting_content = False
        if patch is None or patch.is_empty or state.collection is None:
            return
        state.collection.patches.append(patch)
        if patch.type is PatchType.AMS_CHEAT:
            self.log.info(f"AMS cheat read: {patch.name}", state.line_no)
        else:
            self.log.info(f"patch read: {patch.name}", state.line_no)

    def _finalize_collection(self, state: ParserState) -> None:
        collection = state.collection
        state.collection = None
        if collection is None or not collection.patches:
            return
        state.collections.append(collection)
        self._debug(state, f"parsing completed for {collection.build_id}")

    def _finalize(self, state: ParserState) -> None:
        self._finalize_patch(state)
        self._finalize_collection(state)

    def _open_collection(self, state: ParserState, build_id: str, target_type: TargetType) -> None:
        self._finalize(state)
        state.collection = PatchCollection(build_id=build_id, target_type=target_type)
        state.offset_shift = 0

    def _require_build_id(self, state: ParserState) -> bool:
        if state.build_id:
            return True
        self.log.error("ERROR: missing build id, abort parsing", state.line_no)
        state.fatal = True
        state.stopped = True
        return False

    def _debug(self, state: ParserState, text: str) -> None:
        if state.debug_info:
            self.log.debug(text, state.line_no)

    # =================================================================================================
    # Line handlers
    # =================================================================================================

    def _on_blank(self, state: ParserState, raw: str) -> None:
        if state.in_cheat_block:
            self._finalize_patch(state)

    def _on_echo(self, state: ParserState, raw: str) -> None:
        self.log.info(raw.strip(), state.line_no)

    def _on_comment(self, state: ParserState, raw: str) -> None:
        state.last_comment = lexer.comment_text(raw)

    def _on_cheat_open(self, state: ParserState, raw: str) -> None:
        if not self._require_build_id(state):
            return
        self._finalize_patch(state)
        state.patch = Patch(
            name=lexer.cheat_name(lexer.strip_comment(raw)),
            author="",
            enabled=True,
            type=PatchType.AMS_CHEAT,
            origin_line=state.line_no,
        )
        state.accepting_content = True
        self._debug(state, f"parsing AMS cheat: {state.patch.name}")

    def _on_tag(self, state: ParserState, raw: str) -> None:
        text = lexer.strip_comment(raw)
        token, rest = lexer.split_first(text)
        tag = lexer.fold(token)

        handler = self._tag_handlers.get(tag)
        if handler is None and tag.startswith(NSOBID_TAG):
            # @nsobid-<bid>: one separator character follows the tag
            self._tag_legacy_nsobid(state, NSOBID_TAG, text[len(NSOBID_TAG) + 1:].strip())
        elif handler is not None:
            handler(state, tag, rest)
        elif tag not in META_TAG_FIELDS:
            self.log.warning(f"WARNING ignored unrecognized tag: {token}", state.line_no)

    def _on_content(self, state: ParserState, raw: str) -> None:
        if not state.accepting_content or state.patch is None:
            return
        text = lexer.strip_comment(raw)
        patch = state.patch

        if patch.type is PatchType.AMS_CHEAT:
            if text:
                patch.contents.append(PatchContent(offset=0, value=text.encode("utf-8")))
            return

        try:
            content = decode_content_line(
                text,
                state.line_no,
                offset_shift=state.offset_shift,
                big_endian=state.big_endian,
            )
        except ContentDecodeError as exc:
            self.log.warning(f"WARNING ignored invalid patch content: {exc}", state.line_no)
            return

        if content is None:
            self._debug(state, "skipped line without offset")
            return

        patch.contents.append(content)
        self._debug(state, f"{content.offset:08X}: {content.value.hex().upper()}")

    # =================================================================================================
    # Tag handlers
    # =================================================================================================

    def _tag_stop(self, state: ParserState, tag: str, rest: str) -> None:
        self.log.info("done parsing patches (reached tag @stop)", state.line_no)
        state.stopped = True

    def _tag_patch(self, state: ParserState, tag: str, rest: str) -> None:
        if not self._require_build_id(state):
            return
        self._finalize_patch(state)

        name, author = lexer.split_name_author(state.last_comment)
        patch_type = PatchType.BINARY
        keyword = lexer.first_token(rest)
        if keyword:
            if lexer.fold(keyword) in PATCH_TYPE_KEYWORDS:
                patch_type = PATCH_TYPE_KEYWORDS[lexer.fold(keyword)]
            else:
                self.log.warning(f"WARNING ignored unrecognized patch type: {keyword}", state.line_no)

        state.patch = Patch(
            name=name,
            author=author,
            enabled=tag == ENABLED_TAG,
            type=patch_type,
            origin_line=state.line_no,
        )
        state.accepting_content = True
        self._debug(state, f"parsing patch: {name}")

    def _tag_heap(self, state: ParserState, tag: str, rest: str) -> None:
        if state.patch is not None and state.patch.type is PatchType.BINARY:
            state.patch.type = PatchType.HEAP

    def _tag_flag(self, state: ParserState, tag: str, rest: str) -> None:
        flag_token, flag_value = lexer.split_first(rest)
        flag_type = lexer.fold(flag_token)

        handler = self._flag_handlers.get(flag_type)
        if handler is None:
            self.log.warning(f"WARNING ignored unrecognized flag type: {flag_token}", state.line_no)
            return
        handler(state, flag_type, flag_value)

    def _tag_legacy_nsobid(self, state: ParserState, tag: str, rest: str) -> None:
        if not rest:
            self.log.error("ERROR: missing build id value for @nsobid, abort parsing", state.line_no)
            state.fatal = True
            state.stopped = True
            return
        self._open_collection(state, rest, TargetType.NSO)
        self._debug(state, f"parsing started for {rest} (legacy style bid)")

    # =================================================================================================
    # Flag handlers
    # =================================================================================================

    def _flag_endian(self, state: ParserState, flag_type: str, value: str) -> None:
        state.big_endian = flag_type == BIG_ENDIAN_FLAG

    def _flag_build_id(self, state: ParserState, flag_type: str, value: str) -> None:
        target_type = TargetType.NRO if flag_type == NROBID_FLAG else TargetType.NSO
        self._open_collection(state, value, target_type)
        self._debug(state, f"parsing started for {value}")

    def _flag_offset_shift(self, state: ParserState, flag_type: str, value: str) -> None:
        try:
            state.offset_shift = parse_signed_int(value)
        except ValueError:
            self.log.warning(f"WARNING ignored invalid offset shift: {value}", state.line_no)
            return
        self._debug(state, f"offset shift set to {state.offset_shift:#x}")

    def _flag_debug_info(self, state: ParserState, flag_type: str, value: str) -> None:
        state.debug_info = True
        self.log.info("additional debug info enabled", state.line_no)
