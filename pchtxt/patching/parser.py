"""Patch Text entry points.

Buffers the document once and runs both passes over the same lines:
the meta pass for the descriptive fields, then the content pass for the
patch collections.
"""

from __future__ import annotations

import logging
from typing import IO, Iterable, Optional, Tuple, Union

from ..config.models import ParserSettings
from ..exceptions import PchtxtReadError
from .content_parser import ContentParser
from .meta_parser import parse_meta
from .models import PatchTextMeta, PatchTextOutput
from .transcript import ParseLog

logger = logging.getLogger(__name__)

PchtxtSource = Union[str, bytes, IO[str], Iterable[str]]
LogTarget = Union[ParseLog, IO[str], None]


def _split_text(text: str) -> Tuple[str, ...]:
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return tuple(line.rstrip("\r") for line in lines)


def read_lines(source: PchtxtSource, encoding: str = "utf-8") -> Tuple[str, ...]:
    """Buffer a document into an ordered tuple of lines.

    Accepts the document text, raw bytes, a readable text stream or any
    iterable of lines. Newline characters are stripped.

    Raises:
        PchtxtReadError: the stream cannot be read or decoded.
    """
    if isinstance(source, str):
        return _split_text(source)

    if isinstance(source, (bytes, bytearray)):
        try:
            return _split_text(bytes(source).decode(encoding))
        except UnicodeDecodeError as exc:
            raise PchtxtReadError(f"Cannot decode Patch Text input: {exc}", details={"encoding": encoding}) from exc

    name = getattr(source, "name", None)
    try:
        if hasattr(source, "read"):
            data = source.read()
            if isinstance(data, (bytes, bytearray)):
                data = bytes(data).decode(encoding)
            return _split_text(data)
        return tuple(line.rstrip("\r\n") for line in source)
    except (OSError, UnicodeDecodeError, ValueError) as exc:
        raise PchtxtReadError(
            f"Cannot read Patch Text input: {exc}",
            source=str(name) if name else None,
        ) from exc


def _resolve_log(log: LogTarget, settings: ParserSettings) -> ParseLog:
    if isinstance(log, ParseLog):
        return log
    return ParseLog(stream=log, forward_to_logging=settings.forward_to_logging)


def get_pchtxt_meta(
    source: PchtxtSource,
    log: LogTarget = None,
    *,
    settings: Optional[ParserSettings] = None,
) -> PatchTextMeta:
    """Parse only the meta block of a Patch Text document."""
    settings = settings or ParserSettings()
    lines = read_lines(source, settings.encoding)
    return parse_meta(lines, _resolve_log(log, settings))


def parse_pchtxt(
    source: PchtxtSource,
    log: LogTarget = None,
    *,
    settings: Optional[ParserSettings] = None,
) -> PatchTextOutput:
    """Compile a complete output from one Patch Text document.

    Args:
        source: Document text, bytes, text stream or iterable of lines.
        log: Transcript sink, or a text stream the transcript is written to.
        settings: Parser settings; defaults apply when omitted.

    Returns:
        PatchTextOutput with the meta fields and every non-empty collection.
    """
    settings = settings or ParserSettings()
    transcript = _resolve_log(log, settings)
    lines = read_lines(source, settings.encoding)

    meta = parse_meta(lines, transcript)
    parser = ContentParser(
        transcript,
        debug_info=settings.debug_info,
        big_endian=settings.default_big_endian,
    )
    collections = parser.run(lines)

    logger.info(
        "Parsed Patch Text %r: %d collection(s), %d patch(es)",
        meta.title,
        len(collections),
        sum(len(collection.patches) for collection in collections),
    )
    return PatchTextOutput(meta=meta, collections=collections)


def parse_pchtxt_with_log(
    source: PchtxtSource,
    *,
    settings: Optional[ParserSettings] = None,
) -> Tuple[PatchTextOutput, str]:
    """Parse a document and return the output together with the transcript text."""
    settings = settings or ParserSettings()
    transcript = ParseLog(forward_to_logging=settings.forward_to_logging)
    output = parse_pchtxt(source, transcript, settings=settings)
    return output, transcript.text()
