"""Meta pass - document-level descriptive fields.

The meta block is the run of lines at the top of a document, up to the
first blank line. Only ``@title``, ``@program`` and ``@url`` are read here;
echo lines in the block provide a fallback title for older documents.
"""

from __future__ import annotations

import logging
from typing import Dict, Optional, Sequence

from . import lexer
from .models import PatchTextMeta
from .transcript import ParseLog

logger = logging.getLogger(__name__)

TITLE_TAG = "@title"
PROGRAM_ID_TAG = "@program"
URL_TAG = "@url"
STOP_TAG = "@stop"

# tag -> PatchTextMeta field
META_TAG_FIELDS: Dict[str, str] = {
    TITLE_TAG: "title",
    PROGRAM_ID_TAG: "program_id",
    URL_TAG: "url",
}


def parse_meta(lines: Sequence[str], log: Optional[ParseLog] = None) -> PatchTextMeta:
    """Read the meta block of a buffered document.

    Never fails; a document without meta tags yields empty fields.
    """
    log = log if log is not None else ParseLog()
    meta = PatchTextMeta()
    legacy_title = ""

    for line_no, raw in enumerate(lines, start=1):
        if not raw.strip():
            log.info("done parsing meta", line_no)
            break

        line = lexer.strip_comment(raw)
        kind = lexer.classify(line)

        if kind is lexer.LineKind.TAG:
            tag, value = lexer.split_first(line)
            tag = lexer.fold(tag)
            if tag == STOP_TAG:
                log.info("done parsing meta (reached tag @stop)")
                break

            field_name = META_TAG_FIELDS.get(tag)
            if field_name is not None:
                value = lexer.unquote(value)
                setattr(meta, field_name, value)
                log.info(f"meta: {tag}={value}", line_no)

        elif kind is lexer.LineKind.ECHO:
            log.info(line, line_no)
            legacy_title = line[1:].strip()
    else:
        log.info("meta parsing reached end of file")

    if not meta.title:
        meta.title = legacy_title
        log.info(f'using "{legacy_title}" as legacy style title')

    logger.debug("meta pass finished: %s", meta)
    return meta
