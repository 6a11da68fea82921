"""Parse transcript - ordered, append-only diagnostic log.

Each entry is one line of text. Entries tied to a document line are
prefixed ``L<line>: ``; pass-boundary events carry no prefix. Tooling parses
this text, so the wording of each event is kept stable.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import IO, Iterator, List, Optional

from ..logging_config import get_logger

TRANSCRIPT_LOGGER = "transcript"


@dataclass(frozen=True)
class TranscriptEntry:
    """A single transcript line."""

    text: str
    level: int = logging.INFO
    line_no: Optional[int] = None

    def render(self) -> str:
        if self.line_no is None:
            return self.text
        return f"L{self.line_no}: {self.text}"


class ParseLog:
    """Transcript sink shared by the meta and content passes.

    Args:
        stream: Optional text stream; every entry is also written to it,
            newline-terminated, as soon as it is appended.
        forward_to_logging: Mirror entries to the ``pchtxt.transcript``
            logger at their level.
    """

    def __init__(self, stream: Optional[IO[str]] = None, forward_to_logging: bool = False):
        self._entries: List[TranscriptEntry] = []
        self._stream = stream
        self.forward_to_logging = forward_to_logging
        self._logger = get_logger(TRANSCRIPT_LOGGER)

    def append(self, text: str, line_no: Optional[int] = None, level: int = logging.INFO) -> TranscriptEntry:
        entry = TranscriptEntry(text=text, level=level, line_no=line_no)
        self._entries.append(entry)
        rendered = entry.render()
        if self._stream is not None:
            self._stream.write(rendered + "\n")
        if self.forward_to_logging:
            self._logger.log(level, rendered)
        return entry

    def info(self, text: str, line_no: Optional[int] = None) -> TranscriptEntry:
        return self.append(text, line_no, logging.INFO)

    def debug(self, text: str, line_no: Optional[int] = None) -> TranscriptEntry:
        return self.append(text, line_no, logging.DEBUG)

    def warning(self, text: str, line_no: Optional[int] = None) -> TranscriptEntry:
        return self.append(text, line_no, logging.WARNING)

    def error(self, text: str, line_no: Optional[int] = None) -> TranscriptEntry:
        return self.append(text, line_no, logging.ERROR)

    @property
    def entries(self) -> List[TranscriptEntry]:
        return list(self._entries)

    @property
    def lines(self) -> List[str]:
        return [entry.render() for entry in self._entries]

    def text(self) -> str:
        return "".join(line + "\n" for line in self.lines)

    def count(self, level: int) -> int:
        return sum(1 for entry in self._entries if entry.level == level)

    def __iter__(self) -> Iterator[str]:
        return iter(self.lines)

    def __len__(self) -> int:
        return len(self._entries)
