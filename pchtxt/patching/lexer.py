"""Line classifier and tokenizer for Patch Text.

Pure helpers over a single line. Nothing here keeps state; the meta and
content passes build on these to interpret a document.
"""

from __future__ import annotations

from enum import Enum, auto
from typing import Tuple

COMMENT_MARKER = "/"
ECHO_MARKER = "#"
TAG_MARKER = "@"
QUOTE = '"'
CHEAT_OPEN = "["
CHEAT_CLOSE = "]"
AUTHOR_OPEN = "["
AUTHOR_CLOSE = "]"


class LineKind(Enum):
    """Line class, decided by the first character of the trimmed line."""

    BLANK = auto()
    TAG = auto()
    ECHO = auto()
    CHEAT_OPEN = auto()
    COMMENT = auto()
    CONTENT = auto()


_LEADING_KINDS = {
    TAG_MARKER: LineKind.TAG,
    ECHO_MARKER: LineKind.ECHO,
    CHEAT_OPEN: LineKind.CHEAT_OPEN,
    COMMENT_MARKER: LineKind.COMMENT,
}


def classify(line: str) -> LineKind:
    text = line.strip()
    if not text:
        return LineKind.BLANK
    return _LEADING_KINDS.get(text[0], LineKind.CONTENT)


def comment_pos(line: str) -> int:
    """Index of the first comment marker outside quoted text, or len(line)."""
    in_quotes = False
    for pos, ch in enumerate(line):
        if ch == COMMENT_MARKER and not in_quotes:
            return pos
        if ch == QUOTE:
            in_quotes = not in_quotes
    return len(line)


def strip_comment(line: str) -> str:
    """Text before the comment marker, trimmed."""
    return line[:comment_pos(line)].strip()


def comment_text(line: str) -> str:
    """Text after the comment marker, without the marker characters."""
    rest = line[comment_pos(line):]
    return rest.lstrip(COMMENT_MARKER + " \t\r\n\f\v").rstrip()


def first_token(text: str) -> str:
    parts = text.split(None, 1)
    return parts[0] if parts else ""


def split_first(text: str) -> Tuple[str, str]:
    """Split into the leading token and the trimmed remainder."""
    parts = text.strip().split(None, 1)
    if not parts:
        return "", ""
    if len(parts) == 1:
        return parts[0], ""
    return parts[0], parts[1].strip()


def unquote(value: str) -> str:
    """Strip one layer of paired surrounding double quotes."""
    if len(value) >= 2 and value[0] == QUOTE and value[-1] == QUOTE:
        return value[1:-1]
    return value


def fold(token: str) -> str:
    """Normalize a tag or flag token for comparison."""
    return token.casefold()


def split_name_author(comment: str) -> Tuple[str, str]:
    """Split ``Name [Author]`` into its parts.

    The name is everything before the first ``[``; the author is between that
    and the last ``]``. Without brackets the whole comment is the name.
    """
    text = comment.strip()
    start = text.find(AUTHOR_OPEN)
    if start < 0:
        return text, ""
    end = text.rfind(AUTHOR_CLOSE)
    if end < start:
        end = len(text)
    return text[:start].strip(), text[start + 1:end].strip()


def cheat_name(text: str) -> str:
    """Name of an AMS cheat block from its ``[Name]`` opening line."""
    body = text.strip()
    if body.startswith(CHEAT_OPEN):
        body = body[1:]
    end = body.rfind(CHEAT_CLOSE)
    if end >= 0:
        body = body[:end]
    return body.strip()
