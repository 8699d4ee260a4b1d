"""Line splitting with source position tracking.

Decomposes raw text into LineInfo records. Offsets are Python string
indices (code points) into the original source, the single counting unit
used by every range the parser produces.

Thread Safety:
LineInfo is frozen (immutable) and safe to share across threads.

"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class LineInfo:
    """A single source line without its terminator.

    Attributes:
        text: Line content, excluding "\\n" and a trailing "\\r"
        start: Offset of the first character of the line
        end: Offset just past the content (before the terminator)
        line_number: 0-indexed line number

    """

    text: str
    start: int
    end: int
    line_number: int


def split_lines(source: str) -> list[LineInfo]:
    """Split source into position-tracked lines.

    Splits on "\\n" and trims a "\\r" immediately before it, so both LF and
    CRLF documents are handled. A trailing newline yields a final empty
    line, which keeps the sequence gap-free: the text between consecutive
    ``start`` offsets is exactly one line plus its terminator.

    Args:
        source: Raw markdown text

    Returns:
        Lines in document order. Never empty, even for empty input.

    Example:
        >>> [(l.text, l.start, l.end) for l in split_lines("a\\r\\nb")]
        [('a', 0, 1), ('b', 3, 4)]

    """
    lines: list[LineInfo] = []
    append = lines.append
    source_len = len(source)
    line_number = 0
    pos = 0

    while True:
        newline = source.find("\n", pos)
        line_end = source_len if newline == -1 else newline

        text_end = line_end
        if line_end > pos and source[line_end - 1] == "\r":
            text_end -= 1

        append(LineInfo(source[pos:text_end], pos, text_end, line_number))

        if newline == -1:
            break
        pos = newline + 1
        line_number += 1

    return lines


def is_blank_line(text: str) -> bool:
    """Check if a line holds only spaces and tabs (or nothing)."""
    for char in text:
        if char != " " and char != "\t":
            return False
    return True
