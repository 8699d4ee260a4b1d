"""Link label, destination and title scanners.

CommonMark 0.31.2 (simplified):
- Labels are bracket-balanced; backslash escapes are skipped as pairs
- Angle-bracket destinations: no newlines, no unescaped <
- Raw destinations: no whitespace, balanced parens nested at most
  MAX_DESTINATION_PARENS deep
- Titles are enclosed in ", ', or ()

Each scanner returns the offset just past what it matched, or -1 when the
text at ``start`` is not a valid construct. Scanners never allocate
substrings.
"""

from __future__ import annotations

from mdranges.parsing.charsets import LINK_TITLE_DELIMITERS

# Whitespace allowed between link parts
LINK_WHITESPACE: frozenset[str] = frozenset(" \t\r\n")

# Raw destinations nest parentheses at most this deep (as cmark does)
MAX_DESTINATION_PARENS = 32


def find_label_end(text: str, start: int) -> int:
    """Find the ] matching the [ at ``start``.

    Args:
        text: Block content being scanned
        start: Offset of the opening [

    Returns:
        Offset of the matching ], or -1 if brackets never balance

    """
    depth = 1
    pos = start + 1
    text_len = len(text)
    while pos < text_len:
        char = text[pos]
        if char == "\\" and pos + 1 < text_len:
            pos += 2
            continue
        if char == "[":
            depth += 1
        elif char == "]":
            depth -= 1
            if depth == 0:
                return pos
        pos += 1
    return -1


def match_labels(text: str) -> dict[int, int]:
    """Pair every unescaped [ in ``text`` with its ], in one pass.

    Gives the same answer as find_label_end() for each [ in the table: a
    [ is never the first half of an escape pair, so a scan that starts
    right after it stays in step with this one.

    Returns:
        Offset of each [ mapped to its matching ], or -1 if unmatched

    """
    ends: dict[int, int] = {}
    stack: list[int] = []
    pos = 0
    text_len = len(text)
    while pos < text_len:
        char = text[pos]
        if char == "\\" and pos + 1 < text_len:
            pos += 2
            continue
        if char == "[":
            stack.append(pos)
        elif char == "]" and stack:
            ends[stack.pop()] = pos
        pos += 1
    for start in stack:
        ends[start] = -1
    return ends


def find_link_destination_end(text: str, start: int) -> int:
    """Find the end of a link destination.

    Args:
        text: Block content being scanned
        start: Offset of the first destination character

    Returns:
        Offset just past the destination (past the > for the angle form),
        or -1 if invalid. An empty raw destination returns ``start``.

    """
    text_len = len(text)
    if start >= text_len:
        return -1

    if text[start] == "<":
        pos = start + 1
        while pos < text_len:
            char = text[pos]
            if char == ">":
                return pos + 1
            if char == "<" or char == "\n" or char == "\r":
                return -1
            if char == "\\" and pos + 1 < text_len:
                pos += 2
                continue
            pos += 1
        return -1

    paren_depth = 0
    pos = start
    while pos < text_len:
        char = text[pos]
        if char.isspace():
            break
        if char == "\\" and pos + 1 < text_len:
            pos += 2
            continue
        if char == "(":
            paren_depth += 1
            if paren_depth > MAX_DESTINATION_PARENS:
                return -1
        elif char == ")":
            if paren_depth == 0:
                break
            paren_depth -= 1
        pos += 1

    if paren_depth != 0:
        return -1
    return pos


def find_link_title_end(text: str, start: int) -> int:
    """Find the end of a link title.

    Args:
        text: Block content being scanned
        start: Offset of the opening ", ' or (

    Returns:
        Offset just past the closing delimiter, or -1 if unterminated

    """
    text_len = len(text)
    if start >= text_len:
        return -1

    closer = LINK_TITLE_DELIMITERS.get(text[start])
    if closer is None:
        return -1

    pos = start + 1
    while pos < text_len:
        char = text[pos]
        if char == closer:
            return pos + 1
        if char == "\\" and pos + 1 < text_len:
            pos += 2
            continue
        pos += 1
    return -1


def skip_link_whitespace(text: str, pos: int) -> int:
    """Advance ``pos`` past spaces, tabs and line endings."""
    text_len = len(text)
    while pos < text_len and text[pos] in LINK_WHITESPACE:
        pos += 1
    return pos
