"""Indentation and tab-stop arithmetic.

Block rules accept at most three columns of indentation before their
marker; four or more make an indented code line. Tabs advance to the
next multiple of TAB_STOP columns.
"""

from __future__ import annotations

TAB_STOP = 4

# Block markers may be preceded by up to this many spaces
MAX_MARKER_INDENT = 3

# Lines indented this many columns or more are indented code
CODE_INDENT_COLUMNS = 4


def count_indent_columns(text: str) -> int:
    """Count the visual columns of leading spaces and tabs.

    Example:
        >>> count_indent_columns("  \\tx")
        4
    """
    columns = 0
    for char in text:
        if char == " ":
            columns += 1
        elif char == "\t":
            columns += TAB_STOP - (columns % TAB_STOP)
        else:
            break
    return columns


def strip_indent(text: str, max_columns: int) -> int:
    """Count leading characters covering at most ``max_columns`` columns.

    A tab that would cross the limit is left in place.

    Args:
        text: Line text
        max_columns: Column budget to strip

    Returns:
        Number of characters to drop from the start of ``text``

    """
    removed = 0
    pos = 0
    text_len = len(text)
    while pos < text_len and removed < max_columns:
        char = text[pos]
        if char == " ":
            removed += 1
        elif char == "\t":
            width = TAB_STOP - (removed % TAB_STOP)
            if removed + width > max_columns:
                break
            removed += width
        else:
            break
        pos += 1
    return pos


def marker_indent(text: str, max_spaces: int = MAX_MARKER_INDENT) -> int:
    """Count leading spaces before a block marker.

    Only spaces count; tabs are not marker indentation.

    Returns:
        Number of leading spaces, or -1 if there are more than ``max_spaces``

    """
    pos = 0
    text_len = len(text)
    while pos < text_len and text[pos] == " ":
        pos += 1
        if pos > max_spaces:
            return -1
    return pos


def skip_spaces_and_tabs(text: str, pos: int) -> int:
    """Advance ``pos`` past spaces and tabs."""
    text_len = len(text)
    while pos < text_len and text[pos] in " \t":
        pos += 1
    return pos
