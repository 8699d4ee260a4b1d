"""Hard line breaks and backslash escapes.

Both rules share the ``\\`` trigger; hard break is registered first, so a
backslash at the end of a line is a break and any other backslash before
ASCII punctuation is an escape.
"""

from __future__ import annotations

from typing import ClassVar

from mdranges.parsing.charsets import ESCAPABLE_CHARS
from mdranges.parsing.inline.protocol import InlineContext, InlineMatch
from mdranges.ranges import Range, RangeType

# Trailing spaces needed for a hard break
MIN_BREAK_SPACES = 2


def line_ending_length(text: str, pos: int) -> int:
    """Length of the line ending at ``pos`` ("\\n" or "\\r\\n"), else 0."""
    if text.startswith("\n", pos):
        return 1
    if text.startswith("\r\n", pos):
        return 2
    return 0


class HardBreakRule:
    """Hard line break: ``\\`` or two or more spaces before a line ending."""

    name: ClassVar[str] = "hard_break"
    triggers: ClassVar[tuple[str, ...]] = ("\\", " ")

    def parse(self, text: str, pos: int, ctx: InlineContext) -> InlineMatch | None:
        base = ctx.base_offset

        if text[pos] == "\\":
            newline = line_ending_length(text, pos + 1)
            if not newline:
                return None
            consumed = 1 + newline
            return InlineMatch(
                ranges=(Range(RangeType.SYNTAX, base + pos, 1),),
                consumed=consumed,
                text=text[pos : pos + consumed],
            )

        # Only the first space of a run can start a break
        if pos > 0 and text[pos - 1] == " ":
            return None

        run_end = pos
        text_len = len(text)
        while run_end < text_len and text[run_end] == " ":
            run_end += 1
        spaces = run_end - pos
        if spaces < MIN_BREAK_SPACES:
            return None

        newline = line_ending_length(text, run_end)
        if not newline:
            return None

        consumed = spaces + newline
        return InlineMatch(
            ranges=(Range(RangeType.SYNTAX, base + pos, spaces),),
            consumed=consumed,
            text=text[pos : pos + consumed],
        )


class EscapeRule:
    """Backslash escape: ``\\*`` is a literal ``*`` that opens nothing."""

    name: ClassVar[str] = "escape"
    triggers: ClassVar[tuple[str, ...]] = ("\\",)

    def parse(self, text: str, pos: int, ctx: InlineContext) -> InlineMatch | None:
        if pos + 1 >= len(text) or text[pos + 1] not in ESCAPABLE_CHARS:
            return None
        return InlineMatch(
            ranges=(Range(RangeType.SYNTAX, ctx.base_offset + pos, 1),),
            consumed=2,
            text=text[pos : pos + 2],
        )
