"""Code span rule.

CommonMark 6.1: a backtick string opens a code span that ends at the next
backtick string of exactly the same length. One leading and one trailing
space are stripped when both are present and the content is not all
spaces. Nothing inside a code span is parsed further.
"""

from __future__ import annotations

from typing import ClassVar

from mdranges.parsing.inline.protocol import InlineContext, InlineMatch
from mdranges.ranges import Range, RangeType


def find_closing_backticks(text: str, start: int, count: int) -> int:
    """Find a run of exactly ``count`` backticks at or after ``start``.

    Returns:
        Offset of the closing run, or -1 if there is none

    """
    text_len = len(text)
    pos = text.find("`", start)
    while pos != -1:
        run_end = pos
        while run_end < text_len and text[run_end] == "`":
            run_end += 1
        if run_end - pos == count:
            return pos
        pos = text.find("`", run_end)
    return -1


class CodeSpanRule:
    """Inline code: ``code`` with any backtick string length."""

    name: ClassVar[str] = "code_span"
    triggers: ClassVar[tuple[str, ...]] = ("`",)

    def parse(self, text: str, pos: int, ctx: InlineContext) -> InlineMatch | None:
        text_len = len(text)
        content_start = pos
        while content_start < text_len and text[content_start] == "`":
            content_start += 1
        count = content_start - pos

        # A run that starts mid-run is not an opener
        if pos > 0 and text[pos - 1] == "`":
            return None

        closer = text[pos:content_start]
        if ctx.exhausted(closer, content_start):
            return None
        close = find_closing_backticks(text, content_start, count)
        if close == -1:
            ctx.mark_exhausted(closer, content_start)
            return None

        code_start = content_start
        code_end = close
        if (
            code_end - code_start >= 2
            and text[code_start] == " "
            and text[code_end - 1] == " "
            and text[code_start:code_end].strip(" ")
        ):
            code_start += 1
            code_end -= 1

        base = ctx.base_offset
        end = close + count
        return InlineMatch(
            ranges=(
                Range(RangeType.SYNTAX, base + pos, count),
                Range(RangeType.CODE, base + code_start, code_end - code_start),
                Range(RangeType.SYNTAX, base + close, count),
            ),
            consumed=end - pos,
            text=text[pos:end],
        )
