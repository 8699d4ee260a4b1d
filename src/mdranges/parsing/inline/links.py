"""Link, image and autolink rules.

Inline links only: ``[label](destination "title")``. Reference links are
not recognized. The label is not scanned for nested inline syntax.
"""

from __future__ import annotations

import re
from typing import ClassVar, NamedTuple

from mdranges.parsing.charsets import LINK_TITLE_DELIMITERS
from mdranges.parsing.destinations import (
    find_label_end,
    find_link_destination_end,
    find_link_title_end,
    skip_link_whitespace,
)
from mdranges.parsing.inline.protocol import InlineContext, InlineMatch
from mdranges.ranges import Range, RangeType

# CommonMark autolink patterns (section 6.5)
# URI: scheme of 2-32 characters starting with a letter, then ":" and no
# whitespace or angle brackets
_URI_AUTOLINK_RE = re.compile(r"[a-zA-Z][a-zA-Z0-9+.\-]{1,31}:[^\s<>]*")

# Email: HTML5 "valid e-mail address"
_EMAIL_AUTOLINK_RE = re.compile(
    r"[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~\-]+"
    r"@[a-zA-Z0-9](?:[a-zA-Z0-9\-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9\-]{0,61}[a-zA-Z0-9])?)*"
)


class InlineLinkSpan(NamedTuple):
    """Offsets of the parts of an inline link, relative to the content.

    ``dest_start``/``dest_end`` exclude angle brackets.
    """

    label_start: int
    label_end: int
    dest_start: int
    dest_end: int
    close: int


def scan_inline_link(
    text: str, pos: int, ctx: InlineContext | None = None
) -> InlineLinkSpan | None:
    """Scan ``[label](destination "title")`` starting at the ``[`` at ``pos``.

    With ``ctx``, label matching and unterminated titles are looked up in
    the tables the context keeps for ``text``.
    """
    label_end = find_label_end(text, pos) if ctx is None else ctx.label_end(pos)
    if label_end == -1:
        return None

    i = label_end + 1
    text_len = len(text)
    if i >= text_len or text[i] != "(":
        return None

    dest_start = skip_link_whitespace(text, i + 1)
    dest_end = find_link_destination_end(text, dest_start)
    if dest_end == -1:
        return None
    i = skip_link_whitespace(text, dest_end)

    # Title is consumed but gets no range of its own
    if i < text_len and text[i] in LINK_TITLE_DELIMITERS:
        closer = LINK_TITLE_DELIMITERS[text[i]]
        if ctx is not None and ctx.exhausted(closer, i):
            return None
        title_end = find_link_title_end(text, i)
        if title_end == -1:
            if ctx is not None:
                ctx.mark_exhausted(closer, i)
        else:
            i = skip_link_whitespace(text, title_end)

    if i >= text_len or text[i] != ")":
        return None

    if dest_end > dest_start and text[dest_start] == "<":
        dest_start += 1
        dest_end -= 1

    return InlineLinkSpan(pos, label_end, dest_start, dest_end, i)


def link_ranges(span: InlineLinkSpan, base_offset: int) -> list[Range]:
    """Build the ranges after the opening ``[`` of a link."""
    return [
        Range(RangeType.SYNTAX, base_offset + span.label_end, 2),
        Range(RangeType.LINK, base_offset + span.dest_start, span.dest_end - span.dest_start),
        Range(RangeType.SYNTAX, base_offset + span.close, 1),
    ]


class LinkRule:
    """Inline link: ``[text](url)`` with an optional title."""

    name: ClassVar[str] = "link"
    triggers: ClassVar[tuple[str, ...]] = ("[",)

    def parse(self, text: str, pos: int, ctx: InlineContext) -> InlineMatch | None:
        span = scan_inline_link(text, pos, ctx)
        if span is None:
            return None

        base = ctx.base_offset
        ranges = [Range(RangeType.SYNTAX, base + pos, 1)]
        ranges.extend(link_ranges(span, base))

        end = span.close + 1
        return InlineMatch(ranges=tuple(ranges), consumed=end - pos, text=text[pos:end])


class ImageRule:
    """Inline image: ``![alt](url)``.

    The whole construct is wrapped in an ``inline-image`` range and ``![``
    is a single syntax range.
    """

    name: ClassVar[str] = "image"
    triggers: ClassVar[tuple[str, ...]] = ("!",)

    def parse(self, text: str, pos: int, ctx: InlineContext) -> InlineMatch | None:
        if pos + 1 >= len(text) or text[pos + 1] != "[":
            return None

        span = scan_inline_link(text, pos + 1, ctx)
        if span is None:
            return None

        base = ctx.base_offset
        end = span.close + 1
        ranges = [
            Range(RangeType.INLINE_IMAGE, base + pos, end - pos),
            Range(RangeType.SYNTAX, base + pos, 2),
        ]
        ranges.extend(link_ranges(span, base))

        return InlineMatch(ranges=tuple(ranges), consumed=end - pos, text=text[pos:end])


class AutolinkRule:
    """Autolink: ``<scheme:rest>`` or ``<user@example.com>``."""

    name: ClassVar[str] = "autolink"
    triggers: ClassVar[tuple[str, ...]] = ("<",)

    def parse(self, text: str, pos: int, ctx: InlineContext) -> InlineMatch | None:
        close = ctx.find(">", pos + 1)
        if close == -1:
            return None

        if not (
            _URI_AUTOLINK_RE.fullmatch(text, pos + 1, close)
            or _EMAIL_AUTOLINK_RE.fullmatch(text, pos + 1, close)
        ):
            return None

        base = ctx.base_offset
        end = close + 1
        return InlineMatch(
            ranges=(
                Range(RangeType.SYNTAX, base + pos, 1),
                Range(RangeType.LINK, base + pos + 1, close - pos - 1),
                Range(RangeType.SYNTAX, base + close, 1),
            ),
            consumed=end - pos,
            text=text[pos:end],
        )
