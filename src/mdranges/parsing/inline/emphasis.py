"""Emphasis and strikethrough rules.

Greedy, local matching instead of the CommonMark delimiter stack: an
opener run claims the first later run of exactly the same length that can
close it. Flanking follows CommonMark 6.2:
https://spec.commonmark.org/0.31.2/#emphasis-and-strong-emphasis

Run length selects the style:

- 1: italic
- 2: bold
- 3: bold and italic over the same content
- more than 3: not an opener

Nesting is recovered by a bounded secondary pass over the captured
content of bold and strikethrough spans (scan_nested_emphasis). The outer
scanner never sees inside a claimed span.

Thread Safety:
Rules are stateless. Functions only mutate the dead_ends table they are
handed, which belongs to one scan.

"""

from __future__ import annotations

from typing import ClassVar

from mdranges.parsing.charsets import (
    EMPHASIS_DELIMITERS,
    is_ascii_punctuation,
    is_unicode_whitespace,
)
from mdranges.parsing.inline.protocol import InlineContext, InlineMatch
from mdranges.ranges import Range, RangeType

# Longer delimiter runs never open emphasis
MAX_DELIMITER_RUN = 3

# strikethrough > bold > italic
MAX_NESTING_DEPTH = 2

# Run lengths the secondary pass looks for inside a span of a given length
_NESTED_RUNS: dict[int, frozenset[int]] = {
    1: frozenset(),
    2: frozenset({1}),
    3: frozenset(),
}

# Inside strikethrough every emphasis style may appear
_STRIKETHROUGH_NESTED_RUNS: frozenset[int] = frozenset({1, 2, 3})


def is_left_flanking(before: str, after: str) -> bool:
    """Check the left-flanking condition for a delimiter run.

    Args:
        before: Character before the run ("" at a boundary)
        after: Character after the run ("" at a boundary)
    """
    if is_unicode_whitespace(after):
        return False
    return (
        not is_ascii_punctuation(after)
        or is_unicode_whitespace(before)
        or is_ascii_punctuation(before)
    )


def is_right_flanking(before: str, after: str) -> bool:
    """Check the right-flanking condition for a delimiter run."""
    if is_unicode_whitespace(before):
        return False
    return (
        not is_ascii_punctuation(before)
        or is_unicode_whitespace(after)
        or is_ascii_punctuation(after)
    )


def can_open(delimiter: str, before: str, after: str) -> bool:
    """Check if a run of ``delimiter`` can open emphasis.

    ``_`` must not be right-flanking too unless punctuation precedes it,
    which keeps snake_case identifiers plain.
    """
    if not is_left_flanking(before, after):
        return False
    if delimiter == "*":
        return True
    return not is_right_flanking(before, after) or is_ascii_punctuation(before)


def can_close(delimiter: str, before: str, after: str) -> bool:
    """Check if a run of ``delimiter`` can close emphasis."""
    if not is_right_flanking(before, after):
        return False
    if delimiter == "*":
        return True
    return not is_left_flanking(before, after) or is_ascii_punctuation(after)


def match_emphasis(
    text: str,
    pos: int,
    start: int,
    end: int,
    runs: frozenset[int] | None = None,
    dead_ends: dict[str, int] | None = None,
) -> tuple[int, int] | None:
    """Match the delimiter run at ``pos`` inside ``text[start:end]``.

    Characters outside ``[start, end)`` count as a boundary for flanking.

    Args:
        text: Content being scanned
        pos: Offset of the first delimiter
        start: Lower bound of the scanned segment
        end: Upper bound of the scanned segment
        runs: Run lengths to accept (None accepts every length up to
            MAX_DELIMITER_RUN)
        dead_ends: Failed searches in this segment, shared by the calls
            of one left-to-right scan; updated in place

    Returns:
        (run_length, close_offset), or None if the run does not open or
        is never closed

    """
    delimiter = text[pos]
    if delimiter not in EMPHASIS_DELIMITERS:
        return None
    # Only the first delimiter of a run can open
    if pos > start and text[pos - 1] == delimiter:
        return None

    run_end = pos
    while run_end < end and text[run_end] == delimiter:
        run_end += 1
    count = run_end - pos
    if count > MAX_DELIMITER_RUN or (runs is not None and count not in runs):
        return None

    before = text[pos - 1] if pos > start else ""
    after = text[run_end] if run_end < end else ""
    if not can_open(delimiter, before, after):
        return None

    # No closer of this length at or after limit
    closer = text[pos:run_end]
    if dead_ends is not None:
        limit = dead_ends.get(closer)
        if limit is not None and run_end >= limit:
            return None

    search = run_end
    while search < end:
        close = text.find(delimiter, search, end)
        if close == -1:
            break
        close_end = close
        while close_end < end and text[close_end] == delimiter:
            close_end += 1
        if close_end - close == count:
            after = text[close_end] if close_end < end else ""
            if can_close(delimiter, text[close - 1], after):
                return count, close
        search = close_end

    if dead_ends is not None:
        dead_ends[closer] = run_end
    return None


def emphasis_ranges(pos: int, count: int, close: int, base_offset: int) -> list[Range]:
    """Build the ranges for a matched run of ``count`` delimiters."""
    content_start = pos + count
    content_length = close - content_start
    ranges = [Range(RangeType.SYNTAX, base_offset + pos, count)]
    if count >= 2:
        ranges.append(Range(RangeType.BOLD, base_offset + content_start, content_length))
    if count != 2:
        ranges.append(Range(RangeType.ITALIC, base_offset + content_start, content_length))
    ranges.append(Range(RangeType.SYNTAX, base_offset + close, count))
    return ranges


def scan_nested_emphasis(
    text: str,
    start: int,
    end: int,
    base_offset: int,
    runs: frozenset[int],
) -> list[Range]:
    """Find emphasis inside the already-claimed span ``text[start:end]``.

    Only runs whose length is in ``runs`` are accepted. A bold span found
    here is itself searched for italic, down to MAX_NESTING_DEPTH levels.
    Uses an explicit work stack, never recursion.

    Returns:
        Ranges in absolute source offsets

    """
    ranges: list[Range] = []
    work: list[tuple[int, int, frozenset[int], int]] = [(start, end, runs, 1)]

    while work:
        seg_start, seg_end, allowed, level = work.pop()
        dead_ends: dict[str, int] = {}
        pos = seg_start
        while pos < seg_end:
            if text[pos] in EMPHASIS_DELIMITERS:
                found = match_emphasis(text, pos, seg_start, seg_end, allowed, dead_ends)
                if found is not None:
                    count, close = found
                    ranges.extend(emphasis_ranges(pos, count, close, base_offset))
                    inner = _NESTED_RUNS[count]
                    if inner and level < MAX_NESTING_DEPTH:
                        work.append((pos + count, close, inner, level + 1))
                    pos = close + count
                    continue
            pos += 1

    return ranges


class EmphasisRule:
    """``*italic*``, ``**bold**``, ``***both***`` and the ``_`` forms."""

    name: ClassVar[str] = "emphasis"
    triggers: ClassVar[tuple[str, ...]] = ("*", "_")

    def parse(self, text: str, pos: int, ctx: InlineContext) -> InlineMatch | None:
        found = match_emphasis(text, pos, 0, len(text), dead_ends=ctx.dead_ends)
        if found is None:
            return None

        count, close = found
        base = ctx.base_offset
        ranges = emphasis_ranges(pos, count, close, base)
        nested = _NESTED_RUNS[count]
        if nested:
            ranges.extend(scan_nested_emphasis(text, pos + count, close, base, nested))

        end = close + count
        return InlineMatch(ranges=tuple(ranges), consumed=end - pos, text=text[pos:end])


class StrikethroughRule:
    """GFM strikethrough: ``~~text~~``.

    The opener is exactly two tildes; the first following ``~~`` closes.
    """

    name: ClassVar[str] = "strikethrough"
    triggers: ClassVar[tuple[str, ...]] = ("~",)

    def parse(self, text: str, pos: int, ctx: InlineContext) -> InlineMatch | None:
        text_len = len(text)
        content_start = pos + 2
        if content_start > text_len or text[pos + 1] != "~":
            return None
        if pos > 0 and text[pos - 1] == "~":
            return None
        if content_start < text_len and text[content_start] == "~":
            return None

        close = ctx.find("~~", content_start)
        if close == -1:
            return None

        base = ctx.base_offset
        ranges = [
            Range(RangeType.SYNTAX, base + pos, 2),
            Range(RangeType.STRIKETHROUGH, base + content_start, close - content_start),
            Range(RangeType.SYNTAX, base + close, 2),
        ]
        ranges.extend(
            scan_nested_emphasis(text, content_start, close, base, _STRIKETHROUGH_NESTED_RUNS)
        )

        end = close + 2
        return InlineMatch(ranges=tuple(ranges), consumed=end - pos, text=text[pos:end])
