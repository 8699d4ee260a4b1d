"""Built-in block rules.

Each rule scans the line by hand (no regex in the hot path), mirroring the
classifier style of the block phase:

- AtxHeadingRule: ``# heading`` through ``###### heading``
- FencedCodeRule: ``` or ~~~ fences, survives blank lines while open
- BlockquoteRule: ``>`` quoted lines, depth from consecutive markers
- ListItemRule: bullet, ordered and task list markers (single line)
- IndentedCodeRule: lines indented four or more columns
- ParagraphRule: catch-all fallback, must be registered last
- ThematicBreakRule: ``---`` / ``***`` / ``___`` (reserved, not registered
  by default)

"""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

from mdranges.lines import is_blank_line
from mdranges.nodes import (
    Block,
    BlockKind,
    FenceData,
    HeadingData,
    IndentedCodeData,
    ListItemData,
    QuoteData,
)
from mdranges.parsing.blocks.protocol import BaseBlockRule, BlockMatch
from mdranges.parsing.charsets import (
    DIGITS,
    FENCE_CHARS,
    ORDERED_LIST_DELIMITERS,
    TASK_MARKS,
    THEMATIC_BREAK_CHARS,
    UNORDERED_LIST_MARKERS,
)
from mdranges.parsing.indent import (
    CODE_INDENT_COLUMNS,
    MAX_MARKER_INDENT,
    count_indent_columns,
    marker_indent,
    skip_spaces_and_tabs,
    strip_indent,
)
from mdranges.ranges import Range, RangeType

if TYPE_CHECKING:
    from mdranges.lines import LineInfo
    from mdranges.parsing.blocks.core import ParserState

# CommonMark: ATX headings have at most six # characters
MAX_HEADING_LEVEL = 6

# Opening fences need at least three fence characters
MIN_FENCE_LENGTH = 3

# CommonMark: ordered list numbers have at most nine digits
MAX_ORDERED_DIGITS = 9


class AtxHeadingRule(BaseBlockRule):
    """ATX heading: up to 3 spaces, 1-6 #, then space/tab or end of line.

    Emits a ``syntax`` range for the opening marker (with its trailing
    whitespace), an ``h{level}`` range for the trimmed content and a
    ``syntax`` range for an optional closing ``#`` sequence.
    """

    name: ClassVar[str] = "atx_heading"
    kind: ClassVar[BlockKind] = BlockKind.HEADING

    def match(self, text: str, state: ParserState) -> BlockMatch | None:
        indent = marker_indent(text)
        if indent < 0:
            return None

        text_len = len(text)
        pos = indent
        while pos < text_len and text[pos] == "#":
            pos += 1
        level = pos - indent
        if level == 0 or level > MAX_HEADING_LEVEL:
            return None
        if pos < text_len and text[pos] not in " \t":
            return None

        consumed = skip_spaces_and_tabs(text, pos)
        return BlockMatch(
            kind=BlockKind.HEADING,
            consumed=consumed,
            data=HeadingData(level=level),
        )

    def process(self, match: BlockMatch, line: LineInfo, state: ParserState) -> Block:
        text = line.text
        consumed = match.consumed
        level = match.data.level  # type: ignore[union-attr]
        indent = marker_indent(text)

        # Trailing whitespace is never content
        trimmed_end = len(text)
        while trimmed_end > consumed and text[trimmed_end - 1] in " \t":
            trimmed_end -= 1

        # Optional closing sequence: a run of # preceded by whitespace
        # (or making up the whole content)
        content_end = trimmed_end
        closing_start = -1
        hashes_start = trimmed_end
        while hashes_start > consumed and text[hashes_start - 1] == "#":
            hashes_start -= 1
        if hashes_start < trimmed_end and (
            hashes_start == consumed or text[hashes_start - 1] in " \t"
        ):
            closing_start = hashes_start
            while closing_start > consumed and text[closing_start - 1] in " \t":
                closing_start -= 1
            content_end = closing_start

        base = line.start
        ranges: list[Range] = [Range(RangeType.SYNTAX, base + indent, consumed - indent)]
        if content_end > consumed:
            ranges.append(Range(RangeType.heading(level), base + consumed, content_end - consumed))
        if closing_start >= 0:
            ranges.append(Range(RangeType.SYNTAX, base + closing_start, len(text) - closing_start))

        return Block(
            kind=BlockKind.HEADING,
            rule=self,
            start=line.start,
            end=line.end,
            content_start=base + consumed,
            content_end=base + content_end,
            syntax_ranges=ranges,
            data=match.data,
        )


class FencedCodeRule(BaseBlockRule):
    """Fenced code: up to 3 spaces, then 3+ backticks or 3+ tildes.

    Content spans from the line after the opening fence to the line before
    the closing fence. The closing fence uses the same character, at least
    as many times, followed only by whitespace. Unclosed fences run to EOF.
    """

    name: ClassVar[str] = "fenced_code"
    kind: ClassVar[BlockKind] = BlockKind.FENCED_CODE
    multiline: ClassVar[bool] = True
    inline_content: ClassVar[bool] = False

    def match(self, text: str, state: ParserState) -> BlockMatch | None:
        indent = marker_indent(text)
        if indent < 0 or indent >= len(text):
            return None

        fence_char = text[indent]
        if fence_char not in FENCE_CHARS:
            return None

        pos = indent
        text_len = len(text)
        while pos < text_len and text[pos] == fence_char:
            pos += 1
        fence_length = pos - indent
        if fence_length < MIN_FENCE_LENGTH:
            return None

        info = text[pos:]
        # CommonMark: backtick fence info strings cannot contain backticks
        if fence_char == "`" and "`" in info:
            return None

        return BlockMatch(
            kind=BlockKind.FENCED_CODE,
            consumed=text_len,
            data=FenceData(
                fence_char=fence_char,
                fence_length=fence_length,
                indent_length=indent,
                info=info.strip(),
            ),
        )

    def process(self, match: BlockMatch, line: LineInfo, state: ParserState) -> Block:
        content_start = state.next_line_start(line)
        return Block(
            kind=BlockKind.FENCED_CODE,
            rule=self,
            start=line.start,
            end=line.end,
            content_start=content_start,
            content_end=content_start,
            syntax_ranges=[Range(RangeType.SYNTAX, line.start, len(line.text))],
            data=match.data,
        )

    def continues(self, text: str, block: Block, state: ParserState) -> bool:
        # An open fence owns every line until it closes
        return block.data.is_open  # type: ignore[union-attr]

    def absorb(self, line: LineInfo, block: Block, state: ParserState) -> bool:
        block.end = line.end
        if self.is_closing_fence(line.text, block.data):  # type: ignore[arg-type]
            block.syntax_ranges.append(Range(RangeType.SYNTAX, line.start, len(line.text)))
            return False
        block.content_end = line.end
        return True

    def survives_blank_line(self, block: Block, state: ParserState) -> bool:
        return block.data.is_open  # type: ignore[union-attr]

    def finalize(self, block: Block, state: ParserState) -> None:
        data: FenceData = block.data  # type: ignore[assignment]
        data.is_open = False
        # Empty fence at EOF: the content never started
        if block.content_start > block.end:
            block.content_start = block.end
            block.content_end = block.end
        if block.has_content:
            block.syntax_ranges.append(
                Range(RangeType.PRE, block.content_start, block.content_end - block.content_start)
            )

    @staticmethod
    def is_closing_fence(text: str, data: FenceData) -> bool:
        """Check if ``text`` closes a fence opened with ``data``.

        CommonMark 4.5: Closing fences may be indented 0-3 spaces.
        """
        pos = strip_indent(text, MAX_MARKER_INDENT)
        text_len = len(text)
        run_start = pos
        while pos < text_len and text[pos] == data.fence_char:
            pos += 1
        if pos - run_start < data.fence_length:
            return False
        return is_blank_line(text[pos:])


def scan_quote_markers(text: str) -> tuple[int, int]:
    """Scan consecutive ``>`` markers, each with at most one following space.

    Args:
        text: Line text

    Returns:
        (marker_end, depth): offset just past the last marker (and its
        space) and the number of markers; (-1, 0) if the line does not
        start with a marker after up to 3 spaces

    """
    indent = marker_indent(text)
    text_len = len(text)
    if indent < 0 or indent >= text_len or text[indent] != ">":
        return -1, 0

    pos = indent
    depth = 0
    while pos < text_len and text[pos] == ">":
        depth += 1
        pos += 1
        if pos < text_len and text[pos] == " ":
            pos += 1
    return pos, depth


class BlockquoteRule(BaseBlockRule):
    """Blockquote: up to 3 spaces, then ``>`` and at most one space.

    Every quoted line emits a ``blockquote-marker`` range over its markers
    and a ``blockquote`` range over the line (plus its terminator when the
    next line is also quoted) carrying that line's depth. The text after
    the markers becomes a child paragraph, which is what gets inline-parsed.
    """

    name: ClassVar[str] = "blockquote"
    kind: ClassVar[BlockKind] = BlockKind.BLOCKQUOTE
    multiline: ClassVar[bool] = True
    inline_content: ClassVar[bool] = False

    def match(self, text: str, state: ParserState) -> BlockMatch | None:
        marker_end, depth = scan_quote_markers(text)
        if marker_end < 0:
            return None
        return BlockMatch(
            kind=BlockKind.BLOCKQUOTE,
            consumed=marker_end,
            data=QuoteData(depth=depth),
        )

    def process(self, match: BlockMatch, line: LineInfo, state: ParserState) -> Block:
        block = Block(
            kind=BlockKind.BLOCKQUOTE,
            rule=self,
            start=line.start,
            end=line.end,
            content_start=line.start + match.consumed,
            content_end=line.end,
            data=match.data,
        )
        self._add_line(line, match.consumed, match.data.depth, block, state)  # type: ignore[union-attr]
        return block

    def continues(self, text: str, block: Block, state: ParserState) -> bool:
        indent = marker_indent(text)
        return 0 <= indent < len(text) and text[indent] == ">"

    def absorb(self, line: LineInfo, block: Block, state: ParserState) -> bool:
        marker_end, depth = scan_quote_markers(line.text)
        data: QuoteData = block.data  # type: ignore[assignment]
        if depth > data.depth:
            data.depth = depth
        block.end = line.end
        block.content_end = line.end
        self._add_line(line, marker_end, depth, block, state)
        return True

    def _add_line(
        self,
        line: LineInfo,
        marker_end: int,
        depth: int,
        block: Block,
        state: ParserState,
    ) -> None:
        ranges = block.syntax_ranges
        ranges.append(Range(RangeType.BLOCKQUOTE_MARKER, line.start, marker_end))

        line_length = len(line.text)
        next_index = line.line_number + 1
        lines = state.lines
        if next_index < len(lines) and scan_quote_markers(lines[next_index].text)[0] >= 0:
            line_length = lines[next_index].start - line.start
        ranges.append(Range(RangeType.BLOCKQUOTE, line.start, line_length, depth=depth))

        content_start = line.start + marker_end
        if content_start < line.end:
            block.children.append(
                Block(
                    kind=BlockKind.PARAGRAPH,
                    rule=state.registry.fallback,
                    start=content_start,
                    end=line.end,
                    content_start=content_start,
                    content_end=line.end,
                )
            )


def scan_list_marker(text: str) -> ListItemData | None:
    """Scan a bullet, ordered, or task list marker at the start of ``text``.

    Returns:
        Marker details, or None if the line is not a list item

    """
    text_len = len(text)
    start = skip_spaces_and_tabs(text, 0)
    if start >= text_len:
        return None

    char = text[start]
    if char in UNORDERED_LIST_MARKERS:
        ordered = False
        marker_end = start + 1
    elif char in DIGITS:
        pos = start
        while pos < text_len and text[pos] in DIGITS:
            pos += 1
        if pos - start > MAX_ORDERED_DIGITS or pos >= text_len:
            return None
        if text[pos] not in ORDERED_LIST_DELIMITERS:
            return None
        ordered = True
        marker_end = pos + 1
    else:
        return None

    # At least one space or tab must follow the marker
    if marker_end >= text_len or text[marker_end] not in " \t":
        return None

    item = ListItemData(ordered=ordered, marker_start=start, marker_end=marker_end)

    # Task checkbox: "[ ]", "[x]" or "[X]" followed by whitespace
    box = skip_spaces_and_tabs(text, marker_end)
    if (
        box + 3 < text_len
        and text[box] == "["
        and text[box + 1] in TASK_MARKS
        and text[box + 2] == "]"
        and text[box + 3] in " \t"
    ):
        item.task_start = box
        item.checked = text[box + 1] != " "
    return item


class ListItemRule(BaseBlockRule):
    """List item marker line: ``-``, ``*``, ``+``, ``1.``, ``1)``, with tasks.

    Single-line: continuation lines are not attached to the item. The
    marker is emitted as block-level ranges and never reaches the inline
    scanner, so a ``*`` bullet is not an emphasis delimiter.
    """

    name: ClassVar[str] = "list_item"
    kind: ClassVar[BlockKind] = BlockKind.LIST_ITEM

    def match(self, text: str, state: ParserState) -> BlockMatch | None:
        item = scan_list_marker(text)
        if item is None:
            return None
        consumed = skip_spaces_and_tabs(text, item.marker_end)
        if item.task_start >= 0:
            consumed = skip_spaces_and_tabs(text, item.task_start + 3)
        return BlockMatch(
            kind=BlockKind.LIST_ITEM,
            consumed=consumed,
            data=item,
        )

    def process(self, match: BlockMatch, line: LineInfo, state: ParserState) -> Block:
        item: ListItemData = match.data  # type: ignore[assignment]
        base = line.start
        consumed = match.consumed
        marker_length = item.marker_end - item.marker_start
        ranges: list[Range] = []

        if item.checked is not None:
            task_type = RangeType.TASK_CHECKED if item.checked else RangeType.TASK_UNCHECKED
            if item.ordered:
                ranges.append(Range(RangeType.LIST_NUMBER, base + item.marker_start, marker_length))
                ranges.append(Range(task_type, base + item.task_start, consumed - item.task_start))
            else:
                # The whole "- [x] " prefix is hidden and drawn as a checkbox
                ranges.append(Range(RangeType.SYNTAX, base, consumed))
                ranges.append(Range(task_type, base, consumed))
            content_length = len(line.text) - consumed
            if item.checked and content_length > 0:
                ranges.append(Range(RangeType.TASK_CONTENT_CHECKED, base + consumed, content_length))
        else:
            marker_type = RangeType.LIST_NUMBER if item.ordered else RangeType.LIST_BULLET
            ranges.append(Range(RangeType.SYNTAX, base + item.marker_start, consumed - item.marker_start))
            ranges.append(Range(marker_type, base + item.marker_start, marker_length))

        return Block(
            kind=BlockKind.LIST_ITEM,
            rule=self,
            start=line.start,
            end=line.end,
            content_start=base + consumed,
            content_end=line.end,
            syntax_ranges=ranges,
            data=item,
        )


def is_indented_code_line(text: str) -> bool:
    """Check if ``text`` is non-blank and indented four or more columns."""
    return not is_blank_line(text) and count_indent_columns(text) >= CODE_INDENT_COLUMNS


class IndentedCodeRule(BaseBlockRule):
    """Indented code: non-blank lines indented four or more columns.

    Every line emits a ``syntax`` range over the characters that make up
    its first four columns, and the closed block emits one ``pre`` range
    from its first line to its last. A run of blank lines stays inside the
    block only when an indented line follows it.

    Registered after ``list_item``, so an indented marker still starts a
    list item. Does not interrupt a paragraph: an indented line right
    after paragraph text continues the paragraph.
    """

    name: ClassVar[str] = "indented_code"
    kind: ClassVar[BlockKind] = BlockKind.INDENTED_CODE
    multiline: ClassVar[bool] = True
    inline_content: ClassVar[bool] = False
    interrupts_paragraph: ClassVar[bool] = False

    def match(self, text: str, state: ParserState) -> BlockMatch | None:
        if not is_indented_code_line(text):
            return None
        return BlockMatch(
            kind=BlockKind.INDENTED_CODE,
            consumed=strip_indent(text, CODE_INDENT_COLUMNS),
            data=IndentedCodeData(),
        )

    def process(self, match: BlockMatch, line: LineInfo, state: ParserState) -> Block:
        return Block(
            kind=BlockKind.INDENTED_CODE,
            rule=self,
            start=line.start,
            end=line.end,
            content_start=line.start,
            content_end=line.end,
            syntax_ranges=[Range(RangeType.SYNTAX, line.start, match.consumed)],
            data=match.data,
        )

    def continues(self, text: str, block: Block, state: ParserState) -> bool:
        return is_indented_code_line(text)

    def absorb(self, line: LineInfo, block: Block, state: ParserState) -> bool:
        block.end = line.end
        block.content_end = line.end
        indent = strip_indent(line.text, CODE_INDENT_COLUMNS)
        block.syntax_ranges.append(Range(RangeType.SYNTAX, line.start, indent))
        return True

    def survives_blank_line(self, block: Block, state: ParserState) -> bool:
        data: IndentedCodeData = block.data  # type: ignore[assignment]
        index = state.line_index
        if index < data.resume_line:
            return True

        lines = state.lines
        index += 1
        while index < len(lines) and is_blank_line(lines[index].text):
            index += 1
        data.resume_line = index
        return index < len(lines) and is_indented_code_line(lines[index].text)

    def finalize(self, block: Block, state: ParserState) -> None:
        block.syntax_ranges.append(Range(RangeType.PRE, block.start, block.end - block.start))


class ParagraphRule(BaseBlockRule):
    """Paragraph: the catch-all for any non-blank line.

    Continues while the next line is non-blank and no other registered
    rule matches it.
    """

    name: ClassVar[str] = "paragraph"
    kind: ClassVar[BlockKind] = BlockKind.PARAGRAPH
    multiline: ClassVar[bool] = True
    is_fallback: ClassVar[bool] = True

    def match(self, text: str, state: ParserState) -> BlockMatch | None:
        if is_blank_line(text):
            return None
        return BlockMatch(kind=BlockKind.PARAGRAPH, consumed=0)

    def process(self, match: BlockMatch, line: LineInfo, state: ParserState) -> Block:
        return Block(
            kind=BlockKind.PARAGRAPH,
            rule=self,
            start=line.start,
            end=line.end,
            content_start=line.start,
            content_end=line.end,
        )

    def continues(self, text: str, block: Block, state: ParserState) -> bool:
        if is_blank_line(text):
            return False
        for rule in state.registry.interrupting_rules:
            if rule.match(text, state) is not None:
                return False
        return True


class ThematicBreakRule(BaseBlockRule):
    """Thematic break: up to 3 spaces, then 3+ of ``-``, ``*`` or ``_``.

    Spaces and tabs may appear between the characters. Emits an ``hr``
    range over the line. Not part of the default registry; register it
    ahead of ``list_item`` so ``* * *`` is not read as a bullet.
    """

    name: ClassVar[str] = "thematic_break"
    kind: ClassVar[BlockKind] = BlockKind.THEMATIC_BREAK
    inline_content: ClassVar[bool] = False

    def match(self, text: str, state: ParserState) -> BlockMatch | None:
        indent = marker_indent(text)
        if indent < 0 or indent >= len(text):
            return None

        char = text[indent]
        if char not in THEMATIC_BREAK_CHARS:
            return None

        count = 0
        for c in text[indent:]:
            if c == char:
                count += 1
            elif c != " " and c != "\t":
                return None
        if count < 3:
            return None

        return BlockMatch(kind=BlockKind.THEMATIC_BREAK, consumed=len(text))

    def process(self, match: BlockMatch, line: LineInfo, state: ParserState) -> Block:
        return Block(
            kind=BlockKind.THEMATIC_BREAK,
            rule=self,
            start=line.start,
            end=line.end,
            content_start=line.end,
            content_end=line.end,
            syntax_ranges=[Range(RangeType.HR, line.start, len(line.text))],
        )
