"""Tests for the block phase state machine."""

import logging

import pytest

from mdranges.errors import BlockInvariantError
from mdranges.lines import split_lines
from mdranges.nodes import Block, BlockKind
from mdranges.parsing.blocks import (
    BaseBlockRule,
    BlockRuleRegistryBuilder,
    ParserState,
    collect_block_ranges,
    create_default_block_registry,
    iter_blocks,
    parse_blocks,
)
from mdranges.ranges import Range, RangeType


def _blocks(source: str) -> list[Block]:
    return parse_blocks(split_lines(source), create_default_block_registry())


def _spans(source: str) -> list[tuple[BlockKind, int, int]]:
    return [(b.kind, b.start, b.end) for b in _blocks(source)]


class NeverMatchingFallback(BaseBlockRule):
    """A fallback that claims nothing, leaving every line unmatched."""

    name = "never"
    kind = BlockKind.PARAGRAPH
    is_fallback = True

    def match(self, text, state):
        return None

    def process(self, match, line, state):
        raise NotImplementedError


class TestParagraphs:
    """Test the catch-all rule and blank line handling."""

    def test_consecutive_lines_form_one_paragraph(self) -> None:
        assert _spans("a\nb") == [(BlockKind.PARAGRAPH, 0, 3)]

    def test_blank_line_separates_paragraphs(self) -> None:
        assert _spans("a\n\nb") == [
            (BlockKind.PARAGRAPH, 0, 1),
            (BlockKind.PARAGRAPH, 3, 4),
        ]

    def test_whitespace_only_source_has_no_blocks(self) -> None:
        assert _blocks("  \n\t\n") == []

    def test_heading_interrupts_paragraph(self) -> None:
        assert _spans("a\n# H") == [
            (BlockKind.PARAGRAPH, 0, 1),
            (BlockKind.HEADING, 2, 5),
        ]

    def test_list_item_interrupts_paragraph(self) -> None:
        assert [kind for kind, _, _ in _spans("a\n- item")] == [
            BlockKind.PARAGRAPH,
            BlockKind.LIST_ITEM,
        ]

    def test_blockquote_interrupts_paragraph(self) -> None:
        assert [kind for kind, _, _ in _spans("a\n> q")] == [
            BlockKind.PARAGRAPH,
            BlockKind.BLOCKQUOTE,
        ]

    def test_four_space_indent_is_indented_code(self) -> None:
        assert _spans("    # x") == [(BlockKind.INDENTED_CODE, 0, 7)]

    def test_indented_line_does_not_interrupt_paragraph(self) -> None:
        assert _spans("a\n    b") == [(BlockKind.PARAGRAPH, 0, 7)]

    def test_any_ordered_marker_interrupts_paragraph(self) -> None:
        # Any number interrupts, not only 1
        assert _spans("a\n1999. b") == [
            (BlockKind.PARAGRAPH, 0, 1),
            (BlockKind.LIST_ITEM, 2, 9),
        ]

    def test_content_span_is_whole_paragraph(self) -> None:
        block = _blocks("one\ntwo")[0]
        assert (block.content_start, block.content_end) == (0, 7)


class TestFencedCodeBlocks:
    """Test fence lifecycle: open, absorb, close."""

    def test_fence_survives_blank_lines(self) -> None:
        source = "```\ncode\n\nmore\n```\nafter"
        blocks = _blocks(source)
        assert [(b.kind, b.start, b.end) for b in blocks] == [
            (BlockKind.FENCED_CODE, 0, 18),
            (BlockKind.PARAGRAPH, 19, 24),
        ]
        fence = blocks[0]
        assert source[fence.content_start : fence.content_end] == "code\n\nmore"

    def test_fence_ranges(self) -> None:
        fence = _blocks("```\ncode\n```")[0]
        assert fence.syntax_ranges == [
            Range(RangeType.SYNTAX, 0, 3),
            Range(RangeType.SYNTAX, 9, 3),
            Range(RangeType.PRE, 4, 4),
        ]

    def test_unclosed_fence_runs_to_eof(self) -> None:
        fence = _blocks("```py\nx")[0]
        assert (fence.start, fence.end) == (0, 7)
        assert (fence.content_start, fence.content_end) == (6, 7)
        assert fence.data.info == "py"
        assert fence.data.is_open is False

    def test_lone_opening_fence(self) -> None:
        fence = _blocks("```")[0]
        assert fence.syntax_ranges == [Range(RangeType.SYNTAX, 0, 3)]
        assert not fence.has_content

    def test_opening_fence_then_blank_line_keeps_containment(self) -> None:
        fence = _blocks("```\n")[0]
        assert fence.start <= fence.content_start <= fence.content_end <= fence.end

    def test_closing_fence_may_be_longer(self) -> None:
        assert _spans("```\nx\n`````\ny") == [
            (BlockKind.FENCED_CODE, 0, 11),
            (BlockKind.PARAGRAPH, 12, 13),
        ]

    def test_shorter_run_does_not_close(self) -> None:
        fence = _blocks("````\nx\n```")[0]
        assert (fence.content_start, fence.content_end, fence.end) == (5, 10, 10)

    def test_tildes_not_closed_by_backticks(self) -> None:
        assert _spans("~~~\nx\n```") == [(BlockKind.FENCED_CODE, 0, 9)]

    def test_closing_fence_with_trailing_text_does_not_close(self) -> None:
        assert len(_blocks("```\nx\n``` y\nz")) == 1

    def test_heading_inside_fence_is_content(self) -> None:
        assert _spans("```\n# not\n```") == [(BlockKind.FENCED_CODE, 0, 13)]

    def test_backtick_in_info_string_is_not_a_fence(self) -> None:
        assert _spans("``` a`b") == [(BlockKind.PARAGRAPH, 0, 7)]

    def test_empty_fence(self) -> None:
        fence = _blocks("```\n```")[0]
        assert not fence.has_content
        assert RangeType.PRE not in {r.type for r in fence.syntax_ranges}


class TestIndentedCodeBlocks:
    """Test indented code lifecycle across blank lines."""

    def test_run_of_blank_lines_is_bridged(self) -> None:
        assert _spans("    a\n\n\n    b") == [(BlockKind.INDENTED_CODE, 0, 13)]

    def test_trailing_blank_lines_are_not_kept(self) -> None:
        assert _spans("    a\n\n") == [(BlockKind.INDENTED_CODE, 0, 5)]

    def test_after_paragraph_and_blank_line(self) -> None:
        assert _spans("a\n\n    b") == [
            (BlockKind.PARAGRAPH, 0, 1),
            (BlockKind.INDENTED_CODE, 3, 8),
        ]

    def test_unindented_line_ends_block(self) -> None:
        assert _spans("    a\n# h") == [
            (BlockKind.INDENTED_CODE, 0, 5),
            (BlockKind.HEADING, 6, 9),
        ]

    def test_pre_covers_whole_block(self) -> None:
        code = _blocks("    a\n\n    b")[0]
        assert code.syntax_ranges[-1] == Range(RangeType.PRE, 0, 12)
        assert (code.content_start, code.content_end) == (0, 12)


class TestBlockquotes:
    """Test the container rule and its children."""

    def test_consecutive_quote_lines_form_one_block(self) -> None:
        blocks = _blocks("> a\n> b")
        assert [(b.kind, b.start, b.end) for b in blocks] == [(BlockKind.BLOCKQUOTE, 0, 7)]

    def test_each_line_becomes_a_child_paragraph(self) -> None:
        quote = _blocks("> a\n> b")[0]
        assert [(c.kind, c.content_start, c.content_end) for c in quote.children] == [
            (BlockKind.PARAGRAPH, 2, 3),
            (BlockKind.PARAGRAPH, 6, 7),
        ]

    def test_per_line_ranges(self) -> None:
        quote = _blocks("> a\n> b")[0]
        assert quote.syntax_ranges == [
            Range(RangeType.BLOCKQUOTE_MARKER, 0, 2),
            Range(RangeType.BLOCKQUOTE, 0, 4, depth=1),
            Range(RangeType.BLOCKQUOTE_MARKER, 4, 2),
            Range(RangeType.BLOCKQUOTE, 4, 3, depth=1),
        ]

    def test_block_depth_is_deepest_while_ranges_are_per_line(self) -> None:
        quote = _blocks("> a\n>> b\n> c")[0]
        assert quote.data.depth == 2
        depths = [r.depth for r in quote.syntax_ranges if r.type is RangeType.BLOCKQUOTE]
        assert depths == [1, 2, 1]

    def test_empty_quote_line_has_no_child(self) -> None:
        quote = _blocks(">")[0]
        assert quote.children == []
        assert quote.syntax_ranges == [
            Range(RangeType.BLOCKQUOTE_MARKER, 0, 1),
            Range(RangeType.BLOCKQUOTE, 0, 1, depth=1),
        ]

    def test_unquoted_line_ends_quote(self) -> None:
        assert _spans("> a\nb") == [
            (BlockKind.BLOCKQUOTE, 0, 3),
            (BlockKind.PARAGRAPH, 4, 5),
        ]

    def test_blank_line_ends_quote(self) -> None:
        assert [kind for kind, _, _ in _spans("> a\n\n> b")] == [
            BlockKind.BLOCKQUOTE,
            BlockKind.BLOCKQUOTE,
        ]

    def test_deep_nesting_is_not_recursive(self) -> None:
        quote = _blocks(">" * 5000 + " x")[0]
        assert quote.data.depth == 5000


class TestBlockOrdering:
    """Test document order and tree helpers."""

    def test_blocks_sorted_by_start(self) -> None:
        starts = [b.start for b in _blocks("# h\n> q\npara\n- item\n```\nx\n```")]
        assert starts == sorted(starts)

    def test_iter_blocks_visits_children_after_parent(self) -> None:
        flat = iter_blocks(_blocks("# h\n> a\n> b\nc"))
        assert [b.kind for b in flat] == [
            BlockKind.HEADING,
            BlockKind.BLOCKQUOTE,
            BlockKind.PARAGRAPH,
            BlockKind.PARAGRAPH,
            BlockKind.PARAGRAPH,
        ]

    def test_collect_block_ranges(self) -> None:
        ranges = collect_block_ranges(_blocks("# h\n- x"))
        assert ranges == [
            Range(RangeType.SYNTAX, 0, 2),
            Range(RangeType.H1, 2, 1),
            Range(RangeType.SYNTAX, 4, 2),
            Range(RangeType.LIST_BULLET, 4, 1),
        ]


class TestParserState:
    """Test the per-call state helpers."""

    def test_next_line_start(self) -> None:
        lines = split_lines("ab\r\ncd")
        state = ParserState(lines=lines, registry=create_default_block_registry())
        assert state.next_line_start(lines[0]) == 4
        assert state.next_line_start(lines[1]) == 6


class TestUnmatchedLines:
    """Test the invariant violation path with a broken fallback."""

    @pytest.fixture
    def broken_registry(self):
        return BlockRuleRegistryBuilder().register(NeverMatchingFallback()).build()

    def test_degrades_to_paragraph(self, broken_registry) -> None:
        blocks = parse_blocks(split_lines("text"), broken_registry)
        assert [(b.kind, b.start, b.end) for b in blocks] == [(BlockKind.PARAGRAPH, 0, 4)]

    def test_logs_warning(self, broken_registry, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="mdranges"):
            parse_blocks(split_lines("a\n\nb"), broken_registry)
        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(warnings) == 2
        assert warnings[0].name == "mdranges.parsing.blocks.core"

    def test_strict_raises(self, broken_registry) -> None:
        with pytest.raises(BlockInvariantError) as exc_info:
            parse_blocks(split_lines("\nbad"), broken_registry, strict=True)
        assert exc_info.value.line_number == 1

    def test_blank_lines_are_never_violations(self, broken_registry) -> None:
        assert parse_blocks(split_lines("\n \n"), broken_registry, strict=True) == []
