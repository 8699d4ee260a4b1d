"""Tests for the inline scan loop and trigger dispatch."""

from typing import ClassVar

from mdranges.lines import split_lines
from mdranges.parsing.blocks import create_default_block_registry, parse_blocks
from mdranges.parsing.inline import (
    EmphasisRule,
    InlineContext,
    InlineMatch,
    InlineRuleRegistryBuilder,
    create_default_inline_registry,
    create_inline_registry_with_defaults,
    parse_all_inlines,
    parse_inlines,
)
from mdranges.ranges import Range, RangeType


class MentionRule:
    """Styles ``@name`` as a link."""

    name: ClassVar[str] = "mention"
    triggers: ClassVar[tuple[str, ...]] = ("@",)

    def parse(self, text, pos, ctx):
        end = pos + 1
        while end < len(text) and text[end].isalnum():
            end += 1
        if end == pos + 1:
            return None
        return InlineMatch(
            ranges=(Range(RangeType.LINK, ctx.base_offset + pos, end - pos),),
            consumed=end - pos,
            text=text[pos:end],
        )


class ShoutingStarRule:
    """Claims a lone ``*`` as a syntax marker."""

    name: ClassVar[str] = "shouting_star"
    triggers: ClassVar[tuple[str, ...]] = ("*",)

    def parse(self, text, pos, ctx):
        return InlineMatch(
            ranges=(Range(RangeType.SYNTAX, ctx.base_offset + pos, 1),),
            consumed=1,
            text="*",
        )


class ZeroWidthRule:
    """A broken rule that claims nothing."""

    name: ClassVar[str] = "zero_width"
    triggers: ClassVar[tuple[str, ...]] = ("z",)

    def parse(self, text, pos, ctx):
        return InlineMatch(ranges=(), consumed=0, text="")


class TestInlineContext:
    """Test the per-scan accumulator."""

    def test_output_accumulates(self) -> None:
        ctx = InlineContext(text="ab", base_offset=0)
        ctx.append_text("a")
        ctx.append_text("")
        ctx.append_text("b")
        assert ctx.output == "ab"

    def test_zero_length_ranges_dropped(self) -> None:
        ctx = InlineContext(text="", base_offset=0)
        ctx.add_ranges([Range(RangeType.LINK, 3, 0), Range(RangeType.SYNTAX, 3, 1)])
        assert ctx.ranges == [Range(RangeType.SYNTAX, 3, 1)]

    def test_advance(self) -> None:
        ctx = InlineContext(text="abc", base_offset=0)
        ctx.advance(2)
        assert ctx.position == 2


class TestParseInlines:
    """Test the scan loop."""

    def test_plain_text(self) -> None:
        ranges, output = parse_inlines("just text", 0, create_default_inline_registry())
        assert ranges == []
        assert output == "just text"

    def test_base_offset_translates_ranges(self) -> None:
        ranges, _ = parse_inlines("*a*", 10, create_default_inline_registry())
        assert ranges == [
            Range(RangeType.SYNTAX, 10, 1),
            Range(RangeType.ITALIC, 11, 1),
            Range(RangeType.SYNTAX, 12, 1),
        ]

    def test_output_is_source_text(self) -> None:
        text = "a `b` **c** [d](e) ![f](g) <h:i> ~~j~~ \\* k  \nl"
        _, output = parse_inlines(text, 0, create_default_inline_registry())
        assert output == text

    def test_multiple_constructs_in_order(self) -> None:
        ranges, _ = parse_inlines("*a* and `b`", 0, create_default_inline_registry())
        assert [r.type for r in ranges] == [
            RangeType.SYNTAX,
            RangeType.ITALIC,
            RangeType.SYNTAX,
            RangeType.SYNTAX,
            RangeType.CODE,
            RangeType.SYNTAX,
        ]

    def test_empty_registry(self) -> None:
        registry = InlineRuleRegistryBuilder().build()
        assert parse_inlines("**a**", 0, registry) == ([], "**a**")

    def test_zero_width_match_does_not_stall(self) -> None:
        registry = InlineRuleRegistryBuilder().register(ZeroWidthRule()).build()
        assert parse_inlines("zzz", 0, registry) == ([], "zzz")


class TestExtension:
    """New syntax is added by registering a rule."""

    def test_custom_trigger(self) -> None:
        builder = create_inline_registry_with_defaults()
        builder.register(MentionRule())
        ranges, _ = parse_inlines("hi @bob!", 0, builder.build())
        assert ranges == [Range(RangeType.LINK, 3, 4)]

    def test_registration_order_breaks_ties(self) -> None:
        first = InlineRuleRegistryBuilder().register(ShoutingStarRule()).register(EmphasisRule())
        ranges, _ = parse_inlines("*a*", 0, first.build())
        assert [r.type for r in ranges] == [RangeType.SYNTAX, RangeType.SYNTAX]

        second = InlineRuleRegistryBuilder().register(EmphasisRule()).register(ShoutingStarRule())
        ranges, _ = parse_inlines("*a*", 0, second.build())
        assert RangeType.ITALIC in {r.type for r in ranges}


class TestParseAllInlines:
    """Test block traversal for the inline phase."""

    def _run(self, source: str) -> list[Range]:
        blocks = parse_blocks(split_lines(source), create_default_block_registry())
        return parse_all_inlines(blocks, source, create_default_inline_registry())

    def test_paragraph_content(self) -> None:
        assert self._run("x *a*") == [
            Range(RangeType.SYNTAX, 2, 1),
            Range(RangeType.ITALIC, 3, 1),
            Range(RangeType.SYNTAX, 4, 1),
        ]

    def test_fence_content_skipped(self) -> None:
        assert self._run("```\n*a*\n```") == []

    def test_blockquote_children_visited(self) -> None:
        assert self._run("> *a*") == [
            Range(RangeType.SYNTAX, 2, 1),
            Range(RangeType.ITALIC, 3, 1),
            Range(RangeType.SYNTAX, 4, 1),
        ]

    def test_quoted_lines_are_scanned_separately(self) -> None:
        # Each quoted line is its own child, so no break spans two lines
        assert self._run("> a  \n> b") == []

    def test_multiline_paragraph_spans_lines(self) -> None:
        assert Range(RangeType.BOLD, 2, 3) in self._run("**a\nb**")
