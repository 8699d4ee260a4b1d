"""Tests for the built-in inline rules."""

import pytest

from mdranges.parsing.inline import (
    AutolinkRule,
    CodeSpanRule,
    EmphasisRule,
    EscapeRule,
    HardBreakRule,
    ImageRule,
    InlineContext,
    InlineRule,
    LinkRule,
    StrikethroughRule,
    create_default_inline_registry,
    parse_inlines,
)
from mdranges.parsing.inline.code import find_closing_backticks
from mdranges.parsing.inline.links import scan_inline_link
from mdranges.parsing.inline.special import line_ending_length
from mdranges.ranges import Range, RangeType


@pytest.fixture(scope="module")
def registry():
    return create_default_inline_registry()


def scan(text: str, registry) -> list[tuple[str, int, int]]:
    ranges, output = parse_inlines(text, 0, registry)
    assert output == text
    return [(r.type.value, r.start, r.length) for r in ranges]


class TestCodeSpan:
    """Test backtick matching and space stripping."""

    def test_simple(self, registry) -> None:
        assert scan("`code`", registry) == [("syntax", 0, 1), ("code", 1, 4), ("syntax", 5, 1)]

    def test_double_backticks_with_inner_backtick(self, registry) -> None:
        # One leading and trailing space are stripped from the code range
        assert scan("`` a`b ``", registry) == [
            ("syntax", 0, 2),
            ("code", 3, 3),
            ("syntax", 7, 2),
        ]

    def test_all_spaces_not_stripped(self, registry) -> None:
        assert scan("`  `", registry) == [("syntax", 0, 1), ("code", 1, 2), ("syntax", 3, 1)]

    def test_longer_run_skipped_when_closing(self, registry) -> None:
        assert scan("`a``b`", registry) == [("syntax", 0, 1), ("code", 1, 4), ("syntax", 5, 1)]

    def test_unclosed_is_literal(self, registry) -> None:
        assert scan("`unclosed", registry) == []

    def test_unmatched_run_length(self, registry) -> None:
        assert scan("``a`", registry) == []

    def test_code_hides_emphasis(self, registry) -> None:
        assert "italic" not in {t for t, _, _ in scan("`*a*`", registry)}

    def test_find_closing_backticks(self) -> None:
        assert find_closing_backticks("a``b`c", 0, 1) == 4
        assert find_closing_backticks("a``b`c", 0, 2) == 1
        assert find_closing_backticks("abc", 0, 1) == -1


class TestEmphasis:
    """Test italic, bold and combined delimiters."""

    @pytest.mark.parametrize("source", ["*it*", "_it_"])
    def test_italic(self, registry, source: str) -> None:
        assert scan(source, registry) == [("syntax", 0, 1), ("italic", 1, 2), ("syntax", 3, 1)]

    @pytest.mark.parametrize("source", ["**bold**", "__bold__"])
    def test_bold(self, registry, source: str) -> None:
        assert scan(source, registry) == [("syntax", 0, 2), ("bold", 2, 4), ("syntax", 6, 2)]

    def test_triple_is_bold_and_italic(self, registry) -> None:
        assert scan("***bi***", registry) == [
            ("syntax", 0, 3),
            ("bold", 3, 2),
            ("italic", 3, 2),
            ("syntax", 5, 3),
        ]

    def test_four_delimiters_never_open(self, registry) -> None:
        assert scan("****x****", registry) == []

    def test_italic_inside_bold(self, registry) -> None:
        assert scan("**a *b* c**", registry) == [
            ("syntax", 0, 2),
            ("bold", 2, 7),
            ("syntax", 9, 2),
            ("syntax", 4, 1),
            ("italic", 5, 1),
            ("syntax", 6, 1),
        ]

    def test_unterminated(self, registry) -> None:
        assert scan("*no close", registry) == []

    def test_opener_followed_by_space(self, registry) -> None:
        assert scan("* not*", registry) == []

    def test_intraword_star(self, registry) -> None:
        assert scan("a*b*c", registry) == [("syntax", 1, 1), ("italic", 2, 1), ("syntax", 3, 1)]

    def test_intraword_underscore(self, registry) -> None:
        assert scan("snake_case_name", registry) == []

    def test_mismatched_run_lengths(self, registry) -> None:
        assert scan("*a**", registry) == []


class TestStrikethrough:
    """Test ~~ spans and their nested emphasis."""

    def test_simple(self, registry) -> None:
        assert scan("~~del~~", registry) == [
            ("syntax", 0, 2),
            ("strikethrough", 2, 3),
            ("syntax", 5, 2),
        ]

    def test_nested_bold(self, registry) -> None:
        assert scan("~~a **b** c~~", registry) == [
            ("syntax", 0, 2),
            ("strikethrough", 2, 9),
            ("syntax", 11, 2),
            ("syntax", 4, 2),
            ("bold", 6, 1),
            ("syntax", 7, 2),
        ]

    def test_italic_inside_bold_inside_strikethrough(self, registry) -> None:
        types = [t for t, _, _ in scan("~~**a *b* c**~~", registry)]
        assert "strikethrough" in types
        assert "bold" in types
        assert "italic" in types

    def test_single_tilde(self, registry) -> None:
        assert scan("~single~", registry) == []

    def test_triple_tilde(self, registry) -> None:
        assert scan("~~~a~~~", registry) == []

    def test_unclosed(self, registry) -> None:
        assert scan("~~open", registry) == []


class TestLinks:
    """Test inline links and their destination ranges."""

    def test_simple(self, registry) -> None:
        assert scan("[text](http://x)", registry) == [
            ("syntax", 0, 1),
            ("syntax", 5, 2),
            ("link", 7, 8),
            ("syntax", 15, 1),
        ]

    def test_title_is_consumed(self, registry) -> None:
        assert scan('[a](u "t")', registry) == [
            ("syntax", 0, 1),
            ("syntax", 2, 2),
            ("link", 4, 1),
            ("syntax", 9, 1),
        ]

    def test_angle_destination_excludes_brackets(self, registry) -> None:
        assert ("link", 5, 3) in scan("[a](<b c>)", registry)

    def test_empty_destination_has_no_link_range(self, registry) -> None:
        assert scan("[a](<>)", registry) == [("syntax", 0, 1), ("syntax", 2, 2), ("syntax", 6, 1)]

    def test_nested_brackets_in_label(self, registry) -> None:
        assert scan("[a [b]](c)", registry) == [
            ("syntax", 0, 1),
            ("syntax", 6, 2),
            ("link", 8, 1),
            ("syntax", 9, 1),
        ]

    def test_balanced_parens_in_destination(self, registry) -> None:
        assert ("link", 4, 4) in scan("[a](b(c))", registry)

    @pytest.mark.parametrize("source", ["[a] (b)", "[a](b", "[a](b c)", "[a]", "[a"])
    def test_malformed_is_literal(self, registry, source: str) -> None:
        assert scan(source, registry) == []

    def test_scan_inline_link(self) -> None:
        span = scan_inline_link("x [a](<u>) y", 2)
        assert span is not None
        assert (span.label_start, span.label_end, span.dest_start, span.dest_end, span.close) == (
            2,
            4,
            7,
            8,
            9,
        )


class TestImages:
    """Test image wrapping."""

    def test_simple(self, registry) -> None:
        assert scan("![alt](img.png)", registry) == [
            ("inline-image", 0, 15),
            ("syntax", 0, 2),
            ("syntax", 5, 2),
            ("link", 7, 7),
            ("syntax", 14, 1),
        ]

    @pytest.mark.parametrize("source", ["!not", "![a]", "!"])
    def test_not_an_image(self, registry, source: str) -> None:
        assert scan(source, registry) == []


class TestAutolinks:
    """Test URI and email autolinks."""

    def test_uri(self, registry) -> None:
        assert scan("<https://example.com>", registry) == [
            ("syntax", 0, 1),
            ("link", 1, 19),
            ("syntax", 20, 1),
        ]

    def test_email(self, registry) -> None:
        assert scan("<user@example.com>", registry)[1] == ("link", 1, 16)

    def test_two_letter_scheme(self, registry) -> None:
        assert scan("<ab:c>", registry)[1] == ("link", 1, 4)

    @pytest.mark.parametrize("source", ["<not a link>", "<a:b>", "<https://x", "<>"])
    def test_not_an_autolink(self, registry, source: str) -> None:
        assert scan(source, registry) == []


class TestHardBreaks:
    """Test backslash and trailing-space line breaks."""

    def test_backslash(self, registry) -> None:
        assert scan("a\\\nb", registry) == [("syntax", 1, 1)]

    def test_two_spaces(self, registry) -> None:
        assert scan("a  \nb", registry) == [("syntax", 1, 2)]

    def test_spaces_before_crlf(self, registry) -> None:
        assert scan("a   \r\nb", registry) == [("syntax", 1, 3)]

    def test_single_space(self, registry) -> None:
        assert scan("a \nb", registry) == []

    def test_trailing_spaces_at_end_of_content(self, registry) -> None:
        assert scan("a  ", registry) == []

    def test_line_ending_length(self) -> None:
        assert line_ending_length("a\nb", 1) == 1
        assert line_ending_length("a\r\nb", 1) == 2
        assert line_ending_length("a\rb", 1) == 0


class TestEscapes:
    """Test backslash escapes."""

    def test_escaped_delimiter_does_not_open(self, registry) -> None:
        assert scan("\\*not*", registry) == [("syntax", 0, 1)]

    def test_escaped_bracket_blocks_link(self, registry) -> None:
        assert scan("\\[a](b)", registry) == [("syntax", 0, 1)]

    def test_letter_is_not_escapable(self, registry) -> None:
        assert scan("\\a", registry) == []

    def test_trailing_backslash(self, registry) -> None:
        assert scan("a\\", registry) == []


class TestRuleObjects:
    """Test the rules directly, outside the scanner."""

    @pytest.mark.parametrize(
        "rule",
        [
            CodeSpanRule(),
            EmphasisRule(),
            StrikethroughRule(),
            LinkRule(),
            ImageRule(),
            AutolinkRule(),
            HardBreakRule(),
            EscapeRule(),
        ],
    )
    def test_is_inline_rule(self, rule: InlineRule) -> None:
        assert isinstance(rule, InlineRule)

    def test_ranges_use_base_offset(self) -> None:
        ctx = InlineContext(text="x *a*", base_offset=100)
        match = EmphasisRule().parse("x *a*", 2, ctx)
        assert match is not None
        assert match.ranges == (
            Range(RangeType.SYNTAX, 102, 1),
            Range(RangeType.ITALIC, 103, 1),
            Range(RangeType.SYNTAX, 104, 1),
        )
        assert (match.consumed, match.text) == (3, "*a*")

    def test_declining_returns_none(self) -> None:
        ctx = InlineContext(text="`x", base_offset=0)
        assert CodeSpanRule().parse("`x", 0, ctx) is None
