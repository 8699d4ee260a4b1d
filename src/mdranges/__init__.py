"""
mdranges: two-phase Markdown parser producing style ranges

Parses markdown into typed, position-addressed ranges for live-styling
editors: a block phase builds the document structure, an inline phase
scans each block's content. Nothing is rendered; ranges point into the
original source.

Quick Start:
    >>> from mdranges import parse_markdown
    >>> [(r.type.value, r.start, r.length) for r in parse_markdown("# Hello")]
    [('syntax', 0, 2), ('h1', 2, 5)]

Custom Rules:
    >>> from mdranges import MarkdownParser, RuleSet, ThematicBreakRule
    >>> from mdranges import create_block_registry_with_defaults, create_default_inline_registry
    >>>
    >>> builder = create_block_registry_with_defaults()
    >>> builder.register(ThematicBreakRule(), before="list_item")
    >>> parser = MarkdownParser(RuleSet(builder.build(), create_default_inline_registry()))
    >>> [r.type.value for r in parser.parse("***")]
    ['hr']

Installation:
    pip install mdranges          # Core parser (zero deps)
    pip install mdranges[test]    # + pytest and hypothesis
"""

from mdranges.config import (
    ParseConfig,
    get_parse_config,
    parse_config_context,
    reset_parse_config,
    set_parse_config,
)
from mdranges.errors import BlockInvariantError, MdRangesError, RuleRegistrationError
from mdranges.lines import LineInfo, split_lines
from mdranges.nodes import Block, BlockKind
from mdranges.parser import MarkdownParser, RuleSet, parse_markdown
from mdranges.parsing.blocks import (
    AtxHeadingRule,
    BaseBlockRule,
    BlockMatch,
    BlockquoteRule,
    BlockRule,
    BlockRuleRegistry,
    BlockRuleRegistryBuilder,
    FencedCodeRule,
    IndentedCodeRule,
    ListItemRule,
    ParagraphRule,
    ThematicBreakRule,
    create_block_registry_with_defaults,
    create_default_block_registry,
    parse_blocks,
)
from mdranges.parsing.inline import (
    InlineContext,
    InlineMatch,
    InlineRule,
    InlineRuleRegistry,
    InlineRuleRegistryBuilder,
    create_default_inline_registry,
    create_inline_registry_with_defaults,
    parse_inlines,
)
from mdranges.ranges import Range, RangeType, group_ranges, normalize_ranges, sort_ranges
from mdranges.serialization import from_dicts, from_json, to_dicts, to_json

__version__ = "0.1.0"

__all__ = [
    # Entry points
    "parse_markdown",
    "MarkdownParser",
    "RuleSet",
    # Ranges
    "Range",
    "RangeType",
    "sort_ranges",
    "group_ranges",
    "normalize_ranges",
    # Lines and blocks
    "LineInfo",
    "split_lines",
    "Block",
    "BlockKind",
    "parse_blocks",
    # Block rules
    "BlockRule",
    "BaseBlockRule",
    "BlockMatch",
    "BlockRuleRegistry",
    "BlockRuleRegistryBuilder",
    "create_block_registry_with_defaults",
    "create_default_block_registry",
    "AtxHeadingRule",
    "FencedCodeRule",
    "IndentedCodeRule",
    "BlockquoteRule",
    "ListItemRule",
    "ParagraphRule",
    "ThematicBreakRule",
    # Inline rules
    "InlineRule",
    "InlineMatch",
    "InlineContext",
    "InlineRuleRegistry",
    "InlineRuleRegistryBuilder",
    "create_inline_registry_with_defaults",
    "create_default_inline_registry",
    "parse_inlines",
    # Configuration
    "ParseConfig",
    "get_parse_config",
    "set_parse_config",
    "reset_parse_config",
    "parse_config_context",
    # Errors
    "MdRangesError",
    "RuleRegistrationError",
    "BlockInvariantError",
    # Serialization
    "to_dicts",
    "from_dicts",
    "to_json",
    "from_json",
]
