"""Block parsing subsystem.

Splits a document into structural blocks (headings, fenced and
indented code, blockquotes, list items, paragraphs) and records their
block-level ranges. Inline content spans are handed to the inline phase
afterwards.

Architecture:
Rules implement the BlockRule protocol and live in an immutable
BlockRuleRegistry. parse_blocks() drives them line by line with an open
container stack.

"""

from __future__ import annotations

from mdranges.parsing.blocks.core import (
    ParserState,
    collect_block_ranges,
    iter_blocks,
    parse_blocks,
)
from mdranges.parsing.blocks.protocol import BaseBlockRule, BlockMatch, BlockRule
from mdranges.parsing.blocks.registry import (
    BlockRuleRegistry,
    BlockRuleRegistryBuilder,
    create_block_registry_with_defaults,
    create_default_block_registry,
)
from mdranges.parsing.blocks.rules import (
    AtxHeadingRule,
    BlockquoteRule,
    FencedCodeRule,
    IndentedCodeRule,
    ListItemRule,
    ParagraphRule,
    ThematicBreakRule,
)

__all__ = [
    "AtxHeadingRule",
    "BaseBlockRule",
    "BlockMatch",
    "BlockRule",
    "BlockRuleRegistry",
    "BlockRuleRegistryBuilder",
    "BlockquoteRule",
    "FencedCodeRule",
    "IndentedCodeRule",
    "ListItemRule",
    "ParagraphRule",
    "ParserState",
    "ThematicBreakRule",
    "collect_block_ranges",
    "create_block_registry_with_defaults",
    "create_default_block_registry",
    "iter_blocks",
    "parse_blocks",
]
