"""Inline parsing subsystem.

Built-in rules:
- Code spans (`)
- Emphasis and strong (*, _), including *** / ___
- Strikethrough (~~)
- Links, images and autolinks
- Hard line breaks and backslash escapes

Architecture:
Greedy trigger dispatch instead of the CommonMark delimiter stack. Rules
that claim a span (bold, strikethrough) re-scan their own content for
nested emphasis with a bounded secondary pass.

"""

from __future__ import annotations

from mdranges.parsing.inline.code import CodeSpanRule
from mdranges.parsing.inline.core import parse_all_inlines, parse_inlines
from mdranges.parsing.inline.emphasis import EmphasisRule, StrikethroughRule
from mdranges.parsing.inline.links import AutolinkRule, ImageRule, LinkRule
from mdranges.parsing.inline.protocol import InlineContext, InlineMatch, InlineRule
from mdranges.parsing.inline.registry import (
    InlineRuleRegistry,
    InlineRuleRegistryBuilder,
    create_default_inline_registry,
    create_inline_registry_with_defaults,
)
from mdranges.parsing.inline.special import EscapeRule, HardBreakRule

__all__ = [
    "AutolinkRule",
    "CodeSpanRule",
    "EmphasisRule",
    "EscapeRule",
    "HardBreakRule",
    "ImageRule",
    "InlineContext",
    "InlineMatch",
    "InlineRule",
    "InlineRuleRegistry",
    "InlineRuleRegistryBuilder",
    "LinkRule",
    "StrikethroughRule",
    "create_default_inline_registry",
    "create_inline_registry_with_defaults",
    "parse_all_inlines",
    "parse_inlines",
]
