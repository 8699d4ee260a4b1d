"""Inline phase: a single forward scan over each block's content.

At each position whose character is a registered trigger, the rules for
that trigger are tried in registration order and the first match claims
its span. Everything else is copied to the output verbatim. Plain text
between matches is appended as slices, not per character.

Thread Safety:
All state lives in the InlineContext created per call. The registry is
read-only.

"""

from __future__ import annotations

from typing import TYPE_CHECKING

from mdranges.parsing.blocks.core import iter_blocks
from mdranges.parsing.inline.protocol import InlineContext

if TYPE_CHECKING:
    from mdranges.nodes import Block
    from mdranges.parsing.inline.registry import InlineRuleRegistry
    from mdranges.ranges import Range


def parse_inlines(
    text: str,
    base_offset: int,
    registry: InlineRuleRegistry,
) -> tuple[list[Range], str]:
    """Scan one block's content for inline constructs.

    Args:
        text: Block content
        base_offset: Source offset of ``text[0]``
        registry: Inline rules to apply

    Returns:
        (ranges, output): ranges in absolute source offsets and the output
        text, which always equals ``text``

    """
    ctx = InlineContext(text=text, base_offset=base_offset)
    triggers = registry.triggers
    get_rules = registry.get_rules_for_trigger
    text_len = len(text)
    literal_start = 0
    pos = 0

    while pos < text_len:
        char = text[pos]
        if char in triggers:
            ctx.position = pos
            for rule in get_rules(char):
                match = rule.parse(text, pos, ctx)
                if match is not None and match.consumed > 0:
                    ctx.append_text(text[literal_start:pos])
                    ctx.add_ranges(match.ranges)
                    ctx.append_text(match.text)
                    ctx.advance(match.consumed)
                    pos = literal_start = ctx.position
                    break
            else:
                pos += 1
            continue
        pos += 1

    ctx.append_text(text[literal_start:])
    ctx.position = pos
    return ctx.ranges, ctx.output


def parse_all_inlines(
    blocks: list[Block],
    source: str,
    registry: InlineRuleRegistry,
) -> list[Range]:
    """Run the inline phase over every block that carries inline content.

    Containers are skipped but their children are visited. Traversal is
    iterative regardless of nesting depth.
    """
    ranges: list[Range] = []
    for block in iter_blocks(blocks):
        if not block.rule.inline_content or not block.has_content:
            continue
        start = block.content_start
        block_ranges, _ = parse_inlines(source[start : block.content_end], start, registry)
        ranges.extend(block_ranges)
    return ranges
