"""Block phase: drive the block rule registry across source lines.

State machine per document: an open container stack (innermost last) and
a completed block list. For each line:

1. Blank line: close every open block that does not survive blank lines.
2. Walk the open stack innermost to outermost. The first block whose rule
   ``continues`` absorbs the line; blocks that decline are closed.
3. Otherwise try rules in priority order; the first ``match`` wins.
4. At EOF close everything still open.

Thread Safety:
ParserState is created per call and discarded after use. Rules and the
registry are read-only.

"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from mdranges.errors import BlockInvariantError
from mdranges.lines import LineInfo, is_blank_line
from mdranges.nodes import Block, BlockKind
from mdranges.utils.logger import get_logger

if TYPE_CHECKING:
    from mdranges.parsing.blocks.registry import BlockRuleRegistry
    from mdranges.ranges import Range

logger = get_logger(__name__)


@dataclass(slots=True)
class ParserState:
    """Mutable block-phase state for a single parse call.

    Attributes:
        lines: All source lines
        registry: Block rules in priority order
        open_blocks: Stack of open blocks, innermost last
        blocks: Completed blocks in closing order
        line_index: Index of the line being processed

    """

    lines: list[LineInfo]
    registry: BlockRuleRegistry
    open_blocks: list[Block] = field(default_factory=list)
    blocks: list[Block] = field(default_factory=list)
    line_index: int = 0

    def next_line_start(self, line: LineInfo) -> int:
        """Offset where the line after ``line`` starts.

        Falls back to ``line.end`` on the last line.
        """
        next_index = line.line_number + 1
        if next_index < len(self.lines):
            return self.lines[next_index].start
        return line.end

    def open_block(self, block: Block) -> None:
        """Push a block onto the open stack."""
        self.open_blocks.append(block)

    def close_block(self, index: int) -> None:
        """Finalize the open block at ``index`` and move it to ``blocks``."""
        block = self.open_blocks.pop(index)
        block.rule.finalize(block, self)
        self.blocks.append(block)

    def complete(self, block: Block) -> None:
        """Finalize a block that never entered the open stack."""
        block.rule.finalize(block, self)
        self.blocks.append(block)


def parse_blocks(
    lines: list[LineInfo],
    registry: BlockRuleRegistry,
    *,
    strict: bool = False,
) -> list[Block]:
    """Parse block structure from source lines.

    Args:
        lines: Output of split_lines()
        registry: Block rules to apply
        strict: Raise BlockInvariantError instead of degrading when no rule
            claims a non-blank line

    Returns:
        Top-level blocks ordered by start offset

    """
    state = ParserState(lines=lines, registry=registry)
    rules = registry.rules

    for line in lines:
        state.line_index = line.line_number
        text = line.text

        if is_blank_line(text):
            _close_on_blank_line(state)
            continue

        if _continue_open_block(line, state):
            continue

        for rule in rules:
            match = rule.match(text, state)
            if match is None:
                continue
            block = rule.process(match, line, state)
            if rule.multiline:
                state.open_block(block)
            else:
                state.complete(block)
            break
        else:
            _unmatched_line(line, state, strict)

    for idx in range(len(state.open_blocks) - 1, -1, -1):
        state.close_block(idx)

    # Inner blocks close before their parents; restore document order
    state.blocks.sort(key=_block_start)
    return state.blocks


def _block_start(block: Block) -> int:
    return block.start


def _close_on_blank_line(state: ParserState) -> None:
    """Close open blocks that do not survive a blank line."""
    open_blocks = state.open_blocks
    for idx in range(len(open_blocks) - 1, -1, -1):
        block = open_blocks[idx]
        if not block.rule.survives_blank_line(block, state):
            state.close_block(idx)


def _continue_open_block(line: LineInfo, state: ParserState) -> bool:
    """Offer ``line`` to the open blocks, innermost first.

    Returns:
        True if an open block absorbed the line
    """
    open_blocks = state.open_blocks
    for idx in range(len(open_blocks) - 1, -1, -1):
        block = open_blocks[idx]
        rule = block.rule
        if rule.continues(line.text, block, state):
            if not rule.absorb(line, block, state):
                state.close_block(idx)
            return True
        state.close_block(idx)
    return False


def _unmatched_line(line: LineInfo, state: ParserState, strict: bool) -> None:
    """Handle a non-blank line no rule claimed.

    The fallback rule matches every non-blank line, so this only happens
    with a broken registry. Degrade to an unstyled paragraph.
    """
    if strict:
        raise BlockInvariantError("no block rule matched a non-blank line", line.line_number)

    logger.warning("No block rule matched line %d; treating it as a paragraph", line.line_number)
    state.complete(
        Block(
            kind=BlockKind.PARAGRAPH,
            rule=state.registry.fallback,
            start=line.start,
            end=line.end,
            content_start=line.start,
            content_end=line.end,
        )
    )


def iter_blocks(blocks: list[Block]) -> list[Block]:
    """Flatten a block tree in document order without recursion."""
    flat: list[Block] = []
    stack = list(reversed(blocks))
    while stack:
        block = stack.pop()
        flat.append(block)
        if block.children:
            stack.extend(reversed(block.children))
    return flat


def collect_block_ranges(blocks: list[Block]) -> list[Range]:
    """Collect block-level ranges from a block tree in document order."""
    ranges: list[Range] = []
    for block in iter_blocks(blocks):
        ranges.extend(block.syntax_ranges)
    return ranges
