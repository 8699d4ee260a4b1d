"""Block nodes produced by the block phase.

Node Hierarchy:
Block
├── HEADING        (single line)
├── FENCED_CODE    (survives blank lines while open)
├── INDENTED_CODE  (keeps blank lines that lead to more indented code)
├── BLOCKQUOTE     (container; one PARAGRAPH child per quoted line)
├── LIST_ITEM      (single line)
├── PARAGRAPH      (catch-all)
└── THEMATIC_BREAK (reserved; rule not registered by default)

Unlike the frozen Range records, a Block is mutable while it sits on the
open stack: continuation lines extend ``end`` and ``content_end``. Once
closed it is never touched again.

Thread Safety:
Blocks are created per parse call and never shared between calls.

"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from mdranges.parsing.blocks.protocol import BlockRule
    from mdranges.ranges import Range


class BlockKind(Enum):
    """Kinds of block-level elements."""

    HEADING = auto()
    FENCED_CODE = auto()
    INDENTED_CODE = auto()
    BLOCKQUOTE = auto()
    LIST_ITEM = auto()
    PARAGRAPH = auto()
    THEMATIC_BREAK = auto()


@dataclass(slots=True)
class HeadingData:
    """ATX heading details.

    Attributes:
        level: Number of leading # characters (1-6)
    """

    level: int


@dataclass(slots=True)
class FenceData:
    """Fenced code details.

    Attributes:
        fence_char: "`" or "~"
        fence_length: Length of the opening fence run
        indent_length: Spaces before the opening fence (0-3)
        info: Trimmed info string after the opening fence
        is_open: True until the closing fence (or EOF) closes the block
    """

    fence_char: str
    fence_length: int
    indent_length: int
    info: str
    is_open: bool = True


@dataclass(slots=True)
class IndentedCodeData:
    """Indented code details.

    Attributes:
        resume_line: Index of the indented line that the current run of
            blank lines leads to, or -1 before the first blank line
    """

    resume_line: int = -1


@dataclass(slots=True)
class QuoteData:
    """Blockquote details.

    Attributes:
        depth: Largest run of consecutive > markers on any quoted line.
            Each line's own ``blockquote`` range carries that line's
            marker count instead.
    """

    depth: int = 1


@dataclass(slots=True)
class ListItemData:
    """List item details. Offsets are relative to the line start.

    Attributes:
        ordered: True for "1." / "1)" markers
        marker_start: Offset of the bullet or first digit
        marker_end: Offset just past the bullet or the "." / ")" delimiter
        checked: None for plain items, else the task checkbox state
        task_start: Offset of the "[" of a task checkbox, or -1
    """

    ordered: bool
    marker_start: int
    marker_end: int
    checked: bool | None = None
    task_start: int = -1


BlockData = Union[HeadingData, FenceData, IndentedCodeData, QuoteData, ListItemData]


@dataclass(slots=True)
class Block:
    """A structural unit of the document.

    Invariant: start <= content_start <= content_end <= end.

    Attributes:
        kind: What kind of block this is
        rule: The rule that created the block and owns its lifecycle
        start: Offset where the block starts (including syntax)
        end: Offset where the block ends (excluding the final terminator)
        content_start: Where inline content begins
        content_end: Where inline content ends
        children: Nested blocks, owned exclusively by this block
        syntax_ranges: Block-level ranges, owned exclusively by this block
        data: Kind-specific details

    """

    kind: BlockKind
    rule: BlockRule
    start: int
    end: int
    content_start: int
    content_end: int
    children: list[Block] = field(default_factory=list)
    syntax_ranges: list[Range] = field(default_factory=list)
    data: BlockData | None = None

    @property
    def has_content(self) -> bool:
        """True when the content span is non-empty."""
        return self.content_end > self.content_start
