"""BlockRule protocol for extensible block grammar.

A block rule recognizes the first line of a block (``match``), builds the
Block (``process``), and, for multi-line blocks, decides whether later
lines belong to it (``continues``/``absorb``). ``finalize`` runs exactly
once when the block closes.

Thread Safety:
Rules must be stateless. All per-parse state lives in the Block and the
ParserState passed as arguments. The same rule instance serves every
parse call.

Example:
    >>> class ThematicBreakRule(BaseBlockRule):
    ...     name = "thematic_break"
    ...     kind = BlockKind.THEMATIC_BREAK
    ...     inline_content = False
    ...
    ...     def match(self, text, state):
    ...         ...
    ...
    ...     def process(self, match, line, state):
    ...         ...

"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar, Protocol, runtime_checkable

from mdranges.nodes import Block, BlockData, BlockKind

if TYPE_CHECKING:
    from mdranges.lines import LineInfo
    from mdranges.parsing.blocks.core import ParserState


@dataclass(frozen=True, slots=True)
class BlockMatch:
    """Result of a successful ``match``.

    Attributes:
        kind: Kind of block the line starts
        consumed: Characters consumed from the line start by the marker
        data: Kind-specific details gathered while matching
    """

    kind: BlockKind
    consumed: int
    data: BlockData | None = None


@runtime_checkable
class BlockRule(Protocol):
    """Protocol for block rule implementations.

    Attributes:
        name: Unique rule identifier used for registration
        kind: Kind of the blocks this rule creates
        multiline: True if blocks stay open after their first line
        inline_content: True if the block's content span is inline-parsed
        is_fallback: True only for the catch-all paragraph rule
        interrupts_paragraph: True if a match ends an open paragraph

    """

    name: ClassVar[str]
    kind: ClassVar[BlockKind]
    multiline: ClassVar[bool]
    inline_content: ClassVar[bool]
    is_fallback: ClassVar[bool]
    interrupts_paragraph: ClassVar[bool]

    def match(self, text: str, state: ParserState) -> BlockMatch | None:
        """Check whether ``text`` starts a block of this kind."""
        ...

    def process(self, match: BlockMatch, line: LineInfo, state: ParserState) -> Block:
        """Build the block for a matched first line.

        The parser pushes the returned block onto the open stack when the
        rule is multiline, and closes it immediately otherwise.
        """
        ...

    def continues(self, text: str, block: Block, state: ParserState) -> bool:
        """Check whether a non-blank line belongs to the open ``block``."""
        ...

    def absorb(self, line: LineInfo, block: Block, state: ParserState) -> bool:
        """Extend ``block`` with a continuation line.

        Returns:
            False if the line also closes the block (closing fence)
        """
        ...

    def survives_blank_line(self, block: Block, state: ParserState) -> bool:
        """Check whether the open ``block`` stays open across a blank line.

        ``state.line_index`` is the blank line; rules may look ahead.
        """
        ...

    def finalize(self, block: Block, state: ParserState) -> None:
        """Hook run exactly once when ``block`` closes."""
        ...


class BaseBlockRule:
    """Default hook implementations for block rules.

    Subclasses provide ``name``, ``kind``, ``match`` and ``process``. The
    defaults describe a single-line block whose whole content span is
    inline-parsed.
    """

    name: ClassVar[str]
    kind: ClassVar[BlockKind]
    multiline: ClassVar[bool] = False
    inline_content: ClassVar[bool] = True
    is_fallback: ClassVar[bool] = False
    interrupts_paragraph: ClassVar[bool] = True

    def continues(self, text: str, block: Block, state: ParserState) -> bool:
        return False

    def absorb(self, line: LineInfo, block: Block, state: ParserState) -> bool:
        block.end = line.end
        block.content_end = line.end
        return True

    def survives_blank_line(self, block: Block, state: ParserState) -> bool:
        return False

    def finalize(self, block: Block, state: ParserState) -> None:
        return None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
