"""Two-phase markdown parser producing style ranges.

Phase 1 splits the source into lines and builds the block tree. Phase 2
scans each block's content span for inline constructs. The combined
ranges are sorted and grouped before they are returned.

Architecture:
- `RuleSet`: the block and inline registries, built once and injected
- `MarkdownParser`: runs both phases with a RuleSet and a ParseConfig
- `parse_markdown`: module-level entry point using the built-in rules

Thread Safety:
- Registries are immutable; a RuleSet may be shared freely
- Every parse call allocates its own ParserState and InlineContext
- Configuration is read from ContextVar (thread-local) unless given

"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from mdranges.config import ParseConfig, get_parse_config
from mdranges.lines import split_lines
from mdranges.parsing.blocks.core import collect_block_ranges, parse_blocks
from mdranges.parsing.blocks.registry import BlockRuleRegistry, create_default_block_registry
from mdranges.parsing.inline.core import parse_all_inlines
from mdranges.parsing.inline.registry import InlineRuleRegistry, create_default_inline_registry
from mdranges.ranges import normalize_ranges
from mdranges.utils.logger import get_logger

if TYPE_CHECKING:
    from mdranges.nodes import Block
    from mdranges.ranges import Range

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class RuleSet:
    """The grammar a parser runs: block rules plus inline rules.

    Attributes:
        block_rules: Block registry, fallback rule last
        inline_rules: Inline trigger dispatch table

    """

    block_rules: BlockRuleRegistry
    inline_rules: InlineRuleRegistry

    @classmethod
    def default(cls) -> RuleSet:
        """Build a RuleSet from the built-in rules."""
        return cls(
            block_rules=create_default_block_registry(),
            inline_rules=create_default_inline_registry(),
        )


class MarkdownParser:
    """Parse markdown source into normalized style ranges.

    Usage:
        >>> parser = MarkdownParser()
        >>> [r.to_dict() for r in parser.parse("# Hello")]
        [{'type': 'syntax', 'start': 0, 'length': 2}, {'type': 'h1', 'start': 2, 'length': 5}]

        >>> # Extended grammar
        >>> builder = create_block_registry_with_defaults()
        >>> builder.register(ThematicBreakRule(), before="list_item")
        >>> rules = RuleSet(builder.build(), create_default_inline_registry())
        >>> parser = MarkdownParser(rules)

    Thread Safety:
        Holds only immutable state. Safe to share across threads.

    """

    __slots__ = ("_rules", "_config")

    def __init__(
        self,
        rules: RuleSet | None = None,
        config: ParseConfig | None = None,
    ) -> None:
        """Initialize parser.

        Args:
            rules: Grammar to run (built-in rules if None)
            config: Fixed configuration; if None the active ContextVar
                config is read on every call
        """
        self._rules = rules if rules is not None else _DEFAULT_RULES
        self._config = config

    @property
    def rules(self) -> RuleSet:
        """The grammar this parser runs."""
        return self._rules

    @property
    def config(self) -> ParseConfig:
        """Configuration in effect for the next call."""
        return self._config if self._config is not None else get_parse_config()

    def parse(self, source: str) -> list[Range]:
        """Parse ``source`` into ranges sorted by start.

        Empty input and input longer than ``max_parsable_length`` yield an
        empty list without parsing.

        Raises:
            BlockInvariantError: Only with ``strict_invariants`` set, when
                no block rule claims a non-blank line
        """
        config = self.config
        if not source:
            return []
        if len(source) > config.max_parsable_length:
            logger.debug(
                "Skipping parse: %d characters exceeds limit of %d",
                len(source),
                config.max_parsable_length,
            )
            return []

        blocks = self._parse_blocks(source, config)
        ranges = collect_block_ranges(blocks)
        ranges.extend(parse_all_inlines(blocks, source, self._rules.inline_rules))
        return normalize_ranges(ranges)

    def parse_blocks(self, source: str) -> list[Block]:
        """Run only the block phase and return the block tree.

        The length guard does not apply here.
        """
        return self._parse_blocks(source, self.config)

    def _parse_blocks(self, source: str, config: ParseConfig) -> list[Block]:
        return parse_blocks(
            split_lines(source),
            self._rules.block_rules,
            strict=config.strict_invariants,
        )

    def __repr__(self) -> str:
        return f"MarkdownParser(block_rules={len(self._rules.block_rules)}, inline_rules={len(self._rules.inline_rules)})"


# Built once at import; shared by every parser without explicit rules
_DEFAULT_RULES: RuleSet = RuleSet.default()

_DEFAULT_PARSER: MarkdownParser = MarkdownParser()


def parse_markdown(source: str) -> list[Range]:
    """Parse ``source`` with the built-in rules and the active config.

    Example:
        >>> [r.to_dict() for r in parse_markdown("**bold**")]
        [{'type': 'syntax', 'start': 0, 'length': 2}, {'type': 'bold', 'start': 2, 'length': 4}, {'type': 'syntax', 'start': 6, 'length': 2}]

    """
    return _DEFAULT_PARSER.parse(source)
