"""Block rule registry.

Rules are tried in registration order; the first ``match`` wins. The
catch-all paragraph rule must come last.

Thread Safety:
BlockRuleRegistry is immutable after creation. Safe to share.
Use BlockRuleRegistryBuilder for mutable construction.

Example:
    >>> builder = create_block_registry_with_defaults()
    >>> builder.register(ThematicBreakRule(), before="list_item")
    >>> registry = builder.build()
    >>> [rule.name for rule in registry.rules][-3:]
    ['thematic_break', 'list_item', 'paragraph']

"""

from __future__ import annotations

from typing import TYPE_CHECKING

from mdranges.errors import RuleRegistrationError

if TYPE_CHECKING:
    from mdranges.nodes import BlockKind
    from mdranges.parsing.blocks.protocol import BlockRule


class BlockRuleRegistry:
    """Immutable, ordered set of block rules.

    Thread Safety:
        Immutable after creation. Safe to share across threads.

    """

    __slots__ = ("_rules", "_by_name", "_by_kind", "_interrupting", "_fallback")

    def __init__(
        self,
        rules: tuple[BlockRule, ...],
        by_name: dict[str, BlockRule],
        by_kind: dict[BlockKind, BlockRule],
    ) -> None:
        """Initialize registry with pre-built mappings.

        Use BlockRuleRegistryBuilder to create instances.
        """
        self._rules = rules
        self._by_name = by_name
        self._by_kind = by_kind
        self._interrupting = tuple(
            rule for rule in rules if not rule.is_fallback and rule.interrupts_paragraph
        )
        self._fallback = rules[-1]

    @property
    def rules(self) -> tuple[BlockRule, ...]:
        """All rules in registration (priority) order."""
        return self._rules

    @property
    def interrupting_rules(self) -> tuple[BlockRule, ...]:
        """Rules that end an open paragraph, in priority order.

        Every rule except the fallback and those that set
        ``interrupts_paragraph = False``.
        """
        return self._interrupting

    @property
    def fallback(self) -> BlockRule:
        """The catch-all rule (always registered last)."""
        return self._fallback

    def get(self, name: str) -> BlockRule | None:
        """Get a rule by name."""
        return self._by_name.get(name)

    def rule_for(self, kind: BlockKind) -> BlockRule | None:
        """Get the first registered rule creating blocks of ``kind``."""
        return self._by_kind.get(kind)

    def __contains__(self, name: str) -> bool:
        return name in self._by_name

    def __len__(self) -> int:
        return len(self._rules)


class BlockRuleRegistryBuilder:
    """Mutable builder for BlockRuleRegistry.

    Example:
        >>> builder = BlockRuleRegistryBuilder()
        >>> builder.register(AtxHeadingRule()).register(ParagraphRule())
        >>> registry = builder.build()

    """

    __slots__ = ("_rules",)

    def __init__(self) -> None:
        """Initialize empty builder."""
        self._rules: list[BlockRule] = []

    def register(self, rule: BlockRule, *, before: str | None = None) -> BlockRuleRegistryBuilder:
        """Register a block rule.

        Args:
            rule: Rule implementing the BlockRule protocol
            before: Insert ahead of the rule with this name instead of
                appending

        Returns:
            Self for chaining

        Raises:
            RuleRegistrationError: If the name is taken or ``before`` is unknown
        """
        name = getattr(rule, "name", None)
        if not name:
            raise RuleRegistrationError(type(rule).__name__, "missing 'name' attribute")
        if any(existing.name == name for existing in self._rules):
            raise RuleRegistrationError(name, "already registered")

        if before is None:
            self._rules.append(rule)
            return self

        for idx, existing in enumerate(self._rules):
            if existing.name == before:
                self._rules.insert(idx, rule)
                return self
        raise RuleRegistrationError(name, f"cannot insert before unknown rule '{before}'")

    def register_all(self, rules: list[BlockRule]) -> BlockRuleRegistryBuilder:
        """Register multiple rules in order."""
        for rule in rules:
            self.register(rule)
        return self

    @property
    def rules(self) -> tuple[BlockRule, ...]:
        """Rules registered so far, in order."""
        return tuple(self._rules)

    def clear(self) -> None:
        """Remove every registered rule."""
        self._rules.clear()

    def build(self) -> BlockRuleRegistry:
        """Build immutable registry from registered rules.

        Raises:
            RuleRegistrationError: If the fallback rule is missing, duplicated,
                or not registered last
        """
        fallbacks = [rule for rule in self._rules if rule.is_fallback]
        if len(fallbacks) != 1:
            raise RuleRegistrationError(
                "<registry>", f"expected exactly one fallback rule, found {len(fallbacks)}"
            )
        if not self._rules[-1].is_fallback:
            raise RuleRegistrationError(fallbacks[0].name, "fallback rule must be registered last")

        by_kind: dict[BlockKind, BlockRule] = {}
        for rule in self._rules:
            by_kind.setdefault(rule.kind, rule)

        return BlockRuleRegistry(
            rules=tuple(self._rules),
            by_name={rule.name: rule for rule in self._rules},
            by_kind=by_kind,
        )

    def __len__(self) -> int:
        return len(self._rules)


def create_block_registry_with_defaults() -> BlockRuleRegistryBuilder:
    """Create a builder pre-populated with the built-in rules.

    Priority order: heading, fenced code, blockquote, list item, indented
    code, paragraph.
    """
    from mdranges.parsing.blocks.rules import (
        AtxHeadingRule,
        BlockquoteRule,
        FencedCodeRule,
        IndentedCodeRule,
        ListItemRule,
        ParagraphRule,
    )

    builder = BlockRuleRegistryBuilder()
    builder.register(AtxHeadingRule())
    builder.register(FencedCodeRule())
    builder.register(BlockquoteRule())
    builder.register(ListItemRule())
    builder.register(IndentedCodeRule())
    builder.register(ParagraphRule())
    return builder


def create_default_block_registry() -> BlockRuleRegistry:
    """Create the immutable registry of built-in block rules."""
    return create_block_registry_with_defaults().build()
