"""Inline rule registry with trigger dispatch.

Rules sharing a trigger character are attempted in registration order.
That order is the only tie-break; it never depends on dict or set
iteration order.

Thread Safety:
InlineRuleRegistry is immutable after creation. Safe to share.
Use InlineRuleRegistryBuilder for mutable construction.

Example:
    >>> builder = create_inline_registry_with_defaults()
    >>> registry = builder.build()
    >>> [rule.name for rule in registry.get_rules_for_trigger("\\\\")]
    ['hard_break', 'escape']

"""

from __future__ import annotations

from typing import TYPE_CHECKING

from mdranges.errors import RuleRegistrationError

if TYPE_CHECKING:
    from mdranges.parsing.inline.protocol import InlineRule


class InlineRuleRegistry:
    """Immutable trigger-character dispatch table.

    Thread Safety:
        Immutable after creation. Safe to share across threads.

    """

    __slots__ = ("_rules", "_by_trigger", "_by_name", "_triggers")

    def __init__(
        self,
        rules: tuple[InlineRule, ...],
        by_trigger: dict[str, tuple[InlineRule, ...]],
    ) -> None:
        """Initialize registry with pre-built mappings.

        Use InlineRuleRegistryBuilder to create instances.
        """
        self._rules = rules
        self._by_trigger = by_trigger
        self._by_name = {rule.name: rule for rule in rules}
        self._triggers = frozenset(by_trigger)

    @property
    def rules(self) -> tuple[InlineRule, ...]:
        """All rules in registration order."""
        return self._rules

    @property
    def triggers(self) -> frozenset[str]:
        """Every character that triggers at least one rule."""
        return self._triggers

    def get_rules_for_trigger(self, char: str) -> tuple[InlineRule, ...]:
        """Get the rules for ``char`` in registration order (empty if none)."""
        return self._by_trigger.get(char, ())

    def get(self, name: str) -> InlineRule | None:
        """Get a rule by name."""
        return self._by_name.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self._by_name

    def __len__(self) -> int:
        return len(self._rules)


class InlineRuleRegistryBuilder:
    """Mutable builder for InlineRuleRegistry.

    Example:
        >>> builder = InlineRuleRegistryBuilder()
        >>> builder.register(CodeSpanRule()).register(EmphasisRule())
        >>> registry = builder.build()
        >>> sorted(registry.triggers)
        ['*', '_', '`']

    """

    __slots__ = ("_rules",)

    def __init__(self) -> None:
        """Initialize empty builder."""
        self._rules: list[InlineRule] = []

    def register(self, rule: InlineRule) -> InlineRuleRegistryBuilder:
        """Register an inline rule.

        Args:
            rule: Rule implementing the InlineRule protocol

        Returns:
            Self for chaining

        Raises:
            RuleRegistrationError: If the name is missing or taken, or the
                rule has no triggers
        """
        name = getattr(rule, "name", None)
        if not name:
            raise RuleRegistrationError(type(rule).__name__, "missing 'name' attribute")
        if any(existing.name == name for existing in self._rules):
            raise RuleRegistrationError(name, "already registered")

        triggers = getattr(rule, "triggers", ())
        if not triggers:
            raise RuleRegistrationError(name, "must declare at least one trigger")
        for trigger in triggers:
            if len(trigger) != 1:
                raise RuleRegistrationError(name, f"trigger {trigger!r} is not a single character")

        self._rules.append(rule)
        return self

    def register_all(self, rules: list[InlineRule]) -> InlineRuleRegistryBuilder:
        """Register multiple rules in order."""
        for rule in rules:
            self.register(rule)
        return self

    @property
    def rules(self) -> tuple[InlineRule, ...]:
        """Rules registered so far, in order."""
        return tuple(self._rules)

    def clear(self) -> None:
        """Remove every registered rule."""
        self._rules.clear()

    def build(self) -> InlineRuleRegistry:
        """Build immutable registry from registered rules."""
        by_trigger: dict[str, list[InlineRule]] = {}
        for rule in self._rules:
            for trigger in rule.triggers:
                by_trigger.setdefault(trigger, []).append(rule)

        return InlineRuleRegistry(
            rules=tuple(self._rules),
            by_trigger={char: tuple(rules) for char, rules in by_trigger.items()},
        )

    def __len__(self) -> int:
        return len(self._rules)


def create_inline_registry_with_defaults() -> InlineRuleRegistryBuilder:
    """Create a builder pre-populated with the built-in rules.

    Order: code span, emphasis, strikethrough, link, image, autolink,
    hard break, escape.
    """
    from mdranges.parsing.inline.code import CodeSpanRule
    from mdranges.parsing.inline.emphasis import EmphasisRule, StrikethroughRule
    from mdranges.parsing.inline.links import AutolinkRule, ImageRule, LinkRule
    from mdranges.parsing.inline.special import EscapeRule, HardBreakRule

    builder = InlineRuleRegistryBuilder()
    builder.register(CodeSpanRule())
    builder.register(EmphasisRule())
    builder.register(StrikethroughRule())
    builder.register(LinkRule())
    builder.register(ImageRule())
    builder.register(AutolinkRule())
    builder.register(HardBreakRule())
    builder.register(EscapeRule())
    return builder


def create_default_inline_registry() -> InlineRuleRegistry:
    """Create the immutable registry of built-in inline rules."""
    return create_inline_registry_with_defaults().build()
