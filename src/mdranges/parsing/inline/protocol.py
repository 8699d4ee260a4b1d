"""InlineRule protocol and the per-call inline scan context.

An inline rule is attempted whenever the scanner reaches one of its
trigger characters. It either declines (returns None) or claims a span of
the block content and reports the ranges it produced.

Thread Safety:
Rules must be stateless. InlineContext is created per parse_inlines()
call and never shared.

"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar, Protocol, runtime_checkable

from mdranges.parsing.destinations import find_label_end, match_labels

if TYPE_CHECKING:
    from collections.abc import Iterable

    from mdranges.ranges import Range


@dataclass(frozen=True, slots=True)
class InlineMatch:
    """A span claimed by an inline rule.

    Attributes:
        ranges: Ranges in absolute source offsets, in emission order
        consumed: Characters claimed starting at the trigger position
        text: Output text for the claimed span (the literal source slice)
    """

    ranges: tuple[Range, ...]
    consumed: int
    text: str


@dataclass(slots=True)
class InlineContext:
    """Mutable state for one scan over one block's content.

    Besides the output, the context remembers searches that came up empty
    so that later triggers in the same text skip them. Every closer search
    runs forward to the end of ``text``, so a search that fails from some
    offset fails from any later offset too.

    Attributes:
        text: Block content being scanned
        base_offset: Source offset of ``text[0]``
        ranges: Ranges collected so far
        position: Position of the trigger being tried; after the scan,
            ``len(text)``
        dead_ends: Closer string mapped to the earliest offset from which
            a search for it is known to fail

    """

    text: str
    base_offset: int
    ranges: list[Range] = field(default_factory=list)
    position: int = 0
    dead_ends: dict[str, int] = field(default_factory=dict, init=False, repr=False)
    _parts: list[str] = field(default_factory=list, init=False, repr=False)
    _found: dict[str, tuple[int, int]] = field(default_factory=dict, init=False, repr=False)
    _label_ends: dict[int, int] | None = field(default=None, init=False, repr=False)

    @property
    def output(self) -> str:
        """Output text accumulated so far."""
        return "".join(self._parts)

    def add_ranges(self, ranges: Iterable[Range]) -> None:
        """Collect ranges, dropping zero-length ones."""
        append = self.ranges.append
        for r in ranges:
            if r.length > 0:
                append(r)

    def append_text(self, text: str) -> None:
        """Append to the output accumulator."""
        if text:
            self._parts.append(text)

    def advance(self, count: int) -> None:
        """Move the scan position forward."""
        self.position += count

    def exhausted(self, closer: str, pos: int) -> bool:
        """Check if a search for ``closer`` from ``pos`` is known to fail."""
        limit = self.dead_ends.get(closer)
        return limit is not None and pos >= limit

    def mark_exhausted(self, closer: str, pos: int) -> None:
        """Record that a search for ``closer`` from ``pos`` failed."""
        limit = self.dead_ends.get(closer)
        if limit is None or pos < limit:
            self.dead_ends[closer] = pos

    def find(self, sub: str, start: int) -> int:
        """Same as ``self.text.find(sub, start)``, reusing the last answer.

        The last result for ``sub`` still holds for any ``start`` between
        the offset it was searched from and the offset it found.
        """
        cached = self._found.get(sub)
        if cached is not None:
            origin, found = cached
            if origin <= start and (found == -1 or start <= found):
                return found
        found = self.text.find(sub, start)
        self._found[sub] = (start, found)
        return found

    def label_end(self, pos: int) -> int:
        """Offset of the ] matching the [ at ``pos``, or -1."""
        if self._label_ends is None:
            self._label_ends = match_labels(self.text)
        end = self._label_ends.get(pos)
        if end is None:
            # Escaped [ is not in the table
            return find_label_end(self.text, pos)
        return end


@runtime_checkable
class InlineRule(Protocol):
    """Protocol for inline rule implementations.

    Attributes:
        name: Unique rule identifier used for registration
        triggers: Characters that make the scanner attempt this rule

    """

    name: ClassVar[str]
    triggers: ClassVar[tuple[str, ...]]

    def parse(self, text: str, pos: int, ctx: InlineContext) -> InlineMatch | None:
        """Try to claim a span starting at ``text[pos]``.

        Args:
            text: Block content
            pos: Position of the trigger character
            ctx: Scan context; ``ctx.base_offset`` translates positions in
                ``text`` to source offsets

        Returns:
            The claimed span, or None to decline
        """
        ...
