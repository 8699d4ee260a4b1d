"""Range model: typed, position-addressed style spans.

A Range annotates ``length`` characters of the original source starting at
``start``. Ranges are the only output of the parser; a rendering surface
turns them into visual styling.

Ranges may overlap (bold text containing italic text yields both a
``bold`` and an ``italic`` range). After parsing, the full set is
normalized by sort_ranges() and group_ranges().

Thread Safety:
Range is frozen (immutable) and safe to share across threads.
All functions are pure.

"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from operator import attrgetter
from typing import Any, Literal

TableAlignment = Literal["left", "center", "right", "default"]


class RangeType(Enum):
    """Closed enumeration of range types.

    Values are the wire names used by hosts. The thematic break and table
    members are reserved: no default rule emits them yet.

    """

    SYNTAX = "syntax"
    H1 = "h1"
    H2 = "h2"
    H3 = "h3"
    H4 = "h4"
    H5 = "h5"
    H6 = "h6"
    PRE = "pre"
    CODE = "code"
    BOLD = "bold"
    ITALIC = "italic"
    STRIKETHROUGH = "strikethrough"
    BLOCKQUOTE = "blockquote"
    BLOCKQUOTE_MARKER = "blockquote-marker"
    LINK = "link"
    INLINE_IMAGE = "inline-image"
    LIST_BULLET = "list-bullet"
    LIST_NUMBER = "list-number"
    TASK_CHECKED = "task-checked"
    TASK_UNCHECKED = "task-unchecked"
    TASK_CONTENT_CHECKED = "task-content-checked"

    # Reserved
    HR = "hr"
    TABLE = "table"
    TABLE_ROW = "table-row"
    TABLE_CELL = "table-cell"
    TABLE_PIPE = "table-pipe"
    TABLE_DELIMITER = "table-delimiter"

    @classmethod
    def heading(cls, level: int) -> RangeType:
        """Get the heading type for a level between 1 and 6."""
        return _HEADING_TYPES[level - 1]


_HEADING_TYPES: tuple[RangeType, ...] = (
    RangeType.H1,
    RangeType.H2,
    RangeType.H3,
    RangeType.H4,
    RangeType.H5,
    RangeType.H6,
)


@dataclass(frozen=True, slots=True)
class Range:
    """A styled span of source text.

    Attributes:
        type: What the span represents
        start: Offset of the first character (code points)
        length: Number of characters covered
        depth: Nesting depth (blockquotes)
        table_column: Column index of a table cell (reserved)
        table_alignment: Alignment of a table column (reserved)
        table_column_count: Column count of a table (reserved)

    """

    type: RangeType
    start: int
    length: int
    depth: int | None = None
    table_column: int | None = None
    table_alignment: TableAlignment | None = None
    table_column_count: int | None = None

    @property
    def end(self) -> int:
        """Offset just past the last covered character."""
        return self.start + self.length

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dict, omitting unset optional fields.

        Example:
            >>> Range(RangeType.BOLD, 2, 4).to_dict()
            {'type': 'bold', 'start': 2, 'length': 4}
        """
        data: dict[str, Any] = {
            "type": self.type.value,
            "start": self.start,
            "length": self.length,
        }
        if self.depth is not None:
            data["depth"] = self.depth
        if self.table_column is not None:
            data["tableColumn"] = self.table_column
        if self.table_alignment is not None:
            data["tableAlignment"] = self.table_alignment
        if self.table_column_count is not None:
            data["tableColumnCount"] = self.table_column_count
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Range:
        """Build a Range from the output of to_dict()."""
        return cls(
            type=RangeType(data["type"]),
            start=data["start"],
            length=data["length"],
            depth=data.get("depth"),
            table_column=data.get("tableColumn"),
            table_alignment=data.get("tableAlignment"),
            table_column_count=data.get("tableColumnCount"),
        )


_by_start = attrgetter("start")


def sort_ranges(ranges: list[Range]) -> list[Range]:
    """Sort ranges by start offset.

    The sort is stable: ranges sharing a start keep the order in which
    they were produced, so a syntax marker and its enclosing semantic range
    always come out in the same relative order.

    """
    return sorted(ranges, key=_by_start)


def group_ranges(ranges: list[Range]) -> list[Range]:
    """Merge adjacent or overlapping ranges of the same kind.

    Two ranges are the same kind when type, depth and table column match.
    Input must be sorted by start (see sort_ranges); output stays sorted.
    Ranges of different kinds are never merged, so a bold span and a
    nested italic span both survive.

    Example:
        >>> merged = group_ranges([Range(RangeType.SYNTAX, 0, 2), Range(RangeType.SYNTAX, 2, 2)])
        >>> [r.to_dict() for r in merged]
        [{'type': 'syntax', 'start': 0, 'length': 4}]

    """
    grouped: list[Range] = []
    # kind -> index in grouped of the latest range of that kind
    last_index: dict[tuple[RangeType, int | None, int | None], int] = {}

    for current in ranges:
        kind = (current.type, current.depth, current.table_column)
        idx = last_index.get(kind)
        if idx is not None:
            previous = grouped[idx]
            if current.start <= previous.end:
                if current.end > previous.end:
                    grouped[idx] = replace(previous, length=current.end - previous.start)
                continue
        last_index[kind] = len(grouped)
        grouped.append(current)

    return grouped


def normalize_ranges(ranges: list[Range]) -> list[Range]:
    """Sort then group; the final shape handed to hosts."""
    return group_ranges(sort_ranges(ranges))
