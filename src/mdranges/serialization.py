"""Range serialization: plain-data round-trip for hosts.

Converts range sequences to/from JSON-compatible dicts. Useful for:
- Handing ranges across an execution-context boundary
- Snapshotting parser output in tests
- Debugging and inspection

All JSON output is deterministic (sorted keys).

Example:
    from mdranges import parse_markdown
    from mdranges.serialization import to_json, from_json

    ranges = parse_markdown("# Hello **World**")
    json_str = to_json(ranges)
    assert from_json(json_str) == ranges

Thread Safety:
    All functions are pure and safe to call from any thread.

"""

import json
from collections.abc import Iterable
from typing import Any

from mdranges.ranges import Range


def to_dicts(ranges: Iterable[Range]) -> list[dict[str, Any]]:
    """Convert ranges to a list of plain dicts.

    Unset optional fields (depth, table metadata) are omitted.
    """
    return [r.to_dict() for r in ranges]


def from_dicts(data: Iterable[dict[str, Any]]) -> list[Range]:
    """Rebuild ranges from the output of to_dicts().

    Raises:
        ValueError: If a dict names an unknown range type
        KeyError: If a required key is missing
    """
    return [Range.from_dict(item) for item in data]


def to_json(ranges: Iterable[Range], *, indent: int | None = None) -> str:
    """Serialize ranges to a JSON string.

    Args:
        ranges: Ranges to serialize
        indent: Optional indentation for pretty-printing

    Returns:
        JSON string with sorted keys

    """
    return json.dumps(to_dicts(ranges), sort_keys=True, indent=indent)


def from_json(data: str) -> list[Range]:
    """Deserialize ranges from a JSON string.

    Args:
        data: Output of to_json()

    Returns:
        Ranges in their serialized order

    """
    return from_dicts(json.loads(data))
