"""Character sets for O(1) classification.

All sets are frozensets for:
- O(1) membership testing (vs O(n) for strings)
- Immutability (thread-safe)
- Module-level caching (no per-call allocation)

Reference: CommonMark 0.31.2 specification

Usage:
    from mdranges.parsing.charsets import ASCII_PUNCTUATION

    if char in ASCII_PUNCTUATION:  # O(1) lookup
        ...
"""

import unicodedata

# CommonMark: ASCII punctuation characters
# https://spec.commonmark.org/0.31.2/#ascii-punctuation-character
ASCII_PUNCTUATION: frozenset[str] = frozenset("!\"#$%&'()*+,-./:;<=>?@[\\]^_`{|}~")

# Backslash escapes apply to ASCII punctuation only
ESCAPABLE_CHARS: frozenset[str] = ASCII_PUNCTUATION

# ASCII whitespace for basic checks
WHITESPACE: frozenset[str] = frozenset(" \t\n\r\f\v")

# Emphasis delimiter characters
EMPHASIS_DELIMITERS: frozenset[str] = frozenset("*_")

# Valid fence characters
FENCE_CHARS: frozenset[str] = frozenset("`~")

# List marker characters
UNORDERED_LIST_MARKERS: frozenset[str] = frozenset("-*+")

# Ordered list marker terminators: "1." or "1)"
ORDERED_LIST_DELIMITERS: frozenset[str] = frozenset(".)")

# Thematic break characters
THEMATIC_BREAK_CHARS: frozenset[str] = frozenset("-*_")

# Digits for ordered list detection
DIGITS: frozenset[str] = frozenset("0123456789")

# Task checkbox states: "[ ]", "[x]", "[X]"
TASK_MARKS: frozenset[str] = frozenset(" xX")

# Link title opener -> closer
LINK_TITLE_DELIMITERS: dict[str, str] = {'"': '"', "'": "'", "(": ")"}


def is_ascii_punctuation(char: str) -> bool:
    """Check if character is ASCII punctuation.

    The empty string (document boundary) is not punctuation.

    """
    return char in ASCII_PUNCTUATION


def is_unicode_whitespace(char: str) -> bool:
    """Check if character is Unicode whitespace.

    CommonMark uses Unicode whitespace for emphasis flanking rules.
    Includes ASCII whitespace and Unicode category Zs (space separator).
    Also treats empty string as whitespace (for boundary checks).

    """
    if not char:
        return True
    if char in WHITESPACE:
        return True
    return unicodedata.category(char) == "Zs"
