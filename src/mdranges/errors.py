"""Exception classes for mdranges.

Parsing itself never raises: markdown has no invalid documents. These
exceptions cover rule registration mistakes and, in strict mode, internal
invariant violations of the block parser.
"""

from __future__ import annotations


class MdRangesError(Exception):
    """Base exception for all mdranges errors.

    Subclass this for specific error categories.
    """

    pass


class RuleRegistrationError(MdRangesError):
    """Error while registering or building a rule registry.

    Raised at setup time only, never from inside a parse call.
    """

    def __init__(self, rule_name: str, message: str) -> None:
        """Initialize registration error.

        Args:
            rule_name: Name of the offending rule
            message: Description of the problem
        """
        self.rule_name = rule_name
        super().__init__(f"Rule '{rule_name}': {message}")


class BlockInvariantError(MdRangesError):
    """A non-blank line was not claimed by any block rule.

    The paragraph rule is a catch-all, so this means the registry was
    built without a working fallback. Only raised in strict mode; the
    default behavior logs a warning and degrades the line to a plain
    paragraph.
    """

    def __init__(self, message: str, line_number: int | None = None) -> None:
        """Initialize invariant error with optional location.

        Args:
            message: Error description
            line_number: Line number where the violation occurred (0-indexed)
        """
        self.message = message
        self.line_number = line_number

        location = f"line {line_number}: " if line_number is not None else ""
        super().__init__(f"{location}{message}")
