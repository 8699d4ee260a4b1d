"""Minimal logging utilities for mdranges.

Provides a simple get_logger function that wraps the standard library logging.
The library never configures handlers; hosts decide where records go.

Example:
    >>> from mdranges.utils.logger import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.debug("Parsing document")
"""

from __future__ import annotations

import logging


def get_logger(name: str) -> logging.Logger:
    """Get a logger for the given name.

    Returns a standard library logger with the "mdranges." prefix.

    Args:
        name: Logger name (typically __name__)

    Returns:
        logging.Logger instance

    Example:
        >>> logger = get_logger("mymodule")
        >>> logger.name
        'mdranges.mymodule'
    """
    if not (name == "mdranges" or name.startswith("mdranges.")):
        name = f"mdranges.{name}"
    return logging.getLogger(name)
