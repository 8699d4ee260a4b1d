"""Utility modules for mdranges.

Provides:
- logger: get_logger for logging
"""

from mdranges.utils.logger import get_logger

__all__ = [
    "get_logger",
]
