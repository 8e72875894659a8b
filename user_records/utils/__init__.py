"""
Utilities package for the user records manager.

Exports shared logging helpers. Keep this package lightweight and free of
domain-specific logic.
"""

from user_records.utils.logging import JsonFormatter, configure_logging, get_logger

__all__ = [
    "configure_logging",
    "get_logger",
    "JsonFormatter",
]
