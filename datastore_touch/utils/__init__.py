"""
Utilities package for datastore-touch.

Shared cross-cutting helpers. Keep this package free of domain-specific logic.
"""

from datastore_touch.utils.logging import configure_logging, get_logger

__all__ = [
    "configure_logging",
    "get_logger",
]
