"""
Exception hierarchy for datastore-touch.

Inner components (cursor adapter, record stream, writer, worker pool) raise
these typed failures; only the CLI turns them into a process exit status.
"""

from __future__ import annotations

from typing import Any, Optional

# Substring the store uses to report a stored property the decoder does not know.
FIELD_NOT_FOUND_MARKER = "no such struct field"


class TouchError(Exception):
    """Base class for every failure raised by datastore-touch."""


class ConfigurationError(TouchError):
    """Required configuration is missing or invalid (raised before any network activity)."""


class StoreConnectionError(TouchError):
    """The Datastore client could not be constructed."""


class CountError(TouchError):
    """The initial count query failed."""


class DecodeError(TouchError):
    """An entity returned by the cursor could not be turned into a Record."""


class FieldNotFoundError(DecodeError):
    """A stored property has no counterpart in the configured field schema."""

    def __init__(self, kind: str, field: str) -> None:
        self.kind = kind
        self.field = field
        super().__init__(
            f'datastore: cannot load field "{field}" into a "{kind}" record: '
            f"{FIELD_NOT_FOUND_MARKER}"
        )


class HardDecodeError(DecodeError):
    """Fatal cursor failure: unknown decode error or transport error while iterating."""


class WriteError(TouchError):
    """A record could not be written back within the retry budget."""

    def __init__(self, key: Any, attempts: int, cause: Optional[BaseException] = None) -> None:
        self.key = key
        self.attempts = attempts
        self.cause = cause
        super().__init__(f"put failed after {attempts} attempt(s), key={key!r}: {cause}")


def is_field_not_found(exc: BaseException) -> bool:
    """True when `exc` reports a missing-field decode failure."""
    return isinstance(exc, FieldNotFoundError) or FIELD_NOT_FOUND_MARKER in str(exc)


__all__ = [
    "FIELD_NOT_FOUND_MARKER",
    "TouchError",
    "ConfigurationError",
    "StoreConnectionError",
    "CountError",
    "DecodeError",
    "FieldNotFoundError",
    "HardDecodeError",
    "WriteError",
    "is_field_not_found",
]
