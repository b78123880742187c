"""
Lazy iteration over a kind, with decode-error classification.

`RecordStream` pulls records from a `RecordCursor` one at a time. A missing
field decode error is skipped when the caller opted in via
`allow_partial_decode`; every other failure is re-raised as `HardDecodeError`.
"""

from __future__ import annotations

from typing import Callable, Iterator, Optional

from datastore_touch.domain.models import Record
from datastore_touch.errors import HardDecodeError, is_field_not_found
from datastore_touch.pipeline.abstract import RecordCursor
from datastore_touch.utils.logging import get_logger

log = get_logger(__name__)


class RecordStream:
    """
    Finite, non-restartable sequence of records read from a cursor.

    Iterate it once; `soft_errors` holds the number of records dropped because
    of a tolerated missing-field error. `before_next`, when given, runs before
    every cursor pull and may raise to stop iteration.
    """

    def __init__(
        self,
        cursor: RecordCursor,
        allow_partial_decode: bool = False,
        before_next: Optional[Callable[[], None]] = None,
    ) -> None:
        self._cursor = cursor
        self._before_next = before_next
        self.allow_partial_decode = allow_partial_decode
        self.soft_errors = 0
        self.produced = 0
        self._exhausted = False

    def __iter__(self) -> Iterator[Record]:
        while not self._exhausted:
            if self._before_next is not None:
                self._before_next()
            try:
                record = self._cursor.next()
            except StopIteration:
                self._exhausted = True
                return
            except Exception as exc:  # noqa: BLE001 - classified below, never swallowed blindly
                if self.allow_partial_decode and is_field_not_found(exc):
                    self.soft_errors += 1
                    log.debug("skipping record with dropped field", extra={"error": str(exc)})
                    continue
                self._exhausted = True
                if isinstance(exc, HardDecodeError):
                    raise
                raise HardDecodeError(str(exc)) from exc
            self.produced += 1
            yield record


__all__ = ["RecordStream"]
