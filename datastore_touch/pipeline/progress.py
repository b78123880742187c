"""
Shared progress counter and progress line emission.

Every worker increments the counter once per record it receives, whether the
record was written or skipped; a line is logged each time the counter lands on
a multiple of the configured interval.
"""

from __future__ import annotations

import threading
from typing import Optional

from datastore_touch.utils.logging import get_logger

log = get_logger(__name__)


class AtomicCounter:
    """
    Monotonic integer shared between threads.

    The lock only guards the single add, so `increment()` behaves like an
    atomic fetch-and-add and each caller sees a distinct value.
    """

    def __init__(self, start: int = 0) -> None:
        self._value = start
        self._lock = threading.Lock()

    def increment(self) -> int:
        with self._lock:
            self._value += 1
            return self._value

    @property
    def value(self) -> int:
        return self._value


def format_progress(updated: int, total: Optional[int]) -> str:
    """
    Render a progress line. The percentage is truncated, not rounded.
    """
    if not total or total <= 0:
        return f"progress: {updated}"
    return f"progress: {updated} of {total} ({100 * updated // total}%)"


class ProgressTracker:
    """
    Process-wide count of records that reached a worker.

    Parameters
    ----------
    interval : int
        Emit a line whenever the count is a multiple of this value (>= 1).
    total : int | None
        Known record total, or None when the count query was skipped.
    """

    def __init__(self, interval: int, total: Optional[int] = None) -> None:
        if interval < 1:
            raise ValueError("progress interval must be >= 1")
        self.interval = interval
        self.total = total
        self._counter = AtomicCounter()

    def increment(self) -> int:
        return self._counter.increment()

    @property
    def count(self) -> int:
        return self._counter.value

    def maybe_display(self, count: int, total: Optional[int] = None) -> bool:
        """Log a progress line if `count` is on the interval; return whether one was logged."""
        if count % self.interval != 0:
            return False
        effective_total = self.total if total is None else total
        log.info(format_progress(count, effective_total), extra={"updated": count})
        return True


__all__ = ["AtomicCounter", "ProgressTracker", "format_progress"]
