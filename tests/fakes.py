"""
In-memory store and cursor fakes implementing the pipeline interfaces.
"""

from __future__ import annotations

import threading
from typing import Dict, Iterable, List, Optional, Sequence, Union

from datastore_touch.domain.models import Record

CursorItem = Union[Record, BaseException]


class FakeCursor:
    def __init__(self, items: Sequence[CursorItem]) -> None:
        self._items = list(items)
        self._index = 0

    def next(self) -> Record:
        if self._index >= len(self._items):
            raise StopIteration
        item = self._items[self._index]
        self._index += 1
        if isinstance(item, BaseException):
            raise item
        return item


class FakeStore:
    """
    Thread-safe in-memory store. `documents` holds what a reader would get back.
    """

    def __init__(
        self,
        items: Sequence[CursorItem] = (),
        count_error: Optional[BaseException] = None,
        failing_keys: Iterable[str] = (),
        transient_failures: Optional[Dict[str, int]] = None,
    ) -> None:
        self.items = list(items)
        self.count_error = count_error
        self.failing_keys = set(failing_keys)
        self.transient_failures = dict(transient_failures or {})
        self.documents: Dict[str, dict] = {
            item.key: dict(item.fields) for item in self.items if isinstance(item, Record)
        }
        self.puts: List[str] = []
        self.put_attempts = 0
        self.put_timeouts: List[float] = []
        self.count_calls = 0
        self._lock = threading.Lock()

    def count(self, kind: str, timeout: float) -> int:
        self.count_calls += 1
        if self.count_error is not None:
            raise self.count_error
        return sum(1 for item in self.items if isinstance(item, Record))

    def run(self, kind: str) -> FakeCursor:
        return FakeCursor(self.items)

    def put(self, record: Record, timeout: float) -> None:
        with self._lock:
            self.put_attempts += 1
            self.put_timeouts.append(timeout)
            if record.key in self.failing_keys:
                raise ConnectionError(f"put rejected for {record.key}")
            remaining = self.transient_failures.get(record.key, 0)
            if remaining:
                self.transient_failures[record.key] = remaining - 1
                raise ConnectionError(f"transient failure for {record.key}")
            self.documents[record.key] = dict(record.fields)
            self.puts.append(record.key)


def make_records(count: int, prefix: str = "r") -> List[Record]:
    return [
        Record(key=f"{prefix}{index}", fields={"name": f"user-{index}", "index": index})
        for index in range(1, count + 1)
    ]


