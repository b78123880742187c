"""
Writer thread pool fed by a bounded queue.

One producer pushes records with `submit()`; N worker threads pull them, apply
the skip gate, write, and bump the shared progress counter. The first failure
in any worker is kept, stops the other workers from taking new records, and is
re-raised to the producer from `submit()` / `join()`, so a full queue can never
leave the producer waiting on dead consumers.

Skip gate looseness: the seen counter is shared, so with more than one worker
"skip the first N" refers to the order in which workers pick records up, not
strictly to the cursor order. With a single worker the first N records from
the cursor are the ones left unwritten.
"""

from __future__ import annotations

import queue
import threading
from typing import List, Optional

from datastore_touch.domain.models import Record
from datastore_touch.pipeline.progress import AtomicCounter, ProgressTracker
from datastore_touch.pipeline.writer import Writer
from datastore_touch.utils.logging import get_logger

log = get_logger(__name__)

_CLOSED = object()


def queue_capacity(workers: int, total: Optional[int], per_worker: int = 50) -> int:
    """
    Size of the work queue for a run.

    Returns 0 (unbounded) when the known total already fits in the bounded
    size, otherwise `workers * per_worker`. An unknown total keeps the bound.
    """
    capacity = workers * per_worker
    if total is not None and total <= capacity:
        return 0
    return capacity


class SkipGate:
    """
    Admits a record once more than `threshold` records have been seen.
    """

    def __init__(self, threshold: int) -> None:
        if threshold < 0:
            raise ValueError("skip threshold must be >= 0")
        self.threshold = threshold
        self._seen = AtomicCounter()

    def admit(self) -> bool:
        return self._seen.increment() > self.threshold

    @property
    def seen(self) -> int:
        return self._seen.value


class WorkerPool:
    """
    Fixed-size pool of writer threads.

    Lifecycle: `start()`, any number of `submit()`, `close()`, `join()`.
    """

    def __init__(
        self,
        writer: Writer,
        tracker: ProgressTracker,
        gate: SkipGate,
        workers: int = 4,
        capacity: int = 0,
        poll_interval: float = 0.1,
    ) -> None:
        if workers < 1:
            raise ValueError("workers must be >= 1")
        self._writer = writer
        self._tracker = tracker
        self._gate = gate
        self.workers = workers
        self.capacity = capacity
        self.poll_interval = poll_interval
        self._queue: "queue.Queue[object]" = queue.Queue(maxsize=capacity)
        self._threads: List[threading.Thread] = []
        self._abort = threading.Event()
        self._error_lock = threading.Lock()
        self._error: Optional[BaseException] = None
        self.written = AtomicCounter()
        self.skipped = AtomicCounter()

    @property
    def error(self) -> Optional[BaseException]:
        return self._error

    def start(self) -> None:
        if self._threads:
            raise RuntimeError("worker pool already started")
        for index in range(self.workers):
            thread = threading.Thread(
                target=self._run, name=f"touch-worker-{index}", daemon=True
            )
            thread.start()
            self._threads.append(thread)
        log.debug("worker pool started", extra={"workers": self.workers, "capacity": self.capacity})

    def submit(self, record: Record) -> None:
        """Queue one record, blocking while the queue is full."""
        self._put(record)

    def close(self) -> None:
        """Signal that no more records follow; workers exit once the queue drains."""
        for _ in self._threads:
            self._put(_CLOSED)

    def join(self) -> None:
        """Wait for every worker to finish, re-raising the first worker failure."""
        for thread in self._threads:
            while thread.is_alive():
                thread.join(timeout=self.poll_interval)
                self.raise_if_failed()
        self.raise_if_failed()

    def abort(self) -> None:
        """Stop workers from taking further records (in-flight writes are not interrupted)."""
        self._abort.set()

    def raise_if_failed(self) -> None:
        if self._error is not None:
            raise self._error

    def _put(self, item: object) -> None:
        while True:
            self.raise_if_failed()
            try:
                self._queue.put(item, timeout=self.poll_interval)
                return
            except queue.Full:
                continue

    def _fail(self, exc: BaseException) -> None:
        with self._error_lock:
            if self._error is None:
                self._error = exc
        self._abort.set()

    def _run(self) -> None:
        while not self._abort.is_set():
            try:
                item = self._queue.get(timeout=self.poll_interval)
            except queue.Empty:
                continue
            if item is _CLOSED:
                return
            try:
                self._process(item)  # type: ignore[arg-type]
            except Exception as exc:  # noqa: BLE001 - handed to the producer via raise_if_failed
                log.debug(
                    "worker failed, counter=%d: %s",
                    self._tracker.count,
                    exc,
                    extra={"processed": self._tracker.count},
                )
                self._fail(exc)
                return

    def _process(self, record: Record) -> None:
        if self._gate.admit():
            self._writer.write(record)
            self.written.increment()
        else:
            self.skipped.increment()
        count = self._tracker.increment()
        self._tracker.maybe_display(count)


__all__ = ["SkipGate", "WorkerPool", "queue_capacity"]
