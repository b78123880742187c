"""
Orchestrator for a touch run: count, stream, write back, report.

Usage (example from CLI):
    from datastore_touch.infrastructure import open_store
    from datastore_touch.orchestrator import run_migration

    with open_store() as store:
        result = run_migration(MigrationJob(kind="Users"), store)

Any fatal failure (count, cursor, write) propagates as a `TouchError`
subclass; the worker pool is told to stop taking records first. Records
already written stay written.
"""

from __future__ import annotations

import time
from typing import Callable, Optional

from datastore_touch.config import Settings, get_settings
from datastore_touch.domain.models import MigrationJob, MigrationResult
from datastore_touch.errors import CountError, HardDecodeError, TouchError
from datastore_touch.pipeline.abstract import DocumentStore, RecordCursor
from datastore_touch.pipeline.progress import ProgressTracker
from datastore_touch.pipeline.stream import RecordStream
from datastore_touch.pipeline.workers import SkipGate, WorkerPool, queue_capacity
from datastore_touch.pipeline.writer import Writer
from datastore_touch.utils.logging import get_logger

log = get_logger(__name__)


def _count(job: MigrationJob, store: DocumentStore, settings: Settings) -> Optional[int]:
    if job.skip_count:
        log.info("count skipped, total unknown", extra={"kind": job.kind})
        return None

    log.info(f"count started, kind={job.kind}", extra={"kind": job.kind})
    try:
        total = store.count(job.kind, timeout=settings.count_timeout_seconds)
    except Exception as exc:
        raise CountError(f"count failed for kind {job.kind}: {exc}") from exc
    log.info(f"count completed, total={total}", extra={"kind": job.kind, "total": total})
    return total


def _open_cursor(job: MigrationJob, store: DocumentStore) -> RecordCursor:
    try:
        return store.run(job.kind)
    except TouchError:
        raise
    except Exception as exc:
        raise HardDecodeError(f"query for kind {job.kind} failed: {exc}") from exc


def run_migration(
    job: MigrationJob,
    store: DocumentStore,
    settings: Optional[Settings] = None,
    sleep: Optional[Callable[[float], None]] = None,
) -> MigrationResult:
    """
    Rewrite every entity of `job.kind` in place.

    Parameters
    ----------
    job : MigrationJob
        Kind, skip threshold, pool size, progress interval and decode policy.
    store : DocumentStore
        Store to read from and write back to.
    settings : Settings | None
        Retry, timeout and queue sizing. Defaults to get_settings().
    sleep : callable | None
        Sleep used between write attempts (tests pass a no-op).

    Returns
    -------
    MigrationResult
        Counts and timing for the run.

    Raises
    ------
    CountError, HardDecodeError, WriteError
        On the first fatal failure.
    """
    settings = settings or get_settings()
    start = time.perf_counter()
    log.info(
        f"[MIGRATION START] kind={job.kind}",
        extra={
            "kind": job.kind,
            "workers": job.workers,
            "skip": job.skip,
            "allow_attribute_deletion": job.allow_attribute_deletion,
        },
    )

    total = _count(job, store, settings)

    tracker = ProgressTracker(job.emit_progress_every, total)
    pool = WorkerPool(
        Writer.from_settings(store, settings, sleep=sleep),
        tracker,
        SkipGate(job.skip),
        workers=job.workers,
        capacity=queue_capacity(job.workers, total, settings.queue_per_worker),
    )
    pool.start()

    try:
        stream = RecordStream(
            _open_cursor(job, store),
            allow_partial_decode=job.allow_attribute_deletion,
            before_next=pool.raise_if_failed,
        )
        for record in stream:
            pool.submit(record)
        pool.close()
        pool.join()
    except BaseException as exc:
        pool.abort()
        # A worker failure that happened first wins over a later cursor error.
        if isinstance(exc, Exception) and pool.error is not None and pool.error is not exc:
            raise pool.error
        raise

    duration = time.perf_counter() - start
    processed = tracker.count
    result = MigrationResult(
        kind=job.kind,
        total=total,
        processed=processed,
        written=pool.written.value,
        skipped=pool.skipped.value,
        soft_decode_errors=stream.soft_errors,
        duration_seconds=round(duration, 2),
        throughput_records_per_sec=round(processed / duration, 2) if duration > 0 else 0.0,
    )
    log.info(
        "[MIGRATION COMPLETE] done",
        extra={key: value for key, value in result.items() if key != "kind"},
    )
    return result


__all__ = ["run_migration"]
