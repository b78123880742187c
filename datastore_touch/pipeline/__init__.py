"""
Migration pipeline for datastore-touch.

Re-exports the store interfaces and the building blocks the orchestrator
wires together: record stream, writer, progress tracker and worker pool.
"""

from datastore_touch.pipeline.abstract import DocumentStore, RecordCursor
from datastore_touch.pipeline.progress import AtomicCounter, ProgressTracker, format_progress
from datastore_touch.pipeline.stream import RecordStream
from datastore_touch.pipeline.workers import SkipGate, WorkerPool, queue_capacity
from datastore_touch.pipeline.writer import Writer

__all__ = [
    # Interfaces
    "DocumentStore",
    "RecordCursor",
    # Building blocks
    "AtomicCounter",
    "ProgressTracker",
    "format_progress",
    "RecordStream",
    "SkipGate",
    "WorkerPool",
    "queue_capacity",
    "Writer",
]
