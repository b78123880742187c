"""
Store and cursor interfaces consumed by the migration pipeline.

The pipeline only needs to count a kind, iterate it, and put one record back.
`DatastoreStore` implements these against Google Cloud Datastore; tests use
in-memory fakes.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from datastore_touch.domain.models import Record


@runtime_checkable
class RecordCursor(Protocol):
    """
    Server-side iteration over the results of a kind query.

    `next()` raises StopIteration once exhausted. A decode failure for one
    entity is raised from `next()` but leaves the cursor usable, so the caller
    may keep iterating past it.
    """

    def next(self) -> Record:
        ...


@runtime_checkable
class DocumentStore(Protocol):
    """
    Narrow view of the remote store required by the orchestrator.
    """

    def count(self, kind: str, timeout: float) -> int:
        """Number of entities of `kind`."""
        ...

    def run(self, kind: str) -> RecordCursor:
        """Open a cursor over every entity of `kind`."""
        ...

    def put(self, record: Record, timeout: float) -> None:
        """
        Upsert `record` under its existing key, replacing all stored properties.

        Parameters
        ----------
        record : Record
            Record to write back.
        timeout : float
            Deadline in seconds for this single call.
        """
        ...


__all__ = ["DocumentStore", "RecordCursor"]
