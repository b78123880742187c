"""
Domain models for datastore-touch.

`Record` is the in-memory copy of one stored entity; `MigrationJob` holds the
caller-supplied parameters of a run and `MigrationResult` the summary the
orchestrator returns.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Optional, TypedDict

from pydantic import BaseModel, Field, field_validator


@dataclass
class Record:
    """
    One entity read from the store.

    `key` is the store-assigned key object and is written back unchanged.
    `fields` is exactly the set of properties that will be stored on write,
    since a put replaces the whole entity.
    """

    key: Any
    fields: Dict[str, Any] = field(default_factory=dict)
    exclude_from_indexes: FrozenSet[str] = field(default_factory=frozenset)


class MigrationJob(BaseModel):
    """
    Parameters of one touch run. Immutable once built.
    """

    kind: str = Field(..., description="Kind whose entities are rewritten.")
    skip: int = Field(0, ge=0, description="Leading records left unwritten (approximate).")
    workers: int = Field(4, ge=1, description="Writer pool size.")
    emit_progress_every: int = Field(1000, ge=1, description="Progress line interval.")
    allow_attribute_deletion: bool = Field(
        False, description="Tolerate missing-field decode errors by skipping the record."
    )
    skip_count: bool = Field(False, description="Do not run the initial count query.")

    model_config = {
        "frozen": True,
    }

    @field_validator("kind")
    @classmethod
    def _kind_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("kind must not be empty")
        return value


class MigrationResult(TypedDict, total=False):
    """
    Summary of a completed run.

    `total` is None when the count query was skipped.
    """

    kind: str
    total: Optional[int]
    processed: int
    written: int
    skipped: int
    soft_decode_errors: int
    duration_seconds: float
    throughput_records_per_sec: float


__all__ = ["MigrationJob", "MigrationResult", "Record"]
