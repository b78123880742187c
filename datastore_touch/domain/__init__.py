"""
Domain package for datastore-touch.

Exports the record and job definitions shared by the pipeline, the
orchestrator and the CLI.
"""

from datastore_touch.domain.models import MigrationJob, MigrationResult, Record

__all__ = [
    "MigrationJob",
    "MigrationResult",
    "Record",
]
