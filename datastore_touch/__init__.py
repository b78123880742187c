"""
datastore-touch - bulk, idempotent re-write of every entity of a Datastore kind.

Streams all entities of a kind, optionally leaves a leading slice untouched, and
puts each one back unchanged so the server re-serializes and re-indexes it
(after an index or schema change, for instance). Writes run on a thread pool
fed by a bounded queue, with per-record retry and periodic progress lines.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from datastore_touch.config import Settings, get_settings
from datastore_touch.domain.models import MigrationJob, MigrationResult, Record
from datastore_touch.errors import (
    ConfigurationError,
    CountError,
    DecodeError,
    FieldNotFoundError,
    HardDecodeError,
    StoreConnectionError,
    TouchError,
    WriteError,
)
from datastore_touch.orchestrator import run_migration
from datastore_touch.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Domain
    "MigrationJob",
    "MigrationResult",
    "Record",
    # Orchestration
    "run_migration",
    # Errors
    "TouchError",
    "ConfigurationError",
    "StoreConnectionError",
    "CountError",
    "DecodeError",
    "FieldNotFoundError",
    "HardDecodeError",
    "WriteError",
    # Logging
    "configure_logging",
    "get_logger",
]
