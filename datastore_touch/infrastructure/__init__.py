"""
Infrastructure package for datastore-touch.

Centralizes Google Cloud Datastore connectivity: client construction and the
adapter implementing the pipeline's store interface. Keep this layer focused
on I/O, decoupled from the orchestrator.
"""

from datastore_touch.infrastructure.datastore_factory import (
    DatastoreCursor,
    DatastoreStore,
    create_client,
    decode_entity,
    encode_record,
    open_store,
)

__all__ = [
    "DatastoreCursor",
    "DatastoreStore",
    "create_client",
    "decode_entity",
    "encode_record",
    "open_store",
]
