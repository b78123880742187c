"""
Google Cloud Datastore client factory and store adapter.

`create_client` builds a `datastore.Client` for the configured project and
makes one lookup so an unreachable server fails at startup, retrying transient
transport failures using tenacity. `DatastoreStore` adapts
the client to the pipeline's `DocumentStore` interface and converts entities
to and from `Record`.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Generator, Iterable, Iterator, Optional

from google.api_core import exceptions as api_exceptions
from google.cloud import datastore
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from datastore_touch.config import Settings, get_settings
from datastore_touch.domain.models import Record
from datastore_touch.errors import ConfigurationError, FieldNotFoundError, StoreConnectionError
from datastore_touch.utils.logging import get_logger

log = get_logger(__name__)

_TRANSIENT_ERRORS = (
    api_exceptions.ServiceUnavailable,
    api_exceptions.DeadlineExceeded,
    ConnectionError,
)

# Kind used for the startup lookup; the entity does not need to exist.
_CONNECTIVITY_KIND = "__datastore_touch_connectivity__"


def decode_entity(entity: Any, kind: str, schema: Optional[frozenset] = None) -> Record:
    """
    Convert an entity into a Record.

    With a schema, any stored property outside it raises FieldNotFoundError.
    """
    if schema:
        for name in entity:
            if name not in schema:
                raise FieldNotFoundError(kind, name)
    return Record(
        key=entity.key,
        fields=dict(entity),
        exclude_from_indexes=frozenset(entity.exclude_from_indexes),
    )


def encode_record(record: Record) -> datastore.Entity:
    """Build the entity written on put: same key, exactly the record's fields."""
    entity = datastore.Entity(
        key=record.key,
        exclude_from_indexes=tuple(sorted(record.exclude_from_indexes)),
    )
    entity.update(record.fields)
    return entity


class DatastoreCursor:
    """
    Cursor over the entities of one kind.

    Decode failures are raised from `next()` without consuming the underlying
    iterator beyond the failing entity, so iteration can resume.
    """

    def __init__(self, kind: str, entities: Iterable[Any], schema: Optional[frozenset] = None) -> None:
        self.kind = kind
        self._entities: Iterator[Any] = iter(entities)
        self._schema = schema

    def next(self) -> Record:
        entity = next(self._entities)
        return decode_entity(entity, self.kind, self._schema)


class DatastoreStore:
    """
    `DocumentStore` backed by a google-cloud-datastore client.

    Parameters
    ----------
    client : datastore.Client
        Connected client (project and namespace already applied).
    schema : iterable[str] | None
        Known property names. When given, entities carrying other properties
        fail to decode with a missing-field error.
    """

    def __init__(self, client: datastore.Client, schema: Optional[Iterable[str]] = None) -> None:
        self._client = client
        self.schema = frozenset(schema) if schema else None

    def count(self, kind: str, timeout: float) -> int:
        query = self._client.query(kind=kind)
        aggregation = self._client.aggregation_query(query).count(alias="total")
        total = 0
        for batch in aggregation.fetch(timeout=timeout):
            for result in batch:
                total = int(result.value)
        return total

    def run(self, kind: str) -> DatastoreCursor:
        query = self._client.query(kind=kind)
        return DatastoreCursor(kind, query.fetch(), self.schema)

    def put(self, record: Record, timeout: float) -> None:
        self._client.put(encode_record(record), timeout=timeout)

    def close(self) -> None:
        self._client.close()


def _connect(project_id: str, namespace: Optional[str], timeout: float) -> datastore.Client:
    client = datastore.Client(project=project_id, namespace=namespace)
    try:
        client.get(client.key(_CONNECTIVITY_KIND, 1), timeout=timeout)
    except Exception:
        client.close()
        raise
    return client


def create_client(settings: Optional[Settings] = None) -> datastore.Client:
    """
    Build a Datastore client for the configured project and check it can reach the server.

    Raises
    ------
    ConfigurationError
        If DATASTORE_PROJECT_ID is not set.
    StoreConnectionError
        If the client cannot be created or the server cannot be reached after retries.
    """
    settings = settings or get_settings()
    project_id = settings.datastore_project_id
    if not project_id:
        raise ConfigurationError("DATASTORE_PROJECT_ID env variable is empty")

    retrying = Retrying(
        stop=stop_after_attempt(settings.connect_attempts),
        wait=wait_exponential(multiplier=1, max=settings.connect_backoff_max_seconds),
        retry=retry_if_exception_type(_TRANSIENT_ERRORS),
        reraise=True,
    )
    try:
        client = retrying(
            _connect,
            project_id,
            settings.datastore_namespace,
            settings.connect_timeout_seconds,
        )
    except Exception as exc:
        raise StoreConnectionError(
            f"cannot create Datastore client for project {project_id}: {exc}"
        ) from exc

    log.info(
        "Datastore client ready",
        extra={"project": project_id, "namespace": settings.datastore_namespace},
    )
    return client


@contextmanager
def open_store(
    settings: Optional[Settings] = None, schema: Optional[Iterable[str]] = None
) -> Generator[DatastoreStore, None, None]:
    """
    Context manager yielding a DatastoreStore and closing its client on exit.
    """
    store = DatastoreStore(create_client(settings), schema=schema)
    try:
        yield store
    finally:
        store.close()


__all__ = [
    "DatastoreCursor",
    "DatastoreStore",
    "create_client",
    "decode_entity",
    "encode_record",
    "open_store",
]
