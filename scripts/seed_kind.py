"""
Seed a Datastore kind with synthetic entities.

Deterministic pseudo-random property generation and batched `put_multi`
writes, meant for the Datastore emulator (`DATASTORE_EMULATOR_HOST`) before a
smoke run of `datastore-touch run`.
"""

from __future__ import annotations

import random
import sys
import time
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List

import typer
from google.cloud import datastore

from datastore_touch.config import get_settings
from datastore_touch.errors import TouchError
from datastore_touch.infrastructure.datastore_factory import create_client

app = typer.Typer(help="Generate synthetic entities and put them into a Datastore kind.")

SEED_FIELDS = ["created_at", "category", "amount", "is_active", "payload", "source"]


def _generate_properties(rows: int, seed: int) -> Iterator[Dict[str, Any]]:
    rng = random.Random(seed)
    categories = ["alpha", "beta", "gamma", "delta"]
    now = datetime.now(timezone.utc)

    for _ in range(rows):
        yield {
            "created_at": now,
            "category": rng.choice(categories),
            "amount": round(rng.uniform(1, 10_000), 2),
            "is_active": rng.choice([True, False]),
            "payload": f"user={rng.randint(1, 1_000_000)} "
            f"action={rng.choice(['view', 'click', 'purchase', 'impression'])}",
            "source": "generator",
        }


def _batched(items: Iterator[Dict[str, Any]], batch_size: int) -> Iterator[List[Dict[str, Any]]]:
    batch: List[Dict[str, Any]] = []
    for item in items:
        batch.append(item)
        if len(batch) >= batch_size:
            yield batch
            batch = []
    if batch:
        yield batch


def _put_batches(
    client: datastore.Client, kind: str, rows: int, batch_size: int, seed: int
) -> int:
    written = 0
    for batch in _batched(_generate_properties(rows, seed), batch_size):
        keys = client.allocate_ids(client.key(kind), len(batch))
        entities = []
        for key, properties in zip(keys, batch):
            entity = datastore.Entity(key=key, exclude_from_indexes=("payload",))
            entity.update(properties)
            entities.append(entity)
        client.put_multi(entities)
        written += len(entities)
    return written


@app.command()
def main(
    kind: str = typer.Option(..., "--kind", "-k", help="Kind to seed."),
    rows: int = typer.Option(1_000, "--rows", "-r", min=1, help="Number of entities."),
    batch_size: int = typer.Option(
        500, "--batch-size", "-b", min=1, max=500, help="Entities per put_multi call."
    ),
    seed: int = typer.Option(42, "--seed", help="Deterministic RNG seed."),
) -> None:
    """
    Generate synthetic entities and write them with put_multi.
    """
    start = time.perf_counter()
    try:
        client = create_client(get_settings())
    except TouchError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1)

    typer.echo(f"Seeding {rows:,} entities of kind {kind} (batch={batch_size}, seed={seed})")
    written = _put_batches(client, kind, rows, batch_size, seed)
    duration = time.perf_counter() - start
    typer.echo(f"Seeded {written:,} entities in {duration:.2f}s.")


if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)
