from __future__ import annotations

import sys
from typing import List, Optional

import typer

from datastore_touch.config import get_settings
from datastore_touch.domain.models import MigrationJob
from datastore_touch.errors import TouchError
from datastore_touch.infrastructure.datastore_factory import open_store
from datastore_touch.orchestrator import run_migration
from datastore_touch.reporter import print_summary
from datastore_touch.utils.logging import configure_logging, get_logger

app = typer.Typer(help="Rewrite every entity of a Datastore kind in place.")
log = get_logger("datastore_touch.main")


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"project={settings.datastore_project_id or '<unset>'} "
        f"namespace={settings.datastore_namespace or '<default>'} | "
        f"workers={settings.workers} emit_progress_every={settings.emit_progress_every} "
        f"write_attempts={settings.write_attempts} "
        f"write_timeout={settings.write_timeout_seconds}s"
    )


@app.command()
def run(
    ctx: typer.Context,
    kind: str = typer.Option("", "--kind", "-k", help="Datastore kind to touch."),
    allow_attribute_deletion: bool = typer.Option(
        False,
        "--allow-attribute-deletion",
        "--allowAttributeDeletion",
        help="Skip entities whose stored fields are missing from the field schema instead of failing.",
    ),
    skip_count: bool = typer.Option(
        False, "--skip-count", "--skipCount", help="Skip the initial count query."
    ),
    workers: Optional[int] = typer.Option(
        None, "--workers", "-w", min=1, help="Number of writer threads (default from settings)."
    ),
    skip: int = typer.Option(0, "--skip", min=0, help="Leave the first N entities unwritten."),
    emit_progress_every: Optional[int] = typer.Option(
        None,
        "--emit-progress-every",
        "--emitProgressEvery",
        min=1,
        help="Log progress every N records (default from settings).",
    ),
    fields: Optional[List[str]] = typer.Option(
        None,
        "--field",
        "-f",
        help="Known property name; repeat for each. Unknown stored properties become decode errors.",
    ),
    json_logs: bool = typer.Option(False, "--json-logs", help="Emit logs as JSON."),
) -> None:
    """
    Stream every entity of a kind and put it back unchanged.
    """
    if not kind.strip():
        typer.echo(ctx.get_help())
        raise typer.Exit(code=0)

    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=json_logs or settings.log_json)

    job = MigrationJob(
        kind=kind,
        skip=skip,
        workers=workers or settings.workers,
        emit_progress_every=emit_progress_every or settings.emit_progress_every,
        allow_attribute_deletion=allow_attribute_deletion,
        skip_count=skip_count,
    )
    schema = fields or settings.schema_field_names

    try:
        with open_store(settings, schema=schema) as store:
            result = run_migration(job, store, settings)
    except TouchError as exc:
        log.error(f"main: {exc}", extra={"kind": kind, "error_type": type(exc).__name__})
        raise typer.Exit(code=1)

    print_summary(result)
    log.info("main: done")


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
