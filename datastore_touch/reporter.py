from __future__ import annotations

from typing import Optional

from rich import box
from rich.console import Console
from rich.table import Table

from datastore_touch.domain.models import MigrationResult


def print_summary(result: MigrationResult, console: Optional[Console] = None) -> None:
    """
    Render the outcome of a touch run as a rich table.
    """
    console = console or Console()

    table = Table(
        title=f"Touch Summary: {result.get('kind', 'Unknown')}",
        box=box.ROUNDED,
    )
    table.add_column("Metric", style="cyan", no_wrap=True)
    table.add_column("Value", justify="right", style="magenta")

    total = result.get("total")
    table.add_row("Total", f"{total:,}" if total is not None else "unknown")
    table.add_row("Processed", f"{result.get('processed', 0):,}")
    table.add_row("Written", f"{result.get('written', 0):,}", style="bold green")
    table.add_row("Skipped", f"{result.get('skipped', 0):,}")
    table.add_row("Soft decode errors", f"{result.get('soft_decode_errors', 0):,}", style="yellow")
    table.add_row("Duration (s)", f"{result.get('duration_seconds', 0.0):.1f}")
    table.add_row(
        "Throughput (records/s)", f"{result.get('throughput_records_per_sec', 0.0):,.2f}"
    )

    console.print(table)


__all__ = ["print_summary"]
