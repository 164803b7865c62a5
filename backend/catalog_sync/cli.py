"""
Catalog Sync CLI.

Runs a reconciliation of the service definitions against the configured targets
from a terminal or a deploy hook, and prints one table per target.
"""

import asyncio
import json

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from catalog_sync.config import Settings, get_settings
from catalog_sync.core.domain_types import SyncAction, TargetKind
from catalog_sync.core.record_normalizer import to_canonical
from catalog_sync.core.service_definitions import load_service_definitions
from catalog_sync.core.sync_report import summarize_reports
from catalog_sync.core.wire_format import estimate_average_duration
from catalog_sync.infrastructure.observability import setup_logging
from catalog_sync.runtime import open_runtime
from catalog_sync.services.reconciliation_engine import SyncOptions
from catalog_sync.services.sync_targets import build_targets

app = typer.Typer(
    name="catalog-sync",
    help="Keep the service catalog consistent across database, snapshot and API",
    no_args_is_help=True,
)

console = Console()

_ACTION_STYLES = {
    SyncAction.CREATED.value: "green",
    SyncAction.UPDATED.value: "yellow",
    SyncAction.UNCHANGED.value: "dim",
    SyncAction.DELETED.value: "magenta",
    SyncAction.ERROR.value: "red",
}


async def _run_sync(
    settings: Settings, targets: list[TargetKind] | None, options: SyncOptions,
) -> dict:
    runtime = await open_runtime(settings)
    try:
        reports = await runtime.coordinator.sync_all(
            load_service_definitions(),
            build_targets(settings, runtime.repository, targets),
            options,
        )
    finally:
        await runtime.close()
    return summarize_reports(reports)


@app.command()
def sync(
    force_update: bool = typer.Option(
        False, "--force-update", "-f",
        help="Rewrite every record even when nothing changed",
    ),
    prune_missing: bool = typer.Option(
        False, "--prune-missing",
        help="Delete target records whose name is not in the definitions",
    ),
    target: list[TargetKind] | None = typer.Option(
        None, "--target", "-t",
        help="Target to sync (repeatable). Default: SYNC_TARGETS",
    ),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """
    Reconcile the service definitions against each target.

    Exits 1 when a target failed or any record could not be synced.

    Examples:
        catalog-sync sync                       # All configured targets
        catalog-sync sync -t database           # Database only
        catalog-sync sync --prune-missing       # Also delete stale records
    """
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    summary = asyncio.run(_run_sync(
        settings, target,
        SyncOptions(force_update=force_update, prune_missing=prune_missing),
    ))

    if json_output:
        console.print_json(json.dumps(summary, ensure_ascii=False))
    else:
        _print_summary(summary)

    if not summary["success"] or summary["has_record_errors"]:
        raise typer.Exit(1)


@app.command()
def definitions() -> None:
    """List the service definitions every target converges on."""
    table = Table(title="Service definitions")
    table.add_column("Name")
    table.add_column("Base price", justify="right")
    table.add_column("Capture")
    table.add_column("Treatment")
    table.add_column("Avg. days", justify="right")
    for raw in load_service_definitions():
        record = to_canonical(raw)
        table.add_row(
            record.name,
            f"R$ {record.base_price}",
            record.capture_duration,
            record.treatment_duration,
            str(estimate_average_duration(record)),
        )
    console.print(table)


def _print_summary(summary: dict) -> None:
    for kind, report in summary["targets"].items():
        title = f"{kind} ({report['status']})"
        if report["fatal_error"]:
            console.print(f"[red]{title}: {escape(report['fatal_error'])}[/red]")
        table = Table(title=title)
        table.add_column("Service")
        table.add_column("Action")
        table.add_column("Detail")
        for entry in report["entries"]:
            style = _ACTION_STYLES.get(entry["action"], "")
            detail = entry["error"] or ", ".join(entry["changed_fields"])
            table.add_row(
                escape(entry["name"]),
                f"[{style}]{entry['action']}[/{style}]",
                escape(detail),
            )
        console.print(table)
        console.print(
            f"created={report['created']} updated={report['updated']} "
            f"unchanged={report['unchanged']} deleted={report['deleted']} "
            f"errors={report['errors']}",
        )

    if summary["success"] and not summary["has_record_errors"]:
        console.print("[green]Catalog in sync[/green]")
    else:
        console.print("[red]Sync finished with failures[/red]")


if __name__ == "__main__":
    app()
