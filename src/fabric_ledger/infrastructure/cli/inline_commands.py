"""CLI commands for inline stock and process output."""

from __future__ import annotations

import click

from fabric_ledger.application.add_inline_load import AddInlineLoadHandler
from fabric_ledger.application.record_process_output import RecordProcessOutputHandler
from fabric_ledger.application.show_inline_stock import (
    ListInlineLoadsHandler,
    OutputDifferenceReportHandler,
)
from fabric_ledger.domain.exceptions import DomainException
from fabric_ledger.infrastructure.bootstrap import cutting_repository, inline_repository


def _parse_colors(raw: str) -> dict[str, tuple[int, int]]:
    """Parse 'Red:20:2,Blue:10' into {color: (quantity, bundle)} dict."""
    result: dict[str, tuple[int, int]] = {}
    for entry in raw.split(","):
        entry = entry.strip()
        parts = entry.split(":")
        if len(parts) not in (2, 3):
            raise click.BadParameter(
                f"Invalid color format '{entry}'. Expected 'Color:Quantity[:Bundles]'."
            )
        try:
            quantity = int(parts[1])
            bundle = int(parts[2]) if len(parts) == 3 else 0
        except ValueError:
            raise click.BadParameter(f"Invalid numbers for color '{parts[0]}'.")
        result[parts[0].strip()] = (quantity, bundle)
    return result


def _parse_actuals(raw: str) -> dict[str, int]:
    """Parse 'Red:19,Blue:10' into {color: pieces} dict."""
    result: dict[str, int] = {}
    for pair in raw.split(","):
        pair = pair.strip()
        if ":" not in pair:
            raise click.BadParameter(
                f"Invalid actual format '{pair}'. Expected 'Color:Pieces'."
            )
        color, pieces = pair.rsplit(":", 1)
        try:
            result[color.strip()] = int(pieces)
        except ValueError:
            raise click.BadParameter(f"Invalid pieces '{pieces}' for color '{color}'.")
    return result


@click.command("add")
@click.option("--load", "load_id", required=True, help="Load ID.")
@click.option("--lot", "lot_no", required=True, help="Completed cutting lot number.")
@click.option("--size", required=True, help="Size of the pieces in this load.")
@click.option("--colors", required=True, help="Colors as 'Color:Quantity[:Bundles],...'.")
def inline_add(load_id: str, lot_no: str, size: str, colors: str) -> None:
    """Put cut pieces of a completed lot on the line."""
    handler = AddInlineLoadHandler(
        inline_repo=inline_repository(),
        cutting_repo=cutting_repository(),
    )

    try:
        dto = handler.handle(load_id=load_id, lot_no=lot_no, size=size, colors=_parse_colors(colors))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Load {dto.load_id} added  (lot {dto.lot_no}, size {dto.size}, {dto.total} pieces)")


@click.command("process")
@click.option("--load", "load_id", required=True, help="Load ID.")
@click.option("--worker", required=True, help="Worker name.")
@click.option("--actuals", required=True, help="Pieces out as 'Color:Pieces,...'.")
@click.option("--by", "completed_by", default="System", show_default=True, help="Recorded by.")
def inline_process(load_id: str, worker: str, actuals: str, completed_by: str) -> None:
    """Record a worker's output for a load."""
    handler = RecordProcessOutputHandler(inline_repo=inline_repository())

    try:
        dto = handler.handle(
            load_id=load_id,
            worker_name=worker,
            actuals=_parse_actuals(actuals),
            completed_by=completed_by,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Load {dto.load_id} processed by {worker}.")
    for item in dto.output["items"]:
        if item["difference"]:
            click.echo(
                f"  {item['color']}: expected {item['expected_quantity']}, "
                f"got {item['actual_quantity']} ({item['difference']:+d})"
            )


@click.command("list")
@click.option(
    "--processed/--pending",
    "processed",
    default=None,
    help="Only processed or only pending loads.",
)
def inline_list(processed: bool | None) -> None:
    """List inline loads, newest first."""
    handler = ListInlineLoadsHandler(inline_repo=inline_repository())
    loads = handler.handle(processed=processed)

    if not loads:
        click.echo("No inline loads found.")
        return

    click.echo(f"{'Load':<12} {'Lot':<12} {'Size':<6} {'Pieces':>7}  {'Status'}")
    click.echo("-" * 50)
    for load in loads:
        state = "processed" if load.processed else "pending"
        click.echo(f"{load.load_id:<12} {load.lot_no:<12} {load.size:<6} {load.total:>7}  {state}")


@click.command("report")
def inline_report() -> None:
    """Show output that did not match what went in."""
    handler = OutputDifferenceReportHandler(inline_repo=inline_repository())
    rows = handler.handle()

    if not rows:
        click.echo("No output differences.")
        return

    click.echo(f"{'Lot':<12} {'Load':<12} {'Size':<6} {'Color':<12} {'Expected':>9} {'Actual':>7} {'Diff':>6}  {'Worker'}")
    click.echo("-" * 80)
    for r in rows:
        click.echo(
            f"{r.lot_no:<12} {r.load_id:<12} {r.size:<6} {r.color:<12} "
            f"{r.expected_quantity:>9} {r.actual_quantity:>7} {r.difference:>+6d}  {r.worker_name}"
        )
