"""CLI commands for raw fabric stock."""

from __future__ import annotations

import click

from fabric_ledger.application.list_stock import FabricColorsHandler, ListStockHandler
from fabric_ledger.application.retire_stock import RetireStockHandler
from fabric_ledger.application.show_stock_report import ShowStockReportHandler
from fabric_ledger.domain.exceptions import DomainException
from fabric_ledger.infrastructure.bootstrap import stock_repository


@click.command("list")
@click.option("--all", "include_retired", is_flag=True, default=False, help="Include retired records.")
@click.option("--fabric", default=None, help="Only this fabric.")
@click.option("--color", default=None, help="Only this color.")
def stock_list(include_retired: bool, fabric: str | None, color: str | None) -> None:
    """List stock records."""
    handler = ListStockHandler(stock_repo=stock_repository())
    lines = handler.handle(include_retired=include_retired, fabric_name=fabric, color=color)

    if not lines:
        click.echo("No stock records found.")
        return

    click.echo(f"{'Fabric':<20} {'Color':<15} {'On hand':>10}  {'Status':<8} {'ID'}")
    click.echo("-" * 90)
    for line in lines:
        status = "retired" if line.retired else "active"
        click.echo(
            f"{line.fabric_name:<20} {line.color:<15} {line.quantity:>10}  {status:<8} {line.id}"
        )


@click.command("report")
@click.option("--all", "include_retired", is_flag=True, default=False, help="Count retired records in totals.")
def stock_report(include_retired: bool) -> None:
    """Summarize stock by fabric and by color."""
    handler = ShowStockReportHandler(stock_repo=stock_repository())
    summary = handler.handle(include_retired=include_retired)

    if not summary.item_count:
        click.echo("No stock records found.")
        return

    click.echo(f"{'Fabric':<20} {'Items':>6} {'Active':>12} {'Total':>12}")
    click.echo("-" * 53)
    for row in summary.by_fabric_type:
        click.echo(
            f"{row.name:<20} {row.item_count:>6} {row.active_quantity:>12} {row.total_quantity:>12}"
        )
    click.echo("-" * 53)
    click.echo(
        f"{'Total':<20} {summary.item_count:>6} "
        f"{summary.total_active_quantity:>12} {summary.total_quantity:>12}"
    )
    click.echo()
    click.echo(f"{'Color':<20} {'Active':>12}")
    click.echo("-" * 33)
    for row in summary.by_color:
        click.echo(f"{row.name:<20} {row.active_quantity:>12}")


@click.command("retire")
@click.option("--id", "stock_id", required=True, help="Stock record ID.")
def stock_retire(stock_id: str) -> None:
    """Mark a stock record as processed (retired)."""
    handler = RetireStockHandler(stock_repo=stock_repository())

    try:
        line = handler.handle(stock_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Stock {line.fabric_name}/{line.color} retired.")


@click.command("colors")
def stock_colors() -> None:
    """Show the fabric/color catalog."""
    handler = FabricColorsHandler(stock_repo=stock_repository())
    catalog = handler.handle()

    if not catalog:
        click.echo("No fabrics in stock.")
        return

    for fabric, colors in catalog.items():
        click.echo(fabric)
        for c in colors:
            click.echo(f"  {c.color_name:<15} {c.standard_weight:>10}  {c.display_color}")
