"""CLI commands for deliveries."""

from __future__ import annotations

import click

from fabric_ledger.application.create_delivery import CreateDeliveryHandler
from fabric_ledger.application.dto import DeliveryDTO, DeliveryItemSpec, DeliverySpec
from fabric_ledger.application.show_delivery import (
    DeliveryReportHandler,
    ListDeliveriesHandler,
    ShowDeliveryHandler,
)
from fabric_ledger.application.update_delivery import (
    DeleteDeliveryHandler,
    UpdateDeliveryHandler,
    UpdateDeliveryStatusHandler,
)
from fabric_ledger.domain.exceptions import DomainException
from fabric_ledger.infrastructure.bootstrap import delivery_repository, inline_repository

STATUSES = ["pending", "delivered", "cancelled"]


def _parse_items(raw: tuple[str, ...]) -> list[DeliveryItemSpec]:
    """Parse 'L-1:Polo:M:Red:20[:LD-1]' entries into DeliveryItemSpec list."""
    items: list[DeliveryItemSpec] = []
    for entry in raw:
        parts = [p.strip() for p in entry.split(":")]
        if len(parts) not in (5, 6):
            raise click.BadParameter(
                f"Invalid item format '{entry}'. Expected 'Lot:Pattern:Size:Color:Qty[:LoadId]'."
            )
        try:
            quantity = int(parts[4])
        except ValueError:
            raise click.BadParameter(f"Invalid quantity '{parts[4]}' in item '{entry}'.")
        items.append(
            DeliveryItemSpec(
                lot_no=parts[0],
                pattern=parts[1],
                size=parts[2],
                color=parts[3],
                quantity=quantity,
                load_id=parts[5] if len(parts) == 6 else None,
            )
        )
    return items


def _display_delivery(dto: DeliveryDTO) -> None:
    click.echo(f"Delivery #{dto.id}  {dto.delivery_number}  ({dto.status})")
    click.echo(f"Customer: {dto.customer_name}   Date: {dto.delivery_date}")
    if dto.remarks:
        click.echo(f"Remarks:  {dto.remarks}")
    click.echo()
    click.echo(f"  {'Lot':<8} {'Pattern':<12} {'Size':<6} {'Color':<12} {'Qty':>6}")
    click.echo(f"  {'-'*48}")
    for item in dto.items:
        click.echo(
            f"  {item['lot_no']:<8} {item['pattern']:<12} {item['size']:<6} "
            f"{item['color']:<12} {item['quantity']:>6}"
        )
    click.echo(f"  {'-'*48}")
    click.echo(f"  {'Total':<41} {dto.total_quantity:>6}")


@click.command("add")
@click.option("--number", "delivery_number", required=True, help="Delivery number.")
@click.option("--customer", required=True, help="Customer name.")
@click.option("--date", "delivery_date", default=None, help="Delivery date (YYYY-MM-DD).")
@click.option(
    "--item",
    "items",
    required=True,
    multiple=True,
    help="Item as 'Lot:Pattern:Size:Color:Qty[:LoadId]'. Repeatable.",
)
@click.option("--remarks", default="", help="Remarks.")
@click.option("--by", "created_by", default="", help="Who recorded the delivery.")
def delivery_add(
    delivery_number: str,
    customer: str,
    delivery_date: str | None,
    items: tuple[str, ...],
    remarks: str,
    created_by: str,
) -> None:
    """Record a delivery to a customer."""
    spec = DeliverySpec(
        delivery_number=delivery_number,
        customer_name=customer,
        items=_parse_items(items),
        delivery_date=delivery_date,
        remarks=remarks,
        created_by=created_by,
    )
    handler = CreateDeliveryHandler(
        delivery_repo=delivery_repository(),
        inline_repo=inline_repository(),
    )

    try:
        dto = handler.handle(spec)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Delivery #{dto.id} recorded  ({dto.total_quantity} pieces)")


@click.command("list")
@click.option("--status", type=click.Choice(STATUSES), default=None, help="Filter by status.")
@click.option("--customer", default=None, help="Filter by customer name.")
@click.option("--from", "start_date", default=None, help="From date (YYYY-MM-DD).")
@click.option("--to", "end_date", default=None, help="To date (YYYY-MM-DD).")
def delivery_list(
    status: str | None,
    customer: str | None,
    start_date: str | None,
    end_date: str | None,
) -> None:
    """List deliveries, newest first."""
    handler = ListDeliveriesHandler(delivery_repo=delivery_repository())
    try:
        deliveries = handler.handle(status, customer, start_date, end_date)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not deliveries:
        click.echo("No deliveries found.")
        return

    click.echo(f"{'ID':>4}  {'Number':<10} {'Customer':<20} {'Date':<10} {'Status':<10} {'Qty':>6}")
    click.echo("-" * 66)
    for d in deliveries:
        click.echo(
            f"{d.id:>4}  {d.delivery_number:<10} {d.customer_name:<20} "
            f"{d.delivery_date:<10} {d.status:<10} {d.total_quantity:>6}"
        )


@click.command("show")
@click.option("--id", "delivery_id", required=True, type=int, help="Delivery ID.")
def delivery_show(delivery_id: int) -> None:
    """Show one delivery."""
    try:
        dto = ShowDeliveryHandler(delivery_repo=delivery_repository()).handle(delivery_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))
    _display_delivery(dto)


@click.command("status")
@click.option("--id", "delivery_id", required=True, type=int, help="Delivery ID.")
@click.argument("status", type=click.Choice(STATUSES))
def delivery_status(delivery_id: int, status: str) -> None:
    """Set a delivery's status."""
    handler = UpdateDeliveryStatusHandler(delivery_repo=delivery_repository())
    try:
        dto = handler.handle(delivery_id, status)
    except DomainException as exc:
        raise click.ClickException(str(exc))
    click.echo(f"Delivery #{dto.id} is now {dto.status}.")


@click.command("update")
@click.option("--id", "delivery_id", required=True, type=int, help="Delivery ID.")
@click.option("--customer", default=None, help="New customer name.")
@click.option("--date", "delivery_date", default=None, help="New delivery date (YYYY-MM-DD).")
@click.option("--item", "items", multiple=True, help="Replacement items. Repeatable.")
@click.option("--remarks", default=None, help="New remarks.")
def delivery_update(
    delivery_id: int,
    customer: str | None,
    delivery_date: str | None,
    items: tuple[str, ...],
    remarks: str | None,
) -> None:
    """Change a delivery's details; options left out stay as they are."""
    handler = UpdateDeliveryHandler(delivery_repo=delivery_repository())
    try:
        dto = handler.handle(
            delivery_id,
            customer_name=customer,
            delivery_date=delivery_date,
            items=_parse_items(items) if items else None,
            remarks=remarks,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))
    _display_delivery(dto)


@click.command("delete")
@click.option("--id", "delivery_id", required=True, type=int, help="Delivery ID.")
def delivery_delete(delivery_id: int) -> None:
    """Delete a delivery."""
    try:
        DeleteDeliveryHandler(delivery_repo=delivery_repository()).handle(delivery_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))
    click.echo(f"Delivery #{delivery_id} deleted.")


@click.command("report")
@click.option("--status", type=click.Choice(STATUSES), default=None, help="Filter by status.")
@click.option("--customer", default=None, help="Filter by customer name.")
@click.option("--from", "start_date", default=None, help="From date (YYYY-MM-DD).")
@click.option("--to", "end_date", default=None, help="To date (YYYY-MM-DD).")
def delivery_report(
    status: str | None,
    customer: str | None,
    start_date: str | None,
    end_date: str | None,
) -> None:
    """Summarise deliveries by status."""
    handler = DeliveryReportHandler(delivery_repo=delivery_repository())
    try:
        report = handler.handle(status, customer, start_date, end_date)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Deliveries: {report.total_deliveries}   Pieces: {report.total_quantity}")
    for name, count in report.status_counts.items():
        click.echo(f"  {name:<10} {count:>4}")
