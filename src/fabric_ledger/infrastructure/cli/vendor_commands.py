"""CLI commands for vendor deliveries."""

from __future__ import annotations

import click

from fabric_ledger.application.dto import ColorSpec, FabricSpec, VendorDTO, VendorSpec
from fabric_ledger.application.edit_vendor import EditVendorHandler
from fabric_ledger.application.record_vendor_intake import RecordVendorIntakeHandler
from fabric_ledger.application.show_vendor import ListVendorsHandler, ShowVendorHandler
from fabric_ledger.domain.exceptions import DomainException
from fabric_ledger.infrastructure.bootstrap import (
    stock_ledger,
    stock_repository,
    vendor_repository,
)


def _parse_fabric(raw: str, weight_type: str) -> FabricSpec:
    """Parse 'Cotton:Knit:Red=12.5@#ff0000,Blue=8' into a FabricSpec."""
    parts = raw.split(":", 2)
    if len(parts) != 3:
        raise click.BadParameter(
            f"Invalid fabric format '{raw}'. Expected 'Name:Type:Color=Weight,...'."
        )
    name, fabric_type, colors_raw = parts
    colors: list[ColorSpec] = []
    for pair in colors_raw.split(","):
        pair = pair.strip()
        if "=" not in pair:
            raise click.BadParameter(
                f"Invalid color format '{pair}'. Expected 'Color=Weight' or 'Color=Weight@#hex'."
            )
        color_name, weight = pair.split("=", 1)
        color_hex = None
        if "@" in weight:
            weight, color_hex = weight.split("@", 1)
        colors.append(
            ColorSpec(
                color_name=color_name.strip(),
                color_weight=weight.strip(),
                color_hex=color_hex.strip() if color_hex else None,
            )
        )
    return FabricSpec(
        name=name.strip(), type=fabric_type.strip(), colors=colors, weight_type=weight_type
    )


@click.command("add")
@click.option("--shop", required=True, help="Shop name.")
@click.option("--party", required=True, help="Party name.")
@click.option("--bill", required=True, help="Bill number.")
@click.option(
    "--fabric",
    "fabrics",
    required=True,
    multiple=True,
    help="Fabric as 'Name:Type:Color=Weight,Color=Weight@#hex'. Repeatable.",
)
@click.option(
    "--weight-type",
    type=click.Choice(["kg", "meter"]),
    default="kg",
    show_default=True,
    help="Unit of the color weights.",
)
@click.option("--contact", default="", help="Contact number.")
@click.option("--address", default="", help="Address.")
@click.option("--gstin", default="", help="GSTIN.")
def vendor_add(
    shop: str,
    party: str,
    bill: str,
    fabrics: tuple[str, ...],
    weight_type: str,
    contact: str,
    address: str,
    gstin: str,
) -> None:
    """Record a vendor delivery and take its fabric into stock."""
    spec = VendorSpec(
        shop_name=shop,
        party_name=party,
        bill_no=bill,
        fabrics=[_parse_fabric(raw, weight_type) for raw in fabrics],
        contact_number=contact,
        address=address,
        gstin=gstin,
    )

    stock_repo = stock_repository()
    handler = RecordVendorIntakeHandler(
        vendor_repo=vendor_repository(),
        ledger=stock_ledger(stock_repo),
    )

    try:
        dto = handler.handle(spec)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Vendor #{dto.id} recorded  (bill {dto.bill_no}, total {dto.total_weight})")
    _display_stock_lines(dto)


def _display_stock_lines(dto: VendorDTO) -> None:
    if not dto.stock:
        return
    click.echo()
    click.echo(f"  {'Fabric':<20} {'Color':<15} {'On hand':>10}")
    click.echo(f"  {'-'*47}")
    for line in dto.stock:
        click.echo(f"  {line.fabric_name:<20} {line.color:<15} {line.quantity:>10}")


@click.command("list")
@click.option("--search", default=None, help="Filter by shop, party or bill number.")
def vendor_list(search: str | None) -> None:
    """List recorded vendor deliveries, newest first."""
    handler = ListVendorsHandler(vendor_repo=vendor_repository())
    vendors = handler.handle(search=search)

    if not vendors:
        click.echo("No vendors found.")
        return

    click.echo(f"{'ID':>4}  {'Shop':<20} {'Party':<20} {'Bill':<10} {'Weight':>10}")
    click.echo("-" * 68)
    for v in vendors:
        click.echo(
            f"{v.id:>4}  {v.shop_name:<20} {v.party_name:<20} {v.bill_no:<10} {v.total_weight:>10}"
        )


@click.command("show")
@click.option("--id", "vendor_id", required=True, type=int, help="Vendor ID to display.")
def vendor_show(vendor_id: int) -> None:
    """Show a vendor delivery and the stock it created."""
    handler = ShowVendorHandler(
        vendor_repo=vendor_repository(),
        stock_repo=stock_repository(),
    )

    try:
        dto = handler.handle(vendor_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Vendor #{dto.id}  {dto.shop_name} / {dto.party_name}")
    click.echo(f"Bill:     {dto.bill_no}")
    click.echo(f"Received: {dto.received_at}")
    for fabric in dto.fabrics:
        click.echo(
            f"  {fabric['name']} ({fabric['type']}, {fabric['weight_type']}): "
            + ", ".join(f"{c['color_name']}={c['color_weight']}" for c in fabric["colors"])
        )
    _display_stock_lines(dto)


@click.command("edit")
@click.option("--id", "vendor_id", required=True, type=int, help="Vendor ID to correct.")
@click.option("--shop", required=True, help="Shop name.")
@click.option("--party", required=True, help="Party name.")
@click.option("--bill", required=True, help="Bill number.")
@click.option(
    "--fabric",
    "fabrics",
    required=True,
    multiple=True,
    help="Corrected fabric as 'Name:Type:Color=Weight,...'. Repeatable; replaces the bill.",
)
@click.option(
    "--weight-type",
    type=click.Choice(["kg", "meter"]),
    default="kg",
    show_default=True,
    help="Unit of the color weights.",
)
@click.option("--contact", default="", help="Contact number.")
@click.option("--address", default="", help="Address.")
@click.option("--gstin", default="", help="GSTIN.")
def vendor_edit(
    vendor_id: int,
    shop: str,
    party: str,
    bill: str,
    fabrics: tuple[str, ...],
    weight_type: str,
    contact: str,
    address: str,
    gstin: str,
) -> None:
    """Correct a vendor bill; stock moves by the difference."""
    spec = VendorSpec(
        shop_name=shop,
        party_name=party,
        bill_no=bill,
        fabrics=[_parse_fabric(raw, weight_type) for raw in fabrics],
        contact_number=contact,
        address=address,
        gstin=gstin,
    )

    stock_repo = stock_repository()
    handler = EditVendorHandler(
        vendor_repo=vendor_repository(),
        stock_repo=stock_repo,
        ledger=stock_ledger(stock_repo),
    )

    try:
        dto = handler.handle(vendor_id, spec)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Vendor #{dto.id} updated  (revision {dto.revision}, total {dto.total_weight})")
    _display_stock_lines(dto)
