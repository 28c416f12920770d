"""CLI commands for cutting batches."""

from __future__ import annotations

import click

from fabric_ledger.application.complete_cutting import CompleteCuttingHandler
from fabric_ledger.application.dto import CuttingDTO, RoleSpec
from fabric_ledger.application.show_cutting import ListCuttingsHandler, ShowCuttingHandler
from fabric_ledger.application.start_cutting import StartCuttingHandler
from fabric_ledger.domain.exceptions import DomainException
from fabric_ledger.infrastructure.bootstrap import cutting_repository, stock_ledger


def _parse_roles(raw: str) -> list[RoleSpec]:
    """Parse '1:Red:12.5,2:Blue:8' into RoleSpec list."""
    specs: list[RoleSpec] = []
    for entry in raw.split(","):
        entry = entry.strip()
        parts = entry.split(":")
        if len(parts) != 3:
            raise click.BadParameter(
                f"Invalid role format '{entry}'. Expected 'RoleNo:Color:Weight'."
            )
        role_no, color, weight = (p.strip() for p in parts)
        specs.append(RoleSpec(role_no=role_no, color=color, planned_weight=weight))
    return specs


def _parse_layers(raw: str) -> dict[str, str]:
    """Parse '1:10,2:7.5' into {role_no: layers} dict."""
    result: dict[str, str] = {}
    for pair in raw.split(","):
        pair = pair.strip()
        if ":" not in pair:
            raise click.BadParameter(
                f"Invalid layers format '{pair}'. Expected 'RoleNo:Layers'."
            )
        role_no, layers = pair.split(":", 1)
        result[role_no.strip()] = layers.strip()
    return result


def _display_cutting(dto: CuttingDTO) -> None:
    state = "completed" if dto.reconciled else "in progress"
    click.echo(f"Lot {dto.lot_no}  ({state})")
    click.echo(f"Pattern: {dto.pattern}   Fabric: {dto.fabric_name}")
    click.echo(f"Sizes:   {', '.join(dto.sizes)}")
    click.echo()
    click.echo(f"  {'Role':<6} {'Color':<15} {'Planned':>10} {'Layers':>8} {'Pieces':>8}")
    click.echo(f"  {'-'*51}")
    for role in dto.roles:
        click.echo(
            f"  {role.role_no:<6} {role.color:<15} {role.planned_weight:>10} "
            f"{role.layers_cut:>8} {role.pieces_cut:>8}"
        )
    click.echo(f"  {'-'*51}")
    click.echo(f"  {'Planned weight':<22} {dto.planned_weight:>10}")
    click.echo(f"  {'Total pieces':<41} {dto.total_pieces:>8}")


@click.command("start")
@click.option("--lot", "lot_no", required=True, help="Lot number.")
@click.option("--pattern", required=True, help="Pattern name.")
@click.option("--fabric", required=True, help="Fabric name (as delivered by the vendor).")
@click.option("--sizes", required=True, help="Sizes as 'S,M,L'.")
@click.option("--roles", required=True, help="Roles as 'RoleNo:Color:Weight,...'.")
def cutting_start(lot_no: str, pattern: str, fabric: str, sizes: str, roles: str) -> None:
    """Start a cutting batch (reserves fabric)."""
    specs = _parse_roles(roles)

    handler = StartCuttingHandler(
        cutting_repo=cutting_repository(),
        ledger=stock_ledger(),
    )

    try:
        dto = handler.handle(
            lot_no=lot_no,
            pattern=pattern,
            fabric_name=fabric,
            sizes=sizes.split(","),
            roles=specs,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Lot {dto.lot_no} started, fabric reserved.")


@click.command("complete")
@click.option("--lot", "lot_no", required=True, help="Lot number.")
@click.option("--layers", required=True, help="Actual layers as 'RoleNo:Layers,...'.")
def cutting_complete(lot_no: str, layers: str) -> None:
    """Complete a cutting batch (returns or consumes fabric)."""
    actuals = _parse_layers(layers)

    handler = CompleteCuttingHandler(
        cutting_repo=cutting_repository(),
        ledger=stock_ledger(),
    )

    try:
        dto = handler.handle(lot_no, actual_layers=actuals)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_cutting(dto.cutting)
    for s in dto.shortfalls:
        click.echo(
            f"Warning: role {s.role_no} ({s.color}) was short by {s.shortfall}.",
            err=True,
        )


@click.command("show")
@click.option("--lot", "lot_no", required=True, help="Lot number.")
def cutting_show(lot_no: str) -> None:
    """Show a cutting batch."""
    handler = ShowCuttingHandler(cutting_repo=cutting_repository())

    try:
        dto = handler.handle(lot_no)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_cutting(dto)


@click.command("list")
def cutting_list() -> None:
    """List cutting batches, newest first."""
    handler = ListCuttingsHandler(cutting_repo=cutting_repository())
    batches = handler.handle()

    if not batches:
        click.echo("No cutting batches found.")
        return

    click.echo(f"{'Lot':<12} {'Pattern':<15} {'Fabric':<20} {'Status':<12} {'Pieces':>8}")
    click.echo("-" * 71)
    for b in batches:
        state = "completed" if b.reconciled else "in progress"
        click.echo(
            f"{b.lot_no:<12} {b.pattern:<15} {b.fabric_name:<20} {state:<12} {b.total_pieces:>8}"
        )
