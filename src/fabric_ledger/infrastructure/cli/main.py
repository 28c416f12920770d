import click

from fabric_ledger.infrastructure.cli.cutting_commands import (
    cutting_complete,
    cutting_list,
    cutting_show,
    cutting_start,
)
from fabric_ledger.infrastructure.cli.delivery_commands import (
    delivery_add,
    delivery_delete,
    delivery_list,
    delivery_report,
    delivery_show,
    delivery_status,
    delivery_update,
)
from fabric_ledger.infrastructure.cli.inline_commands import (
    inline_add,
    inline_list,
    inline_process,
    inline_report,
)
from fabric_ledger.infrastructure.cli.process_commands import (
    process_add,
    process_report,
    process_salary,
)
from fabric_ledger.infrastructure.cli.stock_commands import (
    stock_colors,
    stock_list,
    stock_report,
    stock_retire,
)
from fabric_ledger.infrastructure.cli.vendor_commands import (
    vendor_add,
    vendor_edit,
    vendor_list,
    vendor_show,
)
from fabric_ledger.infrastructure.logging import setup_logging


@click.group()
def cli() -> None:
    """Fabric Stock Ledger"""
    setup_logging()


@cli.group()
def vendor() -> None:
    """Record and look up vendor deliveries."""


@cli.group()
def stock() -> None:
    """Inspect raw fabric stock."""


@cli.group()
def cutting() -> None:
    """Start and complete cutting batches."""


@cli.group()
def inline() -> None:
    """Manage inline stock and process output."""


@cli.group()
def process() -> None:
    """Record worker process entries and salary reports."""


@cli.group()
def delivery() -> None:
    """Record and track customer deliveries."""


# Register subcommands
vendor.add_command(vendor_add)
vendor.add_command(vendor_edit)
vendor.add_command(vendor_list)
vendor.add_command(vendor_show)
stock.add_command(stock_colors)
stock.add_command(stock_list)
stock.add_command(stock_report)
stock.add_command(stock_retire)
cutting.add_command(cutting_complete)
cutting.add_command(cutting_list)
cutting.add_command(cutting_show)
cutting.add_command(cutting_start)
inline.add_command(inline_add)
inline.add_command(inline_list)
inline.add_command(inline_process)
inline.add_command(inline_report)
process.add_command(process_add)
process.add_command(process_report)
process.add_command(process_salary)
delivery.add_command(delivery_add)
delivery.add_command(delivery_delete)
delivery.add_command(delivery_list)
delivery.add_command(delivery_report)
delivery.add_command(delivery_show)
delivery.add_command(delivery_status)
delivery.add_command(delivery_update)
