"""CLI commands for worker process entries and their reports."""

from __future__ import annotations

import click

from fabric_ledger.application.dto import WorkerProcessSpec
from fabric_ledger.application.record_worker_process import RecordWorkerProcessHandler
from fabric_ledger.application.show_worker_report import (
    LotSalaryReportHandler,
    WorkerReportHandler,
)
from fabric_ledger.domain.exceptions import DomainException
from fabric_ledger.infrastructure.bootstrap import cutting_repository, worker_process_repository


@click.command("add")
@click.option("--line", "line_no", required=True, help="Line number.")
@click.option("--operation", required=True, help="Operation performed.")
@click.option("--worker", required=True, help="Worker name.")
@click.option("--lot", "lot_no", required=True, help="Cutting lot the pieces come from.")
@click.option("--pieces", type=int, required=True, help="Number of pieces.")
@click.option("--rate", default="0", show_default=True, help="Pay per piece.")
@click.option("--date", "recorded_at", default=None, help="Date of the work (YYYY-MM-DD).")
def process_add(
    line_no: str,
    operation: str,
    worker: str,
    lot_no: str,
    pieces: int,
    rate: str,
    recorded_at: str | None,
) -> None:
    """Record pieces a worker put through an operation."""
    handler = RecordWorkerProcessHandler(
        process_repo=worker_process_repository(),
        cutting_repo=cutting_repository(),
    )
    try:
        dto = handler.handle(
            WorkerProcessSpec(
                line_no=line_no,
                operation=operation,
                worker_name=worker,
                lot_no=lot_no,
                piece_count=pieces,
                rate=rate,
                recorded_at=recorded_at,
            )
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(
        f"Entry #{dto.id}: {dto.worker_name} did {dto.piece_count} x {dto.operation} "
        f"on lot {dto.lot_no} (salary {dto.salary})"
    )


@click.command("report")
@click.option("--from", "start_date", default=None, help="From date (YYYY-MM-DD).")
@click.option("--to", "end_date", default=None, help="To date (YYYY-MM-DD).")
@click.option("--worker", default=None, help="Only this worker.")
@click.option("--operation", default=None, help="Only this operation.")
def process_report(
    start_date: str | None,
    end_date: str | None,
    worker: str | None,
    operation: str | None,
) -> None:
    """List process entries by worker and operation."""
    handler = WorkerReportHandler(
        process_repo=worker_process_repository(),
        cutting_repo=cutting_repository(),
    )
    try:
        entries = handler.handle(start_date, end_date, worker, operation)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not entries:
        click.echo("No process entries found.")
        return

    click.echo(f"{'Worker':<15} {'Operation':<15} {'Lot':<8} {'Line':<5} {'Pieces':>7} {'Salary':>9}")
    click.echo("-" * 62)
    for e in entries:
        click.echo(
            f"{e.worker_name:<15} {e.operation:<15} {e.lot_no:<8} {e.line_no:<5} "
            f"{e.piece_count:>7} {e.salary:>9}"
        )


@click.command("salary")
@click.option("--from", "start_date", default=None, help="From date (YYYY-MM-DD).")
@click.option("--to", "end_date", default=None, help="To date (YYYY-MM-DD).")
@click.option("--lot", "lot_no", default=None, help="Only this lot.")
def process_salary(start_date: str | None, end_date: str | None, lot_no: str | None) -> None:
    """Salary per lot and worker at the recorded piece rates."""
    handler = LotSalaryReportHandler(
        process_repo=worker_process_repository(),
        cutting_repo=cutting_repository(),
    )
    try:
        lots = handler.handle(start_date, end_date, lot_no)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not lots:
        click.echo("No process entries found.")
        return

    for lot in lots:
        click.echo(f"Lot {lot.lot_no} ({lot.pattern})  total {lot.total_lot_salary}")
        for worker in lot.workers:
            click.echo(
                f"  {worker.worker_name:<15} {worker.total_pieces:>7} pieces "
                f"{worker.total_salary:>9}"
            )
