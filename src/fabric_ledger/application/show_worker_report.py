"""Application service: Worker report and lot salary report (queries).

Both reports read worker process entries for a date range (inclusive);
the salary report groups them by lot and worker and prices every entry
at its piece rate.
"""

from __future__ import annotations

from decimal import Decimal

from fabric_ledger.application.dto import (
    LotSalaryDTO,
    WorkerProcessDTO,
    WorkerSalaryDTO,
    worker_process_to_dto,
)
from fabric_ledger.domain.model.value_objects import parse_date
from fabric_ledger.domain.model.worker_process import WorkerProcess
from fabric_ledger.domain.repository.cutting_repository import CuttingRepository
from fabric_ledger.domain.repository.worker_process_repository import (
    WorkerProcessRepository,
)


def _in_range(
    repo: WorkerProcessRepository,
    start_date: str | None,
    end_date: str | None,
) -> list[WorkerProcess]:
    start = parse_date(start_date, "Start date")
    end = parse_date(end_date, "End date")
    return [
        e for e in repo.list_all()
        if (start is None or e.recorded_at.date() >= start)
        and (end is None or e.recorded_at.date() <= end)
    ]


def _money(value: Decimal) -> str:
    return f"{value.normalize():f}"


class WorkerReportHandler:

    def __init__(
        self,
        process_repo: WorkerProcessRepository,
        cutting_repo: CuttingRepository,
    ) -> None:
        self._process_repo = process_repo
        self._cutting_repo = cutting_repo

    def handle(
        self,
        start_date: str | None = None,
        end_date: str | None = None,
        worker_name: str | None = None,
        operation: str | None = None,
    ) -> list[WorkerProcessDTO]:
        """Entries sorted by worker, then operation."""
        entries = [
            e for e in _in_range(self._process_repo, start_date, end_date)
            if (not worker_name or e.worker_name == worker_name)
            and (not operation or e.operation == operation)
        ]
        entries.sort(key=lambda e: (e.worker_name, e.operation, e.recorded_at))
        patterns = {b.lot_no: b.pattern for b in self._cutting_repo.list_all()}
        return [worker_process_to_dto(e, patterns.get(e.lot_no)) for e in entries]


class LotSalaryReportHandler:

    def __init__(
        self,
        process_repo: WorkerProcessRepository,
        cutting_repo: CuttingRepository,
    ) -> None:
        self._process_repo = process_repo
        self._cutting_repo = cutting_repo

    def handle(
        self,
        start_date: str | None = None,
        end_date: str | None = None,
        lot_no: str | None = None,
    ) -> list[LotSalaryDTO]:
        entries = [
            e for e in _in_range(self._process_repo, start_date, end_date)
            if not lot_no or e.lot_no == lot_no
        ]
        entries.sort(key=lambda e: e.recorded_at)
        patterns = {b.lot_no: b.pattern for b in self._cutting_repo.list_all()}

        lots: dict[str, dict[str, list[WorkerProcess]]] = {}
        for entry in entries:
            lots.setdefault(entry.lot_no, {}).setdefault(entry.worker_name, []).append(entry)

        report: list[LotSalaryDTO] = []
        for lot, workers in lots.items():
            rows = [_worker_salary(name, done) for name, done in workers.items()]
            report.append(
                LotSalaryDTO(
                    lot_no=lot,
                    pattern=patterns.get(lot, "Unknown"),
                    workers=rows,
                    total_lot_salary=_money(
                        sum((Decimal(r.total_salary) for r in rows), Decimal("0"))
                    ),
                )
            )
        return report


def _worker_salary(worker_name: str, entries: list[WorkerProcess]) -> WorkerSalaryDTO:
    return WorkerSalaryDTO(
        worker_name=worker_name,
        operations=[
            {
                "operation": e.operation,
                "line_no": e.line_no,
                "pieces": e.piece_count,
                "rate": _money(e.rate),
                "salary": _money(e.salary),
                "date": e.recorded_at.date().isoformat(),
            }
            for e in entries
        ],
        total_pieces=sum(e.piece_count for e in entries),
        total_salary=_money(sum((e.salary for e in entries), Decimal("0"))),
    )
