"""Application service: inline stock queries."""

from __future__ import annotations

from dataclasses import dataclass

from fabric_ledger.application.dto import InlineLoadDTO, inline_to_dto
from fabric_ledger.domain.repository.inline_repository import InlineRepository


@dataclass(frozen=True)
class OutputDifferenceDTO:
    load_id: str
    lot_no: str
    size: str
    worker_name: str
    color: str
    expected_quantity: int
    actual_quantity: int
    difference: int


class ListInlineLoadsHandler:

    def __init__(self, inline_repo: InlineRepository) -> None:
        self._inline_repo = inline_repo

    def handle(self, processed: bool | None = None) -> list[InlineLoadDTO]:
        loads = self._inline_repo.list_all()
        if processed is not None:
            loads = [load for load in loads if load.processed == processed]
        loads.sort(key=lambda load: load.loaded_at, reverse=True)
        return [inline_to_dto(load) for load in loads]


class OutputDifferenceReportHandler:
    """Every processed color whose output did not match its input."""

    def __init__(self, inline_repo: InlineRepository) -> None:
        self._inline_repo = inline_repo

    def handle(self) -> list[OutputDifferenceDTO]:
        rows: list[OutputDifferenceDTO] = []
        for load in self._inline_repo.list_all():
            if load.output is None:
                continue
            for item in load.output.items:
                if item.difference == 0:
                    continue
                rows.append(
                    OutputDifferenceDTO(
                        load_id=load.load_id,
                        lot_no=load.lot_no,
                        size=load.size,
                        worker_name=load.output.worker_name,
                        color=item.color,
                        expected_quantity=item.expected_quantity,
                        actual_quantity=item.actual_quantity,
                        difference=item.difference,
                    )
                )
        rows.sort(key=lambda r: (r.lot_no, r.load_id, r.color))
        return rows
