"""Application service: Stock Report use case (query).

Aggregates stock records by fabric and by color for the dashboard.
Retired records never count as *active*; they count towards the totals
only when the caller asks for them.
"""

from __future__ import annotations

from dataclasses import dataclass

from fabric_ledger.domain.model.stock import StockRecord
from fabric_ledger.domain.model.value_objects import ZERO, Weight
from fabric_ledger.domain.repository.stock_repository import StockRepository


@dataclass(frozen=True)
class FabricTypeSummary:
    name: str
    item_count: int
    active_quantity: str
    total_quantity: str


@dataclass(frozen=True)
class ColorSummary:
    name: str
    active_quantity: str


@dataclass(frozen=True)
class StockSummaryDTO:
    include_retired: bool
    by_fabric_type: list[FabricTypeSummary]
    by_color: list[ColorSummary]
    item_count: int
    total_quantity: str
    total_active_quantity: str


@dataclass
class _Tally:
    count: int = 0
    active: Weight = ZERO
    total: Weight = ZERO

    def add(self, record: StockRecord) -> None:
        self.count += 1
        self.total = self.total + record.quantity
        if record.is_active:
            self.active = self.active + record.quantity


class ShowStockReportHandler:

    def __init__(self, stock_repo: StockRepository) -> None:
        self._stock_repo = stock_repo

    def handle(self, include_retired: bool = False) -> StockSummaryDTO:
        records = self._stock_repo.list_all()
        if not include_retired:
            records = [r for r in records if r.is_active]
        records.sort(key=lambda r: (r.fabric_name, r.color))

        by_fabric: dict[str, _Tally] = {}
        by_color: dict[str, Weight] = {}
        overall = _Tally()

        for record in records:
            tally = by_fabric.setdefault(record.fabric_name, _Tally())
            tally.add(record)
            overall.add(record)
            if record.is_active:
                by_color[record.color] = by_color.get(record.color, ZERO) + record.quantity

        return StockSummaryDTO(
            include_retired=include_retired,
            by_fabric_type=[
                FabricTypeSummary(
                    name=name,
                    item_count=tally.count,
                    active_quantity=str(tally.active.rounded()),
                    total_quantity=str(tally.total.rounded()),
                )
                for name, tally in by_fabric.items()
            ],
            by_color=[
                ColorSummary(name=name, active_quantity=str(qty.rounded()))
                for name, qty in sorted(by_color.items())
            ],
            item_count=overall.count,
            total_quantity=str(overall.total.rounded()),
            total_active_quantity=str(overall.active.rounded()),
        )
