"""Application service: stock listing queries."""

from __future__ import annotations

from dataclasses import dataclass

from fabric_ledger.application.dto import StockLineDTO, stock_to_dto
from fabric_ledger.domain.repository.stock_repository import StockRepository


@dataclass(frozen=True)
class FabricColorDTO:
    color_name: str
    standard_weight: str
    display_color: str


class ListStockHandler:

    def __init__(self, stock_repo: StockRepository) -> None:
        self._stock_repo = stock_repo

    def handle(
        self,
        include_retired: bool = False,
        fabric_name: str | None = None,
        color: str | None = None,
    ) -> list[StockLineDTO]:
        """Active stock by default, sorted by fabric then color."""
        records = self._stock_repo.list_all()
        if not include_retired:
            records = [r for r in records if r.is_active]
        if fabric_name:
            records = [r for r in records if r.fabric_name == fabric_name]
        if color:
            records = [r for r in records if r.color == color]
        records.sort(key=lambda r: (r.fabric_name, r.color))
        return [stock_to_dto(r) for r in records]


class FabricColorsHandler:
    """Fabric -> colors catalog used to fill the cutting form."""

    def __init__(self, stock_repo: StockRepository) -> None:
        self._stock_repo = stock_repo

    def handle(self) -> dict[str, list[FabricColorDTO]]:
        catalog: dict[str, list[FabricColorDTO]] = {}
        for record in sorted(self._stock_repo.list_all(), key=lambda r: (r.fabric_name, r.color)):
            catalog.setdefault(record.fabric_name, []).append(
                FabricColorDTO(
                    color_name=record.color,
                    standard_weight=str(record.standard_unit_weight),
                    display_color=record.display_color or "#000000",
                )
            )
        return catalog
