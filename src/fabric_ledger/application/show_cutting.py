"""Application service: Show / List Cutting use cases (queries)."""

from __future__ import annotations

from fabric_ledger.application.dto import CuttingDTO, cutting_to_dto
from fabric_ledger.domain.exceptions import EntityNotFoundError
from fabric_ledger.domain.repository.cutting_repository import CuttingRepository


class ShowCuttingHandler:

    def __init__(self, cutting_repo: CuttingRepository) -> None:
        self._cutting_repo = cutting_repo

    def handle(self, lot_no: str) -> CuttingDTO:
        batch = self._cutting_repo.get_by_lot_no(lot_no)
        if batch is None:
            raise EntityNotFoundError(f"Cutting record for lot {lot_no} not found")
        return cutting_to_dto(batch)


class ListCuttingsHandler:

    def __init__(self, cutting_repo: CuttingRepository) -> None:
        self._cutting_repo = cutting_repo

    def handle(self) -> list[CuttingDTO]:
        batches = sorted(self._cutting_repo.list_all(), key=lambda b: b.created_at, reverse=True)
        return [cutting_to_dto(b) for b in batches]
