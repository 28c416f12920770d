"""Abstract repository for CuttingBatch aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from fabric_ledger.domain.model.cutting import CuttingBatch


class CuttingRepository(ABC):

    @abstractmethod
    def get_by_lot_no(self, lot_no: str) -> CuttingBatch | None:
        """Return a batch by its lot number, or None if not found."""

    @abstractmethod
    def list_all(self) -> list[CuttingBatch]:
        """Return every cutting batch."""

    @abstractmethod
    def save(self, batch: CuttingBatch) -> None:
        """Persist a new or updated batch."""
