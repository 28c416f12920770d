"""Abstract repository for WorkerProcess entries."""

from __future__ import annotations

from abc import ABC, abstractmethod

from fabric_ledger.domain.model.worker_process import WorkerProcess


class WorkerProcessRepository(ABC):

    @abstractmethod
    def list_all(self) -> list[WorkerProcess]:
        """Return every process entry."""

    @abstractmethod
    def save(self, entry: WorkerProcess) -> None:
        """Persist an entry; assigns an ID to new ones."""

    def pieces_processed(self, lot_no: str) -> int:
        return sum(e.piece_count for e in self.list_all() if e.lot_no == lot_no)
