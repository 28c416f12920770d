"""Application service: Complete Cutting use case.

Settles the batch's fabric reservation against the layers actually cut
and closes the batch. Shortfalls do not fail the request; they are part
of the returned result.

The batch is loaded, checked, reconciled and saved under its lot lock,
so a second completion of the same lot sees the first one's result.
"""

from __future__ import annotations

from fabric_ledger.application.dto import ReconciliationDTO, reconciliation_to_dto
from fabric_ledger.domain.exceptions import EntityNotFoundError
from fabric_ledger.domain.repository.cutting_repository import CuttingRepository
from fabric_ledger.domain.service.keyed_locks import LOT_LOCKS, KeyedLocks
from fabric_ledger.domain.service.stock_ledger import FabricStockLedger


class CompleteCuttingHandler:

    def __init__(
        self,
        cutting_repo: CuttingRepository,
        ledger: FabricStockLedger,
        locks: KeyedLocks | None = None,
    ) -> None:
        self._cutting_repo = cutting_repo
        self._ledger = ledger
        self._locks = locks or LOT_LOCKS

    def handle(self, lot_no: str, actual_layers: dict[str, str]) -> ReconciliationDTO:
        """Reconcile a batch.

        Args:
            lot_no: The batch to complete.
            actual_layers: role number -> actual layers cut, for every role.
        """
        with self._locks.hold([lot_no]):
            batch = self._cutting_repo.get_by_lot_no(lot_no)
            if batch is None:
                raise EntityNotFoundError(f"Cutting record for lot {lot_no} not found")

            result = self._ledger.reconcile(batch, actual_layers)
            self._cutting_repo.save(batch)

        return reconciliation_to_dto(batch, result)
