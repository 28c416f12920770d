"""Application service: Start Cutting use case.

Builds the batch, reserves fabric for every role through the ledger
(all-or-nothing), links each role to the record it reserved from and
only then saves the batch. If the reservation fails nothing is saved.

The lot is locked from the duplicate check until the batch is saved, so
two requests for one lot cannot both reserve. The reservation is
stamped with the lot number: if saving the batch fails, starting the
same lot again re-links the stock already taken instead of taking it
twice.
"""

from __future__ import annotations

from fabric_ledger.application.dto import CuttingDTO, RoleSpec, cutting_to_dto
from fabric_ledger.domain.exceptions import ValidationError
from fabric_ledger.domain.model.cutting import CuttingBatch, Role
from fabric_ledger.domain.model.value_objects import Weight
from fabric_ledger.domain.repository.cutting_repository import CuttingRepository
from fabric_ledger.domain.service.keyed_locks import LOT_LOCKS, KeyedLocks
from fabric_ledger.domain.service.stock_ledger import FabricStockLedger, reserve_op


class StartCuttingHandler:

    def __init__(
        self,
        cutting_repo: CuttingRepository,
        ledger: FabricStockLedger,
        locks: KeyedLocks | None = None,
    ) -> None:
        self._cutting_repo = cutting_repo
        self._ledger = ledger
        self._locks = locks or LOT_LOCKS

    def handle(
        self,
        lot_no: str,
        pattern: str,
        fabric_name: str,
        sizes: list[str],
        roles: list[RoleSpec],
    ) -> CuttingDTO:
        batch = CuttingBatch.create(
            lot_no=lot_no,
            pattern=pattern,
            fabric_name=fabric_name,
            sizes=sizes,
            roles=[
                Role(
                    role_no=str(spec.role_no).strip(),
                    color=(spec.color or "").strip(),
                    planned_weight=Weight.of(spec.planned_weight),
                )
                for spec in roles
            ],
        )

        with self._locks.hold([batch.lot_no]):
            if self._cutting_repo.get_by_lot_no(batch.lot_no) is not None:
                raise ValidationError(f"Lot {batch.lot_no} already exists")

            reserved = self._ledger.reserve(
                batch.fabric_name, batch.roles, op_id=reserve_op(batch.lot_no)
            )
            batch.mark_reserved({key: record.id for key, record in reserved.items()})
            self._cutting_repo.save(batch)

        return cutting_to_dto(batch)
