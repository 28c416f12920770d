"""Application service: Record Worker Process use case.

A worker puts pieces of a cut lot through one operation. The entry is
accepted only while the lot still has that many pieces that no earlier
entry accounted for; the check and the save run under the lot's lock.
"""

from __future__ import annotations

import logging
from datetime import datetime, time, timezone

from fabric_ledger.application.dto import (
    WorkerProcessDTO,
    WorkerProcessSpec,
    worker_process_to_dto,
)
from fabric_ledger.domain.exceptions import EntityNotFoundError, ValidationError
from fabric_ledger.domain.model.value_objects import parse_date
from fabric_ledger.domain.model.worker_process import WorkerProcess
from fabric_ledger.domain.repository.cutting_repository import CuttingRepository
from fabric_ledger.domain.repository.worker_process_repository import (
    WorkerProcessRepository,
)
from fabric_ledger.domain.service.keyed_locks import LOT_LOCKS, KeyedLocks

logger = logging.getLogger(__name__)


class RecordWorkerProcessHandler:

    def __init__(
        self,
        process_repo: WorkerProcessRepository,
        cutting_repo: CuttingRepository,
        locks: KeyedLocks | None = None,
    ) -> None:
        self._process_repo = process_repo
        self._cutting_repo = cutting_repo
        self._locks = locks or LOT_LOCKS

    def handle(self, spec: WorkerProcessSpec) -> WorkerProcessDTO:
        day = parse_date(spec.recorded_at, "Process date")
        entry = WorkerProcess.create(
            line_no=spec.line_no,
            operation=spec.operation,
            worker_name=spec.worker_name,
            lot_no=spec.lot_no,
            piece_count=spec.piece_count,
            rate=spec.rate,
            recorded_at=datetime.combine(day, time(), timezone.utc) if day else None,
        )

        with self._locks.hold([entry.lot_no]):
            batch = self._cutting_repo.get_by_lot_no(entry.lot_no)
            if batch is None:
                raise EntityNotFoundError("Cutting reference not found")

            available = int(batch.total_pieces) - self._process_repo.pieces_processed(entry.lot_no)
            if entry.piece_count > available:
                raise ValidationError(
                    f"Cannot process {entry.piece_count} pieces. "
                    f"Only {max(available, 0)} pieces available."
                )
            self._process_repo.save(entry)

        logger.info(
            "%s: %d piece(s) of lot %s through %s on line %s",
            entry.worker_name, entry.piece_count, entry.lot_no, entry.operation, entry.line_no,
            extra={"lot_no": entry.lot_no},
        )
        return worker_process_to_dto(entry, batch.pattern)
