"""Application service: Record Process Output use case.

A worker finishes an inline load and reports the pieces per color. The
difference against what was loaded is kept on the load, which is then
closed for further output.
"""

from __future__ import annotations

import logging

from fabric_ledger.application.dto import InlineLoadDTO, inline_to_dto
from fabric_ledger.domain.exceptions import EntityNotFoundError
from fabric_ledger.domain.repository.inline_repository import InlineRepository

logger = logging.getLogger(__name__)


class RecordProcessOutputHandler:

    def __init__(self, inline_repo: InlineRepository) -> None:
        self._inline_repo = inline_repo

    def handle(
        self,
        load_id: str,
        worker_name: str,
        actuals: dict[str, int],
        completed_by: str = "System",
    ) -> InlineLoadDTO:
        load = self._inline_repo.get_by_load_id(load_id)
        if load is None:
            raise EntityNotFoundError(f"Inline load '{load_id}' not found")

        output = load.complete(worker_name, actuals, completed_by)
        self._inline_repo.save(load)

        if output.has_discrepancy:
            logger.warning(
                "Load %s (lot %s) output differs from input: %s",
                load.load_id, load.lot_no,
                ", ".join(f"{i.color} {i.difference:+d}" for i in output.items if i.difference),
            )
        return inline_to_dto(load)
