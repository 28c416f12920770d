"""Application service: Retire Stock use case.

Lets the floor manager mark a record as used up by hand, e.g. when the
last few kilos are written off as waste.
"""

from __future__ import annotations

import logging

from fabric_ledger.application.dto import StockLineDTO, stock_to_dto
from fabric_ledger.domain.exceptions import EntityNotFoundError
from fabric_ledger.domain.repository.stock_repository import StockRepository

logger = logging.getLogger(__name__)


class RetireStockHandler:

    def __init__(self, stock_repo: StockRepository) -> None:
        self._stock_repo = stock_repo

    def handle(self, stock_id: str) -> StockLineDTO:
        record = self._stock_repo.get_by_id(stock_id)
        if record is None:
            raise EntityNotFoundError(f"Stock item '{stock_id}' not found")
        record.retire()
        self._stock_repo.save(record)
        logger.info("Marked %s as retired with %s on hand", record.key, record.quantity)
        return stock_to_dto(record)
