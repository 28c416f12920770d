"""Abstract repository for StockRecord aggregate.

Defined in the domain layer so the ledger never depends on
infrastructure. Implementations must honour two rules:

- (fabric_name, color) is unique: saving a *new* record whose key is
  already taken raises ConcurrencyError, so a retrying caller merges
  into the existing record instead of duplicating it.
- ``version`` is an optimistic-concurrency token: saving a record whose
  version differs from the stored one raises ConcurrencyError; a
  successful save bumps the version on both sides.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from fabric_ledger.domain.model.stock import StockRecord
from fabric_ledger.domain.model.value_objects import StockKey


class StockRepository(ABC):

    @abstractmethod
    def get_by_id(self, stock_id: str) -> StockRecord | None:
        """Return a stock record by its generated id, or None."""

    @abstractmethod
    def get_by_key(self, key: StockKey) -> StockRecord | None:
        """Return the record for a fabric/color pair, or None."""

    @abstractmethod
    def list_all(self) -> list[StockRecord]:
        """Return every stock record, retired ones included."""

    @abstractmethod
    def save_all(self, records: list[StockRecord]) -> None:
        """Persist several records in one write: all of them or none."""

    def save(self, record: StockRecord) -> None:
        self.save_all([record])
