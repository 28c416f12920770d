"""Abstract repository for Delivery aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from fabric_ledger.domain.model.delivery import Delivery


class DeliveryRepository(ABC):

    @abstractmethod
    def get_by_id(self, delivery_id: int) -> Delivery | None:
        """Return a delivery by its ID, or None if not found."""

    @abstractmethod
    def get_by_number(self, delivery_number: str) -> Delivery | None:
        """Return the delivery with this delivery number, or None."""

    @abstractmethod
    def list_all(self) -> list[Delivery]:
        """Return every delivery."""

    @abstractmethod
    def save(self, delivery: Delivery) -> None:
        """Persist a new or updated delivery; assigns an ID to new ones."""

    @abstractmethod
    def delete(self, delivery_id: int) -> bool:
        """Remove a delivery; returns False if there was none."""
