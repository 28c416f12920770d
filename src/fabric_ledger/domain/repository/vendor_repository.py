"""Abstract repository for Vendor aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from fabric_ledger.domain.model.vendor import Vendor


class VendorRepository(ABC):

    @abstractmethod
    def next_id(self) -> int:
        """Generate the next unique vendor ID."""

    @abstractmethod
    def get_by_id(self, vendor_id: int) -> Vendor | None:
        """Return a vendor by its ID, or None if not found."""

    @abstractmethod
    def list_all(self) -> list[Vendor]:
        """Return every vendor entry."""

    @abstractmethod
    def save(self, vendor: Vendor) -> None:
        """Persist a new or updated vendor; assigns an ID to new ones."""

    @abstractmethod
    def delete(self, vendor_id: int) -> None:
        """Remove a vendor entry; unknown ids are ignored."""
