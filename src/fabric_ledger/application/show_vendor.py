"""Application service: Show / List Vendors use cases (queries)."""

from __future__ import annotations

from fabric_ledger.application.dto import VendorDTO, vendor_to_dto
from fabric_ledger.domain.exceptions import EntityNotFoundError
from fabric_ledger.domain.repository.stock_repository import StockRepository
from fabric_ledger.domain.repository.vendor_repository import VendorRepository


class ShowVendorHandler:

    def __init__(self, vendor_repo: VendorRepository, stock_repo: StockRepository) -> None:
        self._vendor_repo = vendor_repo
        self._stock_repo = stock_repo

    def handle(self, vendor_id: int) -> VendorDTO:
        """Return the vendor with the stock records its deliveries opened."""
        vendor = self._vendor_repo.get_by_id(vendor_id)
        if vendor is None:
            raise EntityNotFoundError(f"Vendor #{vendor_id} not found")
        stock = [r for r in self._stock_repo.list_all() if r.vendor_id == vendor.id]
        return vendor_to_dto(vendor, stock)


class ListVendorsHandler:

    def __init__(self, vendor_repo: VendorRepository) -> None:
        self._vendor_repo = vendor_repo

    def handle(self, search: str | None = None) -> list[VendorDTO]:
        """Newest first, optionally filtered by shop, party or bill number."""
        vendors = self._vendor_repo.list_all()
        if search:
            vendors = [v for v in vendors if v.matches(search)]
        vendors.sort(key=lambda v: v.received_at, reverse=True)
        return [vendor_to_dto(v) for v in vendors]
