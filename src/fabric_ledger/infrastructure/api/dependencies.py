"""FastAPI dependencies: one repository per request, one ledger per request.

Tests swap the repository providers through ``app.dependency_overrides``.
"""

from fastapi import Depends

from fabric_ledger.domain.repository.cutting_repository import CuttingRepository
from fabric_ledger.domain.repository.delivery_repository import DeliveryRepository
from fabric_ledger.domain.repository.inline_repository import InlineRepository
from fabric_ledger.domain.repository.stock_repository import StockRepository
from fabric_ledger.domain.repository.vendor_repository import VendorRepository
from fabric_ledger.domain.repository.worker_process_repository import (
    WorkerProcessRepository,
)
from fabric_ledger.domain.service.stock_ledger import FabricStockLedger
from fabric_ledger.infrastructure import bootstrap
from fabric_ledger.infrastructure.config import get_settings


def get_stock_repo() -> StockRepository:
    return bootstrap.stock_repository()


def get_cutting_repo() -> CuttingRepository:
    return bootstrap.cutting_repository()


def get_vendor_repo() -> VendorRepository:
    return bootstrap.vendor_repository()


def get_inline_repo() -> InlineRepository:
    return bootstrap.inline_repository()


def get_delivery_repo() -> DeliveryRepository:
    return bootstrap.delivery_repository()


def get_process_repo() -> WorkerProcessRepository:
    return bootstrap.worker_process_repository()


def get_ledger(stock_repo: StockRepository = Depends(get_stock_repo)) -> FabricStockLedger:
    return FabricStockLedger(
        stock_repo=stock_repo,
        max_retries=get_settings().LEDGER_MAX_RETRIES,
    )


__all__ = [
    "get_cutting_repo",
    "get_delivery_repo",
    "get_inline_repo",
    "get_ledger",
    "get_process_repo",
    "get_stock_repo",
    "get_vendor_repo",
]
