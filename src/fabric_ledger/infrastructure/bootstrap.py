"""Composition root: wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from pathlib import Path

from fabric_ledger.domain.service.stock_ledger import FabricStockLedger
from fabric_ledger.infrastructure.config import get_settings
from fabric_ledger.infrastructure.persistence.json_cutting_repository import (
    JsonCuttingRepository,
)
from fabric_ledger.infrastructure.persistence.json_delivery_repository import (
    JsonDeliveryRepository,
)
from fabric_ledger.infrastructure.persistence.json_inline_repository import (
    JsonInlineRepository,
)
from fabric_ledger.infrastructure.persistence.json_stock_repository import (
    JsonStockRepository,
)
from fabric_ledger.infrastructure.persistence.json_vendor_repository import (
    JsonVendorRepository,
)
from fabric_ledger.infrastructure.persistence.json_worker_process_repository import (
    JsonWorkerProcessRepository,
)

# When installed in editable mode the project root is the repo root.
_DEFAULT_DATA_DIR = Path(__file__).resolve().parents[3] / "data"


def data_dir() -> Path:
    return get_settings().DATA_DIR or _DEFAULT_DATA_DIR


def stock_repository() -> JsonStockRepository:
    return JsonStockRepository(data_dir() / "stock.json")


def cutting_repository() -> JsonCuttingRepository:
    return JsonCuttingRepository(data_dir() / "cutting.json")


def vendor_repository() -> JsonVendorRepository:
    return JsonVendorRepository(data_dir() / "vendors.json")


def inline_repository() -> JsonInlineRepository:
    return JsonInlineRepository(data_dir() / "inline_stock.json")


def delivery_repository() -> JsonDeliveryRepository:
    return JsonDeliveryRepository(data_dir() / "deliveries.json")


def worker_process_repository() -> JsonWorkerProcessRepository:
    return JsonWorkerProcessRepository(data_dir() / "worker_processes.json")


def stock_ledger(stock_repo: JsonStockRepository | None = None) -> FabricStockLedger:
    return FabricStockLedger(
        stock_repo=stock_repo or stock_repository(),
        max_retries=get_settings().LEDGER_MAX_RETRIES,
    )
