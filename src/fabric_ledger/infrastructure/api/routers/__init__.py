from fabric_ledger.infrastructure.api.routers.cutting import router as cutting_router
from fabric_ledger.infrastructure.api.routers.deliveries import router as deliveries_router
from fabric_ledger.infrastructure.api.routers.health import router as health_router
from fabric_ledger.infrastructure.api.routers.inline import router as inline_router
from fabric_ledger.infrastructure.api.routers.processes import router as processes_router
from fabric_ledger.infrastructure.api.routers.stock import router as stock_router
from fabric_ledger.infrastructure.api.routers.vendors import router as vendors_router

__all__ = [
    "cutting_router",
    "deliveries_router",
    "health_router",
    "inline_router",
    "processes_router",
    "stock_router",
    "vendors_router",
]
