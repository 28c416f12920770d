"""HTTP application factory."""

from fastapi import FastAPI

from fabric_ledger.infrastructure.api.errors import setup_exception_handlers
from fabric_ledger.infrastructure.api.routers import (
    cutting_router,
    deliveries_router,
    health_router,
    inline_router,
    processes_router,
    stock_router,
    vendors_router,
)
from fabric_ledger.infrastructure.config import get_settings
from fabric_ledger.infrastructure.logging import setup_logging


def create_app() -> FastAPI:
    setup_logging()
    settings = get_settings()

    app = FastAPI(title=settings.APP_NAME)
    setup_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(vendors_router)
    app.include_router(stock_router)
    app.include_router(cutting_router)
    app.include_router(inline_router)
    app.include_router(processes_router)
    app.include_router(deliveries_router)
    return app


__all__ = ["create_app"]
