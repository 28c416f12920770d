"""Maps the domain exception taxonomy onto HTTP responses."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from fabric_ledger.domain.exceptions import (
    ConcurrencyError,
    DomainException,
    EntityNotFoundError,
    InsufficientStockError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def setup_exception_handlers(app: FastAPI) -> None:

    @app.exception_handler(InsufficientStockError)
    async def insufficient_stock_handler(request: Request, exc: InsufficientStockError):
        return JSONResponse(
            status_code=409,
            content={
                "error": "insufficient_stock",
                "message": str(exc),
                "fabric_name": exc.fabric_name,
                "color": exc.color,
                "available": str(exc.available),
                "requested": str(exc.requested),
            },
        )

    @app.exception_handler(EntityNotFoundError)
    async def not_found_handler(request: Request, exc: EntityNotFoundError):
        return JSONResponse(status_code=404, content={"error": "not_found", "message": str(exc)})

    @app.exception_handler(ValidationError)
    async def validation_handler(request: Request, exc: ValidationError):
        return JSONResponse(status_code=400, content={"error": "validation", "message": str(exc)})

    @app.exception_handler(ConcurrencyError)
    async def concurrency_handler(request: Request, exc: ConcurrencyError):
        logger.warning("Concurrent update on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=409, content={"error": "conflict", "message": str(exc)})

    @app.exception_handler(DomainException)
    async def domain_handler(request: Request, exc: DomainException):
        return JSONResponse(status_code=400, content={"error": "domain", "message": str(exc)})
