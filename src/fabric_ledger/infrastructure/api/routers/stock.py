from typing import Optional

from fastapi import APIRouter, Depends

from fabric_ledger.application.list_stock import FabricColorsHandler, ListStockHandler
from fabric_ledger.application.retire_stock import RetireStockHandler
from fabric_ledger.application.show_stock_report import ShowStockReportHandler
from fabric_ledger.infrastructure.api.dependencies import get_stock_repo

router = APIRouter(prefix="/stock", tags=["Stock"])


@router.get("")
def list_stock(
    include_retired: bool = False,
    fabric_name: Optional[str] = None,
    color: Optional[str] = None,
    stock_repo=Depends(get_stock_repo),
):
    handler = ListStockHandler(stock_repo=stock_repo)
    return handler.handle(include_retired=include_retired, fabric_name=fabric_name, color=color)


@router.get("/colors")
def fabric_colors(stock_repo=Depends(get_stock_repo)):
    return FabricColorsHandler(stock_repo=stock_repo).handle()


@router.get("/report")
def stock_report(include_retired: bool = False, stock_repo=Depends(get_stock_repo)):
    return ShowStockReportHandler(stock_repo=stock_repo).handle(include_retired=include_retired)


@router.post("/{stock_id}/retire")
def retire_stock(stock_id: str, stock_repo=Depends(get_stock_repo)):
    return RetireStockHandler(stock_repo=stock_repo).handle(stock_id)
