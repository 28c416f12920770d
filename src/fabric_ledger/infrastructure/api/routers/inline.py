from typing import Optional

from fastapi import APIRouter, Depends

from fabric_ledger.application.add_inline_load import AddInlineLoadHandler
from fabric_ledger.application.record_process_output import RecordProcessOutputHandler
from fabric_ledger.application.show_inline_stock import (
    ListInlineLoadsHandler,
    OutputDifferenceReportHandler,
)
from fabric_ledger.infrastructure.api.dependencies import get_cutting_repo, get_inline_repo
from fabric_ledger.infrastructure.api.schemas import InlineLoadIn, ProcessOutputIn

router = APIRouter(prefix="/inline-stock", tags=["Inline stock"])


@router.post("", status_code=201)
def add_inline_load(
    payload: InlineLoadIn,
    inline_repo=Depends(get_inline_repo),
    cutting_repo=Depends(get_cutting_repo),
):
    handler = AddInlineLoadHandler(inline_repo=inline_repo, cutting_repo=cutting_repo)
    return handler.handle(
        load_id=payload.load_id,
        lot_no=payload.lot_no,
        size=payload.size,
        colors={color: (c.quantity, c.bundle) for color, c in payload.colors.items()},
    )


@router.get("")
def list_inline_loads(processed: Optional[bool] = None, inline_repo=Depends(get_inline_repo)):
    return ListInlineLoadsHandler(inline_repo=inline_repo).handle(processed=processed)


@router.get("/output-report")
def output_report(inline_repo=Depends(get_inline_repo)):
    return OutputDifferenceReportHandler(inline_repo=inline_repo).handle()


@router.post("/{load_id}/output")
def record_output(
    load_id: str,
    payload: ProcessOutputIn,
    inline_repo=Depends(get_inline_repo),
):
    handler = RecordProcessOutputHandler(inline_repo=inline_repo)
    return handler.handle(
        load_id=load_id,
        worker_name=payload.worker_name,
        actuals=payload.actual_quantities,
        completed_by=payload.completed_by,
    )
