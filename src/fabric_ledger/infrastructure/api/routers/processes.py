from typing import Optional

from fastapi import APIRouter, Depends

from fabric_ledger.application.dto import WorkerProcessSpec
from fabric_ledger.application.record_worker_process import RecordWorkerProcessHandler
from fabric_ledger.application.show_worker_report import (
    LotSalaryReportHandler,
    WorkerReportHandler,
)
from fabric_ledger.infrastructure.api.dependencies import get_cutting_repo, get_process_repo
from fabric_ledger.infrastructure.api.schemas import WorkerProcessIn

router = APIRouter(prefix="/processes", tags=["Worker processes"])


@router.post("", status_code=201)
def record_process(
    payload: WorkerProcessIn,
    process_repo=Depends(get_process_repo),
    cutting_repo=Depends(get_cutting_repo),
):
    handler = RecordWorkerProcessHandler(process_repo=process_repo, cutting_repo=cutting_repo)
    return handler.handle(
        WorkerProcessSpec(
            line_no=payload.line_no,
            operation=payload.operation,
            worker_name=payload.worker_name,
            lot_no=payload.lot_no,
            piece_count=payload.piece_count,
            rate=str(payload.rate),
            recorded_at=payload.recorded_at,
        )
    )


@router.get("/worker-report")
def worker_report(
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    worker_name: Optional[str] = None,
    operation: Optional[str] = None,
    process_repo=Depends(get_process_repo),
    cutting_repo=Depends(get_cutting_repo),
):
    handler = WorkerReportHandler(process_repo=process_repo, cutting_repo=cutting_repo)
    return handler.handle(
        start_date=start_date, end_date=end_date, worker_name=worker_name, operation=operation
    )


@router.get("/salary-report")
def lot_salary_report(
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    lot_no: Optional[str] = None,
    process_repo=Depends(get_process_repo),
    cutting_repo=Depends(get_cutting_repo),
):
    handler = LotSalaryReportHandler(process_repo=process_repo, cutting_repo=cutting_repo)
    return handler.handle(start_date=start_date, end_date=end_date, lot_no=lot_no)
