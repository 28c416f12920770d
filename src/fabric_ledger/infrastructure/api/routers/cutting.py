from fastapi import APIRouter, Depends

from fabric_ledger.application.complete_cutting import CompleteCuttingHandler
from fabric_ledger.application.dto import RoleSpec
from fabric_ledger.application.show_cutting import ListCuttingsHandler, ShowCuttingHandler
from fabric_ledger.application.start_cutting import StartCuttingHandler
from fabric_ledger.infrastructure.api.dependencies import get_cutting_repo, get_ledger
from fabric_ledger.infrastructure.api.schemas import CuttingAfterIn, CuttingBeforeIn

router = APIRouter(prefix="/cutting", tags=["Cutting"])


@router.post("/before", status_code=201)
def start_cutting(
    payload: CuttingBeforeIn,
    cutting_repo=Depends(get_cutting_repo),
    ledger=Depends(get_ledger),
):
    handler = StartCuttingHandler(cutting_repo=cutting_repo, ledger=ledger)
    return handler.handle(
        lot_no=payload.lot_no,
        pattern=payload.pattern,
        fabric_name=payload.fabric_name,
        sizes=payload.sizes,
        roles=[
            RoleSpec(role_no=r.role_no, color=r.color, planned_weight=str(r.planned_weight))
            for r in payload.roles
        ],
    )


@router.put("/{lot_no}/after")
def complete_cutting(
    lot_no: str,
    payload: CuttingAfterIn,
    cutting_repo=Depends(get_cutting_repo),
    ledger=Depends(get_ledger),
):
    handler = CompleteCuttingHandler(cutting_repo=cutting_repo, ledger=ledger)
    return handler.handle(
        lot_no,
        actual_layers={role_no: str(layers) for role_no, layers in payload.actual_layers.items()},
    )


@router.get("")
def list_cuttings(cutting_repo=Depends(get_cutting_repo)):
    return ListCuttingsHandler(cutting_repo=cutting_repo).handle()


@router.get("/{lot_no}")
def get_cutting(lot_no: str, cutting_repo=Depends(get_cutting_repo)):
    return ShowCuttingHandler(cutting_repo=cutting_repo).handle(lot_no)
