from typing import List, Optional

from fastapi import APIRouter, Depends

from fabric_ledger.application.create_delivery import CreateDeliveryHandler
from fabric_ledger.application.dto import DeliveryItemSpec, DeliverySpec
from fabric_ledger.application.show_delivery import (
    DeliveryReportHandler,
    ListDeliveriesHandler,
    ShowDeliveryHandler,
)
from fabric_ledger.application.update_delivery import (
    DeleteDeliveryHandler,
    UpdateDeliveryHandler,
    UpdateDeliveryStatusHandler,
)
from fabric_ledger.infrastructure.api.dependencies import get_delivery_repo, get_inline_repo
from fabric_ledger.infrastructure.api.schemas import (
    DeliveryIn,
    DeliveryItemIn,
    DeliveryStatusIn,
    DeliveryUpdateIn,
)

router = APIRouter(prefix="/deliveries", tags=["Deliveries"])


def _items(items: List[DeliveryItemIn]) -> List[DeliveryItemSpec]:
    return [
        DeliveryItemSpec(
            lot_no=i.lot_no,
            pattern=i.pattern,
            size=i.size,
            color=i.color,
            quantity=i.quantity,
            load_id=i.load_id,
        )
        for i in items
    ]


@router.post("", status_code=201)
def create_delivery(
    payload: DeliveryIn,
    delivery_repo=Depends(get_delivery_repo),
    inline_repo=Depends(get_inline_repo),
):
    handler = CreateDeliveryHandler(delivery_repo=delivery_repo, inline_repo=inline_repo)
    return handler.handle(
        DeliverySpec(
            delivery_number=payload.delivery_number,
            customer_name=payload.customer_name,
            delivery_date=payload.delivery_date,
            items=_items(payload.items),
            remarks=payload.remarks,
            created_by=payload.created_by,
        )
    )


@router.get("")
def list_deliveries(
    status: Optional[str] = None,
    customer_name: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    delivery_repo=Depends(get_delivery_repo),
):
    return ListDeliveriesHandler(delivery_repo=delivery_repo).handle(
        status=status, customer=customer_name, start_date=start_date, end_date=end_date
    )


@router.get("/report")
def delivery_report(
    status: Optional[str] = None,
    customer_name: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    delivery_repo=Depends(get_delivery_repo),
):
    return DeliveryReportHandler(delivery_repo=delivery_repo).handle(
        status=status, customer=customer_name, start_date=start_date, end_date=end_date
    )


@router.get("/{delivery_id}")
def get_delivery(delivery_id: int, delivery_repo=Depends(get_delivery_repo)):
    return ShowDeliveryHandler(delivery_repo=delivery_repo).handle(delivery_id)


@router.patch("/{delivery_id}/status")
def update_delivery_status(
    delivery_id: int,
    payload: DeliveryStatusIn,
    delivery_repo=Depends(get_delivery_repo),
):
    handler = UpdateDeliveryStatusHandler(delivery_repo=delivery_repo)
    return handler.handle(delivery_id, payload.status)


@router.put("/{delivery_id}")
def update_delivery(
    delivery_id: int,
    payload: DeliveryUpdateIn,
    delivery_repo=Depends(get_delivery_repo),
):
    return UpdateDeliveryHandler(delivery_repo=delivery_repo).handle(
        delivery_id,
        customer_name=payload.customer_name,
        delivery_date=payload.delivery_date,
        items=_items(payload.items) if payload.items is not None else None,
        remarks=payload.remarks,
    )


@router.delete("/{delivery_id}")
def delete_delivery(delivery_id: int, delivery_repo=Depends(get_delivery_repo)):
    DeleteDeliveryHandler(delivery_repo=delivery_repo).handle(delivery_id)
    return {"message": "Delivery deleted successfully."}
