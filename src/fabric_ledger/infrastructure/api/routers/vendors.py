from typing import Optional

from fastapi import APIRouter, Depends

from fabric_ledger.application.dto import ColorSpec, FabricSpec, VendorSpec
from fabric_ledger.application.edit_vendor import EditVendorHandler
from fabric_ledger.application.record_vendor_intake import RecordVendorIntakeHandler
from fabric_ledger.application.show_vendor import ListVendorsHandler, ShowVendorHandler
from fabric_ledger.infrastructure.api.dependencies import (
    get_ledger,
    get_stock_repo,
    get_vendor_repo,
)
from fabric_ledger.infrastructure.api.schemas import VendorIn

router = APIRouter(prefix="/vendors", tags=["Vendors"])


def _to_spec(payload: VendorIn) -> VendorSpec:
    return VendorSpec(
        shop_name=payload.shop_name,
        party_name=payload.party_name,
        bill_no=payload.bill_no,
        contact_number=payload.contact_number,
        address=payload.address,
        gstin=payload.gstin,
        fabrics=[
            FabricSpec(
                name=f.name,
                type=f.type,
                weight_type=f.weight_type,
                remarks=f.remarks,
                colors=[
                    ColorSpec(
                        color_name=c.color_name,
                        color_weight=str(c.color_weight),
                        color_hex=c.color_hex,
                    )
                    for c in f.colors
                ],
            )
            for f in payload.fabrics
        ],
    )


@router.post("", status_code=201)
def record_vendor(
    payload: VendorIn,
    vendor_repo=Depends(get_vendor_repo),
    ledger=Depends(get_ledger),
):
    handler = RecordVendorIntakeHandler(vendor_repo=vendor_repo, ledger=ledger)
    return handler.handle(_to_spec(payload))


@router.get("")
def list_vendors(search: Optional[str] = None, vendor_repo=Depends(get_vendor_repo)):
    return ListVendorsHandler(vendor_repo=vendor_repo).handle(search=search)


@router.get("/{vendor_id}")
def get_vendor(
    vendor_id: int,
    vendor_repo=Depends(get_vendor_repo),
    stock_repo=Depends(get_stock_repo),
):
    return ShowVendorHandler(vendor_repo=vendor_repo, stock_repo=stock_repo).handle(vendor_id)


@router.put("/{vendor_id}")
def edit_vendor(
    vendor_id: int,
    payload: VendorIn,
    vendor_repo=Depends(get_vendor_repo),
    stock_repo=Depends(get_stock_repo),
    ledger=Depends(get_ledger),
):
    handler = EditVendorHandler(vendor_repo=vendor_repo, stock_repo=stock_repo, ledger=ledger)
    return handler.handle(vendor_id, _to_spec(payload))
