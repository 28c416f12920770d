"""Application service: Record Vendor Intake use case.

Saves a vendor delivery, then takes every (fabric, color) on the bill
into the stock ledger in one write. The whole bill is validated before
either happens, and if the stock write fails the vendor entry is
removed again, so a delivery is recorded whole or not at all.
"""

from __future__ import annotations

from fabric_ledger.application.dto import FabricSpec, VendorDTO, VendorSpec, vendor_to_dto
from fabric_ledger.domain.exceptions import ValidationError
from fabric_ledger.domain.model.value_objects import Weight
from fabric_ledger.domain.model.vendor import (
    FabricColor,
    FabricDetail,
    Vendor,
    WeightType,
)
from fabric_ledger.domain.repository.vendor_repository import VendorRepository
from fabric_ledger.domain.service.stock_ledger import FabricStockLedger, IntakeLine


class RecordVendorIntakeHandler:

    def __init__(self, vendor_repo: VendorRepository, ledger: FabricStockLedger) -> None:
        self._vendor_repo = vendor_repo
        self._ledger = ledger

    def handle(self, spec: VendorSpec) -> VendorDTO:
        vendor = build_vendor(spec)
        lines = intake_lines(vendor)

        self._vendor_repo.save(vendor)
        try:
            records = self._ledger.intake_many(lines, vendor_id=vendor.id)
        except Exception:
            self._vendor_repo.delete(vendor.id)  # type: ignore[arg-type]
            raise

        vendor.link_stock({record.key: record.id for record in records})
        self._vendor_repo.save(vendor)
        return vendor_to_dto(vendor, records)


def build_vendor(spec: VendorSpec) -> Vendor:
    """Validate a bill into a new (unsaved) Vendor."""
    return Vendor.create(
        shop_name=spec.shop_name,
        party_name=spec.party_name,
        bill_no=spec.bill_no,
        fabrics=[_to_fabric(f) for f in spec.fabrics],
        contact_number=spec.contact_number,
        address=spec.address,
        gstin=spec.gstin,
    )


def intake_lines(vendor: Vendor) -> list[IntakeLine]:
    return [
        IntakeLine.of(
            fabric_name=fabric.name,
            color=color.color_name,
            weight=color.color_weight,
            standard_weight_hint=color.color_weight,
            display_color_hint=color.color_hex,
        )
        for fabric in vendor.fabrics
        for color in fabric.colors
    ]


def _to_fabric(spec: FabricSpec) -> FabricDetail:
    try:
        weight_type = WeightType((spec.weight_type or "kg").lower())
    except ValueError:
        raise ValidationError(
            f"Fabric '{spec.name}': weight type must be 'kg' or 'meter'"
        )
    return FabricDetail(
        name=(spec.name or "").strip(),
        type=(spec.type or "").strip(),
        weight_type=weight_type,
        remarks=spec.remarks or "",
        colors=[
            FabricColor(
                color_name=(c.color_name or "").strip(),
                color_weight=Weight.of(c.color_weight),
                color_hex=c.color_hex or None,
            )
            for c in spec.colors
        ],
    )
