"""Data Transfer Objects: plain containers that cross layer boundaries.

DTOs carry data between the CLI/HTTP layers and the application layer
without exposing domain internals. Weights travel as plain decimal
strings (e.g. "12.5") so no precision is lost on the way out.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from fabric_ledger.domain.model.cutting import CuttingBatch
from fabric_ledger.domain.model.delivery import Delivery
from fabric_ledger.domain.model.inline import InlineLoad
from fabric_ledger.domain.model.stock import StockRecord
from fabric_ledger.domain.model.vendor import Vendor
from fabric_ledger.domain.model.worker_process import WorkerProcess
from fabric_ledger.domain.service.stock_ledger import ReconciliationResult

TIMESTAMP = "%Y-%m-%d %H:%M UTC"


# --- Inputs -------------------------------------------------------------------


@dataclass(frozen=True)
class ColorSpec:
    """Input: one color of a delivered fabric."""

    color_name: str
    color_weight: str
    color_hex: str | None = None


@dataclass(frozen=True)
class FabricSpec:
    """Input: one fabric on a vendor bill."""

    name: str
    type: str
    colors: list[ColorSpec]
    weight_type: str = "kg"
    remarks: str = ""


@dataclass(frozen=True)
class VendorSpec:
    shop_name: str
    party_name: str
    bill_no: str
    fabrics: list[FabricSpec]
    contact_number: str = ""
    address: str = ""
    gstin: str = ""


@dataclass(frozen=True)
class RoleSpec:
    """Input: one planned roll of a cutting batch."""

    role_no: str
    color: str
    planned_weight: str


@dataclass(frozen=True)
class DeliveryItemSpec:
    lot_no: str
    pattern: str
    size: str
    color: str
    quantity: int
    load_id: str | None = None


@dataclass(frozen=True)
class DeliverySpec:
    """Input: a new delivery, or the fields to change on one."""

    delivery_number: str
    customer_name: str
    items: list[DeliveryItemSpec]
    delivery_date: str | None = None
    remarks: str = ""
    created_by: str = ""


@dataclass(frozen=True)
class WorkerProcessSpec:
    line_no: str
    operation: str
    worker_name: str
    lot_no: str
    piece_count: int
    rate: str = "0"
    recorded_at: str | None = None


# --- Outputs ------------------------------------------------------------------


@dataclass(frozen=True)
class StockLineDTO:
    id: str
    fabric_name: str
    color: str
    quantity: str
    standard_unit_weight: str
    display_color: str | None
    retired: bool
    retired_at: str | None
    last_updated: str
    vendor_id: int | None


@dataclass(frozen=True)
class VendorDTO:
    id: int
    shop_name: str
    party_name: str
    bill_no: str
    contact_number: str
    address: str
    gstin: str
    received_at: str
    revision: int
    total_weight: str
    fabrics: list[dict]
    stock: list[StockLineDTO] = field(default_factory=list)


@dataclass(frozen=True)
class RoleDTO:
    role_no: str
    color: str
    planned_weight: str
    layers_cut: str
    pieces_cut: str
    stock_id: str | None


@dataclass(frozen=True)
class CuttingDTO:
    lot_no: str
    pattern: str
    fabric_name: str
    sizes: list[str]
    roles: list[RoleDTO]
    reserved: bool
    reconciled: bool
    planned_weight: str
    total_pieces: str
    created_at: str
    completed_at: str | None


@dataclass(frozen=True)
class AdjustmentDTO:
    role_no: str
    color: str
    planned: str
    actual: str
    action: str
    moved: str
    shortfall: str


@dataclass(frozen=True)
class ReconciliationDTO:
    cutting: CuttingDTO
    adjustments: list[AdjustmentDTO]
    shortfalls: list[AdjustmentDTO]


@dataclass(frozen=True)
class InlineLoadDTO:
    load_id: str
    lot_no: str
    pattern: str
    size: str
    colors: dict[str, dict[str, int]]
    total: int
    loaded_at: str
    processed: bool
    processed_at: str | None
    output: dict | None


@dataclass(frozen=True)
class DeliveryDTO:
    id: int
    delivery_number: str
    customer_name: str
    delivery_date: str
    status: str
    remarks: str
    created_by: str
    created_at: str
    total_quantity: int
    items: list[dict]


@dataclass(frozen=True)
class DeliveryReportDTO:
    total_deliveries: int
    total_quantity: int
    status_counts: dict[str, int]
    deliveries: list[dict]


@dataclass(frozen=True)
class WorkerProcessDTO:
    id: int
    line_no: str
    operation: str
    worker_name: str
    lot_no: str
    pattern: str | None
    piece_count: int
    rate: str
    salary: str
    recorded_at: str


@dataclass(frozen=True)
class WorkerSalaryDTO:
    worker_name: str
    operations: list[dict]
    total_pieces: int
    total_salary: str


@dataclass(frozen=True)
class LotSalaryDTO:
    lot_no: str
    pattern: str
    workers: list[WorkerSalaryDTO]
    total_lot_salary: str


# --- Mapping ------------------------------------------------------------------


def stock_to_dto(record: StockRecord) -> StockLineDTO:
    return StockLineDTO(
        id=record.id,
        fabric_name=record.fabric_name,
        color=record.color,
        quantity=str(record.quantity),
        standard_unit_weight=str(record.standard_unit_weight),
        display_color=record.display_color,
        retired=record.retired,
        retired_at=record.retired_at.strftime(TIMESTAMP) if record.retired_at else None,
        last_updated=record.last_updated.strftime(TIMESTAMP),
        vendor_id=record.vendor_id,
    )


def vendor_to_dto(vendor: Vendor, stock: list[StockRecord] | None = None) -> VendorDTO:
    return VendorDTO(
        id=vendor.id,  # type: ignore[arg-type]
        shop_name=vendor.shop_name,
        party_name=vendor.party_name,
        bill_no=vendor.bill_no,
        contact_number=vendor.contact_number,
        address=vendor.address,
        gstin=vendor.gstin,
        received_at=vendor.received_at.strftime(TIMESTAMP),
        revision=vendor.revision,
        total_weight=str(vendor.total_weight),
        fabrics=[
            {
                "name": f.name,
                "type": f.type,
                "weight_type": f.weight_type.value,
                "remarks": f.remarks,
                "total_weight": str(f.total_weight),
                "colors": [
                    {
                        "color_name": c.color_name,
                        "color_weight": str(c.color_weight),
                        "color_hex": c.color_hex,
                        "stock_id": c.stock_id,
                    }
                    for c in f.colors
                ],
            }
            for f in vendor.fabrics
        ],
        stock=[stock_to_dto(r) for r in stock or []],
    )


def cutting_to_dto(batch: CuttingBatch) -> CuttingDTO:
    return CuttingDTO(
        lot_no=batch.lot_no,
        pattern=batch.pattern,
        fabric_name=batch.fabric_name,
        sizes=list(batch.sizes),
        roles=[
            RoleDTO(
                role_no=role.role_no,
                color=role.color,
                planned_weight=str(role.planned_weight),
                layers_cut=str(role.layers_cut),
                pieces_cut=f"{role.pieces_cut.normalize():f}",
                stock_id=role.stock_id,
            )
            for role in batch.roles
        ],
        reserved=batch.reserved,
        reconciled=batch.reconciled,
        planned_weight=str(batch.planned_total),
        total_pieces=f"{batch.total_pieces.normalize():f}",
        created_at=batch.created_at.strftime(TIMESTAMP),
        completed_at=batch.completed_at.strftime(TIMESTAMP) if batch.completed_at else None,
    )


def reconciliation_to_dto(batch: CuttingBatch, result: ReconciliationResult) -> ReconciliationDTO:
    adjustments = [
        AdjustmentDTO(
            role_no=a.role_no,
            color=a.color,
            planned=str(a.planned),
            actual=str(a.actual),
            action=a.kind.value,
            moved=str(a.moved),
            shortfall=str(a.shortfall),
        )
        for a in result.adjustments
    ]
    return ReconciliationDTO(
        cutting=cutting_to_dto(batch),
        adjustments=adjustments,
        shortfalls=[a for a in adjustments if a.action == "SHORTFALL"],
    )


def inline_to_dto(load: InlineLoad) -> InlineLoadDTO:
    output = None
    if load.output is not None:
        output = {
            "worker_name": load.output.worker_name,
            "completed_by": load.output.completed_by,
            "completed_at": load.output.completed_at.strftime(TIMESTAMP),
            "items": [
                {
                    "color": item.color,
                    "expected_quantity": item.expected_quantity,
                    "actual_quantity": item.actual_quantity,
                    "difference": item.difference,
                }
                for item in load.output.items
            ],
        }
    return InlineLoadDTO(
        load_id=load.load_id,
        lot_no=load.lot_no,
        pattern=load.pattern,
        size=load.size,
        colors={
            color: {"quantity": b.quantity, "bundle": b.bundle}
            for color, b in load.colors.items()
        },
        total=load.total,
        loaded_at=load.loaded_at.strftime(TIMESTAMP),
        processed=load.processed,
        processed_at=load.processed_at.strftime(TIMESTAMP) if load.processed_at else None,
        output=output,
    )


def delivery_to_dto(delivery: Delivery) -> DeliveryDTO:
    return DeliveryDTO(
        id=delivery.id,  # type: ignore[arg-type]
        delivery_number=delivery.delivery_number,
        customer_name=delivery.customer_name,
        delivery_date=delivery.delivery_date.isoformat(),
        status=delivery.status.value,
        remarks=delivery.remarks,
        created_by=delivery.created_by,
        created_at=delivery.created_at.strftime(TIMESTAMP),
        total_quantity=delivery.total_quantity,
        items=[
            {
                "lot_no": item.lot_no,
                "pattern": item.pattern,
                "size": item.size,
                "color": item.color,
                "quantity": item.quantity,
                "load_id": item.load_id,
            }
            for item in delivery.items
        ],
    )


def worker_process_to_dto(entry: WorkerProcess, pattern: str | None = None) -> WorkerProcessDTO:
    return WorkerProcessDTO(
        id=entry.id,  # type: ignore[arg-type]
        line_no=entry.line_no,
        operation=entry.operation,
        worker_name=entry.worker_name,
        lot_no=entry.lot_no,
        pattern=pattern,
        piece_count=entry.piece_count,
        rate=f"{entry.rate.normalize():f}",
        salary=f"{entry.salary.normalize():f}",
        recorded_at=entry.recorded_at.strftime(TIMESTAMP),
    )
