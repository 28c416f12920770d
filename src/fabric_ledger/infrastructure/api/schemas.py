"""Request bodies accepted by the HTTP API.

Weights are accepted as JSON numbers or numeric strings and handed to the
domain as text, so the ledger's own validation decides what is valid.
"""

from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class ColorIn(BaseModel):
    color_name: str
    color_weight: Decimal
    color_hex: Optional[str] = None


class FabricIn(BaseModel):
    name: str
    type: str
    weight_type: str = "kg"
    remarks: str = ""
    colors: List[ColorIn] = Field(default_factory=list)


class VendorIn(BaseModel):
    shop_name: str
    party_name: str
    bill_no: str
    contact_number: str = ""
    address: str = ""
    gstin: str = ""
    fabrics: List[FabricIn] = Field(default_factory=list)


class RoleIn(BaseModel):
    role_no: str
    color: str
    planned_weight: Decimal


class CuttingBeforeIn(BaseModel):
    lot_no: str
    pattern: str
    fabric_name: str
    sizes: List[str] = Field(default_factory=list)
    roles: List[RoleIn] = Field(default_factory=list)


class CuttingAfterIn(BaseModel):
    actual_layers: Dict[str, Decimal]


class ColorLoadIn(BaseModel):
    quantity: int
    bundle: int = 0


class InlineLoadIn(BaseModel):
    load_id: str
    lot_no: str
    size: str
    colors: Dict[str, ColorLoadIn] = Field(default_factory=dict)


class ProcessOutputIn(BaseModel):
    worker_name: str
    actual_quantities: Dict[str, int]
    completed_by: str = "System"


class DeliveryItemIn(BaseModel):
    lot_no: str
    pattern: str
    size: str
    color: str
    quantity: int
    load_id: Optional[str] = None


class DeliveryIn(BaseModel):
    delivery_number: str
    customer_name: str
    delivery_date: Optional[str] = None
    items: List[DeliveryItemIn] = Field(default_factory=list)
    remarks: str = ""
    created_by: str = ""


class DeliveryUpdateIn(BaseModel):
    customer_name: Optional[str] = None
    delivery_date: Optional[str] = None
    items: Optional[List[DeliveryItemIn]] = None
    remarks: Optional[str] = None


class DeliveryStatusIn(BaseModel):
    status: str


class WorkerProcessIn(BaseModel):
    line_no: str
    operation: str
    worker_name: str
    lot_no: str
    piece_count: int
    rate: Decimal = Decimal("0")
    recorded_at: Optional[str] = None
