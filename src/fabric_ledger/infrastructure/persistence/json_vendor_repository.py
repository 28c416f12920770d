"""JSON-file-backed implementation of VendorRepository."""

from __future__ import annotations

import json
from datetime import datetime
from decimal import Decimal
from pathlib import Path

from fabric_ledger.domain.model.value_objects import Weight
from fabric_ledger.domain.model.vendor import FabricColor, FabricDetail, Vendor, WeightType
from fabric_ledger.domain.repository.vendor_repository import VendorRepository


class JsonVendorRepository(VendorRepository):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._ensure_file()

    # --- VendorRepository interface -------------------------------------------

    def next_id(self) -> int:
        vendors = self._load_raw()
        if not vendors:
            return 1
        return max(v["id"] for v in vendors) + 1

    def get_by_id(self, vendor_id: int) -> Vendor | None:
        for raw in self._load_raw():
            if raw["id"] == vendor_id:
                return self._to_domain(raw)
        return None

    def list_all(self) -> list[Vendor]:
        return [self._to_domain(raw) for raw in self._load_raw()]

    def save(self, vendor: Vendor) -> None:
        vendors = self._load_raw()

        if vendor.id is None:
            vendor.id = self.next_id()

        replaced = False
        for i, raw in enumerate(vendors):
            if raw["id"] == vendor.id:
                vendors[i] = self._to_raw(vendor)
                replaced = True
                break
        if not replaced:
            vendors.append(self._to_raw(vendor))

        self._persist_raw(vendors)

    def delete(self, vendor_id: int) -> None:
        vendors = [raw for raw in self._load_raw() if raw["id"] != vendor_id]
        self._persist_raw(vendors)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(vendor: Vendor) -> dict:
        return {
            "id": vendor.id,
            "shop_name": vendor.shop_name,
            "party_name": vendor.party_name,
            "bill_no": vendor.bill_no,
            "contact_number": vendor.contact_number,
            "address": vendor.address,
            "gstin": vendor.gstin,
            "received_at": vendor.received_at.isoformat(),
            "revision": vendor.revision,
            "fabrics": [
                {
                    "name": fabric.name,
                    "type": fabric.type,
                    "weight_type": fabric.weight_type.value,
                    "remarks": fabric.remarks,
                    "colors": [
                        {
                            "color_name": color.color_name,
                            "color_weight": str(color.color_weight.value),
                            "color_hex": color.color_hex,
                            "stock_id": color.stock_id,
                        }
                        for color in fabric.colors
                    ],
                }
                for fabric in vendor.fabrics
            ],
        }

    @staticmethod
    def _to_domain(raw: dict) -> Vendor:
        fabrics = [
            FabricDetail(
                name=f["name"],
                type=f["type"],
                weight_type=WeightType(f.get("weight_type", "kg")),
                remarks=f.get("remarks", ""),
                colors=[
                    FabricColor(
                        color_name=c["color_name"],
                        color_weight=Weight(Decimal(c["color_weight"])),
                        color_hex=c.get("color_hex"),
                        stock_id=c.get("stock_id"),
                    )
                    for c in f["colors"]
                ],
            )
            for f in raw["fabrics"]
        ]
        return Vendor(
            id=raw["id"],
            shop_name=raw["shop_name"],
            party_name=raw["party_name"],
            bill_no=raw["bill_no"],
            fabrics=fabrics,
            contact_number=raw.get("contact_number", ""),
            address=raw.get("address", ""),
            gstin=raw.get("gstin", ""),
            received_at=datetime.fromisoformat(raw["received_at"]),
            revision=raw.get("revision", 0),
        )

    # --- File helpers ---------------------------------------------------------

    def _load_raw(self) -> list[dict]:
        return json.loads(self._file_path.read_text(encoding="utf-8"))

    def _persist_raw(self, vendors: list[dict]) -> None:
        self._file_path.write_text(
            json.dumps(vendors, indent=2) + "\n", encoding="utf-8"
        )

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text("[]", encoding="utf-8")
