"""JSON-file-backed implementation of DeliveryRepository."""

from __future__ import annotations

import json
from datetime import date, datetime
from pathlib import Path

from fabric_ledger.domain.model.delivery import Delivery, DeliveryItem, DeliveryStatus
from fabric_ledger.domain.repository.delivery_repository import DeliveryRepository


class JsonDeliveryRepository(DeliveryRepository):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._ensure_file()

    # --- DeliveryRepository interface -----------------------------------------

    def get_by_id(self, delivery_id: int) -> Delivery | None:
        for raw in self._load_raw():
            if raw["id"] == delivery_id:
                return self._to_domain(raw)
        return None

    def get_by_number(self, delivery_number: str) -> Delivery | None:
        for raw in self._load_raw():
            if raw["delivery_number"] == delivery_number:
                return self._to_domain(raw)
        return None

    def list_all(self) -> list[Delivery]:
        return [self._to_domain(raw) for raw in self._load_raw()]

    def save(self, delivery: Delivery) -> None:
        deliveries = self._load_raw()

        if delivery.id is None:
            delivery.id = max((d["id"] for d in deliveries), default=0) + 1

        for i, raw in enumerate(deliveries):
            if raw["id"] == delivery.id:
                deliveries[i] = self._to_raw(delivery)
                break
        else:
            deliveries.append(self._to_raw(delivery))

        self._persist_raw(deliveries)

    def delete(self, delivery_id: int) -> bool:
        deliveries = self._load_raw()
        kept = [raw for raw in deliveries if raw["id"] != delivery_id]
        if len(kept) == len(deliveries):
            return False
        self._persist_raw(kept)
        return True

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(delivery: Delivery) -> dict:
        return {
            "id": delivery.id,
            "delivery_number": delivery.delivery_number,
            "customer_name": delivery.customer_name,
            "delivery_date": delivery.delivery_date.isoformat(),
            "status": delivery.status.value,
            "remarks": delivery.remarks,
            "created_by": delivery.created_by,
            "created_at": delivery.created_at.isoformat(),
            "items": [
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
        }

    @staticmethod
    def _to_domain(raw: dict) -> Delivery:
        return Delivery(
            id=raw["id"],
            delivery_number=raw["delivery_number"],
            customer_name=raw["customer_name"],
            delivery_date=date.fromisoformat(raw["delivery_date"]),
            status=DeliveryStatus(raw.get("status", "pending")),
            remarks=raw.get("remarks", ""),
            created_by=raw.get("created_by", ""),
            created_at=datetime.fromisoformat(raw["created_at"]),
            items=[
                DeliveryItem(
                    lot_no=i["lot_no"],
                    pattern=i["pattern"],
                    size=i["size"],
                    color=i["color"],
                    quantity=i["quantity"],
                    load_id=i.get("load_id"),
                )
                for i in raw["items"]
            ],
        )

    # --- File helpers ---------------------------------------------------------

    def _load_raw(self) -> list[dict]:
        return json.loads(self._file_path.read_text(encoding="utf-8"))

    def _persist_raw(self, deliveries: list[dict]) -> None:
        self._file_path.write_text(
            json.dumps(deliveries, indent=2) + "\n", encoding="utf-8"
        )

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text("[]", encoding="utf-8")
