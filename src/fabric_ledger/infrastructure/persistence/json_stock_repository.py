"""JSON-file-backed implementation of StockRepository."""

from __future__ import annotations

import json
import os
from datetime import datetime
from decimal import Decimal
from pathlib import Path

from fabric_ledger.domain.exceptions import ConcurrencyError
from fabric_ledger.domain.model.stock import StockRecord
from fabric_ledger.domain.model.value_objects import StockKey, Weight
from fabric_ledger.domain.repository.stock_repository import StockRepository


class JsonStockRepository(StockRepository):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._ensure_file()

    # --- StockRepository interface --------------------------------------------

    def get_by_id(self, stock_id: str) -> StockRecord | None:
        for raw in self._load_raw():
            if raw["id"] == stock_id:
                return self._to_domain(raw)
        return None

    def get_by_key(self, key: StockKey) -> StockRecord | None:
        for raw in self._load_raw():
            if raw["fabric_name"] == key.fabric_name and raw["color"] == key.color:
                return self._to_domain(raw)
        return None

    def list_all(self) -> list[StockRecord]:
        return [self._to_domain(raw) for raw in self._load_raw()]

    def save_all(self, records: list[StockRecord]) -> None:
        stored = self._load_raw()
        position = {raw["id"]: i for i, raw in enumerate(stored)}
        owners = {(raw["fabric_name"], raw["color"]): raw["id"] for raw in stored}

        # Check everything before touching the file
        for record in records:
            if record.id in position:
                current = stored[position[record.id]].get("version", 0)
                if current != record.version:
                    raise ConcurrencyError(
                        f"Stock record {record.id} was modified concurrently "
                        f"(stored version {current}, saving version {record.version})"
                    )
            owner = owners.get((record.fabric_name, record.color))
            if owner is not None and owner != record.id:
                raise ConcurrencyError(
                    f"Stock record for {record.fabric_name}/{record.color} already exists"
                )
            owners[(record.fabric_name, record.color)] = record.id

        for record in records:
            raw = self._to_raw(record)
            raw["version"] = record.version + 1
            if record.id in position:
                stored[position[record.id]] = raw
            else:
                position[record.id] = len(stored)
                stored.append(raw)

        self._persist_raw(stored)
        for record in records:
            record.version += 1

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(record: StockRecord) -> dict:
        return {
            "id": record.id,
            "fabric_name": record.fabric_name,
            "color": record.color,
            "quantity": str(record.quantity.value),
            "standard_unit_weight": str(record.standard_unit_weight.value),
            "display_color": record.display_color,
            "retired": record.retired,
            "retired_at": record.retired_at.isoformat() if record.retired_at else None,
            "last_updated": record.last_updated.isoformat(),
            "vendor_id": record.vendor_id,
            "version": record.version,
            "applied_ops": list(record.applied_ops),
        }

    @staticmethod
    def _to_domain(raw: dict) -> StockRecord:
        retired_at = raw.get("retired_at")
        return StockRecord(
            id=raw["id"],
            fabric_name=raw["fabric_name"],
            color=raw["color"],
            quantity=Weight(Decimal(raw["quantity"])),
            standard_unit_weight=Weight(Decimal(raw.get("standard_unit_weight", "0"))),
            display_color=raw.get("display_color"),
            retired=raw.get("retired", False),
            retired_at=datetime.fromisoformat(retired_at) if retired_at else None,
            last_updated=datetime.fromisoformat(raw["last_updated"]),
            vendor_id=raw.get("vendor_id"),
            version=raw.get("version", 0),
            applied_ops=list(raw.get("applied_ops", [])),
        )

    # --- File helpers ---------------------------------------------------------

    def _load_raw(self) -> list[dict]:
        return json.loads(self._file_path.read_text(encoding="utf-8"))

    def _persist_raw(self, records: list[dict]) -> None:
        # Write to a sibling file and swap it in, so a batch lands whole
        tmp_path = self._file_path.with_suffix(self._file_path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(records, indent=2) + "\n", encoding="utf-8")
        os.replace(tmp_path, self._file_path)

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text("[]", encoding="utf-8")
