"""JSON-file-backed implementation of CuttingRepository."""

from __future__ import annotations

import json
from datetime import datetime
from decimal import Decimal
from pathlib import Path

from fabric_ledger.domain.model.cutting import CuttingBatch, Role
from fabric_ledger.domain.model.value_objects import Weight
from fabric_ledger.domain.repository.cutting_repository import CuttingRepository


class JsonCuttingRepository(CuttingRepository):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._ensure_file()

    # --- CuttingRepository interface ------------------------------------------

    def get_by_lot_no(self, lot_no: str) -> CuttingBatch | None:
        for raw in self._load_raw():
            if raw["lot_no"] == lot_no:
                return self._to_domain(raw)
        return None

    def list_all(self) -> list[CuttingBatch]:
        return [self._to_domain(raw) for raw in self._load_raw()]

    def save(self, batch: CuttingBatch) -> None:
        batches = self._load_raw()
        replaced = False
        for i, raw in enumerate(batches):
            if raw["lot_no"] == batch.lot_no:
                batches[i] = self._to_raw(batch)
                replaced = True
                break
        if not replaced:
            batches.append(self._to_raw(batch))
        self._persist_raw(batches)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(batch: CuttingBatch) -> dict:
        return {
            "lot_no": batch.lot_no,
            "pattern": batch.pattern,
            "fabric_name": batch.fabric_name,
            "sizes": list(batch.sizes),
            "reserved": batch.reserved,
            "reconciled": batch.reconciled,
            "created_at": batch.created_at.isoformat(),
            "completed_at": batch.completed_at.isoformat() if batch.completed_at else None,
            "roles": [
                {
                    "role_no": role.role_no,
                    "color": role.color,
                    "planned_weight": str(role.planned_weight.value),
                    "stock_id": role.stock_id,
                    "layers_cut": str(role.layers_cut.value),
                    "pieces_cut": str(role.pieces_cut),
                }
                for role in batch.roles
            ],
        }

    @staticmethod
    def _to_domain(raw: dict) -> CuttingBatch:
        roles = [
            Role(
                role_no=r["role_no"],
                color=r["color"],
                planned_weight=Weight(Decimal(r["planned_weight"])),
                stock_id=r.get("stock_id"),
                layers_cut=Weight(Decimal(r.get("layers_cut", "0"))),
                pieces_cut=Decimal(r.get("pieces_cut", "0")),
            )
            for r in raw["roles"]
        ]
        completed_at = raw.get("completed_at")
        return CuttingBatch(
            lot_no=raw["lot_no"],
            pattern=raw["pattern"],
            fabric_name=raw["fabric_name"],
            sizes=list(raw["sizes"]),
            roles=roles,
            reserved=raw.get("reserved", False),
            reconciled=raw.get("reconciled", False),
            created_at=datetime.fromisoformat(raw["created_at"]),
            completed_at=datetime.fromisoformat(completed_at) if completed_at else None,
        )

    # --- File helpers ---------------------------------------------------------

    def _load_raw(self) -> list[dict]:
        return json.loads(self._file_path.read_text(encoding="utf-8"))

    def _persist_raw(self, batches: list[dict]) -> None:
        self._file_path.write_text(
            json.dumps(batches, indent=2) + "\n", encoding="utf-8"
        )

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text("[]", encoding="utf-8")
