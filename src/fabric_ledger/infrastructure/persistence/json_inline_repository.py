"""JSON-file-backed implementation of InlineRepository."""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path

from fabric_ledger.domain.model.inline import (
    ColorBundle,
    InlineLoad,
    OutputItem,
    ProcessOutput,
)
from fabric_ledger.domain.repository.inline_repository import InlineRepository


class JsonInlineRepository(InlineRepository):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._ensure_file()

    # --- InlineRepository interface -------------------------------------------

    def get_by_load_id(self, load_id: str) -> InlineLoad | None:
        for raw in self._load_raw():
            if raw["load_id"] == load_id:
                return self._to_domain(raw)
        return None

    def list_all(self) -> list[InlineLoad]:
        return [self._to_domain(raw) for raw in self._load_raw()]

    def save(self, load: InlineLoad) -> None:
        loads = self._load_raw()
        replaced = False
        for i, raw in enumerate(loads):
            if raw["load_id"] == load.load_id:
                loads[i] = self._to_raw(load)
                replaced = True
                break
        if not replaced:
            loads.append(self._to_raw(load))
        self._persist_raw(loads)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(load: InlineLoad) -> dict:
        output = None
        if load.output is not None:
            output = {
                "worker_name": load.output.worker_name,
                "completed_by": load.output.completed_by,
                "completed_at": load.output.completed_at.isoformat(),
                "items": [
                    {
                        "color": item.color,
                        "expected_quantity": item.expected_quantity,
                        "actual_quantity": item.actual_quantity,
                    }
                    for item in load.output.items
                ],
            }
        return {
            "load_id": load.load_id,
            "lot_no": load.lot_no,
            "pattern": load.pattern,
            "size": load.size,
            "colors": {
                color: {"quantity": b.quantity, "bundle": b.bundle}
                for color, b in load.colors.items()
            },
            "loaded_at": load.loaded_at.isoformat(),
            "processed": load.processed,
            "processed_at": load.processed_at.isoformat() if load.processed_at else None,
            "output": output,
        }

    @staticmethod
    def _to_domain(raw: dict) -> InlineLoad:
        output = None
        if raw.get("output"):
            o = raw["output"]
            output = ProcessOutput(
                worker_name=o["worker_name"],
                completed_by=o.get("completed_by", "System"),
                completed_at=datetime.fromisoformat(o["completed_at"]),
                items=[
                    OutputItem(i["color"], i["expected_quantity"], i["actual_quantity"])
                    for i in o["items"]
                ],
            )
        processed_at = raw.get("processed_at")
        return InlineLoad(
            load_id=raw["load_id"],
            lot_no=raw["lot_no"],
            pattern=raw["pattern"],
            size=raw["size"],
            colors={
                color: ColorBundle(quantity=b["quantity"], bundle=b.get("bundle", 0))
                for color, b in raw["colors"].items()
            },
            loaded_at=datetime.fromisoformat(raw["loaded_at"]),
            processed=raw.get("processed", False),
            processed_at=datetime.fromisoformat(processed_at) if processed_at else None,
            output=output,
        )

    # --- File helpers ---------------------------------------------------------

    def _load_raw(self) -> list[dict]:
        return json.loads(self._file_path.read_text(encoding="utf-8"))

    def _persist_raw(self, loads: list[dict]) -> None:
        self._file_path.write_text(
            json.dumps(loads, indent=2) + "\n", encoding="utf-8"
        )

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text("[]", encoding="utf-8")
