"""JSON-file-backed implementation of WorkerProcessRepository."""

from __future__ import annotations

import json
from datetime import datetime
from decimal import Decimal
from pathlib import Path

from fabric_ledger.domain.model.worker_process import WorkerProcess
from fabric_ledger.domain.repository.worker_process_repository import (
    WorkerProcessRepository,
)


class JsonWorkerProcessRepository(WorkerProcessRepository):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._ensure_file()

    def list_all(self) -> list[WorkerProcess]:
        return [self._to_domain(raw) for raw in self._load_raw()]

    def save(self, entry: WorkerProcess) -> None:
        entries = self._load_raw()

        if entry.id is None:
            entry.id = max((e["id"] for e in entries), default=0) + 1

        for i, raw in enumerate(entries):
            if raw["id"] == entry.id:
                entries[i] = self._to_raw(entry)
                break
        else:
            entries.append(self._to_raw(entry))

        self._persist_raw(entries)

    @staticmethod
    def _to_raw(entry: WorkerProcess) -> dict:
        return {
            "id": entry.id,
            "line_no": entry.line_no,
            "operation": entry.operation,
            "worker_name": entry.worker_name,
            "lot_no": entry.lot_no,
            "piece_count": entry.piece_count,
            "rate": str(entry.rate),
            "recorded_at": entry.recorded_at.isoformat(),
        }

    @staticmethod
    def _to_domain(raw: dict) -> WorkerProcess:
        return WorkerProcess(
            id=raw["id"],
            line_no=raw["line_no"],
            operation=raw["operation"],
            worker_name=raw["worker_name"],
            lot_no=raw["lot_no"],
            piece_count=raw["piece_count"],
            rate=Decimal(raw.get("rate", "0")),
            recorded_at=datetime.fromisoformat(raw["recorded_at"]),
        )

    def _load_raw(self) -> list[dict]:
        return json.loads(self._file_path.read_text(encoding="utf-8"))

    def _persist_raw(self, entries: list[dict]) -> None:
        self._file_path.write_text(
            json.dumps(entries, indent=2) + "\n", encoding="utf-8"
        )

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text("[]", encoding="utf-8")
