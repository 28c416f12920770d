"""WorkerProcess entry: pieces of a cut lot a worker put through one
operation on a line, paid at a piece rate.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation

from fabric_ledger.domain.exceptions import ValidationError


@dataclass
class WorkerProcess:

    id: int | None
    line_no: str
    operation: str
    worker_name: str
    lot_no: str
    piece_count: int
    rate: Decimal = Decimal("0")
    recorded_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @staticmethod
    def create(
        line_no: str,
        operation: str,
        worker_name: str,
        lot_no: str,
        piece_count: int,
        rate: str | Decimal | int | float = "0",
        recorded_at: datetime | None = None,
    ) -> WorkerProcess:
        for label, value in (
            ("Line number", line_no),
            ("Operation", operation),
            ("Worker name", worker_name),
            ("Cutting reference", lot_no),
        ):
            if not value or not str(value).strip():
                raise ValidationError(f"{label} is required")
        if isinstance(piece_count, bool) or not isinstance(piece_count, int) or piece_count < 1:
            raise ValidationError("Piece count must be a positive whole number")
        try:
            rate = Decimal(str(rate).strip())
        except (InvalidOperation, ValueError) as exc:
            raise ValidationError(f"Invalid rate: {rate!r}") from exc
        if not rate.is_finite() or rate < 0:
            raise ValidationError(f"Rate cannot be negative, got {rate}")

        return WorkerProcess(
            id=None,
            line_no=str(line_no).strip(),
            operation=operation.strip(),
            worker_name=worker_name.strip(),
            lot_no=lot_no.strip(),
            piece_count=piece_count,
            rate=rate,
            recorded_at=recorded_at or datetime.now(timezone.utc),
        )

    @property
    def salary(self) -> Decimal:
        return self.rate * self.piece_count
