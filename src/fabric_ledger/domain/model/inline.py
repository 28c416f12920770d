"""InlineLoad aggregate: cut pieces waiting on the stitching line.

After a cutting batch is completed its pieces move to the line in loads:
one size, a quantity (and bundle count) per color. A worker then reports
how many pieces per color came out; the differences are kept with the
load.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from fabric_ledger.domain.exceptions import ValidationError
from fabric_ledger.domain.model.cutting import CuttingBatch


@dataclass(frozen=True)
class ColorBundle:
    quantity: int
    bundle: int = 0


@dataclass(frozen=True)
class OutputItem:
    color: str
    expected_quantity: int
    actual_quantity: int

    @property
    def difference(self) -> int:
        return self.actual_quantity - self.expected_quantity


@dataclass
class ProcessOutput:
    worker_name: str
    items: list[OutputItem]
    completed_by: str = "System"
    completed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def has_discrepancy(self) -> bool:
        return any(item.difference != 0 for item in self.items)


@dataclass
class InlineLoad:
    """Aggregate root for inline stock.

    Invariants:
    - a load belongs to a completed cutting batch and one of its sizes
    - a load is processed at most once
    """

    load_id: str
    lot_no: str
    pattern: str
    size: str
    colors: dict[str, ColorBundle]
    loaded_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    processed: bool = False
    processed_at: datetime | None = None
    output: ProcessOutput | None = None

    @staticmethod
    def create(
        load_id: str,
        batch: CuttingBatch,
        size: str,
        colors: dict[str, ColorBundle],
    ) -> InlineLoad:
        if not load_id or not load_id.strip():
            raise ValidationError("Load ID is required")
        if not batch.reconciled:
            raise ValidationError(
                f"Cutting for lot {batch.lot_no} is not completed yet"
            )
        size = (size or "").strip()
        if size not in batch.sizes:
            raise ValidationError(
                f"Size '{size}' is not cut in lot {batch.lot_no} "
                f"(sizes: {', '.join(batch.sizes)})"
            )
        if not colors:
            raise ValidationError("At least one color is required")
        for color, bundle in colors.items():
            if bundle.quantity <= 0:
                raise ValidationError(f"Quantity for color '{color}' must be positive")
            if bundle.bundle < 0:
                raise ValidationError(f"Bundle count for color '{color}' cannot be negative")

        return InlineLoad(
            load_id=load_id.strip(),
            lot_no=batch.lot_no,
            pattern=batch.pattern,
            size=size,
            colors=dict(colors),
        )

    @property
    def total(self) -> int:
        return sum(bundle.quantity for bundle in self.colors.values())

    def complete(
        self,
        worker_name: str,
        actuals: dict[str, int],
        completed_by: str = "System",
    ) -> ProcessOutput:
        """Record the worker's output for this load and close it."""
        if self.processed:
            raise ValidationError(f"Load {self.load_id} has already been processed")
        if not worker_name or not worker_name.strip():
            raise ValidationError("Worker name is required")

        unknown = sorted(set(actuals) - set(self.colors))
        if unknown:
            raise ValidationError(
                f"Load {self.load_id} has no color(s): {', '.join(unknown)}"
            )
        items: list[OutputItem] = []
        for color, bundle in self.colors.items():
            if color not in actuals:
                raise ValidationError(f"Missing actual quantity for color '{color}'")
            actual = actuals[color]
            if actual < 0:
                raise ValidationError(f"Actual quantity for color '{color}' cannot be negative")
            items.append(OutputItem(color, bundle.quantity, actual))

        output = ProcessOutput(
            worker_name=worker_name.strip(),
            items=items,
            completed_by=completed_by or "System",
        )
        self.output = output
        self.processed = True
        self.processed_at = output.completed_at
        return output
