"""CuttingBatch aggregate: one lot of fabric laid out and cut.

A batch is created when cutting starts (its roles reserve fabric) and is
completed exactly once, when the actual layers cut per role are known.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal

from fabric_ledger.domain.exceptions import ValidationError
from fabric_ledger.domain.model.value_objects import ZERO, StockKey, Weight


@dataclass
class Role:
    """One roll of fabric planned for the batch.

    ``stock_id`` is filled in at reservation time and is the stable link
    back to the stock record the fabric came from.
    """

    role_no: str
    color: str
    planned_weight: Weight
    stock_id: str | None = None
    layers_cut: Weight = ZERO
    pieces_cut: Decimal = Decimal("0")


@dataclass
class CuttingBatch:
    """Aggregate root for cutting.

    Use ``CuttingBatch.create()`` for new batches; ``__init__`` stays
    simple so repositories can reconstitute stored batches as they are.
    """

    lot_no: str
    pattern: str
    fabric_name: str
    sizes: list[str]
    roles: list[Role]
    reserved: bool = False
    reconciled: bool = False
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    completed_at: datetime | None = None

    # --- Factory --------------------------------------------------------------

    @staticmethod
    def create(
        lot_no: str,
        pattern: str,
        fabric_name: str,
        sizes: list[str],
        roles: list[Role],
    ) -> CuttingBatch:
        if not lot_no or not lot_no.strip():
            raise ValidationError("Lot number is required")
        if not pattern or not pattern.strip():
            raise ValidationError("Pattern is required")
        if not fabric_name or not fabric_name.strip():
            raise ValidationError("Fabric name is required")

        clean_sizes: list[str] = []
        for size in sizes:
            size = size.strip()
            if size and size not in clean_sizes:
                clean_sizes.append(size)
        if not clean_sizes:
            raise ValidationError("At least one size is required")

        if not roles:
            raise ValidationError("Roles data is required and must be a non-empty list")
        seen: set[str] = set()
        for role in roles:
            if not role.role_no or not role.role_no.strip():
                raise ValidationError("Every role needs a role number")
            if role.role_no in seen:
                raise ValidationError(f"Duplicate role number '{role.role_no}'")
            seen.add(role.role_no)
            if not role.color or not role.color.strip():
                raise ValidationError(f"Role {role.role_no} needs a color")
            if role.planned_weight.is_zero:
                raise ValidationError(f"Role {role.role_no}: planned weight must be positive")

        return CuttingBatch(
            lot_no=lot_no.strip(),
            pattern=pattern.strip(),
            fabric_name=fabric_name.strip(),
            sizes=clean_sizes,
            roles=list(roles),
        )

    # --- State transitions ----------------------------------------------------

    def mark_reserved(self, stock_ids: dict[StockKey, str]) -> None:
        """Record which stock record each role reserved from."""
        if self.reserved:
            raise ValidationError(f"Lot {self.lot_no} has already reserved its fabric")
        for role in self.roles:
            role.stock_id = stock_ids.get(self.key_for(role))
        self.reserved = True

    def ensure_can_reconcile(self) -> None:
        if self.reconciled:
            raise ValidationError(
                f"Cutting for lot {self.lot_no} has already been completed"
            )
        if not self.reserved:
            raise ValidationError(
                f"Cutting for lot {self.lot_no} never reserved any fabric"
            )

    def check_actuals(self, actuals: dict[str, Weight]) -> None:
        """Every role must be reported, and nothing but the batch's roles."""
        known = {role.role_no for role in self.roles}
        unknown = sorted(set(actuals) - known)
        if unknown:
            raise ValidationError(
                f"Unknown role number(s) for lot {self.lot_no}: {', '.join(unknown)}"
            )
        missing = sorted(known - set(actuals))
        if missing:
            raise ValidationError(
                f"Missing actual layers for role(s): {', '.join(missing)}"
            )

    def record_actuals(self, actuals: dict[str, Weight]) -> None:
        """Fill in layers/pieces cut and close the batch."""
        self.ensure_can_reconcile()
        self.check_actuals(actuals)
        for role in self.roles:
            role.layers_cut = actuals[role.role_no]
            role.pieces_cut = role.layers_cut.value * len(self.sizes)
        self.reconciled = True
        self.completed_at = datetime.now(timezone.utc)

    # --- Computed properties --------------------------------------------------

    @property
    def total_pieces(self) -> Decimal:
        return sum((role.pieces_cut for role in self.roles), Decimal("0"))

    @property
    def planned_total(self) -> Weight:
        return sum((role.planned_weight for role in self.roles), ZERO)

    def key_for(self, role: Role) -> StockKey:
        return StockKey.of(self.fabric_name, role.color)
