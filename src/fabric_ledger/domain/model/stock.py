"""StockRecord aggregate: quantity-on-hand for one (fabric, color) pair.

A record is created on the first intake of a fabric/color pair and is
never deleted afterwards. When its quantity reaches zero it is *retired*
(flag + timestamp) so reports can hide it while history is kept; stock
coming back into a retired record reinstates it.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

from fabric_ledger.domain.exceptions import InsufficientStockError, ValidationError
from fabric_ledger.domain.model.value_objects import ZERO, StockKey, Weight

DEFAULT_DISPLAY_COLOR = "#3498db"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class StockRecord:
    """Aggregate root for the fabric stock ledger.

    Invariants:
    - ``quantity`` is never negative
    - a record with zero quantity left by a reservation or a consumption
      is retired; a record that receives stock is not

    ``applied_ops`` names the operations (e.g. ``"L-7:reserve"``) that
    have already moved this record, so replaying one is a no-op.
    """

    id: str
    fabric_name: str
    color: str
    quantity: Weight
    standard_unit_weight: Weight = ZERO
    display_color: str | None = None
    retired: bool = False
    retired_at: datetime | None = None
    last_updated: datetime = field(default_factory=utcnow)
    vendor_id: int | None = None
    version: int = 0
    applied_ops: list[str] = field(default_factory=list)

    # --- Factory (used for NEW records only) ----------------------------------

    @staticmethod
    def open(
        key: StockKey,
        quantity: Weight,
        standard_weight_hint: Weight | None = None,
        display_color_hint: str | None = None,
        vendor_id: int | None = None,
    ) -> StockRecord:
        """Start a record for a never-seen fabric/color pair."""
        if standard_weight_hint is None or standard_weight_hint.is_zero:
            standard_weight_hint = quantity
        return StockRecord(
            id=uuid.uuid4().hex,
            fabric_name=key.fabric_name,
            color=key.color,
            quantity=quantity,
            standard_unit_weight=standard_weight_hint,
            display_color=display_color_hint or DEFAULT_DISPLAY_COLOR,
            vendor_id=vendor_id,
        )

    @property
    def key(self) -> StockKey:
        return StockKey(self.fabric_name, self.color)

    @property
    def is_active(self) -> bool:
        return not self.retired

    # --- Ledger movements -----------------------------------------------------

    def receive(
        self,
        weight: Weight,
        standard_weight_hint: Weight | None = None,
        display_color_hint: str | None = None,
        now: datetime | None = None,
    ) -> None:
        """Add delivered fabric.

        The standard weight and display color hints only fill in values
        that are still unset; the first delivery that sets them wins.
        """
        if weight.is_zero:
            raise ValidationError("Intake weight must be positive")
        self.quantity = self.quantity + weight
        if self.standard_unit_weight.is_zero and standard_weight_hint is not None:
            self.standard_unit_weight = standard_weight_hint
        if not self.display_color and display_color_hint:
            self.display_color = display_color_hint
        self._reinstate()
        self.last_updated = now or utcnow()

    def take(self, weight: Weight, now: datetime | None = None) -> None:
        """Reserve fabric for a cutting batch.

        Raises InsufficientStockError if less than ``weight`` is on hand.
        """
        if weight.is_zero:
            raise ValidationError("Reservation weight must be positive")
        if weight > self.quantity:
            raise InsufficientStockError(
                self.fabric_name, self.color, self.quantity.value, weight.value
            )
        now = now or utcnow()
        self.quantity = self.quantity - weight
        self.last_updated = now
        if self.quantity.is_zero:
            self.retire(now)

    def consume_up_to(self, weight: Weight, now: datetime | None = None) -> Weight:
        """Consume extra fabric that was cut beyond the reservation.

        Takes whatever is available up to ``weight`` and returns the part
        that could not be covered (the shortfall). Never fails: the fabric
        has already been cut.
        """
        now = now or utcnow()
        consumed = weight if weight <= self.quantity else self.quantity
        self.quantity = self.quantity - consumed
        self.last_updated = now
        if self.quantity.is_zero:
            self.retire(now)
        return weight - consumed

    def give_back(self, weight: Weight, now: datetime | None = None) -> None:
        """Return unused reserved fabric."""
        if weight.is_zero:
            raise ValidationError("Return weight must be positive")
        self.quantity = self.quantity + weight
        self._reinstate()
        self.last_updated = now or utcnow()

    def retire(self, now: datetime | None = None) -> None:
        if self.retired:
            return
        self.retired = True
        self.retired_at = now or utcnow()

    # --- Operation markers ----------------------------------------------------

    def has_applied(self, op_id: str | None) -> bool:
        return op_id is not None and op_id in self.applied_ops

    def mark_applied(self, op_id: str | None) -> None:
        if op_id is not None and op_id not in self.applied_ops:
            self.applied_ops.append(op_id)

    # --- Internal helpers -----------------------------------------------------

    def _reinstate(self) -> None:
        self.retired = False
        self.retired_at = None
