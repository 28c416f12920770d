"""Delivery aggregate: finished pieces shipped to a customer.

A delivery lists which lot, pattern, size and color went out and how
many pieces; an item may point at the inline load whose process output
it ships.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum

from fabric_ledger.domain.exceptions import ValidationError


class DeliveryStatus(Enum):
    PENDING = "pending"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    @staticmethod
    def parse(value: str) -> DeliveryStatus:
        try:
            return DeliveryStatus((value or "").strip().lower())
        except ValueError:
            raise ValidationError(
                "Invalid status. Status must be pending, delivered, or cancelled."
            )


@dataclass(frozen=True)
class DeliveryItem:
    lot_no: str
    pattern: str
    size: str
    color: str
    quantity: int
    load_id: str | None = None


@dataclass
class Delivery:
    """Aggregate root for deliveries.

    Use ``Delivery.create()`` for new deliveries.
    """

    id: int | None
    delivery_number: str
    customer_name: str
    delivery_date: date
    items: list[DeliveryItem]
    status: DeliveryStatus = DeliveryStatus.PENDING
    remarks: str = ""
    created_by: str = ""
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @staticmethod
    def create(
        delivery_number: str,
        customer_name: str,
        items: list[DeliveryItem],
        delivery_date: date | None = None,
        remarks: str = "",
        created_by: str = "",
    ) -> Delivery:
        if not delivery_number or not delivery_number.strip():
            raise ValidationError("Delivery number is required")
        if not customer_name or not customer_name.strip():
            raise ValidationError("Customer name is required")
        _check_items(items)
        return Delivery(
            id=None,
            delivery_number=delivery_number.strip(),
            customer_name=customer_name.strip(),
            delivery_date=delivery_date or datetime.now(timezone.utc).date(),
            items=list(items),
            remarks=(remarks or "").strip(),
            created_by=(created_by or "").strip(),
        )

    # --- State transitions ----------------------------------------------------

    def set_status(self, status: DeliveryStatus) -> None:
        self.status = status

    def update(
        self,
        customer_name: str | None = None,
        delivery_date: date | None = None,
        items: list[DeliveryItem] | None = None,
        remarks: str | None = None,
    ) -> None:
        """Change only the fields that are given."""
        if customer_name is not None:
            if not customer_name.strip():
                raise ValidationError("Customer name is required")
            self.customer_name = customer_name.strip()
        if delivery_date is not None:
            self.delivery_date = delivery_date
        if items is not None:
            if not items:
                raise ValidationError("Items array cannot be empty.")
            _check_items(items)
            self.items = list(items)
        if remarks is not None:
            self.remarks = remarks.strip()

    # --- Computed properties --------------------------------------------------

    @property
    def total_quantity(self) -> int:
        return sum(item.quantity for item in self.items)

    def matches(
        self,
        status: DeliveryStatus | None = None,
        customer: str | None = None,
        start: date | None = None,
        end: date | None = None,
    ) -> bool:
        """Filter used by listings and the report; dates are inclusive."""
        if status is not None and self.status is not status:
            return False
        if customer and customer.lower() not in self.customer_name.lower():
            return False
        if start is not None and self.delivery_date < start:
            return False
        if end is not None and self.delivery_date > end:
            return False
        return True


def _check_items(items: list[DeliveryItem]) -> None:
    if not items:
        raise ValidationError("At least one item is required")
    for item in items:
        for value in (item.lot_no, item.pattern, item.size, item.color):
            if not value or not value.strip():
                raise ValidationError(
                    "Each item must have lot number, pattern, size, color, and quantity."
                )
        if item.quantity < 1:
            raise ValidationError(
                f"Item {item.lot_no}/{item.size}/{item.color}: quantity must be at least 1"
            )
