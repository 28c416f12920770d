"""Vendor aggregate: one fabric delivery from a party.

A vendor entry records who delivered, against which bill, and how much
of each fabric color arrived. Recording it feeds the stock ledger.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum

from fabric_ledger.domain.exceptions import ValidationError
from fabric_ledger.domain.model.value_objects import (
    ZERO,
    StockKey,
    Weight,
    validate_hex_color,
)


class WeightType(Enum):
    KG = "kg"
    METER = "meter"


@dataclass(frozen=True)
class FabricColor:
    color_name: str
    color_weight: Weight
    color_hex: str | None = None
    stock_id: str | None = None


@dataclass
class FabricDetail:
    name: str
    type: str
    colors: list[FabricColor]
    weight_type: WeightType = WeightType.KG
    remarks: str = ""

    @property
    def total_weight(self) -> Weight:
        return sum((c.color_weight for c in self.colors), ZERO)


@dataclass
class Vendor:
    """Aggregate root for vendor deliveries.

    Use ``Vendor.create()`` for new deliveries; it enforces the intake
    rules before anything touches stock.

    ``revision`` counts edits; each color remembers the stock record it
    was taken into through ``stock_id``.
    """

    id: int | None
    shop_name: str
    party_name: str
    bill_no: str
    fabrics: list[FabricDetail]
    contact_number: str = ""
    address: str = ""
    gstin: str = ""
    received_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    revision: int = 0

    @staticmethod
    def create(
        shop_name: str,
        party_name: str,
        bill_no: str,
        fabrics: list[FabricDetail],
        contact_number: str = "",
        address: str = "",
        gstin: str = "",
    ) -> Vendor:
        for label, value in (
            ("Shop name", shop_name),
            ("Party name", party_name),
            ("Bill number", bill_no),
        ):
            if not value or not value.strip():
                raise ValidationError(f"{label} is required")

        if not fabrics:
            raise ValidationError("At least one fabric detail is required")

        for fabric in fabrics:
            if not fabric.name or not fabric.name.strip():
                raise ValidationError("Fabric details missing required field: name")
            if not fabric.type or not fabric.type.strip():
                raise ValidationError(f"Fabric '{fabric.name}' is missing its type")
            if not fabric.colors:
                raise ValidationError(f"Fabric '{fabric.name}' must have at least one color")
            names: set[str] = set()
            for color in fabric.colors:
                if not color.color_name or not color.color_name.strip():
                    raise ValidationError(f"Fabric '{fabric.name}' has a color without a name")
                if color.color_name in names:
                    raise ValidationError(
                        f"Fabric '{fabric.name}' lists color '{color.color_name}' twice"
                    )
                names.add(color.color_name)
                if color.color_weight.is_zero:
                    raise ValidationError(
                        f"Color '{color.color_name}' of fabric '{fabric.name}' "
                        f"must have a positive weight"
                    )
                if color.color_hex:
                    validate_hex_color(color.color_hex)

        return Vendor(
            id=None,
            shop_name=shop_name.strip(),
            party_name=party_name.strip(),
            bill_no=bill_no.strip(),
            fabrics=list(fabrics),
            contact_number=(contact_number or "").strip(),
            address=(address or "").strip(),
            gstin=(gstin or "").strip(),
        )

    @property
    def total_weight(self) -> Weight:
        return sum((f.total_weight for f in self.fabrics), ZERO)

    def matches(self, search: str) -> bool:
        """Case-insensitive match on shop, party or bill number."""
        needle = search.lower()
        return any(
            needle in value.lower()
            for value in (self.shop_name, self.party_name, self.bill_no)
        )

    def delivered(self) -> dict[StockKey, tuple[Weight, str | None]]:
        """Weight delivered per fabric/color, with the stock record it went to."""
        result: dict[StockKey, tuple[Weight, str | None]] = {}
        for fabric in self.fabrics:
            for color in fabric.colors:
                key = StockKey.of(fabric.name, color.color_name)
                weight, stock_id = result.get(key, (ZERO, None))
                result[key] = (weight + color.color_weight, stock_id or color.stock_id)
        return result

    def link_stock(self, stock_ids: Mapping[StockKey, str]) -> None:
        for fabric in self.fabrics:
            fabric.colors = [
                replace(
                    c,
                    stock_id=stock_ids.get(StockKey.of(fabric.name, c.color_name), c.stock_id),
                )
                for c in fabric.colors
            ]

    def revise(self, edited: Vendor) -> Vendor:
        """The validated ``edited`` bill as the next revision of this one."""
        edited.id = self.id
        edited.received_at = self.received_at
        edited.revision = self.revision + 1
        return edited
