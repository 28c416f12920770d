"""Value Objects shared across the domain.

Value Objects are immutable and compared by value, not identity.
They encapsulate validation so invalid values can never exist.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from fabric_ledger.domain.exceptions import ValidationError

HEX_COLOR = re.compile(r"^#[0-9A-Fa-f]{6}$")


@dataclass(frozen=True)
class Weight:
    """A non-negative amount of fabric (kg or meters, by vendor convention).

    Uses Decimal so that repeated intake and return of fractional weights
    adds up exactly.
    """

    value: Decimal

    def __post_init__(self) -> None:
        if not isinstance(self.value, Decimal):
            raise ValidationError(
                f"Weight must be a Decimal, got {type(self.value).__name__}"
            )
        if not self.value.is_finite():
            raise ValidationError(f"Weight must be a finite number, got {self.value}")
        if self.value < Decimal("0"):
            raise ValidationError(f"Weight cannot be negative, got {self.value}")

    # --- Arithmetic helpers ---------------------------------------------------

    def __add__(self, other: Weight) -> Weight:
        return Weight(self.value + other.value)

    def __sub__(self, other: Weight) -> Weight:
        result = self.value - other.value
        if result < Decimal("0"):
            raise ValidationError("Weight subtraction would result in a negative amount")
        return Weight(result)

    def __lt__(self, other: Weight) -> bool:
        return self.value < other.value

    def __le__(self, other: Weight) -> bool:
        return self.value <= other.value

    def __gt__(self, other: Weight) -> bool:
        return self.value > other.value

    def __ge__(self, other: Weight) -> bool:
        return self.value >= other.value

    @property
    def is_zero(self) -> bool:
        return self.value == Decimal("0")

    def rounded(self) -> Decimal:
        """Two-decimal figure used in reports."""
        return self.value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)

    # --- Display --------------------------------------------------------------

    def __str__(self) -> str:
        return f"{self.value.normalize():f}"

    # --- Factory --------------------------------------------------------------

    @staticmethod
    def of(amount: Weight | str | float | int | Decimal) -> Weight:
        """Coerce user input to a Weight, rejecting anything non-numeric."""
        if isinstance(amount, Weight):
            return amount
        if isinstance(amount, bool) or amount is None:
            raise ValidationError(f"Invalid weight: {amount!r}")
        try:
            return Weight(Decimal(str(amount).strip()))
        except (InvalidOperation, ValueError) as exc:
            raise ValidationError(f"Invalid weight: {amount!r}") from exc

    @staticmethod
    def positive(amount: Weight | str | float | int | Decimal, what: str = "Weight") -> Weight:
        weight = Weight.of(amount)
        if weight.is_zero:
            raise ValidationError(f"{what} must be positive")
        return weight


ZERO = Weight(Decimal("0"))


@dataclass(frozen=True, order=True)
class StockKey:
    """Business identity of a stock record: which fabric, which color.

    The fabric name is the vendor/source fabric name the cutting floor
    refers to; it is only used to find or create a record; links between
    aggregates go through the record's generated id.
    """

    fabric_name: str
    color: str

    def __post_init__(self) -> None:
        if not self.fabric_name or not self.fabric_name.strip():
            raise ValidationError("Fabric name is required")
        if not self.color or not self.color.strip():
            raise ValidationError("Color is required")

    @staticmethod
    def of(fabric_name: str, color: str) -> StockKey:
        return StockKey((fabric_name or "").strip(), (color or "").strip())

    def __str__(self) -> str:
        return f"{self.fabric_name}/{self.color}"


def validate_hex_color(value: str) -> str:
    if not HEX_COLOR.match(value or ""):
        raise ValidationError(f"Invalid display color {value!r}, expected #RRGGBB")
    return value.lower()


def parse_date(value: str | date | None, what: str = "Date") -> date | None:
    """Read a calendar day given as ``YYYY-MM-DD``; blank means none."""
    if value is None or isinstance(value, date):
        return value
    value = value.strip()
    if not value:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError as exc:
        raise ValidationError(f"{what} must be YYYY-MM-DD, got {value!r}") from exc
