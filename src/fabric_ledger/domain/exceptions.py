"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI and HTTP layers can catch them uniformly and display
user-friendly messages.
"""

from __future__ import annotations

from decimal import Decimal


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class InsufficientStockError(DomainException):
    """A reservation asked for more fabric than is on hand.

    Carries the offending key and both amounts so callers can show
    exactly which color blocked the cutting batch.
    """

    def __init__(
        self,
        fabric_name: str,
        color: str,
        available: Decimal,
        requested: Decimal,
    ) -> None:
        self.fabric_name = fabric_name
        self.color = color
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient fabric stock for {fabric_name} in color {color} "
            f"(available {available}, requested {requested})"
        )


class ConcurrencyError(DomainException):
    """A stock record changed underneath the operation (stale version)."""
