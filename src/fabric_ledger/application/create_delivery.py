"""Application service: Create Delivery use case.

Records finished pieces going out to a customer. Delivery numbers are
unique, and an item that names an inline load must point at a load
whose process output has been recorded.
"""

from __future__ import annotations

import logging

from fabric_ledger.application.dto import (
    DeliveryDTO,
    DeliveryItemSpec,
    DeliverySpec,
    delivery_to_dto,
)
from fabric_ledger.domain.exceptions import EntityNotFoundError, ValidationError
from fabric_ledger.domain.model.delivery import Delivery, DeliveryItem
from fabric_ledger.domain.model.value_objects import parse_date
from fabric_ledger.domain.repository.delivery_repository import DeliveryRepository
from fabric_ledger.domain.repository.inline_repository import InlineRepository
from fabric_ledger.domain.service.keyed_locks import DELIVERY_LOCKS, KeyedLocks

logger = logging.getLogger(__name__)


class CreateDeliveryHandler:

    def __init__(
        self,
        delivery_repo: DeliveryRepository,
        inline_repo: InlineRepository,
        locks: KeyedLocks | None = None,
    ) -> None:
        self._delivery_repo = delivery_repo
        self._inline_repo = inline_repo
        self._locks = locks or DELIVERY_LOCKS

    def handle(self, spec: DeliverySpec) -> DeliveryDTO:
        items = to_items(spec.items)
        for item in items:
            if item.load_id:
                self._check_output(item.load_id)

        delivery = Delivery.create(
            delivery_number=spec.delivery_number,
            customer_name=spec.customer_name,
            items=items,
            delivery_date=parse_date(spec.delivery_date, "Delivery date"),
            remarks=spec.remarks,
            created_by=spec.created_by,
        )

        with self._locks.hold([delivery.delivery_number]):
            if self._delivery_repo.get_by_number(delivery.delivery_number) is not None:
                raise ValidationError("Delivery number already exists.")
            self._delivery_repo.save(delivery)

        logger.info(
            "Delivery %s for %s: %d piece(s)",
            delivery.delivery_number, delivery.customer_name, delivery.total_quantity,
        )
        return delivery_to_dto(delivery)

    def _check_output(self, load_id: str) -> None:
        load = self._inline_repo.get_by_load_id(load_id)
        if load is None or load.output is None:
            raise EntityNotFoundError(f"Process output for load {load_id} not found.")


def to_items(specs: list[DeliveryItemSpec]) -> list[DeliveryItem]:
    items: list[DeliveryItem] = []
    for spec in specs:
        try:
            quantity = int(spec.quantity)
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid quantity: {spec.quantity!r}")
        items.append(
            DeliveryItem(
                lot_no=(spec.lot_no or "").strip(),
                pattern=(spec.pattern or "").strip(),
                size=(spec.size or "").strip(),
                color=(spec.color or "").strip(),
                quantity=quantity,
                load_id=(spec.load_id or "").strip() or None,
            )
        )
    return items
