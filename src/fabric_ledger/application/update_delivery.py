"""Application service: Update / Delete Delivery use cases."""

from __future__ import annotations

from fabric_ledger.application.create_delivery import to_items
from fabric_ledger.application.dto import DeliveryDTO, DeliveryItemSpec, delivery_to_dto
from fabric_ledger.domain.exceptions import EntityNotFoundError
from fabric_ledger.domain.model.delivery import Delivery, DeliveryStatus
from fabric_ledger.domain.model.value_objects import parse_date
from fabric_ledger.domain.repository.delivery_repository import DeliveryRepository


def _load(repo: DeliveryRepository, delivery_id: int) -> Delivery:
    delivery = repo.get_by_id(delivery_id)
    if delivery is None:
        raise EntityNotFoundError("Delivery not found.")
    return delivery


class UpdateDeliveryStatusHandler:

    def __init__(self, delivery_repo: DeliveryRepository) -> None:
        self._delivery_repo = delivery_repo

    def handle(self, delivery_id: int, status: str) -> DeliveryDTO:
        new_status = DeliveryStatus.parse(status)
        delivery = _load(self._delivery_repo, delivery_id)
        delivery.set_status(new_status)
        self._delivery_repo.save(delivery)
        return delivery_to_dto(delivery)


class UpdateDeliveryHandler:

    def __init__(self, delivery_repo: DeliveryRepository) -> None:
        self._delivery_repo = delivery_repo

    def handle(
        self,
        delivery_id: int,
        customer_name: str | None = None,
        delivery_date: str | None = None,
        items: list[DeliveryItemSpec] | None = None,
        remarks: str | None = None,
    ) -> DeliveryDTO:
        """Change the given fields; ``None`` leaves a field as it is."""
        delivery = _load(self._delivery_repo, delivery_id)
        delivery.update(
            customer_name=customer_name,
            delivery_date=parse_date(delivery_date, "Delivery date"),
            items=to_items(items) if items is not None else None,
            remarks=remarks,
        )
        self._delivery_repo.save(delivery)
        return delivery_to_dto(delivery)


class DeleteDeliveryHandler:

    def __init__(self, delivery_repo: DeliveryRepository) -> None:
        self._delivery_repo = delivery_repo

    def handle(self, delivery_id: int) -> None:
        if not self._delivery_repo.delete(delivery_id):
            raise EntityNotFoundError("Delivery not found.")
