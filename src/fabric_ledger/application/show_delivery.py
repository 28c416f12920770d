"""Application service: Show / List / Report Deliveries use cases (queries)."""

from __future__ import annotations

from fabric_ledger.application.dto import DeliveryDTO, DeliveryReportDTO, delivery_to_dto
from fabric_ledger.domain.exceptions import EntityNotFoundError
from fabric_ledger.domain.model.delivery import Delivery, DeliveryStatus
from fabric_ledger.domain.model.value_objects import parse_date
from fabric_ledger.domain.repository.delivery_repository import DeliveryRepository


class ShowDeliveryHandler:

    def __init__(self, delivery_repo: DeliveryRepository) -> None:
        self._delivery_repo = delivery_repo

    def handle(self, delivery_id: int) -> DeliveryDTO:
        delivery = self._delivery_repo.get_by_id(delivery_id)
        if delivery is None:
            raise EntityNotFoundError("Delivery not found.")
        return delivery_to_dto(delivery)


class ListDeliveriesHandler:

    def __init__(self, delivery_repo: DeliveryRepository) -> None:
        self._delivery_repo = delivery_repo

    def handle(
        self,
        status: str | None = None,
        customer: str | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
    ) -> list[DeliveryDTO]:
        """Newest delivery date first."""
        return [
            delivery_to_dto(d)
            for d in _filtered(self._delivery_repo, status, customer, start_date, end_date)
        ]


class DeliveryReportHandler:

    def __init__(self, delivery_repo: DeliveryRepository) -> None:
        self._delivery_repo = delivery_repo

    def handle(
        self,
        status: str | None = None,
        customer: str | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
    ) -> DeliveryReportDTO:
        deliveries = _filtered(self._delivery_repo, status, customer, start_date, end_date)
        counts = {s.value: 0 for s in DeliveryStatus}
        for delivery in deliveries:
            counts[delivery.status.value] += 1
        return DeliveryReportDTO(
            total_deliveries=len(deliveries),
            total_quantity=sum(d.total_quantity for d in deliveries),
            status_counts=counts,
            deliveries=[
                {
                    "id": d.id,
                    "delivery_number": d.delivery_number,
                    "customer_name": d.customer_name,
                    "delivery_date": d.delivery_date.isoformat(),
                    "status": d.status.value,
                    "total_quantity": d.total_quantity,
                    "item_count": len(d.items),
                }
                for d in deliveries
            ],
        )


def _filtered(
    repo: DeliveryRepository,
    status: str | None,
    customer: str | None,
    start_date: str | None,
    end_date: str | None,
) -> list[Delivery]:
    wanted = DeliveryStatus.parse(status) if status else None
    start = parse_date(start_date, "Start date")
    end = parse_date(end_date, "End date")
    deliveries = [
        d for d in repo.list_all()
        if d.matches(status=wanted, customer=customer, start=start, end=end)
    ]
    deliveries.sort(key=lambda d: (d.delivery_date, d.created_at), reverse=True)
    return deliveries
