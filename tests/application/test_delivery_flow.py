"""Integration tests for the delivery use cases."""

import pytest

from fabric_ledger.application.create_delivery import CreateDeliveryHandler
from fabric_ledger.application.dto import DeliveryItemSpec, DeliverySpec
from fabric_ledger.application.show_delivery import (
    DeliveryReportHandler,
    ListDeliveriesHandler,
    ShowDeliveryHandler,
)
from fabric_ledger.application.update_delivery import (
    DeleteDeliveryHandler,
    UpdateDeliveryHandler,
    UpdateDeliveryStatusHandler,
)
from fabric_ledger.domain.exceptions import EntityNotFoundError, ValidationError
from fabric_ledger.domain.model.cutting import CuttingBatch, Role
from fabric_ledger.domain.model.inline import ColorBundle, InlineLoad
from fabric_ledger.domain.model.value_objects import Weight
from fabric_ledger.domain.service.stock_ledger import KeyedLocks
from tests.fakes import FakeDeliveryRepository, FakeInlineRepository


def _item(quantity=10, load_id=None) -> DeliveryItemSpec:
    return DeliveryItemSpec("L-1", "Polo", "M", "Red", quantity, load_id)


def _spec(number="D-1", customer="Apex Retail", day="2026-03-01", items=None) -> DeliverySpec:
    return DeliverySpec(
        delivery_number=number,
        customer_name=customer,
        items=items or [_item()],
        delivery_date=day,
    )


def _setup(loads: list[InlineLoad] | None = None):
    delivery_repo = FakeDeliveryRepository()
    handler = CreateDeliveryHandler(
        delivery_repo, FakeInlineRepository(loads), locks=KeyedLocks()
    )
    return delivery_repo, handler


def _load(load_id: str) -> InlineLoad:
    batch = CuttingBatch.create(
        lot_no="L-1", pattern="Polo", fabric_name="Cotton", sizes=["M"],
        roles=[Role("1", "Red", Weight.of("20"))],
    )
    batch.mark_reserved({})
    batch.record_actuals({"1": Weight.of("20")})
    return InlineLoad.create(load_id, batch, "M", {"Red": ColorBundle(20, 2)})


def _processed_load(load_id: str = "LD-1") -> InlineLoad:
    load = _load(load_id)
    load.complete("Sita", {"Red": 20})
    return load


class TestCreateDelivery:

    def test_records_delivery(self):
        delivery_repo, handler = _setup()

        dto = handler.handle(_spec(items=[_item(10), _item(5)]))

        assert dto.id == 1
        assert dto.status == "pending"
        assert dto.total_quantity == 15
        assert dto.delivery_date == "2026-03-01"
        assert delivery_repo.get_by_number("D-1") is not None

    def test_duplicate_number_rejected(self):
        _, handler = _setup()
        handler.handle(_spec())

        with pytest.raises(ValidationError, match="Delivery number already exists"):
            handler.handle(_spec(customer="Someone Else"))

    def test_item_may_ship_processed_output(self):
        _, handler = _setup([_processed_load()])

        dto = handler.handle(_spec(items=[_item(load_id="LD-1")]))

        assert dto.items[0]["load_id"] == "LD-1"

    def test_unprocessed_load_rejected(self):
        delivery_repo, handler = _setup([_load("LD-2")])

        with pytest.raises(EntityNotFoundError, match="Process output for load LD-2 not found"):
            handler.handle(_spec(items=[_item(load_id="LD-2")]))
        assert delivery_repo.list_all() == []

    def test_bad_date_rejected(self):
        _, handler = _setup()
        with pytest.raises(ValidationError, match="YYYY-MM-DD"):
            handler.handle(_spec(day="01/03/2026"))

    def test_bad_quantity_rejected(self):
        _, handler = _setup()
        with pytest.raises(ValidationError, match="Invalid quantity"):
            handler.handle(_spec(items=[_item(quantity="many")]))


class TestChangeDelivery:

    def test_status_and_details(self):
        delivery_repo, handler = _setup()
        handler.handle(_spec())

        UpdateDeliveryStatusHandler(delivery_repo).handle(1, "delivered")
        dto = UpdateDeliveryHandler(delivery_repo).handle(1, remarks="left at gate")

        assert dto.status == "delivered"
        assert dto.remarks == "left at gate"
        assert dto.customer_name == "Apex Retail"

    def test_unknown_delivery(self):
        delivery_repo, _ = _setup()
        with pytest.raises(EntityNotFoundError, match="Delivery not found"):
            UpdateDeliveryStatusHandler(delivery_repo).handle(5, "delivered")
        with pytest.raises(EntityNotFoundError, match="Delivery not found"):
            DeleteDeliveryHandler(delivery_repo).handle(5)

    def test_delete(self):
        delivery_repo, handler = _setup()
        handler.handle(_spec())

        DeleteDeliveryHandler(delivery_repo).handle(1)

        assert delivery_repo.list_all() == []


class TestDeliveryQueries:

    def test_list_newest_first_with_filters(self):
        delivery_repo, handler = _setup()
        handler.handle(_spec("D-1", day="2026-03-01"))
        handler.handle(_spec("D-2", customer="Zen Mart", day="2026-03-05"))
        handler.handle(_spec("D-3", day="2026-03-03"))

        everything = ListDeliveriesHandler(delivery_repo).handle()
        apex = ListDeliveriesHandler(delivery_repo).handle(customer="apex")
        early = ListDeliveriesHandler(delivery_repo).handle(end_date="2026-03-02")

        assert [d.delivery_number for d in everything] == ["D-2", "D-3", "D-1"]
        assert [d.delivery_number for d in apex] == ["D-3", "D-1"]
        assert [d.delivery_number for d in early] == ["D-1"]

    def test_report_counts_statuses(self):
        delivery_repo, handler = _setup()
        handler.handle(_spec("D-1", items=[_item(10)]))
        handler.handle(_spec("D-2", items=[_item(4)]))
        UpdateDeliveryStatusHandler(delivery_repo).handle(2, "cancelled")

        report = DeliveryReportHandler(delivery_repo).handle()

        assert report.total_deliveries == 2
        assert report.total_quantity == 14
        assert report.status_counts == {"pending": 1, "delivered": 0, "cancelled": 1}

    def test_show(self):
        delivery_repo, handler = _setup()
        handler.handle(_spec())
        assert ShowDeliveryHandler(delivery_repo).handle(1).delivery_number == "D-1"
