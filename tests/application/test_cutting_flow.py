"""Integration tests for starting and completing cutting batches."""

import pytest

from fabric_ledger.application.complete_cutting import CompleteCuttingHandler
from fabric_ledger.application.dto import RoleSpec
from fabric_ledger.application.show_cutting import ListCuttingsHandler, ShowCuttingHandler
from fabric_ledger.application.start_cutting import StartCuttingHandler
from fabric_ledger.domain.exceptions import (
    EntityNotFoundError,
    InsufficientStockError,
    ValidationError,
)
from fabric_ledger.domain.model.value_objects import StockKey, Weight
from fabric_ledger.domain.service.stock_ledger import FabricStockLedger, KeyedLocks
from tests.fakes import FakeCuttingRepository, FakeStockRepository

RED = StockKey("Cotton", "Red")
BLUE = StockKey("Cotton", "Blue")


def _setup(red: str = "100", blue: str = "50"):
    stock_repo = FakeStockRepository()
    cutting_repo = FakeCuttingRepository()
    ledger = FabricStockLedger(stock_repo, locks=KeyedLocks())
    ledger.intake("Cotton", "Red", red)
    ledger.intake("Cotton", "Blue", blue)
    return stock_repo, cutting_repo, ledger


def _start(cutting_repo, ledger, lot_no="L-1", roles=None):
    roles = roles or [RoleSpec("1", "Red", "40"), RoleSpec("2", "Blue", "10")]
    return StartCuttingHandler(cutting_repo, ledger).handle(
        lot_no=lot_no,
        pattern="Polo",
        fabric_name="Cotton",
        sizes=["S", "M"],
        roles=roles,
    )


class TestStartCutting:

    def test_reserves_and_saves_batch(self):
        stock_repo, cutting_repo, ledger = _setup()

        dto = _start(cutting_repo, ledger)

        assert dto.reserved
        assert not dto.reconciled
        assert dto.planned_weight == "50"
        assert stock_repo.get_by_key(RED).quantity == Weight.of("60")
        assert stock_repo.get_by_key(BLUE).quantity == Weight.of("40")
        batch = cutting_repo.get_by_lot_no("L-1")
        assert batch.roles[0].stock_id == stock_repo.get_by_key(RED).id

    def test_insufficient_stock_saves_nothing(self):
        stock_repo, cutting_repo, ledger = _setup(blue="5")

        with pytest.raises(InsufficientStockError):
            _start(cutting_repo, ledger)

        assert cutting_repo.get_by_lot_no("L-1") is None
        assert stock_repo.get_by_key(RED).quantity == Weight.of("100")

    def test_duplicate_lot_rejected(self):
        stock_repo, cutting_repo, ledger = _setup()
        _start(cutting_repo, ledger)

        with pytest.raises(ValidationError, match="Lot L-1 already exists"):
            _start(cutting_repo, ledger)

        assert stock_repo.get_by_key(RED).quantity == Weight.of("60")

    def test_invalid_planned_weight(self):
        _, cutting_repo, ledger = _setup()
        with pytest.raises(ValidationError, match="Invalid weight"):
            _start(cutting_repo, ledger, roles=[RoleSpec("1", "Red", "lots")])


class TestCompleteCutting:

    def test_returns_unused_and_consumes_extra(self):
        stock_repo, cutting_repo, ledger = _setup()
        _start(cutting_repo, ledger)

        dto = CompleteCuttingHandler(cutting_repo, ledger).handle(
            "L-1", actual_layers={"1": "35", "2": "12"}
        )

        assert stock_repo.get_by_key(RED).quantity == Weight.of("65")
        assert stock_repo.get_by_key(BLUE).quantity == Weight.of("38")
        assert dto.cutting.reconciled
        assert dto.cutting.total_pieces == "94"
        assert [a.action for a in dto.adjustments] == ["RETURNED", "CONSUMED"]
        assert dto.shortfalls == []

    def test_shortfall_reported_not_raised(self):
        stock_repo, cutting_repo, ledger = _setup(red="10")
        _start(cutting_repo, ledger, roles=[RoleSpec("1", "Red", "10")])

        dto = CompleteCuttingHandler(cutting_repo, ledger).handle("L-1", actual_layers={"1": "15"})

        assert len(dto.shortfalls) == 1
        assert dto.shortfalls[0].shortfall == "5"
        red = stock_repo.get_by_key(RED)
        assert red.quantity.is_zero
        assert red.retired

    def test_completing_twice_rejected(self):
        stock_repo, cutting_repo, ledger = _setup()
        _start(cutting_repo, ledger)
        handler = CompleteCuttingHandler(cutting_repo, ledger)
        handler.handle("L-1", actual_layers={"1": "30", "2": "10"})

        with pytest.raises(ValidationError, match="already been completed"):
            handler.handle("L-1", actual_layers={"1": "30", "2": "10"})

        assert stock_repo.get_by_key(RED).quantity == Weight.of("70")

    def test_unknown_lot(self):
        _, cutting_repo, ledger = _setup()
        with pytest.raises(EntityNotFoundError, match="Cutting record for lot L-9 not found"):
            CompleteCuttingHandler(cutting_repo, ledger).handle("L-9", actual_layers={})


class TestCuttingQueries:

    def test_show_and_list(self):
        _, cutting_repo, ledger = _setup()
        _start(cutting_repo, ledger, lot_no="L-1", roles=[RoleSpec("1", "Red", "10")])
        _start(cutting_repo, ledger, lot_no="L-2", roles=[RoleSpec("1", "Blue", "10")])

        shown = ShowCuttingHandler(cutting_repo).handle("L-2")
        listed = ListCuttingsHandler(cutting_repo).handle()

        assert shown.roles[0].color == "Blue"
        assert {b.lot_no for b in listed} == {"L-1", "L-2"}

    def test_show_unknown_lot(self):
        _, cutting_repo, _ = _setup()
        with pytest.raises(EntityNotFoundError):
            ShowCuttingHandler(cutting_repo).handle("nope")
