"""Cutting use cases under concurrent requests and failed batch saves."""

import threading
import time

import pytest

from fabric_ledger.application.complete_cutting import CompleteCuttingHandler
from fabric_ledger.application.dto import RoleSpec
from fabric_ledger.application.start_cutting import StartCuttingHandler
from fabric_ledger.domain.exceptions import DomainException, ValidationError
from fabric_ledger.domain.model.value_objects import StockKey, Weight
from fabric_ledger.domain.service.stock_ledger import FabricStockLedger, KeyedLocks
from tests.fakes import FakeCuttingRepository, FakeStockRepository

RED = StockKey("Cotton", "Red")


class _SlowCuttingRepository(FakeCuttingRepository):
    """Widens the gap between reading a batch and saving it."""

    def get_by_lot_no(self, lot_no):
        batch = super().get_by_lot_no(lot_no)
        time.sleep(0.05)
        return batch


class _FailingSaveCuttingRepository(FakeCuttingRepository):
    """Raises on the first ``failures`` saves, as a full disk would."""

    def __init__(self, failures: int = 1) -> None:
        super().__init__()
        self.failures = failures

    def save(self, batch):
        if self.failures:
            self.failures -= 1
            raise OSError("disk full")
        super().save(batch)


def _ledger(red: str = "100") -> tuple[FabricStockLedger, FakeStockRepository]:
    stock_repo = FakeStockRepository()
    ledger = FabricStockLedger(stock_repo, locks=KeyedLocks())
    ledger.intake("Cotton", "Red", red)
    return ledger, stock_repo


def _start(handler: StartCuttingHandler, lot_no: str = "L-1", planned: str = "40"):
    return handler.handle(
        lot_no=lot_no,
        pattern="Polo",
        fabric_name="Cotton",
        sizes=["M"],
        roles=[RoleSpec("1", "Red", planned)],
    )


def _run_together(*calls):
    """Run every call on its own thread, released at the same moment."""
    barrier = threading.Barrier(len(calls))
    results: list = [None] * len(calls)

    def run(index, call):
        barrier.wait()
        try:
            results[index] = call()
        except DomainException as exc:
            results[index] = exc

    threads = [threading.Thread(target=run, args=(i, c)) for i, c in enumerate(calls)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=10)
    return results


class TestConcurrentCutting:

    def test_same_lot_started_twice_reserves_once(self):
        ledger, stock_repo = _ledger()
        cutting_repo = _SlowCuttingRepository()
        locks = KeyedLocks()
        first = StartCuttingHandler(cutting_repo, ledger, locks=locks)
        second = StartCuttingHandler(cutting_repo, ledger, locks=locks)

        results = _run_together(lambda: _start(first), lambda: _start(second))

        failures = [r for r in results if isinstance(r, ValidationError)]
        assert len(failures) == 1
        assert "already exists" in str(failures[0])
        assert stock_repo.get_by_key(RED).quantity == Weight.of("60")

    def test_same_lot_completed_twice_returns_once(self):
        ledger, stock_repo = _ledger()
        cutting_repo = _SlowCuttingRepository()
        locks = KeyedLocks()
        _start(StartCuttingHandler(cutting_repo, ledger, locks=locks))
        complete = CompleteCuttingHandler(cutting_repo, ledger, locks=locks)

        results = _run_together(
            lambda: complete.handle("L-1", {"1": "10"}),
            lambda: complete.handle("L-1", {"1": "10"}),
        )

        failures = [r for r in results if isinstance(r, ValidationError)]
        assert len(failures) == 1
        # 100 in, 40 reserved, 30 returned once
        assert stock_repo.get_by_key(RED).quantity == Weight.of("90")

    def test_different_lots_never_oversell(self):
        ledger, stock_repo = _ledger()
        cutting_repo = FakeCuttingRepository()
        handler = StartCuttingHandler(cutting_repo, ledger, locks=KeyedLocks())

        results = _run_together(
            *[lambda lot=f"L-{n}": _start(handler, lot_no=lot, planned="30") for n in range(5)]
        )

        started = [r for r in results if not isinstance(r, DomainException)]
        assert len(started) == 3
        assert stock_repo.get_by_key(RED).quantity == Weight.of("10")
        assert len(cutting_repo.list_all()) == 3


class TestFailedBatchSave:

    def test_restart_after_failed_save_does_not_reserve_again(self):
        ledger, stock_repo = _ledger()
        cutting_repo = _FailingSaveCuttingRepository(failures=1)
        handler = StartCuttingHandler(cutting_repo, ledger, locks=KeyedLocks())

        with pytest.raises(OSError):
            _start(handler)
        assert cutting_repo.get_by_lot_no("L-1") is None
        assert stock_repo.get_by_key(RED).quantity == Weight.of("60")

        dto = _start(handler)

        assert dto.reserved
        assert stock_repo.get_by_key(RED).quantity == Weight.of("60")
        assert cutting_repo.get_by_lot_no("L-1").roles[0].stock_id == stock_repo.get_by_key(RED).id

    def test_recomplete_after_failed_save_does_not_return_again(self):
        ledger, stock_repo = _ledger()
        cutting_repo = _FailingSaveCuttingRepository(failures=0)
        _start(StartCuttingHandler(cutting_repo, ledger, locks=KeyedLocks()))
        handler = CompleteCuttingHandler(cutting_repo, ledger, locks=KeyedLocks())

        cutting_repo.failures = 1
        with pytest.raises(OSError):
            handler.handle("L-1", {"1": "10"})
        assert stock_repo.get_by_key(RED).quantity == Weight.of("90")
        assert not cutting_repo.get_by_lot_no("L-1").reconciled

        dto = handler.handle("L-1", {"1": "10"})

        assert dto.cutting.reconciled
        assert [a.action for a in dto.adjustments] == ["ALREADY_APPLIED"]
        assert stock_repo.get_by_key(RED).quantity == Weight.of("90")

    def test_marker_does_not_block_a_different_lot(self):
        ledger, stock_repo = _ledger()
        cutting_repo = FakeCuttingRepository()
        handler = StartCuttingHandler(cutting_repo, ledger, locks=KeyedLocks())

        _start(handler, lot_no="L-1", planned="10")
        _start(handler, lot_no="L-2", planned="10")

        red = stock_repo.get_by_key(RED)
        assert red.quantity == Weight.of("80")
        assert red.applied_ops == ["L-1:reserve", "L-2:reserve"]
