"""Unit tests for the FabricStockLedger domain service."""

import logging
import threading
import time

import pytest

from fabric_ledger.domain.exceptions import (
    ConcurrencyError,
    EntityNotFoundError,
    InsufficientStockError,
    ValidationError,
)
from fabric_ledger.domain.model.cutting import CuttingBatch, Role
from fabric_ledger.domain.model.value_objects import StockKey, Weight
from fabric_ledger.domain.service.stock_ledger import (
    AdjustmentKind,
    FabricStockLedger,
    IntakeLine,
    KeyedLocks,
    Withdrawal,
    reconcile_op,
    reserve_op,
)
from tests.fakes import FakeStockRepository

RED = StockKey("Cotton", "Red")
BLUE = StockKey("Cotton", "Blue")


def _ledger(repo: FakeStockRepository | None = None) -> tuple[FabricStockLedger, FakeStockRepository]:
    repo = repo or FakeStockRepository()
    return FabricStockLedger(repo, locks=KeyedLocks()), repo


def _batch(*roles: tuple[str, str, str], lot_no: str = "L-1") -> CuttingBatch:
    """Create a batch with (role_no, color, planned_weight) tuples."""
    return CuttingBatch.create(
        lot_no=lot_no,
        pattern="Polo",
        fabric_name="Cotton",
        sizes=["M"],
        roles=[Role(no, color, Weight.of(w)) for no, color, w in roles],
    )


def _reserve(ledger: FabricStockLedger, batch: CuttingBatch) -> None:
    reserved = ledger.reserve(batch.fabric_name, batch.roles)
    batch.mark_reserved({key: record.id for key, record in reserved.items()})


class TestIntake:

    def test_first_intake_opens_record(self):
        ledger, repo = _ledger()
        record = ledger.intake("Cotton", "Red", "25", display_color_hint="#FF0000")

        stored = repo.get_by_key(RED)
        assert stored.id == record.id
        assert stored.quantity == Weight.of("25")
        assert stored.standard_unit_weight == Weight.of("25")
        assert stored.display_color == "#ff0000"

    def test_intakes_sum_in_any_order(self):
        a, repo_a = _ledger()
        b, repo_b = _ledger()
        for w in ("10.5", "3", "0.25"):
            a.intake("Cotton", "Red", w)
        for w in ("0.25", "10.5", "3"):
            b.intake("Cotton", "Red", w)

        assert repo_a.get_by_key(RED).quantity == Weight.of("13.75")
        assert repo_b.get_by_key(RED).quantity == repo_a.get_by_key(RED).quantity

    def test_first_hint_wins(self):
        ledger, repo = _ledger()
        ledger.intake("Cotton", "Red", "10", standard_weight_hint="2", display_color_hint="#111111")
        ledger.intake("Cotton", "Red", "10", standard_weight_hint="9", display_color_hint="#222222")

        stored = repo.get_by_key(RED)
        assert stored.standard_unit_weight == Weight.of("2")
        assert stored.display_color == "#111111"

    @pytest.mark.parametrize("weight", ["0", "-4", "abc", None])
    def test_bad_weight_rejected_without_mutation(self, weight):
        ledger, repo = _ledger()
        ledger.intake("Cotton", "Red", "10")

        with pytest.raises(ValidationError):
            ledger.intake("Cotton", "Red", weight)

        assert repo.get_by_key(RED).quantity == Weight.of("10")
        assert repo.writes == 1

    def test_intake_into_retired_record_reinstates_it(self):
        ledger, repo = _ledger()
        ledger.intake("Cotton", "Red", "10")
        ledger.reserve("Cotton", [Role("1", "Red", Weight.of("10"))])
        assert repo.get_by_key(RED).retired

        ledger.intake("Cotton", "Red", "4")

        stored = repo.get_by_key(RED)
        assert stored.quantity == Weight.of("4")
        assert not stored.retired

    def test_tags_new_record_with_vendor(self):
        ledger, repo = _ledger()
        ledger.intake("Cotton", "Red", "10", vendor_id=7)
        assert repo.get_by_key(RED).vendor_id == 7

    def test_intake_logs(self, caplog):
        ledger, _ = _ledger()
        with caplog.at_level(logging.INFO, logger="fabric_ledger.domain.service.stock_ledger"):
            ledger.intake("Cotton", "Red", "10")
        assert "Intake of 10 into Cotton/Red" in caplog.text


class TestReserve:

    def test_reserves_every_role(self):
        ledger, repo = _ledger()
        ledger.intake("Cotton", "Red", "100")
        ledger.intake("Cotton", "Blue", "50")

        reserved = ledger.reserve("Cotton", [
            Role("1", "Red", Weight.of("40")),
            Role("2", "Blue", Weight.of("5")),
        ])

        assert set(reserved) == {RED, BLUE}
        assert repo.get_by_key(RED).quantity == Weight.of("60")
        assert repo.get_by_key(BLUE).quantity == Weight.of("45")

    def test_all_touched_records_committed_in_one_write(self):
        ledger, repo = _ledger()
        ledger.intake("Cotton", "Red", "100")
        ledger.intake("Cotton", "Blue", "50")
        writes_before = repo.writes

        ledger.reserve("Cotton", [
            Role("1", "Red", Weight.of("40")),
            Role("2", "Blue", Weight.of("5")),
        ])

        assert repo.writes == writes_before + 1

    def test_reserving_everything_retires_record(self):
        ledger, repo = _ledger()
        ledger.intake("Cotton", "Red", "10")

        ledger.reserve("Cotton", [Role("1", "Red", Weight.of("10"))])

        stored = repo.get_by_key(RED)
        assert stored.quantity.is_zero
        assert stored.retired
        assert stored.retired_at is not None

    def test_no_partial_reservation_on_failure(self):
        """If Red is fine but Blue is short, Red must not be touched."""
        ledger, repo = _ledger()
        ledger.intake("Cotton", "Red", "100")
        ledger.intake("Cotton", "Blue", "3")

        with pytest.raises(InsufficientStockError) as exc_info:
            ledger.reserve("Cotton", [
                Role("1", "Red", Weight.of("10")),
                Role("2", "Blue", Weight.of("5")),
            ])

        err = exc_info.value
        assert err.color == "Blue"
        assert str(err.available) == "3"
        assert str(err.requested) == "5"
        assert repo.get_by_key(RED).quantity == Weight.of("100")
        assert repo.get_by_key(BLUE).quantity == Weight.of("3")

    def test_duplicate_colors_checked_against_their_sum(self):
        ledger, repo = _ledger()
        ledger.intake("Cotton", "Red", "15")

        with pytest.raises(InsufficientStockError, match="requested 20"):
            ledger.reserve("Cotton", [
                Role("1", "Red", Weight.of("10")),
                Role("2", "Red", Weight.of("10")),
            ])
        assert repo.get_by_key(RED).quantity == Weight.of("15")

    def test_duplicate_colors_take_their_sum(self):
        ledger, repo = _ledger()
        ledger.intake("Cotton", "Red", "25")

        ledger.reserve("Cotton", [
            Role("1", "Red", Weight.of("10")),
            Role("2", "Red", Weight.of("10")),
        ])
        assert repo.get_by_key(RED).quantity == Weight.of("5")

    def test_missing_record_rejected(self):
        ledger, _ = _ledger()
        with pytest.raises(EntityNotFoundError, match="No fabric stock found for Cotton and color Red"):
            ledger.reserve("Cotton", [Role("1", "Red", Weight.of("1"))])

    def test_empty_roles_rejected(self):
        ledger, _ = _ledger()
        with pytest.raises(ValidationError, match="Roles data is required"):
            ledger.reserve("Cotton", [])

    def test_zero_planned_weight_rejected(self):
        ledger, repo = _ledger()
        ledger.intake("Cotton", "Red", "10")
        with pytest.raises(ValidationError, match="must be positive"):
            ledger.reserve("Cotton", [Role("1", "Red", Weight.of("0"))])
        assert repo.get_by_key(RED).quantity == Weight.of("10")


class TestReconcile:

    def test_exact_usage_changes_nothing(self):
        ledger, repo = _ledger()
        ledger.intake("Cotton", "Red", "100")
        batch = _batch(("1", "Red", "40"))
        _reserve(ledger, batch)

        result = ledger.reconcile(batch, {"1": "40"})

        assert repo.get_by_key(RED).quantity == Weight.of("60")
        assert not repo.get_by_key(RED).retired
        assert result.adjustments[0].kind is AdjustmentKind.UNCHANGED
        assert batch.reconciled

    def test_extra_usage_beyond_stock_is_a_shortfall(self, caplog):
        ledger, repo = _ledger()
        ledger.intake("Cotton", "Red", "10")
        batch = _batch(("1", "Red", "10"))
        _reserve(ledger, batch)

        with caplog.at_level(logging.WARNING):
            result = ledger.reconcile(batch, {"1": "15"})

        stored = repo.get_by_key(RED)
        assert stored.quantity.is_zero
        assert stored.retired
        assert result.has_shortfall
        shortfall = result.shortfalls[0]
        assert shortfall.shortfall == Weight.of("5")
        assert shortfall.moved.is_zero
        assert "shortfall 5" in caplog.text

    def test_extra_usage_partly_covered(self):
        ledger, repo = _ledger()
        ledger.intake("Cotton", "Red", "12")
        batch = _batch(("1", "Red", "10"))
        _reserve(ledger, batch)

        result = ledger.reconcile(batch, {"1": "15"})

        assert repo.get_by_key(RED).quantity.is_zero
        adj = result.adjustments[0]
        assert adj.kind is AdjustmentKind.SHORTFALL
        assert adj.moved == Weight.of("2")
        assert adj.shortfall == Weight.of("3")

    def test_extra_usage_covered_by_stock(self):
        ledger, repo = _ledger()
        ledger.intake("Cotton", "Red", "100")
        batch = _batch(("1", "Red", "40"))
        _reserve(ledger, batch)

        result = ledger.reconcile(batch, {"1": "45"})

        assert repo.get_by_key(RED).quantity == Weight.of("55")
        assert result.adjustments[0].kind is AdjustmentKind.CONSUMED
        assert not result.has_shortfall

    def test_unused_fabric_returns_and_unretires(self):
        ledger, repo = _ledger()
        ledger.intake("Cotton", "Red", "50")
        batch = _batch(("1", "Red", "50"))
        _reserve(ledger, batch)
        assert repo.get_by_key(RED).retired

        result = ledger.reconcile(batch, {"1": "30"})

        stored = repo.get_by_key(RED)
        assert stored.quantity == Weight.of("20")
        assert not stored.retired
        assert stored.retired_at is None
        assert result.adjustments[0].kind is AdjustmentKind.RETURNED
        assert result.adjustments[0].moved == Weight.of("20")

    def test_return_to_unknown_record_creates_it(self):
        ledger, repo = _ledger()
        batch = _batch(("1", "Red", "10"))
        batch.mark_reserved({})

        ledger.reconcile(batch, {"1": "4"})

        stored = repo.get_by_key(RED)
        assert stored is not None
        assert stored.quantity == Weight.of("6")
        assert not stored.retired

    def test_second_reconcile_rejected_without_mutation(self):
        ledger, repo = _ledger()
        ledger.intake("Cotton", "Red", "50")
        batch = _batch(("1", "Red", "50"))
        _reserve(ledger, batch)
        ledger.reconcile(batch, {"1": "30"})

        with pytest.raises(ValidationError, match="already been completed"):
            ledger.reconcile(batch, {"1": "30"})

        assert repo.get_by_key(RED).quantity == Weight.of("20")

    def test_never_reserved_batch_rejected(self):
        ledger, _ = _ledger()
        with pytest.raises(ValidationError, match="never reserved"):
            ledger.reconcile(_batch(("1", "Red", "10")), {"1": "10"})

    def test_missing_or_unknown_roles_rejected(self):
        ledger, repo = _ledger()
        ledger.intake("Cotton", "Red", "50")
        ledger.intake("Cotton", "Blue", "50")
        batch = _batch(("1", "Red", "10"), ("2", "Blue", "10"))
        _reserve(ledger, batch)

        with pytest.raises(ValidationError, match="Missing actual layers"):
            ledger.reconcile(batch, {"1": "5"})
        with pytest.raises(ValidationError, match="Unknown role number"):
            ledger.reconcile(batch, {"1": "5", "2": "5", "3": "5"})

        assert repo.get_by_key(RED).quantity == Weight.of("40")
        assert not batch.reconciled

    def test_negative_actual_rejected(self):
        ledger, repo = _ledger()
        ledger.intake("Cotton", "Red", "50")
        batch = _batch(("1", "Red", "10"))
        _reserve(ledger, batch)

        with pytest.raises(ValidationError, match="cannot be negative"):
            ledger.reconcile(batch, {"1": "-2"})
        assert repo.get_by_key(RED).quantity == Weight.of("40")

    def test_roles_sharing_a_color_adjust_one_record(self):
        ledger, repo = _ledger()
        ledger.intake("Cotton", "Red", "30")
        batch = _batch(("1", "Red", "10"), ("2", "Red", "10"))
        _reserve(ledger, batch)

        ledger.reconcile(batch, {"1": "7", "2": "12"})

        assert repo.get_by_key(RED).quantity == Weight.of("11")

    def test_follows_stable_id_after_rename(self):
        ledger, repo = _ledger()
        ledger.intake("Cotton", "Red", "50")
        batch = _batch(("1", "Red", "20"))
        _reserve(ledger, batch)

        # Someone renames the fabric on the stock record after reservation
        record = repo.get_by_key(RED)
        record.fabric_name = "Cotton Jersey"
        repo.save(record)

        ledger.reconcile(batch, {"1": "15"})

        assert repo.get_by_key(RED) is None
        renamed = repo.get_by_key(StockKey("Cotton Jersey", "Red"))
        assert renamed.quantity == Weight.of("35")


class _FlakyStockRepository(FakeStockRepository):
    """Fails the first ``failures`` writes as if another writer got there first."""

    def __init__(self, failures: int) -> None:
        super().__init__()
        self.failures = failures

    def save_all(self, records):
        if self.failures:
            self.failures -= 1
            raise ConcurrencyError("stale")
        super().save_all(records)


class TestRetry:

    def test_conflict_is_retried(self):
        repo = _FlakyStockRepository(failures=2)
        ledger = FabricStockLedger(repo, locks=KeyedLocks(), max_retries=3)

        ledger.intake("Cotton", "Red", "10")

        assert repo.get_by_key(RED).quantity == Weight.of("10")

    def test_gives_up_after_max_retries(self):
        repo = _FlakyStockRepository(failures=5)
        ledger = FabricStockLedger(repo, locks=KeyedLocks(), max_retries=2)

        with pytest.raises(ConcurrencyError):
            ledger.intake("Cotton", "Red", "10")
        assert repo.get_by_key(RED) is None

    def test_stale_version_detected_by_store(self):
        ledger, repo = _ledger()
        ledger.intake("Cotton", "Red", "10")
        first = repo.get_by_key(RED)
        second = repo.get_by_key(RED)

        first.receive(Weight.of("1"))
        repo.save(first)
        second.receive(Weight.of("2"))

        with pytest.raises(ConcurrencyError):
            repo.save(second)
        assert repo.get_by_key(RED).quantity == Weight.of("11")


class TestIntakeMany:

    def test_whole_delivery_in_one_write(self):
        ledger, repo = _ledger()

        records = ledger.intake_many(
            [IntakeLine.of("Cotton", "Red", "10"), IntakeLine.of("Cotton", "Blue", "5")],
            vendor_id=7,
        )

        assert repo.writes == 1
        assert {r.key for r in records} == {RED, BLUE}
        assert repo.get_by_key(BLUE).vendor_id == 7

    def test_same_color_twice_adds_up(self):
        ledger, repo = _ledger()

        records = ledger.intake_many(
            [IntakeLine.of("Cotton", "Red", "10"), IntakeLine.of(" Cotton", "Red ", "2.5")]
        )

        assert len(records) == 1
        assert repo.get_by_key(RED).quantity == Weight.of("12.5")

    def test_conflict_on_every_try_leaves_stock_untouched(self):
        repo = _FlakyStockRepository(failures=10)
        ledger = FabricStockLedger(repo, locks=KeyedLocks(), max_retries=2)

        with pytest.raises(ConcurrencyError):
            ledger.intake_many(
                [IntakeLine.of("Cotton", "Red", "10"), IntakeLine.of("Cotton", "Blue", "5")]
            )
        assert repo.list_all() == []

    def test_empty_delivery_rejected(self):
        ledger, _ = _ledger()
        with pytest.raises(ValidationError, match="Nothing to take in"):
            ledger.intake_many([])


class TestOperationMarkers:

    def test_repeated_reservation_takes_once(self):
        ledger, repo = _ledger()
        ledger.intake("Cotton", "Red", "100")
        batch = _batch(("1", "Red", "40"))

        first = ledger.reserve(batch.fabric_name, batch.roles, op_id=reserve_op("L-1"))
        again = ledger.reserve(batch.fabric_name, batch.roles, op_id=reserve_op("L-1"))

        assert repo.get_by_key(RED).quantity == Weight.of("60")
        assert first[RED].id == again[RED].id

    def test_repeated_reconcile_reports_already_applied(self):
        ledger, repo = _ledger()
        ledger.intake("Cotton", "Red", "100")
        batch = _batch(("1", "Red", "40"))
        _reserve(ledger, batch)
        unsaved = _batch(("1", "Red", "40"))
        unsaved.mark_reserved({RED: batch.roles[0].stock_id})

        ledger.reconcile(batch, {"1": "10"})
        result = ledger.reconcile(unsaved, {"1": "10"})

        assert [a.kind for a in result.adjustments] == [AdjustmentKind.ALREADY_APPLIED]
        assert repo.get_by_key(RED).quantity == Weight.of("90")
        assert reconcile_op("L-1") in repo.get_by_key(RED).applied_ops

    def test_unmarked_operations_always_apply(self):
        ledger, repo = _ledger()
        ledger.intake("Cotton", "Red", "100")
        batch = _batch(("1", "Red", "10"))

        ledger.reserve(batch.fabric_name, batch.roles)
        ledger.reserve(batch.fabric_name, batch.roles)

        assert repo.get_by_key(RED).quantity == Weight.of("80")
        assert repo.get_by_key(RED).applied_ops == []


class TestRebalance:

    def test_withdraws_and_adds_in_one_write(self):
        ledger, repo = _ledger()
        ledger.intake("Cotton", "Red", "20")
        writes = repo.writes
        red_id = repo.get_by_key(RED).id

        ledger.rebalance(
            additions=[IntakeLine.of("Cotton", "Blue", "5")],
            withdrawals=[Withdrawal(RED, Weight.of("8"), red_id)],
            vendor_id=3,
        )

        assert repo.writes == writes + 1
        assert repo.get_by_key(RED).quantity == Weight.of("12")
        assert repo.get_by_key(BLUE).quantity == Weight.of("5")
        assert repo.get_by_key(BLUE).vendor_id == 3

    def test_withdrawal_follows_stock_id_after_rename(self):
        ledger, repo = _ledger()
        record = ledger.intake("Cotton", "Red", "20")
        renamed = repo.get_by_id(record.id)
        renamed.fabric_name = "Cotton Jersey"
        repo.save(renamed)

        ledger.rebalance([], [Withdrawal(RED, Weight.of("5"), record.id)])

        assert repo.get_by_id(record.id).quantity == Weight.of("15")

    def test_withdrawing_used_fabric_rejected_without_mutation(self):
        ledger, repo = _ledger()
        ledger.intake("Cotton", "Red", "20")
        ledger.intake("Cotton", "Blue", "5")
        batch = _batch(("1", "Red", "15"))
        _reserve(ledger, batch)

        with pytest.raises(InsufficientStockError):
            ledger.rebalance(
                additions=[IntakeLine.of("Cotton", "Blue", "5")],
                withdrawals=[Withdrawal(RED, Weight.of("10"))],
            )

        assert repo.get_by_key(RED).quantity == Weight.of("5")
        assert repo.get_by_key(BLUE).quantity == Weight.of("5")

    def test_unknown_record_rejected(self):
        ledger, _ = _ledger()
        with pytest.raises(EntityNotFoundError):
            ledger.rebalance([], [Withdrawal(RED, Weight.of("1"))])

    def test_repeated_correction_applies_once(self):
        ledger, repo = _ledger()
        ledger.intake("Cotton", "Red", "20")

        for _ in range(2):
            ledger.rebalance(
                additions=[IntakeLine.of("Cotton", "Blue", "5")],
                withdrawals=[Withdrawal(RED, Weight.of("8"))],
                op_id="vendor:1:rev1",
            )

        assert repo.get_by_key(RED).quantity == Weight.of("12")
        assert repo.get_by_key(BLUE).quantity == Weight.of("5")


class _SlowStockRepository(FakeStockRepository):
    """Widens the gap between reading a record and writing it back."""

    def get_by_key(self, key):
        record = super().get_by_key(key)
        time.sleep(0.01)
        return record


class TestConcurrentReservations:

    def test_parallel_reservations_never_oversell(self):
        repo = _SlowStockRepository()
        ledger = FabricStockLedger(repo, locks=KeyedLocks())
        ledger.intake("Cotton", "Red", "100")
        barrier = threading.Barrier(6)
        outcomes: list[str] = []

        def reserve(lot_no: str) -> None:
            batch = _batch(("1", "Red", "30"), lot_no=lot_no)
            barrier.wait()
            try:
                ledger.reserve(batch.fabric_name, batch.roles, op_id=reserve_op(lot_no))
                outcomes.append("reserved")
            except InsufficientStockError:
                outcomes.append("refused")

        threads = [threading.Thread(target=reserve, args=(f"L-{n}",)) for n in range(6)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=10)

        assert sorted(outcomes) == ["refused"] * 3 + ["reserved"] * 3
        assert repo.get_by_key(RED).quantity == Weight.of("10")
