"""Domain service: Fabric Stock Ledger.

The ledger owns every movement of raw-fabric quantity-on-hand:

- **intake**: a vendor delivery adds to (or opens) stock records
- **reserve**: starting a cutting batch takes the planned weight of
  every role, all-or-nothing
- **reconcile**: completing the batch returns what was not used, or
  consumes what was cut beyond the plan
- **rebalance**: an edited vendor bill adds or withdraws the difference

Each operation loads the records it needs, validates, mutates and then
commits every touched record with a single ``save_all``. Mutations on the
same fabric/color are serialised in-process by keyed locks; the store's
version check catches writers in other processes, and the whole
operation is retried on conflict.

Operations that belong to a cutting lot or a vendor bill carry an
operation id. Every record they commit is stamped with it, and a record
that already carries the id is left alone, so repeating an operation
whose follow-up save failed does not move stock twice.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import TypeVar

from fabric_ledger.domain.exceptions import (
    ConcurrencyError,
    EntityNotFoundError,
    InsufficientStockError,
    ValidationError,
)
from fabric_ledger.domain.model.cutting import CuttingBatch, Role
from fabric_ledger.domain.model.stock import StockRecord, utcnow
from fabric_ledger.domain.model.value_objects import (
    ZERO,
    StockKey,
    Weight,
    validate_hex_color,
)
from fabric_ledger.domain.repository.stock_repository import StockRepository
from fabric_ledger.domain.service.keyed_locks import KeyedLocks

logger = logging.getLogger(__name__)

T = TypeVar("T")

WeightLike = Weight | str | int | float | Decimal

_SHARED_LOCKS = KeyedLocks()


@dataclass(frozen=True)
class IntakeLine:
    """One fabric/color of a delivery, validated."""

    key: StockKey
    weight: Weight
    standard_weight_hint: Weight | None = None
    display_color_hint: str | None = None

    @staticmethod
    def of(
        fabric_name: str,
        color: str,
        weight: WeightLike,
        standard_weight_hint: WeightLike | None = None,
        display_color_hint: str | None = None,
    ) -> IntakeLine:
        key = StockKey.of(fabric_name, color)
        return IntakeLine(
            key=key,
            weight=Weight.positive(weight, "Intake weight"),
            standard_weight_hint=(
                Weight.of(standard_weight_hint) if standard_weight_hint is not None else None
            ),
            display_color_hint=(
                validate_hex_color(display_color_hint) if display_color_hint else None
            ),
        )


@dataclass(frozen=True)
class Withdrawal:
    """Weight to take back out of a record, found by id first."""

    key: StockKey
    weight: Weight
    stock_id: str | None = None


class AdjustmentKind(Enum):
    UNCHANGED = "UNCHANGED"
    RETURNED = "RETURNED"
    CONSUMED = "CONSUMED"
    SHORTFALL = "SHORTFALL"
    ALREADY_APPLIED = "ALREADY_APPLIED"


@dataclass(frozen=True)
class RoleAdjustment:
    """What reconciliation did to stock for one role.

    ``moved`` is the weight actually returned or consumed; ``shortfall``
    is the part of the extra usage that no stock was left to cover.
    """

    role_no: str
    color: str
    planned: Weight
    actual: Weight
    kind: AdjustmentKind
    moved: Weight = ZERO
    shortfall: Weight = ZERO
    stock_id: str | None = None


@dataclass(frozen=True)
class ReconciliationResult:
    lot_no: str
    adjustments: list[RoleAdjustment]

    @property
    def shortfalls(self) -> list[RoleAdjustment]:
        return [a for a in self.adjustments if a.kind is AdjustmentKind.SHORTFALL]

    @property
    def has_shortfall(self) -> bool:
        return bool(self.shortfalls)


def reserve_op(lot_no: str) -> str:
    return f"{lot_no}:reserve"


def reconcile_op(lot_no: str) -> str:
    return f"{lot_no}:reconcile"


class FabricStockLedger:

    def __init__(
        self,
        stock_repo: StockRepository,
        locks: KeyedLocks | None = None,
        max_retries: int = 3,
    ) -> None:
        self._stock_repo = stock_repo
        self._locks = locks or _SHARED_LOCKS
        self._max_retries = max(1, max_retries)

    # --- Intake ---------------------------------------------------------------

    def intake(
        self,
        fabric_name: str,
        color: str,
        weight: WeightLike,
        standard_weight_hint: WeightLike | None = None,
        display_color_hint: str | None = None,
        vendor_id: int | None = None,
    ) -> StockRecord:
        """Add delivered fabric to the record for (fabric_name, color).

        Opens the record on first delivery. Bad input is rejected before
        anything is read or written.
        """
        line = IntakeLine.of(fabric_name, color, weight, standard_weight_hint, display_color_hint)
        return self.intake_many([line], vendor_id=vendor_id)[0]

    def intake_many(
        self,
        lines: Sequence[IntakeLine],
        vendor_id: int | None = None,
    ) -> list[StockRecord]:
        """Take in a whole delivery in one write: every line lands or none does.

        Lines for the same fabric/color add up on one record. Records
        opened here are tagged with ``vendor_id``.
        """
        if not lines:
            raise ValidationError("Nothing to take in")

        def attempt() -> list[StockRecord]:
            records: dict[StockKey, StockRecord] = {}
            now = utcnow()
            for line in lines:
                record = records.get(line.key)
                if record is None:
                    record = self._stock_repo.get_by_key(line.key)
                if record is None:
                    record = StockRecord.open(
                        line.key, line.weight, line.standard_weight_hint,
                        line.display_color_hint, vendor_id,
                    )
                else:
                    record.receive(line.weight, line.standard_weight_hint,
                                   line.display_color_hint, now)
                records[line.key] = record
            self._stock_repo.save_all(list(records.values()))
            return list(records.values())

        with self._locks.hold(line.key for line in lines):
            records = self._retrying(attempt)

        for line in lines:
            logger.info("Intake of %s into %s", line.weight, line.key)
        return records

    # --- Reservation ----------------------------------------------------------

    def reserve(
        self,
        fabric_name: str,
        roles: Sequence[Role],
        op_id: str | None = None,
    ) -> dict[StockKey, StockRecord]:
        """Take the planned weight of every role out of stock.

        Uses a two-phase approach inside one locked, retried attempt:
          Phase 1: load and validate: every fabric/color must exist and
                    cover the summed weight of the roles using it.
          Phase 2: mutate and persist: take from each record, retiring
                    the ones that hit zero, and commit them together.

        Records already stamped with ``op_id`` were taken from by an
        earlier run of the same reservation and are returned untouched.
        Returns the reserved records by key.
        """
        if not roles:
            raise ValidationError("Roles data is required and must be a non-empty list")

        requested: dict[StockKey, Weight] = {}
        for role in roles:
            key = StockKey.of(fabric_name, role.color)
            weight = Weight.positive(role.planned_weight, f"Role {role.role_no} planned weight")
            requested[key] = requested.get(key, ZERO) + weight

        def attempt() -> tuple[dict[StockKey, StockRecord], dict[StockKey, StockRecord]]:
            # Phase 1: load all stock records and validate
            done: dict[StockKey, StockRecord] = {}
            pending: dict[StockKey, StockRecord] = {}
            for key, weight in requested.items():
                record = self._stock_repo.get_by_key(key)
                if record is None:
                    raise EntityNotFoundError(
                        f"No fabric stock found for {key.fabric_name} and color {key.color}"
                    )
                if record.has_applied(op_id):
                    done[key] = record
                    continue
                if weight > record.quantity:
                    raise InsufficientStockError(
                        key.fabric_name, key.color, record.quantity.value, weight.value
                    )
                pending[key] = record

            # Phase 2: mutate and persist in one write
            now = utcnow()
            for key, record in pending.items():
                record.take(requested[key], now)
                record.mark_applied(op_id)
            if pending:
                self._stock_repo.save_all(list(pending.values()))
            return done, pending

        with self._locks.hold(requested):
            done, pending = self._retrying(attempt)

        for key, record in pending.items():
            logger.info(
                "Reserved %s of %s (remaining %s%s)",
                requested[key], key, record.quantity,
                ", retired" if record.retired else "",
                extra={"op_id": op_id},
            )
        for key in done:
            logger.info("Reservation %s already applied to %s", op_id, key,
                        extra={"op_id": op_id})
        return {key: done.get(key) or pending[key] for key in requested}

    # --- Reconciliation -------------------------------------------------------

    def reconcile(
        self,
        batch: CuttingBatch,
        actuals: Mapping[str, WeightLike],
    ) -> ReconciliationResult:
        """Settle the batch's reservation against what was actually cut.

        For each role, delta = actual - planned:
        - negative: the unused fabric goes back (re-opening a retired
          record, or creating one if it no longer exists)
        - positive: the extra is consumed; if stock cannot cover it the
          record is emptied and the rest is reported as a shortfall,
          because the fabric has already been cut
        - zero: nothing moves

        Stock is committed first, then the batch is closed in memory; the
        caller persists the batch. A batch can be reconciled only once.
        """
        batch.ensure_can_reconcile()
        layers = {role_no: Weight.of(value) for role_no, value in actuals.items()}
        batch.check_actuals(layers)
        op_id = reconcile_op(batch.lot_no)

        def attempt() -> list[RoleAdjustment]:
            touched: dict[str, StockRecord] = {}
            adjustments: list[RoleAdjustment] = []
            now = utcnow()

            for role in batch.roles:
                planned = role.planned_weight
                actual = layers[role.role_no]
                key = batch.key_for(role)

                if actual == planned:
                    adjustments.append(
                        RoleAdjustment(role.role_no, role.color, planned, actual,
                                       AdjustmentKind.UNCHANGED, stock_id=role.stock_id)
                    )
                    continue

                record = self._locate(role, key, touched)

                if record is not None and record.id not in touched and record.has_applied(op_id):
                    adjustments.append(
                        RoleAdjustment(role.role_no, role.color, planned, actual,
                                       AdjustmentKind.ALREADY_APPLIED, stock_id=record.id)
                    )
                    continue

                if actual < planned:
                    unused = planned - actual
                    if record is None:
                        record = StockRecord.open(key, unused)
                        logger.info("Opened %s with %s of returned fabric", key, unused)
                    else:
                        record.give_back(unused, now)
                    touched[record.id] = record
                    adjustments.append(
                        RoleAdjustment(role.role_no, role.color, planned, actual,
                                       AdjustmentKind.RETURNED, moved=unused,
                                       stock_id=record.id)
                    )
                    continue

                extra = actual - planned
                if record is None:
                    shortfall = extra
                else:
                    shortfall = record.consume_up_to(extra, now)
                    touched[record.id] = record
                if shortfall.is_zero:
                    kind = AdjustmentKind.CONSUMED
                else:
                    kind = AdjustmentKind.SHORTFALL
                    logger.warning(
                        "Lot %s role %s: cut %s beyond plan on %s, only %s in stock "
                        "(shortfall %s)",
                        batch.lot_no, role.role_no, extra, key, extra - shortfall, shortfall,
                        extra={"lot_no": batch.lot_no},
                    )
                adjustments.append(
                    RoleAdjustment(role.role_no, role.color, planned, actual, kind,
                                   moved=extra - shortfall, shortfall=shortfall,
                                   stock_id=record.id if record else None)
                )

            if touched:
                for record in touched.values():
                    record.mark_applied(op_id)
                self._stock_repo.save_all(list(touched.values()))
            return adjustments

        with self._locks.hold(batch.key_for(role) for role in batch.roles):
            adjustments = self._retrying(attempt)

        batch.record_actuals(layers)
        logger.info(
            "Reconciled lot %s: %d role(s), %d shortfall(s)",
            batch.lot_no, len(adjustments),
            sum(1 for a in adjustments if a.kind is AdjustmentKind.SHORTFALL),
            extra={"lot_no": batch.lot_no},
        )
        return ReconciliationResult(batch.lot_no, adjustments)

    # --- Rebalance ------------------------------------------------------------

    def rebalance(
        self,
        additions: Sequence[IntakeLine],
        withdrawals: Sequence[Withdrawal],
        vendor_id: int | None = None,
        op_id: str | None = None,
    ) -> list[StockRecord]:
        """Apply a corrected delivery: withdraw what was over-recorded and
        take in what was under-recorded, in one write.

        A withdrawal larger than what is left on hand fails the whole
        correction with InsufficientStockError: that fabric has been used.
        Records stamped with ``op_id`` are skipped.
        """
        if not additions and not withdrawals:
            return []

        def attempt() -> list[StockRecord]:
            touched: dict[str, StockRecord] = {}
            taking: dict[str, Weight] = {}
            now = utcnow()

            # Phase 1: locate and validate every withdrawal
            for withdrawal in withdrawals:
                record = self._find(withdrawal.stock_id, withdrawal.key, touched)
                if record is None:
                    raise EntityNotFoundError(
                        f"No fabric stock found for {withdrawal.key.fabric_name} "
                        f"and color {withdrawal.key.color}"
                    )
                touched[record.id] = record
                if record.has_applied(op_id):
                    continue
                total = taking.get(record.id, ZERO) + withdrawal.weight
                if total > record.quantity:
                    raise InsufficientStockError(
                        record.fabric_name, record.color,
                        record.quantity.value, total.value,
                    )
                taking[record.id] = total

            # Phase 2: mutate
            for stock_id, weight in taking.items():
                touched[stock_id].take(weight, now)
            for line in additions:
                record = self._find(None, line.key, touched)
                if record is None:
                    record = StockRecord.open(
                        line.key, line.weight, line.standard_weight_hint,
                        line.display_color_hint, vendor_id,
                    )
                elif record.has_applied(op_id):
                    touched[record.id] = record
                    continue
                else:
                    record.receive(line.weight, line.standard_weight_hint,
                                   line.display_color_hint, now)
                touched[record.id] = record

            changed = [r for r in touched.values() if not r.has_applied(op_id)]
            for record in changed:
                record.mark_applied(op_id)
            if changed:
                self._stock_repo.save_all(changed)
            return list(touched.values())

        keys = [line.key for line in additions] + [w.key for w in withdrawals]
        with self._locks.hold(keys):
            records = self._retrying(attempt)

        logger.info(
            "Rebalanced %d addition(s) and %d withdrawal(s)",
            len(additions), len(withdrawals),
            extra={"op_id": op_id},
        )
        return records

    # --- Internal helpers -----------------------------------------------------

    def _locate(
        self,
        role: Role,
        key: StockKey,
        touched: dict[str, StockRecord],
    ) -> StockRecord | None:
        """Find the record a role reserved from.

        Prefers the stable id captured at reservation; falls back to the
        fabric/color key for batches reserved before ids were recorded.
        Records already touched in this operation are reused so two roles
        of one color adjust the same record.
        """
        return self._find(role.stock_id, key, touched)

    def _find(
        self,
        stock_id: str | None,
        key: StockKey,
        touched: dict[str, StockRecord],
    ) -> StockRecord | None:
        if stock_id:
            if stock_id in touched:
                return touched[stock_id]
            record = self._stock_repo.get_by_id(stock_id)
            if record is not None:
                return record
        for record in touched.values():
            if record.key == key:
                return record
        return self._stock_repo.get_by_key(key)

    def _retrying(self, attempt: Callable[[], T]) -> T:
        attempts = 0
        while True:
            attempts += 1
            try:
                return attempt()
            except ConcurrencyError:
                if attempts >= self._max_retries:
                    raise
                logger.info("Stock changed during operation, retrying (%d/%d)",
                            attempts, self._max_retries)
