"""Application service: Edit Vendor use case.

Replaces a vendor bill with a corrected one and re-balances stock by the
difference per fabric/color: more delivered is taken in, less delivered
is withdrawn from the record the original delivery went into (found by
its stock id, so renamed records are still found). Colors dropped from
the bill are withdrawn whole; new ones are taken in.

The stock correction is stamped with the vendor's next revision, so
repeating an edit whose vendor save failed does not move stock twice.
"""

from __future__ import annotations

import logging

from fabric_ledger.application.dto import VendorDTO, VendorSpec, vendor_to_dto
from fabric_ledger.application.record_vendor_intake import build_vendor
from fabric_ledger.domain.exceptions import EntityNotFoundError
from fabric_ledger.domain.model.value_objects import ZERO, StockKey
from fabric_ledger.domain.model.vendor import Vendor
from fabric_ledger.domain.repository.stock_repository import StockRepository
from fabric_ledger.domain.repository.vendor_repository import VendorRepository
from fabric_ledger.domain.service.keyed_locks import VENDOR_LOCKS, KeyedLocks
from fabric_ledger.domain.service.stock_ledger import (
    FabricStockLedger,
    IntakeLine,
    Withdrawal,
)

logger = logging.getLogger(__name__)


class EditVendorHandler:

    def __init__(
        self,
        vendor_repo: VendorRepository,
        stock_repo: StockRepository,
        ledger: FabricStockLedger,
        locks: KeyedLocks | None = None,
    ) -> None:
        self._vendor_repo = vendor_repo
        self._stock_repo = stock_repo
        self._ledger = ledger
        self._locks = locks or VENDOR_LOCKS

    def handle(self, vendor_id: int, spec: VendorSpec) -> VendorDTO:
        edited = build_vendor(spec)

        with self._locks.hold([vendor_id]):
            current = self._vendor_repo.get_by_id(vendor_id)
            if current is None:
                raise EntityNotFoundError(f"Vendor #{vendor_id} not found")
            edited = current.revise(edited)

            additions, withdrawals = _differences(current, edited)
            records = self._ledger.rebalance(
                additions,
                withdrawals,
                vendor_id=current.id,
                op_id=f"vendor:{current.id}:rev{edited.revision}",
            )

            links = {
                key: stock_id
                for key, (_, stock_id) in current.delivered().items()
                if stock_id
            }
            links.update({record.key: record.id for record in records})
            edited.link_stock(links)
            self._vendor_repo.save(edited)

        logger.info(
            "Vendor #%s edited (revision %d): %d addition(s), %d withdrawal(s)",
            vendor_id, edited.revision, len(additions), len(withdrawals),
        )
        stock = [r for r in self._stock_repo.list_all() if r.vendor_id == edited.id]
        return vendor_to_dto(edited, stock)


def _differences(
    current: Vendor,
    edited: Vendor,
) -> tuple[list[IntakeLine], list[Withdrawal]]:
    before = current.delivered()
    after = edited.delivered()
    hex_by_key: dict[StockKey, str | None] = {
        StockKey.of(fabric.name, color.color_name): color.color_hex
        for fabric in edited.fabrics
        for color in fabric.colors
    }

    additions: list[IntakeLine] = []
    withdrawals: list[Withdrawal] = []
    for key in sorted(set(before) | set(after)):
        old_weight, stock_id = before.get(key, (ZERO, None))
        new_weight, _ = after.get(key, (ZERO, None))
        if new_weight > old_weight:
            additions.append(
                IntakeLine.of(
                    key.fabric_name,
                    key.color,
                    new_weight - old_weight,
                    standard_weight_hint=new_weight,
                    display_color_hint=hex_by_key.get(key),
                )
            )
        elif new_weight < old_weight:
            withdrawals.append(Withdrawal(key, old_weight - new_weight, stock_id))
    return additions, withdrawals
