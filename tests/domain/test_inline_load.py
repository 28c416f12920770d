"""Unit tests for the InlineLoad aggregate."""

import pytest

from fabric_ledger.domain.exceptions import ValidationError
from fabric_ledger.domain.model.cutting import CuttingBatch, Role
from fabric_ledger.domain.model.inline import ColorBundle, InlineLoad
from fabric_ledger.domain.model.value_objects import Weight


def _completed_batch() -> CuttingBatch:
    batch = CuttingBatch.create(
        lot_no="L-7",
        pattern="Tee",
        fabric_name="Cotton",
        sizes=["M", "L"],
        roles=[Role("1", "Red", Weight.of("10"))],
    )
    batch.mark_reserved({})
    batch.record_actuals({"1": Weight.of("10")})
    return batch


def _load() -> InlineLoad:
    return InlineLoad.create(
        load_id="LD-1",
        batch=_completed_batch(),
        size="M",
        colors={"Red": ColorBundle(20, 2), "Blue": ColorBundle(10)},
    )


class TestCreateLoad:

    def test_valid_load(self):
        load = _load()
        assert load.lot_no == "L-7"
        assert load.pattern == "Tee"
        assert load.total == 30
        assert not load.processed

    def test_batch_must_be_completed(self):
        batch = CuttingBatch.create(
            lot_no="L-8", pattern="Tee", fabric_name="Cotton",
            sizes=["M"], roles=[Role("1", "Red", Weight.of("10"))],
        )
        with pytest.raises(ValidationError, match="not completed yet"):
            InlineLoad.create("LD-2", batch, "M", {"Red": ColorBundle(5)})

    def test_size_must_belong_to_batch(self):
        with pytest.raises(ValidationError, match="Size 'XL' is not cut"):
            InlineLoad.create("LD-2", _completed_batch(), "XL", {"Red": ColorBundle(5)})

    def test_quantity_must_be_positive(self):
        with pytest.raises(ValidationError, match="must be positive"):
            InlineLoad.create("LD-2", _completed_batch(), "M", {"Red": ColorBundle(0)})

    def test_needs_a_color(self):
        with pytest.raises(ValidationError, match="At least one color"):
            InlineLoad.create("LD-2", _completed_batch(), "M", {})


class TestComplete:

    def test_records_differences(self):
        load = _load()
        output = load.complete("Sita", {"Red": 18, "Blue": 10})

        assert load.processed
        assert load.processed_at == output.completed_at
        assert output.has_discrepancy
        diffs = {item.color: item.difference for item in output.items}
        assert diffs == {"Red": -2, "Blue": 0}

    def test_cannot_process_twice(self):
        load = _load()
        load.complete("Sita", {"Red": 20, "Blue": 10})
        with pytest.raises(ValidationError, match="already been processed"):
            load.complete("Sita", {"Red": 20, "Blue": 10})

    def test_missing_color_rejected(self):
        with pytest.raises(ValidationError, match="Missing actual quantity"):
            _load().complete("Sita", {"Red": 20})

    def test_unknown_color_rejected(self):
        with pytest.raises(ValidationError, match="has no color"):
            _load().complete("Sita", {"Red": 20, "Blue": 10, "Green": 1})

    def test_negative_actual_rejected(self):
        with pytest.raises(ValidationError, match="cannot be negative"):
            _load().complete("Sita", {"Red": -1, "Blue": 10})
