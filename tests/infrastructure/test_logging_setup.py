"""Tests for the shared logging setup."""

import json
import logging

import pytest

from fabric_ledger.infrastructure.config import Settings
from fabric_ledger.infrastructure.logging import HANDLER_NAME, JsonFormatter, setup_logging


@pytest.fixture
def restore_root():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        "fabric_ledger.domain.service.stock_ledger", logging.WARNING,
        __file__, 1, "Lot %s short", ("L-1",), None,
    )
    for name, value in extra.items():
        setattr(record, name, value)
    return record


class TestJsonFormatter:

    def test_carries_app_and_lot(self):
        line = JsonFormatter("Fabric Stock Ledger", "test").format(_record(lot_no="L-1"))

        payload = json.loads(line)
        assert payload["message"] == "Lot L-1 short"
        assert payload["level"] == "WARNING"
        assert payload["environment"] == "test"
        assert payload["lot_no"] == "L-1"
        assert "op_id" not in payload


class TestSetupLogging:

    def test_replaces_only_its_own_handler(self, restore_root):
        other = logging.NullHandler()
        restore_root.addHandler(other)
        settings = Settings(LOG_LEVEL="warning", LOG_JSON=True, ENVIRONMENT="test")

        setup_logging(settings)
        handler = setup_logging(settings)

        ours = [h for h in restore_root.handlers if h.get_name() == HANDLER_NAME]
        assert ours == [handler]
        assert other in restore_root.handlers
        assert restore_root.level == logging.WARNING
        assert isinstance(handler.formatter, JsonFormatter)
        assert logging.getLogger("httpx").level == logging.WARNING
