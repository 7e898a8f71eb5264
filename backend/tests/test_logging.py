"""
Tests for structured logging helpers.
"""

import io
import json
import logging

import pytest

from shared.config.logging import ConsoleLogFormatter, JsonLogFormatter, get_logger, mask_account_id


@pytest.fixture
def captured():
    """Logger writing to a buffer, isolated from the root handlers."""
    buffer = io.StringIO()
    handler = logging.StreamHandler(buffer)
    logger = get_logger("tests.structured")
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    yield logger, handler, buffer
    logger.removeHandler(handler)
    logger.propagate = True


class TestStructuredLogger:
    def test_json_record_carries_context(self, captured):
        logger, handler, buffer = captured
        handler.setFormatter(JsonLogFormatter())

        logger.info("Order saved", order_id="local-1", total_retail="91.00")

        entry = json.loads(buffer.getvalue())
        assert entry["msg"] == "Order saved"
        assert entry["level"] == "INFO"
        assert entry["context"] == {"order_id": "local-1", "total_retail": "91.00"}

    def test_console_record_lists_context(self, captured):
        logger, handler, buffer = captured
        handler.setFormatter(ConsoleLogFormatter(use_color=False))

        logger.warning("Save order failed", code="store_error")

        line = buffer.getvalue()
        assert "WARNING" in line
        assert "Save order failed  code=store_error" in line

    def test_exc_info_is_rendered(self, captured):
        logger, handler, buffer = captured
        handler.setFormatter(JsonLogFormatter())

        try:
            raise OSError("disk full")
        except OSError:
            logger.error("Cache write failed", exc_info=True)

        assert "disk full" in json.loads(buffer.getvalue())["exc"]


class TestMaskAccountId:
    def test_local_session(self):
        assert mask_account_id(None) == "<local>"

    def test_long_id_is_truncated(self):
        assert mask_account_id("acct-0001-florist") == "acct-000..."

    def test_short_id_is_masked(self):
        assert mask_account_id("abc") == "a***"
