"""
Unit tests for structured logging context and JSON output.
"""

import json
import logging

import pytest

from arcade.core.logging.logger import (
    ContextFilter,
    JSONFormatter,
    LogContext,
    clear_log_context,
    get_log_context,
    get_logging_health,
    set_log_context,
)

pytestmark = pytest.mark.unit


def _record(msg="hello", **extra):
    record = logging.LogRecord(
        name="arcade.modules.shop.service",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture(autouse=True)
def _clean_context():
    clear_log_context()
    yield
    clear_log_context()


class TestLogContext:
    def test_sets_and_restores(self):
        with LogContext(player_id="p1", component="shop", operation="purchase"):
            context = get_log_context()
            assert context["player_id"] == "p1"
            assert context["operation"] == "purchase"
            assert len(context["correlation_id"]) == 8

        assert get_log_context() == {}

    async def test_async_form(self):
        async with LogContext(player_id="p2", component="profile"):
            assert get_log_context()["component"] == "profile"

        assert get_log_context() == {}

    def test_set_log_context_merges(self):
        set_log_context(player_id="p1")
        set_log_context(operation="equip_avatar", game_id="neon_tap")

        assert get_log_context() == {
            "player_id": "p1",
            "operation": "equip_avatar",
            "game_id": "neon_tap",
        }


class TestFormatting:
    def test_filter_copies_context_onto_record(self):
        record = _record()

        with LogContext(player_id="p1", component="shop", operation="purchase"):
            ContextFilter().filter(record)

        assert record.player_id == "p1"
        assert record.component == "shop"
        assert record.operation == "purchase"

    def test_filter_defaults_without_context(self):
        record = _record()

        ContextFilter().filter(record)

        assert record.player_id == "N/A"
        assert record.correlation_id == "N/A"
        assert record.component == "shop.service"

    def test_json_formatter(self):
        record = _record(msg="Purchase rejected", reason="INSUFFICIENT_FUNDS")
        with LogContext(player_id="p1", operation="purchase"):
            ContextFilter().filter(record)

        data = json.loads(JSONFormatter().format(record))

        assert data["message"] == "Purchase rejected"
        assert data["level"] == "INFO"
        assert data["player_id"] == "p1"
        assert data["extra"] == {"reason": "INSUFFICIENT_FUNDS"}


def test_logging_is_initialized_on_import():
    assert get_logging_health().initialized is True
