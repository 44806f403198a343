"""
Tests for correlation scopes, log helpers and the logging filter.

System role: Verification of request tracing utilities
"""

import asyncio
import logging

import pytest

from runner_gateway.observability.correlation import (
    correlation_scope,
    get_correlation_id,
    new_correlation_id,
)
from runner_gateway.observability.log_utils import clip_text, preview
from runner_gateway.observability.logger import ContextFilter, configure_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


def test_new_correlation_id_is_twelve_hex_chars():
    value = new_correlation_id()

    assert len(value) == 12
    int(value, 16)


def test_scope_binds_and_restores():
    assert get_correlation_id() == ""

    with correlation_scope("outer") as outer:
        assert outer == "outer"
        with correlation_scope("inner"):
            assert get_correlation_id() == "inner"
        assert get_correlation_id() == "outer"

    assert get_correlation_id() == ""


@pytest.mark.parametrize("supplied", [None, "", "   "])
def test_scope_generates_id_when_missing(supplied):
    with correlation_scope(supplied) as value:
        assert get_correlation_id() == value
        assert len(value) == 12


def test_scope_restores_after_exception():
    with pytest.raises(RuntimeError):
        with correlation_scope("boom"):
            raise RuntimeError("x")

    assert get_correlation_id() == ""


async def test_correlation_id_is_isolated_per_task():
    async def tagged(tag: str) -> str:
        with correlation_scope(tag):
            await asyncio.sleep(0)
            return get_correlation_id()

    results = await asyncio.gather(tagged("first"), tagged("second"))

    assert results == ["first", "second"]


class TestLogUtils:
    """Test suite for clip_text() and preview()."""

    def test_clip_text_handles_bytes(self):
        assert clip_text(b"hello world", 5) == "hello"

    def test_clip_text_replaces_invalid_utf8(self):
        assert clip_text(b"ok\xff", 10) == "ok�"

    def test_clip_text_handles_none(self):
        assert clip_text(None, 10) == ""

    def test_preview_keeps_short_text(self):
        assert preview("short") == "short"

    def test_preview_reports_dropped_characters(self):
        assert preview("x" * 250, limit=200) == "x" * 200 + " (+50 chars)"


class TestLogging:
    """Test suite for ContextFilter and configure_logging()."""

    def test_filter_stamps_service_and_correlation(self):
        record = logging.LogRecord("t", logging.INFO, __file__, 1, "msg", None, None)

        with correlation_scope("abc123"):
            assert ContextFilter("svc").filter(record) is True

        assert record.service == "svc"
        assert record.correlation_id == "abc123"

    def test_filter_uses_dash_outside_scope(self):
        record = logging.LogRecord("t", logging.INFO, __file__, 1, "msg", None, None)

        ContextFilter("svc").filter(record)

        assert record.correlation_id == "-"

    def test_configure_logging_replaces_handlers(self, restore_root_logger):
        configure_logging("debug", "svc")
        configure_logging("warning", "svc")

        assert len(restore_root_logger.handlers) == 1
        assert restore_root_logger.level == logging.WARNING
        assert logging.getLogger("botocore").level == logging.WARNING
