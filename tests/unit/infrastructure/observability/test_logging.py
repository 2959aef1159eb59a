"""Tests for structured logging."""

import json
import logging
import sys

import pytest

from trackmirror.infrastructure.observability.logging import (
    CompactExceptionFormatter,
    CorrelationIdFilter,
    CustomJsonFormatter,
    configure_logging,
    correlation_id_var,
    correlation_scope,
    get_correlation_id,
    set_correlation_id,
)


@pytest.fixture(autouse=True)
def restore_logging():
    """Undo configure_logging() and correlation IDs after each test."""
    root_logger = logging.getLogger()
    handlers = root_logger.handlers[:]
    level = root_logger.level
    token = correlation_id_var.set("")
    yield
    for handler in root_logger.handlers[:]:
        if handler not in handlers:
            root_logger.removeHandler(handler)
    root_logger.setLevel(level)
    correlation_id_var.reset(token)


def _record(msg: str = "hello", exc_info=None) -> logging.LogRecord:
    return logging.LogRecord(
        name="trackmirror.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )


class TestCorrelationId:
    """Test correlation ID functionality."""

    def test_set_and_get_correlation_id(self):
        """Test setting and getting correlation ID."""
        test_id = "test-123-abc"
        result = set_correlation_id(test_id)
        assert result == test_id
        assert get_correlation_id() == test_id

    def test_set_correlation_id_generates_uuid_when_none(self):
        """Test that setting None generates a UUID."""
        result = set_correlation_id(None)
        assert len(result) == 36
        assert get_correlation_id() == result

    def test_scope_generates_and_restores(self):
        """Test that a scope sets a fresh ID and restores the old one."""
        assert get_correlation_id() == ""
        with correlation_scope() as correlation_id:
            assert correlation_id
            assert get_correlation_id() == correlation_id
        assert get_correlation_id() == ""

    def test_nested_scope_keeps_outer_id(self):
        """Test that a nested scope joins the outer resolution's ID."""
        with correlation_scope("outer") as outer:
            with correlation_scope() as inner:
                assert inner == outer == "outer"

    def test_filter_adds_correlation_id(self):
        set_correlation_id("cid-1")
        record = _record()
        assert CorrelationIdFilter().filter(record) is True
        assert record.correlation_id == "cid-1"


class TestFormatters:
    """Test JSON and compact formatters."""

    def test_json_formatter_fields(self):
        set_correlation_id("cid-json")
        record = _record("resolved")
        CorrelationIdFilter().filter(record)

        output = json.loads(CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s").format(record))

        assert output["message"] == "resolved"
        assert output["level"] == "INFO"
        assert output["logger"] == "trackmirror.test"
        assert output["correlation_id"] == "cid-json"

    def test_compact_exception_chain_root_cause_first(self):
        try:
            try:
                raise ValueError("inner")
            except ValueError as e:
                raise RuntimeError("outer") from e
        except RuntimeError:
            text = CompactExceptionFormatter().formatException(sys.exc_info())

        lines = [line for line in text.splitlines() if line.startswith("╰─►")]
        assert lines == ["╰─► ValueError: inner", "╰─► RuntimeError: outer"]


class TestLoggingConfiguration:
    """Test logging configuration."""

    def test_configure_logging_debug_level(self):
        """Test configuring logging with DEBUG level."""
        configure_logging(log_level="DEBUG", json_format=False, app_name="test-app")
        logger = logging.getLogger("test")
        assert logger.getEffectiveLevel() <= logging.DEBUG

    def test_configure_logging_info_level(self):
        """Test configuring logging with INFO level."""
        configure_logging(log_level="INFO", json_format=False, app_name="test-app")
        logger = logging.getLogger("test")
        assert logger.getEffectiveLevel() == logging.INFO

    def test_configure_logging_json_format(self):
        """Test configuring logging with JSON format."""
        configure_logging(log_level="INFO", json_format=True, app_name="test-app")
        root_logger = logging.getLogger()
        assert len(root_logger.handlers) == 1
        assert isinstance(root_logger.handlers[0].formatter, CustomJsonFormatter)

    def test_configure_logging_text_format(self):
        """Test configuring logging with text format."""
        configure_logging(log_level="INFO", json_format=False, app_name="test-app")
        root_logger = logging.getLogger()
        assert len(root_logger.handlers) == 1
        assert isinstance(root_logger.handlers[0].formatter, CompactExceptionFormatter)

    def test_http_loggers_quieted(self):
        configure_logging(log_level="DEBUG")
        assert logging.getLogger("httpx").level == logging.WARNING
