"""Unit tests for telemetry module."""

import json
import logging
import sys

import pytest

from s3blobstore.commons.telemetry.decorators import LogContext, timed
from s3blobstore.commons.telemetry.logger import (
    JsonFormatter,
    TextFormatter,
    clear_log_context,
    configure_logging,
    extra_fields,
    get_log_context,
    set_log_context,
)


def _record(msg: str = "Test message", level: int = logging.INFO, **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="test.logger",
        level=level,
        pathname="/test/file.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=None,
    )
    record.__dict__.update(extra)
    return record


@pytest.fixture(autouse=True)
def clean_log_context():
    clear_log_context()
    yield
    clear_log_context()


class TestLogContext:
    """Tests for logging context management."""

    def test_set_and_get_context(self):
        set_log_context(blob_store="default", bucket="mybucket")
        ctx = get_log_context()
        assert ctx["blob_store"] == "default"
        assert ctx["bucket"] == "mybucket"

    def test_clear_context(self):
        set_log_context(key="value")
        clear_log_context()
        assert get_log_context() == {}

    def test_context_is_copied(self):
        set_log_context(key="value")
        ctx = get_log_context()
        ctx["new_key"] = "new_value"
        assert "new_key" not in get_log_context()


class TestJsonFormatter:
    """Tests for JSON log formatter."""

    def test_basic_format(self):
        data = json.loads(JsonFormatter(include_path=True).format(_record()))

        assert data["level"] == "INFO"
        assert data["logger"] == "test.logger"
        assert data["message"] == "Test message"
        assert "timestamp" in data
        assert data["path"] == "/test/file.py:42"

    def test_format_with_context(self):
        set_log_context(blob_id="abc")

        data = json.loads(JsonFormatter().format(_record()))

        assert data["context"]["blob_id"] == "abc"

    def test_format_with_extra(self):
        """Fields passed through ``extra`` become top-level keys."""
        data = json.loads(JsonFormatter().format(_record(key="content/a.bytes", length=4)))

        assert data["key"] == "content/a.bytes"
        assert data["length"] == 4
        assert "path" not in data

    def test_format_with_exception(self):
        formatter = JsonFormatter()
        try:
            raise ValueError("Test error")
        except ValueError:
            record = _record("Error occurred", logging.ERROR)
            record.exc_info = sys.exc_info()

            data = json.loads(formatter.format(record))

        assert "ValueError" in data["exception"]


class TestTextFormatter:
    """Tests for text log formatter."""

    def test_basic_format(self):
        output = TextFormatter().format(_record())

        assert "INFO" in output
        assert "[test.logger]" in output
        assert "Test message" in output

    def test_fields_appended(self):
        set_log_context(blob_store="default")

        output = TextFormatter().format(_record(blob_id="abc"))

        assert output.endswith("blob_id=abc blob_store=default")


class TestExtraFields:
    """Tests for extra_fields."""

    def test_only_extra(self):
        assert extra_fields(_record(reason="testing")) == {"reason": "testing"}


class TestConfigureLogging:
    """Tests for logger configuration."""

    def test_configure_json_logger(self):
        logger = configure_logging(level="DEBUG", format_type="json", logger_name="test.json")
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, JsonFormatter)

    def test_configure_text_logger(self):
        logger = configure_logging(level="INFO", format_type="text", logger_name="test.text")
        assert logger.level == logging.INFO
        assert isinstance(logger.handlers[0].formatter, TextFormatter)

    def test_reconfigure_replaces_handler(self):
        configure_logging(logger_name="test.again")
        logger = configure_logging(logger_name="test.again")
        assert len(logger.handlers) == 1


class TestTimedDecorator:
    """Tests for @timed decorator."""

    def test_timed_function(self, caplog):
        @timed
        def work():
            return "done"

        with caplog.at_level(logging.DEBUG):
            result = work()

        assert result == "done"
        assert any("work completed" in r.getMessage() for r in caplog.records)
        assert all(r.duration_ms >= 0 for r in caplog.records if "completed" in r.getMessage())

    def test_timed_logs_on_exception(self, caplog):
        @timed
        def failing():
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError), caplog.at_level(logging.DEBUG):
            failing()

        assert any("failing completed" in r.getMessage() for r in caplog.records)

    def test_timed_with_threshold(self, caplog):
        @timed(threshold_ms=10_000)
        def fast_function():
            return "fast"

        with caplog.at_level(logging.DEBUG):
            result = fast_function()

        assert result == "fast"
        assert not any("fast_function completed" in r.getMessage() for r in caplog.records)


class TestLogContextManager:
    """Tests for LogContext context manager."""

    def test_context_manager_adds_context(self):
        with LogContext(blob_store="default", bucket="mybucket"):
            ctx = get_log_context()
            assert ctx["blob_store"] == "default"
            assert ctx["bucket"] == "mybucket"

    def test_context_manager_restores_context(self):
        set_log_context(existing="value")

        with LogContext(temporary="data"):
            ctx = get_log_context()
            assert ctx["existing"] == "value"
            assert ctx["temporary"] == "data"

        ctx = get_log_context()
        assert ctx["existing"] == "value"
        assert "temporary" not in ctx
