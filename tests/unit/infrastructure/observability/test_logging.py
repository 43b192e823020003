"""Tests for structured logging."""

import json
import logging
import sys

from cratekeeper.infrastructure.observability.logging import (
    CompactExceptionFormatter,
    CorrelationIdFilter,
    CustomJsonFormatter,
    configure_logging,
    get_correlation_id,
    set_correlation_id,
)


def _record(message: str = "hello", exc_info=None) -> logging.LogRecord:
    return logging.LogRecord(
        name="cratekeeper.test",
        level=logging.WARNING,
        pathname=__file__,
        lineno=10,
        msg=message,
        args=(),
        exc_info=exc_info,
    )


class TestCorrelationId:
    """Test correlation ID functionality."""

    def test_set_and_get_correlation_id(self):
        """Test setting and getting correlation ID."""
        result = set_correlation_id("scan-123")
        assert result == "scan-123"
        assert get_correlation_id() == "scan-123"

    def test_set_correlation_id_generates_short_id_when_none(self):
        """Test that setting None generates a 12 character id."""
        result = set_correlation_id(None)
        assert len(result) == 12
        assert get_correlation_id() == result

    def test_filter_adds_correlation_id(self):
        """Test that the filter copies the id onto the record."""
        set_correlation_id("abc")
        record = _record()

        assert CorrelationIdFilter().filter(record) is True
        assert record.correlation_id == "abc"


class TestFormatters:
    """Test the text and JSON formatters."""

    def test_compact_formatter_prefixes_correlation_id(self):
        """Test that text lines start with the correlation id."""
        record = _record()
        record.correlation_id = "abc123"

        line = CompactExceptionFormatter("%(message)s").format(record)

        assert line == "[abc123] hello"

    def test_compact_formatter_root_cause_first(self):
        """Test that chained exceptions are printed root cause first."""
        try:
            try:
                raise OSError("disk gone")
            except OSError as e:
                raise RuntimeError("scan failed") from e
        except RuntimeError:
            record = _record(exc_info=sys.exc_info())

        text = CompactExceptionFormatter("%(message)s").formatException(record.exc_info)

        lines = [line for line in text.splitlines() if line.startswith("╰─►")]
        assert lines == ["╰─► OSError: disk gone", "╰─► RuntimeError: scan failed"]

    def test_json_formatter_fields(self):
        """Test that JSON lines carry level, logger and correlation id."""
        record = _record("scanned")
        record.correlation_id = "abc123"

        payload = json.loads(CustomJsonFormatter("%(message)s").format(record))

        assert payload["message"] == "scanned"
        assert payload["level"] == "WARNING"
        assert payload["logger"] == "cratekeeper.test"
        assert payload["correlation_id"] == "abc123"


class TestLoggingConfiguration:
    """Test logging configuration."""

    def test_configure_logging_debug_level(self):
        """Test configuring logging with DEBUG level."""
        configure_logging(log_level="DEBUG", json_format=False, app_name="test-app")
        assert logging.getLogger("test").getEffectiveLevel() <= logging.DEBUG

    def test_configure_logging_replaces_handlers(self):
        """Test that repeated configuration doesn't stack handlers."""
        configure_logging(log_level="INFO", json_format=True, app_name="test-app")
        configure_logging(log_level="INFO", json_format=True, app_name="test-app")

        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert isinstance(handlers[0].formatter, CustomJsonFormatter)

    def test_configure_logging_invalid_level_defaults_to_info(self):
        """Test that an unknown level name falls back to INFO."""
        configure_logging(log_level="LOUD", json_format=False, app_name="test-app")
        assert logging.getLogger().level == logging.INFO
