"""Tests for error handling and logging modules."""

import json
import logging
import pytest

from intent_match.errors import (
    ConfigurationError,
    ErrorCategory,
    IntentMatchError,
    InvalidPhraseEntryError,
    InvalidRuleError,
    ResourceError,
    ValidationError,
    format_error_for_display,
)
from intent_match.logging import (
    ROOT_LOGGER_NAME,
    ContextAdapter,
    LogConfig,
    LogLevel,
    StructuredFormatter,
    bind,
    configure_logging,
    get_logger,
    set_verbosity,
)


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    configure_logging(LogConfig())


def make_record(**extra):
    record = logging.LogRecord(
        name="intent_match.pipeline",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Top match: %s",
        args=("NOW",),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestErrorCategory:
    """Tests for ErrorCategory enum."""

    def test_categories(self):
        """Test error category values."""
        assert ErrorCategory.VALIDATION.value == "validation"
        assert ErrorCategory.CONFIGURATION.value == "configuration"
        assert ErrorCategory.RESOURCE.value == "resource"
        assert ErrorCategory.INTERNAL.value == "internal"


class TestIntentMatchError:
    """Tests for the error hierarchy."""

    def test_basic_error(self):
        """Test basic error creation."""
        error = IntentMatchError("Test error")

        assert str(error) == "Test error"
        assert error.message == "Test error"
        assert error.context == {}
        assert error.category == ErrorCategory.INTERNAL

    def test_error_with_context(self):
        """Test error with context."""
        error = IntentMatchError("Test error", context={"key": "NOW"})

        assert "context: {'key': 'NOW'}" in str(error)

    def test_validation_errors(self):
        """Test construction errors share the validation category."""
        for cls in (InvalidRuleError, InvalidPhraseEntryError):
            error = cls("bad")
            assert isinstance(error, ValidationError)
            assert isinstance(error, IntentMatchError)
            assert error.category == ErrorCategory.VALIDATION

    def test_other_categories(self):
        """Test configuration and resource categories."""
        assert ConfigurationError("x").category == ErrorCategory.CONFIGURATION
        assert ResourceError("x").category == ErrorCategory.RESOURCE


class TestFormatErrorForDisplay:
    """Tests for format_error_for_display."""

    def test_package_error(self):
        """Test formatting a package error."""
        assert format_error_for_display(ResourceError("File not found")) == "[resource] File not found"

    def test_package_error_with_context(self):
        """Test context is rendered as key=value pairs."""
        error = InvalidPhraseEntryError("Duplicate phrase key 'NOW'", context={"key": "NOW", "index": 3})

        assert format_error_for_display(error) == "[validation] Duplicate phrase key 'NOW' (key=NOW, index=3)"

    def test_foreign_error(self):
        """Test formatting an unrelated exception."""
        assert format_error_for_display(KeyError("x")) == "[error] KeyError: 'x'"


class TestStructuredFormatter:
    """Tests for StructuredFormatter."""

    def test_text_format(self):
        """Test text output includes message and context."""
        formatter = StructuredFormatter(include_timestamp=False)
        output = formatter.format(make_record(confidence=100))

        assert "INFO" in output
        assert "Top match: NOW" in output
        assert "[confidence=100]" in output

    def test_text_without_context(self):
        """Test context can be switched off."""
        formatter = StructuredFormatter(include_timestamp=False, include_context=False)
        assert "confidence" not in formatter.format(make_record(confidence=100))

    def test_json_format(self):
        """Test JSON output."""
        formatter = StructuredFormatter(json_format=True)
        data = json.loads(formatter.format(make_record(confidence=100, entry=object())))

        assert data["level"] == "info"
        assert data["message"] == "Top match: NOW"
        assert data["logger"] == "intent_match.pipeline"
        assert data["context"]["confidence"] == 100
        assert isinstance(data["context"]["entry"], str)
        assert "timestamp" in data


class TestLoggers:
    """Tests for logger helpers."""

    def test_get_logger(self):
        """Test package loggers sit under the package namespace."""
        logger = get_logger("intent_match.tests")

        assert logger.name == "intent_match.tests"
        assert logging.getLogger(ROOT_LOGGER_NAME).handlers

    def test_bind(self, caplog):
        """Test bound context appears on records."""
        logger = bind(get_logger("intent_match.tests"), request="r1")

        with caplog.at_level(logging.INFO, logger="intent_match"):
            logger.info("resolved", extra={"key": "NOW"})

        record = caplog.records[-1]
        assert record.request == "r1"
        assert record.key == "NOW"

    def test_bind_nested(self, caplog):
        """Test binding onto an adapter keeps earlier fields."""
        logger = bind(bind(get_logger("intent_match.tests"), request="r1"), attempt=2)
        assert isinstance(logger, ContextAdapter)

        with caplog.at_level(logging.INFO, logger="intent_match"):
            logger.info("resolved", extra={"attempt": 3})

        record = caplog.records[-1]
        assert record.request == "r1"
        assert record.attempt == 3

    def test_set_verbosity(self):
        """Test verbosity levels map onto the package logger."""
        set_verbosity(LogLevel.DEBUG)
        assert logging.getLogger(ROOT_LOGGER_NAME).level == logging.DEBUG

        set_verbosity(LogLevel.QUIET)
        assert logging.getLogger(ROOT_LOGGER_NAME).level == logging.ERROR

    def test_reconfigure_replaces_handlers(self):
        """Test configuring twice does not stack handlers."""
        configure_logging(LogConfig())
        configure_logging(LogConfig())

        assert len(logging.getLogger(ROOT_LOGGER_NAME).handlers) == 1

    def test_log_file(self, tmp_path):
        """Test records are written to the configured file."""
        log_file = tmp_path / "logs" / "intent.log"
        configure_logging(LogConfig(level=LogLevel.QUIET, log_file=log_file, json_format=True))

        get_logger("intent_match.tests").debug("resolved", extra={"key": "NOW"})
        for handler in logging.getLogger(ROOT_LOGGER_NAME).handlers:
            handler.flush()

        line = log_file.read_text(encoding="utf-8").strip().splitlines()[-1]
        assert json.loads(line)["context"]["key"] == "NOW"
