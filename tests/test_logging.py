"""
Tests for logging helpers.
"""

from __future__ import annotations

import json
import logging

import pytest
from rich.logging import RichHandler

from rawtty.config import configure_settings
from rawtty.logging import ROOT_LOGGER_NAME, JsonFormatter, get_logger, setup_logging


@pytest.fixture
def clean_logger():
    """Restore the package logger after each test."""
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    handlers = list(logger.handlers)
    level = logger.level
    yield logger
    logger.handlers = handlers
    logger.setLevel(level)


class TestGetLogger:
    """Test get_logger()."""

    def test_namespaced_module(self):
        """Package modules keep their own name."""
        assert get_logger("rawtty.terminal.session").name == "rawtty.terminal.session"

    def test_foreign_name_is_prefixed(self):
        """Other names are placed under the package logger."""
        assert get_logger("myapp").name == "rawtty.myapp"

    def test_root_name(self):
        """The package name maps to the package logger."""
        assert get_logger("rawtty") is logging.getLogger("rawtty")

    def test_library_is_silent_by_default(self):
        """A NullHandler is attached on import."""
        handlers = logging.getLogger(ROOT_LOGGER_NAME).handlers
        assert any(isinstance(h, logging.NullHandler) for h in handlers)


class TestSetupLogging:
    """Test setup_logging()."""

    def test_rich_handler_by_default(self, clean_logger):
        """Console output uses rich."""
        logger = setup_logging(level="DEBUG", json_output=False)
        assert logger.level == logging.DEBUG
        assert any(isinstance(h, RichHandler) for h in logger.handlers)

    def test_json_handler(self, clean_logger):
        """json_output switches to the JSON formatter."""
        logger = setup_logging(level="INFO", json_output=True)
        formatters = [h.formatter for h in logger.handlers if h.get_name() == "rawtty-handler"]
        assert len(formatters) == 1
        assert isinstance(formatters[0], JsonFormatter)

    def test_repeated_setup_replaces_handler(self, clean_logger):
        """Calling twice leaves one rawtty handler."""
        setup_logging(level="INFO", json_output=False)
        logger = setup_logging(level="INFO", json_output=True)
        named = [h for h in logger.handlers if h.get_name() == "rawtty-handler"]
        assert len(named) == 1

    def test_defaults_from_settings(self, clean_logger):
        """Level and format default to the configured settings."""
        configure_settings(log_level="ERROR", log_json=True)
        logger = setup_logging()
        assert logger.level == logging.ERROR
        assert any(isinstance(h.formatter, JsonFormatter) for h in logger.handlers)


class TestJsonFormatter:
    """Test JsonFormatter output."""

    def test_format(self):
        """Records become one JSON object per line."""
        record = logging.LogRecord(
            "rawtty.terminal.session", logging.ERROR, __file__, 1, "restore %s", ("failed",), None
        )
        payload = json.loads(JsonFormatter().format(record))
        assert payload["level"] == "ERROR"
        assert payload["logger"] == "rawtty.terminal.session"
        assert payload["message"] == "restore failed"
        assert "timestamp" in payload

    def test_exception_included(self):
        """Exception text is included when present."""
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            import sys

            exc_info = sys.exc_info()
        record = logging.LogRecord("rawtty", logging.ERROR, __file__, 1, "oops", (), exc_info)
        payload = json.loads(JsonFormatter().format(record))
        assert "RuntimeError: boom" in payload["exception"]
