"""
Logging helpers.

The library only emits records; nothing is printed unless the application
calls setup_logging() (the CLI does).
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER_NAME = "rawtty"
_HANDLER_NAME = "rawtty-handler"

logging.getLogger(ROOT_LOGGER_NAME).addHandler(logging.NullHandler())


class JsonFormatter(logging.Formatter):
    """Render records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger inside the rawtty namespace.

    Args:
        name: Usually ``__name__`` of the calling module.
    """
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def setup_logging(level: str | None = None, json_output: bool | None = None) -> logging.Logger:
    """
    Install a single stderr handler on the rawtty logger.

    Args:
        level: Log level name. Defaults to the configured ``log_level``.
        json_output: Emit JSON lines instead of rich console output.
            Defaults to the configured ``log_json``.

    Returns:
        The configured package logger.
    """
    from rawtty.config import get_settings

    settings = get_settings()
    level = (level or settings.log_level).upper()
    if json_output is None:
        json_output = settings.log_json

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for existing in list(logger.handlers):
        if existing.get_name() == _HANDLER_NAME:
            logger.removeHandler(existing)

    handler: logging.Handler
    if json_output:
        handler = logging.StreamHandler()
        handler.setFormatter(JsonFormatter())
    else:
        handler = RichHandler(console=Console(stderr=True), show_path=False)
    handler.set_name(_HANDLER_NAME)

    logger.addHandler(handler)
    logger.setLevel(level)
    return logger


__all__ = ["get_logger", "setup_logging", "JsonFormatter", "ROOT_LOGGER_NAME"]
