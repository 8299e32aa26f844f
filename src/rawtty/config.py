"""
rawtty configuration.

Settings are read from environment variables with the ``RAWTTY_`` prefix
and can be overridden programmatically.

Example:
    >>> from rawtty.config import configure_settings
    >>> configure_settings(signal_passthrough=True)
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RawTTYSettings(BaseSettings):
    """Runtime settings for terminal sessions."""

    model_config = SettingsConfigDict(
        env_prefix="RAWTTY_",
        extra="ignore",
    )

    # Session defaults
    signal_passthrough: bool = Field(
        default=False,
        description="Keep Ctrl-C / Ctrl-\\ as signals instead of raw bytes",
    )
    flush_input: bool = Field(
        default=True,
        description="Discard pending input when switching modes (TCSAFLUSH)",
    )
    restore_at_exit: bool = Field(
        default=True,
        description="Restore abandoned sessions on garbage collection or interpreter exit",
    )

    # CLI
    poll_interval: float = Field(
        default=0.01,
        ge=0.001,
        le=1.0,
        description="Delay between non-blocking reads in the keys command (seconds)",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    log_json: bool = False


_settings: RawTTYSettings | None = None


def get_settings() -> RawTTYSettings:
    """Return the process-wide settings instance, creating it on first use."""
    global _settings
    if _settings is None:
        _settings = RawTTYSettings()
    return _settings


def configure_settings(**overrides: Any) -> RawTTYSettings:
    """
    Replace the process-wide settings.

    Args:
        **overrides: Field values taking precedence over the environment.

    Returns:
        The new settings instance.
    """
    global _settings
    _settings = RawTTYSettings(**overrides)
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next access re-reads the environment."""
    global _settings
    _settings = None


__all__ = [
    "RawTTYSettings",
    "get_settings",
    "configure_settings",
    "reset_settings",
]
