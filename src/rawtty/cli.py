"""
rawtty CLI.

Usage:
    rawtty size
    rawtty keys
    rawtty keys --signals --quit x
    rawtty keys --no-signals
"""

from __future__ import annotations

import time

import click
from rich.console import Console
from rich.markup import escape

from rawtty.config import get_settings
from rawtty.exceptions import RawTTYError
from rawtty.logging import setup_logging
from rawtty.terminal import is_tty, open_session

console = Console()
err_console = Console(stderr=True)


def describe_byte(value: int) -> str:
    """Human-readable description of one input byte."""
    if value < 0x20:
        name = f"^{chr(value + 0x40)}"
    elif value == 0x7F:
        name = "DEL"
    elif value < 0x80:
        name = repr(chr(value))
    else:
        name = "non-ASCII"
    return f"{value:3d}  0x{value:02x}  {name}"


def require_terminal() -> None:
    """Exit with 1 unless stdin is an interactive terminal."""
    if not is_tty():
        err_console.print("[red]Error:[/red] stdin is not a terminal")
        raise SystemExit(1)


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default=None,
    help="Log level (default from RAWTTY_LOG_LEVEL)",
)
@click.option("--log-json", is_flag=True, help="Emit JSON log lines")
@click.version_option(package_name="rawtty")
def main(log_level: str | None, log_json: bool) -> None:
    """rawtty raw-mode terminal utilities."""
    setup_logging(level=log_level, json_output=True if log_json else None)


# =============================================================================
# Size Command
# =============================================================================


@main.command()
def size() -> None:
    """Show the current terminal size as ROWS x COLS."""
    require_terminal()
    try:
        with open_session() as term:
            rows, cols = term.query_size()
    except RawTTYError as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise SystemExit(1)
    console.print(f"[cyan]{rows}[/cyan] x [cyan]{cols}[/cyan]")


# =============================================================================
# Keys Command
# =============================================================================


@main.command()
@click.option(
    "--signals/--no-signals",
    default=None,
    help="Let Ctrl-C raise SIGINT instead of arriving as a byte (default from RAWTTY_SIGNAL_PASSTHROUGH)",
)
@click.option("--quit", "-q", "quit_char", default="q", help="Character that ends the session")
def keys(signals: bool | None, quit_char: str) -> None:
    """Print every input byte received in raw mode.

    Escape sequences show up as several bytes. Press the quit character
    (default: q) to exit.
    """
    if len(quit_char) != 1 or ord(quit_char) > 0x7F:
        raise click.BadParameter("must be a single ASCII character", param_hint="--quit")
    quit_byte = ord(quit_char)
    interval = get_settings().poll_interval
    require_terminal()

    try:
        with open_session(signal_passthrough=signals) as term:
            console.print(f"[dim]Raw mode on. Press[/dim] {escape(repr(quit_char))} [dim]to quit.[/dim]")
            while True:
                value = term.try_read_byte()
                if value is None:
                    time.sleep(interval)
                    continue
                console.print(describe_byte(value), markup=False, highlight=False)
                if value == quit_byte:
                    break
    except RawTTYError as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise SystemExit(1)


# =============================================================================
# Entry Point
# =============================================================================


if __name__ == "__main__":
    main()
