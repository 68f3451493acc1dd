"""
Defines the command-line interface for the application using Typer.
"""

import asyncio
import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from aria2tui import __version__
from aria2tui.core.config_store import ConfigStore
from aria2tui.core.state import AppState
from aria2tui.models.settings import (
    BIN_ENV_VAR,
    CONFIG_ENV_VAR,
    DEFAULT_BIN,
    DEFAULT_CONFIG_PATH,
    DEFAULT_HISTORY_PATH,
    HISTORY_ENV_VAR,
    AppSettings,
)
from aria2tui.storage.config_manager import ConfigManager
from aria2tui.storage.history import HistoryLedger

from .event_loop import TerminalHost
from .terminal import is_interactive

console = Console()
err_console = Console(stderr=True)

log = logging.getLogger("aria2tui")

KEYS_EPILOG = (
    "[bold]Keys[/bold]: ↑/k ↓/j move · Enter select · Esc back · space toggle · "
    "u URIs · t pick file · p preview · r run · s save · n new · d delete · q quit"
)

app = typer.Typer(
    name="aria2tui",
    help="Interactive terminal configurator and launcher for aria2c.",
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
)


def configure_logging(verbose: int, log_file: Path | None = None) -> None:
    """
    Sends log records to stderr through Rich, or to `log_file` when given so the
    interactive screen is left alone.
    """
    level = logging.WARNING
    if verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO

    if log_file is not None:
        handler: logging.Handler = logging.FileHandler(log_file, encoding="utf-8")
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
    else:
        handler = RichHandler(
            console=err_console,
            rich_tracebacks=True,
            show_path=False,
            show_level=False,
            markup=True,
        )

    root = logging.getLogger("aria2tui")
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)
    root.propagate = False


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"[bold]aria2tui[/bold] version [cyan]{__version__}[/cyan]")
        raise typer.Exit()


def build_app_state(settings: AppSettings) -> AppState:
    """Loads the saved options and the run history for a new session."""
    config_manager = ConfigManager(settings.config_path)
    store = ConfigStore(config_manager.load_config())
    history = HistoryLedger(settings.history_path)
    log.debug(
        f"Loaded options from '{settings.config_path}' and {len(history)} history "
        f"entries from '{settings.history_path}'."
    )
    return AppState(
        settings=settings,
        config_manager=config_manager,
        store=store,
        history=history,
    )


@app.command(epilog=KEYS_EPILOG)
def main_command(
    bin: str = typer.Option(
        DEFAULT_BIN,
        "--bin",
        envvar=BIN_ENV_VAR,
        help="aria2c executable to run.",
    ),
    config: Path = typer.Option(
        DEFAULT_CONFIG_PATH,
        "--config",
        envvar=CONFIG_ENV_VAR,
        help="File the options are saved to and loaded from.",
    ),
    history: Path = typer.Option(
        DEFAULT_HISTORY_PATH,
        "--history",
        envvar=HISTORY_ENV_VAR,
        help="File the run history is kept in.",
    ),
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase logging verbosity (-vv for debug).",
    ),
    log_file: Path | None = typer.Option(
        None,
        "--log-file",
        help="Write log messages to this file instead of the terminal.",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit.",
        is_eager=True,
        callback=_version_callback,
    ),
):
    """Configure an aria2c download interactively, then run it."""
    configure_logging(verbose, log_file)

    if not is_interactive():
        err_console.print("[red]✗ This tool needs a TTY (run in a real terminal).[/red]")
        raise typer.Exit(code=1)

    settings = AppSettings(
        bin=bin,
        config_path=config.expanduser(),
        history_path=history.expanduser(),
    )
    state = build_app_state(settings)
    host = TerminalHost(state, console=console)

    code = asyncio.run(host.run())
    raise typer.Exit(code=code)
