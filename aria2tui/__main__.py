"""
Main entry point for aria2tui.
This module handles top-level exception handling and CLI invocation.
"""

import logging
import sys

import typer
from rich.console import Console

from aria2tui.cli.app import app
from aria2tui.cli.formatters import format_error_with_suggestions
from aria2tui.exceptions import Aria2TuiError


def main() -> None:
    """Main entry point function."""
    log = logging.getLogger("aria2tui")
    console = Console(stderr=True)

    try:
        app()
    except (typer.Exit, typer.Abort):
        pass
    except KeyboardInterrupt:
        console.print("\n[yellow]⚠️  Cancelled by user.[/yellow]")
        sys.exit(0)
    except Aria2TuiError as e:
        console.print(f"\n{format_error_with_suggestions(e)}")
        sys.exit(1)
    except Exception as e:
        console.print(f"\n{format_error_with_suggestions(e, {'type': 'Unexpected'})}")
        log.debug("Full traceback:", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
