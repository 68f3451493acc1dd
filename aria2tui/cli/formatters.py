"""
Functions for formatting errors in the console using Rich.
"""

from rich.panel import Panel
from rich.table import Table
from rich.text import Text


def format_error_with_suggestions(
    error: Exception, context: dict | None = None
) -> Panel:
    """Formats an error with actionable suggestions into a Rich Panel."""
    error_type = type(error).__name__
    error_msg = str(error)

    suggestions_map = {
        "TerminalError": [
            "• Run aria2tui directly in an interactive terminal.",
            "• Input and output must not be piped or redirected.",
        ],
        "ConfigurationError": [
            "• Check that the config file location is writable.",
            "• Use --config or ARIA2TUI_CONFIG to choose another file.",
        ],
        "HistoryError": [
            "• Check that the history file location is writable.",
            "• Use --history or ARIA2TUI_HISTORY to choose another file.",
        ],
        "FileNotFoundError": [
            "• Make sure aria2c is installed and on your PATH.",
            "• Use --bin or ARIA2_BIN to point at the aria2c executable.",
        ],
    }

    suggestions = suggestions_map.get(
        error_type, ["• Run the command with -vv for detailed logs."]
    )

    error_text = Text()
    error_text.append(f"{error_type}: ", style="bold red")
    error_text.append(error_msg)

    suggestion_text = Text("\n".join(suggestions))

    content = Table.grid(padding=(1, 0))
    content.add_row(error_text)
    content.add_row()
    content.add_row(Text("Suggestions", style="bold yellow"))
    content.add_row(suggestion_text)

    if context:
        content.add_row()
        content.add_row(Text(f"Context: {context}", style="dim"))

    return Panel(
        content,
        title="[bold red]An Error Occurred[/bold red]",
        border_style="red",
        expand=False,
    )
