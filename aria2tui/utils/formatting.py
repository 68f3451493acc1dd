"""
Helper functions for formatting values into human-readable strings.
"""

from datetime import datetime
from typing import Any


def format_value(value: Any) -> str:
    """Formats an option value for display or for pre-filling an editor."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    if isinstance(value, list):
        return " ".join(str(v) for v in value)
    return str(value)


def truncate(text: str, width: int) -> str:
    """Shortens `text` to `width` characters, marking the cut with an ellipsis."""
    if width <= 0:
        return ""
    if len(text) <= width:
        return text
    return text[: width - 1] + "…"


def tail(text: str, width: int) -> str:
    """Keeps the end of `text` so it fits in `width` characters."""
    if width <= 0:
        return ""
    if len(text) <= width:
        return text
    return "…" + text[-(width - 1) :] if width > 1 else "…"


def format_timestamp(moment: datetime) -> str:
    """Formats a timestamp as local 'MM/DD HH:MM'."""
    return moment.astimezone().strftime("%m/%d %H:%M")
