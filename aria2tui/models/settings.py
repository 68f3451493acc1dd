"""
Runtime settings resolved from command-line flags and environment variables.
"""

from pathlib import Path

from pydantic import BaseModel

DEFAULT_BIN = "aria2c"
DEFAULT_CONFIG_PATH = Path.home() / ".aria2tui.json"
DEFAULT_HISTORY_PATH = Path.home() / ".aria2tui_history.json"

BIN_ENV_VAR = "ARIA2_BIN"
CONFIG_ENV_VAR = "ARIA2TUI_CONFIG"
HISTORY_ENV_VAR = "ARIA2TUI_HISTORY"


class AppSettings(BaseModel):
    """Where the aria2c binary and the persisted files live."""

    bin: str = DEFAULT_BIN
    config_path: Path = DEFAULT_CONFIG_PATH
    history_path: Path = DEFAULT_HISTORY_PATH
