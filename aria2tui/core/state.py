"""
Application and navigation state.

A single `AppState` is created at startup and handed to every handler; nothing
here is global.
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from aria2tui.models.settings import AppSettings
from aria2tui.storage.config_manager import ConfigManager
from aria2tui.storage.history import HistoryLedger
from aria2tui.utils.path import FileEntry

from .config_store import ConfigStore
from .validation import ValidationResult

MESSAGE_TTL_SECONDS = 4.0


class Mode(str, Enum):
    LIST = "list"
    PROMPT = "prompt"
    CONFIRM = "confirm"
    FILE_BROWSER = "filebrowser"
    INLINE_EDIT = "inline-edit"
    PREVIEW = "preview"


class View(str, Enum):
    HISTORY = "history"
    GROUPS = "groups"
    FIELDS = "fields"


class PendingAction(str, Enum):
    """Actions that wait for a yes/no answer in the confirm dialog."""

    RESTORE_HISTORY = "restore-history"


class MessageLevel(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass
class StatusMessage:
    text: str
    level: MessageLevel = MessageLevel.INFO
    created_at: float = field(default_factory=time.monotonic)

    def is_visible(self, now: float | None = None) -> bool:
        now = time.monotonic() if now is None else now
        return now - self.created_at < MESSAGE_TTL_SECONDS


@dataclass
class PromptState:
    target_key: str
    label: str
    hint: str = ""
    buffer: str = ""
    validation: ValidationResult = field(default_factory=ValidationResult)


@dataclass
class InlineEditState:
    target_key: str
    buffer: str = ""


@dataclass
class FileBrowserState:
    target_key: str
    directory: Path
    entries: list[FileEntry] = field(default_factory=list)
    cursor: int = 0


@dataclass
class ConfirmState:
    action: PendingAction
    history_id: int


@dataclass
class NavigationState:
    """Where the user is and what sub-editor, if any, is open."""

    mode: Mode = Mode.LIST
    view: View = View.HISTORY
    current_group: str | None = None
    selected: int = 0
    prompt: PromptState | None = None
    inline_edit: InlineEditState | None = None
    file_browser: FileBrowserState | None = None
    confirm: ConfirmState | None = None
    message: StatusMessage | None = None
    # Readiness as last acknowledged by the group list.
    input_ready: bool = False
    # History entry restored by the user, or recorded for the running download.
    current_history_id: int | None = None


@dataclass
class AppState:
    settings: AppSettings
    config_manager: ConfigManager
    store: ConfigStore
    history: HistoryLedger
    nav: NavigationState = field(default_factory=NavigationState)
