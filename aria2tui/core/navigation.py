"""
The interactive state machine: routes key events to the view or editor that is
currently open, edits the options and history, and starts aria2c.

The machine never touches the terminal. Everything that involves the outside
world (timers, spawning the process, leaving the program) goes through a `Host`,
so the whole flow can be driven key by key in tests.
"""

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Protocol

from aria2tui.exceptions import ConfigurationError, InvalidValueError
from aria2tui.models.fields import (
    GROUPS,
    INPUT_FILE_KEY,
    INPUT_GROUP,
    URIS_KEY,
    Field,
    FieldKind,
    fields_in_group,
    get_field,
)
from aria2tui.models.history import HistoryEntry, RunStatus
from aria2tui.utils.formatting import format_value
from aria2tui.utils.path import list_supported_files
from aria2tui.utils.shell import format_command

from .arguments import build_arguments, can_launch
from .keys import Key, is_text_key
from .state import (
    AppState,
    ConfirmState,
    FileBrowserState,
    InlineEditState,
    MessageLevel,
    Mode,
    PendingAction,
    PromptState,
    StatusMessage,
    View,
)
from .validation import validate_field_value

log = logging.getLogger(__name__)

# Delay before returning to the group list once an input source is set, so the
# confirmation is visible first.
AUTO_RETURN_DELAY = 0.1
# Exit status used when aria2c is terminated by a signal.
SIGNAL_EXIT_CODE = 128


class Host(Protocol):
    """The event loop side of the application."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> None:
        """Runs `callback` on the event queue after `delay` seconds."""

    def launch(
        self,
        args: list[str],
        on_exit: Callable[[int], None],
        on_error: Callable[[Exception], None],
    ) -> None:
        """Starts aria2c with `args`, reporting its return code or spawn failure."""

    def exit(self, code: int, message: str | None = None) -> None:
        """Ends the program with `code` after restoring the terminal."""


class NavigationStateMachine:
    """Handles every key event against the shared `AppState`."""

    def __init__(self, app: AppState, host: Host):
        self.app = app
        self.host = host
        self.nav.input_ready = self.store.is_ready()
        self._mode_handlers = {
            Mode.FILE_BROWSER: self._handle_file_browser_key,
            Mode.INLINE_EDIT: self._handle_inline_edit_key,
            Mode.CONFIRM: self._handle_confirm_key,
            Mode.PROMPT: self._handle_prompt_key,
            Mode.PREVIEW: self._handle_preview_key,
            Mode.LIST: self._handle_list_key,
        }

    @property
    def nav(self):
        return self.app.nav

    @property
    def store(self):
        return self.app.store

    @property
    def history(self):
        return self.app.history

    def notify(self, text: str, level: MessageLevel = MessageLevel.INFO) -> None:
        self.nav.message = StatusMessage(text, level)

    def report_error(self, error: Exception) -> None:
        """Shows an unexpected handler failure in the status banner."""
        self.notify(f"Unexpected error: {error}", MessageLevel.ERROR)

    def _report_history_error(self) -> None:
        if self.history.last_error:
            self.notify(self.history.last_error, MessageLevel.ERROR)

    def handle_key(self, key: str) -> None:
        if key == Key.INTERRUPT:
            self.quit()
            return
        self._mode_handlers[self.nav.mode](key)

    # ------------------------------------------------------------------
    # List mode
    # ------------------------------------------------------------------

    def _handle_list_key(self, key: str) -> None:
        nav = self.nav
        if key == "q":
            self.quit()
        elif key in (Key.UP, "k"):
            self.move_cursor(-1)
        elif key in (Key.DOWN, "j"):
            self.move_cursor(1)
        elif key == Key.ESCAPE:
            self.go_back()
        elif nav.view == View.HISTORY and key in ("n", "N"):
            self.start_new_run()
        elif nav.view == View.HISTORY and key in ("d", "D"):
            self.delete_history_entry()
        elif key == " ":
            self.toggle_selected()
        elif key == "u":
            self.open_uri_shortcut()
        elif key == "t":
            self.open_file_shortcut()
        elif key == "p":
            nav.mode = Mode.PREVIEW
        elif key == "s":
            self.save_config()
        elif key == "r":
            self.run()
        elif key == Key.ENTER:
            self.select()

    def _max_cursor(self) -> int:
        nav = self.nav
        if nav.view == View.HISTORY:
            # Row 0 is "new download", entries follow from row 1.
            return len(self.history)
        if nav.view == View.GROUPS:
            return len(GROUPS) - 1
        return max(0, len(fields_in_group(nav.current_group or "")) - 1)

    def move_cursor(self, delta: int) -> None:
        self.nav.selected = max(0, min(self._max_cursor(), self.nav.selected + delta))

    def go_back(self) -> None:
        nav = self.nav
        if nav.view == View.FIELDS:
            self.exit_group()
        elif nav.view == View.GROUPS:
            nav.view = View.HISTORY
            nav.selected = 0

    def select(self) -> None:
        view = self.nav.view
        if view == View.HISTORY:
            self.select_history_row()
        elif view == View.GROUPS:
            self.enter_group()
        else:
            self.activate_field()

    # ------------------------------------------------------------------
    # History view
    # ------------------------------------------------------------------

    def start_new_run(self) -> None:
        """Goes to the group list, or straight to the input fields if no input is set."""
        nav = self.nav
        nav.current_history_id = None
        nav.input_ready = self.store.is_ready()
        nav.current_group = None
        nav.view = View.GROUPS
        nav.selected = 0
        if not nav.input_ready:
            nav.view = View.FIELDS
            nav.current_group = INPUT_GROUP

    def select_history_row(self) -> None:
        nav = self.nav
        if nav.selected == 0 or len(self.history) == 0:
            self.start_new_run()
            return

        entry = self.history.get(nav.selected - 1)
        if entry is None:
            return
        if entry.status == RunStatus.COMPLETED:
            nav.confirm = ConfirmState(PendingAction.RESTORE_HISTORY, entry.id)
            nav.mode = Mode.CONFIRM
            return
        self.restore_entry(entry)

    def restore_entry(self, entry: HistoryEntry) -> None:
        nav = self.nav
        self.store.apply(entry.config)
        nav.current_history_id = entry.id
        nav.input_ready = self.store.is_ready()
        nav.mode = Mode.LIST
        nav.view = View.GROUPS
        nav.current_group = None
        nav.selected = 0
        self.notify(f"Restored: {entry.filename}", MessageLevel.SUCCESS)

    def delete_history_entry(self) -> None:
        nav = self.nav
        if nav.selected == 0 or len(self.history) == 0:
            return
        if not self.history.delete(nav.selected - 1):
            return
        nav.selected = min(nav.selected, len(self.history))
        self.notify("History entry deleted")
        self._report_history_error()

    def _handle_confirm_key(self, key: str) -> None:
        nav = self.nav
        if key in ("y", "Y"):
            pending = nav.confirm
            nav.confirm = None
            nav.mode = Mode.LIST
            if pending is None:
                return
            if pending.action == PendingAction.RESTORE_HISTORY:
                entry = self.history.find(pending.history_id)
                if entry is not None:
                    self.restore_entry(entry)
        elif key in ("n", "N", Key.ESCAPE):
            nav.confirm = None
            nav.mode = Mode.LIST

    # ------------------------------------------------------------------
    # Group list
    # ------------------------------------------------------------------

    def enter_group(self) -> None:
        nav = self.nav
        if not 0 <= nav.selected < len(GROUPS):
            return
        group = GROUPS[nav.selected]
        nav.input_ready = self.store.is_ready()
        if group.key != INPUT_GROUP and not nav.input_ready:
            self.notify(
                "Set an input source first (download URIs, torrent or input file)",
                MessageLevel.WARNING,
            )
            return
        nav.view = View.FIELDS
        nav.current_group = group.key
        nav.selected = 0

    def exit_group(self) -> None:
        """
        Returns to the group list. Leaving the input group refreshes readiness,
        may fill in the output file name, and announces newly unlocked groups.
        """
        nav = self.nav
        was_input_group = nav.current_group == INPUT_GROUP
        was_ready = nav.input_ready
        nav.input_ready = self.store.is_ready()

        if was_input_group and nav.input_ready:
            name = self.store.derive_output_name()
            if name:
                self.notify(f"Output file name set to: {name}")

        if was_input_group and not was_ready and nav.input_ready:
            self.notify(
                "Input source set, the other groups are unlocked",
                MessageLevel.SUCCESS,
            )

        nav.view = View.GROUPS
        nav.current_group = None
        nav.selected = 0

    # ------------------------------------------------------------------
    # Field list
    # ------------------------------------------------------------------

    def _selected_field(self) -> Field | None:
        nav = self.nav
        if nav.view != View.FIELDS or nav.current_group is None:
            return None
        group_fields = fields_in_group(nav.current_group)
        if 0 <= nav.selected < len(group_fields):
            return group_fields[nav.selected]
        return None

    def toggle_selected(self) -> None:
        field = self._selected_field()
        if field is not None and field.kind == FieldKind.BOOL:
            self.store.toggle(field.key)

    def activate_field(self) -> None:
        field = self._selected_field()
        if field is None:
            return
        if field.kind == FieldKind.ACTION:
            self.run()
        elif field.kind == FieldKind.BOOL:
            self.store.toggle(field.key)
        elif field.kind == FieldKind.ENUM:
            self.store.cycle_enum(field.key)
        elif field.key == URIS_KEY:
            self.begin_uri_edit()
        elif field.kind == FieldKind.FILE:
            self.open_file_browser(field.key)
        else:
            self.begin_prompt(field)

    def _after_input_change(self, was_ready: bool) -> str | None:
        """
        Called after an input-group field was changed. When this made the input
        ready, fills in a blank output name and schedules the return to the group
        list. Returns the derived output name, if any.
        """
        if self.nav.current_group != INPUT_GROUP:
            return None
        if was_ready or not self.store.is_ready():
            return None
        self.nav.input_ready = True
        name = self.store.derive_output_name()
        self.host.call_later(AUTO_RETURN_DELAY, self.exit_group)
        return name

    def _enter_input_group(self, field_key: str) -> None:
        nav = self.nav
        nav.view = View.FIELDS
        nav.current_group = INPUT_GROUP
        nav.selected = next(
            i for i, f in enumerate(fields_in_group(INPUT_GROUP)) if f.key == field_key
        )

    def open_uri_shortcut(self) -> None:
        nav = self.nav
        if nav.view == View.GROUPS or (
            nav.view == View.FIELDS and nav.current_group == INPUT_GROUP
        ):
            self._enter_input_group(URIS_KEY)
            self.begin_uri_edit()

    def open_file_shortcut(self) -> None:
        nav = self.nav
        if nav.view == View.GROUPS or (
            nav.view == View.FIELDS and nav.current_group == INPUT_GROUP
        ):
            self._enter_input_group(INPUT_FILE_KEY)
            self.open_file_browser(INPUT_FILE_KEY)

    # ------------------------------------------------------------------
    # Prompt
    # ------------------------------------------------------------------

    def begin_prompt(self, field: Field) -> None:
        current = format_value(self.store.get(field.key))
        self.nav.prompt = PromptState(
            target_key=field.key,
            label=field.label,
            hint=field.hint,
            buffer=current,
            validation=validate_field_value(field, current),
        )
        self.nav.mode = Mode.PROMPT

    def _close_prompt(self) -> None:
        self.nav.prompt = None
        self.nav.mode = Mode.LIST

    def _revalidate_prompt(self) -> None:
        prompt = self.nav.prompt
        field = get_field(prompt.target_key)
        if field is not None:
            prompt.validation = validate_field_value(field, prompt.buffer)

    def _handle_prompt_key(self, key: str) -> None:
        prompt = self.nav.prompt
        if prompt is None:
            self.nav.mode = Mode.LIST
            return
        if key == Key.ESCAPE:
            self._close_prompt()
        elif key == Key.ENTER:
            self.commit_prompt()
            self._close_prompt()
        elif key == Key.BACKSPACE:
            prompt.buffer = prompt.buffer[:-1]
            self._revalidate_prompt()
        elif is_text_key(key):
            prompt.buffer += key
            self._revalidate_prompt()

    def commit_prompt(self) -> None:
        prompt = self.nav.prompt
        field = get_field(prompt.target_key)
        if field is None:
            return
        if not prompt.validation.valid:
            self.notify(prompt.validation.message, MessageLevel.ERROR)
            return
        was_ready = self.store.is_ready()
        try:
            self.store.commit(field.key, prompt.buffer)
        except InvalidValueError as e:
            self.notify(str(e), MessageLevel.ERROR)
            return
        if field.group == INPUT_GROUP:
            self._after_input_change(was_ready)

    # ------------------------------------------------------------------
    # Inline URI editor
    # ------------------------------------------------------------------

    def begin_uri_edit(self) -> None:
        self.nav.inline_edit = InlineEditState(
            target_key=URIS_KEY, buffer=" ".join(self.store.config.uris)
        )
        self.nav.mode = Mode.INLINE_EDIT

    def _close_inline_edit(self) -> None:
        self.nav.inline_edit = None
        self.nav.mode = Mode.LIST

    def _handle_inline_edit_key(self, key: str) -> None:
        edit = self.nav.inline_edit
        if edit is None:
            self.nav.mode = Mode.LIST
            return
        if key == Key.ESCAPE:
            self._close_inline_edit()
        elif key == Key.ENTER:
            self.commit_uri_edit()
        elif key == Key.BACKSPACE:
            edit.buffer = edit.buffer[:-1]
        elif is_text_key(key):
            edit.buffer += key

    def commit_uri_edit(self) -> None:
        edit = self.nav.inline_edit
        was_ready = self.store.is_ready()
        uris = edit.buffer.split()
        self.store.set(edit.target_key, uris)
        self._close_inline_edit()

        name = self._after_input_change(was_ready)
        if uris:
            if name:
                self.notify(
                    f"Download URIs set, file name: {name}", MessageLevel.SUCCESS
                )
            else:
                self.notify("Download URIs set", MessageLevel.SUCCESS)

    # ------------------------------------------------------------------
    # File browser
    # ------------------------------------------------------------------

    def open_file_browser(self, target_key: str) -> None:
        directory = Path.cwd()
        self.nav.file_browser = FileBrowserState(
            target_key=target_key,
            directory=directory,
            entries=list_supported_files(directory),
        )
        self.nav.mode = Mode.FILE_BROWSER

    def _close_file_browser(self) -> None:
        self.nav.file_browser = None
        self.nav.mode = Mode.LIST

    def _handle_file_browser_key(self, key: str) -> None:
        browser = self.nav.file_browser
        if browser is None:
            self.nav.mode = Mode.LIST
            return
        if key in (Key.ESCAPE, "q"):
            self._close_file_browser()
            self.notify("Selection cancelled")
        elif key in (Key.UP, "k"):
            browser.cursor = max(0, browser.cursor - 1)
        elif key in (Key.DOWN, "j"):
            browser.cursor = min(max(0, len(browser.entries) - 1), browser.cursor + 1)
        elif key == Key.ENTER:
            self.pick_file()

    def pick_file(self) -> None:
        browser = self.nav.file_browser
        if not browser.entries:
            self._close_file_browser()
            self.notify(
                "No selectable files in the current directory", MessageLevel.WARNING
            )
            return
        picked = browser.entries[browser.cursor]
        was_ready = self.store.is_ready()
        self.store.set(browser.target_key, str(picked.path))
        self._close_file_browser()
        self.notify(f"Selected file: {picked.name}", MessageLevel.SUCCESS)

        field = get_field(browser.target_key)
        if field is not None and field.group == INPUT_GROUP:
            self._after_input_change(was_ready)

    # ------------------------------------------------------------------
    # Preview
    # ------------------------------------------------------------------

    def _handle_preview_key(self, key: str) -> None:
        nav = self.nav
        if key == Key.ESCAPE:
            nav.mode = Mode.LIST
            nav.view = View.GROUPS
            nav.current_group = None
            nav.selected = 0
        elif key == "q":
            self.quit()
        elif key in (Key.ENTER, "r"):
            self.run()

    # ------------------------------------------------------------------
    # Global actions
    # ------------------------------------------------------------------

    def save_config(self) -> None:
        manager = self.app.config_manager
        try:
            manager.save_config(self.store.config)
        except ConfigurationError as e:
            self.notify(str(e), MessageLevel.ERROR)
            return
        self.notify(f"Saved: {manager.config_file_path}", MessageLevel.SUCCESS)

    def quit(self) -> None:
        self.host.exit(0)

    def run(self) -> None:
        """
        Records the run in the history and hands the command to the host.

        A restored history entry is reused, so running it again updates that
        entry instead of adding a new one.
        """
        args = build_arguments(self.store.config)
        if not can_launch(args, self.store.config):
            self.notify(
                "No input set: press u to add URIs, t to pick a torrent, "
                "or set an input file",
                MessageLevel.WARNING,
            )
            return

        history_id = self.nav.current_history_id
        if history_id is not None and self.history.find(history_id) is not None:
            self.history.update_status(history_id, RunStatus.PENDING)
        else:
            history_id = self.history.add(self.store.snapshot(), RunStatus.PENDING)
        self.nav.current_history_id = history_id
        self._report_history_error()

        log.info(f"Launching: {format_command(self.app.settings.bin, args)}")
        self.host.launch(args, self.on_process_exit, self.on_launch_error)

    def on_process_exit(self, returncode: int) -> None:
        """Records the outcome of the run and leaves with a matching status."""
        status = RunStatus.COMPLETED if returncode == 0 else RunStatus.FAILED
        if self.nav.current_history_id is not None:
            self.history.update_status(self.nav.current_history_id, status)
        log.info(f"aria2c exited with code {returncode}.")
        self.host.exit(SIGNAL_EXIT_CODE if returncode < 0 else returncode)

    def on_launch_error(self, error: Exception) -> None:
        if self.nav.current_history_id is not None:
            self.history.update_status(self.nav.current_history_id, RunStatus.FAILED)
        log.error(f"Failed to start '{self.app.settings.bin}': {error}")
        self.host.exit(1, f"Failed to start '{self.app.settings.bin}': {error}")
