from __future__ import annotations

from aria2tui.core.keys import Key
from aria2tui.core.navigation import AUTO_RETURN_DELAY, SIGNAL_EXIT_CODE
from aria2tui.core.state import MessageLevel, Mode, PendingAction, View
from aria2tui.models.fields import GROUPS, INPUT_GROUP, fields_in_group
from aria2tui.models.history import RunStatus


def group_index(group: str) -> int:
    return next(i for i, g in enumerate(GROUPS) if g.key == group)


def field_index(group: str, key: str) -> int:
    return next(i for i, f in enumerate(fields_in_group(group)) if f.key == key)


def open_group(machine, press, group: str) -> None:
    machine.nav.view = View.GROUPS
    machine.nav.selected = group_index(group)
    press(Key.ENTER)


class TestHistoryView:
    def test_initial_state(self, machine) -> None:
        assert machine.nav.mode == Mode.LIST
        assert machine.nav.view == View.HISTORY
        assert machine.nav.selected == 0

    def test_new_run_without_input_goes_to_input_fields(self, machine, press) -> None:
        press(Key.ENTER)

        assert machine.nav.view == View.FIELDS
        assert machine.nav.current_group == INPUT_GROUP
        assert machine.nav.selected == 0

    def test_new_run_with_input_goes_to_groups(self, machine, press) -> None:
        machine.store.set("uris", ["http://a/f.bin"])
        press("n")

        assert machine.nav.view == View.GROUPS
        assert machine.nav.current_group is None

    def test_cursor_is_clamped(self, machine, press) -> None:
        machine.history.add({"uris": ["http://a/1"]})
        machine.history.add({"uris": ["http://a/2"]})

        press(Key.UP)
        assert machine.nav.selected == 0
        press(Key.DOWN, "j", "j", "j")
        assert machine.nav.selected == 2

    def test_failed_entry_is_restored_immediately(self, machine, press) -> None:
        entry_id = machine.history.add(
            {"uris": ["http://a/f.bin"], "out": "f.bin", "split": 4}, RunStatus.FAILED
        )
        press(Key.DOWN, Key.ENTER)

        assert machine.nav.view == View.GROUPS
        assert machine.nav.current_history_id == entry_id
        assert machine.nav.input_ready
        assert machine.store.get("split") == 4
        assert machine.nav.message.text == "Restored: f.bin"

    def test_completed_entry_asks_first(self, machine, press) -> None:
        entry_id = machine.history.add(
            {"uris": ["http://a/f.bin"], "out": "f.bin"}, RunStatus.COMPLETED
        )
        press(Key.DOWN, Key.ENTER)

        assert machine.nav.mode == Mode.CONFIRM
        assert machine.nav.confirm.action == PendingAction.RESTORE_HISTORY
        assert machine.nav.confirm.history_id == entry_id

        press("y")
        assert machine.nav.mode == Mode.LIST
        assert machine.nav.view == View.GROUPS
        assert machine.nav.current_history_id == entry_id
        assert machine.store.get("uris") == ["http://a/f.bin"]

    def test_declining_confirm_keeps_everything(self, machine, press) -> None:
        machine.history.add({"uris": ["http://a/f.bin"]}, RunStatus.COMPLETED)
        press(Key.DOWN, Key.ENTER, Key.ESCAPE)

        assert machine.nav.mode == Mode.LIST
        assert machine.nav.view == View.HISTORY
        assert machine.nav.confirm is None
        assert machine.store.get("uris") == []
        assert machine.nav.current_history_id is None

    def test_delete_entry_under_cursor(self, machine, press) -> None:
        machine.history.add({"uris": ["http://a/old"]})
        machine.history.add({"uris": ["http://a/new"]})

        press("d")
        assert len(machine.history) == 2

        press(Key.DOWN, Key.DOWN, "d")
        assert len(machine.history) == 1
        assert machine.history.get(0).source == "http://a/new"
        assert machine.nav.selected == 1

    def test_escape_from_groups_returns_to_history(self, machine, press) -> None:
        machine.store.set("uris", ["http://a/f.bin"])
        press("n", Key.DOWN, Key.ESCAPE)

        assert machine.nav.view == View.HISTORY
        assert machine.nav.selected == 0


class TestGroupList:
    def test_locked_group_is_refused(self, machine, press) -> None:
        machine.nav.view = View.GROUPS
        press(Key.DOWN, Key.ENTER)

        assert machine.nav.view == View.GROUPS
        assert machine.nav.message.level == MessageLevel.WARNING

    def test_cursor_is_bounded(self, machine, press) -> None:
        machine.nav.view = View.GROUPS
        press(*[Key.DOWN] * (len(GROUPS) + 3))
        assert machine.nav.selected == len(GROUPS) - 1

    def test_ready_input_unlocks_groups(self, machine, press) -> None:
        machine.store.set("uris", ["http://a/f.bin"])
        open_group(machine, press, "performance")

        assert machine.nav.view == View.FIELDS
        assert machine.nav.current_group == "performance"
        assert machine.nav.selected == 0

    def test_leaving_input_group_announces_unlock(self, machine, press) -> None:
        open_group(machine, press, INPUT_GROUP)
        machine.store.set("uris", ["https://x.test/dir/File%20Name.ISO?x=1"])
        press(Key.ESCAPE)

        assert machine.nav.view == View.GROUPS
        assert machine.nav.input_ready
        assert machine.store.get("out") == "File Name.ISO"
        assert "unlocked" in machine.nav.message.text

    def test_unlock_notice_only_once(self, machine, press) -> None:
        machine.store.set("uris", ["http://a/f.bin"])
        machine.nav.input_ready = True
        open_group(machine, press, INPUT_GROUP)
        machine.nav.message = None
        press(Key.ESCAPE)

        assert machine.nav.message.text == "Output file name set to: f.bin"


class TestFieldEditing:
    def test_space_and_enter_toggle_booleans(self, machine, press) -> None:
        machine.store.set("uris", ["http://a/f.bin"])
        open_group(machine, press, "save")
        machine.nav.selected = field_index("save", "continue")

        press(" ")
        assert machine.store.get("continue") is False
        press(Key.ENTER)
        assert machine.store.get("continue") is True

    def test_enter_cycles_enum(self, machine, press) -> None:
        machine.store.set("uris", ["http://a/f.bin"])
        open_group(machine, press, "performance")
        machine.nav.selected = field_index("performance", "fileAllocation")

        press(Key.ENTER)
        assert machine.store.get("fileAllocation") == "prealloc"

    def test_prompt_commit(self, machine, press) -> None:
        machine.store.set("uris", ["http://a/f.bin"])
        open_group(machine, press, "performance")
        machine.nav.selected = field_index("performance", "split")

        press(Key.ENTER)
        assert machine.nav.mode == Mode.PROMPT
        assert machine.nav.prompt.buffer == "16"

        press(Key.BACKSPACE, Key.BACKSPACE, "32", Key.ENTER)
        assert machine.nav.mode == Mode.LIST
        assert machine.nav.prompt is None
        assert machine.store.get("split") == 32

    def test_prompt_revalidates_on_every_key(self, machine, press) -> None:
        machine.store.set("uris", ["http://a/f.bin"])
        open_group(machine, press, "limit")

        press(Key.ENTER, "1")
        assert machine.nav.prompt.validation.message == "Format OK"
        press("X")
        assert not machine.nav.prompt.validation.valid
        press(Key.BACKSPACE)
        assert machine.nav.prompt.validation.valid

    def test_invalid_prompt_is_not_committed(self, machine, press) -> None:
        machine.store.set("uris", ["http://a/f.bin"])
        open_group(machine, press, "limit")

        press(Key.ENTER, "fast", Key.ENTER)
        assert machine.store.get("maxDownloadLimit") == ""
        assert machine.nav.message.level == MessageLevel.ERROR

    def test_prompt_escape_discards(self, machine, press) -> None:
        machine.store.set("uris", ["http://a/f.bin"])
        open_group(machine, press, "advanced")

        press(Key.ENTER, "agent", Key.ESCAPE)
        assert machine.nav.mode == Mode.LIST
        assert machine.store.get("userAgent") == ""

    def test_escape_from_fields_returns_to_groups(self, machine, press) -> None:
        machine.store.set("uris", ["http://a/f.bin"])
        open_group(machine, press, "torrent")
        press(Key.DOWN, Key.ESCAPE)

        assert machine.nav.view == View.GROUPS
        assert machine.nav.current_group is None
        assert machine.nav.selected == 0


class TestInputSource:
    def test_uri_edit_derives_name_and_schedules_return(self, machine, host, press) -> None:
        press(Key.ENTER)
        assert machine.nav.current_group == INPUT_GROUP

        press(Key.ENTER)
        assert machine.nav.mode == Mode.INLINE_EDIT

        press("https://x.test/a/File%20Name.ISO", Key.ENTER)
        assert machine.nav.mode == Mode.LIST
        assert machine.store.get("uris") == ["https://x.test/a/File%20Name.ISO"]
        assert machine.store.get("out") == "File Name.ISO"
        assert machine.nav.message.text == "Download URIs set, file name: File Name.ISO"
        assert [delay for delay, _ in host.scheduled] == [AUTO_RETURN_DELAY]
        # Still in the field list until the scheduled return fires.
        assert machine.nav.view == View.FIELDS

        host.run_scheduled()
        assert machine.nav.view == View.GROUPS
        assert machine.nav.input_ready
        # The confirmation stays on screen; no second unlock notice replaces it.
        assert machine.nav.message.text == "Download URIs set, file name: File Name.ISO"

    def test_no_return_scheduled_when_already_ready(self, machine, host, press) -> None:
        machine.store.set("uris", ["http://a/1"])
        open_group(machine, press, INPUT_GROUP)

        press(Key.ENTER, " http://a/2", Key.ENTER)
        assert machine.store.get("uris") == ["http://a/1", "http://a/2"]
        assert host.scheduled == []

    def test_inline_edit_escape_keeps_uris(self, machine, press) -> None:
        open_group(machine, press, INPUT_GROUP)
        press(Key.ENTER, "http://a/f.bin", Key.ESCAPE)

        assert machine.store.get("uris") == []
        assert machine.nav.mode == Mode.LIST

    def test_scheduled_return_runs_after_later_keys(self, machine, host, press) -> None:
        press(Key.ENTER, Key.ENTER, "http://a/f.bin", Key.ENTER)
        # A key arrives before the delayed return fires.
        press(Key.DOWN)
        assert machine.nav.view == View.FIELDS
        assert machine.nav.selected == 1

        host.run_scheduled()
        assert machine.nav.view == View.GROUPS
        assert machine.nav.current_group is None
        assert machine.nav.selected == 0

    def test_scheduled_return_fires_even_after_leaving_group(self, machine, host, press) -> None:
        press(Key.ENTER, Key.ENTER, "http://a/f.bin", Key.ENTER)
        press(Key.ESCAPE)
        open_group(machine, press, "performance")
        assert machine.nav.current_group == "performance"

        host.run_scheduled()
        assert machine.nav.view == View.GROUPS

    def test_file_browser_selection(self, machine, host, press, tmp_path, monkeypatch) -> None:
        (tmp_path / "b.torrent").write_text("x")
        (tmp_path / "a.metalink").write_text("x")
        (tmp_path / "notes.md").write_text("x")
        monkeypatch.chdir(tmp_path)

        machine.nav.view = View.GROUPS
        press("t")
        assert machine.nav.mode == Mode.FILE_BROWSER
        assert [e.name for e in machine.nav.file_browser.entries] == [
            "a.metalink",
            "b.torrent",
        ]

        press(Key.DOWN, Key.ENTER)
        assert machine.nav.mode == Mode.LIST
        assert machine.store.get("inputFile") == str((tmp_path / "b.torrent").resolve())
        assert machine.nav.message.text == "Selected file: b.torrent"
        assert len(host.scheduled) == 1

        host.run_scheduled()
        assert machine.nav.view == View.GROUPS
        assert machine.nav.message.text == "Selected file: b.torrent"

    def test_file_browser_cancel(self, machine, press, tmp_path, monkeypatch) -> None:
        monkeypatch.chdir(tmp_path)
        open_group(machine, press, INPUT_GROUP)
        press("t", "q")

        assert machine.nav.mode == Mode.LIST
        assert machine.nav.file_browser is None
        assert machine.nav.message.text == "Selection cancelled"
        assert machine.store.get("inputFile") == ""

    def test_file_browser_empty_directory(self, machine, press, tmp_path, monkeypatch) -> None:
        monkeypatch.chdir(tmp_path)
        open_group(machine, press, INPUT_GROUP)
        press("t", Key.ENTER)

        assert machine.nav.mode == Mode.LIST
        assert machine.nav.message.level == MessageLevel.WARNING

    def test_uri_shortcut_from_groups(self, machine, press) -> None:
        machine.nav.view = View.GROUPS
        press("u")

        assert machine.nav.mode == Mode.INLINE_EDIT
        assert machine.nav.current_group == INPUT_GROUP
        assert machine.nav.selected == field_index(INPUT_GROUP, "uris")

    def test_shortcuts_ignored_in_other_groups(self, machine, press) -> None:
        machine.store.set("uris", ["http://a/f.bin"])
        open_group(machine, press, "save")
        press("u", "t")

        assert machine.nav.mode == Mode.LIST
        assert machine.nav.current_group == "save"


class TestRun:
    def test_run_without_input_is_refused(self, machine, host, press) -> None:
        machine.nav.view = View.GROUPS
        press("r")

        assert host.launches == []
        assert len(machine.history) == 0
        assert machine.nav.message.level == MessageLevel.WARNING

    def test_run_records_pending_entry_and_launches(self, machine, host, press, tmp_path) -> None:
        machine.store.set("uris", ["http://a/f.bin"])
        machine.store.set("out", "f.bin")
        machine.nav.view = View.GROUPS
        press("r")

        assert len(host.launches) == 1
        args, _, _ = host.launches[0]
        assert args[:2] == ["-d", str(tmp_path)]
        assert args[-1] == "http://a/f.bin"
        entry = machine.history.get(0)
        assert entry.status == RunStatus.PENDING
        assert entry.filename == "f.bin"
        assert machine.nav.current_history_id == entry.id

    def test_successful_exit(self, machine, host, press) -> None:
        machine.store.set("uris", ["http://a/f.bin"])
        machine.nav.view = View.GROUPS
        press("r")
        _, on_exit, _ = host.launches[0]

        on_exit(0)
        assert machine.history.get(0).status == RunStatus.COMPLETED
        assert host.exits == [(0, None)]

    def test_failed_exit_keeps_code(self, machine, host, press) -> None:
        machine.store.set("uris", ["http://a/f.bin"])
        machine.nav.view = View.GROUPS
        press("r")
        host.launches[0][1](3)

        assert machine.history.get(0).status == RunStatus.FAILED
        assert host.exits == [(3, None)]

    def test_signal_exit_maps_to_fixed_code(self, machine, host, press) -> None:
        machine.store.set("uris", ["http://a/f.bin"])
        machine.nav.view = View.GROUPS
        press("r")
        host.launches[0][1](-15)

        assert machine.history.get(0).status == RunStatus.FAILED
        assert host.exits == [(SIGNAL_EXIT_CODE, None)]

    def test_spawn_error(self, machine, host, press) -> None:
        machine.store.set("uris", ["http://a/f.bin"])
        machine.nav.view = View.GROUPS
        press("r")
        host.launches[0][2](FileNotFoundError(2, "No such file or directory"))

        assert machine.history.get(0).status == RunStatus.FAILED
        code, message = host.exits[0]
        assert code == 1
        assert "aria2c" in message

    def test_rerun_of_restored_entry_updates_it(self, machine, host, press) -> None:
        entry_id = machine.history.add({"uris": ["http://a/f.bin"]}, RunStatus.FAILED)
        machine.history.add({"uris": ["http://a/other"]}, RunStatus.FAILED)

        press(Key.DOWN, Key.DOWN, Key.ENTER)
        assert machine.nav.current_history_id == entry_id
        press("r")

        assert len(machine.history) == 2
        assert machine.history.find(entry_id).status == RunStatus.PENDING

    def test_run_from_action_field(self, machine, host, press) -> None:
        machine.store.set("uris", ["http://a/f.bin"])
        open_group(machine, press, "action")
        press(Key.ENTER)

        assert len(host.launches) == 1

    def test_preview(self, machine, host, press) -> None:
        machine.store.set("uris", ["http://a/f.bin"])
        machine.nav.view = View.GROUPS
        press("p")
        assert machine.nav.mode == Mode.PREVIEW

        press(Key.ESCAPE)
        assert machine.nav.mode == Mode.LIST
        assert machine.nav.view == View.GROUPS

        press("p", Key.ENTER)
        assert len(host.launches) == 1


class TestGlobalKeys:
    def test_quit(self, machine, host, press) -> None:
        press("q")
        assert host.exits == [(0, None)]

    def test_interrupt_from_any_mode(self, machine, host, press) -> None:
        machine.store.set("uris", ["http://a/f.bin"])
        open_group(machine, press, "advanced")
        press(Key.ENTER)
        assert machine.nav.mode == Mode.PROMPT

        press("q")
        assert host.exits == []
        press(Key.INTERRUPT)
        assert host.exits == [(0, None)]

    def test_save_config(self, machine, settings, press) -> None:
        machine.store.set("split", 4)
        press("s")

        assert settings.config_path.exists()
        assert machine.nav.message.level == MessageLevel.SUCCESS
        assert machine.app.config_manager.load_config().split == 4

    def test_save_config_failure_is_reported(self, machine, press, tmp_path) -> None:
        blocker = tmp_path / "file"
        blocker.write_text("x")
        machine.app.config_manager.config_file_path = blocker / "config.json"
        press("s")

        assert machine.nav.message.level == MessageLevel.ERROR
