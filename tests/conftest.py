"""Shared fixtures: isolated config/history files and a recording host."""

from __future__ import annotations

import pytest

from aria2tui.core.config_store import ConfigStore
from aria2tui.core.keys import Key
from aria2tui.core.navigation import NavigationStateMachine
from aria2tui.core.state import AppState
from aria2tui.models.config import Aria2Config
from aria2tui.models.settings import AppSettings
from aria2tui.storage.config_manager import ConfigManager
from aria2tui.storage.history import HistoryLedger


class FakeHost:
    """Records what the state machine asks of the event loop."""

    def __init__(self):
        self.scheduled = []
        self.launches = []
        self.exits = []

    def call_later(self, delay, callback):
        self.scheduled.append((delay, callback))

    def launch(self, args, on_exit, on_error):
        self.launches.append((list(args), on_exit, on_error))

    def exit(self, code, message=None):
        self.exits.append((code, message))

    def run_scheduled(self):
        pending, self.scheduled = self.scheduled, []
        for _, callback in pending:
            callback()


class FakeClock:
    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def settings(tmp_path):
    return AppSettings(
        bin="aria2c",
        config_path=tmp_path / "config.json",
        history_path=tmp_path / "history.json",
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def ledger(settings, clock):
    return HistoryLedger(settings.history_path, clock=clock)


@pytest.fixture
def app_state(settings, ledger, tmp_path):
    return AppState(
        settings=settings,
        config_manager=ConfigManager(settings.config_path),
        store=ConfigStore(Aria2Config(dir=str(tmp_path))),
        history=ledger,
    )


@pytest.fixture
def host():
    return FakeHost()


@pytest.fixture
def machine(app_state, host):
    return NavigationStateMachine(app_state, host)


@pytest.fixture
def press(machine):
    """Feeds keys to the machine; longer plain strings are typed character by character."""

    def _press(*keys):
        for key in keys:
            if isinstance(key, Key) or len(key) == 1:
                machine.handle_key(key)
            else:
                for ch in key:
                    machine.handle_key(ch)

    return _press
