"""
Keeps the list of recent runs in a JSON file so that a past download can be
resumed or repeated with the same options.
"""

import logging
import time
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from aria2tui.exceptions import HistoryError
from aria2tui.models.history import HistoryEntry, RunStatus

from .json_store import read_json, write_json

log = logging.getLogger(__name__)

MAX_HISTORY_ENTRIES = 20


def primary_source(config: dict[str, Any]) -> str:
    """The first URI, else the input file path, else an empty string."""
    uris = config.get("uris") or []
    if uris:
        return str(uris[0])
    return str(config.get("inputFile") or "")


class HistoryLedger:
    """
    A capped, newest-first list of runs, persisted after every change.

    Entries are de-duplicated on their primary source: recording a run for a
    source that is already listed replaces the old entry.
    """

    def __init__(
        self,
        history_path: Path,
        max_entries: int = MAX_HISTORY_ENTRIES,
        clock: Callable[[], float] = time.time,
    ):
        self.history_path = history_path
        self.max_entries = max_entries
        self._clock = clock
        self._entries: list[HistoryEntry] = []
        self.last_error: str | None = None
        self.load()

    def load(self) -> None:
        """Reads the stored history. Any failure leaves the ledger empty."""
        self._entries = []
        data = read_json(self.history_path)
        if not isinstance(data, list):
            return
        for item in data[: self.max_entries]:
            try:
                self._entries.append(HistoryEntry.model_validate(item))
            except ValidationError as e:
                log.debug(f"Skipping malformed history entry: {e}")

    def save(self) -> None:
        """
        Writes the history file.

        Raises:
            HistoryError: If the file cannot be written.
        """
        try:
            write_json(
                self.history_path, [entry.to_json_dict() for entry in self._entries]
            )
        except OSError as e:
            raise HistoryError(f"Failed to save history: {e}") from e

    def _persist(self) -> bool:
        """Saves, remembering the failure instead of raising it."""
        try:
            self.save()
        except HistoryError as e:
            log.warning(str(e))
            self.last_error = str(e)
            return False
        self.last_error = None
        return True

    def _next_id(self) -> int:
        now_ms = int(self._clock() * 1000)
        highest = max((entry.id for entry in self._entries), default=0)
        return max(now_ms, highest + 1)

    def add(self, config: dict[str, Any], status: RunStatus = RunStatus.PENDING) -> int:
        """
        Records a run at the top of the history and returns its id.

        Args:
            config: Alias-keyed option values; a copy is stored.
            status: Initial status of the run.
        """
        snapshot = dict(config)
        if isinstance(snapshot.get("uris"), list):
            snapshot["uris"] = list(snapshot["uris"])
        entry = HistoryEntry(
            id=self._next_id(),
            config=snapshot,
            status=status,
            filename=snapshot.get("out") or "unknown",
            source=primary_source(snapshot),
        )
        self._entries = [e for e in self._entries if e.source != entry.source]
        self._entries.insert(0, entry)
        del self._entries[self.max_entries :]
        log.debug(f"History entry {entry.id} added for '{entry.source}'.")
        self._persist()
        return entry.id

    def update_status(self, entry_id: int, status: RunStatus) -> None:
        """Sets the status of an entry; unknown ids are ignored."""
        entry = self.find(entry_id)
        if entry is None:
            return
        entry.status = status
        log.debug(f"History entry {entry_id} marked {status.value}.")
        self._persist()

    def delete(self, index: int) -> bool:
        """Removes the entry at `index`. Returns False if the index is out of range."""
        if not 0 <= index < len(self._entries):
            return False
        removed = self._entries.pop(index)
        log.debug(f"History entry {removed.id} deleted.")
        self._persist()
        return True

    def get(self, index: int) -> HistoryEntry | None:
        if 0 <= index < len(self._entries):
            return self._entries[index]
        return None

    def find(self, entry_id: int) -> HistoryEntry | None:
        return next((e for e in self._entries if e.id == entry_id), None)

    @property
    def entries(self) -> list[HistoryEntry]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[HistoryEntry]:
        return iter(list(self._entries))
