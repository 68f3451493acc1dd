"""
The asyncio side of the interactive session: reads keys from the terminal,
dispatches them to the state machine, redraws, and runs aria2c when asked.
"""

import asyncio
import logging
import os
import signal
import sys
from collections.abc import Callable

from rich.console import Console
from rich.live import Live

from aria2tui.core.keys import decode_keys
from aria2tui.core.navigation import NavigationStateMachine
from aria2tui.core.state import AppState

from .renderer import render
from .terminal import RawTerminal

log = logging.getLogger(__name__)

READ_SIZE = 1024


class TerminalHost:
    """
    Runs one `NavigationStateMachine` on the current event loop.

    Keys are read with `loop.add_reader`; every key is handled to completion and
    followed by a full redraw before the next one is looked at. While aria2c is
    running the screen and key reader are released so the child owns the
    terminal.
    """

    def __init__(self, app: AppState, console: Console | None = None):
        self.app = app
        self.console = console or Console()
        self.machine = NavigationStateMachine(app, self)
        self.exit_message: str | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._done: asyncio.Future[int] | None = None
        self._terminal: RawTerminal | None = None
        self._live: Live | None = None
        self._reading = False
        self._process_task: asyncio.Task | None = None

    async def run(self) -> int:
        """Runs the session until the user quits or aria2c exits; returns the exit code."""
        self._loop = asyncio.get_running_loop()
        self._done = self._loop.create_future()
        self._terminal = RawTerminal(sys.stdin)

        with self._terminal:
            self._start_screen()
            self._add_signal_handlers()
            try:
                code = await self._done
            finally:
                self._remove_signal_handlers()
                self._stop_screen()

        if self.exit_message:
            self.console.print(f"[red]✗ {self.exit_message}[/red]")
        return code

    # ------------------------------------------------------------------
    # Screen and input
    # ------------------------------------------------------------------

    def _start_screen(self) -> None:
        self._live = Live(
            console=self.console,
            screen=True,
            auto_refresh=False,
            redirect_stdout=False,
            redirect_stderr=False,
        )
        self._live.start()
        self.render()
        self._loop.add_reader(self._terminal.fd, self._on_input)
        self._reading = True

    def _stop_screen(self) -> None:
        if self._reading:
            self._loop.remove_reader(self._terminal.fd)
            self._reading = False
        if self._live is not None:
            self._live.stop()
            self._live = None

    def render(self) -> None:
        if self._live is None:
            return
        width, height = self.console.size
        self._live.update(render(self.app, width, height), refresh=True)

    def _on_input(self) -> None:
        try:
            data = os.read(self._terminal.fd, READ_SIZE)
        except OSError as e:
            log.error(f"Reading from the terminal failed: {e}")
            self.exit(1, f"Reading from the terminal failed: {e}")
            return
        if not data:
            self.exit(0)
            return
        for key in decode_keys(data.decode("utf-8", errors="replace")):
            self.dispatch(key)
            if self._done.done() or self._live is None:
                break
        self.render()

    def dispatch(self, key: str) -> None:
        try:
            self.machine.handle_key(key)
        except Exception as e:
            log.debug("Key handler failed:", exc_info=True)
            self.machine.report_error(e)

    # ------------------------------------------------------------------
    # Signals
    # ------------------------------------------------------------------

    def _add_signal_handlers(self) -> None:
        self._loop.add_signal_handler(signal.SIGWINCH, self.render)
        self._loop.add_signal_handler(signal.SIGINT, self.exit, 0)
        self._loop.add_signal_handler(signal.SIGTERM, self.exit, 0)

    def _remove_signal_handlers(self) -> None:
        for sig in (signal.SIGWINCH, signal.SIGINT, signal.SIGTERM):
            self._loop.remove_signal_handler(sig)

    # ------------------------------------------------------------------
    # Host interface
    # ------------------------------------------------------------------

    def call_later(self, delay: float, callback: Callable[[], None]) -> None:
        def fire() -> None:
            if self._done.done():
                return
            try:
                callback()
            except Exception as e:
                log.debug("Scheduled callback failed:", exc_info=True)
                self.machine.report_error(e)
            self.render()

        self._loop.call_later(delay, fire)

    def launch(
        self,
        args: list[str],
        on_exit: Callable[[int], None],
        on_error: Callable[[Exception], None],
    ) -> None:
        self._stop_screen()
        self._terminal.suspend()
        # SIGINT belongs to aria2c while it runs; the terminal delivers it to
        # the whole foreground process group.
        self._loop.remove_signal_handler(signal.SIGINT)
        self._loop.add_signal_handler(signal.SIGINT, lambda: None)
        self._process_task = self._loop.create_task(
            self._run_process(args, on_exit, on_error)
        )

    async def _run_process(
        self,
        args: list[str],
        on_exit: Callable[[int], None],
        on_error: Callable[[Exception], None],
    ) -> None:
        try:
            process = await asyncio.create_subprocess_exec(self.app.settings.bin, *args)
        except (OSError, ValueError) as e:
            # ValueError: arguments aria2c cannot receive, e.g. a NUL byte
            on_error(e)
            return
        returncode = await process.wait()
        on_exit(returncode)

    def exit(self, code: int, message: str | None = None) -> None:
        if self._done is None or self._done.done():
            return
        self.exit_message = message
        self._done.set_result(code)
