"""
Switching the controlling terminal in and out of unbuffered key input.
"""

import logging
import sys
import termios
import tty

from aria2tui.exceptions import TerminalError

log = logging.getLogger(__name__)

HIDE_CURSOR = "\x1b[?25l"
SHOW_CURSOR = "\x1b[?25h"


def is_interactive() -> bool:
    """True when both stdin and stdout are attached to a terminal."""
    return sys.stdin.isatty() and sys.stdout.isatty()


class RawTerminal:
    """
    Puts stdin into cbreak mode so single key presses are delivered without
    echo or line buffering. The previous settings are restored on exit and can
    be restored and re-applied around a child process with `suspend`/`resume`.
    """

    def __init__(self, stream=None):
        self.stream = stream or sys.stdin
        self.fd = self.stream.fileno()
        self.old_settings: list | None = None

    def __enter__(self):
        try:
            self.old_settings = termios.tcgetattr(self.fd)
        except termios.error as e:
            raise TerminalError(f"Cannot read terminal settings: {e}") from e
        self.resume()
        return self

    def __exit__(self, *args):
        self.suspend()

    def resume(self) -> None:
        try:
            tty.setcbreak(self.fd)
        except termios.error as e:
            raise TerminalError(f"Cannot switch the terminal to key input: {e}") from e
        sys.stdout.write(HIDE_CURSOR)
        sys.stdout.flush()

    def suspend(self) -> None:
        if self.old_settings is not None:
            try:
                termios.tcsetattr(self.fd, termios.TCSADRAIN, self.old_settings)
            except termios.error as e:
                log.debug(f"Failed to restore terminal settings: {e}")
        sys.stdout.write(SHOW_CURSOR)
        sys.stdout.flush()
