"""Terminal access for the search prompt.

Provides a ``Terminal`` protocol and ``TtyTerminal``, which talks to the
controlling terminal directly (``/dev/tty``) because stdin carries the
history stream and stdout is reserved for the result. While started,
the terminal is in raw mode and SIGWINCH sets a ``ResizeFlag``.
"""

from __future__ import annotations

import logging
import os
import signal
import termios
import tty
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class TerminalError(OSError):
    """The controlling terminal could not be opened or measured."""


# ---------------------------------------------------------------------------
# Terminal protocol
# ---------------------------------------------------------------------------


class Terminal(Protocol):
    """Interface the prompt needs from a terminal."""

    def write(self, data: str) -> None: ...

    def get_size(self) -> tuple[int, int]: ...


def get_terminal_size(fd: int) -> tuple[int, int]:
    """Return ``(columns, rows)`` of the terminal behind *fd*.

    Raises ``OSError`` if *fd* is not a terminal.
    """
    size = os.get_terminal_size(fd)
    return size.columns, size.lines


# ---------------------------------------------------------------------------
# Resize notification
# ---------------------------------------------------------------------------


class ResizeFlag:
    """Set by the SIGWINCH handler, read-and-cleared by the main loop.

    Python runs signal handlers between bytecodes of the main thread, so
    the handler and ``take`` never interleave.
    """

    def __init__(self) -> None:
        self._pending = False

    def set(self) -> None:
        self._pending = True

    def is_set(self) -> bool:
        return self._pending

    def take(self) -> bool:
        pending = self._pending
        self._pending = False
        return pending


# ---------------------------------------------------------------------------
# TtyTerminal implementation
# ---------------------------------------------------------------------------


class TtyTerminal:
    """The process's controlling terminal, opened for reading and writing."""

    def __init__(self, path: str = "/dev/tty") -> None:
        self.path = path
        self.resize_flag = ResizeFlag()
        self._in_fd: int | None = None
        self._out_fd: int | None = None
        self._original_termios: list[Any] | None = None
        self._prev_sigwinch_handler: Any = None
        self._sigwinch_installed = False

    @property
    def input_fd(self) -> int:
        if self._in_fd is None:
            raise TerminalError("terminal is not open")
        return self._in_fd

    # -- start / stop -------------------------------------------------------

    def start(self) -> None:
        """Open the tty, switch it to raw mode and watch for resizes."""
        try:
            self._in_fd = os.open(self.path, os.O_RDONLY | os.O_NOCTTY)
            self._out_fd = os.open(self.path, os.O_WRONLY | os.O_NOCTTY)
        except OSError as e:
            self._close_fds()
            raise TerminalError(f"Could not open TTY {self.path}: {e}") from e

        try:
            self._original_termios = termios.tcgetattr(self._in_fd)
            tty.setraw(self._in_fd)
        except termios.error as e:
            self._close_fds()
            raise TerminalError(f"Could not switch {self.path} to raw mode: {e}") from e

        self._prev_sigwinch_handler = signal.getsignal(signal.SIGWINCH)
        signal.signal(signal.SIGWINCH, self._on_sigwinch)
        self._sigwinch_installed = True

    def stop(self) -> None:
        """Restore terminal state and the previous SIGWINCH handler."""
        if self._sigwinch_installed:
            # getsignal returns None for handlers not installed from Python
            previous = self._prev_sigwinch_handler
            signal.signal(signal.SIGWINCH, signal.SIG_DFL if previous is None else previous)
            self._prev_sigwinch_handler = None
            self._sigwinch_installed = False

        if self._in_fd is not None and self._original_termios is not None:
            try:
                termios.tcsetattr(self._in_fd, termios.TCSADRAIN, self._original_termios)
            except termios.error as e:
                logger.warning("Could not restore terminal attributes: %s", e)
            self._original_termios = None

        self._close_fds()

    def __enter__(self) -> TtyTerminal:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    # -- Terminal protocol --------------------------------------------------

    def write(self, data: str) -> None:
        if self._out_fd is None:
            return
        payload = data.encode("utf-8")
        try:
            while payload:
                written = os.write(self._out_fd, payload)
                payload = payload[written:]
        except OSError:
            pass

    def get_size(self) -> tuple[int, int]:
        if self._out_fd is None:
            raise TerminalError("terminal is not open")
        return get_terminal_size(self._out_fd)

    # -- private ------------------------------------------------------------

    def _on_sigwinch(self, signum: int, frame: object) -> None:
        self.resize_flag.set()

    def _close_fds(self) -> None:
        for fd in (self._in_fd, self._out_fd):
            if fd is not None:
                try:
                    os.close(fd)
                except OSError:
                    pass
        self._in_fd = None
        self._out_fd = None
