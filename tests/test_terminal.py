"""Tests for kontrolleurs.terminal."""

from __future__ import annotations

import fcntl
import os
import signal
import struct
import termios

import pytest

from kontrolleurs.terminal import ResizeFlag, TerminalError, TtyTerminal, get_terminal_size


def set_winsize(fd: int, columns: int, rows: int) -> None:
    fcntl.ioctl(fd, termios.TIOCSWINSZ, struct.pack("HHHH", rows, columns, 0, 0))


@pytest.fixture
def pty():
    """A pseudo terminal pair sized 100x30; yields (master_fd, slave_path)."""
    master, slave = os.openpty()
    set_winsize(slave, 100, 30)
    yield master, os.ttyname(slave)
    os.close(master)
    os.close(slave)


# ---------------------------------------------------------------------------
# ResizeFlag
# ---------------------------------------------------------------------------


class TestResizeFlag:
    def test_initially_clear(self) -> None:
        assert ResizeFlag().take() is False

    def test_take_clears(self) -> None:
        flag = ResizeFlag()
        flag.set()
        assert flag.is_set()
        assert flag.take() is True
        assert flag.take() is False
        assert not flag.is_set()

    def test_repeated_sets_collapse(self) -> None:
        flag = ResizeFlag()
        flag.set()
        flag.set()
        assert flag.take() is True
        assert flag.take() is False


# ---------------------------------------------------------------------------
# Size probe
# ---------------------------------------------------------------------------


class TestGetTerminalSize:
    def test_reads_window_size(self, pty) -> None:
        master, _ = pty
        assert get_terminal_size(master) == (100, 30)

    def test_not_a_terminal(self) -> None:
        read_fd, write_fd = os.pipe()
        try:
            with pytest.raises(OSError):
                get_terminal_size(read_fd)
        finally:
            os.close(read_fd)
            os.close(write_fd)


# ---------------------------------------------------------------------------
# TtyTerminal
# ---------------------------------------------------------------------------


class TestTtyTerminal:
    def test_open_failure(self, tmp_path) -> None:
        terminal = TtyTerminal(str(tmp_path / "missing-tty"))
        with pytest.raises(TerminalError, match="Could not open TTY"):
            terminal.start()

    def test_not_a_tty(self, tmp_path) -> None:
        path = tmp_path / "plain-file"
        path.write_text("")
        terminal = TtyTerminal(str(path))
        with pytest.raises(TerminalError):
            terminal.start()

    def test_size_and_write(self, pty) -> None:
        master, path = pty
        with TtyTerminal(path) as terminal:
            assert terminal.get_size() == (100, 30)
            terminal.write("héllo")
            assert os.read(master, 100) == "héllo".encode()

    def test_raw_mode_restored(self, pty) -> None:
        _, path = pty
        fd = os.open(path, os.O_RDONLY | os.O_NOCTTY)
        try:
            before = termios.tcgetattr(fd)
            with TtyTerminal(path):
                during = termios.tcgetattr(fd)
                assert not during[3] & termios.ICANON
            assert termios.tcgetattr(fd) == before
        finally:
            os.close(fd)

    def test_sigwinch_sets_flag(self, pty) -> None:
        _, path = pty
        previous = signal.getsignal(signal.SIGWINCH)
        with TtyTerminal(path) as terminal:
            os.kill(os.getpid(), signal.SIGWINCH)
            assert terminal.resize_flag.take() is True
        assert signal.getsignal(signal.SIGWINCH) == (
            signal.SIG_DFL if previous is None else previous
        )

    def test_closed_terminal(self) -> None:
        terminal = TtyTerminal()
        terminal.write("ignored")
        with pytest.raises(TerminalError):
            terminal.get_size()
        with pytest.raises(TerminalError):
            terminal.input_fd
