"""Split raw terminal input into complete key sequences.

Terminal reads can return partial escape sequences (``ESC`` now, ``[A``
on the next read) or several keys at once (typing fast, pasting).
``StdinBuffer`` accumulates decoded text and hands out one complete
sequence at a time; ``KeyReader`` drives it from a blocking tty fd.
"""

from __future__ import annotations

import codecs
import logging
import os
import select
from typing import Iterator

logger = logging.getLogger(__name__)

ESC = "\x1b"


def _is_complete_sequence(data: str) -> str:
    """Check if a string is a complete escape sequence or needs more data.

    Returns 'complete', 'incomplete', or 'not-escape'.
    """
    if not data.startswith(ESC):
        return "not-escape"

    if len(data) == 1:
        return "incomplete"

    after_esc = data[1:]

    # CSI sequences: ESC [
    if after_esc.startswith("["):
        return _is_complete_csi_sequence(data)

    # SS3 sequences: ESC O
    if after_esc.startswith("O"):
        return "complete" if len(after_esc) >= 2 else "incomplete"

    # Meta key sequences: ESC followed by a single character
    return "complete"


def _is_complete_csi_sequence(data: str) -> str:
    if len(data) < 3:
        return "incomplete"

    payload = data[2:]
    last_char = payload[-1]

    if 0x40 <= ord(last_char) <= 0x7E:
        return "complete"

    return "incomplete"


def _extract_complete_sequences(buffer: str) -> tuple[list[str], str]:
    """Split accumulated buffer into complete sequences.

    Returns (sequences, remainder).
    """
    sequences: list[str] = []
    pos = 0

    while pos < len(buffer):
        remaining = buffer[pos:]

        if not remaining.startswith(ESC):
            sequences.append(remaining[0])
            pos += 1
            continue

        seq_end = 1
        while seq_end <= len(remaining):
            candidate = remaining[:seq_end]
            if _is_complete_sequence(candidate) == "complete":
                sequences.append(candidate)
                pos += seq_end
                break
            seq_end += 1
        else:
            return sequences, remaining

    return sequences, ""


class StdinBuffer:
    """Buffers decoded input and emits complete sequences."""

    def __init__(self) -> None:
        self._buffer: str = ""

    def process(self, data: str) -> list[str]:
        """Feed *data* and return every sequence that is now complete."""
        self._buffer += data
        sequences, self._buffer = _extract_complete_sequences(self._buffer)
        return sequences

    def flush(self) -> list[str]:
        """Give up waiting: return the pending partial sequence as-is."""
        if not self._buffer:
            return []
        sequences = [self._buffer]
        self._buffer = ""
        return sequences

    def get_buffer(self) -> str:
        return self._buffer


class KeyReader:
    """Blocking iterator of raw key sequences read from a terminal fd.

    A lone ``ESC`` is ambiguous (escape key or start of a sequence), so
    a pending partial sequence is flushed as-is when no more input shows
    up within *escape_timeout* seconds.

    Bytes that are not valid UTF-8 are skipped. Any ``OSError`` while
    reading ends the iteration, as does end of file.
    """

    def __init__(self, fd: int, *, escape_timeout: float = 0.05) -> None:
        self._fd = fd
        self._escape_timeout = escape_timeout
        self._buffer = StdinBuffer()
        # Invalid bytes are dropped, the keys around them still come through
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="ignore")

    def __iter__(self) -> Iterator[str]:
        while True:
            if self._buffer.get_buffer() and not self._wait_readable():
                yield from self._buffer.flush()
                continue
            try:
                raw = os.read(self._fd, 4096)
            except OSError as e:
                logger.debug("Stopped reading keys: %s", e)
                return
            if not raw:
                yield from self._buffer.flush()
                return
            yield from self._buffer.process(self._decoder.decode(raw))

    def _wait_readable(self) -> bool:
        try:
            readable, _, _ = select.select([self._fd], [], [], self._escape_timeout)
        except (OSError, ValueError):
            return True
        return bool(readable)
