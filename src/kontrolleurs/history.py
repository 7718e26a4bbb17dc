"""NUL-delimited history stream decoding.

The shell writes its history to our stdin, one entry per chunk, each
chunk terminated by a NUL byte. Entries may span several lines.
"""

from __future__ import annotations

import logging
from typing import BinaryIO, Iterator

logger = logging.getLogger(__name__)

SENTINEL = b"\0"

_CHUNK_SIZE = 1024


def _read_until(reader: BinaryIO, sentinel: bytes) -> bytes:
    """Read from *reader* up to and including *sentinel* (or EOF)."""
    buf = bytearray()
    peek = getattr(reader, "peek", None)
    while True:
        if peek is not None:
            available = peek(_CHUNK_SIZE)
            if not available:
                break
            index = available.find(sentinel)
            if index != -1:
                buf += reader.read(index + 1)
                break
            buf += reader.read(len(available))
        else:
            byte = reader.read(1)
            if not byte:
                break
            buf += byte
            if byte == sentinel:
                break
    return bytes(buf)


class HistoryReader:
    """Iterate over the entries of a NUL-delimited byte stream.

    Chunks that are not valid UTF-8 are skipped instead of being shown as
    mangled text; ``dropped`` counts how many were lost.
    """

    def __init__(self, reader: BinaryIO) -> None:
        self._reader = reader
        self.dropped = 0

    def __iter__(self) -> Iterator[str]:
        return self

    def __next__(self) -> str:
        while True:
            chunk = _read_until(self._reader, SENTINEL)
            if not chunk:
                raise StopIteration
            if chunk.endswith(SENTINEL):
                chunk = chunk[:-1]
            try:
                return chunk.decode("utf-8")
            except UnicodeDecodeError as e:
                self.dropped += 1
                logger.debug("Skipping undecodable history entry: %s", e.reason)


def read_history(reader: BinaryIO) -> HistoryReader:
    return HistoryReader(reader)
