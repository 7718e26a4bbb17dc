"""Tests for kontrolleurs.history."""

from __future__ import annotations

import io

from kontrolleurs.history import HistoryReader, _read_until, read_history


def collect_history(data: bytes) -> list[str]:
    return list(read_history(io.BytesIO(data)))


class _NoPeek:
    """Binary reader without ``peek``, like a raw file object."""

    def __init__(self, data: bytes) -> None:
        self._buf = io.BytesIO(data)

    def read(self, n: int = -1) -> bytes:
        return self._buf.read(n)


# ---------------------------------------------------------------------------
# read_history
# ---------------------------------------------------------------------------


class TestReadHistory:
    def test_entries_split_on_nul(self) -> None:
        lines = collect_history(b"entry1\0entry2\0entry 3\nstill entry 3\0")
        assert lines == ["entry1", "entry2", "entry 3\nstill entry 3"]

    def test_missing_trailing_nul(self) -> None:
        assert collect_history(b"first entry") == ["first entry"]

    def test_invalid_utf8_entry_is_skipped(self) -> None:
        lines = collect_history(b"first en\xc3try\0second entry\0")
        assert lines == ["second entry"]

    def test_invalid_entry_between_valid_ones(self) -> None:
        lines = collect_history(b"one\0\xff\xfe\0two\0")
        assert lines == ["one", "two"]

    def test_empty_input(self) -> None:
        assert collect_history(b"") == []

    def test_empty_entries_are_kept(self) -> None:
        assert collect_history(b"\0a\0") == ["", "a"]

    def test_non_ascii_entries(self) -> None:
        assert collect_history("grüß\0日本\0".encode()) == ["grüß", "日本"]

    def test_buffered_reader(self) -> None:
        reader = io.BufferedReader(io.BytesIO(b"a" * 3000 + b"\0b\0"), buffer_size=16)
        assert list(read_history(reader)) == ["a" * 3000, "b"]


class TestDroppedCount:
    def test_counts_dropped_entries(self) -> None:
        history = HistoryReader(io.BytesIO(b"\xff\0ok\0\xc3\0"))
        assert list(history) == ["ok"]
        assert history.dropped == 2

    def test_no_drops(self) -> None:
        history = HistoryReader(io.BytesIO(b"a\0b"))
        list(history)
        assert history.dropped == 0

    def test_is_lazy(self) -> None:
        source = io.BytesIO(b"a\0b\0c\0")
        history = read_history(source)
        assert next(history) == "a"
        assert source.read() == b"b\0c\0"


# ---------------------------------------------------------------------------
# _read_until
# ---------------------------------------------------------------------------


class TestReadUntil:
    def test_includes_sentinel(self) -> None:
        assert _read_until(io.BytesIO(b"ab\0cd"), b"\0") == b"ab\0"

    def test_reads_to_eof_without_sentinel(self) -> None:
        assert _read_until(io.BytesIO(b"abc"), b"\0") == b"abc"

    def test_reader_without_peek(self) -> None:
        reader = _NoPeek(b"x\0y")
        assert _read_until(reader, b"\0") == b"x\0"
        assert _read_until(reader, b"\0") == b"y"
        assert _read_until(reader, b"\0") == b""
