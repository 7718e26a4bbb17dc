"""Tests for kontrolleurs.utils -- width and occurrence helpers."""

from __future__ import annotations

import pytest

from kontrolleurs.utils import (
    contains_ignore_case,
    display_width,
    find_occurrences,
    match_end,
    rows_occupied,
)


# ---------------------------------------------------------------------------
# display_width
# ---------------------------------------------------------------------------


class TestDisplayWidth:
    def test_plain_ascii(self) -> None:
        assert display_width("hello") == 5

    def test_empty_string(self) -> None:
        assert display_width("") == 0

    def test_ansi_codes_do_not_count(self) -> None:
        assert display_width("\x1b[1mhi\x1b[0m") == 2

    def test_wide_cjk_characters_count_as_two(self) -> None:
        assert display_width("世") == 2
        assert display_width("A世B") == 4

    def test_combining_mark_is_zero_width(self) -> None:
        # "e" + COMBINING ACUTE ACCENT is one column
        assert display_width("e\u0301") == 1

    def test_tab_counts_as_three_spaces(self) -> None:
        assert display_width("\t") == 3


# ---------------------------------------------------------------------------
# rows_occupied
# ---------------------------------------------------------------------------


class TestRowsOccupied:
    @pytest.mark.parametrize(
        "width, columns, rows",
        [
            (0, 80, 0),
            (1, 80, 1),
            (79, 80, 1),
            (80, 80, 1),
            (81, 80, 2),
            (160, 80, 2),
            (161, 80, 3),
        ],
    )
    def test_round_up(self, width: int, columns: int, rows: int) -> None:
        assert rows_occupied(width, columns) == rows

    def test_exact_multiple_does_not_spill(self) -> None:
        for multiple in range(1, 6):
            assert rows_occupied(multiple * 17, 17) == multiple


# ---------------------------------------------------------------------------
# find_occurrences / match_end
# ---------------------------------------------------------------------------


class TestFindOccurrences:
    def test_all_occurrences_ignoring_case(self) -> None:
        assert find_occurrences("Foo bar FOO", "foo") == [(0, 3), (8, 11)]

    def test_non_overlapping(self) -> None:
        assert find_occurrences("aaaa", "aa") == [(0, 2), (2, 4)]

    def test_no_match(self) -> None:
        assert find_occurrences("abc", "x") == []

    def test_empty_needle(self) -> None:
        assert find_occurrences("abc", "") == []

    def test_length_changing_lowercase(self) -> None:
        # "İ".lower() is two code points; spans must still index the original
        text = "İx foo"
        spans = find_occurrences(text, "foo")
        assert [text[s:e] for s, e in spans] == ["foo"]


class TestMatchEnd:
    def test_end_of_first_occurrence(self) -> None:
        assert match_end("git commit --amend", "COMMIT") == 10

    def test_empty_needle(self) -> None:
        assert match_end("anything", "") == 0

    def test_no_occurrence(self) -> None:
        assert match_end("abc", "z") == 0

    def test_offset_is_into_original_text(self) -> None:
        text = "İİ git log"
        end = match_end(text, "GIT")
        assert end == 6
        assert text[:end].endswith("git")


class TestContainsIgnoreCase:
    def test_contains(self) -> None:
        assert contains_ignore_case("Make Install", "make i")

    def test_empty_needle_always_matches(self) -> None:
        assert contains_ignore_case("", "")
        assert contains_ignore_case("abc", "")

    def test_missing(self) -> None:
        assert not contains_ignore_case("abc", "abd")
