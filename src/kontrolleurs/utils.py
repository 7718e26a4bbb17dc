"""Text measurement helpers: display width, row occupancy, match spans.

Widths are measured in terminal columns per grapheme cluster so that
wide (CJK) characters and emoji sequences count as two columns and
combining marks count as none.
"""

from __future__ import annotations

import re
import unicodedata

import grapheme
import wcwidth as _wcwidth

# CSI / OSC 8 sequences never occupy columns
_STRIP_RE = re.compile(
    r"\x1b\[[0-9;]*[A-Za-z]"
    r"|\x1b\]8;;[^\x07]*\x07"
)

# ---------------------------------------------------------------------------
# Width cache (capped at 512 entries)
# ---------------------------------------------------------------------------

_width_cache: dict[str, int] = {}
_WIDTH_CACHE_MAX = 512


def _cache_width(key: str, value: int) -> int:
    if len(_width_cache) >= _WIDTH_CACHE_MAX:
        _width_cache.clear()
    _width_cache[key] = value
    return value


# ---------------------------------------------------------------------------
# Grapheme width
# ---------------------------------------------------------------------------


def _grapheme_width(g: str) -> int:
    """Return the column width of a single grapheme cluster.

    Control characters and marks are zero-width, emoji presentation
    sequences (VS16, ZWJ, skin tones, flags) are two columns, everything
    else is whatever wcwidth reports for the leading codepoint.
    """
    if not g:
        return 0

    if len(g) == 1:
        cp = ord(g)
        if cp < 0x20 or (0x7F <= cp <= 0x9F):
            return 0
        return max(_wcwidth.wcwidth(g), 0)

    for ch in g:
        cp = ord(ch)
        if cp in (0xFE0F, 0x200D):
            return 2
        if 0x1F3FB <= cp <= 0x1F3FF or 0x1F1E6 <= cp <= 0x1F1FF:
            return 2

    first_cp = ord(g[0])
    if first_cp >= 0x1F000 or 0x2600 <= first_cp <= 0x27BF:
        return 2

    cat = unicodedata.category(g[0])
    if cat.startswith("M") or cat == "Cf":
        return 0

    return max(_wcwidth.wcwidth(g[0]), 0)


def display_width(text: str) -> int:
    """Number of terminal columns *text* occupies on a single row."""
    if not text:
        return 0

    stripped = _STRIP_RE.sub("", text).replace("\t", "   ")
    if stripped.isascii() and stripped.isprintable():
        return len(stripped)

    cached = _width_cache.get(stripped)
    if cached is not None:
        return cached

    total = sum(_grapheme_width(g) for g in grapheme.graphemes(stripped))
    return _cache_width(stripped, total)


def rows_occupied(width: int, columns: int) -> int:
    """Rows needed to show *width* columns on a terminal *columns* wide.

    A width that is an exact multiple of *columns* fills its last row
    completely and does not spill onto another one.
    """
    if columns <= 0:
        return width
    return -(-width // columns)


# ---------------------------------------------------------------------------
# Case-insensitive occurrences
# ---------------------------------------------------------------------------


def find_occurrences(text: str, needle: str) -> list[tuple[int, int]]:
    """Return non-overlapping ``(start, end)`` spans of *needle* in *text*.

    Matching ignores case. An empty needle has no occurrences.
    """
    if not needle:
        return []

    lowered = text.lower()
    lowered_needle = needle.lower()
    if len(lowered) != len(text):
        # Lowercasing changed the length, offsets would not line up
        pattern = re.compile(re.escape(needle), re.IGNORECASE)
        return [m.span() for m in pattern.finditer(text)]

    spans: list[tuple[int, int]] = []
    start = lowered.find(lowered_needle)
    while start != -1:
        end = start + len(lowered_needle)
        spans.append((start, end))
        start = lowered.find(lowered_needle, end)
    return spans


def contains_ignore_case(text: str, needle: str) -> bool:
    return needle.lower() in text.lower()


def match_end(text: str, needle: str) -> int:
    """End offset of the first occurrence of *needle* in *text*, else 0."""
    spans = find_occurrences(text, needle)
    return spans[0][1] if spans else 0
