"""Key identifiers and parsing of raw terminal key sequences.

``parse_key`` turns one complete input sequence (as split off by
:mod:`kontrolleurs.stdin_buffer`) into a key identifier such as ``"a"``,
``"ctrl+r"``, ``"left"`` or ``"shift+home"``.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Type alias
# ---------------------------------------------------------------------------

KeyId = str

# ---------------------------------------------------------------------------
# Key helper object
# ---------------------------------------------------------------------------


class Key:
    """Named key constants and modifier combinators."""

    escape = "escape"
    enter = "enter"
    tab = "tab"
    space = "space"
    backspace = "backspace"
    delete = "delete"
    home = "home"
    end = "end"
    up = "up"
    down = "down"
    left = "left"
    right = "right"

    @staticmethod
    def ctrl(key: str) -> str:
        return f"ctrl+{key}"

    @staticmethod
    def alt(key: str) -> str:
        return f"alt+{key}"


# ---------------------------------------------------------------------------
# Legacy escape sequences
# ---------------------------------------------------------------------------

LEGACY_KEY_SEQUENCES: dict[str, str] = {
    "\x1b[A": "up",
    "\x1b[B": "down",
    "\x1b[C": "right",
    "\x1b[D": "left",
    "\x1b[H": "home",
    "\x1b[F": "end",
    "\x1bOA": "up",
    "\x1bOB": "down",
    "\x1bOC": "right",
    "\x1bOD": "left",
    "\x1bOH": "home",
    "\x1bOF": "end",
    "\x1b[1~": "home",
    "\x1b[4~": "end",
    "\x1b[7~": "home",
    "\x1b[8~": "end",
    "\x1b[2~": "insert",
    "\x1b[3~": "delete",
    "\x1b[5~": "pageUp",
    "\x1b[6~": "pageDown",
}

# xterm style "CSI 1;<mod><final>" where mod-1 is a shift/alt/ctrl bitmask
_MODIFIER_PREFIXES: dict[str, str] = {
    "2": "shift+",
    "3": "alt+",
    "4": "shift+alt+",
    "5": "ctrl+",
    "6": "ctrl+shift+",
    "7": "ctrl+alt+",
    "8": "ctrl+shift+alt+",
}

_CSI_FINALS: dict[str, str] = {
    "A": "up",
    "B": "down",
    "C": "right",
    "D": "left",
    "H": "home",
    "F": "end",
}

_CSI_TILDE_CODES: dict[str, str] = {
    "2": "insert",
    "3": "delete",
    "5": "pageUp",
    "6": "pageDown",
}


def _parse_modified_sequence(data: str) -> str | None:
    """Parse ``ESC [ 1 ; m X`` and ``ESC [ n ; m ~`` sequences."""
    if not data.startswith("\x1b[") or ";" not in data:
        return None
    params, final = data[2:-1], data[-1]
    code, _, modifier = params.partition(";")
    prefix = _MODIFIER_PREFIXES.get(modifier)
    if prefix is None:
        return None
    if final == "~":
        name = _CSI_TILDE_CODES.get(code)
    elif code == "1":
        name = _CSI_FINALS.get(final)
    else:
        name = None
    if name is None:
        return None
    return prefix + name


# ---------------------------------------------------------------------------
# parse_key — determine what key was pressed from raw input
# ---------------------------------------------------------------------------


def parse_key(data: str) -> KeyId | None:
    """Parse one raw input sequence and return its key identifier.

    Plain printable characters are returned unchanged (case preserved),
    everything else uses the ``"ctrl+r"`` / ``"alt+x"`` / ``"left"``
    naming. Returns ``None`` for sequences we do not recognise.
    """
    if not data:
        return None

    if data in LEGACY_KEY_SEQUENCES:
        return LEGACY_KEY_SEQUENCES[data]

    modified = _parse_modified_sequence(data)
    if modified is not None:
        return modified

    # --- Simple single-byte keys ---
    if data == "\x1b":
        return Key.escape
    if data == "\r" or data == "\n":
        return Key.enter
    if data == "\t":
        return Key.tab
    if data == " ":
        return Key.space
    if data == "\x7f" or data == "\x08":
        return Key.backspace
    if data == "\x00":
        return "ctrl+space"

    # --- Ctrl + letter (0x01 - 0x1a) ---
    if len(data) == 1 and 1 <= ord(data) <= 26:
        return Key.ctrl(chr(ord(data) + ord("a") - 1))

    # --- Alt + key (ESC prefix) ---
    if len(data) == 2 and data[0] == "\x1b":
        ch = data[1]
        if ch == "\r" or ch == "\n":
            return Key.alt(Key.enter)
        if ch == "\x7f" or ch == "\x08":
            return Key.alt(Key.backspace)
        if 1 <= ord(ch) <= 26:
            return "ctrl+alt+" + chr(ord(ch) + ord("a") - 1)
        if ch.isprintable():
            return Key.alt(ch.lower())

    # --- Plain printable character ---
    if len(data) == 1 and data.isprintable():
        return data

    return None


def key_text(key: KeyId) -> str | None:
    """Return the text a key inserts into the query, if it inserts any."""
    if key == Key.space:
        return " "
    if len(key) == 1 and key.isprintable():
        return key
    return None
