"""Turn the prompt and the current match into terminal output.

Rendering happens in two steps. ``render_frame`` computes a list of
cursor commands from the prompt text, the matched entry and the terminal
width; it does all the row arithmetic and touches no terminal.
``to_ansi`` then turns those commands into escape sequences.

Layout on screen::

    bck-i-search: foo          <- prompt, may wrap over several rows
    first line of the foo match
    second line of the match

The cursor is parked at the end of the prompt after every frame, so the
next frame starts by moving up over the rows the prompt wrapped onto.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from kontrolleurs.utils import display_width, find_occurrences, rows_occupied

# ---------------------------------------------------------------------------
# ANSI escape constants
# ---------------------------------------------------------------------------

_CURSOR_UP_FMT = "\x1b[{}A"
_CURSOR_RIGHT_FMT = "\x1b[{}C"
_CLEAR_FROM_CURSOR = "\x1b[0J"
_RESET = "\x1b[0m"

_INVERT = "\x1b[7m"
_BOLD = "\x1b[1m"

COLORS: dict[str, str] = {
    "black": "\x1b[30m",
    "red": "\x1b[31m",
    "green": "\x1b[32m",
    "yellow": "\x1b[33m",
    "blue": "\x1b[34m",
    "magenta": "\x1b[35m",
    "cyan": "\x1b[36m",
    "white": "\x1b[37m",
    "default": "",
}


def highlight_style(color: str = "red") -> str:
    """SGR prefix used for highlighted match text."""
    try:
        fg = COLORS[color.lower()]
    except KeyError:
        raise ValueError(f"unknown highlight color: {color!r}") from None
    return f"{fg}{_INVERT}{_BOLD}"


DEFAULT_HIGHLIGHT = highlight_style()

# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MoveUp:
    rows: int


@dataclass(frozen=True)
class MoveRight:
    columns: int


@dataclass(frozen=True)
class CarriageReturn:
    pass


@dataclass(frozen=True)
class NewLine:
    pass


@dataclass(frozen=True)
class ClearToEnd:
    pass


@dataclass(frozen=True)
class Write:
    text: str
    highlight: bool = False


Command = Union[MoveUp, MoveRight, CarriageReturn, NewLine, ClearToEnd, Write]


@dataclass
class Frame:
    commands: list[Command] = field(default_factory=list)
    # Rows the prompt line occupies; the next frame moves up over them
    prompt_height: int = 0


# ---------------------------------------------------------------------------
# Layout
# ---------------------------------------------------------------------------


def entry_lines(entry: str) -> list[str]:
    """Split an entry into display lines.

    Only ``\\n`` separates lines; a trailing newline does not start an
    empty last line and a ``\\r`` before a newline is dropped.
    """
    if not entry:
        return []
    lines = entry.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def highlight_segments(line: str, needle: str) -> list[Write]:
    """Split *line* into plain and highlighted pieces around *needle*."""
    segments: list[Write] = []
    last_end = 0
    for start, end in find_occurrences(line, needle):
        if start > last_end:
            segments.append(Write(line[last_end:start]))
        segments.append(Write(line[start:end], highlight=True))
        last_end = end
    if last_end < len(line):
        segments.append(Write(line[last_end:]))
    return segments


def render_frame(
    prompt: str,
    entry: str | None,
    needle: str,
    columns: int,
    previous_height: int,
) -> Frame:
    """Compute the commands that redraw the prompt and its match.

    *previous_height* is the ``prompt_height`` of the last frame, so the
    cursor can be moved back to the first prompt row before clearing.
    """
    frame = Frame()
    commands = frame.commands

    if previous_height > 1:
        commands.append(MoveUp(previous_height - 1))
    commands.append(CarriageReturn())
    commands.append(Write(prompt))
    commands.append(ClearToEnd())

    prompt_width = display_width(prompt)
    frame.prompt_height = rows_occupied(prompt_width, columns)

    if entry is None:
        return frame

    entry_height = 0
    for line in entry_lines(entry):
        commands.append(NewLine())
        commands.extend(highlight_segments(line, needle))
        entry_height += max(1, rows_occupied(display_width(line), columns))

    if entry_height > 0:
        commands.append(MoveUp(entry_height))
    commands.append(CarriageReturn())
    cursor_col = prompt_width % columns if columns > 0 else prompt_width
    if cursor_col > 0:
        commands.append(MoveRight(cursor_col))
    return frame


# ---------------------------------------------------------------------------
# ANSI backend
# ---------------------------------------------------------------------------


def to_ansi(commands: list[Command], highlight: str = DEFAULT_HIGHLIGHT) -> str:
    """Translate render commands into a string of escape sequences."""
    out: list[str] = []
    for command in commands:
        if isinstance(command, Write):
            if command.highlight:
                out.append(f"{highlight}{command.text}{_RESET}")
            else:
                out.append(command.text)
        elif isinstance(command, MoveUp):
            if command.rows > 0:
                out.append(_CURSOR_UP_FMT.format(command.rows))
        elif isinstance(command, MoveRight):
            if command.columns > 0:
                out.append(_CURSOR_RIGHT_FMT.format(command.columns))
        elif isinstance(command, CarriageReturn):
            out.append("\r")
        elif isinstance(command, NewLine):
            out.append("\r\n")
        elif isinstance(command, ClearToEnd):
            out.append(_CLEAR_FROM_CURSOR)
    return "".join(out)


def clear_frame(previous_height: int) -> str:
    """Escape sequence that wipes the last frame, leaving the cursor at its start."""
    commands: list[Command] = []
    if previous_height > 1:
        commands.append(MoveUp(previous_height - 1))
    commands.extend([CarriageReturn(), ClearToEnd()])
    return to_ansi(commands)
