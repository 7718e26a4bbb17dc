"""The reverse incremental search prompt.

``SearchPrompt`` owns the query, the restartable history stream and the
current best match. Each key press is turned into one of three results:
keep going (``Incomplete``), take this entry (``Selected``) or give up
(``Quit``).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Union

from kontrolleurs.keys import Key, KeyId, key_text
from kontrolleurs.render import DEFAULT_HIGHLIGHT, clear_frame, render_frame, to_ansi
from kontrolleurs.reusable_iter import ReusableIterator
from kontrolleurs.terminal import Terminal
from kontrolleurs.utils import contains_ignore_case, display_width, match_end, rows_occupied

logger = logging.getLogger(__name__)

DEFAULT_LABEL = "bck-i-search: "

# Far past any real line; the shell clamps it to the end of the line
END_OF_LINE = 65536

QUIT_KEYS = frozenset({Key.escape, Key.ctrl("c"), Key.ctrl("g")})
ACCEPT_KEYS = frozenset({Key.enter, Key.left, Key.right, Key.home, Key.end})
SEARCH_AGAIN_KEY = Key.ctrl("r")

# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Incomplete:
    pass


@dataclass(frozen=True)
class Selected:
    entry: str
    execute: bool
    cursor: int


@dataclass(frozen=True)
class Quit:
    pass


PromptResult = Union[Incomplete, Selected, Quit]

INCOMPLETE = Incomplete()
QUIT = Quit()


def adjust_cursor(pos: int, key: KeyId, end_of_line: int = END_OF_LINE) -> int:
    """Move the cursor position according to the key that accepted the match."""
    if key == Key.left:
        return max(pos - 1, 0)
    if key == Key.right:
        return pos + 1
    if key == Key.home:
        return 0
    if key == Key.end:
        return end_of_line
    return pos


# ---------------------------------------------------------------------------
# Prompt
# ---------------------------------------------------------------------------


class SearchPrompt:
    """Interactive search state machine drawing onto a ``Terminal``."""

    def __init__(
        self,
        terminal: Terminal,
        history: Iterable[str],
        *,
        label: str = DEFAULT_LABEL,
        end_of_line: int = END_OF_LINE,
        highlight: str = DEFAULT_HIGHLIGHT,
    ) -> None:
        self._terminal = terminal
        self._history: ReusableIterator[str] = ReusableIterator(history)
        self._label = label
        self._end_of_line = end_of_line
        self._highlight = highlight
        # (columns, rows); raises OSError if the terminal cannot be measured
        self.terminal_size: tuple[int, int] = terminal.get_size()
        self.input: str = ""
        self.current_entry: str | None = None
        self.current_input_height: int = 0

    @property
    def prompt(self) -> str:
        return f"{self._label}{self.input}"

    # -- key handling -------------------------------------------------------

    def handle_key_press(self, key: KeyId) -> PromptResult:
        if key in QUIT_KEYS:
            return QUIT

        if key in ACCEPT_KEYS:
            if self.current_entry is None:
                return QUIT
            cursor = match_end(self.current_entry, self.input)
            execute = key == Key.enter
            return Selected(
                self.current_entry,
                execute,
                adjust_cursor(cursor, key, self._end_of_line),
            )

        if key == SEARCH_AGAIN_KEY:
            self._update()
            return INCOMPLETE

        if key == Key.backspace:
            self.input = self.input[:-1]
            self._history.reset()
            self._update()
            return INCOMPLETE

        text = key_text(key)
        if text is not None:
            self.input += text
            self._history.reset()
            self._update()
        return INCOMPLETE

    def _update(self) -> None:
        needle = self.input
        self.current_entry = self._history.find(
            lambda entry: contains_ignore_case(entry, needle)
        )
        if self.current_entry is None:
            logger.debug("No history entry matches %r (%d entries read)", needle, self._history.seen)
        self.redraw()

    # -- terminal geometry --------------------------------------------------

    def handle_terminal_size_change(self) -> None:
        try:
            new_size = self._terminal.get_size()
        except OSError as e:
            logger.warning("Could not read terminal size, keeping %s: %s", self.terminal_size, e)
            return
        if new_size[0] != self.terminal_size[0]:
            # The terminal rewrapped the prompt; the next redraw must move
            # up over the rows it occupies now.
            self.current_input_height = rows_occupied(
                display_width(self.prompt), new_size[0]
            )
        self.terminal_size = new_size

    # -- drawing ------------------------------------------------------------

    def redraw(self) -> None:
        frame = render_frame(
            self.prompt,
            self.current_entry,
            self.input,
            self.terminal_size[0],
            self.current_input_height,
        )
        self.current_input_height = frame.prompt_height
        self._terminal.write(to_ansi(frame.commands, self._highlight))

    def clear(self) -> None:
        """Remove everything the prompt drew."""
        self._terminal.write(clear_frame(self.current_input_height))
        self.current_input_height = 0
