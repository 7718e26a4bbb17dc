"""kontrolleurs: readline-style reverse incremental history search."""

from kontrolleurs.history import HistoryReader, read_history
from kontrolleurs.keys import Key, KeyId, parse_key
from kontrolleurs.prompt import (
    END_OF_LINE,
    Incomplete,
    PromptResult,
    Quit,
    SearchPrompt,
    Selected,
    adjust_cursor,
)
from kontrolleurs.render import Frame, render_frame, to_ansi
from kontrolleurs.reusable_iter import ReusableIterator
from kontrolleurs.terminal import ResizeFlag, Terminal, TerminalError, TtyTerminal
from kontrolleurs.utils import display_width, find_occurrences, rows_occupied

__all__ = [
    # History
    "HistoryReader",
    "read_history",
    "ReusableIterator",
    # Keys
    "Key",
    "KeyId",
    "parse_key",
    # Prompt
    "END_OF_LINE",
    "Incomplete",
    "PromptResult",
    "Quit",
    "SearchPrompt",
    "Selected",
    "adjust_cursor",
    # Rendering
    "Frame",
    "render_frame",
    "to_ansi",
    # Terminal
    "ResizeFlag",
    "Terminal",
    "TerminalError",
    "TtyTerminal",
    # Utilities
    "display_width",
    "find_occurrences",
    "rows_occupied",
]
