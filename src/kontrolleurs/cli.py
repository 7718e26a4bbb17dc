"""Command line entry point.

Reads NUL-delimited history entries from stdin, runs the search prompt on
the controlling terminal and, if an entry was accepted, prints::

    true|false      whether the shell should execute the entry right away
    <cursor>        cursor position within the entry
    <entry>\\0

Nothing is printed when the search is cancelled.
"""

from __future__ import annotations

import argparse
import logging
import logging.handlers
import sys
from contextlib import contextmanager
from typing import BinaryIO, Iterable, Iterator

from kontrolleurs.config import LOG_LEVELS, Config, load_config
from kontrolleurs.history import read_history
from kontrolleurs.keys import parse_key
from kontrolleurs.prompt import Quit, SearchPrompt, Selected
from kontrolleurs.render import highlight_style
from kontrolleurs.stdin_buffer import KeyReader
from kontrolleurs.terminal import ResizeFlag, TerminalError, TtyTerminal

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="kontrolleurs",
        description="Reverse incremental search over NUL-delimited history read from stdin",
    )
    parser.add_argument("--label", help="Prompt label (default: 'bck-i-search: ')")
    parser.add_argument("--tty", dest="tty_path", help="Terminal device to use (default: /dev/tty)")
    parser.add_argument("--highlight-color", help="Color of highlighted matches (default: red)")
    parser.add_argument("--log-level", choices=LOG_LEVELS, help="Log level (default: warning)")
    parser.add_argument("--log-file", help="Write logs to this file instead of stderr")
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace, base: Config) -> Config:
    """Apply command line overrides on top of *base*."""
    for name in ("label", "tty_path", "highlight_color", "log_level", "log_file"):
        value = getattr(args, name, None)
        if value is not None:
            setattr(base, name, value)
    return base


def _setup_logging(config: Config) -> None:
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        filename=config.log_file,
    )


@contextmanager
def _held_logs(config: Config) -> Iterator[None]:
    """Keep log records off stderr while the terminal is in raw mode.

    stderr is usually the same tty the prompt draws on. Records are
    buffered and replayed once the block exits. Logging to a file is
    left alone.
    """
    if config.log_file is not None:
        yield
        return
    root = logging.getLogger()
    handlers = root.handlers[:]
    held = logging.handlers.MemoryHandler(capacity=1024, flushLevel=logging.CRITICAL + 1)
    for handler in handlers:
        root.removeHandler(handler)
    root.addHandler(held)
    try:
        yield
    finally:
        root.removeHandler(held)
        for handler in handlers:
            root.addHandler(handler)
        for record in held.buffer:
            root.handle(record)
        held.close()


def run_prompt(
    prompt: SearchPrompt,
    keys: Iterable[str],
    resize_flag: ResizeFlag,
) -> Selected | None:
    """Feed raw key sequences to *prompt* until it selects or quits."""
    prompt.redraw()
    for data in keys:
        if resize_flag.take():
            prompt.handle_terminal_size_change()
            prompt.redraw()
        key = parse_key(data)
        if key is None:
            logger.debug("Ignoring unknown input %r", data)
            continue
        result = prompt.handle_key_press(key)
        if isinstance(result, Selected):
            return result
        if isinstance(result, Quit):
            return None
    return None


def emit_selection(selection: Selected, out: BinaryIO) -> None:
    """Write the result as UTF-8, whatever the locale's encoding."""
    execute = "true" if selection.execute else "false"
    out.write(f"{execute}\n{selection.cursor}\n{selection.entry}\0".encode("utf-8"))
    out.flush()


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    config = build_config(args, load_config())
    try:
        highlight = highlight_style(config.highlight_color)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    _setup_logging(config)

    history = read_history(sys.stdin.buffer)
    terminal = TtyTerminal(config.tty_path)
    try:
        terminal.start()
    except TerminalError as e:
        print(f"[FATAL] {e}", file=sys.stderr)
        return 1

    with _held_logs(config):
        try:
            try:
                prompt = SearchPrompt(
                    terminal,
                    history,
                    label=config.label,
                    end_of_line=config.end_of_line,
                    highlight=highlight,
                )
            except OSError as e:
                # Out of raw mode before the message goes to the tty
                terminal.stop()
                print(f"[FATAL] Could not read terminal size: {e}", file=sys.stderr)
                return 1
            keys = KeyReader(terminal.input_fd, escape_timeout=config.escape_timeout)
            selection = run_prompt(prompt, keys, terminal.resize_flag)
            prompt.clear()
        finally:
            terminal.stop()

    if history.dropped:
        logger.info("Skipped %d undecodable history entries", history.dropped)

    if selection is not None:
        emit_selection(selection, sys.stdout.buffer)
    return 0


if __name__ == "__main__":
    sys.exit(main())
