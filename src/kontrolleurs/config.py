"""Runtime configuration, read from ``KONTROLLEURS_*`` environment variables."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping

from kontrolleurs.prompt import DEFAULT_LABEL, END_OF_LINE

logger = logging.getLogger(__name__)

ENV_PREFIX = "KONTROLLEURS_"

LOG_LEVELS = ("debug", "info", "warning", "error")


@dataclass
class Config:
    """Prompt and process configuration."""

    label: str = DEFAULT_LABEL
    tty_path: str = "/dev/tty"
    end_of_line: int = END_OF_LINE
    # Seconds to wait for the rest of an escape sequence after a lone ESC
    escape_timeout: float = 0.05
    highlight_color: str = "red"
    log_level: str = "warning"
    log_file: str | None = None


def _env_int(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(ENV_PREFIX + name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring %s%s=%r: not an integer", ENV_PREFIX, name, raw)
        return default


def _env_float(environ: Mapping[str, str], name: str, default: float) -> float:
    raw = environ.get(ENV_PREFIX + name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Ignoring %s%s=%r: not a number", ENV_PREFIX, name, raw)
        return default
    if value < 0:
        logger.warning("Ignoring %s%s=%r: must not be negative", ENV_PREFIX, name, raw)
        return default
    return value


def load_config(environ: Mapping[str, str] | None = None) -> Config:
    """Build a ``Config`` from the environment, falling back to defaults."""
    if environ is None:
        environ = os.environ
    defaults = Config()

    log_level = environ.get(ENV_PREFIX + "LOG_LEVEL", defaults.log_level).lower()
    if log_level not in LOG_LEVELS:
        logger.warning("Ignoring %sLOG_LEVEL=%r", ENV_PREFIX, log_level)
        log_level = defaults.log_level

    return Config(
        label=environ.get(ENV_PREFIX + "LABEL", defaults.label),
        tty_path=environ.get(ENV_PREFIX + "TTY", defaults.tty_path),
        end_of_line=_env_int(environ, "END_OF_LINE", defaults.end_of_line),
        escape_timeout=_env_float(environ, "ESCAPE_TIMEOUT", defaults.escape_timeout),
        highlight_color=environ.get(ENV_PREFIX + "HIGHLIGHT_COLOR", defaults.highlight_color),
        log_level=log_level,
        log_file=environ.get(ENV_PREFIX + "LOG_FILE") or None,
    )
