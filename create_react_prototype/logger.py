"""Leveled console logger built on Rich.

A single ``Logger`` is constructed per command run and handed to every
collaborator.  ``DEBUG`` and ``TRACE`` output is only shown when the
logger was created with ``debug=True``.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from rich.console import Console
from rich.pretty import Pretty
from rich.text import Text


class Level(str, Enum):
    DEBUG = "debug"
    TRACE = "trace"
    INFO = "info"
    WARNING = "warning"
    SUCCESS = "success"
    ERROR = "error"


_STYLES: dict[Level, str] = {
    Level.DEBUG: "dim magenta",
    Level.TRACE: "dim",
    Level.INFO: "cyan",
    Level.WARNING: "bold yellow",
    Level.SUCCESS: "bold green",
    Level.ERROR: "bold red",
}

_VERBOSE_LEVELS = frozenset({Level.DEBUG, Level.TRACE})


class Logger:
    """Writes leveled messages to a Rich console."""

    def __init__(self, debug: bool = False, console: Console | None = None) -> None:
        self.debug_enabled = debug
        self.console = console or Console(highlight=False)

    def enabled(self, level: Level) -> bool:
        return self.debug_enabled or level not in _VERBOSE_LEVELS

    def log(self, level: Level, *parts: Any) -> None:
        if not self.enabled(level):
            return
        style = _STYLES[level]
        rendered: list[Any] = [Text(f"{level.value.upper():<7}", style=style)]
        for part in parts:
            # Mappings and sequences are pretty-printed, like console.log does.
            rendered.append(Text(part) if isinstance(part, str) else Pretty(part))
        self.console.print(*rendered)

    def debug(self, *parts: Any) -> None:
        self.log(Level.DEBUG, *parts)

    def trace(self, *parts: Any) -> None:
        self.log(Level.TRACE, *parts)

    def info(self, *parts: Any) -> None:
        self.log(Level.INFO, *parts)

    def warning(self, *parts: Any) -> None:
        self.log(Level.WARNING, *parts)

    def success(self, *parts: Any) -> None:
        self.log(Level.SUCCESS, *parts)

    def error(self, *parts: Any) -> None:
        self.log(Level.ERROR, *parts)
