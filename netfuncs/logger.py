"""Single-line, levelled console logging with a global threshold."""

from __future__ import annotations

import sys
from datetime import datetime
from enum import IntEnum

_MAX_MESSAGE_LENGTH = 2046


class Level(IntEnum):
    """Logging levels, from least to most important."""

    DEBUG = 1
    DEBUG_INFO = 2
    WARNING = 3
    ERROR = 4
    INFO = 5

    @property
    def label(self) -> str:
        return self.name.replace("_", "-")


_threshold: int = Level.DEBUG


def set_threshold(level: int) -> int:
    """Set the level below which messages are ignored; return the previous one."""
    global _threshold
    previous = _threshold
    _threshold = int(level)
    return previous


def _label(level: int) -> str:
    try:
        return Level(level).label
    except ValueError:
        return "UNKNOWN_LEVEL"


def format_line(level: int, module_name: str, message: str, now: datetime) -> str:
    """Build a log line (without the trailing newline) for the given time."""
    stamp = now.strftime("%Y-%m-%d-%H:%M:%S")
    text = message[:_MAX_MESSAGE_LENGTH]
    return f"[{stamp}.{now.microsecond:06d}] [{module_name}] [{_label(level)}] {text}"


def log(level: int, module_name: str, message: str) -> str | None:
    """Print a message on standard output unless it is below the threshold.

    Returns the line written, or None when the message was filtered out.
    """
    if level < _threshold:
        return None
    line = format_line(level, module_name, message, datetime.now())
    print(line, file=sys.stdout)
    return line