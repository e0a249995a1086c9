"""ANSI terminal styling for log records and client output.

Honors the NO_COLOR and FORCE_COLOR environment variables, otherwise
colors are only used when writing to a TTY.
"""

import os
import sys
from typing import TextIO

__all__ = [
    "LogStyles",
    "StateStyles",
    "colorize",
    "make_style",
    "should_colorize",
]

_ESC = "\x1b["

RESET = f"{_ESC}0m"

BOLD = "1"
DIM = "2"

RED = "31"
GREEN = "32"
YELLOW = "33"


def should_colorize(stream: TextIO | None = None) -> bool:
    """Tell whether ANSI colors should be written to `stream`.

    Args:
        stream: The output stream to check. Defaults to sys.stderr.
    """
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("FORCE_COLOR"):
        return True
    if stream is None:
        stream = sys.stderr
    return hasattr(stream, "isatty") and stream.isatty()


def make_style(*codes: str) -> tuple[str, str]:
    """Return the (prefix, suffix) pair wrapping text in the given codes."""
    if not codes:
        return ("", "")
    return (f"{_ESC}{';'.join(codes)}m", RESET)


def colorize(text: str, *codes: str) -> str:
    """Wrap text in ANSI color codes."""
    prefix, suffix = make_style(*codes)
    return f"{prefix}{text}{suffix}"


class LogStyles:
    """Styles for log levels."""

    WARNING = (YELLOW, DIM)
    ERROR = (RED, DIM)
    CRITICAL = (RED, BOLD)


class StateStyles:
    """Styles for runner playback states in `status` output."""

    playing = (GREEN, BOLD)
    paused = (YELLOW,)
    stopped = (DIM,)
