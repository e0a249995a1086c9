"""Loggers of the daemon and the client.

Every logger shares the same handlers: the terminal, and a file when
`--debug <logfile>` is given. Outside of debug mode (the DEBUG environment
variable or `--debug`), loggers only let warnings through.
"""

import logging
import os

from .ansi import LogStyles, make_style, should_colorize

__all__ = [
    "LogObjects",
    "get_logger",
    "init_logger",
    "is_debug",
    "set_debug",
]

_FILE_FORMAT = r"%(asctime)s [%(levelname)s] %(name)s :: %(message)s :: %(filename)s:%(lineno)d"
_DEBUG_FORMAT = r"%(name)18s - %(message)s // %(filename)s:%(lineno)d"
_SCREEN_FORMAT = r"%(name)s: %(message)s"


class _Flags:
    debug: bool = bool(os.environ.get("DEBUG"))


def is_debug() -> bool:
    return _Flags.debug


def set_debug(value: bool) -> None:
    _Flags.debug = value


class LogObjects:
    """Handlers attached to every logger returned by `get_logger`."""

    handlers: list[logging.Handler] = []


class ScreenLogFormatter(logging.Formatter):
    """Terminal formatter, warnings and errors are colored when the terminal allows it."""

    def __init__(self) -> None:
        super().__init__()
        fmt = _DEBUG_FORMAT if is_debug() else _SCREEN_FORMAT
        colored = should_colorize()
        styled = {
            logging.WARNING: LogStyles.WARNING,
            logging.ERROR: LogStyles.ERROR,
            logging.CRITICAL: LogStyles.CRITICAL,
        }
        self.plain = logging.Formatter(fmt)
        self.by_level: dict[int, logging.Formatter] = {}
        if colored:
            for level, style in styled.items():
                prefix, suffix = make_style(*style)
                self.by_level[level] = logging.Formatter(prefix + fmt + suffix)

    def format(self, record: logging.LogRecord) -> str:
        return self.by_level.get(record.levelno, self.plain).format(record)


def init_logger(filename: str | None = None, force_debug: bool = False) -> None:
    """Set up the shared handlers, replacing any previous ones.

    Args:
        filename: Also write every record to this file
        force_debug: Turn debug mode on
    """
    if force_debug:
        set_debug(True)

    LogObjects.handlers.clear()
    if filename:
        to_file = logging.FileHandler(filename)
        to_file.setFormatter(logging.Formatter(fmt=_FILE_FORMAT))
        LogObjects.handlers.append(to_file)
    to_screen = logging.StreamHandler()
    to_screen.setFormatter(ScreenLogFormatter())
    LogObjects.handlers.append(to_screen)


def get_logger(name: str = "lxwengd", level: int | None = None) -> logging.Logger:
    """Return a named logger wired to the shared handlers.

    Args:
        name (str): logger's name
        level (int): logger's level (auto if not set)

    Returns:
        The logger instance
    """
    logger = logging.getLogger(name)
    if level is None:
        level = logging.DEBUG if is_debug() else logging.WARNING
    logger.setLevel(level)
    logger.propagate = False
    for handler in LogObjects.handlers:
        if handler not in logger.handlers:
            logger.addHandler(handler)
    return logger
