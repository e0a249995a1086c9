"""Playlist line parser.

One command per line, `#` starts a comment unless escaped as `\\#`:

    <wallpaper-id> <duration> [key=value ...]
    sleep <duration>
    end
    loop
    goto <line> [times|inf|0]
    replace <playlist-name>
    summon <playlist-name>
    default [key=value ...]
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from pathlib import Path

from ..models import PlaylistSyntaxError
from .models import (
    Command,
    Duration,
    End,
    Goto,
    InvalidLine,
    Loop,
    PlayWallpaper,
    Program,
    RepeatCount,
    Replace,
    SetDefaults,
    Sleep,
    Summon,
)

__all__ = ["parse_duration", "parse_line", "parse_program", "parse_properties", "strip_comment"]

_COMMENT = re.compile(r"(?<!\\)#")
_DURATION = re.compile(r"^(\d+)([smh]?)$")
_UNITS = {"": 1, "s": 1, "m": 60, "h": 3600}
_INFINITE = frozenset({"inf", "infinite"})


def strip_comment(text: str) -> str:
    """Remove the comment and surrounding blanks from a raw line."""
    match = _COMMENT.search(text)
    if match:
        text = text[: match.start()]
    return text.replace("\\#", "#").strip()


def parse_duration(token: str) -> Duration:
    """Parse `30`, `30s`, `5m`, `1h`, `inf` or `infinite`.

    Raises:
        PlaylistSyntaxError: the token is not a duration
    """
    lowered = token.lower()
    if lowered in _INFINITE:
        return Duration.infinite()
    match = _DURATION.match(lowered)
    if not match:
        raise PlaylistSyntaxError(token, "invalid duration")
    return Duration(int(match.group(1)) * _UNITS[match.group(2)])


def parse_properties(tokens: Iterable[str]) -> dict[str, str]:
    """Parse `key=value` tokens, values are kept verbatim."""
    properties: dict[str, str] = {}
    for token in tokens:
        key, sep, value = token.partition("=")
        if not sep or not key:
            raise PlaylistSyntaxError(token, "expected key=value")
        properties[key] = value
    return properties


def _parse_int(token: str, what: str) -> int:
    if not token.isdigit():
        raise PlaylistSyntaxError(token, f"invalid {what}")
    return int(token)


def _parse_goto(args: list[str]) -> Goto:
    if not args or len(args) > 2:
        raise PlaylistSyntaxError(" ".join(args), "goto takes a line number and an optional repeat count")
    location = _parse_int(args[0], "line number")
    if location < 1:
        raise PlaylistSyntaxError(args[0], "line numbers start at 1")
    if len(args) == 1:
        return Goto(location)
    if args[1].lower() in _INFINITE:
        return Goto(location, RepeatCount.unlimited())
    times = _parse_int(args[1], "repeat count")
    return Goto(location, RepeatCount(times) if times else RepeatCount.unlimited())


def _parse_wallpaper(wallpaper: str, args: list[str], default_duration: Duration | None) -> PlayWallpaper:
    if args and "=" not in args[0]:
        return PlayWallpaper(wallpaper, parse_duration(args[0]), parse_properties(args[1:]))
    if default_duration is None:
        raise PlaylistSyntaxError(wallpaper, "missing duration")
    return PlayWallpaper(wallpaper, default_duration, parse_properties(args))


def parse_line(text: str, default_duration: Duration | None = None) -> Command | None:
    """Parse one raw line.

    Args:
        text: The raw line, comments included
        default_duration: Duration of wallpaper lines which omit it, if allowed

    Returns:
        The command, or None for blank and comment-only lines

    Raises:
        PlaylistSyntaxError: the line is malformed
    """
    content = strip_comment(text)
    if not content:
        return None
    keyword, *remainder = content.split(None, 1)
    rest = remainder[0].strip() if remainder else ""
    args = rest.split()

    if keyword in ("end", "loop"):
        if args:
            raise PlaylistSyntaxError(rest, f"{keyword} takes no argument")
        return End() if keyword == "end" else Loop()
    if keyword == "goto":
        return _parse_goto(args)
    if keyword in ("replace", "summon"):
        if not rest:
            raise PlaylistSyntaxError(keyword, "missing playlist name")
        return Replace(rest) if keyword == "replace" else Summon(rest)
    if keyword == "default":
        return SetDefaults(parse_properties(args))
    if keyword == "sleep":
        if len(args) != 1:
            raise PlaylistSyntaxError(rest, "sleep takes one duration")
        duration = parse_duration(args[0])
        if duration.is_infinite:
            raise PlaylistSyntaxError(args[0], "sleep duration must be finite")
        return Sleep(duration)
    return _parse_wallpaper(keyword, args, default_duration)


def parse_program(
    origin: str,
    lines: Iterable[str],
    path: Path | None = None,
    default_duration: Duration | None = None,
) -> Program:
    """Parse every line of a playlist, keeping error markers for malformed ones."""
    entries: dict[int, Command | InvalidLine] = {}
    for number, text in enumerate(lines, 1):
        try:
            command = parse_line(text, default_duration)
        except PlaylistSyntaxError as e:
            entries[number] = InvalidLine(text.rstrip("\n"), e)
            continue
        if command is not None:
            entries[number] = command
    return Program(origin, entries, path)
