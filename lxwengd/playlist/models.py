"""Playlist commands and the parsed Program."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from ..models import PlaylistSyntaxError

__all__ = [
    "Command",
    "Duration",
    "End",
    "Goto",
    "InvalidLine",
    "Loop",
    "PlayWallpaper",
    "Program",
    "RepeatCount",
    "Replace",
    "SetDefaults",
    "Sleep",
    "Summon",
]


@dataclass(frozen=True)
class Duration:
    """A number of seconds, or infinite when `seconds` is None."""

    seconds: int | None

    @classmethod
    def infinite(cls) -> Duration:
        return cls(None)

    @property
    def is_infinite(self) -> bool:
        return self.seconds is None

    def __str__(self) -> str:
        if self.seconds is None:
            return "inf"
        if self.seconds and self.seconds % 3600 == 0:
            return f"{self.seconds // 3600}h"
        if self.seconds and self.seconds % 60 == 0:
            return f"{self.seconds // 60}m"
        return f"{self.seconds}s"


@dataclass(frozen=True)
class RepeatCount:
    """How many times a goto fires, unlimited when `count` is None."""

    count: int | None

    @classmethod
    def unlimited(cls) -> RepeatCount:
        return cls(None)

    @property
    def is_unlimited(self) -> bool:
        return self.count is None


@dataclass(frozen=True)
class PlayWallpaper:
    wallpaper: str
    duration: Duration
    properties: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class Sleep:
    duration: Duration


@dataclass(frozen=True)
class End:
    pass


@dataclass(frozen=True)
class Loop:
    """Jump back to line 1, forever."""

    def as_goto(self) -> Goto:
        return Goto(1, RepeatCount.unlimited())


@dataclass(frozen=True)
class Goto:
    location: int
    times: RepeatCount = RepeatCount(1)


@dataclass(frozen=True)
class Replace:
    playlist: str


@dataclass(frozen=True)
class Summon:
    playlist: str


@dataclass(frozen=True)
class SetDefaults:
    properties: dict[str, str] = field(default_factory=dict)


Command = PlayWallpaper | Sleep | End | Loop | Goto | Replace | Summon | SetDefaults


@dataclass(frozen=True)
class InvalidLine:
    """Marker kept in place of a line that failed to parse."""

    text: str
    error: PlaylistSyntaxError


# Commands which suspend or stop a runner; a program needs one of them to be playable
_PLAYABLE = (PlayWallpaper, Sleep, End)


@dataclass(frozen=True)
class Program:
    """Parsed form of a playlist.

    `lines` maps 1-based line numbers to commands or error markers. Blank and
    comment-only lines keep their number but have no entry.
    """

    origin: str
    lines: dict[int, Command | InvalidLine]
    path: Path | None = None

    def __getitem__(self, line: int) -> Command | InvalidLine:
        return self.lines[line]

    def __len__(self) -> int:
        return len(self.lines)

    @property
    def first_line(self) -> int:
        return min(self.lines)

    @property
    def last_line(self) -> int:
        return max(self.lines)

    @property
    def is_playable(self) -> bool:
        """Tell whether running this program can ever wait or stop."""
        return any(isinstance(entry, _PLAYABLE) for entry in self.lines.values())

    @property
    def errors(self) -> list[tuple[int, InvalidLine]]:
        return [(number, entry) for number, entry in self.lines.items() if isinstance(entry, InvalidLine)]

    def normalize(self, line: int) -> int:
        """Return `line` if present, else the next present line, wrapping to the first one."""
        if line in self.lines:
            return line
        following = [number for number in self.lines if number > line]
        return min(following) if following else self.first_line

    def next_line(self, line: int) -> int:
        return self.normalize(line + 1)

    def previous_line(self, line: int) -> int:
        """Return the closest present line before `line`, wrapping to the last one."""
        preceding = [number for number in self.lines if number < line]
        return max(preceding) if preceding else self.last_line
