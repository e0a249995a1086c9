"""Playlist language: commands, parser and discovery."""

from .discovery import find_playlist, load_program
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
from .parsing import parse_duration, parse_line, parse_program

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
    "find_playlist",
    "load_program",
    "parse_duration",
    "parse_line",
    "parse_program",
]
