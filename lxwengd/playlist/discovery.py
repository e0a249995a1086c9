"""Playlist lookup on disk."""

from __future__ import annotations

import os
from pathlib import Path

import aiofiles

from ..constants import PLAYLIST_SUFFIX
from ..models import ResolutionError
from .models import Duration, Program
from .parsing import parse_program

__all__ = ["find_playlist", "load_program"]


def find_playlist(name: str, search_path: Path) -> Path:
    """Locate a playlist file.

    Tried in order: `name` itself, `search_path/name`, `search_path/name.playlist`.

    Raises:
        ResolutionError: no candidate is a file
    """
    expanded = Path(os.path.expandvars(name)).expanduser()
    candidates = [expanded, search_path / name, search_path / f"{name}{PLAYLIST_SUFFIX}"]
    for candidate in candidates:
        if candidate.is_file():
            return candidate
    msg = f"playlist {name!r} not found (searched {search_path})"
    raise ResolutionError(msg)


async def load_program(name: str, search_path: Path, default_duration: Duration | None = None) -> Program:
    """Find, read and parse a playlist.

    Args:
        name: Playlist name or path
        search_path: Folder holding named playlists
        default_duration: Duration of wallpaper lines which omit it, if allowed

    Raises:
        ResolutionError: the playlist is missing, unreadable or has nothing to play
    """
    path = find_playlist(name, search_path)
    try:
        async with aiofiles.open(path, encoding="utf-8", errors="replace") as f:
            text = await f.read()
    except OSError as e:
        msg = f"cannot read {path}: {e.strerror}"
        raise ResolutionError(msg) from e

    program = parse_program(name, text.splitlines(), path, default_duration)
    if not program.is_playable:
        msg = f"{path} has nothing to play"
        raise ResolutionError(msg)
    return program
