"""Resume files: remember where a stopped playlist should start again.

The file sits next to the playlist (`<playlist>.resume`) and holds the
line number to restart from.
"""

from __future__ import annotations

import contextlib
import logging
from pathlib import Path

import aiofiles
import aiofiles.os

from .constants import RESUME_SUFFIX
from .models import ResumeMode
from .playlist import Program

__all__ = ["discard_resume", "load_resume", "resume_path", "save_resume", "start_line"]


def resume_path(playlist: Path) -> Path:
    return playlist.with_name(playlist.name + RESUME_SUFFIX)


async def save_resume(playlist: Path, line: int) -> None:
    async with aiofiles.open(resume_path(playlist), "w", encoding="utf-8") as f:
        await f.write(f"{line}\n")


async def load_resume(playlist: Path) -> int | None:
    """Return the stored line, None if there is no usable resume file."""
    try:
        async with aiofiles.open(resume_path(playlist), encoding="utf-8") as f:
            text = (await f.read()).strip()
    except FileNotFoundError:
        return None
    return int(text) if text.isdigit() else None


async def discard_resume(playlist: Path) -> None:
    with contextlib.suppress(FileNotFoundError):
        await aiofiles.os.remove(resume_path(playlist))


async def start_line(program: Program, mode: ResumeMode, log: logging.Logger) -> int:
    """Apply the resume mode and return the line a new runner should start at."""
    line = program.first_line
    if program.path is None:
        return line
    if mode in (ResumeMode.APPLY, ResumeMode.APPLY_DELETE):
        stored = await load_resume(program.path)
        if stored is not None:
            if 1 <= stored <= program.last_line:
                line = program.normalize(stored)
                log.info("%s: resuming at line %d", program.origin, line)
            else:
                log.warning("%s: resume line %d is out of range, starting over", program.origin, stored)
    if mode in (ResumeMode.APPLY_DELETE, ResumeMode.IGNORE_DELETE):
        await discard_resume(program.path)
    return line
