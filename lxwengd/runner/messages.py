"""Control messages delivered to a runner's inbox."""

from dataclasses import dataclass

__all__ = ["ControlMessage", "Jump", "Next", "Pause", "Play", "Prev", "Reload", "Replace", "Stop", "Toggle"]


@dataclass(frozen=True)
class Play:
    """Start or resume playback."""


@dataclass(frozen=True)
class Pause:
    """Pause playback, freezing the renderer if `keep_process` else closing it."""

    keep_process: bool = False


@dataclass(frozen=True)
class Toggle:
    """Pause when playing, play when paused."""


@dataclass(frozen=True)
class Stop:
    """Stop the runner, writing a resume file unless `no_resume`."""

    no_resume: bool = False


@dataclass(frozen=True)
class Next:
    """Skip to the following line."""


@dataclass(frozen=True)
class Prev:
    """Go back to the previous line."""


@dataclass(frozen=True)
class Jump:
    """Go to a line."""

    line: int


@dataclass(frozen=True)
class Reload:
    """Read the playlist again from disk."""


@dataclass(frozen=True)
class Replace:
    """Swap the program for another playlist."""

    playlist: str


ControlMessage = Play | Pause | Toggle | Stop | Next | Prev | Jump | Reload | Replace
