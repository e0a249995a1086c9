"""Shared enums and exceptions."""

from enum import IntEnum, StrEnum

__all__ = [
    "ControlError",
    "ErrorKind",
    "ExitCode",
    "LaunchError",
    "LxwengdError",
    "PlaybackState",
    "PlaylistSyntaxError",
    "ResolutionError",
    "ResponsePrefix",
    "ResumeMode",
]


class LxwengdError(BaseException):
    """Used for errors which already triggered logging."""


class PlaylistSyntaxError(ValueError):
    """A playlist line could not be parsed."""

    def __init__(self, token: str, reason: str) -> None:
        super().__init__(f"{reason}: {token!r}" if token else reason)
        self.token = token
        self.reason = reason


class ResolutionError(LookupError):
    """A playlist could not be found or holds nothing to play."""


class LaunchError(OSError):
    """The renderer could not be spawned."""


class ErrorKind(StrEnum):
    """Kinds of errors reported back to control clients."""

    MALFORMED_REQUEST = "malformed_request"
    UNKNOWN_COMMAND = "unknown_command"
    UNKNOWN_TARGET = "unknown_target"
    RESOLUTION_FAILED = "resolution_failed"
    LAUNCH_FAILED = "launch_failed"
    INTERNAL_ERROR = "internal_error"


class ControlError(Exception):
    """A control request failed, reported to the client as an error response."""

    def __init__(self, kind: ErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message


class PlaybackState(StrEnum):
    """Playback state of a runner."""

    PLAYING = "playing"
    PAUSED = "paused"
    STOPPED = "stopped"


class ResumeMode(StrEnum):
    """What to do with a playlist's resume file when loading it."""

    APPLY = "apply"  # start at the stored line, keep the file
    APPLY_DELETE = "applydel"
    IGNORE = "ignore"
    IGNORE_DELETE = "ignoredel"


class ExitCode(IntEnum):
    """Process exit codes."""

    SUCCESS = 0
    USAGE_ERROR = 1  # Invalid arguments
    STARTUP_ERROR = 2  # Nothing to play, bad config, daemon already running
    CONNECTION_ERROR = 3  # Cannot connect to daemon
    COMMAND_ERROR = 4  # Command execution failed


# Socket response protocol
class ResponsePrefix(StrEnum):
    """Response prefixes for daemon-client communication."""

    OK = "OK"
    ERROR = "ERROR"
