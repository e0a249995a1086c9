"""Schema of the `[lxwengd]` configuration section."""

from .constants import DEFAULT_BINARY, DEFAULT_GRACEFUL_TIMEOUT, DEFAULT_PLAYLIST, SEARCH_PATH
from .models import PlaylistSyntaxError
from .playlist import parse_duration
from .validation import ConfigField, ConfigItems

__all__ = ["DAEMON_CONFIG_SCHEMA", "SECTION"]

SECTION = "lxwengd"


def _check_duration(value: str) -> list[str]:
    if not value:
        return []
    try:
        parse_duration(value)
    except PlaylistSyntaxError as e:
        return [str(e)]
    return []


def _check_positive(value: float) -> list[str]:
    return [] if value > 0 else ["must be greater than 0"]


DAEMON_CONFIG_SCHEMA = ConfigItems(
    ConfigField("playlist", str, default=DEFAULT_PLAYLIST, description="Playlist played at startup"),
    ConfigField("binary", str, default=DEFAULT_BINARY, description="Renderer executable"),
    ConfigField("assets_path", str, default="", description="Renderer assets folder (--assets-dir)"),
    ConfigField("extra_args", (list, str), default=[], description="Arguments passed to every renderer"),
    ConfigField("search_path", str, default=str(SEARCH_PATH), description="Folder holding the playlists"),
    ConfigField("monitors", list, default=[], description="Outputs getting a runner each at startup"),
    ConfigField(
        "default_duration",
        str,
        default="",
        description="Duration of wallpaper lines which omit it (required when empty)",
        validator=_check_duration,
    ),
    ConfigField(
        "graceful_timeout",
        float,
        default=DEFAULT_GRACEFUL_TIMEOUT,
        description="Seconds between SIGTERM and SIGKILL",
        validator=_check_positive,
    ),
)
