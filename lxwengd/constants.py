"""Shared constants for lxwengd."""

import os
from pathlib import Path

__all__ = [
    "CACHE_DIR",
    "CONFIG_FILE",
    "CONTROL",
    "DEFAULT_BINARY",
    "DEFAULT_GRACEFUL_TIMEOUT",
    "DEFAULT_PLAYLIST",
    "LAUNCH_RETRY_DELAY",
    "PLAYLIST_SUFFIX",
    "RESUME_SUFFIX",
    "SEARCH_PATH",
    "SHUTDOWN_TIMEOUT",
]

_runtime_dir = os.environ.get("XDG_RUNTIME_DIR") or "/tmp"  # noqa: S108
CONTROL = f"{_runtime_dir}/lxwengd.sock"

# Config file and playlists share the same folder
_xdg_config_home = Path(os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config")
SEARCH_PATH = _xdg_config_home / "lxwengd"
CONFIG_FILE = SEARCH_PATH / "config.toml"


def _cache_dir() -> Path:
    if cache_home := os.environ.get("XDG_CACHE_HOME"):
        return Path(cache_home) / "lxwengd"
    if home := os.environ.get("HOME"):
        return Path(home) / ".cache" / "lxwengd"
    return Path("/tmp/lxwengd")  # noqa: S108


# Working directory of the renderer
CACHE_DIR = _cache_dir()

DEFAULT_PLAYLIST = "default"
DEFAULT_BINARY = "linux-wallpaperengine"
PLAYLIST_SUFFIX = ".playlist"
RESUME_SUFFIX = ".resume"

# Seconds between SIGTERM and SIGKILL
DEFAULT_GRACEFUL_TIMEOUT = 2.0

# Seconds a runner waits before moving on when the renderer cannot be spawned,
# instead of advancing at once as when a renderer crashes
LAUNCH_RETRY_DELAY = 1.0

SHUTDOWN_TIMEOUT = 10.0
