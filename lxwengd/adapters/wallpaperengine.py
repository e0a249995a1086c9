"""linux-wallpaperengine backend."""

from collections.abc import Mapping

from ..config import parse_bool
from .backend import RendererBackend

__all__ = ["WallpaperEngineBackend"]

# property -> flag emitted when the value is false
INVERTED_FLAGS = {
    "audio": "--no-audio-processing",
    "fullscreen-pause": "--no-fullscreen-pause",
    "mouse": "--disable-mouse",
}

# property -> flag emitted when the value is true
SWITCH_FLAGS = {
    "silent": "--silent",
}

# property -> flag followed by the value
VALUE_FLAGS = {
    "volume": "--volume",
    "automute": "--automute",
    "window": "--window",
    "fps": "--fps",
    "scaling": "--scaling",
    "clamping": "--clamping",
}


class WallpaperEngineBackend(RendererBackend):
    """Builds linux-wallpaperengine command lines.

    Order: binary, extra arguments, assets folder, property flags, then
    `--screen-root <monitor> --bg` and the wallpaper id.
    """

    name = "linux-wallpaperengine"

    def property_flags(self, properties: Mapping[str, str]) -> list[str]:
        """Translate properties into command line flags, values are not validated."""
        args: list[str] = []
        for key, value in properties.items():
            if key in INVERTED_FLAGS:
                if parse_bool(value) is False:
                    args.append(INVERTED_FLAGS[key])
            elif key in SWITCH_FLAGS:
                if parse_bool(value):
                    args.append(SWITCH_FLAGS[key])
            else:
                args.append(VALUE_FLAGS.get(key, f"--{key}"))
                if value:
                    args.append(value)
        return args

    def build_arguments(self, wallpaper: str, monitor: str | None, properties: Mapping[str, str]) -> list[str]:
        args = [self.binary, *self.extra_args]
        if self.assets_path:
            args.extend(["--assets-dir", self.assets_path])
        args.extend(self.property_flags(properties))
        if monitor:
            args.extend(["--screen-root", monitor, "--bg"])
        args.append(wallpaper)
        return args
