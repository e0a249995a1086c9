"""Renderer backend interface."""

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence

__all__ = ["RendererBackend", "merge_properties"]


def merge_properties(defaults: Mapping[str, str], overrides: Mapping[str, str]) -> dict[str, str]:
    """Combine default and explicit properties, explicit values win."""
    result = dict(defaults)
    result.update(overrides)
    return result


class RendererBackend(ABC):
    """Abstract base class for the programs able to render a wallpaper.

    A backend only knows how to turn a wallpaper and its properties into an
    argument vector, spawning and supervising the process is done by the
    RendererSupervisor.
    """

    name = "renderer"

    def __init__(self, binary: str, assets_path: str = "", extra_args: Sequence[str] = ()) -> None:
        """Initialize the backend.

        Args:
            binary: Renderer executable
            assets_path: Renderer assets folder, if not the default one
            extra_args: Arguments passed before any other
        """
        self.binary = binary
        self.assets_path = assets_path
        self.extra_args = list(extra_args)

    @abstractmethod
    def build_arguments(self, wallpaper: str, monitor: str | None, properties: Mapping[str, str]) -> list[str]:
        """Return the full argument vector, executable included.

        Args:
            wallpaper: Wallpaper identifier, passed through unchecked
            monitor: Output to draw on, None for the renderer's default
            properties: Effective properties (defaults already merged)
        """

    def build_exec_arguments(self, argv: Sequence[str]) -> list[str]:
        """Return the argument vector running the renderer with exactly `argv`."""
        return [self.binary, *argv]
