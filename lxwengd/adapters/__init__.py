"""Renderer backends."""

from .backend import RendererBackend, merge_properties
from .wallpaperengine import WallpaperEngineBackend

__all__ = ["RendererBackend", "WallpaperEngineBackend", "merge_properties"]
