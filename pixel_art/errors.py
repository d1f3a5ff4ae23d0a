"""Exception hierarchy shared by the pipeline stages and the loaders."""

from __future__ import annotations


class PixelArtError(Exception):
    """Base class for every error raised by :mod:`pixel_art`."""


class InvalidArgumentError(PixelArtError, ValueError):
    """A configuration value or source grid is missing or out of range."""


class ImageLoadError(PixelArtError):
    """An image could not be read, fetched or decoded."""
