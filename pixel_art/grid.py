"""The RGBA pixel grid passed between pipeline stages."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from pixel_art.errors import InvalidArgumentError

CHANNELS = 4


@dataclass(frozen=True, eq=False)
class PixelGrid:
    """A rectangular, read-only grid of RGBA samples.

    ``pixels`` is an (H, W, 4) uint8 array in row-major order with the
    origin at the top-left corner.  The array is locked read-only on
    construction.  Building a grid directly takes the caller's array as-is,
    so prefer the ``from_*`` constructors, which copy the data first.
    """

    pixels: np.ndarray

    def __post_init__(self) -> None:
        arr = self.pixels
        if arr.ndim != 3 or arr.shape[2] != CHANNELS or arr.dtype != np.uint8:
            msg = f"PixelGrid needs an (H, W, 4) uint8 array, got {arr.shape} {arr.dtype}"
            raise InvalidArgumentError(msg)
        arr.setflags(write=False)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def size(self) -> tuple[int, int]:
        """(width, height), the order Pillow uses."""
        return self.width, self.height

    @property
    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0

    @property
    def flat(self) -> np.ndarray:
        """Row-major (W*H*4,) view of the samples."""
        return self.pixels.reshape(-1)

    def colors(self) -> np.ndarray:
        """(W*H, 4) view, one row per cell."""
        return self.pixels.reshape(-1, CHANNELS)

    def distinct_colors(self) -> int:
        if self.is_empty:
            return 0
        return len(np.unique(self.colors(), axis=0))

    @classmethod
    def from_array(cls, array: np.ndarray) -> PixelGrid:
        """Copy an (H, W), (H, W, 3) or (H, W, 4) array into a new grid.

        Grayscale and RGB inputs are promoted to RGBA with alpha 255.
        """
        arr = np.asarray(array)
        if arr.ndim == 2:
            arr = np.repeat(arr[:, :, np.newaxis], 3, axis=2)
        if arr.ndim != 3 or arr.shape[2] not in (3, CHANNELS):
            msg = f"Expected an (H, W), (H, W, 3) or (H, W, 4) array, got {arr.shape}"
            raise InvalidArgumentError(msg)
        if arr.size and (arr.min() < 0 or arr.max() > 255):
            msg = "Channel values must lie in [0, 255]"
            raise InvalidArgumentError(msg)

        if arr.shape[2] == 3:
            alpha = np.full(arr.shape[:2] + (1,), 255, dtype=np.uint8)
            arr = np.concatenate([arr.astype(np.uint8), alpha], axis=2)
        else:
            arr = arr.astype(np.uint8, copy=True)
        return cls.adopt(arr)

    @classmethod
    def from_flat(
        cls, width: int, height: int, samples: Sequence[int] | np.ndarray,
    ) -> PixelGrid:
        """Build a grid from a flat row-major RGBA sequence."""
        if width < 0 or height < 0:
            msg = f"Grid dimensions must be non-negative, got {width}x{height}"
            raise InvalidArgumentError(msg)
        data = np.asarray(samples)
        expected = width * height * CHANNELS
        if data.size != expected:
            msg = (
                f"A {width}x{height} grid needs {expected} samples, "
                f"got {data.size}"
            )
            raise InvalidArgumentError(msg)
        return cls.from_array(data.reshape(height, width, CHANNELS))

    @classmethod
    def filled(
        cls, width: int, height: int, color: Sequence[int],
    ) -> PixelGrid:
        """A grid where every cell holds *color* (RGBA)."""
        arr = np.empty((height, width, CHANNELS), dtype=np.uint8)
        arr[:, :] = np.asarray(color, dtype=np.uint8)
        return cls.adopt(arr)

    @classmethod
    def adopt(cls, arr: np.ndarray) -> PixelGrid:
        """Wrap a freshly built (H, W, 4) uint8 buffer without copying.

        The caller hands over ownership.
        """
        return cls(arr)
