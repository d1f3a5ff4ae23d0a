"""Block-averaging resize from any source resolution to a coarse grid."""

from __future__ import annotations

import numpy as np

from pixel_art.errors import InvalidArgumentError
from pixel_art.grid import CHANNELS, PixelGrid


def block_edges(source: int, target: int) -> np.ndarray:
    """Boundaries of *target* half-open blocks spanning *source* pixels.

    Block ``t`` covers ``[edges[t], edges[t + 1])`` where
    ``edges[t] = floor(t * source / target)``.  Blocks may hold unequal
    pixel counts, and hold none at all when *target* exceeds *source*.
    """
    t = np.arange(target + 1, dtype=np.int64)
    return (t * source) // target


def downsample(grid: PixelGrid, target_width: int, target_height: int) -> PixelGrid:
    """Average source blocks down to a ``target_width`` x ``target_height`` grid.

    Each output channel is the mean of that channel over the block,
    rounded half away from zero.  Blocks with no source pixels become
    transparent black ``(0, 0, 0, 0)``.

    Args:
        grid:          Source grid (left untouched).
        target_width:  Output columns, >= 1.
        target_height: Output rows, >= 1.

    Returns:
        A new grid of exactly ``target_width`` x ``target_height`` cells.
    """
    if target_width < 1 or target_height < 1:
        msg = f"Target size must be at least 1x1, got {target_width}x{target_height}"
        raise InvalidArgumentError(msg)

    src_h, src_w = grid.height, grid.width
    xs = block_edges(src_w, target_width)
    ys = block_edges(src_h, target_height)

    # Summed-area table padded with a zero row/column so block sums are
    # four lookups regardless of block size.
    table = np.zeros((src_h + 1, src_w + 1, CHANNELS), dtype=np.int64)
    if src_h and src_w:
        table[1:, 1:] = grid.pixels.astype(np.int64).cumsum(axis=0).cumsum(axis=1)

    y0, y1 = ys[:-1, np.newaxis], ys[1:, np.newaxis]
    x0, x1 = xs[np.newaxis, :-1], xs[np.newaxis, 1:]
    sums = table[y1, x1] - table[y0, x1] - table[y1, x0] + table[y0, x0]
    counts = (y1 - y0) * (x1 - x0)

    out = np.zeros((target_height, target_width, CHANNELS), dtype=np.uint8)
    filled = counts > 0
    means = sums[filled] / counts[filled][:, np.newaxis]
    out[filled] = np.floor(means + 0.5).astype(np.uint8)
    return PixelGrid.adopt(out)
