"""Median-cut palette construction and nearest-colour remapping."""

from __future__ import annotations

import logging

import numpy as np

from pixel_art.color_utils import TINTS, apply_tint
from pixel_art.errors import InvalidArgumentError
from pixel_art.grid import CHANNELS, PixelGrid

logger = logging.getLogger(__name__)

# Opaque black stands in for a bucket that ends up with no members.
EMPTY_BUCKET_COLOR = (0, 0, 0, 255)


def build_histogram(grid: PixelGrid) -> tuple[np.ndarray, np.ndarray]:
    """Count every distinct RGBA value in *grid*.

    Returns:
        ``(colors, counts)`` - (N, 4) uint8 and (N,) int64, ordered by the
        first cell (row-major) in which each colour appears.
    """
    if grid.is_empty:
        return np.empty((0, CHANNELS), dtype=np.uint8), np.empty(0, dtype=np.int64)

    uniq, first_seen, counts = np.unique(
        grid.colors(), axis=0, return_index=True, return_counts=True,
    )
    order = np.argsort(first_seen, kind="stable")
    return uniq[order], counts[order].astype(np.int64)


def _widest_bucket(
    colors: np.ndarray, buckets: list[np.ndarray],
) -> tuple[int, int, int]:
    """Pick the bucket with the largest single-channel spread over r, g, b.

    Returns ``(spread, bucket_index, channel)``; spread is -1 when no bucket
    has more than one member.  Equal spreads keep the earliest bucket and
    prefer r over g over b.
    """
    best_range, best_idx, best_channel = -1, 0, 0
    for idx, bucket in enumerate(buckets):
        if len(bucket) <= 1:
            continue
        rgb = colors[bucket, :3].astype(np.int16)
        ranges = rgb.max(axis=0) - rgb.min(axis=0)
        widest = int(ranges.max())
        if widest > best_range:
            best_range = widest
            best_idx = idx
            best_channel = int(np.argmax(ranges))
    return best_range, best_idx, best_channel


def _bucket_average(
    colors: np.ndarray, counts: np.ndarray, bucket: np.ndarray,
) -> np.ndarray:
    weights = counts[bucket]
    total = weights.sum()
    if len(bucket) == 0 or total == 0:
        return np.array(EMPTY_BUCKET_COLOR, dtype=np.uint8)
    weighted = (colors[bucket].astype(np.int64) * weights[:, np.newaxis]).sum(axis=0)
    return np.floor(weighted / total + 0.5).astype(np.uint8)


def median_cut(
    colors: np.ndarray,
    counts: np.ndarray,
    num_colors: int,
) -> np.ndarray:
    """Reduce a colour histogram to at most *num_colors* entries.

    Repeatedly splits the bucket with the widest r/g/b spread at its median
    along that channel, then replaces every bucket by its count-weighted
    mean.  Splitting stops early once every splittable bucket is flat on
    r, g and b, so the palette can be shorter than requested.

    Args:
        colors:     (N, 4) uint8 distinct colours.
        counts:     (N,) occurrence counts.
        num_colors: Target bucket count.

    Returns:
        (K, 4) uint8 palette with ``K <= num_colors``.
    """
    colors = np.asarray(colors, dtype=np.uint8)
    counts = np.asarray(counts, dtype=np.int64)
    if len(colors) <= num_colors:
        return colors.copy()

    buckets = [np.arange(len(colors))]
    while len(buckets) < num_colors:
        spread, idx, channel = _widest_bucket(colors, buckets)
        if spread <= 0:
            break
        bucket = buckets[idx]
        bucket = bucket[np.argsort(colors[bucket, channel], kind="stable")]
        mid = len(bucket) // 2
        buckets[idx : idx + 1] = [bucket[:mid], bucket[mid:]]

    logger.debug("Median cut: %d colours -> %d buckets", len(colors), len(buckets))
    return np.stack([_bucket_average(colors, counts, b) for b in buckets])


def nearest_color_indices(
    pixels: np.ndarray,
    palette: np.ndarray,
    chunk_size: int = 4096,
) -> np.ndarray:
    """Index of the closest palette entry for every pixel.

    Distance is squared Euclidean over r, g, b and a; on a tie the entry
    that comes first in *palette* wins.

    Args:
        pixels:     (N, 4) uint8.
        palette:    (K, 4) uint8, K >= 1.
        chunk_size: Rows computed per batch (controls peak RAM).

    Returns:
        (N,) int64 indices into *palette*.
    """
    pix = np.asarray(pixels, dtype=np.int32).reshape(-1, CHANNELS)
    pal = np.asarray(palette, dtype=np.int32).reshape(-1, CHANNELS)
    if len(pal) == 0:
        msg = "Cannot match colours against an empty palette"
        raise InvalidArgumentError(msg)

    out = np.empty(len(pix), dtype=np.int64)
    for i in range(0, len(pix), chunk_size):
        j = min(i + chunk_size, len(pix))
        diff = pix[i:j, np.newaxis, :] - pal[np.newaxis, :, :]
        out[i:j] = np.argmin(np.sum(diff * diff, axis=2), axis=1)
    return out


def remap(grid: PixelGrid, palette: np.ndarray) -> PixelGrid:
    """Replace every cell with its nearest palette entry."""
    if grid.is_empty:
        return grid
    palette = np.asarray(palette, dtype=np.uint8)
    idx = nearest_color_indices(grid.colors(), palette)
    return PixelGrid.adopt(palette[idx].reshape(grid.pixels.shape))


def quantize_detailed(
    grid: PixelGrid,
    num_colors: int,
    palette_style: str = "auto",
) -> tuple[PixelGrid, np.ndarray]:
    """Like :func:`quantize` but also return the palette that was applied.

    On the pass-through path the "palette" is the grid's own distinct
    colours, untinted.
    """
    if num_colors < 1:
        msg = f"num_colors must be >= 1, got {num_colors}"
        raise InvalidArgumentError(msg)
    if palette_style not in TINTS:
        available = ", ".join(TINTS)
        msg = f"Unknown palette '{palette_style}'. Available: {available}"
        raise InvalidArgumentError(msg)

    colors, counts = build_histogram(grid)
    if len(colors) <= num_colors:
        # Nothing to reduce: the input goes back as-is and untinted.
        logger.debug(
            "%d distinct colours <= %d requested, skipping quantisation",
            len(colors), num_colors,
        )
        return grid, colors

    palette = apply_tint(median_cut(colors, counts, num_colors), palette_style)
    return remap(grid, palette), palette


def quantize(
    grid: PixelGrid,
    num_colors: int,
    palette_style: str = "auto",
) -> PixelGrid:
    """Reduce *grid* to at most *num_colors* colours.

    Builds a median-cut palette from the grid's histogram, re-tints it for
    *palette_style* and maps every cell to its nearest entry.  When the grid
    already has no more than *num_colors* distinct colours it is returned
    unchanged and untinted.
    """
    return quantize_detailed(grid, num_colors, palette_style)[0]
