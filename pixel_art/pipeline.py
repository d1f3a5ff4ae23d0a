"""Orchestration: fit -> downsample -> quantise -> expand."""

from __future__ import annotations

import dataclasses
import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import numpy as np

from pixel_art.config import PipelineConfig
from pixel_art.downsample import downsample
from pixel_art.errors import InvalidArgumentError
from pixel_art.grid import CHANNELS, PixelGrid
from pixel_art.image_io import load_grid, load_grid_from_url, resize_grid
from pixel_art.quantize import quantize_detailed

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class ConversionResult:
    """Every intermediate of one :func:`convert_detailed` call.

    Attributes:
        working:     Source after the max_width / max_height fit.
        downsampled: Block-averaged grid, one cell per output block.
        quantized:   ``downsampled`` remapped onto ``palette``.
        palette:     (K, 4) uint8 colours actually used.
        output:      Final grid, each quantised cell drawn as a square block.
        config:      The validated configuration.
    """

    working: PixelGrid
    downsampled: PixelGrid
    quantized: PixelGrid
    palette: np.ndarray
    output: PixelGrid
    config: PipelineConfig


def compute_working_size(
    width: int,
    height: int,
    max_width: int | None = None,
    max_height: int | None = None,
) -> tuple[int, int]:
    """Fit (width, height) under the optional limits, keeping aspect ratio.

    The width limit is applied first and the height limit second, each on
    the result of the one before, so a source constrained on both axes can
    end up narrower than *max_width*.  The recomputed side is floored, so
    an extreme aspect ratio can fit to zero rows or columns.
    """
    if max_width and width > max_width:
        height = height * max_width // width
        width = max_width
    if max_height and height > max_height:
        width = width * max_height // height
        height = max_height
    return width, height


def expand_blocks(grid: PixelGrid, pixel_size: int) -> PixelGrid:
    """Draw every cell as a flat ``pixel_size`` x ``pixel_size`` square."""
    if pixel_size < 1:
        msg = f"pixel_size must be >= 1, got {pixel_size}"
        raise InvalidArgumentError(msg)
    out = np.repeat(np.repeat(grid.pixels, pixel_size, axis=0), pixel_size, axis=1)
    return PixelGrid.adopt(out)


def _resolve_config(
    config: PipelineConfig | None, overrides: dict[str, Any],
) -> PipelineConfig:
    config = config or PipelineConfig()
    if overrides:
        try:
            config = dataclasses.replace(config, **overrides)
        except TypeError as exc:
            msg = f"Unknown option: {exc}"
            raise InvalidArgumentError(msg) from exc
    return config.validate()


def convert_detailed(
    source: PixelGrid,
    config: PipelineConfig | None = None,
    **overrides: Any,
) -> ConversionResult:
    """Run the full pipeline and keep every intermediate grid.

    Args:
        source:    Grid produced by a loader.
        config:    Options (defaults to :class:`PipelineConfig`).
        overrides: Individual fields replacing those in *config*,
            e.g. ``pixel_size=4``.

    Raises:
        InvalidArgumentError: Bad options or a missing source, before any
            pixel work.
    """
    cfg = _resolve_config(config, overrides)
    if not isinstance(source, PixelGrid):
        msg = f"source must be a PixelGrid, got {type(source).__name__}"
        raise InvalidArgumentError(msg)

    width, height = compute_working_size(
        source.width, source.height, cfg.max_width, cfg.max_height,
    )
    logger.debug("Working size: %dx%d (source %dx%d)", width, height, *source.size)

    small_w = math.ceil(width / cfg.pixel_size)
    small_h = math.ceil(height / cfg.pixel_size)

    if source.is_empty or width == 0 or height == 0:
        # Nothing to sample from: every stage yields a zero-area grid.
        working = PixelGrid.adopt(np.zeros((height, width, CHANNELS), dtype=np.uint8))
        empty = PixelGrid.adopt(
            np.zeros((small_h * cfg.pixel_size, small_w * cfg.pixel_size, CHANNELS),
                     dtype=np.uint8),
        )
        return ConversionResult(
            working, working, working,
            np.empty((0, CHANNELS), dtype=np.uint8), empty, cfg,
        )

    working = source
    if (width, height) != source.size:
        working = resize_grid(source, width, height)

    downsampled = downsample(working, small_w, small_h)
    quantized, palette = quantize_detailed(downsampled, cfg.colors, cfg.palette)
    logger.debug(
        "Downsampled to %dx%d, palette of %d colours (%s)",
        small_w, small_h, len(palette), cfg.palette,
    )

    output = expand_blocks(quantized, cfg.pixel_size)
    return ConversionResult(working, downsampled, quantized, palette, output, cfg)


def convert(
    source: PixelGrid,
    config: PipelineConfig | None = None,
    **overrides: Any,
) -> PixelGrid:
    """Turn *source* into pixel art.

    The output measures ``ceil(w / pixel_size) * pixel_size`` by
    ``ceil(h / pixel_size) * pixel_size`` where (w, h) is the source size
    after the max_width / max_height fit.
    """
    return convert_detailed(source, config, **overrides).output


def convert_file(
    path: str | Path,
    config: PipelineConfig | None = None,
    **overrides: Any,
) -> PixelGrid:
    """Load an image file and convert it."""
    cfg = _resolve_config(config, overrides)
    return convert(load_grid(path), cfg)


def convert_url(
    url: str,
    config: PipelineConfig | None = None,
    **overrides: Any,
) -> PixelGrid:
    """Fetch an image over HTTP(S) and convert it."""
    cfg = _resolve_config(config, overrides)
    return convert(load_grid_from_url(url), cfg)
