"""
Pixel Art Converter
===================

Turn any raster image into stylised pixel art:

- **Block averaging** down to a coarse grid
- **Median cut** colour reduction to a small palette
- **Palette tints** - ``auto`` (untouched), ``graffiti`` or ``bright``
"""

__version__ = "1.0.0"

from pixel_art.color_utils import (
    apply_tint,
    hsl_to_rgb,
    rgb_to_hsl,
    tint_bright,
    tint_graffiti,
)
from pixel_art.config import PALETTE_STYLES, PipelineConfig
from pixel_art.downsample import downsample
from pixel_art.errors import ImageLoadError, InvalidArgumentError, PixelArtError
from pixel_art.grid import PixelGrid
from pixel_art.image_io import (
    grid_from_image,
    grid_to_image,
    load_grid,
    load_grid_from_bytes,
    load_grid_from_url,
    save_grid,
)
from pixel_art.pipeline import (
    ConversionResult,
    compute_working_size,
    convert,
    convert_detailed,
    convert_file,
    convert_url,
)
from pixel_art.quantize import median_cut, quantize

__all__ = [
    "PALETTE_STYLES",
    "ConversionResult",
    "ImageLoadError",
    "InvalidArgumentError",
    "PipelineConfig",
    "PixelArtError",
    "PixelGrid",
    "apply_tint",
    "compute_working_size",
    "convert",
    "convert_detailed",
    "convert_file",
    "convert_url",
    "downsample",
    "grid_from_image",
    "grid_to_image",
    "hsl_to_rgb",
    "load_grid",
    "load_grid_from_bytes",
    "load_grid_from_url",
    "median_cut",
    "quantize",
    "rgb_to_hsl",
    "save_grid",
    "tint_bright",
    "tint_graffiti",
]
