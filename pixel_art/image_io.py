"""Image loading, saving, resizing and comparison-grid generation.

These helpers sit at the edge of the pipeline: they turn files, blobs and
URLs into :class:`PixelGrid` values and turn grids back into images.
"""

from __future__ import annotations

import io
import logging
from pathlib import Path

import numpy as np
import requests
from PIL import Image, ImageDraw, ImageFont, ImageOps, UnidentifiedImageError

from pixel_art.errors import ImageLoadError, InvalidArgumentError
from pixel_art.grid import PixelGrid

logger = logging.getLogger(__name__)

URL_SCHEMES = ("http://", "https://")


def is_url(source: str | Path) -> bool:
    return str(source).lower().startswith(URL_SCHEMES)


# -- Grid <-> image ----------------------------------------------------


def grid_from_image(img: Image.Image) -> PixelGrid:
    """Any Pillow image -> RGBA grid (EXIF orientation applied)."""
    img = ImageOps.exif_transpose(img)
    return PixelGrid.adopt(np.array(img.convert("RGBA"), dtype=np.uint8))


def grid_to_image(grid: PixelGrid) -> Image.Image:
    return Image.fromarray(grid.pixels.copy())


def resize_grid(grid: PixelGrid, width: int, height: int) -> PixelGrid:
    """Interpolated (Lanczos) resize to exactly ``width`` x ``height``."""
    if width < 1 or height < 1:
        msg = f"Resize target must be at least 1x1, got {width}x{height}"
        raise InvalidArgumentError(msg)
    img = grid_to_image(grid).resize((width, height), Image.LANCZOS)
    return PixelGrid.adopt(np.array(img, dtype=np.uint8))


# -- Loaders -----------------------------------------------------------


def load_grid_from_bytes(data: bytes) -> PixelGrid:
    """Decode an in-memory image blob."""
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            return grid_from_image(img)
    except (UnidentifiedImageError, OSError) as exc:
        msg = f"Could not decode image data ({len(data)} bytes)"
        raise ImageLoadError(msg) from exc


def load_grid(path: str | Path) -> PixelGrid:
    """Read an image file from disk."""
    path = Path(path)
    try:
        with Image.open(path) as img:
            img.load()
            grid = grid_from_image(img)
    except FileNotFoundError as exc:
        msg = f"No such image: {path}"
        raise ImageLoadError(msg) from exc
    except (UnidentifiedImageError, OSError) as exc:
        msg = f"Could not read image {path}"
        raise ImageLoadError(msg) from exc
    logger.debug("Loaded %s (%dx%d)", path, grid.width, grid.height)
    return grid


def load_grid_from_url(url: str, timeout: float = 30) -> PixelGrid:
    """Fetch an image over HTTP(S) and decode it."""
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as exc:
        msg = f"Failed to load image from URL {url}"
        raise ImageLoadError(msg) from exc
    logger.debug("Fetched %s (%d bytes)", url, len(response.content))
    return load_grid_from_bytes(response.content)


def load_any(source: str | Path) -> PixelGrid:
    """Dispatch to :func:`load_grid_from_url` or :func:`load_grid`."""
    if is_url(source):
        return load_grid_from_url(str(source))
    return load_grid(source)


# -- Savers ------------------------------------------------------------


def save_grid(grid: PixelGrid, path: str | Path) -> None:
    """Save a grid as-is; formats without alpha get it flattened away."""
    img = grid_to_image(grid)
    if Path(path).suffix.lower() in {".jpg", ".jpeg", ".jfif", ".bmp"}:
        img = img.convert("RGB")
    img.save(path)


def save_palette_swatch(
    palette: np.ndarray,
    path: str | Path,
    swatch: int = 16,
) -> None:
    """Save the palette as a single row of ``swatch`` x ``swatch`` squares."""
    palette = np.asarray(palette, dtype=np.uint8).reshape(1, -1, 4)
    if palette.shape[1] == 0:
        msg = "Cannot draw an empty palette"
        raise InvalidArgumentError(msg)
    img = Image.fromarray(palette)
    img = img.resize((palette.shape[1] * swatch, swatch), Image.NEAREST)
    img.save(path)


LABEL_FONT = "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf"


def _label_font(size: int = 18) -> ImageFont.ImageFont | ImageFont.FreeTypeFont:
    try:
        return ImageFont.truetype(LABEL_FONT, size)
    except OSError:
        return ImageFont.load_default()


def make_comparison_grid(
    original: PixelGrid,
    pixel_art: PixelGrid,
    output_path: str | Path,
) -> None:
    """Create a 2-panel comparison: Original | Pixel art.

    The original is scaled to the pixel-art panel size so both sides line
    up pixel for pixel.
    """
    panel_w, panel_h = pixel_art.size
    label_height = 36

    panels = [
        grid_to_image(original).convert("RGB").resize((panel_w, panel_h), Image.LANCZOS),
        grid_to_image(pixel_art).convert("RGB"),
    ]
    labels = ["Original", f"Pixel art {panel_w}x{panel_h}"]

    gap = 8
    total_w = len(panels) * panel_w + (len(panels) - 1) * gap
    total_h = panel_h + label_height

    canvas = Image.new("RGB", (total_w, total_h), (30, 30, 30))
    draw = ImageDraw.Draw(canvas)

    font = _label_font()
    for i, panel in enumerate(panels):
        left = i * (panel_w + gap)
        canvas.paste(panel, (left, label_height))
        centred = left + (panel_w - int(draw.textlength(labels[i], font=font))) // 2
        draw.text((centred, 6), labels[i], fill=(220, 220, 220), font=font)

    canvas.save(output_path)
