"""Centralised configuration via a frozen dataclass."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from pixel_art.errors import InvalidArgumentError

PALETTE_STYLES = ("auto", "graffiti", "bright")

MIN_COLORS = 2
MAX_COLORS = 256


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True)
class PipelineConfig:
    """All tuneable parameters for one conversion.

    Attributes:
        pixel_size: Each downsampled cell becomes n x n in the output.
        colors:     Upper bound on the palette size (2-256).
        palette:    Palette tint - ``"auto"``, ``"graffiti"`` or ``"bright"``.
        max_width:  Fit the source to this width before pixelating.
        max_height: Fit the (possibly already fitted) source to this height.
    """

    pixel_size: int = 8
    colors: int = 16
    palette: str = "graffiti"  # see PALETTE_STYLES
    max_width: int | None = None
    max_height: int | None = None

    def validate(self) -> PipelineConfig:
        """Raise :class:`InvalidArgumentError` on the first bad value."""
        if not _is_int(self.pixel_size) or self.pixel_size < 1:
            msg = f"pixel_size must be an integer >= 1, got {self.pixel_size!r}"
            raise InvalidArgumentError(msg)
        if not _is_int(self.colors) or not MIN_COLORS <= self.colors <= MAX_COLORS:
            msg = (
                f"colors must be an integer between {MIN_COLORS} and "
                f"{MAX_COLORS}, got {self.colors!r}"
            )
            raise InvalidArgumentError(msg)
        if self.palette not in PALETTE_STYLES:
            available = ", ".join(PALETTE_STYLES)
            msg = f"Unknown palette '{self.palette}'. Available: {available}"
            raise InvalidArgumentError(msg)
        for name in ("max_width", "max_height"):
            value = getattr(self, name)
            if value is not None and (not _is_int(value) or value < 1):
                msg = f"{name} must be a positive integer, got {value!r}"
                raise InvalidArgumentError(msg)
        return self


@dataclass(frozen=True)
class BatchConfig:
    """Folder-level options used by the ``batch`` command.

    Attributes:
        input_dir:       Folder to scan for source images.
        output_dir:      Folder for results.
        output_format:   Image format for saved files.
        save_swatch:     Persist the palette as a row of swatches.
        save_comparison: Generate an Original | Pixel art comparison.
    """

    input_dir: Path = field(default_factory=lambda: Path("images"))
    output_dir: Path = field(default_factory=lambda: Path("output"))
    output_format: str = "png"
    save_swatch: bool = True
    save_comparison: bool = True

    SUPPORTED_EXTENSIONS: frozenset[str] = frozenset(
        {".jpg", ".jpeg", ".png", ".bmp", ".tiff", ".tif", ".webp", ".gif", ".jfif"}
    )
