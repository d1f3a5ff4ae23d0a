"""Rich command-line interface powered by Typer."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import NoReturn

import numpy as np
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel

from pixel_art.config import PALETTE_STYLES, BatchConfig, PipelineConfig
from pixel_art.errors import PixelArtError
from pixel_art.grid import PixelGrid
from pixel_art.image_io import (
    is_url,
    load_any,
    load_grid,
    make_comparison_grid,
    save_grid,
    save_palette_swatch,
)
from pixel_art.pipeline import convert_detailed

app = typer.Typer(
    name="pixel-art",
    help="Turn any image into palette-reduced pixel art.",
    add_completion=False,
    rich_markup_mode="rich",
)
console = Console()


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, markup=True)],
    )


def _image_paths(folder: Path, extensions: frozenset[str]) -> list[Path]:
    """Supported image files directly inside *folder*, by name."""
    if not folder.is_dir():
        return []
    candidates = (p for p in folder.glob("*") if p.suffix.lower() in extensions)
    return sorted(p for p in candidates if p.is_file())


def _quality_metric(before: PixelGrid, after: PixelGrid) -> float:
    """Mean RGBA distance introduced by quantisation."""
    b = before.colors().astype(np.float64)
    a = after.colors().astype(np.float64)
    if len(b) == 0:
        return 0.0
    return float(np.mean(np.sqrt(np.sum((b - a) ** 2, axis=1))))


def _check_palette(value: str) -> str:
    if value not in PALETTE_STYLES:
        raise typer.BadParameter(f"choose from {', '.join(PALETTE_STYLES)}")
    return value


def _fail(exc: PixelArtError) -> NoReturn:
    console.print(f"[red]✗ {exc}[/red]")
    raise typer.Exit(1) from exc


# Defaults come from PipelineConfig / BatchConfig - single source of truth
_DEFAULTS = PipelineConfig()
_BATCH_DEFAULTS = BatchConfig()


# -- batch command -----------------------------------------------------

@app.command()
def batch(
    input_dir: Path = typer.Option(
        _BATCH_DEFAULTS.input_dir, "--input", "-i", help="Folder with source images",
    ),
    output_dir: Path = typer.Option(
        _BATCH_DEFAULTS.output_dir, "--output", "-o", help="Results folder",
    ),
    pixel_size: int = typer.Option(
        _DEFAULTS.pixel_size, "--pixel-size", "-p", help="Edge of each pixel block",
    ),
    colors: int = typer.Option(
        _DEFAULTS.colors, "--colors", "-c", help="Palette size (2-256)",
    ),
    palette: str = typer.Option(
        _DEFAULTS.palette, "--palette",
        help="'auto', 'graffiti' or 'bright'", callback=_check_palette,
    ),
    max_width: int | None = typer.Option(
        None, "--max-width", help="Fit source to this width first",
    ),
    max_height: int | None = typer.Option(
        None, "--max-height", help="Then fit source to this height",
    ),
    swatch: bool = typer.Option(
        _BATCH_DEFAULTS.save_swatch, "--swatch/--no-swatch", help="Save palette swatch",
    ),
    comparison: bool = typer.Option(
        _BATCH_DEFAULTS.save_comparison, "--comparison/--no-comparison",
        help="Save Original | Pixel art comparison",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Process all images in INPUT_DIR and write results to OUTPUT_DIR."""
    _setup_logging(verbose)
    logger = logging.getLogger("pixel_art")

    cfg = PipelineConfig(
        pixel_size=pixel_size,
        colors=colors,
        palette=palette,
        max_width=max_width,
        max_height=max_height,
    )
    batch_cfg = BatchConfig(
        input_dir=input_dir,
        output_dir=output_dir,
        save_swatch=swatch,
        save_comparison=comparison,
    )
    try:
        cfg.validate()
    except PixelArtError as exc:
        _fail(exc)

    input_dir.mkdir(parents=True, exist_ok=True)
    output_dir.mkdir(parents=True, exist_ok=True)

    images = _image_paths(input_dir, batch_cfg.SUPPORTED_EXTENSIONS)
    if not images:
        console.print(f"\n[yellow]No images found in {input_dir}/[/yellow]")
        console.print("Place .jpg / .png / ... files there and re-run.\n")
        raise typer.Exit(0)

    console.print(Panel.fit(
        f"[bold]PIXEL ART CONVERTER[/bold]\n"
        f"Pixel size: {cfg.pixel_size}  |  Colours: {cfg.colors}\n"
        f"Palette: {cfg.palette}  |  Max: {cfg.max_width or '-'}x{cfg.max_height or '-'}\n"
        f"Images: {len(images)}",
        border_style="cyan",
    ))

    failed = 0
    fmt = batch_cfg.output_format
    for idx, img_path in enumerate(images, 1):
        stem = img_path.stem
        console.rule(f"[bold cyan][{idx}/{len(images)}] {img_path.name}[/bold cyan]")
        t_total = time.perf_counter()

        try:
            source = load_grid(img_path)
        except PixelArtError as exc:
            logger.warning("Skipping %s: %s", img_path.name, exc)
            failed += 1
            continue
        logger.info("Source: %dx%d", source.width, source.height)

        result = convert_detailed(source, cfg)
        out = result.output

        art_path = output_dir / f"{stem}_pixel.{fmt}"
        save_grid(out, art_path)

        if batch_cfg.save_swatch and len(result.palette):
            save_palette_swatch(result.palette, output_dir / f"{stem}_palette.{fmt}")

        if batch_cfg.save_comparison:
            make_comparison_grid(
                result.working, out, output_dir / f"{stem}_comparison.{fmt}",
            )

        err = _quality_metric(result.downsampled, result.quantized)
        elapsed = time.perf_counter() - t_total

        console.print(
            f"  [green]✓[/green] {art_path.name}  "
            f"[dim]{out.width}x{out.height}  colours={len(result.palette)}"
            f"  error={err:.1f}  time={elapsed:.1f}s[/dim]"
        )

    style = "yellow" if failed else "green"
    console.print(Panel.fit(
        f"[bold {style}]ALL DONE[/bold {style}] - results in [bold]{output_dir}/[/bold]"
        + (f"  ({failed} skipped)" if failed else ""),
        border_style=style,
    ))


# -- single-image command ----------------------------------------------

@app.command()
def single(
    source: str = typer.Argument(..., help="Image path or http(s) URL"),
    output: Path = typer.Option(Path("output/pixel.png"), "--output", "-o"),
    pixel_size: int = typer.Option(_DEFAULTS.pixel_size, "--pixel-size", "-p"),
    colors: int = typer.Option(_DEFAULTS.colors, "--colors", "-c"),
    palette: str = typer.Option(
        _DEFAULTS.palette, "--palette", callback=_check_palette,
    ),
    max_width: int | None = typer.Option(None, "--max-width"),
    max_height: int | None = typer.Option(None, "--max-height"),
    swatch: bool = typer.Option(False, "--swatch/--no-swatch"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Process a single image file or URL."""
    _setup_logging(verbose)

    cfg = PipelineConfig(
        pixel_size=pixel_size,
        colors=colors,
        palette=palette,
        max_width=max_width,
        max_height=max_height,
    )
    try:
        cfg.validate()
        grid = load_any(source)
    except PixelArtError as exc:
        _fail(exc)

    output.parent.mkdir(parents=True, exist_ok=True)

    result = convert_detailed(grid, cfg)
    save_grid(result.output, output)
    if swatch and len(result.palette):
        save_palette_swatch(
            result.palette, output.with_name(f"{output.stem}_palette{output.suffix}"),
        )

    err = _quality_metric(result.downsampled, result.quantized)
    origin = "URL" if is_url(source) else "file"
    console.print(
        f"[green]✓[/green] Saved to {output}  "
        f"[dim]{origin} {grid.width}x{grid.height} -> "
        f"{result.output.width}x{result.output.height}  "
        f"colours={len(result.palette)}  error={err:.1f}[/dim]"
    )


if __name__ == "__main__":
    app()
