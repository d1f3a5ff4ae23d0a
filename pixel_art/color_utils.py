"""RGB <-> HSL conversion and the palette tints built on it."""

from __future__ import annotations

from collections.abc import Callable

import numpy as np

from pixel_art.errors import InvalidArgumentError


def _round_half_up(values: np.ndarray) -> np.ndarray:
    return np.floor(values + 0.5)


# -- Array conversions -------------------------------------------------


def rgb_to_hsl_array(rgb: np.ndarray) -> np.ndarray:
    """Convert (N, 3) RGB in [0, 255] to (N, 3) float64 HSL in [0, 1].

    Achromatic colours (max == min) get h = s = 0.  When several channels
    share the maximum, red wins over green and green over blue.
    """
    rgb = np.asarray(rgb, dtype=np.float64).reshape(-1, 3) / 255
    r, g, b = rgb[:, 0], rgb[:, 1], rgb[:, 2]

    mx = rgb.max(axis=1)
    mn = rgb.min(axis=1)
    l = (mx + mn) / 2
    d = mx - mn
    chromatic = d != 0
    safe_d = np.where(chromatic, d, 1.0)

    s_dark = d / np.where(chromatic, mx + mn, 1.0)
    s_light = d / np.where(chromatic, 2 - mx - mn, 1.0)
    s = np.where(l > 0.5, s_light, s_dark)

    h = np.select(
        [mx == r, mx == g],
        [
            ((g - b) / safe_d + np.where(g < b, 6, 0)) / 6,
            ((b - r) / safe_d + 2) / 6,
        ],
        default=((r - g) / safe_d + 4) / 6,
    )

    h = np.where(chromatic, h, 0.0)
    s = np.where(chromatic, s, 0.0)
    return np.stack([h, s, l], axis=1)


def _hue_to_channel(p: np.ndarray, q: np.ndarray, t: np.ndarray) -> np.ndarray:
    t = np.where(t < 0, t + 1, t)
    t = np.where(t > 1, t - 1, t)
    return np.select(
        [t < 1 / 6, t < 1 / 2, t < 2 / 3],
        [p + (q - p) * 6 * t, q, p + (q - p) * (2 / 3 - t) * 6],
        default=p,
    )


def hsl_to_rgb_array(hsl: np.ndarray) -> np.ndarray:
    """Convert (N, 3) HSL in [0, 1] back to (N, 3) uint8 RGB."""
    hsl = np.asarray(hsl, dtype=np.float64).reshape(-1, 3)
    h, s, l = hsl[:, 0], hsl[:, 1], hsl[:, 2]

    q = np.where(l < 0.5, l * (1 + s), l + s - l * s)
    p = 2 * l - q
    rgb = np.stack(
        [
            _hue_to_channel(p, q, h + 1 / 3),
            _hue_to_channel(p, q, h),
            _hue_to_channel(p, q, h - 1 / 3),
        ],
        axis=1,
    )
    grey = (s == 0)[:, np.newaxis]
    rgb = np.where(grey, l[:, np.newaxis], rgb)
    return np.clip(_round_half_up(rgb * 255), 0, 255).astype(np.uint8)


# -- Scalar conversions ------------------------------------------------


def rgb_to_hsl(r: int, g: int, b: int) -> tuple[float, float, float]:
    """Convert one RGB colour to (h, s, l), each in [0, 1]."""
    h, s, l = rgb_to_hsl_array(np.array([[r, g, b]]))[0]
    return float(h), float(s), float(l)


def hsl_to_rgb(h: float, s: float, l: float) -> tuple[int, int, int]:
    """Convert one HSL colour to (r, g, b), each in [0, 255]."""
    r, g, b = hsl_to_rgb_array(np.array([[h, s, l]]))[0]
    return int(r), int(g), int(b)


# -- Palette tints -----------------------------------------------------


def _retint(
    palette: np.ndarray,
    adjust: Callable[[np.ndarray, np.ndarray], tuple[np.ndarray, np.ndarray]],
) -> np.ndarray:
    """Run *adjust* over the palette's (s, l) and rebuild RGB; alpha kept."""
    palette = np.asarray(palette, dtype=np.uint8)
    out = palette.copy()
    if len(palette) == 0:
        return out
    hsl = rgb_to_hsl_array(palette[:, :3])
    s, l = adjust(hsl[:, 1], hsl[:, 2])
    hsl = np.stack([hsl[:, 0], s, l], axis=1)
    out[:, :3] = hsl_to_rgb_array(hsl)
    return out


def tint_graffiti(palette: np.ndarray) -> np.ndarray:
    """Boost saturation and push lightness toward the extremes.

    Args:
        palette: (K, 4) uint8 RGBA.

    Returns:
        New (K, 4) uint8 array; the input is left untouched.
    """

    def adjust(s: np.ndarray, l: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        s = np.minimum(1.0, s * 1.3)
        l = np.where(l < 0.5, np.maximum(0.0, l * 0.85), np.minimum(1.0, l * 1.1))
        return s, l

    return _retint(palette, adjust)


def tint_bright(palette: np.ndarray) -> np.ndarray:
    """Strong saturation boost with lightness lifted into [0.3, 1.0]."""

    def adjust(s: np.ndarray, l: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        return np.minimum(1.0, s * 1.5), np.clip(l * 1.2, 0.3, 1.0)

    return _retint(palette, adjust)


def _tint_auto(palette: np.ndarray) -> np.ndarray:
    return np.array(palette, dtype=np.uint8, copy=True)


TINTS: dict[str, Callable[[np.ndarray], np.ndarray]] = {
    "auto": _tint_auto,
    "graffiti": tint_graffiti,
    "bright": tint_bright,
}


def apply_tint(palette: np.ndarray, style: str) -> np.ndarray:
    """Return *palette* re-tinted for *style* (``"auto"`` is a plain copy)."""
    tint = TINTS.get(style)
    if tint is None:
        available = ", ".join(TINTS)
        msg = f"Unknown palette '{style}'. Available: {available}"
        raise InvalidArgumentError(msg)
    return tint(palette)
