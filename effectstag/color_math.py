"""Color space conversions.

Pure functions, no state. Scalar helpers take and return plain Python
numbers; the ``*_array`` variants operate on ``(..., 3)`` numpy arrays and
back the vectorized kernels (blend modes, selective color).

Conventions:
- RGB channels are 0-255.
- Hue is in degrees, normalized to [0, 360). Achromatic input yields hue 0.
- S, L, V and CMYK components are fractions 0.0-1.0. User-facing rounded
  integer forms are produced by ``effectstag.histogram.get_color_info``.

Usage:
    from effectstag.color_math import rgb_to_hsl, hex_to_rgb

    h, s, l = rgb_to_hsl(255, 128, 0)
    r, g, b = hex_to_rgb('#ff8000')
"""
import math
import re
from typing import Any, Tuple

import numpy as np

from .constants import (
    LAB_EPSILON,
    LAB_KAPPA_SLOPE,
    LUMA_B,
    LUMA_G,
    LUMA_R,
    SRGB_LINEAR_THRESHOLD,
    WHITE_X,
    WHITE_Y,
    WHITE_Z,
)
from .errors import InvalidParameterError

RGB = Tuple[int, int, int]

_HEX_RE = re.compile(r'^#?([0-9a-fA-F]{2})([0-9a-fA-F]{2})([0-9a-fA-F]{2})$')


def _js_round(value: float) -> int:
    return int(math.floor(value + 0.5))


def _hue_degrees(r: float, g: float, b: float, max_c: float, delta: float) -> float:
    """Hue in degrees of normalized RGB, 0 for achromatic colors."""
    if delta == 0:
        return 0.0
    if max_c == r:
        h = (g - b) / delta + (6.0 if g < b else 0.0)
    elif max_c == g:
        h = (b - r) / delta + 2.0
    else:
        h = (r - g) / delta + 4.0
    return (h * 60.0) % 360.0


# ============================================================================
# Hex
# ============================================================================

def hex_to_rgb(hex_str: str) -> RGB:
    """Parse ``#rrggbb`` (or ``rrggbb``, any case) into an RGB tuple."""
    match = _HEX_RE.match(hex_str.strip()) if isinstance(hex_str, str) else None
    if match is None:
        raise InvalidParameterError(f"Invalid hex color: {hex_str!r}")
    return (
        int(match.group(1), 16),
        int(match.group(2), 16),
        int(match.group(3), 16),
    )


def rgb_to_hex(r: int, g: int, b: int) -> str:
    """Format an RGB triplet as lowercase ``#rrggbb``."""
    for value in (r, g, b):
        if not 0 <= int(value) <= 255:
            raise InvalidParameterError(f"RGB component out of range: {value}")
    return f"#{int(r):02x}{int(g):02x}{int(b):02x}"


def parse_color(color: Any) -> RGB:
    """
    Parse color from various formats to RGB tuple.

    Accepts:
    - RGB tuple/list: (255, 0, 0) or [255, 0, 0]
    - Hex string: '#FF0000' or 'FF0000'
    """
    if isinstance(color, str):
        return hex_to_rgb(color)
    if isinstance(color, (list, tuple)) and len(color) >= 3:
        return tuple(int(c) for c in color[:3])
    raise InvalidParameterError(f"Invalid color format: {color!r}")


# ============================================================================
# Luminance
# ============================================================================

def luminance(r: float, g: float, b: float) -> float:
    """BT.601 weighted luminance."""
    return r * LUMA_R + g * LUMA_G + b * LUMA_B


def luminance_u8(r: float, g: float, b: float) -> int:
    """BT.601 luminance rounded to an 8-bit value."""
    return _js_round(luminance(r, g, b))


def luminance_array(rgb: np.ndarray) -> np.ndarray:
    """BT.601 luminance of an (..., 3) array (float result)."""
    rgb = np.asarray(rgb, dtype=np.float64)
    return rgb[..., 0] * LUMA_R + rgb[..., 1] * LUMA_G + rgb[..., 2] * LUMA_B


# ============================================================================
# HSL
# ============================================================================

def rgb_to_hsl(r: float, g: float, b: float) -> Tuple[float, float, float]:
    """Convert RGB (0-255) to HSL (degrees, 0-1, 0-1)."""
    r, g, b = r / 255.0, g / 255.0, b / 255.0
    max_c = max(r, g, b)
    min_c = min(r, g, b)
    l = (max_c + min_c) / 2.0
    delta = max_c - min_c

    if delta == 0:
        return 0.0, 0.0, l

    s = delta / (2.0 - max_c - min_c) if l > 0.5 else delta / (max_c + min_c)
    return _hue_degrees(r, g, b, max_c, delta), s, l


def hsl_to_rgb(h: float, s: float, l: float) -> RGB:
    """Convert HSL (degrees, 0-1, 0-1) to an 8-bit RGB triplet."""
    if s == 0:
        gray = _js_round(l * 255)
        return gray, gray, gray

    def hue_to_rgb(p, q, t):
        if t < 0: t += 1
        if t > 1: t -= 1
        if t < 1/6: return p + (q - p) * 6 * t
        if t < 1/2: return q
        if t < 2/3: return p + (q - p) * (2/3 - t) * 6
        return p

    hue = (h % 360.0) / 360.0
    q = l * (1 + s) if l < 0.5 else l + s - l * s
    p = 2 * l - q

    return (
        _js_round(hue_to_rgb(p, q, hue + 1/3) * 255),
        _js_round(hue_to_rgb(p, q, hue) * 255),
        _js_round(hue_to_rgb(p, q, hue - 1/3) * 255),
    )


def rgb_to_hsl_array(rgb: np.ndarray) -> np.ndarray:
    """Vectorized ``rgb_to_hsl`` over an (..., 3) array of 0-255 values."""
    norm = np.asarray(rgb, dtype=np.float64) / 255.0
    r, g, b = norm[..., 0], norm[..., 1], norm[..., 2]
    max_c = norm.max(axis=-1)
    min_c = norm.min(axis=-1)
    l = (max_c + min_c) / 2.0
    delta = max_c - min_c
    chromatic = delta > 0
    safe_delta = np.where(chromatic, delta, 1.0)

    denom = np.where(l > 0.5, 2.0 - max_c - min_c, max_c + min_c)
    s = np.where(chromatic, delta / np.where(denom == 0, 1.0, denom), 0.0)

    h = np.select(
        [max_c == r, max_c == g],
        [(g - b) / safe_delta + np.where(g < b, 6.0, 0.0), (b - r) / safe_delta + 2.0],
        default=(r - g) / safe_delta + 4.0,
    )
    h = np.where(chromatic, np.mod(h * 60.0, 360.0), 0.0)
    return np.stack([h, s, l], axis=-1)


def hsl_to_rgb_array(hsl: np.ndarray) -> np.ndarray:
    """Vectorized ``hsl_to_rgb``; returns rounded float RGB (0-255)."""
    hsl = np.asarray(hsl, dtype=np.float64)
    hue = np.mod(hsl[..., 0], 360.0) / 360.0
    s = hsl[..., 1]
    l = hsl[..., 2]

    q = np.where(l < 0.5, l * (1 + s), l + s - l * s)
    p = 2 * l - q

    def hue_to_rgb(t):
        t = np.where(t < 0, t + 1, t)
        t = np.where(t > 1, t - 1, t)
        return np.select(
            [t < 1/6, t < 1/2, t < 2/3],
            [p + (q - p) * 6 * t, q, p + (q - p) * (2/3 - t) * 6],
            default=p,
        )

    rgb = np.stack([hue_to_rgb(hue + 1/3), hue_to_rgb(hue), hue_to_rgb(hue - 1/3)], axis=-1)
    gray = np.repeat(l[..., None], 3, axis=-1)
    rgb = np.where((s == 0)[..., None], gray, rgb)
    return np.floor(rgb * 255 + 0.5)


# ============================================================================
# HSV / HSB
# ============================================================================

def rgb_to_hsv(r: float, g: float, b: float) -> Tuple[float, float, float]:
    """Convert RGB (0-255) to HSV (degrees, 0-1, 0-1)."""
    r, g, b = r / 255.0, g / 255.0, b / 255.0
    max_c = max(r, g, b)
    min_c = min(r, g, b)
    delta = max_c - min_c
    s = 0.0 if max_c == 0 else delta / max_c
    return _hue_degrees(r, g, b, max_c, delta), s, max_c


def hsv_to_rgb(h: float, s: float, v: float) -> RGB:
    """Convert HSV (degrees, 0-1, 0-1) to an 8-bit RGB triplet."""
    h = (h % 360.0) / 60.0
    c = v * s
    x = c * (1 - abs(h % 2 - 1))
    m = v - c
    sector = int(h) % 6
    r, g, b = (
        (c, x, 0.0),
        (x, c, 0.0),
        (0.0, c, x),
        (0.0, x, c),
        (x, 0.0, c),
        (c, 0.0, x),
    )[sector]
    return (
        _js_round((r + m) * 255),
        _js_round((g + m) * 255),
        _js_round((b + m) * 255),
    )


# ============================================================================
# CMYK
# ============================================================================

def rgb_to_cmyk(r: float, g: float, b: float) -> Tuple[float, float, float, float]:
    """Convert RGB (0-255) to CMYK fractions. Pure black is (0, 0, 0, 1)."""
    r, g, b = r / 255.0, g / 255.0, b / 255.0
    k = 1.0 - max(r, g, b)
    if k == 1.0:
        return 0.0, 0.0, 0.0, 1.0
    return (
        (1 - r - k) / (1 - k),
        (1 - g - k) / (1 - k),
        (1 - b - k) / (1 - k),
        k,
    )


def cmyk_to_rgb(c: float, m: float, y: float, k: float) -> RGB:
    """Convert CMYK fractions to a rounded, clamped RGB triplet."""
    def channel(v):
        return max(0, min(255, _js_round(255 * (1 - v) * (1 - k))))
    return channel(c), channel(m), channel(y)


def rgb_to_cmyk_array(rgb: np.ndarray) -> np.ndarray:
    """Vectorized ``rgb_to_cmyk``; returns (..., 4)."""
    norm = np.asarray(rgb, dtype=np.float64) / 255.0
    k = 1.0 - norm.max(axis=-1)
    black = k >= 1.0
    denom = np.where(black, 1.0, 1.0 - k)
    cmy = (1.0 - norm - k[..., None]) / denom[..., None]
    cmy = np.where(black[..., None], 0.0, cmy)
    return np.concatenate([cmy, np.where(black, 1.0, k)[..., None]], axis=-1)


def cmyk_to_rgb_array(cmyk: np.ndarray) -> np.ndarray:
    """Vectorized ``cmyk_to_rgb``; returns rounded, clamped float RGB."""
    cmyk = np.asarray(cmyk, dtype=np.float64)
    k = cmyk[..., 3:4]
    rgb = 255 * (1 - cmyk[..., :3]) * (1 - k)
    return np.clip(np.floor(rgb + 0.5), 0, 255)


# ============================================================================
# CIE Lab
# ============================================================================

def _srgb_to_linear(v: float) -> float:
    if v > SRGB_LINEAR_THRESHOLD:
        return ((v + 0.055) / 1.055) ** 2.4
    return v / 12.92


def _lab_f(t: float) -> float:
    if t > LAB_EPSILON:
        return t ** (1 / 3)
    return LAB_KAPPA_SLOPE * t + 16 / 116


def rgb_to_lab(r: float, g: float, b: float) -> Tuple[float, float, float]:
    """Convert sRGB (0-255) to CIE Lab under the D65 white point."""
    lr = _srgb_to_linear(r / 255.0)
    lg = _srgb_to_linear(g / 255.0)
    lb = _srgb_to_linear(b / 255.0)

    x = (lr * 0.4124564 + lg * 0.3575761 + lb * 0.1804375) / WHITE_X
    y = (lr * 0.2126729 + lg * 0.7151522 + lb * 0.0721750) / WHITE_Y
    z = (lr * 0.0193339 + lg * 0.1191920 + lb * 0.9503041) / WHITE_Z

    fx, fy, fz = _lab_f(x), _lab_f(y), _lab_f(z)
    return 116 * fy - 16, 500 * (fx - fy), 200 * (fy - fz)


__all__ = [
    "hex_to_rgb",
    "rgb_to_hex",
    "parse_color",
    "luminance",
    "luminance_u8",
    "luminance_array",
    "rgb_to_hsl",
    "hsl_to_rgb",
    "rgb_to_hsl_array",
    "hsl_to_rgb_array",
    "rgb_to_hsv",
    "hsv_to_rgb",
    "rgb_to_cmyk",
    "cmyk_to_rgb",
    "rgb_to_cmyk_array",
    "cmyk_to_rgb_array",
    "rgb_to_lab",
]
