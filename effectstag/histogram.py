"""Histogram analysis and automatic tonal correction.

This module provides:
- Histogram construction (R, G, B, luminosity)
- Per-channel statistics
- Auto Levels (per-channel histogram stretch with clipping)
- Auto Contrast (luminosity-driven stretch)
- Color info lookup (RGB, HSB, HSL, Lab, CMYK, hex)
- A bar-chart preview renderer drawing onto a Pillow surface

Usage:
    from effectstag.histogram import build_histogram, auto_levels

    hist = build_histogram(buffer)
    print(hist.statistics.luminosity.mean)
    corrected = auto_levels(buffer, clip_percent=0.5)
"""
import logging
import math
from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np
from PIL import ImageDraw

from .color_math import parse_color, rgb_to_cmyk, rgb_to_hex, rgb_to_hsl, rgb_to_hsv, rgb_to_lab
from .constants import DEFAULT_CLIP_PERCENT, HISTOGRAM_BAR_ALPHA, HISTOGRAM_BINS, LUMA_B, LUMA_G, LUMA_R
from .errors import InvalidParameterError
from .pixel_buffer import PixelBuffer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChannelStatistics:
    """Derived statistics of one histogram channel."""
    mean: float
    std_dev: float
    median: int
    min: int
    max: int
    pixel_count: int
    shadows_clipped: float  # % of all pixels in bin 0
    highlights_clipped: float  # % of all pixels in bin 255


@dataclass(frozen=True)
class HistogramStatistics:
    red: ChannelStatistics
    green: ChannelStatistics
    blue: ChannelStatistics
    luminosity: ChannelStatistics


@dataclass(frozen=True)
class Histogram:
    """256-bin counts per channel plus their statistics.

    The count arrays are read-only.
    """
    red: np.ndarray
    green: np.ndarray
    blue: np.ndarray
    luminosity: np.ndarray
    statistics: HistogramStatistics

    @property
    def total_pixels(self) -> int:
        return int(self.red.sum())


@dataclass(frozen=True)
class ColorInfo:
    """A color expressed in every model the editor displays.

    Percent-like components are rounded integers 0-100, hues are rounded
    degrees.
    """
    rgb: Tuple[int, int, int]
    hsb: Tuple[int, int, int]
    hsl: Tuple[int, int, int]
    lab: Tuple[int, int, int]
    cmyk: Tuple[int, int, int, int]
    hex: str


def _js_round(value: float) -> int:
    return int(math.floor(value + 0.5))


def _luminosity_u8(pixels: np.ndarray) -> np.ndarray:
    rgb = pixels[:, :, :3].astype(np.float64)
    lum = rgb[:, :, 0] * LUMA_R + rgb[:, :, 1] * LUMA_G + rgb[:, :, 2] * LUMA_B
    return np.floor(lum + 0.5).astype(np.int64)


def _frozen(counts: np.ndarray) -> np.ndarray:
    counts.setflags(write=False)
    return counts


# ============================================================================
# Histogram
# ============================================================================

def compute_statistics(bins: Sequence[int], total_pixel_count: int) -> ChannelStatistics:
    """Statistics of a 256-bin histogram channel.

    Args:
        bins: 256 counts
        total_pixel_count: Pixel count of the whole buffer; clipping
            percentages are relative to it

    Returns:
        ChannelStatistics
    """
    counts = np.asarray(bins, dtype=np.int64)
    if counts.shape != (HISTOGRAM_BINS,):
        raise InvalidParameterError(f"Expected {HISTOGRAM_BINS} bins, got shape {counts.shape}")
    if total_pixel_count <= 0:
        raise InvalidParameterError(f"total_pixel_count must be positive, got {total_pixel_count}")

    levels = np.arange(HISTOGRAM_BINS, dtype=np.float64)
    pixel_count = int(counts.sum())
    populated = np.nonzero(counts)[0]

    if pixel_count > 0:
        mean = float((levels * counts).sum() / pixel_count)
        variance = float((counts * (levels - mean) ** 2).sum() / pixel_count)
        std_dev = math.sqrt(variance)
        cumulative = np.cumsum(counts)
        median = int(np.argmax(cumulative >= pixel_count / 2))
        low, high = int(populated[0]), int(populated[-1])
    else:
        mean = std_dev = 0.0
        median = low = high = 0

    return ChannelStatistics(
        mean=mean,
        std_dev=std_dev,
        median=median,
        min=low,
        max=high,
        pixel_count=pixel_count,
        shadows_clipped=float(counts[0]) / total_pixel_count * 100,
        highlights_clipped=float(counts[255]) / total_pixel_count * 100,
    )


def build_histogram(buffer: PixelBuffer) -> Histogram:
    """Count R, G, B and rounded BT.601 luminosity values in one pass."""
    pixels = buffer.pixels
    total = buffer.width * buffer.height

    red = np.bincount(pixels[:, :, 0].ravel(), minlength=HISTOGRAM_BINS)
    green = np.bincount(pixels[:, :, 1].ravel(), minlength=HISTOGRAM_BINS)
    blue = np.bincount(pixels[:, :, 2].ravel(), minlength=HISTOGRAM_BINS)
    luminosity = np.bincount(_luminosity_u8(pixels).ravel(), minlength=HISTOGRAM_BINS)

    statistics = HistogramStatistics(
        red=compute_statistics(red, total),
        green=compute_statistics(green, total),
        blue=compute_statistics(blue, total),
        luminosity=compute_statistics(luminosity, total),
    )
    return Histogram(
        red=_frozen(red),
        green=_frozen(green),
        blue=_frozen(blue),
        luminosity=_frozen(luminosity),
        statistics=statistics,
    )


# ============================================================================
# Auto Levels / Auto Contrast
# ============================================================================

def _clip_points(counts: np.ndarray, clip_pixels: int) -> Tuple[int, int]:
    above_low = np.nonzero(np.cumsum(counts) > clip_pixels)[0]
    above_high = np.nonzero(np.cumsum(counts[::-1]) > clip_pixels)[0]
    black = int(above_low[0]) if above_low.size else 0
    white = 255 - int(above_high[0]) if above_high.size else 255
    return black, white


def _stretch(channel: np.ndarray, black: int, white: int) -> np.ndarray:
    """Remap [black, white] onto 0-255; a flat range counts as width 1, a crossed one inverts."""
    span = (white - black) or 1
    adjusted = (channel.astype(np.float64) - black) / span * 255
    return np.clip(np.floor(adjusted + 0.5), 0, 255).astype(np.uint8)


def auto_levels(buffer: PixelBuffer, clip_percent: float = DEFAULT_CLIP_PERCENT) -> PixelBuffer:
    """Stretch each RGB channel so its clipped range spans 0-255.

    Args:
        buffer: Source pixels
        clip_percent: Percentage of pixels allowed to clip at each end,
            clamped to 0-100

    Returns:
        New buffer, alpha unchanged
    """
    clip_percent = max(0.0, min(100.0, float(clip_percent)))
    pixels = buffer.pixels
    total = buffer.width * buffer.height
    clip_pixels = _js_round(total * clip_percent / 100)
    result = pixels.copy()

    for c in range(3):
        counts = np.bincount(pixels[:, :, c].ravel(), minlength=HISTOGRAM_BINS)
        black, white = _clip_points(counts, clip_pixels)
        if white <= black:
            logger.debug(f"auto_levels: channel {c} range {black}-{white} is flat or crossed")
        result[:, :, c] = _stretch(pixels[:, :, c], black, white)

    return PixelBuffer(result)


def auto_contrast(buffer: PixelBuffer) -> PixelBuffer:
    """Stretch all RGB channels by the luminosity range of the image."""
    pixels = buffer.pixels
    lum = _luminosity_u8(pixels)
    black, white = int(lum.min()), int(lum.max())
    if white == black:
        logger.debug(f"auto_contrast: uniform luminosity {black}")
    result = pixels.copy()
    for c in range(3):
        result[:, :, c] = _stretch(pixels[:, :, c], black, white)
    return PixelBuffer(result)


# ============================================================================
# Color Info
# ============================================================================

def get_color_info(r: int, g: int, b: int) -> ColorInfo:
    """Describe an 8-bit color in RGB, HSB, HSL, Lab, CMYK and hex."""
    for value in (r, g, b):
        if not 0 <= value <= 255:
            raise InvalidParameterError(f"RGB component out of range: {value}")

    hue, s_hsv, v = rgb_to_hsv(r, g, b)
    _, s_hsl, l = rgb_to_hsl(r, g, b)
    lab_l, lab_a, lab_b = rgb_to_lab(r, g, b)
    c, m, y, k = rgb_to_cmyk(r, g, b)
    h = _js_round(hue) % 360

    return ColorInfo(
        rgb=(int(r), int(g), int(b)),
        hsb=(h, _js_round(s_hsv * 100), _js_round(v * 100)),
        hsl=(h, _js_round(s_hsl * 100), _js_round(l * 100)),
        lab=(_js_round(lab_l), _js_round(lab_a), _js_round(lab_b)),
        cmyk=(_js_round(c * 100), _js_round(m * 100), _js_round(y * 100), _js_round(k * 100)),
        hex=rgb_to_hex(r, g, b),
    )


# ============================================================================
# Preview Rendering
# ============================================================================

def render_histogram(draw: ImageDraw.ImageDraw, bins: Sequence[int], color,
                     width: int, height: int, logarithmic: bool = False) -> None:
    """Draw 256 proportional bars into a ``width`` x ``height`` area.

    Bars are filled with ``color`` at 70% alpha. Create the surface with
    ``ImageDraw.Draw(image, 'RGBA')`` to have Pillow blend them.

    Args:
        draw: Pillow drawing surface
        bins: 256 counts
        color: Hex string or RGB tuple
        width: Target width in pixels
        height: Target height in pixels
        logarithmic: Scale bars by log10(count + 1)
    """
    counts = np.asarray(bins, dtype=np.float64)
    if counts.shape != (HISTOGRAM_BINS,):
        raise InvalidParameterError(f"Expected {HISTOGRAM_BINS} bins, got shape {counts.shape}")
    max_value = counts.max()
    if max_value == 0 or width <= 0 or height <= 0:
        return

    r, g, b = parse_color(color)
    fill = (r, g, b, _js_round(HISTOGRAM_BAR_ALPHA * 255))
    bar_width = width / HISTOGRAM_BINS

    for i, count in enumerate(counts):
        if logarithmic and count > 0:
            normalized = math.log10(count + 1) / math.log10(max_value + 1)
        else:
            normalized = count / max_value
        bar_height = normalized * height
        if bar_height <= 0:
            continue

        x0 = int(i * bar_width)
        x1 = max(x0, int((i + 1) * bar_width) - 1)
        y0 = min(height - 1, int(round(height - bar_height)))
        draw.rectangle([x0, y0, x1, height - 1], fill=fill)


__all__ = [
    "ChannelStatistics",
    "HistogramStatistics",
    "Histogram",
    "ColorInfo",
    "compute_statistics",
    "build_histogram",
    "auto_levels",
    "auto_contrast",
    "get_color_info",
    "render_histogram",
]
