"""Selective Color adjustment.

Adjusts the CMYK ink amounts of pixels belonging to nine color ranges:
- Six hue ranges (reds, yellows, greens, cyans, blues, magentas), each 30
  degrees wide with 30 degree linear transitions on both sides, weighted by
  saturation
- Whites and blacks, by lightness above 0.8 / below 0.2
- Neutrals, low-saturation midtones

## Methods

- **relative**: ``c += adjust / 100 * c * weight`` (scales existing ink)
- **absolute**: ``c += adjust / 100 * weight``

Ranges are applied in the order above (whites, neutrals, blacks last) and
each sees the ink values left by the previous ones.

Usage:
    from effectstag.filters.selective_color import apply_selective_color, SelectiveColorSettings

    settings = SelectiveColorSettings(reds={'cyan': -30, 'black': 10}, method='absolute')
    result = apply_selective_color(buffer, settings)
"""
from enum import Enum
from typing import Optional

import numpy as np
from pydantic import Field

from ..color_math import cmyk_to_rgb_array, rgb_to_cmyk_array, rgb_to_hsl_array
from ..constants import (
    BLACKS_THRESHOLD,
    HUE_TRANSITION,
    MIN_CHROMA_SATURATION,
    NEUTRALS_FALLOFF,
    NEUTRALS_MAX_SATURATION,
    WHITES_THRESHOLD,
)
from ..errors import InvalidParameterError
from ..pixel_buffer import PixelBuffer, to_u8
from ..settings import SettingsModel, SignedPercent


class ColorRange(str, Enum):
    REDS = "reds"
    YELLOWS = "yellows"
    GREENS = "greens"
    CYANS = "cyans"
    BLUES = "blues"
    MAGENTAS = "magentas"
    WHITES = "whites"
    NEUTRALS = "neutrals"
    BLACKS = "blacks"


class AdjustMethod(str, Enum):
    RELATIVE = "relative"
    ABSOLUTE = "absolute"


class SelectiveColorAdjustment(SettingsModel):
    """Ink deltas in percent, -100 to 100."""
    cyan: SignedPercent = 0.0
    magenta: SignedPercent = 0.0
    yellow: SignedPercent = 0.0
    black: SignedPercent = 0.0

    @property
    def is_zero(self) -> bool:
        return self.cyan == 0 and self.magenta == 0 and self.yellow == 0 and self.black == 0

    def as_array(self) -> np.ndarray:
        return np.array([self.cyan, self.magenta, self.yellow, self.black], dtype=np.float64) / 100


class SelectiveColorSettings(SettingsModel):
    reds: SelectiveColorAdjustment = Field(default_factory=SelectiveColorAdjustment)
    yellows: SelectiveColorAdjustment = Field(default_factory=SelectiveColorAdjustment)
    greens: SelectiveColorAdjustment = Field(default_factory=SelectiveColorAdjustment)
    cyans: SelectiveColorAdjustment = Field(default_factory=SelectiveColorAdjustment)
    blues: SelectiveColorAdjustment = Field(default_factory=SelectiveColorAdjustment)
    magentas: SelectiveColorAdjustment = Field(default_factory=SelectiveColorAdjustment)
    whites: SelectiveColorAdjustment = Field(default_factory=SelectiveColorAdjustment)
    neutrals: SelectiveColorAdjustment = Field(default_factory=SelectiveColorAdjustment)
    blacks: SelectiveColorAdjustment = Field(default_factory=SelectiveColorAdjustment)
    method: AdjustMethod = AdjustMethod.RELATIVE

    def adjustment(self, color_range: ColorRange) -> SelectiveColorAdjustment:
        return getattr(self, ColorRange(color_range).value)


# ============================================================================
# Range Weights
# ============================================================================

# Center hue of the six hue ranges
_HUE_CENTERS = {
    ColorRange.YELLOWS: 60.0,
    ColorRange.GREENS: 120.0,
    ColorRange.CYANS: 180.0,
    ColorRange.BLUES: 240.0,
    ColorRange.MAGENTAS: 300.0,
}


def _hue_weight(hue: np.ndarray, s: np.ndarray, center: float) -> np.ndarray:
    half = HUE_TRANSITION / 2
    core_low, core_high = center - half, center + half
    weight = np.select(
        [
            (hue >= core_low) & (hue <= core_high),
            (hue > core_low - HUE_TRANSITION) & (hue < core_low),
            (hue > core_high) & (hue <= core_high + HUE_TRANSITION),
        ],
        [
            s,
            s * ((hue - (core_low - HUE_TRANSITION)) / HUE_TRANSITION),
            s * (1 - (hue - core_high) / HUE_TRANSITION),
        ],
        default=0.0,
    )
    return np.where(s < MIN_CHROMA_SATURATION, 0.0, weight)


def _red_weight(hue: np.ndarray, s: np.ndarray) -> np.ndarray:
    # Reds wrap around 0 degrees
    weight = np.select(
        [
            (hue >= 345) | (hue <= 15),
            (hue > 15) & (hue <= 45),
            (hue >= 315) & (hue < 345),
        ],
        [
            s,
            s * (1 - (hue - 15) / HUE_TRANSITION),
            s * ((hue - 315) / HUE_TRANSITION),
        ],
        default=0.0,
    )
    return np.where(s < MIN_CHROMA_SATURATION, 0.0, weight)


def _whites_weight(l: np.ndarray) -> np.ndarray:
    return np.where(l >= WHITES_THRESHOLD, (l - WHITES_THRESHOLD) / (1 - WHITES_THRESHOLD), 0.0)


def _blacks_weight(l: np.ndarray) -> np.ndarray:
    return np.where(l <= BLACKS_THRESHOLD, (BLACKS_THRESHOLD - l) / BLACKS_THRESHOLD, 0.0)


def _neutrals_weight(s: np.ndarray, l: np.ndarray) -> np.ndarray:
    midtone = np.minimum(np.minimum((l - BLACKS_THRESHOLD) / NEUTRALS_FALLOFF,
                                    (WHITES_THRESHOLD - l) / NEUTRALS_FALLOFF), 1.0)
    weight = (NEUTRALS_MAX_SATURATION - s) / NEUTRALS_MAX_SATURATION * midtone
    inside = (s < NEUTRALS_MAX_SATURATION) & (l > BLACKS_THRESHOLD) & (l < WHITES_THRESHOLD)
    return np.where(inside, weight, 0.0)


def color_range_weights(rgb: np.ndarray, color_range: ColorRange) -> np.ndarray:
    """Membership weight (0-1) of every color in an (..., 3) array."""
    color_range = ColorRange(color_range)
    hsl = rgb_to_hsl_array(rgb)
    hue, s, l = hsl[..., 0], hsl[..., 1], hsl[..., 2]

    if color_range is ColorRange.REDS:
        return _red_weight(hue, s)
    if color_range in _HUE_CENTERS:
        return _hue_weight(hue, s, _HUE_CENTERS[color_range])
    if color_range is ColorRange.WHITES:
        return _whites_weight(l)
    if color_range is ColorRange.BLACKS:
        return _blacks_weight(l)
    return _neutrals_weight(s, l)


def get_color_range_weight(r: int, g: int, b: int, color_range) -> float:
    """Membership weight (0-1) of one RGB color in ``color_range``."""
    try:
        color_range = ColorRange(color_range)
    except ValueError:
        raise InvalidParameterError(f"Unknown color range: {color_range!r}") from None
    return float(color_range_weights(np.array([r, g, b], dtype=np.float64), color_range))


# ============================================================================
# Apply
# ============================================================================

def apply_selective_color(buffer: PixelBuffer,
                          settings: Optional[SelectiveColorSettings] = None) -> PixelBuffer:
    """Adjust CMYK inks per color range.

    Args:
        buffer: Source pixels
        settings: Per-range adjustments and method

    Returns:
        New buffer, alpha unchanged
    """
    settings = settings or SelectiveColorSettings()
    pixels = buffer.pixels
    rgb = pixels[:, :, :3].astype(np.float64)
    cmyk = rgb_to_cmyk_array(rgb)

    for color_range in ColorRange:
        adjustment = settings.adjustment(color_range)
        if adjustment.is_zero:
            continue
        weight = color_range_weights(rgb, color_range)[..., None]
        if settings.method is AdjustMethod.RELATIVE:
            cmyk = cmyk + adjustment.as_array() * cmyk * weight
        else:
            cmyk = cmyk + adjustment.as_array() * weight

    result = pixels.copy()
    result[:, :, :3] = to_u8(cmyk_to_rgb_array(np.clip(cmyk, 0.0, 1.0)))
    return PixelBuffer(result)


__all__ = [
    "ColorRange",
    "AdjustMethod",
    "SelectiveColorAdjustment",
    "SelectiveColorSettings",
    "color_range_weights",
    "get_color_range_weight",
    "apply_selective_color",
]
