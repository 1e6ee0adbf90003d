"""Sharpen filters.

This module provides sharpening and related spatial filters:
- Unsharp Mask
- Smart Sharpen
- High Pass
- Sharpen (fixed 3x3 kernel)

## Input Format

These filters operate on a PixelBuffer:
- Shape: (height, width, 4) - always 4 channels (RGBA)
- dtype=np.uint8, values 0-255

R, G and B are processed; alpha is passed through unchanged.

Radii are rounded to whole pixels with a minimum of 1.

Usage:
    from effectstag.filters.sharpen_filters import apply_unsharp_mask, UnsharpMaskSettings

    result = apply_unsharp_mask(buffer, UnsharpMaskSettings(amount=150, radius=2, threshold=4))
    result = apply_high_pass(buffer, HighPassSettings(radius=3))
    result = apply_sharpen(buffer, amount=50)
"""
from enum import Enum
from typing import Optional

import numpy as np
from pydantic import Field

from ..constants import HIGH_PASS_MIDPOINT, NOISE_REDUCTION_THRESHOLD, SHARPEN_KERNEL
from ..convolution import convolve_3x3_pixels, directional_blur_pixels, gaussian_blur_pixels
from ..pixel_buffer import PixelBuffer, round_half_up, to_u8
from ..settings import Percent, SettingsModel


class RemoveBlur(str, Enum):
    GAUSSIAN = "gaussian"
    LENS = "lens"
    MOTION = "motion"


class UnsharpMaskSettings(SettingsModel):
    amount: float = Field(default=50.0, ge=0.0)
    radius: float = Field(default=1.0, gt=0.0)
    threshold: float = Field(default=0.0, ge=0.0)


class SmartSharpenSettings(SettingsModel):
    amount: float = Field(default=100.0, ge=0.0)
    radius: float = Field(default=1.0, gt=0.0)
    remove_blur: RemoveBlur = RemoveBlur.GAUSSIAN
    motion_angle: float = 0.0
    noise_reduction: Percent = 0.0


class HighPassSettings(SettingsModel):
    radius: float = Field(default=10.0, gt=0.0)


def pixel_radius(radius: float) -> int:
    """Round a radius to whole pixels, at least 1."""
    return max(1, int(round_half_up(radius)))


def _rgb(pixels: np.ndarray) -> np.ndarray:
    return pixels[:, :, :3].astype(np.float64)


def _with_rgb(pixels: np.ndarray, rgb: np.ndarray) -> PixelBuffer:
    result = pixels.copy()
    result[:, :, :3] = to_u8(rgb)
    return PixelBuffer(result)


# ============================================================================
# Unsharp Mask / Smart Sharpen
# ============================================================================

def apply_unsharp_mask(buffer: PixelBuffer, settings: Optional[UnsharpMaskSettings] = None) -> PixelBuffer:
    """Add back the difference to a Gaussian blur.

    Only channels whose difference reaches ``threshold`` are changed.
    """
    settings = settings or UnsharpMaskSettings()
    pixels = buffer.pixels
    original = _rgb(pixels)
    blurred = _rgb(gaussian_blur_pixels(pixels, pixel_radius(settings.radius)))
    diff = original - blurred

    sharpened = np.clip(original + diff * (settings.amount / 100), 0, 255)
    return _with_rgb(pixels, np.where(np.abs(diff) >= settings.threshold, sharpened, original))


def apply_smart_sharpen(buffer: PixelBuffer, settings: Optional[SmartSharpenSettings] = None) -> PixelBuffer:
    """Unsharp masking against a selectable blur, with noise damping.

    ``lens`` uses the Gaussian blur; ``motion`` blurs along ``motion_angle``.
    With noise reduction ``n`` (0-1), differences smaller than ``10 * n``
    are scaled by ``1 - n`` first.
    """
    settings = settings or SmartSharpenSettings()
    pixels = buffer.pixels
    radius = pixel_radius(settings.radius)

    if settings.remove_blur is RemoveBlur.MOTION:
        blurred = directional_blur_pixels(pixels, radius, settings.motion_angle)
    else:
        blurred = gaussian_blur_pixels(pixels, radius)

    original = _rgb(pixels)
    diff = original - _rgb(blurred)

    noise_reduction = settings.noise_reduction / 100
    if noise_reduction > 0:
        small = np.abs(diff) < NOISE_REDUCTION_THRESHOLD * noise_reduction
        diff = np.where(small, diff * (1 - noise_reduction), diff)

    return _with_rgb(pixels, np.clip(original + diff * (settings.amount / 100), 0, 255))


# ============================================================================
# High Pass
# ============================================================================

def apply_high_pass(buffer: PixelBuffer, settings: Optional[HighPassSettings] = None) -> PixelBuffer:
    """Keep only detail above the blur radius, centered on mid gray."""
    settings = settings or HighPassSettings()
    pixels = buffer.pixels
    blurred = gaussian_blur_pixels(pixels, pixel_radius(settings.radius))
    return _with_rgb(pixels, np.clip(HIGH_PASS_MIDPOINT + (_rgb(pixels) - _rgb(blurred)), 0, 255))


# ============================================================================
# Sharpen
# ============================================================================

def apply_sharpen(buffer: PixelBuffer, amount: float = 50.0) -> PixelBuffer:
    """Blend the fixed 3x3 sharpen kernel with the original by ``amount`` percent.

    The outermost pixel ring is copied unchanged.
    """
    pixels = buffer.pixels
    result = pixels.copy()
    sums = convolve_3x3_pixels(pixels, SHARPEN_KERNEL)
    if sums.size:
        original = _rgb(pixels)[1:-1, 1:-1]
        sharpened = np.clip(original + (sums - original) * (amount / 100), 0, 255)
        result[1:-1, 1:-1, :3] = to_u8(sharpened)
    return PixelBuffer(result)


__all__ = [
    "RemoveBlur",
    "UnsharpMaskSettings",
    "SmartSharpenSettings",
    "HighPassSettings",
    "pixel_radius",
    "apply_unsharp_mask",
    "apply_smart_sharpen",
    "apply_high_pass",
    "apply_sharpen",
]
