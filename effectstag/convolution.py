"""Convolution and resampling primitives.

This module provides the spatial kernels the filters build on:
- Gaussian kernel construction and separable Gaussian blur
- Directional (motion) blur
- 3x3 kernel convolution
- Bilinear sampling at fractional coordinates

## Edge Policies

Each primitive has its own, observable edge behavior:

| Primitive | Outside the buffer |
|-----------|--------------------|
| separable_gaussian_blur | edge replication (clamped index) |
| directional_blur | samples dropped from the average |
| convolve_3x3 | outermost pixel ring copied unchanged |
| bilinear_sample | neighbor indices clamped |

All blur/convolution functions process R, G, B and pass alpha through.

Usage:
    from effectstag.convolution import separable_gaussian_blur, bilinear_sample

    blurred = separable_gaussian_blur(buffer, radius=3)
    r, g, b, a = bilinear_sample(buffer, 10.5, 4.25)
"""
import math
from typing import Sequence, Tuple

import numpy as np

from .errors import InvalidParameterError
from .pixel_buffer import PixelBuffer, to_u8


def _check_radius(radius) -> int:
    if radius < 0:
        raise InvalidParameterError(f"Radius must be >= 0, got {radius}")
    if int(radius) != radius:
        raise InvalidParameterError(f"Radius must be an integer, got {radius}")
    return int(radius)


# ============================================================================
# Gaussian
# ============================================================================

def gaussian_kernel_1d(radius: int) -> np.ndarray:
    """Build a normalized 1D Gaussian kernel.

    Args:
        radius: Kernel radius in pixels (>= 0); sigma is radius / 3

    Returns:
        float64 array of length 2 * radius + 1 summing to 1.0
    """
    radius = _check_radius(radius)
    if radius == 0:
        return np.ones(1, dtype=np.float64)

    sigma = radius / 3.0
    x = np.arange(-radius, radius + 1, dtype=np.float64)
    kernel = np.exp(-(x * x) / (2.0 * sigma * sigma))
    return kernel / kernel.sum()


def gaussian_blur_pixels(pixels: np.ndarray, radius: int) -> np.ndarray:
    """Separable Gaussian blur of an (H, W, 4) uint8 array.

    Each pass is stored back into 8-bit storage before the next one runs.
    """
    radius = _check_radius(radius)
    if radius == 0:
        return pixels.copy()

    kernel = gaussian_kernel_1d(radius)
    h, w = pixels.shape[:2]
    rgb = pixels[:, :, :3].astype(np.float64)

    # Horizontal pass
    acc = np.zeros_like(rgb)
    cols = np.arange(w)
    for k in range(-radius, radius + 1):
        src = np.clip(cols + k, 0, w - 1)
        acc += rgb[:, src, :] * kernel[k + radius]
    temp = to_u8(acc).astype(np.float64)

    # Vertical pass
    acc = np.zeros_like(temp)
    rows = np.arange(h)
    for k in range(-radius, radius + 1):
        src = np.clip(rows + k, 0, h - 1)
        acc += temp[src, :, :] * kernel[k + radius]

    result = pixels.copy()
    result[:, :, :3] = to_u8(acc)
    return result


def separable_gaussian_blur(buffer: PixelBuffer, radius: int) -> PixelBuffer:
    """Blur R, G, B with a two-pass Gaussian, replicating edge pixels.

    Args:
        buffer: Source pixels
        radius: Kernel radius in pixels (>= 0)

    Returns:
        New blurred buffer, alpha unchanged
    """
    return PixelBuffer(gaussian_blur_pixels(buffer.pixels, radius))


# ============================================================================
# Directional Blur
# ============================================================================

def directional_blur_pixels(pixels: np.ndarray, radius: int, angle_degrees: float) -> np.ndarray:
    """Motion blur of an (H, W, 4) uint8 array along ``angle_degrees``."""
    radius = _check_radius(radius)
    h, w = pixels.shape[:2]
    angle = math.radians(angle_degrees)
    dx = math.cos(angle)
    dy = math.sin(angle)

    ys, xs = np.mgrid[0:h, 0:w]
    rgb = pixels[:, :, :3].astype(np.float64)
    acc = np.zeros_like(rgb)
    count = np.zeros((h, w), dtype=np.float64)

    for k in range(-radius, radius + 1):
        sx = np.floor(xs + dx * k + 0.5).astype(np.int64)
        sy = np.floor(ys + dy * k + 0.5).astype(np.int64)
        valid = (sx >= 0) & (sx < w) & (sy >= 0) & (sy < h)
        samples = rgb[np.clip(sy, 0, h - 1), np.clip(sx, 0, w - 1)]
        acc += samples * valid[:, :, None]
        count += valid

    result = pixels.copy()
    # k == 0 always lands on the pixel itself, so count >= 1
    result[:, :, :3] = to_u8(acc / count[:, :, None])
    return result


def directional_blur(buffer: PixelBuffer, radius: int, angle_degrees: float) -> PixelBuffer:
    """Average ``2 * radius + 1`` samples along a line through each pixel.

    Samples falling outside the buffer are left out of the average rather
    than replaced by edge values.
    """
    return PixelBuffer(directional_blur_pixels(buffer.pixels, radius, angle_degrees))


# ============================================================================
# 3x3 Convolution
# ============================================================================

def convolve_3x3_pixels(pixels: np.ndarray, kernel9: Sequence[float]) -> np.ndarray:
    """Raw 3x3 convolution sums for interior pixels (float, RGB only).

    Returns an (H-2, W-2, 3) float array, empty when the buffer has no
    interior.
    """
    kernel = np.asarray(kernel9, dtype=np.float64)
    if kernel.shape != (9,):
        raise InvalidParameterError(f"Expected 9 kernel values, got {kernel.size}")

    h, w = pixels.shape[:2]
    rgb = pixels[:, :, :3].astype(np.float64)
    acc = np.zeros((max(h - 2, 0), max(w - 2, 0), 3), dtype=np.float64)
    if acc.size == 0:
        return acc

    ki = 0
    for ky in range(3):
        for kx in range(3):
            acc += rgb[ky:ky + h - 2, kx:kx + w - 2] * kernel[ki]
            ki += 1
    return acc


def convolve_3x3(buffer: PixelBuffer, kernel9: Sequence[float]) -> PixelBuffer:
    """Apply a 3x3 kernel (row-major) to interior pixels.

    The outermost ring of pixels is copied from the source unchanged.
    """
    pixels = buffer.pixels
    result = pixels.copy()
    sums = convolve_3x3_pixels(pixels, kernel9)
    if sums.size:
        result[1:-1, 1:-1, :3] = to_u8(sums)
    return PixelBuffer(result)


# ============================================================================
# Bilinear Sampling
# ============================================================================

def bilinear_sample_array(pixels: np.ndarray, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
    """Bilinearly sample (H, W, 4) pixels at fractional coordinates.

    Args:
        pixels: Source (H, W, 4) array
        xs: X coordinates, any shape
        ys: Y coordinates, same shape as ``xs``

    Returns:
        float64 array of shape ``xs.shape + (4,)``
    """
    h, w = pixels.shape[:2]
    xs = np.asarray(xs, dtype=np.float64)
    ys = np.asarray(ys, dtype=np.float64)

    fx0 = np.floor(xs)
    fy0 = np.floor(ys)
    fx = (xs - fx0)[..., None]
    fy = (ys - fy0)[..., None]

    x0 = np.clip(fx0.astype(np.int64), 0, w - 1)
    y0 = np.clip(fy0.astype(np.int64), 0, h - 1)
    x1 = np.clip(x0 + 1, 0, w - 1)
    y1 = np.clip(y0 + 1, 0, h - 1)

    src = pixels.astype(np.float64)
    v00 = src[y0, x0]
    v10 = src[y0, x1]
    v01 = src[y1, x0]
    v11 = src[y1, x1]

    return ((1 - fx) * (1 - fy) * v00 +
            fx * (1 - fy) * v10 +
            (1 - fx) * fy * v01 +
            fx * fy * v11)


def bilinear_sample(buffer: PixelBuffer, x: float, y: float) -> Tuple[float, float, float, float]:
    """Interpolate the RGBA value at fractional coordinates (x, y)."""
    if not (math.isfinite(x) and math.isfinite(y)):
        raise InvalidParameterError(f"Sample coordinates must be finite, got ({x}, {y})")
    sample = bilinear_sample_array(buffer.pixels, np.array(x), np.array(y))
    return tuple(float(v) for v in sample)


__all__ = [
    "gaussian_kernel_1d",
    "gaussian_blur_pixels",
    "separable_gaussian_blur",
    "directional_blur_pixels",
    "directional_blur",
    "convolve_3x3_pixels",
    "convolve_3x3",
    "bilinear_sample_array",
    "bilinear_sample",
]
