"""Distortion filters.

This module provides lens-like warps:
- Spherize
- Pinch
- Twirl
- Wave
- Ripple
- ZigZag
- Polar Coordinates

Every filter computes, for each destination pixel, a (possibly fractional)
source coordinate and bilinearly samples the source there.

## Edge Policies

| Filter | Source outside the buffer |
|--------|---------------------------|
| spherize, pinch, twirl, zigzag, polar | transparent black |
| wave | wrapped when ``wrap_around``, else transparent black |
| ripple | clamped into the buffer |

Center and radius settings are fractions of the buffer size.

Usage:
    from effectstag.filters.distort_filters import apply_twirl, TwirlSettings

    result = apply_twirl(buffer, TwirlSettings(angle=90))
    result = apply_distortion(buffer, RippleSettings(size='large'))
"""
import logging
import math
from enum import Enum
from typing import Any, Callable, ClassVar, Dict, Optional, Type

import numpy as np
from pydantic import Field

from ..constants import RIPPLE_MAX_AMPLITUDE, RIPPLE_WAVELENGTHS, ZIGZAG_MAX_AMPLITUDE
from ..convolution import bilinear_sample_array
from ..errors import InvalidParameterError
from ..pixel_buffer import PixelBuffer, resolve_rng, to_u8
from ..settings import SettingsModel, SignedPercent, UnitFraction

logger = logging.getLogger(__name__)


class DistortType(str, Enum):
    SPHERIZE = "spherize"
    PINCH = "pinch"
    TWIRL = "twirl"
    WAVE = "wave"
    RIPPLE = "ripple"
    ZIGZAG = "zigzag"
    POLAR_COORDINATES = "polar-coordinates"


class SpherizeMode(str, Enum):
    NORMAL = "normal"
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


class WaveType(str, Enum):
    SINE = "sine"
    TRIANGLE = "triangle"
    SQUARE = "square"


class RippleSize(str, Enum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


class ZigZagStyle(str, Enum):
    AROUND_CENTER = "around-center"
    OUT_FROM_CENTER = "out-from-center"
    POND_RIPPLES = "pond-ripples"


class PolarMode(str, Enum):
    RECTANGULAR_TO_POLAR = "rectangular-to-polar"
    POLAR_TO_RECTANGULAR = "polar-to-rectangular"


# ============================================================================
# Settings
# ============================================================================

class DistortSettings(SettingsModel):
    """Base of the distortion settings; ``distort_type`` selects the filter."""
    distort_type: ClassVar[DistortType]


class SpherizeSettings(DistortSettings):
    distort_type: ClassVar[DistortType] = DistortType.SPHERIZE

    amount: SignedPercent = 100.0
    mode: SpherizeMode = SpherizeMode.NORMAL
    center_x: UnitFraction = 0.5
    center_y: UnitFraction = 0.5


class PinchSettings(DistortSettings):
    distort_type: ClassVar[DistortType] = DistortType.PINCH

    amount: SignedPercent = 50.0
    center_x: UnitFraction = 0.5
    center_y: UnitFraction = 0.5
    radius: UnitFraction = 0.5  # of min(width, height)


class TwirlSettings(DistortSettings):
    distort_type: ClassVar[DistortType] = DistortType.TWIRL

    angle: float = 50.0  # degrees
    center_x: UnitFraction = 0.5
    center_y: UnitFraction = 0.5
    radius: UnitFraction = 0.5  # of min(width, height)


class WaveSettings(DistortSettings):
    distort_type: ClassVar[DistortType] = DistortType.WAVE

    generators: int = Field(default=5, ge=1)
    wavelength_min: float = Field(default=10.0, gt=0.0)
    wavelength_max: float = Field(default=120.0, gt=0.0)
    amplitude_min: float = 5.0
    amplitude_max: float = 35.0
    scale_x: float = 100.0
    scale_y: float = 100.0
    wave_type: WaveType = Field(default=WaveType.SINE, alias='type')
    wrap_around: bool = True


class RippleSettings(DistortSettings):
    distort_type: ClassVar[DistortType] = DistortType.RIPPLE

    amount: float = 100.0
    size: RippleSize = RippleSize.MEDIUM


class ZigZagSettings(DistortSettings):
    distort_type: ClassVar[DistortType] = DistortType.ZIGZAG

    amount: SignedPercent = 100.0
    ridges: int = Field(default=5, ge=0)
    style: ZigZagStyle = ZigZagStyle.POND_RIPPLES
    center_x: UnitFraction = 0.5
    center_y: UnitFraction = 0.5


class PolarCoordinatesSettings(DistortSettings):
    distort_type: ClassVar[DistortType] = DistortType.POLAR_COORDINATES

    mode: PolarMode = PolarMode.RECTANGULAR_TO_POLAR


# ============================================================================
# Sampling helpers
# ============================================================================

def _grid(height: int, width: int):
    ys, xs = np.mgrid[0:height, 0:width]
    return xs.astype(np.float64), ys.astype(np.float64)


def _remap(pixels: np.ndarray, sx: np.ndarray, sy: np.ndarray) -> np.ndarray:
    """Sample at (sx, sy); sources outside the buffer become transparent black."""
    h, w = pixels.shape[:2]
    inside = (sx >= 0) & (sx < w) & (sy >= 0) & (sy < h)
    sampled = bilinear_sample_array(pixels, np.where(inside, sx, 0.0), np.where(inside, sy, 0.0))
    return np.where(inside[:, :, None], to_u8(sampled), np.uint8(0))


def _center(buffer: PixelBuffer, settings) -> tuple:
    return buffer.width * settings.center_x, buffer.height * settings.center_y


# ============================================================================
# Spherize / Pinch / Twirl
# ============================================================================

def apply_spherize(buffer: PixelBuffer, settings: Optional[SpherizeSettings] = None) -> PixelBuffer:
    """Bulge (positive amount) or dent (negative) the image inside a circle.

    The circle has radius ``min(width, height) / 2`` around the center.
    """
    settings = settings or SpherizeSettings()
    cx, cy = _center(buffer, settings)
    radius = min(buffer.width, buffer.height) / 2
    amount = settings.amount / 100

    xs, ys = _grid(buffer.height, buffer.width)
    dx = (xs - cx) / radius
    dy = (ys - cy) / radius
    dist = np.sqrt(dx * dx + dy * dy)

    inside = dist < 1
    sphere = np.sqrt(np.where(inside, 1 - dist * dist, 0.0))
    factor = np.where(inside, (1 - sphere) * amount + (1 - amount), 1.0)

    if settings.mode in (SpherizeMode.NORMAL, SpherizeMode.HORIZONTAL):
        dx = dx * factor
    if settings.mode in (SpherizeMode.NORMAL, SpherizeMode.VERTICAL):
        dy = dy * factor

    return PixelBuffer(_remap(buffer.pixels, cx + dx * radius, cy + dy * radius))


def apply_pinch(buffer: PixelBuffer, settings: Optional[PinchSettings] = None) -> PixelBuffer:
    """Squeeze (positive amount) or push out (negative) the area inside ``radius``."""
    settings = settings or PinchSettings()
    radius = min(buffer.width, buffer.height) * settings.radius
    if radius <= 0:
        logger.debug("apply_pinch: radius 0, returning copy")
        return buffer.copy()

    cx, cy = _center(buffer, settings)
    amount = settings.amount / 100

    xs, ys = _grid(buffer.height, buffer.width)
    dx = xs - cx
    dy = ys - cy
    dist = np.sqrt(dx * dx + dy * dy)

    # The exact center maps onto itself
    inside = (dist < radius) & (dist > 0)
    base = np.sin(np.where(inside, dist / radius, 1.0) * math.pi / 2)
    factor = np.where(inside, np.power(base, -amount), 1.0)

    sx = np.where(dist < radius, cx + dx * factor, xs)
    sy = np.where(dist < radius, cy + dy * factor, ys)
    return PixelBuffer(_remap(buffer.pixels, sx, sy))


def apply_twirl(buffer: PixelBuffer, settings: Optional[TwirlSettings] = None) -> PixelBuffer:
    """Rotate the area inside ``radius``, most strongly at the center."""
    settings = settings or TwirlSettings()
    radius = min(buffer.width, buffer.height) * settings.radius
    if settings.angle == 0 or radius <= 0:
        logger.debug("apply_twirl: no rotation, returning copy")
        return buffer.copy()

    cx, cy = _center(buffer, settings)
    angle_rad = math.radians(settings.angle)

    xs, ys = _grid(buffer.height, buffer.width)
    dx = xs - cx
    dy = ys - cy
    dist = np.sqrt(dx * dx + dy * dy)
    inside = dist < radius

    twirl = np.arctan2(dy, dx) + angle_rad * (1 - dist / radius)
    sx = np.where(inside, cx + np.cos(twirl) * dist, xs)
    sy = np.where(inside, cy + np.sin(twirl) * dist, ys)
    return PixelBuffer(_remap(buffer.pixels, sx, sy))


# ============================================================================
# Wave / Ripple
# ============================================================================

def _sine(values: np.ndarray) -> np.ndarray:
    return np.sin(values)


def _triangle(values: np.ndarray) -> np.ndarray:
    cycles = values / (2 * math.pi)
    return 2 * np.abs(2 * (cycles - np.floor(cycles + 0.5))) - 1


def _square(values: np.ndarray) -> np.ndarray:
    return np.where(np.sin(values) >= 0, 1.0, -1.0)


_WAVE_FUNCTIONS: Dict[WaveType, Callable[[np.ndarray], np.ndarray]] = {
    WaveType.SINE: _sine,
    WaveType.TRIANGLE: _triangle,
    WaveType.SQUARE: _square,
}


def _wrap(values: np.ndarray, size: int) -> np.ndarray:
    wrapped = np.mod(values, size)
    # np.mod of tiny negatives can round up to exactly ``size``
    return np.where(wrapped >= size, wrapped - size, wrapped)


def apply_wave(buffer: PixelBuffer, settings: Optional[WaveSettings] = None,
               rng: Optional[np.random.Generator] = None) -> PixelBuffer:
    """Displace pixels by a sum of periodic generators.

    Wavelength and amplitude are spread linearly from min to max across the
    generators; each generator gets a random phase drawn from ``rng``.
    Horizontal offsets depend on the row, vertical offsets on the column.
    """
    settings = settings or WaveSettings()
    rng = resolve_rng(rng)
    wave = _WAVE_FUNCTIONS[settings.wave_type]
    h, w = buffer.height, buffer.width

    rows = np.arange(h, dtype=np.float64)
    cols = np.arange(w, dtype=np.float64)
    offset_x = np.zeros(h, dtype=np.float64)
    offset_y = np.zeros(w, dtype=np.float64)

    n = settings.generators
    phases = rng.random(n) * math.pi * 2
    for i in range(n):
        t = i / (n - 1) if n > 1 else 0.0
        wavelength = settings.wavelength_min + (settings.wavelength_max - settings.wavelength_min) * t
        amplitude = settings.amplitude_min + (settings.amplitude_max - settings.amplitude_min) * t
        offset_x += wave(rows / wavelength * math.pi * 2 + phases[i]) * amplitude
        offset_y += wave(cols / wavelength * math.pi * 2 + phases[i]) * amplitude

    offset_x *= settings.scale_x / 100
    offset_y *= settings.scale_y / 100

    xs, ys = _grid(h, w)
    sx = xs + offset_x[:, None]
    sy = ys + offset_y[None, :]
    if settings.wrap_around:
        sx = _wrap(sx, w)
        sy = _wrap(sy, h)
    return PixelBuffer(_remap(buffer.pixels, sx, sy))


def apply_ripple(buffer: PixelBuffer, settings: Optional[RippleSettings] = None) -> PixelBuffer:
    """Two perpendicular sine displacements; sources are clamped into the buffer."""
    settings = settings or RippleSettings()
    wavelength = RIPPLE_WAVELENGTHS[settings.size.value]
    amplitude = settings.amount / 100 * RIPPLE_MAX_AMPLITUDE
    h, w = buffer.height, buffer.width

    xs, ys = _grid(h, w)
    sx = np.clip(xs + np.sin(ys / wavelength * math.pi * 2) * amplitude, 0, w - 1)
    sy = np.clip(ys + np.sin(xs / wavelength * math.pi * 2) * amplitude, 0, h - 1)
    return PixelBuffer(to_u8(bilinear_sample_array(buffer.pixels, sx, sy)))


# ============================================================================
# ZigZag / Polar Coordinates
# ============================================================================

def _around_center(dist, angle, max_radius, ridges, amount):
    return np.sin(angle * ridges) * amount * (dist / max_radius)


def _out_from_center(dist, angle, max_radius, ridges, amount):
    return np.sin(dist / max_radius * ridges * math.pi) * amount


def _pond_ripples(dist, angle, max_radius, ridges, amount):
    return np.sin(dist / max_radius * ridges * math.pi * 2) * amount * (1 - dist / max_radius)


_ZIGZAG_OFFSETS = {
    ZigZagStyle.AROUND_CENTER: _around_center,
    ZigZagStyle.OUT_FROM_CENTER: _out_from_center,
    ZigZagStyle.POND_RIPPLES: _pond_ripples,
}


def apply_zigzag(buffer: PixelBuffer, settings: Optional[ZigZagSettings] = None) -> PixelBuffer:
    """Radial ridge displacement around the center."""
    settings = settings or ZigZagSettings()
    cx, cy = _center(buffer, settings)
    max_radius = math.sqrt(cx * cx + cy * cy)
    if max_radius == 0:
        logger.debug("apply_zigzag: center at origin, returning copy")
        return buffer.copy()

    amount = settings.amount / 100 * ZIGZAG_MAX_AMPLITUDE
    xs, ys = _grid(buffer.height, buffer.width)
    dx = xs - cx
    dy = ys - cy
    dist = np.sqrt(dx * dx + dy * dy)
    angle = np.arctan2(dy, dx)

    offset = _ZIGZAG_OFFSETS[settings.style](dist, angle, max_radius, settings.ridges, amount)
    sx = cx + dx + np.cos(angle) * offset
    sy = cy + dy + np.sin(angle) * offset
    return PixelBuffer(_remap(buffer.pixels, sx, sy))


def apply_polar_coordinates(buffer: PixelBuffer,
                            settings: Optional[PolarCoordinatesSettings] = None) -> PixelBuffer:
    """Remap between rectangular and polar layouts around the buffer center."""
    settings = settings or PolarCoordinatesSettings()
    h, w = buffer.height, buffer.width
    cx, cy = w / 2, h / 2
    max_radius = math.sqrt(cx * cx + cy * cy)
    xs, ys = _grid(h, w)

    if settings.mode is PolarMode.RECTANGULAR_TO_POLAR:
        angle = xs / w * math.pi * 2
        radius = ys / h * max_radius
        sx = cx + np.cos(angle) * radius
        sy = cy + np.sin(angle) * radius
    else:
        dx = xs - cx
        dy = ys - cy
        sx = (np.arctan2(dy, dx) + math.pi) / (math.pi * 2) * w
        sy = np.sqrt(dx * dx + dy * dy) / max_radius * h

    return PixelBuffer(_remap(buffer.pixels, sx, sy))


# ============================================================================
# Dispatch
# ============================================================================

DISTORTION_SETTINGS: Dict[DistortType, Type[DistortSettings]] = {
    DistortType.SPHERIZE: SpherizeSettings,
    DistortType.PINCH: PinchSettings,
    DistortType.TWIRL: TwirlSettings,
    DistortType.WAVE: WaveSettings,
    DistortType.RIPPLE: RippleSettings,
    DistortType.ZIGZAG: ZigZagSettings,
    DistortType.POLAR_COORDINATES: PolarCoordinatesSettings,
}

_DISTORTIONS: Dict[DistortType, Callable[..., PixelBuffer]] = {
    DistortType.SPHERIZE: apply_spherize,
    DistortType.PINCH: apply_pinch,
    DistortType.TWIRL: apply_twirl,
    DistortType.WAVE: apply_wave,
    DistortType.RIPPLE: apply_ripple,
    DistortType.ZIGZAG: apply_zigzag,
    DistortType.POLAR_COORDINATES: apply_polar_coordinates,
}

_missing = set(DistortType) - set(_DISTORTIONS)
if _missing or set(DistortType) - set(DISTORTION_SETTINGS):
    raise RuntimeError(f"Distortions without implementation: {sorted(m.value for m in _missing)}")


def apply_distortion(buffer: PixelBuffer, settings: DistortSettings,
                     rng: Optional[np.random.Generator] = None) -> PixelBuffer:
    """Run the filter matching the settings type."""
    if not isinstance(settings, DistortSettings):
        raise InvalidParameterError(f"Expected distortion settings, got {type(settings).__name__}")
    distort_type = settings.distort_type
    if distort_type is DistortType.WAVE:
        return apply_wave(buffer, settings, rng)
    return _DISTORTIONS[distort_type](buffer, settings)


def distortion_from_dict(data: Dict[str, Any]) -> DistortSettings:
    """Build settings from ``{'filter': <distort type>, ...}``."""
    try:
        distort_type = DistortType(data.get('filter'))
    except ValueError:
        raise InvalidParameterError(f"Unknown distortion: {data.get('filter')!r}") from None
    return DISTORTION_SETTINGS[distort_type].from_dict(data)


__all__ = [
    "DistortType",
    "SpherizeMode",
    "WaveType",
    "RippleSize",
    "ZigZagStyle",
    "PolarMode",
    "DistortSettings",
    "SpherizeSettings",
    "PinchSettings",
    "TwirlSettings",
    "WaveSettings",
    "RippleSettings",
    "ZigZagSettings",
    "PolarCoordinatesSettings",
    "DISTORTION_SETTINGS",
    "apply_spherize",
    "apply_pinch",
    "apply_twirl",
    "apply_wave",
    "apply_ripple",
    "apply_zigzag",
    "apply_polar_coordinates",
    "apply_distortion",
    "distortion_from_dict",
]
