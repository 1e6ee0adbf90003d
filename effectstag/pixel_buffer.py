"""
Pixel buffer used throughout the effects engine.

A PixelBuffer is a rectangular RGBA8 image with straight (non-premultiplied)
alpha, stored row-major as a numpy array of shape (height, width, 4).

Example:
    >>> from effectstag.pixel_buffer import PixelBuffer
    >>> buf = PixelBuffer.from_bytes(2, 1, bytes([255, 0, 0, 255, 0, 0, 255, 255]))
    >>> buf.get_pixel(1, 0)
    (0, 0, 255, 255)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np

from .constants import CHANNELS
from .errors import InvalidDimensionsError, InvalidParameterError

RGBA = Tuple[int, int, int, int]


@dataclass(frozen=True)
class Rect:
    """Sub-rectangle of a surface, e.g. a layer's bounds."""
    x: int = 0
    y: int = 0
    width: int = 0
    height: int = 0

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0


class PixelBuffer:
    """
    RGBA8 pixel buffer.

    The buffer owns (or views) an ``(H, W, 4)`` uint8 array. Operations in
    the engine never keep references to a buffer after they return.
    """

    __slots__ = ("_pixels",)

    def __init__(self, pixels: np.ndarray):
        validate_rgba8(pixels)
        self._pixels = pixels

    # =========================================================================
    # Construction
    # =========================================================================

    @classmethod
    def from_bytes(cls, width: int, height: int, data: bytes | bytearray | Sequence[int]) -> "PixelBuffer":
        """Create a buffer from row-major RGBA bytes (copied)."""
        if width <= 0 or height <= 0:
            raise InvalidDimensionsError(f"Dimensions must be positive, got {width}x{height}")
        expected = width * height * CHANNELS
        if len(data) != expected:
            raise InvalidDimensionsError(
                f"Expected {expected} bytes for {width}x{height} RGBA, got {len(data)}"
            )
        arr = np.frombuffer(bytes(data), dtype=np.uint8).copy()
        return cls(arr.reshape(height, width, CHANNELS))

    @classmethod
    def blank(cls, width: int, height: int) -> "PixelBuffer":
        """Create a fully transparent black buffer."""
        if width <= 0 or height <= 0:
            raise InvalidDimensionsError(f"Dimensions must be positive, got {width}x{height}")
        return cls(np.zeros((height, width, CHANNELS), dtype=np.uint8))

    @classmethod
    def filled(cls, width: int, height: int, rgba: Sequence[int]) -> "PixelBuffer":
        """Create a buffer with every pixel set to ``rgba``."""
        buf = cls.blank(width, height)
        buf.pixels[:, :] = np.asarray(rgba, dtype=np.uint8)
        return buf

    # =========================================================================
    # Accessors
    # =========================================================================

    @property
    def pixels(self) -> np.ndarray:
        """The underlying (H, W, 4) uint8 array."""
        return self._pixels

    @property
    def width(self) -> int:
        return self._pixels.shape[1]

    @property
    def height(self) -> int:
        return self._pixels.shape[0]

    @property
    def alpha(self) -> np.ndarray:
        return self._pixels[:, :, 3]

    def tobytes(self) -> bytes:
        return np.ascontiguousarray(self._pixels).tobytes()

    def copy(self) -> "PixelBuffer":
        return PixelBuffer(self._pixels.copy())

    def get_pixel(self, x: int, y: int) -> RGBA:
        self._check_coords(x, y)
        r, g, b, a = self._pixels[y, x]
        return int(r), int(g), int(b), int(a)

    def set_pixel(self, x: int, y: int, rgba: Sequence[int]) -> None:
        self._check_coords(x, y)
        self._pixels[y, x] = np.asarray(rgba, dtype=np.uint8)

    def region(self, rect: Optional[Rect]) -> np.ndarray:
        """Return a writable view of ``rect`` (the whole buffer for None)."""
        if rect is None:
            return self._pixels
        if rect.x < 0 or rect.y < 0 or rect.x + rect.width > self.width or rect.y + rect.height > self.height:
            raise InvalidDimensionsError(
                f"Rect {rect} does not fit inside {self.width}x{self.height} surface"
            )
        return self._pixels[rect.y:rect.y + rect.height, rect.x:rect.x + rect.width]

    def same_size(self, other: "PixelBuffer") -> bool:
        return self.width == other.width and self.height == other.height

    def _check_coords(self, x: int, y: int) -> None:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise InvalidParameterError(
                f"Pixel ({x}, {y}) outside of {self.width}x{self.height} buffer"
            )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return self._pixels.shape == other._pixels.shape and np.array_equal(self._pixels, other._pixels)

    def __repr__(self) -> str:
        return f"PixelBuffer(width={self.width}, height={self.height})"


# =============================================================================
# Helpers shared by the kernels
# =============================================================================

def validate_rgba8(pixels: np.ndarray) -> None:
    """Validate an (H, W, 4) uint8 array."""
    if not isinstance(pixels, np.ndarray):
        raise InvalidDimensionsError(f"Expected numpy array, got {type(pixels).__name__}")
    if pixels.ndim != 3 or pixels.shape[2] != CHANNELS:
        raise InvalidDimensionsError(f"Expected RGBA image (H, W, 4), got shape {pixels.shape}")
    if pixels.shape[0] == 0 or pixels.shape[1] == 0:
        raise InvalidDimensionsError(f"Dimensions must be positive, got shape {pixels.shape}")
    if pixels.dtype != np.uint8:
        raise InvalidDimensionsError(f"Expected uint8 dtype, got {pixels.dtype}")


def to_u8(values: np.ndarray) -> np.ndarray:
    """Store float values into 8-bit storage: round half to even, then clamp."""
    return np.clip(np.rint(values), 0, 255).astype(np.uint8)


def round_half_up(values):
    """Round like JavaScript's ``Math.round`` (ties towards +infinity)."""
    return np.floor(np.asarray(values, dtype=np.float64) + 0.5)


def resolve_rng(rng: Optional[np.random.Generator]) -> np.random.Generator:
    """Return ``rng`` or a freshly seeded generator."""
    return rng if rng is not None else np.random.default_rng()


__all__ = [
    "PixelBuffer",
    "Rect",
    "RGBA",
    "validate_rgba8",
    "to_u8",
    "round_half_up",
    "resolve_rng",
]
