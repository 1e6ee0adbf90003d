"""Edge distance estimation.

Measures how far a pixel is from the alpha boundary of a shape, searching a
bounded square window. Bevel/emboss, inner glow and satin derive their
falloff from this distance.

The search is O(radius^2) per pixel; effect ``size`` parameters map directly
to the radius.
"""
import math

import numpy as np

from .errors import InvalidParameterError
from .pixel_buffer import PixelBuffer


def _window(max_radius: float) -> int:
    if max_radius < 0:
        raise InvalidParameterError(f"max_radius must be >= 0, got {max_radius}")
    return int(math.floor(max_radius))


def _masks(alpha: np.ndarray, from_transparent_edge: bool):
    """Return (terminal, target) masks for the search direction."""
    if from_transparent_edge:
        return alpha == 0, alpha == 0
    return alpha == 255, alpha > 0


def edge_distance(buffer: PixelBuffer, x: int, y: int, max_radius: float,
                  from_transparent_edge: bool = True) -> float:
    """
    Distance from (x, y) to the nearest pixel across the alpha boundary.

    Args:
        buffer: Source pixels
        x, y: Pixel coordinates (must be inside the buffer)
        max_radius: Search radius; also the value returned when nothing is found
        from_transparent_edge: True searches for transparent neighbors
            (alpha == 0), False searches for covered neighbors (alpha > 0)

    Returns:
        Minimum Euclidean distance, capped at ``max_radius``. Pixels that are
        themselves transparent (or fully opaque when searching for coverage)
        return ``max_radius``.
    """
    if not (0 <= x < buffer.width and 0 <= y < buffer.height):
        raise InvalidParameterError(
            f"Pixel ({x}, {y}) outside of {buffer.width}x{buffer.height} buffer"
        )
    r = _window(max_radius)
    alpha = buffer.alpha
    terminal, target = _masks(alpha, from_transparent_edge)
    if terminal[y, x]:
        return max_radius

    y0, y1 = max(0, y - r), min(buffer.height, y + r + 1)
    x0, x1 = max(0, x - r), min(buffer.width, x + r + 1)
    hits = np.argwhere(target[y0:y1, x0:x1])
    if hits.size == 0:
        return max_radius

    dy = hits[:, 0] + y0 - y
    dx = hits[:, 1] + x0 - x
    return float(min(max_radius, np.sqrt(dx * dx + dy * dy).min()))


def edge_distance_map(alpha: np.ndarray, max_radius: float,
                      from_transparent_edge: bool = True) -> np.ndarray:
    """``edge_distance`` for every pixel of an (H, W) alpha plane.

    Returns:
        float64 (H, W) array
    """
    r = _window(max_radius)
    h, w = alpha.shape
    terminal, target = _masks(alpha, from_transparent_edge)
    result = np.full((h, w), float(max_radius), dtype=np.float64)

    # Offsets reaching past the plane can never hit a pixel
    ry, rx = min(r, max(h - 1, 0)), min(r, max(w - 1, 0))
    padded = np.pad(target, ((ry, ry), (rx, rx)), mode='constant', constant_values=False)
    for dy in range(-ry, ry + 1):
        for dx in range(-rx, rx + 1):
            dist = math.sqrt(dx * dx + dy * dy)
            if dist >= max_radius:
                continue
            hit = padded[ry + dy:ry + dy + h, rx + dx:rx + dx + w]
            np.minimum(result, np.where(hit, dist, result), out=result)

    result[terminal] = max_radius
    return result


__all__ = ["edge_distance", "edge_distance_map"]
