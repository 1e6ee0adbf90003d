"""
Satin layer style.

Creates silky interior shading by comparing the layer's alpha at two points
offset in opposite directions along ``angle``. The alpha difference is
attenuated away from the transparent edge, shaped by the contour and
optionally inverted before the satin color is composited.
"""

import logging
import math
from typing import ClassVar, Tuple

import numpy as np
from pydantic import Field

from ..blend_modes import BlendMode
from ..color_math import hex_to_rgb
from ..contour import ContourCurve, evaluate_contour_array
from ..edge_distance import edge_distance_map
from ..pixel_buffer import round_half_up
from ..settings import HexColor, Percent
from .base import LayerStyle, composite_color

logger = logging.getLogger(__name__)


def shifted_alpha(alpha: np.ndarray, offset_x: float, offset_y: float) -> np.ndarray:
    """Alpha sampled at the rounded offset of every pixel, 0 outside the layer."""
    h, w = alpha.shape
    ys, xs = np.mgrid[0:h, 0:w]
    sx = round_half_up(xs + offset_x).astype(np.int64)
    sy = round_half_up(ys + offset_y).astype(np.int64)
    inside = (sx >= 0) & (sx < w) & (sy >= 0) & (sy < h)
    sampled = alpha[np.clip(sy, 0, h - 1), np.clip(sx, 0, w - 1)].astype(np.float64)
    return np.where(inside, sampled, 0.0)


class Satin(LayerStyle):
    """
    Satin style.

    Example:
        >>> from effectstag.layer_effects import Satin
        >>> style = Satin(angle=45, distance=8, size=10, invert=True)
        >>> result = style.apply(buffer)
    """

    style_type: ClassVar[str] = "satin"
    display_name: ClassVar[str] = "Satin"

    blend_mode: BlendMode = BlendMode.MULTIPLY
    color: HexColor = '#000000'
    opacity: Percent = 50.0
    angle: float = 19.0
    distance: float = Field(default=11.0, ge=0.0)
    size: float = Field(default=14.0, ge=0.0)
    contour: ContourCurve = Field(default_factory=ContourCurve)
    anti_alias: bool = True
    invert: bool = False

    def offset(self) -> Tuple[float, float]:
        angle = math.radians(self.angle)
        return math.cos(angle) * self.distance, math.sin(angle) * self.distance

    def _render_pixels(self, pixels: np.ndarray, rng: np.random.Generator) -> None:
        if self.size <= 0:
            logger.debug("satin: size 0, skipped")
            return

        alpha = pixels[:, :, 3]
        offset_x, offset_y = self.offset()
        intensity = np.abs(shifted_alpha(alpha, offset_x, offset_y) -
                           shifted_alpha(alpha, -offset_x, -offset_y)) / 255

        dist = edge_distance_map(alpha, self.size, from_transparent_edge=True)
        intensity = intensity * (1 - np.minimum(dist, self.size) / self.size)
        intensity = evaluate_contour_array(self.contour, intensity * 255) / 255
        if self.invert:
            intensity = 1 - intensity

        composite_color(pixels, hex_to_rgb(self.color), intensity * (self.opacity / 100),
                        self.blend_mode, alpha > 0, rng)


__all__ = ["Satin", "shifted_alpha"]
