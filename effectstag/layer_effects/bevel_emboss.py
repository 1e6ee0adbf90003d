"""
Bevel and Emboss layer style.

Creates a raised or sunken appearance using highlights and shadows by:
1. Measuring each pixel's distance to the transparent edge
2. Computing a pseudo-normal from the horizontal/vertical alpha gradient
3. Lighting it from ``angle``/``altitude``
4. Blending the highlight color where lit, the shadow color where shaded

Only pixels closer to the edge than ``size`` are affected.
"""

import logging
import math
from enum import Enum
from typing import ClassVar

import numpy as np
from pydantic import Field

from ..blend_modes import BlendMode
from ..color_math import hex_to_rgb
from ..contour import ContourCurve, evaluate_contour_array
from ..edge_distance import edge_distance_map
from ..settings import HexColor, Percent
from .base import LayerStyle, composite_color

logger = logging.getLogger(__name__)


class BevelStyle(str, Enum):
    """Bevel and emboss style options."""
    OUTER_BEVEL = "outer-bevel"
    INNER_BEVEL = "inner-bevel"
    EMBOSS = "emboss"
    PILLOW_EMBOSS = "pillow-emboss"
    STROKE_EMBOSS = "stroke-emboss"


class BevelTechnique(str, Enum):
    SMOOTH = "smooth"
    CHISEL_HARD = "chisel-hard"
    CHISEL_SOFT = "chisel-soft"


class BevelDirection(str, Enum):
    UP = "up"
    DOWN = "down"


def _smooth(factor: np.ndarray) -> np.ndarray:
    return np.sin(factor * math.pi / 2)


def _chisel_hard(factor: np.ndarray) -> np.ndarray:
    return np.where(factor > 0.5, 1.0, 0.0)


def _chisel_soft(factor: np.ndarray) -> np.ndarray:
    return factor


_EDGE_PROFILES = {
    BevelTechnique.SMOOTH: _smooth,
    BevelTechnique.CHISEL_HARD: _chisel_hard,
    BevelTechnique.CHISEL_SOFT: _chisel_soft,
}


def alpha_gradient(alpha: np.ndarray):
    """
    Horizontal and vertical alpha differences (left - right, top - bottom).

    Pixels on the outermost row/column have no opposite neighbor and get 0.
    """
    a = alpha.astype(np.float64)
    nx = np.zeros_like(a)
    ny = np.zeros_like(a)
    nx[:, 1:-1] = a[:, :-2] - a[:, 2:]
    ny[1:-1, :] = a[:-2, :] - a[2:, :]
    return nx, ny


class BevelEmboss(LayerStyle):
    """
    Bevel and emboss style.

    ``style`` is kept for round-tripping editor data; every style renders
    as an interior bevel.

    Example:
        >>> from effectstag.layer_effects import BevelEmboss
        >>> style = BevelEmboss(size=8, angle=135, technique='chisel-hard')
        >>> result = style.apply(buffer)
    """

    style_type: ClassVar[str] = "bevelEmboss"
    display_name: ClassVar[str] = "Bevel & Emboss"

    style: BevelStyle = BevelStyle.INNER_BEVEL
    technique: BevelTechnique = BevelTechnique.SMOOTH
    depth: float = Field(default=100.0, ge=0.0)
    direction: BevelDirection = BevelDirection.UP
    size: float = Field(default=5.0, ge=0.0)
    soften: float = Field(default=0.0, ge=0.0)
    angle: float = 120.0
    altitude: float = 30.0
    highlight_mode: BlendMode = BlendMode.SCREEN
    highlight_color: HexColor = '#ffffff'
    highlight_opacity: Percent = 75.0
    shadow_mode: BlendMode = BlendMode.MULTIPLY
    shadow_color: HexColor = '#000000'
    shadow_opacity: Percent = 75.0
    gloss_contour: ContourCurve = Field(default_factory=ContourCurve)
    contour: ContourCurve = Field(default_factory=ContourCurve)
    anti_alias: bool = True

    def light_vector(self):
        """(x, y) projection of the light direction."""
        angle = math.radians(self.angle)
        altitude = math.radians(self.altitude)
        return math.cos(angle) * math.cos(altitude), math.sin(angle) * math.cos(altitude)

    def _render_pixels(self, pixels: np.ndarray, rng: np.random.Generator) -> None:
        if self.size <= 0:
            logger.debug("bevelEmboss: size 0, skipped")
            return

        alpha = pixels[:, :, 3]
        dist = edge_distance_map(alpha, self.size, from_transparent_edge=True)
        active = (alpha > 0) & (dist < self.size)
        if not active.any():
            return

        edge_factor = _EDGE_PROFILES[self.technique](1 - dist / self.size)

        nx, ny = alpha_gradient(alpha)
        length = np.sqrt(nx * nx + ny * ny + 1)
        light_x, light_y = self.light_vector()
        lighting = (nx / length) * light_x + (ny / length) * light_y
        if self.direction is BevelDirection.DOWN:
            lighting = -lighting
        lighting = lighting * edge_factor * (self.depth / 100)

        shaped = evaluate_contour_array(self.contour, np.abs(lighting) * 255) / 255
        lighting = np.where(lighting >= 0, shaped, -shaped)

        composite_color(pixels, hex_to_rgb(self.highlight_color),
                        lighting * (self.highlight_opacity / 100),
                        self.highlight_mode, active & (lighting > 0), rng)
        composite_color(pixels, hex_to_rgb(self.shadow_color),
                        -lighting * (self.shadow_opacity / 100),
                        self.shadow_mode, active & (lighting < 0), rng)


__all__ = ["BevelEmboss", "BevelStyle", "BevelTechnique", "BevelDirection", "alpha_gradient"]
