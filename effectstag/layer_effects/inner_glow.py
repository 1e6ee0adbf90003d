"""
Inner Glow layer style.

Creates a glow radiating inward from the shape edges (or from the layer
border) by:
1. Measuring the distance to the glow source
2. Converting it to an intensity falling off over the choked size
3. Shaping it with the technique ease and the contour
4. Optionally jittering it with noise
5. Compositing the glow color
"""

import logging
import math
from enum import Enum
from typing import ClassVar, Optional

import numpy as np
from pydantic import Field

from ..blend_modes import BlendMode
from ..color_math import hex_to_rgb
from ..contour import ContourCurve, evaluate_contour_array
from ..edge_distance import edge_distance_map
from ..settings import HexColor, Percent
from .base import LayerStyle, composite_color
from .gradient_overlay import GradientDefinition

logger = logging.getLogger(__name__)


class GlowTechnique(str, Enum):
    SOFTER = "softer"
    PRECISE = "precise"


class GlowSource(str, Enum):
    EDGE = "edge"
    CENTER = "center"


def border_distance(height: int, width: int, cap: float) -> np.ndarray:
    """Distance of every pixel to the nearest layer border, capped at ``cap``."""
    ys, xs = np.mgrid[0:height, 0:width]
    dist = np.minimum(np.minimum(xs, ys), np.minimum(width - xs - 1, height - ys - 1))
    return np.minimum(dist.astype(np.float64), cap)


class InnerGlow(LayerStyle):
    """
    Inner glow style.

    Example:
        >>> from effectstag.layer_effects import InnerGlow
        >>> style = InnerGlow(size=10, color='#ffff00', source='center')
        >>> result = style.apply(buffer)
    """

    style_type: ClassVar[str] = "innerGlow"
    display_name: ClassVar[str] = "Inner Glow"

    blend_mode: BlendMode = BlendMode.SCREEN
    opacity: Percent = 75.0
    noise: Percent = 0.0
    color: HexColor = '#ffffbe'
    # Stored for the editor; the glow is always a flat color
    gradient: Optional[GradientDefinition] = None
    technique: GlowTechnique = GlowTechnique.SOFTER
    source: GlowSource = GlowSource.EDGE
    choke: Percent = 0.0
    size: float = Field(default=5.0, ge=0.0)
    contour: ContourCurve = Field(default_factory=ContourCurve)
    anti_alias: bool = False
    range: Percent = 50.0
    jitter: Percent = 0.0

    @property
    def effective_size(self) -> float:
        """Glow size after choke."""
        return self.size * (1 - self.choke / 100)

    def _render_pixels(self, pixels: np.ndarray, rng: np.random.Generator) -> None:
        effective = self.effective_size
        if effective <= 0:
            logger.debug("innerGlow: effective size 0, skipped")
            return

        alpha = pixels[:, :, 3]
        if self.source is GlowSource.EDGE:
            dist = edge_distance_map(alpha, self.size, from_transparent_edge=True)
        else:
            dist = border_distance(alpha.shape[0], alpha.shape[1], self.size)

        active = (alpha > 0) & (dist < effective)
        if not active.any():
            return

        intensity = 1 - dist / effective
        if self.technique is GlowTechnique.SOFTER:
            intensity = np.sin(intensity * math.pi / 2)
        intensity = evaluate_contour_array(self.contour, intensity * 255) / 255

        if self.noise > 0:
            intensity = intensity * (1 - rng.random(intensity.shape) * self.noise / 100)

        composite_color(pixels, hex_to_rgb(self.color), intensity * (self.opacity / 100),
                        self.blend_mode, active, rng)


__all__ = ["InnerGlow", "GlowTechnique", "GlowSource", "border_distance"]
