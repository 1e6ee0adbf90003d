"""
Color Overlay layer style.

Paints a solid color over the visible pixels of the layer.
"""

from typing import ClassVar

import numpy as np

from ..blend_modes import BlendMode
from ..color_math import hex_to_rgb
from ..settings import HexColor, Percent
from .base import LayerStyle, composite_color


class ColorOverlay(LayerStyle):
    """
    Color overlay style.

    Example:
        >>> from effectstag.layer_effects import ColorOverlay
        >>> style = ColorOverlay(color='#00ff00', opacity=50)
        >>> result = style.apply(buffer)
    """

    style_type: ClassVar[str] = "colorOverlay"
    display_name: ClassVar[str] = "Color Overlay"

    blend_mode: BlendMode = BlendMode.NORMAL
    color: HexColor = '#ff0000'
    opacity: Percent = 100.0

    def _render_pixels(self, pixels: np.ndarray, rng: np.random.Generator) -> None:
        opaque = pixels[:, :, 3] > 0
        opacity = np.full(opaque.shape, self.opacity / 100)
        composite_color(pixels, hex_to_rgb(self.color), opacity, self.blend_mode, opaque, rng)


__all__ = ["ColorOverlay"]
