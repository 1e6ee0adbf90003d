"""
EffectStag Layer Styles

Parametric styles painted into a layer's pixels.

Example:
    >>> from effectstag.layer_effects import LayerStyles, ColorOverlay, BevelEmboss, apply_layer_styles
    >>> styles = LayerStyles(color_overlay=ColorOverlay(color='#3366ff'), bevel_emboss=BevelEmboss(size=6))
    >>> apply_layer_styles(surface, styles, bounds=Rect(10, 10, 64, 64))

Supported Styles:
    - BevelEmboss: Raised/sunken appearance from highlights and shadows
    - InnerGlow: Glow radiating inward from the edges or the layer border
    - ColorOverlay: Solid color fill over visible pixels
    - GradientOverlay: Gradient fill over visible pixels
    - PatternOverlay: Tiled pattern fill over visible pixels
    - Satin: Silky interior shading

Styles are applied in a fixed order: pattern overlay, gradient overlay,
color overlay, satin, inner glow, bevel/emboss.
"""

import logging
from typing import List, Optional

import numpy as np

from ..pixel_buffer import PixelBuffer, Rect, resolve_rng
from ..settings import SettingsModel
from .base import LayerStyle, composite_color
from .bevel_emboss import BevelDirection, BevelEmboss, BevelStyle, BevelTechnique
from .color_overlay import ColorOverlay
from .gradient_overlay import (
    GradientDefinition,
    GradientOverlay,
    GradientStop,
    GradientStyle,
    GradientType,
    interpolate_gradient,
)
from .inner_glow import GlowSource, GlowTechnique, InnerGlow
from .pattern_overlay import PatternDefinition, PatternOverlay
from .satin import Satin

logger = logging.getLogger(__name__)


class LayerStyles(SettingsModel):
    """The styles attached to one layer; unset styles are skipped."""

    bevel_emboss: Optional[BevelEmboss] = None
    inner_glow: Optional[InnerGlow] = None
    color_overlay: Optional[ColorOverlay] = None
    gradient_overlay: Optional[GradientOverlay] = None
    pattern_overlay: Optional[PatternOverlay] = None
    satin: Optional[Satin] = None

    def ordered(self) -> List[LayerStyle]:
        """Present styles in application order."""
        candidates = [
            self.pattern_overlay,
            self.gradient_overlay,
            self.color_overlay,
            self.satin,
            self.inner_glow,
            self.bevel_emboss,
        ]
        return [style for style in candidates if style is not None]


def apply_layer_styles(surface: PixelBuffer, styles: LayerStyles, bounds: Optional[Rect] = None,
                       rng: Optional[np.random.Generator] = None) -> None:
    """
    Apply every configured style to ``bounds`` of ``surface`` in place.

    Args:
        surface: Target surface, mutated
        styles: Styles of the layer
        bounds: Layer bounds inside the surface (whole surface for None)
        rng: Random source shared by all styles
    """
    if bounds is not None and bounds.is_empty:
        logger.debug("apply_layer_styles: empty bounds, nothing to do")
        return

    rng = resolve_rng(rng)
    for style in styles.ordered():
        style.render(surface, bounds, rng)


__all__ = [
    # Base classes
    "LayerStyle",
    "LayerStyles",
    "apply_layer_styles",
    "composite_color",
    # Styles
    "BevelEmboss",
    "InnerGlow",
    "ColorOverlay",
    "GradientOverlay",
    "PatternOverlay",
    "Satin",
    # Options and definitions
    "BevelStyle",
    "BevelTechnique",
    "BevelDirection",
    "GlowTechnique",
    "GlowSource",
    "GradientStyle",
    "GradientType",
    "GradientStop",
    "GradientDefinition",
    "interpolate_gradient",
    "PatternDefinition",
]
