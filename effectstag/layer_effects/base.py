"""
Base class for all layer styles.

Layer styles are parametric effects painted into a layer's pixels. Each style:
- Reads the pixels inside the layer bounds of a surface
- Computes a per-pixel effect intensity (edge distance, gradient position, ...)
- Composites a style color over the pixel through the blend compositor

Transparent pixels (alpha 0) are never modified.

Serialization:
- Use `to_dict()`/`from_dict()` for the editor's camelCase JSON
- `LayerStyle.from_dict()` picks the concrete class from the ``type`` key
"""

import logging
from abc import abstractmethod
from typing import Any, ClassVar, Dict, Optional, Sequence, Type, Union

import numpy as np
from pydantic import Field

from ..blend_modes import BlendMode, blend_arrays
from ..errors import InvalidParameterError
from ..pixel_buffer import PixelBuffer, Rect, resolve_rng, round_half_up
from ..settings import SettingsModel

logger = logging.getLogger(__name__)


class LayerStyle(SettingsModel):
    """
    Base class for all layer styles.

    Subclasses must implement:
    - style_type: Class variable with the style key used in the editor JSON
    - _render_pixels(): Paints the style into an (H, W, 4) working array
    """

    # Class variables (not serialized)
    style_type: ClassVar[str] = "base"
    display_name: ClassVar[str] = "Layer Style"

    # Registry of style classes by style_type
    _registry: ClassVar[Dict[str, Type['LayerStyle']]] = {}

    enabled: bool = Field(default=True)

    def __init_subclass__(cls, **kwargs):
        """Register style subclass in registry."""
        super().__init_subclass__(**kwargs)
        if cls.style_type != "base":
            LayerStyle._registry[cls.style_type] = cls

    @abstractmethod
    def _render_pixels(self, pixels: np.ndarray, rng: np.random.Generator) -> None:
        """
        Paint the style into ``pixels`` in place.

        Args:
            pixels: Working copy of the layer region, (H, W, 4) uint8
            rng: Random source for noise parameters
        """

    # =========================================================================
    # Rendering
    # =========================================================================

    def render(self, surface: PixelBuffer, bounds: Optional[Rect] = None,
               rng: Optional[np.random.Generator] = None) -> None:
        """
        Apply the style to ``bounds`` of ``surface`` in place.

        Args:
            surface: Target surface, mutated
            bounds: Layer bounds inside the surface (whole surface for None)
            rng: Random source (a fresh generator when None)
        """
        if not self.enabled:
            logger.debug(f"{self.style_type}: disabled, skipped")
            return
        if bounds is not None and bounds.is_empty:
            logger.debug(f"{self.style_type}: empty bounds, skipped")
            return

        region = surface.region(bounds)
        work = region.copy()
        self._render_pixels(work, resolve_rng(rng))
        region[...] = work

    def apply(self, buffer: PixelBuffer, rng: Optional[np.random.Generator] = None) -> PixelBuffer:
        """Return a styled copy of ``buffer``."""
        result = buffer.copy()
        self.render(result, rng=rng)
        return result

    # =========================================================================
    # Serialization (editor JSON)
    # =========================================================================

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to camelCase keys plus the ``type`` discriminator."""
        data = super().to_dict()
        data['type'] = self.style_type
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LayerStyle':
        """
        Reconstruct a style from a dictionary.

        Called on ``LayerStyle`` itself the class is looked up from
        ``data['type']``; called on a subclass the data is validated
        against that subclass.
        """
        if cls is not LayerStyle:
            return super().from_dict(data)

        style_type = data.get('type')
        style_class = cls._registry.get(style_type)
        if style_class is None:
            raise InvalidParameterError(f"Unknown layer style type: {style_type!r}")
        return style_class.from_dict(data)

    @classmethod
    def registered_types(cls) -> Dict[str, Type['LayerStyle']]:
        return dict(cls._registry)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(enabled={self.enabled})"


# =============================================================================
# Compositing helper shared by the styles
# =============================================================================

def composite_color(pixels: np.ndarray, color: Union[Sequence[int], np.ndarray],
                    opacity: np.ndarray, mode: Union[BlendMode, str], mask: np.ndarray,
                    rng: Optional[np.random.Generator] = None) -> None:
    """
    Blend a style color into ``pixels`` where ``mask`` is set.

    The style color becomes a layer whose alpha is ``round(255 * opacity)``;
    pixels outside the mask, and transparent base pixels, are left as they are.

    Args:
        pixels: (H, W, 4) uint8 array, mutated
        color: RGB triplet or (H, W, 3) per-pixel colors
        opacity: (H, W) per-pixel opacity 0.0-1.0
        mode: Blend mode
        mask: (H, W) bool, pixels to paint
        rng: Random source for dissolve
    """
    mask = mask & (pixels[:, :, 3] > 0)
    if not mask.any():
        return

    layer = np.zeros(pixels.shape, dtype=np.float64)
    layer[:, :, :3] = color
    layer[:, :, 3] = np.where(mask, np.clip(round_half_up(255 * opacity), 0, 255), 0)
    pixels[...] = blend_arrays(pixels, layer, mode, 1.0, rng)


__all__ = ["LayerStyle", "composite_color"]
