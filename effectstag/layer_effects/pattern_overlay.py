"""
Pattern Overlay layer style.

Tiles a pattern over the visible pixels of the layer. The tile
is sampled with wraparound at ``floor((x / scale) % tile_width)``, where
``scale`` combines the style's percentage scale and the pattern's own factor.

Serialization: the tile pixels are stored as base64 RGBA bytes next to the
tile dimensions.
"""

import base64
import logging
from typing import Any, ClassVar, Dict, Optional

import numpy as np
from pydantic import Field, field_serializer, field_validator

from ..blend_modes import BlendMode
from ..pixel_buffer import PixelBuffer
from ..settings import Percent, SettingsModel
from .base import LayerStyle, composite_color

logger = logging.getLogger(__name__)


class PatternDefinition(SettingsModel):
    """Named tile buffer plus its scale factor."""

    id: str = ''
    name: str = ''
    data: PixelBuffer
    scale: float = Field(default=1.0, gt=0.0)

    @field_validator('data', mode='before')
    @classmethod
    def _coerce_data(cls, value: Any) -> Any:
        """Accept a PixelBuffer, an (H, W, 4) array or the serialized dict."""
        if isinstance(value, np.ndarray):
            return PixelBuffer(value)
        if isinstance(value, dict):
            raw = base64.b64decode(value['data'])
            return PixelBuffer.from_bytes(int(value['width']), int(value['height']), raw)
        return value

    @field_serializer('data')
    def _serialize_data(self, data: PixelBuffer) -> Dict[str, Any]:
        return {
            'width': data.width,
            'height': data.height,
            'data': base64.b64encode(data.tobytes()).decode('ascii'),
        }


def tile_indices(length: int, tile_length: int, scale: float) -> np.ndarray:
    """Tile coordinate for every position along one axis."""
    idx = np.floor(np.mod(np.arange(length) / scale, tile_length)).astype(np.int64)
    return np.minimum(idx, tile_length - 1)


class PatternOverlay(LayerStyle):
    """
    Pattern overlay style. Without a pattern the style does nothing.

    Example:
        >>> from effectstag.layer_effects import PatternOverlay, PatternDefinition
        >>> tile = PatternDefinition(id='checker', name='Checker', data=checker_buffer)
        >>> style = PatternOverlay(pattern=tile, scale=200)
        >>> result = style.apply(buffer)
    """

    style_type: ClassVar[str] = "patternOverlay"
    display_name: ClassVar[str] = "Pattern Overlay"

    blend_mode: BlendMode = BlendMode.NORMAL
    opacity: Percent = 100.0
    pattern: Optional[PatternDefinition] = None
    scale: float = Field(default=100.0, gt=0.0)
    link_with_layer: bool = True

    @property
    def effective_scale(self) -> float:
        return (self.scale / 100) * (self.pattern.scale if self.pattern is not None else 1.0)

    def _render_pixels(self, pixels: np.ndarray, rng: np.random.Generator) -> None:
        if self.pattern is None:
            logger.debug("patternOverlay: no pattern, skipped")
            return

        tile = self.pattern.data.pixels
        h, w = pixels.shape[:2]
        scale = self.effective_scale
        py = tile_indices(h, tile.shape[0], scale)
        px = tile_indices(w, tile.shape[1], scale)
        tiled = tile[py[:, None], px[None, :]].astype(np.float64)

        opacity = (self.opacity / 100) * (tiled[:, :, 3] / 255)
        composite_color(pixels, tiled[:, :, :3], opacity, self.blend_mode, pixels[:, :, 3] > 0, rng)


__all__ = ["PatternOverlay", "PatternDefinition", "tile_indices"]
