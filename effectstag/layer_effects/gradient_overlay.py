"""
Gradient Overlay layer style.

Fills the visible pixels of the layer with a gradient.
Supports 5 gradient styles: linear, radial, angle, reflected, and diamond.

Each style projects a pixel onto a 0-1 gradient position relative to the
layer center (``diag`` is the layer diagonal, ``s`` is ``scale / 100``):

| Style | Position |
|-------|----------|
| linear | ``proj / (diag * s) + 0.5`` |
| radial | ``dist / s / (diag / 2)`` |
| angle | ``(atan2(dy, dx) + pi) / (2 * pi)`` |
| reflected | ``abs(proj / (diag * s / 2))`` |
| diamond | ``(abs(dx) + abs(dy)) / s / diag`` |

``proj`` is the offset projected onto the ``angle`` direction.
"""

from enum import Enum
from typing import Any, Callable, ClassVar, Dict, List, Optional, Tuple

import numpy as np
from pydantic import Field, field_validator

from ..blend_modes import BlendMode
from ..color_math import hex_to_rgb
from ..pixel_buffer import round_half_up
from ..settings import HexColor, Percent, SettingsModel
from .base import LayerStyle, composite_color


class GradientType(str, Enum):
    LINEAR = "linear"
    RADIAL = "radial"


class GradientStyle(str, Enum):
    """Gradient style options."""
    LINEAR = "linear"
    RADIAL = "radial"
    ANGLE = "angle"
    REFLECTED = "reflected"
    DIAMOND = "diamond"


class GradientStop(SettingsModel):
    """Color stop; ``position`` and ``opacity`` are percentages."""
    position: Percent
    color: HexColor
    opacity: Percent = 100.0


def _default_stops() -> List[GradientStop]:
    return [
        GradientStop(position=0, color='#000000', opacity=100),
        GradientStop(position=100, color='#ffffff', opacity=100),
    ]


class GradientDefinition(SettingsModel):
    """Ordered gradient stops plus the gradient's own type and angle."""

    stops: List[GradientStop] = Field(default_factory=_default_stops)
    gradient_type: GradientType = Field(default=GradientType.LINEAR, alias='type')
    angle: Optional[float] = None
    reverse: Optional[bool] = None

    @field_validator('stops', mode='before')
    @classmethod
    def _accept_tuples(cls, value: Any) -> Any:
        """Accept ``(position, color)`` or ``(position, color, opacity)`` tuples."""
        if isinstance(value, (list, tuple)):
            normalized = []
            for stop in value:
                if isinstance(stop, (list, tuple)):
                    stop_dict = {'position': stop[0], 'color': stop[1]}
                    if len(stop) > 2:
                        stop_dict['opacity'] = stop[2]
                    normalized.append(stop_dict)
                else:
                    normalized.append(stop)
            return normalized
        return value


def interpolate_gradient_array(gradient: GradientDefinition, positions: np.ndarray) -> np.ndarray:
    """
    Look up gradient colors for 0-1 positions.

    The first pair of stops containing a position is used. Positions outside
    every pair extrapolate along the first and last stop, so stops that do
    not reach 0 or 100 keep fading past their ends. Colors and alpha are
    rounded like the editor does and clamped to 0-255.

    Returns:
        float64 array of shape ``positions.shape + (4,)`` (RGB 0-255, alpha 0-255)
    """
    pos = np.asarray(positions, dtype=np.float64) * 100
    stops = gradient.stops
    result = np.zeros(pos.shape + (4,), dtype=np.float64)
    if not stops:
        result[..., 3] = 255
        return result

    stop1 = np.zeros(pos.shape, dtype=np.int64)
    stop2 = np.full(pos.shape, len(stops) - 1, dtype=np.int64)
    resolved = np.zeros(pos.shape, dtype=bool)
    for i in range(len(stops) - 1):
        inside = ~resolved & (pos >= stops[i].position) & (pos <= stops[i + 1].position)
        stop1[inside] = i
        stop2[inside] = i + 1
        resolved |= inside

    stop_pos = np.array([s.position for s in stops], dtype=np.float64)
    stop_rgb = np.array([hex_to_rgb(s.color) for s in stops], dtype=np.float64)
    stop_opacity = np.array([s.opacity for s in stops], dtype=np.float64)

    p1 = stop_pos[stop1]
    p2 = stop_pos[stop2]
    span = np.where(p1 == p2, 1.0, p2 - p1)
    t = np.where(p1 == p2, 0.0, (pos - p1) / span)

    c1 = stop_rgb[stop1]
    c2 = stop_rgb[stop2]
    result[..., :3] = round_half_up(c1 + (c2 - c1) * t[..., None])
    opacity = stop_opacity[stop1] + (stop_opacity[stop2] - stop_opacity[stop1]) * t
    result[..., 3] = round_half_up(opacity * 2.55)
    return np.clip(result, 0, 255)


def interpolate_gradient(gradient: GradientDefinition, position: float) -> Tuple[int, int, int, int]:
    """Gradient color (r, g, b, a) at a single 0-1 position."""
    r, g, b, a = interpolate_gradient_array(gradient, np.array(position))
    return int(r), int(g), int(b), int(a)


# =============================================================================
# Projections
# =============================================================================

def _linear(dx, dy, cos_a, sin_a, diagonal, scale):
    return (dx * cos_a + dy * sin_a) / (diagonal * scale) + 0.5


def _radial(dx, dy, cos_a, sin_a, diagonal, scale):
    return np.sqrt((dx / scale) ** 2 + (dy / scale) ** 2) / (diagonal / 2)


def _angle(dx, dy, cos_a, sin_a, diagonal, scale):
    return (np.arctan2(dy, dx) + np.pi) / (2 * np.pi)


def _reflected(dx, dy, cos_a, sin_a, diagonal, scale):
    return np.abs((dx * cos_a + dy * sin_a) / (diagonal * scale / 2))


def _diamond(dx, dy, cos_a, sin_a, diagonal, scale):
    return (np.abs(dx) / scale + np.abs(dy) / scale) / diagonal


_PROJECTIONS: Dict[GradientStyle, Callable[..., np.ndarray]] = {
    GradientStyle.LINEAR: _linear,
    GradientStyle.RADIAL: _radial,
    GradientStyle.ANGLE: _angle,
    GradientStyle.REFLECTED: _reflected,
    GradientStyle.DIAMOND: _diamond,
}


class GradientOverlay(LayerStyle):
    """
    Gradient overlay style.

    Example:
        >>> from effectstag.layer_effects import GradientOverlay
        >>> style = GradientOverlay(
        ...     gradient={'stops': [(0, '#ff0000'), (100, '#0000ff')]},
        ...     style='radial',
        ... )
        >>> result = style.apply(buffer)
    """

    style_type: ClassVar[str] = "gradientOverlay"
    display_name: ClassVar[str] = "Gradient Overlay"

    blend_mode: BlendMode = BlendMode.NORMAL
    opacity: Percent = 100.0
    gradient: GradientDefinition = Field(default_factory=GradientDefinition)
    style: GradientStyle = GradientStyle.LINEAR
    align_with_layer: bool = True
    angle: float = 90.0
    scale: float = Field(default=100.0, gt=0.0)
    reverse: bool = False
    dither: bool = False

    def gradient_positions(self, height: int, width: int) -> np.ndarray:
        """0-1 gradient position of every pixel of a ``width`` x ``height`` layer."""
        ys, xs = np.mgrid[0:height, 0:width].astype(np.float64)
        dx = xs - width / 2
        dy = ys - height / 2
        diagonal = np.sqrt(width * width + height * height)
        angle = np.radians(self.angle)

        pos = _PROJECTIONS[self.style](dx, dy, np.cos(angle), np.sin(angle), diagonal, self.scale / 100)
        if self.reverse:
            pos = 1 - pos
        return np.clip(pos, 0.0, 1.0)

    def _render_pixels(self, pixels: np.ndarray, rng: np.random.Generator) -> None:
        h, w = pixels.shape[:2]
        colors = interpolate_gradient_array(self.gradient, self.gradient_positions(h, w))
        opacity = (self.opacity / 100) * (colors[:, :, 3] / 255)
        composite_color(pixels, colors[:, :, :3], opacity, self.blend_mode, pixels[:, :, 3] > 0, rng)


__all__ = [
    "GradientOverlay",
    "GradientStyle",
    "GradientType",
    "GradientStop",
    "GradientDefinition",
    "interpolate_gradient",
    "interpolate_gradient_array",
]
