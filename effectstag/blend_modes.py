"""Blend modes.

27 compositing operators plus the pixel and image compositors built on them.

Per-channel operators are pure ``f(base, blend) -> result`` functions on 0-255
values; they accept Python numbers or numpy arrays. Four "component" modes
(hue, saturation, color, luminosity) and the two "color" comparisons
(darker color, lighter color) work on whole RGB triplets instead.

## Compositing

``blend_pixel`` and ``blend_image_data`` apply the operator, then mix
``base -> result`` by ``(blend_alpha / 255) * opacity``. The output alpha is
``max(base_alpha, round(blend_alpha * opacity))``. Dissolve is the exception:
each channel independently takes the blend value with probability equal to
the effective opacity, and the output alpha is the base alpha.

Usage:
    from effectstag.blend_modes import BlendMode, blend_pixel, blend_image_data

    blend_pixel((200, 100, 50, 255), (0, 0, 255, 128), BlendMode.SCREEN, opacity=0.5)
    result = blend_image_data(base, overlay, 'multiply')
"""
from enum import Enum
from typing import Callable, Dict, List, NamedTuple, Optional, Sequence, Tuple, Union

import numpy as np

from .color_math import hsl_to_rgb_array, luminance_array, rgb_to_hsl_array
from .errors import InvalidDimensionsError, InvalidParameterError
from .pixel_buffer import PixelBuffer, RGBA, resolve_rng, round_half_up, to_u8


class BlendMode(str, Enum):
    """Blend mode identifiers (editor JSON values)."""
    NORMAL = "normal"
    DISSOLVE = "dissolve"
    DARKEN = "darken"
    MULTIPLY = "multiply"
    COLOR_BURN = "color-burn"
    LINEAR_BURN = "linear-burn"
    DARKER_COLOR = "darker-color"
    LIGHTEN = "lighten"
    SCREEN = "screen"
    COLOR_DODGE = "color-dodge"
    LINEAR_DODGE = "linear-dodge"
    LIGHTER_COLOR = "lighter-color"
    OVERLAY = "overlay"
    SOFT_LIGHT = "soft-light"
    HARD_LIGHT = "hard-light"
    VIVID_LIGHT = "vivid-light"
    LINEAR_LIGHT = "linear-light"
    PIN_LIGHT = "pin-light"
    HARD_MIX = "hard-mix"
    DIFFERENCE = "difference"
    EXCLUSION = "exclusion"
    SUBTRACT = "subtract"
    DIVIDE = "divide"
    HUE = "hue"
    SATURATION = "saturation"
    COLOR = "color"
    LUMINOSITY = "luminosity"

    @classmethod
    def parse(cls, mode: Union["BlendMode", str]) -> "BlendMode":
        """Accept an enum member or its string value."""
        if isinstance(mode, cls):
            return mode
        try:
            return cls(mode)
        except ValueError:
            raise InvalidParameterError(f"Unknown blend mode: {mode!r}") from None


class BlendModeInfo(NamedTuple):
    name: str
    category: str
    description: str


BLEND_MODE_INFO: Dict[BlendMode, BlendModeInfo] = {
    BlendMode.NORMAL: BlendModeInfo('Normal', 'normal', 'Edits or paints each pixel to make it the result color'),
    BlendMode.DISSOLVE: BlendModeInfo('Dissolve', 'normal', 'Randomly replaces pixels with the blend color'),
    BlendMode.DARKEN: BlendModeInfo('Darken', 'darken', 'Selects the darker of the base or blend color'),
    BlendMode.MULTIPLY: BlendModeInfo('Multiply', 'darken', 'Multiplies the base color by the blend color'),
    BlendMode.COLOR_BURN: BlendModeInfo('Color Burn', 'darken', 'Darkens to increase the contrast'),
    BlendMode.LINEAR_BURN: BlendModeInfo('Linear Burn', 'darken', 'Darkens by decreasing the brightness'),
    BlendMode.DARKER_COLOR: BlendModeInfo('Darker Color', 'darken', 'Compares total channel values'),
    BlendMode.LIGHTEN: BlendModeInfo('Lighten', 'lighten', 'Selects the lighter of the base or blend color'),
    BlendMode.SCREEN: BlendModeInfo('Screen', 'lighten', 'Multiplies the inverse of the colors'),
    BlendMode.COLOR_DODGE: BlendModeInfo('Color Dodge', 'lighten', 'Brightens to decrease the contrast'),
    BlendMode.LINEAR_DODGE: BlendModeInfo('Linear Dodge (Add)', 'lighten', 'Brightens by increasing the brightness'),
    BlendMode.LIGHTER_COLOR: BlendModeInfo('Lighter Color', 'lighten', 'Compares total channel values'),
    BlendMode.OVERLAY: BlendModeInfo('Overlay', 'contrast', 'Multiplies or screens depending on the base color'),
    BlendMode.SOFT_LIGHT: BlendModeInfo('Soft Light', 'contrast', 'Darkens or lightens depending on the blend color'),
    BlendMode.HARD_LIGHT: BlendModeInfo('Hard Light', 'contrast', 'Multiplies or screens depending on the blend color'),
    BlendMode.VIVID_LIGHT: BlendModeInfo('Vivid Light', 'contrast', 'Burns or dodges by increasing or decreasing the contrast'),
    BlendMode.LINEAR_LIGHT: BlendModeInfo('Linear Light', 'contrast', 'Burns or dodges by decreasing or increasing the brightness'),
    BlendMode.PIN_LIGHT: BlendModeInfo('Pin Light', 'contrast', 'Replaces colors depending on the blend color'),
    BlendMode.HARD_MIX: BlendModeInfo('Hard Mix', 'contrast', 'Reduces colors to 8 colors'),
    BlendMode.DIFFERENCE: BlendModeInfo('Difference', 'comparative', 'Subtracts the darker color from the lighter color'),
    BlendMode.EXCLUSION: BlendModeInfo('Exclusion', 'comparative', 'Similar to Difference but lower contrast'),
    BlendMode.SUBTRACT: BlendModeInfo('Subtract', 'comparative', 'Subtracts the blend color from the base color'),
    BlendMode.DIVIDE: BlendModeInfo('Divide', 'comparative', 'Divides the base color by the blend color'),
    BlendMode.HUE: BlendModeInfo('Hue', 'component', 'Creates a result with the hue of the blend color'),
    BlendMode.SATURATION: BlendModeInfo('Saturation', 'component', 'Creates a result with the saturation of the blend color'),
    BlendMode.COLOR: BlendModeInfo('Color', 'component', 'Creates a result with the hue and saturation of the blend color'),
    BlendMode.LUMINOSITY: BlendModeInfo('Luminosity', 'component', 'Creates a result with the luminosity of the blend color'),
}

BLEND_MODE_GROUPS: Dict[str, List[BlendMode]] = {}
for _mode, _info in BLEND_MODE_INFO.items():
    BLEND_MODE_GROUPS.setdefault(_info.category, []).append(_mode)

# Modes a 2D canvas / SVG compositor can do natively
_COMPOSITE_OPERATIONS: Dict[BlendMode, str] = {
    BlendMode.NORMAL: 'source-over',
    BlendMode.MULTIPLY: 'multiply',
    BlendMode.SCREEN: 'screen',
    BlendMode.OVERLAY: 'overlay',
    BlendMode.DARKEN: 'darken',
    BlendMode.LIGHTEN: 'lighten',
    BlendMode.COLOR_DODGE: 'color-dodge',
    BlendMode.COLOR_BURN: 'color-burn',
    BlendMode.HARD_LIGHT: 'hard-light',
    BlendMode.SOFT_LIGHT: 'soft-light',
    BlendMode.DIFFERENCE: 'difference',
    BlendMode.EXCLUSION: 'exclusion',
    BlendMode.HUE: 'hue',
    BlendMode.SATURATION: 'saturation',
    BlendMode.COLOR: 'color',
    BlendMode.LUMINOSITY: 'luminosity',
}


def get_composite_operation(mode: Union[BlendMode, str]) -> Optional[str]:
    """Native canvas composite operation for ``mode``, or None."""
    return _COMPOSITE_OPERATIONS.get(BlendMode.parse(mode))


def requires_manual_blending(mode: Union[BlendMode, str]) -> bool:
    """True when ``mode`` has no native composite operation."""
    return get_composite_operation(mode) is None


# ============================================================================
# Per-channel operators
# ============================================================================

def _clamp(value):
    return np.clip(value, 0, 255)


def blend_normal(base, blend):
    return np.broadcast_arrays(base, blend)[1].astype(np.float64)


def blend_darken(base, blend):
    return np.minimum(base, blend).astype(np.float64)


def blend_multiply(base, blend):
    return np.asarray(base, dtype=np.float64) * blend / 255


def blend_color_burn(base, blend):
    base = np.asarray(base, dtype=np.float64)
    blend = np.asarray(blend, dtype=np.float64)
    safe = np.where(blend == 0, 1.0, blend)
    return np.where(blend == 0, 0.0, _clamp(255 - (255 - base) * 255 / safe))


def blend_linear_burn(base, blend):
    return _clamp(np.asarray(base, dtype=np.float64) + blend - 255)


def blend_lighten(base, blend):
    return np.maximum(base, blend).astype(np.float64)


def blend_screen(base, blend):
    base = np.asarray(base, dtype=np.float64)
    return 255 - (255 - base) * (255 - np.asarray(blend, dtype=np.float64)) / 255


def blend_color_dodge(base, blend):
    base = np.asarray(base, dtype=np.float64)
    blend = np.asarray(blend, dtype=np.float64)
    safe = np.where(blend == 255, 1.0, 255 - blend)
    return np.where(blend == 255, 255.0, _clamp(base * 255 / safe))


def blend_linear_dodge(base, blend):
    return _clamp(np.asarray(base, dtype=np.float64) + blend)


def blend_overlay(base, blend):
    base = np.asarray(base, dtype=np.float64)
    blend = np.asarray(blend, dtype=np.float64)
    return np.where(base < 128,
                    2 * base * blend / 255,
                    255 - 2 * (255 - base) * (255 - blend) / 255)


def blend_soft_light(base, blend):
    base = np.asarray(base, dtype=np.float64)
    blend = np.asarray(blend, dtype=np.float64)
    d = np.where(base < 64,
                 ((16 * base - 12 * 255) * base + 4 * 255) * base / (255 * 255),
                 np.sqrt(base / 255) * 255)
    # The dark-base polynomial undershoots 0 for strong blends
    return np.clip(np.where(blend < 128,
                            base - (255 - 2 * blend) * base * (255 - base) / (255 * 255),
                            base + (2 * blend - 255) * (d - base) / 255), 0, 255)


def blend_hard_light(base, blend):
    base = np.asarray(base, dtype=np.float64)
    blend = np.asarray(blend, dtype=np.float64)
    return np.where(blend < 128,
                    2 * base * blend / 255,
                    255 - 2 * (255 - base) * (255 - blend) / 255)


def blend_vivid_light(base, blend):
    blend = np.asarray(blend, dtype=np.float64)
    return np.where(blend < 128,
                    blend_color_burn(base, 2 * blend),
                    blend_color_dodge(base, 2 * (blend - 128)))


def blend_linear_light(base, blend):
    blend = np.asarray(blend, dtype=np.float64)
    return np.where(blend < 128,
                    blend_linear_burn(base, 2 * blend),
                    blend_linear_dodge(base, 2 * (blend - 128)))


def blend_pin_light(base, blend):
    base = np.asarray(base, dtype=np.float64)
    blend = np.asarray(blend, dtype=np.float64)
    return np.where(blend < 128,
                    np.minimum(base, 2 * blend),
                    np.maximum(base, 2 * (blend - 128)))


def blend_hard_mix(base, blend):
    return np.where(blend_vivid_light(base, blend) < 128, 0.0, 255.0)


def blend_difference(base, blend):
    return np.abs(np.asarray(base, dtype=np.float64) - blend)


def blend_exclusion(base, blend):
    base = np.asarray(base, dtype=np.float64)
    return base + blend - 2 * base * np.asarray(blend, dtype=np.float64) / 255


def blend_subtract(base, blend):
    return _clamp(np.asarray(base, dtype=np.float64) - blend)


def blend_divide(base, blend):
    base = np.asarray(base, dtype=np.float64)
    blend = np.asarray(blend, dtype=np.float64)
    return np.where(blend == 0, 255.0, _clamp(base * 256 / (blend + 1)))


# ============================================================================
# Triplet operators (arrays of shape (..., 3))
# ============================================================================

def blend_darker_color(base, blend):
    keep_base = luminance_array(base) < luminance_array(blend)
    return np.where(keep_base[..., None], base, blend).astype(np.float64)


def blend_lighter_color(base, blend):
    keep_base = luminance_array(base) > luminance_array(blend)
    return np.where(keep_base[..., None], base, blend).astype(np.float64)


def _recombine(base, blend, from_blend: Sequence[bool]):
    """Take each HSL component from blend (True) or base (False)."""
    base_hsl = rgb_to_hsl_array(base)
    blend_hsl = rgb_to_hsl_array(blend)
    hsl = np.where(np.asarray(from_blend), blend_hsl, base_hsl)
    return hsl_to_rgb_array(hsl)


def blend_hue(base, blend):
    return _recombine(base, blend, (True, False, False))


def blend_saturation(base, blend):
    return _recombine(base, blend, (False, True, False))


def blend_color(base, blend):
    return _recombine(base, blend, (True, True, False))


def blend_luminosity(base, blend):
    return _recombine(base, blend, (False, False, True))


ChannelOp = Callable[[np.ndarray, np.ndarray], np.ndarray]

CHANNEL_OPERATORS: Dict[BlendMode, ChannelOp] = {
    BlendMode.NORMAL: blend_normal,
    BlendMode.DARKEN: blend_darken,
    BlendMode.MULTIPLY: blend_multiply,
    BlendMode.COLOR_BURN: blend_color_burn,
    BlendMode.LINEAR_BURN: blend_linear_burn,
    BlendMode.LIGHTEN: blend_lighten,
    BlendMode.SCREEN: blend_screen,
    BlendMode.COLOR_DODGE: blend_color_dodge,
    BlendMode.LINEAR_DODGE: blend_linear_dodge,
    BlendMode.OVERLAY: blend_overlay,
    BlendMode.SOFT_LIGHT: blend_soft_light,
    BlendMode.HARD_LIGHT: blend_hard_light,
    BlendMode.VIVID_LIGHT: blend_vivid_light,
    BlendMode.LINEAR_LIGHT: blend_linear_light,
    BlendMode.PIN_LIGHT: blend_pin_light,
    BlendMode.HARD_MIX: blend_hard_mix,
    BlendMode.DIFFERENCE: blend_difference,
    BlendMode.EXCLUSION: blend_exclusion,
    BlendMode.SUBTRACT: blend_subtract,
    BlendMode.DIVIDE: blend_divide,
}

TRIPLET_OPERATORS: Dict[BlendMode, ChannelOp] = {
    BlendMode.DARKER_COLOR: blend_darker_color,
    BlendMode.LIGHTER_COLOR: blend_lighter_color,
    BlendMode.HUE: blend_hue,
    BlendMode.SATURATION: blend_saturation,
    BlendMode.COLOR: blend_color,
    BlendMode.LUMINOSITY: blend_luminosity,
}

_unhandled = set(BlendMode) - set(CHANNEL_OPERATORS) - set(TRIPLET_OPERATORS) - {BlendMode.DISSOLVE}
if _unhandled:
    raise RuntimeError(f"Blend modes without operator: {sorted(m.value for m in _unhandled)}")


def blend_colors(base_rgb: np.ndarray, blend_rgb: np.ndarray, mode: Union[BlendMode, str]) -> np.ndarray:
    """Raw operator result for (..., 3) color arrays, before opacity mixing.

    Dissolve has no deterministic raw result and is rejected here.
    """
    mode = BlendMode.parse(mode)
    base_rgb = np.asarray(base_rgb, dtype=np.float64)
    blend_rgb = np.asarray(blend_rgb, dtype=np.float64)
    with np.errstate(divide='ignore', invalid='ignore'):
        if mode in CHANNEL_OPERATORS:
            return CHANNEL_OPERATORS[mode](base_rgb, blend_rgb)
        if mode in TRIPLET_OPERATORS:
            return TRIPLET_OPERATORS[mode](base_rgb, blend_rgb)
    raise InvalidParameterError(f"{mode.value} has no deterministic color result")


# ============================================================================
# Compositing
# ============================================================================

def blend_arrays(base: np.ndarray, blend: np.ndarray, mode: Union[BlendMode, str],
                 opacity: float = 1.0, rng: Optional[np.random.Generator] = None) -> np.ndarray:
    """Composite ``blend`` over ``base``; both (..., 4) RGBA arrays.

    Args:
        base: Base pixels (uint8 or float, 0-255)
        blend: Blend pixels, same shape as ``base``
        mode: Blend mode
        opacity: Layer opacity, clamped to 0.0-1.0
        rng: Random source for dissolve

    Returns:
        uint8 array of the same shape
    """
    mode = BlendMode.parse(mode)
    opacity = max(0.0, min(1.0, float(opacity)))
    base_f = np.asarray(base, dtype=np.float64)
    blend_f = np.asarray(blend, dtype=np.float64)
    if base_f.shape != blend_f.shape:
        raise InvalidDimensionsError(f"Shape mismatch: {base_f.shape} vs {blend_f.shape}")

    result = to_u8(base_f)
    blend_alpha = blend_f[..., 3]
    active = (blend_alpha > 0) & (opacity > 0)
    if not active.any():
        return result

    base_rgb = base_f[..., :3]
    blend_rgb = blend_f[..., :3]
    effective = (blend_alpha / 255 * opacity)[..., None]

    if mode is BlendMode.DISSOLVE:
        # One draw per channel, not per pixel
        take_blend = resolve_rng(rng).random(base_rgb.shape) < effective
        mixed = np.where(take_blend, blend_rgb, base_rgb)
        result[..., :3] = np.where(active[..., None], to_u8(mixed), result[..., :3])
        return result

    raw = blend_colors(base_rgb, blend_rgb, mode)
    mixed = np.clip(base_rgb + (raw - base_rgb) * effective, 0, 255)
    alpha = np.maximum(base_f[..., 3], round_half_up(blend_alpha * opacity))

    result[..., :3] = np.where(active[..., None], to_u8(mixed), result[..., :3])
    result[..., 3] = np.where(active, to_u8(alpha), result[..., 3])
    return result


def blend_pixel(base: Sequence[int], blend: Sequence[int], mode: Union[BlendMode, str],
                opacity: float = 1.0, rng: Optional[np.random.Generator] = None) -> RGBA:
    """Composite a single RGBA pixel over another.

    Returns ``base`` unchanged when the blend alpha or opacity is 0.
    """
    base_px = np.asarray(base, dtype=np.float64).reshape(1, 4)
    blend_px = np.asarray(blend, dtype=np.float64).reshape(1, 4)
    r, g, b, a = blend_arrays(base_px, blend_px, mode, opacity, rng)[0]
    return int(r), int(g), int(b), int(a)


def blend_image_data(base: PixelBuffer, blend: PixelBuffer, mode: Union[BlendMode, str],
                     opacity: float = 1.0, rng: Optional[np.random.Generator] = None) -> PixelBuffer:
    """Composite two equally sized buffers into a new buffer.

    Raises:
        InvalidDimensionsError: when the buffers differ in size
    """
    if not base.same_size(blend):
        raise InvalidDimensionsError(
            f"Buffer dimensions must match: {base.width}x{base.height} vs {blend.width}x{blend.height}"
        )
    return PixelBuffer(blend_arrays(base.pixels, blend.pixels, mode, opacity, rng))


__all__ = [
    "BlendMode",
    "BlendModeInfo",
    "BLEND_MODE_INFO",
    "BLEND_MODE_GROUPS",
    "CHANNEL_OPERATORS",
    "TRIPLET_OPERATORS",
    "get_composite_operation",
    "requires_manual_blending",
    "blend_colors",
    "blend_arrays",
    "blend_pixel",
    "blend_image_data",
]
