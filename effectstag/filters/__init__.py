# EffectStag Filters Module
"""
Whole-buffer filters: distortions, sharpening and selective color.

Every filter takes a PixelBuffer plus a settings model and returns a new
PixelBuffer of the same size.
"""

from .distort_filters import (
    DistortType,
    DistortSettings,
    SpherizeSettings,
    PinchSettings,
    TwirlSettings,
    WaveSettings,
    RippleSettings,
    ZigZagSettings,
    PolarCoordinatesSettings,
    apply_spherize,
    apply_pinch,
    apply_twirl,
    apply_wave,
    apply_ripple,
    apply_zigzag,
    apply_polar_coordinates,
    apply_distortion,
    distortion_from_dict,
)
from .sharpen_filters import (
    RemoveBlur,
    UnsharpMaskSettings,
    SmartSharpenSettings,
    HighPassSettings,
    apply_unsharp_mask,
    apply_smart_sharpen,
    apply_high_pass,
    apply_sharpen,
)
from .selective_color import (
    ColorRange,
    AdjustMethod,
    SelectiveColorAdjustment,
    SelectiveColorSettings,
    get_color_range_weight,
    apply_selective_color,
)

__all__ = [
    # Distortion
    "DistortType",
    "DistortSettings",
    "SpherizeSettings",
    "PinchSettings",
    "TwirlSettings",
    "WaveSettings",
    "RippleSettings",
    "ZigZagSettings",
    "PolarCoordinatesSettings",
    "apply_spherize",
    "apply_pinch",
    "apply_twirl",
    "apply_wave",
    "apply_ripple",
    "apply_zigzag",
    "apply_polar_coordinates",
    "apply_distortion",
    "distortion_from_dict",
    # Sharpen
    "RemoveBlur",
    "UnsharpMaskSettings",
    "SmartSharpenSettings",
    "HighPassSettings",
    "apply_unsharp_mask",
    "apply_smart_sharpen",
    "apply_high_pass",
    "apply_sharpen",
    # Selective color
    "ColorRange",
    "AdjustMethod",
    "SelectiveColorAdjustment",
    "SelectiveColorSettings",
    "get_color_range_weight",
    "apply_selective_color",
]
