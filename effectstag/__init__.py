"""
EffectStag - Raster effects engine for RGBA8 pixel buffers

Blend modes, layer styles, distortion and sharpen filters, histogram analysis
and selective color, all operating on :class:`PixelBuffer`.
"""

__version__ = "0.1.0"

from .errors import EffectsError, InvalidDimensionsError, InvalidParameterError
from .pixel_buffer import PixelBuffer, Rect
from .color_math import (
    hex_to_rgb,
    rgb_to_hex,
    rgb_to_hsl,
    hsl_to_rgb,
    rgb_to_hsv,
    hsv_to_rgb,
    rgb_to_cmyk,
    cmyk_to_rgb,
    rgb_to_lab,
)
from .contour import ContourCurve, ContourPoint, evaluate_contour
from .convolution import (
    gaussian_kernel_1d,
    separable_gaussian_blur,
    directional_blur,
    convolve_3x3,
    bilinear_sample,
)
from .edge_distance import edge_distance
from .histogram import (
    Histogram,
    ChannelStatistics,
    ColorInfo,
    build_histogram,
    compute_statistics,
    auto_levels,
    auto_contrast,
    get_color_info,
    render_histogram,
)
from .blend_modes import BlendMode, blend_pixel, blend_image_data

__all__ = [
    "__version__",
    # Errors
    "EffectsError",
    "InvalidDimensionsError",
    "InvalidParameterError",
    # Pixel data
    "PixelBuffer",
    "Rect",
    # Color math
    "hex_to_rgb",
    "rgb_to_hex",
    "rgb_to_hsl",
    "hsl_to_rgb",
    "rgb_to_hsv",
    "hsv_to_rgb",
    "rgb_to_cmyk",
    "cmyk_to_rgb",
    "rgb_to_lab",
    # Contours
    "ContourCurve",
    "ContourPoint",
    "evaluate_contour",
    # Convolution
    "gaussian_kernel_1d",
    "separable_gaussian_blur",
    "directional_blur",
    "convolve_3x3",
    "bilinear_sample",
    # Edge distance
    "edge_distance",
    # Histogram
    "Histogram",
    "ChannelStatistics",
    "ColorInfo",
    "build_histogram",
    "compute_statistics",
    "auto_levels",
    "auto_contrast",
    "get_color_info",
    "render_histogram",
    # Blending
    "BlendMode",
    "blend_pixel",
    "blend_image_data",
]
