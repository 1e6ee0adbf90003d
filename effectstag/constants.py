"""Constants shared by the effects engine.

Groups the fixed numbers the kernels rely on. Nothing in here is mutated at
runtime; per-call configuration lives in the settings models.
"""

# =============================================================================
# Pixel Layout
# =============================================================================

CHANNELS = 4  # R, G, B, A
COLOR_CHANNELS = 3
MAX_VALUE = 255

# =============================================================================
# Luminance (ITU-R BT.601)
# =============================================================================

LUMA_R = 0.299
LUMA_G = 0.587
LUMA_B = 0.114

# =============================================================================
# CIE Lab
# =============================================================================

# D65 reference white
WHITE_X = 0.95047
WHITE_Y = 1.0
WHITE_Z = 1.08883

LAB_EPSILON = 0.008856
LAB_KAPPA_SLOPE = 7.787

SRGB_LINEAR_THRESHOLD = 0.04045

# =============================================================================
# Histogram
# =============================================================================

HISTOGRAM_BINS = 256
HISTOGRAM_BAR_ALPHA = 0.7
DEFAULT_CLIP_PERCENT = 0.1

# =============================================================================
# Distortion
# =============================================================================

# Ripple size -> wavelength in pixels
RIPPLE_WAVELENGTHS = {
    "small": 10,
    "medium": 25,
    "large": 50,
}
RIPPLE_MAX_AMPLITUDE = 10.0
ZIGZAG_MAX_AMPLITUDE = 20.0

# =============================================================================
# Sharpen
# =============================================================================

SHARPEN_KERNEL = (
    0, -1, 0,
    -1, 5, -1,
    0, -1, 0,
)
HIGH_PASS_MIDPOINT = 128
NOISE_REDUCTION_THRESHOLD = 10.0

# =============================================================================
# Selective Color
# =============================================================================

HUE_TRANSITION = 30.0
MIN_CHROMA_SATURATION = 0.1
WHITES_THRESHOLD = 0.8
BLACKS_THRESHOLD = 0.2
NEUTRALS_MAX_SATURATION = 0.2
NEUTRALS_FALLOFF = 0.3

__all__ = [
    "CHANNELS",
    "COLOR_CHANNELS",
    "MAX_VALUE",
    "LUMA_R",
    "LUMA_G",
    "LUMA_B",
    "WHITE_X",
    "WHITE_Y",
    "WHITE_Z",
    "LAB_EPSILON",
    "LAB_KAPPA_SLOPE",
    "SRGB_LINEAR_THRESHOLD",
    "HISTOGRAM_BINS",
    "HISTOGRAM_BAR_ALPHA",
    "DEFAULT_CLIP_PERCENT",
    "RIPPLE_WAVELENGTHS",
    "RIPPLE_MAX_AMPLITUDE",
    "ZIGZAG_MAX_AMPLITUDE",
    "SHARPEN_KERNEL",
    "HIGH_PASS_MIDPOINT",
    "NOISE_REDUCTION_THRESHOLD",
    "HUE_TRANSITION",
    "MIN_CHROMA_SATURATION",
    "WHITES_THRESHOLD",
    "BLACKS_THRESHOLD",
    "NEUTRALS_MAX_SATURATION",
    "NEUTRALS_FALLOFF",
]
