"""
Tests for color space conversions.
"""

import itertools

import numpy as np
import pytest

from effectstag import InvalidParameterError
from effectstag.color_math import (
    cmyk_to_rgb,
    cmyk_to_rgb_array,
    hex_to_rgb,
    hsl_to_rgb,
    hsl_to_rgb_array,
    hsv_to_rgb,
    luminance_u8,
    parse_color,
    rgb_to_cmyk,
    rgb_to_cmyk_array,
    rgb_to_hex,
    rgb_to_hsl,
    rgb_to_hsl_array,
    rgb_to_hsv,
    rgb_to_lab,
)

# Coarse grid over the RGB cube, corners included
GRID = list(itertools.product(range(0, 256, 17), repeat=3))


class TestHex:
    """Tests for hex parsing and formatting."""

    def test_parse_with_and_without_hash(self):
        assert hex_to_rgb('#FF8000') == (255, 128, 0)
        assert hex_to_rgb('ff8000') == (255, 128, 0)

    def test_invalid_hex(self):
        """Malformed strings raise instead of falling back to black."""
        for bad in ['#12345', 'zzzzzz', '', '#1234567']:
            with pytest.raises(InvalidParameterError):
                hex_to_rgb(bad)

    def test_format_lowercase(self):
        assert rgb_to_hex(255, 128, 0) == '#ff8000'
        assert rgb_to_hex(0, 0, 0) == '#000000'

    def test_format_out_of_range(self):
        with pytest.raises(InvalidParameterError):
            rgb_to_hex(256, 0, 0)

    def test_parse_color(self):
        assert parse_color((1, 2, 3)) == (1, 2, 3)
        assert parse_color('#010203') == (1, 2, 3)
        with pytest.raises(InvalidParameterError):
            parse_color(42)


class TestHSL:
    """Tests for HSL conversion."""

    def test_primary(self):
        assert rgb_to_hsl(255, 0, 0) == pytest.approx((0.0, 1.0, 0.5))
        assert rgb_to_hsl(0, 255, 0) == pytest.approx((120.0, 1.0, 0.5))
        assert rgb_to_hsl(0, 0, 255) == pytest.approx((240.0, 1.0, 0.5))

    def test_achromatic(self):
        h, s, l = rgb_to_hsl(128, 128, 128)
        assert h == 0.0
        assert s == 0.0
        assert l == pytest.approx(128 / 255)

    def test_to_rgb(self):
        assert hsl_to_rgb(120, 1.0, 0.5) == (0, 255, 0)
        assert hsl_to_rgb(0, 0.0, 1.0) == (255, 255, 255)

    def test_array_matches_scalar(self):
        """Vectorized conversions agree with the scalar ones."""
        rgb = np.array(GRID, dtype=np.float64)
        hsl = rgb_to_hsl_array(rgb)
        for color, row in zip(GRID[::37], hsl[::37]):
            assert tuple(row) == pytest.approx(rgb_to_hsl(*color))
        back = hsl_to_rgb_array(hsl)
        for row, color in zip(hsl[::37], back[::37]):
            assert tuple(int(v) for v in color) == hsl_to_rgb(*row)

    def test_round_trip(self):
        rgb = np.array(GRID, dtype=np.float64)
        back = hsl_to_rgb_array(rgb_to_hsl_array(rgb))
        assert np.abs(back - rgb).max() <= 1


class TestHSV:
    """Tests for HSV conversion."""

    def test_values(self):
        assert rgb_to_hsv(255, 0, 0) == pytest.approx((0.0, 1.0, 1.0))
        assert rgb_to_hsv(0, 0, 0) == (0.0, 0.0, 0.0)
        assert hsv_to_rgb(240, 1.0, 1.0) == (0, 0, 255)

    def test_round_trip_within_one(self):
        for color in GRID:
            back = hsv_to_rgb(*rgb_to_hsv(*color))
            assert max(abs(a - b) for a, b in zip(back, color)) <= 1, color


class TestCMYK:
    """Tests for CMYK conversion."""

    def test_black(self):
        """Pure black is all key ink."""
        assert rgb_to_cmyk(0, 0, 0) == (0.0, 0.0, 0.0, 1.0)
        assert cmyk_to_rgb(0, 0, 0, 1) == (0, 0, 0)

    def test_primary(self):
        assert rgb_to_cmyk(255, 0, 0) == pytest.approx((0.0, 1.0, 1.0, 0.0))

    def test_round_trip_within_one(self):
        for color in GRID:
            back = cmyk_to_rgb(*rgb_to_cmyk(*color))
            assert max(abs(a - b) for a, b in zip(back, color)) <= 1, color

    def test_array_round_trip(self):
        rgb = np.array(GRID, dtype=np.float64)
        cmyk = rgb_to_cmyk_array(rgb)
        assert cmyk.shape == (len(GRID), 4)
        assert np.abs(cmyk_to_rgb_array(cmyk) - rgb).max() <= 1


class TestLabAndLuminance:
    """Tests for Lab and luminance."""

    def test_lab_white_and_black(self):
        assert rgb_to_lab(255, 255, 255) == pytest.approx((100.0, 0.0, 0.0), abs=1e-3)
        assert rgb_to_lab(0, 0, 0) == pytest.approx((0.0, 0.0, 0.0), abs=1e-9)

    def test_lab_red(self):
        assert rgb_to_lab(255, 0, 0) == pytest.approx((53.24, 80.09, 67.20), abs=0.05)

    def test_luminance_u8(self):
        assert luminance_u8(255, 255, 255) == 255
        assert luminance_u8(0, 0, 0) == 0
        assert luminance_u8(255, 0, 0) == 76
