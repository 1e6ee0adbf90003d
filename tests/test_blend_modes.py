"""
Tests for blend modes and compositing.
"""

import itertools

import numpy as np
import pytest

from conftest import make_random
from effectstag import BlendMode, InvalidDimensionsError, InvalidParameterError, PixelBuffer
from effectstag.blend_modes import (
    BLEND_MODE_GROUPS,
    BLEND_MODE_INFO,
    blend_arrays,
    blend_colors,
    blend_image_data,
    blend_pixel,
    get_composite_operation,
    requires_manual_blending,
)

LEVELS = np.arange(0, 256, 15, dtype=np.float64)


@pytest.fixture
def channel_grid():
    """Every (base, blend) pair of sampled channel levels."""
    base, blend = np.meshgrid(LEVELS, LEVELS, indexing='ij')
    return base.ravel(), blend.ravel()


class TestIdentityLaw:
    """Invisible blend layers never change the base."""

    @pytest.mark.parametrize("mode", list(BlendMode))
    def test_zero_opacity(self, mode, rng):
        base = make_random(seed=1, opaque=False)
        blend = make_random(seed=2)
        result = blend_image_data(base, blend, mode, opacity=0.0, rng=rng)
        assert result == base

    @pytest.mark.parametrize("mode", list(BlendMode))
    def test_transparent_blend(self, mode, rng):
        base = make_random(seed=3, opaque=False)
        blend = make_random(seed=4)
        blend.pixels[:, :, 3] = 0
        result = blend_image_data(base, blend, mode, opacity=1.0, rng=rng)
        assert result == base


class TestCompositing:
    """Tests for opacity mixing and output alpha."""

    def test_normal_full_opacity_is_exact(self):
        assert blend_pixel((10, 20, 30, 255), (200, 100, 50, 255), 'normal') == (200, 100, 50, 255)

    def test_normal_half_opacity(self):
        result = blend_pixel((0, 0, 0, 255), (255, 255, 255, 255), BlendMode.NORMAL, opacity=0.5)
        assert result == (128, 128, 128, 255)

    def test_output_alpha_is_max(self):
        assert blend_pixel((0, 0, 0, 100), (0, 0, 0, 200), 'normal', 0.5)[3] == 100
        assert blend_pixel((0, 0, 0, 50), (0, 0, 0, 200), 'normal', 0.5)[3] == 100

    def test_opacity_clamped(self):
        assert blend_pixel((0, 0, 0, 255), (90, 90, 90, 255), 'normal', 3.0) == (90, 90, 90, 255)

    def test_multiply_scenario(self):
        data = bytes([255, 0, 0, 255, 0, 255, 0, 255, 0, 0, 255, 255, 255, 255, 255, 255])
        buf = PixelBuffer.from_bytes(2, 2, data)
        assert blend_image_data(buf, buf, 'multiply').tobytes() == data

    def test_dimension_mismatch(self):
        with pytest.raises(InvalidDimensionsError):
            blend_image_data(PixelBuffer.blank(2, 2), PixelBuffer.blank(3, 2), 'normal')
        with pytest.raises(InvalidDimensionsError):
            blend_arrays(np.zeros((2, 4)), np.zeros((3, 4)), 'normal')

    def test_unknown_mode(self):
        with pytest.raises(InvalidParameterError):
            blend_pixel((0, 0, 0, 255), (0, 0, 0, 255), 'sparkle')


class TestDissolve:
    """Tests for the stochastic dissolve mode."""

    def test_full_opacity_takes_blend(self, rng):
        base = PixelBuffer.filled(8, 8, (0, 0, 0, 255))
        blend = PixelBuffer.filled(8, 8, (255, 255, 255, 255))
        assert blend_image_data(base, blend, 'dissolve', 1.0, rng) == blend

    def test_partial_opacity(self):
        base = PixelBuffer.filled(64, 64, (0, 0, 0, 80))
        blend = PixelBuffer.filled(64, 64, (255, 255, 255, 255))
        result = blend_image_data(base, blend, 'dissolve', 0.5, np.random.default_rng(5))
        share = (result.pixels[:, :, :3] == 255).mean()
        assert 0.4 < share < 0.6
        assert np.all(result.alpha == 80)

    def test_seeded_is_deterministic(self):
        base = make_random(seed=8)
        blend = make_random(seed=9)
        first = blend_image_data(base, blend, 'dissolve', 0.5, np.random.default_rng(3))
        second = blend_image_data(base, blend, 'dissolve', 0.5, np.random.default_rng(3))
        assert first == second

    def test_no_raw_color(self):
        with pytest.raises(InvalidParameterError):
            blend_colors([0, 0, 0], [1, 1, 1], 'dissolve')


class TestOperators:
    """Tests for individual operator formulas."""

    def test_guarded_divisions(self):
        assert blend_colors([100, 100, 100], [0, 0, 0], 'color-burn').tolist() == [0, 0, 0]
        assert blend_colors([100, 100, 100], [255, 255, 255], 'color-dodge').tolist() == [255, 255, 255]
        assert blend_colors([100, 100, 100], [0, 0, 0], 'divide').tolist() == [255, 255, 255]

    def test_screen(self):
        assert blend_colors([100], [100], 'screen')[0] == pytest.approx(255 - 155 * 155 / 255)

    def test_overlay_is_swapped_hard_light(self, channel_grid):
        base, blend = channel_grid
        assert np.allclose(blend_colors(base, blend, 'overlay'),
                           blend_colors(blend, base, 'hard-light'))

    def test_soft_light_stays_in_range(self, channel_grid):
        base, blend = channel_grid
        result = blend_colors(base, blend, 'soft-light')
        assert result.min() >= 0
        assert result.max() <= 255

    def test_soft_light_dark_base(self):
        """Bases below 64 use the 8-bit polynomial, clipped at 0."""
        d = ((16 * 60 - 12 * 255) * 60 + 4 * 255) * 60 / (255 * 255)
        assert blend_colors([60], [128], 'soft-light')[0] == pytest.approx(60 + (d - 60) / 255)
        assert blend_colors([10], [255], 'soft-light')[0] == 0

    @pytest.mark.parametrize("mode", [m for m in BlendMode if m is not BlendMode.DISSOLVE])
    def test_results_finite(self, mode):
        colors = np.array(list(itertools.product([0, 64, 128, 255], repeat=3)), dtype=np.float64)
        base = np.repeat(colors, len(colors), axis=0)
        blend = np.tile(colors, (len(colors), 1))
        assert np.all(np.isfinite(blend_colors(base, blend, mode)))

    def test_darker_and_lighter_color(self):
        dark, light = [10, 200, 10], [200, 200, 200]
        assert blend_colors(dark, light, 'darker-color').tolist() == dark
        assert blend_colors(dark, light, 'lighter-color').tolist() == light

    def test_hue_keeps_gray_gray(self):
        """A gray base has no saturation to carry the blend hue."""
        assert blend_pixel((128, 128, 128, 255), (255, 0, 0, 255), 'hue') == (128, 128, 128, 255)

    def test_color_takes_hue_and_saturation(self):
        r, g, b, _ = blend_pixel((100, 100, 100, 255), (0, 0, 255, 255), 'color')
        assert b > r and b > g
        assert r == g


class TestCatalog:
    """Tests for mode metadata."""

    def test_all_modes_described(self):
        assert set(BLEND_MODE_INFO) == set(BlendMode)
        assert len(BlendMode) == 27
        grouped = [m for modes in BLEND_MODE_GROUPS.values() for m in modes]
        assert sorted(grouped) == sorted(BlendMode)

    def test_composite_operation(self):
        assert get_composite_operation('normal') == 'source-over'
        assert get_composite_operation(BlendMode.MULTIPLY) == 'multiply'
        assert get_composite_operation('vivid-light') is None
        assert requires_manual_blending('dissolve')
        assert not requires_manual_blending('screen')
