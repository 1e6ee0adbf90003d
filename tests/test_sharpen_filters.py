"""
Tests for sharpen filters.
"""

import numpy as np
import pytest

from conftest import make_random
from effectstag import InvalidParameterError, PixelBuffer
from effectstag.filters.sharpen_filters import (
    HighPassSettings,
    RemoveBlur,
    SmartSharpenSettings,
    UnsharpMaskSettings,
    apply_high_pass,
    apply_sharpen,
    apply_smart_sharpen,
    apply_unsharp_mask,
    pixel_radius,
)


@pytest.fixture
def step_edge():
    """10x3 opaque buffer, value 50 on the left half and 200 on the right."""
    buf = PixelBuffer.filled(10, 3, (50, 50, 50, 255))
    buf.pixels[:, 5:, :3] = 200
    return buf


class TestUnsharpMask:
    """Tests for unsharp masking."""

    def test_uniform_unchanged(self, uniform_buffer):
        assert apply_unsharp_mask(uniform_buffer, UnsharpMaskSettings(amount=200, radius=3)) == uniform_buffer

    def test_increases_edge_contrast(self, step_edge):
        result = apply_unsharp_mask(step_edge, UnsharpMaskSettings(amount=100, radius=1))
        assert result.get_pixel(4, 1)[0] < 50
        assert result.get_pixel(5, 1)[0] > 200
        assert result.get_pixel(0, 1)[0] == 50

    def test_threshold_blocks_changes(self, random_buffer):
        settings = UnsharpMaskSettings(amount=300, radius=2, threshold=256)
        assert apply_unsharp_mask(random_buffer, settings) == random_buffer

    def test_alpha_untouched(self):
        buf = make_random(opaque=False)
        result = apply_unsharp_mask(buf, UnsharpMaskSettings(amount=150))
        assert np.array_equal(result.alpha, buf.alpha)

    def test_radius_validation(self):
        with pytest.raises(InvalidParameterError):
            UnsharpMaskSettings(radius=0)
        with pytest.raises(InvalidParameterError):
            UnsharpMaskSettings(amount=-1)

    def test_pixel_radius(self):
        assert pixel_radius(0.4) == 1
        assert pixel_radius(2.5) == 3
        assert pixel_radius(4) == 4


class TestSmartSharpen:
    """Tests for smart sharpen."""

    @pytest.mark.parametrize("remove_blur", list(RemoveBlur))
    def test_uniform_unchanged(self, remove_blur, uniform_buffer):
        settings = SmartSharpenSettings(remove_blur=remove_blur, motion_angle=30, radius=2)
        assert apply_smart_sharpen(uniform_buffer, settings) == uniform_buffer

    def test_sharpens_edge(self, step_edge):
        result = apply_smart_sharpen(step_edge, SmartSharpenSettings(amount=100, radius=1))
        assert result.get_pixel(4, 1)[0] < 50
        assert result.get_pixel(5, 1)[0] > 200

    def test_full_noise_reduction_suppresses_small_detail(self, step_edge):
        """Differences below the noise threshold are removed entirely at 100%."""
        settings = SmartSharpenSettings(amount=100, radius=1, noise_reduction=100)
        assert apply_smart_sharpen(step_edge, settings) == step_edge

    def test_motion_blur_direction(self, step_edge):
        """A vertical motion blur does not see a vertical edge."""
        settings = SmartSharpenSettings(remove_blur='motion', motion_angle=90, radius=2)
        assert apply_smart_sharpen(step_edge, settings) == step_edge


class TestHighPass:
    """Tests for high pass."""

    def test_uniform_becomes_mid_gray(self, uniform_buffer):
        result = apply_high_pass(uniform_buffer, HighPassSettings(radius=3))
        assert np.all(result.pixels[:, :, :3] == 128)
        assert np.all(result.alpha == 255)

    def test_edge_detail(self, step_edge):
        result = apply_high_pass(step_edge, HighPassSettings(radius=1))
        assert result.get_pixel(4, 1)[0] < 128
        assert result.get_pixel(5, 1)[0] > 128


class TestSharpen:
    """Tests for the fixed 3x3 sharpen."""

    def test_border_ring_unchanged(self, random_buffer):
        result = apply_sharpen(random_buffer, 100).pixels
        src = random_buffer.pixels
        assert np.array_equal(result[0], src[0])
        assert np.array_equal(result[-1], src[-1])
        assert np.array_equal(result[:, 0], src[:, 0])
        assert np.array_equal(result[:, -1], src[:, -1])

    def test_zero_amount(self, random_buffer):
        assert apply_sharpen(random_buffer, 0) == random_buffer

    def test_uniform_unchanged(self, uniform_buffer):
        assert apply_sharpen(uniform_buffer, 100) == uniform_buffer

    def test_full_amount_is_kernel(self):
        buf = PixelBuffer.filled(3, 3, (100, 100, 100, 255))
        buf.set_pixel(1, 1, (120, 120, 120, 255))
        # 5 * 120 - 4 * 100 = 200
        assert apply_sharpen(buf, 100).get_pixel(1, 1) == (200, 200, 200, 255)
        # Halfway between 120 and 200
        assert apply_sharpen(buf, 50).get_pixel(1, 1) == (160, 160, 160, 255)
