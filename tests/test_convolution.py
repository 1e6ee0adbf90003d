"""
Tests for Gaussian, directional and 3x3 convolution plus bilinear sampling.
"""

import numpy as np
import pytest

from conftest import make_random
from effectstag import (
    InvalidParameterError,
    PixelBuffer,
    bilinear_sample,
    convolve_3x3,
    directional_blur,
    gaussian_kernel_1d,
    separable_gaussian_blur,
)


class TestGaussianKernel:
    """Tests for kernel construction."""

    @pytest.mark.parametrize("radius", list(range(0, 21)))
    def test_sums_to_one(self, radius):
        kernel = gaussian_kernel_1d(radius)
        assert len(kernel) == 2 * radius + 1
        assert kernel.sum() == pytest.approx(1.0)
        assert np.allclose(kernel, kernel[::-1])

    def test_peak_in_center(self):
        kernel = gaussian_kernel_1d(4)
        assert kernel.argmax() == 4

    def test_invalid_radius(self):
        with pytest.raises(InvalidParameterError):
            gaussian_kernel_1d(-1)
        with pytest.raises(InvalidParameterError):
            gaussian_kernel_1d(1.5)


class TestGaussianBlur:
    """Tests for the separable blur."""

    def test_uniform_unchanged(self, uniform_buffer):
        """Edge replication keeps flat images flat, borders included."""
        assert separable_gaussian_blur(uniform_buffer, 3) == uniform_buffer

    def test_radius_zero_copies(self, random_buffer):
        result = separable_gaussian_blur(random_buffer, 0)
        assert result == random_buffer
        assert result.pixels is not random_buffer.pixels

    def test_alpha_untouched(self):
        buf = make_random(opaque=False)
        result = separable_gaussian_blur(buf, 2)
        assert np.array_equal(result.alpha, buf.alpha)

    def test_smooths(self, random_buffer):
        result = separable_gaussian_blur(random_buffer, 2)
        original = random_buffer.pixels[:, :, :3].astype(float)
        blurred = result.pixels[:, :, :3].astype(float)
        assert blurred.std() < original.std()


class TestDirectionalBlur:
    """Tests for motion blur."""

    def test_uniform_unchanged(self, uniform_buffer):
        assert directional_blur(uniform_buffer, 3, 33) == uniform_buffer

    def test_drops_out_of_bounds_samples(self):
        """Samples past the edge are left out of the average."""
        buf = PixelBuffer.filled(5, 1, (0, 0, 0, 255))
        buf.set_pixel(4, 0, (255, 255, 255, 255))
        result = directional_blur(buf, 3, 0)
        # x=4 averages x=1..4 only: 255 / 4 = 63.75
        assert result.get_pixel(4, 0) == (64, 64, 64, 255)
        # x=0 averages x=0..3, none of which is white
        assert result.get_pixel(0, 0) == (0, 0, 0, 255)


class TestConvolve3x3:
    """Tests for 3x3 convolution."""

    def test_identity_kernel(self, random_buffer):
        assert convolve_3x3(random_buffer, [0, 0, 0, 0, 1, 0, 0, 0, 0]) == random_buffer

    def test_border_ring_unchanged(self, random_buffer):
        result = convolve_3x3(random_buffer, [1 / 9] * 9).pixels
        src = random_buffer.pixels
        assert np.array_equal(result[0], src[0])
        assert np.array_equal(result[-1], src[-1])
        assert np.array_equal(result[:, 0], src[:, 0])
        assert np.array_equal(result[:, -1], src[:, -1])

    def test_box_average(self):
        buf = PixelBuffer.filled(3, 3, (0, 0, 0, 255))
        buf.set_pixel(0, 0, (90, 90, 90, 255))
        result = convolve_3x3(buf, [1 / 9] * 9)
        assert result.get_pixel(1, 1) == (10, 10, 10, 255)

    def test_kernel_size(self, random_buffer):
        with pytest.raises(InvalidParameterError):
            convolve_3x3(random_buffer, [1, 2, 3])

    def test_tiny_buffer_copied(self):
        buf = make_random(width=2, height=2)
        assert convolve_3x3(buf, [1] * 9) == buf


class TestBilinearSample:
    """Tests for bilinear sampling."""

    def test_integer_coordinates_exact(self, random_buffer):
        for y in range(random_buffer.height):
            for x in range(random_buffer.width):
                assert bilinear_sample(random_buffer, x, y) == random_buffer.get_pixel(x, y)

    def test_midpoint(self):
        buf = PixelBuffer.filled(2, 1, (0, 0, 0, 255))
        buf.set_pixel(1, 0, (100, 200, 50, 255))
        assert bilinear_sample(buf, 0.5, 0) == pytest.approx((50.0, 100.0, 25.0, 255.0))

    def test_clamps_to_edge(self):
        buf = PixelBuffer.filled(2, 1, (0, 0, 0, 255))
        buf.set_pixel(1, 0, (100, 200, 50, 255))
        assert bilinear_sample(buf, 5.0, 3.0) == (100.0, 200.0, 50.0, 255.0)

    def test_non_finite(self, random_buffer):
        with pytest.raises(InvalidParameterError):
            bilinear_sample(random_buffer, float('nan'), 0)
