"""
Tests for histogram analysis, auto levels/contrast and color info.
"""

import numpy as np
import pytest
from PIL import Image, ImageDraw

from conftest import make_random
from effectstag import (
    InvalidParameterError,
    PixelBuffer,
    auto_contrast,
    auto_levels,
    build_histogram,
    compute_statistics,
    get_color_info,
    render_histogram,
)


@pytest.fixture
def gray_ramp():
    """Opaque grayscale ramp from 40 to 190."""
    pixels = np.zeros((4, 16, 4), dtype=np.uint8)
    values = np.linspace(40, 190, 16).astype(np.uint8)
    pixels[:, :, 0] = values
    pixels[:, :, 1] = values
    pixels[:, :, 2] = values
    pixels[:, :, 3] = 255
    return PixelBuffer(pixels)


class TestBuildHistogram:
    """Tests for histogram counting."""

    def test_channel_sums(self):
        buf = make_random(width=13, height=7, opaque=False)
        hist = build_histogram(buf)
        for channel in (hist.red, hist.green, hist.blue, hist.luminosity):
            assert len(channel) == 256
            assert channel.sum() == 13 * 7
        assert hist.total_pixels == 13 * 7

    def test_white_luminosity(self):
        hist = build_histogram(PixelBuffer.filled(3, 3, (255, 255, 255, 255)))
        assert hist.luminosity[255] == 9
        assert hist.statistics.luminosity.highlights_clipped == 100.0

    def test_counts_read_only(self, random_buffer):
        hist = build_histogram(random_buffer)
        with pytest.raises(ValueError):
            hist.red[0] = 1


class TestStatistics:
    """Tests for per-channel statistics."""

    def test_two_levels(self):
        bins = [0] * 256
        bins[10] = 2
        bins[20] = 2
        stats = compute_statistics(bins, 4)
        assert stats.mean == 15.0
        assert stats.std_dev == 5.0
        assert stats.median == 10
        assert stats.min == 10
        assert stats.max == 20
        assert stats.pixel_count == 4
        assert stats.shadows_clipped == 0.0

    def test_clipping_relative_to_total(self):
        bins = [0] * 256
        bins[0] = 5
        bins[255] = 5
        stats = compute_statistics(bins, 10)
        assert stats.shadows_clipped == 50.0
        assert stats.highlights_clipped == 50.0

    def test_empty_channel(self):
        stats = compute_statistics([0] * 256, 10)
        assert stats.mean == 0.0
        assert stats.pixel_count == 0

    def test_wrong_bin_count(self):
        with pytest.raises(InvalidParameterError):
            compute_statistics([1] * 10, 10)


class TestAutoLevels:
    """Tests for per-channel auto levels."""

    def test_stretches_channel(self):
        buf = PixelBuffer.filled(3, 1, (50, 0, 0, 77))
        buf.set_pixel(1, 0, (125, 0, 0, 77))
        buf.set_pixel(2, 0, (200, 0, 0, 77))
        result = auto_levels(buf, clip_percent=0)
        assert [result.get_pixel(x, 0)[0] for x in range(3)] == [0, 128, 255]
        assert np.all(result.alpha == 77)

    def test_flat_channel_collapses_to_black(self):
        """A zero-width range is remapped with width 1."""
        buf = PixelBuffer.filled(4, 4, (100, 100, 100, 255))
        assert auto_levels(buf).get_pixel(2, 2) == (0, 0, 0, 255)

    def test_crossed_clip_points_invert(self):
        """Clipping half the pixels from each end swaps black and white."""
        buf = PixelBuffer.filled(2, 1, (0, 0, 0, 255))
        buf.set_pixel(1, 0, (255, 0, 0, 255))
        result = auto_levels(buf, clip_percent=50)
        assert result.get_pixel(0, 0) == (255, 0, 0, 255)
        assert result.get_pixel(1, 0) == (0, 0, 0, 255)

    def test_clip_percent_clamped(self, random_buffer):
        assert auto_levels(random_buffer, -5) == auto_levels(random_buffer, 0)


class TestAutoContrast:
    """Tests for luminosity-based auto contrast."""

    def test_stretches_to_full_range(self, gray_ramp):
        result = auto_contrast(gray_ramp)
        assert result.pixels[:, :, 0].min() == 0
        assert result.pixels[:, :, 0].max() == 255

    def test_idempotent(self, gray_ramp):
        once = auto_contrast(gray_ramp)
        twice = auto_contrast(once)
        diff = np.abs(once.pixels.astype(int) - twice.pixels.astype(int))
        assert diff.max() <= 1

    def test_uniform_gray_collapses_to_black(self):
        buf = PixelBuffer.filled(4, 4, (100, 100, 100, 255))
        assert auto_contrast(buf).get_pixel(1, 3) == (0, 0, 0, 255)

    def test_uniform_color_splits_around_luminosity(self, uniform_buffer):
        """Channels below the luminosity go to 0, those above it to 255."""
        assert auto_contrast(uniform_buffer).get_pixel(0, 0) == (0, 255, 255, 255)


class TestColorInfo:
    """Tests for color descriptions."""

    def test_black(self):
        info = get_color_info(0, 0, 0)
        assert info.hex == '#000000'
        assert info.hsb == (0, 0, 0)
        assert info.cmyk == (0, 0, 0, 100)
        assert info.lab == (0, 0, 0)

    def test_red(self):
        info = get_color_info(255, 0, 0)
        assert info.rgb == (255, 0, 0)
        assert info.hsb == (0, 100, 100)
        assert info.hsl == (0, 100, 50)
        assert info.lab == (53, 80, 67)
        assert info.cmyk == (0, 100, 100, 0)
        assert info.hex == '#ff0000'

    def test_out_of_range(self):
        with pytest.raises(InvalidParameterError):
            get_color_info(0, 300, 0)


class TestRenderHistogram:
    """Tests for drawing the histogram preview."""

    @staticmethod
    def _canvas():
        image = Image.new('RGB', (256, 100), 'white')
        return image, ImageDraw.Draw(image, 'RGBA')

    def test_draws_bar(self):
        image, draw = self._canvas()
        bins = [0] * 256
        bins[128] = 10
        render_histogram(draw, bins, '#ff0000', 256, 100)
        r, g, b = image.getpixel((128, 99))
        assert r == 255
        assert g < 255 and b < 255
        assert image.getpixel((128, 0))[1] < 255
        assert image.getpixel((0, 99)) == (255, 255, 255)

    def test_empty_bins_draw_nothing(self):
        image, draw = self._canvas()
        render_histogram(draw, [0] * 256, '#ff0000', 256, 100)
        assert image.getcolors() == [(256 * 100, (255, 255, 255))]

    def test_logarithmic_lifts_small_bins(self):
        bins = [0] * 256
        bins[10] = 1
        bins[20] = 1000

        linear, draw = self._canvas()
        render_histogram(draw, bins, (0, 0, 255), 256, 100)
        logarithmic, draw = self._canvas()
        render_histogram(draw, bins, (0, 0, 255), 256, 100, logarithmic=True)

        assert linear.getpixel((10, 95)) == (255, 255, 255)
        assert logarithmic.getpixel((10, 95)) != (255, 255, 255)
