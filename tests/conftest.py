"""Shared fixtures for effectstag tests."""

import numpy as np
import pytest

from effectstag import PixelBuffer


def make_shape(size=20, margin=5, rgba=(128, 128, 128, 255)):
    """Transparent square buffer with an opaque square inset by ``margin``."""
    buf = PixelBuffer.blank(size, size)
    buf.pixels[margin:size - margin, margin:size - margin] = rgba
    return buf


def make_random(width=16, height=12, seed=7, opaque=True):
    """Buffer of random pixels; fully opaque unless ``opaque`` is False."""
    rng = np.random.default_rng(seed)
    pixels = rng.integers(0, 256, size=(height, width, 4), dtype=np.uint8)
    if opaque:
        pixels[:, :, 3] = 255
    return PixelBuffer(pixels)


@pytest.fixture
def rng():
    """Seeded random generator."""
    return np.random.default_rng(1234)


@pytest.fixture
def shape_buffer():
    """20x20 buffer with an opaque gray 10x10 square in the middle."""
    return make_shape()


@pytest.fixture
def random_buffer():
    """16x12 opaque buffer of random colors."""
    return make_random()


@pytest.fixture
def uniform_buffer():
    """12x10 buffer filled with a single opaque color."""
    return PixelBuffer.filled(12, 10, (90, 160, 210, 255))
