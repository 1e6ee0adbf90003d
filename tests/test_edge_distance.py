"""
Tests for edge distance estimation.
"""

import math

import numpy as np
import pytest

from conftest import make_shape
from effectstag import InvalidParameterError, PixelBuffer, edge_distance
from effectstag.edge_distance import edge_distance_map


class TestEdgeDistance:
    """Tests for the per-pixel search."""

    def test_transparent_pixel_returns_max(self, shape_buffer):
        assert edge_distance(shape_buffer, 0, 0, 4) == 4

    def test_adjacent_to_transparent(self, shape_buffer):
        assert edge_distance(shape_buffer, 5, 9, 4) == 1.0

    def test_diagonal(self):
        buf = PixelBuffer.filled(3, 3, (0, 0, 0, 255))
        buf.set_pixel(0, 0, (0, 0, 0, 0))
        assert edge_distance(buf, 1, 1, 3) == pytest.approx(math.sqrt(2))

    def test_nothing_within_radius(self, shape_buffer):
        """Interior pixels far from the edge report max_radius."""
        assert edge_distance(shape_buffer, 9, 9, 3) == 3

    def test_fractional_radius_caps(self, shape_buffer):
        assert edge_distance(shape_buffer, 7, 9, 2.5) == 2.5

    def test_coverage_search(self, shape_buffer):
        """Searching for covered pixels from outside the shape."""
        assert edge_distance(shape_buffer, 4, 9, 5, from_transparent_edge=False) == 1.0
        assert edge_distance(shape_buffer, 9, 9, 5, from_transparent_edge=False) == 5

    def test_outside_buffer(self, shape_buffer):
        with pytest.raises(InvalidParameterError):
            edge_distance(shape_buffer, 20, 0, 3)

    def test_negative_radius(self, shape_buffer):
        with pytest.raises(InvalidParameterError):
            edge_distance(shape_buffer, 9, 9, -1)


class TestEdgeDistanceMap:
    """Tests for the whole-plane variant."""

    @pytest.mark.parametrize("radius", [1, 2.5, 4])
    def test_matches_pointwise(self, radius):
        buf = make_shape(size=16, margin=3)
        buf.set_pixel(8, 8, (0, 0, 0, 0))
        dist = edge_distance_map(buf.alpha, radius)
        for y in range(buf.height):
            for x in range(buf.width):
                assert dist[y, x] == pytest.approx(edge_distance(buf, x, y, radius))

    def test_fully_opaque(self):
        alpha = np.full((6, 6), 255, dtype=np.uint8)
        assert np.all(edge_distance_map(alpha, 3) == 3)

    def test_radius_larger_than_plane(self):
        """Radii past the plane size only cost the plane's own offsets."""
        buf = PixelBuffer.filled(5, 4, (0, 0, 0, 255))
        buf.set_pixel(0, 0, (0, 0, 0, 0))
        dist = edge_distance_map(buf.alpha, 500)
        assert dist[0, 0] == 500
        assert dist[3, 4] == pytest.approx(5.0)
        for y in range(4):
            for x in range(5):
                assert dist[y, x] == pytest.approx(edge_distance(buf, x, y, 500))

    def test_empty_plane(self):
        assert edge_distance_map(np.zeros((0, 3), dtype=np.uint8), 4).shape == (0, 3)
