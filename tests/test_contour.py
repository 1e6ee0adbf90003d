"""
Tests for contour curves.
"""

import numpy as np
import pytest

from effectstag import ContourCurve, InvalidParameterError, evaluate_contour
from effectstag.contour import DEFAULT_CONTOUR, evaluate_contour_array


class TestEvaluate:
    """Tests for scalar evaluation."""

    def test_identity_is_exact(self):
        """The default curve maps every 8-bit value to itself."""
        for value in range(256):
            assert evaluate_contour(DEFAULT_CONTOUR, value) == value

    def test_clamps_input(self):
        assert evaluate_contour(DEFAULT_CONTOUR, -10) == 0
        assert evaluate_contour(DEFAULT_CONTOUR, 300) == 255

    def test_peak_curve(self):
        curve = ContourCurve(points=[(0, 0), (128, 255), (255, 0)])
        assert evaluate_contour(curve, 64) == pytest.approx(127.5)
        assert evaluate_contour(curve, 128) == 255

    def test_zero_width_segment(self):
        """A vertical segment returns its first output."""
        assert evaluate_contour([(100, 30), (100, 200)], 100) == 30

    def test_past_last_point(self):
        assert evaluate_contour([(0, 10), (100, 50)], 200) == 50

    def test_empty_curve_passthrough(self):
        assert evaluate_contour([], 42.5) == 42.5


class TestEvaluateArray:
    """Tests for vectorized evaluation."""

    def test_matches_scalar(self):
        curve = ContourCurve(points=[(0, 255), (60, 20), (60, 90), (200, 180), (255, 0)])
        values = np.linspace(-20, 280, 97)
        expected = [evaluate_contour(curve, v) for v in values]
        assert evaluate_contour_array(curve, values) == pytest.approx(expected)

    def test_identity_array(self):
        values = np.arange(256, dtype=np.float64)
        assert np.array_equal(evaluate_contour_array(DEFAULT_CONTOUR, values), values)


class TestCurveModel:
    """Tests for curve validation and serialization."""

    def test_rejects_empty(self):
        with pytest.raises(InvalidParameterError):
            ContourCurve(points=[])

    def test_rejects_decreasing_inputs(self):
        with pytest.raises(InvalidParameterError):
            ContourCurve(points=[(0, 0), (200, 10), (100, 255)])

    def test_is_identity(self):
        assert ContourCurve().is_identity
        assert not ContourCurve(points=[(0, 255), (255, 0)]).is_identity

    def test_to_dict_uses_camel_case(self):
        data = ContourCurve().to_dict()
        assert data['points'] == [{'input': 0.0, 'output': 0.0}, {'input': 255.0, 'output': 255.0}]
        assert data['cornerAtPoint'] == [False, False]
        assert ContourCurve.from_dict(data) == ContourCurve()
