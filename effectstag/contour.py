"""Contour curves.

A contour is a piecewise-linear response curve over the 0-255 range that
layer styles use to reshape an effect's intensity falloff.

Usage:
    from effectstag.contour import ContourCurve, evaluate_contour

    curve = ContourCurve(points=[(0, 0), (128, 255), (255, 0)])
    evaluate_contour(curve, 64)   # 127.5
"""
from typing import Any, List, Sequence, Tuple, Union

import numpy as np
from pydantic import Field, field_validator, model_validator

from .settings import SettingsModel


class ContourPoint(SettingsModel):
    """Single control point, ``input`` and ``output`` in 0-255."""
    input: float
    output: float


class ContourCurve(SettingsModel):
    """Ordered, non-empty list of control points with non-decreasing input."""

    points: List[ContourPoint] = Field(
        default_factory=lambda: [ContourPoint(input=0, output=0), ContourPoint(input=255, output=255)]
    )
    # Kept for round-tripping editor data; evaluation is always linear.
    corner_at_point: List[bool] = Field(default_factory=lambda: [False, False])

    @field_validator('points', mode='before')
    @classmethod
    def _accept_pairs(cls, value: Any) -> Any:
        if isinstance(value, (list, tuple)):
            return [
                {'input': p[0], 'output': p[1]} if isinstance(p, (list, tuple)) else p
                for p in value
            ]
        return value

    @model_validator(mode='after')
    def _check_points(self) -> 'ContourCurve':
        if not self.points:
            raise ValueError("contour needs at least one point")
        inputs = [p.input for p in self.points]
        if any(b < a for a, b in zip(inputs, inputs[1:])):
            raise ValueError("contour inputs must be non-decreasing")
        return self

    @property
    def is_identity(self) -> bool:
        return [(p.input, p.output) for p in self.points] == [(0, 0), (255, 255)]


DEFAULT_CONTOUR = ContourCurve()

CurveLike = Union[ContourCurve, Sequence[Tuple[float, float]]]


def _as_pairs(curve: CurveLike) -> List[Tuple[float, float]]:
    if isinstance(curve, ContourCurve):
        return [(p.input, p.output) for p in curve.points]
    return [(float(p[0]), float(p[1])) for p in curve]


def evaluate_contour(curve: CurveLike, value: float) -> float:
    """
    Map ``value`` through the curve.

    The value is clamped to 0-255 and interpolated inside the first segment
    that contains it. Zero-width segments return their first output, values
    past the last point return the last output, and an empty curve returns
    the value unchanged.
    """
    points = _as_pairs(curve)
    if not points:
        return value

    value = max(0.0, min(255.0, float(value)))

    for (in1, out1), (in2, out2) in zip(points, points[1:]):
        if in1 <= value <= in2:
            span = in2 - in1
            if span == 0:
                return out1
            return out1 + (out2 - out1) * (value - in1) / span

    return points[-1][1]


def evaluate_contour_array(curve: CurveLike, values: np.ndarray) -> np.ndarray:
    """Vectorized ``evaluate_contour``."""
    points = _as_pairs(curve)
    values = np.asarray(values, dtype=np.float64)
    if not points:
        return values.copy()

    clamped = np.clip(values, 0.0, 255.0)
    result = np.full(clamped.shape, points[-1][1], dtype=np.float64)
    resolved = np.zeros(clamped.shape, dtype=bool)

    # First matching segment wins, like the scalar scan.
    for (in1, out1), (in2, out2) in zip(points, points[1:]):
        inside = ~resolved & (clamped >= in1) & (clamped <= in2)
        if not inside.any():
            continue
        span = in2 - in1
        if span == 0:
            result[inside] = out1
        else:
            result[inside] = out1 + (out2 - out1) * (clamped[inside] - in1) / span
        resolved |= inside

    return result


__all__ = [
    "ContourPoint",
    "ContourCurve",
    "DEFAULT_CONTOUR",
    "evaluate_contour",
    "evaluate_contour_array",
]
