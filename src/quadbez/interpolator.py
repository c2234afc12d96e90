"""Derive quadratic Bezier control points from points the curve has to pass through."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

from quadbez.common import DegenerateInterpolationError, InvalidGeometryError, Point, PointLike, as_point, distance
from quadbez.curve_model import ControlPoints

# Keeps the middle parameter away from the endpoints, where 2*(1-t)*t vanishes
T_MID_MIN: float = 0.01


###############################################################################
# InterpolationResult
###############################################################################


@dataclass(frozen=True)
class InterpolationResult:
    """Geometry of a quadratic Bezier passing through three points.

    Attributes:
        t_mid: Natural parameter at which the curve passes through the middle point.
        start: First point, becomes P0.
        control: Derived control point P1.
        end: Last point, becomes P2.
    """

    t_mid: float
    start: Point
    control: Point
    end: Point

    def to_control_points(self) -> ControlPoints:
        """ControlPoints record of the interpolating curve."""
        return ControlPoints.from_points(self.start, self.control, self.end)


###############################################################################
# Interpolator
###############################################################################
class Interpolator:
    """Static helpers solving for the control point of a quadratic Bezier."""

    @staticmethod
    def chord_length_parameter(start: Point, middle: Point, end: Point) -> float:
        """Parameter of the middle point from the chord-length heuristic.

        t_mid = |M - A| / (|M - A| + |B - M|), clamped to [T_MID_MIN, 1 - T_MID_MIN].

        This is a choice, not a property of the curve: equal steps in t do not
        give equal steps in arc length, so any t in (0, 1) yields a curve through
        all three points. The chord-length ratio picks the one whose parameter
        best follows the distances between the points.

        Raises:
            DegenerateInterpolationError: If all three points coincide
        """
        d1 = distance(start, middle)
        d2 = distance(middle, end)
        chord = d1 + d2
        if chord <= 0.0 or not math.isfinite(chord):
            raise DegenerateInterpolationError(
                f"Interpolation points {start}, {middle}, {end} coincide (zero chord length)"
            )
        return min(max(d1 / chord, T_MID_MIN), 1.0 - T_MID_MIN)

    @staticmethod
    def solve_control(start: Point, middle: Point, end: Point, t_mid: float) -> Point:
        """Control point P1 such that B(t_mid) = middle for B with P0 = start and P2 = end.

        P1 = (M - (1 - t)^2 * A - t^2 * B) / (2 * (1 - t) * t)
        """
        omt = 1.0 - t_mid
        denominator = 2.0 * omt * t_mid
        if denominator <= 0.0:
            raise ValueError(f"t_mid must be inside (0, 1), got {t_mid}")
        ctrl_x = (middle[0] - omt * omt * start[0] - t_mid * t_mid * end[0]) / denominator
        ctrl_y = (middle[1] - omt * omt * start[1] - t_mid * t_mid * end[1]) / denominator
        return (ctrl_x, ctrl_y)

    @classmethod
    def interpolate(cls, points: Sequence[PointLike]) -> InterpolationResult:
        """Quadratic Bezier through three points (first endpoint, middle point, second endpoint).

        Args:
            points: Sequence of exactly three (x, y) points

        Returns:
            InterpolationResult: the derived geometry including t_mid

        Raises:
            ValueError: If not exactly three points are given
            InvalidGeometryError: If a point is malformed or not finite
            DegenerateInterpolationError: If all three points coincide
        """
        if len(points) != 3:
            raise ValueError(f"Interpolation requires exactly three points, got {len(points)}")

        start, middle, end = (as_point(p) for p in points)
        t_mid = cls.chord_length_parameter(start, middle, end)
        control = cls.solve_control(start, middle, end, t_mid)
        if not (math.isfinite(control[0]) and math.isfinite(control[1])):
            raise InvalidGeometryError(f"Derived control point is not finite: {control}")
        return InterpolationResult(t_mid=t_mid, start=start, control=control, end=end)
