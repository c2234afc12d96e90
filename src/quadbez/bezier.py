"""Quadratic Bezier curve with evaluation, interpolation, arc length and inversion queries."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Union

import numpy as np
from numpy.typing import NDArray

from quadbez.arc_length import ArcLengthIndex
from quadbez.common import Axis, Point, PointLike
from quadbez.config import DEFAULT_CONFIG, BezierConfig
from quadbez.curve_model import ControlPoints, CurveModel
from quadbez.interpolator import InterpolationResult, Interpolator
from quadbez.root_finder import RootFinder

logger = logging.getLogger(__name__)


###############################################################################
# PlanarCurve
###############################################################################
class PlanarCurve(ABC):
    """Capability interface of a parametric planar curve on t in [0, 1].

    Implementations provide evaluation, derivatives, arc length and the
    inversion by normalized arc length. Point sampling helpers are derived
    from those.
    """

    @abstractmethod
    def get_x(self, t: float) -> float:
        """x-coordinate at t."""

    @abstractmethod
    def get_y(self, t: float) -> float:
        """y-coordinate at t."""

    @abstractmethod
    def get_x_prime(self, t: float) -> float:
        """dx/dt at t."""

    @abstractmethod
    def get_y_prime(self, t: float) -> float:
        """dy/dt at t."""

    @abstractmethod
    def length_at(self, t: float) -> float:
        """Arc length from 0 to t."""

    @abstractmethod
    def get_t_at_s(self, s: float) -> float:
        """Natural parameter at normalized arc length s."""

    def point_at(self, t: float) -> Point:
        """Position (x, y) at t."""
        return (self.get_x(t), self.get_y(t))

    def tangent_at(self, t: float) -> Point:
        """Derivative vector (dx/dt, dy/dt) at t."""
        return (self.get_x_prime(t), self.get_y_prime(t))

    def points_at_t(self, t_values: Iterable[float]) -> List[Point]:
        """Positions at the given natural parameters."""
        return [self.point_at(t) for t in t_values]

    def points_at_s(self, s_values: Iterable[float]) -> List[Point]:
        """Positions at the given normalized arc lengths."""
        return [self.point_at(self.get_t_at_s(s)) for s in s_values]


###############################################################################
# QuadBezier
###############################################################################
class QuadBezier(PlanarCurve):
    """Quadratic Bezier segment B(t) = (1-t)^2*P0 + 2*(1-t)*t*P1 + t^2*P2.

    The curve owns its control points and a lazily rebuilt arc-length table.
    Mutations (from_object, interpolate, clear) replace the control
    points as a whole and invalidate the table; all other operations are
    queries. Mutations must not run concurrently with queries on the same
    instance.

    Single-point curves (P0 == P1 == P2) are legal: their derivatives are zero
    and every length or inversion query returns 0 without root finding.
    """

    def __init__(
        self,
        control_points: Optional[Union[ControlPoints, Mapping[str, Any]]] = None,
        config: Optional[BezierConfig] = None,
    ):
        """Initialize the curve.

        Args:
            control_points: Initial control points (default: all zero, a single point)
            config: Numerical settings (default: DEFAULT_CONFIG)

        Raises:
            InvalidGeometryError: If the initial control points are invalid
        """
        self._config: BezierConfig = config if config is not None else DEFAULT_CONFIG
        self._model = CurveModel()
        self._arc_length = ArcLengthIndex(self._model, self._config)
        if control_points is not None:
            self._model.from_object(control_points)

    ###########################################################################
    # Control points
    ###########################################################################

    @property
    def config(self) -> BezierConfig:
        """BezierConfig: The numerical settings of this curve."""
        return self._config

    @property
    def control_points(self) -> ControlPoints:
        """ControlPoints: The current control point record."""
        return self._model.control_points

    @property
    def version(self) -> int:
        """int: Mutation counter of the control points."""
        return self._model.version

    @property
    def x0(self) -> float:
        """float: x-coordinate of the start point."""
        return self._model.control_points.x0

    @property
    def y0(self) -> float:
        """float: y-coordinate of the start point."""
        return self._model.control_points.y0

    @property
    def cx(self) -> float:
        """float: x-coordinate of the control point."""
        return self._model.control_points.cx

    @property
    def cy(self) -> float:
        """float: y-coordinate of the control point."""
        return self._model.control_points.cy

    @property
    def cx1(self) -> float:
        """float: x-coordinate of the auxiliary handle."""
        return self._model.control_points.cx1

    @property
    def cy1(self) -> float:
        """float: y-coordinate of the auxiliary handle."""
        return self._model.control_points.cy1

    @property
    def x1(self) -> float:
        """float: x-coordinate of the end point."""
        return self._model.control_points.x1

    @property
    def y1(self) -> float:
        """float: y-coordinate of the end point."""
        return self._model.control_points.y1

    @property
    def is_degenerate(self) -> bool:
        """bool: True if the curve collapses to a single point."""
        return self._model.is_degenerate

    @property
    def is_collinear(self) -> bool:
        """bool: True if all control points lie on one line."""
        return self._model.is_collinear

    def from_object(self, coefs: Union[ControlPoints, Mapping[str, Any]]) -> None:
        """Replace all control coordinates.

        Args:
            coefs: Mapping with keys x0, y0, cx, cy, x1, y1 (cx1, cy1 optional) or ControlPoints

        Raises:
            InvalidGeometryError: If a coordinate is missing, not numeric or not finite;
                the curve keeps its previous control points
        """
        self._model.from_object(coefs)

    def to_object(self) -> dict:
        """Control coordinates as dictionary with keys x0, y0, cx, cy, cx1, cy1, x1, y1."""
        return self._model.to_object()

    def interpolate(self, points: Sequence[PointLike]) -> InterpolationResult:
        """Make the curve pass through three points.

        The first and last point become the endpoints. The control point is
        solved so that the curve hits the middle point at the chord-length
        parameter t_mid (see Interpolator.chord_length_parameter).

        Args:
            points: [first endpoint, middle point, second endpoint]

        Returns:
            InterpolationResult: t_mid and the derived geometry

        Raises:
            ValueError: If not exactly three points are given
            InvalidGeometryError: If a point is malformed or not finite
            DegenerateInterpolationError: If all three points coincide
        """
        result = Interpolator.interpolate(points)
        self._model.replace(result.to_control_points())
        logger.debug("Interpolated control point %s at t_mid=%.6g", result.control, result.t_mid)
        return result

    def clear(self) -> None:
        """Reset all control coordinates to zero."""
        self._model.replace(ControlPoints())

    ###########################################################################
    # Evaluation
    ###########################################################################

    def get_x(self, t: float) -> float:
        return self._model.get_x(t)

    def get_y(self, t: float) -> float:
        return self._model.get_y(t)

    def get_x_prime(self, t: float) -> float:
        return self._model.get_x_prime(t)

    def get_y_prime(self, t: float) -> float:
        return self._model.get_y_prime(t)

    def polygonize(self, steps: int) -> NDArray[np.float64]:
        """Points at uniform natural parameter steps, (steps + 1, 2) array.

        Uses forward differencing: the second difference of a quadratic is
        constant, so every point costs two additions per coordinate.

        Args:
            steps: Number of segments, at least 1

        Returns:
            NDArray[np.float64]: points from P0 to P2
        """
        if steps < 1:
            raise ValueError(f"steps must be >= 1, got {steps}")

        cp = self._model.control_points
        inv_steps = 1.0 / steps
        inv_steps_sq = inv_steps * inv_steps

        # B(t) = P0 + 2*t*(P1-P0) + t^2*(P0-2*P1+P2)
        dx_second = 2.0 * inv_steps_sq * (cp.x0 - 2.0 * cp.cx + cp.x1)
        dy_second = 2.0 * inv_steps_sq * (cp.y0 - 2.0 * cp.cy + cp.y1)

        # First difference at t=0 with midpoint correction, since position is updated before it
        dx_first = 2.0 * inv_steps * (cp.cx - cp.x0) + 0.5 * dx_second
        dy_first = 2.0 * inv_steps * (cp.cy - cp.y0) + 0.5 * dy_second

        result = np.empty((steps + 1, 2), dtype=np.float64)
        x, y = cp.x0, cp.y0
        result[0] = (x, y)
        for i in range(1, steps + 1):
            x += dx_first
            y += dy_first
            dx_first += dx_second
            dy_first += dy_second
            result[i] = (x, y)

        # Endpoint exact despite accumulated rounding
        result[steps] = (cp.x1, cp.y1)
        return result

    def polygonize_by_length(self, steps: int) -> NDArray[np.float64]:
        """Points at uniform normalized arc-length steps, (steps + 1, 2) array."""
        if steps < 1:
            raise ValueError(f"steps must be >= 1, got {steps}")
        s_values = np.linspace(0.0, 1.0, steps + 1, dtype=np.float64)
        return np.array(self.points_at_s(s_values), dtype=np.float64).reshape(steps + 1, 2)

    ###########################################################################
    # Arc length
    ###########################################################################

    def length_at(self, t: float) -> float:
        """Arc length from 0 to t, t clamped onto [0, 1]."""
        return self._arc_length.length_at(t)

    def total_length(self) -> float:
        """Arc length of the whole curve."""
        return self._arc_length.total_length()

    def s_at_t(self, t: float) -> float:
        """Normalized arc length in [0, 1] at natural parameter t."""
        return self._arc_length.s_at_t(t)

    def get_t_at_s(self, s: float) -> float:
        """Natural parameter at normalized arc length s.

        Raises:
            OutOfRangeError: If s is not a finite value in [0, 1]
        """
        return self._arc_length.get_t_at_s(s)

    ###########################################################################
    # Coordinate inversion
    ###########################################################################

    def _t_at(self, axis: Axis, value: float) -> List[float]:
        if self._model.is_degenerate:
            start = self.x0 if axis == "x" else self.y0
            return [0.0] if abs(value - start) <= 1.0e-12 * max(abs(start), 1.0) else []
        a, b, c = self._model.coefficients(axis)
        return RootFinder.solve_quadratic(a, b, c - value)

    def get_t_at_x(self, x: float) -> List[float]:
        """Parameters in [0, 1] where the curve reaches x, ascending (0, 1 or 2 values)."""
        return self._t_at("x", x)

    def get_t_at_y(self, y: float) -> List[float]:
        """Parameters in [0, 1] where the curve reaches y, ascending (0, 1 or 2 values)."""
        return self._t_at("y", y)

    def get_y_at_x(self, x: float) -> List[float]:
        """y-coordinates of the curve points with the given x (0, 1 or 2 values)."""
        return [self.get_y(t) for t in self.get_t_at_x(x)]

    def get_x_at_y(self, y: float) -> List[float]:
        """x-coordinates of the curve points with the given y (0, 1 or 2 values)."""
        return [self.get_x(t) for t in self.get_t_at_y(y)]

    def __str__(self):
        """Returns a string representation of the QuadBezier instance."""
        cp = self._model.control_points
        return f"QuadBezier(P0=({cp.x0}, {cp.y0}), P1=({cp.cx}, {cp.cy}), P2=({cp.x1}, {cp.y1}))"
