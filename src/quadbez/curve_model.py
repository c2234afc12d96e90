"""Control-point record and raw evaluation of a quadratic Bezier segment."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple, Union

import numpy as np
from numpy.typing import NDArray

from quadbez.common import Axis, InvalidGeometryError, Point
from quadbez.root_finder import RootFinder

logger = logging.getLogger(__name__)

# Points closer than this (relative to the curve size) count as coincident
_COINCIDENT_EPS: float = 1.0e-12

_REQUIRED_KEYS: Tuple[str, ...] = ("x0", "y0", "cx", "cy", "x1", "y1")


###############################################################################
# ControlPoints
###############################################################################


@dataclass(frozen=True)
class ControlPoints:
    """Control points of one quadratic Bezier segment.

    The curve starts at P0 = (x0, y0), is pulled towards P1 = (cx, cy) and ends
    at P2 = (x1, y1). (cx1, cy1) is the second handle of the two-handle record
    layout shared with higher degree curves; for a quadratic it duplicates
    (cx, cy) unless given explicitly.

    Attributes:
        x0 (float): x-coordinate of the start point.
        y0 (float): y-coordinate of the start point.
        cx (float): x-coordinate of the control point.
        cy (float): y-coordinate of the control point.
        cx1 (float): x-coordinate of the auxiliary handle.
        cy1 (float): y-coordinate of the auxiliary handle.
        x1 (float): x-coordinate of the end point.
        y1 (float): y-coordinate of the end point.
    """

    x0: float = 0.0
    y0: float = 0.0
    cx: float = 0.0
    cy: float = 0.0
    cx1: float = 0.0
    cy1: float = 0.0
    x1: float = 0.0
    y1: float = 0.0

    def __post_init__(self):
        for name in ("x0", "y0", "cx", "cy", "cx1", "cy1", "x1", "y1"):
            value = getattr(self, name)
            try:
                value = float(value)
            except (TypeError, ValueError) as e:
                raise InvalidGeometryError(f"Control coordinate {name} is not numeric: {value!r}") from e
            if not math.isfinite(value):
                raise InvalidGeometryError(f"Control coordinate {name} must be finite, got {value}")
            object.__setattr__(self, name, value)

    @classmethod
    def from_points(cls, p0: Point, p1: Point, p2: Point) -> ControlPoints:
        """Create ControlPoints from start, control and end point."""
        return cls(
            x0=p0[0],
            y0=p0[1],
            cx=p1[0],
            cy=p1[1],
            cx1=p1[0],
            cy1=p1[1],
            x1=p2[0],
            y1=p2[1],
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ControlPoints:
        """Create ControlPoints from a mapping with keys x0, y0, cx, cy, x1, y1 (cx1, cy1 optional).

        Raises:
            InvalidGeometryError: If a required key is missing or a value is not a finite number
        """
        missing = [key for key in _REQUIRED_KEYS if key not in data]
        if missing:
            raise InvalidGeometryError(f"Missing control coordinates: {', '.join(missing)}")
        return cls(
            x0=data["x0"],
            y0=data["y0"],
            cx=data["cx"],
            cy=data["cy"],
            cx1=data.get("cx1", data["cx"]),
            cy1=data.get("cy1", data["cy"]),
            x1=data["x1"],
            y1=data["y1"],
        )

    def to_dict(self) -> dict:
        """Convert the control points to a dictionary."""
        return {
            "x0": self.x0,
            "y0": self.y0,
            "cx": self.cx,
            "cy": self.cy,
            "cx1": self.cx1,
            "cy1": self.cy1,
            "x1": self.x1,
            "y1": self.y1,
        }

    @property
    def points(self) -> Tuple[Point, Point, Point]:
        """Start, control and end point as ((x0, y0), (cx, cy), (x1, y1))."""
        return (self.x0, self.y0), (self.cx, self.cy), (self.x1, self.y1)


###############################################################################
# CurveModel
###############################################################################
class CurveModel:
    """Owner of the control points of one quadratic Bezier segment.

    The record is only ever replaced as a whole. Every replacement increments
    `version`, which consumers of derived data (arc-length tables) compare
    against to detect stale caches.
    """

    def __init__(self, control_points: Union[ControlPoints, None] = None):
        self._control_points: ControlPoints = control_points if control_points is not None else ControlPoints()
        self._version: int = 0

    @property
    def control_points(self) -> ControlPoints:
        """ControlPoints: The current control point record."""
        return self._control_points

    @property
    def version(self) -> int:
        """int: Mutation counter, incremented by every replacement of the control points."""
        return self._version

    def replace(self, control_points: ControlPoints) -> None:
        """Atomically replace the control point record and bump the version."""
        self._control_points = control_points
        self._version += 1
        logger.debug("Control points replaced (version %d): %s", self._version, control_points)

    def from_object(self, coefs: Union[ControlPoints, Mapping[str, Any]]) -> None:
        """Replace all control coordinates.

        Args:
            coefs: ControlPoints or mapping with keys x0, y0, cx, cy, x1, y1 (cx1, cy1 optional)

        Raises:
            InvalidGeometryError: If a coordinate is missing, not numeric or not finite.
                The previous control points are kept in that case.
        """
        if isinstance(coefs, ControlPoints):
            control_points = coefs
        elif isinstance(coefs, Mapping):
            control_points = ControlPoints.from_dict(coefs)
        else:
            raise InvalidGeometryError(f"Expected a mapping of control coordinates, got {type(coefs).__name__}")
        self.replace(control_points)

    def to_object(self) -> dict:
        """Return the control coordinates as a dictionary."""
        return self._control_points.to_dict()

    ###########################################################################
    # Evaluation
    ###########################################################################

    def get_x(self, t: float) -> float:
        """x-coordinate at t; t outside of [0, 1] extrapolates."""
        cp = self._control_points
        omt = 1.0 - t
        return omt * omt * cp.x0 + 2.0 * omt * t * cp.cx + t * t * cp.x1

    def get_y(self, t: float) -> float:
        """y-coordinate at t; t outside of [0, 1] extrapolates."""
        cp = self._control_points
        omt = 1.0 - t
        return omt * omt * cp.y0 + 2.0 * omt * t * cp.cy + t * t * cp.y1

    def get_x_prime(self, t: float) -> float:
        """dx/dt at t."""
        cp = self._control_points
        return 2.0 * (1.0 - t) * (cp.cx - cp.x0) + 2.0 * t * (cp.x1 - cp.cx)

    def get_y_prime(self, t: float) -> float:
        """dy/dt at t."""
        cp = self._control_points
        return 2.0 * (1.0 - t) * (cp.cy - cp.y0) + 2.0 * t * (cp.y1 - cp.cy)

    def speed(self, t: Union[float, NDArray[np.float64]]) -> NDArray[np.float64]:
        """Magnitude of the derivative |B'(t)|, vectorized over numpy arrays.

        This is the arc-length integrand.
        """
        cp = self._control_points
        t = np.asarray(t, dtype=np.float64)
        omt = 1.0 - t
        dx = 2.0 * omt * (cp.cx - cp.x0) + 2.0 * t * (cp.x1 - cp.cx)
        dy = 2.0 * omt * (cp.cy - cp.y0) + 2.0 * t * (cp.y1 - cp.cy)
        return np.hypot(dx, dy)

    def coefficients(self, axis: Axis) -> Tuple[float, float, float]:
        """Power-basis coefficients (a, b, c) of one coordinate: a*t^2 + b*t + c.

        Expanding B(t) = P0 + 2t(P1 - P0) + t^2(P0 - 2P1 + P2).

        Args:
            axis: "x" or "y"

        Returns:
            Tuple[float, float, float]: the coefficients (a, b, c)
        """
        cp = self._control_points
        if axis == "x":
            p0, p1, p2 = cp.x0, cp.cx, cp.x1
        elif axis == "y":
            p0, p1, p2 = cp.y0, cp.cy, cp.y1
        else:
            raise ValueError(f"axis must be 'x' or 'y', got {axis!r}")
        return (p0 - 2.0 * p1 + p2, 2.0 * (p1 - p0), p0)

    ###########################################################################
    # Degeneracy
    ###########################################################################

    def _tolerance(self) -> float:
        cp = self._control_points
        scale = max(abs(cp.x0), abs(cp.y0), abs(cp.cx), abs(cp.cy), abs(cp.x1), abs(cp.y1), 1.0)
        return _COINCIDENT_EPS * scale

    @property
    def is_degenerate(self) -> bool:
        """bool: True if start, control and end point coincide (the curve is a single point)."""
        cp = self._control_points
        tol = self._tolerance()
        return (
            abs(cp.cx - cp.x0) <= tol
            and abs(cp.cy - cp.y0) <= tol
            and abs(cp.x1 - cp.x0) <= tol
            and abs(cp.y1 - cp.y0) <= tol
        )

    def cusp_parameter(self) -> Optional[float]:
        """Parameter in (0, 1) where the curve stops and turns back, or None.

        Only a straight curve whose control point lies beyond an endpoint has
        one. There B'(t) vanishes on both axes and |B'(t)| has a kink.
        """
        if self.is_degenerate or not self.is_collinear:
            return None
        tol = self._tolerance()
        for axis in ("x", "y"):
            a, b, _ = self.coefficients(axis)
            # d/dt (a*t^2 + b*t + c) = 2*a*t + b
            for t in RootFinder.solve_linear(2.0 * a, b):
                if 0.0 < t < 1.0 and float(self.speed(t)) <= 4.0 * tol:
                    return t
        return None

    @property
    def is_collinear(self) -> bool:
        """bool: True if start, control and end point lie on one line (includes the degenerate case)."""
        cp = self._control_points
        cross = (cp.cx - cp.x0) * (cp.y1 - cp.y0) - (cp.cy - cp.y0) * (cp.x1 - cp.x0)
        scale = self._tolerance() / _COINCIDENT_EPS
        return abs(cross) <= _COINCIDENT_EPS * scale * scale
