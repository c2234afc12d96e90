"""Central module containing types and error definitions for quadratic Bezier handling."""

from __future__ import annotations

import math
from typing import Any, Literal, Mapping, Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray

###############################################################################
# Types
###############################################################################


Point = Tuple[float, float]  # (x, y)

PointLike = Union[Sequence[float], NDArray[np.float64], Mapping[str, float]]  # (x, y) pair or {"x": ..., "y": ...}

Axis = Literal["x", "y"]  # coordinate axis of a query


###############################################################################
# Errors
###############################################################################


class BezierError(Exception):
    """Base exception for quadratic Bezier errors."""


class InvalidGeometryError(BezierError):
    """Raised when control points are missing, not numeric or not finite."""


class DegenerateInterpolationError(BezierError):
    """Raised when three interpolation points have a zero chord-length sum."""


class OutOfRangeError(BezierError):
    """Raised when a normalized arc length is outside of [0, 1]."""


###############################################################################
# Functions
###############################################################################


def as_point(value: Any) -> Point:
    """Convert an (x, y) pair or an {"x": ..., "y": ...} record into a tuple of finite floats.

    Args:
        value: Sequence or array with at least two numeric entries, or mapping with keys x and y

    Returns:
        Point: the point as (x, y)

    Raises:
        InvalidGeometryError: If the value is not an (x, y) pair or not finite
    """
    try:
        if isinstance(value, Mapping):
            x, y = float(value["x"]), float(value["y"])
        else:
            x, y = float(value[0]), float(value[1])
    except (TypeError, ValueError, IndexError, KeyError) as e:
        raise InvalidGeometryError(f"Expected an (x, y) point, got {value!r}") from e

    if not (math.isfinite(x) and math.isfinite(y)):
        raise InvalidGeometryError(f"Point coordinates must be finite, got ({x}, {y})")
    return (x, y)


def distance(p: Point, q: Point) -> float:
    """Euclidean distance between two points."""
    return math.hypot(q[0] - p[0], q[1] - p[1])
