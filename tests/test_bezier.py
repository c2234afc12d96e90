"""Test module for the QuadBezier facade in quadbez.bezier

The tests are run using pytest.
These tests cover the public operations used by rendering collaborators:
evaluation, interpolation, arc length and coordinate inversion.
"""

import math

import numpy as np
import pytest

from quadbez.bezier import PlanarCurve, QuadBezier
from quadbez.common import DegenerateInterpolationError, InvalidGeometryError, OutOfRangeError
from quadbez.config import BezierConfig

ARC = {"x0": 0.0, "y0": 0.0, "cx": 50.0, "cy": 100.0, "x1": 100.0, "y1": 0.0}

# Opens to the right: x(t) = 200*t*(1 - t) peaks at x = 50 for t = 0.5, y(t) = 100*t
SIDEWAYS = {"x0": 0.0, "y0": 0.0, "cx": 100.0, "cy": 50.0, "x1": 0.0, "y1": 100.0}

ARC_LENGTH = 0.5 * math.sqrt(50000.0) + 25.0 * math.log(2.0 + math.sqrt(5.0))


###############################################################################
# Construction and Control Point Tests
###############################################################################


class TestQuadBezierControlPoints:
    """Test construction and control point access."""

    def test_default_is_single_point(self):
        """A new curve is the degenerate point at the origin."""
        curve = QuadBezier()
        assert curve.is_degenerate
        assert curve.to_object()["x1"] == 0.0
        assert curve.version == 0

    def test_interface(self):
        """QuadBezier implements the PlanarCurve capability interface."""
        assert isinstance(QuadBezier(), PlanarCurve)
        with pytest.raises(TypeError):
            PlanarCurve()  # pylint: disable=abstract-class-instantiated

    def test_from_object_and_properties(self):
        """Control coordinates are readable as properties."""
        curve = QuadBezier(ARC)
        assert (curve.x0, curve.y0, curve.cx, curve.cy, curve.x1, curve.y1) == (0.0, 0.0, 50.0, 100.0, 100.0, 0.0)
        assert (curve.cx1, curve.cy1) == (50.0, 100.0)
        assert curve.control_points.points[1] == (50.0, 100.0)

    def test_to_object(self):
        """to_object returns all eight coordinates."""
        curve = QuadBezier()
        curve.from_object(ARC)
        assert curve.to_object() == {**ARC, "cx1": 50.0, "cy1": 100.0}

    def test_invalid_geometry_keeps_previous_state(self):
        """A rejected mutation changes nothing."""
        curve = QuadBezier(ARC)
        length = curve.total_length()
        with pytest.raises(InvalidGeometryError):
            curve.from_object({**ARC, "cx": math.inf})
        assert curve.to_object()["cx"] == 50.0
        assert curve.total_length() == length

    def test_clear(self):
        """clear resets to the zero point curve."""
        curve = QuadBezier(ARC)
        curve.clear()
        assert curve.is_degenerate
        assert curve.total_length() == 0.0

    def test_custom_config(self):
        """A configuration is kept by the curve."""
        config = BezierConfig(table_resolution=20)
        assert QuadBezier(ARC, config=config).config is config

    def test_str(self):
        """String representation names the three points."""
        assert str(QuadBezier(ARC)) == "QuadBezier(P0=(0.0, 0.0), P1=(50.0, 100.0), P2=(100.0, 0.0))"


###############################################################################
# Evaluation Tests
###############################################################################


class TestQuadBezierEvaluation:
    """Test position and tangent evaluation."""

    @pytest.mark.parametrize(
        "coefs",
        [
            ARC,
            SIDEWAYS,
            {"x0": -3.5, "y0": 2.25, "cx": 17.0, "cy": -40.0, "x1": 1e4, "y1": 1e-3},
        ],
    )
    def test_endpoints(self, coefs):
        """B(0) = P0 and B(1) = P2."""
        curve = QuadBezier(coefs)
        assert curve.get_x(0.0) == coefs["x0"]
        assert curve.get_y(0.0) == coefs["y0"]
        assert curve.get_x(1.0) == coefs["x1"]
        assert curve.get_y(1.0) == coefs["y1"]

    def test_arc_midpoint(self):
        """Symmetric arc peaks at (50, 50)."""
        curve = QuadBezier(ARC)
        assert curve.get_x(0.5) == pytest.approx(50.0)
        assert curve.get_y(0.5) == pytest.approx(50.0)
        assert curve.point_at(0.5) == pytest.approx((50.0, 50.0))

    def test_tangent(self):
        """Tangent at the apex is horizontal."""
        curve = QuadBezier(ARC)
        assert curve.tangent_at(0.5) == pytest.approx((100.0, 0.0))
        assert curve.get_x_prime(0.0) == pytest.approx(100.0)
        assert curve.get_y_prime(0.0) == pytest.approx(200.0)

    def test_points_at_t(self):
        """Evaluation at several parameters."""
        curve = QuadBezier(ARC)
        points = curve.points_at_t([0.2, 0.4, 0.6, 0.8])
        assert len(points) == 4
        assert points[0] == pytest.approx((20.0, 32.0))
        assert points[3] == pytest.approx((80.0, 32.0))

    def test_polygonize(self):
        """Forward differencing matches direct evaluation."""
        curve = QuadBezier({"x0": 1.0, "y0": -2.0, "cx": 7.0, "cy": 9.0, "x1": 12.0, "y1": 3.0})
        points = curve.polygonize(10)
        assert points.shape == (11, 2)
        expected = np.array(curve.points_at_t(np.linspace(0.0, 1.0, 11)))
        assert np.allclose(points, expected, atol=1e-12)
        assert tuple(points[-1]) == (12.0, 3.0)

    def test_polygonize_invalid_steps(self):
        """At least one step is required."""
        with pytest.raises(ValueError):
            QuadBezier(ARC).polygonize(0)


###############################################################################
# Interpolation Tests
###############################################################################


class TestQuadBezierInterpolate:
    """Test three-point interpolation through the facade."""

    def test_passes_through_three_points(self):
        """Endpoints kept, middle point hit at the chord-length parameter."""
        curve = QuadBezier()
        a, m, b = (0.0, 0.0), (30.0, 40.0), (100.0, 0.0)

        result = curve.interpolate([a, m, b])

        t_mid = 50.0 / (50.0 + math.hypot(b[0] - m[0], b[1] - m[1]))
        assert result.t_mid == pytest.approx(t_mid)
        assert curve.get_x(t_mid) == pytest.approx(30.0, abs=1e-6)
        assert curve.get_y(t_mid) == pytest.approx(40.0, abs=1e-6)
        assert (curve.x0, curve.y0, curve.x1, curve.y1) == (0.0, 0.0, 100.0, 0.0)
        assert (curve.cx, curve.cy) == pytest.approx(result.control)

    def test_numpy_points(self):
        """Points may be given as numpy array rows."""
        curve = QuadBezier()
        curve.interpolate(np.array([[0.0, 0.0], [50.0, 50.0], [100.0, 0.0]]))
        assert (curve.cx, curve.cy) == pytest.approx((50.0, 100.0))

    def test_point_records(self):
        """Points may be given as {x, y} records, like control coordinates."""
        curve = QuadBezier()
        curve.interpolate([{"x": 0.0, "y": 0.0}, {"x": 50.0, "y": 50.0}, {"x": 100.0, "y": 0.0}])
        assert (curve.cx, curve.cy) == pytest.approx((50.0, 100.0))

    def test_degenerate_rejected(self):
        """A = M = B fails and keeps the previous curve."""
        curve = QuadBezier(ARC)
        with pytest.raises(DegenerateInterpolationError):
            curve.interpolate([(1.0, 1.0), (1.0, 1.0), (1.0, 1.0)])
        assert curve.to_object()["cy"] == 100.0

    def test_interpolate_invalidates_length_cache(self):
        """Arc-length data follows the new geometry."""
        curve = QuadBezier(ARC)
        assert curve.get_t_at_s(0.5) == pytest.approx(0.5, abs=1e-5)
        version = curve.version

        curve.interpolate([(0.0, 0.0), (10.0, 40.0), (100.0, 0.0)])

        assert curve.version == version + 1
        t = curve.get_t_at_s(0.5)
        assert curve.s_at_t(t) == pytest.approx(0.5, abs=1e-6)
        assert t != pytest.approx(0.5, abs=1e-3)


###############################################################################
# Arc Length Tests
###############################################################################


class TestQuadBezierArcLength:
    """Test arc length and its inversion."""

    def test_total_length(self):
        """Symmetric arc against the closed form."""
        curve = QuadBezier(ARC)
        assert curve.total_length() == pytest.approx(ARC_LENGTH, rel=1e-9)
        assert curve.length_at(1.0) == curve.total_length()
        assert curve.length_at(0.0) == 0.0

    def test_s_at_t(self):
        """Normalized arc length endpoints and monotonicity."""
        curve = QuadBezier(ARC)
        assert curve.s_at_t(0.0) == 0.0
        assert curve.s_at_t(1.0) == 1.0
        values = [curve.s_at_t(t) for t in np.linspace(0.0, 1.0, 51)]
        assert np.all(np.diff(values) >= 0.0)

    def test_s_at_t_monotone_across_cusp(self):
        """A curve doubling back at t = 2/3 keeps a non-decreasing s."""
        curve = QuadBezier({"x0": 0.0, "y0": 0.0, "cx": 10.0, "cy": 0.0, "x1": 5.0, "y1": 0.0})
        values = [curve.s_at_t(t) for t in np.linspace(0.66, 0.68, 4001)]
        assert np.all(np.diff(values) >= 0.0)
        assert curve.total_length() == pytest.approx(25.0 / 3.0, rel=1e-12)

    def test_get_t_at_s_symmetry(self):
        """Half the length is reached at t = 0.5."""
        assert QuadBezier(ARC).get_t_at_s(0.5) == pytest.approx(0.5, abs=1e-5)

    def test_get_t_at_s_roundtrip(self):
        """s_at_t inverts get_t_at_s within epsilon."""
        curve = QuadBezier({"x0": 10.0, "y0": 300.0, "cx": 400.0, "cy": 20.0, "x1": 60.0, "y1": 80.0})
        for s in np.linspace(0.0, 1.0, 17):
            assert curve.s_at_t(curve.get_t_at_s(s)) == pytest.approx(s, abs=1e-6)

    def test_get_t_at_s_out_of_range(self):
        """s must lie in [0, 1]."""
        with pytest.raises(OutOfRangeError):
            QuadBezier(ARC).get_t_at_s(1.5)

    def test_equal_t_is_not_equal_s(self):
        """Equal steps in t are unequal in length; equal steps in s are equal."""
        curve = QuadBezier({"x0": 0.0, "y0": 0.0, "cx": 5.0, "cy": 0.0, "x1": 100.0, "y1": 0.0})
        by_t = curve.polygonize(4)
        by_s = curve.polygonize_by_length(4)
        t_steps = np.hypot(*np.diff(by_t, axis=0).T)
        s_steps = np.hypot(*np.diff(by_s, axis=0).T)
        assert np.ptp(t_steps) > 1.0
        assert np.allclose(s_steps, 25.0, atol=1e-3)

    def test_points_at_s(self):
        """Points at equal arc length on the symmetric arc mirror each other."""
        curve = QuadBezier(ARC)
        p1, p2 = curve.points_at_s([0.2, 0.8])
        assert p1[0] == pytest.approx(100.0 - p2[0], abs=1e-3)
        assert p1[1] == pytest.approx(p2[1], abs=1e-3)


###############################################################################
# Coordinate Inversion Tests
###############################################################################


class TestQuadBezierCoordinateInversion:
    """Test the closed-form inversion by x and y."""

    def test_t_at_x_around_extremum(self):
        """Two roots before the extremum in x, one at it, none beyond."""
        curve = QuadBezier(SIDEWAYS)

        roots = curve.get_t_at_x(25.0)
        assert len(roots) == 2
        assert roots == pytest.approx([(1.0 - math.sqrt(0.5)) / 2.0, (1.0 + math.sqrt(0.5)) / 2.0])

        assert curve.get_t_at_x(50.0) == pytest.approx([0.5])
        assert not curve.get_t_at_x(50.0001)
        assert not curve.get_t_at_x(-1.0)

    def test_t_at_x_endpoints(self):
        """Both endpoints lie on x = 0."""
        assert QuadBezier(SIDEWAYS).get_t_at_x(0.0) == pytest.approx([0.0, 1.0])

    def test_y_at_x(self):
        """y-values at the two crossings of x = 25."""
        curve = QuadBezier(SIDEWAYS)
        ys = curve.get_y_at_x(25.0)
        assert ys == pytest.approx([50.0 * (1.0 - math.sqrt(0.5)), 50.0 * (1.0 + math.sqrt(0.5))])

    def test_x_at_y(self):
        """x-values at the crossings of horizontal lines with the arc."""
        curve = QuadBezier(ARC)
        assert curve.get_x_at_y(37.5) == pytest.approx([25.0, 75.0])
        assert curve.get_x_at_y(50.0) == pytest.approx([50.0])
        assert not curve.get_x_at_y(60.0)

    def test_t_at_y(self):
        """Monotone axis has a single root."""
        curve = QuadBezier(SIDEWAYS)
        assert curve.get_t_at_y(30.0) == pytest.approx([0.3])

    def test_linear_axis(self):
        """x(t) linear in t uses the linear solve."""
        curve = QuadBezier(ARC)
        assert curve.get_t_at_x(25.0) == pytest.approx([0.25])
        assert curve.get_y_at_x(25.0) == pytest.approx([37.5])


###############################################################################
# Degenerate Geometry Tests
###############################################################################


class TestQuadBezierDegenerate:
    """Single-point curves answer queries without root finding."""

    def test_single_point_queries(self):
        """Lengths and inversions are 0."""
        curve = QuadBezier({"x0": 5.0, "y0": 5.0, "cx": 5.0, "cy": 5.0, "x1": 5.0, "y1": 5.0})
        assert curve.total_length() == 0.0
        assert curve.length_at(0.5) == 0.0
        assert curve.s_at_t(0.5) == 0.0
        assert curve.get_t_at_s(0.5) == 0.0
        assert curve.get_t_at_x(5.0) == [0.0]
        assert not curve.get_t_at_x(6.0)
        assert curve.get_x_at_y(5.0) == [5.0]
        assert curve.tangent_at(0.3) == (0.0, 0.0)

    def test_polygonize_by_length_single_point(self):
        """All samples collapse onto the point."""
        curve = QuadBezier({"x0": 5.0, "y0": 5.0, "cx": 5.0, "cy": 5.0, "x1": 5.0, "y1": 5.0})
        assert np.allclose(curve.polygonize_by_length(3), 5.0)
