"""Arc length of a quadratic Bezier segment and its inversion by normalized length."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional

import numpy as np
from numpy.typing import NDArray

from quadbez.common import OutOfRangeError
from quadbez.config import DEFAULT_CONFIG, BezierConfig
from quadbez.curve_model import CurveModel
from quadbez.quadrature import GaussLegendreQuadrature
from quadbez.root_finder import RootFinder

logger = logging.getLogger(__name__)


###############################################################################
# ArcLengthSample
###############################################################################


@dataclass(frozen=True)
class ArcLengthSample:
    """Table mapping uniform parameters to normalized cumulative arc length.

    Attributes:
        t: Strictly increasing parameters, uniform on [0, 1].
        s: Normalized cumulative arc length at t, non-decreasing from 0 to 1.
        total_length: Arc length of the whole curve the table was built from.
        version: CurveModel version the table belongs to.
    """

    t: NDArray[np.float64]
    s: NDArray[np.float64]
    total_length: float
    version: int

    def bracket(self, s: float) -> tuple[int, int]:
        """Indices (i, i + 1) of the table samples enclosing s."""
        i = int(np.searchsorted(self.s, s, side="right")) - 1
        i = min(max(i, 0), len(self.s) - 2)
        return i, i + 1


###############################################################################
# ArcLengthIndex
###############################################################################
class ArcLengthIndex:
    """Forward (t -> s) and inverse (s -> t) arc-length queries of one CurveModel.

    Forward queries integrate directly. Inverse queries bracket s in a cached
    table and refine with a bracketed root search. The table is rebuilt lazily
    whenever the model version differs from the one it was built for.
    """

    def __init__(self, model: CurveModel, config: BezierConfig = DEFAULT_CONFIG):
        self._model = model
        self._config = config
        self._quadrature = GaussLegendreQuadrature(config.quadrature_order, config.subintervals)
        self._table: Optional[ArcLengthSample] = None

    @property
    def quadrature(self) -> GaussLegendreQuadrature:
        """GaussLegendreQuadrature: The integration rule used for all length queries."""
        return self._quadrature

    def invalidate(self) -> None:
        """Drop the cached table; the next inverse query rebuilds it."""
        self._table = None

    @property
    def is_stale(self) -> bool:
        """bool: True if no table exists for the current model version."""
        return self._table is None or self._table.version != self._model.version

    def table(self) -> ArcLengthSample:
        """The arc-length table of the current model version, rebuilt if stale."""
        if self.is_stale:
            self._table = self._build_table()
        return self._table

    def _cumulative(self, ts) -> NDArray[np.float64]:
        # The speed has a kink at a cusp, which must be a quadrature boundary
        return self._quadrature.cumulative(self._model.speed, ts, kink=self._model.cusp_parameter())

    def _build_table(self) -> ArcLengthSample:
        resolution = self._config.table_resolution
        t_values = np.linspace(0.0, 1.0, resolution + 1, dtype=np.float64)
        lengths = self._cumulative(t_values)
        total = float(lengths[-1])
        if total > 0.0:
            s_values = np.clip(lengths / total, 0.0, 1.0)
            s_values[-1] = 1.0
            # Guard the bracketing search against rounding noise
            s_values = np.maximum.accumulate(s_values)
        else:
            s_values = np.zeros_like(t_values)

        logger.debug(
            "Arc-length table rebuilt (version %d, %d samples, length %.6g)",
            self._model.version,
            len(t_values),
            total,
        )
        return ArcLengthSample(t=t_values, s=s_values, total_length=total, version=self._model.version)

    ###########################################################################
    # Queries
    ###########################################################################

    def length_at(self, t: float) -> float:
        """Arc length from 0 to t (t clamped onto [0, 1]); 0 for a single-point curve."""
        if self._model.is_degenerate:
            return 0.0
        return float(self._cumulative(t)[0])

    def total_length(self) -> float:
        """Arc length of the whole curve."""
        return self.length_at(1.0)

    def s_at_t(self, t: float) -> float:
        """Normalized arc length at t, computed by fresh integration; result in [0, 1]."""
        if self._model.is_degenerate:
            return 0.0
        lengths = self._cumulative([t, 1.0])
        total = float(lengths[1])
        if total <= 0.0:
            return 0.0
        return min(max(float(lengths[0]) / total, 0.0), 1.0)

    def get_t_at_s(self, s: float) -> float:
        """Natural parameter at normalized arc length s.

        The table brackets s between two samples, then the bracket is refined on
        f(t) = s_at_t(t) - s until |f| < root_epsilon or max_iterations is hit.
        Non-convergence returns the best estimate instead of failing.

        Args:
            s: Normalized arc length in [0, 1]

        Returns:
            float: parameter t in [0, 1]; 0 for a single-point curve

        Raises:
            OutOfRangeError: If s is not a finite value in [0, 1]
        """
        s = float(s)
        if not (math.isfinite(s) and 0.0 <= s <= 1.0):
            raise OutOfRangeError(f"Normalized arc length must be in [0, 1], got {s}")

        if self._model.is_degenerate:
            return 0.0
        if s == 0.0:
            return 0.0
        if s == 1.0:
            return 1.0

        table = self.table()
        if table.total_length <= 0.0:
            return 0.0

        i, j = table.bracket(s)
        total = table.total_length
        result = RootFinder.find_bracketed(
            lambda t: self.s_at_t(t) - s,
            float(table.t[i]),
            float(table.t[j]),
            epsilon=self._config.root_epsilon,
            max_iterations=self._config.max_iterations,
            derivative=lambda t: float(self._model.speed(t)) / total,
        )
        return min(max(result.root, 0.0), 1.0)
