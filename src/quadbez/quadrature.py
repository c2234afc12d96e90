"""Composite Gauss-Legendre quadrature on the parameter domain [0, 1]."""

from __future__ import annotations

from typing import Callable, Optional, Sequence, Union

import numpy as np
from numpy.typing import NDArray

# Vectorized integrand: maps an array of parameters to an array of values of the same shape
Integrand = Callable[[NDArray[np.float64]], NDArray[np.float64]]


###############################################################################
# GaussLegendreQuadrature
###############################################################################
class GaussLegendreQuadrature:
    """Fixed-order composite Gauss-Legendre rule over a uniform partition of [0, 1].

    The unit interval is split into `subintervals` cells of equal width and each
    cell is integrated with an `order`-point Gauss-Legendre rule. Integrals from
    0 up to an arbitrary t are the prefix sum of the whole cells below t plus one
    Gauss-Legendre integral over the remaining partial cell.

    An integrand with a kink (a non-smooth point such as |t - t0|) is only
    integrated accurately if the kink is a rule boundary. Passing it as
    `kink` splits the cell and the partial cell containing it there, so
    cumulative integrals stay non-decreasing for a nonnegative integrand.

    There is no error estimate. The error is governed by order and cell count.
    """

    def __init__(self, order: int = 5, subintervals: int = 100):
        """Initialize the quadrature rule.

        Args:
            order: Number of Gauss-Legendre nodes per cell
            subintervals: Number of uniform cells on [0, 1]
        """
        if order < 1:
            raise ValueError(f"order must be >= 1, got {order}")
        if subintervals < 1:
            raise ValueError(f"subintervals must be >= 1, got {subintervals}")

        self._order = int(order)
        self._subintervals = int(subintervals)
        nodes, weights = np.polynomial.legendre.leggauss(self._order)
        self._nodes: NDArray[np.float64] = nodes.astype(np.float64)
        self._weights: NDArray[np.float64] = weights.astype(np.float64)
        self._edges: NDArray[np.float64] = np.linspace(0.0, 1.0, self._subintervals + 1, dtype=np.float64)

    @property
    def order(self) -> int:
        """int: Number of Gauss-Legendre nodes per cell."""
        return self._order

    @property
    def subintervals(self) -> int:
        """int: Number of uniform cells on [0, 1]."""
        return self._subintervals

    def integrate_intervals(
        self, func: Integrand, lower: NDArray[np.float64], upper: NDArray[np.float64]
    ) -> NDArray[np.float64]:
        """Integrate func over each interval [lower[i], upper[i]] with one Gauss-Legendre rule.

        Args:
            func: Vectorized integrand
            lower: Lower interval bounds (shape: n)
            upper: Upper interval bounds (shape: n)

        Returns:
            NDArray[np.float64]: one integral per interval (shape: n)
        """
        half = 0.5 * (upper - lower)
        mid = 0.5 * (upper + lower)
        # Map the reference nodes on [-1, 1] into every interval at once
        samples = mid[:, np.newaxis] + half[:, np.newaxis] * self._nodes[np.newaxis, :]
        values = func(samples)
        return half * (values @ self._weights)

    def integrate_split(
        self,
        func: Integrand,
        lower: NDArray[np.float64],
        upper: NDArray[np.float64],
        kink: Optional[float] = None,
    ) -> NDArray[np.float64]:
        """Like integrate_intervals, but intervals containing kink are integrated as two pieces."""
        if kink is None:
            return self.integrate_intervals(func, lower, upper)
        # Intervals not containing the kink get a zero-width piece
        split = np.clip(kink, lower, upper)
        return self.integrate_intervals(func, lower, split) + self.integrate_intervals(func, split, upper)

    def cell_integrals(self, func: Integrand, kink: Optional[float] = None) -> NDArray[np.float64]:
        """Integrals of func over each of the uniform cells of [0, 1]."""
        return self.integrate_split(func, self._edges[:-1], self._edges[1:], kink)

    def integrate(self, func: Integrand, a: float = 0.0, b: float = 1.0) -> float:
        """Composite integral of func from a to b.

        [a, b] is split into as many equal cells as the uniform partition of
        [0, 1] places on an interval of that width (at least one).

        Args:
            func: Vectorized integrand
            a: Lower bound
            b: Upper bound

        Returns:
            float: the integral (negative if b < a)
        """
        if a == b:
            return 0.0
        count = max(1, int(np.ceil(abs(b - a) * self._subintervals)))
        edges = np.linspace(a, b, count + 1, dtype=np.float64)
        return float(np.sum(self.integrate_intervals(func, edges[:-1], edges[1:])))

    def cumulative(
        self,
        func: Integrand,
        ts: Union[float, Sequence[float], NDArray[np.float64]],
        kink: Optional[float] = None,
    ) -> NDArray[np.float64]:
        """Integrals of func from 0 to each t in ts.

        Parameters are clamped onto [0, 1]. The integral up to t = 1 is the sum
        of all cells, computed the same way for every call, so repeated queries
        at the domain ends return identical values.

        Args:
            func: Vectorized integrand
            ts: Parameter value(s)
            kink: Optional kink of func in (0, 1), used as rule boundary

        Returns:
            NDArray[np.float64]: cumulative integrals, same length as ts
        """
        t_values = np.clip(np.atleast_1d(np.asarray(ts, dtype=np.float64)), 0.0, 1.0)

        prefix = np.empty(self._subintervals + 1, dtype=np.float64)
        prefix[0] = 0.0
        np.cumsum(self.cell_integrals(func, kink), out=prefix[1:])

        cells = np.minimum(np.floor(t_values * self._subintervals).astype(np.intp), self._subintervals)
        starts = np.minimum(self._edges[cells], t_values)
        partial = self.integrate_split(func, starts, t_values, kink)
        return prefix[cells] + partial
