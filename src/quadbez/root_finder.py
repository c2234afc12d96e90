"""Scalar root finding for the inversion queries of quadratic Bezier curves."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)

# Relative threshold below which the leading coefficient counts as zero
_LINEAR_EPS: float = 1.0e-12
# Roots this close outside of [0, 1] are snapped onto the boundary
_DOMAIN_EPS: float = 1.0e-12
# Roots closer than this are reported once
_DUPLICATE_EPS: float = 1.0e-12


###############################################################################
# RootResult
###############################################################################


@dataclass(frozen=True)
class RootResult:
    """Outcome of a bracketed root search.

    Attributes:
        root: Best parameter estimate found.
        value: Function value at root.
        iterations: Number of iterations performed.
        converged: True if |value| dropped below the requested epsilon.
    """

    root: float
    value: float
    iterations: int
    converged: bool


###############################################################################
# RootFinder
###############################################################################
class RootFinder:
    """Collection of static root-finding utilities on the parameter domain [0, 1]."""

    @staticmethod
    def solve_linear(b: float, c: float) -> List[float]:
        """Solve b*t + c = 0 for t in [0, 1].

        A constant equation (b == 0) has no isolated root. If it is satisfied
        everywhere (c == 0) the start parameter 0.0 is reported.

        Args:
            b: Linear coefficient
            c: Constant coefficient

        Returns:
            List[float]: zero or one root in [0, 1]
        """
        scale = max(abs(b), abs(c), 1.0)
        if abs(b) <= _LINEAR_EPS * scale:
            return [0.0] if abs(c) <= _LINEAR_EPS * scale else []
        return RootFinder._in_domain([-c / b])

    @staticmethod
    def solve_quadratic(a: float, b: float, c: float) -> List[float]:
        """Solve a*t^2 + b*t + c = 0 for t in [0, 1].

        Uses the cancellation-free form q = -(b + sign(b)*sqrt(D)) / 2 with the
        roots q/a and c/q. A near-zero leading coefficient falls back to the
        linear solve. A double root is reported once.

        Args:
            a: Quadratic coefficient
            b: Linear coefficient
            c: Constant coefficient

        Returns:
            List[float]: zero, one or two roots in [0, 1] in ascending order
        """
        if abs(a) <= _LINEAR_EPS * max(abs(b), abs(c), 1.0):
            return RootFinder.solve_linear(b, c)

        discriminant = b * b - 4.0 * a * c
        if discriminant < 0.0:
            # Tangential touch disturbed by rounding
            if discriminant >= -_LINEAR_EPS * max(b * b, abs(4.0 * a * c)):
                discriminant = 0.0
            else:
                return []

        if discriminant == 0.0:
            return RootFinder._in_domain([-b / (2.0 * a)])

        sqrt_d = math.sqrt(discriminant)
        q = -0.5 * (b + math.copysign(sqrt_d, b))
        candidates = [q / a]
        if q != 0.0:
            candidates.append(c / q)
        return RootFinder._in_domain(candidates)

    @staticmethod
    def find_bracketed(
        # pylint: disable=too-many-arguments,too-many-positional-arguments
        func: Callable[[float], float],
        lo: float,
        hi: float,
        epsilon: float,
        max_iterations: int,
        derivative: Optional[Callable[[float], float]] = None,
    ) -> RootResult:
        """Refine a root of func inside the bracket [lo, hi].

        Safeguarded Newton iteration: a Newton step is taken when a derivative
        is available and the step stays inside the current bracket, otherwise
        the bracket is bisected. The bracket shrinks on every iteration using
        the sign of func.

        The search never raises on non-convergence. If |func| does not drop
        below epsilon within max_iterations (or func has no sign change on the
        bracket), the midpoint of the remaining bracket is returned as best
        estimate with converged=False.

        Args:
            func: Scalar function whose root is searched
            lo: Lower end of the bracket
            hi: Upper end of the bracket
            epsilon: Convergence threshold on |func(t)|
            max_iterations: Maximum number of iterations
            derivative: Optional derivative of func for Newton steps

        Returns:
            RootResult: the root estimate and convergence information
        """
        if lo > hi:
            lo, hi = hi, lo

        f_lo = func(lo)
        if abs(f_lo) < epsilon:
            return RootResult(lo, f_lo, 0, True)
        f_hi = func(hi)
        if abs(f_hi) < epsilon:
            return RootResult(hi, f_hi, 0, True)

        lo_negative = f_lo < 0.0
        t = 0.5 * (lo + hi)
        iterations = 0
        for iteration in range(1, max_iterations + 1):
            iterations = iteration
            f_t = func(t)
            if abs(f_t) < epsilon:
                return RootResult(t, f_t, iteration, True)

            # Keep the sign change inside [lo, hi]
            if (f_t < 0.0) == lo_negative:
                lo = t
            else:
                hi = t

            t_next = 0.5 * (lo + hi)
            if derivative is not None:
                slope = derivative(t)
                if slope != 0.0 and math.isfinite(slope):
                    t_newton = t - f_t / slope
                    if lo < t_newton < hi:
                        t_next = t_newton

            if hi - lo <= 0.0 or t_next == t:
                break
            t = t_next

        best = 0.5 * (lo + hi)
        f_best = func(best)
        converged = abs(f_best) < epsilon
        if not converged:
            logger.warning(
                "Root refinement did not converge within %d iterations: t=%.12g residual=%.3g",
                max_iterations,
                best,
                f_best,
            )
        return RootResult(best, f_best, iterations, converged)

    @staticmethod
    def _in_domain(candidates: List[float]) -> List[float]:
        """Keep the candidates inside [0, 1], snapped and de-duplicated, ascending."""
        roots: List[float] = []
        for t in sorted(candidates):
            if not math.isfinite(t):
                continue
            if -_DOMAIN_EPS <= t < 0.0:
                t = 0.0
            elif 1.0 < t <= 1.0 + _DOMAIN_EPS:
                t = 1.0
            if t < 0.0 or t > 1.0:
                continue
            if roots and abs(t - roots[-1]) <= _DUPLICATE_EPS:
                continue
            roots.append(t)
        return roots
