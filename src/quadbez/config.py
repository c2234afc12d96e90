"""Numerical configuration shared by evaluation, integration and inversion."""

from __future__ import annotations

import math
from dataclasses import dataclass, fields

###############################################################################
# BezierConfig
###############################################################################


@dataclass(frozen=True)
class BezierConfig:
    """Numerical settings of a quadratic Bezier curve.

    Attributes:
        quadrature_order: Number of Gauss-Legendre nodes per subinterval.
        subintervals: Number of uniform cells [0, 1] is split into for integration.
        table_resolution: Number of uniform t-steps of the arc-length table.
        root_epsilon: Residual tolerance of the arc-length inversion.
        max_iterations: Iteration cap of the bracketed root refinement.
    """

    quadrature_order: int = 5
    subintervals: int = 100
    table_resolution: int = 100
    root_epsilon: float = 1.0e-6
    max_iterations: int = 50

    def __post_init__(self):
        if int(self.quadrature_order) != self.quadrature_order or self.quadrature_order < 1:
            raise ValueError(f"quadrature_order must be an integer >= 1, got {self.quadrature_order}")
        if int(self.subintervals) != self.subintervals or self.subintervals < 1:
            raise ValueError(f"subintervals must be an integer >= 1, got {self.subintervals}")
        if int(self.table_resolution) != self.table_resolution or self.table_resolution < 2:
            raise ValueError(f"table_resolution must be an integer >= 2, got {self.table_resolution}")
        if not math.isfinite(self.root_epsilon) or self.root_epsilon <= 0.0:
            raise ValueError(f"root_epsilon must be a finite value > 0, got {self.root_epsilon}")
        if int(self.max_iterations) != self.max_iterations or self.max_iterations < 1:
            raise ValueError(f"max_iterations must be an integer >= 1, got {self.max_iterations}")

    def to_dict(self) -> dict:
        """Convert the configuration to a dictionary."""
        return {
            "quadrature_order": self.quadrature_order,
            "subintervals": self.subintervals,
            "table_resolution": self.table_resolution,
            "root_epsilon": self.root_epsilon,
            "max_iterations": self.max_iterations,
        }

    @classmethod
    def from_dict(cls, data: dict) -> BezierConfig:
        """Create a BezierConfig from a dictionary; missing keys keep the field defaults, unknown keys are ignored."""
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in known})


DEFAULT_CONFIG = BezierConfig()
