"""
Epicycle Splines Pipeline

The EpicyclePipeline class that orchestrates the whole numerical path:
point set -> shared spline system -> one spline per axis -> Fourier
coefficients, with optional validation of the fit.
"""

import logging
from dataclasses import dataclass, field, fields
from typing import Any, Dict, Optional, Sequence

import numpy as np

from .coefficients import CoefficientSet
from .fourier import FourierIntegrator
from .spline import SegmentMode, Spline
from .system import build_system
from .validation import SplineValidator, ValidationResult
from ..exceptions import DimensionMismatchError, validate_positive_int

logger = logging.getLogger(__name__)


@dataclass
class PipelineConfig:
    """Configuration for one fit-and-integrate run"""
    n_coeffs: int = 6  # DC term + 5 harmonics on each side
    validate: bool = True
    tolerance: float = 1e-6
    default_mode: SegmentMode = SegmentMode.CUBIC

    def __post_init__(self):
        validate_positive_int(self.n_coeffs, "n_coeffs")
        self.default_mode = SegmentMode.coerce(self.default_mode)

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> "PipelineConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            logger.warning(f"Ignoring unknown pipeline settings: {', '.join(unknown)}")
        return cls(**{k: v for k, v in values.items() if k in known})


@dataclass
class PipelineResult:
    """Everything a renderer or report needs from one run"""
    sx: Spline
    sy: Spline
    coefficients: CoefficientSet
    validation: Optional[ValidationResult] = None
    stats: Dict[str, Any] = field(default_factory=dict)


class EpicyclePipeline:
    """
    Fits a spline pair through time-tagged points and integrates it into
    a coefficient set.
    """

    def __init__(self, config: Optional[PipelineConfig] = None):
        self.config = config or PipelineConfig()
        self.integrator = FourierIntegrator(self.config.n_coeffs)
        self.validator = SplineValidator(tolerance=self.config.tolerance)

    def fit(self, times: Sequence[float], xs: Sequence[float], ys: Sequence[float],
            modes: Optional[Sequence] = None):
        """Fit ``x(t)`` and ``y(t)`` against one shared factorization

        Returns:
            Tuple ``(sx, sy)``
        """
        if not len(xs) == len(ys) == len(times):
            raise DimensionMismatchError(
                "x and y samples must match the breakpoint count",
                expected=len(times), actual=(len(xs), len(ys))
            )
        if modes is None:
            modes = [self.config.default_mode] * len(times)

        system = build_system(times, modes)
        factorized = system.factorize()
        sx, sy = factorized.solve_many([xs, ys])
        logger.info(f"Fitted {sx.num_segments} segments over [{sx.start}, {sx.end}]")
        return sx, sy

    def run(self, times: Sequence[float], xs: Sequence[float], ys: Sequence[float],
            modes: Optional[Sequence] = None) -> PipelineResult:
        """Fit the splines and compute ``config.n_coeffs`` harmonics per side"""
        sx, sy = self.fit(times, xs, ys, modes)

        coeffs = self.integrator.integrate(sx, sy)
        logger.info(f"Computed {len(coeffs)} harmonics per side "
                    f"(period {coeffs.period:g}, DC {coeffs.dc:.4g})")

        validation = None
        if self.config.validate:
            validation = self.validator.validate(sx, sy, xs, ys, coeffs)
            logger.info(f"Fit quality: {validation.quality_grade}")

        stats = {
            'n_points': len(times),
            'n_segments': sx.num_segments,
            'n_linear_segments': sum(seg.mode.is_linear for seg in sx),
            'domain': [sx.start, sx.end],
            'n_coeffs': len(coeffs),
            'max_radius': float(np.max(coeffs.radii())),
        }

        return PipelineResult(sx=sx, sy=sy, coefficients=coeffs,
                              validation=validation, stats=stats)

    def run_points(self, points) -> PipelineResult:
        """Run on a PointSet as returned by the point-file reader"""
        return self.run(points.times, points.xs, points.ys, points.modes)
