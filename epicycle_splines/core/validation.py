"""
Epicycle Splines Validation

Post-fit checks that a spline pair really interpolates its samples, is
as smooth as its mode flags require, and that a coefficient set redraws
the path within a reported error.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

import numpy as np

from .coefficients import CoefficientSet
from .spline import SegmentMode, Spline

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    """Container for validation results"""
    is_valid: bool
    quality_grade: str  # 'excellent', 'good', 'acceptable', 'poor', 'failed'
    issues: List[str] = field(default_factory=list)
    metrics: Dict[str, float] = field(default_factory=dict)


def _relative_gap(left: float, right: float) -> float:
    return abs(left - right) / max(1.0, abs(left), abs(right))


class SplineValidator:
    """
    Checks the invariants of fitted splines

    Args:
        tolerance: Maximum relative error accepted for interpolation and
            continuity checks
    """

    def __init__(self, tolerance: float = 1e-6):
        self.tolerance = tolerance
        logger.debug(f"Initialized SplineValidator (tolerance={tolerance})")

    def interpolation_error(self, spline: Spline, values: Sequence[float]) -> float:
        """Largest relative gap between the spline and its samples"""
        values = np.asarray(values, dtype=float)
        fitted = spline(spline.breakpoints)
        # The left end of each interior breakpoint must match too
        left_ends = np.array([seg(t2) for _, t2, seg in spline.intervals()])
        gaps = [_relative_gap(f, v) for f, v in zip(fitted, values)]
        gaps += [_relative_gap(f, v) for f, v in zip(left_ends, values[1:])]
        return max(gaps) if gaps else 0.0

    def continuity_error(self, spline: Spline) -> Dict[str, float]:
        """Largest relative jump of value, slope and curvature at interior joints

        Slope and curvature are only compared where both adjoining segments
        are cubic.
        """
        errors = {'c0': 0.0, 'c1': 0.0, 'c2': 0.0}
        for i in range(spline.num_segments - 1):
            left = spline.segment_at(i)
            right = spline.segment_at(i + 1)
            t = float(spline.breakpoints[i + 1])

            errors['c0'] = max(errors['c0'], _relative_gap(left(t), right(t)))
            if left.mode is SegmentMode.CUBIC and right.mode is SegmentMode.CUBIC:
                for order, key in ((1, 'c1'), (2, 'c2')):
                    gap = _relative_gap(left.derivative(t, order), right.derivative(t, order))
                    errors[key] = max(errors[key], gap)
        return errors

    def reconstruction_error(self, coeffs: CoefficientSet, sx: Spline, sy: Spline,
                             n_points: int = 256) -> float:
        """RMS distance between the Fourier redraw and the spline path"""
        times = np.linspace(sx.start, sx.end, n_points, endpoint=False)
        path = sx(times) + 1j * sy(times)
        redraw = coeffs.reconstruct(times)
        return float(np.sqrt(np.mean(np.abs(path - redraw) ** 2)))

    def validate(self, sx: Spline, sy: Spline, xs: Sequence[float], ys: Sequence[float],
                 coeffs: Optional[CoefficientSet] = None) -> ValidationResult:
        """Validate a fitted spline pair (and optionally its coefficients)"""
        issues = []
        metrics = {}

        interp = max(self.interpolation_error(sx, xs), self.interpolation_error(sy, ys))
        metrics['interpolation_error'] = interp
        if interp > self.tolerance:
            issues.append(f"Spline misses its samples: {interp:.3e}")

        for axis, spline in (('x', sx), ('y', sy)):
            for key, value in self.continuity_error(spline).items():
                name = f"{axis}_{key}_error"
                metrics[name] = value
                if value > self.tolerance:
                    issues.append(f"{axis}: {key.upper()} discontinuity {value:.3e}")

        if coeffs is not None:
            metrics['reconstruction_rms'] = self.reconstruction_error(coeffs, sx, sy)

        grade = self._determine_quality_grade(interp, issues)
        result = ValidationResult(
            is_valid=not issues,
            quality_grade=grade,
            issues=issues,
            metrics=metrics,
        )

        for issue in issues:
            logger.warning(issue)
        return result

    def _determine_quality_grade(self, error: float, issues: List[str]) -> str:
        if issues:
            return 'failed' if error > 1000 * self.tolerance else 'poor'
        if error <= 1e-3 * self.tolerance:
            return 'excellent'
        if error <= 1e-1 * self.tolerance:
            return 'good'
        return 'acceptable'
