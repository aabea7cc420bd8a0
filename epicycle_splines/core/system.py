"""
Epicycle Splines Linear System

Builds the square system whose solution holds the four coefficients of
every spline segment, factorizes it once and solves it for as many axes as
share the same breakpoints and mode flags.

Unknowns are laid out per segment as ``(a_i, b_i, c_i, d_i)``, the
coefficients of the segment's cubic in ``u = (t - t_i) / (t_{i+1} - t_i)``.
Each segment owns four rows:

* ``4i``, ``4i+1``: the cubic matches the sample value at ``t_i`` and
  ``t_{i+1}`` (the only rows with a non-zero right-hand side);
* ``4i+2``, ``4i+3``: for a linear segment, ``a_i = 0`` and ``b_i = 0``;
  for a cubic segment followed by a cubic one, first and second derivative
  continuity at ``t_{i+1}``, with the local derivatives rescaled by the
  ratio of the two segment widths; for the cubic segment closing a run of cubic
  segments, one row closing the run's left side (start boundary, or slope
  continuity with the linear segment before the run) and one closing its
  right side (end boundary, or slope continuity with the linear segment
  after it).

Mode flags are given per breakpoint: ``modes[i + 1]`` marks segment ``i``
(the segment ending at that breakpoint) as linear, ``modes[0]`` and
``modes[-1]`` select the boundary condition at ``t_0`` and ``t_{n-1}``
(zero slope when cubic, ``a = 0`` when linear).
"""

import logging
import warnings
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np
from scipy.linalg import LinAlgWarning, lu_factor, lu_solve

from .spline import SegmentMode, Spline, SplineSegment
from ..exceptions import (
    DimensionMismatchError,
    InvalidBreakpointsError,
    SingularSystemError,
)

logger = logging.getLogger(__name__)


# Rows are written in each segment's local variable u = (t - t_i) / h_i
_LEFT_VALUE = np.array([0.0, 0.0, 0.0, 1.0])
_RIGHT_VALUE = np.array([1.0, 1.0, 1.0, 1.0])


def _slope_row(u: float) -> np.ndarray:
    return np.array([3.0 * u ** 2, 2.0 * u, 1.0, 0.0])


def _curvature_row(u: float) -> np.ndarray:
    return np.array([6.0 * u, 2.0, 0.0, 0.0])


def _width_ratio(widths: np.ndarray, i: int, j: int) -> float:
    """``h_i / h_j``, or 0 when ``h_j`` vanishes (rejected before factorization)"""
    return widths[i] / widths[j] if widths[j] != 0 else 0.0


def normalize_modes(modes: Optional[Iterable], n_breakpoints: int) -> Tuple[SegmentMode, ...]:
    """Turn user mode flags into a tuple of SegmentMode, one per breakpoint

    ``None`` means every breakpoint is cubic.
    """
    if modes is None:
        return (SegmentMode.CUBIC,) * n_breakpoints

    flags = tuple(SegmentMode.coerce(m) for m in modes)
    if len(flags) != n_breakpoints:
        raise DimensionMismatchError(
            "Mode vector length must equal breakpoint count",
            expected=n_breakpoints, actual=len(flags)
        )
    return flags


def segment_modes(flags: Sequence[SegmentMode]) -> Tuple[SegmentMode, ...]:
    """Per-segment modes implied by per-breakpoint flags

    The last segment is always fitted as a cubic; its end flag only selects
    the boundary condition.
    """
    n_segments = len(flags) - 1
    return tuple(
        flags[i + 1] if i < n_segments - 1 else SegmentMode.CUBIC
        for i in range(n_segments)
    )


def _validate_breakpoints(breakpoints) -> np.ndarray:
    times = np.asarray(breakpoints, dtype=float)
    if times.ndim != 1:
        raise InvalidBreakpointsError(f"expected a 1-D sequence, got shape {times.shape}")
    if len(times) < 2:
        raise InvalidBreakpointsError(f"at least two breakpoints are required, got {len(times)}")

    bad = np.flatnonzero(~np.isfinite(times))
    if bad.size:
        raise InvalidBreakpointsError("breakpoints must be finite", index=int(bad[0]))

    decreasing = np.flatnonzero(np.diff(times) < 0)
    if decreasing.size:
        raise InvalidBreakpointsError("breakpoints must be increasing",
                                      index=int(decreasing[0]) + 1)
    return times


@dataclass(frozen=True)
class SplineSystem:
    """Coefficient matrix shared by every axis of one fit"""
    breakpoints: np.ndarray
    flags: Tuple[SegmentMode, ...]
    segment_modes: Tuple[SegmentMode, ...]
    matrix: np.ndarray

    @property
    def order(self) -> int:
        return self.matrix.shape[0]

    @property
    def num_segments(self) -> int:
        return len(self.breakpoints) - 1

    def rhs(self, values: Sequence[float]) -> np.ndarray:
        """Right-hand side for one axis' sample values"""
        values = np.asarray(values, dtype=float)
        if values.shape != self.breakpoints.shape:
            raise DimensionMismatchError(
                "Sample count must equal breakpoint count",
                expected=len(self.breakpoints), actual=int(values.size)
            )

        b = np.zeros(self.order)
        b[0::4] = values[:-1]
        b[1::4] = values[1:]
        return b

    def factorize(self) -> "FactorizedSystem":
        return FactorizedSystem.from_system(self)


def build_system(breakpoints: Sequence[float], modes: Optional[Iterable] = None) -> SplineSystem:
    """Assemble the ``4(n-1)`` square coefficient matrix

    Args:
        breakpoints: Increasing timestamps ``t_0 .. t_{n-1}``
        modes: One flag per breakpoint (bool, name or SegmentMode), or None
            for an all-cubic fit

    Returns:
        SplineSystem ready to be factorized
    """
    times = _validate_breakpoints(breakpoints)
    flags = normalize_modes(modes, len(times))
    seg_modes = segment_modes(flags)

    n_segments = len(times) - 1
    order = 4 * n_segments
    widths = np.diff(times)
    A = np.zeros((order, order))

    run_start = 0
    for i in range(n_segments):
        row = 4 * i
        col = 4 * i

        A[row, col:col + 4] = _LEFT_VALUE
        A[row + 1, col:col + 4] = _RIGHT_VALUE

        if seg_modes[i] is SegmentMode.LINEAR:
            A[row + 2, col] = 1.0
            A[row + 3, col + 1] = 1.0
            run_start = i + 1
            continue

        is_last = i == n_segments - 1
        if not is_last and seg_modes[i + 1] is SegmentMode.CUBIC:
            ratio = _width_ratio(widths, i, i + 1)
            A[row + 2, col:col + 4] = _slope_row(1.0)
            A[row + 2, col + 4:col + 8] = -ratio * _slope_row(0.0)
            A[row + 3, col:col + 4] = _curvature_row(1.0)
            A[row + 3, col + 4:col + 8] = -ratio ** 2 * _curvature_row(0.0)
            continue

        # Segment i closes the cubic run [run_start .. i]
        if run_start == 0:
            if flags[0] is SegmentMode.LINEAR:
                A[row + 2, 0] = 1.0
            else:
                A[row + 2, 0:4] = _slope_row(0.0)
        else:
            p = run_start
            A[row + 2, 4 * p:4 * p + 4] = _slope_row(0.0)
            A[row + 2, 4 * p - 4:4 * p] = -_width_ratio(widths, p, p - 1) * _slope_row(1.0)

        if is_last:
            if flags[-1] is SegmentMode.LINEAR:
                if i == 0 and flags[0] is SegmentMode.LINEAR:
                    # Both boundaries of a single segment ask for a = 0
                    A[row + 3, col + 1] = 1.0
                else:
                    A[row + 3, col] = 1.0
            else:
                A[row + 3, col:col + 4] = _slope_row(1.0)
        else:
            A[row + 3, col:col + 4] = _slope_row(1.0)
            A[row + 3, col + 4:col + 8] = -_width_ratio(widths, i, i + 1) * _slope_row(0.0)

    logger.debug(f"Built spline system of order {order} for {len(times)} breakpoints "
                 f"({sum(m.is_linear for m in seg_modes)} linear segments)")

    return SplineSystem(
        breakpoints=times,
        flags=flags,
        segment_modes=seg_modes,
        matrix=A,
    )


@dataclass(frozen=True)
class FactorizedSystem:
    """LU factorization of a SplineSystem, reusable for any number of axes"""
    system: SplineSystem
    lu: np.ndarray
    piv: np.ndarray

    @classmethod
    def from_system(cls, system: SplineSystem) -> "FactorizedSystem":
        times = system.breakpoints
        duplicates = np.flatnonzero(np.diff(times) == 0)
        if duplicates.size:
            i = int(duplicates[0])
            raise SingularSystemError(
                f"breakpoints {i} and {i + 1} are equal (t={times[i]})",
                order=system.order
            )

        with warnings.catch_warnings():
            # An exactly-zero pivot is reported below as an exception
            warnings.simplefilter("ignore", LinAlgWarning)
            lu, piv = lu_factor(system.matrix)

        pivots = np.abs(np.diag(lu))
        scale = pivots.max() if pivots.size else 0.0
        tolerance = system.order * np.finfo(float).eps * scale
        if not np.all(np.isfinite(lu)) or scale == 0.0 or pivots.min() <= tolerance:
            raise SingularSystemError(
                f"smallest pivot {pivots.min():.3e} is below tolerance {tolerance:.3e}",
                order=system.order
            )

        logger.debug(f"Factorized spline system of order {system.order}")
        return cls(system=system, lu=lu, piv=piv)

    def solve_vector(self, values: Sequence[float]) -> np.ndarray:
        """Raw solution vector for one axis"""
        b = self.system.rhs(values)
        if not np.all(np.isfinite(b)):
            logger.warning("Sample values contain non-finite numbers; "
                           "the fitted spline will not be finite")
        return lu_solve((self.lu, self.piv), b, check_finite=False)

    def solve(self, values: Sequence[float]) -> Spline:
        """Fit one axis and decode the solution into a Spline"""
        solution = self.solve_vector(values)
        blocks = solution.reshape(self.system.num_segments, 4)
        times = self.system.breakpoints
        segments = [
            SplineSegment(*(float(v) for v in block), mode=mode,
                          origin=float(times[i]), scale=float(times[i + 1] - times[i]))
            for i, (block, mode) in enumerate(zip(blocks, self.system.segment_modes))
        ]
        return Spline(segments, self.system.breakpoints)

    def solve_many(self, values_per_axis: Iterable[Sequence[float]]) -> List[Spline]:
        splines = [self.solve(values) for values in values_per_axis]
        logger.debug(f"Solved {len(splines)} axes against one factorization")
        return splines


def interpolate(values: Sequence[float], breakpoints: Sequence[float],
                modes: Optional[Iterable] = None) -> Spline:
    """Fit a single-axis spline through ``(breakpoints[i], values[i])``"""
    return build_system(breakpoints, modes).factorize().solve(values)


def interpolate_coords(values_per_axis: Sequence[Sequence[float]],
                       breakpoints: Sequence[float],
                       modes: Optional[Iterable] = None) -> List[Spline]:
    """Fit one spline per axis, sharing one factorization

    Args:
        values_per_axis: e.g. ``[xs, ys]``, each as long as ``breakpoints``
        breakpoints: Increasing timestamps shared by all axes
        modes: Per-breakpoint flags shared by all axes

    Returns:
        One Spline per axis, in the order given
    """
    factorized = build_system(breakpoints, modes).factorize()
    return factorized.solve_many(values_per_axis)
