"""
Epicycle Splines Piecewise Cubic Spline

Holds the result of a spline fit: the ordered breakpoints shared by every
axis and one cubic per segment. Each segment is stored in a local variable
``u = (t - origin) / scale``; fitted segments start at ``u = 0`` on their
left breakpoint and reach ``u = 1`` on their right one, so coefficients stay
well scaled whatever the offset or length of the time axis.

Domain convention: a spline is defined on the closed interval
``[start, end]``. Outside it, evaluation returns 0. Inside, a time that
falls exactly on an interior breakpoint belongs to the segment starting
there; ``end`` itself belongs to the last segment.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Iterator, List, Sequence, Tuple

import numpy as np

from ..exceptions import DimensionMismatchError, DomainError, SegmentIndexError

logger = logging.getLogger(__name__)


class SegmentMode(enum.Enum):
    """How a segment (or a boundary) is constrained during the fit"""
    CUBIC = "cubic"
    LINEAR = "linear"

    @classmethod
    def coerce(cls, value) -> "SegmentMode":
        """Accept a SegmentMode, a bool (True means linear) or a name"""
        if isinstance(value, cls):
            return value
        if isinstance(value, (bool, np.bool_)):
            return cls.LINEAR if value else cls.CUBIC
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise ValueError(f"Cannot interpret {value!r} as a segment mode")

    @property
    def is_linear(self) -> bool:
        return self is SegmentMode.LINEAR


@dataclass(frozen=True)
class SplineSegment:
    """
    One polynomial piece ``a*u^3 + b*u^2 + c*u + d`` with
    ``u = (t - origin) / scale``

    The solver sets ``origin`` to the segment's left breakpoint and
    ``scale`` to its width, so ``u`` runs over ``[0, 1]``. With the
    defaults (``origin=0``, ``scale=1``) the piece is a plain cubic in
    ``t``. :attr:`absolute_coefficients` gives the same cubic in ``t``.
    """
    a: float
    b: float
    c: float
    d: float
    mode: SegmentMode = SegmentMode.CUBIC
    origin: float = 0.0
    scale: float = 1.0

    def __post_init__(self):
        # A linear segment is affine by construction, whatever the solver
        # left in the higher-order coefficients.
        if self.mode is SegmentMode.LINEAR:
            object.__setattr__(self, 'a', 0.0)
            object.__setattr__(self, 'b', 0.0)

    @property
    def coefficients(self) -> Tuple[float, float, float, float]:
        """``(a, b, c, d)`` in the segment's local variable ``u``"""
        return (self.a, self.b, self.c, self.d)

    @property
    def absolute_coefficients(self) -> Tuple[float, float, float, float]:
        """The same cubic written as ``A*t^3 + B*t^2 + C*t + D``

        Expanding around a far-away origin loses precision; evaluation
        always goes through the local form.
        """
        q = 1.0 / self.scale
        r = -self.origin / self.scale
        a, b, c, d = self.coefficients
        return (
            a * q ** 3,
            3.0 * a * q ** 2 * r + b * q ** 2,
            3.0 * a * q * r ** 2 + 2.0 * b * q * r + c * q,
            ((a * r + b) * r + c) * r + d,
        )

    def local(self, t):
        return (t - self.origin) / self.scale

    def __call__(self, t):
        u = self.local(t)
        return ((self.a * u + self.b) * u + self.c) * u + self.d

    def derivative(self, t, order: int = 1):
        """Evaluate the ``order``-th derivative in ``t`` (0 to 3)"""
        u = self.local(t)
        if order == 0:
            return self(t)
        if order == 1:
            return ((3.0 * self.a * u + 2.0 * self.b) * u + self.c) / self.scale
        if order == 2:
            return (6.0 * self.a * u + 2.0 * self.b) / self.scale ** 2
        if order == 3:
            return 6.0 * self.a / self.scale ** 3 + 0.0 * u
        raise ValueError(f"Derivative order must be between 0 and 3, got {order}")

    def antiderivative(self, t):
        """Antiderivative in ``t`` vanishing at ``t = origin``"""
        u = self.local(t)
        return self.scale * (((self.a / 4.0 * u + self.b / 3.0) * u + self.c / 2.0) * u + self.d) * u

    def integral(self, t1: float, t2: float) -> float:
        """Definite integral over ``[t1, t2]``"""
        return float(self.antiderivative(t2) - self.antiderivative(t1))


class Spline:
    """
    Piecewise cubic function over ordered breakpoints

    Instances are produced by the solver and are immutable afterwards.
    Iterating yields the segments in breakpoint order; every call to
    ``iter()`` starts again from the first segment.
    """

    def __init__(self, segments: Sequence[SplineSegment], breakpoints: Sequence[float]):
        breakpoints = np.array(breakpoints, dtype=float)
        if breakpoints.ndim != 1 or len(breakpoints) < 2:
            raise DimensionMismatchError(
                "A spline needs at least two breakpoints",
                expected=2, actual=int(breakpoints.size)
            )
        if len(segments) != len(breakpoints) - 1:
            raise DimensionMismatchError(
                "Segment count must be one less than breakpoint count",
                expected=len(breakpoints) - 1, actual=len(segments)
            )

        breakpoints.flags.writeable = False
        self._breakpoints = breakpoints
        self._segments = tuple(segments)
        self._start = float(breakpoints[0])
        self._end = float(breakpoints[-1])

        # Stacked coefficients for vectorised evaluation
        self._coeffs = np.array([seg.coefficients for seg in self._segments], dtype=float)
        self._coeffs.flags.writeable = False
        self._origins = np.array([seg.origin for seg in self._segments], dtype=float)
        self._scales = np.array([seg.scale for seg in self._segments], dtype=float)
        self._origins.flags.writeable = False
        self._scales.flags.writeable = False

    # Domain

    @property
    def start(self) -> float:
        return self._start

    @property
    def end(self) -> float:
        return self._end

    @property
    def domain(self) -> Tuple[float, float]:
        return (self._start, self._end)

    @property
    def period(self) -> float:
        return self._end - self._start

    @property
    def breakpoints(self) -> np.ndarray:
        return self._breakpoints

    @property
    def num_segments(self) -> int:
        return len(self._segments)

    @property
    def coefficient_matrix(self) -> np.ndarray:
        """Local segment coefficients as an ``(num_segments, 4)`` array of ``a, b, c, d``"""
        return self._coeffs

    @property
    def origins(self) -> np.ndarray:
        """Origin of each segment's local variable"""
        return self._origins

    @property
    def scales(self) -> np.ndarray:
        """Width used to normalise each segment's local variable"""
        return self._scales

    def contains(self, t: float) -> bool:
        return self._start <= t <= self._end

    # Segment access

    def segment_at(self, index: int) -> SplineSegment:
        if not 0 <= index < len(self._segments):
            raise SegmentIndexError("Segment index out of range",
                                    index=index, size=len(self._segments))
        return self._segments[index]

    def segment_index(self, t: float) -> int:
        """Index of the segment that owns ``t`` (``t`` must lie in the domain)"""
        index = int(np.searchsorted(self._breakpoints, t, side='right')) - 1
        return min(max(index, 0), len(self._segments) - 1)

    def __len__(self) -> int:
        return len(self._segments)

    def __iter__(self) -> Iterator[SplineSegment]:
        return iter(self._segments)

    def intervals(self) -> Iterator[Tuple[float, float, SplineSegment]]:
        """Yield ``(t_start, t_end, segment)`` in breakpoint order"""
        for i, segment in enumerate(self._segments):
            yield float(self._breakpoints[i]), float(self._breakpoints[i + 1]), segment

    # Evaluation

    def evaluate(self, t: float) -> float:
        """Value at ``t``, or 0 when ``t`` lies outside ``[start, end]``"""
        if not self.contains(t):
            return 0.0
        return float(self._segments[self.segment_index(t)](t))

    def evaluate_strict(self, t: float) -> float:
        """Like :meth:`evaluate` but raises DomainError outside the domain"""
        if not self.contains(t):
            raise DomainError("Time outside spline domain", t=t, domain=self.domain)
        return float(self._segments[self.segment_index(t)](t))

    def derivative(self, t, order: int = 1):
        """Vectorised ``order``-th derivative, 0 outside the domain"""
        return self._evaluate_array(t, order)

    def __call__(self, t):
        """Vectorised evaluation; scalars in, float out"""
        return self._evaluate_array(t, 0)

    def _evaluate_array(self, t, order: int):
        if order not in (0, 1, 2, 3):
            raise ValueError(f"Derivative order must be between 0 and 3, got {order}")

        scalar = np.ndim(t) == 0
        times = np.asarray(t, dtype=float).reshape(-1)

        inside = (times >= self._start) & (times <= self._end)
        index = np.searchsorted(self._breakpoints, times, side='right') - 1
        index = np.clip(index, 0, len(self._segments) - 1)

        # One row of (a, b, c, d) per time
        a, b, c, d = self._coeffs[index].T
        scale = self._scales[index]
        u = (times - self._origins[index]) / scale
        if order == 0:
            values = ((a * u + b) * u + c) * u + d
        elif order == 1:
            values = ((3.0 * a * u + 2.0 * b) * u + c) / scale
        elif order == 2:
            values = (6.0 * a * u + 2.0 * b) / scale ** 2
        else:
            values = 6.0 * a / scale ** 3

        values = np.where(inside, values, 0.0)
        if scalar:
            return float(values[0])
        return values.reshape(np.shape(t))

    def sample(self, n_points: int) -> Tuple[np.ndarray, np.ndarray]:
        """Sample ``n_points`` evenly spaced times over the closed domain"""
        times = np.linspace(self._start, self._end, n_points)
        return times, self(times)

    def __repr__(self):
        return (f"Spline(segments={len(self._segments)}, "
                f"domain=[{self._start}, {self._end}])")


def same_domain(splines: List[Spline]) -> bool:
    """True when every spline shares the first one's domain and segment count"""
    first = splines[0]
    return all(
        s.domain == first.domain and s.num_segments == first.num_segments
        for s in splines[1:]
    )

