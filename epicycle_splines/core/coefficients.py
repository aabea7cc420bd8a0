"""
Epicycle Splines Coefficient Set

Container for a truncated complex Fourier series: ``positive[k]`` holds
``c_k`` and ``negative[k]`` holds ``c_{-k}`` for ``k = 0 .. n-1``. Both
index-0 entries are the DC term. The set also remembers the period (and
time origin) it was computed over so it can be redrawn as a chain of
rotating vectors.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Tuple

import numpy as np

from .complex_ops import expj, format_complex
from ..exceptions import ConfigurationError, DimensionMismatchError, SegmentIndexError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class CoefficientSet:
    """Positive and negative harmonic coefficients of one closed path"""
    positive: np.ndarray
    negative: np.ndarray
    period: float = 2.0 * math.pi
    start: float = 0.0

    def __post_init__(self):
        positive = np.array(self.positive, dtype=complex).reshape(-1)
        negative = np.array(self.negative, dtype=complex).reshape(-1)
        if len(positive) != len(negative):
            raise DimensionMismatchError(
                "Positive and negative coefficient sequences differ in length",
                expected=len(positive), actual=len(negative)
            )
        if len(positive) == 0:
            raise DimensionMismatchError("A coefficient set needs at least the DC term",
                                         expected=1, actual=0)
        if not math.isfinite(self.period) or self.period <= 0:
            raise ConfigurationError("Period must be a positive finite number",
                                     config_key="period", config_value=str(self.period))

        positive.flags.writeable = False
        negative.flags.writeable = False
        object.__setattr__(self, 'positive', positive)
        object.__setattr__(self, 'negative', negative)
        object.__setattr__(self, 'period', float(self.period))
        object.__setattr__(self, 'start', float(self.start))

    def __len__(self) -> int:
        return len(self.positive)

    @property
    def omega_0(self) -> float:
        return 2.0 * math.pi / self.period

    @property
    def end(self) -> float:
        return self.start + self.period

    @property
    def dc(self) -> complex:
        return complex(self.positive[0])

    def harmonic(self, k: int) -> complex:
        """Coefficient ``c_k`` for ``-(n-1) <= k <= n-1``"""
        n = len(self)
        if not -n < k < n:
            raise SegmentIndexError("Harmonic index out of range", index=k, size=n)
        return complex(self.positive[k] if k >= 0 else self.negative[-k])

    def harmonics(self) -> Iterator[Tuple[int, complex]]:
        """Yield ``(k, c_k)`` in drawing order ``0, 1, -1, 2, -2, ...``"""
        yield 0, complex(self.positive[0])
        for k in range(1, len(self)):
            yield k, complex(self.positive[k])
            yield -k, complex(self.negative[k])

    def reconstruct(self, t):
        """Evaluate ``sum_k c_k * exp(j*k*w0*t)`` at ``t`` (scalar or array)"""
        times = np.asarray(t, dtype=float)
        k = np.arange(len(self))
        phase = self.omega_0 * np.multiply.outer(times, k)
        values = (expj(phase) * self.positive).sum(axis=-1)
        values = values + (expj(-phase[..., 1:]) * self.negative[1:]).sum(axis=-1)
        if np.ndim(t) == 0:
            return complex(values)
        return values

    def epicycle_chain(self, t: float) -> np.ndarray:
        """Tips of the rotating vectors at time ``t``, starting at the DC term

        The first entry is ``c_0``; each following entry adds the next
        vector in drawing order, so the last one equals ``reconstruct(t)``.
        """
        vectors = [c * expj(k * self.omega_0 * t) for k, c in self.harmonics()]
        return np.cumsum(np.array(vectors, dtype=complex))

    def radii(self) -> np.ndarray:
        """Vector lengths in drawing order (DC term first)"""
        return np.array([abs(c) for _, c in self.harmonics()])

    def truncated(self, n: int) -> "CoefficientSet":
        """Keep the first ``n`` harmonics"""
        if not 1 <= n <= len(self):
            raise SegmentIndexError("Cannot truncate to this many harmonics",
                                    index=n, size=len(self))
        return CoefficientSet(self.positive[:n], self.negative[:n],
                              period=self.period, start=self.start)

    def summary(self) -> Dict[str, Any]:
        """JSON-friendly description used in reports"""
        return {
            'n_coeffs': len(self),
            'period': self.period,
            'start': self.start,
            'dc': [self.dc.real, self.dc.imag],
            'positive': [[c.real, c.imag] for c in self.positive.tolist()],
            'negative': [[c.real, c.imag] for c in self.negative.tolist()],
        }

    def __str__(self):
        lines = []
        for i in range(len(self)):
            lines.append(f"{i}:\t+{format_complex(self.positive[i])}\n"
                         f"\t-{format_complex(self.negative[i])}\n")
        return "".join(lines)

    def __repr__(self):
        return f"CoefficientSet(n={len(self)}, period={self.period}, start={self.start})"
