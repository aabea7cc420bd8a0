"""
Epicycle Splines Fourier Integrator

Computes the Fourier coefficients of the closed path ``x(t) + j*y(t)``
described by two splines, exactly rather than by sampling:

    c_k = 1/T * integral over [t_i, t_f] of (x(t) + j*y(t)) * exp(-j*k*w0*t) dt

with ``T = t_f - t_i`` and ``w0 = 2*pi/T``. On each segment the integrand
is a cubic ``p`` times a complex exponential, whose antiderivative has the
closed form

    F(t) = exp(s*t) * (p/s - p'/s^2 + p''/s^3 - p'''/s^4),   s = -j*k*w0

The DC term (``k = 0``) has no exponential factor and is integrated
directly as a polynomial.
"""

import logging
import math
from typing import Tuple

import numpy as np

from .coefficients import CoefficientSet
from .complex_ops import combine_axes, expj
from .spline import Spline
from ..exceptions import DomainMismatchError, validate_positive_int

logger = logging.getLogger(__name__)


def _derivative_terms(coeffs: np.ndarray, origins: np.ndarray, scales: np.ndarray,
                      t: np.ndarray) -> Tuple[np.ndarray, ...]:
    """``p, p', p'', p'''`` (in ``t``) of every segment at the matching time in ``t``"""
    a, b, c, d = coeffs.T
    u = (t - origins) / scales
    p0 = ((a * u + b) * u + c) * u + d
    p1 = ((3.0 * a * u + 2.0 * b) * u + c) / scales
    p2 = (6.0 * a * u + 2.0 * b) / scales ** 2
    p3 = 6.0 * a / scales ** 3
    return p0, p1, p2, p3


def _antiderivative(spline: Spline, t: np.ndarray, k: np.ndarray,
                    omega_0: float) -> np.ndarray:
    """Closed-form antiderivative of every segment, for every harmonic

    Returns an array of shape ``(n_segments, n_harmonics)``. ``k`` must not
    contain 0.
    """
    s = -1j * omega_0 * k[np.newaxis, :]
    terms = _derivative_terms(spline.coefficient_matrix, spline.origins, spline.scales, t)
    p0, p1, p2, p3 = (p[:, np.newaxis] for p in terms)
    bracket = p0 / s - p1 / s ** 2 + p2 / s ** 3 - p3 / s ** 4
    return expj(-omega_0 * np.outer(t, k)) * bracket


def integrate_harmonics(spline: Spline, k, omega_0: float) -> np.ndarray:
    """Integral of ``spline(t) * exp(-j*k*w0*t)`` over the spline's domain

    Args:
        spline: Spline to integrate
        k: Non-zero harmonic indices (any sign)
        omega_0: Fundamental angular frequency

    Returns:
        Complex array, one integral per entry of ``k``
    """
    k = np.atleast_1d(np.asarray(k, dtype=float))
    if np.any(k == 0):
        raise ValueError("The DC term must be integrated with integrate_dc()")

    t_left = spline.breakpoints[:-1]
    t_right = spline.breakpoints[1:]
    per_segment = (_antiderivative(spline, t_right, k, omega_0)
                   - _antiderivative(spline, t_left, k, omega_0))
    return per_segment.sum(axis=0)


def integrate_dc(spline: Spline) -> float:
    """Plain integral of the spline over its domain"""
    return float(sum(seg.integral(t1, t2) for t1, t2, seg in spline.intervals()))


class FourierIntegrator:
    """
    Turns a pair of coordinate splines into a CoefficientSet

    The integrator holds no state between calls; one instance can be reused
    for any number of spline pairs.
    """

    def __init__(self, n_coeffs: int):
        """
        Args:
            n_coeffs: Number of harmonics per side, DC included
                (harmonics ``0 .. n_coeffs-1`` and their negatives)
        """
        validate_positive_int(n_coeffs, "n_coeffs")
        self.n_coeffs = int(n_coeffs)

    def integrate(self, sx: Spline, sy: Spline) -> CoefficientSet:
        check_same_domain(sx, sy)

        t_i, t_f = sx.domain
        period = t_f - t_i
        omega_0 = 2.0 * math.pi / period
        n = self.n_coeffs

        positive = np.zeros(n, dtype=complex)
        negative = np.zeros(n, dtype=complex)

        dc = combine_axes(integrate_dc(sx), integrate_dc(sy))
        positive[0] = dc
        negative[0] = dc

        if n > 1:
            k = np.arange(1, n)
            positive[1:] = combine_axes(integrate_harmonics(sx, k, omega_0),
                                        integrate_harmonics(sy, k, omega_0))
            negative[1:] = combine_axes(integrate_harmonics(sx, -k, omega_0),
                                        integrate_harmonics(sy, -k, omega_0))

        positive /= period
        negative /= period

        logger.debug(f"Integrated {n} harmonics over [{t_i}, {t_f}] "
                     f"({sx.num_segments} segments per axis)")

        return CoefficientSet(positive, negative, period=period, start=t_i)


def check_same_domain(sx: Spline, sy: Spline):
    """Fail fast when two axis splines cannot describe one path"""
    if sx.domain != sy.domain:
        raise DomainMismatchError("Axis splines cover different domains",
                                  expected=sx.domain, actual=sy.domain)
    if sx.num_segments != sy.num_segments:
        raise DomainMismatchError("Axis splines have different segment counts",
                                  expected=sx.num_segments, actual=sy.num_segments)
    if sx.period <= 0:
        raise DomainMismatchError("Spline domain has zero length",
                                  expected="positive period", actual=sx.period)


def compute_fourier_coeffs(sx: Spline, sy: Spline, n: int) -> CoefficientSet:
    """Fourier coefficients ``c_{-(n-1)} .. c_{n-1}`` of ``sx(t) + j*sy(t)``"""
    return FourierIntegrator(n).integrate(sx, sy)
