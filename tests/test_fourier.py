"""Tests for the closed-form Fourier integration of spline pairs."""

import math

import numpy as np
import pytest
from scipy.integrate import quad

from epicycle_splines.core.fourier import (
    FourierIntegrator,
    compute_fourier_coeffs,
    integrate_dc,
    integrate_harmonics,
)
from epicycle_splines.core.system import interpolate, interpolate_coords
from epicycle_splines.exceptions import (
    ConfigurationError,
    DimensionMismatchError,
    DomainMismatchError,
)


def _numeric_coefficient(sx, sy, k: int) -> complex:
    """c_k by adaptive quadrature of the spline path."""
    t_i, t_f = sx.domain
    period = t_f - t_i
    w0 = 2.0 * math.pi / period
    points = list(sx.breakpoints[1:-1])

    def integrand(t, part):
        value = (sx(t) + 1j * sy(t)) * complex(math.cos(k * w0 * t), -math.sin(k * w0 * t))
        return value.real if part == 0 else value.imag

    real, _ = quad(integrand, t_i, t_f, args=(0,), points=points, limit=200)
    imag, _ = quad(integrand, t_i, t_f, args=(1,), points=points, limit=200)
    return complex(real, imag) / period


@pytest.fixture
def circle_splines(circle_samples):
    times, xs, ys = circle_samples
    return interpolate_coords([xs, ys], times)


def test_coefficients_match_quadrature(circle_splines) -> None:
    """Closed-form coefficients agree with numerical integration."""
    sx, sy = circle_splines
    coeffs = compute_fourier_coeffs(sx, sy, 4)
    for k in range(-3, 4):
        assert coeffs.harmonic(k) == pytest.approx(_numeric_coefficient(sx, sy, k), abs=1e-7)


def test_shifted_domain_matches_quadrature() -> None:
    """A domain that does not start at zero is integrated over itself."""
    times = [10.0, 10.5, 12.0, 13.0]
    sx, sy = interpolate_coords([[1.0, -2.0, 0.5, 1.0], [0.0, 1.0, 3.0, 0.0]], times)
    coeffs = compute_fourier_coeffs(sx, sy, 3)
    assert coeffs.start == 10.0
    assert coeffs.period == pytest.approx(3.0)
    for k in (-2, -1, 0, 1, 2):
        assert coeffs.harmonic(k) == pytest.approx(_numeric_coefficient(sx, sy, k), abs=1e-7)


def test_dc_term_is_path_mean() -> None:
    """A constant path has only a DC term."""
    times = [0.0, 1.0, 2.0, 4.0]
    sx, sy = interpolate_coords([[3.0] * 4, [2.0] * 4], times)
    coeffs = compute_fourier_coeffs(sx, sy, 3)
    assert coeffs.dc == pytest.approx(3 + 2j)
    assert coeffs.negative[0] == coeffs.positive[0]
    np.testing.assert_allclose(coeffs.positive[1:], 0.0, atol=1e-12)
    np.testing.assert_allclose(coeffs.negative[1:], 0.0, atol=1e-12)


def test_dc_integral_matches_quad() -> None:
    """The plain integral agrees with quadrature."""
    spline = interpolate([0.0, 2.0, -1.0, 1.0], [0.0, 1.0, 2.0, 3.0])
    expected, _ = quad(spline, 0.0, 3.0, points=[1.0, 2.0])
    assert integrate_dc(spline) == pytest.approx(expected, rel=1e-10)


def test_circle_is_dominated_by_first_harmonic(circle_splines) -> None:
    """An anticlockwise circle puts nearly all its energy in c_1."""
    coeffs = compute_fourier_coeffs(*circle_splines, 4)
    assert abs(coeffs.harmonic(1)) > 0.9
    assert abs(coeffs.harmonic(-1)) < 0.1


def test_reconstruction_improves_with_more_harmonics(circle_splines) -> None:
    """More harmonics redraw the path more closely."""
    sx, sy = circle_splines
    t = np.linspace(0.0, 8.0, 200, endpoint=False)
    path = sx(t) + 1j * sy(t)

    errors = []
    for n in (2, 4, 16):
        coeffs = compute_fourier_coeffs(sx, sy, n)
        errors.append(np.sqrt(np.mean(np.abs(coeffs.reconstruct(t) - path) ** 2)))
    assert errors[0] > errors[1] > errors[2]


def test_breakpoint_error_shrinks_with_more_harmonics(circle_splines) -> None:
    """The redraw closes in on the samples themselves as harmonics are added."""
    sx, sy = circle_splines
    samples = sx.breakpoints[:-1]
    path = sx(samples) + 1j * sy(samples)

    errors = []
    for n in (2, 4, 16):
        coeffs = compute_fourier_coeffs(sx, sy, n)
        errors.append(np.max(np.abs(coeffs.reconstruct(samples) - path)))
    assert errors[-1] < errors[0]
    assert errors[-1] < errors[1]


def test_single_coefficient_holds_only_dc(circle_splines) -> None:
    """n = 1 gives the DC term alone."""
    coeffs = compute_fourier_coeffs(*circle_splines, 1)
    assert len(coeffs) == 1


def test_domain_mismatch_is_rejected() -> None:
    """Splines over different domains cannot form one path."""
    sx = interpolate([0.0, 1.0, 0.0], [0.0, 1.0, 2.0])
    sy = interpolate([0.0, 1.0, 0.0], [0.0, 1.0, 3.0])
    with pytest.raises(DomainMismatchError) as excinfo:
        compute_fourier_coeffs(sx, sy, 3)
    assert isinstance(excinfo.value, DimensionMismatchError)


def test_segment_count_mismatch_is_rejected() -> None:
    """Same domain but different segmentation is still a mismatch."""
    sx = interpolate([0.0, 1.0, 0.0], [0.0, 1.0, 2.0])
    sy = interpolate([0.0, 1.0], [0.0, 2.0])
    with pytest.raises(DomainMismatchError):
        compute_fourier_coeffs(sx, sy, 2)


def test_harmonic_integral_rejects_dc() -> None:
    """k = 0 has its own integral."""
    spline = interpolate([0.0, 1.0], [0.0, 1.0])
    with pytest.raises(ValueError):
        integrate_harmonics(spline, [0, 1], 2.0 * math.pi)


@pytest.mark.parametrize("n_coeffs", [0, -2, 2.5])
def test_integrator_needs_positive_count(n_coeffs) -> None:
    """The harmonic count must be a positive integer."""
    with pytest.raises(ConfigurationError):
        FourierIntegrator(n_coeffs)


@pytest.mark.parametrize("offset", [1000.0, 1e5])
def test_offset_domain_keeps_coefficients(offset, circle_samples) -> None:
    """A time shift by whole periods leaves every coefficient unchanged."""
    times, xs, ys = circle_samples
    shifted = compute_fourier_coeffs(*interpolate_coords([xs, ys], offset + times), 5)
    reference = compute_fourier_coeffs(*interpolate_coords([xs, ys], times), 5)
    assert shifted.start == offset
    for k in range(-4, 5):
        assert shifted.harmonic(k) == pytest.approx(reference.harmonic(k), abs=1e-8)
