"""Tests for fitted splines: interpolation, smoothness and evaluation."""

import numpy as np
import pytest

from epicycle_splines.core.spline import SegmentMode, Spline, SplineSegment, same_domain
from epicycle_splines.core.system import interpolate
from epicycle_splines.exceptions import (
    DimensionMismatchError,
    DomainError,
    SegmentIndexError,
)

TIMES = [0.0, 1.0, 2.5, 3.0, 4.0]
VALUES = [0.0, 2.0, -1.0, 0.5, 1.0]


@pytest.fixture
def cubic_spline():
    """All-cubic spline through five uneven samples."""
    return interpolate(VALUES, TIMES)


def test_spline_hits_every_sample(cubic_spline) -> None:
    """Both segments meeting at a breakpoint take the sample value there."""
    np.testing.assert_allclose(cubic_spline(np.array(TIMES)), VALUES, atol=1e-10)
    for i, (t1, t2, segment) in enumerate(cubic_spline.intervals()):
        assert segment(t1) == pytest.approx(VALUES[i], abs=1e-10)
        assert segment(t2) == pytest.approx(VALUES[i + 1], abs=1e-10)


def test_interior_joints_are_c2(cubic_spline) -> None:
    """Slope and curvature agree at every interior breakpoint."""
    for i in range(cubic_spline.num_segments - 1):
        left = cubic_spline.segment_at(i)
        right = cubic_spline.segment_at(i + 1)
        t = TIMES[i + 1]
        assert left.derivative(t, 1) == pytest.approx(right.derivative(t, 1), abs=1e-9)
        assert left.derivative(t, 2) == pytest.approx(right.derivative(t, 2), abs=1e-9)


def test_cubic_boundaries_have_zero_slope(cubic_spline) -> None:
    """Cubic boundary flags clamp the end slopes to zero."""
    assert cubic_spline.segment_at(0).derivative(TIMES[0]) == pytest.approx(0.0, abs=1e-10)
    assert cubic_spline.segment_at(3).derivative(TIMES[-1]) == pytest.approx(0.0, abs=1e-10)


def test_linear_segment_is_affine_and_joined_smoothly() -> None:
    """A linear segment interpolates linearly; its neighbours match its slope."""
    times = [0.0, 1.0, 2.0, 3.0]
    values = [0.0, 1.0, 3.0, 2.0]
    spline = interpolate(values, times, ["cubic", "cubic", "linear", "cubic"])

    middle = spline.segment_at(1)
    assert middle.mode is SegmentMode.LINEAR
    assert (middle.a, middle.b) == (0.0, 0.0)
    assert spline(1.5) == pytest.approx(2.0)

    slope = middle.derivative(1.0)
    assert spline.segment_at(0).derivative(1.0) == pytest.approx(slope, abs=1e-9)
    assert spline.segment_at(2).derivative(2.0) == pytest.approx(slope, abs=1e-9)


def test_linear_start_boundary_zeroes_cubic_term() -> None:
    """A linear start flag makes the first segment's a vanish."""
    spline = interpolate([0.0, 1.0, 0.0], [0.0, 1.0, 2.0], ["linear", "cubic", "cubic"])
    assert spline.segment_at(0).a == pytest.approx(0.0, abs=1e-12)


def test_evaluation_outside_domain_is_zero(cubic_spline) -> None:
    """Times before start or after end evaluate to 0."""
    assert cubic_spline.evaluate(-0.1) == 0.0
    assert cubic_spline.evaluate(4.1) == 0.0
    assert cubic_spline.evaluate(4.0) == pytest.approx(VALUES[-1])
    np.testing.assert_array_equal(cubic_spline(np.array([-5.0, 10.0])), [0.0, 0.0])
    with pytest.raises(DomainError):
        cubic_spline.evaluate_strict(5.0)


def test_breakpoint_belongs_to_next_segment(cubic_spline) -> None:
    """An interior breakpoint is owned by the segment starting there."""
    assert cubic_spline.segment_index(1.0) == 1
    assert cubic_spline.segment_index(4.0) == 3
    assert cubic_spline.segment_index(0.0) == 0


def test_vectorised_evaluation_matches_segments(cubic_spline) -> None:
    """Array evaluation agrees with per-segment evaluation and keeps shape."""
    t = np.linspace(0.0, 4.0, 12).reshape(3, 4)
    values = cubic_spline(t)
    assert values.shape == (3, 4)
    expected = [cubic_spline.evaluate(x) for x in t.ravel()]
    np.testing.assert_allclose(values.ravel(), expected)
    assert isinstance(cubic_spline(0.5), float)


def test_square_grid_evaluation_matches_points(cubic_spline) -> None:
    """A square grid of times is evaluated point by point, not transposed."""
    t = np.linspace(0.0, 4.0, 16).reshape(4, 4)
    for order in range(4):
        values = cubic_spline.derivative(t, order)
        assert values.shape == (4, 4)
        for index in np.ndindex(t.shape):
            segment = cubic_spline.segment_at(cubic_spline.segment_index(t[index]))
            expected = segment.derivative(t[index], order)
            assert values[index] == pytest.approx(expected, rel=1e-12, abs=1e-12)


def test_segment_access_out_of_range(cubic_spline) -> None:
    """Out-of-range segment indices raise an IndexError."""
    assert len(cubic_spline) == 4
    with pytest.raises(SegmentIndexError):
        cubic_spline.segment_at(4)
    with pytest.raises(IndexError):
        cubic_spline.segment_at(-1)


def test_iteration_restarts(cubic_spline) -> None:
    """Each iteration walks the segments from the first one."""
    first = list(cubic_spline)
    second = list(cubic_spline)
    assert len(first) == 4
    assert first == second
    assert first[0] is cubic_spline.segment_at(0)


def test_segment_count_must_match_breakpoints() -> None:
    """A spline needs exactly one segment per breakpoint interval."""
    segment = SplineSegment(0.0, 0.0, 1.0, 0.0)
    with pytest.raises(DimensionMismatchError):
        Spline([segment], [0.0, 1.0, 2.0])


def test_segment_integral_and_derivative_orders() -> None:
    """Segment helpers follow the polynomial."""
    segment = SplineSegment(1.0, 0.0, 0.0, 0.0)
    assert segment.integral(0.0, 2.0) == pytest.approx(4.0)
    assert segment.derivative(2.0, 3) == pytest.approx(6.0)
    with pytest.raises(ValueError):
        segment.derivative(1.0, 4)


def test_same_domain() -> None:
    """Splines over the same breakpoints share a domain."""
    a = interpolate([0.0, 1.0, 0.0], [0.0, 1.0, 2.0])
    b = interpolate([1.0, 1.0, 1.0], [0.0, 1.0, 2.0])
    c = interpolate([1.0, 1.0], [0.0, 3.0])
    assert same_domain([a, b])
    assert not same_domain([a, c])


def test_scaled_segment_matches_absolute_cubic() -> None:
    """A segment in a shifted, scaled variable is the same cubic in t."""
    segment = SplineSegment(2.0, -1.0, 0.5, 3.0, origin=10.0, scale=4.0)
    a, b, c, d = segment.absolute_coefficients
    for t in (10.0, 11.5, 14.0):
        assert segment(t) == pytest.approx(((a * t + b) * t + c) * t + d, rel=1e-9)
        assert segment.derivative(t) == pytest.approx((3 * a * t + 2 * b) * t + c, rel=1e-9)
    assert segment.derivative(12.0, 3) == pytest.approx(6.0 * a)
    expected = sum((p / (n + 1)) * (14.0 ** (n + 1) - 10.0 ** (n + 1))
                   for n, p in enumerate((d, c, b, a)))
    assert segment.integral(10.0, 14.0) == pytest.approx(expected, rel=1e-9)


def test_fitted_segments_use_local_variable(cubic_spline) -> None:
    """Each fitted segment runs from u = 0 to u = 1 across its interval."""
    np.testing.assert_array_equal(cubic_spline.origins, TIMES[:-1])
    np.testing.assert_allclose(cubic_spline.scales, np.diff(TIMES))
    for t1, t2, segment in cubic_spline.intervals():
        assert segment.local(t1) == pytest.approx(0.0)
        assert segment.local(t2) == pytest.approx(1.0)
