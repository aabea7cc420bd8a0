"""
Complex arithmetic helpers

Python's built-in ``complex`` (and numpy's ``complex128``) already provide
addition, subtraction, multiplication and scaling. This module adds the
few operations the integrator and renderer need on top of them: rotation by
the imaginary unit, the unit-circle exponential and a stable textual form.
"""

from typing import Union

import numpy as np

ArrayLike = Union[float, np.ndarray]


def expj(theta: ArrayLike) -> Union[complex, np.ndarray]:
    """Return ``cos(theta) + j*sin(theta)``.

    Scalars give a Python ``complex``; arrays give a ``complex128`` array
    of the same shape.
    """
    if np.ndim(theta) == 0:
        theta = float(theta)
        return complex(np.cos(theta), np.sin(theta))
    theta = np.asarray(theta, dtype=float)
    return np.cos(theta) + 1j * np.sin(theta)


def times_j(z):
    """Rotate ``z`` by a quarter turn: ``j*(a + jb) = -b + ja``."""
    if np.ndim(z) == 0:
        z = complex(z)
        return complex(-z.imag, z.real)
    z = np.asarray(z, dtype=complex)
    return -z.imag + 1j * z.real


def scale(z, factor: float):
    """Multiply ``z`` by a real factor."""
    return z * float(factor)


def combine_axes(x, y):
    """Merge two real-axis contributions into ``x + j*y``.

    ``x`` and ``y`` may themselves be complex (they are, for Fourier
    integrals), so the y part is rotated rather than assigned to ``.imag``.
    """
    return x + times_j(y)


def format_complex(z: complex) -> str:
    """Human-readable form used in diagnostics, ``(re + j * im)``."""
    z = complex(z)
    return f"({z.real} + j * {z.imag})"
