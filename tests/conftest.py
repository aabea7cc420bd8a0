"""Shared fixtures for the epicycle_splines test suite."""

import logging

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest


SQUARE_POINTS = """\
# unit square, walked anticlockwise
0: (0, 0)
1: (1, 0)
2: (1, 1)
3: (0, 1)
4: (0, 0)
"""


@pytest.fixture
def square_text():
    """Point-file text for a closed unit square."""
    return SQUARE_POINTS


@pytest.fixture
def square_file(tmp_path):
    """Point file on disk for a closed unit square."""
    path = tmp_path / "square.txt"
    path.write_text(SQUARE_POINTS, encoding="utf-8")
    return path


@pytest.fixture
def circle_samples():
    """Nine samples of the unit circle over t in [0, 8]."""
    times = np.arange(9, dtype=float)
    phase = 2.0 * np.pi * times / 8.0
    return times, np.cos(phase), np.sin(phase)


@pytest.fixture(autouse=True)
def _reset_package_logging():
    """Drop handlers the CLI installs so they never outlive a captured stream."""
    yield
    logger = logging.getLogger("epicycle_splines")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
