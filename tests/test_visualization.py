"""Tests for the epicycle renderer."""

import matplotlib.pyplot as plt
import pytest
from PIL import Image

from epicycle_splines.core.coefficients import CoefficientSet
from epicycle_splines.core.system import interpolate_coords
from epicycle_splines.exceptions import ConfigurationError
from epicycle_splines.visualization.epicycle_plots import EpicycleRenderer, RenderConfig


@pytest.fixture
def small_config():
    """Tiny canvas so renders stay fast."""
    return RenderConfig(width=60, height=40, n_steps=6, dpi=20)


def test_render_config_defaults() -> None:
    """Defaults give a 300x200 black-on-white canvas."""
    config = RenderConfig()
    assert config.figsize == (3.0, 2.0)
    assert config.foreground_color == "#000000"
    assert config.background_color == "#ffffff"


def test_render_config_rejects_bad_values() -> None:
    """Sizes must be positive and colours well formed."""
    with pytest.raises(ConfigurationError):
        RenderConfig(width=0)
    with pytest.raises(ConfigurationError):
        RenderConfig(foreground="0xZZZZZZ")


def test_frame_times_sweep_one_period(small_config) -> None:
    """Frames start at the time origin and stop short of a full period."""
    coeffs = CoefficientSet([0.0, 1.0], [0.0, 0.0], period=6.0, start=2.0)
    times = EpicycleRenderer(small_config).frame_times(coeffs)
    assert list(times) == [2.0, 3.0, 4.0, 5.0, 6.0, 7.0]


def test_animation_writes_gif(small_config, tmp_path) -> None:
    """The animation is written as a multi-frame GIF."""
    coeffs = CoefficientSet([0.5, 1.0, 0.2j], [0.5, 0.3, 0.0])
    path = EpicycleRenderer(small_config).animate_coefficients(coeffs, tmp_path / "epi.gif")
    with Image.open(path) as image:
        assert image.format == "GIF"
        assert image.n_frames > 1


def test_spline_drawing_writes_image(small_config, tmp_path) -> None:
    """The spline path is drawn into a single image of the canvas size."""
    sx, sy = interpolate_coords([[0.0, 1.0, 1.0, 0.0], [0.0, 0.0, 1.0, 0.0]], [0.0, 1.0, 2.0, 3.0])
    path = EpicycleRenderer(small_config).draw_spline(sx, sy, tmp_path / "path.gif")
    with Image.open(path) as image:
        assert image.size == (60, 40)


def test_fit_plot_saves_png(tmp_path) -> None:
    """The static plot is written when a path is given."""
    sx, sy = interpolate_coords([[0.0, 1.0, 0.0], [0.0, 1.0, 0.0]], [0.0, 1.0, 2.0])
    fig = EpicycleRenderer().plot_fit(sx, sy, samples=([0.0, 1.0, 0.0], [0.0, 1.0, 0.0]),
                                      save_path=tmp_path / "fit.png")
    plt.close(fig)
    assert (tmp_path / "fit.png").exists()
