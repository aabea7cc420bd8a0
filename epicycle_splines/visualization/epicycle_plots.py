"""
Epicycle Splines Visualization

Draws a coefficient set as a chain of rotating vectors (an animated GIF),
draws a fitted spline path directly, and plots a static comparison of
samples, spline and Fourier redraw.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence, Tuple, Union

import matplotlib.pyplot as plt
import numpy as np
import seaborn as sns
from matplotlib.animation import FuncAnimation, PillowWriter
from matplotlib.patches import Circle
from PIL import Image
from tqdm import tqdm

from ..core.coefficients import CoefficientSet
from ..core.spline import Spline
from ..exceptions import RenderError, validate_positive_int
from ..utils.parsing import color_to_hex, parse_hex_color

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


@dataclass
class RenderConfig:
    """Output settings shared by every drawing"""
    width: int = 300
    height: int = 200
    n_steps: int = 200
    foreground: str = "0x000000"
    background: str = "0xFFFFFF"
    fps: int = 30
    dpi: int = 100
    show_circles: bool = True

    def __post_init__(self):
        for name in ('width', 'height', 'n_steps', 'fps', 'dpi'):
            validate_positive_int(getattr(self, name), name)
        # Fail early on bad colours rather than halfway through a render
        self.foreground_rgb = parse_hex_color(self.foreground)
        self.background_rgb = parse_hex_color(self.background)

    @property
    def figsize(self) -> Tuple[float, float]:
        return (self.width / self.dpi, self.height / self.dpi)

    @property
    def foreground_color(self) -> str:
        return color_to_hex(self.foreground_rgb)

    @property
    def background_color(self) -> str:
        return color_to_hex(self.background_rgb)


def _limits(points: np.ndarray, aspect: float, margin: float = 0.08):
    """Axis limits that contain ``points`` (complex) at the canvas aspect ratio"""
    x_lo, x_hi = float(np.min(points.real)), float(np.max(points.real))
    y_lo, y_hi = float(np.min(points.imag)), float(np.max(points.imag))
    cx, cy = (x_lo + x_hi) / 2, (y_lo + y_hi) / 2
    half_w = max((x_hi - x_lo) / 2, 1e-9)
    half_h = max((y_hi - y_lo) / 2, 1e-9)

    # Widen one side so circles stay round
    if half_w / half_h < aspect:
        half_w = half_h * aspect
    else:
        half_h = half_w / aspect
    half_w *= 1 + margin
    half_h *= 1 + margin
    return (cx - half_w, cx + half_w), (cy - half_h, cy + half_h)


class EpicycleRenderer:
    """
    Renders coefficient sets and spline paths to image files

    Args:
        config: Output settings; defaults match a 300x200, 200-frame GIF
            with black lines on white
    """

    def __init__(self, config: Optional[RenderConfig] = None):
        self.config = config or RenderConfig()
        logger.debug(f"Initialized EpicycleRenderer ({self.config.width}x{self.config.height}, "
                     f"{self.config.n_steps} frames)")

    def _new_axes(self):
        cfg = self.config
        fig = plt.figure(figsize=cfg.figsize, dpi=cfg.dpi, facecolor=cfg.background_color)
        ax = fig.add_axes([0, 0, 1, 1])
        ax.set_facecolor(cfg.background_color)
        ax.set_aspect('equal')
        ax.axis('off')
        return fig, ax

    def frame_times(self, coeffs: CoefficientSet) -> np.ndarray:
        """Frame times sweeping exactly one period"""
        steps = np.arange(self.config.n_steps)
        return coeffs.start + coeffs.period * steps / self.config.n_steps

    def animate_coefficients(self, coeffs: CoefficientSet, output_path: PathLike) -> Path:
        """Write an animated GIF of the rotating-vector chain

        Each frame shows the vectors (and their circles) at one instant and
        the trace drawn by the chain's tip so far.
        """
        output_path = Path(output_path)
        cfg = self.config
        times = self.frame_times(coeffs)
        chains = np.array([coeffs.epicycle_chain(t) for t in times])
        radii = coeffs.radii()

        xlim, ylim = _limits(chains.reshape(-1), cfg.width / cfg.height)
        fig, ax = self._new_axes()
        ax.set_xlim(*xlim)
        ax.set_ylim(*ylim)

        palette = sns.color_palette("husl", max(len(radii) - 1, 1))
        circles = []
        if cfg.show_circles:
            for i in range(1, len(radii)):
                circle = Circle((0, 0), radii[i], fill=False, lw=0.6, alpha=0.5,
                                color=palette[(i - 1) % len(palette)])
                ax.add_patch(circle)
                circles.append(circle)

        (arms,) = ax.plot([], [], color=cfg.foreground_color, lw=0.8, alpha=0.7)
        (trace,) = ax.plot([], [], color=cfg.foreground_color, lw=1.2)

        def update(frame):
            chain = chains[frame]
            arms.set_data(chain.real, chain.imag)
            for i, circle in enumerate(circles):
                circle.center = (chain[i].real, chain[i].imag)
            tips = chains[:frame + 1, -1]
            trace.set_data(tips.real, tips.imag)
            return [arms, trace, *circles]

        anim = FuncAnimation(fig, update, frames=len(times),
                             interval=1000 / cfg.fps, blit=False, repeat=True)
        self._save_animation(fig, anim, output_path, len(times))
        logger.info(f"Wrote {len(times)} frames to {output_path} "
                    f"({cfg.width}x{cfg.height}, {len(coeffs)} harmonics)")
        return output_path

    def _save_animation(self, fig, anim, output_path: Path, n_frames: int):
        output_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            with tqdm(total=n_frames, desc="Rendering", unit="frame",
                      disable=not logger.isEnabledFor(logging.INFO)) as bar:
                anim.save(str(output_path), writer=PillowWriter(fps=self.config.fps),
                          dpi=self.config.dpi,
                          progress_callback=lambda i, n: bar.update(1))
        except (OSError, ValueError, RuntimeError) as e:
            raise RenderError(str(e), output_path=str(output_path))
        finally:
            plt.close(fig)

    def draw_spline(self, sx: Spline, sy: Spline, output_path: PathLike) -> Path:
        """Write a single image of the spline path sampled at ``n_steps`` times"""
        output_path = Path(output_path)
        cfg = self.config
        times = np.linspace(sx.start, sx.end, cfg.n_steps, endpoint=False)
        path = sx(times) + 1j * sy(times)

        xlim, ylim = _limits(path, cfg.width / cfg.height)
        fig, ax = self._new_axes()
        ax.set_xlim(*xlim)
        ax.set_ylim(*ylim)
        ax.plot(path.real, path.imag, '.', color=cfg.foreground_color, markersize=1.5)

        try:
            fig.canvas.draw()
            rgba = np.asarray(fig.canvas.buffer_rgba())
            output_path.parent.mkdir(parents=True, exist_ok=True)
            Image.fromarray(rgba).convert('RGB').save(output_path)
        except (OSError, ValueError) as e:
            raise RenderError(str(e), output_path=str(output_path))
        finally:
            plt.close(fig)

        logger.info(f"Wrote spline path ({cfg.n_steps} samples) to {output_path}")
        return output_path

    def plot_fit(self, sx: Spline, sy: Spline,
                 samples: Optional[Tuple[Sequence[float], Sequence[float]]] = None,
                 coeffs: Optional[CoefficientSet] = None,
                 save_path: Optional[PathLike] = None) -> plt.Figure:
        """Static comparison of samples, spline path and Fourier redraw

        Returns:
            Matplotlib figure object (left open for the caller)
        """
        times = np.linspace(sx.start, sx.end, max(self.config.n_steps, 400))
        palette = sns.color_palette("husl", 3)

        with plt.style.context('seaborn-v0_8-whitegrid'):
            fig, ax = plt.subplots(figsize=(8, 6))
            ax.plot(sx(times), sy(times), color=palette[2], lw=1.5, label='spline')
            if coeffs is not None:
                redraw = coeffs.reconstruct(times)
                ax.plot(redraw.real, redraw.imag, '--', color=palette[0], lw=1.2,
                        label=f'Fourier ({len(coeffs)} harmonics)')
            if samples is not None:
                ax.scatter(samples[0], samples[1], color=palette[1], s=18, zorder=3,
                           label='samples')
            ax.set_aspect('equal')
            ax.legend(loc='best')
            ax.set_title('Path fit')

        if save_path:
            save_path = Path(save_path)
            save_path.parent.mkdir(parents=True, exist_ok=True)
            try:
                fig.savefig(save_path, dpi=150, bbox_inches='tight')
            except (OSError, ValueError) as e:
                raise RenderError(str(e), output_path=str(save_path))
            logger.info(f"Fit plot saved to {save_path}")

        return fig


def create_epicycle_animation(coeffs: CoefficientSet, output_path: PathLike,
                              config: Optional[RenderConfig] = None) -> Path:
    """High-level helper: animate ``coeffs`` into ``output_path``"""
    return EpicycleRenderer(config).animate_coefficients(coeffs, output_path)
