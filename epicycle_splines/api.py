"""
Epicycle Splines High-Level API

Simple functions covering the common paths through the package: read a
point file, fit it and compute its coefficients, then save or draw the
result. Most users only need this module.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from . import __version__
from .core.coefficients import CoefficientSet
from .core.pipeline import EpicyclePipeline, PipelineConfig, PipelineResult
from .core.spline import Spline
from .utils.parsing import (
    PointSet,
    read_coefficients_file,
    read_points_file,
    write_coefficients_file,
)
from .visualization.epicycle_plots import EpicycleRenderer, RenderConfig

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def load_points(path: PathLike) -> PointSet:
    """Read a ``t: (x, y)`` point file"""
    points = read_points_file(path)
    logger.info(f"Loaded {len(points)} points from {path}")
    return points


def compute_path_coefficients(
    points: Union[PointSet, PathLike],
    n_coeffs: int = 6,
    validate: bool = True,
    **kwargs
) -> PipelineResult:
    """
    Fit a spline pair through a point set and compute its coefficients

    Args:
        points: A PointSet or the path of a point file
        n_coeffs: Entries per side of the coefficient set (DC included)
        validate: Whether to run the post-fit checks
        **kwargs: Further PipelineConfig settings

    Returns:
        PipelineResult with both splines, the coefficients and run stats

    Example:
        >>> result = compute_path_coefficients("heart.txt", n_coeffs=11)
        >>> print(result.coefficients)
    """
    if not isinstance(points, PointSet):
        points = load_points(points)

    config = PipelineConfig(n_coeffs=n_coeffs, validate=validate, **kwargs)
    return EpicyclePipeline(config).run_points(points)


def load_coefficients(path: PathLike, **kwargs) -> CoefficientSet:
    """Read a raw coefficient file (drawn over one turn unless told otherwise)"""
    coeffs = read_coefficients_file(path, **kwargs)
    logger.info(f"Loaded {len(coeffs)} harmonics from {path}")
    return coeffs


def save_coefficients(coeffs: CoefficientSet, path: PathLike) -> Path:
    return write_coefficients_file(coeffs, path)


def render_epicycles(coeffs: CoefficientSet, output_path: PathLike,
                     config: Optional[RenderConfig] = None) -> Path:
    """Animate a coefficient set as rotating vectors into a GIF"""
    return EpicycleRenderer(config).animate_coefficients(coeffs, output_path)


def render_spline(sx: Spline, sy: Spline, output_path: PathLike,
                  config: Optional[RenderConfig] = None) -> Path:
    """Draw a fitted spline path into a single image"""
    return EpicycleRenderer(config).draw_spline(sx, sy, output_path)


def plot_fit(result: PipelineResult, points: Optional[PointSet] = None,
             save_path: Optional[PathLike] = None):
    """Static plot of samples, spline path and Fourier redraw"""
    samples = (points.xs, points.ys) if points is not None else None
    return EpicycleRenderer().plot_fit(result.sx, result.sy, samples=samples,
                                       coeffs=result.coefficients, save_path=save_path)


def build_report(result: PipelineResult, source: Optional[str] = None) -> Dict[str, Any]:
    """JSON-friendly summary of a pipeline run"""
    report = {
        'version': __version__,
        'source': source,
        'stats': result.stats,
        'coefficients': result.coefficients.summary(),
    }
    if result.validation is not None:
        report['validation'] = {
            'is_valid': result.validation.is_valid,
            'quality_grade': result.validation.quality_grade,
            'issues': result.validation.issues,
            'metrics': {k: float(v) for k, v in result.validation.metrics.items()},
        }
    return report


def save_report(result: PipelineResult, path: PathLike, source: Optional[str] = None) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(build_report(result, source), f, indent=2)
    logger.info(f"Report saved to {path}")
    return path
