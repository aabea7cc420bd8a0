"""Epicycle Splines: time-tagged paths as splines and rotating vectors."""
__version__ = "1.0.0"

from .core.spline import SegmentMode, Spline, SplineSegment
from .core.system import build_system, interpolate, interpolate_coords
from .core.fourier import compute_fourier_coeffs
from .core.coefficients import CoefficientSet
from .core.pipeline import EpicyclePipeline, PipelineConfig, PipelineResult
from .utils.parsing import read_coefficients_file, read_points_file
from .visualization.epicycle_plots import EpicycleRenderer, RenderConfig
from .api import compute_path_coefficients
