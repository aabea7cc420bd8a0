"""
Epicycle Splines Core Module

Core algorithms: the piecewise-cubic linear system, spline evaluation,
closed-form Fourier integration of splines, and fit validation.
"""

from .spline import SegmentMode, SplineSegment, Spline, same_domain
from .system import (
    SplineSystem, FactorizedSystem, build_system, interpolate, interpolate_coords
)
from .coefficients import CoefficientSet
from .fourier import FourierIntegrator, compute_fourier_coeffs
from .validation import SplineValidator, ValidationResult
from .pipeline import EpicyclePipeline, PipelineConfig, PipelineResult

__all__ = [
    'SegmentMode',
    'SplineSegment',
    'Spline',
    'same_domain',
    'SplineSystem',
    'FactorizedSystem',
    'build_system',
    'interpolate',
    'interpolate_coords',
    'CoefficientSet',
    'FourierIntegrator',
    'compute_fourier_coeffs',
    'SplineValidator',
    'ValidationResult',
    'EpicyclePipeline',
    'PipelineConfig',
    'PipelineResult',
]
