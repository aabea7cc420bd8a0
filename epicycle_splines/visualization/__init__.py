"""
Epicycle Splines Visualization Module

Epicycle animations, spline path drawings and static fit plots.
"""

from .epicycle_plots import EpicycleRenderer, RenderConfig, create_epicycle_animation

__all__ = [
    'EpicycleRenderer',
    'RenderConfig',
    'create_epicycle_animation',
]
