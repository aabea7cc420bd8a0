"""
Epicycle Splines Utilities Module

Readers and writers for point and coefficient files, colour parsing,
and logging setup for command-line use.
"""

from .parsing import (
    PointSet, parse_points, read_points_file, parse_coefficients,
    read_coefficients_file, format_coefficients, write_coefficients_file,
    parse_hex_color, color_to_hex
)
from .logging import setup_logging

__all__ = [
    'PointSet',
    'parse_points',
    'read_points_file',
    'parse_coefficients',
    'read_coefficients_file',
    'format_coefficients',
    'write_coefficients_file',
    'parse_hex_color',
    'color_to_hex',
    'setup_logging',
]
