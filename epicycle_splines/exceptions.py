"""
Epicycle Splines Custom Exceptions

Provides specific exception classes for the errors that can occur while
fitting splines, integrating Fourier coefficients, reading input files
and rendering animations.
"""

import numpy as np


class EpicycleSplinesError(Exception):
    """Base exception class for all Epicycle Splines errors"""

    def __init__(self, message: str, error_code: str = "ES_GENERAL"):
        super().__init__(message)
        self.error_code = error_code
        self.message = message

    def __str__(self):
        return f"[{self.error_code}] {self.message}"


class DimensionMismatchError(EpicycleSplinesError, ValueError):
    """Raised when breakpoint, sample or mode sequences disagree in length"""

    def __init__(self, message: str, expected: int = None, actual: int = None,
                 error_code: str = "ES_DIMENSION"):
        self.expected = expected
        self.actual = actual

        full_message = message
        if expected is not None and actual is not None:
            full_message += f" (expected: {expected}, got: {actual})"

        super().__init__(full_message, error_code)


class DomainMismatchError(DimensionMismatchError):
    """Raised when the two axis splines disagree on domain or segment count"""

    def __init__(self, message: str, expected=None, actual=None):
        super().__init__(message, expected, actual, error_code="ES_DOMAIN_MISMATCH")


class SingularSystemError(EpicycleSplinesError, np.linalg.LinAlgError):
    """Raised when the spline system has no unique solution"""

    def __init__(self, message: str, order: int = None):
        self.order = order

        full_message = f"Spline system is singular: {message}"
        if order is not None:
            full_message += f" (order={order})"

        super().__init__(full_message, "ES_SINGULAR")


class InvalidBreakpointsError(EpicycleSplinesError, ValueError):
    """Raised when breakpoints are too few, non-finite or out of order"""

    def __init__(self, message: str, index: int = None):
        self.index = index

        full_message = f"Invalid breakpoints: {message}"
        if index is not None:
            full_message += f" (at index {index})"

        super().__init__(full_message, "ES_BREAKPOINTS")


class DomainError(EpicycleSplinesError, ValueError):
    """Raised by strict callers when a time lies outside a spline's domain"""

    def __init__(self, message: str, t: float = None, domain: tuple = None):
        self.t = t
        self.domain = domain

        full_message = message
        if t is not None and domain is not None:
            full_message += f" (t={t}, domain=[{domain[0]}, {domain[1]}])"

        super().__init__(full_message, "ES_DOMAIN")


class SegmentIndexError(EpicycleSplinesError, IndexError):
    """Raised on out-of-range segment or harmonic access"""

    def __init__(self, message: str, index: int = None, size: int = None):
        self.index = index
        self.size = size

        full_message = message
        if index is not None and size is not None:
            full_message += f" (index {index}, size {size})"

        super().__init__(full_message, "ES_INDEX")


class ParseError(EpicycleSplinesError, ValueError):
    """Raised when a point or coefficient file cannot be parsed"""

    def __init__(self, message: str, line_number: int = None, line: str = None,
                 source: str = None):
        self.line_number = line_number
        self.line = line
        self.source = source

        location = source or "<input>"
        if line_number is not None:
            location += f":{line_number}"
        full_message = f"{location}: {message}"
        if line is not None:
            full_message += f" (line: {line!r})"

        super().__init__(full_message, "ES_PARSE")


class ConfigurationError(EpicycleSplinesError):
    """Raised when configuration is invalid"""

    def __init__(self, message: str, config_key: str = None,
                 config_value: str = None):
        self.config_key = config_key
        self.config_value = config_value

        full_message = f"Configuration error: {message}"

        if config_key:
            full_message += f" (key: {config_key}"
            if config_value:
                full_message += f", value: {config_value}"
            full_message += ")"

        super().__init__(full_message, "ES_CONFIG")


class RenderError(EpicycleSplinesError):
    """Raised when an animation or plot cannot be produced"""

    def __init__(self, message: str, output_path: str = None):
        self.output_path = output_path

        if output_path:
            full_message = f"Rendering failed ({output_path}): {message}"
        else:
            full_message = f"Rendering failed: {message}"

        super().__init__(full_message, "ES_RENDER")


def validate_positive_int(value, name: str):
    """Validate that a configuration value is a positive integer"""
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise ConfigurationError(
            f"{name} must be an integer, got {type(value).__name__}",
            config_key=name
        )

    if value < 1:
        raise ConfigurationError(
            f"{name} must be >= 1, got {value}",
            config_key=name,
            config_value=str(value)
        )


__all__ = [
    'EpicycleSplinesError',
    'DimensionMismatchError',
    'DomainMismatchError',
    'SingularSystemError',
    'InvalidBreakpointsError',
    'DomainError',
    'SegmentIndexError',
    'ParseError',
    'ConfigurationError',
    'RenderError',
    'validate_positive_int',
]
