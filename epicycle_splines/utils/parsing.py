"""
Input and Output Formats

Readers for the two text inputs of the pipeline and a writer for the
coefficient format:

* point files, one ``t: (x, y)`` per line, optionally followed by
  ``linear`` or ``cubic`` to set that breakpoint's mode flag;
* raw coefficient files, one ``(re,im) & (re,im)`` per line (``c_k`` then
  ``c_-k``), line order being harmonic order from 0.

Numbers accept every notation ``float()`` accepts: ``3.14``, ``-3.14``,
``2.5E-10``, ``5.``, ``.5``, ``inf``, ``-inf`` and ``NaN``. Blank lines and
lines starting with ``#`` are ignored.
"""

import logging
import math
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple, Union

import numpy as np

from ..core.coefficients import CoefficientSet
from ..core.spline import SegmentMode
from ..exceptions import ConfigurationError, ParseError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

_NUMBER = r"([^,()&:\s]+)"
_POINT_RE = re.compile(
    rf"^\s*{_NUMBER}\s*:\s*\(\s*{_NUMBER}\s*,\s*{_NUMBER}\s*\)\s*(?:([A-Za-z]+)\s*)?$"
)
_PAIR = rf"\(\s*{_NUMBER}\s*,\s*{_NUMBER}\s*\)"
_COEFF_RE = re.compile(rf"^\s*{_PAIR}\s*&\s*{_PAIR}\s*$")


@dataclass
class PointSet:
    """Time-tagged 2D samples as read from a point file"""
    times: np.ndarray
    xs: np.ndarray
    ys: np.ndarray
    modes: List[SegmentMode] = field(default_factory=list)
    source: Optional[str] = None

    def __post_init__(self):
        if not self.modes:
            self.modes = [SegmentMode.CUBIC] * len(self.times)

    def __len__(self) -> int:
        return len(self.times)


def _content_lines(text: str):
    for number, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith('#'):
            continue
        yield number, line


def _to_float(token: str, line_number: int, line: str, source: Optional[str]) -> float:
    try:
        return float(token)
    except ValueError:
        raise ParseError(f"invalid number {token!r}", line_number=line_number,
                         line=line, source=source)


def parse_points(text: str, source: Optional[str] = None) -> PointSet:
    """Parse the contents of a point file

    Raises:
        ParseError: on a malformed line, a bad number, an unknown mode
            keyword or fewer than two points
    """
    times, xs, ys, modes = [], [], [], []

    for number, line in _content_lines(text):
        match = _POINT_RE.match(line)
        if match is None:
            raise ParseError("expected 't: (x, y)'", line_number=number,
                             line=line, source=source)

        t_tok, x_tok, y_tok, mode_tok = match.groups()
        times.append(_to_float(t_tok, number, line, source))
        xs.append(_to_float(x_tok, number, line, source))
        ys.append(_to_float(y_tok, number, line, source))

        if mode_tok is None:
            modes.append(SegmentMode.CUBIC)
        else:
            try:
                modes.append(SegmentMode.coerce(mode_tok))
            except ValueError:
                raise ParseError(f"unknown mode {mode_tok!r} (use 'linear' or 'cubic')",
                                 line_number=number, line=line, source=source)

    if len(times) < 2:
        raise ParseError(f"at least two points are required, found {len(times)}",
                         source=source)

    logger.debug(f"Parsed {len(times)} points from {source or '<input>'}")
    return PointSet(
        times=np.array(times),
        xs=np.array(xs),
        ys=np.array(ys),
        modes=modes,
        source=source,
    )


def read_points_file(path: PathLike) -> PointSet:
    path = Path(path)
    with open(path, 'r', encoding='utf-8') as f:
        text = f.read()
    return parse_points(text, source=str(path))


def parse_coefficients(text: str, source: Optional[str] = None,
                       period: float = 2.0 * math.pi, start: float = 0.0) -> CoefficientSet:
    """Parse a raw coefficient file

    Raw coefficients carry no time information; they are drawn over
    ``[start, start + period)``, one full turn by default.
    """
    positive, negative = [], []

    for number, line in _content_lines(text):
        match = _COEFF_RE.match(line)
        if match is None:
            raise ParseError("expected '(re,im) & (re,im)'", line_number=number,
                             line=line, source=source)

        p_re, p_im, n_re, n_im = (_to_float(tok, number, line, source) for tok in match.groups())
        positive.append(complex(p_re, p_im))
        negative.append(complex(n_re, n_im))

    if not positive:
        raise ParseError("no coefficients found", source=source)

    logger.debug(f"Parsed {len(positive)} harmonics from {source or '<input>'}")
    return CoefficientSet(positive, negative, period=period, start=start)


def read_coefficients_file(path: PathLike, period: float = 2.0 * math.pi,
                           start: float = 0.0) -> CoefficientSet:
    path = Path(path)
    with open(path, 'r', encoding='utf-8') as f:
        text = f.read()
    return parse_coefficients(text, source=str(path), period=period, start=start)


def _format_pair(z: complex) -> str:
    return f"({float(z.real)!r},{float(z.imag)!r})"


def format_coefficients(coeffs: CoefficientSet) -> str:
    """Serialize a coefficient set in the raw coefficient format

    ``repr`` keeps every digit, so reading the text back gives the same
    floats.
    """
    lines = [
        f"{_format_pair(p)} & {_format_pair(n)}"
        for p, n in zip(coeffs.positive.tolist(), coeffs.negative.tolist())
    ]
    return "\n".join(lines) + "\n"


def write_coefficients_file(coeffs: CoefficientSet, path: PathLike) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        f.write(format_coefficients(coeffs))
    logger.info(f"Wrote {len(coeffs)} harmonics to {path}")
    return path


def parse_hex_color(value: str) -> Tuple[int, int, int]:
    """Parse ``0xRRGGBB``, ``#RRGGBB`` or ``RRGGBB`` into an ``(r, g, b)`` tuple"""
    text = value.strip()
    if text.lower().startswith('0x'):
        text = text[2:]
    elif text.startswith('#'):
        text = text[1:]

    if not re.fullmatch(r"[0-9A-Fa-f]{6}", text):
        raise ConfigurationError("colour must be six hex digits, e.g. 0xFF8800",
                                 config_key="color", config_value=value)
    return tuple(int(text[i:i + 2], 16) for i in (0, 2, 4))


def color_to_hex(rgb: Tuple[int, int, int]) -> str:
    """Matplotlib colour string for an ``(r, g, b)`` tuple"""
    return "#{:02x}{:02x}{:02x}".format(*rgb)
