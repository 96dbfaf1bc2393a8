"""Parsing of the textual ``size`` and ``quality`` form fields."""

import math
import re

from .errors import InvalidFormat, InvalidValue, OutOfRange

MAX_DIMENSION = 2**32 - 1
MIN_QUALITY = 0.0
MAX_QUALITY = 100.0

# Plain decimal or exponent notation only: no whitespace or underscores.
_FLOAT_RE = re.compile(
    r"[+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|inf|infinity|nan)",
    re.ASCII | re.IGNORECASE,
)


def _parse_dimension(text: str, label: str) -> int:
    if not text or not text.isascii() or not text.isdigit():
        raise InvalidValue(f"Invalid {label} value")
    value = int(text)
    if value > MAX_DIMENSION:
        raise InvalidValue(f"Invalid {label} value")
    return value


def parse_size(text: str) -> tuple[int, int]:
    """
    Parse a ``WIDTHxHEIGHT`` string into a ``(width, height)`` tuple.

    Raises:
        InvalidFormat: if the text does not contain exactly one ``x``
        InvalidValue: if either side is not an unsigned 32-bit integer
    """

    parts = text.split("x")
    if len(parts) != 2:
        raise InvalidFormat("Invalid size format. Use 'WIDTHxHEIGHT'")
    width = _parse_dimension(parts[0], "width")
    height = _parse_dimension(parts[1], "height")
    return width, height


def parse_quality(text: str, strict: bool = False) -> float | None:
    """
    Parse a lossy quality value in ``[0.0, 100.0]``.

    Text that is not a number yields ``None`` so the caller falls back to the
    default quality. With ``strict`` set it raises ``InvalidValue`` instead.
    """

    if not _FLOAT_RE.fullmatch(text):
        if strict:
            raise InvalidValue("Invalid quality value")
        return None

    quality = float(text)
    if math.isnan(quality) or not MIN_QUALITY <= quality <= MAX_QUALITY:
        raise OutOfRange("Quality must be between 0.0 and 100.0")
    return quality
