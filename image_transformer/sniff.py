"""Content-based detection of image container formats."""

import logging
from enum import Enum

from .errors import UnrecognizedFormat, UnsupportedFormat

logger = logging.getLogger(__name__)


class ImageFormat(str, Enum):
    PNG = "PNG"
    JPEG = "JPEG"
    WEBP = "WEBP"
    GIF = "GIF"
    BMP = "BMP"
    TIFF = "TIFF"
    ICO = "ICO"


SUPPORTED_FORMATS = frozenset({ImageFormat.PNG, ImageFormat.JPEG, ImageFormat.WEBP})

# Checked in order; prefixes must not shadow each other.
MAGIC_BYTES: tuple[tuple[bytes, ImageFormat], ...] = (
    (b"\x89PNG\r\n\x1a\n", ImageFormat.PNG),
    (b"\xff\xd8\xff", ImageFormat.JPEG),
    (b"GIF87a", ImageFormat.GIF),
    (b"GIF89a", ImageFormat.GIF),
    (b"BM", ImageFormat.BMP),
    (b"II*\x00", ImageFormat.TIFF),
    (b"MM\x00*", ImageFormat.TIFF),
    (b"\x00\x00\x01\x00", ImageFormat.ICO),
)


def sniff(data: bytes) -> ImageFormat:
    """
    Classify ``data`` by its leading signature.

    WebP is a RIFF container, so both the ``RIFF`` tag and the ``WEBP``
    form type at offset 8 must be present.

    Raises:
        UnrecognizedFormat: if no known signature matches
    """

    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return ImageFormat.WEBP

    for magic, fmt in MAGIC_BYTES:
        if data.startswith(magic):
            return fmt

    raise UnrecognizedFormat("Could not determine image format")


def validate(fmt: ImageFormat) -> None:
    """Reject formats that are recognized but not accepted as input."""
    if fmt not in SUPPORTED_FORMATS:
        raise UnsupportedFormat("Input image must be PNG, JPG, or WebP")


def sniff_and_validate(data: bytes) -> ImageFormat:
    fmt = sniff(data)
    validate(fmt)
    logger.debug("Sniffed %s input (%d bytes)", fmt.value, len(data))
    return fmt
