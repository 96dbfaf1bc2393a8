"""Decode, resample and re-encode an uploaded image as lossy WebP."""

import io
import logging
import time

from PIL import Image

from .errors import DecodeError, EncodeError, InvalidValue, OutOfRange, TransformError
from .models import TransformFailure, TransformRequest, TransformResult, TransformSuccess
from .sniff import sniff_and_validate

logger = logging.getLogger(__name__)

DEFAULT_QUALITY = 100.0

_SIXTEEN_BIT_MODES = ("I", "I;16", "I;16B", "I;16L", "I;16N")


def decode(data: bytes) -> Image.Image:
    """
    Check the format signature, then decode into a fully loaded Pillow image.

    Raises:
        UnrecognizedFormat, UnsupportedFormat: before any decoding work
        DecodeError: on corrupt, truncated or oversized input
    """

    fmt = sniff_and_validate(data)
    try:
        img = Image.open(io.BytesIO(data), formats=[fmt.value])
        img.load()
    except (OSError, ValueError, SyntaxError, Image.DecompressionBombError) as exc:
        raise DecodeError(f"Failed to decode image: {exc}") from exc
    return img


def resample(
    image: Image.Image,
    width: int,
    height: int,
    max_output_pixels: int | None = None,
) -> Image.Image:
    """Resize to exactly ``width`` x ``height`` with a 3-lobe Lanczos filter."""

    if width == 0 or height == 0:
        raise InvalidValue("Width and height must be greater than zero")
    if max_output_pixels is not None and width * height > max_output_pixels:
        raise OutOfRange(
            f"Requested size {width}x{height} exceeds the limit of {max_output_pixels} pixels"
        )

    # Pillow falls back to nearest-neighbour for palette and bilevel images.
    if image.mode in ("1", "P"):
        image = image.convert("RGBA")
    try:
        return image.resize((width, height), Image.Resampling.LANCZOS)
    except (OverflowError, MemoryError, ValueError) as exc:
        logger.debug("Resize to %dx%d failed: %s", width, height, exc)
        raise OutOfRange(f"Requested size {width}x{height} is too large") from exc


def _to_rgba8(image: Image.Image) -> Image.Image:
    if image.mode == "RGBA":
        return image
    if image.mode in _SIXTEEN_BIT_MODES:
        image = image.convert("I").point(lambda v: v * (1 / 256)).convert("L")
    return image.convert("RGBA")


def encode(image: Image.Image, quality: float = DEFAULT_QUALITY) -> bytes:
    """
    Encode ``image`` as lossy WebP at ``quality`` (0.0 smallest, 100.0 best).

    Raises:
        EncodeError: if the encoder fails or returns no data
    """

    buffer = io.BytesIO()
    try:
        _to_rgba8(image).save(buffer, format="WEBP", quality=quality, lossless=False)
    except (OSError, ValueError) as exc:
        logger.debug("WebP encoder raised: %s", exc)
        raise EncodeError("Failed to encode image to WebP format") from exc

    encoded = buffer.getvalue()
    if not encoded:
        raise EncodeError("Failed to encode image to WebP format")
    return encoded


def transform(
    request: TransformRequest,
    default_quality: float = DEFAULT_QUALITY,
    max_output_pixels: int | None = None,
) -> bytes:
    """Run every stage in order; any failure propagates unchanged."""

    started = time.perf_counter()
    img = decode(request.image)
    source_size = img.size

    if request.size is not None:
        width, height = request.size
        img = resample(img, width, height, max_output_pixels=max_output_pixels)

    quality = request.quality if request.quality is not None else default_quality
    encoded = encode(img, quality)

    logger.info(
        "Transformed %dx%d -> %dx%d at quality %.1f (%d -> %d bytes) in %.1f ms",
        source_size[0],
        source_size[1],
        img.width,
        img.height,
        quality,
        len(request.image),
        len(encoded),
        (time.perf_counter() - started) * 1000,
    )
    return encoded


def run_pipeline(
    request: TransformRequest,
    default_quality: float = DEFAULT_QUALITY,
    max_output_pixels: int | None = None,
) -> TransformResult:
    """Transform ``request`` and fold any pipeline error into a failure result."""

    try:
        output = transform(
            request,
            default_quality=default_quality,
            max_output_pixels=max_output_pixels,
        )
    except TransformError as exc:
        return TransformFailure.from_error(exc)
    return TransformSuccess(output=output)
