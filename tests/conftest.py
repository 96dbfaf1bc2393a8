"""Shared fixtures for generating test images in memory."""

import io
import random

import pytest
from PIL import Image


def make_image_bytes(
    width: int,
    height: int,
    fmt: str = "PNG",
    mode: str = "RGB",
    noisy: bool = False,
) -> bytes:
    """Encode a solid red (or seeded noise) image of the given size."""
    if noisy:
        rng = random.Random(1234)
        channels = len(Image.new(mode, (1, 1)).getbands())
        img = Image.frombytes(mode, (width, height), rng.randbytes(width * height * channels))
    else:
        img = Image.new(mode, (width, height), color="red" if mode in ("RGB", "RGBA") else 0)
    buf = io.BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


def decode_bytes(data: bytes) -> Image.Image:
    img = Image.open(io.BytesIO(data))
    img.load()
    return img


@pytest.fixture
def make_image():
    return make_image_bytes


@pytest.fixture
def open_image():
    return decode_bytes
