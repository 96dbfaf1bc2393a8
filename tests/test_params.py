"""Tests for size and quality parameter parsing."""

import pytest

from image_transformer.errors import InvalidFormat, InvalidValue, OutOfRange
from image_transformer.params import parse_quality, parse_size


def test_parse_size_valid():
    assert parse_size("800x600") == (800, 600)


def test_parse_size_allows_zero():
    """Zero is a valid unsigned integer here; the resampler rejects it later."""
    assert parse_size("0x10") == (0, 10)


@pytest.mark.parametrize("text", ["800", "800x600x10", "", "800X600"])
def test_parse_size_wrong_separator_count(text):
    with pytest.raises(InvalidFormat) as exc_info:
        parse_size(text)
    assert "WIDTHxHEIGHT" in exc_info.value.message


@pytest.mark.parametrize(
    "text, label",
    [
        ("ax10", "width"),
        ("10xb", "height"),
        ("-5x10", "width"),
        ("+5x10", "width"),
        ("1.5x10", "width"),
        ("x10", "width"),
        ("10x", "height"),
        (" 10x10", "width"),
        ("4294967296x1", "width"),
    ],
)
def test_parse_size_invalid_values(text, label):
    with pytest.raises(InvalidValue) as exc_info:
        parse_size(text)
    assert exc_info.value.message == f"Invalid {label} value"


def test_parse_size_accepts_u32_max():
    assert parse_size("4294967295x1") == (4294967295, 1)


@pytest.mark.parametrize("text, expected", [("0", 0.0), ("100", 100.0), ("75.5", 75.5), ("1e1", 10.0)])
def test_parse_quality_in_range(text, expected):
    assert parse_quality(text) == expected


@pytest.mark.parametrize("text", ["101", "-1", "100.01", "inf", "nan"])
def test_parse_quality_out_of_range(text):
    with pytest.raises(OutOfRange) as exc_info:
        parse_quality(text)
    assert exc_info.value.message == "Quality must be between 0.0 and 100.0"


@pytest.mark.parametrize("text", ["notanumber", "", "50%"])
def test_parse_quality_lenient_treats_garbage_as_absent(text):
    assert parse_quality(text) is None


def test_parse_quality_strict_rejects_garbage():
    with pytest.raises(InvalidValue):
        parse_quality("notanumber", strict=True)


def test_parse_quality_strict_still_range_checks():
    with pytest.raises(OutOfRange):
        parse_quality("101", strict=True)


@pytest.mark.parametrize("text, expected", [("5.", 5.0), (".5", 0.5), ("+50", 50.0), ("1E2", 100.0)])
def test_parse_quality_plain_notation(text, expected):
    assert parse_quality(text) == expected


@pytest.mark.parametrize("text", [" 50", "50 ", "1_0", "\t7", "٥٠"])
def test_parse_quality_rejects_loose_float_syntax(text):
    assert parse_quality(text) is None
    with pytest.raises(InvalidValue):
        parse_quality(text, strict=True)
