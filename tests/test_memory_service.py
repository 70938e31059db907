from pathlib import Path
import sys

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))
from services.memory_service import (
    BYTES_PER_PIXEL,
    WORST_CASE_BYTES_PER_PIXEL,
    bytes_per_pixel,
    estimate_memory,
)
from services.metadata import ImageMetadata


def _meta(width, height, mode="RGBA"):
    return ImageMetadata(width=width, height=height, mode=mode, format="PNG")


@pytest.mark.parametrize(
    "mode, expected",
    [("L", 1), ("P", 1), ("1", 1), ("I;16", 2), ("RGB", 4), ("RGBA", 4), ("CMYK", 4), ("YCbCr", 4), ("F", 4)],
)
def test_known_modes(mode, expected):
    assert bytes_per_pixel(mode) == expected


def test_unknown_mode_is_worst_case():
    assert bytes_per_pixel("BGR;24-future") == 16
    assert WORST_CASE_BYTES_PER_PIXEL >= max(BYTES_PER_PIXEL.values())


def test_rgba_estimate():
    assert estimate_memory(_meta(958, 720)) == 2_758_464


def test_huge_dimensions_do_not_wrap():
    side = 0xFFFFFFFF
    estimate = estimate_memory(_meta(side, side, "unknown"))
    assert estimate == side * side * 16
    assert estimate > 2**64


def test_estimate_is_monotonic():
    assert estimate_memory(_meta(100, 100)) <= estimate_memory(_meta(101, 100))
    assert estimate_memory(_meta(100, 100)) <= estimate_memory(_meta(100, 101))
    assert estimate_memory(_meta(100, 100, "L")) <= estimate_memory(_meta(100, 100, "I;16"))
    assert estimate_memory(_meta(100, 100, "RGBA")) <= estimate_memory(_meta(100, 100, "mystery"))


def test_zero_dimension_estimates_zero():
    assert estimate_memory(_meta(0, 5000)) == 0


def test_negative_dimensions_rejected():
    with pytest.raises(ValueError):
        _meta(-1, 10)
