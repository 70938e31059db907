"""Worst-case memory estimates for decoded images."""

from __future__ import annotations

from typing import Dict

from services.metadata import ImageMetadata

# Bytes per pixel of Pillow's in-memory storage, keyed by image mode.
# Pillow stores every multi-band 8-bit mode in 4 bytes per pixel, including
# 3-band modes such as RGB and YCbCr.
BYTES_PER_PIXEL: Dict[str, int] = {
    "1": 1,
    "L": 1,
    "P": 1,
    "I;16": 2,
    "I;16L": 2,
    "I;16B": 2,
    "I;16N": 2,
    "LA": 4,
    "La": 4,
    "PA": 4,
    "RGB": 4,
    "RGBA": 4,
    "RGBa": 4,
    "RGBX": 4,
    "CMYK": 4,
    "YCbCr": 4,
    "LAB": 4,
    "HSV": 4,
    "I": 4,
    "F": 4,
}

# Unrecognised modes (new plugins, exotic formats) must never under-count.
WORST_CASE_BYTES_PER_PIXEL = 16


def bytes_per_pixel(mode: str) -> int:
    """Return the bytes per pixel for ``mode`` or the worst case if unknown."""
    return BYTES_PER_PIXEL.get(mode, WORST_CASE_BYTES_PER_PIXEL)


def estimate_memory(metadata: ImageMetadata) -> int:
    """Return the bytes needed to hold ``metadata``'s image once decoded.

    Does not account for any additional overhead the decoder may have while
    decoding.  Python integers never wrap, so adversarial dimensions such as
    ``0xFFFFFFFF x 0xFFFFFFFF`` produce a correspondingly huge estimate.
    """
    return metadata.width * metadata.height * bytes_per_pixel(metadata.mode)
