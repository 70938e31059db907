"""Pillow-backed decode capability invoked once the guard has admitted an image."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import BinaryIO, Optional, Tuple

from PIL import Image, ImageOps

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DecodeOptions:
    """Options forwarded to the decoder.

    Fields:
        formats: Restrict Pillow to these format names, e.g. ("PNG", "JPEG").
        auto_orient: Apply the EXIF orientation tag after decoding.
    """

    formats: Optional[Tuple[str, ...]] = None
    auto_orient: bool = False


# Formats produced by another plugin's factory, keyed to the plugin that opens them.
_OPENED_AS = {"MPO": "JPEG"}


def pin_format(options: Optional[DecodeOptions], fmt: str) -> DecodeOptions:
    """Restrict decoding to ``fmt``, the format whose header was admitted.

    Options that already exclude ``fmt`` are returned unchanged.
    """
    options = options or DecodeOptions()
    fmt = _OPENED_AS.get(fmt, fmt)
    if fmt not in Image.OPEN:
        return options
    if options.formats is not None and fmt not in options.formats:
        return options
    return replace(options, formats=(fmt,))


def pillow_decode(stream: BinaryIO, options: Optional[DecodeOptions] = None) -> Image.Image:
    """Fully decode ``stream`` into a pixel buffer."""
    options = options or DecodeOptions()
    image = Image.open(stream, formats=options.formats)
    image.load()
    if options.auto_orient:
        image = ImageOps.exif_transpose(image)
    logger.debug("Decoded %s %dx%d %s", image.format, image.width, image.height, image.mode)
    return image
