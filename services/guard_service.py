"""Guarded decoding: peek the header, admit it, and only then decode.

Typical use::

    guard = configure(max_width=4096, max_height=4096, max_memory_bytes=64 * 1024 * 1024)
    image = guarded_decode(guard, upload.stream)

A rejected image raises an :class:`~services.errors.AdmissionError` and is
never handed to the decoder, so its cost stays bounded by the header read.
"""

from __future__ import annotations

import logging
from typing import Any, BinaryIO, Callable, Optional, Tuple

from services.admission_service import DEFAULT_LIMITS, AdmissionResult, Limits, admit
from services.decode_service import DecodeOptions, pillow_decode, pin_format
from services.metadata import ImageMetadata
from services.peek_service import ReplayStream, StreamLike, peek_metadata

logger = logging.getLogger(__name__)

Decoder = Callable[[BinaryIO, Optional[DecodeOptions]], Any]


class ImageGuard:
    """Decodes images with ``decoder`` after checking them against ``limits``."""

    def __init__(
        self,
        limits: Limits,
        decoder: Decoder = pillow_decode,
        max_peek_bytes: Optional[int] = None,
    ) -> None:
        self.limits = limits
        self.decoder = decoder
        self.max_peek_bytes = max_peek_bytes

    def __repr__(self) -> str:
        return f"ImageGuard({self.limits!r})"

    def inspect(self, stream: StreamLike) -> Tuple[ImageMetadata, AdmissionResult, ReplayStream]:
        """Peek and admit without decoding.  The caller owns the replay stream."""
        metadata, replay = peek_metadata(stream, self.max_peek_bytes)
        return metadata, admit(self.limits, metadata), replay

    def decode(self, stream: StreamLike, options: Optional[DecodeOptions] = None) -> Any:
        """Decode ``stream`` if its header is within limits.

        Raises:
            HeaderParseError: if the header cannot be parsed.
            AdmissionError: if a limit is exceeded.  The decoder is not called.

        The decoder only sees the format the header was admitted as, and must
        consume the stream before returning; it is closed afterwards.
        """
        metadata, result, replay = self.inspect(stream)
        if not result.passed:
            replay.close()
            result.raise_for_rejection()
        logger.info(
            "Decoding %s %dx%d %s", metadata.format, metadata.width, metadata.height, metadata.mode
        )
        with replay:
            return self.decoder(replay, pin_format(options, metadata.format))


def configure(max_width: int = 0, max_height: int = 0, max_memory_bytes: int = 0) -> ImageGuard:
    """Return a guard with the given limits (``0`` disables a limit)."""
    return ImageGuard(Limits(max_width, max_height, max_memory_bytes))


def guarded_decode(
    handle: ImageGuard, stream: StreamLike, options: Optional[DecodeOptions] = None
) -> Any:
    return handle.decode(stream, options)


_default_guard = ImageGuard(DEFAULT_LIMITS)


def decode(stream: StreamLike, options: Optional[DecodeOptions] = None) -> Any:
    """Decode using :data:`DEFAULT_LIMITS` (unlimited dimensions, 32 MiB memory)."""
    return _default_guard.decode(stream, options)
