"""Read an image header without losing the bytes it was read from.

Pillow's ``Image.open`` is lazy: it parses the header and stops before the
pixel data.  Here it reads through a tee that records every byte pulled from
the source.  Once the header is parsed, the recorded prefix and the unread
remainder of the source are stitched back together into a
:class:`ReplayStream`, so a later full decode sees the stream exactly as if
nothing had been read.

The source does not need to be seekable.  The tee is seekable within the
bytes it has recorded (Pillow rewinds between format probes) and pulls
forward from the source on demand, never past ``max_peek_bytes``.
"""

from __future__ import annotations

import io
import logging
import struct
from typing import BinaryIO, Optional, Tuple, Union

from PIL import Image

import config
import init.image_config  # noqa: F401
from services.errors import HeaderParseError, PeekBudgetExceeded
from services.metadata import ImageMetadata

logger = logging.getLogger(__name__)

_CHUNK = 64 * 1024

# Plugins whose _open decodes pixel data rather than only reading a header.
# ICO loads its first frame (possibly an embedded PNG of any size) on open.
PIXEL_LOADING_FORMATS = frozenset({"ICO"})

StreamLike = Union[BinaryIO, io.RawIOBase, bytes, bytearray, memoryview]


class _HeaderTee(io.RawIOBase):
    """Seekable view over the bytes read so far from a forward-only source."""

    def __init__(self, source: BinaryIO, budget: int) -> None:
        super().__init__()
        self._source = source
        self._budget = budget
        self._buffer = bytearray()
        self._pos = 0
        self._eof = False

    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return True

    def tell(self) -> int:
        return self._pos

    def getvalue(self) -> bytes:
        """Return every byte consumed from the source so far."""
        return bytes(self._buffer)

    def _fill(self, upto: Optional[int]) -> None:
        # upto=None pulls until the source is exhausted.
        while not self._eof and (upto is None or len(self._buffer) < upto):
            want = _CHUNK if upto is None else upto - len(self._buffer)
            if self._budget:
                room = self._budget - len(self._buffer)
                if room <= 0:
                    # Full buffer: only fail if the source has more to give.
                    if self._source.read(1):
                        raise PeekBudgetExceeded(self._budget)
                    self._eof = True
                    break
                want = min(want, room)
            chunk = self._source.read(want)
            if not chunk:
                self._eof = True
                break
            self._buffer += chunk

    def read(self, size: Optional[int] = -1) -> bytes:
        if size is None or size < 0:
            self._fill(None)
            end = len(self._buffer)
        else:
            end = self._pos + size
            self._fill(end)
        data = bytes(self._buffer[self._pos:end])
        self._pos += len(data)
        return data

    def readall(self) -> bytes:
        return self.read(-1)

    def readinto(self, b) -> int:
        data = self.read(len(b))
        b[: len(data)] = data
        return len(data)

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        if whence == io.SEEK_SET:
            target = offset
        elif whence == io.SEEK_CUR:
            target = self._pos + offset
        elif whence == io.SEEK_END:
            self._fill(None)
            target = len(self._buffer) + offset
        else:
            raise ValueError(f"invalid whence ({whence})")
        if target < 0:
            raise ValueError(f"negative seek position {target}")
        self._pos = target
        return target


class ReplayStream(io.RawIOBase):
    """Forward-only stream yielding ``prefix`` followed by the rest of ``source``.

    Reading it is equivalent to reading ``source`` from the point where the
    peek started.  It is meant to be consumed once; closing it does not close
    ``source``, which remains owned by whoever opened it.
    """

    def __init__(self, prefix: bytes, source: BinaryIO) -> None:
        super().__init__()
        self._prefix = prefix
        self._offset = 0
        self._source = source

    @property
    def prefix_length(self) -> int:
        return len(self._prefix)

    def readable(self) -> bool:
        return True

    def readinto(self, b) -> int:
        if self.closed:
            raise ValueError("I/O operation on closed replay stream")
        if self._offset < len(self._prefix):
            n = min(len(b), len(self._prefix) - self._offset)
            b[:n] = self._prefix[self._offset:self._offset + n]
            self._offset += n
            if self._offset == len(self._prefix):
                self._prefix = b""
                self._offset = 0
            return n
        chunk = self._source.read(len(b))
        if not chunk:
            return 0
        b[: len(chunk)] = chunk
        return len(chunk)

    def read(self, size: Optional[int] = -1) -> bytes:
        if size is None or size < 0:
            return self.readall()
        parts = []
        remaining = size
        while remaining > 0:
            buf = bytearray(remaining)
            n = self.readinto(buf)
            if not n:
                break
            parts.append(bytes(buf[:n]))
            remaining -= n
        return b"".join(parts)

    def close(self) -> None:
        self._prefix = b""
        super().close()


def header_formats() -> list:
    """Return the registered Pillow formats that are safe to open for a peek."""
    Image.init()
    return [fmt for fmt in Image.ID if fmt not in PIXEL_LOADING_FORMATS]


def peek_metadata(
    stream: StreamLike, max_peek_bytes: Optional[int] = None
) -> Tuple[ImageMetadata, ReplayStream]:
    """Parse the header of ``stream`` and return its metadata and a replay stream.

    Args:
        stream: Binary file-like object (only ``read`` is required) or raw bytes.
        max_peek_bytes: Most bytes that may be buffered while parsing the
            header. ``None`` uses ``config.MAX_PEEK_BYTES``; ``0`` is unlimited.

    Returns:
        ``(metadata, replay)`` where ``replay`` reproduces ``stream`` from the
        position it was at when passed in.

    Raises:
        HeaderParseError: if no registered format recognises the header.
        PeekBudgetExceeded: if the header needs more than ``max_peek_bytes``.
    """
    if isinstance(stream, (bytes, bytearray, memoryview)):
        stream = io.BytesIO(bytes(stream))
    budget = config.MAX_PEEK_BYTES if max_peek_bytes is None else max_peek_bytes
    if budget < 0:
        raise ValueError(f"max_peek_bytes must be >= 0, got {budget}")

    tee = _HeaderTee(stream, budget)
    try:
        with Image.open(tee, formats=header_formats()) as image:
            metadata = ImageMetadata(
                width=image.width,
                height=image.height,
                mode=image.mode,
                format=image.format or "",
            )
    except HeaderParseError:
        raise
    except (OSError, SyntaxError, ValueError, EOFError, struct.error) as exc:
        raise HeaderParseError(f"decoding config: {exc}") from exc

    prefix = tee.getvalue()
    logger.debug(
        "Peeked %s header %dx%d %s from %d bytes",
        metadata.format,
        metadata.width,
        metadata.height,
        metadata.mode,
        len(prefix),
    )
    return metadata, ReplayStream(prefix, stream)
