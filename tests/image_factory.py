"""Helpers for building encoded test images in memory."""

from __future__ import annotations

import io
import struct
import zlib

from PIL import Image

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


def png_chunk(cid: bytes, data: bytes) -> bytes:
    crc = zlib.crc32(cid + data) & 0xFFFFFFFF
    return struct.pack(">I", len(data)) + cid + data + struct.pack(">I", crc)


def png_header(
    width: int,
    height: int,
    color_type: int = 6,
    bit_depth: int = 8,
    text: bytes = b"",
    idat: bytes = b"",
) -> bytes:
    """Return a PNG whose IHDR declares ``width`` x ``height``.

    The pixel data is not consistent with the header, which is fine: only a
    full decode would notice.  ``color_type`` 6 with 8-bit depth is RGBA.
    """
    ihdr = struct.pack(">IIBBBBB", width, height, bit_depth, color_type, 0, 0, 0)
    data = PNG_SIGNATURE + png_chunk(b"IHDR", ihdr)
    if text:
        data += png_chunk(b"tEXt", b"Comment\x00" + text)
    data += png_chunk(b"IDAT", idat or zlib.compress(b"\x00" * 64))
    return data + png_chunk(b"IEND", b"")


def encoded_image(mode: str, size: tuple[int, int], fmt: str = "PNG") -> bytes:
    buf = io.BytesIO()
    Image.new(mode, size).save(buf, format=fmt)
    return buf.getvalue()


class TrickleStream:
    """Forward-only stream returning at most ``step`` bytes per read.

    Exposes only ``read`` so nothing can seek it, and records how many bytes
    have been handed out.
    """

    def __init__(self, data: bytes, step: int = 3) -> None:
        self._data = data
        self._step = step
        self.consumed = 0

    def read(self, size: int = -1) -> bytes:
        if size is None or size < 0:
            size = len(self._data) - self.consumed
        size = min(size, self._step)
        chunk = self._data[self.consumed:self.consumed + size]
        self.consumed += len(chunk)
        return chunk


def ico_with_png(png: bytes) -> bytes:
    """Return a single-entry ICO file whose only frame is ``png``.

    The directory entry claims 256x256 (stored as 0) whatever the PNG says.
    """
    directory = struct.pack("<HHH", 0, 1, 1)
    entry = struct.pack("<BBBBHHII", 0, 0, 0, 0, 1, 32, len(png), 6 + 16)
    return directory + entry + png
