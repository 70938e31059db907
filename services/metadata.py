"""Header metadata shared by the peek, estimate and admission services."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ImageMetadata:
    """Dimensions and colour model declared by an image header.

    Fields:
        width: Declared width, px.
        height: Declared height, px.
        mode: Pillow mode, e.g. "RGBA". Used as the colour-model tag.
        format: Pillow format name, e.g. "PNG".
    """

    width: int
    height: int
    mode: str
    format: str

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise ValueError(f"dimensions must be non-negative, got {self.width}x{self.height}")

    @property
    def pixels(self) -> int:
        return self.width * self.height
