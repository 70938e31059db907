"""Admission policy deciding whether a header may proceed to a full decode."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Optional

import config
from services.errors import (
    AdmissionError,
    ExceedsMaxHeight,
    ExceedsMaxMemory,
    ExceedsMaxWidth,
)
from services.memory_service import estimate_memory
from services.metadata import ImageMetadata

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Limits:
    """Ceilings applied to an image header.  ``0`` disables a limit.

    Example:
        >>> Limits(max_memory_bytes=32 * 1024 * 1024)  # memory only
        >>> Limits.unlimited()
    """

    max_width: int = 0
    max_height: int = 0
    max_memory_bytes: int = 0

    def __post_init__(self) -> None:
        for name in ("max_width", "max_height", "max_memory_bytes"):
            value = getattr(self, name)
            if value < 0:
                raise ValueError(f"{name} must be >= 0 (0 disables the limit), got {value}")

    @classmethod
    def unlimited(cls) -> "Limits":
        return cls()

    @classmethod
    def default(cls) -> "Limits":
        """Limits taken from the environment (see ``config``)."""
        return cls(
            max_width=config.MAX_WIDTH,
            max_height=config.MAX_HEIGHT,
            max_memory_bytes=config.MAX_MEMORY_BYTES,
        )

    def is_width_limited(self) -> bool:
        return self.max_width != 0

    def is_height_limited(self) -> bool:
        return self.max_height != 0

    def is_memory_limited(self) -> bool:
        return self.max_memory_bytes != 0

    def as_dict(self) -> dict:
        return {
            "max_width": self.max_width,
            "max_height": self.max_height,
            "max_memory_bytes": self.max_memory_bytes,
        }


# Unlimited dimensions with a 32 MiB memory ceiling.
DEFAULT_LIMITS = Limits(max_memory_bytes=32 * 1024 * 1024)


class RejectReason(enum.Enum):
    EXCEEDS_MAX_WIDTH = "exceeds_max_width"
    EXCEEDS_MAX_HEIGHT = "exceeds_max_height"
    EXCEEDS_MAX_MEMORY = "exceeds_max_memory"


_ERRORS = {
    RejectReason.EXCEEDS_MAX_WIDTH: ExceedsMaxWidth,
    RejectReason.EXCEEDS_MAX_HEIGHT: ExceedsMaxHeight,
    RejectReason.EXCEEDS_MAX_MEMORY: ExceedsMaxMemory,
}


@dataclass(frozen=True)
class AdmissionResult:
    """Outcome of :func:`admit`.

    ``reason`` is ``None`` when the image passed.  On rejection ``observed``
    and ``limit`` hold the offending value and the ceiling it exceeded.
    ``estimated_bytes`` is ``None`` when a dimension check rejected the
    image before memory was estimated.
    """

    reason: Optional[RejectReason] = None
    observed: int = 0
    limit: int = 0
    estimated_bytes: Optional[int] = None

    @property
    def passed(self) -> bool:
        return self.reason is None

    def to_error(self) -> Optional[AdmissionError]:
        if self.reason is None:
            return None
        return _ERRORS[self.reason](self.observed, self.limit)

    def raise_for_rejection(self) -> None:
        error = self.to_error()
        if error is not None:
            raise error


def admit(limits: Limits, metadata: ImageMetadata) -> AdmissionResult:
    """Check ``metadata`` against ``limits``; the first violation wins.

    Width is checked before height, and both before memory, so a caller
    gets the most specific diagnosis available.
    """
    if limits.is_width_limited() and metadata.width > limits.max_width:
        result = AdmissionResult(RejectReason.EXCEEDS_MAX_WIDTH, metadata.width, limits.max_width)
    elif limits.is_height_limited() and metadata.height > limits.max_height:
        result = AdmissionResult(RejectReason.EXCEEDS_MAX_HEIGHT, metadata.height, limits.max_height)
    else:
        required = estimate_memory(metadata)
        if limits.is_memory_limited() and required > limits.max_memory_bytes:
            result = AdmissionResult(
                RejectReason.EXCEEDS_MAX_MEMORY, required, limits.max_memory_bytes, required
            )
        else:
            result = AdmissionResult(estimated_bytes=required)

    if result.passed:
        logger.debug(
            "Admitted %s %dx%d %s (~%d bytes)",
            metadata.format,
            metadata.width,
            metadata.height,
            metadata.mode,
            result.estimated_bytes,
        )
    else:
        logger.warning(
            "Rejected %s %dx%d %s: %s (%d > %d)",
            metadata.format,
            metadata.width,
            metadata.height,
            metadata.mode,
            result.reason.value,
            result.observed,
            result.limit,
        )
    return result
