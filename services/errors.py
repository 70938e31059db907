"""Exception hierarchy raised by the image guard."""

from __future__ import annotations


class ImageGuardError(Exception):
    """Base class for every error raised before a decode is attempted."""


class HeaderParseError(ImageGuardError):
    """The stream header was not recognised as any registered image format."""


class PeekBudgetExceeded(HeaderParseError):
    """Reading the header required more bytes than the peek budget allows."""

    def __init__(self, budget: int) -> None:
        super().__init__(f"header exceeds peek budget of {budget} bytes")
        self.budget = budget


class AdmissionError(ImageGuardError):
    """An image was rejected by the admission policy.

    ``observed`` is the value read from (or estimated from) the header and
    ``limit`` is the configured ceiling it exceeded.
    """

    what = "value"
    unit = ""

    def __init__(self, observed: int, limit: int) -> None:
        super().__init__(f"{self.what} {observed}{self.unit} > {limit}{self.unit}")
        self.observed = observed
        self.limit = limit


class ExceedsMaxDimension(AdmissionError):
    """Width or height exceeds its configured maximum."""


class ExceedsMaxWidth(ExceedsMaxDimension):
    what = "width"


class ExceedsMaxHeight(ExceedsMaxDimension):
    what = "height"


class ExceedsMaxMemory(AdmissionError):
    """Estimated decoded size exceeds the memory ceiling."""

    what = "required memory"
    unit = "b"
