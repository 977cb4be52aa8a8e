"""Exception types raised by the conversion pipeline.

Every error carries a short ``code`` so callers (and the CLI) can branch on the
failure kind without matching message text.
"""

from __future__ import annotations


class Pdf2SquareError(RuntimeError):
    """Base class for all conversion failures."""

    code = "CONVERSION_FAILED"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidDocumentError(Pdf2SquareError):
    """Raised when a document is missing, unreadable, corrupt, encrypted or empty."""

    code = "INVALID_DOCUMENT"


class NoPagesInRangeError(Pdf2SquareError):
    """Raised when the requested first page/max pages select nothing."""

    code = "NO_PAGES_IN_RANGE"


class InvalidFormatError(Pdf2SquareError):
    code = "INVALID_FORMAT"


class InvalidColorError(Pdf2SquareError):
    code = "INVALID_COLOR"


class BackendUnavailableError(Pdf2SquareError):
    """Raised when the rendering engine (e.g. poppler binaries) cannot be run."""

    code = "BACKEND_UNAVAILABLE"


class _PageError(Pdf2SquareError):
    def __init__(self, message: str, *, page_number: int) -> None:
        super().__init__(message)
        self.page_number = page_number


class RenderError(_PageError):
    """Raised when the backend fails to rasterize a page."""

    code = "RENDER_FAILED"


class ExtractError(_PageError):
    """Raised when the backend fails to extract a page's text."""

    code = "EXTRACT_FAILED"


__all__ = [
    "BackendUnavailableError",
    "ExtractError",
    "InvalidColorError",
    "InvalidDocumentError",
    "InvalidFormatError",
    "NoPagesInRangeError",
    "Pdf2SquareError",
    "RenderError",
]
