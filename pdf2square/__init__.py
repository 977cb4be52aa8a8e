"""pdf2square - convert PDF pages into exact NxN letterboxed images plus per-page text.

Quick Start:
    >>> from pdf2square import convert_sync
    >>> pages = convert_sync("input.pdf", max_pages=2, size=256)
    >>> pages[0].page_number, pages[0].mime_type
    (1, 'image/png')

``convert`` is the asynchronous entry point; the CLI is available as the
``pdf2square`` command after installation.
"""

from pdf2square.errors import (
    BackendUnavailableError,
    ExtractError,
    InvalidColorError,
    InvalidDocumentError,
    InvalidFormatError,
    NoPagesInRangeError,
    Pdf2SquareError,
    RenderError,
)
from pdf2square.models import ConversionRequest, OutputFormat, PageResult
from pdf2square.pipeline import convert, convert_sync


__version__ = "1.0.0"

__all__ = [
    "BackendUnavailableError",
    "ConversionRequest",
    "ExtractError",
    "InvalidColorError",
    "InvalidDocumentError",
    "InvalidFormatError",
    "NoPagesInRangeError",
    "OutputFormat",
    "PageResult",
    "Pdf2SquareError",
    "RenderError",
    "convert",
    "convert_sync",
    "__version__",
]
