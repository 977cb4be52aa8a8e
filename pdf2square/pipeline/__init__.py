"""Page conversion pipeline.

Primary public entry point:
    ``convert`` – resolves the page range against the document, then runs one
    render/letterbox/encode/extract job per page under a concurrency cap and
    returns the results ordered by page number.
"""

from .page_range import PageRange, resolve_page_range
from .runner import PagePipeline, assemble_results, convert, convert_sync


__all__ = [
    "PagePipeline",
    "PageRange",
    "assemble_results",
    "convert",
    "convert_sync",
    "resolve_page_range",
]
