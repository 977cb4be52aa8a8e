"""Backend protocol for PDF page counting, rasterization and text extraction."""

from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from pathlib import Path
from typing import Protocol

from PIL import Image

from pdf2square.errors import InvalidDocumentError


class DocumentHandle(Protocol):
    """An opened document, valid only inside its backend's ``open`` context."""

    path: Path

    async def page_count(self) -> int:
        """Return the number of pages, raising ``InvalidDocumentError`` if unreadable."""
        ...

    async def render(self, page_number: int, dpi: int) -> Image.Image:
        """Rasterize a 1-based page, raising ``RenderError`` on failure."""
        ...

    async def extract_text(self, page_number: int) -> str:
        """Return the raw text of a 1-based page, raising ``ExtractError`` on failure."""
        ...


class PdfBackend(Protocol):
    """Swappable PDF engine used by the conversion pipeline."""

    name: str

    def open(self, document_path: Path) -> AbstractAsyncContextManager[DocumentHandle]:
        """Acquire every resource needed to work on ``document_path``.

        Resources (worker pools, scratch directories) are released when the
        context exits, whether the conversion succeeded, failed or was cancelled.
        """
        ...


def ensure_document_file(document_path: Path) -> Path:
    if not document_path.exists():
        raise InvalidDocumentError(f"PDF file not found: {document_path}")
    if not document_path.is_file():
        raise InvalidDocumentError(f"PDF path is not a file: {document_path}")
    return document_path


__all__ = ["DocumentHandle", "PdfBackend", "ensure_document_file"]
