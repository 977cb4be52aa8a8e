"""Embedded PyMuPDF backend.

MuPDF is not safe to drive from several threads at once, so every page
operation runs in a process pool owned by one ``open`` context, mirroring how
the rasterization stage keeps CPU-bound work off the event loop.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Callable
from concurrent.futures import ProcessPoolExecutor
from contextlib import asynccontextmanager
from multiprocessing import get_context
import os
from pathlib import Path
from typing import TypeVar

import fitz  # PyMuPDF
from PIL import Image

from pdf2square.errors import ExtractError, InvalidDocumentError, RenderError
from pdf2square.utils.log_utils import logger

from .base import DocumentHandle, PdfBackend, ensure_document_file


# Density units that correspond to a render scale of 1.0.
DENSITY_UNITS_PER_SCALE = 96

T = TypeVar("T")


def _count_pages(pdf_path: str) -> int:
    with fitz.open(pdf_path, filetype="pdf") as doc:
        if doc.needs_pass:
            raise PermissionError("PDF is encrypted")
        return doc.page_count


def _render_page(pdf_path: str, page_index: int, zoom: float) -> tuple[int, int, bytes]:
    with fitz.open(pdf_path, filetype="pdf") as doc:
        page = doc.load_page(page_index)
        pix = page.get_pixmap(matrix=fitz.Matrix(zoom, zoom), alpha=False)  # type: ignore[attr-defined]
        return pix.width, pix.height, bytes(pix.samples)


def _page_text(pdf_path: str, page_index: int) -> str:
    with fitz.open(pdf_path, filetype="pdf") as doc:
        return doc.load_page(page_index).get_text("text")


class PyMuPDFDocument(DocumentHandle):
    def __init__(self, path: Path, pool: ProcessPoolExecutor) -> None:
        self.path = path
        self._pool = pool

    async def _submit(self, fn: Callable[..., T], *args: object) -> T:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._pool, fn, *args)

    async def page_count(self) -> int:
        try:
            count = await self._submit(_count_pages, str(self.path))
        except PermissionError as exc:
            raise InvalidDocumentError(f"PDF is encrypted: {self.path}") from exc
        except Exception as exc:
            raise InvalidDocumentError(f"Corrupted or invalid PDF file: {self.path}. Error: {exc}") from exc
        if count <= 0:
            raise InvalidDocumentError(f"PDF has no pages: {self.path}")
        return count

    async def render(self, page_number: int, dpi: int) -> Image.Image:
        zoom = dpi / DENSITY_UNITS_PER_SCALE
        try:
            width, height, samples = await self._submit(
                _render_page, str(self.path), page_number - 1, zoom
            )
        except Exception as exc:
            raise RenderError(
                f"Failed to rasterize page {page_number} of {self.path}: {exc}",
                page_number=page_number,
            ) from exc
        return Image.frombytes("RGB", (width, height), samples)

    async def extract_text(self, page_number: int) -> str:
        try:
            return await self._submit(_page_text, str(self.path), page_number - 1)
        except Exception as exc:
            raise ExtractError(
                f"Failed to extract text from page {page_number} of {self.path}: {exc}",
                page_number=page_number,
            ) from exc


class PyMuPDFBackend(PdfBackend):
    """Backend implementation that uses PyMuPDF (`fitz`) under the hood."""

    name = "pymupdf"

    def __init__(self, *, max_workers: int | None = None) -> None:
        self._max_workers = max_workers or max(1, (os.cpu_count() or 2) // 2)

    @asynccontextmanager
    async def open(self, document_path: Path) -> AsyncIterator[PyMuPDFDocument]:
        path = ensure_document_file(Path(document_path))
        # `spawn` avoids fork-related deadlocks with threads or the running event loop.
        pool = ProcessPoolExecutor(max_workers=self._max_workers, mp_context=get_context("spawn"))
        logger.debug(f"Started {self._max_workers} PyMuPDF worker(s) for {path.name}")
        try:
            yield PyMuPDFDocument(path, pool)
        finally:
            await asyncio.to_thread(pool.shutdown, wait=True, cancel_futures=True)


__all__ = ["DENSITY_UNITS_PER_SCALE", "PyMuPDFBackend", "PyMuPDFDocument"]
