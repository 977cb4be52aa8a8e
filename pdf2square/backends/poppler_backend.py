"""Poppler command-line backend.

Page counts and rasters come from ``pdfinfo``/``pdftocairo`` through
``pdf2image``; text comes from ``pdftotext``. Rasters are written as PNG files
into a scratch directory that belongs to a single ``open`` context.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
import contextlib
from pathlib import Path
import shutil
import tempfile

from pdf2image import convert_from_path, pdfinfo_from_path
from pdf2image.exceptions import PDFInfoNotInstalledError, PDFPageCountError, PDFSyntaxError
from PIL import Image

from pdf2square.errors import (
    BackendUnavailableError,
    ExtractError,
    InvalidDocumentError,
    RenderError,
)
from pdf2square.utils.image.io import load_image_async
from pdf2square.utils.log_utils import logger

from .base import DocumentHandle, PdfBackend, ensure_document_file


SCRATCH_PREFIX = "pdf2square-"


class PopplerDocument(DocumentHandle):
    def __init__(self, path: Path, scratch_dir: Path, binary_dir: Path | None) -> None:
        self.path = path
        self.scratch_dir = scratch_dir
        self._binary_dir = binary_dir

    def _binary(self, name: str) -> str:
        return str(self._binary_dir / name) if self._binary_dir else name

    async def page_count(self) -> int:
        try:
            info = await asyncio.to_thread(
                pdfinfo_from_path, str(self.path), poppler_path=self._binary_dir
            )
        except PDFInfoNotInstalledError as exc:
            raise BackendUnavailableError(
                "Failed to run pdfinfo. Make sure poppler-utils is installed."
            ) from exc
        except (PDFPageCountError, PDFSyntaxError) as exc:
            raise InvalidDocumentError(f"Corrupted or invalid PDF file: {self.path}. Error: {exc}") from exc
        try:
            count = int(info.get("Pages", 0))
        except (TypeError, ValueError):
            count = 0
        if count <= 0:
            raise InvalidDocumentError(f"PDF has no pages: {self.path}")
        return count

    async def render(self, page_number: int, dpi: int) -> Image.Image:
        try:
            paths = await asyncio.to_thread(
                convert_from_path,
                str(self.path),
                dpi=dpi,
                first_page=page_number,
                last_page=page_number,
                fmt="png",
                output_folder=str(self.scratch_dir),
                output_file=f"page-{page_number:04d}",
                paths_only=True,
                use_pdftocairo=True,
                poppler_path=self._binary_dir,
            )
        except PDFInfoNotInstalledError as exc:
            raise BackendUnavailableError(
                "Failed to run pdftocairo. Make sure poppler-utils is installed."
            ) from exc
        except Exception as exc:
            raise RenderError(
                f"Failed to rasterize page {page_number} of {self.path}: {exc}",
                page_number=page_number,
            ) from exc

        if not paths:
            raise RenderError(
                f"Renderer produced no image for page {page_number} of {self.path}",
                page_number=page_number,
            )
        return await load_image_async(paths[0])

    async def extract_text(self, page_number: int) -> str:
        args = [
            "-f",
            str(page_number),
            "-l",
            str(page_number),
            "-enc",
            "UTF-8",
            str(self.path),
            "-",
        ]
        try:
            process = await asyncio.create_subprocess_exec(
                self._binary("pdftotext"),
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as exc:
            raise BackendUnavailableError(
                "Failed to run pdftotext. Make sure poppler-utils is installed."
            ) from exc

        try:
            stdout, stderr = await process.communicate()
        except asyncio.CancelledError:
            with contextlib.suppress(ProcessLookupError):
                process.kill()
            await process.wait()
            raise

        if process.returncode != 0:
            detail = stderr.decode("utf-8", errors="replace").strip()
            raise ExtractError(
                f"pdftotext failed for page {page_number} of {self.path} "
                f"(exit {process.returncode}): {detail}",
                page_number=page_number,
            )
        return stdout.decode("utf-8", errors="replace")


class PopplerBackend(PdfBackend):
    """Backend that shells out to poppler-utils."""

    name = "poppler"

    def __init__(
        self,
        *,
        binary_dir: Path | None = None,
        keep_intermediate: bool = False,
    ) -> None:
        self._binary_dir = binary_dir
        self._keep_intermediate = keep_intermediate

    @asynccontextmanager
    async def open(self, document_path: Path) -> AsyncIterator[PopplerDocument]:
        path = ensure_document_file(Path(document_path))
        scratch_dir = Path(tempfile.mkdtemp(prefix=SCRATCH_PREFIX))
        logger.debug(f"Created scratch directory {scratch_dir}")
        try:
            yield PopplerDocument(path, scratch_dir, self._binary_dir)
        finally:
            if self._keep_intermediate:
                logger.info(f"Keeping intermediate renders in {scratch_dir}")
            else:
                self._remove_scratch(scratch_dir)

    @staticmethod
    def _remove_scratch(scratch_dir: Path) -> None:
        try:
            shutil.rmtree(scratch_dir)
        except OSError as exc:
            logger.warning(f"Could not clean up temporary directory {scratch_dir}: {exc}")
        else:
            logger.debug(f"Removed scratch directory {scratch_dir}")


__all__ = ["SCRATCH_PREFIX", "PopplerBackend", "PopplerDocument"]
