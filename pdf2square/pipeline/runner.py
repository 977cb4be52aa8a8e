"""Bounded-concurrency page conversion pipeline.

Each page in the resolved range becomes one job: rasterize, letterbox onto a
square canvas, encode, extract text. Jobs run through a ``ParallelExecutor``
and the results are reassembled in page order once every job has finished.
The call is all-or-nothing: the first failing page stops new pages from being
admitted and its error is raised to the caller.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from functools import partial
from pathlib import Path
import time

from PIL import Image

from pdf2square.backends import DocumentHandle, PdfBackend, get_backend
from pdf2square.config import get_settings
from pdf2square.errors import RenderError
from pdf2square.models import ConversionRequest, OutputFormat, PageResult
from pdf2square.utils.concurrency import ParallelExecutor, ProgressReporter
from pdf2square.utils.image.color import ColorSpec, parse_background
from pdf2square.utils.image.transform import render_square
from pdf2square.utils.log_utils import logger

from .page_range import PageRange, resolve_page_range


def assemble_results(results: Iterable[PageResult]) -> list[PageResult]:
    """Order page results by page number, whatever order they completed in."""
    return sorted(results, key=lambda result: result.page_number)


class PagePipeline:
    """Coordinates one conversion request against one backend."""

    def __init__(
        self,
        request: ConversionRequest,
        backend: PdfBackend,
        *,
        progress_reporter: ProgressReporter | None = None,
    ) -> None:
        self._request = request
        self._backend = backend
        self._progress = progress_reporter

    async def run(self) -> list[PageResult]:
        request = self._request
        background = parse_background(request.background, request.output_format.value)

        async with self._backend.open(request.document_path) as document:
            total_pages = await document.page_count()
            page_range = resolve_page_range(request.first, request.max_pages, total_pages)
            logger.debug(
                f"Converting pages {page_range} of {total_pages} from {request.document_path.name} "
                f"with {self._backend.name} (concurrency={request.concurrency})"
            )
            results = await self._convert_pages(document, page_range, background)

        return assemble_results(results)

    async def _convert_pages(
        self,
        document: DocumentHandle,
        page_range: PageRange,
        background: ColorSpec,
    ) -> list[PageResult]:
        executor = ParallelExecutor(
            max_concurrency=self._request.concurrency,
            progress_reporter=self._progress,
            fail_fast=True,
        )
        job = partial(self._convert_page, document, background)
        results = await executor.map(job, list(page_range))
        return [result for result in results if isinstance(result, PageResult)]

    async def _convert_page(
        self,
        document: DocumentHandle,
        background: ColorSpec,
        page_number: int,
    ) -> PageResult:
        start = time.perf_counter()
        request = self._request

        raster = await document.render(page_number, request.dpi)
        width, height = raster.size
        image_bytes = await asyncio.to_thread(
            self._compose, raster, page_number, background, request.output_format
        )
        text = await document.extract_text(page_number)

        logger.debug(
            f"Page {page_number}: {width}x{height} -> {request.size}px "
            f"{request.output_format.value} in {time.perf_counter() - start:.2f}s"
        )
        return PageResult(
            page_number=page_number,
            source_path=document.path,
            image=image_bytes,
            mime_type=request.output_format.mime_type,
            extracted_text=text.strip(),
        )

    def _compose(
        self,
        raster: Image.Image,
        page_number: int,
        background: ColorSpec,
        output_format: OutputFormat,
    ) -> bytes:
        try:
            return render_square(raster, self._request.size, background, output_format.value)
        except (OSError, ValueError) as exc:
            raise RenderError(
                f"Failed to compose page {page_number}: {exc}", page_number=page_number
            ) from exc
        finally:
            raster.close()


async def convert(
    document_path: str | Path,
    *,
    max_pages: int = 10,
    size: int = 896,
    dpi: int = 700,
    first: int = 1,
    output_format: str = "png",
    background: str = "#ffffffff",
    concurrency: int | None = None,
    backend: PdfBackend | str | None = None,
    progress_reporter: ProgressReporter | None = None,
) -> list[PageResult]:
    """Convert pages of a PDF into square images with their extracted text.

    Args:
        document_path: Path to the input PDF file.
        max_pages: Maximum number of pages to convert.
        size: Side length of the square output images, in pixels.
        dpi: Render density; higher values give crisper text before resizing.
        first: First page to convert (1-based).
        output_format: ``png``, ``jpg`` or ``jpeg``.
        background: Letterbox colour, ``#RRGGBB[AA]`` or ``transparent``.
        concurrency: Maximum number of pages processed at once. Defaults to
            the configured ``PDF2SQUARE_DEFAULT_CONCURRENCY``.
        backend: A backend instance or name (``pymupdf``/``poppler``).
        progress_reporter: Optional per-page progress sink.

    Returns:
        One ``PageResult`` per converted page, ordered by page number.
    """
    if concurrency is None:
        concurrency = get_settings().default_concurrency

    request = ConversionRequest.build(
        document_path,
        first=first,
        max_pages=max_pages,
        size=size,
        dpi=dpi,
        output_format=output_format,
        background=background,
        concurrency=concurrency,
    )
    if backend is None or isinstance(backend, str):
        backend = get_backend(backend)
    pipeline = PagePipeline(request, backend, progress_reporter=progress_reporter)
    return await pipeline.run()


def convert_sync(document_path: str | Path, **options: object) -> list[PageResult]:
    """Blocking wrapper around :func:`convert` for callers without an event loop."""
    return asyncio.run(convert(document_path, **options))  # type: ignore[arg-type]


__all__ = ["PagePipeline", "assemble_results", "convert", "convert_sync"]
