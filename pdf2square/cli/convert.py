from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path

from pdf2square.backends import get_backend
from pdf2square.errors import Pdf2SquareError
from pdf2square.models import (
    DEFAULT_BACKGROUND,
    DEFAULT_DPI,
    DEFAULT_FIRST_PAGE,
    DEFAULT_FORMAT,
    DEFAULT_MAX_PAGES,
    DEFAULT_SIZE,
    PageResult,
)
from pdf2square.pipeline import convert
from pdf2square.utils.concurrency import TqdmProgressReporter
from pdf2square.utils.image.io import write_bytes_async, write_text_async
from pdf2square.utils.log_utils import logger


@dataclass(slots=True)
class ConvertOptions:
    input_pdf: Path
    out_prefix: Path | None
    max_pages: int
    size: int
    dpi: int
    first: int
    output_format: str
    background: str
    concurrency: int | None
    backend: str | None
    keep_intermediate: bool
    progress: bool


def resolve_out_prefix(input_pdf: Path, out_prefix: Path | None) -> Path:
    """Default to ``<pdf dir>/<pdf stem>`` when no prefix is given."""
    if out_prefix is not None:
        return out_prefix.expanduser().resolve()
    pdf_abs = input_pdf.expanduser().resolve()
    return pdf_abs.parent / pdf_abs.stem


def page_output_paths(
    out_prefix: Path, result: PageResult, extension: str | None = None
) -> tuple[Path, Path]:
    """Image and text paths for one page; ``extension`` defaults to the result's format."""
    stem = f"{out_prefix.name}-{result.page_number:03d}"
    return (
        out_prefix.parent / f"{stem}.{extension or result.extension}",
        out_prefix.parent / f"{stem}.txt",
    )


async def _write_page(out_prefix: Path, result: PageResult, extension: str) -> None:
    image_path, text_path = page_output_paths(out_prefix, result, extension)
    await asyncio.gather(
        write_bytes_async(image_path, result.image),
        write_text_async(text_path, result.extracted_text),
    )


async def run(options: ConvertOptions) -> int:
    out_prefix = resolve_out_prefix(options.input_pdf, options.out_prefix)
    out_dir = out_prefix.parent
    try:
        out_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        logger.error(f"Cannot create output directory {out_dir}: {exc}")
        return 1

    progress = TqdmProgressReporter("pdf2square") if options.progress else None
    try:
        backend = get_backend(options.backend, keep_intermediate=options.keep_intermediate or None)
        results = await convert(
            options.input_pdf,
            max_pages=options.max_pages,
            size=options.size,
            dpi=options.dpi,
            first=options.first,
            output_format=options.output_format,
            background=options.background,
            concurrency=options.concurrency,
            backend=backend,
            progress_reporter=progress,
        )
    except (Pdf2SquareError, ValueError) as exc:
        logger.error(f"Conversion failed: {exc}")
        return 1
    finally:
        if progress:
            progress.close()

    if not results:
        logger.error("No pages were converted.")
        return 1

    # Keep the spelling the user asked for: `jpeg` writes .jpeg, `jpg` writes .jpg.
    extension = options.output_format.strip().lower()
    try:
        await asyncio.gather(*(_write_page(out_prefix, result, extension) for result in results))
    except OSError as exc:
        logger.error(f"Failed to write output files to {out_dir}: {exc}")
        return 1
    logger.info(
        f"Done. Wrote pages {results[0].page_number}-{results[-1].page_number} → {out_dir}"
    )
    return 0
