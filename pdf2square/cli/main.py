from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine
from functools import wraps
from pathlib import Path
from typing import Any, ParamSpec, TypeVar

import typer

from pdf2square.backends import BACKEND_CHOICES
from pdf2square.utils.log_utils import logger

from . import convert


app = typer.Typer(
    help=(
        "Convert PDF pages to exactly NxN images (letterboxed) plus per-page text files. "
        "Writes <prefix>-001.png/.txt, <prefix>-002.png/.txt, ..."
    ),
    add_completion=False,
)


_P = ParamSpec("_P")
_T = TypeVar("_T")


def _synchronous(handler: Callable[_P, Coroutine[Any, Any, _T]]) -> Callable[_P, _T]:
    @wraps(handler)
    def wrapper(*args: _P.args, **kwargs: _P.kwargs) -> _T:
        try:
            return asyncio.run(handler(*args, **kwargs))
        except KeyboardInterrupt as err:
            logger.info("Interrupted by user")
            raise typer.Exit(code=130) from err

    return wrapper


@app.command()
@_synchronous
async def convert_command(
    input_pdf: Path = typer.Argument(..., help="Input PDF file."),
    out_prefix: Path | None = typer.Argument(
        None,
        help="Output path/prefix (default: <pdf_basename> next to input).",
        show_default=False,
    ),
    max_pages: int = typer.Option(
        convert.DEFAULT_MAX_PAGES,
        "--max-pages",
        "-n",
        help="Maximum pages to convert.",
        show_default=True,
    ),
    size: int = typer.Option(
        convert.DEFAULT_SIZE,
        "--size",
        "-s",
        help="Target square size in pixels.",
        show_default=True,
    ),
    dpi: int = typer.Option(
        convert.DEFAULT_DPI,
        "--dpi",
        help="Render DPI (higher = crisper text).",
        show_default=True,
    ),
    first: int = typer.Option(
        convert.DEFAULT_FIRST_PAGE,
        "--first",
        help="First page to convert (1-based).",
        show_default=True,
    ),
    output_format: str = typer.Option(
        convert.DEFAULT_FORMAT,
        "--format",
        help="Output format: png|jpg.",
        show_default=True,
    ),
    bg: str = typer.Option(
        convert.DEFAULT_BACKGROUND,
        "--bg",
        help="Background color (letterbox). Hex #RRGGBB[AA] or 'transparent'.",
        show_default=True,
    ),
    concurrency: int | None = typer.Option(
        None,
        "--concurrency",
        help="Max parallel page jobs (default: PDF2SQUARE_DEFAULT_CONCURRENCY or 4).",
    ),
    backend: str | None = typer.Option(
        None,
        "--backend",
        help=f"Rendering backend. Choices: {', '.join(BACKEND_CHOICES)}.",
    ),
    keep_intermediate: bool = typer.Option(
        False,
        "--keep-intermediate",
        help="Keep intermediate renders (poppler backend).",
    ),
    progress: bool = typer.Option(
        True,
        "--progress/--no-progress",
        help="Show a per-page progress bar.",
    ),
) -> int:
    options = convert.ConvertOptions(
        input_pdf=input_pdf,
        out_prefix=out_prefix,
        max_pages=max_pages,
        size=size,
        dpi=dpi,
        first=first,
        output_format=output_format,
        background=bg,
        concurrency=concurrency,
        backend=backend,
        keep_intermediate=keep_intermediate,
        progress=progress,
    )
    result = await convert.run(options)
    if result != 0:
        raise typer.Exit(code=result)
    return result


if __name__ == "__main__":
    app()
