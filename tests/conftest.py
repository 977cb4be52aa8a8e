from __future__ import annotations

from collections.abc import Callable, Generator, Sequence
from concurrent.futures import Executor, Future
from pathlib import Path

import fitz  # PyMuPDF
from loguru import logger
import pytest


LETTER = (612, 792)
LANDSCAPE = (792, 612)


class _InlineExecutor(Executor):
    """Runs submitted work immediately in the calling thread."""

    def __init__(self, *args: object, **kwargs: object) -> None:
        super().__init__()

    def submit(
        self, fn: Callable[..., object], /, *args: object, **kwargs: object
    ) -> Future[object]:
        future: Future[object] = Future()
        try:
            result: object = fn(*args, **kwargs)
        except Exception as exc:
            future.set_exception(exc)
        else:
            future.set_result(result)
        return future

    def shutdown(self, wait: bool = True, *, cancel_futures: bool = False) -> None:
        return None


@pytest.fixture
def inline_process_pool(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep PyMuPDF work in-process so tests don't pay for spawning workers."""
    monkeypatch.setattr(
        "pdf2square.backends.pymupdf_backend.ProcessPoolExecutor",
        _InlineExecutor,
    )


PageSpec = tuple[tuple[int, int], str]


def write_pdf(path: Path, pages: Sequence[PageSpec]) -> Path:
    doc = fitz.open()
    try:
        for (width, height), text in pages:
            page = doc.new_page(width=width, height=height)
            if text:
                page.insert_text((72, 72), text, fontsize=24)
        doc.save(path)
    finally:
        doc.close()
    return path


@pytest.fixture
def make_pdf(tmp_path: Path) -> Callable[..., Path]:
    def _make(name: str = "sample.pdf", pages: Sequence[PageSpec] | None = None) -> Path:
        specs = pages if pages is not None else [(LETTER, "Page 1"), (LETTER, "Page 2"), (LETTER, "Page 3")]
        return write_pdf(tmp_path / name, specs)

    return _make


@pytest.fixture
def sample_pdf(tmp_path: Path) -> Path:
    """Three pages: portrait with text, landscape with text, blank portrait."""
    return write_pdf(
        tmp_path / "sample.pdf",
        [(LETTER, "Page 1"), (LANDSCAPE, "Page 2"), (LETTER, "")],
    )


@pytest.fixture
def warnings_log() -> Generator[list[str], None, None]:
    messages: list[str] = []
    handler_id = logger.add(lambda message: messages.append(message.record["message"]), level="WARNING")
    yield messages
    logger.remove(handler_id)
