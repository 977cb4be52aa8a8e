from __future__ import annotations

from pathlib import Path
import shutil

import pytest

from pdf2square.backends import BACKEND_CHOICES, PopplerBackend, PyMuPDFBackend, get_backend
from pdf2square.backends.pymupdf_backend import DENSITY_UNITS_PER_SCALE
from pdf2square.config import Pdf2SquareSettings, PopplerSettings
from pdf2square.errors import ExtractError, InvalidDocumentError, RenderError


requires_poppler = pytest.mark.skipif(
    not all(shutil.which(tool) for tool in ("pdfinfo", "pdftocairo", "pdftotext")),
    reason="poppler-utils not installed",
)


def _settings(**poppler: object) -> Pdf2SquareSettings:
    return Pdf2SquareSettings(
        env_file=Path(".env"),
        backend="poppler",
        default_concurrency=4,
        poppler=PopplerSettings(
            binary_dir=poppler.get("binary_dir"),  # type: ignore[arg-type]
            keep_intermediate=bool(poppler.get("keep_intermediate", False)),
        ),
    )


def test_get_backend_by_name() -> None:
    assert isinstance(get_backend("pymupdf", _settings()), PyMuPDFBackend)
    assert isinstance(get_backend("POPPLER", _settings()), PopplerBackend)
    assert BACKEND_CHOICES == ("pymupdf", "poppler")


def test_get_backend_uses_configured_default() -> None:
    assert isinstance(get_backend(None, _settings()), PopplerBackend)


def test_get_backend_rejects_unknown_name() -> None:
    with pytest.raises(ValueError, match="Available backends"):
        get_backend("ghostscript", _settings())


@pytest.mark.usefixtures("inline_process_pool")
class TestPyMuPDFBackend:
    @pytest.mark.asyncio
    async def test_page_count(self, sample_pdf: Path) -> None:
        async with PyMuPDFBackend().open(sample_pdf) as document:
            assert await document.page_count() == 3
            assert document.path == sample_pdf

    @pytest.mark.asyncio
    async def test_render_scales_by_density(self, sample_pdf: Path) -> None:
        async with PyMuPDFBackend().open(sample_pdf) as document:
            portrait = await document.render(1, DENSITY_UNITS_PER_SCALE)
            landscape = await document.render(2, DENSITY_UNITS_PER_SCALE * 2)

        assert portrait.mode == "RGB"
        assert portrait.size == (612, 792)
        assert landscape.size == (792 * 2, 612 * 2)

    @pytest.mark.asyncio
    async def test_extract_text(self, sample_pdf: Path) -> None:
        async with PyMuPDFBackend().open(sample_pdf) as document:
            assert "Page 1" in await document.extract_text(1)
            assert (await document.extract_text(3)).strip() == ""

    @pytest.mark.asyncio
    async def test_missing_file_is_invalid(self, tmp_path: Path) -> None:
        with pytest.raises(InvalidDocumentError, match="not found"):
            async with PyMuPDFBackend().open(tmp_path / "missing.pdf"):
                pass

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [b"This is not a PDF file", b""])
    async def test_garbage_file_is_invalid(self, tmp_path: Path, payload: bytes) -> None:
        path = tmp_path / "broken.pdf"
        path.write_bytes(payload)
        async with PyMuPDFBackend().open(path) as document:
            with pytest.raises(InvalidDocumentError):
                await document.page_count()

    @pytest.mark.asyncio
    async def test_out_of_range_page_fails_per_page(self, sample_pdf: Path) -> None:
        async with PyMuPDFBackend().open(sample_pdf) as document:
            with pytest.raises(RenderError) as render_exc:
                await document.render(9, 72)
            with pytest.raises(ExtractError) as extract_exc:
                await document.extract_text(9)
        assert render_exc.value.page_number == 9
        assert extract_exc.value.page_number == 9


@pytest.mark.asyncio
async def test_pymupdf_backend_in_worker_processes(sample_pdf: Path) -> None:
    async with PyMuPDFBackend(max_workers=1).open(sample_pdf) as document:
        assert await document.page_count() == 3
        image = await document.render(2, 48)
    assert image.size == (396, 306)


@pytest.mark.asyncio
async def test_poppler_scratch_directory_removed_on_failure(sample_pdf: Path) -> None:
    backend = PopplerBackend()
    scratch: Path | None = None
    with pytest.raises(RuntimeError, match="boom"):
        async with backend.open(sample_pdf) as document:
            scratch = document.scratch_dir
            assert scratch.is_dir()
            (scratch / "leftover.png").write_bytes(b"x")
            raise RuntimeError("boom")
    assert scratch is not None
    assert not scratch.exists()


@pytest.mark.asyncio
async def test_poppler_keep_intermediate(sample_pdf: Path) -> None:
    async with PopplerBackend(keep_intermediate=True).open(sample_pdf) as document:
        scratch = document.scratch_dir
    try:
        assert scratch.is_dir()
    finally:
        shutil.rmtree(scratch)


@requires_poppler
class TestPopplerBackend:
    @pytest.mark.asyncio
    async def test_page_count_render_and_text(self, sample_pdf: Path) -> None:
        async with PopplerBackend().open(sample_pdf) as document:
            scratch = document.scratch_dir
            assert await document.page_count() == 3
            image = await document.render(2, 72)
            assert any(scratch.iterdir())
            text = await document.extract_text(1)
            blank = await document.extract_text(3)

        assert image.size == (792, 612)
        assert "Page 1" in text
        assert blank.strip() == ""
        assert not scratch.exists()

    @pytest.mark.asyncio
    async def test_garbage_file_is_invalid(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.pdf"
        path.write_bytes(b"This is not a PDF file")
        async with PopplerBackend().open(path) as document:
            with pytest.raises(InvalidDocumentError):
                await document.page_count()

    @pytest.mark.asyncio
    async def test_extract_failure_is_reported(self, sample_pdf: Path) -> None:
        async with PopplerBackend().open(sample_pdf) as document:
            with pytest.raises(ExtractError):
                await document.extract_text(9)
