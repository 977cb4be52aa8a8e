"""Backend abstractions for pdf2square."""

from __future__ import annotations

from pdf2square.config import Pdf2SquareSettings, get_settings

from .base import DocumentHandle, PdfBackend
from .poppler_backend import PopplerBackend
from .pymupdf_backend import PyMuPDFBackend


BACKEND_CHOICES: tuple[str, ...] = (PyMuPDFBackend.name, PopplerBackend.name)


def get_backend(
    name: str | None = None,
    settings: Pdf2SquareSettings | None = None,
    *,
    keep_intermediate: bool | None = None,
) -> PdfBackend:
    """Build a backend by name, falling back to the configured default."""
    settings = settings or get_settings()
    backend_name = (name or settings.backend).strip().lower()

    if backend_name == PyMuPDFBackend.name:
        return PyMuPDFBackend()
    if backend_name == PopplerBackend.name:
        keep = settings.poppler.keep_intermediate if keep_intermediate is None else keep_intermediate
        return PopplerBackend(binary_dir=settings.poppler.binary_dir, keep_intermediate=keep)

    available = ", ".join(BACKEND_CHOICES)
    raise ValueError(f"Invalid backend: {backend_name}. Available backends: {available}")


__all__ = [
    "BACKEND_CHOICES",
    "DocumentHandle",
    "PdfBackend",
    "PopplerBackend",
    "PyMuPDFBackend",
    "get_backend",
]
