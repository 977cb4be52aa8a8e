"""Domain models for square page conversion."""

from __future__ import annotations

import base64
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from pdf2square.errors import InvalidFormatError


DEFAULT_MAX_PAGES = 10
DEFAULT_SIZE = 896
# Render high and downscale so small text stays legible in the square output.
DEFAULT_DPI = 700
DEFAULT_FIRST_PAGE = 1
DEFAULT_FORMAT = "png"
DEFAULT_BACKGROUND = "#ffffffff"
DEFAULT_CONCURRENCY = 4


class OutputFormat(str, Enum):
    PNG = "png"
    JPEG = "jpeg"

    @classmethod
    def parse(cls, token: str) -> OutputFormat:
        normalized = str(token).strip().lower()
        if normalized == "jpg":
            normalized = "jpeg"
        try:
            return cls(normalized)
        except ValueError as exc:
            raise InvalidFormatError(f"Format must be 'png' or 'jpg', got {token!r}") from exc

    @property
    def mime_type(self) -> str:
        return f"image/{self.value}"

    @property
    def extension(self) -> str:
        return "jpg" if self is OutputFormat.JPEG else self.value


def _require_positive(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValueError(f"{name} must be a positive integer, got {value!r}")
    return value


@dataclass(frozen=True)
class ConversionRequest:
    """Configuration for a single conversion call.

    ``first`` and ``max_pages`` are left as given; they are clamped against
    the real page count when the page range is resolved.
    """

    document_path: Path
    first: int = DEFAULT_FIRST_PAGE
    max_pages: int = DEFAULT_MAX_PAGES
    size: int = DEFAULT_SIZE
    dpi: int = DEFAULT_DPI
    output_format: OutputFormat = OutputFormat.PNG
    background: str = DEFAULT_BACKGROUND
    concurrency: int = DEFAULT_CONCURRENCY

    def __post_init__(self) -> None:
        _require_positive("size", self.size)
        _require_positive("dpi", self.dpi)
        _require_positive("concurrency", self.concurrency)
        if not isinstance(self.output_format, OutputFormat):
            raise InvalidFormatError(f"Unsupported output format: {self.output_format!r}")

    @classmethod
    def build(
        cls,
        document_path: str | Path,
        *,
        first: int = DEFAULT_FIRST_PAGE,
        max_pages: int = DEFAULT_MAX_PAGES,
        size: int = DEFAULT_SIZE,
        dpi: int = DEFAULT_DPI,
        output_format: str | OutputFormat = DEFAULT_FORMAT,
        background: str = DEFAULT_BACKGROUND,
        concurrency: int = DEFAULT_CONCURRENCY,
    ) -> ConversionRequest:
        fmt = output_format if isinstance(output_format, OutputFormat) else OutputFormat.parse(output_format)
        return cls(
            document_path=Path(document_path).expanduser().resolve(),
            first=int(first),
            max_pages=int(max_pages),
            size=size,
            dpi=dpi,
            output_format=fmt,
            background=background,
            concurrency=concurrency,
        )


@dataclass(frozen=True)
class PageResult:
    """One converted page: the encoded square image and the page's text."""

    page_number: int
    source_path: Path
    image: bytes
    mime_type: str
    extracted_text: str

    @property
    def data_url(self) -> str:
        encoded = base64.b64encode(self.image).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"

    @property
    def extension(self) -> str:
        return "jpg" if self.mime_type == OutputFormat.JPEG.mime_type else "png"


__all__ = [
    "ConversionRequest",
    "OutputFormat",
    "PageResult",
]
