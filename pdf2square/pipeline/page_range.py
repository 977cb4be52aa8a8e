from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from pdf2square.errors import InvalidDocumentError, NoPagesInRangeError


@dataclass(frozen=True)
class PageRange:
    """Inclusive, 1-based range of page numbers."""

    first: int
    last: int

    def __iter__(self) -> Iterator[int]:
        return iter(range(self.first, self.last + 1))

    def __len__(self) -> int:
        return self.last - self.first + 1

    def __str__(self) -> str:
        return f"{self.first}-{self.last}"


def resolve_page_range(first: int, max_pages: int, total_pages: int) -> PageRange:
    """Clamp the requested first page/page count against the document's length."""
    if total_pages <= 0:
        raise InvalidDocumentError("Could not determine page count. Is the PDF valid?")

    resolved_first = max(1, first)
    resolved_last = min(total_pages, resolved_first + max_pages - 1)
    if resolved_last < resolved_first:
        raise NoPagesInRangeError(
            f"No pages to convert: first={first}, max_pages={max_pages}, "
            f"document has {total_pages} page(s)."
        )
    return PageRange(resolved_first, resolved_last)


__all__ = ["PageRange", "resolve_page_range"]
