"""Logging utilities shared across the pdf2square package."""

from __future__ import annotations

import multiprocessing
import os
from pathlib import Path
from typing import Any

from loguru import logger
from rich.logging import RichHandler


_CONFIGURED: bool = False

DEFAULT_CONSOLE_LEVEL = "INFO"
DEFAULT_FILE_LEVEL = "DEBUG"
DEFAULT_FILE_ROTATION = "5 MB"
DEFAULT_FILE_RETENTION = 2

_RICH_HANDLER_KWARGS: dict[str, Any] = {
    "markup": False,
    "show_time": False,
}


def _configure_logging(*, force: bool = False) -> None:
    """Configure the shared logger once per process."""
    global _CONFIGURED
    if _CONFIGURED and not force:
        return

    logger.remove()

    logger.add(
        RichHandler(**_RICH_HANDLER_KWARGS),  # type: ignore[arg-type]
        level=os.getenv("PDF2SQUARE_LOG_LEVEL", DEFAULT_CONSOLE_LEVEL).upper(),
        format="{message}",
    )

    # Library callers opt into the debug file; the CLI leaves it off unless asked.
    # Spawned render workers re-import this module and must not open the same file.
    file_path = os.getenv("PDF2SQUARE_DEBUG_LOG", "")
    if file_path and multiprocessing.parent_process() is None:
        resolved_file_path = Path(file_path).expanduser().resolve()
        resolved_file_path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(resolved_file_path),
            level=DEFAULT_FILE_LEVEL,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {name} | {message}",
            rotation=DEFAULT_FILE_ROTATION,
            retention=DEFAULT_FILE_RETENTION,
            enqueue=True,
        )

    _CONFIGURED = True


__all__ = ["logger"]

# Configure logging on import so callers only need to import `logger`.
_configure_logging()
