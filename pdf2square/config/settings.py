"""Centralised environment configuration for pdf2square.

This module ensures `.env` loading happens in one place and exposes a
typed snapshot of backend selection and tuning knobs. Downstream modules
call `get_settings()` instead of touching `os.environ` directly, making it
easier to validate values and override behaviour in tests.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
import os
from pathlib import Path

from dotenv import load_dotenv


_DEFAULT_ENV_PATH = Path.cwd() / ".env"

DEFAULT_BACKEND = "pymupdf"
DEFAULT_CONCURRENCY = 4


def _coerce_int(value: str | None) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _coerce_bool(value: str | None) -> bool | None:
    if value is None:
        return None
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    return None


@dataclass(frozen=True)
class PopplerSettings:
    # Directory holding pdftoppm/pdfinfo/pdftotext; None means look them up on PATH.
    binary_dir: Path | None
    keep_intermediate: bool


@dataclass(frozen=True)
class Pdf2SquareSettings:
    """Top-level snapshot of configuration values."""

    env_file: Path
    backend: str
    default_concurrency: int
    poppler: PopplerSettings


def _resolve_env_path(env_file: os.PathLike[str] | str | None) -> Path:
    if env_file is None:
        return _DEFAULT_ENV_PATH
    return Path(env_file).resolve()


@lru_cache(maxsize=4)
def _load_settings(env_path: Path) -> Pdf2SquareSettings:
    # Existing environment variables take precedence over `.env` defaults.
    load_dotenv(dotenv_path=env_path, override=False)

    binary_dir = os.getenv("PDF2SQUARE_POPPLER_PATH")
    poppler = PopplerSettings(
        binary_dir=Path(binary_dir).expanduser() if binary_dir else None,
        keep_intermediate=_coerce_bool(os.getenv("PDF2SQUARE_KEEP_INTERMEDIATE")) or False,
    )

    concurrency = _coerce_int(os.getenv("PDF2SQUARE_DEFAULT_CONCURRENCY"))
    if concurrency is None or concurrency < 1:
        concurrency = DEFAULT_CONCURRENCY

    backend = (os.getenv("PDF2SQUARE_BACKEND") or DEFAULT_BACKEND).strip().lower()

    return Pdf2SquareSettings(
        env_file=env_path,
        backend=backend,
        default_concurrency=concurrency,
        poppler=poppler,
    )


def get_settings(
    env_file: os.PathLike[str] | str | None = None,
    *,
    reload: bool = False,
) -> Pdf2SquareSettings:
    """Return the cached settings snapshot.

    Args:
        env_file: Optional explicit path to a `.env` file. When omitted the
            `.env` file in the working directory is used.
        reload: When True the cached snapshot is cleared before loading.
    """
    env_path = _resolve_env_path(env_file)
    if reload:
        _load_settings.cache_clear()
    return _load_settings(env_path)
