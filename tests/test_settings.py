"""Tests for the centralised configuration loader."""

from __future__ import annotations

from collections.abc import Generator
import os
from pathlib import Path

import pytest

from pdf2square.config.settings import (
    DEFAULT_BACKEND,
    DEFAULT_CONCURRENCY,
    _load_settings,
    get_settings,
)


_KEYS = (
    "PDF2SQUARE_BACKEND",
    "PDF2SQUARE_POPPLER_PATH",
    "PDF2SQUARE_DEFAULT_CONCURRENCY",
    "PDF2SQUARE_KEEP_INTERMEDIATE",
)


@pytest.fixture(autouse=True)
def isolated_environ(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    # load_dotenv writes into os.environ, so give each test its own copy.
    monkeypatch.setattr(os, "environ", os.environ.copy())
    for key in _KEYS:
        monkeypatch.delenv(key, raising=False)
    yield
    _load_settings.cache_clear()


def _write_env(path: Path, content: str) -> None:
    lines = [line.strip() for line in content.strip().splitlines()]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")


def test_defaults_without_env_file(tmp_path: Path) -> None:
    """A missing env file falls back to the built-in defaults."""
    settings = get_settings(env_file=tmp_path / "missing.env", reload=True)

    assert settings.backend == DEFAULT_BACKEND == "pymupdf"
    assert settings.default_concurrency == DEFAULT_CONCURRENCY == 4
    assert settings.poppler.binary_dir is None
    assert settings.poppler.keep_intermediate is False


def test_env_file_values_are_loaded(tmp_path: Path) -> None:
    """Ensure values from a dedicated env file are parsed into the snapshot."""
    env_file = tmp_path / "test.env"
    _write_env(
        env_file,
        """
        PDF2SQUARE_BACKEND=Poppler
        PDF2SQUARE_POPPLER_PATH=/opt/poppler/bin
        PDF2SQUARE_DEFAULT_CONCURRENCY=8
        PDF2SQUARE_KEEP_INTERMEDIATE=yes
        """,
    )
    settings = get_settings(env_file=env_file, reload=True)

    assert settings.env_file == env_file.resolve()
    assert settings.backend == "poppler"
    assert settings.default_concurrency == 8
    assert settings.poppler.binary_dir == Path("/opt/poppler/bin")
    assert settings.poppler.keep_intermediate is True


def test_environment_variables_override_env_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Existing environment variables should take precedence over .env contents."""
    env_file = tmp_path / "override.env"
    _write_env(
        env_file,
        """
        PDF2SQUARE_BACKEND=poppler
        PDF2SQUARE_DEFAULT_CONCURRENCY=2
        """,
    )
    monkeypatch.setenv("PDF2SQUARE_BACKEND", "pymupdf")
    monkeypatch.setenv("PDF2SQUARE_DEFAULT_CONCURRENCY", "6")

    settings = get_settings(env_file=env_file, reload=True)

    assert settings.backend == "pymupdf"
    assert settings.default_concurrency == 6


@pytest.mark.parametrize("value", ["zero", "0", "-2", ""])
def test_invalid_concurrency_falls_back_to_default(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, value: str
) -> None:
    monkeypatch.setenv("PDF2SQUARE_DEFAULT_CONCURRENCY", value)
    settings = get_settings(env_file=tmp_path / "missing.env", reload=True)
    assert settings.default_concurrency == DEFAULT_CONCURRENCY


def test_reload_picks_up_changes(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Calling get_settings with reload=True should refresh cached values."""
    env_file = tmp_path / "reload.env"
    _write_env(env_file, "PDF2SQUARE_DEFAULT_CONCURRENCY=3")
    settings = get_settings(env_file=env_file, reload=True)
    assert settings.default_concurrency == 3

    monkeypatch.setenv("PDF2SQUARE_DEFAULT_CONCURRENCY", "12")
    assert get_settings(env_file=env_file).default_concurrency == 3
    updated = get_settings(env_file=env_file, reload=True)
    assert updated.default_concurrency == 12
