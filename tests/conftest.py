"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

from collections.abc import Callable
from pathlib import Path

import pytest
from cachectl.core.config import Settings


@pytest.fixture(autouse=True)
def isolated_xdg(tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point every XDG directory at a throwaway location.

    Keeps history, config and default central/quarantine roots out of the
    real home directory.
    """
    base = tmp_path_factory.mktemp("xdg")
    for var in ("XDG_CONFIG_HOME", "XDG_STATE_HOME", "XDG_CACHE_HOME", "XDG_DATA_HOME"):
        monkeypatch.setenv(var, str(base / var.lower()))
    return base


@pytest.fixture
def workspace(tmp_path: Path) -> dict[str, Path]:
    """Watch root, central root, quarantine root and lock dir under tmp_path."""
    paths = {
        "root": tmp_path / "watch",
        "central": tmp_path / "central",
        "quarantine": tmp_path / "quarantine",
        "locks": tmp_path / "locks",
    }
    paths["root"].mkdir()
    return paths


@pytest.fixture
def settings(workspace: dict[str, Path]) -> Settings:
    """Settings wired to the temporary workspace."""
    return Settings(
        watch_roots=[workspace["root"]],
        central_root=workspace["central"],
        quarantine_root=workspace["quarantine"],
        patterns=[".ruff_cache", ".mypy_cache", "node_modules/.cache"],
    )


CacheDirFactory = Callable[..., Path]


def _make_cache_dir(path: Path, files: dict[str, bytes] | None = None) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    contents = files or {"CACHEDIR.TAG": b"Signature: 8a477f597d28d172789f06886806bc55"}
    for name, content in contents.items():
        target = path / name
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)
    return path


@pytest.fixture
def make_cache_dir() -> CacheDirFactory:
    """Factory creating a directory with some files in it."""
    return _make_cache_dir
