"""Unit tests for command collision resolution."""

import os
import sys
from pathlib import Path

import pytest
from cachectl.models.collision import CommandSource
from cachectl.wrappers.collision import command_name, iter_candidates, resolve_commands

pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="POSIX executables")


def _exe(directory: Path, name: str) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / name
    path.write_text("#!/bin/sh\n")
    os.chmod(path, 0o755)
    return path


class TestCommandName:
    """Tests for command_name()."""

    def test_executable(self, tmp_path: Path) -> None:
        assert command_name(_exe(tmp_path, "ruff")) == "ruff"

    def test_non_executable(self, tmp_path: Path) -> None:
        path = tmp_path / "README"
        path.write_text("docs")
        assert command_name(path) is None

    def test_directory(self, tmp_path: Path) -> None:
        (tmp_path / "sub").mkdir()
        assert command_name(tmp_path / "sub") is None


class TestIterCandidates:
    """Tests for iter_candidates()."""

    def test_sorted(self, tmp_path: Path) -> None:
        _exe(tmp_path, "zeta")
        _exe(tmp_path, "alpha")

        assert [name for name, _ in iter_candidates(tmp_path)] == ["alpha", "zeta"]

    def test_missing_directory(self, tmp_path: Path) -> None:
        assert list(iter_candidates(tmp_path / "missing")) == []


class TestResolveCommands:
    """Tests for resolve_commands()."""

    def test_lower_priority_wins(self, tmp_path: Path) -> None:
        """Source A (priority 1) beats source B (priority 2) for 'foo'."""
        foo_a = _exe(tmp_path / "a", "foo")
        foo_b = _exe(tmp_path / "b", "foo")
        bar_b = _exe(tmp_path / "b", "bar")
        sources = [
            CommandSource(tag="B", priority=2, directory=tmp_path / "b"),
            CommandSource(tag="A", priority=1, directory=tmp_path / "a"),
        ]

        resolution = resolve_commands(sources)

        assert resolution.winners == {"foo": ("A", foo_a), "bar": ("B", bar_b)}
        assert len(resolution.collisions) == 1
        record = resolution.collisions[0]
        assert record.name == "foo"
        assert record.kept_tag == "A"
        assert record.kept_path == foo_a
        assert record.skipped == (("B", foo_b),)

    def test_equal_priority_keeps_traversal_order(self, tmp_path: Path) -> None:
        first = _exe(tmp_path / "first", "tool")
        _exe(tmp_path / "second", "tool")
        sources = [
            CommandSource(tag="first", priority=5, directory=tmp_path / "first"),
            CommandSource(tag="second", priority=5, directory=tmp_path / "second"),
        ]

        assert resolve_commands(sources).winners["tool"] == ("first", first)

    def test_one_record_per_name(self, tmp_path: Path) -> None:
        for tag in ("a", "b", "c"):
            _exe(tmp_path / tag, "dup")
        sources = [
            CommandSource(tag=tag, priority=i, directory=tmp_path / tag)
            for i, tag in enumerate(("a", "b", "c"))
        ]

        resolution = resolve_commands(sources)

        assert len(resolution.collisions) == 1
        assert [tag for tag, _ in resolution.collisions[0].skipped] == ["b", "c"]

    def test_deny_list(self, tmp_path: Path) -> None:
        _exe(tmp_path / "a", "python")
        _exe(tmp_path / "a", "ruff")

        resolution = resolve_commands(
            [CommandSource(tag="a", priority=1, directory=tmp_path / "a")], deny=["python"]
        )

        assert set(resolution.winners) == {"ruff"}

    def test_missing_source_ignored(self, tmp_path: Path) -> None:
        resolution = resolve_commands(
            [CommandSource(tag="gone", priority=1, directory=tmp_path / "gone")]
        )
        assert resolution.winners == {}
        assert resolution.collisions == []
