"""Unit tests for project root and bucket resolution."""

import shutil
import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest
from cachectl.engine.project import BUCKET_KEY_LENGTH, ProjectKeyResolver, bucket_key, find_vcs_root
from cachectl.utils.shell import CommandResult


class TestBucketKey:
    """Tests for bucket_key()."""

    def test_deterministic(self) -> None:
        assert bucket_key("/src/proj") == bucket_key(Path("/src/proj"))

    def test_format(self) -> None:
        key = bucket_key("/src/proj")
        assert len(key) == BUCKET_KEY_LENGTH
        int(key, 16)

    def test_case_and_spelling_insensitive(self) -> None:
        assert bucket_key("/SRC/Proj") == bucket_key("/src/proj")
        assert bucket_key("/src/other/../proj/") == bucket_key("/src/proj")

    def test_distinct_roots_distinct_keys(self) -> None:
        assert bucket_key("/src/a") != bucket_key("/src/b")

    def test_no_collisions_on_many_roots(self) -> None:
        """10,000 distinct synthetic roots produce 10,000 distinct keys."""
        keys = {bucket_key(f"/home/user/src/org{i % 97}/project-{i}") for i in range(10_000)}
        assert len(keys) == 10_000


class TestFindVcsRoot:
    """Tests for find_vcs_root() with git mocked."""

    def test_inside_repo(self, tmp_path: Path) -> None:
        ok = CommandResult(stdout=f"{tmp_path}\n", stderr="", returncode=0)
        with patch("cachectl.engine.project.run_command", return_value=ok) as run:
            assert find_vcs_root(tmp_path / "sub") == tmp_path

        args = run.call_args.args[0]
        assert args == ["git", "-C", str(tmp_path / "sub"), "rev-parse", "--show-toplevel"]

    def test_not_a_repo(self, tmp_path: Path) -> None:
        bad = CommandResult(stdout="", stderr="fatal: not a git repository", returncode=128)
        with patch("cachectl.engine.project.run_command", return_value=bad):
            assert find_vcs_root(tmp_path) is None

    @pytest.mark.parametrize(
        "error",
        [FileNotFoundError("git"), subprocess.TimeoutExpired(["git"], 10), PermissionError()],
    )
    def test_git_unavailable(self, tmp_path: Path, error: Exception) -> None:
        with patch("cachectl.engine.project.run_command", side_effect=error):
            assert find_vcs_root(tmp_path) is None

    @pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")
    def test_real_repository(self, tmp_path: Path) -> None:
        repo = tmp_path / "repo"
        (repo / "pkg" / ".ruff_cache").mkdir(parents=True)
        subprocess.run(["git", "init", "-q", str(repo)], check=True)

        found = find_vcs_root(repo / "pkg")

        assert found is not None
        assert found.resolve() == repo.resolve()


class TestProjectKeyResolver:
    """Tests for ProjectKeyResolver."""

    def test_falls_back_to_watch_root(self, tmp_path: Path) -> None:
        with patch("cachectl.engine.project.find_vcs_root", return_value=None):
            resolver = ProjectKeyResolver()
            assert resolver.resolve_project_root(tmp_path / "p" / ".tox", tmp_path) == tmp_path

    def test_prefers_vcs_root(self, tmp_path: Path) -> None:
        with patch("cachectl.engine.project.find_vcs_root", return_value=tmp_path / "p"):
            resolver = ProjectKeyResolver()
            assert resolver.resolve_project_root(tmp_path / "p" / ".tox", tmp_path) == (
                tmp_path / "p"
            )

    def test_asks_about_parent_and_caches(self, tmp_path: Path) -> None:
        with patch("cachectl.engine.project.find_vcs_root", return_value=None) as find:
            resolver = ProjectKeyResolver()
            resolver.resolve_project_root(tmp_path / "p" / ".tox", tmp_path)
            resolver.resolve_project_root(tmp_path / "p" / ".ruff_cache", tmp_path)

        find.assert_called_once_with(tmp_path / "p")

    def test_cache_entries_expire(self, tmp_path: Path) -> None:
        """A repository created after the first lookup is found once the entry expires."""
        now = [0.0]
        repo = tmp_path / "p"
        with patch("cachectl.engine.project.find_vcs_root", side_effect=[None, repo]) as find:
            resolver = ProjectKeyResolver(cache_ttl=30.0, clock=lambda: now[0])
            assert resolver.resolve_project_root(repo / ".tox", tmp_path) == tmp_path

            now[0] = 10.0
            assert resolver.resolve_project_root(repo / ".tox", tmp_path) == tmp_path
            now[0] = 31.0
            assert resolver.resolve_project_root(repo / ".tox", tmp_path) == repo

        assert find.call_count == 2

    def test_cache_is_bounded(self, tmp_path: Path) -> None:
        """The least recently used directory is evicted first."""
        with patch("cachectl.engine.project.find_vcs_root", return_value=None) as find:
            resolver = ProjectKeyResolver(cache_size=2)
            for name in ("a", "b", "a", "c", "a", "b"):
                resolver.resolve_project_root(tmp_path / name / ".tox", tmp_path)

        asked = [c.args[0].name for c in find.call_args_list]
        assert asked == ["a", "b", "c", "b"]

    def test_vcs_disabled(self, tmp_path: Path) -> None:
        with patch("cachectl.engine.project.find_vcs_root") as find:
            resolver = ProjectKeyResolver(use_vcs=False)
            assert resolver.resolve_project_root(tmp_path / "p" / ".tox", tmp_path) == tmp_path

        find.assert_not_called()

    def test_bucket_key_delegates(self, tmp_path: Path) -> None:
        assert ProjectKeyResolver().bucket_key(tmp_path) == bucket_key(tmp_path)
