"""Unit tests for DirectoryLinkManager."""

import errno
from collections.abc import Callable
from pathlib import Path
from unittest.mock import patch

import pytest
from cachectl.linking.manager import DirectoryLinkManager
from cachectl.linking.quarantine import QuarantineFailedError
from cachectl.linking.strategies import CopyStrategy, LinkStrategy, SymlinkStrategy, points_at
from cachectl.models.link import LinkOutcome

MakeDir = Callable[..., Path]


class RefusingStrategy(LinkStrategy):
    """Strategy that always fails, recording calls."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.calls = 0

    def create(self, link_path: Path, target_path: Path) -> None:
        self.calls += 1
        raise OSError(errno.EPERM, f"{self.name} refused")


@pytest.fixture
def paths(tmp_path: Path) -> dict[str, Path]:
    return {
        "link": tmp_path / "proj" / ".ruff_cache",
        "target": tmp_path / "central" / "bucket" / ".ruff_cache",
        "quarantine": tmp_path / "quarantine",
    }


class TestEnsureLink:
    """Tests for DirectoryLinkManager.ensure_link()."""

    def test_fresh_path(self, paths: dict[str, Path]) -> None:
        """A missing path becomes a redirect; the target is created."""
        manager = DirectoryLinkManager(paths["quarantine"])

        result = manager.ensure_link(paths["link"], paths["target"])

        assert result.outcome == LinkOutcome.LINKED
        assert result.changed
        assert result.strategy == "symlink"
        assert result.quarantine is None
        assert paths["target"].is_dir()
        assert points_at(paths["link"], paths["target"])

    def test_existing_content_quarantined(
        self, paths: dict[str, Path], make_cache_dir: MakeDir
    ) -> None:
        """Existing content is moved to quarantine byte for byte."""
        make_cache_dir(paths["link"], {"0.4.0/cache.bin": b"\x00\x01\x02", "CACHEDIR.TAG": b"tag"})
        manager = DirectoryLinkManager(paths["quarantine"])

        result = manager.ensure_link(paths["link"], paths["target"])

        assert result.outcome == LinkOutcome.LINKED
        assert result.quarantine is not None
        moved = result.quarantine.quarantine_path
        assert (moved / "0.4.0" / "cache.bin").read_bytes() == b"\x00\x01\x02"
        assert (moved / "CACHEDIR.TAG").read_bytes() == b"tag"
        assert points_at(paths["link"], paths["target"])

    def test_idempotent(self, paths: dict[str, Path], make_cache_dir: MakeDir) -> None:
        """A second run changes nothing and quarantines nothing."""
        make_cache_dir(paths["link"])
        manager = DirectoryLinkManager(paths["quarantine"])
        manager.ensure_link(paths["link"], paths["target"])
        quarantined = sorted(paths["quarantine"].iterdir())

        again = manager.ensure_link(paths["link"], paths["target"])

        assert again.outcome == LinkOutcome.LINKED
        assert not again.changed
        assert again.quarantine is None
        assert sorted(paths["quarantine"].iterdir()) == quarantined

    def test_redirect_elsewhere_replaced(
        self, paths: dict[str, Path], tmp_path: Path, make_cache_dir: MakeDir
    ) -> None:
        """A redirect to another location is replaced without quarantine."""
        old_target = make_cache_dir(tmp_path / "old", {"keep": b"old data"})
        paths["link"].parent.mkdir(parents=True)
        paths["link"].symlink_to(old_target, target_is_directory=True)
        manager = DirectoryLinkManager(paths["quarantine"])

        result = manager.ensure_link(paths["link"], paths["target"])

        assert result.outcome == LinkOutcome.LINKED
        assert result.quarantine is None
        assert points_at(paths["link"], paths["target"])
        assert (old_target / "keep").read_bytes() == b"old data"
        assert not paths["quarantine"].exists()

    def test_quarantine_failure_aborts(
        self, paths: dict[str, Path], make_cache_dir: MakeDir
    ) -> None:
        """If quarantine fails the original is untouched and no link is made."""
        make_cache_dir(paths["link"], {"data": b"precious"})
        strategy = RefusingStrategy("symlink")
        manager = DirectoryLinkManager(paths["quarantine"], strategies=(strategy,))

        with patch(
            "cachectl.linking.manager.quarantine",
            side_effect=QuarantineFailedError(paths["link"], "in use"),
        ):
            result = manager.ensure_link(paths["link"], paths["target"])

        assert result.outcome == LinkOutcome.FAILED
        assert "in use" in (result.error or "")
        assert strategy.calls == 0
        assert not paths["link"].is_symlink()
        assert (paths["link"] / "data").read_bytes() == b"precious"

    def test_falls_back_to_copy(self, paths: dict[str, Path], make_cache_dir: MakeDir) -> None:
        """When redirects are refused the target content is copied."""
        make_cache_dir(paths["target"], {"shared": b"central"})
        manager = DirectoryLinkManager(
            paths["quarantine"],
            strategies=(RefusingStrategy("symlink"), RefusingStrategy("junction"), CopyStrategy()),
        )

        result = manager.ensure_link(paths["link"], paths["target"])

        assert result.outcome == LinkOutcome.COPIED
        assert result.strategy == "copy"
        assert result.success
        assert not paths["link"].is_symlink()
        assert (paths["link"] / "shared").read_bytes() == b"central"

    def test_all_strategies_fail(self, paths: dict[str, Path], make_cache_dir: MakeDir) -> None:
        """Exhausting every strategy yields FAILED with every reason."""
        make_cache_dir(paths["link"])
        manager = DirectoryLinkManager(
            paths["quarantine"],
            strategies=(RefusingStrategy("symlink"), RefusingStrategy("junction")),
        )

        result = manager.ensure_link(paths["link"], paths["target"])

        assert result.outcome == LinkOutcome.FAILED
        assert "symlink refused" in (result.error or "")
        assert "junction refused" in (result.error or "")
        # Quarantine already happened and is reported for recovery
        assert result.quarantine is not None
        assert result.quarantine.quarantine_path.exists()

    def test_target_creation_failure(self, paths: dict[str, Path]) -> None:
        """An uncreatable target is reported, not raised."""
        paths["target"].parent.mkdir(parents=True)
        paths["target"].write_text("a file, not a directory")
        manager = DirectoryLinkManager(paths["quarantine"])

        result = manager.ensure_link(paths["link"], paths["target"])

        assert result.outcome == LinkOutcome.FAILED
        assert "Cannot create target" in (result.error or "")


class TestDryRun:
    """Tests for dry-run mode."""

    def test_nothing_touched(self, paths: dict[str, Path], make_cache_dir: MakeDir) -> None:
        make_cache_dir(paths["link"])
        manager = DirectoryLinkManager(paths["quarantine"], dry_run=True)

        result = manager.ensure_link(paths["link"], paths["target"])

        assert manager.dry_run
        assert result.dry_run
        assert result.changed
        assert not paths["link"].is_symlink()
        assert not paths["target"].exists()
        assert not paths["quarantine"].exists()

    def test_already_linked_reports_unchanged(self, paths: dict[str, Path]) -> None:
        DirectoryLinkManager(paths["quarantine"], strategies=(SymlinkStrategy(),)).ensure_link(
            paths["link"], paths["target"]
        )

        result = DirectoryLinkManager(paths["quarantine"], dry_run=True).ensure_link(
            paths["link"], paths["target"]
        )

        assert not result.changed
