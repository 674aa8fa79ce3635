"""Unit tests for shared CLI rendering helpers."""

from pathlib import Path

import pytest
from cachectl.cli.display import format_outcome, link_detail
from cachectl.models.link import LinkOutcome, LinkResult, QuarantineEntry


def _link(**kwargs: object) -> LinkResult:
    defaults: dict[str, object] = {
        "link_path": Path("/src/p/.tox"),
        "target_path": Path("/c/k/.tox"),
        "outcome": LinkOutcome.LINKED,
    }
    defaults.update(kwargs)
    return LinkResult(**defaults)  # type: ignore[arg-type]


class TestFormatOutcome:
    """Tests for format_outcome()."""

    @pytest.mark.parametrize(
        ("kwargs", "expected"),
        [
            ({}, "linked"),
            ({"changed": False}, "unchanged"),
            ({"outcome": LinkOutcome.COPIED}, "copied"),
            ({"outcome": LinkOutcome.FAILED, "error": "x"}, "failed"),
            ({"dry_run": True}, "would link"),
            ({"dry_run": True, "changed": False}, "unchanged"),
        ],
    )
    def test_labels(self, kwargs: dict[str, object], expected: str) -> None:
        assert expected in format_outcome(_link(**kwargs))


class TestLinkDetail:
    """Tests for link_detail()."""

    def test_error_first(self) -> None:
        assert link_detail(_link(outcome=LinkOutcome.FAILED, error="denied")) == "denied"

    def test_quarantine(self) -> None:
        entry = QuarantineEntry(Path("/src/p/.tox"), Path("/q/.tox_x"), "20260101_000000", "ab")
        assert link_detail(_link(quarantine=entry)) == "quarantined to /q/.tox_x"

    def test_strategy(self) -> None:
        assert link_detail(_link(strategy="symlink")) == "symlink"
        assert link_detail(_link()) == ""
