"""Unit tests for the history command."""

import json
from pathlib import Path
from unittest.mock import patch

import pytest
from cachectl.cli.main import app
from cachectl.models.history import HistoryActionType, HistoryEntry
from typer.testing import CliRunner

runner = CliRunner()


@pytest.fixture
def sample_history_entries() -> list[HistoryEntry]:
    """Create sample history entries for testing."""
    return [
        HistoryEntry(
            id="abc123456789",
            timestamp="2026-01-26T14:30:00+00:00",
            action_type=HistoryActionType.LINK,
            path="/src/app/.ruff_cache",
            target="/c/1f2e/.ruff_cache",
            quarantine_path="/q/.ruff_cache_20260126_143000_deadbeef",
            metadata={"command": "cachectl sweep", "strategy": "symlink"},
        ),
        HistoryEntry(
            id="def678901234",
            timestamp="2026-01-26T14:25:00+00:00",
            action_type=HistoryActionType.FAIL,
            path="/src/web/.tox",
            target="/c/9a8b/.tox",
            error="access denied",
        ),
    ]


class TestHistoryCommand:
    """Tests for cachectl history."""

    def test_help(self) -> None:
        result = runner.invoke(app, ["history", "--help"])
        assert result.exit_code == 0
        assert "View history of link changes" in result.stdout
        assert "--limit" in result.stdout

    def test_empty(self) -> None:
        with patch("cachectl.cli.commands.history.StateManager") as mock_state:
            mock_state.return_value.get_history.return_value = []

            result = runner.invoke(app, ["history"])

        assert result.exit_code == 0
        assert "No history entries found" in result.stdout

    def test_table(self, sample_history_entries: list[HistoryEntry]) -> None:
        with patch("cachectl.cli.commands.history.StateManager") as mock_state:
            mock_state.return_value.get_history.return_value = sample_history_entries

            result = runner.invoke(app, ["history"])

        assert result.exit_code == 0
        assert "Link History" in result.stdout
        assert "abc12345" in result.stdout
        assert "2026-01-26 14:30" in result.stdout

    def test_limit_passed(self, sample_history_entries: list[HistoryEntry]) -> None:
        with patch("cachectl.cli.commands.history.StateManager") as mock_state:
            mock_state.return_value.get_history.return_value = sample_history_entries[:1]

            runner.invoke(app, ["history", "-n", "1"])

        mock_state.return_value.get_history.assert_called_once_with(limit=1)

    def test_json(self, sample_history_entries: list[HistoryEntry]) -> None:
        with patch("cachectl.cli.commands.history.StateManager") as mock_state:
            mock_state.return_value.get_history.return_value = sample_history_entries

            result = runner.invoke(app, ["history", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert [d["action_type"] for d in data] == ["link", "fail"]
        assert data[0]["quarantine_path"].startswith("/q/")
        assert data[1]["error"] == "access denied"

    def test_action_filter(self, sample_history_entries: list[HistoryEntry]) -> None:
        """--action keeps only matching entries."""
        with patch("cachectl.cli.commands.history.StateManager") as mock_state:
            mock_state.return_value.get_history.return_value = sample_history_entries

            result = runner.invoke(app, ["history", "--action", "fail", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert [d["id"] for d in data] == ["def678901234"]
        mock_state.return_value.get_history.assert_called_once_with()

    def test_path_filter(self, sample_history_entries: list[HistoryEntry], tmp_path: Path) -> None:
        """--path looks entries up by the normalized absolute path."""
        target = tmp_path / "app" / ".ruff_cache"
        with patch("cachectl.cli.commands.history.StateManager") as mock_state:
            mock_state.return_value.find_by_path.return_value = sample_history_entries[:1]

            result = runner.invoke(app, ["history", "--path", str(target)])

        assert result.exit_code == 0
        assert "abc12345" in result.stdout
        mock_state.return_value.find_by_path.assert_called_once_with(str(target))

