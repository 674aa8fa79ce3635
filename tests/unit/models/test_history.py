"""Unit tests for history entry models."""

import json
from pathlib import Path

import pytest
from cachectl.models.history import HistoryActionType, HistoryEntry, create_history_entry
from cachectl.models.link import LinkOutcome, LinkResult


class TestHistoryEntry:
    """Tests for HistoryEntry."""

    def test_optional_fields_omitted(self) -> None:
        """quarantine_path and error are only written when set."""
        entry = HistoryEntry(
            id="abc123def456",
            timestamp="2026-01-01T00:00:00+00:00",
            action_type=HistoryActionType.LINK,
            path="/src/p/.tox",
            target="/c/k/.tox",
        )

        data = json.loads(entry.to_json_line())
        assert "quarantine_path" not in data
        assert "error" not in data
        assert HistoryEntry.from_json_line(entry.to_json_line()) == entry

    @pytest.mark.parametrize("field", ["id", "timestamp", "path"])
    def test_required_fields(self, field: str) -> None:
        kwargs = {
            "id": "a",
            "timestamp": "t",
            "action_type": HistoryActionType.LINK,
            "path": "/p",
            "target": "/t",
        }
        kwargs[field] = ""
        with pytest.raises(ValueError):
            HistoryEntry(**kwargs)  # type: ignore[arg-type]

    def test_invalid_action_type(self) -> None:
        line = '{"id":"a","timestamp":"t","action_type":"explode","path":"/p","target":"/t"}'
        with pytest.raises(ValueError):
            HistoryEntry.from_json_line(line)


class TestCreateHistoryEntry:
    """Tests for create_history_entry()."""

    @pytest.mark.parametrize(
        ("outcome", "action"),
        [
            (LinkOutcome.LINKED, HistoryActionType.LINK),
            (LinkOutcome.COPIED, HistoryActionType.COPY),
            (LinkOutcome.FAILED, HistoryActionType.FAIL),
        ],
    )
    def test_action_mapping(self, outcome: LinkOutcome, action: HistoryActionType) -> None:
        result = LinkResult(Path("/a"), Path("/b"), outcome, error="e")
        assert create_history_entry(result).action_type == action

    def test_metadata_and_strategy(self) -> None:
        result = LinkResult(Path("/a"), Path("/b"), LinkOutcome.LINKED, strategy="junction")

        entry = create_history_entry(result, metadata={"command": "cachectl link"})

        assert len(entry.id) == 12
        assert entry.metadata == {"command": "cachectl link", "strategy": "junction"}
