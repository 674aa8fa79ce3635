"""Append-only link history (``history.jsonl`` in the state directory)."""

import json
import logging
from pathlib import Path

from cachectl.core.paths import ensure_dir, get_state_dir
from cachectl.models.history import HistoryEntry, create_history_entry
from cachectl.models.link import LinkResult

logger = logging.getLogger(__name__)


class StateManager:
    """Reads and appends history entries, one JSON object per line.

    Sweeps, the watcher and ``cachectl link`` may run at the same time, so
    each entry goes out in a single ``write`` on a file opened for append.
    """

    HISTORY_FILENAME = "history.jsonl"

    def __init__(self, state_dir: Path | None = None) -> None:
        self._state_dir = state_dir if state_dir is not None else get_state_dir()

    @property
    def history_path(self) -> Path:
        return self._state_dir / self.HISTORY_FILENAME

    def record_action(self, entry: HistoryEntry) -> None:
        """Append ``entry``.

        Raises:
            RuntimeError: The state directory cannot be created.
            OSError: The history file cannot be written.
        """
        ensure_dir(self._state_dir, "state")
        with self.history_path.open(mode="a", encoding="utf-8") as f:
            f.write(entry.to_json_line() + "\n")

    def record_link(self, result: LinkResult, command: str = "cachectl sweep") -> bool:
        """Record ``result`` when it changed something on disk.

        Dry runs and unchanged results are skipped. A history write failure
        must not fail the link that already happened, so it is logged and
        reported through the return value.

        Returns:
            True if an entry was written.
        """
        if result.dry_run or not result.changed:
            return False
        try:
            self.record_action(create_history_entry(result, metadata={"command": command}))
        except (OSError, RuntimeError) as e:
            logger.warning("Could not record %s in history: %s", result.link_path, e)
            return False
        return True

    def get_history(self, limit: int | None = None) -> list[HistoryEntry]:
        """Entries newest first, at most ``limit`` of them.

        Corrupt lines (for example a write torn by a crash) are logged and
        skipped.
        """
        if not self.history_path.exists():
            return []

        entries: list[HistoryEntry] = []
        with self.history_path.open(encoding="utf-8") as f:
            for line_num, raw in enumerate(f, start=1):
                line = raw.strip()
                if not line:
                    continue
                try:
                    entries.append(HistoryEntry.from_json_line(line))
                except (json.JSONDecodeError, KeyError, ValueError) as e:
                    logger.warning("Skipping corrupt history line %d: %s", line_num, e)

        entries.reverse()
        return entries if limit is None else entries[:limit]

    def find_by_path(self, path: str) -> list[HistoryEntry]:
        """Entries whose project-side path equals ``path``, newest first."""
        return [e for e in self.get_history() if e.path == path]
