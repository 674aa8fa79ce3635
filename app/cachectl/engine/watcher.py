"""Real-time enforcement driven by filesystem events.

The watchdog observer thread only pushes events onto a queue; a single
consumer loop drains the queue and runs the enforcement pipeline. Slow
link operations therefore never run inside watchdog's callback, and an
exception in the pipeline can never stop event delivery.
"""

import logging
import os
import queue
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from watchdog.events import DirCreatedEvent, DirMovedEvent, FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from cachectl.engine.enforcer import EnforcementEngine
from cachectl.models.enforcement import EnforcementResult, SweepReport, WatchState
from cachectl.models.link import LinkOutcome

logger = logging.getLogger(__name__)

DEFAULT_ECHO_WINDOW = 5.0
DEFAULT_POLL_TIMEOUT = 1.0


@dataclass(frozen=True, slots=True)
class WatchEvent:
    """A directory that appeared under a watch root.

    Attributes:
        path: The new directory.
        root: Watch root the observer was scheduled on.
        moved: True if the directory was renamed or moved into place.
    """

    path: Path
    root: Path
    moved: bool = False


class DirectoryEventHandler(FileSystemEventHandler):
    """Forwards directory creation and rename events to a queue."""

    def __init__(self, root: Path, events: "queue.Queue[WatchEvent]") -> None:
        super().__init__()
        self._root = root
        self._events = events

    def on_created(self, event: FileSystemEvent) -> None:
        if isinstance(event, DirCreatedEvent):
            self._push(event.src_path, moved=False)

    def on_moved(self, event: FileSystemEvent) -> None:
        if isinstance(event, DirMovedEvent):
            self._push(event.dest_path, moved=True)

    def _push(self, raw: str | bytes, *, moved: bool) -> None:
        self._events.put(WatchEvent(Path(os.fsdecode(raw)), self._root, moved))


class Watcher:
    """Runs the enforcement pipeline for every new directory.

    Directories the copy fallback just wrote are real directories that
    still match a pattern, so their own creation events are ignored for a
    short echo window. Redirects need no such window: they never match
    again, and a redirect replaced by a real directory is processed anew.

    Attributes:
        failed: Number of FAILED results produced so far.
    """

    def __init__(
        self,
        engine: EnforcementEngine,
        roots: list[Path] | None = None,
        *,
        observer_factory: Callable[[], Any] = Observer,
        echo_window: float = DEFAULT_ECHO_WINDOW,
        poll_timeout: float = DEFAULT_POLL_TIMEOUT,
    ) -> None:
        self._engine = engine
        self._roots = roots if roots is not None else engine.roots
        self._observer_factory = observer_factory
        self._observer: Any = None
        self._echo_window = echo_window
        self._poll_timeout = poll_timeout
        self._recent: dict[Path, float] = {}
        self.failed = 0
        self.events: queue.Queue[WatchEvent] = queue.Queue()

    def start(self) -> list[Path]:
        """Schedule a recursive observer on every existing watch root.

        Returns:
            Roots that are being watched.

        Raises:
            ValueError: If no watch root exists.
        """
        observer = self._observer_factory()
        watched: list[Path] = []
        for root in self._roots:
            if not root.is_dir():
                logger.warning("Watch root is not a directory, skipping: %s", root)
                continue
            observer.schedule(DirectoryEventHandler(root, self.events), str(root), recursive=True)
            watched.append(root)

        if not watched:
            msg = "No existing watch roots to watch"
            raise ValueError(msg)

        observer.start()
        self._observer = observer
        logger.info("Watching %d root(s): %s", len(watched), ", ".join(map(str, watched)))
        return watched

    def stop(self) -> None:
        """Stop and join the observer thread."""
        if self._observer is None:
            return
        self._observer.stop()
        self._observer.join()
        self._observer = None

    def run(self) -> None:
        """Block processing events until interrupted (Ctrl-C / SIGINT)."""
        self.start()
        try:
            while True:
                self.drain_once(self._poll_timeout)
        except KeyboardInterrupt:
            logger.info("Watch interrupted, stopping")
        finally:
            self.stop()

    def drain_once(self, timeout: float | None = None) -> list[EnforcementResult] | None:
        """Process the next queued event.

        Args:
            timeout: Seconds to wait for an event. None blocks.

        Returns:
            Results for the event, or None if no event arrived in time.
        """
        try:
            event = self.events.get(timeout=timeout)
        except queue.Empty:
            return None
        try:
            return self.handle(event)
        finally:
            self.events.task_done()

    def handle(self, event: WatchEvent) -> list[EnforcementResult]:
        """Run the pipeline for one event.

        Exceptions are logged and swallowed so the loop keeps running.
        """
        try:
            if self._is_echo(event.path):
                logger.debug("Ignoring echo event for %s", event.path)
                return []

            if event.moved:
                report = SweepReport()
                self._engine.sweep_tree(event.path, event.root, report, include_top=True)
                results = report.results
            else:
                result = self._engine.process_path(event.path, event.root)
                results = [result] if result is not None else []

            for result in results:
                if result.outcome == LinkOutcome.COPIED:
                    self._remember(result.path)
                elif result.outcome == LinkOutcome.FAILED:
                    self.failed += 1
            return results
        except Exception:
            logger.exception("Unhandled error while processing %s", event.path)
            self.failed += 1
            return []
        finally:
            self._engine.state = WatchState.IDLE

    def _remember(self, path: Path) -> None:
        self._recent[path] = time.monotonic()

    def _is_echo(self, path: Path) -> bool:
        now = time.monotonic()
        self._recent = {p: t for p, t in self._recent.items() if now - t < self._echo_window}
        return any(path == p or p in path.parents for p in self._recent)
