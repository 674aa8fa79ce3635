"""Enforcement engine.

Runs the per-directory pipeline (classify, resolve bucket, link) over
every watch root as a one-shot sweep, or for single paths delivered by
the watcher. Failures are contained per path: one broken directory never
stops the rest of a sweep or the watch loop.
"""

import logging
import os
from pathlib import Path

from cachectl.core.config import Settings
from cachectl.core.state import StateManager
from cachectl.engine.classifier import is_allowed, matches
from cachectl.engine.project import ProjectKeyResolver
from cachectl.linking.manager import DirectoryLinkManager
from cachectl.linking.strategies import is_redirect
from cachectl.models.enforcement import EnforcementResult, SweepReport, WatchState
from cachectl.models.link import LinkOutcome, LinkResult
from cachectl.models.pattern import CachePattern

logger = logging.getLogger(__name__)


class EnforcementEngine:
    """Centralizes cache directories found under the watch roots.

    Attributes:
        state: Current pipeline state (observable by the watcher and tests).
    """

    def __init__(
        self,
        settings: Settings,
        *,
        link_manager: DirectoryLinkManager | None = None,
        resolver: ProjectKeyResolver | None = None,
        history: StateManager | None = None,
        dry_run: bool = False,
        command: str = "cachectl sweep",
    ) -> None:
        """Initialize the engine.

        Args:
            settings: Validated settings (roots, patterns, central root).
            link_manager: Link manager override. Defaults to one using the
                configured quarantine root.
            resolver: Project resolver override.
            history: Where changed link results are recorded. None
                disables recording.
            dry_run: Report what would change without touching disk.
            command: Command label stored with history entries.
        """
        self._roots = list(settings.watch_roots)
        self._central_root = settings.central_root
        self._patterns = settings.cache_patterns
        self._allow_roots = settings.effective_allow_roots
        self._link_manager = link_manager or DirectoryLinkManager(
            settings.quarantine_root, dry_run=dry_run
        )
        self._resolver = resolver or ProjectKeyResolver()
        self._history = history
        self._command = command
        self.state = WatchState.IDLE

    @property
    def roots(self) -> list[Path]:
        """Configured watch roots."""
        return list(self._roots)

    @property
    def patterns(self) -> list[CachePattern]:
        """Configured cache patterns."""
        return list(self._patterns)

    def target_for(self, bucket: str, pattern: CachePattern) -> Path:
        """Centralized directory for a pattern within a bucket."""
        return self._central_root / bucket / pattern.target_name

    def classify(self, path: Path) -> CachePattern | None:
        """Classify a single directory.

        Allow-listed paths and existing redirects are never candidates.

        Returns:
            The matching pattern, or None for a classification no-op.
        """
        if is_allowed(path, self._allow_roots):
            return None
        if is_redirect(path) or not path.is_dir():
            return None
        return matches(path, path.name, self._patterns)

    def process_path(self, path: Path, root: Path) -> EnforcementResult | None:
        """Run the full pipeline for a single directory.

        Args:
            path: Directory to process.
            root: Watch root the path belongs to (fallback project root).

        Returns:
            EnforcementResult, or None when the directory does not match.
        """
        self._set_state(WatchState.SCANNING, path)
        try:
            pattern = self.classify(path)
        except OSError as e:
            logger.warning("Cannot inspect %s: %s", path, e)
            pattern = None
        if pattern is None:
            self._set_state(WatchState.IDLE, path)
            return None
        return self._run_pipeline(path, root, pattern)

    def sweep(self, roots: list[Path] | None = None) -> SweepReport:
        """Sweep every watch root once.

        Args:
            roots: Optional override of the configured watch roots.

        Returns:
            SweepReport with one result per matched directory.
        """
        report = SweepReport()
        for root in roots if roots is not None else self._roots:
            if not root.is_dir():
                logger.warning("Watch root is not a directory, skipping: %s", root)
                report.enumeration_errors.append((str(root), "not a directory"))
                continue
            logger.info("Sweeping %s", root)
            self.sweep_tree(root, root, report)

        logger.info(
            "Sweep finished: %d scanned, %d linked, %d copied, %d failed",
            report.scanned,
            report.count(LinkOutcome.LINKED),
            report.count(LinkOutcome.COPIED),
            report.failed,
        )
        return report

    def sweep_tree(
        self,
        top: Path,
        root: Path,
        report: SweepReport,
        *,
        include_top: bool = False,
    ) -> None:
        """Sweep the directory tree below ``top``.

        Redirects are never followed. Matched and allow-listed directories
        are not descended into. Directories that cannot be listed are
        logged and skipped.

        Args:
            top: Directory to walk.
            root: Watch root (fallback project root).
            report: Report receiving results and enumeration errors.
            include_top: Also classify ``top`` itself.
        """
        if include_top:
            result = self.process_path(top, root)
            if result is not None:
                report.results.append(result)
                return
            if is_allowed(top, self._allow_roots) or is_redirect(top):
                return

        def on_error(err: OSError) -> None:
            where = err.filename or str(top)
            logger.warning("Cannot enumerate %s: %s", where, err.strerror or err)
            report.enumeration_errors.append((str(where), str(err.strerror or err)))

        for dirpath, dirnames, _ in os.walk(top, onerror=on_error):
            report.scanned += 1
            descend: list[str] = []
            for name in dirnames:
                full = Path(dirpath) / name
                try:
                    if is_allowed(full, self._allow_roots) or is_redirect(full):
                        continue
                    pattern = matches(full, name, self._patterns)
                except OSError as e:
                    on_error(e)
                    continue

                if pattern is None:
                    descend.append(name)
                    continue

                report.results.append(self._run_pipeline(full, root, pattern))
            dirnames[:] = descend

    def _run_pipeline(self, path: Path, root: Path, pattern: CachePattern) -> EnforcementResult:
        """Resolve the bucket and link one matched directory."""
        logger.info("Matched %s (pattern %s)", path, pattern)
        project_root = root
        bucket = ""
        target = self._central_root
        try:
            self._set_state(WatchState.RESOLVING, path)
            project_root = self._resolver.resolve_project_root(path, root)
            bucket = self._resolver.bucket_key(project_root)
            target = self.target_for(bucket, pattern)

            self._set_state(WatchState.LINKING, path)
            link = self._link_manager.ensure_link(path, target)
        except (OSError, RuntimeError, ValueError) as e:
            logger.error("Pipeline failed for %s: %s", path, e)
            link = self._failed(path, target, str(e) or type(e).__name__)
        except Exception as e:
            logger.exception("Unexpected error in pipeline for %s", path)
            link = self._failed(path, target, f"{type(e).__name__}: {e}")
        finally:
            self._set_state(WatchState.IDLE, path)

        self._log_outcome(link)
        if self._history is not None:
            self._history.record_link(link, command=self._command)

        return EnforcementResult(
            path=path,
            root=root,
            pattern=pattern,
            project_root=project_root,
            bucket=bucket,
            link=link,
        )

    @staticmethod
    def _failed(path: Path, target: Path, error: str) -> LinkResult:
        return LinkResult(
            link_path=path, target_path=target, outcome=LinkOutcome.FAILED, error=error
        )

    def _log_outcome(self, link: LinkResult) -> None:
        if link.dry_run:
            return
        if link.outcome == LinkOutcome.FAILED:
            logger.error("FAILED %s: %s", link.link_path, link.error)
        elif link.outcome == LinkOutcome.COPIED:
            logger.warning("COPIED %s <- %s", link.link_path, link.target_path)
        elif link.changed:
            logger.info("LINKED %s -> %s", link.link_path, link.target_path)
        else:
            logger.debug("UNCHANGED %s -> %s", link.link_path, link.target_path)

    def _set_state(self, state: WatchState, path: Path) -> None:
        if state != self.state:
            logger.debug("%s -> %s (%s)", self.state.value, state.value, path)
            self.state = state
