"""Directory link manager.

Replaces a directory with a redirect to a centralized directory. Any
real content found at the link path is quarantined first; if that fails
the path is left untouched.
"""

import logging
from pathlib import Path

from cachectl.linking.quarantine import QuarantineFailedError, quarantine
from cachectl.linking.strategies import (
    DEFAULT_STRATEGIES,
    LinkStrategy,
    apply_strategies,
    is_redirect,
    points_at,
    redirect_target,
    remove_redirect,
)
from cachectl.models.link import LinkOutcome, LinkResult, QuarantineEntry

logger = logging.getLogger(__name__)


class DirectoryLinkManager:
    """Points directories at centralized targets.

    Attributes:
        _quarantine_root: Where pre-existing content is moved aside.
        _strategies: Ordered link creation strategies.
        _dry_run: If True, report what would happen without touching disk.
    """

    def __init__(
        self,
        quarantine_root: Path,
        *,
        strategies: tuple[LinkStrategy, ...] = DEFAULT_STRATEGIES,
        dry_run: bool = False,
    ) -> None:
        self._quarantine_root = quarantine_root
        self._strategies = strategies
        self._dry_run = dry_run

    @property
    def dry_run(self) -> bool:
        """Whether the manager is in dry-run mode."""
        return self._dry_run

    def ensure_link(self, link_path: Path, target_path: Path) -> LinkResult:
        """Make ``link_path`` a redirect to ``target_path``.

        Steps:
        1. Create the target directory (idempotent).
        2. Already redirected to the target: nothing to do.
        3. Redirect to somewhere else: remove the redirect entry only.
        4. Real content: quarantine it, abort on failure.
        5. Create the link's parent directory.
        6. Apply strategies in order (symlink, junction, copy).

        Args:
            link_path: Project-side path.
            target_path: Centralized directory.

        Returns:
            LinkResult with outcome LINKED, COPIED or FAILED. This method
            does not raise for filesystem errors.
        """
        if self._dry_run:
            return self._plan(link_path, target_path)

        try:
            target_path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            return self._failed(link_path, target_path, f"Cannot create target: {e}")

        if points_at(link_path, target_path):
            logger.debug("Already linked: %s -> %s", link_path, target_path)
            return LinkResult(
                link_path=link_path,
                target_path=target_path,
                outcome=LinkOutcome.LINKED,
                changed=False,
            )

        entry: QuarantineEntry | None = None
        if is_redirect(link_path):
            previous = redirect_target(link_path)
            try:
                remove_redirect(link_path)
            except OSError as e:
                return self._failed(link_path, target_path, f"Cannot remove old redirect: {e}")
            logger.info("Removed redirect %s (was -> %s)", link_path, previous)
        else:
            try:
                entry = quarantine(link_path, self._quarantine_root)
            except QuarantineFailedError as e:
                return self._failed(link_path, target_path, str(e))

        try:
            link_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            return self._failed(link_path, target_path, f"Cannot create parent: {e}", entry)

        attempts = apply_strategies(link_path, target_path, self._strategies)
        final = attempts[-1] if attempts else None

        if final is None or not final.succeeded:
            reasons = "; ".join(f"{a.strategy}: {a.error}" for a in attempts)
            return self._failed(
                link_path, target_path, f"All link strategies failed ({reasons})", entry
            )

        if final.outcome == LinkOutcome.COPIED:
            logger.warning(
                "Degraded: copied %s into %s; later writes will not reach the central copy",
                target_path,
                link_path,
            )
        else:
            logger.info("Linked %s -> %s (%s)", link_path, target_path, final.strategy)

        return LinkResult(
            link_path=link_path,
            target_path=target_path,
            outcome=final.outcome,
            strategy=final.strategy,
            quarantine=entry,
        )

    def _plan(self, link_path: Path, target_path: Path) -> LinkResult:
        """Describe what ensure_link would do, without side effects."""
        changed = not points_at(link_path, target_path)
        if changed:
            logger.info("Dry-run: would link %s -> %s", link_path, target_path)
        return LinkResult(
            link_path=link_path,
            target_path=target_path,
            outcome=LinkOutcome.LINKED,
            changed=changed,
            dry_run=True,
        )

    def _failed(
        self,
        link_path: Path,
        target_path: Path,
        reason: str,
        entry: QuarantineEntry | None = None,
    ) -> LinkResult:
        logger.error("Link failed for %s: %s", link_path, reason)
        return LinkResult(
            link_path=link_path,
            target_path=target_path,
            outcome=LinkOutcome.FAILED,
            quarantine=entry,
            error=reason,
        )
