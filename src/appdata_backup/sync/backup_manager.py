"""Main backup manager orchestrating backup and restore runs."""

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional

from ..config.settings import ConflictPolicy, HostPaths
from ..sources.categories import Category, item_root
from ..sources.firefox_profiles import select_backup_profile, select_restore_profile
from ..utils.logging import TimedOperation
from .decisions import Decisions
from .mirror import DirectoryMirror, PythonMirror
from .outcome import ItemOutcome, ItemStatus, RunOutcome
from .transfer import ItemTransfer

# Module logger
logger = logging.getLogger(__name__)

BACKUP = "backup"
RESTORE = "restore"


class BackupManager:
    """Backs up application categories to a backup root and restores them.

    Both directions share one layout: item ``I`` of category ``C`` lives at
    ``<root>/C/I`` in the backup and at ``<live root>/I`` on the machine.
    """

    def __init__(self, paths: HostPaths,
                 policy: ConflictPolicy = ConflictPolicy.OVERWRITE,
                 mirror: Optional[DirectoryMirror] = None,
                 simulate: bool = False,
                 decisions: Optional[Decisions] = None,
                 interactive_profiles: bool = False,
                 on_item: Optional[Callable[[ItemOutcome], None]] = None,
                 on_category: Optional[Callable[[Category, Optional[Path]], None]] = None):
        """Initialize backup manager.

        Args:
            paths: Host base directories
            policy: Conflict policy applied to every item
            mirror: Directory mirror implementation
            simulate: Describe every change instead of making it
            decisions: Provider for interactive decisions
            interactive_profiles: Offer a Firefox profile choice on restore
            on_item: Called with each item outcome as it is produced
            on_category: Called with each category and its live root
        """
        self.paths = paths
        self.policy = policy
        self.simulate = simulate
        self.decisions = decisions or Decisions()
        self.interactive_profiles = interactive_profiles
        self.on_item = on_item
        self.on_category = on_category
        self.transfer = ItemTransfer(mirror or PythonMirror(), policy, simulate)

    def run_backup(self, categories: Iterable[Category], destination_root: Path) -> RunOutcome:
        """Copy the live files of each category into ``destination_root``.

        Args:
            categories: Categories to back up
            destination_root: Backup root for this machine

        Returns:
            Outcome of the run
        """
        destination_root = Path(destination_root)
        outcome = RunOutcome(BACKUP, destination_root, self.simulate)

        if not self.simulate:
            destination_root.mkdir(parents=True, exist_ok=True)

        for category in categories:
            with TimedOperation(logger, f"backup of {category.key}", "DEBUG"):
                try:
                    live_root = self._backup_live_root(category)
                except OSError as e:
                    self._fail_category(outcome, category, e)
                    continue
                self._notify_category(category, live_root)
                for item in category.items:
                    source = self._live_path(category, item, live_root)
                    destination = destination_root / category.key / item.name
                    self._record(outcome, category, item, source, destination)

        return outcome

    def run_restore(self, categories: Iterable[Category], backup_root: Path) -> RunOutcome:
        """Copy backed up files of each category back to their live location.

        Args:
            categories: Categories to restore
            backup_root: Backup root to restore from

        Returns:
            Outcome of the run
        """
        backup_root = Path(backup_root)
        outcome = RunOutcome(RESTORE, backup_root, self.simulate)

        for category in categories:
            with TimedOperation(logger, f"restore of {category.key}", "DEBUG"):
                category_backup = backup_root / category.key
                try:
                    live_root = self._restore_live_root(category, category_backup)
                except OSError as e:
                    self._fail_category(outcome, category, e)
                    continue
                self._notify_category(category, live_root)
                for item in category.items:
                    source = category_backup / item.name
                    destination = self._live_path(category, item, live_root)
                    self._record(outcome, category, item, source, destination)

        return outcome

    def _record(self, outcome: RunOutcome, category: Category, item, source: Optional[Path],
                destination: Optional[Path]):
        if source is None or destination is None:
            result = ItemOutcome(category.key, item.name, ItemStatus.MISSING, source, destination,
                                 "no Firefox profile found")
        else:
            result = self.transfer.transfer(category.key, item, source, destination)
        outcome.record(result)
        if self.on_item:
            self.on_item(result)

    def _fail_category(self, outcome: RunOutcome, category: Category, error: OSError):
        """Record every item of a category whose live root could not be resolved."""
        logger.error(f"[{category.key}] could not resolve profile folder: {error}")
        self._notify_category(category, None)
        for item in category.items:
            result = ItemOutcome(category.key, item.name, ItemStatus.ERROR,
                                 detail=f"profile folder unavailable: {error}")
            outcome.record(result)
            if self.on_item:
                self.on_item(result)

    def _notify_category(self, category: Category, live_root: Optional[Path]):
        if self.on_category:
            self.on_category(category, live_root)

    def _backup_live_root(self, category: Category) -> Optional[Path]:
        root = category.root(self.paths)
        if category.profile_based:
            profile = select_backup_profile(root)
            if profile is None:
                logger.info(f"[{category.key}] no profile found under {root}")
            return profile
        return root

    def _restore_live_root(self, category: Category, category_backup: Path) -> Optional[Path]:
        root = category.root(self.paths)
        if not category.profile_based:
            return root
        if not category_backup.is_dir():
            # Nothing to restore; do not create a profile for it
            return root
        return select_restore_profile(
            root,
            decisions=self.decisions,
            interactive=self.interactive_profiles,
            simulate=self.simulate
        )

    def _live_path(self, category: Category, item, live_root: Optional[Path]) -> Optional[Path]:
        if item.root is None and live_root is None:
            return None
        return item_root(category, item, self.paths, live_root) / item.name

    def get_backup_summary(self, results: List[RunOutcome]) -> Dict[str, Any]:
        """Generate summary of run outcomes.

        Args:
            results: Outcomes of one or more runs

        Returns:
            Summary dictionary
        """
        total = RunOutcome("total")
        for result in results:
            total.merge(result)

        return {
            'total_runs': len(results),
            'total_copied': total.copied,
            'total_skipped': total.skipped,
            'total_missing': total.missing,
            'total_errors': total.errored,
            'simulated': any(r.simulated for r in results),
            'summary_time': datetime.now().isoformat()
        }
