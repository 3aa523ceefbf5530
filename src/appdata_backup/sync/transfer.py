"""Single-item transfer applying the conflict policy."""

import logging
import shutil
from pathlib import Path

from ..config.settings import ConflictPolicy
from ..sources.categories import ItemKind, ItemSpec
from ..utils.file_utils import FileHelper
from .mirror import DirectoryMirror, MirrorError
from .outcome import ItemOutcome, ItemStatus

logger = logging.getLogger(__name__)


class ItemTransfer:
    """Copy one item from a source path to a destination path.

    The same policy applies to every item of a run, in both directions.
    """

    def __init__(self, mirror: DirectoryMirror, policy: ConflictPolicy = ConflictPolicy.OVERWRITE,
                 simulate: bool = False):
        self.mirror = mirror
        self.policy = policy
        self.simulate = simulate

    def transfer(self, category_key: str, item: ItemSpec, source: Path, destination: Path) -> ItemOutcome:
        """Transfer ``source`` to ``destination``.

        Never raises for filesystem failures; they are returned as an
        ``error`` outcome so the caller can continue with the next item.
        """
        def outcome(status: ItemStatus, detail: str = "") -> ItemOutcome:
            return ItemOutcome(category_key, item.name, status, source, destination, detail)

        if not self._source_exists(item, source):
            logger.info(f"[{category_key}] {item.name}: not found at {source}")
            return outcome(ItemStatus.MISSING, "source not found")

        if destination.exists():
            if self.policy == ConflictPolicy.SKIP_EXISTING:
                logger.info(f"[{category_key}] {item.name}: destination exists, skipped")
                return outcome(ItemStatus.SKIPPED, "destination exists")
            if item.kind == ItemKind.FILE and destination.is_dir():
                # copy2 would land inside it as <destination>/<name>
                logger.error(f"[{category_key}] {item.name}: destination {destination} is a directory")
                return outcome(ItemStatus.ERROR, f"destination is a directory: {destination}")
            if self.policy == ConflictPolicy.FORCE:
                if self.simulate:
                    logger.info(f"[{category_key}] would clear {destination}")
                elif not self.clear_destination(item, destination):
                    logger.debug(f"[{category_key}] could not fully clear {destination}, copying anyway")

        if self.simulate:
            verb = "mirror" if item.kind == ItemKind.DIRECTORY else "copy"
            return outcome(ItemStatus.OK, f"would {verb} {source} -> {destination}")

        try:
            if item.kind == ItemKind.DIRECTORY:
                stats = self.mirror.mirror(source, destination, item.pattern)
                detail = f"mirrored ({stats.describe()})"
            else:
                destination.parent.mkdir(parents=True, exist_ok=True)
                shutil.copy2(source, destination)
                detail = "copied"
        except (OSError, MirrorError) as e:
            logger.error(f"[{category_key}] {item.name}: {e}")
            return outcome(ItemStatus.ERROR, str(e))

        logger.info(f"[{category_key}] {item.name}: {detail}")
        return outcome(ItemStatus.OK, detail)

    @staticmethod
    def _source_exists(item: ItemSpec, source: Path) -> bool:
        if item.kind == ItemKind.DIRECTORY:
            return source.is_dir()
        return source.is_file()

    @staticmethod
    def clear_destination(item: ItemSpec, destination: Path) -> bool:
        """Best-effort removal of obstructions before a forced copy.

        A file destination is made writable and deleted. A directory is never
        deleted; the files the mirror will replace are made writable.
        """
        if item.kind == ItemKind.DIRECTORY:
            return FileHelper.clear_readonly_tree(destination, item.pattern)
        return FileHelper.force_remove(destination)
