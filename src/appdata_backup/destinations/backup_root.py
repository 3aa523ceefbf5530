"""Resolve the per-machine backup root inside the OneDrive folder."""

import logging
from pathlib import Path
from typing import List, Optional

from ..config.settings import DEFAULT_BACKUP_SUBPATH, HostPaths

logger = logging.getLogger(__name__)


class BackupRootError(RuntimeError):
    """The backup root could not be resolved; nothing can be copied."""


def backup_base(paths: HostPaths, subpath: str = DEFAULT_BACKUP_SUBPATH) -> Path:
    """Directory holding one backup folder per machine.

    Raises:
        BackupRootError: If the OneDrive folder is unknown
    """
    if paths.cloud_root is None:
        raise BackupRootError(
            "OneDrive folder not found. Set the OneDrive environment variable, "
            "cloud_root in the configuration file, or pass --root."
        )
    return paths.cloud_root / subpath


def resolve_backup_root(paths: HostPaths, subpath: str = DEFAULT_BACKUP_SUBPATH,
                        override: Optional[Path] = None) -> Path:
    """Backup destination for this machine: ``<OneDrive>/<subpath>/<machine>``."""
    if override is not None:
        return Path(override)
    return backup_base(paths, subpath) / paths.machine_name


def list_machine_backups(paths: HostPaths, subpath: str = DEFAULT_BACKUP_SUBPATH) -> List[Path]:
    """Machine backup folders, most recently modified first."""
    base = backup_base(paths, subpath)
    if not base.is_dir():
        return []
    machines = [p for p in base.iterdir() if p.is_dir()]
    return sorted(machines, key=lambda p: p.stat().st_mtime, reverse=True)


def resolve_restore_root(paths: HostPaths, subpath: str = DEFAULT_BACKUP_SUBPATH,
                         override: Optional[Path] = None) -> Path:
    """Backup to restore from: the override, or the newest machine folder.

    Raises:
        BackupRootError: If no backup folder can be found
    """
    if override is not None:
        override = Path(override)
        if not override.is_dir():
            raise BackupRootError(f"Backup folder not found: {override}")
        return override

    machines = list_machine_backups(paths, subpath)
    if not machines:
        raise BackupRootError(f"No machine backups found under {backup_base(paths, subpath)}")

    logger.info(f"Auto-detected backup folder: {machines[0]}")
    return machines[0]
