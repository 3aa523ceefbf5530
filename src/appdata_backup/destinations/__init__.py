"""Backup destinations inside the OneDrive folder."""

from .backup_root import BackupRootError, resolve_backup_root, resolve_restore_root

__all__ = ["BackupRootError", "resolve_backup_root", "resolve_restore_root"]
