"""Sync engine for backup and restore operations."""

from .backup_manager import BackupManager
from .outcome import ItemOutcome, ItemStatus, RunOutcome

__all__ = ["BackupManager", "ItemOutcome", "ItemStatus", "RunOutcome"]
