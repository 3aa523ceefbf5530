"""
OneDrive Application Data Backup

Backs up and restores browser profile files, Internet Explorer favorites and
Outlook artifacts to a per-machine folder inside OneDrive.
"""

__version__ = "1.0.0"
__author__ = "OneDrive AppData Backup"
__description__ = "Backup browser and Outlook settings to OneDrive"

from .config.settings import AppConfig, HostPaths
from .sync.backup_manager import BackupManager

__all__ = ["AppConfig", "BackupManager", "HostPaths"]
