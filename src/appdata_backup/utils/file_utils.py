"""File utility functions."""

import fnmatch
import logging
import os
import stat
from pathlib import Path
from typing import Iterator, Optional

logger = logging.getLogger(__name__)


class FileHelper:
    """Helper class for file operations."""

    @staticmethod
    def is_readonly(file_path: Path) -> bool:
        """Check if a file has its read-only attribute set.

        Args:
            file_path: Path to check

        Returns:
            True if the file cannot be written
        """
        try:
            return not (file_path.stat().st_mode & stat.S_IWRITE)
        except OSError:
            return False

    @staticmethod
    def clear_readonly(file_path: Path) -> bool:
        """Clear the read-only attribute of a file (best effort).

        On Windows ``os.chmod`` with ``S_IWRITE`` clears FILE_ATTRIBUTE_READONLY.

        Args:
            file_path: File to make writable

        Returns:
            True if the file is writable afterwards
        """
        try:
            mode = file_path.stat().st_mode
            os.chmod(file_path, mode | stat.S_IWRITE | stat.S_IREAD)
            return True
        except OSError as e:
            logger.debug(f"Could not clear read-only attribute on {file_path}: {e}")
            return False

    @staticmethod
    def force_remove(file_path: Path) -> bool:
        """Clear the read-only attribute and delete a file (best effort).

        Args:
            file_path: File to delete

        Returns:
            True if the file no longer exists
        """
        FileHelper.clear_readonly(file_path)
        try:
            file_path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.debug(f"Could not delete {file_path}: {e}")
            return False
        return True

    @staticmethod
    def iter_files(directory: Path, pattern: Optional[str] = None) -> Iterator[Path]:
        """Iterate over files in a directory.

        Args:
            directory: Directory to walk
            pattern: Only matching top-level files; the whole tree when None

        Yields:
            File paths
        """
        if not directory.is_dir():
            return
        if pattern:
            for path in directory.iterdir():
                if path.is_file() and fnmatch.fnmatch(path.name, pattern):
                    yield path
        else:
            for path in directory.rglob("*"):
                if path.is_file():
                    yield path

    @staticmethod
    def clear_readonly_tree(directory: Path, pattern: Optional[str] = None) -> bool:
        """Clear read-only attributes on every file a mirror would touch.

        Returns:
            True if every read-only file was made writable
        """
        cleared = True
        for path in FileHelper.iter_files(directory, pattern):
            if FileHelper.is_readonly(path):
                cleared = FileHelper.clear_readonly(path) and cleared
        return cleared

