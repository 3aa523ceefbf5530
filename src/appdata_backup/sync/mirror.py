"""Directory mirroring: make a destination directory match a source directory."""

import fnmatch
import logging
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from ..config.settings import MirrorBackend, MirrorOptions

logger = logging.getLogger(__name__)

# Robocopy exit codes: bit 1 files copied, bit 2 extra files removed,
# bit 4 mismatches, bit 8 copy failures, bit 16 fatal error.
MIRROR_WARNING_THRESHOLD = 4
MIRROR_FAILURE_THRESHOLD = 8

EXIT_FILES_COPIED = 1
EXIT_EXTRAS_REMOVED = 2
EXIT_FAILED = 8
EXIT_FATAL = 16

# Seconds of modification time drift treated as "unchanged" (FAT resolution)
MTIME_TOLERANCE = 2


class MirrorError(Exception):
    """Mirroring finished with an exit status in the failure range."""

    def __init__(self, message: str, exit_code: int = EXIT_FATAL):
        super().__init__(message)
        self.exit_code = exit_code


@dataclass
class MirrorStats:
    """Result of a successful mirror."""
    exit_code: int = 0
    files_copied: Optional[int] = None
    extras_removed: Optional[int] = None

    @property
    def warnings(self) -> bool:
        return self.exit_code >= MIRROR_WARNING_THRESHOLD

    def describe(self) -> str:
        if self.files_copied is None:
            return f"exit code {self.exit_code}"
        return f"{self.files_copied} copied, {self.extras_removed} removed"


def is_failure(exit_code: int) -> bool:
    """Whether a robocopy-style exit code means the mirror failed."""
    return exit_code >= MIRROR_FAILURE_THRESHOLD


class DirectoryMirror:
    """Base class for mirror implementations."""

    def mirror(self, source: Path, destination: Path, pattern: Optional[str] = None) -> MirrorStats:
        """Make ``destination`` an exact copy of ``source``.

        Files present only in ``destination`` are removed and differing files
        are overwritten. With ``pattern``, only the matching top-level files
        are considered; everything else in ``destination`` is left alone.

        Raises:
            MirrorError: If the mirror failed
        """
        raise NotImplementedError


class RobocopyMirror(DirectoryMirror):
    """Mirror through the Windows ``robocopy`` utility."""

    def __init__(self, retries: int = 2, wait_seconds: int = 5, runner=subprocess.run):
        self.retries = retries
        self.wait_seconds = wait_seconds
        self.runner = runner

    def build_command(self, source: Path, destination: Path, pattern: Optional[str] = None) -> List[str]:
        command = ["robocopy", str(source), str(destination)]
        if pattern:
            command += [pattern, "/PURGE"]
        else:
            command.append("/MIR")
        command += [
            f"/R:{self.retries}",
            f"/W:{self.wait_seconds}",
            "/NJH", "/NJS", "/NP", "/NFL", "/NDL",
        ]
        return command

    def mirror(self, source: Path, destination: Path, pattern: Optional[str] = None) -> MirrorStats:
        command = self.build_command(source, destination, pattern)
        logger.debug(f"Running: {' '.join(command)}")

        try:
            process = self.runner(command, capture_output=True, text=True, check=False)
        except FileNotFoundError:
            raise MirrorError("robocopy command not found. Ensure it is in your system's PATH.")

        if is_failure(process.returncode):
            output = (process.stdout or process.stderr or "").strip()
            last_line = output.splitlines()[-1] if output else "no output"
            raise MirrorError(
                f"robocopy failed with exit code {process.returncode}: {last_line}",
                process.returncode
            )

        stats = MirrorStats(exit_code=process.returncode)
        if stats.warnings:
            logger.warning(f"robocopy reported mismatches mirroring {source} (exit code {process.returncode})")
        return stats


class PythonMirror(DirectoryMirror):
    """In-process mirror with robocopy-compatible semantics and exit codes."""

    def mirror(self, source: Path, destination: Path, pattern: Optional[str] = None) -> MirrorStats:
        try:
            destination.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise MirrorError(f"Cannot create {destination}: {e}")

        if pattern:
            wanted = {
                Path(p.name): p for p in source.iterdir()
                if p.is_file() and fnmatch.fnmatch(p.name, pattern)
            }
            existing = [
                p for p in destination.iterdir()
                if p.is_file() and fnmatch.fnmatch(p.name, pattern)
            ]
        else:
            wanted = {p.relative_to(source): p for p in sorted(source.rglob("*"))}
            existing = sorted(destination.rglob("*"), reverse=True)

        copied, failures = self._copy_wanted(wanted, destination)
        removed = 0
        for target in existing:
            if target.relative_to(destination) in wanted:
                continue
            if not target.exists() and not target.is_symlink():
                continue
            try:
                if target.is_dir() and not target.is_symlink():
                    shutil.rmtree(target)
                else:
                    target.unlink()
                removed += 1
            except OSError as e:
                logger.warning(f"Could not remove {target}: {e}")
                failures.append(str(e))

        exit_code = (EXIT_FILES_COPIED if copied else 0) | (EXIT_EXTRAS_REMOVED if removed else 0)
        if failures:
            exit_code |= EXIT_FAILED
            raise MirrorError(f"{len(failures)} entries failed: {failures[0]}", exit_code)

        return MirrorStats(exit_code=exit_code, files_copied=copied, extras_removed=removed)

    def _copy_wanted(self, wanted: Dict[Path, Path], destination: Path):
        copied = 0
        failures = []
        # Sorted order creates parents before their children
        for relative, src in sorted(wanted.items()):
            dst = destination / relative
            try:
                if src.is_dir():
                    if dst.exists() and not dst.is_dir():
                        dst.unlink()
                    dst.mkdir(exist_ok=True)
                elif self._differs(src, dst):
                    if dst.is_dir():
                        shutil.rmtree(dst)
                    shutil.copy2(src, dst)
                    copied += 1
            except OSError as e:
                logger.warning(f"Could not copy {src}: {e}")
                failures.append(str(e))
        return copied, failures

    @staticmethod
    def _differs(src: Path, dst: Path) -> bool:
        if not dst.is_file():
            return True
        src_stat = src.stat()
        dst_stat = dst.stat()
        return (src_stat.st_size != dst_stat.st_size or
                abs(src_stat.st_mtime - dst_stat.st_mtime) > MTIME_TOLERANCE)


def create_mirror(options: Optional[MirrorOptions] = None) -> DirectoryMirror:
    """Create the mirror implementation selected by the options."""
    options = options or MirrorOptions()
    backend = options.backend
    if backend == MirrorBackend.AUTO:
        backend = MirrorBackend.ROBOCOPY if shutil.which("robocopy") else MirrorBackend.PYTHON

    if backend == MirrorBackend.ROBOCOPY:
        return RobocopyMirror(retries=options.retries, wait_seconds=options.wait_seconds)
    return PythonMirror()
