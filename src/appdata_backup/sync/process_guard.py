"""Detect and stop applications that hold locks on the files being restored."""

import csv
import io
import logging
import os
import subprocess
from dataclasses import dataclass, field
from pathlib import PurePath
from typing import Iterable, List, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunningProcess:
    """A running process matching one of the guarded names."""
    name: str
    pid: int


@dataclass
class GuardResult:
    """What the guard found and did."""
    found: List[RunningProcess] = field(default_factory=list)
    terminated: List[RunningProcess] = field(default_factory=list)
    failed: List[RunningProcess] = field(default_factory=list)
    declined: bool = False


def processes_for(categories: Iterable) -> List[str]:
    """Executable names guarded for the given categories, without duplicates."""
    names = []
    for category in categories:
        for name in category.processes:
            if name not in names:
                names.append(name)
    return names


class ProcessGuard:
    """Find and terminate running processes by executable name."""

    def __init__(self, process_names: Iterable[str], runner=subprocess.run, windows: Optional[bool] = None):
        self.process_names = {name.lower() for name in process_names}
        self.runner = runner
        self.windows = os.name == 'nt' if windows is None else windows

    def _matches(self, name: str) -> bool:
        name = PurePath(name).name.lower()
        if name in self.process_names:
            return True
        # ps reports names without the .exe suffix
        return f"{name}.exe" in self.process_names

    def _list_command(self) -> List[str]:
        if self.windows:
            return ["tasklist", "/FO", "CSV", "/NH"]
        return ["ps", "-A", "-o", "pid=", "-o", "comm="]

    def _parse(self, output: str) -> List[RunningProcess]:
        processes = []
        if self.windows:
            for row in csv.reader(io.StringIO(output)):
                if len(row) < 2 or not row[1].isdigit():
                    continue
                processes.append(RunningProcess(row[0], int(row[1])))
        else:
            for line in output.splitlines():
                parts = line.strip().split(None, 1)
                if len(parts) == 2 and parts[0].isdigit():
                    processes.append(RunningProcess(parts[1], int(parts[0])))
        return processes

    def find_running(self) -> List[RunningProcess]:
        """List running processes that match the guarded names.

        Enumeration failures are logged and treated as "nothing running".
        """
        if not self.process_names:
            return []
        try:
            result = self.runner(self._list_command(), capture_output=True, text=True, check=False)
        except OSError as e:
            logger.warning(f"Could not list running processes: {e}")
            return []
        if result.returncode != 0:
            logger.warning(f"Process listing failed with exit code {result.returncode}")
            return []
        return [p for p in self._parse(result.stdout or "") if self._matches(p.name)]

    def terminate(self, process: RunningProcess) -> bool:
        """Terminate one process. Returns False on failure, never raises."""
        if self.windows:
            command = ["taskkill", "/PID", str(process.pid), "/F"]
        else:
            command = ["kill", "-TERM", str(process.pid)]
        try:
            result = self.runner(command, capture_output=True, text=True, check=False)
        except OSError as e:
            logger.warning(f"Could not terminate {process.name} (PID {process.pid}): {e}")
            return False
        if result.returncode != 0:
            message = (result.stderr or result.stdout or "").strip()
            logger.warning(f"Could not terminate {process.name} (PID {process.pid}): {message}")
            return False
        logger.info(f"Terminated {process.name} (PID {process.pid})")
        return True

    def guard(self, decisions, force: bool = False, simulate: bool = False) -> GuardResult:
        """Stop guarded processes before a restore.

        Args:
            decisions: Decision provider asked for confirmation
            force: Terminate without asking
            simulate: Report what would be terminated, terminate nothing

        Returns:
            Guard result
        """
        result = GuardResult(found=self.find_running())
        if not result.found:
            return result

        if simulate:
            logger.info(f"Would terminate {len(result.found)} process(es)")
            return result

        if not force and not decisions.confirm_termination(result.found):
            logger.info("Process termination declined")
            result.declined = True
            return result

        for process in result.found:
            if self.terminate(process):
                result.terminated.append(process)
            else:
                result.failed.append(process)
        return result
