"""Operator decisions needed during a run (profile choice, process termination)."""

from pathlib import Path
from typing import List, Optional

import click
from rich.console import Console
from rich.table import Table


class Decisions:
    """Non-interactive decision provider.

    Never picks a profile and never agrees to terminate processes.
    Subclass to answer differently.
    """

    def choose_profile(self, candidates: List[Path]) -> Optional[int]:
        """Return the index of the chosen profile, or None to create a new one."""
        return None

    def confirm_termination(self, processes: list) -> bool:
        """Return True to terminate the listed processes."""
        return False


class ConsoleDecisions(Decisions):
    """Ask the operator on the console."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def choose_profile(self, candidates: List[Path]) -> Optional[int]:
        table = Table(title="Firefox Profiles")
        table.add_column("#", justify="right", style="cyan")
        table.add_column("Profile")
        for index, candidate in enumerate(candidates, start=1):
            table.add_row(str(index), candidate.name)
        self.console.print(table)

        choice = click.prompt(
            "Profile to restore into (0 creates a new profile)",
            type=click.IntRange(0, len(candidates)),
            default=0
        )
        return choice - 1 if choice else None

    def confirm_termination(self, processes: list) -> bool:
        return click.confirm(f"Terminate {len(processes)} running process(es)?", default=False)
