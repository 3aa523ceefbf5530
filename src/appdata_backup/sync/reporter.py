"""Console reporting of run progress and results."""

from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..sources.categories import CATEGORIES, Category
from .outcome import ItemOutcome, ItemStatus, RunOutcome
from .process_guard import GuardResult

STATUS_STYLES = {
    ItemStatus.OK: "green",
    ItemStatus.SKIPPED: "yellow",
    ItemStatus.ERROR: "red",
    ItemStatus.MISSING: "dim",
}


class OutcomeReporter:
    """Prints per-category status lines and the final summary."""

    def __init__(self, console: Optional[Console] = None, verbose_processes: bool = False):
        self.console = console or Console()
        self.verbose_processes = verbose_processes

    def category(self, category: Category, live_root: Optional[Path]):
        location = live_root if live_root is not None else "no profile found"
        self.console.print(f"\n📁 [bold]{category.label}[/bold] [dim]({escape(str(location))})[/dim]")

    def item(self, outcome: ItemOutcome):
        style = STATUS_STYLES[outcome.status]
        line = f"   [{style}]{outcome.status.value:>7}[/{style}]  {escape(outcome.item)}"
        # "copied"/"mirrored" details are noise; simulated and failed ones are not
        if outcome.status != ItemStatus.OK or outcome.detail.startswith("would"):
            line += f" [dim]- {escape(outcome.detail)}[/dim]"
        self.console.print(line)

    def processes(self, result: GuardResult, simulate: bool = False):
        if not result.found:
            return

        names = sorted({p.name for p in result.found})
        self.console.print(f"⚠️ Running applications: {', '.join(names)}", style="yellow")

        if self.verbose_processes:
            table = Table(title="Running Processes")
            table.add_column("Name", style="cyan")
            table.add_column("PID", justify="right")
            table.add_column("Status", style="magenta")
            for process in result.found:
                if process in result.terminated:
                    status = "[green]terminated[/green]"
                elif process in result.failed:
                    status = "[red]failed[/red]"
                else:
                    status = "running"
                table.add_row(process.name, str(process.pid), status)
            self.console.print(table)

        if simulate:
            self.console.print(f"🔍 Would terminate {len(result.found)} process(es)", style="yellow")
        elif result.declined:
            self.console.print("   Processes left running; locked files may fail to restore", style="yellow")
        for process in result.failed:
            self.console.print(f"   Could not terminate {process.name} (PID {process.pid})", style="red")

    def summary(self, outcome: RunOutcome):
        """Display results in a table, followed by totals."""
        title = f"{outcome.direction.capitalize()} Results"
        if outcome.simulated:
            title += " (simulated)"
        table = Table(title=title)
        table.add_column("Category", style="cyan")
        table.add_column("Copied", justify="right", style="green")
        table.add_column("Skipped", justify="right", style="yellow")
        table.add_column("Missing", justify="right")
        table.add_column("Errors", justify="right", style="red")

        keys = [key for key in CATEGORIES if outcome.for_category(key)]
        for key in keys:
            items = outcome.for_category(key)
            table.add_row(
                key,
                str(self._count(items, ItemStatus.OK)),
                str(self._count(items, ItemStatus.SKIPPED)),
                str(self._count(items, ItemStatus.MISSING)),
                str(self._count(items, ItemStatus.ERROR)),
            )

        self.console.print()
        self.console.print(table)

        self.console.print(f"\n📊 [bold]Summary:[/bold]")
        self.console.print(f"   • Root: {escape(str(outcome.root))}")
        self.console.print(f"   • Copied: [green]{outcome.copied}[/green]")
        self.console.print(f"   • Skipped: [yellow]{outcome.skipped}[/yellow]")
        self.console.print(f"   • Missing: {outcome.missing}")
        self.console.print(f"   • Errors: [red]{outcome.errored}[/red]")

        if outcome.has_errors:
            self.console.print(f"\n⚠️ [yellow]{outcome.errored} errors occurred, review the items above:[/yellow]")
            for item in outcome.items:
                if item.status == ItemStatus.ERROR:
                    self.console.print(f"   • {item.category}/{escape(item.item)}: {escape(item.detail)}", style="red")

        self.console.print(f"\n✅ {outcome.direction.capitalize()} finished", style="green bold")

    @staticmethod
    def _count(items: List[ItemOutcome], status: ItemStatus) -> int:
        return sum(1 for item in items if item.status == status)
