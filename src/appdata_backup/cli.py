"""Command-line interface for the application data backup tool."""

import json
import sys
from pathlib import Path
from typing import List, Optional

import click
from rich import print as rprint
from rich.console import Console
from rich.table import Table

from .config.settings import AppConfig, ConflictPolicy
from .destinations.backup_root import (
    backup_base,
    list_machine_backups,
    resolve_backup_root,
    resolve_restore_root,
)
from .sources.categories import CATEGORIES, Category, select_categories
from .sources.firefox_profiles import select_backup_profile
from .sync.backup_manager import BackupManager
from .sync.decisions import ConsoleDecisions
from .sync.mirror import create_mirror
from .sync.outcome import RunOutcome
from .sync.process_guard import ProcessGuard, processes_for
from .sync.reporter import OutcomeReporter
from .utils.logging import get_logger, setup_logging

# Force UTF-8 output on Windows consoles; profile paths contain user names
if sys.platform == 'win32' and hasattr(sys.stdout, 'reconfigure'):
    sys.stdout.reconfigure(encoding='utf-8', errors='replace')
    sys.stderr.reconfigure(encoding='utf-8', errors='replace')

console = Console()
logger = get_logger("cli")

DEFAULT_CONFIG_PATH = Path('config/config.yaml')


def run_options(func):
    """Options shared by the backup and restore commands."""
    options = [
        click.option('--config', '-c',
                     type=click.Path(dir_okay=False, path_type=Path),
                     default=DEFAULT_CONFIG_PATH,
                     envvar='APPDATA_BACKUP_CONFIG',
                     show_default=True,
                     help='Path to configuration file (used if it exists)'),
        click.option('--root', '-r',
                     type=click.Path(file_okay=False, path_type=Path),
                     help='Backup folder to use instead of the OneDrive machine folder'),
        click.option('--all', 'all_categories', is_flag=True,
                     help='Select every category'),
    ]
    options += [
        click.option(f'--{category.key}', is_flag=True, help=f'Include {category.label}')
        for category in CATEGORIES.values()
    ]
    options += [
        click.option('--force', '-f', is_flag=True,
                     help='Clear read-only files in the way and do not ask before closing applications'),
        click.option('--skip-existing', '-s', is_flag=True,
                     help='Leave items that already exist at the destination untouched'),
        click.option('--simulate', '--dry-run', '-d', 'simulate', is_flag=True,
                     help='Show what would be done without changing anything'),
        click.option('--log-file', type=click.Path(dir_okay=False, path_type=Path),
                     help='Write a detailed log to this file'),
        click.option('--verbose', '-v', is_flag=True,
                     help='Log to the console'),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
@click.version_option(version="1.0.0")
def cli():
    """OneDrive Application Data Backup

    Backs up browser profiles, Internet Explorer favorites and Outlook
    templates, rules and autocomplete to a per-machine OneDrive folder, and
    restores them.
    """
    pass


@cli.command()
@run_options
def backup(config: Path, root: Optional[Path], all_categories: bool, force: bool,
           skip_existing: bool, simulate: bool, log_file: Optional[Path], verbose: bool, **selectors):
    """Back up the selected categories to OneDrive."""
    selected = _selected_categories(all_categories, selectors)
    if not selected:
        click.echo(click.get_current_context().get_help())
        return
    policy = _conflict_policy(force, skip_existing)

    try:
        app_config = _load_config(config, log_file, verbose)
        paths = app_config.host_paths()
        destination = resolve_backup_root(paths, app_config.backup_subpath, root)

        console.print(f"☁️ Backup folder: {destination}", style="cyan")
        if simulate:
            console.print("🔍 SIMULATE MODE - No files will be changed", style="yellow bold")

        reporter = OutcomeReporter(console)
        manager = BackupManager(
            paths,
            policy=policy,
            mirror=create_mirror(app_config.mirror),
            simulate=simulate,
            on_item=reporter.item,
            on_category=reporter.category
        )
        outcome = manager.run_backup(selected, destination)
        reporter.summary(outcome)
        _log_run(manager, outcome)

    except Exception as e:
        logger.error(f"Backup failed: {e}")
        console.print(f"❌ Error: {e}", style="red bold")
        sys.exit(1)


@cli.command()
@run_options
@click.option('--select-profile', is_flag=True,
              help='Choose the Firefox profile when no default profile exists')
@click.option('--no-kill', is_flag=True,
              help='Do not look for running applications before restoring')
@click.option('--list-processes', is_flag=True,
              help='Show every matching process with its PID')
def restore(config: Path, root: Optional[Path], all_categories: bool, force: bool,
            skip_existing: bool, simulate: bool, log_file: Optional[Path], verbose: bool,
            select_profile: bool, no_kill: bool, list_processes: bool, **selectors):
    """Restore the selected categories from OneDrive."""
    selected = _selected_categories(all_categories, selectors)
    if not selected:
        click.echo(click.get_current_context().get_help())
        return
    policy = _conflict_policy(force, skip_existing)

    try:
        app_config = _load_config(config, log_file, verbose)
        paths = app_config.host_paths()
        backup_root = resolve_restore_root(paths, app_config.backup_subpath, root)

        console.print(f"☁️ Restoring from: {backup_root}", style="cyan")
        if simulate:
            console.print("🔍 SIMULATE MODE - No files will be changed", style="yellow bold")

        decisions = ConsoleDecisions(console)
        reporter = OutcomeReporter(console, verbose_processes=list_processes)

        if not no_kill:
            guard = ProcessGuard(processes_for(selected))
            reporter.processes(guard.guard(decisions, force=force, simulate=simulate), simulate)

        manager = BackupManager(
            paths,
            policy=policy,
            mirror=create_mirror(app_config.mirror),
            simulate=simulate,
            decisions=decisions,
            interactive_profiles=select_profile,
            on_item=reporter.item,
            on_category=reporter.category
        )
        outcome = manager.run_restore(selected, backup_root)
        reporter.summary(outcome)
        _log_run(manager, outcome)

    except Exception as e:
        logger.error(f"Restore failed: {e}")
        console.print(f"❌ Error: {e}", style="red bold")
        sys.exit(1)


@cli.command()
@click.option('--config', '-c',
              type=click.Path(dir_okay=False, path_type=Path),
              default=DEFAULT_CONFIG_PATH,
              envvar='APPDATA_BACKUP_CONFIG',
              help='Path to configuration file')
def status(config: Path):
    """Show resolved folders, machine backups and categories."""
    try:
        app_config = AppConfig.load(config)
        paths = app_config.host_paths()

        console.print("🖥️ [bold]Host Paths:[/bold]")
        rprint(f"   • Machine: {paths.machine_name}")
        rprint(f"   • OneDrive: {paths.cloud_root or '[red]not found[/red]'}")
        rprint(f"   • Local AppData: {paths.local_app_data}")
        rprint(f"   • Roaming AppData: {paths.roaming_app_data}")
        rprint(f"   • Home: {paths.user_home}")

        if paths.cloud_root is not None:
            console.print(f"\n☁️ [bold]Machine Backups[/bold] ({backup_base(paths, app_config.backup_subpath)}):")
            machines = list_machine_backups(paths, app_config.backup_subpath)
            if not machines:
                rprint("   • none yet")
            for machine in machines:
                marker = " (this machine)" if machine.name == paths.machine_name else ""
                rprint(f"   • {machine.name}{marker}")

        console.print("\n📋 [bold]Categories:[/bold]")
        table = Table()
        table.add_column("Key", style="cyan")
        table.add_column("Application")
        table.add_column("Location")
        table.add_column("Status", style="green")

        for category in CATEGORIES.values():
            location = _live_location(category, paths)
            found = "✅ Found" if location is not None and location.exists() else "❌ Not found"
            table.add_row(category.key, category.label, str(location or '-'), found)

        console.print(table)

    except Exception as e:
        console.print(f"❌ Error: {e}", style="red bold")
        sys.exit(1)


@cli.command()
@click.option('--config', '-c',
              type=click.Path(dir_okay=False, path_type=Path),
              default=DEFAULT_CONFIG_PATH,
              help='Path to save configuration file')
def init(config: Path):
    """Initialize a new configuration file."""
    if config.exists():
        if not click.confirm(f"Configuration file {config} already exists. Overwrite?"):
            return

    console.print("🚀 Creating new configuration file...")

    sample_config = {
        'backup_subpath': 'Backups/AppData',
        'mirror': {
            'backend': 'auto',
            'retries': 2,
            'wait_seconds': 5
        },
        'log_level': 'INFO',
        'log_file': 'logs/appdata-backup.log'
    }

    app_config = AppConfig(**sample_config)
    app_config.to_yaml(config)

    console.print(f"✅ Configuration saved to {config}", style="green")
    console.print("\n📝 Next steps:")
    console.print("1. Set cloud_root if the OneDrive environment variable is not available")
    console.print("2. Run 'appdata-backup status' to check the detected folders")
    console.print("3. Run 'appdata-backup backup --all --simulate' to preview a backup")


def _selected_categories(all_categories: bool, selectors: dict) -> List[Category]:
    if all_categories:
        return list(CATEGORIES.values())
    return select_categories(key for key, wanted in selectors.items() if wanted)


def _conflict_policy(force: bool, skip_existing: bool) -> ConflictPolicy:
    if force and skip_existing:
        raise click.UsageError("--force and --skip-existing cannot be used together")
    if force:
        return ConflictPolicy.FORCE
    if skip_existing:
        return ConflictPolicy.SKIP_EXISTING
    return ConflictPolicy.OVERWRITE


def _load_config(config: Path, log_file: Optional[Path], verbose: bool) -> AppConfig:
    app_config = AppConfig.load(config)
    setup_logging(
        log_level="DEBUG" if verbose else app_config.log_level,
        log_file=log_file or app_config.log_file,
        log_to_console=verbose
    )
    return app_config


def _log_run(manager: BackupManager, outcome: RunOutcome) -> None:
    logger.info(f"Run summary: {manager.get_backup_summary([outcome])}")
    logger.debug(f"Run outcome: {json.dumps(outcome.to_dict(), ensure_ascii=False)}")


def _live_location(category: Category, paths) -> Optional[Path]:
    root = category.root(paths)
    if category.profile_based:
        return select_backup_profile(root)
    if len(category.items) == 1:
        return root / category.items[0].name
    return root


if __name__ == '__main__':
    cli()
