# CCBundle Console Output
# Rich-based console output for user-friendly display

from collections.abc import Sequence
from datetime import datetime
from pathlib import Path
from typing import Optional

from rich.console import Console as RichConsole
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ccbundle.backup import BackupInfo, format_backup_age
from ccbundle.config.schema import Category
from ccbundle.install import DependencyResult, InstallResult
from ccbundle.symlink import TOOL_LABELS, LinkResult
from ccbundle.sync.classifier import SyncAnalysis, group_by_category, summarize_folders
from ccbundle.sync.item import ApplyResult, HookSyncItem, SyncItem, SyncStatus

# Categories displayed as one line per top-level folder
FOLDER_CATEGORIES = (Category.SKILLS, Category.SCRIPTS)


class Console:
    """
    Console output manager using Rich.

    Provides formatted output for sync operations.
    """

    def __init__(self, *, verbose: bool = False, colored: bool = True):
        """
        Initialize console.

        Args:
            verbose: Enable verbose output.
            colored: Enable colored output.
        """
        self.verbose = verbose
        self._console = RichConsole(no_color=not colored, highlight=False, soft_wrap=True)

    def print(self, *args, **kwargs) -> None:
        """Print to console."""
        self._console.print(*args, **kwargs)

    def print_error(self, message: str) -> None:
        """Print error message."""
        self._console.print(f"[red]Error:[/red] {message}")

    def print_warning(self, message: str) -> None:
        """Print warning message."""
        self._console.print(f"[yellow]Warning:[/yellow] {message}")

    def print_success(self, message: str) -> None:
        """Print success message."""
        self._console.print(f"[green]{message}[/green]")

    def print_info(self, message: str) -> None:
        """Print info message."""
        self._console.print(f"[blue]{message}[/blue]")

    def _get_status_icon(self, status: SyncStatus) -> str:
        """Get icon for a sync status."""
        icons = {
            SyncStatus.NEW: "[green]+[/green]",
            SyncStatus.MODIFIED: "[yellow]~[/yellow]",
            SyncStatus.DELETED: "[red]-[/red]",
            SyncStatus.UNCHANGED: "[dim]=[/dim]",
        }
        return icons.get(status, "?")

    def print_analysis(self, analysis: SyncAnalysis) -> None:
        """
        Print the grouped change summary.

        Files are listed per category; skills and scripts are folded into
        one line per top-level folder. Unchanged entries are only shown in
        verbose mode.

        Args:
            analysis: Classified changes.
        """
        for category, items in group_by_category(analysis.items).items():
            if category in FOLDER_CATEGORIES:
                self._print_folder_category(category, items)
            else:
                self._print_file_category(category, items)

        if analysis.hooks:
            self._console.print("\n[bold]settings.json[/bold] [dim](hooks)[/dim]")
            for hook in analysis.hooks:
                self._print_hook(hook)

        self._console.print()
        self._console.print(
            f"[green]{analysis.new_count} new[/green], "
            f"[yellow]{analysis.modified_count} modified[/yellow], "
            f"[red]{analysis.deleted_count} deleted[/red], "
            f"[dim]{analysis.unchanged_count} unchanged[/dim]"
        )

    def _print_file_category(self, category: Category, items: Sequence[SyncItem]) -> None:
        shown = [item for item in items if self.verbose or item.status != SyncStatus.UNCHANGED]
        if not shown:
            return

        self._console.print(f"\n[bold]{category.value}[/bold]")
        for item in shown:
            suffix = "/" if item.is_folder else ""
            self._console.print(f"  {self._get_status_icon(item.status)} {escape(item.name)}{suffix}")

    def _print_folder_category(self, category: Category, items: Sequence[SyncItem]) -> None:
        summaries = [s for s in summarize_folders(items, category) if self.verbose or s.status != SyncStatus.UNCHANGED]
        if not summaries:
            return

        self._console.print(f"\n[bold]{category.value}[/bold]")
        for summary in summaries:
            parts = []
            if summary.new:
                parts.append(f"{summary.new} new")
            if summary.modified:
                parts.append(f"{summary.modified} modified")
            if summary.deleted:
                parts.append(f"{summary.deleted} deleted")
            detail = f" [dim]({', '.join(parts)})[/dim]" if parts else ""
            self._console.print(f"  {self._get_status_icon(summary.status)} {escape(summary.name)}/{detail}")

    def _print_hook(self, hook: HookSyncItem) -> None:
        self._console.print(f"  {self._get_status_icon(hook.status)} {escape(hook.label)}")

    def print_progress(self, path: str, action: str) -> None:
        """Progress callback for the applier (verbose only)."""
        if self.verbose:
            self._console.print(f"  [dim]{action}[/dim] {path}")

    def print_apply_result(self, result: ApplyResult, *, dry_run: bool = False) -> None:
        """
        Print the end-of-run tally.

        Args:
            result: Combined file and hook tally.
            dry_run: Whether this was a dry run (changes wording).
        """
        status_text = "Dry run completed" if dry_run else "Sync completed"
        body = f"{result.success} updated, {result.deleted} deleted, {result.failed} failed"

        if result.ok:
            self._console.print(Panel(f"[green]{status_text}[/green]\n{body}", title="Summary", border_style="green"))
        else:
            self._console.print(
                Panel(f"[red]{status_text} with errors[/red]\n{body}", title="Summary", border_style="red")
            )
            for error in result.errors:
                self._console.print(f"  [red]✗[/red] {error}")

    def print_install_result(self, result: InstallResult) -> None:
        """Print a setup summary."""
        table = Table(show_header=True, header_style="bold")
        table.add_column("Component")
        table.add_column("Installed", justify="right")

        for name, count in result.files_copied.items():
            table.add_row(name, f"{count} files")
        table.add_row("hooks", str(result.hooks_merged))
        table.add_row("statusLine", "yes" if result.status_line_installed else "kept")

        self._console.print(table)
        for error in result.errors:
            self._console.print(f"  [red]✗[/red] {error}")

    def print_dependency_results(self, results: Sequence[DependencyResult]) -> None:
        """Print script dependency install results."""
        for result in results:
            if result.success:
                self._console.print(f"  [green]✓[/green] {result.tool} install in {result.path}")
            else:
                self.print_warning(f"Dependency install failed in {result.path}: {result.message}")

    def print_backups(self, backups: Sequence[BackupInfo], *, now: Optional[datetime] = None) -> None:
        """Print available backups, newest first."""
        if not backups:
            self._console.print("[dim]No backups found[/dim]")
            return

        table = Table(show_header=True, header_style="bold")
        table.add_column("Backup")
        table.add_column("Age", style="dim")
        table.add_column("Contents", style="dim")

        for backup in backups:
            contents = ", ".join(sorted(entry.name for entry in backup.path.iterdir()))
            table.add_row(backup.name, format_backup_age(backup.date, now), contents)

        self._console.print(table)

    def print_link_results(self, results: Sequence[LinkResult]) -> None:
        """Print symlink outcomes and a created/skipped tally."""
        created = 0
        for result in results:
            label = f"{TOOL_LABELS.get(result.tool, result.tool.value)} ({result.content})"
            if result.created:
                created += 1
                self._console.print(f"  [green]✓[/green] {label}: {result.target} → {result.source}")
            else:
                self._console.print(f"  [yellow]○[/yellow] {label}: {result.message}")

        self._console.print(f"\n{created} created, {len(results) - created} skipped")

    def print_config_summary(self, config_path: Path, repository: str, target: Path) -> None:
        """Print configuration summary."""
        self._console.print(
            Panel(
                f"Config: {config_path}\nRepository: {repository}\nTarget: {target}",
                title="CCBundle Configuration",
                border_style="blue",
            )
        )

    def confirm(self, message: str, default: bool = False) -> bool:
        """
        Ask for confirmation.

        Args:
            message: Confirmation message.
            default: Default value if user just presses enter.

        Returns:
            True if confirmed.
        """
        suffix = " [Y/n]" if default else " [y/N]"
        response = self._console.input(f"{message}{escape(suffix)}: ").strip().lower()

        if not response:
            return default

        return response in ("y", "yes")


def create_console(*, verbose: bool = False, colored: bool = True) -> Console:
    """
    Create a console instance.

    Args:
        verbose: Enable verbose output.
        colored: Enable colored output.

    Returns:
        Console instance.
    """
    return Console(verbose=verbose, colored=colored)
