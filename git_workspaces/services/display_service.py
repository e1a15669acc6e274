"""Display and formatting service for workspace information"""
from typing import List, Optional, Sequence

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from git_workspaces.models.repository import WorkspaceSummary
from git_workspaces.models.results import BatchResult, PreflightResult
from git_workspaces.logging_config import get_logger

console = Console()
logger = get_logger(__name__)

RULE = "━" * 40


class DisplayService:
    def __init__(self, verbose: bool = False, debug: bool = False):
        self.verbose = verbose
        self.debug_mode = debug

    def display_workspace_table(
        self, workspaces: Sequence[WorkspaceSummary], current: Optional[str] = None
    ) -> None:
        """Display a table of workspaces and their repositories."""
        if not workspaces:
            console.print("[yellow]No worktrees found[/yellow]")
            return

        table = Table(title="Active worktrees")
        table.add_column("Workspace")
        table.add_column("Projects")
        if self.verbose:
            table.add_column("Path")

        for workspace in workspaces:
            name = f"* {workspace.name}" if workspace.name == current else workspace.name
            projects = ", ".join(workspace.repositories) if workspace.repositories else "(empty)"
            row = [name, projects]
            if self.verbose:
                row.append(str(workspace.path))
            table.add_row(*row, style="dim" if workspace.is_empty else None)

        console.print(table)

        empty = sum(1 for workspace in workspaces if workspace.is_empty)
        if empty:
            console.print(f"\n[dim]{empty} empty workspace(s); run cleanup-empty to remove them[/dim]")

    def display_preflight_failures(self, failures: Sequence[PreflightResult]) -> None:
        console.print("\n[red]❌ Cannot create worktrees. Please commit or stash changes in:[/red]")
        for failure in failures:
            console.print(f"  - {failure.repository.name}: {escape(failure.reason or 'not clean')}")

    def display_repository_health(self, results: Sequence[PreflightResult]) -> None:
        """Summary of a check across all source repositories."""
        dirty = [result for result in results if not result.passed]
        console.print(f"\n[blue]{RULE}[/blue]")
        console.print(f"[green]✓ Clean repositories: {len(results) - len(dirty)}[/green]")
        if dirty:
            console.print(f"[yellow]⚠️  Repositories with changes: {len(dirty)}[/yellow]")
            for result in dirty:
                console.print(f"  - {result.repository.name}")
        else:
            console.print("[green]All repositories are clean! ✨[/green]")

    def display_batch_summary(self, result: BatchResult, title: Optional[str] = None) -> None:
        """Summarize a batch: counts, failures with their operation, and guidance."""
        console.print(f"[blue]{RULE}[/blue]")
        console.print(f"[cyan]{title or result.operation.capitalize() + ' summary'}:[/cyan]")
        console.print(f"[green]  ✓ Successful: {len(result.succeeded)}[/green]")

        if result.failed:
            console.print(f"[red]  ✗ Failed: {len(result.failed)}[/red]")
            for outcome in result.outcomes:
                if outcome.success:
                    continue
                detail = f": {escape(outcome.message)}" if outcome.message else ""
                console.print(f"    - {outcome.repository} ({outcome.operation}){detail}")
                for line in outcome.guidance:
                    console.print(f"      {escape(line)}")

        warned = [outcome for outcome in result.outcomes if outcome.warnings]
        if warned and (self.verbose or self.debug_mode or result.failed):
            console.print("[yellow]  Warnings:[/yellow]")
            for outcome in warned:
                for warning in outcome.warnings:
                    console.print(f"    - {outcome.repository}: {escape(warning)}")

    def display_list(self, label: str, items: List[str]) -> None:
        console.print(f"[cyan]{label}:[/cyan] {' '.join(items) if items else '(none)'}")
