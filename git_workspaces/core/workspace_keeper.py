"""Core functionality for git-workspaces"""

from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

from rich.console import Console
from rich.markup import escape

from git_workspaces.config import Config
from git_workspaces.exceptions import (
    EmptyWorkspaceError,
    IDENotAvailableError,
    NoRepositoriesError,
    TemplateNotFoundError,
    WorkspaceNotFoundError,
)
from git_workspaces.models.repository import DEFAULT_BRANCH_PREFIX, Repository, Workspace, WorkspaceSummary
from git_workspaces.models.results import BatchResult, PreflightResult
from git_workspaces.services import ide
from git_workspaces.services.catalog import WorkspaceCatalog
from git_workspaces.services.display_service import DisplayService
from git_workspaces.services.orchestrator import WorktreeOrchestrator
from git_workspaces.services.preflight import PreflightValidator
from git_workspaces.services.registry import ProjectRegistry
from git_workspaces.services.remotes import RemoteConversion, convert_to_ssh
from git_workspaces.services.removal import RemovalEngine
from git_workspaces.services.sync import SyncEngine, SyncStrategy
from git_workspaces.services.templates import default_template_kind, render_spec
from git_workspaces.logging_config import get_logger

console = Console()
logger = get_logger(__name__)


def exit_code(result: BatchResult, require_all: bool = False) -> int:
    """Process exit code for a finished batch.

    Partial success is success unless require_all is set. A batch with no
    entries never counts as failed.
    """
    if not result.outcomes:
        return 0
    if require_all:
        return 0 if result.all_succeeded else 1
    return 1 if result.all_failed else 0


class WorkspaceKeeper:
    """Top-level workspace commands.

    Validation problems are raised as GitWorkspacesError subclasses; batch
    commands return their per-repository ledger.
    """

    def __init__(
        self,
        config: Config,
        registry: Optional[ProjectRegistry] = None,
        catalog: Optional[WorkspaceCatalog] = None,
        preflight: Optional[PreflightValidator] = None,
        orchestrator: Optional[WorktreeOrchestrator] = None,
        sync_engine: Optional[SyncEngine] = None,
        removal_engine: Optional[RemovalEngine] = None,
        display: Optional[DisplayService] = None,
    ):
        self.config = config
        self.registry = registry or ProjectRegistry()
        self.catalog = catalog or WorkspaceCatalog()
        self.preflight = preflight or PreflightValidator(config)
        self.orchestrator = orchestrator or WorktreeOrchestrator(config)
        self.sync_engine = sync_engine or SyncEngine(config, self.catalog, self.registry)
        self.removal_engine = removal_engine or RemovalEngine(config, catalog=self.catalog, registry=self.registry)
        self.display = display or DisplayService(verbose=config.verbose, debug=config.debug)

    # Repositories

    def available_repositories(self) -> List[Repository]:
        """Raises NoRepositoriesError if the projects directory holds none."""
        repositories = self.registry.list_repositories(self.config.projects_dir)
        if not repositories:
            raise NoRepositoriesError(f"No git repositories found in {self.config.projects_dir}")
        return repositories

    def select_repositories(self, names: Sequence[str]) -> List[Repository]:
        """Look up repositories by name, skipping unknown ones with a warning.

        Raises:
            NoRepositoriesError: If none of the names is a repository
        """
        selected: List[Repository] = []
        for name in names:
            repository = self.registry.get(self.config.projects_dir, name)
            if repository is None:
                console.print(f"[yellow]Warning: Project '{escape(name)}' not found, skipping[/yellow]")
                continue
            if repository not in selected:
                selected.append(repository)
        if not selected:
            raise NoRepositoriesError("None of the specified projects exist")
        return selected

    # Creation

    def workspace_for(self, name: str, branch_prefix: str = DEFAULT_BRANCH_PREFIX) -> Workspace:
        return Workspace.create(name, branch_prefix, self.config.worktrees_dir)

    def create_workspace(
        self,
        name: str,
        repository_names: Sequence[str],
        branch_prefix: str = DEFAULT_BRANCH_PREFIX,
        spec_template: Optional[str] = None,
    ) -> BatchResult:
        """Create a workspace with one worktree per repository.

        Nothing is created unless every repository passes preflight.

        Raises:
            ValueError: For an empty workspace name
            NoRepositoriesError: If no named repository exists
            PreflightError: If any repository has uncommitted changes
        """
        workspace = self.workspace_for(name, branch_prefix)
        repositories = self.select_repositories(repository_names)
        spec_template = spec_template or default_template_kind(branch_prefix)

        console.print(f"\n[cyan]🚀 Setting up workspace for: {workspace.name}[/cyan]")
        console.print(f"[cyan]Branch: {workspace.branch_name}[/cyan]")
        console.print(f"[cyan]Spec template: {spec_template}[/cyan]\n")

        console.print("[cyan]🔍 Checking repository status...[/cyan]\n")
        self.preflight.ensure_clean(repositories)
        console.print("\n[green]✓ All repositories are clean[/green]\n")

        result = self.orchestrator.create_all(workspace, repositories)
        self.display.display_batch_summary(result)

        if result.succeeded:
            console.print(f"\n[cyan]Worktree location:[/cyan] {workspace.root}")
            console.print(f"[cyan]Branch name:[/cyan] {workspace.branch_name}")
            self.display.display_list("Projects created", result.succeeded)
            self.render_specs(workspace, result.succeeded, spec_template)
        return result

    def render_specs(self, workspace: Workspace, repository_names: Sequence[str], template_kind: str) -> List[Path]:
        """Write spec documents; a missing template is only a warning."""
        console.print("\n[cyan]📄 Creating specification document...[/cyan]")
        try:
            created = render_spec(
                template_kind,
                workspace.name,
                workspace.branch_name,
                workspace.root,
                repository_names,
                templates_dir=self.config.templates_dir,
            )
        except TemplateNotFoundError as e:
            logger.warning(str(e))
            console.print(f"[yellow]⚠️  {escape(str(e))}[/yellow]")
            return []
        except OSError as e:
            logger.warning(f"Could not write spec documents: {e}")
            console.print(f"[yellow]⚠️  Could not write spec documents: {escape(str(e))}[/yellow]")
            return []

        for path in created:
            console.print(f"[green]  ✓ Created {path.relative_to(workspace.root)}[/green]")
        return created

    # Checkout of an existing branch

    def workspace_for_branch(self, branch_name: str) -> Workspace:
        return Workspace.from_branch(branch_name, self.config.worktrees_dir)

    def find_branch(
        self, branch_name: str, repository_names: Optional[Sequence[str]] = None
    ) -> List[Repository]:
        """Repositories whose remote has branch_name.

        Searches the named repositories, or all of them when none are named.

        Raises:
            NoRepositoriesError: If no searched repository has the branch
        """
        if repository_names:
            candidates = self.select_repositories(repository_names)
        else:
            candidates = self.available_repositories()
        console.print(
            f"[cyan]🔍 Checking {len(candidates)} project(s) for branch '{escape(branch_name)}'...[/cyan]\n"
        )

        found = self.orchestrator.find_repositories_with_branch(candidates, branch_name)
        if not found:
            checked = ", ".join(repository.name for repository in candidates)
            raise NoRepositoriesError(
                f"Branch '{branch_name}' not found on remote in any checked project ({checked})"
            )

        console.print(f"[green]Found branch '{escape(branch_name)}' in:[/green]")
        for repository in found:
            console.print(f"  ✓ {repository.name}")
        console.print()
        return found

    def checkout_workspace(self, branch_name: str, repository_names: Sequence[str]) -> BatchResult:
        """Create worktrees for an existing remote branch.

        The workspace is named after the branch without its type prefix.
        """
        workspace = self.workspace_for_branch(branch_name)
        repositories = self.select_repositories(repository_names)

        result = self.orchestrator.checkout_all(workspace, repositories)
        self.display.display_batch_summary(result)
        if result.succeeded:
            console.print(f"\n[cyan]Worktree location:[/cyan] {workspace.root}")
            console.print(f"[cyan]Branch name:[/cyan] {workspace.branch_name}")
            self.display.display_list("Projects", result.succeeded)
        return result

    # Navigation and listing

    def list_workspaces(self) -> List[WorkspaceSummary]:
        workspaces = self.catalog.list_workspaces(self.config.worktrees_dir)
        current = self.catalog.detect_current(self.config.worktrees_dir)
        self.display.display_workspace_table(workspaces, current=current)
        return workspaces

    def workspace_exists(self, name: str) -> bool:
        return Workspace.named(name, self.config.worktrees_dir).exists

    def switchable_workspaces(self) -> List[str]:
        """Workspaces with at least one repository."""
        return self.catalog.non_empty_names(self.config.worktrees_dir)

    def repositories_in(self, name: str) -> List[str]:
        """Raises WorkspaceNotFoundError or EmptyWorkspaceError."""
        workspace = Workspace.named(name, self.config.worktrees_dir)
        if not workspace.exists:
            raise WorkspaceNotFoundError(name)
        repositories = self.catalog.repositories_in(workspace.root)
        if not repositories:
            raise EmptyWorkspaceError(name)
        return repositories

    def switch(self, name: str, repository_name: Optional[str] = None) -> Path:
        """Resolve the directory to switch to.

        The calling shell has to change into the returned path itself.

        Raises:
            WorkspaceNotFoundError: If the workspace or repository directory is missing
        """
        workspace = Workspace.named(name, self.config.worktrees_dir)
        if not workspace.exists:
            raise WorkspaceNotFoundError(name)
        if repository_name is None:
            return workspace.root
        target = workspace.worktree_path(repository_name)
        if not target.is_dir():
            raise WorkspaceNotFoundError(f"{name}/{repository_name}")
        return target

    def current_workspace(self) -> Optional[str]:
        return self.catalog.detect_current(self.config.worktrees_dir)

    # Sync and removal

    def sync(
        self,
        name: Optional[str] = None,
        strategy: Union[str, SyncStrategy] = SyncStrategy.MERGE,
        push: bool = False,
    ) -> BatchResult:
        """Sync a workspace with the trunk; without a name, the one containing cwd.

        Raises:
            WorkspaceNotFoundError: If no workspace is named or detected
        """
        if name is None:
            name = self.current_workspace()
            if name is None:
                raise WorkspaceNotFoundError("(not inside a workspace; pass a name)")
            console.print(f"[cyan]Detected current worktree: {name}[/cyan]\n")

        result = self.sync_engine.sync_workspace(Workspace.named(name, self.config.worktrees_dir), strategy, push)
        self.display.display_batch_summary(result, title="Summary")
        if result.all_succeeded:
            console.print("\n[green]✓ All projects synced successfully![/green]")
        elif result.all_failed:
            console.print("\n[red]✗ All projects failed to sync[/red]")
        else:
            console.print("\n[yellow]⚠️  Some projects failed to sync[/yellow]")
        return result

    def remove(
        self, name: str, delete_local_branches: bool = True, delete_remote_branches: bool = False
    ) -> BatchResult:
        """Remove a workspace, its worktrees and optionally its branches.

        Raises:
            WorkspaceNotFoundError: If the workspace directory does not exist
        """
        workspace = Workspace.named(name, self.config.worktrees_dir)
        console.print(f"[cyan]🗑️  Removing workspace: {workspace.name}[/cyan]\n")
        result = self.removal_engine.remove_workspace(workspace, delete_local_branches, delete_remote_branches)
        self.display.display_batch_summary(result)
        console.print(f"[green]✓ Worktree removed: {workspace.name}[/green]")
        return result

    def cleanup_empty(self) -> List[str]:
        console.print("[cyan]🧹 Cleaning up empty worktree directories...[/cyan]\n")
        removed = self.catalog.cleanup_empty(self.config.worktrees_dir)
        for name in removed:
            console.print(f"[yellow]  Removing empty directory: {name}[/yellow]")
        if removed:
            console.print(f"\n[green]✓ Removed {len(removed)} empty directories[/green]")
        else:
            console.print("[green]✓ No empty directories found[/green]")
        return removed

    # Maintenance

    def check_repos(self) -> List[PreflightResult]:
        """Report which source repositories have uncommitted changes."""
        console.print("[cyan]🔍 Checking all repositories for uncommitted changes...[/cyan]\n")
        results = self.preflight.validate(self.available_repositories())
        self.display.display_repository_health(results)
        return results

    def switch_to_ssh(self) -> Dict[RemoteConversion, List[str]]:
        """Rewrite GitHub HTTPS remotes of every source repository to SSH."""
        console.print("[cyan]🔄 Converting HTTPS remotes to SSH...[/cyan]\n")
        report: Dict[RemoteConversion, List[str]] = {outcome: [] for outcome in RemoteConversion}
        for repository in self.available_repositories():
            outcome, detail = convert_to_ssh(repository, self.config.remote_name)
            report[outcome].append(repository.name)
            if outcome is RemoteConversion.CONVERTED:
                console.print(f"[green]✓[/green] {repository.name}: {detail}")
            elif outcome is RemoteConversion.FAILED:
                console.print(f"[red]✗[/red] {repository.name}: {escape(detail or 'failed to update remote')}")
            elif outcome is RemoteConversion.UNSUPPORTED:
                console.print(f"[yellow]⚠️[/yellow]  {repository.name}: not a GitHub HTTPS URL ({detail})")
            elif outcome is RemoteConversion.NO_REMOTE:
                console.print(f"[yellow]⚠️[/yellow]  {repository.name}: no {self.config.remote_name} remote")

        console.print(f"\n[green]✓ Converted: {len(report[RemoteConversion.CONVERTED])}[/green]")
        console.print(f"[cyan]→ Already SSH: {len(report[RemoteConversion.ALREADY_SSH])}[/cyan]")
        if report[RemoteConversion.FAILED]:
            console.print(f"[red]✗ Failed: {len(report[RemoteConversion.FAILED])}[/red]")
        return report

    def check_ide(self) -> ide.IDEReport:
        report = ide.detect()
        console.print("[cyan]🔍 Checking IntelliJ IDEA installation...[/cyan]\n")
        for application in report.applications:
            console.print(f"[green]✓ Found: {application}[/green]")
        for launcher in report.launchers:
            console.print(f"[green]✓ Found command: {launcher}[/green]")
        if not report.available:
            console.print("[yellow]⚠️  IntelliJ IDEA not found[/yellow]")
            console.print("  1. Install IntelliJ IDEA to /Applications/")
            console.print("  2. Or create command-line launcher: Tools → Create Command-line Launcher")
        return report

    def open_in_ide(self, path: Union[str, Path]) -> bool:
        """Open path in IntelliJ. Failures are reported, never raised."""
        try:
            launcher = ide.launch(path)
        except IDENotAvailableError as e:
            console.print(f"[yellow]⚠️  {escape(str(e))}[/yellow]")
            return False
        except OSError as e:
            logger.warning(f"Could not launch IDE for {path}: {e}")
            console.print(f"[yellow]⚠️  Could not launch IntelliJ IDEA: {escape(str(e))}[/yellow]")
            return False
        console.print(f"[green]✓ Opening {path} with {launcher}[/green]")
        return True
