"""Tearing down a workspace: worktrees, branches and the directory itself."""

import os
import shutil
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.markup import escape

from git_workspaces.config import Config
from git_workspaces.exceptions import WorkspaceNotFoundError
from git_workspaces.models.repository import Repository, Workspace
from git_workspaces.models.results import BatchResult, RepositoryOutcome
from git_workspaces.services.branch_resolver import BranchResolver
from git_workspaces.services.catalog import WorkspaceCatalog
from git_workspaces.services.git import GitOperations, WorktreeService
from git_workspaces.services.registry import ProjectRegistry
from git_workspaces.logging_config import get_logger

console = Console()
logger = get_logger(__name__)


class RemovalEngine:
    """Deregisters worktrees, optionally deletes branches, then removes the workspace."""

    def __init__(
        self,
        config: Config,
        resolver: Optional[BranchResolver] = None,
        catalog: Optional[WorkspaceCatalog] = None,
        registry: Optional[ProjectRegistry] = None,
    ):
        self.config = config
        self.resolver = resolver or BranchResolver()
        self.catalog = catalog or WorkspaceCatalog()
        self.registry = registry or ProjectRegistry()

    def _deregister(self, source: Repository, worktree_path: Path) -> tuple[bool, Optional[str]]:
        worktree_service = WorktreeService(source.path)
        ok, error = worktree_service.remove_worktree(worktree_path)
        if not ok:
            logger.info(f"Plain worktree remove failed for {worktree_path}, retrying with --force")
            ok, error = worktree_service.remove_worktree(worktree_path, force=True)
        return ok, error

    def _delete_local_branch(self, git_ops: GitOperations, branch: str, outcome: RepositoryOutcome) -> None:
        console.print(f"  🗑️  Deleting local branch: {branch}...")
        if git_ops.is_branch_merged(branch, self.config.trunk_branch):
            console.print("[green]    ✓ Branch is merged[/green]")
        else:
            console.print("[yellow]    ⚠️  Branch is NOT merged[/yellow]")

        ok, error = git_ops.delete_branch(branch)
        if ok:
            console.print("[green]    ✓ Local branch deleted[/green]")
            return

        console.print("[yellow]    ⚠️  Could not delete (use -D to force). Trying force delete...[/yellow]")
        ok, error = git_ops.delete_branch(branch, force=True)
        if ok:
            console.print("[green]    ✓ Force deleted[/green]")
            return

        outcome.success = False
        outcome.operation = "delete local branch"
        outcome.message = error
        console.print(f"[red]    ✗ Failed to delete local branch: {escape(error or '')}[/red]")

    def _delete_remote_branch(self, git_ops: GitOperations, branch: str, outcome: RepositoryOutcome) -> None:
        console.print(f"  🗑️  Deleting remote branch: {branch}...")
        if not git_ops.remote_branch_exists(branch):
            outcome.warnings.append("Remote branch does not exist (may have been deleted already)")
            console.print("[yellow]    ⚠️  Remote branch does not exist (may have been deleted already)[/yellow]")
            return

        ok, error = git_ops.delete_remote_branch(branch)
        if ok:
            console.print("[green]    ✓ Remote branch deleted[/green]")
            return

        outcome.warnings.append(f"Failed to delete remote branch: {error}")
        logger.warning(f"{outcome.repository}: failed to delete remote branch {branch}: {error}")
        console.print("[red]    ✗ Failed to delete remote branch[/red]")
        console.print("[yellow]    ⚠️  You may need to delete it manually or check your permissions[/yellow]")

    def remove_repository(
        self,
        workspace: Workspace,
        repository_name: str,
        delete_local_branches: bool,
        delete_remote_branches: bool,
    ) -> RepositoryOutcome:
        """Deregister one worktree and optionally delete its branches."""
        worktree_path = workspace.worktree_path(repository_name)
        outcome = RepositoryOutcome(repository=repository_name, operation="remove", success=True)

        source = self.registry.get(self.config.projects_dir, repository_name)
        if source is None:
            outcome.warnings.append("Main repo not found; only the directory is removed")
            console.print("[yellow]  ⚠️  Main repo not found, skipping...[/yellow]")
            return outcome

        resolution = self.resolver.resolve_branch(source.path, worktree_path)
        if resolution.resolved:
            console.print(f"[cyan]  → Branch detected: {resolution.branch_name}[/cyan]")
        else:
            outcome.warnings.append("Could not detect branch name; branch deletion skipped")
            console.print(f"[yellow]  ⚠️  Warning: Could not detect branch name for {repository_name}[/yellow]")
            if delete_local_branches or delete_remote_branches:
                console.print("[yellow]     Cannot delete branches without branch name[/yellow]")

        console.print("  🗑️  Removing worktree...")
        ok, error = self._deregister(source, worktree_path)
        if not ok:
            outcome.success = False
            outcome.operation = "worktree remove"
            outcome.message = error
            console.print(f"[red]    ✗ Failed to remove worktree: {escape(error or '')}[/red]")

        if not resolution.resolved:
            return outcome

        # Local and remote deletion are independent of each other
        git_ops = GitOperations(source.path, self.config.remote_name)
        if delete_local_branches:
            self._delete_local_branch(git_ops, resolution.branch_name, outcome)
        if delete_remote_branches:
            self._delete_remote_branch(git_ops, resolution.branch_name, outcome)
        return outcome

    def _leave_workspace(self, workspace: Workspace) -> None:
        """Move the process out of the workspace before it is deleted."""
        try:
            cwd = Path(os.path.realpath(os.getcwd()))
        except FileNotFoundError:
            cwd = None
        root = Path(os.path.realpath(str(workspace.root)))
        if cwd is not None and cwd != root and root not in cwd.parents:
            return

        safe_dir = self.config.worktrees_dir if self.config.worktrees_dir.is_dir() else Path.home()
        console.print("[yellow]⚠️  You're currently inside this workspace, moving to safe location...[/yellow]")
        os.chdir(safe_dir)

    def remove_workspace(
        self,
        workspace: Workspace,
        delete_local_branches: bool = True,
        delete_remote_branches: bool = False,
    ) -> BatchResult:
        """Remove every worktree of a workspace, then the workspace directory.

        The directory is removed whatever the per-repository outcomes, and the
        worktree registry of every source repository is pruned afterwards.

        Raises:
            WorkspaceNotFoundError: If the workspace directory does not exist
        """
        if not workspace.exists:
            raise WorkspaceNotFoundError(workspace.name)

        repositories = self.catalog.repositories_in(workspace.root)
        result = BatchResult(operation="remove")
        sources: List[Repository] = []

        for name in repositories:
            console.print(f"[blue]━━━ Processing {name} ━━━[/blue]")
            result.add(self.remove_repository(workspace, name, delete_local_branches, delete_remote_branches))
            source = self.registry.get(self.config.projects_dir, name)
            if source is not None:
                sources.append(source)
            console.print()

        self._leave_workspace(workspace)
        shutil.rmtree(workspace.root, ignore_errors=True)
        if workspace.root.exists():
            logger.error(f"Could not fully remove {workspace.root}")

        for source in sources:
            WorktreeService(source.path).prune_worktrees()

        return result
