"""Bringing workspace worktrees up to date with the trunk branch."""

from enum import Enum
from typing import List, Optional, Union

from rich.console import Console
from rich.markup import escape

from git_workspaces.config import Config
from git_workspaces.exceptions import (
    EmptyWorkspaceError,
    InvalidStrategyError,
    SyncConflictError,
    WorkspaceNotFoundError,
)
from git_workspaces.models.repository import Workspace
from git_workspaces.models.results import BatchResult, RepositoryOutcome
from git_workspaces.services.catalog import WorkspaceCatalog
from git_workspaces.services.git import GitOperations
from git_workspaces.services.registry import ProjectRegistry
from git_workspaces.logging_config import get_logger

console = Console()
logger = get_logger(__name__)


class SyncStrategy(Enum):
    """How trunk changes are brought into a workspace branch."""
    MERGE = "merge"
    REBASE = "rebase"

    @classmethod
    def parse(cls, value: Union[str, "SyncStrategy"]) -> "SyncStrategy":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InvalidStrategyError(str(value)) from None


def conflict_guidance(strategy: SyncStrategy, worktree_path) -> List[str]:
    """Commands an operator runs to finish or back out of a stopped sync."""
    command = strategy.value
    return [
        f"Resolve conflicts manually in: {worktree_path}",
        f"Then run: git {command} --continue",
        f"Or back out with: git {command} --abort",
    ]


class SyncEngine:
    """Merges or rebases every worktree of a workspace onto the fetched trunk."""

    def __init__(
        self,
        config: Config,
        catalog: Optional[WorkspaceCatalog] = None,
        registry: Optional[ProjectRegistry] = None,
    ):
        self.config = config
        self.catalog = catalog or WorkspaceCatalog()
        self.registry = registry or ProjectRegistry()

    def _refresh_source_trunk(self, source: GitOperations) -> None:
        """Best-effort update of the source repository's own trunk checkout."""
        trunk = self.config.trunk_branch
        clean, _ = source.is_clean()
        if not clean:
            logger.debug(f"Skipping trunk refresh of dirty source {source.path}")
            return
        for step in (lambda: source.fetch(trunk), lambda: source.checkout(trunk), lambda: source.pull(trunk)):
            ok, error = step()
            if not ok:
                logger.debug(f"Trunk refresh of {source.path} stopped: {error}")
                return

    def _integrate(self, worktree: GitOperations, repository_name: str, strategy: SyncStrategy) -> None:
        """Rebase onto or merge in the fetched trunk.

        Raises:
            SyncConflictError: When the merge or rebase stops
        """
        upstream = f"{self.config.remote_name}/{self.config.trunk_branch}"
        if strategy is SyncStrategy.REBASE:
            console.print(f"  🔄 Rebasing onto {upstream}...")
            ok, error = worktree.rebase(upstream)
        else:
            console.print(f"  🔄 Merging {upstream}...")
            ok, error = worktree.merge(upstream)

        if not ok:
            logger.warning(f"{repository_name}: {strategy.value} stopped: {error}")
            raise SyncConflictError(repository_name, strategy.value, conflict_guidance(strategy, worktree.path))

    def sync_repository(
        self, workspace: Workspace, repository_name: str, strategy: SyncStrategy, push: bool = False
    ) -> RepositoryOutcome:
        """Sync one worktree. Failures are returned, never raised."""
        trunk = self.config.trunk_branch
        remote = self.config.remote_name
        worktree_path = workspace.worktree_path(repository_name)
        outcome = RepositoryOutcome(repository=repository_name, operation=strategy.value, success=False)

        source = self.registry.get(self.config.projects_dir, repository_name)
        if source is None:
            outcome.operation = "locate source"
            outcome.message = "Main repo not found"
            console.print("[yellow]  ⚠️  Main repo not found, skipping...[/yellow]")
            return outcome

        worktree = GitOperations(worktree_path, remote)
        clean, reason = worktree.is_clean()
        if not clean:
            outcome.operation = "status"
            outcome.message = f"Uncommitted changes detected ({reason})"
            outcome.guidance = ["Please commit or stash changes before syncing"]
            console.print("[yellow]  ⚠️  Uncommitted changes detected[/yellow]")
            return outcome

        console.print(f"  📍 Current branch: {worktree.current_branch() or '(detached)'}")

        console.print(f"  📥 Fetching latest from {remote}...")
        ok, error = worktree.fetch(trunk)
        if not ok:
            outcome.operation = "fetch"
            outcome.message = error
            console.print(f"[red]  ✗ Failed to fetch: {escape(error or '')}[/red]")
            return outcome

        console.print(f"  📥 Updating main repo's {trunk}...")
        self._refresh_source_trunk(GitOperations(source.path, remote))

        try:
            self._integrate(worktree, repository_name, strategy)
        except SyncConflictError as e:
            outcome.message = e.message
            outcome.guidance = e.guidance
            console.print("[red]  ✗ Conflicts detected![/red]")
            for line in outcome.guidance:
                console.print(f"  {escape(line)}")
            return outcome

        outcome.success = True
        outcome.message = f"Synced with {trunk}"
        console.print(f"[green]  ✓ Successfully synced with {trunk}[/green]")

        if push:
            pushed, error = worktree.push(force_with_lease=strategy is SyncStrategy.REBASE)
            if pushed:
                console.print("[green]  ✓ Pushed to remote[/green]")
            else:
                outcome.warnings.append(f"Failed to push: {error}")
                logger.warning(f"{repository_name}: push failed: {error}")
                console.print("[yellow]  ⚠️  Failed to push[/yellow]")

        return outcome

    def sync_workspace(
        self, workspace: Workspace, strategy: Union[str, SyncStrategy], push: bool = False
    ) -> BatchResult:
        """Sync every worktree of a workspace, one repository at a time.

        Raises:
            InvalidStrategyError: For a strategy other than merge or rebase
            WorkspaceNotFoundError: If the workspace directory is missing
            EmptyWorkspaceError: If the workspace holds no repositories
        """
        strategy = SyncStrategy.parse(strategy)
        if not workspace.exists:
            raise WorkspaceNotFoundError(workspace.name)

        repositories = self.catalog.repositories_in(workspace.root)
        if not repositories:
            raise EmptyWorkspaceError(workspace.name)

        console.print(
            f"[cyan]🔄 Syncing workspace '{workspace.name}' with {self.config.trunk_branch} "
            f"using {strategy.value}...[/cyan]\n"
        )
        result = BatchResult(operation=f"sync ({strategy.value})")
        for name in repositories:
            console.print(f"[blue]━━━ Syncing {name} ━━━[/blue]")
            result.add(self.sync_repository(workspace, name, strategy, push))
            console.print()
        return result
