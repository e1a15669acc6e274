"""Creation of per-repository worktrees bound to a workspace branch."""

from pathlib import Path
from typing import Callable, List, Sequence

from rich.console import Console
from rich.markup import escape

from git_workspaces.config import Config
from git_workspaces.exceptions import WorktreeCreationError
from git_workspaces.models.repository import Repository, Workspace
from git_workspaces.models.results import BatchResult, RepositoryOutcome
from git_workspaces.models.worktree import WorktreeInstance, WorktreeState
from git_workspaces.services.git import GitOperations, WorktreeService
from git_workspaces.services.java_version import VersionFileOutcome, derive_version_file
from git_workspaces.utils.threading import get_optimal_worker_count, map_in_order
from git_workspaces.logging_config import get_logger

console = Console()
logger = get_logger(__name__)

VersionFileHook = Callable[[Path], VersionFileOutcome]


class WorktreeOrchestrator:
    """Creates one worktree per repository, isolating failures per repository.

    Callers must have passed preflight for the repositories in this invocation.
    """

    def __init__(self, config: Config, version_file_hook: VersionFileHook = derive_version_file):
        self.config = config
        self.version_file_hook = version_file_hook

    def _existing(self, workspace: Workspace, repository: Repository) -> WorktreeInstance:
        console.print(f"[yellow]  ⚠️  Worktree already exists for {repository.name}, skipping...[/yellow]")
        return WorktreeInstance(
            repository_name=repository.name,
            path=workspace.worktree_path(repository.name),
            branch_name=workspace.branch_name,
            state=WorktreeState.CREATED,
            reused=True,
        )

    def _apply_version_file(self, instance: WorktreeInstance) -> None:
        try:
            if self.version_file_hook(instance.path) is VersionFileOutcome.WRITTEN:
                console.print("[green]    ✓ Created .java-version[/green]")
        except OSError as e:
            instance.warnings.append(f"Could not write .java-version: {e}")
            logger.warning(f"Could not write .java-version in {instance.path}: {e}")

    def create_worktree(self, workspace: Workspace, repository: Repository) -> WorktreeInstance:
        """Create the worktree of repository inside workspace on the workspace branch.

        Raises:
            WorktreeCreationError: When the trunk checkout or the worktree add fails
        """
        target = workspace.worktree_path(repository.name)
        if target.exists():
            return self._existing(workspace, repository)

        trunk = self.config.trunk_branch
        remote = self.config.remote_name
        git_ops = GitOperations(repository.path, remote)
        warnings: List[str] = []

        console.print(f"  📥 Updating {trunk} branch...")
        if git_ops.current_branch() != trunk:
            ok, error = git_ops.checkout(trunk)
            if not ok:
                raise WorktreeCreationError(f"checkout {trunk}", repository.name, error)

        ok, error = git_ops.pull(trunk)
        if not ok:
            warning = f"Failed to pull {trunk} from {remote}, using local state: {error}"
            logger.warning(f"{repository.name}: {warning}")
            console.print(f"[yellow]    ⚠️  Warning: Failed to pull from {remote}[/yellow]")
            warnings.append(warning)

        console.print(f"  🌳 Creating worktree with branch {workspace.branch_name}...")
        ok, error = WorktreeService(repository.path).add_worktree(target, workspace.branch_name, trunk)
        if not ok:
            raise WorktreeCreationError("worktree add", repository.name, error)

        console.print("  📤 Pushing branch to remote...")
        tracked, error = GitOperations(target, remote).push(workspace.branch_name, set_upstream=True)
        if tracked:
            console.print("[green]    ✓ Branch pushed and tracking set[/green]")
        else:
            warning = f"Failed to push {workspace.branch_name} to {remote} (push manually): {error}"
            logger.warning(f"{repository.name}: {warning}")
            console.print("[yellow]    ⚠️  Warning: Failed to push to remote (you may need to push manually)[/yellow]")
            warnings.append(warning)

        instance = WorktreeInstance(
            repository_name=repository.name,
            path=target,
            branch_name=workspace.branch_name,
            tracked=tracked,
            state=WorktreeState.CREATED,
            warnings=warnings,
        )
        self._apply_version_file(instance)
        return instance

    def checkout_worktree(self, workspace: Workspace, repository: Repository) -> WorktreeInstance:
        """Create a worktree for an existing branch.

        An existing local branch is checked out as is; otherwise a local branch
        tracking the remote branch is created.

        Raises:
            WorktreeCreationError: When the worktree add fails
        """
        target = workspace.worktree_path(repository.name)
        if target.exists():
            return self._existing(workspace, repository)

        branch = workspace.branch_name
        worktree_service = WorktreeService(repository.path)
        git_ops = GitOperations(repository.path, self.config.remote_name)

        console.print("  🌳 Creating worktree tracking remote branch...")
        if git_ops.has_local_branch(branch):
            console.print("[yellow]    ⚠️  Local branch already exists, using it[/yellow]")
            ok, error = worktree_service.add_worktree(target, branch, create_branch=False)
            tracked = git_ops.has_remote_tracking_ref(branch)
        else:
            ok, error = worktree_service.add_worktree(target, branch, f"{self.config.remote_name}/{branch}")
            tracked = ok
        if not ok:
            raise WorktreeCreationError("worktree add", repository.name, error)

        instance = WorktreeInstance(
            repository_name=repository.name,
            path=target,
            branch_name=branch,
            tracked=tracked,
            state=WorktreeState.CREATED,
        )
        self._apply_version_file(instance)
        return instance

    def _run_batch(
        self,
        operation: str,
        workspace: Workspace,
        repositories: Sequence[Repository],
        create: Callable[[Workspace, Repository], WorktreeInstance],
    ) -> BatchResult:
        workspace.root.mkdir(parents=True, exist_ok=True)
        result = BatchResult(operation=operation)

        for repository in repositories:
            console.print(f"[blue]━━━ Processing {repository.name} ━━━[/blue]")
            try:
                instance = create(workspace, repository)
            except WorktreeCreationError as e:
                logger.error(str(e))
                console.print(f"[red]  ✗ Failed to create worktree for {repository.name}: {escape(e.message or '')}[/red]\n")
                result.add(RepositoryOutcome(repository.name, e.operation, False, message=e.message))
                continue

            message = "already existed" if instance.reused else str(instance.path)
            result.add(RepositoryOutcome(repository.name, operation, True, message=message, warnings=instance.warnings))
            if not instance.reused:
                console.print(f"[green]  ✓ {repository.name} worktree created successfully[/green]\n")

        return result

    def create_all(self, workspace: Workspace, repositories: Sequence[Repository]) -> BatchResult:
        """Create worktrees for every repository; one failure never stops the batch."""
        return self._run_batch("create", workspace, repositories, self.create_worktree)

    def checkout_all(self, workspace: Workspace, repositories: Sequence[Repository]) -> BatchResult:
        return self._run_batch("checkout", workspace, repositories, self.checkout_worktree)

    def find_repositories_with_branch(
        self, repositories: Sequence[Repository], branch_name: str
    ) -> List[Repository]:
        """Fetch each repository and keep those whose remote has branch_name."""
        remote = self.config.remote_name

        def has_branch(repository: Repository) -> bool:
            git_ops = GitOperations(repository.path, remote)
            ok, error = git_ops.fetch()
            if not ok:
                logger.warning(f"{repository.name}: fetch failed, using known remote refs: {error}")
            return git_ops.has_remote_tracking_ref(branch_name)

        workers = get_optimal_worker_count(self.config.workers) if self.config.parallel else 1
        found = map_in_order(has_branch, repositories, workers=workers)
        return [repository for repository, present in zip(repositories, found) if present]
