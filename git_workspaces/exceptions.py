"""Custom exceptions for git-workspaces"""

from typing import Optional, Sequence, TYPE_CHECKING

if TYPE_CHECKING:
    from git_workspaces.models.results import PreflightResult


class GitWorkspacesError(Exception):
    """Base exception for all git-workspaces errors."""
    pass


class GitOperationError(GitWorkspacesError):
    """Exception raised when a git operation fails for one repository."""

    def __init__(
        self, operation: str, repository: Optional[str] = None, message: Optional[str] = None
    ):
        self.operation = operation
        self.repository = repository
        self.message = message

        error_msg = f"Git operation '{operation}' failed"
        if repository:
            error_msg += f" for repository '{repository}'"
        if message:
            error_msg += f": {message}"

        super().__init__(error_msg)


class WorktreeCreationError(GitOperationError):
    """Exception raised when a worktree cannot be created for a repository."""


class SyncConflictError(GitOperationError):
    """Exception raised when merge or rebase stops on conflicts."""

    def __init__(self, repository: str, strategy: str, guidance: Sequence[str]):
        self.strategy = strategy
        self.guidance = list(guidance)
        super().__init__(strategy, repository, "Conflicts detected")


class PreflightError(GitWorkspacesError):
    """Exception raised when repositories fail the preflight check."""

    def __init__(self, failures: Sequence["PreflightResult"]):
        self.failures = list(failures)
        names = ", ".join(result.repository.name for result in self.failures)
        super().__init__(f"Preflight check failed for: {names}")


class WorkspaceNotFoundError(GitWorkspacesError):
    """Exception raised when a workspace directory does not exist."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Workspace not found: {name}")


class EmptyWorkspaceError(GitWorkspacesError):
    """Exception raised when a workspace holds no repositories."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Workspace has no repositories: {name}")


class NoRepositoriesError(GitWorkspacesError):
    """Exception raised when no usable repositories are available."""


class InvalidStrategyError(GitWorkspacesError, ValueError):
    """Exception raised for an unknown sync strategy."""

    def __init__(self, strategy: str):
        self.strategy = strategy
        super().__init__(f"Strategy must be 'merge' or 'rebase', got '{strategy}'")


class TemplateNotFoundError(GitWorkspacesError):
    """Exception raised when a spec template cannot be located."""

    def __init__(self, template: str, message: Optional[str] = None):
        self.template = template
        super().__init__(message or f"Template not found: {template}")


class IDENotAvailableError(GitWorkspacesError):
    """Exception raised when no IDE launcher can be found."""
