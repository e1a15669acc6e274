"""Git-related services for git-workspaces."""

from .operations import GitOperations, describe_git_error
from .worktrees import WorktreeService, parse_worktree_porcelain

__all__ = [
    "GitOperations",
    "WorktreeService",
    "describe_git_error",
    "parse_worktree_porcelain",
]
