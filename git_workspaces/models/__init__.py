"""Data models for git-workspaces."""

from .repository import Repository, Workspace, WorkspaceSummary
from .worktree import WorktreeInfo, WorktreeInstance, WorktreeState
from .results import (
    BatchResult,
    BranchResolution,
    PreflightResult,
    RepositoryOutcome,
    ResolutionMethod,
)

__all__ = [
    "Repository",
    "Workspace",
    "WorkspaceSummary",
    "WorktreeInfo",
    "WorktreeInstance",
    "WorktreeState",
    "BatchResult",
    "BranchResolution",
    "PreflightResult",
    "RepositoryOutcome",
    "ResolutionMethod",
]
