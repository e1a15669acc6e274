"""Worktree data models."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List


@dataclass
class WorktreeInfo:
    """One entry of a repository's git worktree registry."""

    path: str
    branch_name: str
    commit_sha: str
    is_main: bool  # Is this the main working tree?
    is_orphaned: bool  # Directory missing?

    def __str__(self) -> str:
        """String representation of worktree."""
        status = "orphaned" if self.is_orphaned else "active"
        main_marker = " (main)" if self.is_main else ""
        branch = self.branch_name or "(detached)"
        return f"{branch} @ {self.path}{main_marker} [{status}]"


class WorktreeState(Enum):
    """Existence state of a worktree inside a workspace."""
    ABSENT = "absent"
    CREATED = "created"
    REMOVED = "removed"


@dataclass
class WorktreeInstance:
    """The checkout of one repository inside one workspace."""

    repository_name: str
    path: Path
    branch_name: str
    tracked: bool = False  # Upstream tracking configured on the remote
    state: WorktreeState = WorktreeState.ABSENT
    reused: bool = False  # Directory already existed, nothing was created
    warnings: List[str] = field(default_factory=list)
