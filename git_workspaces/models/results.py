"""Outcome models for batch operations"""
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from git_workspaces.models.repository import Repository


@dataclass(frozen=True)
class PreflightResult:
    """Cleanliness check outcome for one repository."""
    repository: Repository
    passed: bool
    reason: Optional[str] = None


class ResolutionMethod(Enum):
    """Which source produced a resolved branch name."""
    REGISTRY = "worktree-registry"
    LOCAL_HEAD = "local-head"
    HEAD_FILE = "head-file"
    UNRESOLVED = "unresolved"


@dataclass(frozen=True)
class BranchResolution:
    """Branch bound to a worktree, tagged with how it was found."""
    branch_name: Optional[str]
    method: ResolutionMethod

    @property
    def resolved(self) -> bool:
        return self.method is not ResolutionMethod.UNRESOLVED and bool(self.branch_name)

    @classmethod
    def unresolved(cls) -> "BranchResolution":
        return cls(branch_name=None, method=ResolutionMethod.UNRESOLVED)


@dataclass
class RepositoryOutcome:
    """Ledger entry for one repository in a batch operation."""
    repository: str
    operation: str
    success: bool
    message: Optional[str] = None
    warnings: List[str] = field(default_factory=list)
    guidance: List[str] = field(default_factory=list)  # Manual steps for the operator


@dataclass
class BatchResult:
    """Per-repository ledger of a batch operation."""
    operation: str
    outcomes: List[RepositoryOutcome] = field(default_factory=list)

    def add(self, outcome: RepositoryOutcome) -> RepositoryOutcome:
        self.outcomes.append(outcome)
        return outcome

    @property
    def succeeded(self) -> List[str]:
        return [o.repository for o in self.outcomes if o.success]

    @property
    def failed(self) -> List[str]:
        return [o.repository for o in self.outcomes if not o.success]

    @property
    def all_succeeded(self) -> bool:
        return bool(self.outcomes) and all(o.success for o in self.outcomes)

    @property
    def all_failed(self) -> bool:
        return not any(o.success for o in self.outcomes)

    def get(self, repository: str) -> Optional[RepositoryOutcome]:
        return next((o for o in self.outcomes if o.repository == repository), None)
