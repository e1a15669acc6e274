"""Repository and workspace models"""
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

DEFAULT_BRANCH_PREFIX = "feature"


@dataclass(frozen=True)
class Repository:
    """A source repository under the projects directory."""
    name: str
    path: Path
    has_git_metadata: bool = True

    @classmethod
    def from_path(cls, path: Path) -> "Repository":
        path = Path(path)
        return cls(name=path.name, path=path, has_git_metadata=(path / ".git").exists())


@dataclass(frozen=True)
class Workspace:
    """A named unit of work: one branch shared by one worktree per repository."""
    name: str
    branch_name: str
    root: Path

    @staticmethod
    def sanitize_name(name: str) -> str:
        """Lowercase the name and replace spaces with hyphens."""
        return name.strip().lower().replace(" ", "-")

    @classmethod
    def create(cls, name: str, branch_prefix: str, worktrees_dir: Path) -> "Workspace":
        """Bind a sanitized workspace name to `<prefix>/<name>`."""
        sanitized = cls.sanitize_name(name)
        if not sanitized:
            raise ValueError("Workspace name cannot be empty")
        prefix = (branch_prefix or DEFAULT_BRANCH_PREFIX).strip("/")
        return cls(name=sanitized, branch_name=f"{prefix}/{sanitized}", root=Path(worktrees_dir) / sanitized)

    @classmethod
    def from_branch(cls, branch_name: str, worktrees_dir: Path) -> "Workspace":
        """Derive the workspace for an existing branch (`feature/x` lives in `x`)."""
        branch_name = branch_name.strip()
        if not branch_name:
            raise ValueError("Branch name cannot be empty")
        name = branch_name.split("/", 1)[1] if "/" in branch_name else branch_name
        return cls(name=name, branch_name=branch_name, root=Path(worktrees_dir) / name)

    @classmethod
    def named(cls, name: str, worktrees_dir: Path, branch_name: str = "") -> "Workspace":
        """Refer to an existing workspace directory; its branch may be unknown."""
        return cls(name=name, branch_name=branch_name, root=Path(worktrees_dir) / name)

    def worktree_path(self, repository_name: str) -> Path:
        return self.root / repository_name

    @property
    def exists(self) -> bool:
        return self.root.is_dir()


@dataclass
class WorkspaceSummary:
    """A workspace directory and the repositories populated inside it."""
    name: str
    path: Path
    repositories: List[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.repositories
