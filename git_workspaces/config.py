"""Configuration handling for git-workspaces"""

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Optional

WORK_DIR_ENV = "GIT_WORKSPACES_WORK_DIR"
TRUNK_ENV = "GIT_WORKSPACES_TRUNK"


@dataclass(frozen=True)
class Config:
    """Immutable configuration for git-workspaces with validation.

    Built once at process start and handed to every component.
    """

    # Filesystem layout
    work_dir: Path = field(default_factory=lambda: Path.home() / "Work")

    # Git
    trunk_branch: str = "master"
    remote_name: str = "origin"

    # Execution modes
    verbose: bool = False
    debug: bool = False
    interactive: bool = True
    sequential: bool = False  # Force sequential processing (disable parallelism)
    workers: Optional[int] = None  # Number of parallel workers (None = auto-detect)

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate_work_dir()
        self._validate_trunk_branch()
        self._validate_remote_name()
        self._validate_workers()

    def _validate_work_dir(self):
        """Normalize work_dir to an expanded Path."""
        if not self.work_dir or not str(self.work_dir).strip():
            raise ValueError("work_dir cannot be empty")
        object.__setattr__(self, "work_dir", Path(self.work_dir).expanduser())

    def _validate_trunk_branch(self):
        """Validate trunk_branch is not empty."""
        if not self.trunk_branch or not self.trunk_branch.strip():
            raise ValueError("trunk_branch cannot be empty")
        object.__setattr__(self, "trunk_branch", self.trunk_branch.strip())

    def _validate_remote_name(self):
        """Validate remote_name is not empty."""
        if not self.remote_name or not self.remote_name.strip():
            raise ValueError("remote_name cannot be empty")

    def _validate_workers(self):
        """Validate workers is positive when given."""
        if self.workers is not None and self.workers <= 0:
            raise ValueError(f"workers must be positive, got {self.workers}")

    @property
    def projects_dir(self) -> Path:
        """Directory holding the source repositories."""
        return self.work_dir / "projects"

    @property
    def worktrees_dir(self) -> Path:
        """Directory holding one subdirectory per workspace."""
        return self.work_dir / "worktrees"

    @property
    def templates_dir(self) -> Path:
        """Directory holding user overrides of the spec templates."""
        return self.work_dir / "templates"

    @property
    def parallel(self) -> bool:
        """Whether batch reads may use a worker pool."""
        # Debug output is only readable when repositories are handled one by one
        return not (self.sequential or self.debug)

    def to_dict(self) -> dict:
        """Convert config to dictionary."""
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, config_dict: dict) -> "Config":
        """Create Config from dictionary, ignoring unknown keys."""
        known_fields = {f.name for f in fields(cls)}
        filtered = {k: v for k, v in config_dict.items() if k in known_fields and v is not None}
        return cls(**filtered)

    @classmethod
    def from_env(cls, **overrides) -> "Config":
        """Create Config from environment variables, then apply overrides."""
        values = {}
        if os.environ.get(WORK_DIR_ENV):
            values["work_dir"] = Path(os.environ[WORK_DIR_ENV])
        if os.environ.get(TRUNK_ENV):
            values["trunk_branch"] = os.environ[TRUNK_ENV]
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls.from_dict(values)
