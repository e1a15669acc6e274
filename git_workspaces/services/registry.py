"""Discovery of source repositories under the projects directory."""

from pathlib import Path
from typing import List, Optional, Union

from git_workspaces.models.repository import Repository
from git_workspaces.logging_config import get_logger

logger = get_logger(__name__)


class ProjectRegistry:
    """Enumerates the git repositories directly under a root directory."""

    @staticmethod
    def is_repository(path: Path) -> bool:
        """A repository is a directory holding a `.git` directory or file."""
        return path.is_dir() and (path / ".git").exists()

    def list_repositories(self, root_dir: Union[str, Path]) -> List[Repository]:
        """List repositories under root_dir, sorted by name.

        A missing root yields an empty list; non-repository entries are skipped.
        """
        root = Path(root_dir)
        if not root.is_dir():
            logger.debug(f"Projects directory not found: {root}")
            return []

        repositories = [
            Repository(name=entry.name, path=entry, has_git_metadata=True)
            for entry in sorted(root.iterdir(), key=lambda p: p.name)
            if self.is_repository(entry)
        ]
        logger.debug(f"Found {len(repositories)} repositories in {root}")
        return repositories

    def get(self, root_dir: Union[str, Path], name: str) -> Optional[Repository]:
        """Get one repository by directory name, or None if it is not a repository."""
        path = Path(root_dir) / name
        if not self.is_repository(path):
            return None
        return Repository(name=name, path=path, has_git_metadata=True)
