"""Catalog of workspaces under the worktrees directory."""

import os
import shutil
from pathlib import Path
from typing import List, Optional, Union

from git_workspaces.models.repository import WorkspaceSummary
from git_workspaces.logging_config import get_logger

logger = get_logger(__name__)


def _subdirectories(path: Path) -> List[Path]:
    # Hidden entries (.idea, .vscode) are editor state, never repositories
    entries = (entry for entry in path.iterdir() if entry.is_dir() and not entry.name.startswith("."))
    return sorted(entries, key=lambda p: p.name)


class WorkspaceCatalog:
    """Read-only view of workspaces, plus cleanup of empty ones."""

    def list_workspaces(self, root: Union[str, Path]) -> List[WorkspaceSummary]:
        """List every workspace directory with the repositories populated in it.

        Workspaces without repositories are included; check `is_empty`.
        """
        root = Path(root)
        if not root.is_dir():
            return []
        return [
            WorkspaceSummary(name=ws.name, path=ws, repositories=self.repositories_in(ws))
            for ws in _subdirectories(root)
        ]

    def repositories_in(self, workspace_root: Union[str, Path]) -> List[str]:
        """Names of the per-repository worktree directories inside a workspace."""
        workspace_root = Path(workspace_root)
        if not workspace_root.is_dir():
            return []
        return [entry.name for entry in _subdirectories(workspace_root)]

    def non_empty_names(self, root: Union[str, Path]) -> List[str]:
        return [ws.name for ws in self.list_workspaces(root) if not ws.is_empty]

    def cleanup_empty(self, root: Union[str, Path]) -> List[str]:
        """Remove workspace directories that have no subdirectories.

        Directories holding only plain files (e.g. a leftover SPEC.md) count as empty.

        Returns:
            Names of the removed workspaces
        """
        removed = []
        for workspace in self.list_workspaces(root):
            if workspace.is_empty:
                logger.info(f"Removing empty workspace directory {workspace.path}")
                shutil.rmtree(workspace.path)
                removed.append(workspace.name)
        return removed

    def detect_current(self, root: Union[str, Path], cwd: Optional[Union[str, Path]] = None) -> Optional[str]:
        """Name of the workspace containing cwd, or None when cwd is outside all of them."""
        root_real = Path(os.path.realpath(str(root)))
        cwd_real = Path(os.path.realpath(str(cwd if cwd is not None else os.getcwd())))
        try:
            relative = cwd_real.relative_to(root_real)
        except ValueError:
            return None
        return relative.parts[0] if relative.parts else None
