"""
git-workspaces - Manage git worktree workspaces across many repositories
"""

from .__version__ import __version__
from .config import Config
from .core import WorkspaceKeeper

__all__ = ["Config", "WorkspaceKeeper", "__version__"]
