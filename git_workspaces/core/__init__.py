"""Core workspace commands."""

from .workspace_keeper import WorkspaceKeeper, exit_code

__all__ = ["WorkspaceKeeper", "exit_code"]
