"""Version information for git-workspaces."""

__version__ = "0.1.0"
