"""Worktree operations service for git-workspaces."""

import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import git

from git_workspaces.models.worktree import WorktreeInfo
from git_workspaces.services.git.operations import describe_git_error
from git_workspaces.logging_config import get_logger

logger = get_logger(__name__)


def _build_info(entry: Dict[str, Any]) -> WorktreeInfo:
    path = entry.get("path", "")
    return WorktreeInfo(
        path=path,
        branch_name=entry.get("branch", ""),
        commit_sha=entry.get("HEAD", ""),
        is_main=entry.get("is_main", False),
        is_orphaned=not os.path.exists(path) if path else True,
    )


def parse_worktree_porcelain(output: str) -> list[WorktreeInfo]:
    """Parse the output of `git worktree list --porcelain`.

    Format:
        worktree /path/to/worktree
        HEAD commit_sha
        branch refs/heads/branch-name
        (blank line between worktrees)
    """
    worktrees: list[WorktreeInfo] = []
    current: Dict[str, Any] = {}

    for line in output.split("\n"):
        line = line.strip()

        if not line:
            # Empty line marks end of worktree entry
            if current.get("path"):
                worktrees.append(_build_info(current))
            current = {}
            continue

        if line.startswith("worktree "):
            current["path"] = line.split(" ", 1)[1]
            # First worktree in list is always the main one
            current["is_main"] = not worktrees
        elif line.startswith("HEAD "):
            current["HEAD"] = line.split(" ", 1)[1]
        elif line.startswith("branch "):
            branch_ref = line.split(" ", 1)[1]
            if branch_ref.startswith("refs/heads/"):
                current["branch"] = branch_ref[len("refs/heads/"):]
            else:
                current["branch"] = ""
        elif line.startswith("detached"):
            current["branch"] = ""

    # Handle last entry if no trailing blank line
    if current.get("path"):
        worktrees.append(_build_info(current))

    return worktrees


class WorktreeService:
    """Service for managing the worktrees registered in one source repository."""

    def __init__(self, repo_path: Union[str, Path]):
        """Initialize the worktree service.

        Args:
            repo_path: Path to the source git repository
        """
        self.repo_path = Path(repo_path)

    def _get_git(self) -> git.Git:
        return git.Git(str(self.repo_path))

    def list_worktrees(self) -> list[WorktreeInfo]:
        """Get detailed information about all worktrees of the repository.

        Raises:
            git.exc.CommandError: If the registry cannot be read
        """
        output = self._get_git().worktree("list", "--porcelain")
        worktrees = parse_worktree_porcelain(output)
        logger.debug(f"Found {len(worktrees)} worktrees in {self.repo_path}")
        for wt in worktrees:
            logger.debug(f"  {wt}")
        return worktrees

    def find(self, worktree_path: Union[str, Path]) -> Optional[WorktreeInfo]:
        """Find the registry entry for a worktree path, comparing real paths."""
        target = os.path.realpath(str(worktree_path))
        for wt in self.list_worktrees():
            if os.path.realpath(wt.path) == target:
                return wt
        return None

    def add_worktree(
        self,
        path: Union[str, Path],
        branch_name: str,
        start_point: Optional[str] = None,
        create_branch: bool = True,
    ) -> tuple[bool, Optional[str]]:
        """Add a worktree at path.

        Args:
            path: Directory for the new worktree
            branch_name: Branch to check out (created when create_branch is True)
            start_point: Commit-ish the new branch starts from
            create_branch: Create branch_name with -b instead of checking out an existing one

        Returns:
            Tuple of (success, error_message). error_message is None on success.
        """
        args = ["add"]
        if create_branch:
            args.extend(["-b", branch_name, str(path)])
            if start_point:
                args.append(start_point)
        else:
            args.extend([str(path), branch_name])

        try:
            self._get_git().worktree(*args)
            logger.info(f"Added worktree at {path} for branch {branch_name}")
            return True, None
        except git.exc.CommandError as e:
            error_msg = describe_git_error("worktree add", e)
            logger.error(f"Failed to add worktree at {path}: {error_msg}")
            return False, error_msg

    def remove_worktree(self, path: Union[str, Path], force: bool = False) -> tuple[bool, Optional[str]]:
        """Remove a worktree at the specified path.

        Args:
            path: Path to the worktree directory
            force: Force removal even if working tree is dirty or locked

        Returns:
            Tuple of (success, error_message). error_message is None on success.
        """
        args = ["remove", str(path)]
        if force:
            args.append("--force")

        try:
            self._get_git().worktree(*args)
            logger.info(f"Removed worktree at {path}")
            return True, None
        except git.exc.CommandError as e:
            error_msg = describe_git_error("worktree remove", e)
            # A plain remove is expected to fail on dirty trees; the caller retries with force
            log = logger.error if force else logger.debug
            log(f"Failed to remove worktree at {path}: {error_msg}")
            return False, error_msg

    def prune_worktrees(self) -> tuple[bool, Optional[str]]:
        """Prune worktree metadata whose directories are gone.

        Returns:
            Tuple of (success, error_message). error_message is None on success.
        """
        try:
            self._get_git().worktree("prune")
            logger.info(f"Pruned orphaned worktree metadata in {self.repo_path}")
            return True, None
        except git.exc.CommandError as e:
            error_msg = describe_git_error("worktree prune", e)
            logger.error(f"Failed to prune worktrees: {error_msg}")
            return False, error_msg
