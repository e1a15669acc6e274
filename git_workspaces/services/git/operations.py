"""Git operations service"""

import os
from pathlib import Path
from typing import Optional, Union

import git

from git_workspaces.logging_config import get_logger

logger = get_logger(__name__)


def describe_git_error(operation: str, error: git.exc.CommandError) -> str:
    """Build a readable message from a failed git invocation."""
    stderr = (error.stderr if hasattr(error, "stderr") else str(error)) or ""
    stderr = stderr.strip()
    # GitPython wraps stderr as "stderr: '<text>'"
    if stderr.startswith("stderr:"):
        stderr = stderr[len("stderr:"):].strip().strip("'").strip()
    status = error.status if getattr(error, "status", None) is not None else "unknown"

    if stderr:
        return f"git {operation} failed (exit {status}): {stderr}"
    return f"git {operation} failed with exit code {status}"


class GitOperations:
    """Git commands bound to one working directory.

    Every command runs with an explicit working directory, so operations on
    one repository never change the process directory or leak into another.
    """

    def __init__(self, path: Union[str, Path], remote_name: str = "origin"):
        """Initialize the service.

        Args:
            path: Repository or worktree directory the commands run in
            remote_name: Remote used for fetch, pull and push
        """
        self.path = Path(path)
        self.remote_name = remote_name

    def _get_git(self) -> git.Git:
        """Get a git command wrapper for this directory.

        A fresh wrapper per call keeps the service safe to share across threads.

        Returns:
            git.Git: Command wrapper running in self.path
        """
        return git.Git(str(self.path))

    def _run(self, operation: str, *args) -> tuple[bool, Optional[str]]:
        """Run a git subcommand whose only interesting result is its exit code.

        Returns:
            Tuple of (success, error_message). error_message is None on success.
        """
        try:
            self._get_git().execute(["git", operation, *args])
            logger.debug(f"git {operation} {' '.join(args)} succeeded in {self.path}")
            return True, None
        except git.exc.CommandError as e:
            error_msg = describe_git_error(operation, e)
            logger.debug(f"{error_msg} (in {self.path})")
            return False, error_msg

    def is_clean(self) -> tuple[bool, Optional[str]]:
        """Check for uncommitted changes to tracked files.

        Untracked files are ignored. Any failure to run the check counts as dirty.

        Returns:
            Tuple of (clean, reason). reason is None when clean.
        """
        if not self.path.is_dir():
            return False, f"directory not found: {self.path}"
        try:
            g = self._get_git()
            g.rev_parse("--verify", "HEAD")
            status = g.status("--porcelain", "--untracked-files=no")
        except git.exc.CommandError as e:
            return False, describe_git_error("status", e)

        if status.strip():
            return False, "has uncommitted changes"
        return True, None

    def current_branch(self) -> Optional[str]:
        """Get the checked out branch, or None when detached or unreadable."""
        try:
            branch = self._get_git().branch("--show-current").strip()
            return branch or None
        except git.exc.CommandError as e:
            logger.debug(describe_git_error("branch --show-current", e))
            return None

    def checkout(self, branch_name: str) -> tuple[bool, Optional[str]]:
        return self._run("checkout", branch_name)

    def pull(self, branch_name: str) -> tuple[bool, Optional[str]]:
        return self._run("pull", self.remote_name, branch_name)

    def fetch(self, branch_name: Optional[str] = None) -> tuple[bool, Optional[str]]:
        if branch_name:
            return self._run("fetch", self.remote_name, branch_name)
        return self._run("fetch", self.remote_name)

    def has_local_branch(self, branch_name: str) -> bool:
        ok, _ = self._run("show-ref", "--verify", "--quiet", f"refs/heads/{branch_name}")
        return ok

    def has_remote_tracking_ref(self, branch_name: str) -> bool:
        """Check the locally known remote ref (no network)."""
        ok, _ = self._run(
            "show-ref", "--verify", "--quiet", f"refs/remotes/{self.remote_name}/{branch_name}"
        )
        return ok

    def remote_branch_exists(self, branch_name: str) -> bool:
        """Ask the remote itself whether the branch exists."""
        try:
            output = self._get_git().ls_remote("--heads", self.remote_name, branch_name)
        except git.exc.CommandError as e:
            logger.debug(describe_git_error("ls-remote", e))
            return False
        expected = f"refs/heads/{branch_name}"
        return any(line.split()[-1] == expected for line in output.splitlines() if line.strip())

    def push(
        self,
        branch_name: Optional[str] = None,
        set_upstream: bool = False,
        force_with_lease: bool = False,
    ) -> tuple[bool, Optional[str]]:
        args = []
        if set_upstream:
            args.append("-u")
        if force_with_lease:
            args.append("--force-with-lease")
        if branch_name:
            args.extend([self.remote_name, branch_name])
        return self._run("push", *args)

    def merge(self, ref: str) -> tuple[bool, Optional[str]]:
        return self._run("merge", "--no-edit", ref)

    def rebase(self, ref: str) -> tuple[bool, Optional[str]]:
        return self._run("rebase", ref)

    def is_branch_merged(self, branch_name: str, trunk_branch: str) -> bool:
        """Check whether a local branch is merged into the trunk branch."""
        try:
            output = self._get_git().branch("--merged", trunk_branch)
        except git.exc.CommandError as e:
            logger.debug(describe_git_error("branch --merged", e))
            return False
        # Lines look like "  name", "* name" or "+ name" (checked out in a worktree)
        merged = {line[2:].strip() for line in output.splitlines() if line.strip()}
        return branch_name in merged

    def delete_branch(self, branch_name: str, force: bool = False) -> tuple[bool, Optional[str]]:
        return self._run("branch", "-D" if force else "-d", branch_name)

    def delete_remote_branch(self, branch_name: str) -> tuple[bool, Optional[str]]:
        return self._run("push", self.remote_name, "--delete", branch_name)

    def get_remote_url(self) -> Optional[str]:
        try:
            return self._get_git().remote("get-url", self.remote_name).strip() or None
        except git.exc.CommandError as e:
            logger.debug(describe_git_error("remote get-url", e))
            return None

    def set_remote_url(self, url: str) -> tuple[bool, Optional[str]]:
        return self._run("remote", "set-url", self.remote_name, url)

    def git_dir(self) -> Optional[Path]:
        """Resolve the git directory of this working tree, following `gitdir:` files."""
        dot_git = self.path / ".git"
        if dot_git.is_dir():
            return dot_git
        if dot_git.is_file():
            content = dot_git.read_text().strip()
            if content.startswith("gitdir:"):
                target = Path(content[len("gitdir:"):].strip())
                if not target.is_absolute():
                    target = Path(os.path.normpath(self.path / target))
                return target
        return None
