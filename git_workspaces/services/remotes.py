"""Rewrite repository origins from GitHub HTTPS to SSH."""

import re
from enum import Enum
from typing import Optional

from git_workspaces.models.repository import Repository
from git_workspaces.services.git import GitOperations
from git_workspaces.logging_config import get_logger

logger = get_logger(__name__)

GITHUB_HTTPS = re.compile(r"^https://github\.com/([^/]+)/(.+?)(?:\.git)?/?$")


class RemoteConversion(Enum):
    CONVERTED = "converted"
    ALREADY_SSH = "already-ssh"
    NO_REMOTE = "no-remote"
    UNSUPPORTED = "unsupported"
    FAILED = "failed"


def to_ssh_url(remote_url: str) -> Optional[str]:
    """Map a GitHub HTTPS URL to its SSH form, or None if it is not one."""
    match = GITHUB_HTTPS.match(remote_url.strip())
    if not match:
        return None
    org, repo = match.groups()
    return f"git@github.com:{org}/{repo}.git"


def convert_to_ssh(repository: Repository, remote_name: str = "origin") -> tuple[RemoteConversion, Optional[str]]:
    """Point the repository's remote at the SSH URL.

    Returns:
        Tuple of (outcome, detail). detail is the new URL or an error message.
    """
    git_ops = GitOperations(repository.path, remote_name)
    remote_url = git_ops.get_remote_url()
    if not remote_url:
        return RemoteConversion.NO_REMOTE, None
    if remote_url.startswith("git@"):
        return RemoteConversion.ALREADY_SSH, remote_url

    ssh_url = to_ssh_url(remote_url)
    if ssh_url is None:
        return RemoteConversion.UNSUPPORTED, remote_url

    ok, error = git_ops.set_remote_url(ssh_url)
    if not ok:
        logger.warning(f"Failed to update remote for {repository.name}: {error}")
        return RemoteConversion.FAILED, error
    logger.info(f"Converted {repository.name} remote to {ssh_url}")
    return RemoteConversion.CONVERTED, ssh_url
