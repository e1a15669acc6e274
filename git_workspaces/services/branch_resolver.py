"""Branch name resolution for worktrees, using an ordered list of sources."""

import re
from pathlib import Path
from typing import Optional, Sequence, Union

import git

from git_workspaces.models.results import BranchResolution, ResolutionMethod
from git_workspaces.services.git import GitOperations, WorktreeService, describe_git_error
from git_workspaces.logging_config import get_logger

logger = get_logger(__name__)

HEAD_REF_PATTERN = re.compile(r"^ref:\s*refs/heads/(.+)$")


class ResolverStrategy:
    """One source of truth for the branch bound to a worktree."""

    method: ResolutionMethod

    def resolve(self, repository_path: Path, worktree_path: Path) -> Optional[str]:
        raise NotImplementedError


class RegistryStrategy(ResolverStrategy):
    """Ask the source repository's worktree registry (git's own bookkeeping)."""

    method = ResolutionMethod.REGISTRY

    def resolve(self, repository_path: Path, worktree_path: Path) -> Optional[str]:
        if not (repository_path / ".git").exists():
            return None
        try:
            info = WorktreeService(repository_path).find(worktree_path)
        except git.exc.CommandError as e:
            logger.debug(describe_git_error("worktree list", e))
            return None
        return info.branch_name if info and info.branch_name else None


class LocalHeadStrategy(ResolverStrategy):
    """Ask the worktree which branch is checked out."""

    method = ResolutionMethod.LOCAL_HEAD

    def resolve(self, repository_path: Path, worktree_path: Path) -> Optional[str]:
        if not (worktree_path / ".git").exists():
            return None
        return GitOperations(worktree_path).current_branch()


class HeadFileStrategy(ResolverStrategy):
    """Read the raw HEAD file of the worktree's git directory."""

    method = ResolutionMethod.HEAD_FILE

    def resolve(self, repository_path: Path, worktree_path: Path) -> Optional[str]:
        try:
            git_dir = GitOperations(worktree_path).git_dir()
            if git_dir is None or not (git_dir / "HEAD").is_file():
                return None
            head_content = (git_dir / "HEAD").read_text().strip()
        except OSError as e:
            logger.debug(f"Could not read HEAD for {worktree_path}: {e}")
            return None

        match = HEAD_REF_PATTERN.match(head_content)
        return match.group(1).strip() if match else None


DEFAULT_STRATEGIES = (RegistryStrategy(), LocalHeadStrategy(), HeadFileStrategy())


class BranchResolver:
    """Tries each strategy in priority order and returns the first answer."""

    def __init__(self, strategies: Optional[Sequence[ResolverStrategy]] = None):
        self.strategies = list(strategies) if strategies is not None else list(DEFAULT_STRATEGIES)

    def resolve_branch(
        self, repository_path: Union[str, Path], worktree_path: Union[str, Path]
    ) -> BranchResolution:
        """Resolve the branch bound to worktree_path.

        Returns:
            The first non-empty result tagged with its method, or an unresolved outcome
        """
        repository_path = Path(repository_path)
        worktree_path = Path(worktree_path)

        for strategy in self.strategies:
            branch = strategy.resolve(repository_path, worktree_path)
            if branch:
                logger.debug(f"Resolved {worktree_path} to {branch} via {strategy.method.value}")
                return BranchResolution(branch_name=branch, method=strategy.method)

        logger.debug(f"Could not resolve branch for {worktree_path}")
        return BranchResolution.unresolved()
