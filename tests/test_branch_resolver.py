"""Tests for branch name resolution"""
from pathlib import Path
from unittest.mock import Mock

import git

from git_workspaces.models import ResolutionMethod
from git_workspaces.services.branch_resolver import (
    BranchResolver,
    HeadFileStrategy,
    LocalHeadStrategy,
    RegistryStrategy,
)
from git_workspaces.services.git import WorktreeService


def _strategy(method, answer):
    strategy = Mock()
    strategy.method = method
    strategy.resolve.return_value = answer
    return strategy


class TestResolverOrdering:
    """Test the strategies are consulted in priority order."""

    def test_registry_answer_returned_verbatim(self):
        """Test the first strategy's answer is used without consulting the others."""
        registry = _strategy(ResolutionMethod.REGISTRY, "feature/from-registry")
        local = _strategy(ResolutionMethod.LOCAL_HEAD, "feature/other")

        resolution = BranchResolver([registry, local]).resolve_branch("/repo", "/repo-wt")

        assert resolution.branch_name == "feature/from-registry"
        assert resolution.method is ResolutionMethod.REGISTRY
        local.resolve.assert_not_called()

    def test_falls_through_empty_answers(self):
        registry = _strategy(ResolutionMethod.REGISTRY, None)
        local = _strategy(ResolutionMethod.LOCAL_HEAD, "")
        head_file = _strategy(ResolutionMethod.HEAD_FILE, "feature/x")

        resolution = BranchResolver([registry, local, head_file]).resolve_branch("/repo", "/wt")
        assert resolution.method is ResolutionMethod.HEAD_FILE
        assert resolution.resolved

    def test_unresolved(self):
        resolution = BranchResolver([_strategy(ResolutionMethod.REGISTRY, None)]).resolve_branch("/r", "/w")
        assert resolution.method is ResolutionMethod.UNRESOLVED
        assert resolution.branch_name is None
        assert not resolution.resolved


class TestStrategies:
    """Test each strategy against a real worktree."""

    def _worktree(self, make_project, temp_dir, branch="feature/x"):
        repo = make_project("alpha")
        worktree = temp_dir / "worktrees" / "x" / "alpha"
        ok, error = WorktreeService(repo.working_dir).add_worktree(worktree, branch, "master")
        assert ok, error
        return Path(repo.working_dir), worktree

    def test_registry_strategy(self, make_project, temp_dir):
        repo_path, worktree = self._worktree(make_project, temp_dir)
        assert RegistryStrategy().resolve(repo_path, worktree) == "feature/x"

    def test_local_head_strategy(self, make_project, temp_dir):
        repo_path, worktree = self._worktree(make_project, temp_dir)
        assert LocalHeadStrategy().resolve(repo_path, worktree) == "feature/x"

    def test_head_file_strategy_follows_gitdir_file(self, make_project, temp_dir):
        repo_path, worktree = self._worktree(make_project, temp_dir)
        assert HeadFileStrategy().resolve(repo_path, worktree) == "feature/x"

    def test_head_file_strategy_detached(self, make_project, temp_dir):
        repo_path, worktree = self._worktree(make_project, temp_dir)
        git.Git(str(worktree)).checkout("--detach")
        assert HeadFileStrategy().resolve(repo_path, worktree) is None

    def test_missing_worktree_unresolved(self, make_project, temp_dir):
        repo = make_project("alpha")
        resolution = BranchResolver().resolve_branch(repo.working_dir, temp_dir / "nowhere")
        assert not resolution.resolved

    def test_default_resolver_prefers_registry(self, make_project, temp_dir):
        repo_path, worktree = self._worktree(make_project, temp_dir)
        resolution = BranchResolver().resolve_branch(repo_path, worktree)
        assert resolution.method is ResolutionMethod.REGISTRY
        assert resolution.branch_name == "feature/x"
