"""Tests for worktree creation and checkout"""
from pathlib import Path
from unittest.mock import Mock

import git

from git_workspaces.models import Repository, Workspace, WorktreeState
from git_workspaces.services.git import GitOperations, WorktreeService
from git_workspaces.services.java_version import VersionFileOutcome
from git_workspaces.services.orchestrator import WorktreeOrchestrator


def _repository(repo):
    return Repository.from_path(Path(repo.working_tree_dir))


class TestCreateWorktree:
    """Test creating worktrees on a new workspace branch."""

    def test_creates_tracked_branch_from_trunk(self, config, make_project, remote_branches):
        repo = make_project("alpha")
        workspace = Workspace.create("x", "feature", config.worktrees_dir)

        instance = WorktreeOrchestrator(config).create_worktree(workspace, _repository(repo))

        assert instance.state is WorktreeState.CREATED
        assert instance.tracked
        assert instance.path == workspace.root / "alpha"
        assert GitOperations(instance.path).current_branch() == "feature/x"
        assert "feature/x" in remote_branches(repo)

    def test_trunk_checked_out_first(self, config, make_project):
        repo = make_project("alpha")
        repo.git.checkout("-b", "elsewhere")
        workspace = Workspace.create("x", "feature", config.worktrees_dir)

        WorktreeOrchestrator(config).create_worktree(workspace, _repository(repo))
        assert repo.active_branch.name == "master"

    def test_existing_directory_is_reused(self, config, make_project):
        repo = make_project("alpha")
        workspace = Workspace.create("x", "feature", config.worktrees_dir)
        orchestrator = WorktreeOrchestrator(config)
        orchestrator.create_worktree(workspace, _repository(repo))

        again = orchestrator.create_worktree(workspace, _repository(repo))
        assert again.reused
        assert len(WorktreeService(repo.working_dir).list_worktrees()) == 2

    def test_push_failure_is_a_warning(self, config, make_project):
        repo = make_project("alpha")
        repo.git.remote("set-url", "--push", "origin", "/nonexistent/remote.git")
        workspace = Workspace.create("x", "feature", config.worktrees_dir)

        instance = WorktreeOrchestrator(config).create_worktree(workspace, _repository(repo))
        assert instance.state is WorktreeState.CREATED
        assert not instance.tracked
        assert any("push" in warning.lower() for warning in instance.warnings)

    def test_version_file_hook_runs_in_new_worktree(self, config, make_project):
        repo = make_project("alpha")
        hook = Mock(return_value=VersionFileOutcome.SKIPPED)
        workspace = Workspace.create("x", "feature", config.worktrees_dir)

        WorktreeOrchestrator(config, version_file_hook=hook).create_worktree(workspace, _repository(repo))
        hook.assert_called_once_with(workspace.root / "alpha")

    def test_java_version_written(self, config, make_project):
        pom = "<project><properties><java.version>17</java.version></properties></project>\n"
        repo = make_project("alpha", files={"pom.xml": pom})
        workspace = Workspace.create("x", "feature", config.worktrees_dir)

        instance = WorktreeOrchestrator(config).create_worktree(workspace, _repository(repo))
        assert (instance.path / ".java-version").read_text() == "17\n"


class TestCreateAll:
    """Test batch creation isolates per-repository failures."""

    def test_both_bound_to_workspace_branch(self, config, make_project):
        alpha = _repository(make_project("alpha"))
        beta = _repository(make_project("beta"))
        workspace = Workspace.create("x", "feature", config.worktrees_dir)

        result = WorktreeOrchestrator(config).create_all(workspace, [alpha, beta])

        assert result.all_succeeded
        for name in ("alpha", "beta"):
            assert GitOperations(workspace.root / name).current_branch() == "feature/x"

    def test_failure_does_not_stop_siblings(self, config, make_project):
        alpha = make_project("alpha")
        beta = make_project("beta")
        alpha.git.branch("feature/x")  # worktree add -b will refuse
        workspace = Workspace.create("x", "feature", config.worktrees_dir)

        result = WorktreeOrchestrator(config).create_all(workspace, [_repository(alpha), _repository(beta)])

        assert result.failed == ["alpha"]
        assert result.succeeded == ["beta"]
        outcome = result.get("alpha")
        assert outcome.operation == "worktree add"
        assert "worktree add" in outcome.message

    def test_rerun_is_idempotent(self, config, make_project):
        repos = [_repository(make_project("alpha")), _repository(make_project("beta"))]
        workspace = Workspace.create("x", "feature", config.worktrees_dir)
        orchestrator = WorktreeOrchestrator(config)
        orchestrator.create_all(workspace, repos)

        second = orchestrator.create_all(workspace, repos)
        assert second.all_succeeded
        assert all(outcome.message == "already existed" for outcome in second.outcomes)


class TestCheckout:
    """Test worktrees for an existing remote branch."""

    def _publish_branch(self, repo, branch, commit_file):
        """Push a branch to origin and delete it locally."""
        repo.git.checkout("-b", branch)
        commit_file(repo.working_tree_dir, "feature.txt", "work\n", "Feature work")
        repo.git.push("origin", branch)
        repo.git.checkout("master")
        repo.git.branch("-D", branch)

    def test_find_repositories_with_branch(self, config, make_project, commit_file):
        alpha = make_project("alpha")
        beta = make_project("beta")
        self._publish_branch(alpha, "feature/payment-flow", commit_file)

        found = WorktreeOrchestrator(config).find_repositories_with_branch(
            [_repository(alpha), _repository(beta)], "feature/payment-flow"
        )
        assert [repository.name for repository in found] == ["alpha"]

    def test_checkout_tracks_remote_branch(self, config, make_project, commit_file):
        alpha = make_project("alpha")
        self._publish_branch(alpha, "feature/payment-flow", commit_file)
        alpha.git.fetch("origin")
        workspace = Workspace.from_branch("feature/payment-flow", config.worktrees_dir)

        instance = WorktreeOrchestrator(config).checkout_worktree(workspace, _repository(alpha))

        assert instance.path == config.worktrees_dir / "payment-flow" / "alpha"
        assert (instance.path / "feature.txt").is_file()
        upstream = git.Git(str(instance.path)).rev_parse("--abbrev-ref", "@{upstream}").strip()
        assert upstream == "origin/feature/payment-flow"

    def test_checkout_uses_existing_local_branch(self, config, make_project):
        alpha = make_project("alpha")
        alpha.git.branch("feature/local")
        workspace = Workspace.from_branch("feature/local", config.worktrees_dir)

        instance = WorktreeOrchestrator(config).checkout_worktree(workspace, _repository(alpha))
        assert GitOperations(instance.path).current_branch() == "feature/local"
        assert not instance.tracked
