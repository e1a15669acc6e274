"""Tests for the command-line entry point"""
from unittest.mock import patch

import pytest

from git_workspaces.cli import main, parse_args
from git_workspaces.core import WorkspaceKeeper


def _run(work_dir, *argv):
    return main(["--work-dir", str(work_dir), "-y", "--sequential", *argv])


class TestParseArgs:
    """Test argument parsing and command aliases."""

    @pytest.mark.parametrize(
        "argv,command",
        [
            (["nf"], "new"),
            (["nb"], "new-bug"),
            (["cw", "feature/x"], "checkout"),
            (["sw"], "switch"),
            (["lw"], "list"),
            (["rw"], "remove"),
            (["ce"], "cleanup-empty"),
        ],
    )
    def test_aliases(self, argv, command):
        assert parse_args(argv).command == command

    def test_new_options(self):
        args = parse_args(["new", "payment", "flow", "--type", "hotfix", "--spec", "quick", "-p", "alpha", "beta"])
        assert args.name == ["payment", "flow"]
        assert args.work_type == "hotfix"
        assert args.spec == "quick"
        assert args.projects == ["alpha", "beta"]

    def test_sync_defaults_to_merge(self):
        args = parse_args(["sync", "x"])
        assert args.name == "x"
        assert args.strategy is None
        assert not args.push

    def test_remove_modes_are_exclusive(self):
        with pytest.raises(SystemExit):
            parse_args(["remove", "x", "--keep-branches", "--delete-remote"])

    def test_command_required(self):
        with pytest.raises(SystemExit):
            parse_args([])


class TestMain:
    """Test commands end to end without prompts."""

    def test_new_then_switch_then_remove(self, work_dir, make_project, capsys):
        make_project("alpha")
        make_project("beta")

        assert _run(work_dir, "new", "x", "-p", "alpha", "beta") == 0
        assert (work_dir / "worktrees" / "x" / "alpha").is_dir()

        capsys.readouterr()
        assert _run(work_dir, "switch", "x", "--project", "beta") == 0
        assert str(work_dir / "worktrees" / "x" / "beta") in capsys.readouterr().out.splitlines()

        assert _run(work_dir, "remove", "x") == 0
        assert not (work_dir / "worktrees" / "x").exists()

    def test_new_bug_uses_bugfix_branch(self, work_dir, make_project):
        repo = make_project("alpha")
        assert _run(work_dir, "nb", "crash", "-p", "alpha") == 0
        assert "bugfix/crash" in repo.git.branch("--list")

    def test_dirty_repository_exits_one(self, work_dir, make_project):
        make_project("alpha")
        (work_dir / "projects" / "alpha" / "README.md").write_text("dirty\n")
        assert _run(work_dir, "new", "x", "-p", "alpha") == 1
        assert not (work_dir / "worktrees" / "x").exists()

    def test_unknown_projects_exit_one(self, work_dir, make_project):
        make_project("alpha")
        assert _run(work_dir, "new", "x", "-p", "ghost") == 1

    def test_invalid_strategy(self, work_dir, make_project):
        make_project("alpha")
        _run(work_dir, "new", "x", "-p", "alpha")
        assert _run(work_dir, "sync", "x", "squash") == 1

    def test_sync_missing_workspace(self, work_dir):
        assert _run(work_dir, "sync", "nope") == 1

    def test_sync_strategy_alone_targets_current_workspace(self, work_dir, make_project, monkeypatch):
        make_project("alpha")
        _run(work_dir, "new", "x", "-p", "alpha")
        monkeypatch.chdir(work_dir / "worktrees" / "x" / "alpha")

        with patch.object(WorkspaceKeeper, "sync", autospec=True, side_effect=WorkspaceKeeper.sync) as mock_sync:
            assert _run(work_dir, "sync", "rebase") == 0

        _, name, strategy = mock_sync.call_args.args
        assert (name, strategy) == (None, "rebase")

    def test_sync_workspace_named_like_a_strategy(self, work_dir, make_project):
        make_project("alpha")
        _run(work_dir, "new", "merge", "-p", "alpha")

        with patch.object(WorkspaceKeeper, "sync", autospec=True, side_effect=WorkspaceKeeper.sync) as mock_sync:
            assert _run(work_dir, "sync", "merge") == 0

        _, name, strategy = mock_sync.call_args.args
        assert (name, strategy) == ("merge", "merge")

    def test_cleanup_empty(self, work_dir):
        (work_dir / "worktrees" / "stale").mkdir()
        assert _run(work_dir, "ce") == 0
        assert not (work_dir / "worktrees" / "stale").exists()

    def test_list(self, work_dir, capsys):
        (work_dir / "worktrees" / "x" / "alpha").mkdir(parents=True)
        assert _run(work_dir, "list") == 0
        assert "alpha" in capsys.readouterr().out

    def test_keyboard_interrupt(self, work_dir):
        with patch.object(WorkspaceKeeper, "list_workspaces", side_effect=KeyboardInterrupt):
            assert _run(work_dir, "list") == 130
