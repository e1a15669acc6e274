"""Pytest fixtures for git-workspaces tests"""
import tempfile
from pathlib import Path

import git
import pytest

from git_workspaces.config import Config


def _configure(repo: git.Repo) -> None:
    with repo.config_writer() as writer:
        writer.set_value("user", "name", "Test User")
        writer.set_value("user", "email", "test@example.com")
        writer.set_value("pull", "rebase", "false")
        writer.set_value("commit", "gpgsign", "false")


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


@pytest.fixture
def work_dir(temp_dir):
    """Work directory with empty projects/ and worktrees/ subdirectories."""
    work = temp_dir / "Work"
    (work / "projects").mkdir(parents=True)
    (work / "worktrees").mkdir()
    return work


@pytest.fixture
def config(work_dir):
    """Non-interactive, sequential configuration rooted at work_dir."""
    return Config(work_dir=work_dir, interactive=False, sequential=True)


@pytest.fixture
def make_project(work_dir, temp_dir):
    """Factory creating a source repository with a bare origin.

    The repository has one commit on master, pushed to origin with tracking.
    """
    repos = []

    def _make(name, files=None):
        origin_path = temp_dir / "remotes" / f"{name}.git"
        origin = git.Repo.init(origin_path, bare=True)

        repo_path = work_dir / "projects" / name
        repo = git.Repo.init(repo_path)
        _configure(repo)

        (repo_path / "README.md").write_text(f"# {name}\n")
        for relative, content in (files or {}).items():
            target = repo_path / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content)
        repo.git.add("--all")
        repo.index.commit("Initial commit")
        repo.git.branch("-M", "master")

        repo.create_remote("origin", str(origin_path))
        repo.git.push("-u", "origin", "master")
        origin.git.symbolic_ref("HEAD", "refs/heads/master")

        repos.extend([repo, origin])
        return repo

    yield _make

    for repo in repos:
        repo.close()


@pytest.fixture
def commit_file():
    """Commit one file in a repository or worktree directory and return the new sha."""

    def _commit(path, name, content, message="Update"):
        path = Path(path)
        (path / name).write_text(content)
        g = git.Git(str(path))
        g.add(name)
        g.commit("-m", message)
        return g.rev_parse("HEAD").strip()

    return _commit


@pytest.fixture
def remote_branches():
    """List the branches of a project's bare origin."""

    def _branches(repo):
        origin_url = repo.remotes.origin.url
        output = git.Git(origin_url).branch("--list", "--format=%(refname:short)")
        return [line.strip() for line in output.splitlines() if line.strip()]

    return _branches
