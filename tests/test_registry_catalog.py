"""Tests for repository discovery and the workspace catalog"""
from git_workspaces.services.catalog import WorkspaceCatalog
from git_workspaces.services.registry import ProjectRegistry


class TestProjectRegistry:
    """Test enumeration of source repositories."""

    def test_lists_repositories_sorted(self, work_dir, make_project):
        make_project("beta")
        make_project("alpha")
        (work_dir / "projects" / "notes").mkdir()
        (work_dir / "projects" / "file.txt").write_text("not a repository\n")

        repositories = ProjectRegistry().list_repositories(work_dir / "projects")
        assert [repository.name for repository in repositories] == ["alpha", "beta"]
        assert all(repository.has_git_metadata for repository in repositories)

    def test_missing_root_yields_empty_list(self, temp_dir):
        assert ProjectRegistry().list_repositories(temp_dir / "nowhere") == []

    def test_get(self, work_dir, make_project):
        make_project("alpha")
        registry = ProjectRegistry()
        assert registry.get(work_dir / "projects", "alpha").name == "alpha"
        assert registry.get(work_dir / "projects", "missing") is None


class TestWorkspaceCatalog:
    """Test listing, cleanup and current workspace detection."""

    def _layout(self, worktrees):
        (worktrees / "x" / "alpha").mkdir(parents=True)
        (worktrees / "x" / "beta").mkdir()
        (worktrees / "empty").mkdir()
        (worktrees / "spec-only").mkdir()
        (worktrees / "spec-only" / "SPEC.md").write_text("# spec\n")

    def test_list_workspaces(self, work_dir):
        worktrees = work_dir / "worktrees"
        self._layout(worktrees)

        summaries = WorkspaceCatalog().list_workspaces(worktrees)
        assert [summary.name for summary in summaries] == ["empty", "spec-only", "x"]
        assert summaries[2].repositories == ["alpha", "beta"]
        assert summaries[0].is_empty

    def test_missing_root(self, temp_dir):
        assert WorkspaceCatalog().list_workspaces(temp_dir / "nowhere") == []

    def test_non_empty_names(self, work_dir):
        worktrees = work_dir / "worktrees"
        self._layout(worktrees)
        assert WorkspaceCatalog().non_empty_names(worktrees) == ["x"]

    def test_cleanup_removes_only_workspaces_without_subdirectories(self, work_dir):
        """Test a directory holding only files counts as empty."""
        worktrees = work_dir / "worktrees"
        self._layout(worktrees)

        removed = WorkspaceCatalog().cleanup_empty(worktrees)
        assert removed == ["empty", "spec-only"]
        assert (worktrees / "x" / "alpha").is_dir()
        assert not (worktrees / "empty").exists()

    def test_hidden_directories_are_not_repositories(self, work_dir):
        worktrees = work_dir / "worktrees"
        (worktrees / "x" / "alpha").mkdir(parents=True)
        (worktrees / "x" / ".idea").mkdir()
        (worktrees / ".cache").mkdir()

        catalog = WorkspaceCatalog()
        assert catalog.repositories_in(worktrees / "x") == ["alpha"]
        assert [summary.name for summary in catalog.list_workspaces(worktrees)] == ["x"]

    def test_detect_current(self, work_dir):
        worktrees = work_dir / "worktrees"
        self._layout(worktrees)
        catalog = WorkspaceCatalog()

        assert catalog.detect_current(worktrees, worktrees / "x" / "alpha") == "x"
        assert catalog.detect_current(worktrees, worktrees / "x") == "x"
        assert catalog.detect_current(worktrees, worktrees) is None
        assert catalog.detect_current(worktrees, work_dir) is None
