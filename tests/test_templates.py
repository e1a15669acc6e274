"""Tests for spec document rendering"""
from datetime import date

import pytest

from git_workspaces.exceptions import TemplateNotFoundError
from git_workspaces.services.templates import (
    default_template_kind,
    find_template,
    render_spec,
    render_template,
    substitute,
)

TODAY = date(2026, 1, 15)


@pytest.fixture
def workspace_root(temp_dir):
    root = temp_dir / "worktrees" / "x"
    (root / "alpha").mkdir(parents=True)
    (root / "beta").mkdir()
    return root


class TestSubstitution:
    """Test single-pass placeholder replacement."""

    def test_replaces_every_occurrence(self):
        assert substitute("[A] and [A]", {"[A]": "x"}) == "x and x"

    def test_values_are_not_rescanned(self):
        """Test a value that looks like a placeholder stays literal."""
        text = substitute("{{feature_name}} / {{project}}", {"{{feature_name}}": "{{project}}", "{{project}}": "alpha"})
        assert text == "{{project}} / alpha"

    def test_each_block_expands_per_project(self):
        text = "Intro\n{{#each projects}}\n- {{name}}\n{{/each}}\nEnd\n"
        assert render_template(text, {}, ["alpha", "beta"]) == "Intro\n- alpha\n- beta\nEnd\n"

    def test_header_after_first_line(self):
        rendered = render_template("# Title\nBody\n", {}, header=["**Created**: today"])
        assert rendered.splitlines()[:4] == ["# Title", "", "**Created**: today", ""]
        assert rendered.endswith("Body\n")


class TestTemplateLookup:
    """Test user templates override the reference ones."""

    def test_reference_template(self, temp_dir):
        path = find_template("template-project-feature.md", temp_dir / "templates")
        assert path.name == "template-project-feature.md"
        assert path.is_file()

    def test_user_template_wins(self, temp_dir):
        (temp_dir / "templates").mkdir()
        user = temp_dir / "templates" / "template-project-feature.md"
        user.write_text("# mine\n")
        assert find_template("template-project-feature.md", temp_dir / "templates") == user

    def test_missing_template(self, temp_dir):
        with pytest.raises(TemplateNotFoundError):
            find_template("template-nope.md", temp_dir)

    @pytest.mark.parametrize("prefix,kind", [("feature", "feature"), ("bugfix", "bug"), ("hotfix", "bug"), ("chore", "feature")])
    def test_default_kind(self, prefix, kind):
        assert default_template_kind(prefix) == kind


class TestRenderSpec:
    """Test which documents each template kind produces."""

    def test_multi_repository_feature(self, workspace_root):
        created = render_spec("feature", "x", "feature/x", workspace_root, ["alpha", "beta"], today=TODAY)

        assert created == [
            workspace_root / "SPEC.md",
            workspace_root / "alpha" / "PROJECT-SPEC.md",
            workspace_root / "beta" / "PROJECT-SPEC.md",
        ]
        main = (workspace_root / "SPEC.md").read_text()
        assert main.startswith("# x Implementation Spec\n")
        assert "**Branch**: `feature/x`" in main
        assert "**Projects**: alpha, beta" in main
        assert "See `alpha/PROJECT-SPEC.md`" in main
        assert "See `beta/PROJECT-SPEC.md`" in main
        assert "{{" not in main

        project = (workspace_root / "beta" / "PROJECT-SPEC.md").read_text()
        assert project.startswith("# x - beta\n")
        assert "**Created**: 2026-01-15" in project
        assert "**Project**: beta" in project

    def test_single_repository_feature_has_no_main_spec(self, workspace_root):
        created = render_spec("feature", "x", "feature/x", workspace_root, ["alpha"], today=TODAY)
        assert created == [workspace_root / "alpha" / "PROJECT-SPEC.md"]

    def test_main_only_kind(self, workspace_root):
        created = render_spec("quick", "x", "feature/x", workspace_root, ["alpha", "beta"], today=TODAY)
        assert created == [workspace_root / "SPEC.md"]
        assert "**Feature**: x" in (workspace_root / "SPEC.md").read_text()

    def test_bug_kind_writes_project_specs(self, workspace_root):
        created = render_spec("bugfix", "x", "bugfix/x", workspace_root, ["alpha", "beta"], today=TODAY)
        assert [path.name for path in created] == ["PROJECT-SPEC.md", "PROJECT-SPEC.md"]

    def test_missing_repository_directory_skipped(self, workspace_root):
        created = render_spec("chore", "x", "chore/x", workspace_root, ["alpha", "ghost"], today=TODAY)
        assert created == [workspace_root / "alpha" / "PROJECT-SPEC.md"]

    def test_unknown_kind_creates_nothing(self, workspace_root):
        with pytest.raises(TemplateNotFoundError):
            render_spec("poem", "x", "feature/x", workspace_root, ["alpha"])
        assert not (workspace_root / "alpha" / "PROJECT-SPEC.md").exists()
