"""Specification documents rendered into new workspaces."""

import re
from datetime import date
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Union

from git_workspaces.exceptions import TemplateNotFoundError
from git_workspaces.logging_config import get_logger

logger = get_logger(__name__)

REFERENCE_TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

MAIN_SPEC_FILE = "SPEC.md"
PROJECT_SPEC_FILE = "PROJECT-SPEC.md"

# Per-repository spec templates
PROJECT_TEMPLATES = {
    "feature": "template-project-feature.md",
    "bug": "template-project-bug.md",
    "bugfix": "template-project-bug.md",
    "hotfix": "template-project-hotfix.md",
    "chore": "template-project-chore.md",
}

# Workspace-level spec templates
MAIN_TEMPLATES = {
    "feature": "template-feature-coordination.md",
    "bug": "template-bug-fix.md",
    "bugfix": "template-bug-fix.md",
    "api": "template-api-integration.md",
    "quick": "template-quick-task.md",
    "task": "template-quick-task.md",
    "refactor": "template-refactoring.md",
    "refactoring": "template-refactoring.md",
    "system": "template-system-design.md",
    "design": "template-system-design.md",
}

TEMPLATE_KINDS = sorted(set(PROJECT_TEMPLATES) | set(MAIN_TEMPLATES))

EACH_BLOCK = re.compile(r"\{\{#each projects\}\}\n?(.*?)\{\{/each\}\}\n?", re.DOTALL)


def default_template_kind(branch_prefix: str) -> str:
    """Spec template used when none is requested for a branch type."""
    return "bug" if branch_prefix in ("bugfix", "hotfix") else "feature"


def substitute(text: str, values: Mapping[str, str]) -> str:
    """Replace every placeholder in a single pass.

    Replacement values are never scanned again, so a value that happens to look
    like another placeholder stays as written.
    """
    if not values:
        return text
    keys = sorted(values, key=len, reverse=True)
    pattern = re.compile("|".join(re.escape(key) for key in keys))
    return pattern.sub(lambda match: values[match.group(0)], text)


def render_template(
    text: str,
    values: Mapping[str, str],
    projects: Sequence[str] = (),
    header: Sequence[str] = (),
) -> str:
    """Render template text.

    Args:
        text: Template content
        values: Placeholder to value mapping
        projects: Names used to expand `{{#each projects}}...{{/each}}` blocks
        header: Lines inserted after the first line of the document
    """
    parts: List[str] = []
    position = 0
    for block in EACH_BLOCK.finditer(text):
        parts.append(substitute(text[position:block.start()], values))
        for project in projects:
            parts.append(substitute(block.group(1), {**values, "{{name}}": project}))
        position = block.end()
    parts.append(substitute(text[position:], values))
    rendered = "".join(parts)

    if header:
        first, _, rest = rendered.partition("\n")
        rendered = "\n".join([first, "", *header, "", rest])
    return rendered


def find_template(template_file: str, templates_dir: Optional[Union[str, Path]] = None) -> Path:
    """Locate a template, preferring the user's templates directory.

    Raises:
        TemplateNotFoundError: If neither the user nor the reference template exists
    """
    if templates_dir is not None:
        user_template = Path(templates_dir) / template_file
        if user_template.is_file():
            return user_template

    reference = REFERENCE_TEMPLATES_DIR / template_file
    if reference.is_file():
        logger.info(f"Using reference template {template_file}")
        return reference

    raise TemplateNotFoundError(
        template_file,
        f"Template not found: {template_file}. "
        f"Copy the reference templates with: cp -r {REFERENCE_TEMPLATES_DIR}/* {templates_dir or '<templates dir>'}/",
    )


def _base_values(workspace_name: str, branch_name: str, today: str) -> Dict[str, str]:
    return {
        "[Feature Name]": workspace_name,
        "[Brief Description]": workspace_name,
        "{{feature_name}}": workspace_name,
        "{{branch_name}}": branch_name,
        "{{date}}": today,
    }


def render_spec(
    template_kind: str,
    workspace_name: str,
    branch_name: str,
    workspace_root: Union[str, Path],
    repository_names: Sequence[str],
    templates_dir: Optional[Union[str, Path]] = None,
    today: Optional[date] = None,
) -> List[Path]:
    """Create the specification documents of a workspace.

    A feature spanning several repositories gets a coordination SPEC.md plus
    one PROJECT-SPEC.md per repository. Kinds without a per-repository
    template (api, quick, refactor, system) get only SPEC.md. Everything else
    gets per-repository specs only.

    Returns:
        Paths of the created files

    Raises:
        TemplateNotFoundError: For an unknown kind or a missing template file
    """
    kind = template_kind.strip().lower()
    if kind not in PROJECT_TEMPLATES and kind not in MAIN_TEMPLATES:
        raise TemplateNotFoundError(template_kind, f"Unknown template type: {template_kind}")

    workspace_root = Path(workspace_root)
    today_str = (today or date.today()).isoformat()
    values = _base_values(workspace_name, branch_name, today_str)
    projects = list(repository_names)

    main_only = kind not in PROJECT_TEMPLATES
    multi_level = kind == "feature" and len(projects) > 1

    # Resolve every template up front so a missing one creates nothing
    main_template = find_template(MAIN_TEMPLATES[kind], templates_dir) if (main_only or multi_level) else None
    project_template = None if main_only else find_template(PROJECT_TEMPLATES[kind], templates_dir)

    created: List[Path] = []

    if main_template is not None:
        header = [f"**Created**: {today_str}", f"**Branch**: `{branch_name}`"]
        if kind not in ("feature", "bug", "bugfix"):
            header.append(f"**Feature**: {workspace_name}")
        header.append(f"**Projects**: {', '.join(projects)}")

        spec_path = workspace_root / MAIN_SPEC_FILE
        spec_path.write_text(render_template(main_template.read_text(), values, projects, header))
        logger.info(f"Created main spec {spec_path}")
        created.append(spec_path)

    if project_template is not None:
        template_text = project_template.read_text()
        for project in projects:
            project_dir = workspace_root / project
            if not project_dir.is_dir():
                continue
            header = [
                f"**Created**: {today_str}",
                f"**Branch**: `{branch_name}`",
                f"**Project**: {project}",
            ]
            project_values = {**values, "[Project Name]": project, "{{project}}": project}
            spec_path = project_dir / PROJECT_SPEC_FILE
            spec_path.write_text(render_template(template_text, project_values, projects, header))
            logger.info(f"Created project spec {spec_path}")
            created.append(spec_path)

    return created
