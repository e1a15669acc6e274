"""Command-line argument parsing for git-workspaces."""

import argparse

from git_workspaces.__version__ import __version__
from git_workspaces.choices import WORK_TYPES
from git_workspaces.services.templates import TEMPLATE_KINDS


def _add_spec_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--spec",
        choices=TEMPLATE_KINDS,
        metavar="TEMPLATE",
        help=f"Spec template to render ({', '.join(TEMPLATE_KINDS)}); default depends on the work type",
    )


def _add_projects_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-p",
        "--projects",
        nargs="+",
        metavar="PROJECT",
        help="Projects to include (default: choose interactively)",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="git-workspaces",
        description="Manage git worktree workspaces spanning many repositories",
        epilog="Layout: <work-dir>/projects holds the source repositories, "
        "<work-dir>/worktrees one directory per workspace, <work-dir>/templates spec template overrides.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show verbose output")
    parser.add_argument("--version", action="version", version=f"git-workspaces {__version__}")
    parser.add_argument(
        "--debug", action="store_true", help="Show debug information for troubleshooting"
    )
    parser.add_argument(
        "--work-dir",
        metavar="DIR",
        help="Root of projects/, worktrees/ and templates/ (default: $GIT_WORKSPACES_WORK_DIR or ~/Work)",
    )
    parser.add_argument(
        "--trunk",
        metavar="BRANCH",
        help="Trunk branch name (default: $GIT_WORKSPACES_TRUNK or master)",
    )
    parser.add_argument(
        "-y",
        "--yes",
        action="store_true",
        help="Never prompt; use defaults and assume yes (for scripts/automation)",
    )
    parser.add_argument(
        "--workers",
        type=int,
        metavar="N",
        help="Number of parallel workers for repository checks (default: auto-detect based on CPU and threading mode)",
    )
    parser.add_argument(
        "--sequential",
        action="store_true",
        help="Force sequential processing (disable parallelism)",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    new = subparsers.add_parser("new", aliases=["nf"], help="Create a workspace on a new branch")
    new.add_argument("name", nargs="*", help="Workspace name; spaces become hyphens")
    new.add_argument("--type", choices=WORK_TYPES, dest="work_type", help="Branch type (default: ask)")
    _add_spec_option(new)
    _add_projects_option(new)

    new_bug = subparsers.add_parser("new-bug", aliases=["nb"], help="Create a workspace on a bugfix branch")
    new_bug.add_argument("name", nargs="*", help="Workspace name; spaces become hyphens")
    _add_spec_option(new_bug)
    _add_projects_option(new_bug)

    checkout = subparsers.add_parser(
        "checkout", aliases=["cw"], help="Create a workspace for an existing remote branch"
    )
    checkout.add_argument("branch", help="Remote branch, e.g. feature/payment-flow")
    checkout.add_argument("projects", nargs="*", help="Projects to search (default: ask)")
    checkout.add_argument("--all", action="store_true", dest="search_all", help="Search all projects (slower)")

    switch = subparsers.add_parser("switch", aliases=["sw"], help="Print the path of a workspace or project")
    switch.add_argument("name", nargs="?", help="Workspace name (default: choose)")
    switch.add_argument("--project", help="Project inside the workspace")
    switch.add_argument("--open", action="store_true", help="Open the project in IntelliJ IDEA")

    sync = subparsers.add_parser("sync", help="Merge or rebase a workspace onto the trunk")
    sync.add_argument("name", nargs="?", help="Workspace name (default: the one containing the current directory)")
    sync.add_argument("strategy", nargs="?", help="merge (default) or rebase")
    sync.add_argument("--push", action="store_true", help="Push after a successful sync")

    subparsers.add_parser("list", aliases=["lw"], help="List workspaces and their projects")

    remove = subparsers.add_parser("remove", aliases=["rw"], help="Remove a workspace and its worktrees")
    remove.add_argument("name", nargs="?", help="Workspace name (default: choose)")
    branches = remove.add_mutually_exclusive_group()
    branches.add_argument("--keep-branches", action="store_true", help="Keep local and remote branches")
    branches.add_argument(
        "--delete-remote", action="store_true", help="Delete remote branches as well as local ones"
    )

    subparsers.add_parser("check-repos", aliases=["cr"], help="Report projects with uncommitted changes")
    subparsers.add_parser("cleanup-empty", aliases=["ce"], help="Remove workspaces without projects")
    subparsers.add_parser("check-ide", aliases=["ci"], help="Report IntelliJ IDEA launchers found")
    subparsers.add_parser("switch-to-ssh", help="Rewrite GitHub HTTPS remotes to SSH")

    return parser


# Aliases resolve to their canonical command name
ALIASES = {"nf": "new", "nb": "new-bug", "cw": "checkout", "sw": "switch", "lw": "list",
           "rw": "remove", "cr": "check-repos", "ce": "cleanup-empty", "ci": "check-ide"}


def parse_args(argv=None):
    """Parse command-line arguments."""
    parsed_args = build_parser().parse_args(argv)
    parsed_args.command = ALIASES.get(parsed_args.command, parsed_args.command)
    return parsed_args
