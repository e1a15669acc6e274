"""Command-line interface for git-workspaces"""

import sys
from typing import Callable, Dict, List, Optional

from rich.console import Console
from rich.markup import escape

from git_workspaces.choices import RemoveMode
from git_workspaces.cli.args import parse_args
from git_workspaces.cli.prompts import Prompter
from git_workspaces.config import Config
from git_workspaces.core import WorkspaceKeeper, exit_code
from git_workspaces.exceptions import GitWorkspacesError, PreflightError
from git_workspaces.logging_config import get_logger, setup_logging
from git_workspaces.models.results import BatchResult
from git_workspaces.services.remotes import RemoteConversion
from git_workspaces.services.sync import SyncStrategy
from git_workspaces.utils.threading import get_optimal_worker_count, is_free_threading_enabled

console = Console()
logger = get_logger(__name__)


def _workspace_name(args, prompter: Prompter) -> str:
    name = " ".join(args.name).strip()
    if not name and prompter.interactive:
        name = prompter.text("Workspace name").strip()
    if not name:
        raise ValueError("Workspace name is required")
    return name


def _continue_existing(workspace, prompter: Prompter) -> bool:
    if not workspace.exists:
        return True
    console.print(f"[yellow]Warning: Worktree directory already exists: {workspace.root}[/yellow]")
    return prompter.confirm("Do you want to continue and add more projects?")


def _offer_ide(keeper: WorkspaceKeeper, result: BatchResult, workspace_root, prompter: Prompter) -> None:
    """Offer to open one of the created worktrees in IntelliJ."""
    if not prompter.interactive or not result.succeeded:
        return
    if len(result.succeeded) == 1:
        project = result.succeeded[0]
        if not prompter.confirm_default_yes(f"Open {project} in IntelliJ?"):
            return
    else:
        project = prompter.select_one(
            "Which project would you like to open in IntelliJ?", result.succeeded, cancel_label="None"
        )
        if project is None:
            return
    keeper.open_in_ide(workspace_root / project)


def _select_projects(keeper: WorkspaceKeeper, args, prompter: Prompter) -> List[str]:
    if args.projects:
        return list(args.projects)
    names = [repository.name for repository in keeper.available_repositories()]
    selected = prompter.select_many("Available projects", names)
    if not selected:
        raise ValueError("No valid projects selected")
    return selected


def _create(keeper: WorkspaceKeeper, args, prompter: Prompter, branch_prefix: Optional[str] = None) -> int:
    name = _workspace_name(args, prompter)
    branch_prefix = branch_prefix or getattr(args, "work_type", None) or prompter.work_type()
    workspace = keeper.workspace_for(name, branch_prefix)
    if not _continue_existing(workspace, prompter):
        return 1

    projects = _select_projects(keeper, args, prompter)
    try:
        result = keeper.create_workspace(name, projects, branch_prefix, args.spec)
    except PreflightError as e:
        keeper.display.display_preflight_failures(e.failures)
        return 1

    _offer_ide(keeper, result, workspace.root, prompter)
    return exit_code(result)


def cmd_new(keeper: WorkspaceKeeper, args, prompter: Prompter) -> int:
    return _create(keeper, args, prompter)


def cmd_new_bug(keeper: WorkspaceKeeper, args, prompter: Prompter) -> int:
    return _create(keeper, args, prompter, branch_prefix="bugfix")


def cmd_checkout(keeper: WorkspaceKeeper, args, prompter: Prompter) -> int:
    search = list(args.projects) or None
    if search is None and not args.search_all and prompter.interactive:
        if not prompter.confirm("Search all projects for the branch (slower)?"):
            names = [repository.name for repository in keeper.available_repositories()]
            search = prompter.select_many("Available projects", names)
            if not search:
                raise ValueError("No valid projects selected")

    found = [repository.name for repository in keeper.find_branch(args.branch, search)]
    selected = found
    if len(found) > 1 and prompter.interactive:
        if not prompter.confirm_default_yes(f"Checkout all {len(found)} projects with this branch?"):
            selected = prompter.select_many("Projects with this branch", found)
    if not selected:
        raise ValueError("No projects selected")

    workspace = keeper.workspace_for_branch(args.branch)
    if not _continue_existing(workspace, prompter):
        return 1

    result = keeper.checkout_workspace(args.branch, selected)
    _offer_ide(keeper, result, workspace.root, prompter)
    return exit_code(result)


def cmd_switch(keeper: WorkspaceKeeper, args, prompter: Prompter) -> int:
    name = args.name
    if name is None:
        names = keeper.switchable_workspaces()
        if not names:
            console.print("[yellow]No worktrees found[/yellow]")
            return 1
        name = prompter.select_one("📁 Available worktrees:", names)
        if name is None:
            return 0

    repositories = keeper.repositories_in(name)
    project = args.project
    if project is None:
        if len(repositories) == 1:
            project = repositories[0]
        else:
            project = prompter.select_one(
                "Which project?", repositories, cancel_label="Just the worktree directory", default="1"
            )

    path = keeper.switch(name, project)
    console.print(f"[green]✓ Switch to: {path}[/green]", highlight=False)
    # Plain path on stdout so a shell wrapper can cd into it
    print(path)

    if args.open or (prompter.interactive and prompter.confirm("Open in IntelliJ?")):
        keeper.open_in_ide(path if project else path / repositories[0])
    return 0


def _sync_target(keeper: WorkspaceKeeper, args):
    """Split the positionals of sync into (workspace name, strategy).

    A lone strategy word means the current workspace unless a workspace of
    that name exists.
    """
    name, strategy = args.name, args.strategy
    strategies = [s.value for s in SyncStrategy]
    if strategy is None and name in strategies and not keeper.workspace_exists(name):
        return None, name
    return name, strategy or SyncStrategy.MERGE.value


def cmd_sync(keeper: WorkspaceKeeper, args, prompter: Prompter) -> int:
    name, strategy = _sync_target(keeper, args)
    push = args.push or (prompter.interactive and prompter.confirm("Push changes to remote after syncing?"))
    result = keeper.sync(name, strategy, push=push)
    return exit_code(result, require_all=True)


def cmd_list(keeper: WorkspaceKeeper, args, prompter: Prompter) -> int:
    keeper.list_workspaces()
    return 0


def cmd_remove(keeper: WorkspaceKeeper, args, prompter: Prompter) -> int:
    name = args.name
    if name is None:
        names = [workspace.name for workspace in keeper.catalog.list_workspaces(keeper.config.worktrees_dir)]
        if not names:
            console.print("[yellow]No worktrees found[/yellow]")
            return 0
        name = prompter.select_one("Select worktree to remove:", names)
        if name is None:
            return 0

    if args.keep_branches:
        mode = RemoveMode.KEEP_BRANCHES
    elif args.delete_remote:
        mode = RemoveMode.DELETE_BRANCHES
    else:
        mode = prompter.remove_mode()
    if mode is RemoveMode.CANCEL:
        return 0

    delete_remote = args.delete_remote
    if mode.deletes_branches and not delete_remote and prompter.interactive:
        delete_remote = prompter.confirm("Also delete remote branches?")

    result = keeper.remove(name, delete_local_branches=mode.deletes_branches, delete_remote_branches=delete_remote)
    return exit_code(result)


def cmd_check_repos(keeper: WorkspaceKeeper, args, prompter: Prompter) -> int:
    keeper.check_repos()
    return 0


def cmd_cleanup_empty(keeper: WorkspaceKeeper, args, prompter: Prompter) -> int:
    keeper.cleanup_empty()
    return 0


def cmd_check_ide(keeper: WorkspaceKeeper, args, prompter: Prompter) -> int:
    keeper.check_ide()
    return 0


def cmd_switch_to_ssh(keeper: WorkspaceKeeper, args, prompter: Prompter) -> int:
    report = keeper.switch_to_ssh()
    return 1 if report[RemoteConversion.FAILED] else 0


COMMANDS: Dict[str, Callable[[WorkspaceKeeper, object, Prompter], int]] = {
    "new": cmd_new,
    "new-bug": cmd_new_bug,
    "checkout": cmd_checkout,
    "switch": cmd_switch,
    "sync": cmd_sync,
    "list": cmd_list,
    "remove": cmd_remove,
    "check-repos": cmd_check_repos,
    "cleanup-empty": cmd_cleanup_empty,
    "check-ide": cmd_check_ide,
    "switch-to-ssh": cmd_switch_to_ssh,
}


def build_config(parsed_args) -> Config:
    return Config.from_env(
        work_dir=parsed_args.work_dir,
        trunk_branch=parsed_args.trunk,
        verbose=parsed_args.verbose,
        debug=parsed_args.debug,
        interactive=not parsed_args.yes and sys.stdin.isatty(),
        sequential=parsed_args.sequential,
        workers=parsed_args.workers,
    )


def main(argv=None) -> int:
    """Main entry point for the application."""
    debug = False
    try:
        parsed_args = parse_args(argv)
        debug = parsed_args.debug

        # Setup logging before creating WorkspaceKeeper
        setup_logging(verbose=parsed_args.verbose, debug=parsed_args.debug)
        config = build_config(parsed_args)

        if parsed_args.debug:
            console.print("[yellow]Debug mode enabled[/yellow]")
            console.print("[yellow]Threading Information:[/yellow]")
            console.print(f"  Free-threading enabled: {is_free_threading_enabled()}")
            console.print(f"  Optimal workers: {get_optimal_worker_count(config.workers)}")
            console.print("[yellow]Configuration:[/yellow]")
            for key, value in config.to_dict().items():
                console.print(f"  {key}: {value}")
            console.print("[dim]Note: Debug mode forces sequential processing for readable logs[/dim]")

        keeper = WorkspaceKeeper(config)
        return COMMANDS[parsed_args.command](keeper, parsed_args, Prompter(config.interactive))
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        return 130
    except (GitWorkspacesError, ValueError) as e:
        logger.debug("Command failed", exc_info=True)
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        return 1
    except Exception as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        if debug:
            console.print_exception()
        return 1


if __name__ == "__main__":
    sys.exit(main())
