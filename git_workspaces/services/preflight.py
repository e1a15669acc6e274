"""Preflight cleanliness checks run before any mutating batch operation."""

from typing import List, Sequence

from rich.console import Console

from git_workspaces.config import Config
from git_workspaces.exceptions import PreflightError
from git_workspaces.models.repository import Repository
from git_workspaces.models.results import PreflightResult
from git_workspaces.services.git import GitOperations
from git_workspaces.utils.threading import get_optimal_worker_count, map_in_order
from git_workspaces.logging_config import get_logger

console = Console()
logger = get_logger(__name__)


class PreflightValidator:
    """Checks a set of repositories for uncommitted changes."""

    def __init__(self, config: Config, quiet: bool = False):
        self.config = config
        self.quiet = quiet

    def _workers(self) -> int:
        if not self.config.parallel:
            return 1
        return get_optimal_worker_count(self.config.workers)

    def check(self, repository: Repository) -> PreflightResult:
        """Check one repository. Never raises; problems become a failed result."""
        try:
            clean, reason = GitOperations(repository.path, self.config.remote_name).is_clean()
        except OSError as e:
            clean, reason = False, f"could not run status check: {e}"

        if clean:
            logger.debug(f"Preflight passed for {repository.name}")
        else:
            logger.info(f"Preflight failed for {repository.name}: {reason}")
        return PreflightResult(repository=repository, passed=clean, reason=reason)

    def validate(self, repositories: Sequence[Repository]) -> List[PreflightResult]:
        """Check every repository independently; results keep input order."""
        results = map_in_order(self.check, repositories, workers=self._workers())
        if not self.quiet:
            for result in results:
                if result.passed:
                    console.print(f"[green]✓[/green]  {result.repository.name} - ready")
                else:
                    console.print(f"[red]✗[/red]  {result.repository.name} - {result.reason}")
        return results

    def ensure_clean(self, repositories: Sequence[Repository]) -> List[PreflightResult]:
        """Validate and raise if any repository failed.

        Raises:
            PreflightError: With every failing result, before anything is mutated
        """
        results = self.validate(repositories)
        failures = [result for result in results if not result.passed]
        if failures:
            raise PreflightError(failures)
        return results

    @staticmethod
    def failures(results: Sequence[PreflightResult]) -> List[PreflightResult]:
        return [result for result in results if not result.passed]

