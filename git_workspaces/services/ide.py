"""Opening worktrees in IntelliJ IDEA."""

import shutil
import subprocess
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Union

from git_workspaces.exceptions import IDENotAvailableError
from git_workspaces.logging_config import get_logger

logger = get_logger(__name__)

LAUNCHER_COMMANDS = ["idea", "intellij-idea-ultimate", "intellij-idea-ce"]
MACOS_APP = Path("/Applications/IntelliJ IDEA.app")
MACOS_APP_CANDIDATES = [
    Path("/Applications/IntelliJ IDEA.app"),
    Path("/Applications/IntelliJ IDEA Ultimate.app"),
    Path("/Applications/IntelliJ IDEA CE.app"),
    Path("/Applications/IntelliJ IDEA Community Edition.app"),
    Path.home() / "Applications" / "IntelliJ IDEA.app",
]


@dataclass
class IDEReport:
    """What IntelliJ installations could be found on this machine."""
    applications: List[Path] = field(default_factory=list)
    launchers: List[str] = field(default_factory=list)  # Resolved launcher paths

    @property
    def available(self) -> bool:
        return bool(self.applications or self.launchers)


def detect() -> IDEReport:
    report = IDEReport()
    report.applications = [app for app in MACOS_APP_CANDIDATES if app.is_dir()]
    for command in LAUNCHER_COMMANDS:
        resolved = shutil.which(command)
        if resolved:
            report.launchers.append(resolved)
    return report


def _spawn(args: List[str]) -> None:
    # Detached: the IDE outlives this process and its output is not ours
    subprocess.Popen(
        args,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
        start_new_session=True,
    )


def launch(path: Union[str, Path]) -> str:
    """Open path in IntelliJ IDEA.

    Returns:
        The launcher that was used

    Raises:
        IDENotAvailableError: If the path is invalid or no launcher exists
    """
    path = Path(path)
    if not path.is_dir():
        raise IDENotAvailableError(f"Invalid project path: {path}")

    for command in LAUNCHER_COMMANDS:
        resolved = shutil.which(command)
        if resolved:
            logger.info(f"Opening {path} with {command}")
            _spawn([resolved, str(path)])
            return command

    if sys.platform == "darwin" and MACOS_APP.is_dir():
        logger.info(f"Opening {path} with {MACOS_APP.name}")
        _spawn(["open", "-na", MACOS_APP.name, "--args", str(path)])
        return MACOS_APP.name

    raise IDENotAvailableError(f"Could not find IntelliJ IDEA command. Please open manually: {path}")
