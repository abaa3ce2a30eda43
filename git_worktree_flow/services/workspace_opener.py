"""Hand a directory to the user as a workspace."""

import os
import shlex
import subprocess
from typing import Optional, Union

from rich.console import Console
from rich.markup import escape

from git_worktree_flow.exceptions import WorktreeFlowError
from git_worktree_flow.utils.logging import get_logger

logger = get_logger(__name__)


class WorkspaceOpener:
    """Interface: present ``path`` to the user as a separate workspace."""

    def open(self, path: Union[str, os.PathLike]) -> None:
        raise NotImplementedError


class ConsoleWorkspaceOpener(WorkspaceOpener):
    """Prints the directory so the user can cd into it."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def open(self, path: Union[str, os.PathLike]) -> None:
        path = os.fspath(path)
        self.console.print(f"[bold cyan]Workspace:[/bold cyan] {escape(path)}")
        self.console.print(f"  [dim]cd {escape(shlex.quote(path))}[/dim]")


class CommandWorkspaceOpener(WorkspaceOpener):
    """Launches an editor command with the directory appended, e.g. ``code --new-window``."""

    def __init__(self, command: str):
        self.command = shlex.split(command)
        if not self.command:
            raise ValueError("open command cannot be empty")

    def open(self, path: Union[str, os.PathLike]) -> None:
        args = [*self.command, os.fspath(path)]
        logger.info(f"Opening workspace: {' '.join(args)}")
        try:
            # Detached: the editor outlives this process
            subprocess.Popen(
                args,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
        except OSError as e:
            raise WorktreeFlowError(f"Could not run '{self.command[0]}': {e}") from e


def create_workspace_opener(open_command: Optional[str], console: Optional[Console] = None) -> WorkspaceOpener:
    """Build the opener configured by ``open_command`` (None prints the path)."""
    if open_command:
        return CommandWorkspaceOpener(open_command)
    return ConsoleWorkspaceOpener(console)


def open_workspace(opener: WorkspaceOpener, path: Union[str, os.PathLike]) -> bool:
    """Open ``path`` after a completed mutation; a launch failure is only logged.

    Returns:
        True if the opener succeeded
    """
    try:
        opener.open(path)
        return True
    except WorktreeFlowError as e:
        logger.warning(f"{e}. Open {os.fspath(path)} manually.")
        return False
