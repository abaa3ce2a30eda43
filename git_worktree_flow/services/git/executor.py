"""Git command execution for git-worktree-flow."""

import os
from typing import Optional, Union

import git

from git_worktree_flow.exceptions import GitOperationError
from git_worktree_flow.utils.logging import get_logger

logger = get_logger(__name__)


class GitExecutor:
    """Runs one git command in one directory and returns its output.

    Every command goes through :meth:`run`, so a single spy observes all
    traffic to git. Failures surface as :class:`GitOperationError` carrying
    git's own message.
    """

    def run(
        self,
        directory: Union[str, os.PathLike],
        *args: str,
        operation: Optional[str] = None,
        branch: Optional[str] = None,
    ) -> str:
        """Run ``git <args>`` with ``directory`` as working directory.

        Args:
            directory: Working directory for the command
            *args: git arguments, e.g. ("merge", "origin/main", "--no-edit")
            operation: Name reported on failure (defaults to the git subcommand)
            branch: Branch reported on failure

        Returns:
            Captured stdout without the trailing newline

        Raises:
            GitOperationError: If git exits non-zero or cannot be started
        """
        command = ["git", *args]
        operation = operation or args[0]
        if not os.path.isdir(directory):
            # GitPython would fall back to the process cwd
            raise GitOperationError(operation, branch, f"directory does not exist: {os.fspath(directory)}")
        logger.debug(f"[{directory}] {' '.join(command)}")
        try:
            return git.Git(os.fspath(directory)).execute(command)
        except git.exc.GitCommandError as e:
            error = GitOperationError.from_command_error(operation, e, branch)
            logger.debug(f"[{directory}] {error}")
            raise error from e
        except (git.exc.GitCommandNotFound, FileNotFoundError, NotADirectoryError) as e:
            raise GitOperationError(operation, branch, f"cannot run git in {directory}: {e}") from e
