"""Custom exceptions for git-worktree-flow"""

from typing import Optional

import git


def _command_output(value: Optional[str]) -> str:
    """Strip GitPython's "stderr: '...'" decoration from captured output."""
    text = (value or "").strip()
    for prefix in ("stderr: '", "stdout: '"):
        if text.startswith(prefix) and text.endswith("'"):
            return text[len(prefix):-1].strip()
    return text


class WorktreeFlowError(Exception):
    """Base exception for all git-worktree-flow errors."""
    pass


class GitOperationError(WorktreeFlowError):
    """Exception raised for errors in Git operations."""

    def __init__(self, operation: str, branch: Optional[str] = None, message: Optional[str] = None):
        self.operation = operation
        self.branch = branch
        self.message = message

        error_msg = f"Git operation '{operation}' failed"
        if branch:
            error_msg += f" for branch '{branch}'"
        if message:
            error_msg += f": {message}"

        super().__init__(error_msg)

    @classmethod
    def from_command_error(
        cls, operation: str, error: git.exc.GitCommandError, branch: Optional[str] = None
    ) -> "GitOperationError":
        """Build from a GitCommandError, keeping git's own diagnostic text."""
        stderr = _command_output(getattr(error, "stderr", None))
        stdout = _command_output(getattr(error, "stdout", None))
        status = getattr(error, "status", "unknown")

        message = stderr or stdout or f"git exited with code {status}"
        return cls(operation, branch, message)


class DefaultBranchNotFoundError(GitOperationError):
    """Exception raised when no default integration branch can be resolved."""

    def __init__(self, remote: str, candidates: list[str]):
        tried = ", ".join(f"{remote}/{name}" for name in candidates)
        super().__init__(
            "resolve_default_branch",
            message=f"{remote}/HEAD is not set and none of [{tried}] exist",
        )


class RepositoryNotFoundError(WorktreeFlowError):
    """Exception raised when a path is not (or no longer) a git working tree."""

    def __init__(self, path: str, reason: Optional[str] = None):
        self.path = path
        error_msg = f"Not a git repository: {path}"
        if reason:
            error_msg += f" ({reason})"
        super().__init__(error_msg)


class PreconditionError(WorktreeFlowError):
    """A workflow cannot proceed; raised before any mutating step."""
    pass


class InvalidBranchNameError(PreconditionError):
    """Exception raised for branch names git-worktree-flow refuses to create."""

    def __init__(self, branch: str, reason: str):
        self.branch = branch
        self.reason = reason
        super().__init__(f"Invalid branch name '{branch}': {reason}")


class DirtyWorkingTreeError(PreconditionError):
    """Exception raised when uncommitted changes block a checkout."""

    def __init__(self, directory: str, files: list[str]):
        self.directory = directory
        self.files = files
        super().__init__(
            f"Uncommitted changes in {directory}: {', '.join(files)}. "
            "Stash or commit them before switching."
        )


class UnresolvedConflictsError(PreconditionError):
    """Exception raised when a merge cannot be finalized yet."""

    def __init__(self, directory: str, files: list[str]):
        self.directory = directory
        self.files = files
        super().__init__(
            f"Unresolved conflicts remain in {directory}: {', '.join(files)}. "
            "Resolve them before re-syncing."
        )


class WorktreeBranchMismatchError(PreconditionError):
    """Exception raised when a worktree is not on the branch it is registered for."""

    def __init__(self, directory: str, expected: str, actual: str):
        self.directory = directory
        self.expected = expected
        self.actual = actual
        super().__init__(f"Worktree at {directory} is on '{actual}', expected '{expected}'")


class MissingDirectoryError(PreconditionError):
    """Exception raised when a target directory no longer exists."""

    def __init__(self, directory: str):
        self.directory = directory
        super().__init__(f"Directory does not exist: {directory}")


class OrphanedWorktreeError(PreconditionError):
    """Exception raised when a branch's worktree directory has been deleted."""

    def __init__(self, branch: str, directory: str):
        self.branch = branch
        self.directory = directory
        super().__init__(
            f"Worktree for '{branch}' at {directory} no longer exists. "
            "Remove the branch, or run 'git worktree prune' to detach it."
        )


class BranchNotFoundError(PreconditionError):
    """Exception raised when a branch is not found."""

    def __init__(self, branch: str):
        self.branch = branch
        super().__init__(f"Branch '{branch}' not found")


class NoCandidatesError(PreconditionError):
    """Exception raised when there is nothing for the user to choose from."""
    pass


class NothingToDoError(PreconditionError):
    """Exception raised when a workflow has no work (nothing to commit or push)."""
    pass


class SelectionCancelledError(WorktreeFlowError):
    """The user dismissed a prompt; the workflow stops without reporting an error."""

    def __init__(self, step: str = "prompt"):
        self.step = step
        super().__init__(f"Cancelled at {step}")
