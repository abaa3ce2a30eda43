"""Git-related services for git-worktree-flow."""

from .executor import GitExecutor
from .repository import RepositoryContext, same_path
from .operations import GitOperations
from .worktrees import WorktreeService
from .branch_queries import BranchQueries

__all__ = [
    "GitExecutor",
    "RepositoryContext",
    "same_path",
    "GitOperations",
    "WorktreeService",
    "BranchQueries",
]
