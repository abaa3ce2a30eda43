"""Branch model and related enums"""
from enum import Enum
from dataclasses import dataclass
from typing import Optional

from git_worktree_flow.constants import STATUS_LABELS


class CreateMode(Enum):
    """Ways to pick the base of a new branch."""
    FROM_DEFAULT = "default"  # Default integration branch on the remote
    FROM_LOCAL = "local"  # An existing local branch
    CLONE_REMOTE = "remote"  # A remote branch, kept under its own name


CREATE_MODE_LABELS = {
    CreateMode.FROM_DEFAULT: "Create from the remote default branch",
    CreateMode.FROM_LOCAL: "Create from a local branch",
    CreateMode.CLONE_REMOTE: "Clone a remote branch",
}


@dataclass
class FileStatus:
    """One entry of `git status --porcelain`."""
    path: str
    index_status: str  # X column
    worktree_status: str  # Y column

    @property
    def code(self) -> str:
        """Two-column status code with padding removed (e.g. "M", "MM", "??")."""
        return f"{self.index_status}{self.worktree_status}".strip()

    @property
    def label(self) -> str:
        return STATUS_LABELS.get(self.code, self.code)

    @property
    def is_untracked(self) -> bool:
        return self.index_status == "?" and self.worktree_status == "?"

    @property
    def is_staged(self) -> bool:
        return self.index_status in ("M", "A", "D", "R", "C")

    @property
    def is_modified(self) -> bool:
        return self.worktree_status in ("M", "D")


@dataclass
class Divergence:
    """Commit counts between a branch and a reference."""
    ahead: int
    behind: int

    @property
    def is_synced(self) -> bool:
        return self.ahead == 0 and self.behind == 0


@dataclass
class BranchEntry:
    """A local branch together with its dedicated directory, if any."""
    name: str
    worktree_path: Optional[str] = None
    is_current: bool = False  # Checked out in the directory being inspected
    is_main_worktree: bool = False  # Checked out in the primary directory
    is_orphaned: bool = False  # Registered worktree whose directory is gone
    dirty: Optional[bool] = None  # None = not checked (no directory)
    divergence: Optional[Divergence] = None  # Against the default integration branch

    @property
    def has_worktree(self) -> bool:
        return self.worktree_path is not None
