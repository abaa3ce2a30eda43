"""Workflow result payloads and the structured result returned to callers."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional

from git_worktree_flow.models.branch import BranchEntry
from git_worktree_flow.models.sync import ConflictAction, SyncState


class FailureKind(Enum):
    """Failure taxonomy reported across the workflow boundary."""
    CANCELLED = "cancelled"  # User dismissed a prompt; never shown as an error
    PRECONDITION_FAILED = "precondition-failed"
    EXECUTOR_FAILURE = "executor-failure"
    PARTIAL_BATCH_FAILURE = "partial-batch-failure"


class SwitchOutcome(Enum):
    """How a switch request was satisfied."""
    ALREADY_CURRENT = "already-current"
    OPENED_WORKTREE = "opened-worktree"
    CHECKED_OUT = "checked-out"


@dataclass
class CreateResult:
    branch_name: str
    worktree_path: str
    base_ref: str


@dataclass
class SwitchResult:
    branch_name: str
    outcome: SwitchOutcome
    directory: str
    stashed: bool = False


@dataclass
class SyncResult:
    """Outcome of one sync attempt.

    ``directory`` is the merge target; pass it back to resync/abort when the
    sync ended CONFLICTED.
    """
    branch_name: str
    directory: str
    base_ref: str
    state: SyncState
    conflict_files: List[str] = field(default_factory=list)
    merge_commit: Optional[str] = None  # New HEAD when the merge created/moved a commit
    action: Optional[ConflictAction] = None


@dataclass
class ResyncResult:
    directory: str
    finalized: bool  # False: no merge was in progress
    commit: Optional[str] = None
    branch_name: Optional[str] = None


@dataclass
class RemovalFailure:
    branch: str
    reason: str


@dataclass
class RemovalResult:
    succeeded: List[str] = field(default_factory=list)
    failed: List[RemovalFailure] = field(default_factory=list)
    removed_worktrees: List[str] = field(default_factory=list)
    remote_deleted: List[str] = field(default_factory=list)

    @property
    def has_failures(self) -> bool:
        return bool(self.failed)


@dataclass
class CommitResult:
    branch_name: str
    commit: Optional[str]
    message: str
    files: List[str] = field(default_factory=list)


@dataclass
class PushResult:
    branch_name: str
    commits: List[str] = field(default_factory=list)
    set_upstream: bool = False


@dataclass
class Overview:
    """Read-only snapshot of local branches for display."""
    entries: List[BranchEntry] = field(default_factory=list)
    base_ref: Optional[str] = None  # None: default branch could not be resolved


@dataclass
class WorkflowFailure:
    kind: FailureKind
    operation: str
    message: str
    items: List[RemovalFailure] = field(default_factory=list)


@dataclass
class WorkflowResult:
    """What every public workflow entry point returns."""
    operation: str
    payload: Any = None
    failure: Optional[WorkflowFailure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @property
    def cancelled(self) -> bool:
        return self.failure is not None and self.failure.kind == FailureKind.CANCELLED

    @classmethod
    def success(cls, operation: str, payload: Any = None) -> "WorkflowResult":
        return cls(operation=operation, payload=payload)

    @classmethod
    def failed(
        cls,
        operation: str,
        kind: FailureKind,
        message: str,
        payload: Any = None,
        items: Optional[List[RemovalFailure]] = None,
    ) -> "WorkflowResult":
        return cls(
            operation=operation,
            payload=payload,
            failure=WorkflowFailure(kind, operation, message, list(items or [])),
        )
