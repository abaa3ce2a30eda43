"""Core functionality for git-worktree-flow"""

import os
from typing import Callable, List, Optional, Union

from git_worktree_flow.config import Config
from git_worktree_flow.exceptions import (
    DefaultBranchNotFoundError,
    GitOperationError,
    PreconditionError,
    RepositoryNotFoundError,
    SelectionCancelledError,
    WorktreeFlowError,
)
from git_worktree_flow.models.branch import CreateMode
from git_worktree_flow.models.results import FailureKind, Overview, WorkflowResult
from git_worktree_flow.models.sync import ConflictAction, StageMode
from git_worktree_flow.services.commit_service import CommitService
from git_worktree_flow.services.creation_service import CreationService
from git_worktree_flow.services.git import (
    BranchQueries,
    GitExecutor,
    GitOperations,
    RepositoryContext,
    WorktreeService,
)
from git_worktree_flow.services.notification_service import (
    Listener,
    StateChangeNotifier,
    SubscriptionToken,
)
from git_worktree_flow.services.prompt_service import Prompter, RichPrompter
from git_worktree_flow.services.removal_service import RemovalService
from git_worktree_flow.services.switch_service import SwitchService
from git_worktree_flow.services.sync_service import SyncService
from git_worktree_flow.services.workspace_opener import WorkspaceOpener, create_workspace_opener
from git_worktree_flow.utils.logging import get_logger

logger = get_logger(__name__)

Directory = Union[str, os.PathLike]


class WorktreeFlow:
    """Entry point for every branch and worktree workflow.

    Each public workflow returns a :class:`WorkflowResult`; exceptions raised
    by the services are translated here and never escape.
    """

    def __init__(
        self,
        path: Directory,
        config: Optional[Union[Config, dict]] = None,
        prompter: Optional[Prompter] = None,
        opener: Optional[WorkspaceOpener] = None,
        executor: Optional[GitExecutor] = None,
    ):
        """Initialize WorktreeFlow.

        Args:
            path: Any directory inside the repository (a linked worktree is fine)
            config: Configuration dict or Config object; None uses defaults
            prompter: Interactive surface; defaults to numbered rich menus
            opener: How directories are handed to the user; defaults to the
                configured open command, or printing the path
            executor: Git command runner (tests pass a spy)
        """
        self.path = os.fspath(path)
        if isinstance(config, dict):
            self.config = Config.from_dict(config)
        else:
            self.config = config or Config()

        self.executor = executor or GitExecutor()
        self.notifier = StateChangeNotifier()
        self.prompter = prompter or RichPrompter()
        self.opener = opener or create_workspace_opener(self.config.open_command)

        self.queries = BranchQueries(self.executor, self.config)
        self.worktrees = WorktreeService(self.executor)
        self.operations = GitOperations(self.executor, self.config)

        shared = (self.queries, self.worktrees, self.operations, self.notifier, self.prompter)
        self.creation_service = CreationService(*shared, self.opener, self.config)
        self.switch_service = SwitchService(*shared, self.opener, self.config)
        self.sync_service = SyncService(*shared, self.opener, self.config)
        self.removal_service = RemovalService(*shared, self.config)
        self.commit_service = CommitService(
            self.queries, self.operations, self.notifier, self.prompter, self.config
        )

        self._context: Optional[RepositoryContext] = None

    def context(self) -> RepositoryContext:
        """Return a validated repository context.

        A cached context whose root no longer validates is dropped and the
        repository is discovered again from the original path.

        Raises:
            RepositoryNotFoundError: If no repository can be found
        """
        if self._context is not None:
            try:
                self._context = self._context.validate()
                return self._context
            except RepositoryNotFoundError as e:
                logger.info(f"Cached repository root is stale ({e}); discovering again")
                self._context = None

        self._context = RepositoryContext.discover(self.path).validate()
        return self._context

    def _run(self, operation: str, workflow: Callable[[RepositoryContext], object]) -> WorkflowResult:
        try:
            return WorkflowResult.success(operation, workflow(self.context()))
        except SelectionCancelledError as e:
            logger.debug(f"{operation}: {e}")
            return WorkflowResult.failed(operation, FailureKind.CANCELLED, str(e))
        except (PreconditionError, RepositoryNotFoundError) as e:
            logger.info(f"{operation}: {e}")
            return WorkflowResult.failed(operation, FailureKind.PRECONDITION_FAILED, str(e))
        except GitOperationError as e:
            logger.error(f"{operation}: {e}")
            return WorkflowResult.failed(operation, FailureKind.EXECUTOR_FAILURE, e.message or str(e))
        except WorktreeFlowError as e:
            logger.error(f"{operation}: {e}")
            return WorkflowResult.failed(operation, FailureKind.EXECUTOR_FAILURE, str(e))
        except Exception as e:
            logger.exception(f"Unexpected error during {operation}")
            return WorkflowResult.failed(operation, FailureKind.EXECUTOR_FAILURE, f"Unexpected error: {e}")

    # Workflows

    def create_branch(
        self,
        mode: Optional[CreateMode] = None,
        base: Optional[str] = None,
        branch_name: Optional[str] = None,
    ) -> WorkflowResult:
        return self._run(
            "create",
            lambda ctx: self.creation_service.create_branch(ctx, mode=mode, base=base, branch_name=branch_name),
        )

    def switch_branch(self, branch_name: Optional[str] = None, stash: Optional[bool] = None) -> WorkflowResult:
        return self._run(
            "switch", lambda ctx: self.switch_service.switch_branch(ctx, branch_name=branch_name, stash=stash)
        )

    def sync_branch(
        self, branch_name: Optional[str] = None, on_conflict: Optional[ConflictAction] = None
    ) -> WorkflowResult:
        return self._run(
            "sync", lambda ctx: self.sync_service.sync(ctx, branch_name=branch_name, on_conflict=on_conflict)
        )

    def resync(self, directory: Optional[Directory] = None) -> WorkflowResult:
        """Finalize a resolved merge in ``directory`` (the current directory by default)."""
        return self._run(
            "resync", lambda ctx: self.sync_service.resync(ctx, directory or ctx.current_directory)
        )

    def abort_merge(self, directory: Optional[Directory] = None) -> WorkflowResult:
        return self._run(
            "abort", lambda ctx: self.sync_service.abort(ctx, directory or ctx.current_directory)
        )

    def remove_branches(
        self,
        selection: Optional[List[str]] = None,
        delete_remote: Optional[bool] = None,
        assume_yes: bool = False,
    ) -> WorkflowResult:
        """Remove branches and their worktrees.

        Returns:
            Success when every item was removed; PARTIAL_BATCH_FAILURE when
            some were; EXECUTOR_FAILURE when none were. Failed items and
            their reasons are listed in ``failure.items``.
        """
        result = self._run(
            "remove",
            lambda ctx: self.removal_service.remove_branches(
                ctx, selection=selection, delete_remote=delete_remote, assume_yes=assume_yes
            ),
        )
        removal = result.payload
        if not result.ok or not removal.has_failures:
            return result

        if removal.succeeded:
            kind = FailureKind.PARTIAL_BATCH_FAILURE
            message = f"{len(removal.failed)} of {len(removal.succeeded) + len(removal.failed)} branch(es) could not be removed"
        else:
            kind = FailureKind.EXECUTOR_FAILURE
            message = "No branch could be removed"
        return WorkflowResult.failed("remove", kind, message, payload=removal, items=removal.failed)

    def commit(
        self,
        directory: Optional[Directory] = None,
        stage_mode: Optional[StageMode] = None,
        message: Optional[str] = None,
        paths: Optional[List[str]] = None,
    ) -> WorkflowResult:
        return self._run(
            "commit",
            lambda ctx: self.commit_service.commit(
                ctx, directory=directory, stage_mode=stage_mode, message=message, paths=paths
            ),
        )

    def push(self, directory: Optional[Directory] = None, assume_yes: bool = False) -> WorkflowResult:
        return self._run(
            "push", lambda ctx: self.commit_service.push(ctx, directory=directory, assume_yes=assume_yes)
        )

    # Read-only views

    def overview(self) -> WorkflowResult:
        """Local branches with worktree, working tree state and divergence."""
        return self._run("list", self._overview)

    def _overview(self, context: RepositoryContext) -> Overview:
        try:
            base_ref = self.queries.get_default_remote_branch(context.root)
        except DefaultBranchNotFoundError as e:
            logger.info(f"Divergence unavailable: {e}")
            base_ref = None

        entries = self.switch_service.list_targets(context)
        for entry in entries:
            if entry.has_worktree and not entry.is_orphaned:
                entry.dirty = self.queries.is_dirty(entry.worktree_path)
            if base_ref:
                entry.divergence = self.queries.get_divergence(context.root, entry.name, base_ref)
        return Overview(entries=entries, base_ref=base_ref)

    def sync_state(self, directory: Optional[Directory] = None) -> WorkflowResult:
        """Derive the sync state of ``directory`` (the current directory by default)."""
        return self._run(
            "state", lambda ctx: self.sync_service.derive_state(directory or ctx.current_directory)
        )

    # Notifications

    def subscribe(self, listener: Listener) -> SubscriptionToken:
        """Register ``listener`` for repository-state-changed events."""
        return self.notifier.subscribe(listener)

    def unsubscribe(self, token: SubscriptionToken) -> bool:
        return self.notifier.unsubscribe(token)
