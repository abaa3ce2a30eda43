"""Batch removal of branches together with their worktrees."""

from typing import List, Optional, TYPE_CHECKING

from git_worktree_flow.constants import ACTION_DELETE, ACTION_DELETE_WITH_REMOTE, REMOTE_REF_MISSING
from git_worktree_flow.exceptions import (
    GitOperationError,
    NoCandidatesError,
    PreconditionError,
    SelectionCancelledError,
    WorktreeFlowError,
)
from git_worktree_flow.models.branch import BranchEntry
from git_worktree_flow.models.results import RemovalFailure, RemovalResult
from git_worktree_flow.services.git import BranchQueries, GitOperations, RepositoryContext, WorktreeService
from git_worktree_flow.services.notification_service import StateChangeEvent, StateChangeNotifier
from git_worktree_flow.services.prompt_service import Choice, Prompter
from git_worktree_flow.utils.logging import get_logger

if TYPE_CHECKING:
    from git_worktree_flow.config import Config

logger = get_logger(__name__)


def removal_warning(entries: List[BranchEntry]) -> str:
    """Confirmation text naming every worktree that will be force-removed."""
    lines = [f"Delete {len(entries)} branch(es)? This cannot be undone."]
    with_worktree = [e for e in entries if e.has_worktree]
    if with_worktree:
        lines.append("These worktrees will be removed, discarding any uncommitted changes:")
        lines.extend(f"  {e.name}: {e.worktree_path}" for e in with_worktree)
    return "\n".join(lines)


class RemovalService:
    """Deletes branches and their worktrees, one item at a time.

    A failing item never stops the batch; every outcome is reported.
    """

    def __init__(
        self,
        queries: BranchQueries,
        worktrees: WorktreeService,
        operations: GitOperations,
        notifier: StateChangeNotifier,
        prompter: Prompter,
        config: "Config",
    ):
        self.queries = queries
        self.worktrees = worktrees
        self.operations = operations
        self.notifier = notifier
        self.prompter = prompter
        self.config = config

    def list_candidates(self, context: RepositoryContext) -> List[BranchEntry]:
        """Local branches that can be removed.

        The branch checked out in the primary directory and the one checked
        out where the command runs are never offered.
        """
        protected = {self.queries.get_current_branch(context.root)}
        if not context.is_current_directory(context.root):
            protected.add(self.queries.get_current_branch(context.current_directory))

        by_branch = {
            wt.branch_name: wt for wt in self.worktrees.list_worktrees(context.root) if wt.branch_name
        }
        candidates = []
        for branch in self.queries.get_local_branches(context.root):
            if branch in protected:
                continue
            wt = by_branch.get(branch)
            if wt is not None and wt.is_main:
                continue
            candidates.append(BranchEntry(name=branch, worktree_path=wt.path if wt else None))
        return candidates

    def remove_branches(
        self,
        context: RepositoryContext,
        selection: Optional[List[str]] = None,
        delete_remote: Optional[bool] = None,
        assume_yes: bool = False,
    ) -> RemovalResult:
        """Remove the selected branches and their worktrees.

        Args:
            context: Validated repository context
            selection: Branch names; prompted when None
            delete_remote: Also delete ``<remote>/<branch>``; None uses the
                configured default, or the confirmation choice when prompting
            assume_yes: Skip the confirmation prompt

        Returns:
            RemovalResult listing successes and per-item failures

        Raises:
            NoCandidatesError: If nothing can be removed
            PreconditionError: If a named branch is not a candidate
            SelectionCancelledError: If a prompt is dismissed
        """
        candidates = self.list_candidates(context)
        by_name = {c.name: c for c in candidates}

        if selection is None:
            if not candidates:
                raise NoCandidatesError("No branches available to remove.")
            selection = self.prompter.select_many(
                "Select branches to remove",
                [
                    Choice(
                        label=c.name,
                        value=c.name,
                        description=f"worktree: {c.worktree_path}" if c.has_worktree else "(no worktree)",
                    )
                    for c in candidates
                ],
            )
            if not selection:
                raise SelectionCancelledError("branches")

        unknown = [name for name in selection if name not in by_name]
        if unknown:
            raise PreconditionError(f"Cannot remove: {', '.join(unknown)} (current, main or unknown branch)")
        entries = [by_name[name] for name in selection]

        if not assume_yes:
            action = self.prompter.choose_action(
                removal_warning(entries), [ACTION_DELETE, ACTION_DELETE_WITH_REMOTE]
            )
            if action is None:
                raise SelectionCancelledError("confirmation")
            if delete_remote is None:
                delete_remote = action == ACTION_DELETE_WITH_REMOTE
        if delete_remote is None:
            delete_remote = self.config.delete_remote

        result = RemovalResult()
        for entry in entries:
            try:
                self._remove_one(context, entry.name, delete_remote, result)
                result.succeeded.append(entry.name)
            except WorktreeFlowError as e:
                logger.warning(f"Failed to remove '{entry.name}': {e}")
                result.failed.append(RemovalFailure(entry.name, str(e)))

        if result.removed_worktrees:
            self.worktrees.prune_worktrees(context.root)
        if result.succeeded:
            self.notifier.notify(StateChangeEvent("remove", str(context.root)))
        return result

    def _remove_one(
        self, context: RepositoryContext, branch: str, delete_remote: bool, result: RemovalResult
    ) -> None:
        # Worktrees may have changed since the menu was built
        worktree = self.worktrees.find_worktree_for_branch(context.root, branch)
        if worktree is not None:
            if worktree.is_main:
                raise PreconditionError(f"'{branch}' is checked out in the main worktree")
            self.worktrees.remove_worktree(context.root, worktree.path, force=True)
            result.removed_worktrees.append(worktree.path)

        self.operations.delete_branch(context.root, branch, force=True)

        if delete_remote:
            try:
                self.operations.delete_remote_branch(context.root, branch)
                result.remote_deleted.append(branch)
            except GitOperationError as e:
                if REMOTE_REF_MISSING in str(e):
                    logger.info(f"No remote branch for '{branch}'; skipped")
                    return
                raise GitOperationError(
                    "delete_remote_branch",
                    branch,
                    f"local branch deleted, remote deletion failed: {e.message}",
                ) from e
