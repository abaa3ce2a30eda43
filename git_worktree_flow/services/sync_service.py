"""Sync with the default integration branch, and re-sync after conflicts.

The state of a sync is never stored. It is derived from the directory every
time (MERGE_HEAD present? unmerged paths left?), so a conflicted merge can
be finished after any amount of time, from any process.
"""

import os
from dataclasses import dataclass
from typing import List, Optional, Union, TYPE_CHECKING

from git_worktree_flow.constants import ACTION_ABORT_MERGE, ACTION_OPEN_WORKSPACE
from git_worktree_flow.exceptions import (
    DirtyWorkingTreeError,
    GitOperationError,
    MissingDirectoryError,
    NoCandidatesError,
    NothingToDoError,
    OrphanedWorktreeError,
    SelectionCancelledError,
    UnresolvedConflictsError,
    WorktreeBranchMismatchError,
)
from git_worktree_flow.models.branch import BranchEntry
from git_worktree_flow.models.results import ResyncResult, SyncResult
from git_worktree_flow.models.sync import ConflictAction, SyncState
from git_worktree_flow.services.git import BranchQueries, GitOperations, RepositoryContext, WorktreeService
from git_worktree_flow.services.notification_service import StateChangeEvent, StateChangeNotifier
from git_worktree_flow.services.prompt_service import Choice, Prompter
from git_worktree_flow.services.workspace_opener import WorkspaceOpener, open_workspace
from git_worktree_flow.utils.logging import get_logger

if TYPE_CHECKING:
    from git_worktree_flow.config import Config

logger = get_logger(__name__)

Directory = Union[str, os.PathLike]

CONFLICT_ACTIONS = {
    ACTION_OPEN_WORKSPACE: ConflictAction.OPEN,
    ACTION_ABORT_MERGE: ConflictAction.ABORT,
}


def _require_directory(directory: Directory) -> None:
    if not os.path.isdir(directory):
        raise MissingDirectoryError(os.fspath(directory))


@dataclass
class SyncTarget:
    """Where a branch's merge has to run."""
    branch_name: str
    directory: str
    has_worktree: bool  # Checked out somewhere (primary directory included)


class SyncService:
    """Conflict-aware merge of the default integration branch."""

    def __init__(
        self,
        queries: BranchQueries,
        worktrees: WorktreeService,
        operations: GitOperations,
        notifier: StateChangeNotifier,
        prompter: Prompter,
        opener: WorkspaceOpener,
        config: "Config",
    ):
        self.queries = queries
        self.worktrees = worktrees
        self.operations = operations
        self.notifier = notifier
        self.prompter = prompter
        self.opener = opener
        self.config = config

    def derive_state(self, directory: Directory) -> SyncState:
        """Read the sync state of ``directory`` from disk."""
        _require_directory(directory)
        if not self.queries.is_merge_in_progress(directory):
            return SyncState.IDLE
        if self.queries.get_conflict_files(directory):
            return SyncState.CONFLICTED
        return SyncState.READY_TO_FINALIZE

    def list_targets(self, context: RepositoryContext) -> List[BranchEntry]:
        """Branches with a worktree first, then local branches without one."""
        worktrees = self.worktrees.list_worktrees(context.root)
        entries = [
            BranchEntry(
                name=wt.branch_name,
                worktree_path=wt.path,
                is_main_worktree=wt.is_main,
                is_orphaned=wt.is_orphaned,
            )
            for wt in worktrees
            if wt.branch_name
        ]
        in_worktree = {entry.name for entry in entries}
        entries.extend(
            BranchEntry(name=branch)
            for branch in self.queries.get_local_branches(context.root)
            if branch not in in_worktree
        )
        return entries

    def resolve_target(self, context: RepositoryContext, branch_name: str) -> SyncTarget:
        """The branch's worktree if it has one, else the primary directory."""
        worktree = self.worktrees.find_worktree_for_branch(context.root, branch_name)
        if worktree is not None:
            if worktree.is_orphaned:
                raise OrphanedWorktreeError(branch_name, worktree.path)
            return SyncTarget(branch_name, worktree.path, has_worktree=True)
        return SyncTarget(branch_name, str(context.root), has_worktree=False)

    def _prepare_target(self, target: SyncTarget) -> None:
        """Make sure ``target.directory`` has ``target.branch_name`` checked out."""
        checked_out = self.queries.get_current_branch(target.directory)
        if checked_out == target.branch_name:
            return

        if target.has_worktree:
            # Never change a worktree's branch out from under it
            raise WorktreeBranchMismatchError(target.directory, target.branch_name, checked_out)

        changes = self.queries.get_working_tree_status(target.directory)
        if changes:
            raise DirtyWorkingTreeError(target.directory, [f.path for f in changes])
        self.operations.checkout(target.directory, target.branch_name)

    def sync(
        self,
        context: RepositoryContext,
        branch_name: Optional[str] = None,
        on_conflict: Optional[ConflictAction] = None,
    ) -> SyncResult:
        """Merge the default integration branch into ``branch_name``.

        Args:
            context: Validated repository context
            branch_name: Branch to sync; prompted when None
            on_conflict: What to do if the merge conflicts; prompted when None.
                A dismissed prompt leaves the merge in progress.

        Returns:
            SyncResult; ``state`` is IDLE after a clean merge or an abort and
            CONFLICTED when the merge was left for manual resolution

        Raises:
            SelectionCancelledError: If the branch prompt is dismissed
            WorktreeBranchMismatchError: If the branch's worktree has another branch checked out
            OrphanedWorktreeError: If the branch's worktree directory was deleted
            DirtyWorkingTreeError: If a checkout is needed over uncommitted changes
            GitOperationError: Fetch failure, or a merge failure that left no conflicts
        """
        self.operations.fetch(context.root)
        base_ref = self.queries.get_default_remote_branch(context.root)

        if branch_name is None:
            targets = self.list_targets(context)
            if not targets:
                raise NoCandidatesError("No local branches found to sync.")
            branch_name = self.prompter.select(
                f"Select a branch to sync with {base_ref}",
                [
                    Choice(
                        label=t.name,
                        value=t.name,
                        description=(
                            "(main worktree)" if t.is_main_worktree
                            else f"worktree missing: {t.worktree_path}" if t.is_orphaned
                            else f"worktree: {t.worktree_path}" if t.has_worktree
                            else "(no worktree, syncs in the main directory)"
                        ),
                    )
                    for t in targets
                ],
            )
            if branch_name is None:
                raise SelectionCancelledError("branch")

        target = self.resolve_target(context, branch_name)
        self._prepare_target(target)

        head_before = self.queries.get_head_commit(target.directory)
        logger.info(f"Syncing '{branch_name}' with {base_ref} in {target.directory}")
        try:
            self.operations.merge(target.directory, base_ref, no_edit=True)
        except GitOperationError as error:
            conflict_files = self.queries.get_conflict_files(target.directory)
            if not conflict_files:
                # Not a conflict: surface git's own failure
                raise
            logger.warning(f"Merge conflicts in '{branch_name}': {', '.join(conflict_files)}")
            result = SyncResult(
                branch_name=branch_name,
                directory=target.directory,
                base_ref=base_ref,
                state=SyncState.CONFLICTED,
                conflict_files=conflict_files,
            )
            self.notifier.notify(
                StateChangeEvent("sync", str(context.root), target.directory, branch_name)
            )
            return self._handle_conflict(context, result, on_conflict)

        # MERGING_CLEAN only lasts until git has committed the merge itself
        logger.debug(f"{target.directory}: {SyncState.MERGING_CLEAN.value}")
        state = self.derive_state(target.directory)
        head_after = self.queries.get_head_commit(target.directory)

        self.notifier.notify(StateChangeEvent("sync", str(context.root), target.directory, branch_name))
        return SyncResult(
            branch_name=branch_name,
            directory=target.directory,
            base_ref=base_ref,
            state=state,
            merge_commit=head_after if head_after != head_before else None,
        )

    def _handle_conflict(
        self, context: RepositoryContext, result: SyncResult, on_conflict: Optional[ConflictAction]
    ) -> SyncResult:
        action = on_conflict
        if action is None:
            label = self.prompter.choose_action(
                f"Merge conflicts detected in '{result.branch_name}'! Please resolve them.",
                list(CONFLICT_ACTIONS),
            )
            action = CONFLICT_ACTIONS.get(label)

        result.action = action
        if action == ConflictAction.OPEN:
            open_workspace(self.opener, result.directory)
        elif action == ConflictAction.ABORT:
            self.abort(context, result.directory)
            result.state = self.derive_state(result.directory)
        else:
            logger.info(f"Conflicts left in place in {result.directory}; re-sync when resolved")
        return result

    def abort(self, context: RepositoryContext, directory: Directory) -> None:
        """Abort the merge in progress in ``directory``.

        Raises:
            MissingDirectoryError: If ``directory`` does not exist
            NothingToDoError: If no merge is in progress
            GitOperationError: If git cannot abort
        """
        _require_directory(directory)
        if not self.queries.is_merge_in_progress(directory):
            raise NothingToDoError(f"No merge in progress in {os.fspath(directory)}.")
        self.operations.merge_abort(directory)
        self.notifier.notify(StateChangeEvent("abort", str(context.root), os.fspath(directory)))

    def resync(self, context: RepositoryContext, directory: Directory) -> ResyncResult:
        """Finalize a merge once every conflict in ``directory`` is resolved.

        ``directory`` is the one returned by :meth:`sync`; it is not derived
        from the branch again.

        Returns:
            ResyncResult; ``finalized`` is False when no merge was in progress

        Raises:
            MissingDirectoryError: If ``directory`` does not exist
            UnresolvedConflictsError: Listing every file that is still conflicted
            GitOperationError: If staging or committing fails
        """
        directory = os.fspath(directory)
        _require_directory(directory)
        if not self.queries.is_merge_in_progress(directory):
            logger.info(f"No merge in progress in {directory}; nothing to finalize")
            return ResyncResult(directory=directory, finalized=False)

        conflict_files = self.queries.get_conflict_files(directory)
        if conflict_files:
            raise UnresolvedConflictsError(directory, conflict_files)

        self.operations.stage_all(directory)
        self.operations.commit(directory, message=None)

        branch_name = self.queries.get_current_branch(directory)
        commit = self.queries.get_head_commit(directory)
        logger.info(f"Merge finalized on '{branch_name}' ({commit})")
        self.notifier.notify(StateChangeEvent("resync", str(context.root), directory, branch_name))
        return ResyncResult(directory=directory, finalized=True, commit=commit, branch_name=branch_name)
