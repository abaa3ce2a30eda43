"""Branch switching across worktrees."""

from typing import List, Optional, TYPE_CHECKING

from git_worktree_flow.constants import ACTION_CANCEL, ACTION_STASH_AND_SWITCH, STASH_MESSAGE_TEMPLATE
from git_worktree_flow.exceptions import (
    BranchNotFoundError,
    DirtyWorkingTreeError,
    NoCandidatesError,
    OrphanedWorktreeError,
    SelectionCancelledError,
)
from git_worktree_flow.models.branch import BranchEntry
from git_worktree_flow.models.results import SwitchOutcome, SwitchResult
from git_worktree_flow.services.git import BranchQueries, GitOperations, RepositoryContext, WorktreeService
from git_worktree_flow.services.notification_service import StateChangeEvent, StateChangeNotifier
from git_worktree_flow.services.prompt_service import Choice, Prompter
from git_worktree_flow.services.workspace_opener import WorkspaceOpener, open_workspace
from git_worktree_flow.utils.logging import get_logger

if TYPE_CHECKING:
    from git_worktree_flow.config import Config

logger = get_logger(__name__)


def describe_target(entry: BranchEntry) -> str:
    """Description shown next to a branch in the switch menu."""
    if entry.is_orphaned:
        return f"(worktree missing: {entry.worktree_path})"
    if entry.is_current:
        if entry.is_main_worktree:
            return "← current (main worktree)"
        return f"← current (worktree: {entry.worktree_path})"
    if entry.is_main_worktree:
        return "(main worktree)"
    if entry.has_worktree:
        return f"worktree: {entry.worktree_path}"
    return "(no worktree, checks out in the current directory)"


class SwitchService:
    """Opens a branch's worktree, or checks the branch out in place."""

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

    def list_targets(self, context: RepositoryContext) -> List[BranchEntry]:
        """Worktrees with their branch, then local branches without a worktree."""
        worktrees = self.worktrees.list_worktrees(context.root)
        local_branches = self.queries.get_local_branches(context.root)

        entries = []
        worktree_branches = set()
        for wt in worktrees:
            if not wt.branch_name:
                continue  # Detached HEAD
            worktree_branches.add(wt.branch_name)
            entries.append(
                BranchEntry(
                    name=wt.branch_name,
                    worktree_path=wt.path,
                    is_current=context.is_current_directory(wt.path),
                    is_main_worktree=wt.is_main,
                    is_orphaned=wt.is_orphaned,
                )
            )
        for branch in local_branches:
            if branch not in worktree_branches:
                entries.append(BranchEntry(name=branch))
        return entries

    def switch_branch(
        self,
        context: RepositoryContext,
        branch_name: Optional[str] = None,
        stash: Optional[bool] = None,
    ) -> SwitchResult:
        """Switch to a branch.

        A branch with a worktree elsewhere is opened as a workspace; a branch
        without one is checked out in the current directory. Uncommitted
        changes block the checkout until they are stashed.

        Args:
            context: Validated repository context
            branch_name: Target branch; prompted when None
            stash: Stash uncommitted changes (True), refuse (False) or ask (None)

        Raises:
            NoCandidatesError: If there are no local branches
            BranchNotFoundError: If ``branch_name`` is not a local branch
            OrphanedWorktreeError: If the branch's worktree directory was deleted
            DirtyWorkingTreeError: If changes are present and ``stash`` is False
            SelectionCancelledError: If a prompt is dismissed or the user cancels
            GitOperationError: If stash or checkout fails
        """
        targets = self.list_targets(context)
        if not targets:
            raise NoCandidatesError("No local branches found.")

        if branch_name is None:
            current = next((t.name for t in targets if t.is_current), None)
            branch_name = self.prompter.select(
                f"Current branch: {current or '(detached)'}, switch to",
                [Choice(label=t.name, value=t.name, description=describe_target(t)) for t in targets],
            )
            if branch_name is None:
                raise SelectionCancelledError("branch")

        target = next((t for t in targets if t.name == branch_name), None)
        if target is None:
            raise BranchNotFoundError(branch_name)

        if target.is_orphaned:
            raise OrphanedWorktreeError(branch_name, target.worktree_path)

        if target.has_worktree:
            if context.is_current_directory(target.worktree_path):
                logger.info(f"Already on '{branch_name}' in {target.worktree_path}")
                return SwitchResult(branch_name, SwitchOutcome.ALREADY_CURRENT, target.worktree_path)

            # Already checked out there; nothing to run
            open_workspace(self.opener, target.worktree_path)
            return SwitchResult(branch_name, SwitchOutcome.OPENED_WORKTREE, target.worktree_path)

        return self._checkout_in_place(context, branch_name, stash)

    def _checkout_in_place(self, context: RepositoryContext, branch_name: str, stash: Optional[bool]) -> SwitchResult:
        directory = str(context.current_directory)

        # Re-read: the tree may have changed since the menu was built
        changes = self.queries.get_working_tree_status(directory)
        stashed = False
        if changes:
            if stash is None:
                action = self.prompter.choose_action(
                    f"You have uncommitted changes. Switching to '{branch_name}' may cause issues.",
                    [ACTION_STASH_AND_SWITCH, ACTION_CANCEL],
                )
                if action != ACTION_STASH_AND_SWITCH:
                    raise SelectionCancelledError("uncommitted changes")
            elif not stash:
                raise DirtyWorkingTreeError(directory, [f.path for f in changes])

            self.operations.stash_push(directory, STASH_MESSAGE_TEMPLATE.format(branch=branch_name))
            stashed = True

        self.operations.checkout(directory, branch_name)
        self.notifier.notify(StateChangeEvent("switch", str(context.root), directory, branch_name))
        return SwitchResult(branch_name, SwitchOutcome.CHECKED_OUT, directory, stashed=stashed)
