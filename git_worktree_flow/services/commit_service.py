"""Commit and push from a branch's directory."""

import os
from typing import List, Optional, Union, TYPE_CHECKING

from git_worktree_flow.constants import ACTION_CANCEL, ACTION_PUSH
from git_worktree_flow.exceptions import NothingToDoError, PreconditionError, SelectionCancelledError
from git_worktree_flow.formatters import format_status_code
from git_worktree_flow.models.results import CommitResult, PushResult
from git_worktree_flow.models.sync import StageMode
from git_worktree_flow.services.git import BranchQueries, GitOperations, RepositoryContext
from git_worktree_flow.services.notification_service import StateChangeEvent, StateChangeNotifier
from git_worktree_flow.services.prompt_service import Choice, Prompter
from git_worktree_flow.utils.logging import get_logger

if TYPE_CHECKING:
    from git_worktree_flow.config import Config

logger = get_logger(__name__)

Directory = Union[str, os.PathLike]

STAGE_MODE_LABELS = {
    StageMode.ALL: "Stage all changes",
    StageMode.STAGED: "Commit staged changes only",
    StageMode.PICK: "Pick files to stage",
}


def _require_message(text: str) -> Optional[str]:
    if not text.strip():
        return "Commit message cannot be empty"
    return None


class CommitService:
    """Stages, commits and pushes the branch checked out in a directory."""

    def __init__(
        self,
        queries: BranchQueries,
        operations: GitOperations,
        notifier: StateChangeNotifier,
        prompter: Prompter,
        config: "Config",
    ):
        self.queries = queries
        self.operations = operations
        self.notifier = notifier
        self.prompter = prompter
        self.config = config

    def _branch_in(self, directory: Directory) -> str:
        branch = self.queries.get_current_branch(directory)
        if branch == "HEAD":
            raise PreconditionError(f"HEAD is detached in {os.fspath(directory)}")
        return branch

    def commit(
        self,
        context: RepositoryContext,
        directory: Optional[Directory] = None,
        stage_mode: Optional[StageMode] = None,
        message: Optional[str] = None,
        paths: Optional[List[str]] = None,
    ) -> CommitResult:
        """Commit changes in ``directory`` (the current directory by default).

        Raises:
            NothingToDoError: If there is nothing to commit
            SelectionCancelledError: If a prompt is dismissed
            GitOperationError: If staging or committing fails
        """
        directory = os.fspath(directory or context.current_directory)
        branch = self._branch_in(directory)

        changes = self.queries.get_working_tree_status(directory)
        if not changes:
            raise NothingToDoError(f"Nothing to commit in {directory}.")

        if stage_mode is None:
            stage_mode = StageMode.PICK if paths else self.prompter.select(
                f"{len(changes)} changed file(s) on '{branch}'",
                [Choice(label=label, value=mode) for mode, label in STAGE_MODE_LABELS.items()],
            )
            if stage_mode is None:
                raise SelectionCancelledError("stage mode")

        if stage_mode == StageMode.ALL:
            self.operations.stage_all(directory)
            files = [f.path for f in changes]
        elif stage_mode == StageMode.STAGED:
            files = [f.path for f in changes if f.is_staged]
            if not files:
                raise NothingToDoError("No staged changes to commit.")
        else:
            if paths is None:
                paths = self.prompter.select_many(
                    "Select files to stage",
                    [
                        Choice(label=f.path, value=f.path, description=format_status_code(f.code))
                        for f in changes
                    ],
                )
                if not paths:
                    raise SelectionCancelledError("files")
            self.operations.stage_paths(directory, paths)
            files = list(paths)

        if message is None:
            message = self.prompter.ask_text("Commit message", validate=_require_message)
            if message is None:
                raise SelectionCancelledError("commit message")
        elif _require_message(message):
            raise PreconditionError(_require_message(message))

        self.operations.commit(directory, message)
        commit = self.queries.get_head_commit(directory)
        self.notifier.notify(StateChangeEvent("commit", str(context.root), directory, branch))
        return CommitResult(branch_name=branch, commit=commit, message=message, files=files)

    def push(
        self, context: RepositoryContext, directory: Optional[Directory] = None, assume_yes: bool = False
    ) -> PushResult:
        """Push the branch in ``directory``, setting the upstream on first push.

        Raises:
            PreconditionError: If HEAD is detached
            NothingToDoError: If there are no unpushed commits
            SelectionCancelledError: If the confirmation is declined
            GitOperationError: If the push fails
        """
        directory = os.fspath(directory or context.current_directory)
        branch = self._branch_in(directory)

        has_upstream = self.queries.has_upstream(directory, branch)
        upstream_ref = f"{branch}@{{upstream}}" if has_upstream else None
        commits = self.queries.get_unpushed_commits(directory, upstream_ref)
        if not commits:
            raise NothingToDoError(f"'{branch}' has no unpushed commits.")

        if not assume_yes:
            target = "its upstream" if has_upstream else f"{self.config.remote_name} (new upstream)"
            summary = "\n".join(f"  {c}" for c in commits)
            action = self.prompter.choose_action(
                f"Push {len(commits)} commit(s) on '{branch}' to {target}?\n{summary}",
                [ACTION_PUSH, ACTION_CANCEL],
            )
            if action != ACTION_PUSH:
                raise SelectionCancelledError("push")

        if has_upstream:
            self.operations.push(directory)
        else:
            self.operations.push_set_upstream(directory, branch)

        self.notifier.notify(StateChangeEvent("push", str(context.root), directory, branch))
        return PushResult(branch_name=branch, commits=commits, set_upstream=not has_upstream)
