"""Branch creation: a new branch materialized straight into its own worktree."""

from typing import Optional, Tuple, TYPE_CHECKING

from git_worktree_flow.exceptions import NoCandidatesError, SelectionCancelledError
from git_worktree_flow.models.branch import CREATE_MODE_LABELS, CreateMode
from git_worktree_flow.models.results import CreateResult
from git_worktree_flow.services.branch_validation_service import BranchValidationService
from git_worktree_flow.services.git import BranchQueries, GitOperations, RepositoryContext, WorktreeService
from git_worktree_flow.services.notification_service import StateChangeEvent, StateChangeNotifier
from git_worktree_flow.services.prompt_service import Choice, Prompter
from git_worktree_flow.services.workspace_opener import WorkspaceOpener, open_workspace
from git_worktree_flow.services.worktree_path_policy import WorktreePathPolicy
from git_worktree_flow.utils.logging import get_logger

if TYPE_CHECKING:
    from git_worktree_flow.config import Config

logger = get_logger(__name__)

NEW_BRANCH_PLACEHOLDER = "feature/my-new-feature"

MODE_DETAILS = {
    CreateMode.FROM_DEFAULT: "Fetches the remote and branches from its default branch",
    CreateMode.FROM_LOCAL: "The new branch starts from the selected local branch",
    CreateMode.CLONE_REMOTE: "Check out a remote branch locally",
}


class CreationService:
    """Creates branches in dedicated worktrees.

    All three modes end in one ``git worktree add -b``, so a branch never
    exists without its worktree.
    """

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
        self.path_policy = WorktreePathPolicy(config.worktree_dir_suffix)

    def create_branch(
        self,
        context: RepositoryContext,
        mode: Optional[CreateMode] = None,
        base: Optional[str] = None,
        branch_name: Optional[str] = None,
    ) -> CreateResult:
        """Create a branch in a new worktree, prompting for anything not supplied.

        Args:
            context: Validated repository context
            mode: How to choose the base; prompted when None
            base: Base branch (local mode) or remote branch (clone mode); prompted when None
            branch_name: Name of the new branch; prompted when None

        Returns:
            CreateResult with the new branch and worktree path

        Raises:
            InvalidBranchNameError: Before any git call, for a bad ``branch_name``
            SelectionCancelledError: If a prompt is dismissed
            NoCandidatesError: If there is no base to choose from
            GitOperationError: If fetch, base resolution or worktree creation fails
        """
        if branch_name is not None:
            BranchValidationService.validate_branch_name(branch_name)

        if mode is None:
            mode = self.prompter.select(
                "How do you want to create the branch?",
                [
                    Choice(label=CREATE_MODE_LABELS[m], value=m, description=MODE_DETAILS[m])
                    for m in CreateMode
                ],
            )
            if mode is None:
                raise SelectionCancelledError("create mode")

        if mode == CreateMode.FROM_DEFAULT:
            base_ref, suggestion, prompt = self._base_from_default(context)
        elif mode == CreateMode.FROM_LOCAL:
            base_ref, suggestion, prompt = self._base_from_local(context, base)
        else:
            base_ref, suggestion, prompt = self._base_from_remote(context, base)

        if branch_name is None:
            branch_name = self.prompter.ask_text(
                prompt, default=suggestion, validate=BranchValidationService.branch_name_error
            )
            if branch_name is None:
                raise SelectionCancelledError("branch name")

        return self.materialize(context, branch_name, base_ref, track=mode == CreateMode.CLONE_REMOTE)

    def _base_from_default(self, context: RepositoryContext) -> Tuple[str, Optional[str], str]:
        self.operations.fetch(context.root)
        base_ref = self.queries.get_default_remote_branch(context.root)
        return base_ref, None, f"Enter the new branch name (based on {base_ref}, e.g. {NEW_BRANCH_PLACEHOLDER})"

    def _base_from_local(self, context: RepositoryContext, base: Optional[str]) -> Tuple[str, Optional[str], str]:
        if base is None:
            local_branches = self.queries.get_local_branches(context.root)
            if not local_branches:
                raise NoCandidatesError("No local branches found.")
            base = self.prompter.select(
                "Select a local branch to base the new branch on",
                [Choice(label=name, value=name) for name in local_branches],
            )
            if base is None:
                raise SelectionCancelledError("base branch")
        return base, None, f"Enter the new branch name (based on {base})"

    def _base_from_remote(self, context: RepositoryContext, base: Optional[str]) -> Tuple[str, Optional[str], str]:
        if base is None:
            remote_branches = self.queries.get_remote_branches(context.root, fetch=True)
            if not remote_branches:
                raise NoCandidatesError("No remote branches found.")
            base = self.prompter.select(
                "Select a remote branch to clone",
                [Choice(label=name, value=name) for name in remote_branches],
            )
            if base is None:
                raise SelectionCancelledError("remote branch")
        else:
            self.operations.fetch(context.root, self._remote_of(context, base))

        # "origin/feature-x" -> "feature-x"
        suggestion = BranchValidationService.strip_remote_prefix(base)
        return base, suggestion, f"Enter the local branch name (cloning {base})"

    def _remote_of(self, context: RepositoryContext, remote_branch: str) -> str:
        """Remote named by the first segment of ``remote_branch``, else the configured one."""
        prefix = remote_branch.split("/", 1)[0]
        if "/" in remote_branch and prefix in self.queries.get_remotes(context.root):
            return prefix
        return self.config.remote_name

    def materialize(
        self, context: RepositoryContext, branch_name: str, base_ref: str, track: bool = False
    ) -> CreateResult:
        """Create ``branch_name`` at ``base_ref`` inside its own new worktree.

        Only a cloned remote branch tracks its base; a branch started from the
        default branch gets its own upstream on first push.

        Raises:
            InvalidBranchNameError: Before any git call, for a bad name
            GitOperationError: Path in use, branch exists or base invalid; git's text is kept
        """
        BranchValidationService.validate_branch_name(branch_name)
        worktree_path = self.path_policy.worktree_path(context.root, branch_name)

        logger.info(f"Creating {branch_name} from {base_ref} at {worktree_path}")
        self.worktrees.add_worktree_with_new_branch(
            context.root, branch_name, worktree_path, base_ref, track=track
        )

        self.notifier.notify(
            StateChangeEvent("create", str(context.root), str(worktree_path), branch_name)
        )
        open_workspace(self.opener, worktree_path)
        return CreateResult(branch_name=branch_name, worktree_path=str(worktree_path), base_ref=base_ref)
