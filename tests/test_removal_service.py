"""Tests for batch removal of branches and their worktrees"""
import pytest

from conftest import ScriptedPrompter, commit_file
from git_worktree_flow.constants import ACTION_DELETE, ACTION_DELETE_WITH_REMOTE
from git_worktree_flow.exceptions import PreconditionError, SelectionCancelledError
from git_worktree_flow.services.git import RepositoryContext
from git_worktree_flow.services.removal_service import RemovalService, removal_warning


@pytest.fixture
def make_service(queries, worktrees, operations, notifier, config):
    def _make(*answers):
        return RemovalService(queries, worktrees, operations, notifier, ScriptedPrompter(*answers), config)
    return _make


@pytest.fixture
def branches(git_repo, temp_dir):
    """feature/a and feature/b in worktrees, feature/c without one."""
    paths = {}
    for name in ("a", "b"):
        path = temp_dir / "project-worktrees" / f"feature-{name}"
        git_repo.git.worktree("add", "-b", f"feature/{name}", str(path))
        paths[f"feature/{name}"] = path
    git_repo.git.branch("feature/c")
    return paths


def local_branches(git_repo):
    return sorted(git_repo.git.branch("--format=%(refname:short)").split())


def remote_branches(upstream_repo):
    return sorted(upstream_repo.git.branch("--format=%(refname:short)").split())


class TestCandidates:
    """The branches checked out where the user stands are never offered."""

    def test_root_branch_excluded(self, make_service, context, branches):
        names = [c.name for c in make_service().list_candidates(context)]
        assert names == ["feature/a", "feature/b", "feature/c"]

    def test_branch_of_current_worktree_excluded(self, make_service, branches):
        context = RepositoryContext.discover(branches["feature/b"])
        names = [c.name for c in make_service().list_candidates(context)]
        assert names == ["feature/a", "feature/c"]

    def test_naming_a_protected_branch_is_refused(self, make_service, context, branches, git_repo):
        with pytest.raises(PreconditionError):
            make_service().remove_branches(context, selection=["main"], assume_yes=True)
        assert "main" in local_branches(git_repo)

    def test_warning_lists_worktrees(self, make_service, context, branches):
        text = removal_warning(make_service().list_candidates(context))
        assert "cannot be undone" in text
        assert str(branches["feature/a"]) in text or "feature-a" in text
        assert "uncommitted changes" in text


class TestRemoval:
    """Worktree, local branch and optionally remote branch go together."""

    def test_removes_branches_and_worktrees(self, make_service, context, branches, git_repo, events):
        (branches["feature/a"] / "scratch.txt").write_text("uncommitted\n")

        result = make_service().remove_branches(
            context, selection=["feature/a", "feature/c"], assume_yes=True
        )

        assert result.succeeded == ["feature/a", "feature/c"]
        assert result.failed == []
        assert len(result.removed_worktrees) == 1
        assert not branches["feature/a"].exists()
        assert local_branches(git_repo) == ["feature/b", "main"]
        assert [e.operation for e in events] == ["remove"]

    def test_prompted_selection_and_confirmation(self, make_service, context, branches, git_repo):
        result = make_service(["feature/c"], ACTION_DELETE).remove_branches(context)
        assert result.succeeded == ["feature/c"]
        assert "feature/c" not in local_branches(git_repo)

    def test_dismissed_selection(self, make_service, context, branches, git_repo):
        with pytest.raises(SelectionCancelledError):
            make_service(None).remove_branches(context)
        assert len(local_branches(git_repo)) == 4

    def test_dismissed_confirmation(self, make_service, context, branches, git_repo, events):
        with pytest.raises(SelectionCancelledError):
            make_service(["feature/a"], None).remove_branches(context)
        assert branches["feature/a"].exists()
        assert events == []

    def test_locked_worktree_fails_alone(self, make_service, context, branches, git_repo):
        git_repo.git.worktree("lock", str(branches["feature/b"]))

        result = make_service().remove_branches(
            context, selection=["feature/a", "feature/b", "feature/c"], assume_yes=True
        )

        assert result.succeeded == ["feature/a", "feature/c"]
        assert [f.branch for f in result.failed] == ["feature/b"]
        assert "locked" in result.failed[0].reason
        assert branches["feature/b"].exists()
        assert local_branches(git_repo) == ["feature/b", "main"]


class TestRemoteDeletion:
    """Remote branches are removed on request; a missing one is not an error."""

    def test_deletes_pushed_branch(self, make_service, context, branches, git_repo, upstream_repo):
        git_repo.git.push("origin", "feature/c")
        assert "feature/c" in remote_branches(upstream_repo)

        result = make_service().remove_branches(
            context, selection=["feature/c"], delete_remote=True, assume_yes=True
        )

        assert result.remote_deleted == ["feature/c"]
        assert "feature/c" not in remote_branches(upstream_repo)

    def test_missing_remote_branch_is_ignored(self, make_service, context, branches):
        result = make_service().remove_branches(
            context, selection=["feature/c"], delete_remote=True, assume_yes=True
        )
        assert result.succeeded == ["feature/c"]
        assert result.failed == []
        assert result.remote_deleted == []

    def test_confirmation_choice_enables_remote_deletion(
        self, make_service, context, branches, git_repo, upstream_repo
    ):
        commit_file(branches["feature/a"], "a.txt", "a\n")
        git_repo.git.push("origin", "feature/a")

        result = make_service(["feature/a"], ACTION_DELETE_WITH_REMOTE).remove_branches(context)

        assert result.remote_deleted == ["feature/a"]
        assert "feature/a" not in remote_branches(upstream_repo)

    def test_remote_failure_is_an_item_failure(self, make_service, context, branches, git_repo, config):
        git_repo.git.remote("set-url", "origin", str(branches["feature/a"].parent / "gone"))

        result = make_service().remove_branches(
            context, selection=["feature/c"], delete_remote=True, assume_yes=True
        )

        assert result.succeeded == []
        assert "remote deletion failed" in result.failed[0].reason
        assert "feature/c" not in local_branches(git_repo)
