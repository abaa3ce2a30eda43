"""Tests for the git executor, repository context and read-only queries"""
import os
import shutil
from pathlib import Path

import git
import pytest

from conftest import commit_file
from git_worktree_flow.exceptions import (
    DefaultBranchNotFoundError,
    GitOperationError,
    RepositoryNotFoundError,
)
from git_worktree_flow.services.git import GitExecutor, RepositoryContext, same_path


class TestGitExecutor:
    """Every git call goes through GitExecutor.run."""

    def test_returns_output(self, git_repo):
        output = GitExecutor().run(git_repo.working_dir, "rev-parse", "--abbrev-ref", "HEAD")
        assert output == "main"

    def test_keeps_leading_whitespace(self, git_repo):
        (Path(git_repo.working_dir) / "README.md").write_text("changed\n")
        output = GitExecutor().run(git_repo.working_dir, "status", "--porcelain")
        assert output.startswith(" M README.md")

    def test_failure_carries_git_message(self, git_repo):
        with pytest.raises(GitOperationError) as exc_info:
            GitExecutor().run(git_repo.working_dir, "checkout", "no-such-branch", operation="checkout")
        error = exc_info.value
        assert error.operation == "checkout"
        assert "no-such-branch" in error.message
        assert "stderr: '" not in error.message

    def test_missing_directory(self, temp_dir):
        with pytest.raises(GitOperationError):
            GitExecutor().run(temp_dir / "missing", "status")

    def test_missing_directory_never_falls_back_to_cwd(self, git_repo, temp_dir, monkeypatch):
        monkeypatch.chdir(git_repo.working_dir)
        missing = temp_dir / "project-worktrees" / "deleted-long-ago"
        with pytest.raises(GitOperationError) as exc_info:
            GitExecutor().run(missing, "rev-parse", "--show-toplevel", operation="toplevel")
        assert exc_info.value.operation == "toplevel"
        assert "directory does not exist" in exc_info.value.message


class TestRepositoryContext:
    """Repository discovery and re-validation."""

    def test_discover_from_subdirectory(self, git_repo):
        sub = Path(git_repo.working_dir) / "src"
        sub.mkdir()
        context = RepositoryContext.discover(sub)
        assert context.root == Path(git_repo.working_dir).resolve()

    def test_discover_from_linked_worktree(self, git_repo, temp_dir):
        linked = temp_dir / "linked"
        git_repo.git.worktree("add", "-b", "feature/linked", str(linked))
        context = RepositoryContext.discover(linked)
        assert context.root == Path(git_repo.working_dir).resolve()
        assert context.current_directory == linked.resolve()
        assert context.is_current_directory(str(linked))

    def test_discover_outside_repository(self, temp_dir):
        plain = temp_dir / "plain"
        plain.mkdir()
        with pytest.raises(RepositoryNotFoundError):
            RepositoryContext.discover(plain)

    def test_validate_fails_once_root_is_gone(self, git_repo, temp_dir):
        context = RepositoryContext.discover(git_repo.working_dir)
        git_repo.close()
        os.rename(git_repo.working_dir, temp_dir / "moved")
        with pytest.raises(RepositoryNotFoundError):
            context.validate()

    def test_same_path_resolves(self, temp_dir):
        assert same_path(temp_dir / "a" / "..", temp_dir)


class TestBranchQueries:
    """Read-only state queries against a real clone."""

    def test_current_branch(self, queries, git_repo):
        assert queries.get_current_branch(git_repo.working_dir) == "main"

    def test_local_branches(self, queries, git_repo):
        git_repo.git.branch("feature/a")
        assert sorted(queries.get_local_branches(git_repo.working_dir)) == ["feature/a", "main"]

    def test_remote_branches_skip_head_alias(self, queries, git_repo, upstream_repo):
        upstream_repo.git.branch("feature/remote")
        branches = queries.get_remote_branches(git_repo.working_dir, fetch=True)
        assert sorted(branches) == ["origin/feature/remote", "origin/main"]

    def test_default_branch_from_remote_head(self, queries, git_repo):
        assert queries.get_default_remote_branch(git_repo.working_dir) == "origin/main"

    def test_default_branch_by_probe(self, queries, git_repo):
        git_repo.git.remote("set-head", "origin", "-d")
        assert queries.get_default_remote_branch(git_repo.working_dir) == "origin/main"

    def test_default_branch_not_found(self, queries, git_repo):
        git_repo.git.remote("set-head", "origin", "-d")
        git_repo.git.branch("-r", "-d", "origin/main")
        with pytest.raises(DefaultBranchNotFoundError):
            queries.get_default_remote_branch(git_repo.working_dir)

    def test_working_tree_status(self, queries, git_repo):
        root = Path(git_repo.working_dir)
        (root / "README.md").write_text("modified\n")
        (root / "new.txt").write_text("new\n")
        (root / "staged.txt").write_text("staged\n")
        git_repo.git.add("staged.txt")

        status = {f.path: f for f in queries.get_working_tree_status(root)}
        assert status["README.md"].code == "M"
        assert status["README.md"].is_modified
        assert status["README.md"].label == "Modified"
        assert status["new.txt"].is_untracked
        assert status["staged.txt"].code == "A"
        assert status["staged.txt"].is_staged
        assert queries.is_dirty(root)

    def test_clean_tree(self, queries, git_repo):
        assert queries.get_working_tree_status(git_repo.working_dir) == []
        assert not queries.is_dirty(git_repo.working_dir)

    def test_rename_reports_new_path(self, queries, git_repo):
        git_repo.git.mv("README.md", "INTRO.md")
        status = queries.get_working_tree_status(git_repo.working_dir)
        assert [(f.path, f.code) for f in status] == [("INTRO.md", "R")]

    def test_status_paths_are_not_quoted(self, queries, git_repo):
        root = Path(git_repo.working_dir)
        (root / "my notes.txt").write_text("notes\n")
        (root / "café.txt").write_text("menu\n")
        paths = sorted(f.path for f in queries.get_working_tree_status(root))
        assert paths == ["café.txt", "my notes.txt"]

    def test_rename_with_space_keeps_following_entries(self, queries, git_repo):
        root = Path(git_repo.working_dir)
        git_repo.git.mv("README.md", "READ ME.md")
        (root / "new.txt").write_text("new\n")
        status = sorted((f.path, f.code) for f in queries.get_working_tree_status(root))
        assert status == [("READ ME.md", "R"), ("new.txt", "??")]

    def test_remotes(self, queries, git_repo, upstream_repo):
        git_repo.create_remote("upstream", upstream_repo.working_dir)
        assert sorted(queries.get_remotes(git_repo.working_dir)) == ["origin", "upstream"]

    def test_divergence(self, queries, git_repo, upstream_repo):
        git_repo.git.checkout("-b", "feature/a")
        commit_file(git_repo.working_dir, "a.txt", "a\n")
        commit_file(git_repo.working_dir, "b.txt", "b\n")
        commit_file(upstream_repo.working_dir, "up.txt", "up\n")
        git_repo.git.fetch("origin")

        divergence = queries.get_divergence(git_repo.working_dir, "feature/a", "origin/main")
        assert (divergence.ahead, divergence.behind) == (2, 1)
        assert not divergence.is_synced

    def test_no_merge_in_progress(self, queries, git_repo):
        assert not queries.is_merge_in_progress(git_repo.working_dir)
        assert queries.get_conflict_files(git_repo.working_dir) == []

    def test_upstream(self, queries, git_repo):
        git_repo.git.branch("local-only")
        assert queries.has_upstream(git_repo.working_dir, "main")
        assert not queries.has_upstream(git_repo.working_dir, "local-only")

    def test_unpushed_commits(self, queries, git_repo):
        assert queries.get_unpushed_commits(git_repo.working_dir, "main@{upstream}") == []
        git_repo.git.checkout("-b", "feature/new")
        commit_file(git_repo.working_dir, "a.txt", "a\n", "Add a")

        unpushed = queries.get_unpushed_commits(git_repo.working_dir)
        assert len(unpushed) == 1
        assert unpushed[0].endswith("Add a")

    def test_head_commit(self, queries, git_repo):
        assert queries.get_head_commit(git_repo.working_dir) == git_repo.head.commit.hexsha


class TestWorktreeService:
    """Worktree listing, creation and removal."""

    def test_primary_directory_listed_first(self, worktrees, git_repo):
        listed = worktrees.list_worktrees(git_repo.working_dir)
        assert len(listed) == 1
        assert listed[0].is_main
        assert listed[0].branch_name == "main"
        assert same_path(listed[0].path, git_repo.working_dir)

    def test_add_and_find(self, worktrees, git_repo, temp_dir):
        path = temp_dir / "project-worktrees" / "feature-x"
        worktrees.add_worktree_with_new_branch(git_repo.working_dir, "feature/x", path, "origin/main")

        found = worktrees.find_worktree_for_branch(git_repo.working_dir, "feature/x")
        assert found is not None
        assert not found.is_main
        assert not found.is_orphaned
        assert same_path(found.path, path)
        assert git.Repo(path).active_branch.name == "feature/x"

    def test_detached_worktree_has_no_branch(self, worktrees, git_repo, temp_dir):
        git_repo.git.worktree("add", "--detach", str(temp_dir / "detached"))
        listed = worktrees.list_worktrees(git_repo.working_dir)
        assert [wt.branch_name for wt in listed] == ["main", ""]

    def test_deleted_worktree_is_orphaned(self, worktrees, git_repo, temp_dir):
        path = temp_dir / "gone"
        git_repo.git.worktree("add", "-b", "feature/gone", str(path))
        shutil.rmtree(path)
        found = worktrees.find_worktree_for_branch(git_repo.working_dir, "feature/gone")
        assert found.is_orphaned

    def test_add_existing_branch_fails_with_git_message(self, worktrees, git_repo, temp_dir):
        git_repo.git.branch("taken")
        with pytest.raises(GitOperationError) as exc_info:
            worktrees.add_worktree_with_new_branch(
                git_repo.working_dir, "taken", temp_dir / "taken", "origin/main"
            )
        assert "already exists" in exc_info.value.message

    def test_remove_and_prune(self, worktrees, git_repo, temp_dir):
        path = temp_dir / "wt"
        worktrees.add_worktree_with_new_branch(git_repo.working_dir, "wt", path, "main")
        (path / "scratch.txt").write_text("uncommitted\n")

        worktrees.remove_worktree(git_repo.working_dir, path, force=True)
        assert not path.exists()
        assert worktrees.prune_worktrees(git_repo.working_dir)
        assert worktrees.find_worktree_for_branch(git_repo.working_dir, "wt") is None
