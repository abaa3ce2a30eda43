"""Pytest fixtures for git-worktree-flow tests"""
import tempfile
from pathlib import Path
from unittest.mock import Mock
import pytest
import git

from git_worktree_flow.config import Config
from git_worktree_flow.core import WorktreeFlow
from git_worktree_flow.services.git import (
    BranchQueries,
    GitExecutor,
    GitOperations,
    RepositoryContext,
    WorktreeService,
)
from git_worktree_flow.services.notification_service import StateChangeNotifier
from git_worktree_flow.services.prompt_service import Prompter
from git_worktree_flow.services.workspace_opener import WorkspaceOpener

# git subcommands that change refs, the index, worktrees or the remote
MUTATING_COMMANDS = {
    "add", "branch", "checkout", "commit", "merge", "push", "stash", "worktree", "fetch",
}


def _configure_identity(repo: git.Repo) -> None:
    with repo.config_writer() as writer:
        writer.set_value("user", "name", "Test User")
        writer.set_value("user", "email", "test@example.com")


def commit_file(repo_path, name: str, content: str, message: str = None) -> str:
    """Write ``name`` in ``repo_path``, commit it and return the new HEAD sha."""
    repo = git.Repo(repo_path)
    try:
        (Path(repo_path) / name).write_text(content)
        repo.git.add(name)
        repo.git.commit("-m", message or f"Update {name}")
        return repo.head.commit.hexsha
    finally:
        repo.close()


def git_calls(executor) -> list:
    """The git argument tuples an executor spy has run, in order."""
    return [c.args[1:] for c in executor.run.call_args_list]


def mutating_calls(executor) -> list:
    """Like :func:`git_calls`, keeping only commands that change state."""
    calls = []
    for args in git_calls(executor):
        if args[0] == "worktree" and args[1] == "list":
            continue
        if args[0] == "branch" and any(a.startswith("--format") for a in args):
            continue
        if args[0] in MUTATING_COMMANDS:
            calls.append(args)
    return calls


class ScriptedPrompter(Prompter):
    """Answers prompts from a script; an unexpected prompt fails the test.

    Answers for ``select`` match a choice value or label; None cancels.
    For ``ask_text`` an empty string accepts the default.
    """

    def __init__(self, *answers):
        self.answers = list(answers)
        self.calls = []

    def _next(self, kind, message):
        self.calls.append((kind, message))
        if not self.answers:
            raise AssertionError(f"Unexpected {kind} prompt: {message}")
        return self.answers.pop(0)

    @staticmethod
    def _match(answer, choices):
        for choice in choices:
            if answer == choice.value or answer == choice.label:
                return choice.value
        raise AssertionError(f"{answer!r} is not among {[c.label for c in choices]}")

    def select(self, message, choices):
        answer = self._next("select", message)
        return None if answer is None else self._match(answer, choices)

    def select_many(self, message, choices):
        answer = self._next("select_many", message)
        if answer is None:
            return None
        return [self._match(item, choices) for item in answer]

    def ask_text(self, message, default=None, validate=None):
        answer = self._next("ask_text", message)
        if answer is None:
            return None
        if answer == "" and default is not None:
            answer = default
        if validate is not None:
            error = validate(answer)
            if error:
                raise AssertionError(f"Scripted answer {answer!r} rejected: {error}")
        return answer

    def choose_action(self, message, actions):
        answer = self._next("choose_action", message)
        if answer is not None and answer not in actions:
            raise AssertionError(f"{answer!r} is not among {list(actions)}")
        return answer


class RecordingOpener(WorkspaceOpener):
    """Records the directories it was asked to open."""

    def __init__(self):
        self.opened = []

    def open(self, path):
        self.opened.append(str(path))


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


@pytest.fixture
def upstream_repo(temp_dir):
    """A repository playing the remote, with one commit on main."""
    repo_path = temp_dir / "upstream"
    repo_path.mkdir()
    repo = git.Repo.init(repo_path)
    _configure_identity(repo)

    (repo_path / "README.md").write_text("# Test Repository\n")
    (repo_path / "shared.txt").write_text("line one\nline two\n")
    repo.git.add("README.md", "shared.txt")
    repo.git.commit("-m", "Initial commit")
    repo.git.branch("-M", "main")

    yield repo
    repo.close()


@pytest.fixture
def git_repo(temp_dir, upstream_repo):
    """A clone of ``upstream_repo`` with origin/HEAD pointing at origin/main."""
    repo = git.Repo.clone_from(upstream_repo.working_dir, temp_dir / "project")
    _configure_identity(repo)
    yield repo
    repo.close()


@pytest.fixture
def config():
    return Config()


@pytest.fixture
def executor():
    """A GitExecutor spy: real git calls, recorded."""
    return Mock(wraps=GitExecutor())


@pytest.fixture
def opener():
    return RecordingOpener()


@pytest.fixture
def notifier():
    return StateChangeNotifier()


@pytest.fixture
def events(notifier):
    """Events delivered through ``notifier``."""
    received = []
    notifier.subscribe(received.append)
    return received


@pytest.fixture
def queries(executor, config):
    return BranchQueries(executor, config)


@pytest.fixture
def worktrees(executor):
    return WorktreeService(executor)


@pytest.fixture
def operations(executor, config):
    return GitOperations(executor, config)


@pytest.fixture
def context(git_repo):
    return RepositoryContext.discover(git_repo.working_dir)


@pytest.fixture
def make_flow(git_repo, config, executor, opener):
    """Build a WorktreeFlow on ``git_repo`` answering prompts from a script."""
    def _make(*answers, path=None):
        return WorktreeFlow(
            path or git_repo.working_dir,
            config,
            prompter=ScriptedPrompter(*answers),
            opener=opener,
            executor=executor,
        )
    return _make
