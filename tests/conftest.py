"""Pytest configuration and fixtures for mergemend tests."""

import shutil
import subprocess
import sys
import tempfile
from pathlib import Path

import pytest

from mergemend.core.log import (
    ConsoleSink,
    FileSink,
    LogfireSink,
    OTLPSink,
    setup_logger,
)
from mergemend.core.result import CommandResult


@pytest.fixture(scope="session")
def logger():
    """Console-only logger shared by the whole session.

    Nothing is sent to logfire.dev or an OTLP collector.
    """
    test_log_root = Path(tempfile.gettempdir()) / "mergemend-tests"
    logger = setup_logger(
        log_root=test_log_root,
        session="test",
        console=ConsoleSink(level="debug"),
        otlp=OTLPSink(enabled=False),
        file=FileSink(enabled=False),
        logfire=LogfireSink(enabled=False),
    )
    yield logger
    logger.close()


class FakeExecutor:
    """GitExecutor stand-in answering from a table of canned results.

    Unknown commands fail with exit code 1, which is how git answers
    `rev-parse --verify` for a missing ref.
    """

    def __init__(self, responses: dict | None = None):
        self.responses = {
            tuple(args): result for args, result in (responses or {}).items()
        }
        self.calls = []

    def on(self, args, stdout="", stderr="", exit_code=0):
        self.responses[tuple(args)] = CommandResult(
            success=exit_code == 0,
            stdout=stdout,
            stderr=stderr,
            exit_code=exit_code,
        )
        return self

    def run(self, args, cwd=None, env=None):
        self.calls.append((list(args), cwd, env))
        return self.responses.get(
            tuple(args),
            CommandResult(success=False, stderr="unknown", exit_code=1),
        )

    def called(self, *args) -> bool:
        return any(call[0] == list(args) for call in self.calls)


@pytest.fixture
def fake_executor():
    """Empty FakeExecutor; program it with .on()."""
    return FakeExecutor()


@pytest.fixture
def fake_git(tmp_path, fake_executor):
    """FakeExecutor already answering as a work tree rooted at
    tmp_path."""
    (tmp_path / ".git").mkdir()
    return (
        fake_executor
        .on(["rev-parse", "--is-inside-work-tree"], stdout="true")
        .on(["rev-parse", "--show-toplevel"], stdout=str(tmp_path))
        .on(["branch", "--show-current"], stdout="main")
    )


def git(cwd: Path, *args: str) -> subprocess.CompletedProcess:
    """Run real git in cwd for test setup."""
    return subprocess.run(
        ["git", *args],
        cwd=cwd,
        capture_output=True,
        text=True,
        check=False,
    )


@pytest.fixture
def conflicted_repo(tmp_path):
    """Real repository stopped in a merge with one conflicted file.

    main changes line 2 of app.py to "ours", feature changes it to
    "theirs"; notes.txt merges cleanly.
    """
    if shutil.which("git") is None:
        pytest.skip("git executable not available")

    repo = tmp_path / "repo"
    repo.mkdir()
    git(repo, "init", "-q", "-b", "main")
    git(repo, "config", "user.email", "test@example.com")
    git(repo, "config", "user.name", "Test")
    git(repo, "config", "commit.gpgsign", "false")

    (repo / "app.py").write_text("a = 1\nb = 'base'\nc = 3\n")
    (repo / "notes.txt").write_text("notes\n")
    git(repo, "add", ".")
    git(repo, "commit", "-q", "-m", "base")

    git(repo, "checkout", "-q", "-b", "feature")
    (repo / "app.py").write_text("a = 1\nb = 'theirs'\nc = 3\n")
    (repo / "notes.txt").write_text("notes\nmore\n")
    git(repo, "commit", "-q", "-am", "feature change")

    git(repo, "checkout", "-q", "main")
    (repo / "app.py").write_text("a = 1\nb = 'ours'\nc = 3\n")
    git(repo, "commit", "-q", "-am", "main change")

    result = git(repo, "merge", "feature")
    assert result.returncode != 0, result.stdout
    return repo


@pytest.fixture
def argv():
    """Save and restore sys.argv around code that parses it."""
    original = sys.argv.copy()
    sys.argv = ["mergemend"]
    yield sys.argv
    sys.argv = original


@pytest.fixture
def run_git():
    """The git() setup helper, for tests that inspect a real repo."""
    return git
