"""Tests for running git (and stand-in executables) as subprocesses."""

import shutil
import sys
from pathlib import Path

import pytest

from mergemend.core.config import GitConfig
from mergemend.git.executor import TIMED_OUT, GitExecutor

posix_only = pytest.mark.skipif(
    sys.platform == "win32", reason="uses POSIX utilities"
)


@pytest.mark.skipif(shutil.which("git") is None, reason="git not available")
def test_git_version(logger):
    result = GitExecutor(logger=logger).run(["--version"])

    assert result.success
    assert result.exit_code == 0
    assert result.stdout.startswith("git version")


@pytest.mark.skipif(shutil.which("git") is None, reason="git not available")
def test_nonzero_exit_is_a_result(tmp_path):
    result = GitExecutor().run(["rev-parse", "--verify", "MERGE_HEAD"],
                               cwd=tmp_path)

    assert not result.success
    assert result.exit_code != 0
    assert result.stderr


def test_missing_executable():
    executor = GitExecutor(GitConfig(executable="no-such-git-binary-here"))

    result = executor.run(["status"])

    assert not result.success
    assert result.exit_code == -1
    assert "executable not found" in result.stderr


@posix_only
def test_timeout(logger):
    executor = GitExecutor(GitConfig(executable="sleep", timeout=1), logger)

    result = executor.run(["5"])

    assert not result.success
    assert result.exit_code == -1
    assert result.stderr == TIMED_OUT


@posix_only
def test_output_is_capped_and_trimmed():
    executor = GitExecutor(GitConfig(executable="seq", max_output_size=20))

    result = executor.run(["1", "100000"])

    assert result.success
    assert len(result.stdout) <= 20
    assert result.stdout.startswith("1\n2\n3")
    assert not result.stdout.endswith("\n")


@posix_only
def test_cwd(tmp_path):
    result = GitExecutor(GitConfig(executable="pwd")).run([], cwd=tmp_path)

    assert Path(result.stdout).resolve() == tmp_path.resolve()


@posix_only
def test_env_is_added():
    executor = GitExecutor(GitConfig(executable="sh"))

    result = executor.run(["-c", "echo $MERGEMEND_TEST_VALUE"],
                          env={"MERGEMEND_TEST_VALUE": "hello world"})

    assert result.stdout == "hello world"


@posix_only
def test_arguments_are_not_shell_expanded():
    executor = GitExecutor(GitConfig(executable="echo"))

    result = executor.run(["$HOME", "a b", "*"])

    assert result.stdout == "$HOME a b *"


@posix_only
@pytest.mark.parametrize(
    "name", ["bob's repo", "cost$HOME", 'semi;colon "quoted"', "$(echo x)"]
)
def test_cwd_with_shell_characters(tmp_path, name):
    directory = tmp_path / name
    directory.mkdir()

    result = GitExecutor(GitConfig(executable="pwd")).run([], cwd=directory)

    assert result.success
    assert Path(result.stdout).resolve() == directory.resolve()


@pytest.mark.skipif(shutil.which("git") is None, reason="git not available")
def test_repository_with_quote_in_path(tmp_path):
    repo = tmp_path / "bob's $HOME repo"
    repo.mkdir()
    executor = GitExecutor()
    assert executor.run(["init", "-q"], cwd=repo).success

    result = executor.run(["rev-parse", "--is-inside-work-tree"], cwd=repo)

    assert result.stdout == "true"


@posix_only
def test_killed_by_signal_is_not_a_timeout(tmp_path):
    script = tmp_path / "hangup"
    script.write_text("#!/bin/sh\nkill -HUP $$\n")
    script.chmod(0o755)
    executor = GitExecutor(GitConfig(executable=str(script), timeout=30))

    result = executor.run(["status"])

    assert not result.success
    assert result.exit_code != 0
    assert result.stderr != TIMED_OUT
