"""Tests for the conflict tool operations against a fake git."""

import pytest

from mergemend.core.config import ConflictConfig
from mergemend.core.result import Failure, Success
from mergemend.git.executor import TIMED_OUT
from mergemend.tools.conflict import NON_INTERACTIVE_ENV, ConflictTools
from mergemend.tools.params import (
    AbortParams,
    AcceptFileParams,
    ContinueParams,
    DetectParams,
    NavigateParams,
    ResolveParams,
    ShowParams,
    SuggestParams,
)

SHA = "0123456789abcdef0123456789abcdef01234567"
BLOCK = "<<<<<<< HEAD\nours\n=======\ntheirs\n>>>>>>> feature\n"
HASHES = " ".join(["a" * 40] * 3)


def status_of(*paths: str) -> str:
    return "\n".join(
        f"u UU N... 100644 100644 100644 100644 {HASHES} {path}"
        for path in paths
    )


@pytest.fixture
def tools(fake_git, logger):
    return ConflictTools(logger=logger, executor=fake_git)


@pytest.fixture
def merging(fake_git, tmp_path):
    """Merge in progress with a.py (two hunks) and b.py (one) unmerged."""
    fake_git.on(["rev-parse", "--verify", "MERGE_HEAD"], stdout=SHA)
    fake_git.on(["name-rev", "--name-only", "MERGE_HEAD"], stdout="feature")
    fake_git.on(["status", "--porcelain=v2"], stdout=status_of("a.py", "b.py"))
    (tmp_path / "a.py").write_text("one\n" + BLOCK + "two\n" + BLOCK)
    (tmp_path / "b.py").write_text(BLOCK)
    return fake_git


@pytest.mark.parametrize("method, params", [
    ("detect", DetectParams()),
    ("show", ShowParams(file="a.py")),
    ("resolve", ResolveParams(file="a.py", strategy="ours")),
    ("accept_file", AcceptFileParams(file="a.py", accept="ours")),
    ("abort", AbortParams()),
    ("continue_operation", ContinueParams()),
    ("navigate", NavigateParams(direction="next")),
    ("suggest", SuggestParams(file="a.py", hunk_index=0)),
])
def test_outside_a_repository(fake_executor, method, params):
    tools = ConflictTools(executor=fake_executor)

    result = getattr(tools, method)(params)

    assert result == Failure(error="Not a git repository")


def test_unexpected_errors_become_failures(fake_git):
    def explode(*args, **kwargs):
        raise RuntimeError("boom")

    fake_git.run = explode
    tools = ConflictTools(executor=fake_git)

    result = tools.detect(DetectParams())

    assert result == Failure(error="Failed to detect conflicts: boom")


def test_detect(tools, merging, tmp_path):
    result = tools.detect(DetectParams(path=str(tmp_path)))

    assert isinstance(result, Success)
    data = result.data
    assert data["merge_state"]["type"] == "merge"
    assert data["merge_state"]["incoming_ref"] == "feature"
    assert data["merge_state"]["conflict_files"] == ["a.py", "b.py"]
    assert data["total_conflicts"] == 3
    assert data["summary"] == "Found 3 conflict(s) in 2 file(s) during merge"
    assert [f["conflict_count"] for f in data["conflict_files"]] == [2, 1]
    assert data["conflict_files"][0]["hunks"][1]["id"] == "a.py-hunk-1"


def test_detect_clean(tools):
    result = tools.detect(DetectParams())

    assert result.data["summary"] == "No conflicts detected"
    assert result.data["total_conflicts"] == 0


def test_show_all(tools, merging):
    data = tools.show(ShowParams(file="a.py")).data

    assert data["total_hunks"] == 2
    assert len(data["hunks"]) == 2
    assert data["summary"] == "2 conflict(s) found in a.py"


def test_show_one(tools, merging):
    data = tools.show(ShowParams(file="a.py", hunk_index=1)).data

    assert data["hunk"]["ours_content"] == "ours"
    assert data["summary"] == "Conflict 2/2: Lines 8-12"


def test_show_invalid_index(tools, merging):
    result = tools.show(ShowParams(file="a.py", hunk_index=5))

    assert result.error == (
        "Invalid hunk index 5. File has 2 conflict(s) (0-1)"
    )


def test_show_clean_file(tools, tmp_path):
    (tmp_path / "clean.py").write_text("x = 1\n")

    data = tools.show(ShowParams(file="clean.py")).data

    assert data["has_conflicts"] is False
    assert data["message"] == "No conflicts found in this file"


def test_show_missing_file(tools):
    result = tools.show(ShowParams(file="nope.py"))

    assert result.error == "File not found: nope.py"


def test_show_too_large(fake_git, merging):
    tools = ConflictTools(
        conflict_config=ConflictConfig(max_file_size=10), executor=fake_git
    )

    result = tools.show(ShowParams(file="a.py"))

    assert not result.success
    assert "too large" in result.error


def test_resolve(tools, merging, tmp_path):
    merging.on(["add", "b.py"])

    data = tools.resolve(ResolveParams(file="b.py", strategy="theirs")).data

    assert data["success"] is True
    assert data["staged"] is True
    assert data["strategy"] == "theirs"
    assert (tmp_path / "b.py").read_text() == "theirs\n"


def test_resolve_manual_without_content(tools, merging, tmp_path):
    result = tools.resolve(ResolveParams(file="b.py", strategy="manual"))

    assert result.error == (
        "Manual resolution requires manual_content parameter"
    )
    assert (tmp_path / "b.py").read_text() == BLOCK


def test_accept_file(tools, fake_git, tmp_path):
    fake_git.on(["checkout", "--theirs", "--", "a.py"])
    fake_git.on(["add", "a.py"])

    data = tools.accept_file(AcceptFileParams(file="a.py",
                                              accept="theirs")).data

    assert data == {
        "file": "a.py",
        "accepted": "theirs",
        "staged": True,
        "message": "Accepted theirs version of a.py and staged for commit",
    }
    assert fake_git.calls[-1][1] == tmp_path


def test_accept_file_checkout_failure(tools, fake_git):
    fake_git.on(["checkout", "--ours", "--", "a.py"],
                stderr="error: path 'a.py' does not have our version",
                exit_code=1)

    result = tools.accept_file(AcceptFileParams(file="a.py", accept="ours"))

    assert result.error == "error: path 'a.py' does not have our version"
    assert not fake_git.called("add", "a.py")


def test_accept_file_failure_without_stderr(tools, fake_git):
    fake_git.on(["checkout", "--ours", "--", "a.py"], exit_code=1)

    result = tools.accept_file(AcceptFileParams(file="a.py", accept="ours"))

    assert result.error == "Failed to accept ours version"


def test_abort_detected_operation(tools, merging):
    merging.on(["merge", "--abort"])

    data = tools.abort(AbortParams()).data

    assert data["operation"] == "merge"
    assert data["message"] == "Successfully aborted merge operation"


def test_abort_named_operation(tools, fake_git):
    fake_git.on(["cherry-pick", "--abort"])

    data = tools.abort(AbortParams(operation="cherry-pick")).data

    assert data["aborted"] is True
    assert fake_git.called("cherry-pick", "--abort")


def test_abort_nothing_in_progress(tools):
    result = tools.abort(AbortParams())

    assert result.error == (
        "No merge, rebase, cherry-pick, or revert operation in progress"
    )


def test_continue_refuses_with_conflicts(tools, merging):
    result = tools.continue_operation(ContinueParams())

    assert result.error.startswith(
        "Cannot continue: there are still unresolved conflicts"
    )
    assert not merging.called("commit", "--no-edit")


def test_continue_merge_with_message(tools, fake_git):
    fake_git.on(["rev-parse", "--verify", "MERGE_HEAD"], stdout=SHA)
    fake_git.on(["commit", "-m", "Merge feature"], stdout="[main abc] done")

    data = tools.continue_operation(
        ContinueParams(message="Merge feature")
    ).data

    assert data["operation"] == "merge"
    assert data["output"] == "[main abc] done"
    args, _, env = fake_git.calls[-1]
    assert args == ["commit", "-m", "Merge feature"]
    assert env == NON_INTERACTIVE_ENV


def test_continue_rebase(tools, fake_git, tmp_path):
    (tmp_path / ".git" / "rebase-merge").mkdir()
    fake_git.on(["rebase", "--continue"])

    data = tools.continue_operation(ContinueParams()).data

    assert data["message"] == "Successfully continued rebase operation"


def test_continue_failure_carries_stderr(tools, fake_git):
    fake_git.on(["rev-parse", "--verify", "REVERT_HEAD"], stdout=SHA)
    fake_git.on(["revert", "--continue"], stderr="error: nothing to commit",
                exit_code=1)

    result = tools.continue_operation(ContinueParams())

    assert result.error == "error: nothing to commit"


def test_continue_timeout(tools, fake_git):
    fake_git.on(["rev-parse", "--verify", "MERGE_HEAD"], stdout=SHA)
    fake_git.on(["commit", "--no-edit"], stderr=TIMED_OUT, exit_code=-1)

    result = tools.continue_operation(ContinueParams())

    assert result.error == "git commit --no-edit: Command timed out"


def test_navigate(tools, merging):
    first = tools.navigate(NavigateParams(direction="next")).data
    last = tools.navigate(NavigateParams(
        direction="next", current_file="a.py", current_hunk_index=1,
    )).data
    end = tools.navigate(NavigateParams(
        direction="next", current_file="b.py", current_hunk_index=0,
    )).data

    assert first["file"] == "a.py"
    assert first["message"] == "Conflict 1 of 3: a.py"
    assert last["file"] == "b.py"
    assert last["position"] == 3
    assert end == {
        "has_more": False,
        "message": "No more conflicts ahead",
        "position": 2,
        "total": 3,
    }


def test_navigate_without_conflicts(tools):
    data = tools.navigate(NavigateParams(direction="previous")).data

    assert data == {"has_more": False, "message": "No conflicts to navigate"}


def test_navigate_skips_unreadable_files(tools, fake_git):
    fake_git.on(["status", "--porcelain=v2"], stdout=status_of("gone.py"))

    data = tools.navigate(NavigateParams(direction="next")).data

    assert data == {"has_more": False, "message": "No conflicts found in files"}


def test_suggest(tools, merging):
    data = tools.suggest(SuggestParams(file="a.py", hunk_index=0)).data

    assert data["hunk_index"] == 0
    assert "**Our Changes (HEAD):**" in data["analysis_prompt"]
    assert data["hunk"]["context_before"] == ["one"]


def test_suggest_invalid_index(tools, merging):
    result = tools.suggest(SuggestParams(file="b.py", hunk_index=1))

    assert not result.success
    assert result.error.startswith("Invalid hunk index 1")


def test_camel_case_params():
    params = ResolveParams.model_validate({
        "file": "a.py",
        "strategy": "manual",
        "hunkIndex": 2,
        "manualContent": "x",
    })

    assert params.hunk_index == 2
    assert params.manual_content == "x"
