"""Detect which git operation is in progress and what is conflicted."""

from pathlib import Path, PurePath

from mergemend.conflict.files import read_conflicted_file
from mergemend.conflict.models import ConflictFile, MergeState, OperationType
from mergemend.conflict.parser import DEFAULT_CONTEXT_LINES, parse
from mergemend.core.errors import ConflictToolError
from mergemend.core.log import NullLogger

UNMERGED_PREFIX = "u "
# "u <XY> <sub> <m1> <m2> <m3> <mW> <h1> <h2> <h3> <path>"
UNMERGED_FIELDS = 10

# Escapes git uses in C-quoted paths (core.quotePath), besides octal bytes.
_QUOTED_ESCAPES = {
    "a": b"\a", "b": b"\b", "t": b"\t", "n": b"\n", "v": b"\v",
    "f": b"\f", "r": b"\r", "\"": b"\"", "\\": b"\\",
}
_OCTAL_DIGITS = "01234567"


def unquote_path(path: str) -> str:
    """Decode a path git wrapped in double quotes and C-escaped.

    Non-ASCII bytes arrive as octal escapes, e.g. `"caf\\303\\251.txt"`.
    Unquoted paths are returned unchanged.
    """
    if len(path) < 2 or path[0] != '"' or path[-1] != '"':
        return path
    body = path[1:-1]
    decoded = bytearray()
    i = 0
    while i < len(body):
        char = body[i]
        if char != "\\" or i + 1 == len(body):
            decoded += char.encode("utf-8")
            i += 1
            continue
        octal = body[i + 1:i + 4]
        if len(octal) == 3 and all(c in _OCTAL_DIGITS for c in octal):
            decoded.append(int(octal, 8) & 0xFF)
            i += 4
            continue
        escape = body[i + 1]
        decoded += _QUOTED_ESCAPES.get(escape, ("\\" + escape).encode("utf-8"))
        i += 2
    return decoded.decode("utf-8", errors="surrogateescape")


def unmerged_paths(porcelain: str) -> list[str]:
    """Paths of unmerged entries in `git status --porcelain=v2` output."""
    paths = []
    for line in porcelain.splitlines():
        if not line.startswith(UNMERGED_PREFIX):
            continue
        if "\t" in line:
            path = line.split("\t")[-1]
        else:
            fields = line.split(" ", UNMERGED_FIELDS)
            path = fields[-1] if len(fields) > UNMERGED_FIELDS else ""
        if path:
            paths.append(unquote_path(path))
    return paths


def _read_text(path: Path) -> str | None:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return None


def _read_int(path: Path) -> int | None:
    text = _read_text(path)
    try:
        return int(text.strip()) if text else None
    except ValueError:
        return None


class WorkspaceStateDetector:
    """Reconcile git refs and on-disk markers into a MergeState."""

    def __init__(self, executor, logger=None,
                 context_lines: int = DEFAULT_CONTEXT_LINES,
                 max_file_size: int = 1024 * 1024):
        """Initialize detector.

        Args:
            executor: GitExecutor for all git calls
            logger: Logger for detection events
            context_lines: Context kept around parsed hunks
            max_file_size: Larger files are listed but not parsed
        """
        self.executor = executor
        self.logger = logger or NullLogger()
        self.context_lines = context_lines
        self.max_file_size = max_file_size

    def is_workspace(self, cwd=None) -> bool:
        result = self.executor.run(
            ["rev-parse", "--is-inside-work-tree"], cwd=cwd
        )
        return result.success and result.stdout == "true"

    def repo_root(self, cwd=None) -> Path:
        result = self.executor.run(["rev-parse", "--show-toplevel"], cwd=cwd)
        if result.success and result.stdout:
            return Path(result.stdout)
        return Path(cwd) if cwd else Path.cwd()

    def _verify(self, ref: str, cwd) -> str | None:
        result = self.executor.run(["rev-parse", "--verify", ref], cwd=cwd)
        return result.stdout if result.success else None

    def _name_rev(self, ref: str, cwd) -> str:
        result = self.executor.run(["name-rev", "--name-only", ref], cwd=cwd)
        return result.stdout if result.success and result.stdout else ref

    def git_dir(self, cwd=None, root: Path | None = None) -> Path:
        """The repository's git directory.

        In linked worktrees and submodules `.git` is a file pointing
        elsewhere, so git is asked; `<root>/.git` is the fallback.
        """
        result = self.executor.run(["rev-parse", "--absolute-git-dir"],
                                   cwd=cwd)
        if result.success and result.stdout:
            return Path(result.stdout)
        return (root or self.repo_root(cwd)) / ".git"

    def _rebase_dirs(self, git_dir: Path) -> list[Path]:
        return [
            git_dir / "rebase-merge",
            git_dir / "rebase-apply",
        ]

    def detect(self, cwd=None, root: Path | None = None) -> MergeState:
        """Build the workspace's MergeState.

        Every check runs, in the order merge, rebase, cherry-pick,
        revert, and each hit overwrites type and incoming_ref. When
        several signals are present the last hit wins; consumers
        rely on this precedence.
        """
        git_dir = self.git_dir(cwd, root)
        state = MergeState()

        branch = self.executor.run(["branch", "--show-current"], cwd=cwd)
        state.current_branch = branch.stdout or "HEAD"

        if self._verify("MERGE_HEAD", cwd) is not None:
            state.type = OperationType.MERGE
            state.incoming_ref = self._name_rev("MERGE_HEAD", cwd)
            state.merge_message = _read_text(git_dir / "MERGE_MSG")

        rebase_dirs = self._rebase_dirs(git_dir)
        if (self._verify("REBASE_HEAD", cwd) is not None
                or any(d.is_dir() for d in rebase_dirs)):
            state.type = OperationType.REBASE
            self._read_rebase_progress(state, git_dir, cwd)

        cherry_pick = self._verify("CHERRY_PICK_HEAD", cwd)
        if cherry_pick is not None:
            state.type = OperationType.CHERRY_PICK
            state.incoming_ref = cherry_pick[:8]

        revert = self._verify("REVERT_HEAD", cwd)
        if revert is not None:
            state.type = OperationType.REVERT
            state.incoming_ref = revert[:8]

        state.conflict_files = self.conflicted_paths(cwd)
        state.has_conflicts = bool(state.conflict_files)
        return state

    def _read_rebase_progress(self, state: MergeState, git_dir: Path,
                              cwd) -> None:
        # rebase-merge (interactive/merge backend) or rebase-apply (am
        # backend); missing or garbled files leave the fields unset.
        for directory, step_file, total_file in (
            (git_dir / "rebase-merge", "msgnum", "end"),
            (git_dir / "rebase-apply", "next", "last"),
        ):
            if not directory.is_dir():
                continue
            step = _read_int(directory / step_file)
            total = _read_int(directory / total_file)
            if step is not None and total is not None:
                state.current_step = step
                state.total_steps = total
            onto = _read_text(directory / "onto")
            if onto and onto.strip():
                state.incoming_ref = self._name_rev(onto.strip(), cwd)
            return

    def active_operation(self, cwd=None,
                         root: Path | None = None) -> OperationType:
        """Operation to abort or continue: the first signal found.

        Unlike detect(), this stops at the first hit (merge, rebase
        marker directories, cherry-pick, revert).
        """
        if self._verify("MERGE_HEAD", cwd) is not None:
            return OperationType.MERGE
        rebase_dirs = self._rebase_dirs(self.git_dir(cwd, root))
        if any(d.is_dir() for d in rebase_dirs):
            return OperationType.REBASE
        if self._verify("CHERRY_PICK_HEAD", cwd) is not None:
            return OperationType.CHERRY_PICK
        if self._verify("REVERT_HEAD", cwd) is not None:
            return OperationType.REVERT
        return OperationType.NONE

    def conflicted_paths(self, cwd=None) -> list[str]:
        result = self.executor.run(["status", "--porcelain=v2"], cwd=cwd)
        return unmerged_paths(result.stdout)

    def is_binary(self, path: str, cwd=None) -> bool:
        """numstat prints '-' for both counts when a file is binary."""
        result = self.executor.run(["diff", "--numstat", "--", path], cwd=cwd)
        return result.stdout.startswith("-\t-")

    def scan_conflict_files(
        self,
        root: Path,
        paths: list[str],
        cwd=None,
    ) -> list[ConflictFile]:
        """Classify and parse each conflicted path.

        A file that cannot be read or is too large is reported with
        no hunks and an error; the rest of the scan continues.
        """
        files = []
        for path in paths:
            absolute = root / path
            extension = PurePath(path).suffix
            if self.is_binary(path, cwd):
                files.append(ConflictFile(
                    path=path,
                    absolute_path=str(absolute),
                    file_type=extension or "binary",
                    is_binary=True,
                ))
                continue

            try:
                content = read_conflicted_file(
                    absolute, path, self.max_file_size
                )
            except ConflictToolError as e:
                self.logger.warn(
                    "Failed to parse conflict file",
                    file=path,
                    error=str(e),
                )
                files.append(ConflictFile(
                    path=path,
                    absolute_path=str(absolute),
                    file_type=extension or "unknown",
                    error=str(e),
                ))
                continue

            files.append(ConflictFile(
                path=path,
                absolute_path=str(absolute),
                hunks=parse(content, path, self.context_lines),
                file_type=extension or "text",
            ))
        return files
