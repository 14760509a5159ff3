"""Conflict tool operations: detect, inspect, resolve and finish."""

from pathlib import Path

from mergemend.conflict.files import read_conflicted_file
from mergemend.conflict.models import OperationType
from mergemend.conflict.navigator import build_locations, navigate
from mergemend.conflict.orchestrator import FileResolver
from mergemend.conflict.parser import parse
from mergemend.conflict.suggest import format_suggestion_prompt
from mergemend.core.config import ConflictConfig, GitConfig
from mergemend.core.errors import (
    ConflictToolError,
    InvalidHunkIndexError,
    NoOperationInProgressError,
    NotAWorkspaceError,
    SubprocessFailureError,
    SubprocessTimeoutError,
    UnresolvedConflictsError,
)
from mergemend.core.log import NullLogger
from mergemend.core.result import CommandResult
from mergemend.git.executor import TIMED_OUT, GitExecutor
from mergemend.git.state import WorkspaceStateDetector
from mergemend.tools.base import tool_boundary
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

# Keeps `<op> --continue` from opening an editor for the message.
NON_INTERACTIVE_ENV = {"GIT_EDITOR": "true"}


class ConflictTools:
    """Every public conflict operation, each returning a ToolResult.

    Operations share one GitExecutor and never raise; failures come
    back as Failure with a readable message.
    """

    def __init__(
        self,
        git_config: GitConfig | None = None,
        conflict_config: ConflictConfig | None = None,
        logger=None,
        executor=None,
    ):
        """Initialize tools.

        Args:
            git_config: git invocation settings
            conflict_config: Parsing and resolution settings
            logger: Logger shared by every component
            executor: GitExecutor (or a test double); built from
                git_config when None
        """
        self.logger = logger or NullLogger()
        self.conflict_config = conflict_config or ConflictConfig()
        self.executor = executor or GitExecutor(git_config, self.logger)
        self.detector = WorkspaceStateDetector(
            self.executor,
            self.logger,
            context_lines=self.conflict_config.context_lines,
            max_file_size=self.conflict_config.max_file_size,
        )
        self.resolver = FileResolver(
            self.executor, self.conflict_config, self.logger
        )

    @classmethod
    def from_config(cls, config) -> "ConflictTools":
        """Build tools from a loaded Config, sharing its logger."""
        return cls(config.git, config.conflicts, config.logger)

    def _root(self, cwd) -> Path:
        if not self.detector.is_workspace(cwd):
            raise NotAWorkspaceError(cwd)
        return self.detector.repo_root(cwd)

    def _read_hunks(self, root: Path, file: str):
        path = Path(file) if Path(file).is_absolute() else root / file
        content = read_conflicted_file(
            path, file, self.conflict_config.max_file_size
        )
        return parse(content, file, self.conflict_config.context_lines)

    def _check(self, result: CommandResult, args: list[str],
               fallback: str) -> CommandResult:
        if result.exit_code == -1 and result.stderr == TIMED_OUT:
            raise SubprocessTimeoutError(args)
        if not result.success:
            raise SubprocessFailureError(args, result.stderr, fallback)
        return result

    @tool_boundary("detect conflicts")
    def detect(self, params: DetectParams) -> dict:
        """Report the in-progress operation and every conflicted file."""
        cwd = params.path
        root = self._root(cwd)
        state = self.detector.detect(cwd, root)
        files = self.detector.scan_conflict_files(
            root, state.conflict_files, root
        )
        total = sum(f.conflict_count for f in files)

        if state.has_conflicts:
            summary = (
                f"Found {total} conflict(s) in {len(files)} file(s) "
                f"during {state.type.value}"
            )
        else:
            summary = "No conflicts detected"

        self.logger.info(
            "Conflicts detected",
            operation=state.type.value,
            files=len(files),
            total_conflicts=total,
        )
        return {
            "merge_state": state.model_dump(mode="json"),
            "conflict_files": [f.model_dump(mode="json") for f in files],
            "total_conflicts": total,
            "summary": summary,
        }

    @tool_boundary("show conflict")
    def show(self, params: ShowParams) -> dict:
        """One hunk, or all hunks, of a file."""
        root = self._root(params.path)
        hunks = self._read_hunks(root, params.file)

        if not hunks:
            return {
                "file": params.file,
                "has_conflicts": False,
                "message": "No conflicts found in this file",
            }

        if params.hunk_index is not None:
            if not 0 <= params.hunk_index < len(hunks):
                raise InvalidHunkIndexError(params.hunk_index, len(hunks))
            hunk = hunks[params.hunk_index]
            return {
                "file": params.file,
                "hunk_index": params.hunk_index,
                "total_hunks": len(hunks),
                "hunk": hunk.model_dump(mode="json"),
                "summary": (
                    f"Conflict {params.hunk_index + 1}/{len(hunks)}: "
                    f"Lines {hunk.start_line}-{hunk.end_line}"
                ),
            }

        return {
            "file": params.file,
            "total_hunks": len(hunks),
            "hunks": [h.model_dump(mode="json") for h in hunks],
            "summary": f"{len(hunks)} conflict(s) found in {params.file}",
        }

    @tool_boundary("resolve conflict")
    def resolve(self, params: ResolveParams) -> dict:
        root = self._root(params.path)
        result = self.resolver.resolve(
            root,
            params.file,
            params.strategy,
            hunk_index=params.hunk_index,
            manual_content=params.manual_content,
        )
        return result.model_dump(mode="json")

    @tool_boundary("accept file")
    def accept_file(self, params: AcceptFileParams) -> dict:
        """Take one side's whole version of a file and stage it."""
        cwd = params.path
        root = self._root(cwd)

        args = ["checkout", f"--{params.accept}", "--", params.file]
        self._check(
            self.executor.run(args, cwd=root),
            args,
            f"Failed to accept {params.accept} version",
        )

        staged = self.executor.run(["add", params.file], cwd=root)
        if not staged.success:
            self.logger.warn(
                "Failed to stage accepted file",
                file=params.file,
                stderr=staged.stderr,
            )

        self.logger.info("File accepted", file=params.file,
                         accept=params.accept)
        return {
            "file": params.file,
            "accepted": params.accept,
            "staged": staged.success,
            "message": (
                f"Accepted {params.accept} version of {params.file} "
                "and staged for commit"
                if staged.success
                else f"Accepted {params.accept} version of {params.file}; "
                "staging failed"
            ),
        }

    @tool_boundary("abort operation")
    def abort(self, params: AbortParams) -> dict:
        cwd = params.path
        root = self._root(cwd)

        operation = params.operation
        if operation in (None, OperationType.NONE):
            operation = self.detector.active_operation(cwd, root)
        if operation is OperationType.NONE:
            raise NoOperationInProgressError()

        args = [operation.value, "--abort"]
        self._check(
            self.executor.run(args, cwd=cwd),
            args,
            f"Failed to abort {operation.value}",
        )

        self.logger.info("Operation aborted", operation=operation.value)
        return {
            "operation": operation.value,
            "aborted": True,
            "message": f"Successfully aborted {operation.value} operation",
        }

    @tool_boundary("continue operation")
    def continue_operation(self, params: ContinueParams) -> dict:
        """Conclude the operation once nothing is left unmerged.

        A merge is concluded with a commit; rebase, cherry-pick and
        revert with `<op> --continue`.
        """
        cwd = params.path
        root = self._root(cwd)

        remaining = self.detector.conflicted_paths(cwd)
        if remaining:
            raise UnresolvedConflictsError(remaining)

        operation = self.detector.active_operation(cwd, root)
        if operation is OperationType.NONE:
            raise NoOperationInProgressError()

        if operation is OperationType.MERGE:
            args = ["commit"]
            if params.message:
                args += ["-m", params.message]
            else:
                args.append("--no-edit")
        else:
            args = [operation.value, "--continue"]

        result = self._check(
            self.executor.run(args, cwd=cwd, env=NON_INTERACTIVE_ENV),
            args,
            f"Failed to continue {operation.value}",
        )

        self.logger.info("Operation continued", operation=operation.value)
        return {
            "operation": operation.value,
            "continued": True,
            "message": f"Successfully continued {operation.value} operation",
            "output": result.stdout,
        }

    @tool_boundary("navigate conflicts")
    def navigate(self, params: NavigateParams) -> dict:
        """Step to the next or previous hunk across all files."""
        cwd = params.path
        root = self._root(cwd)

        paths = self.detector.conflicted_paths(cwd)
        if not paths:
            return {"has_more": False, "message": "No conflicts to navigate"}

        files = []
        for path in paths:
            try:
                files.append((path, self._read_hunks(root, path)))
            except ConflictToolError as e:
                self.logger.debug(
                    "Skipping unreadable file", file=path, error=str(e)
                )

        locations = build_locations(files)
        if not locations:
            return {
                "has_more": False,
                "message": "No conflicts found in files",
            }

        result = navigate(
            locations,
            params.direction,
            params.current_file,
            params.current_hunk_index,
        )
        return result.model_dump(mode="json", exclude_none=True)

    @tool_boundary("generate suggestion")
    def suggest(self, params: SuggestParams) -> dict:
        """Analysis prompt for one hunk, to hand to a model."""
        root = self._root(params.path)
        hunks = self._read_hunks(root, params.file)
        if not 0 <= params.hunk_index < len(hunks):
            raise InvalidHunkIndexError(params.hunk_index, len(hunks))

        hunk = hunks[params.hunk_index]
        return {
            "file": params.file,
            "hunk_index": params.hunk_index,
            "hunk": hunk.model_dump(mode="json"),
            "analysis_prompt": format_suggestion_prompt(
                params.file, hunk, self.conflict_config.suggest_template
            ),
            "message": (
                "Analysis prompt generated. Send to a model for a "
                "resolution suggestion."
            ),
        }
