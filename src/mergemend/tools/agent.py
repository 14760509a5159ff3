"""pydantic-ai tool functions over the conflict operations.

Each function returns the operation's data on success and raises
ModelRetry with the failure message otherwise, so the model can
correct its call.
"""

import time
from functools import wraps
from typing import Literal

from pydantic_ai import RunContext
from pydantic_ai.exceptions import ModelRetry

from mergemend.core.result import ToolResult
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
from mergemend.tools.workspace import Workspace


def _unwrap(result: ToolResult) -> dict:
    if not result.success:
        raise ModelRetry(result.error)
    return result.data


def detect_conflicts(ctx: RunContext[Workspace]) -> dict:
    """Detect the in-progress operation and list conflicted files.

    Returns:
        merge_state, conflict_files (with parsed hunks),
        total_conflicts and a summary line
    """
    workspace = ctx.deps
    return _unwrap(workspace.tools.detect(DetectParams(path=workspace.path)))


def show_conflict(
    ctx: RunContext[Workspace],
    file: str,
    hunk_index: int | None = None,
) -> dict:
    """Show conflict hunks of a file with surrounding context.

    Args:
        file: File path relative to the repository
        hunk_index: 0-based hunk to show; all hunks when omitted
    """
    workspace = ctx.deps
    return _unwrap(workspace.tools.show(ShowParams(
        path=workspace.path, file=file, hunk_index=hunk_index,
    )))


def resolve_conflict(
    ctx: RunContext[Workspace],
    file: str,
    strategy: Literal["ours", "theirs", "both", "manual"],
    hunk_index: int | None = None,
    manual_content: str | None = None,
) -> dict:
    """Resolve one hunk, or every hunk, of a file.

    The file is staged once no conflict markers remain.

    Args:
        file: File path relative to the repository
        strategy: ours, theirs, both (ours then theirs) or manual
        hunk_index: 0-based hunk to resolve; all hunks when omitted
        manual_content: Replacement text, required for manual
    """
    workspace = ctx.deps
    return _unwrap(workspace.tools.resolve(ResolveParams(
        path=workspace.path,
        file=file,
        strategy=strategy,
        hunk_index=hunk_index,
        manual_content=manual_content,
    )))


def accept_file(
    ctx: RunContext[Workspace],
    file: str,
    accept: Literal["ours", "theirs"],
) -> dict:
    """Keep one side's whole version of a file and stage it.

    Args:
        file: File path relative to the repository
        accept: ours or theirs
    """
    workspace = ctx.deps
    return _unwrap(workspace.tools.accept_file(AcceptFileParams(
        path=workspace.path, file=file, accept=accept,
    )))


def abort_operation(
    ctx: RunContext[Workspace],
    operation: Literal["merge", "rebase", "cherry-pick", "revert"]
    | None = None,
) -> dict:
    """Abort the in-progress operation, discarding its changes.

    Args:
        operation: Operation to abort; detected when omitted
    """
    workspace = ctx.deps
    return _unwrap(workspace.tools.abort(AbortParams(
        path=workspace.path, operation=operation,
    )))


def continue_operation(
    ctx: RunContext[Workspace],
    message: str | None = None,
) -> dict:
    """Conclude or continue the operation after all files are resolved.

    Args:
        message: Commit message when concluding a merge
    """
    workspace = ctx.deps
    return _unwrap(workspace.tools.continue_operation(ContinueParams(
        path=workspace.path, message=message,
    )))


def navigate_conflicts(
    ctx: RunContext[Workspace],
    direction: Literal["next", "previous"],
    current_file: str | None = None,
    current_hunk_index: int | None = None,
) -> dict:
    """Move to the next or previous conflict across all files.

    Args:
        direction: next or previous
        current_file: File of the current position
        current_hunk_index: Hunk index of the current position
    """
    workspace = ctx.deps
    return _unwrap(workspace.tools.navigate(NavigateParams(
        path=workspace.path,
        direction=direction,
        current_file=current_file,
        current_hunk_index=current_hunk_index,
    )))


def suggest_resolution(
    ctx: RunContext[Workspace],
    file: str,
    hunk_index: int,
) -> dict:
    """Build an analysis prompt describing one hunk.

    Args:
        file: File path relative to the repository
        hunk_index: 0-based hunk to analyze
    """
    workspace = ctx.deps
    return _unwrap(workspace.tools.suggest(SuggestParams(
        path=workspace.path, file=file, hunk_index=hunk_index,
    )))


def _log_tool_execution(func):
    """Log each agent tool call: invocation, outcome and timing.

    ModelRetry is logged as a warning and re-raised for pydantic-ai
    to handle.
    """
    @wraps(func)
    def wrapper(ctx: RunContext[Workspace], *args, **kwargs):
        tool_name = func.__name__
        logger = ctx.deps.tools.logger
        start_time = time.time()

        logger.info(
            f"Tool '{tool_name}' invoked",
            tool_name=tool_name,
            kwargs=kwargs,
            workspace_workdir=ctx.deps.path,
        )
        try:
            result = func(ctx, *args, **kwargs)
        except ModelRetry as e:
            logger.warning(
                f"Tool '{tool_name}' raised ModelRetry",
                tool_name=tool_name,
                execution_time_ms=round((time.time() - start_time) * 1000, 2),
                retry_message=str(e),
            )
            raise

        logger.info(
            f"Tool '{tool_name}' succeeded",
            tool_name=tool_name,
            execution_time_ms=round((time.time() - start_time) * 1000, 2),
        )
        logger.trace(
            f"Tool '{tool_name}' full result",
            tool_name=tool_name,
            result=result,
        )
        return result

    return wrapper


_raw_tools = [
    detect_conflicts,
    show_conflict,
    resolve_conflict,
    accept_file,
    abort_operation,
    continue_operation,
    navigate_conflicts,
    suggest_resolution,
]

# For Agent(tools=agent_tools, deps_type=Workspace)
agent_tools = [_log_tool_execution(tool) for tool in _raw_tools]
