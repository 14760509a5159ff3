"""Commands acting on the in-progress operation as a whole."""

from pydantic import Field

from mergemend.command.base import ToolCommand
from mergemend.conflict.models import OperationType


class DetectCommand(ToolCommand):
    """Show the in-progress merge, rebase, cherry-pick or revert and
    every conflicted file with its hunks."""

    tool_name = "git_conflict_detect"


class AbortCommand(ToolCommand):
    """Abort the in-progress operation and restore the pre-operation
    state."""

    tool_name = "git_conflict_abort"

    operation: OperationType | None = Field(
        default=None,
        description=(
            "merge, rebase, cherry-pick or revert (detected when omitted)"
        ),
    )


class ResumeCommand(ToolCommand):
    """Continue the operation once every conflict is resolved.

    A merge is concluded with a commit; rebase, cherry-pick and revert
    run `<operation> --continue`.
    """

    tool_name = "git_conflict_continue"

    message: str | None = Field(
        default=None,
        description="Commit message when concluding a merge",
    )
