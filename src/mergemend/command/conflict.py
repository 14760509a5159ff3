"""Commands acting on individual conflicted files."""

from typing import Literal

from pydantic import Field

from mergemend.command.base import ToolCommand
from mergemend.conflict.models import Strategy
from mergemend.conflict.navigator import Direction


class ShowCommand(ToolCommand):
    """Show the conflict hunks of a file with context."""

    tool_name = "git_conflict_show"

    file: str = Field(description="File path relative to the repository")
    hunk_index: int | None = Field(
        default=None,
        alias="hunk-index",
        description="0-based hunk to show (default: all)",
    )


class ResolveCommand(ToolCommand):
    """Resolve one hunk, or every hunk, of a file.

    The file is staged when no conflict markers remain.
    """

    tool_name = "git_conflict_resolve"

    file: str = Field(description="File path relative to the repository")
    strategy: Strategy = Field(
        description="ours, theirs, both (ours then theirs) or manual",
    )
    hunk_index: int | None = Field(
        default=None,
        alias="hunk-index",
        description="0-based hunk to resolve (default: all)",
    )
    manual_content: str | None = Field(
        default=None,
        alias="manual-content",
        description="Replacement text for --strategy manual",
    )


class AcceptCommand(ToolCommand):
    """Keep one side's whole version of a file and stage it."""

    tool_name = "git_conflict_accept_file"

    file: str = Field(description="File path relative to the repository")
    side: Literal["ours", "theirs"] = Field(
        description="Which version to keep",
    )

    def params(self) -> dict:
        params = super().params()
        params["accept"] = params.pop("side")
        return params


class NavigateCommand(ToolCommand):
    """Move to the next or previous conflict across all files."""

    tool_name = "git_conflict_navigate"

    direction: Direction = Field(
        default=Direction.NEXT,
        description="next or previous",
    )
    current_file: str | None = Field(
        default=None,
        alias="current-file",
        description="File of the current position",
    )
    current_hunk_index: int | None = Field(
        default=None,
        alias="current-hunk-index",
        description="Hunk index of the current position",
    )


class SuggestCommand(ToolCommand):
    """Print an analysis prompt for one hunk, ready for a model."""

    tool_name = "git_conflict_suggest"

    file: str = Field(description="File path relative to the repository")
    hunk_index: int = Field(
        default=0,
        alias="hunk-index",
        description="0-based hunk to analyze",
    )
