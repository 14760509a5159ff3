"""Parameter models for the conflict tools.

Keys are accepted in snake_case or camelCase (hunk_index / hunkIndex).
`path` is the repository directory; the process cwd when omitted.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from mergemend.conflict.models import OperationType, Strategy
from mergemend.conflict.navigator import Direction


class ToolParams(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    path: str | None = Field(
        default=None,
        description="Repository directory (defaults to current directory)",
    )


class DetectParams(ToolParams):
    pass


class ShowParams(ToolParams):
    file: str = Field(description="File path relative to the repository")
    hunk_index: int | None = Field(
        default=None,
        description="0-based hunk to show; all hunks when omitted",
    )


class ResolveParams(ToolParams):
    file: str = Field(description="File path relative to the repository")
    strategy: Strategy = Field(
        description="ours, theirs, both (ours then theirs) or manual",
    )
    hunk_index: int | None = Field(
        default=None,
        description="0-based hunk to resolve; all hunks when omitted",
    )
    manual_content: str | None = Field(
        default=None,
        description="Replacement text, required for manual",
    )


class AcceptFileParams(ToolParams):
    file: str = Field(description="File path relative to the repository")
    accept: Literal["ours", "theirs"] = Field(
        description="Which side's whole file to keep",
    )


class AbortParams(ToolParams):
    operation: OperationType | None = Field(
        default=None,
        description="Operation to abort; detected when omitted",
    )


class ContinueParams(ToolParams):
    message: str | None = Field(
        default=None,
        description="Commit message when concluding a merge",
    )


class NavigateParams(ToolParams):
    direction: Direction = Field(description="next or previous")
    current_file: str | None = Field(
        default=None,
        description="File of the current position",
    )
    current_hunk_index: int | None = Field(
        default=None,
        description="Hunk index of the current position",
    )


class SuggestParams(ToolParams):
    file: str = Field(description="File path relative to the repository")
    hunk_index: int = Field(description="0-based hunk to analyze")
