"""Data model for conflicts and workspace state."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, computed_field


class Strategy(StrEnum):
    """How a conflict hunk is resolved."""

    OURS = "ours"
    THEIRS = "theirs"
    BOTH = "both"
    MANUAL = "manual"


class OperationType(StrEnum):
    """Composite git operation that can stop on conflicts."""

    MERGE = "merge"
    REBASE = "rebase"
    CHERRY_PICK = "cherry-pick"
    REVERT = "revert"
    NONE = "none"


class ConflictHunk(BaseModel):
    """One conflict region of one file.

    Line numbers are 1-indexed and point at the opening and closing
    marker lines. A hunk describes the file content it was parsed
    from; once the file changes it must be parsed again.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    start_line: int
    end_line: int
    ours_content: str
    theirs_content: str
    base_content: str = ""
    context_before: list[str] = Field(default_factory=list)
    context_after: list[str] = Field(default_factory=list)
    ours_branch: str = "HEAD"
    theirs_branch: str = "incoming"


class ConflictFile(BaseModel):
    """A conflicted path and whatever could be parsed from it."""

    path: str
    absolute_path: str
    hunks: list[ConflictHunk] = Field(default_factory=list)
    file_type: str = "text"
    is_binary: bool = False
    error: str | None = None

    @computed_field
    @property
    def conflict_count(self) -> int:
        # Binary content is never examined; presence is all we know.
        if self.is_binary:
            return 1
        return len(self.hunks)


class MergeState(BaseModel):
    """Workspace-wide operation state, recomputed on every detection."""

    type: OperationType = OperationType.NONE
    has_conflicts: bool = False
    current_branch: str = ""
    incoming_ref: str = ""
    conflict_files: list[str] = Field(default_factory=list)
    current_step: int | None = None
    total_steps: int | None = None
    merge_message: str | None = None


class ResolutionResult(BaseModel):
    """Outcome of resolving one or all hunks of a file."""

    success: bool
    file_path: str
    hunk_id: str | None = None
    strategy: Strategy
    remaining_conflicts: int
    resolved_hunks: int = 0
    staged: bool = False
    message: str = ""
