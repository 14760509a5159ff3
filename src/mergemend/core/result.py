"""Result types for git commands and tool operations."""

from typing import Any, Literal

from pydantic import BaseModel, Field


class CommandResult(BaseModel):
    """Outcome of one git invocation."""

    success: bool
    stdout: str = ""
    stderr: str = ""
    exit_code: int


class Success(BaseModel):
    """Successful tool operation."""

    success: Literal[True] = True
    data: dict[str, Any] = Field(default_factory=dict)


class Failure(BaseModel):
    """Failed tool operation with a human-readable message."""

    success: Literal[False] = False
    error: str


ToolResult = Success | Failure
