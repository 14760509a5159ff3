"""Tool registry for function calling."""

from pydantic import ValidationError

from mergemend.core.result import Failure, ToolResult
from mergemend.tools.base import Tool
from mergemend.tools.conflict import ConflictTools
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


class ToolRegistry:
    """Registry for tools.

    Maps tool names to handlers and parameter models, provides schemas
    for function calling and dispatches raw parameter dicts.
    """

    def __init__(self):
        """Initialize empty registry."""
        self._tools: dict[str, Tool] = {}

    def register(self, tool: Tool) -> None:
        """Register a tool, replacing one with the same name."""
        self._tools[tool.name] = tool

    def get_tool(self, name: str) -> Tool:
        """Retrieve tool by name.

        Raises:
            KeyError: If tool not found
        """
        return self._tools[name]

    @property
    def names(self) -> list[str]:
        return list(self._tools)

    def get_schemas(self) -> list[dict]:
        """Get function schemas for all tools.

        Returns:
            List of {name, description, parameters} dicts
        """
        return [
            {
                "name": tool.name,
                "description": tool.description,
                "parameters": tool.parameters,
            }
            for tool in self._tools.values()
        ]

    def execute_tool(self, name: str, params: dict | None = None) -> ToolResult:
        """Validate params and run the named tool.

        Unknown tools and invalid parameters come back as Failure.
        """
        tool = self._tools.get(name)
        if tool is None:
            return Failure(error=f"Unknown tool: {name}")
        try:
            validated = tool.params_model.model_validate(params or {})
        except ValidationError as e:
            return Failure(error=f"Invalid parameters for {name}: {e}")
        return tool.execute(validated)


def create_registry(tools: ConflictTools) -> ToolRegistry:
    """Registry holding every conflict operation of tools."""
    registry = ToolRegistry()
    for name, description, params_model, handler in (
        (
            "git_conflict_detect",
            "Detect the in-progress merge, rebase, cherry-pick or revert "
            "and list conflicted files with their hunks",
            DetectParams,
            tools.detect,
        ),
        (
            "git_conflict_show",
            "Show one conflict hunk, or all hunks, of a file with context",
            ShowParams,
            tools.show,
        ),
        (
            "git_conflict_resolve",
            "Resolve one hunk, or every hunk, of a file with ours, "
            "theirs, both or manual content; stages the file when clean",
            ResolveParams,
            tools.resolve,
        ),
        (
            "git_conflict_accept_file",
            "Take the whole ours or theirs version of a file and stage it",
            AcceptFileParams,
            tools.accept_file,
        ),
        (
            "git_conflict_abort",
            "Abort the in-progress merge, rebase, cherry-pick or revert",
            AbortParams,
            tools.abort,
        ),
        (
            "git_conflict_continue",
            "Continue or conclude the operation once all conflicts are "
            "resolved",
            ContinueParams,
            tools.continue_operation,
        ),
        (
            "git_conflict_navigate",
            "Move to the next or previous conflict across all files",
            NavigateParams,
            tools.navigate,
        ),
        (
            "git_conflict_suggest",
            "Build an analysis prompt for one hunk to get a resolution "
            "suggestion",
            SuggestParams,
            tools.suggest,
        ),
    ):
        registry.register(Tool(name, description, params_model, handler))
    return registry
