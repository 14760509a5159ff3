"""Shared behaviour of the CLI subcommands."""

from typing import TYPE_CHECKING, ClassVar

from pydantic import BaseModel, ConfigDict, Field

from mergemend.tools.conflict import ConflictTools
from mergemend.tools.registry import create_registry

if TYPE_CHECKING:
    from mergemend.core.config import State


class ToolCommand(BaseModel):
    """Subcommand that runs one registered tool and prints its result
    as JSON."""

    model_config = ConfigDict(populate_by_name=True)

    tool_name: ClassVar[str]

    path: str | None = Field(
        default=None,
        description="Repository directory (default: current directory)",
    )

    def params(self) -> dict:
        """Tool parameters; field names match the tool's parameters."""
        return self.model_dump(mode="json", exclude_none=True)

    def run(self, state: "State") -> int:
        """Run the tool.

        Args:
            state: State instance with config loaded

        Returns:
            Exit code (0=success, 1=failure)
        """
        registry = create_registry(ConflictTools.from_config(state.config))
        result = registry.execute_tool(self.tool_name, self.params())
        print(result.model_dump_json(indent=2))
        return 0 if result.success else 1
