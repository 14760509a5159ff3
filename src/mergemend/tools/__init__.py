"""Conflict operations exposed as tools."""

from mergemend.tools.agent import agent_tools
from mergemend.tools.base import Tool, tool_boundary
from mergemend.tools.conflict import ConflictTools
from mergemend.tools.registry import ToolRegistry, create_registry
from mergemend.tools.workspace import Workspace

__all__ = [
    "ConflictTools",
    "Tool",
    "ToolRegistry",
    "Workspace",
    "agent_tools",
    "create_registry",
    "tool_boundary",
]
