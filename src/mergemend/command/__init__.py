"""CLI command modules for mergemend."""

from mergemend.command.conflict import (
    AcceptCommand,
    NavigateCommand,
    ResolveCommand,
    ShowCommand,
    SuggestCommand,
)
from mergemend.command.operation import (
    AbortCommand,
    DetectCommand,
    ResumeCommand,
)

__all__ = [
    "AbortCommand",
    "AcceptCommand",
    "DetectCommand",
    "NavigateCommand",
    "ResolveCommand",
    "ResumeCommand",
    "ShowCommand",
    "SuggestCommand",
]
