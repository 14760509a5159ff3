"""Dependencies handed to agent tool functions."""

from pathlib import Path

from mergemend.tools.conflict import ConflictTools


class Workspace:
    """Repository an agent is resolving conflicts in.

    Provides the working directory and the tools bound to it.
    """

    def __init__(self, workdir: Path, tools: ConflictTools | None = None):
        """Initialize workspace.

        Args:
            workdir: git working directory containing conflicts
            tools: ConflictTools to call (defaults built when None)
        """
        self.workdir = Path(workdir)
        self.tools = tools or ConflictTools()

    @property
    def path(self) -> str:
        return str(self.workdir)
