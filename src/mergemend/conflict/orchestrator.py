"""Resolve one or all hunks of a conflicted file and stage it when
clean."""

from pathlib import Path

from mergemend.conflict.files import read_conflicted_file, write_atomic
from mergemend.conflict.models import ResolutionResult, Strategy
from mergemend.conflict.parser import parse
from mergemend.conflict.resolver import resolve_hunks
from mergemend.core.config import ConflictConfig
from mergemend.core.errors import (
    InvalidHunkIndexError,
    MissingManualContentError,
)
from mergemend.core.log import NullLogger


class FileResolver:
    """Apply a resolution strategy to the hunks of one file."""

    def __init__(self, executor, config: ConflictConfig | None = None,
                 logger=None):
        """Initialize resolver.

        Args:
            executor: GitExecutor used for staging
            config: Size cap and context settings
            logger: Logger for resolution events
        """
        self.executor = executor
        self.config = config or ConflictConfig()
        self.logger = logger or NullLogger()

    def resolve(
        self,
        root: Path,
        file: str,
        strategy: Strategy | str,
        hunk_index: int | None = None,
        manual_content: str | None = None,
    ) -> ResolutionResult:
        """Resolve hunk_index, or every hunk when it is None.

        Args:
            root: Repository root; relative paths and staging use it
            file: File path as given by the caller
            strategy: ours, theirs, both or manual
            hunk_index: 0-based hunk to resolve; None for all
            manual_content: Replacement text for manual

        Returns:
            ResolutionResult; the file is staged when no hunks remain

        Raises:
            ConflictToolError subclasses for invalid input or
            unreadable files; nothing is written in those cases
        """
        strategy = Strategy(strategy)
        if strategy is Strategy.MANUAL and not manual_content:
            raise MissingManualContentError()

        path = Path(file) if Path(file).is_absolute() else root / file
        content = read_conflicted_file(
            path, file, self.config.max_file_size
        )
        hunks = parse(content, file, self.config.context_lines)

        if not hunks:
            return ResolutionResult(
                success=True,
                file_path=file,
                strategy=strategy,
                remaining_conflicts=0,
                message="No conflicts found in this file",
            )

        if hunk_index is None:
            targets = hunks
            hunk_id = None
        else:
            if not 0 <= hunk_index < len(hunks):
                raise InvalidHunkIndexError(hunk_index, len(hunks))
            targets = [hunks[hunk_index]]
            hunk_id = targets[0].id

        resolved = resolve_hunks(content, targets, strategy, manual_content)
        write_atomic(path, resolved)

        remaining = len(parse(resolved, file, self.config.context_lines))
        staged = False
        if remaining == 0:
            staged = self._stage(file, root)

        self.logger.info(
            "Conflict resolved",
            file=file,
            strategy=strategy.value,
            resolved_hunks=len(targets),
            remaining_conflicts=remaining,
            staged=staged,
        )

        if remaining == 0 and staged:
            message = (
                f"Resolved all conflicts in {file} and staged for commit"
            )
        elif remaining == 0:
            message = f"Resolved all conflicts in {file}; staging failed"
        else:
            message = (
                f"Resolved {len(targets)} conflict(s), "
                f"{remaining} remaining"
            )

        return ResolutionResult(
            success=True,
            file_path=file,
            hunk_id=hunk_id,
            strategy=strategy,
            remaining_conflicts=remaining,
            resolved_hunks=len(targets),
            staged=staged,
            message=message,
        )

    def _stage(self, file: str, root: Path) -> bool:
        result = self.executor.run(["add", file], cwd=root)
        if not result.success:
            self.logger.warn(
                "Failed to stage resolved file",
                file=file,
                stderr=result.stderr,
            )
        return result.success
