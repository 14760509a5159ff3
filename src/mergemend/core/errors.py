"""Error taxonomy for conflict operations.

These are raised inside an operation and converted into a Failure
result at the tool boundary; callers of the tool layer never see
them.
"""


class ConflictToolError(Exception):
    """Base class for expected, user-facing operation failures."""


class NotAWorkspaceError(ConflictToolError):
    """The directory is not inside a git working tree."""

    def __init__(self, path=None):
        super().__init__("Not a git repository")
        self.path = path


class ConflictFileNotFoundError(ConflictToolError):
    """A conflicted file is missing or unreadable."""

    def __init__(self, file: str, reason: str | None = None):
        message = f"File not found: {file}"
        if reason:
            message = f"Cannot read {file}: {reason}"
        super().__init__(message)
        self.file = file


class FileTooLargeError(ConflictToolError):
    """File exceeds the configured size cap; parsing is skipped."""

    def __init__(self, file: str, size: int, limit: int):
        super().__init__(
            f"File too large to parse for conflicts: {file} "
            f"({size} bytes, limit {limit})"
        )
        self.file = file
        self.size = size
        self.limit = limit


class MissingManualContentError(ConflictToolError):
    """Strategy 'manual' was requested without replacement text."""

    def __init__(self):
        super().__init__(
            "Manual resolution requires manual_content parameter"
        )


class InvalidHunkIndexError(ConflictToolError):
    """Hunk index outside [0, hunk_count)."""

    def __init__(self, index: int, count: int):
        super().__init__(
            f"Invalid hunk index {index}. File has {count} "
            f"conflict(s) (0-{count - 1})"
        )
        self.index = index
        self.count = count


class StaleHunkError(ConflictToolError):
    """Hunk positions no longer match the file's markers."""

    def __init__(self, hunk_id: str, line: int):
        super().__init__(
            f"Conflict {hunk_id} no longer matches the file at line "
            f"{line}; parse the file again"
        )
        self.hunk_id = hunk_id
        self.line = line


class NoOperationInProgressError(ConflictToolError):
    """Nothing to abort or continue."""

    def __init__(self):
        super().__init__(
            "No merge, rebase, cherry-pick, or revert operation "
            "in progress"
        )


class UnresolvedConflictsError(ConflictToolError):
    """Continue was requested while unmerged paths remain."""

    def __init__(self, paths: list[str]):
        super().__init__(
            "Cannot continue: there are still unresolved conflicts "
            f"in {len(paths)} file(s)"
        )
        self.paths = paths


class SubprocessTimeoutError(ConflictToolError):
    """git did not finish within the configured timeout."""

    def __init__(self, args: list[str]):
        super().__init__(f"git {' '.join(args)}: Command timed out")
        self.command = args


class SubprocessFailureError(ConflictToolError):
    """git exited non-zero; carries its stderr."""

    def __init__(self, args: list[str], stderr: str, fallback: str):
        super().__init__(stderr or fallback)
        self.command = args
        self.stderr = stderr
