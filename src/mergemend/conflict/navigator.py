"""Step through every conflict hunk of the workspace in order."""

from enum import StrEnum

from pydantic import BaseModel

from mergemend.conflict.models import ConflictHunk


class Direction(StrEnum):
    NEXT = "next"
    PREVIOUS = "previous"


class ConflictLocation(BaseModel):
    """One entry of the flattened conflict list."""

    file: str
    hunk_index: int
    hunk: ConflictHunk


class NavigationResult(BaseModel):
    """Outcome of one navigation step.

    position is 1-indexed for display; when has_more is False it is
    the (0-based, possibly -1) index the step started from.
    """

    has_more: bool
    message: str
    position: int | None = None
    total: int = 0
    file: str | None = None
    hunk_index: int | None = None
    hunk: ConflictHunk | None = None


def build_locations(
    files: list[tuple[str, list[ConflictHunk]]],
) -> list[ConflictLocation]:
    """Flatten (path, hunks) pairs: file order first, then hunk order."""
    return [
        ConflictLocation(file=path, hunk_index=index, hunk=hunk)
        for path, hunks in files
        for index, hunk in enumerate(hunks)
    ]


def navigate(
    locations: list[ConflictLocation],
    direction: Direction | str,
    current_file: str | None = None,
    current_hunk_index: int | None = None,
) -> NavigationResult:
    """Move one step from the current position.

    The current position is where (current_file, current_hunk_index)
    sits in locations, or -1 when either is missing or the pair is
    not found. There is no wraparound.
    """
    direction = Direction(direction)
    total = len(locations)
    if total == 0:
        return NavigationResult(
            has_more=False, message="No conflicts to navigate"
        )

    current = -1
    if current_file is not None and current_hunk_index is not None:
        current = next(
            (
                i for i, loc in enumerate(locations)
                if loc.file == current_file
                and loc.hunk_index == current_hunk_index
            ),
            -1,
        )

    step = 1 if direction is Direction.NEXT else -1
    target = current + step
    if not 0 <= target < total:
        return NavigationResult(
            has_more=False,
            message=(
                "No more conflicts ahead"
                if direction is Direction.NEXT
                else "No more conflicts before"
            ),
            position=current,
            total=total,
        )

    location = locations[target]
    return NavigationResult(
        has_more=True,
        message=f"Conflict {target + 1} of {total}: {location.file}",
        position=target + 1,
        total=total,
        file=location.file,
        hunk_index=location.hunk_index,
        hunk=location.hunk,
    )
