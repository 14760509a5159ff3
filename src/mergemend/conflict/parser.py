"""Parse git conflict markers into ConflictHunk records.

The grammar of one hunk, markers matched by line prefix:

    <<<<<<< [ours label]
    ours lines
    ||||||| [base label]        (optional, diff3 style)
    base lines
    =======
    theirs lines
    >>>>>>> [theirs label]

The scanner is a small state machine over the file's lines. A hunk
that never reaches its separator or closing marker is dropped, and
scanning restarts on the line after its opening marker.
"""

from enum import Enum, auto
from pathlib import PurePath

from mergemend.conflict.models import ConflictHunk

OURS_MARKER = "<<<<<<<"
BASE_MARKER = "|||||||"
SEPARATOR_MARKER = "======="
THEIRS_MARKER = ">>>>>>>"

DEFAULT_OURS_LABEL = "HEAD"
DEFAULT_THEIRS_LABEL = "incoming"
DEFAULT_CONTEXT_LINES = 3


class ScanState(Enum):
    SEARCHING = auto()
    AWAITING_SEPARATOR_OR_BASE = auto()
    AWAITING_SEPARATOR_AFTER_BASE = auto()
    AWAITING_END = auto()


def _label(line: str, marker: str, default: str) -> str:
    return line[len(marker):].strip() or default


class _Hunk:
    """Marker positions (0-indexed) of the hunk being scanned."""

    def __init__(self, opening: int):
        self.opening = opening
        self.base: int | None = None
        self.separator: int | None = None


def parse(
    file_content: str,
    path: str = "",
    context_lines: int = DEFAULT_CONTEXT_LINES,
) -> list[ConflictHunk]:
    """Parse every well-formed conflict hunk in file_content.

    Args:
        file_content: Full file text
        path: File path; only its basename is used, for hunk ids
        context_lines: Lines of context to keep on each side

    Returns:
        Hunks ordered by start_line; never overlapping. Malformed
        hunks are skipped, never raised.
    """
    lines = file_content.split("\n")
    # A trailing newline leaves an empty last element that is not a
    # line of the file.
    line_count = len(lines) - 1 if file_content.endswith("\n") else len(lines)
    name = PurePath(path).name if path else "file"

    hunks: list[ConflictHunk] = []
    state = ScanState.SEARCHING
    current: _Hunk | None = None
    i = 0

    while i < len(lines) or state is not ScanState.SEARCHING:
        if i >= len(lines):
            # Reached end of input inside a hunk.
            i = current.opening + 1
            state = ScanState.SEARCHING
            continue

        line = lines[i]
        if state is ScanState.SEARCHING:
            if line.startswith(OURS_MARKER):
                current = _Hunk(i)
                state = ScanState.AWAITING_SEPARATOR_OR_BASE

        elif state is ScanState.AWAITING_SEPARATOR_OR_BASE:
            if line.startswith(BASE_MARKER):
                current.base = i
                state = ScanState.AWAITING_SEPARATOR_AFTER_BASE
            elif line.startswith(SEPARATOR_MARKER):
                current.separator = i
                state = ScanState.AWAITING_END
            elif line.startswith(THEIRS_MARKER):
                i = current.opening + 1
                state = ScanState.SEARCHING
                continue

        elif state is ScanState.AWAITING_SEPARATOR_AFTER_BASE:
            if line.startswith(SEPARATOR_MARKER):
                current.separator = i
                state = ScanState.AWAITING_END
            elif line.startswith(THEIRS_MARKER):
                i = current.opening + 1
                state = ScanState.SEARCHING
                continue

        elif state is ScanState.AWAITING_END:
            if line.startswith(THEIRS_MARKER):
                hunks.append(_build_hunk(
                    lines, current, i, line_count, context_lines,
                    f"{name}-hunk-{len(hunks)}",
                ))
                state = ScanState.SEARCHING

        i += 1

    return hunks


def _build_hunk(
    lines: list[str],
    hunk: _Hunk,
    closing: int,
    line_count: int,
    context_lines: int,
    hunk_id: str,
) -> ConflictHunk:
    ours_end = hunk.base if hunk.base is not None else hunk.separator
    base_content = ""
    if hunk.base is not None:
        base_content = "\n".join(lines[hunk.base + 1:hunk.separator])

    before_start = max(0, hunk.opening - context_lines)
    after_end = min(line_count, closing + 1 + context_lines)

    return ConflictHunk(
        id=hunk_id,
        start_line=hunk.opening + 1,
        end_line=closing + 1,
        ours_content="\n".join(lines[hunk.opening + 1:ours_end]),
        theirs_content="\n".join(lines[hunk.separator + 1:closing]),
        base_content=base_content,
        context_before=lines[before_start:hunk.opening],
        context_after=lines[closing + 1:after_end],
        ours_branch=_label(
            lines[hunk.opening], OURS_MARKER, DEFAULT_OURS_LABEL
        ),
        theirs_branch=_label(
            lines[closing], THEIRS_MARKER, DEFAULT_THEIRS_LABEL
        ),
    )
