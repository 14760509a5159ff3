"""Rewrite file content with conflict hunks replaced by a resolution."""

from collections.abc import Iterable

from mergemend.conflict.models import ConflictHunk, Strategy
from mergemend.conflict.parser import OURS_MARKER, THEIRS_MARKER
from mergemend.core.errors import MissingManualContentError, StaleHunkError


def _side_lines(text: str) -> list[str]:
    # An empty side contributes no lines, not one blank line.
    return text.split("\n") if text else []


def resolved_lines(
    hunk: ConflictHunk,
    strategy: Strategy | str,
    manual_content: str | None = None,
) -> list[str]:
    """Lines that replace the hunk's marker block.

    Raises:
        MissingManualContentError: strategy is manual and no text
            was supplied
    """
    strategy = Strategy(strategy)
    if strategy is Strategy.OURS:
        return _side_lines(hunk.ours_content)
    if strategy is Strategy.THEIRS:
        return _side_lines(hunk.theirs_content)
    if strategy is Strategy.BOTH:
        return _side_lines(hunk.ours_content) + _side_lines(hunk.theirs_content)
    if not manual_content:
        raise MissingManualContentError()
    return manual_content.split("\n")


def resolved_text(
    hunk: ConflictHunk,
    strategy: Strategy | str,
    manual_content: str | None = None,
) -> str:
    """Resolution of one hunk as text (newline-joined)."""
    return "\n".join(resolved_lines(hunk, strategy, manual_content))


def _check_markers(lines: list[str], hunk: ConflictHunk) -> None:
    start, end = hunk.start_line, hunk.end_line
    if not (1 <= start < end <= len(lines)):
        raise StaleHunkError(hunk.id, start)
    if not lines[start - 1].startswith(OURS_MARKER):
        raise StaleHunkError(hunk.id, start)
    if not lines[end - 1].startswith(THEIRS_MARKER):
        raise StaleHunkError(hunk.id, end)


def resolve_hunks(
    content: str,
    hunks: Iterable[ConflictHunk],
    strategy: Strategy | str,
    manual_content: str | None = None,
) -> str:
    """Replace several hunks in one pass.

    All hunks must come from a single parse of content. Each block
    [start_line, end_line] is swapped for its resolution while the
    original line numbers are still valid, so no offsets drift
    between replacements.

    Args:
        content: Current file content
        hunks: Hunks parsed from content
        strategy: Resolution applied to every hunk
        manual_content: Replacement text for the manual strategy

    Returns:
        New file content; lines outside the hunks are unchanged

    Raises:
        MissingManualContentError: manual strategy without text
        StaleHunkError: a hunk does not line up with content
    """
    lines = content.split("\n")
    ordered = sorted(hunks, key=lambda h: h.start_line)

    replacements = []
    for hunk in ordered:
        _check_markers(lines, hunk)
        replacements.append(
            (hunk, resolved_lines(hunk, strategy, manual_content))
        )

    output: list[str] = []
    cursor = 0
    for hunk, replacement in replacements:
        if hunk.start_line - 1 < cursor:
            raise StaleHunkError(hunk.id, hunk.start_line)
        output.extend(lines[cursor:hunk.start_line - 1])
        output.extend(replacement)
        cursor = hunk.end_line
    output.extend(lines[cursor:])
    return "\n".join(output)


def resolve_hunk(
    content: str,
    hunk: ConflictHunk,
    strategy: Strategy | str,
    manual_content: str | None = None,
) -> str:
    """Replace exactly one hunk's marker block.

    The block is located by position (hunk.start_line), not by text,
    so identical hunks elsewhere in the file are left alone.
    """
    return resolve_hunks(content, [hunk], strategy, manual_content)
