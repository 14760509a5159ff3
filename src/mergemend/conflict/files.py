"""Reading and writing conflicted files."""

import contextlib
import os
import tempfile
from pathlib import Path

from mergemend.core.errors import ConflictFileNotFoundError, FileTooLargeError


def read_conflicted_file(path: Path, display: str, max_size: int) -> str:
    """Read a file that is about to be parsed.

    Raises:
        ConflictFileNotFoundError: Missing or unreadable file
        FileTooLargeError: File is over max_size bytes
    """
    try:
        size = path.stat().st_size
    except FileNotFoundError as e:
        raise ConflictFileNotFoundError(display) from e
    if size > max_size:
        raise FileTooLargeError(display, size, max_size)
    try:
        # newline="" keeps \r\n intact through the read/write cycle.
        with open(path, encoding="utf-8", newline="") as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise ConflictFileNotFoundError(display, str(e)) from e


def write_atomic(path: Path, content: str) -> None:
    """Replace path's content entirely or not at all."""
    fd, tmp_name = tempfile.mkstemp(
        dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(content)
        if path.exists():
            os.chmod(tmp_name, path.stat().st_mode & 0o7777)
        os.replace(tmp_name, path)
    except BaseException:
        with contextlib.suppress(FileNotFoundError):
            os.unlink(tmp_name)
        raise
