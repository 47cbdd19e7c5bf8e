"""Writing rendered output to disk."""

from __future__ import annotations

import contextlib
import os
import tempfile
from pathlib import Path

from ..core.errors import OutputDirectoryError, OutputWriteError

RENDERED_FILE_MODE = 0o644


def write_rendered_file(path: Path, text: str) -> None:
    """Write rendered text to ``path``, creating missing parent directories.

    The text goes to a hidden temporary file next to ``path`` that is then renamed over
    it, so a failed write never leaves a truncated output file. Line endings are written
    exactly as the template produced them.

    Raises:
        OutputWriteError: If the file or one of its parents cannot be written
    """
    tmp_name: str | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as tmp:
            tmp.write(text)
        os.chmod(tmp_name, RENDERED_FILE_MODE)
        os.replace(tmp_name, path)
        tmp_name = None
    except OSError as exc:
        raise OutputWriteError(path, exc) from exc
    finally:
        if tmp_name is not None:
            with contextlib.suppress(OSError):
                os.remove(tmp_name)


def create_output_directory(path: Path) -> None:
    """Create a fresh output directory.

    Missing parents are created, but the directory itself must not exist yet.

    Raises:
        OutputDirectoryError: If the directory exists or cannot be created
    """
    try:
        path.mkdir(parents=True, exist_ok=False)
    except OSError as exc:
        raise OutputDirectoryError(path, exc) from exc
