"""Template file enumeration and selection."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from ..core.errors import FileEnumerationError, NoMatchingFilesError, TooManyMatchingFilesError
from ..core.models import TemplateConfig, TemplateOutputType

logger = logging.getLogger(__name__)


def list_template_files(root: Path) -> list[Path]:
    """Recursively list every regular file under a directory.

    Traversal uses an explicit work list, so deep trees do not grow the call stack.
    Order is unspecified.

    Args:
        root: Directory to traverse

    Returns:
        Absolute paths of all regular files; special files such as FIFOs are skipped

    Raises:
        FileEnumerationError: If any directory cannot be read; no partial result is returned
    """
    root = Path(root).absolute()
    files: list[Path] = []
    pending: list[Path] = [root]

    try:
        while pending:
            directory = pending.pop()
            for entry in directory.iterdir():
                if entry.is_dir():
                    pending.append(entry)
                elif entry.is_file():
                    files.append(entry)
                else:
                    logger.debug(f"Skipping special file: {entry}")
    except OSError as exc:
        raise FileEnumerationError(root, exc) from exc

    logger.debug(f"Found {len(files)} file(s) under {root}")
    return files


def relative_template_path(path: Path, files_root: Path) -> Path:
    """Return a template file path relative to the files root."""
    return Path(path).absolute().relative_to(Path(files_root).absolute())


def select_template_files(
    config: TemplateConfig, files: Iterable[Path], files_root: Path
) -> list[Path]:
    """Filter enumerated files down to the ones the template includes.

    Files outside ``files_root`` are ignored. The result is sorted by path.
    """
    selected: list[Path] = []
    for path in files:
        try:
            relative = relative_template_path(path, files_root)
        except ValueError:
            logger.debug(f"Skipping file outside template root: {path}")
            continue
        if config.should_include(relative):
            selected.append(path)

    selected.sort()
    logger.debug(f"Selected {len(selected)} template file(s)")
    return selected


def check_selection(config: TemplateConfig, selected: list[Path], files_root: Path) -> None:
    """Validate the selected file count for the template's output mode.

    Raises:
        NoMatchingFilesError: If nothing was selected
        TooManyMatchingFilesError: If a file template selected more than one file
    """
    if not selected:
        raise NoMatchingFilesError(files_root)
    if config.output_type == TemplateOutputType.FILE and len(selected) > 1:
        raise TooManyMatchingFilesError(selected)
