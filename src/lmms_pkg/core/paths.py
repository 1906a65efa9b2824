"""
Path and file name helpers shared by the packaging pipeline.

LMMS writes resource paths with the separators of the machine the project was
saved on, so everything that inspects a `src` value goes through `normalize`
first.
"""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path, PurePosixPath, PureWindowsPath
from typing import Iterable, Optional, Union

from .errors import DirectoryCreationError

PathLike = Union[str, "os.PathLike[str]"]

PROJECT_EXTENSION = ".mmp"
COMPRESSED_PROJECT_EXTENSION = ".mmpz"
SOUNDFONT_EXTENSION = ".sf2"
RESOURCE_DIRECTORY = "resources"


def normalize(path: PathLike) -> str:
    """Return ``path`` as a string using forward slashes only."""
    return os.fspath(path).replace("\\", "/")


def basename(path: PathLike) -> str:
    return PurePosixPath(normalize(path)).name


def stem(path: PathLike) -> str:
    return PurePosixPath(normalize(path)).stem


def extension(path: PathLike) -> str:
    return PurePosixPath(normalize(path)).suffix


def has_extension(path: PathLike, ext: str) -> bool:
    """Case-insensitive extension check (``.SF2`` counts as ``.sf2``)."""
    return extension(path).lower() == ext.lower()


def strip_anchor(path: PathLike) -> str:
    """Drop a leading root or drive: ``/a/b.wav`` and ``C:\\a\\b.wav`` both give ``a/b.wav``."""
    pure = PureWindowsPath(normalize(path))
    parts = pure.parts[1:] if pure.anchor else pure.parts
    return "/".join(parts)


def exists(path: PathLike) -> bool:
    return Path(normalize(path)).exists()


def is_within(path: Path, root: Path) -> bool:
    """True when ``path`` resolves to ``root`` or somewhere below it."""
    try:
        path.resolve().relative_to(root.resolve())
    except ValueError:
        return False
    return True


def create_directories(directory: Path) -> Optional[Path]:
    """Create ``directory`` and missing parents.

    Returns the outermost directory that did not exist before, or None if
    there was nothing to create.
    """
    if directory.is_dir():
        return None
    if directory.exists():
        raise DirectoryCreationError(f'Cannot create "{directory}": a file is in the way.')

    outermost = directory
    for parent in directory.absolute().parents:
        if parent.exists():
            break
        outermost = parent
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise DirectoryCreationError(f'Cannot create "{directory}": {e}') from e
    return outermost


def remove_created(created: Iterable[Path], log: logging.Logger) -> None:
    """Best-effort removal of files and directories, newest first."""
    for path in reversed(list(created)):
        try:
            if path.is_dir():
                shutil.rmtree(path)
            else:
                path.unlink(missing_ok=True)
        except OSError as e:
            log.debug('Cannot remove "%s": %s', path, e)
