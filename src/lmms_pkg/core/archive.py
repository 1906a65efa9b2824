"""
Zip container behind the ``.mmpk`` package files.

A package is an ordinary zip archive. Entry names are relative to the parent
of the packaged directory, so every entry starts with that directory's name::

    demo/demo.mmp
    demo/resources/
    demo/resources/kick.wav
"""

from __future__ import annotations

import logging
import shutil
import zipfile
import zlib
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from . import paths
from .errors import ArchiveError, PackageImportError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ArchiveEntry:
    index: int
    name: str
    size: int
    is_dir: bool


def package_path_for(directory: Path, extension: str) -> Path:
    """``out/demo/`` packages into ``out/demo<extension>``."""
    directory = Path(directory).absolute()
    return directory.parent / f"{directory.name}{extension}"


def create_archive(directory: Path, extension: str, *, log: Optional[logging.Logger] = None) -> Path:
    """Compress ``directory`` into a sibling archive and return its path."""
    log = log or logger
    directory = Path(directory)
    if not directory.is_dir():
        raise ArchiveError(f'Cannot package "{directory}": not a directory.')

    archive_path = package_path_for(directory, extension)
    base = directory.absolute().parent
    try:
        with zipfile.ZipFile(archive_path, "w", zipfile.ZIP_DEFLATED) as zf:
            for item in [directory, *sorted(directory.rglob("*"))]:
                arcname = item.absolute().relative_to(base).as_posix()
                if item.is_dir():
                    log.debug("zip: %s/", arcname)
                    zf.writestr(zipfile.ZipInfo(arcname + "/"), b"")
                elif item.is_file():
                    log.debug("zip: %s", arcname)
                    zf.write(item, arcname)
                else:
                    log.info("%s is something else. It is not zipped into the archive.", item)
    except OSError as e:
        archive_path.unlink(missing_ok=True)
        raise ArchiveError(f'Cannot write package "{archive_path}": {e}') from e
    return archive_path


class PackageArchive:
    """Read access to a package file: enumerate, read and extract entries."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self._zip: Optional[zipfile.ZipFile] = None

    def open_for_read(self) -> "PackageArchive":
        try:
            self._zip = zipfile.ZipFile(self.path, "r")
        except (OSError, zipfile.BadZipFile) as e:
            raise ArchiveError(f'Cannot open "{self.path}": {e}') from e
        return self

    def close(self) -> None:
        if self._zip is not None:
            self._zip.close()
            self._zip = None

    def __enter__(self) -> "PackageArchive":
        return self.open_for_read()

    def __exit__(self, *exc) -> None:
        self.close()

    @property
    def _archive(self) -> zipfile.ZipFile:
        if self._zip is None:
            raise ArchiveError(f'"{self.path}" is not open.')
        return self._zip

    def list_entries(self) -> List[ArchiveEntry]:
        return [
            ArchiveEntry(index=i, name=info.filename, size=info.file_size, is_dir=info.is_dir())
            for i, info in enumerate(self._archive.infolist())
        ]

    def read_entry(self, index: int) -> bytes:
        info = self._archive.infolist()[index]
        try:
            return self._archive.read(info)
        except (OSError, zipfile.BadZipFile, zlib.error, RuntimeError) as e:
            raise ArchiveError(f'Cannot read "{info.filename}" from "{self.path}": {e}') from e

    def extract_entry(self, index: int, destination: Path) -> Path:
        """Write one entry below ``destination``, keeping its relative path."""
        info = self._archive.infolist()[index]
        destination = Path(destination)
        target = destination / paths.normalize(info.filename)
        if not paths.is_within(target, destination):
            raise PackageImportError(f'Cannot unzip "{info.filename}": it points outside of "{destination}".')
        try:
            if info.is_dir():
                target.mkdir(parents=True, exist_ok=True)
            else:
                target.parent.mkdir(parents=True, exist_ok=True)
                with self._archive.open(info) as src, open(target, "wb") as dst:
                    shutil.copyfileobj(src, dst)
        except (OSError, zipfile.BadZipFile, zlib.error, RuntimeError) as e:
            raise PackageImportError(f'Cannot unzip "{info.filename}": {e}') from e
        return target
