"""
Resource discovery and lookup for LMMS projects.

The resolver answers three questions for the packager: which files does the
project reference, where do they live on this machine, and under which name
does each one go into the flat ``resources/`` directory of a package.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

from . import paths
from .document import ProjectDocument

logger = logging.getLogger(__name__)


@dataclass
class ResourceEntry:
    """A declared resource path and what became of it."""

    original_path: str
    source: Optional[Path] = None
    destination_name: Optional[str] = None
    suffix: Optional[int] = None

    @property
    def found(self) -> bool:
        return self.source is not None


def collect_referenced_paths(document: ProjectDocument) -> List[str]:
    """Unique, non-empty ``src`` values in first-seen document order.

    Paths are compared as written: two spellings of the same file count as
    two resources.
    """
    unique: Dict[str, None] = {}
    for reference in document.resource_elements():
        if reference.src:
            unique.setdefault(reference.src, None)
    return list(unique)


def find_duplicate_basenames(resource_paths: Iterable[str]) -> List[str]:
    """File stems shared by more than one path, in first-seen order."""
    resource_paths = list(resource_paths)
    counts = Counter(paths.stem(p) for p in resource_paths)
    seen: Dict[str, None] = {}
    for p in resource_paths:
        name = paths.stem(p)
        if counts[name] > 1:
            seen.setdefault(name, None)
    return list(seen)


def locate(resource_path: str, search_directories: Sequence[Path] = ()) -> Optional[Path]:
    """Find ``resource_path`` on disk.

    The path is tried as written first (absolute, or relative to the working
    directory), then below each search directory in order. A leading root or
    drive is dropped for that second step, so ``/home/alice/kick.wav`` is
    looked up as ``<dir>/home/alice/kick.wav``. Returns the absolute path of
    the first hit, or None.
    """
    candidate = Path(paths.normalize(resource_path))
    if candidate.is_file():
        return candidate.absolute()

    relative = paths.strip_anchor(resource_path)
    for directory in search_directories:
        candidate = Path(directory) / relative
        logger.debug('Trying "%s"', candidate)
        if candidate.is_file():
            return candidate.absolute()
        logger.debug('Cannot get "%s"', candidate)
    return None


def assign_destination_names(resource_paths: Sequence[str]) -> List[ResourceEntry]:
    """Give every path a unique file name for the flat resource directory.

    The first path with a given stem keeps its file name; later ones get
    ``-1``, ``-2``... appended to the stem, in the order given.
    """
    duplicates = set(find_duplicate_basenames(resource_paths))
    counters: Dict[str, int] = {}
    taken: set[str] = set()
    entries: List[ResourceEntry] = []

    for resource_path in resource_paths:
        name = paths.basename(resource_path)
        name_stem = paths.stem(resource_path)
        suffix: Optional[int] = None

        if (name_stem in duplicates and name_stem in counters) or name.lower() in taken:
            ext = paths.extension(resource_path)
            counters.setdefault(name_stem, 0)
            while True:
                counters[name_stem] += 1
                suffix = counters[name_stem]
                name = f"{name_stem}-{suffix}{ext}"
                if name.lower() not in taken:
                    break
        else:
            counters.setdefault(name_stem, 0)

        taken.add(name.lower())
        entries.append(ResourceEntry(original_path=resource_path, destination_name=name, suffix=suffix))
    return entries


class ResourceResolver:
    """Resolve every resource of a project against a list of search directories."""

    def __init__(self, search_directories: Sequence[Path] = (), *, logger: logging.Logger | None = None):
        self.search_directories = [Path(d) for d in search_directories]
        self._log = logger or logging.getLogger(__name__)

    def resolve(self, resource_paths: Sequence[str]) -> List[ResourceEntry]:
        """Locate every path, then name the ones that were found.

        Missing files get no destination name, so they never take a name a
        copied file could have used.
        """
        entries = [ResourceEntry(original_path=p) for p in resource_paths]
        for entry in entries:
            entry.source = locate(entry.original_path, self.search_directories)
            if entry.source is None:
                self._log.warning('Cannot find "%s" in any resource directory; it is left out', entry.original_path)

        found = [e for e in entries if e.found]
        for entry, named in zip(found, assign_destination_names([e.original_path for e in found])):
            entry.destination_name = named.destination_name
            entry.suffix = named.suffix
        return entries
