"""
Import: unpack a ``.mmpk`` package and make its project usable on this machine.

After extraction the project's ``src`` attributes are pointed at the absolute
paths of the extracted resources. The project file as shipped is kept next to
it as ``<name>.backup``.
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from . import paths
from .archive import PackageArchive
from .document import ProjectDocument
from .errors import (
    AlreadyExistingFileError,
    InvalidXmlFileError,
    LmmsPkgError,
    NonExistingFileError,
    PackageImportError,
)
from .inspector import PackageInspector
from .options import UnpackOptions

logger = logging.getLogger(__name__)

BACKUP_SUFFIX = ".backup"


@dataclass
class ImportResult:
    directory: Path
    project_file: Path
    backup_file: Path
    configured: List[Tuple[str, str]] = field(default_factory=list)
    unresolved: List[str] = field(default_factory=list)


def scan_resources(package_root: Path, exclude: Sequence[Path] = ()) -> List[Path]:
    """Regular files below ``package_root`` in a stable (sorted) order."""
    excluded = {p.absolute() for p in exclude}
    return [
        p for p in sorted(package_root.rglob("*")) if p.is_file() and p.absolute() not in excluded
    ]


def match_resource(source: str, package_root: Path, resources: Sequence[Path]) -> Optional[Path]:
    """Find the extracted file a ``src`` value refers to.

    The path the exporter wrote (relative to ``resources/``) wins; otherwise
    the first file with the same name is used.
    """
    resource_dir = package_root / paths.RESOURCE_DIRECTORY
    exact = resource_dir / paths.normalize(source)
    if exact.is_file() and paths.is_within(exact, resource_dir):
        return exact

    name = paths.basename(source)
    for resource in resources:
        if resource.name == name:
            return resource
    return None


class PackageDisassembler:
    """Run one import described by an :class:`UnpackOptions` record."""

    def __init__(self, options: UnpackOptions, *, logger: logging.Logger | None = None):
        self.options = options
        self._log = logger or logging.getLogger(__name__)
        self._created: List[Path] = []

    def unpack(self) -> ImportResult:
        package = Path(self.options.package_file)
        destination = Path(self.options.destination_directory)

        if not package.is_file():
            raise NonExistingFileError(f'"{package}" does not exist.')

        inspector = PackageInspector(self.options.supported_versions, logger=self._log)
        report = inspector.inspect(package)
        if not report.valid:
            raise PackageImportError(f'Cannot import "{package}": invalid package: {report.reason}.')
        self._log.info("Package is OK.")

        self._created = []
        try:
            return self._unpack(package, destination, report.project_entries[0])
        except LmmsPkgError:
            self._cleanup()
            raise
        except OSError as e:
            self._cleanup()
            raise PackageImportError(f"Import failed: {e}") from e

    def _unpack(self, package: Path, destination: Path, project_entry: str) -> ImportResult:
        self._ensure_directory(destination)

        project_file = destination / paths.normalize(project_entry)
        if paths.exists(project_file):
            raise AlreadyExistingFileError(
                f'"{project_file}" already exists. You need to import into a fresh directory.'
            )

        backup_file = project_file.with_name(project_file.name + BACKUP_SUFFIX)
        if paths.exists(backup_file):
            raise AlreadyExistingFileError(
                f'"{backup_file}" already exists. You need to import into a fresh directory.'
            )

        self._extract(package, destination)
        self._log.info('Package extracted into "%s".', destination)

        shutil.copyfile(project_file, backup_file)
        if backup_file not in self._created:
            self._created.append(backup_file)
        self._log.info('Backup file created: "%s"', backup_file)

        package_root = project_file.parent
        resources = scan_resources(package_root, exclude=[project_file, backup_file])
        result = ImportResult(directory=package_root, project_file=project_file, backup_file=backup_file)
        self._configure_project(project_file, package_root, resources, result)
        return result

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _ensure_directory(self, directory: Path) -> None:
        created = paths.create_directories(directory)
        if created is not None:
            self._created.append(created)

    def _extract(self, package: Path, destination: Path) -> None:
        with PackageArchive(package) as archive:
            for entry in archive.list_entries():
                self._record_new_path(destination, entry.name)
                self._log.info('-- Extract "%s"', entry.name)
                archive.extract_entry(entry.index, destination)

    def _record_new_path(self, destination: Path, name: str) -> None:
        """Remember the outermost path an entry is about to create below ``destination``."""
        target = destination / paths.normalize(name)
        if not paths.is_within(target, destination):
            return
        candidate = destination
        for part in target.relative_to(destination).parts:
            candidate = candidate / part
            if not candidate.exists():
                if candidate not in self._created:
                    self._created.append(candidate)
                return

    def _configure_project(
        self,
        project_file: Path,
        package_root: Path,
        resources: Sequence[Path],
        result: ImportResult,
    ) -> None:
        try:
            document = ProjectDocument.load(project_file)
        except InvalidXmlFileError as e:
            raise PackageImportError(f"The imported project file is invalid: {e}") from e

        for reference in document.resource_elements():
            source = reference.src
            if not source:
                continue
            found = match_resource(source, package_root, resources)
            if found is None:
                self._log.debug('-- "%s" is not part of the package; left unchanged', source)
                result.unresolved.append(source)
                continue
            resolved = str(found.absolute())
            self._log.info('-- Configure "%s" with "%s" in project', reference.kind.value, found.name)
            self._log.debug('-- Set attribute "src" to "%s"', resolved)
            document.set_resource_attribute(reference, resolved)
            result.configured.append((source, resolved))

        document.save(project_file, error_cls=PackageImportError)

    def _cleanup(self) -> None:
        paths.remove_created(self._created, self._log)
        self._created = []
