"""
Export: build a package out of an LMMS project.

The steps run strictly in order and each one gates the next:

1. stage the project file into the target directory (decompressing ``.mmpz``)
2. check the staged file is a supported LMMS project
3. collect the samples and SoundFonts it references
4. copy them, flattened, into ``resources/``
5. point the project's ``src`` attributes at the copies
6. zip the target directory into a ``.mmpk`` file

If anything fatal happens, files and directories created by the run are
removed again. Nothing that existed before the run is touched.
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from . import paths
from .archive import create_archive, package_path_for
from .document import ProjectDocument
from .errors import (
    AlreadyExistingFileError,
    InvalidXmlFileError,
    LmmsPkgError,
    NonExistingFileError,
    PackageExportError,
)
from .mmpz import decompress_project
from .options import PackOptions
from .resolver import ResourceResolver, collect_referenced_paths

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExportedFile:
    """A resource copied into the package."""

    original_path: str  # the src value as written in the project
    source: Path
    destination_name: str


@dataclass
class ExportResult:
    package_path: Path
    staged_directory: Path
    project_file: Path
    exported_files: List[ExportedFile] = field(default_factory=list)
    missing: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    archived: bool = False


class PackageAssembler:
    """Run one export described by a :class:`PackOptions` record."""

    def __init__(self, options: PackOptions, *, logger: logging.Logger | None = None):
        self.options = options
        self._log = logger or logging.getLogger(__name__)
        self._created: List[Path] = []

    def pack(self) -> ExportResult:
        project = Path(self.options.project_file)
        destination = Path(self.options.destination_directory)

        if not project.is_file():
            raise NonExistingFileError(f'"{project}" does not exist.')

        self._created = []
        try:
            return self._pack(project, destination)
        except LmmsPkgError:
            self._cleanup()
            raise
        except OSError as e:
            self._cleanup()
            raise PackageExportError(f"Packaging aborted: {e}") from e

    def _pack(self, project: Path, destination: Path) -> ExportResult:
        opts = self.options
        if opts.zip_package:
            archive_path = package_path_for(destination, opts.package_extension)
            if archive_path.exists():
                raise AlreadyExistingFileError(
                    f'"{archive_path}" already exists. You need to export to a fresh directory.'
                )

        self._ensure_directory(destination)
        project_file = self._stage_project(project, destination)
        document = self._load_project(project_file)

        resource_paths = collect_referenced_paths(document)
        self._log.info("-- This project has %d file(s) to copy.", len(resource_paths))

        result = ExportResult(
            package_path=destination,
            staged_directory=destination,
            project_file=project_file,
        )
        if not resource_paths:
            self._log.info(
                '-- "%s" has no external sample or soundfont file to export.', project_file.name
            )
            self._log.info("-- So it does not make sense to export this project.")
            self._log.info(
                '-- No package file will be generated, but the directory containing the project file is created: "%s".',
                destination,
            )
            return result

        resources_dir = destination / paths.RESOURCE_DIRECTORY
        self._ensure_directory(resources_dir)
        self._copy_resources(project, resource_paths, resources_dir, result)
        self._log.info("-- %d file(s) copied.", len(result.exported_files))

        self._rewrite_references(document, project_file, result.exported_files)

        if opts.zip_package:
            result.package_path = create_archive(destination, opts.package_extension, log=self._log)
            result.archived = True
        return result

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _ensure_directory(self, directory: Path) -> None:
        created = paths.create_directories(directory)
        if created is not None:
            self._created.append(created)

    def _stage_project(self, project: Path, destination: Path) -> Path:
        if paths.has_extension(project, paths.COMPRESSED_PROJECT_EXTENSION):
            project_file = decompress_project(
                project, destination, self.options.lmms_command, log=self._log
            )
        else:
            project_file = destination / project.name
            if project_file.exists():
                raise AlreadyExistingFileError(
                    f'"{project_file}" already exists. You need to export to a fresh directory.'
                )
            self._log.info('-- Copying "%s" -> "%s"', project, project_file)
            shutil.copyfile(project, project_file)

        if not project_file.exists():
            raise NonExistingFileError(f'"{project_file}" does not exist. Packaging aborted.')
        self._created.append(project_file)
        return project_file

    def _load_project(self, project_file: Path) -> ProjectDocument:
        try:
            document = ProjectDocument.load(project_file)
        except InvalidXmlFileError as e:
            raise InvalidXmlFileError(f"{e}. Packaging aborted.") from e

        result = document.validate(self.options.supported_versions)
        if not result:
            raise InvalidXmlFileError(
                f'Invalid project file "{project_file}": {result.reason}. Packaging aborted.'
            )
        return document

    def _copy_resources(
        self,
        project: Path,
        resource_paths: List[str],
        resources_dir: Path,
        result: ExportResult,
    ) -> None:
        wanted: List[str] = []
        for resource_path in resource_paths:
            if (
                paths.has_extension(resource_path, paths.SOUNDFONT_EXTENSION)
                and not self.options.include_soundfonts
            ):
                self._log.info('-- "%s" is a SoundFont file and is ignored.', resource_path)
                result.skipped.append(resource_path)
                continue
            wanted.append(resource_path)

        # Samples stored next to the project come first, then the user's directories
        search_directories = [project.absolute().parent, *self.options.resource_dirs]
        resolver = ResourceResolver(search_directories, logger=self._log)

        for entry in resolver.resolve(wanted):
            if entry.source is None:
                result.missing.append(entry.original_path)
                continue

            destination = resources_dir / entry.destination_name
            if destination.exists():
                raise AlreadyExistingFileError(
                    f'"{destination}" already exists. You need to export to a fresh directory.'
                )
            self._log.info('-- Copying "%s" -> "%s"', entry.source, destination)
            shutil.copyfile(entry.source, destination)
            self._created.append(destination)
            result.exported_files.append(
                ExportedFile(entry.original_path, entry.source, entry.destination_name)
            )

    def _rewrite_references(
        self,
        document: ProjectDocument,
        project_file: Path,
        exported_files: List[ExportedFile],
    ) -> None:
        by_original = {f.original_path: f for f in exported_files}
        for reference in document.resource_elements():
            exported = by_original.get(reference.src)
            if exported is None:
                continue
            self._log.debug(
                '-- Set attribute "src" of <%s> to "%s"', reference.kind.value, exported.destination_name
            )
            document.set_resource_attribute(reference, exported.destination_name)
        document.save(project_file, error_cls=PackageExportError)

    def _cleanup(self) -> None:
        paths.remove_created(self._created, self._log)
        self._created = []
