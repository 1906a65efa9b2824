"""
Validation and inspection of ``.mmpk`` packages without unpacking them.

A package is importable when the archive opens, is not empty, holds a
``resources/`` directory entry and at least one ``.mmp`` project, and every
project inside it is a well-formed LMMS song written by a supported release.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import paths
from .archive import ArchiveEntry, PackageArchive
from .config import PACKAGE_EXTENSION
from .document import ProjectDocument, ProjectInfo
from .errors import ArchiveError, InvalidXmlFileError

logger = logging.getLogger(__name__)


def is_project_entry(entry: ArchiveEntry) -> bool:
    return not entry.is_dir and paths.has_extension(entry.name, paths.PROJECT_EXTENSION)


def is_resource_directory_entry(entry: ArchiveEntry) -> bool:
    marker = f"{paths.RESOURCE_DIRECTORY}/"
    return entry.is_dir and (entry.name == marker or entry.name.endswith("/" + marker))


@dataclass
class PackageReport:
    path: Path
    valid: bool = False
    reason: Optional[str] = None
    entries: List[ArchiveEntry] = field(default_factory=list)
    project_entries: List[str] = field(default_factory=list)
    has_resource_directory: bool = False


class PackageInspector:
    """Checks a package file and prints what it contains."""

    def __init__(
        self,
        supported_versions: Optional[Iterable[str]] = None,
        *,
        logger: logging.Logger | None = None,
        console: Console | None = None,
    ):
        self.supported_versions = list(supported_versions) if supported_versions is not None else None
        self._log = logger or logging.getLogger(__name__)
        self.console = console or Console()

    def inspect(self, package: Path) -> PackageReport:
        """Validate ``package``; the first problem found ends the check."""
        package = Path(package)
        report = PackageReport(path=package)
        if not package.is_file():
            report.reason = f'"{package}" does not exist'
            return report

        try:
            with PackageArchive(package) as archive:
                report.entries = archive.list_entries()
                if not report.entries:
                    report.reason = "this package has no items"
                    return report

                self._log.info("-- %d items to check.", len(report.entries))
                for entry in report.entries:
                    self._log.info("-- %s", entry.name)
                    if is_project_entry(entry):
                        try:
                            document = ProjectDocument.from_bytes(archive.read_entry(entry.index), entry.name)
                        except InvalidXmlFileError as e:
                            report.reason = f'"{entry.name}" is not a valid LMMS project file ({e})'
                            return report
                        result = document.validate(self.supported_versions)
                        if not result:
                            report.reason = f'"{entry.name}": {result.reason}'
                            return report
                        report.project_entries.append(entry.name)
                    elif is_resource_directory_entry(entry):
                        report.has_resource_directory = True
        except ArchiveError as e:
            report.reason = str(e)
            return report

        if not report.project_entries:
            report.reason = "no project file found in the package"
        elif not report.has_resource_directory:
            report.reason = "no resource directory found in the package"
        else:
            report.valid = True
        return report

    def check_zip_file(self, package: Path) -> bool:
        report = self.inspect(package)
        if not report.valid:
            self.console.print(f"[red]Invalid package:[/red] {escape(report.reason or '')}")
        return report.valid

    def zip_file_info(self, package: Path, extension: str = PACKAGE_EXTENSION) -> bool:
        """Print version, tempo and time signature of every project in ``package``."""
        package = Path(package)
        if not paths.has_extension(package, extension):
            self.console.print(
                f"[red]Invalid package:[/red] {escape(package.name)} does not have the {escape(extension)} extension"
            )
            return False

        projects: List[tuple[str, ProjectInfo]] = []
        others: List[ArchiveEntry] = []
        try:
            with PackageArchive(package) as archive:
                for entry in archive.list_entries():
                    if not is_project_entry(entry):
                        others.append(entry)
                        continue
                    try:
                        document = ProjectDocument.from_bytes(archive.read_entry(entry.index), entry.name)
                    except InvalidXmlFileError as e:
                        self.console.print(f"[red]Invalid project file:[/red] {escape(str(e))}")
                        return False
                    projects.append((entry.name, document.info()))
        except ArchiveError as e:
            self.console.print(f"[red]Cannot read package:[/red] {escape(str(e))}")
            return False

        for name, info in projects:
            self._print_project(name, info)

        if others:
            table = Table(title="Package content")
            table.add_column("Entry")
            table.add_column("Size", justify="right")
            for entry in others:
                table.add_row(escape(entry.name), "-" if entry.is_dir else str(entry.size))
            self.console.print(table)

        total = len(projects) + len(others)
        self.console.print(
            f"-- {len(projects)} project file(s), {len(others)} other item(s), {total} item(s) in total."
        )
        return True

    def _print_project(self, name: str, info: ProjectInfo) -> None:
        table = Table(title=f"Project: {escape(name)}", show_header=False)
        table.add_column("Field", style="bold")
        table.add_column("Value")
        table.add_row("LMMS version", info.creator_version or "unknown")
        table.add_row("Format version", info.format_version or "unknown")
        table.add_row("Tempo (BPM)", info.bpm or "unknown")
        table.add_row("Time signature", info.time_signature or "unknown")
        self.console.print(table)
