"""
Resolved per-run options for the packaging pipeline.

The CLI merges its flags with :mod:`lmms_pkg.core.config` and passes one of
these records down, so nothing in the pipeline reads global state.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from .config import PACKAGE_EXTENSION, SUPPORTED_VERSIONS, PackagerSettings


@dataclass(frozen=True)
class PackOptions:
    project_file: Path
    destination_directory: Path
    include_soundfonts: bool = False
    zip_package: bool = True
    resource_dirs: List[Path] = field(default_factory=list)
    lmms_command: str = "lmms"
    supported_versions: List[str] = field(default_factory=lambda: list(SUPPORTED_VERSIONS))
    package_extension: str = PACKAGE_EXTENSION

    @classmethod
    def from_settings(cls, settings: PackagerSettings, project_file: Path, destination_directory: Path, **overrides) -> "PackOptions":
        values = dict(
            include_soundfonts=settings.include_soundfonts,
            zip_package=settings.zip_package,
            resource_dirs=list(settings.resource_dirs),
            lmms_command=settings.lmms_command,
            supported_versions=list(settings.supported_versions),
            package_extension=settings.package_extension,
        )
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(project_file=Path(project_file), destination_directory=Path(destination_directory), **values)


@dataclass(frozen=True)
class UnpackOptions:
    package_file: Path
    destination_directory: Path
    supported_versions: List[str] = field(default_factory=lambda: list(SUPPORTED_VERSIONS))
    package_extension: str = PACKAGE_EXTENSION

    @classmethod
    def from_settings(cls, settings: PackagerSettings, package_file: Path, destination_directory: Path) -> "UnpackOptions":
        return cls(
            package_file=Path(package_file),
            destination_directory=Path(destination_directory),
            supported_versions=list(settings.supported_versions),
            package_extension=settings.package_extension,
        )
