"""
Export and import commands (`lmms-pkg pack` / `lmms-pkg unpack`).

`pack` bundles a project and every sample it uses into one `.mmpk` file;
`unpack` extracts such a file and rewires the project to the extracted samples.
"""

from pathlib import Path
from typing import List, Optional

import typer
from rich.markup import escape

from ..core.assembler import PackageAssembler
from ..core.config import get_settings
from ..core.disassembler import PackageDisassembler
from ..core.errors import LmmsPkgError
from ..core.options import PackOptions, UnpackOptions
from ._common import console, enable_verbose, err_console


def pack_command(
    project_file: Path = typer.Argument(..., help="LMMS project to package (.mmp or .mmpz)."),
    target: Path = typer.Option(..., "--target", "-t", help="Destination directory of the package."),
    zip_package: Optional[bool] = typer.Option(
        None, "--zip/--no-zip", help="Compress the destination directory into a .mmpk file."
    ),
    sf2: Optional[bool] = typer.Option(
        None, "--sf2", help="Include SoundFont2 files in the package."
    ),
    rsc_dirs: List[Path] = typer.Option(
        [], "--rsc-dirs", help="Directory where missing samples may be found (repeatable)."
    ),
    lmms_command: Optional[str] = typer.Option(
        None, "--lmms-command", help="LMMS executable used to decompress .mmpz projects."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Report every step."),
):
    """Package a project and its external samples."""
    enable_verbose(verbose)
    settings = get_settings()
    options = PackOptions.from_settings(
        settings,
        project_file,
        target,
        zip_package=zip_package,
        include_soundfonts=sf2,
        lmms_command=lmms_command,
        resource_dirs=[*settings.resource_dirs, *rsc_dirs] if rsc_dirs else None,
    )

    try:
        result = PackageAssembler(options).pack()
    except LmmsPkgError as e:
        err_console.print(f"[bold red]ERROR:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)

    console.print(
        f"-- {len(result.exported_files)} file(s) copied, {len(result.missing)} missing, "
        f"{len(result.skipped)} SoundFont(s) ignored."
    )
    if result.missing:
        console.print("[yellow]Missing:[/yellow]")
        for missing in result.missing:
            console.print(f"  {escape(missing)}")
    console.print(f'-- LMMS project exported into "{escape(str(result.package_path))}"')


def unpack_command(
    package_file: Path = typer.Argument(..., help="Package to import (.mmpk)."),
    target: Path = typer.Option(..., "--target", "-t", help="Directory to extract the package into."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Report every step."),
):
    """Unpack a package and import the project."""
    enable_verbose(verbose)
    options = UnpackOptions.from_settings(get_settings(), package_file, target)

    try:
        result = PackageDisassembler(options).unpack()
    except LmmsPkgError as e:
        err_console.print(f"[bold red]ERROR:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)

    console.print(f'-- Backup file created: "{escape(str(result.backup_file))}"')
    console.print(f'-- LMMS project imported into "{escape(str(result.directory))}"')
