"""
Package inspection commands (`lmms-pkg check` / `lmms-pkg info`).
"""

from pathlib import Path

import typer

from ..core.config import get_settings
from ..core.inspector import PackageInspector
from ._common import console, enable_verbose


def check_command(
    package_file: Path = typer.Argument(..., help="Package to check."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="List every entry checked."),
):
    """Check if the package is valid."""
    enable_verbose(verbose)
    inspector = PackageInspector(get_settings().supported_versions, console=console)
    if not inspector.check_zip_file(package_file):
        console.print("Invalid package.")
        raise typer.Exit(1)
    console.print("-- Valid package.")


def info_command(
    package_file: Path = typer.Argument(..., help="Package to describe."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Report every step."),
):
    """Get information about the package."""
    enable_verbose(verbose)
    settings = get_settings()
    inspector = PackageInspector(settings.supported_versions, console=console)
    if not inspector.zip_file_info(package_file, settings.package_extension):
        raise typer.Exit(1)
