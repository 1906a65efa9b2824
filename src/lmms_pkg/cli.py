"""
lmms-pkg CLI - Main entry point using Typer.

This module configures the main Typer application, registers the packaging
commands and defines global options like --version and --verbose.
"""

import typer
from rich.console import Console
from rich.traceback import install

from .commands import check, package
from .core.logging_util import setup_logging

# Install a rich traceback handler for readable unexpected exceptions
install(show_locals=False)

console = Console()

app = typer.Typer(
    name="lmms-pkg",
    help="The LMMS project packager: bundle a project with its samples, and unpack it elsewhere.",
    epilog="Use `lmms-pkg [COMMAND] --help` for more info on a specific command.",
    no_args_is_help=True,
    pretty_exceptions_enable=False,  # Disable Typer's default handler to use Rich's
)

app.command("pack")(package.pack_command)
# Aliases kept for the verbs used by earlier releases
app.command("export", help="(Alias) Package a project and its external samples.")(package.pack_command)
app.command("unpack")(package.unpack_command)
app.command("import", help="(Alias) Unpack a package and import the project.")(package.unpack_command)
app.command("check")(check.check_command)
app.command("info")(check.info_command)


def _print_version(value: bool):
    if value:
        from . import __version__

        console.print(f"lmms-pkg (LMMS Project Packager) {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        help="Show the application version and exit.",
        callback=_print_version,
        is_eager=True,  # Process this before any command
    ),
    verbose: bool = typer.Option(None, "--verbose", help="Enable DEBUG-level logging."),
    quiet: bool = typer.Option(None, "--quiet", help="Only report errors."),
    json_logs: bool = typer.Option(False, "--json-logs", help="Emit logs as JSON lines to stdout."),
):
    """
    lmms-pkg - The LMMS project packager.
    """
    # Configure logging once, early
    setup_logging(json_logs=json_logs, verbose=bool(verbose), quiet=bool(quiet))


def cli():
    """Main entry point for the console script defined in pyproject.toml."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user.[/yellow]")
        raise typer.Exit(130)


if __name__ == "__main__":
    cli()
