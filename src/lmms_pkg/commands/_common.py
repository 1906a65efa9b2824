import logging
from typing import Optional

from rich.console import Console

from ..core.logging_util import setup_logging

console = Console()
err_console = Console(stderr=True)


def enable_verbose(verbose: Optional[bool]) -> None:
    """Switch on DEBUG logging when a command was given ``--verbose``."""
    if verbose and logging.getLogger().level > logging.DEBUG:
        setup_logging(verbose=True)
