"""Commands of the lmms-pkg CLI.

The functions here are mounted as top-level commands by lmms_pkg.cli.
"""

from . import check as check  # noqa: F401
from . import package as package  # noqa: F401

__all__ = [
    "package",
    "check",
]
