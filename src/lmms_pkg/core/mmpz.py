"""
Turn compressed ``.mmpz`` projects into plain XML using LMMS itself.

The compressed format is never read here: LMMS is run with ``-d`` (dump) and
its standard output is written next to the staged package.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path

from . import paths
from .errors import AlreadyExistingFileError

logger = logging.getLogger(__name__)


def decompressed_name(project_file: Path) -> str:
    """``song.mmpz`` -> ``song.mmp``"""
    return f"{paths.stem(project_file)}{paths.PROJECT_EXTENSION}"


def decompress_project(
    project_file: Path,
    destination_directory: Path,
    lmms_command: str = "lmms",
    *,
    log: logging.Logger | None = None,
) -> Path:
    """Dump ``project_file`` as XML into ``destination_directory``.

    Returns the path the XML file is expected at. When LMMS cannot be run or
    fails, no file is left behind at that path and the caller decides how to
    report it.
    """
    log = log or logger
    xml_file = Path(destination_directory) / decompressed_name(project_file)
    if xml_file.exists():
        raise AlreadyExistingFileError(
            f'"{xml_file}" already exists. You need to export to a fresh directory.'
        )

    executable = shutil.which(lmms_command)
    if not executable:
        log.error('Cannot run "%s": command not found. Is LMMS installed?', lmms_command)
        return xml_file

    cmd = [executable, "-d", str(project_file)]
    log.info("-- %s > %s", " ".join(cmd), xml_file)
    try:
        with open(xml_file, "wb") as out:
            cp = subprocess.run(cmd, stdout=out, stderr=subprocess.PIPE, check=False)
    except OSError as e:
        log.error("Something is wrong with LMMS: %s", e)
        xml_file.unlink(missing_ok=True)
        return xml_file

    if cp.returncode != 0:
        stderr = (cp.stderr or b"").decode("utf-8", errors="replace").strip()
        log.error("LMMS failed to decompress \"%s\" (exit code %s): %s", project_file, cp.returncode, stderr)
        xml_file.unlink(missing_ok=True)
    return xml_file
