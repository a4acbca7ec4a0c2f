"""Post-processing of compiler output artifacts."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from .errors import format_message
from .log import TaskLog

LOGGER = logging.getLogger(__name__)


def move_pdb_file_if_necessary(
    pdb_file: str | None,
    output_assembly: str | None,
    log: TaskLog,
) -> Path | None:
    """Move the compiler's PDB next to ``pdb_file`` when that is where it belongs.

    The compiler always writes ``<output>.pdb`` beside the assembly and has no
    switch to put it elsewhere. The generated file replaces the requested one
    when that is missing or older. Returns the destination when a move happened.
    """
    if not pdb_file or not output_assembly:
        return None

    actual = Path(output_assembly).with_suffix(".pdb")
    desired = Path(pdb_file if pdb_file.lower().endswith(".pdb") else f"{pdb_file}.pdb")
    try:
        if not actual.exists():
            return None
        if desired.exists():
            if actual.stat().st_mtime <= desired.stat().st_mtime:
                return None
            desired.unlink()
        os.replace(actual, desired)
    except OSError as exc:
        log.log_error(format_message("rename_pdb_failed", pdb_file, exc))
        return None

    LOGGER.info("pdb_moved", extra={"source": str(actual), "destination": str(desired)})
    return desired
