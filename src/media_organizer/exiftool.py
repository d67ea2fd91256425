"""
ExifTool batch reader

Runs `exiftool -json` over batches of paths (fed on stdin via `-@ -`) and
returns one MetadataRecord per path.
"""

import json
import logging
import os
import platform
import shutil
import subprocess
from collections.abc import Callable
from pathlib import Path

from .constants import EXIFTOOL_BATCH_SIZE
from .metadata import EXIFTOOL_TAGS, MetadataRecord

logger = logging.getLogger(__name__)

DEFAULT_EXIFTOOL = "exiftool.exe" if platform.system() == "Windows" else "exiftool"


class ExifToolError(RuntimeError):
    """ExifTool could not be run or produced unusable output."""


def build_command(exiftool: str = DEFAULT_EXIFTOOL) -> list[str]:
    """Build the ExifTool argument list; file names are read from stdin."""
    return [
        exiftool,
        "-json",
        "-charset",
        "filename=UTF8",
        *(f"-{tag}" for tag in EXIFTOOL_TAGS),
        "-@",
        "-",
    ]


def find_exiftool(exiftool: str = DEFAULT_EXIFTOOL) -> Path | None:
    """Locate the ExifTool executable, or None if unavailable."""
    found = shutil.which(exiftool)
    return Path(found) if found else None


def run_exiftool(files: list[Path], exiftool: str = DEFAULT_EXIFTOOL) -> list[MetadataRecord]:
    """
    Read metadata for one batch of files.

    ExifTool exits with status 1 when some files could not be read but still
    prints JSON for the rest; that case is logged and the rows are used.

    Raises:
        ExifToolError: If ExifTool is missing, fails without output,
            or prints invalid JSON
    """
    if not files:
        return []

    # Raw path bytes; non-UTF-8 names round-trip via surrogateescape
    stdin = b"".join(os.fsencode(path) + b"\n" for path in files)
    try:
        result = subprocess.run(build_command(exiftool), input=stdin, capture_output=True)
    except FileNotFoundError as err:
        raise ExifToolError(f"ExifTool not found: {exiftool}") from err

    output = result.stdout.decode("utf-8", errors="surrogateescape").strip()
    stderr = result.stderr.decode("utf-8", errors="replace").strip()
    if result.returncode != 0:
        if not output:
            raise ExifToolError(stderr or f"ExifTool exited with code {result.returncode}")
        logger.warning(f"ExifTool exited with code {result.returncode}: {stderr}")

    if not output:
        return []

    try:
        rows = json.loads(output)
    except json.JSONDecodeError as err:
        raise ExifToolError(f"Invalid ExifTool output: {err}") from err

    return [MetadataRecord.from_exiftool(row) for row in rows]


def read_metadata(
    files: list[Path],
    exiftool: str = DEFAULT_EXIFTOOL,
    batch_size: int = EXIFTOOL_BATCH_SIZE,
    on_progress: Callable[[MetadataRecord], None] | None = None,
) -> list[MetadataRecord]:
    """
    Read metadata for all files, batch by batch.

    Args:
        files: Files to inspect, in the order records should be returned
        exiftool: ExifTool executable name or path
        batch_size: Paths per ExifTool invocation
        on_progress: Called once per record as batches complete

    Returns:
        MetadataRecords in batch order
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be positive: {batch_size}")

    records: list[MetadataRecord] = []
    for start in range(0, len(files), batch_size):
        batch = files[start : start + batch_size]
        logger.debug(f"ExifTool batch {start // batch_size + 1}: {len(batch)} files")
        for record in run_exiftool(batch, exiftool):
            records.append(record)
            if on_progress:
                on_progress(record)
    return records
