"""
File discovery for source directories.
"""

import os
from pathlib import Path

from .constants import is_media_extension


def find_media_files(source: Path) -> list[Path]:
    """
    Recursively list media files under a directory.

    Directories and files are visited in sorted order so repeated runs see
    records in the same order. Hidden files and directories are skipped.

    Args:
        source: Directory to scan

    Returns:
        Media file paths in stable order

    Raises:
        FileNotFoundError: If source does not exist
        NotADirectoryError: If source is not a directory
    """
    if not source.exists():
        raise FileNotFoundError(f"Source path does not exist: {source}")
    if not source.is_dir():
        raise NotADirectoryError(f"Not a directory: {source}")

    files: list[Path] = []
    for root, dirs, names in os.walk(source):
        dirs[:] = sorted(d for d in dirs if not d.startswith("."))
        for name in sorted(names):
            if name.startswith("."):
                continue
            path = Path(root) / name
            if is_media_extension(path.suffix) and path.is_file():
                files.append(path)
    return files
