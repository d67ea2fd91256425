"""Identity hashes - MD5 of file content or of a Live Photo token."""

import hashlib
from pathlib import Path


def md5_file(path: Path, chunk_size: int = 1024 * 1024) -> str:
    """
    Compute MD5 checksum of a file.

    Raises:
        OSError: If the file cannot be read
    """
    md5 = hashlib.md5()
    with open(path, "rb") as f:
        while chunk := f.read(chunk_size):
            md5.update(chunk)
    return md5.hexdigest()


def md5_string(value: str) -> str:
    """Compute MD5 of a string's UTF-8 bytes."""
    return hashlib.md5(value.encode("utf-8")).hexdigest()
