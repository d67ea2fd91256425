"""
Identity resolution - Final date and identity hash per record

Date: own date, then the token group's best date, then the name-key
group's best date.

Hash:
- token present: MD5 of the token text (no file I/O)
- name-key group: MD5 of the group's designated photo, computed once
- otherwise: MD5 of the file itself
"""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from .dates import ResolvedRecord
from .grouper import PairIndex
from .hashing import md5_file

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FinalRecord:
    """A source file with its final date and identity hash."""

    source_path: Path
    extension: str
    date: datetime | None
    approx: bool
    identity_hash: str

    @property
    def has_date(self) -> bool:
        return self.date is not None


class IdentityResolver:
    """
    Resolves records against a finished PairIndex.

    Safe to call from several threads once constructed.
    """

    def __init__(self, index: PairIndex, hasher: Callable[[Path], str] = md5_file):
        self.index = index
        self.hasher = hasher

    def resolve(self, record: ResolvedRecord) -> FinalRecord:
        """
        Produce the FinalRecord for one record.

        Raises:
            OSError: If a file has to be hashed and cannot be read
        """
        date, approx = record.date, record.approx

        token_group = self.index.token_group(record.content_identifier)
        name_group = self.index.name_group(record.name_key)

        if date is None and token_group is not None and token_group.candidate is not None:
            date, approx = token_group.candidate.date, token_group.candidate.approx
            logger.debug(f"Date from content identifier for {record.source_path.name}")

        if date is None and name_group is not None:
            date, approx = name_group.candidate.date, name_group.candidate.approx
            logger.debug(f"Date from paired photo {name_group.photo.path.name} for {record.source_path.name}")

        if token_group is not None:
            identity_hash = token_group.identity_hash
        elif name_group is not None:
            identity_hash = name_group.photo.get(self.hasher)
        else:
            identity_hash = self.hasher(record.source_path)

        return FinalRecord(
            source_path=record.source_path,
            extension=record.extension,
            date=date,
            approx=approx,
            identity_hash=identity_hash,
        )

    def resolve_all(self, records: Iterable[ResolvedRecord]) -> list[FinalRecord]:
        """Resolve records sequentially, preserving order."""
        return [self.resolve(record) for record in records]
