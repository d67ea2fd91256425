"""
Date resolution - Capture timestamp from ExifTool metadata

Two fixed confidence tiers:
1. High: fields written by the camera at capture time
2. Medium: container, messenger and modify-time fields (only with recovery)

Within a tier the first field holding a valid date wins.
"""

import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from .metadata import MetadataRecord

HIGH_CONFIDENCE_TAGS = (
    "DateTimeOriginal",
    "SubSecDateTimeOriginal",
    "CreateDate",
    "SubSecCreateDate",
    "MediaCreateDate",
    "DateTimeCreated",
)

MEDIUM_CONFIDENCE_TAGS = (
    "TrackCreateDate",
    "CreationDate",
    "MetadataDate",
    "ModifyDate",
    "MediaModifyDate",
    "TrackModifyDate",
)

# 2024:01:02 03:04:05.123+02:00, 2024-01-02T03:04, 2024:01:02
EXIF_DATE_PATTERN = re.compile(
    r"^(\d{4})[:-](\d{2})[:-](\d{2})"
    r"(?:[ T](\d{2}):(\d{2})(?::(\d{2})(?:\.(\d+))?)?)?"
    r"\s*(?:Z|[+-]\d{2}:?\d{2})?$"
)


@dataclass(frozen=True)
class ResolvedDate:
    """A capture date and whether it came from the medium-confidence tier."""

    date: datetime | None
    approx: bool = False


NO_DATE = ResolvedDate(date=None, approx=False)


def parse_exif_date(raw: str | None) -> datetime | None:
    """
    Parse an ExifTool date string into a naive datetime.

    The wall-clock time is kept as written; a trailing UTC offset is
    accepted and discarded. Anything that is not a real calendar
    date-time (e.g. "0000:00:00 00:00:00") returns None.
    """
    if not raw:
        return None

    match = EXIF_DATE_PATTERN.match(raw.strip())
    if not match:
        return None

    year, month, day, hour, minute, second, fraction = match.groups()
    microsecond = int(fraction[:6].ljust(6, "0")) if fraction else 0

    try:
        return datetime(
            int(year),
            int(month),
            int(day),
            int(hour or 0),
            int(minute or 0),
            int(second or 0),
            microsecond,
        )
    except ValueError:
        return None


def _first_valid(record: MetadataRecord, tags: tuple[str, ...]) -> datetime | None:
    for tag in tags:
        parsed = parse_exif_date(record.get(tag))
        if parsed is not None:
            return parsed
    return None


def resolve_date(record: MetadataRecord, recover_date: bool) -> ResolvedDate:
    """
    Resolve the capture date of a record.

    Args:
        record: Parsed ExifTool metadata
        recover_date: Allow medium-confidence fields when no high-confidence
            field holds a valid date

    Returns:
        ResolvedDate; approx is True only for medium-confidence dates
    """
    exact = _first_valid(record, HIGH_CONFIDENCE_TAGS)
    if exact is not None:
        return ResolvedDate(date=exact, approx=False)

    if not recover_date:
        return NO_DATE

    medium = _first_valid(record, MEDIUM_CONFIDENCE_TAGS)
    if medium is not None:
        return ResolvedDate(date=medium, approx=True)

    return NO_DATE


@dataclass(frozen=True)
class ResolvedRecord:
    """A source file with its own resolved date, before Live Photo pairing."""

    source_path: Path
    extension: str
    date: datetime | None
    approx: bool
    content_identifier: str | None = None

    @property
    def name_key(self) -> str:
        """Directory + stem, lower-cased; pairs photo.heic with photo.mov."""
        return name_key(self.source_path)


def name_key(path: Path) -> str:
    """Build the filename-parity grouping key for a path."""
    return str(path.parent / path.stem).lower()


def resolve_record(record: MetadataRecord, recover_date: bool) -> ResolvedRecord:
    """Resolve one metadata record into a ResolvedRecord."""
    path = record.path
    resolved = resolve_date(record, recover_date)
    return ResolvedRecord(
        source_path=path,
        extension=path.suffix,
        date=resolved.date,
        approx=resolved.approx,
        content_identifier=record.content_identifier,
    )
