"""
Metadata records - One parsed ExifTool row per media file.

Each known tag is an explicit optional field. Empty strings from ExifTool
are treated the same as a missing tag.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

# ExifTool tag name -> MetadataRecord field name
TAG_FIELDS = {
    # High confidence (real capture time)
    "DateTimeOriginal": "date_time_original",
    "SubSecDateTimeOriginal": "sub_sec_date_time_original",
    "CreateDate": "create_date",
    "SubSecCreateDate": "sub_sec_create_date",
    "MediaCreateDate": "media_create_date",
    "DateTimeCreated": "date_time_created",
    # Medium confidence (messengers / containers)
    "TrackCreateDate": "track_create_date",
    "CreationDate": "creation_date",
    "MetadataDate": "metadata_date",
    "ModifyDate": "modify_date",
    "MediaModifyDate": "media_modify_date",
    "TrackModifyDate": "track_modify_date",
    # Live Photo grouping token
    "ContentIdentifier": "content_identifier",
}

EXIFTOOL_TAGS = list(TAG_FIELDS)


def _clean(value: Any) -> str | None:
    if value is None:
        return None
    text = value if isinstance(value, str) else str(value)
    text = text.strip()
    return text or None


@dataclass(frozen=True)
class MetadataRecord:
    """Metadata extracted for a single source file."""

    source_file: str
    date_time_original: str | None = None
    sub_sec_date_time_original: str | None = None
    create_date: str | None = None
    sub_sec_create_date: str | None = None
    media_create_date: str | None = None
    date_time_created: str | None = None
    track_create_date: str | None = None
    creation_date: str | None = None
    metadata_date: str | None = None
    modify_date: str | None = None
    media_modify_date: str | None = None
    track_modify_date: str | None = None
    content_identifier: str | None = None

    @classmethod
    def from_exiftool(cls, row: dict) -> "MetadataRecord":
        """
        Build a record from one element of `exiftool -json` output.

        Raises:
            ValueError: If the row has no SourceFile
        """
        source_file = row.get("SourceFile")
        if not source_file:
            raise ValueError(f"ExifTool row without SourceFile: {row!r}")

        values = {name: _clean(row.get(tag)) for tag, name in TAG_FIELDS.items()}
        return cls(source_file=str(source_file), **values)

    def get(self, tag: str) -> str | None:
        """Get a value by its ExifTool tag name."""
        return getattr(self, TAG_FIELDS[tag])

    @property
    def path(self) -> Path:
        return Path(self.source_file)

