"""
Centralized constants for organize-media.

Extension sets are stored lower-case; compare against `suffix.lower()`.
"""

# Files picked up when scanning a source directory
MEDIA_EXTENSIONS = {
    ".jpg",
    ".jpeg",
    ".png",
    ".heic",
    ".mov",
    ".mp4",
    ".avi",
    ".mkv",
    ".webp",
    ".dng",
}

# Still images that may anchor a Live Photo group
PHOTO_EXTENSIONS = {".heic", ".jpg", ".jpeg", ".png"}

# Bucket for files without a resolvable capture date
NO_DATE_DIR = "no-photo-taken-date"

# Suffix for names built from a medium-confidence date
APPROX_SUFFIX = "-approx"

# Written to the target root when some files had no date
NO_DATE_REPORT = "no-date-report.txt"

# Default output of the missing-dates command
MISSING_DATES_CSV = "files-without-date.csv"

EXIFTOOL_BATCH_SIZE = 100


def is_photo_extension(extension: str) -> bool:
    """Check if an extension (with leading dot, any case) is a photo."""
    return extension.lower() in PHOTO_EXTENSIONS


def is_media_extension(extension: str) -> bool:
    """Check if an extension (with leading dot, any case) is a media file."""
    return extension.lower() in MEDIA_EXTENSIONS
