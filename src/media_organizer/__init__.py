"""
organize-media - Date-based media library organizer

Copies photos and videos into a YYYY/MM/DD tree with names derived from:
- The capture timestamp resolved from ExifTool metadata
- An MD5 identity hash shared by both halves of a Live Photo
- An "-approx" marker when the date came from container/transfer fields
"""

__version__ = "0.1.0"
__package_name__ = "organize-media"
