"""
Placement planner - Target path and copy/skip decision

Layout under the target root:
- dated:   YYYY/MM/DD/YYYY.MM.DD_HH.MM.SS-<hash>[-approx]<ext>
- undated: no-photo-taken-date/<hash><ext>

Re-running over the same inputs yields the same paths; an existing target
is never touched again.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path

from .constants import APPROX_SUFFIX, NO_DATE_DIR
from .resolver import FinalRecord


class PlacementAction(Enum):
    """What to do with a source file."""

    COPY = "copy"
    SKIP_EXISTING = "skip_existing"


@dataclass(frozen=True)
class PlacementDecision:
    """Where a source file goes and whether it still needs copying."""

    source_path: Path
    target_path: Path
    action: PlacementAction

    @property
    def needs_copy(self) -> bool:
        return self.action == PlacementAction.COPY


def format_date_dir(target_root: Path, date: datetime) -> Path:
    """Build the YYYY/MM/DD directory for a date."""
    return target_root / f"{date.year:04d}" / f"{date.month:02d}" / f"{date.day:02d}"


def format_base_name(date: datetime, identity_hash: str, approx: bool) -> str:
    """
    Build the file name without extension.

    Examples:
        2024-01-02 03:04:05, "abc", False -> 2024.01.02_03.04.05-abc
        2024-01-02 03:04:05, "abc", True  -> 2024.01.02_03.04.05-abc-approx
    """
    name = (
        f"{date.year:04d}.{date.month:02d}.{date.day:02d}_"
        f"{date.hour:02d}.{date.minute:02d}.{date.second:02d}-{identity_hash}"
    )
    if approx:
        name += APPROX_SUFFIX
    return name


def target_path(record: FinalRecord, target_root: Path) -> Path:
    """Compute the target path for a record (no filesystem access)."""
    if record.date is None:
        return target_root / NO_DATE_DIR / f"{record.identity_hash}{record.extension}"

    directory = format_date_dir(target_root, record.date)
    base_name = format_base_name(record.date, record.identity_hash, record.approx)
    return directory / f"{base_name}{record.extension}"


def plan_placement(record: FinalRecord, target_root: Path) -> PlacementDecision:
    """
    Decide placement for a record.

    Existence of the target path is the only idempotency check; file
    content is never compared.
    """
    target = target_path(record, target_root)
    action = PlacementAction.SKIP_EXISTING if target.exists() else PlacementAction.COPY
    return PlacementDecision(source_path=record.source_path, target_path=target, action=action)
