"""Reports of source files without a resolvable capture date."""

import csv
import logging
from collections.abc import Iterable
from pathlib import Path

from .constants import NO_DATE_REPORT
from .resolver import FinalRecord

logger = logging.getLogger(__name__)


class NoDateReporter:
    """Collects undated sources in input order."""

    def __init__(self):
        self._paths: list[Path] = []

    def add(self, record: FinalRecord) -> bool:
        """Record the source if it has no date. Returns True if recorded."""
        if record.date is not None:
            return False
        self._paths.append(record.source_path)
        return True

    @property
    def paths(self) -> list[Path]:
        return list(self._paths)

    def __len__(self) -> int:
        return len(self._paths)

    def render(self) -> str:
        """One path per line, newline-terminated."""
        return "".join(f"{path}\n" for path in self._paths)

    def write(self, target_root: Path) -> Path | None:
        """
        Write the report into the target root.

        Returns:
            Path of the report, or None if there was nothing to report
        """
        if not self._paths:
            return None

        report_path = target_root / NO_DATE_REPORT
        target_root.mkdir(parents=True, exist_ok=True)
        report_path.write_text(self.render(), encoding="utf-8", errors="surrogateescape")
        logger.info(f"No-date report: {len(self._paths)} files -> {report_path}")
        return report_path


def write_missing_dates_csv(paths: Iterable[Path], output: Path) -> int:
    """
    Write a single-column CSV (header: file_path) of undated files.

    Returns:
        Number of rows written, excluding the header
    """
    count = 0
    output.parent.mkdir(parents=True, exist_ok=True)
    with open(output, "w", newline="", encoding="utf-8", errors="surrogateescape") as f:
        f.write("file_path\n")
        writer = csv.writer(f, quoting=csv.QUOTE_ALL, lineterminator="\n")
        for path in paths:
            writer.writerow([str(path)])
            count += 1
    return count
