"""
Syncer module - Executes placement decisions

Handles:
- Creating target directories (idempotent)
- Atomic copies: temporary sibling file, then rename into place
- One writer per target path when decisions run on several threads
"""

import logging
import os
import shutil
import tempfile
import threading
from pathlib import Path

from .planner import PlacementAction, PlacementDecision

logger = logging.getLogger(__name__)


def atomic_copy(src: Path, dst: Path) -> None:
    """
    Copy src to dst so that dst either appears complete or not at all.

    Raises:
        OSError: If reading src or writing dst fails
    """
    fd, tmp_name = tempfile.mkstemp(prefix=f".{dst.name}.", suffix=".partial", dir=dst.parent)
    os.close(fd)
    tmp_path = Path(tmp_name)
    try:
        shutil.copy2(src, tmp_path)
        os.replace(tmp_path, dst)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise


class CopyExecutor:
    """
    Applies PlacementDecisions to the filesystem.

    The existence check is repeated under a per-target lock, so two
    decisions for the same target never both copy.
    """

    def __init__(self, dry_run: bool = False):
        self.dry_run = dry_run
        self._locks: dict[Path, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, target: Path) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(target)
            if lock is None:
                lock = self._locks[target] = threading.Lock()
            return lock

    def execute(self, decision: PlacementDecision) -> PlacementAction:
        """
        Execute a decision.

        Returns:
            The action actually taken (a COPY decision becomes SKIP_EXISTING
            if another writer created the target first)

        Raises:
            OSError: If directory creation or the copy fails
        """
        target = decision.target_path

        if not decision.needs_copy:
            logger.debug(f"Skipping existing: {target}")
            return PlacementAction.SKIP_EXISTING

        if self.dry_run:
            logger.info(f"[DRY RUN] Would copy: {decision.source_path} -> {target}")
            return PlacementAction.COPY

        with self._lock_for(target):
            if target.exists():
                logger.debug(f"Skipping existing: {target}")
                return PlacementAction.SKIP_EXISTING

            target.parent.mkdir(parents=True, exist_ok=True)
            atomic_copy(decision.source_path, target)

        logger.debug(f"Copied {decision.source_path} -> {target}")
        return PlacementAction.COPY
