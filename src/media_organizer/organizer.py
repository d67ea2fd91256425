"""
Organizer - Runs the full scan -> metadata -> pairing -> placement pipeline

Phases:
1. Scan the source tree for media files
2. Read metadata with ExifTool in batches
3. Resolve each record's own date
4. Build the PairIndex over the whole batch
5. Resolve identities, plan placement and copy (optionally on a thread pool)
6. Write the no-date report

Phase 4 always completes before phase 5 starts.
"""

import logging
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path

from .constants import EXIFTOOL_BATCH_SIZE
from .dates import ResolvedRecord, resolve_date, resolve_record
from .exiftool import DEFAULT_EXIFTOOL, read_metadata
from .grouper import build_pair_index
from .hashing import md5_file
from .metadata import MetadataRecord
from .planner import PlacementAction, PlacementDecision, plan_placement
from .report import NoDateReporter
from .resolver import FinalRecord, IdentityResolver
from .scanner import find_media_files
from .syncer import CopyExecutor

logger = logging.getLogger(__name__)


@dataclass
class OrganizeResult:
    """Summary of an organize run."""

    target: Path
    files_found: int = 0
    records_read: int = 0
    files_copied: int = 0
    files_skipped: int = 0
    dry_run: bool = False
    no_date_files: list[Path] = field(default_factory=list)
    report_path: Path | None = None
    decisions: list[PlacementDecision] = field(default_factory=list)

    @property
    def files_dated(self) -> int:
        return self.records_read - len(self.no_date_files)


@dataclass
class OrganizeCallbacks:
    """
    Callbacks for progress reporting.

    Lets the CLI drive progress bars without coupling the engine to Rich.
    All callbacks are optional. Placement callbacks may be invoked from
    worker threads when more than one job is used.
    """

    on_scan_complete: Callable[[int], None] | None = None  # files found
    on_metadata_start: Callable[[int], None] | None = None  # total files
    on_metadata_progress: Callable[[MetadataRecord], None] | None = None
    on_metadata_complete: Callable[[int], None] | None = None  # records read
    on_place_start: Callable[[int], None] | None = None  # total records
    on_place_progress: Callable[[PlacementDecision, PlacementAction], None] | None = None
    on_place_complete: Callable[[OrganizeResult], None] | None = None


def _place_all(
    records: list[ResolvedRecord],
    resolver: IdentityResolver,
    executor: CopyExecutor,
    target: Path,
    jobs: int,
    cb: OrganizeCallbacks,
) -> list[tuple[FinalRecord, PlacementDecision, PlacementAction]]:
    def place(record: ResolvedRecord) -> tuple[FinalRecord, PlacementDecision, PlacementAction]:
        final = resolver.resolve(record)
        decision = plan_placement(final, target)
        action = executor.execute(decision)
        if cb.on_place_progress:
            cb.on_place_progress(decision, action)
        return final, decision, action

    if jobs <= 1:
        return [place(record) for record in records]

    with ThreadPoolExecutor(max_workers=jobs) as pool:
        futures = [pool.submit(place, record) for record in records]
        try:
            return [future.result() for future in futures]
        except BaseException:
            for future in futures:
                future.cancel()
            raise


def organize_records(
    records: Iterable[MetadataRecord],
    target: Path,
    recover_date: bool = False,
    jobs: int = 1,
    dry_run: bool = False,
    hasher: Callable[[Path], str] = md5_file,
    callbacks: OrganizeCallbacks | None = None,
) -> OrganizeResult:
    """
    Place a complete batch of metadata records under the target root.

    Args:
        records: Metadata for every file of the batch, in input order
        target: Target root directory
        recover_date: Allow medium-confidence date fields
        jobs: Worker threads for hashing and copying
        dry_run: Plan only; create and copy nothing
        hasher: File content hash function
        callbacks: Optional progress callbacks

    Returns:
        OrganizeResult with counts, decisions and undated sources

    Raises:
        OSError: If a file cannot be hashed or copied (aborts the run)
    """
    cb = callbacks or OrganizeCallbacks()
    records = list(records)
    result = OrganizeResult(target=target, records_read=len(records), dry_run=dry_run)

    resolved = [resolve_record(record, recover_date) for record in records]
    index = build_pair_index(resolved)
    logger.info(f"Pair index: {len(index.tokens)} content identifiers, {len(index.names)} name groups")

    if not dry_run:
        target.mkdir(parents=True, exist_ok=True)

    if cb.on_place_start:
        cb.on_place_start(len(resolved))

    resolver = IdentityResolver(index, hasher=hasher)
    outcomes = _place_all(resolved, resolver, CopyExecutor(dry_run=dry_run), target, jobs, cb)

    reporter = NoDateReporter()
    for final, decision, action in outcomes:
        result.decisions.append(decision)
        reporter.add(final)
        if action == PlacementAction.COPY:
            result.files_copied += 1
        else:
            result.files_skipped += 1

    result.no_date_files = reporter.paths
    if not dry_run:
        result.report_path = reporter.write(target)

    logger.info(
        f"Placed {len(outcomes)} files: {result.files_copied} copied, "
        f"{result.files_skipped} skipped, {len(result.no_date_files)} without date"
    )

    if cb.on_place_complete:
        cb.on_place_complete(result)

    return result


def _read_source(
    source: Path, exiftool: str, batch_size: int, cb: OrganizeCallbacks
) -> tuple[list[Path], list[MetadataRecord]]:
    files = find_media_files(source)
    logger.info(f"Found {len(files)} media files in {source}")
    if cb.on_scan_complete:
        cb.on_scan_complete(len(files))

    if cb.on_metadata_start:
        cb.on_metadata_start(len(files))
    records = read_metadata(files, exiftool=exiftool, batch_size=batch_size, on_progress=cb.on_metadata_progress)
    if cb.on_metadata_complete:
        cb.on_metadata_complete(len(records))

    return files, records


def organize(
    source: Path,
    target: Path,
    recover_date: bool = False,
    jobs: int = 1,
    dry_run: bool = False,
    exiftool: str = DEFAULT_EXIFTOOL,
    batch_size: int = EXIFTOOL_BATCH_SIZE,
    callbacks: OrganizeCallbacks | None = None,
) -> OrganizeResult:
    """
    Organize every media file under source into target.

    Raises:
        FileNotFoundError: If source does not exist
        ExifToolError: If metadata cannot be read
        OSError: If a file cannot be hashed or copied
    """
    cb = callbacks or OrganizeCallbacks()
    files, records = _read_source(source, exiftool, batch_size, cb)

    result = organize_records(records, target, recover_date=recover_date, jobs=jobs, dry_run=dry_run, callbacks=cb)
    result.files_found = len(files)
    return result


def find_undated(
    source: Path,
    exiftool: str = DEFAULT_EXIFTOOL,
    batch_size: int = EXIFTOOL_BATCH_SIZE,
    callbacks: OrganizeCallbacks | None = None,
) -> list[Path]:
    """
    List media files with no valid date in either confidence tier.

    Returns:
        Undated source paths in scan order
    """
    _, records = _read_source(source, exiftool, batch_size, callbacks or OrganizeCallbacks())
    return [record.path for record in records if resolve_date(record, recover_date=True).date is None]
