"""Disk scan - reconcile artist folders with the track file catalog.

Hey future me - this is THE scan. Per artist folder it does, strictly in order:

     1. root folder checks  -> missing/empty root: warn once per folder, skip, touch nothing
     2. folder missing      -> cleanup(path, []) and stop
     3. walk (thread pool)  -> candidate files (PathFilter rules applied)
     4. known records       -> KnownFileIndex from get_by_base_path()
     5. filter_changed()    -> only new/changed files go on
     6. decide()            -> one Accepted/Rejected per file
     7. diff by PATH        -> to_add / to_update (never correlate by position!)
     8. add_many + update_many, ALWAYS both, also with []
     9. cleanup(path, every walked path)
    10. ArtistScannedEvent

Why the missing-root guard matters: an unmounted NAS share looks exactly like
"every file was deleted". Without step 1 we'd wipe the catalog for the whole
share. Missing ARTIST folder inside an existing root is different - that one
really is gone.

Artist folders are independent units. They run concurrently (bounded by
scan.max_workers), and one blowing up is logged and recorded in its result,
it never takes the other folders down with it.
"""

import asyncio
import logging
import os
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from cratekeeper.application.services.artist_service import ArtistService
from cratekeeper.application.services.directory_walker import DirectoryWalker
from cratekeeper.config import ScanSettings
from cratekeeper.domain.entities import (
    Accepted,
    Artist,
    ArtistScannedEvent,
    ArtistScanSkippedEvent,
    CandidateFile,
    FilterMode,
    IdentificationOverrides,
    ImportDecision,
    ImportDecisionConfig,
    ImportDecisionInfo,
    LocalTrack,
    Rejected,
    ScanSkipReason,
    TrackFile,
)
from cratekeeper.domain.ports import (
    ICatalogStore,
    IEventPublisher,
    IImportDecisionEngine,
    IRootResolver,
)
from cratekeeper.domain.value_objects import TrackFileId
from cratekeeper.domain.value_objects.known_files import KnownFileIndex
from cratekeeper.infrastructure.observability.logging import set_correlation_id

logger = logging.getLogger(__name__)


class ScanOutcome(str, Enum):
    """What happened to one artist folder."""

    SCANNED = "scanned"
    SKIPPED = "skipped"
    CLEANED = "cleaned"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass
class ArtistScanResult:
    """Per-folder report of one scan invocation."""

    path: Path
    outcome: ScanOutcome
    artist: Artist | None = None
    candidates: int = 0
    added: int = 0
    updated: int = 0
    rejected: list[Rejected] = field(default_factory=list)
    skip_reason: ScanSkipReason | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, object]:
        """Summary for logs and status endpoints."""
        return {
            "path": str(self.path),
            "outcome": self.outcome.value,
            "candidates": self.candidates,
            "added": self.added,
            "updated": self.updated,
            "rejected": len(self.rejected),
            "skip_reason": self.skip_reason.value if self.skip_reason else None,
            "error": self.error,
        }


class RootState(str, Enum):
    OK = "ok"
    MISSING = "missing"
    EMPTY = "empty"


def _root_state(root: Path) -> RootState:
    """Check a root folder (BLOCKING)."""
    if not root.is_dir():
        return RootState.MISSING
    with os.scandir(root) as it:
        if next(it, None) is None:
            return RootState.EMPTY
    return RootState.OK


def _needs_update(record: TrackFile, item: LocalTrack) -> bool:
    """Check whether an accepted file differs from its stored record."""
    artist_id = item.artist.id if item.artist is not None else None
    return (
        record.modified != item.modified
        or record.size != item.size
        or record.quality != item.quality
        or record.artist_id != artist_id
    )


def _to_record(item: LocalTrack, existing: TrackFile | None) -> TrackFile:
    """Build the catalog record for an accepted file, keeping id/added_at of an existing one."""
    info = item.file_track_info
    record = TrackFile(
        id=existing.id if existing is not None else TrackFileId.generate(),
        path=item.path,
        size=item.size,
        modified=item.modified,
        quality=item.quality,
        media_info=info.media_info,
        artist_id=item.artist.id if item.artist is not None else None,
        title=info.title,
        track_number=info.track_number,
        disc_number=info.disc_number,
        album_title=info.album_title,
    )
    if existing is not None:
        record.added_at = existing.added_at
    return record


def _validate_paths(artist_paths: Sequence[Path]) -> list[Path]:
    # Programmer errors, fail before any work is started
    if artist_paths is None:
        raise TypeError("artist_paths must be a sequence of paths, got None")
    if isinstance(artist_paths, str | bytes | Path) or not isinstance(artist_paths, Sequence):
        raise TypeError(
            f"artist_paths must be a sequence of paths, got {type(artist_paths).__name__}"
        )
    for path in artist_paths:
        if not isinstance(path, Path):
            raise TypeError(f"Artist path must be a Path, got {type(path).__name__}")
        if not path.is_absolute():
            raise ValueError(f"Artist path must be absolute: {path}")
    return list(artist_paths)


class DiskScanService:
    """Reconciles artist folders on disk with the catalog."""

    def __init__(
        self,
        catalog: ICatalogStore,
        decision_engine: IImportDecisionEngine,
        root_resolver: IRootResolver,
        events: IEventPublisher,
        artist_service: ArtistService | None = None,
        walker: DirectoryWalker | None = None,
        settings: ScanSettings | None = None,
        executor: ThreadPoolExecutor | None = None,
    ) -> None:
        self._catalog = catalog
        self._decision_engine = decision_engine
        self._root_resolver = root_resolver
        self._events = events
        self._artist_service = artist_service
        self._walker = walker or DirectoryWalker()
        self._settings = settings or ScanSettings()
        self._executor = executor or ThreadPoolExecutor(
            max_workers=self._settings.max_workers, thread_name_prefix="diskscan"
        )

    async def scan(
        self,
        artist_paths: Sequence[Path],
        filter_mode: FilterMode | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> list[ArtistScanResult]:
        """Scan artist folders and reconcile them with the catalog.

        Args:
            artist_paths: Absolute artist folders
            filter_mode: Which unchanged files to skip (defaults to settings)
            cancel_event: When set, folders that haven't started are CANCELLED

        Returns:
            One result per input path, in input order

        Raises:
            TypeError: artist_paths is not a sequence of Path
            ValueError: A path is relative
        """
        paths = _validate_paths(artist_paths)
        mode = filter_mode or FilterMode(self._settings.filter_mode)
        semaphore = asyncio.Semaphore(self._settings.max_workers)

        async def run(path: Path) -> ArtistScanResult:
            if cancel_event is not None and cancel_event.is_set():
                return ArtistScanResult(path=path, outcome=ScanOutcome.CANCELLED)
            async with semaphore:
                # Re-check: cancel may have been requested while waiting for a slot
                if cancel_event is not None and cancel_event.is_set():
                    return ArtistScanResult(path=path, outcome=ScanOutcome.CANCELLED)
                return await self._scan_guarded(path, mode)

        results = await asyncio.gather(*(run(path) for path in paths))

        outcomes: dict[str, int] = {}
        for result in results:
            outcomes[result.outcome.value] = outcomes.get(result.outcome.value, 0) + 1
        logger.info(f"Disk scan finished for {len(paths)} folders: {outcomes}")
        return list(results)

    async def scan_artist(
        self, path: Path, filter_mode: FilterMode | None = None
    ) -> ArtistScanResult:
        """Scan a single artist folder."""
        (result,) = await self.scan([path], filter_mode)
        return result

    async def _scan_guarded(self, path: Path, filter_mode: FilterMode) -> ArtistScanResult:
        set_correlation_id()
        try:
            return await self._scan_folder(path, filter_mode)
        except Exception as e:
            logger.error(f"Scan of {path} failed: {e}", exc_info=True)
            return ArtistScanResult(path=path, outcome=ScanOutcome.FAILED, error=str(e))

    async def _scan_folder(self, path: Path, filter_mode: FilterMode) -> ArtistScanResult:
        loop = asyncio.get_running_loop()
        artist = await self._find_artist(path)

        # 1. Root folder guard
        root = await self._root_resolver.best_root_for(path)
        if root is None:
            logger.warning(f"No root folder configured for {path}, skipping scan")
            return await self._skip(path, artist, ScanSkipReason.NO_ROOT_FOLDER)

        state = await loop.run_in_executor(self._executor, _root_state, root.path)
        if state == RootState.MISSING:
            logger.warning(f"Artist's root folder ({root.path}) doesn't exist, skipping {path}")
            return await self._skip(path, artist, ScanSkipReason.ROOT_FOLDER_DOES_NOT_EXIST)
        if state == RootState.EMPTY:
            logger.warning(f"Artist's root folder ({root.path}) is empty, skipping {path}")
            return await self._skip(path, artist, ScanSkipReason.ROOT_FOLDER_IS_EMPTY)

        # 2. Artist folder gone - every record below it is stale
        if not await loop.run_in_executor(self._executor, path.is_dir):
            logger.debug(f"Artist folder {path} doesn't exist, cleaning up its files")
            await self._catalog.cleanup(path, [])
            await self._events.publish(ArtistScannedEvent(path=path, artist=artist))
            return ArtistScanResult(path=path, outcome=ScanOutcome.CLEANED, artist=artist)

        # 3. Walk
        logger.info(f"Scanning {path}")
        candidates: list[CandidateFile] = await loop.run_in_executor(
            self._executor, self._walker.scan, [path]
        )
        logger.debug(f"{len(candidates)} files found in {path}")

        # 4. + 5. Diff against the catalog
        known = KnownFileIndex(await self._catalog.get_by_base_path(path))
        changed = await self._catalog.filter_changed(candidates, filter_mode)
        logger.debug(f"{len(changed)} of {len(candidates)} files in {path} are new or changed")

        # 6. Decide
        decisions = await self._decision_engine.decide(
            changed,
            IdentificationOverrides(artist=artist),
            ImportDecisionInfo(source_folder=path, known_paths=frozenset(known.paths())),
            ImportDecisionConfig(filter_mode=filter_mode, include_existing=True),
        )

        # 7. Diff by path
        to_add, to_update, rejected = self._partition(decisions, known, changed)

        # 8. Apply - both calls always happen
        await self._catalog.add_many(to_add)
        await self._catalog.update_many(to_update)

        # 9. Forget vanished files
        removed = await self._catalog.cleanup(path, [c.path for c in candidates])

        logger.info(
            f"Completed scanning {path}: {len(to_add)} added, {len(to_update)} updated, "
            f"{len(rejected)} rejected, {removed} removed"
        )

        # 10. Announce
        await self._events.publish(
            ArtistScannedEvent(
                path=path,
                artist=artist,
                added=len(to_add),
                updated=len(to_update),
                rejected=len(rejected),
            )
        )
        return ArtistScanResult(
            path=path,
            outcome=ScanOutcome.SCANNED,
            artist=artist,
            candidates=len(candidates),
            added=len(to_add),
            updated=len(to_update),
            rejected=rejected,
        )

    def _partition(
        self,
        decisions: Sequence[ImportDecision],
        known: KnownFileIndex,
        changed: Sequence[CandidateFile],
    ) -> tuple[list[TrackFile], list[TrackFile], list[Rejected]]:
        expected = {candidate.path for candidate in changed}
        to_add: list[TrackFile] = []
        to_update: list[TrackFile] = []
        rejected: list[Rejected] = []
        seen: set[Path] = set()

        for decision in decisions:
            item = decision.item
            if item.path not in expected or item.path in seen:
                logger.warning(f"Ignoring unexpected or duplicate decision for {item.path}")
                continue
            seen.add(item.path)

            match decision:
                case Accepted(item=item):
                    existing = known.get(item.path)
                    if existing is None:
                        to_add.append(_to_record(item, None))
                    elif _needs_update(existing, item):
                        to_update.append(_to_record(item, existing))
                case Rejected(item=item):
                    logger.debug(f"Rejected {item.path}: {decision.reason}")
                    rejected.append(decision)

        return to_add, to_update, rejected

    async def _find_artist(self, path: Path) -> Artist | None:
        if self._artist_service is None:
            return None
        return await self._artist_service.find_by_path(path)

    async def _skip(
        self, path: Path, artist: Artist | None, reason: ScanSkipReason
    ) -> ArtistScanResult:
        await self._events.publish(ArtistScanSkippedEvent(path=path, reason=reason, artist=artist))
        return ArtistScanResult(
            path=path, outcome=ScanOutcome.SKIPPED, artist=artist, skip_reason=reason
        )

    def shutdown(self) -> None:
        """Release the thread pool."""
        self._executor.shutdown(wait=False)
