"""SQL-backed catalog of known track files.

Hey future me - every method opens its OWN session scope (one transaction).
Artist folders are scanned concurrently and an AsyncSession must never be
shared between tasks, so per-call scopes are the simplest thing that's safe.
"""

import logging
from collections.abc import Sequence
from pathlib import Path

from cratekeeper.domain.entities import CandidateFile, FilterMode, TrackFile
from cratekeeper.domain.ports import ICatalogStore
from cratekeeper.domain.value_objects import ArtistId
from cratekeeper.domain.value_objects.known_files import KnownFileIndex
from cratekeeper.infrastructure.persistence.database import Database
from cratekeeper.infrastructure.persistence.repositories import (
    ArtistRepository,
    TrackFileRepository,
)

logger = logging.getLogger(__name__)


class SqlCatalogStore(ICatalogStore):
    """ICatalogStore on top of TrackFileRepository."""

    def __init__(self, db: Database) -> None:
        self._db = db

    async def add_many(self, records: Sequence[TrackFile]) -> None:
        if not records:
            return
        async with self._db.session_scope() as session:
            await TrackFileRepository(session).add_batch(records)
        logger.debug(f"Inserted {len(records)} track files")

    async def update_many(self, records: Sequence[TrackFile]) -> None:
        if not records:
            return
        async with self._db.session_scope() as session:
            await TrackFileRepository(session).update_batch(records)
        logger.debug(f"Updated {len(records)} track files")

    async def get_by_artist(self, artist_id: ArtistId) -> list[TrackFile]:
        async with self._db.session_scope() as session:
            return await TrackFileRepository(session).get_by_artist(artist_id)

    async def get_by_base_path(self, path: Path) -> list[TrackFile]:
        async with self._db.session_scope() as session:
            return await TrackFileRepository(session).get_by_base_path(path)

    async def filter_changed(
        self, candidates: Sequence[CandidateFile], filter_mode: FilterMode
    ) -> list[CandidateFile]:
        if filter_mode == FilterMode.NONE or not candidates:
            return list(candidates)
        async with self._db.session_scope() as session:
            known = await TrackFileRepository(session).get_by_paths([c.path for c in candidates])
        return KnownFileIndex(known).filter_changed(candidates, filter_mode)

    # Listen up, records below ANOTHER artist's folder nested inside base_path
    # ("/music/Various" containing "/music/Various/Some Artist") belong to that
    # artist's scan and are left alone here.
    async def cleanup(self, base_path: Path, current_paths: Sequence[Path]) -> int:
        current = set(current_paths)
        async with self._db.session_scope() as session:
            nested_folders = await ArtistRepository(session).list_paths_below(base_path)
            repository = TrackFileRepository(session)
            stale = [
                record
                for record in await repository.get_by_base_path(base_path)
                if record.path not in current
                and not any(folder in record.path.parents for folder in nested_folders)
            ]
            removed = await repository.delete_by_ids([record.id for record in stale])

        if removed:
            logger.info(f"Removed {removed} track files that no longer exist below {base_path}")
        return removed
