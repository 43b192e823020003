"""Repository implementations for data persistence."""

import os
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Any, TypeVar

from sqlalchemy import delete, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from cratekeeper.domain.entities import (
    Artist,
    AudioFormat,
    AudioQuality,
    MediaInfo,
    TrackFile,
)
from cratekeeper.domain.exceptions import EntityNotFoundException
from cratekeeper.domain.value_objects import ArtistId, TrackFileId
from cratekeeper.infrastructure.persistence.models import (
    ArtistModel,
    TrackFileModel,
    ensure_utc_aware,
)

# SQLite caps bound parameters per statement; stay far below it for IN (...) lists
IN_CLAUSE_CHUNK_SIZE = 500
# Rows per multi-row INSERT; every row binds one parameter per column
INSERT_CHUNK_SIZE = 50

T = TypeVar("T")


def folder_prefix(path: Path) -> str:
    """String prefix matching everything strictly below a folder.

    The trailing separator matters: "/music/Abba" must not match
    "/music/Abba Teens/track.mp3".
    """
    return str(path).rstrip(os.sep) + os.sep


def _chunks(items: Sequence[T], size: int = IN_CLAUSE_CHUNK_SIZE) -> Iterable[Sequence[T]]:
    for start in range(0, len(items), size):
        yield items[start : start + size]


def artist_to_entity(model: ArtistModel) -> Artist:
    """Map an ArtistModel row to the domain entity."""
    return Artist(
        id=ArtistId.from_string(model.id),
        name=model.name,
        foreign_artist_id=model.foreign_artist_id,
        clean_name=model.clean_name,
        sort_name=model.sort_name,
        path=Path(model.path) if model.path else None,
        root_folder_path=Path(model.root_folder_path) if model.root_folder_path else None,
        aliases=list(model.aliases or []),
        monitored=model.monitored,
        quality_profile_id=model.quality_profile_id,
        disambiguation=model.disambiguation,
        added_at=ensure_utc_aware(model.added_at),
        updated_at=ensure_utc_aware(model.updated_at),
    )


def _apply_artist(model: ArtistModel, artist: Artist) -> None:
    model.name = artist.name
    model.foreign_artist_id = artist.foreign_artist_id
    model.clean_name = artist.clean_name
    model.sort_name = artist.sort_name
    model.path = str(artist.path) if artist.path else None
    model.root_folder_path = str(artist.root_folder_path) if artist.root_folder_path else None
    model.aliases = list(artist.aliases)
    model.monitored = artist.monitored
    model.quality_profile_id = artist.quality_profile_id
    model.disambiguation = artist.disambiguation
    model.updated_at = artist.updated_at


def track_file_to_entity(model: TrackFileModel) -> TrackFile:
    """Map a TrackFileModel row to the domain entity."""
    return TrackFile(
        id=TrackFileId.from_string(model.id),
        path=Path(model.path),
        size=model.size,
        modified=ensure_utc_aware(model.modified),
        quality=AudioQuality(
            format=AudioFormat(model.quality_format), bitrate=model.quality_bitrate
        ),
        media_info=MediaInfo.from_dict(model.media_info),
        artist_id=ArtistId.from_string(model.artist_id) if model.artist_id else None,
        title=model.title,
        track_number=model.track_number,
        disc_number=model.disc_number,
        album_title=model.album_title,
        added_at=ensure_utc_aware(model.added_at),
    )


def _track_file_values(record: TrackFile) -> dict[str, Any]:
    return {
        "path": str(record.path),
        "size": record.size,
        "modified": record.modified,
        "quality_format": record.quality.format.value,
        "quality_bitrate": record.quality.bitrate,
        "media_info": record.media_info.to_dict(),
        "artist_id": record.artist_id.value if record.artist_id else None,
        "title": record.title,
        "track_number": record.track_number,
        "disc_number": record.disc_number,
        "album_title": record.album_title,
    }


def _apply_track_file(model: TrackFileModel, record: TrackFile) -> None:
    for column, value in _track_file_values(record).items():
        setattr(model, column, value)


class ArtistRepository:
    """SQLAlchemy repository for artists, bound to one session.

    Hey future me, the session is NOT committed here - Database.session_scope()
    commits when the unit of work ends. Repos only stage changes.
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with session."""
        self.session = session

    async def add(self, artist: Artist) -> None:
        """Stage a new artist."""
        model = ArtistModel(id=artist.id.value, added_at=artist.added_at)
        _apply_artist(model, artist)
        self.session.add(model)

    async def add_batch(self, artists: Sequence[Artist]) -> None:
        """Stage several new artists."""
        for artist in artists:
            await self.add(artist)

    async def update(self, artist: Artist) -> None:
        """Update an existing artist."""
        model = await self.session.get(ArtistModel, artist.id.value)
        if model is None:
            raise EntityNotFoundException("Artist", artist.id.value)
        _apply_artist(model, artist)

    async def delete_batch(self, artist_ids: Sequence[ArtistId]) -> int:
        """Delete artists by ID, returns the number removed."""
        if not artist_ids:
            return 0
        stmt = delete(ArtistModel).where(ArtistModel.id.in_([a.value for a in artist_ids]))
        result = await self.session.execute(stmt)
        return result.rowcount or 0  # type: ignore[attr-defined]

    async def get_by_id(self, artist_id: ArtistId) -> Artist | None:
        """Get an artist by ID."""
        model = await self.session.get(ArtistModel, artist_id.value)
        return artist_to_entity(model) if model else None

    async def _get_one(self, *criteria: object) -> Artist | None:
        stmt = select(ArtistModel).where(*criteria).limit(1)  # type: ignore[arg-type]
        model = (await self.session.execute(stmt)).scalar_one_or_none()
        return artist_to_entity(model) if model else None

    async def get_by_foreign_id(self, foreign_artist_id: str) -> Artist | None:
        """Get an artist by metadata provider ID."""
        return await self._get_one(ArtistModel.foreign_artist_id == foreign_artist_id)

    async def get_by_clean_name(self, clean_name: str) -> Artist | None:
        """Get an artist by normalized name."""
        return await self._get_one(ArtistModel.clean_name == clean_name)

    async def get_by_path(self, path: Path) -> Artist | None:
        """Get the artist owning exactly this folder."""
        return await self._get_one(ArtistModel.path == str(path))

    async def list_all(self) -> list[Artist]:
        """List every artist ordered by sort name."""
        stmt = select(ArtistModel).order_by(ArtistModel.sort_name)
        result = await self.session.execute(stmt)
        return [artist_to_entity(m) for m in result.scalars().all()]

    async def list_paths_below(self, base_path: Path) -> list[Path]:
        """Folders of artists nested strictly below base_path."""
        stmt = select(ArtistModel.path).where(
            ArtistModel.path.startswith(folder_prefix(base_path), autoescape=True)
        )
        result = await self.session.execute(stmt)
        return [Path(p) for p in result.scalars().all() if p]


class TrackFileRepository:
    """SQLAlchemy repository for track files, bound to one session."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with session."""
        self.session = session

    # Hey future me, two overlapping scans of one folder (the periodic full scan
    # plus a manual single-artist scan) BOTH see a new file as NEW and both add
    # it. A plain INSERT trips UNIQUE(path) and fails the second scan, so this is
    # an upsert keyed on path. The row that got there first keeps its id and
    # added_at, everything describing the file is overwritten.
    async def add_batch(self, records: Sequence[TrackFile]) -> None:
        """Insert records, updating the existing row when the path is already known."""
        rows = [
            {"id": record.id.value, "added_at": record.added_at, **_track_file_values(record)}
            for record in records
        ]
        dialect = self.session.get_bind().dialect.name
        insert = postgresql.insert if dialect == "postgresql" else sqlite.insert
        for chunk in _chunks(rows, INSERT_CHUNK_SIZE):
            stmt = insert(TrackFileModel).values(list(chunk))
            stmt = stmt.on_conflict_do_update(
                index_elements=[TrackFileModel.path],
                set_={
                    column: stmt.excluded[column]
                    for column in rows[0]
                    if column not in ("id", "path", "added_at")
                },
            )
            await self.session.execute(stmt)

    async def update_batch(self, records: Sequence[TrackFile]) -> None:
        """Update existing records matched by id.

        Raises:
            EntityNotFoundException: A record id is not in the database
        """
        by_id = {record.id.value: record for record in records}
        found: set[str] = set()
        for chunk in _chunks(list(by_id)):
            stmt = select(TrackFileModel).where(TrackFileModel.id.in_(chunk))
            for model in (await self.session.execute(stmt)).scalars().all():
                _apply_track_file(model, by_id[model.id])
                found.add(model.id)

        missing = set(by_id) - found
        if missing:
            raise EntityNotFoundException("TrackFile", sorted(missing)[0])

    async def get_by_artist(self, artist_id: ArtistId) -> list[TrackFile]:
        """Get all records attributed to an artist."""
        stmt = select(TrackFileModel).where(TrackFileModel.artist_id == artist_id.value)
        result = await self.session.execute(stmt)
        return [track_file_to_entity(m) for m in result.scalars().all()]

    async def get_by_base_path(self, base_path: Path) -> list[TrackFile]:
        """Get all records whose file lies below base_path."""
        stmt = select(TrackFileModel).where(
            TrackFileModel.path.startswith(folder_prefix(base_path), autoescape=True)
        )
        result = await self.session.execute(stmt)
        return [track_file_to_entity(m) for m in result.scalars().all()]

    async def get_by_paths(self, paths: Sequence[Path]) -> list[TrackFile]:
        """Get the records for exactly these paths."""
        records: list[TrackFile] = []
        for chunk in _chunks([str(p) for p in paths]):
            stmt = select(TrackFileModel).where(TrackFileModel.path.in_(chunk))
            result = await self.session.execute(stmt)
            records.extend(track_file_to_entity(m) for m in result.scalars().all())
        return records

    async def delete_by_ids(self, record_ids: Sequence[TrackFileId]) -> int:
        """Delete records by ID, returns the number removed."""
        removed = 0
        for chunk in _chunks([r.value for r in record_ids]):
            result = await self.session.execute(
                delete(TrackFileModel).where(TrackFileModel.id.in_(chunk))
            )
            removed += result.rowcount or 0  # type: ignore[attr-defined]
        return removed
