"""SQL-backed IArtistRepository with one session scope per call."""

from collections.abc import Sequence
from pathlib import Path

from cratekeeper.domain.entities import Artist
from cratekeeper.domain.ports import IArtistRepository
from cratekeeper.domain.value_objects import ArtistId
from cratekeeper.infrastructure.persistence.database import Database
from cratekeeper.infrastructure.persistence.repositories import ArtistRepository


class SqlArtistRepository(IArtistRepository):
    """Long-lived artist repository for services that outlive a session."""

    def __init__(self, db: Database) -> None:
        self._db = db

    async def add(self, artist: Artist) -> Artist:
        async with self._db.session_scope() as session:
            await ArtistRepository(session).add(artist)
        return artist

    async def add_many(self, artists: Sequence[Artist]) -> list[Artist]:
        if not artists:
            return []
        async with self._db.session_scope() as session:
            await ArtistRepository(session).add_batch(artists)
        return list(artists)

    async def get_by_id(self, artist_id: ArtistId) -> Artist | None:
        async with self._db.session_scope() as session:
            return await ArtistRepository(session).get_by_id(artist_id)

    async def get_by_foreign_id(self, foreign_artist_id: str) -> Artist | None:
        async with self._db.session_scope() as session:
            return await ArtistRepository(session).get_by_foreign_id(foreign_artist_id)

    async def get_by_clean_name(self, clean_name: str) -> Artist | None:
        async with self._db.session_scope() as session:
            return await ArtistRepository(session).get_by_clean_name(clean_name)

    async def get_by_path(self, path: Path) -> Artist | None:
        async with self._db.session_scope() as session:
            return await ArtistRepository(session).get_by_path(path)

    async def update(self, artist: Artist) -> Artist:
        async with self._db.session_scope() as session:
            await ArtistRepository(session).update(artist)
        return artist

    async def update_many(self, artists: Sequence[Artist]) -> list[Artist]:
        async with self._db.session_scope() as session:
            repository = ArtistRepository(session)
            for artist in artists:
                await repository.update(artist)
        return list(artists)

    async def delete_many(self, artist_ids: Sequence[ArtistId]) -> None:
        async with self._db.session_scope() as session:
            await ArtistRepository(session).delete_batch(artist_ids)

    async def list_all(self) -> list[Artist]:
        async with self._db.session_scope() as session:
            return await ArtistRepository(session).list_all()
