"""Artist catalog service - CRUD, lookups and path bookkeeping.

Hey future me - get_all_artists() is CACHED for matching.cache_ttl_seconds
(30s by default) because fuzzy lookups run once per file during an import and
re-reading every artist per file would hammer the database. Every mutation
clears the cache BEFORE writing and again AFTER the write lands. A listing that
runs while the write is awaiting the database reloads the old rows, and the
second clear throws that stale copy away. Other processes writing to the same
database are only picked up after the TTL - that's the deal.
"""

import logging
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from pathlib import Path

from cratekeeper.application.cache import CacheRegistry
from cratekeeper.application.services.artist_matcher import ArtistMatcher
from cratekeeper.application.services.artist_path_builder import ArtistPathBuilder
from cratekeeper.config import MatchingSettings
from cratekeeper.domain.entities import (
    Artist,
    ArtistAddedEvent,
    ArtistEditedEvent,
    ArtistsDeletedEvent,
    ArtistsImportedEvent,
)
from cratekeeper.domain.exceptions import EntityNotFoundException
from cratekeeper.domain.ports import IArtistRepository, IEventPublisher
from cratekeeper.domain.value_objects import ArtistId
from cratekeeper.domain.value_objects.naming import clean_artist_name

logger = logging.getLogger(__name__)

ALL_ARTISTS_KEY = "all_artists"


class ArtistService:
    """Application service for the artist catalog."""

    def __init__(
        self,
        repository: IArtistRepository,
        events: IEventPublisher,
        cache_registry: CacheRegistry,
        path_builder: ArtistPathBuilder | None = None,
        matching: MatchingSettings | None = None,
    ) -> None:
        matching = matching or MatchingSettings()
        self._repository = repository
        self._events = events
        self._path_builder = path_builder or ArtistPathBuilder()
        self._cache = cache_registry.get_cache("artists")
        self._cache_ttl = matching.cache_ttl_seconds
        self._matcher = ArtistMatcher(matching.fuzz_threshold, matching.fuzz_gap)

    # =========================================================================
    # READS
    # =========================================================================

    async def get_artist(self, artist_id: ArtistId) -> Artist:
        """Get an artist that must exist.

        Raises:
            EntityNotFoundException: No artist with this id
        """
        artist = await self._repository.get_by_id(artist_id)
        if artist is None:
            raise EntityNotFoundException("Artist", artist_id)
        return artist

    async def get_artists(self, artist_ids: Sequence[ArtistId]) -> list[Artist]:
        """Get the artists that exist among artist_ids (missing ones are skipped)."""
        artists = []
        for artist_id in artist_ids:
            artist = await self._repository.get_by_id(artist_id)
            if artist is not None:
                artists.append(artist)
        return artists

    async def get_all_artists(self) -> list[Artist]:
        """Get every artist (cached)."""
        return await self._cache.get_or_load(
            ALL_ARTISTS_KEY, self._repository.list_all, self._cache_ttl
        )

    async def find_by_foreign_id(self, foreign_artist_id: str) -> Artist | None:
        """Find by metadata provider id."""
        return await self._repository.get_by_foreign_id(foreign_artist_id)

    async def find_by_name(self, title: str) -> Artist | None:
        """Find by exact clean name."""
        return await self._repository.get_by_clean_name(clean_artist_name(title))

    async def find_by_name_inexact(self, title: str) -> Artist | None:
        """Find the single best fuzzy match for a free-text title."""
        return self._matcher.find_inexact(await self.get_all_artists(), title)

    async def get_candidates(self, title: str) -> list[Artist]:
        """All plausible fuzzy matches for a free-text title."""
        return self._matcher.find_candidates(await self.get_all_artists(), title)

    async def find_by_path(self, path: Path) -> Artist | None:
        """Find the artist owning exactly this folder."""
        return await self._repository.get_by_path(path)

    async def all_artist_paths(self) -> dict[ArtistId, Path]:
        """Folder of every artist that has one."""
        return {a.id: a.path for a in await self._repository.list_all() if a.path is not None}

    async def artist_path_exists(self, folder: Path) -> bool:
        """Check whether any artist already owns folder."""
        return await self._repository.get_by_path(folder) is not None

    # =========================================================================
    # WRITES
    # =========================================================================

    @asynccontextmanager
    async def _invalidating(self) -> AsyncIterator[None]:
        """Clear the artist cache around a write, also when the write fails."""
        await self._cache.clear()
        try:
            yield
        finally:
            await self._cache.clear()

    async def add_artist(self, new_artist: Artist) -> Artist:
        """Insert one artist and publish ArtistAddedEvent."""
        async with self._invalidating():
            added = await self._repository.add(new_artist)
        logger.info(f"Added artist {added}")
        await self._events.publish(ArtistAddedEvent(artist=added))
        return added

    async def add_artists(self, new_artists: Sequence[Artist]) -> list[Artist]:
        """Insert several artists and publish one ArtistsImportedEvent."""
        async with self._invalidating():
            added = await self._repository.add_many(new_artists)
        logger.info(f"Imported {len(added)} artists")
        await self._events.publish(ArtistsImportedEvent(artists=tuple(added)))
        return added

    async def update_artist(self, artist: Artist, publish_updated_event: bool = True) -> Artist:
        """Update one artist.

        Raises:
            EntityNotFoundException: The artist does not exist
        """
        async with self._invalidating():
            stored = await self.get_artist(artist.id)
            updated = await self._repository.update(artist)

        if publish_updated_event:
            await self._events.publish(ArtistEditedEvent(updated=updated, stored=stored))

        return updated

    async def update_artists(
        self, artists: Sequence[Artist], use_existing_relative_folder: bool
    ) -> list[Artist]:
        """Update several artists, rebuilding paths where a root folder is set.

        Used for "move to another root folder": the caller sets
        root_folder_path and we derive the new folder.
        """
        logger.debug(f"Updating {len(artists)} artists")

        for artist in artists:
            if artist.root_folder_path is not None:
                artist.move_to(
                    self._path_builder.build_path(artist, use_existing_relative_folder)
                )
                logger.debug(f"Changing path for {artist.name} to {artist.path}")
            else:
                logger.debug(f"Not changing path for {artist.name}")

        async with self._invalidating():
            updated = await self._repository.update_many(artists)
        logger.debug(f"{len(updated)} artists updated")
        return updated

    async def delete_artist(
        self,
        artist_id: ArtistId,
        delete_files: bool = False,
        add_import_list_exclusion: bool = False,
    ) -> None:
        """Delete one artist.

        Raises:
            EntityNotFoundException: The artist does not exist
        """
        await self.delete_artists([artist_id], delete_files, add_import_list_exclusion)

    async def delete_artists(
        self,
        artist_ids: Sequence[ArtistId],
        delete_files: bool = False,
        add_import_list_exclusion: bool = False,
    ) -> None:
        """Delete artists and publish one ArtistsDeletedEvent.

        Raises:
            EntityNotFoundException: Any of the artists does not exist
        """
        async with self._invalidating():
            artists = [await self.get_artist(artist_id) for artist_id in artist_ids]
            await self._repository.delete_many([a.id for a in artists])

        await self._events.publish(
            ArtistsDeletedEvent(
                artists=tuple(artists),
                delete_files=delete_files,
                add_import_list_exclusion=add_import_list_exclusion,
            )
        )

        for artist in artists:
            logger.info(f"Deleted artist {artist}")
