"""Add artists to the catalog from a metadata provider id.

Hey future me - the flow per artist is:

1. Ask the metadata provider for the artist (name, aliases, disambiguation)
2. Apply what the user chose (root folder / explicit path, monitoring, profile)
3. Work out a free folder: "Name", then "Name (disambiguation)", then
   "Name (disambiguation) (1)", "(2)", ... until nobody owns it
4. Validate and insert through ArtistService (which publishes the events)

Bulk adds (import lists, library imports) pass ignore_errors=True so ONE dead
provider id doesn't sink a 500-artist import. Single adds always raise.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path

from cratekeeper.application.services.artist_path_builder import ArtistPathBuilder
from cratekeeper.application.services.artist_service import ArtistService
from cratekeeper.domain.entities import Artist
from cratekeeper.domain.exceptions import (
    ArtistNotFoundError,
    ValidationException,
    ValidationFailure,
)
from cratekeeper.domain.ports import IArtistInfoProvider
from cratekeeper.domain.value_objects import ArtistId

logger = logging.getLogger(__name__)


class MonitorType(str, Enum):
    """Which albums to monitor after adding. NONE unmonitors the artist."""

    ALL = "all"
    FUTURE = "future"
    NONE = "none"


@dataclass
class AddArtistRequest:
    """What the user asked for when adding an artist."""

    foreign_artist_id: str
    root_folder_path: Path | None = None
    path: Path | None = None
    monitor: MonitorType = MonitorType.ALL
    quality_profile_id: str | None = None

    def __str__(self) -> str:
        return f"[{self.foreign_artist_id}]"


class AddArtistService:
    """Looks up, places and validates new artists."""

    def __init__(
        self,
        artist_service: ArtistService,
        artist_info: IArtistInfoProvider,
        path_builder: ArtistPathBuilder | None = None,
    ) -> None:
        self._artists = artist_service
        self._artist_info = artist_info
        self._path_builder = path_builder or ArtistPathBuilder()

    async def add_artist(self, request: AddArtistRequest) -> Artist:
        """Add one artist.

        Raises:
            ValidationException: Unknown provider id, no usable path, or the
                artist/folder conflicts with an existing artist
        """
        logger.info(f"Adding artist {request} path: [{request.path or request.root_folder_path}]")

        artist = await self._fetch_artist(request)
        artist = await self._set_properties_and_validate(artist)

        logger.info(f"Adding artist {artist} path: [{artist.path}]")
        return await self._artists.add_artist(artist)

    async def add_artists(
        self, requests: Sequence[AddArtistRequest], ignore_errors: bool = False
    ) -> list[Artist]:
        """Add several artists in one insert.

        Args:
            requests: Artists to add
            ignore_errors: Skip (and log) artists that fail validation instead
                of aborting the whole batch

        Raises:
            ValidationException: Only when ignore_errors is False
        """
        added_at = datetime.now(UTC)
        to_add: list[Artist] = []

        for request in requests:
            if request.path is None:
                logger.info(f"Adding artist {request} root folder path: [{request.root_folder_path}]")
            else:
                logger.info(f"Adding artist {request} path: [{request.path}]")

            try:
                artist = await self._fetch_artist(request)
                artist = await self._set_properties_and_validate(
                    artist, claimed_paths={a.path for a in to_add if a.path}
                )
            except ValidationException as e:
                if not ignore_errors:
                    raise
                logger.debug(f"Failed to import id: {request.foreign_artist_id} - {e.message}")
                continue

            artist.added_at = added_at
            if any(a.foreign_artist_id == artist.foreign_artist_id for a in to_add):
                logger.debug(
                    f"Foreign id {request.foreign_artist_id} was not added due to validation "
                    "failure: artist already exists on list"
                )
                continue

            to_add.append(artist)

        return await self._artists.add_artists(to_add)

    async def _fetch_artist(self, request: AddArtistRequest) -> Artist:
        try:
            info = await self._artist_info.get_artist_info(request.foreign_artist_id)
        except ArtistNotFoundError as e:
            logger.error(
                f"Artist {request.foreign_artist_id} was not found, "
                "it may have been removed from the metadata provider"
            )
            raise ValidationException(
                failures=[
                    ValidationFailure(
                        "foreign_artist_id",
                        "An artist with this ID was not found",
                        request.foreign_artist_id,
                    )
                ]
            ) from e

        # Provider supplies identity and names, the request supplies placement
        return Artist(
            id=ArtistId.generate(),
            name=info.name,
            foreign_artist_id=info.foreign_artist_id or request.foreign_artist_id,
            aliases=list(info.aliases),
            disambiguation=info.disambiguation,
            root_folder_path=request.root_folder_path,
            path=request.path,
            monitored=request.monitor != MonitorType.NONE,
            quality_profile_id=request.quality_profile_id,
        )

    async def _set_properties_and_validate(
        self,
        artist: Artist,
        claimed_paths: set[Path] | None = None,
    ) -> Artist:
        claimed = claimed_paths or set()
        path = artist.path
        if path is None:
            if artist.root_folder_path is None:
                raise ValidationException(
                    failures=[ValidationFailure("path", "Path or root folder path is required")]
                )
            path = artist.root_folder_path / self._path_builder.folder_name(artist)

        async def taken(candidate: Path) -> bool:
            return candidate in claimed or await self._artists.artist_path_exists(candidate)

        if await taken(path):
            if artist.disambiguation and artist.disambiguation.strip():
                path = path.with_name(f"{path.name} ({artist.disambiguation})")

            if await taken(path):
                base_name = path.name
                i = 0
                while True:
                    i += 1
                    path = path.with_name(f"{base_name} ({i})")
                    if not await taken(path):
                        break

        artist.move_to(path)
        artist.added_at = datetime.now(UTC)

        failures = await self._validate(artist)
        if failures:
            raise ValidationException(failures=failures)
        return artist

    async def _validate(self, artist: Artist) -> list[ValidationFailure]:
        failures: list[ValidationFailure] = []

        if await self._artists.find_by_foreign_id(artist.foreign_artist_id) is not None:
            failures.append(
                ValidationFailure(
                    "foreign_artist_id",
                    "This artist has already been added",
                    artist.foreign_artist_id,
                )
            )

        path = artist.path
        if path is None:
            failures.append(ValidationFailure("path", "Path is required"))
            return failures

        # Nesting one artist inside another breaks folder ownership during scans
        for existing in (await self._artists.all_artist_paths()).values():
            if existing in path.parents or path in existing.parents:
                failures.append(
                    ValidationFailure(
                        "path", f"Path overlaps the folder of another artist: {existing}", path
                    )
                )
                break

        return failures
