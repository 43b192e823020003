"""Tests for AddArtistService - provider lookup, folder placement, validation."""

from pathlib import Path

import pytest
from fakes import FakeArtistInfoProvider, FakeArtistRepository, make_artist

from cratekeeper.application.cache import CacheRegistry
from cratekeeper.application.services import (
    AddArtistRequest,
    AddArtistService,
    ArtistService,
    MonitorType,
)
from cratekeeper.domain.exceptions import ValidationException
from cratekeeper.infrastructure.events import InMemoryEventPublisher

ROOT = Path("/music")


@pytest.fixture
def provider() -> FakeArtistInfoProvider:
    """Metadata provider knowing three artists, two of them named Nirvana."""
    return FakeArtistInfoProvider(
        [
            make_artist("Nirvana", foreign_artist_id="fa-1", disambiguation="US grunge band"),
            make_artist("Nirvana", foreign_artist_id="fa-2", disambiguation="60s UK band"),
            make_artist("Nirvana", foreign_artist_id="fa-3"),
            make_artist("Pink Floyd", foreign_artist_id="fa-pf"),
        ]
    )


@pytest.fixture
def artist_service(
    artist_repository: FakeArtistRepository,
    events: InMemoryEventPublisher,
    cache_registry: CacheRegistry,
) -> ArtistService:
    """Artist service over the in-memory repository."""
    return ArtistService(artist_repository, events, cache_registry)


@pytest.fixture
def service(artist_service: ArtistService, provider: FakeArtistInfoProvider) -> AddArtistService:
    """Add-artist service under test."""
    return AddArtistService(artist_service, provider)


class TestAddArtist:
    """Test single adds."""

    @pytest.mark.asyncio
    async def test_add_below_root(
        self, service: AddArtistService, artist_repository: FakeArtistRepository
    ) -> None:
        """The folder is the artist name below the chosen root."""
        artist = await service.add_artist(AddArtistRequest("fa-pf", root_folder_path=ROOT))

        assert artist.path == ROOT / "Pink Floyd"
        assert artist.foreign_artist_id == "fa-pf"
        assert artist.monitored is True
        assert artist.id.value in artist_repository.artists

    @pytest.mark.asyncio
    async def test_explicit_path_wins(self, service: AddArtistService) -> None:
        """An explicit path is used as-is."""
        artist = await service.add_artist(
            AddArtistRequest("fa-pf", path=Path("/other/Floyd"), monitor=MonitorType.NONE)
        )

        assert artist.path == Path("/other/Floyd")
        assert artist.monitored is False

    @pytest.mark.asyncio
    async def test_taken_folder_uses_disambiguation(self, service: AddArtistService) -> None:
        """A taken 'Name' folder becomes 'Name (disambiguation)'."""
        await service.add_artist(AddArtistRequest("fa-3", root_folder_path=ROOT))

        artist = await service.add_artist(AddArtistRequest("fa-1", root_folder_path=ROOT))

        assert artist.path == ROOT / "Nirvana (US grunge band)"

    @pytest.mark.asyncio
    async def test_taken_folder_without_disambiguation_is_numbered(
        self,
        service: AddArtistService,
        artist_repository: FakeArtistRepository,
    ) -> None:
        """Without a disambiguation the folder gets ' (1)' appended."""
        await artist_repository.add(make_artist("Someone", ROOT / "Nirvana", foreign_artist_id="x"))

        artist = await service.add_artist(AddArtistRequest("fa-3", root_folder_path=ROOT))

        assert artist.path == ROOT / "Nirvana (1)"

    @pytest.mark.asyncio
    async def test_taken_disambiguated_folder_is_numbered(
        self,
        service: AddArtistService,
        artist_repository: FakeArtistRepository,
    ) -> None:
        """Both candidates taken -> 'Name (disambiguation) (1)'."""
        await artist_repository.add(make_artist("X", ROOT / "Nirvana", foreign_artist_id="x"))
        await artist_repository.add(
            make_artist("Y", ROOT / "Nirvana (US grunge band)", foreign_artist_id="y")
        )

        artist = await service.add_artist(AddArtistRequest("fa-1", root_folder_path=ROOT))

        assert artist.path == ROOT / "Nirvana (US grunge band) (1)"

    @pytest.mark.asyncio
    async def test_unknown_foreign_id(self, service: AddArtistService) -> None:
        """A provider miss becomes a validation failure on foreign_artist_id."""
        with pytest.raises(ValidationException) as exc_info:
            await service.add_artist(AddArtistRequest("fa-missing", root_folder_path=ROOT))

        (failure,) = exc_info.value.failures
        assert failure.property_name == "foreign_artist_id"
        assert failure.message == "An artist with this ID was not found"

    @pytest.mark.asyncio
    async def test_already_added(self, service: AddArtistService) -> None:
        """The same foreign id can't be added twice."""
        await service.add_artist(AddArtistRequest("fa-pf", root_folder_path=ROOT))

        with pytest.raises(ValidationException) as exc_info:
            await service.add_artist(AddArtistRequest("fa-pf", root_folder_path=ROOT))

        assert exc_info.value.failures[0].message == "This artist has already been added"

    @pytest.mark.asyncio
    async def test_no_path_and_no_root(self, service: AddArtistService) -> None:
        """Either a path or a root folder is required."""
        with pytest.raises(ValidationException):
            await service.add_artist(AddArtistRequest("fa-pf"))

    @pytest.mark.asyncio
    async def test_nested_inside_other_artist(
        self,
        service: AddArtistService,
        artist_repository: FakeArtistRepository,
    ) -> None:
        """A folder inside another artist's folder is refused."""
        await artist_repository.add(make_artist("Various", ROOT / "Various", foreign_artist_id="v"))

        with pytest.raises(ValidationException) as exc_info:
            await service.add_artist(AddArtistRequest("fa-pf", path=ROOT / "Various" / "Floyd"))

        assert exc_info.value.failures[0].property_name == "path"


class TestAddArtists:
    """Test bulk adds."""

    @pytest.mark.asyncio
    async def test_ignore_errors_skips_bad_ids(
        self, service: AddArtistService, artist_repository: FakeArtistRepository
    ) -> None:
        """One unknown id doesn't sink the batch."""
        added = await service.add_artists(
            [
                AddArtistRequest("fa-missing", root_folder_path=ROOT),
                AddArtistRequest("fa-pf", root_folder_path=ROOT),
            ],
            ignore_errors=True,
        )

        assert [a.foreign_artist_id for a in added] == ["fa-pf"]
        assert len(artist_repository.artists) == 1

    @pytest.mark.asyncio
    async def test_errors_raise_by_default(
        self, service: AddArtistService, artist_repository: FakeArtistRepository
    ) -> None:
        """Without ignore_errors nothing is added."""
        with pytest.raises(ValidationException):
            await service.add_artists(
                [
                    AddArtistRequest("fa-pf", root_folder_path=ROOT),
                    AddArtistRequest("fa-missing", root_folder_path=ROOT),
                ]
            )
        assert artist_repository.artists == {}

    @pytest.mark.asyncio
    async def test_same_name_in_batch_gets_distinct_folders(
        self, service: AddArtistService
    ) -> None:
        """Folders claimed earlier in the batch count as taken."""
        added = await service.add_artists(
            [
                AddArtistRequest("fa-3", root_folder_path=ROOT),
                AddArtistRequest("fa-1", root_folder_path=ROOT),
            ]
        )

        assert [a.path for a in added] == [ROOT / "Nirvana", ROOT / "Nirvana (US grunge band)"]

    @pytest.mark.asyncio
    async def test_duplicate_foreign_id_in_batch(self, service: AddArtistService) -> None:
        """The second request for the same artist is dropped."""
        added = await service.add_artists(
            [
                AddArtistRequest("fa-pf", root_folder_path=ROOT),
                AddArtistRequest("fa-pf", root_folder_path=ROOT),
            ]
        )

        assert len(added) == 1
        assert added[0].path == ROOT / "Pink Floyd"

    @pytest.mark.asyncio
    async def test_shared_added_at(self, service: AddArtistService) -> None:
        """Artists added together share one timestamp."""
        added = await service.add_artists(
            [
                AddArtistRequest("fa-pf", root_folder_path=ROOT),
                AddArtistRequest("fa-2", root_folder_path=ROOT),
            ]
        )

        assert added[0].added_at == added[1].added_at
